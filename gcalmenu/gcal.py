import json
import os
import pickle
import random
import sys
import time
from argparse import Namespace
from datetime import datetime

from gcalmenu import __program__, __version__, cli
from gcalmenu.exceptions import CollaboratorError

# Required 3rd party libraries
try:
    from dateutil.tz import tzlocal
    import httplib2
    from googleapiclient.discovery import build
    from googleapiclient.errors import HttpError
    from oauth2client.client import (AccessTokenRefreshError,
                                     flow_from_clientsecrets)
    from oauth2client.file import Storage
    from oauth2client.tools import run_flow
except ImportError as e:
    print("ERROR: Missing module - {}".format(e.args[0]))
    sys.exit(1)


def setup_run_flow_flags(noauth_local_webserver=True):
    flags = Namespace()
    flags.logging_level = 'INFO'
    flags.noauth_local_webserver = noauth_local_webserver
    flags.auth_host_port = [8080, 8090]
    flags.auth_host_name = 'localhost'
    return flags


def _error_reason(error):
    try:
        content = json.loads(error.content)
        return content['error']['errors'][0]['reason']
    except (ValueError, KeyError, IndexError, TypeError):
        return None


class GoogleCalendarInterface:
    """The only thing in gcalmenu that talks to Google.

    Read requests are retried with backoff when Google says we are rate
    limited.  Inserts, updates and deletes go out exactly once.  Every
    failure comes back as a CollaboratorError.
    """

    maxRetries = 5
    authHttp = None
    cal_service = None

    SCOPES = ['https://www.googleapis.com/auth/calendar']
    RATE_LIMITED = ['rateLimitExceeded', 'userRateLimitExceeded']

    ACCESS_OWNER = 'owner'
    ACCESS_WRITER = 'writer'
    ACCESS_READER = 'reader'
    ACCESS_FREEBUSY = 'freeBusyReader'

    def __init__(self,
                 config_folder=None,
                 client_secret_file=None,
                 use_cache=True,
                 refresh_cache=False,
                 noauth_local_webserver=True,
                 page_size=10):

        self.config_folder = config_folder
        self.client_secret_file = client_secret_file or \
            self._data_path('client_secret.json',
                            '~/.gcalmenu_client_secret.json')
        self.use_cache = use_cache
        self.refresh_cache = refresh_cache
        self.noauth_local_webserver = noauth_local_webserver
        self.page_size = page_size

        self.all_cals = None

    def _data_path(self, name, default):
        if self.config_folder:
            return os.path.expanduser("%s/%s" % (self.config_folder, name))
        return os.path.expanduser(default)

    def _google_auth(self):
        if not self.authHttp:
            storage = Storage(self._data_path('oauth', '~/.gcalmenu_oauth'))
            credentials = storage.get()

            if credentials is None or credentials.invalid:
                flow = flow_from_clientsecrets(self.client_secret_file,
                                               scope=self.SCOPES)
                flow.user_agent = __program__ + '/' + __version__
                credentials = run_flow(
                    flow, storage,
                    setup_run_flow_flags(self.noauth_local_webserver))

            self.authHttp = credentials.authorize(httplib2.Http())

        return self.authHttp

    def _cal_service(self):
        if not self.cal_service:
            self.cal_service = \
                build(serviceName='calendar',
                      version='v3',
                      http=self._google_auth())

        return self.cal_service

    def connect(self):
        """Authorize and build the API client up front."""
        self._cal_service()

    def _rate_limited(self, error):
        return error.resp.status in (403, 429) and \
            _error_reason(error) in self.RATE_LIMITED

    def _retry_with_backoff(self, method):
        for n in range(0, self.maxRetries):
            try:
                return method.execute()
            except HttpError as e:
                if self._rate_limited(e) and n < self.maxRetries - 1:
                    cli.debug_print('Rate limited, retry %d\n' % (n + 1))
                    time.sleep((2 ** n) + random.random())
                else:
                    raise

    def _execute(self, action, request, retry=False):
        cli.debug_print('Request: %s\n' % action)
        try:
            if retry:
                return self._retry_with_backoff(request)
            return request.execute()
        except HttpError as e:
            raise CollaboratorError(
                action, getattr(e, 'reason', None) or str(e),
                status=e.resp.status, reason=_error_reason(e))
        except (httplib2.HttpLib2Error, AccessTokenRefreshError,
                OSError) as e:
            raise CollaboratorError(action, str(e))

    def _get_cached(self):
        cache_file = self._data_path('cache', '~/.gcalmenu_cache')

        if self.refresh_cache:
            try:
                os.remove(cache_file)
            except OSError:
                pass
                # fall through
            self.refresh_cache = False

        if self.use_cache:
            try:
                with open(cache_file, 'rb') as _cache_:
                    self.all_cals = pickle.load(_cache_)['all_cals']
                return
            except (IOError, EOFError, KeyError, TypeError,
                    pickle.UnpicklingError):
                pass
                # fall through

        # self.all_cals is only set once every page has loaded
        all_cals = []
        page_token = None
        while True:
            cal_list = self._execute(
                'list calendars',
                self._cal_service().calendarList().list(pageToken=page_token),
                retry=True)
            all_cals.extend(cal_list.get('items', []))
            page_token = cal_list.get('nextPageToken')
            if not page_token:
                break

        # owned calendars first, free/busy only last
        order = {self.ACCESS_OWNER: 1,
                 self.ACCESS_WRITER: 2,
                 self.ACCESS_READER: 3,
                 self.ACCESS_FREEBUSY: 4}

        all_cals.sort(key=lambda x: order.get(x.get('accessRole'), 5))
        self.all_cals = all_cals

        if self.use_cache:
            try:
                with open(cache_file, 'wb') as _cache_:
                    pickle.dump({'all_cals': self.all_cals}, _cache_)
            except IOError as e:
                cli.debug_print('Unable to write cache: %s\n' % e)

    def list_calendars(self):
        if self.all_cals is None:
            self._get_cached()
        return list(self.all_cals)

    def list_events(self, calendar_id, query='', page_token=''):
        """Return one page of matches as (items, next_page_token).

        next_page_token is '' once there are no more pages.
        """
        events = self._execute(
            'search events',
            self._cal_service().events().list(
                calendarId=calendar_id,
                q=query or None,
                pageToken=page_token or None,
                maxResults=self.page_size),
            retry=True)
        cli.debug_print('Page %r -> %r\n' %
                        (page_token, events.get('nextPageToken', '')))
        return events.get('items', []), events.get('nextPageToken', '')

    def upcoming_events(self, calendar_id='primary', count=10):
        events = self._execute(
            'retrieve upcoming events',
            self._cal_service().events().list(
                calendarId=calendar_id,
                timeMin=datetime.now(tzlocal()).isoformat(),
                showDeleted=False,
                singleEvents=True,
                orderBy='startTime',
                maxResults=count),
            retry=True)
        return events.get('items', [])

    def get_event(self, calendar_id, event_id):
        return self._execute(
            'select event',
            self._cal_service().events().get(calendarId=calendar_id,
                                             eventId=event_id),
            retry=True)

    def insert_event(self, calendar_id, body):
        return self._execute(
            'create event',
            self._cal_service().events().insert(calendarId=calendar_id,
                                                body=body))

    def update_event(self, calendar_id, event_id, body):
        return self._execute(
            'update event',
            self._cal_service().events().update(calendarId=calendar_id,
                                                eventId=event_id,
                                                body=body))

    def delete_event(self, calendar_id, event_id):
        self._execute(
            'delete event',
            self._cal_service().events().delete(calendarId=calendar_id,
                                                eventId=event_id))
