import copy

import pytest

from gcalmenu import colors
from gcalmenu.exceptions import CollaboratorError

CALENDAR = {'id': 'cal1', 'summary': 'Work', 'accessRole': 'owner',
            'timeZone': 'America/New_York'}


class FakeClient:
    """Stands in for GoogleCalendarInterface and records every call."""

    def __init__(self, calendars=None, pages=None, events=()):
        self.calendars = [CALENDAR] if calendars is None else calendars
        # page token -> (items, next page token)
        self.pages = pages or {}
        self.events = {event['id']: event for event in events}
        self.fail = set()
        self.calls = []

    def _call(self, name, *args):
        self.calls.append((name,) + args)
        if name in self.fail:
            raise CollaboratorError(name, 'boom', status=500)

    def count(self, name):
        return len([call for call in self.calls if call[0] == name])

    def list_calendars(self):
        self._call('list_calendars')
        return list(self.calendars)

    def list_events(self, calendar_id, query='', page_token=''):
        self._call('list_events', calendar_id, query, page_token)
        return self.pages.get(page_token, ([], ''))

    def upcoming_events(self, calendar_id='primary', count=10):
        self._call('upcoming_events', calendar_id, count)
        return list(self.events.values())[:count]

    def get_event(self, calendar_id, event_id):
        self._call('get_event', calendar_id, event_id)
        return copy.deepcopy(self.events[event_id])

    def insert_event(self, calendar_id, body):
        self._call('insert_event', calendar_id, body)
        return dict(body, id='new', htmlLink='https://calendar.test/new')

    def update_event(self, calendar_id, event_id, body):
        self._call('update_event', calendar_id, event_id, body)
        return dict(body, htmlLink='https://calendar.test/' + event_id)

    def delete_event(self, calendar_id, event_id):
        self._call('delete_event', calendar_id, event_id)


class ScriptedPrompter:
    """Answers prompts from a script.

    Menu answers are label prefixes (a list of them for choose_many),
    None cancels, and running out of answers cancels too.
    """

    def __init__(self, *answers):
        self.answers = list(answers)
        self.prompts = []
        self.menus = []

    def _next(self):
        return self.answers.pop(0) if self.answers else None

    def _find(self, options, prefix):
        for label, value in options:
            if label.startswith(prefix):
                return value
        raise AssertionError('no option %r in %r' %
                             (prefix, [label for label, _ in options]))

    def get_text(self, prompt, default=''):
        self.prompts.append((prompt, default))
        answer = self._next()
        if answer is None:
            return None
        return answer or default

    def choose_one(self, options, title=None):
        self.menus.append([label for label, _ in options])
        answer = self._next()
        if answer is None:
            return None, True
        return self._find(options, answer), False

    def choose_many(self, options, title=None):
        self.menus.append([label for label, _ in options])
        answer = self._next()
        if answer is None:
            return [], True
        return [self._find(options, prefix) for prefix in answer], False


@pytest.fixture(autouse=True)
def no_color():
    colors.CLR.use_color = False
    yield
    colors.CLR.use_color = True


@pytest.fixture
def calendar():
    return dict(CALENDAR)


@pytest.fixture
def client():
    return FakeClient()


@pytest.fixture
def scripted():
    return ScriptedPrompter
