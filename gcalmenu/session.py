import copy
import re

from gcalmenu import cli, colors, utils
from gcalmenu.exceptions import (GcalmenuError, InvalidField,
                                 NoCalendarsAvailable, WorkflowCancelled)
from gcalmenu.paging import NO_MORE, SHOW_NEXT, SHOW_RESET, PaginationCursor

# Required 3rd party libraries
try:
    from dateutil.parser import parse
except ImportError as e:
    import sys
    print("ERROR: Missing module - {}".format(e.args[0]))
    sys.exit(1)


VISIBILITIES = ('default', 'public', 'private')
STATUSES = ('confirmed', 'tentative', 'cancelled')

EDITABLE = ('Summary', 'Location', 'Description', 'Start', 'End',
            'Timezone', 'Visibility', 'Status')

# Timezone goes before Start/End so they pick up the new zone
EDIT_ORDER = ('Summary', 'Location', 'Description', 'Visibility',
              'Status', 'Timezone', 'Start', 'End')

RECURRENCE_PREFIXES = ('RRULE:', 'EXRULE:', 'RDATE', 'EXDATE')

# answer that empties a text field while editing, blank keeps it
CLEAR_VALUE = '-'

# menu values for the paging entries
NEXT_PAGE = 'gcalmenu:next-page'
FIRST_PAGE = 'gcalmenu:first-page'


class SearchSession:

    def __init__(self, calendar_id, query, cursor=None):
        self.calendar_id = calendar_id
        self.query = query
        self.cursor = cursor or PaginationCursor()
        self.results = []
        self.selection = None


def event_label(event):
    for key in ('summary', 'description'):
        value = (event.get(key) or '').strip()
        if value:
            return value.splitlines()[0]
    return event.get('id') or '(No title)'


def when_str(event_time):
    # all-day events only have a date
    if not event_time:
        return ''
    return event_time.get('dateTime') or event_time.get('date') or ''


def match_calendars(calendars, name):
    """Calendars whose summary is `name`, or else matches it as a regex."""
    try:
        pattern = re.compile(name, flags=re.I)
    except re.error:
        pattern = re.compile(re.escape(name), flags=re.I)

    matches = []
    for cal in calendars:
        summary = cal.get('summary', '')
        if summary == name:
            return [cal]
        elif pattern.search(summary):
            matches.append(cal)
    return matches


class EventSession:
    """Runs the add/remove/edit/view workflows.

    `client` is the calendar service (see gcal.GoogleCalendarInterface)
    and `prompter` the menu layer (see prompt.Prompter).  Each workflow
    is self contained: anything that goes wrong is reported and the
    session is ready for the next command.
    """

    WORKFLOWS = ('add', 'remove', 'edit', 'view')

    def __init__(self, client, prompter, calendar_filter=None):
        self.client = client
        self.prompter = prompter
        self.calendar_filter = calendar_filter

    def run(self, command):
        if command not in self.WORKFLOWS:
            cli.print_err_msg('Error: %s is an invalid command\n' % command)
            return False

        try:
            getattr(self, command)()
            return True
        except WorkflowCancelled as e:
            cli.print_msg(colors.notice, '%s\n' % e)
        except GcalmenuError as e:
            cli.print_err_msg('Error: %s\n' % e)
        return False

    def _ask(self, prompt, default=''):
        val = self.prompter.get_text(prompt, default)
        if val is None:
            raise WorkflowCancelled()
        return val

    def _pick(self, options, title=None, cancel_msg='Cancelled'):
        value, cancelled = self.prompter.choose_one(options, title)
        if cancelled:
            raise WorkflowCancelled(cancel_msg)
        return value

    def select_calendar(self):
        calendars = self.client.list_calendars()
        if self.calendar_filter:
            calendars = match_calendars(calendars, self.calendar_filter)

        if not calendars:
            raise NoCalendarsAvailable()
        if len(calendars) == 1:
            return calendars[0]

        return self._pick(
            [(cal.get('summary') or cal['id'], cal) for cal in calendars],
            'Select a calendar')

    def search_and_select(self, calendar, verb, page_token=''):
        """Page through the events matching a query until one is picked.

        The search starts at `page_token` (the first page by default).
        Returns the full event, or None when nothing matched.
        """
        query = self._ask('Search for events to %s' % verb)
        search = SearchSession(calendar['id'], query,
                               PaginationCursor(page_token))

        while True:
            items, next_token = self.client.list_events(
                search.calendar_id, search.query, search.cursor.current_token)
            search.results = items
            search.cursor, directive = search.cursor.advance(next_token)

            if not items and directive == NO_MORE:
                cli.print_msg(colors.notice,
                              'No events found matching "%s"\n' % query)
                return None

            options = [(event_label(event), event) for event in items]
            if directive == SHOW_NEXT:
                options.append(('Next page', NEXT_PAGE))
            elif directive == SHOW_RESET:
                options.append(('Back to first page', FIRST_PAGE))

            choice = self._pick(options,
                                'Possible match(es) for "%s":' % query)
            if choice == NEXT_PAGE:
                continue
            if choice == FIRST_PAGE:
                search.cursor = search.cursor.reset()
                continue

            search.selection = self.client.get_event(search.calendar_id,
                                                     choice['id'])
            return search.selection

    def _ask_timezone(self, prompt, default):
        name = self._ask(prompt, default)
        if name and not utils.known_timezone(name):
            fallback = default if utils.known_timezone(default) else 'UTC'
            cli.print_msg(colors.notice,
                          'Unknown timezone "%s", using %s\n' %
                          (name, fallback))
            return fallback
        return name

    def _read_time(self, label, timezone, date_default='', time_default=''):
        """Prompt for a date and time until they resolve.

        Returns the date text that was entered along with the API body.
        """
        while True:
            date_text = self._ask('%s date (YYYY-MM-DD)' % label, date_default)
            time_text = self._ask('%s time (HH:MM:SS, 24-hour)' % label,
                                  time_default)
            try:
                partial = utils.partial_from_text(date_text, time_text,
                                                  timezone)
                instant = utils.resolve(partial, timezone)
            except InvalidField as e:
                cli.print_err_msg('Error: %s\n' % e)
                continue
            return date_text, utils.encode(instant).body()

    def _read_recurrence(self):
        rules = []
        while True:
            rule = self._ask('Recurrence rule (e.g. RRULE:FREQ=WEEKLY), '
                             'blank to finish')
            if not rule:
                return rules
            if not rule.upper().startswith(RECURRENCE_PREFIXES):
                rule = 'RRULE:' + rule
            rules.append(rule)

    def add(self):
        calendar = self.select_calendar()
        self._add(calendar)

    def _add(self, calendar):
        event = {'summary': self._ask('Event summary')}

        location = self._ask('Event location')
        if location:
            event['location'] = location
        description = self._ask('Event description')
        if description:
            event['description'] = description

        timezone = self._ask_timezone('Event timezone',
                                      calendar.get('timeZone', ''))
        start_date, event['start'] = self._read_time('Start', timezone)
        _, event['end'] = self._read_time('End', timezone,
                                          date_default=start_date)

        attendees = self._ask('Attendees (comma separated emails)')
        emails = [a.strip() for a in attendees.split(',') if a.strip()]
        if emails:
            event['attendees'] = [{'email': email} for email in emails]

        recurrence = self._read_recurrence()
        if recurrence:
            event['recurrence'] = recurrence

        new_event = self.client.insert_event(calendar['id'], event)
        cli.print_msg(colors.success, 'Event created. Link to event: %s\n' %
                      new_event.get('htmlLink', ''))
        return new_event

    def remove(self):
        calendar = self.select_calendar()
        event = self.search_and_select(calendar, 'remove')
        if event is not None:
            self._remove(calendar, event)

    def _remove(self, calendar, event):
        title = event_label(event)
        confirmed = self._pick(
            [('Delete "%s"' % title, True), ('Cancel', False)],
            'Delete this event?', cancel_msg='Event not deleted')
        if not confirmed:
            raise WorkflowCancelled('Event not deleted')

        self.client.delete_event(calendar['id'], event['id'])
        cli.print_msg(colors.success, 'Event deleted: %s\n' % title)

    def edit(self):
        calendar = self.select_calendar()
        event = self.search_and_select(calendar, 'edit')
        if event is not None:
            self._edit(calendar, event)

    def _current_values(self, event):
        start = event.get('start') or {}
        return {
            'Summary': event.get('summary', ''),
            'Location': event.get('location', ''),
            'Description': (event.get('description') or '').strip(),
            'Start': when_str(start),
            'End': when_str(event.get('end')),
            'Timezone': start.get('timeZone', ''),
            'Visibility': event.get('visibility', 'default'),
            'Status': event.get('status', 'confirmed'),
        }

    @staticmethod
    def _time_defaults(event_time):
        current = utils.from_body(event_time)
        if isinstance(current, utils.Timestamped):
            dt = parse(current.dateTime)
            return dt.strftime('%Y-%m-%d'), dt.strftime('%H:%M:%S')
        if isinstance(current, utils.AllDay):
            return current.date, ''
        return '', ''

    def _ask_choice(self, field, allowed, default):
        val = self._ask('%s (%s)' % (field, ', '.join(allowed)), default)
        val = val.strip().lower()
        if val not in allowed:
            raise InvalidField(field.lower(), val)
        return val

    def _edit(self, calendar, event):
        event = copy.deepcopy(event)
        current = self._current_values(event)

        options = [('%-11s | %s' % (name, current[name].replace('\n', ' ')),
                    name) for name in EDITABLE]
        fields, cancelled = self.prompter.choose_many(
            options, 'Select the details to edit')
        if cancelled:
            raise WorkflowCancelled('Event not changed')

        for name in EDIT_ORDER:
            if name not in fields:
                continue

            if name in ('Summary', 'Location', 'Description'):
                val = self._ask('New %s ("%s" to clear)' %
                                (name.lower(), CLEAR_VALUE), current[name])
                event[name.lower()] = '' if val == CLEAR_VALUE else val

            elif name == 'Visibility':
                event['visibility'] = self._ask_choice(
                    name, VISIBILITIES, current[name])

            elif name == 'Status':
                event['status'] = self._ask_choice(
                    name, STATUSES, current[name])

            elif name == 'Timezone':
                timezone = self._ask_timezone(
                    'New timezone',
                    current[name] or calendar.get('timeZone', ''))
                for key in ('start', 'end'):
                    event.setdefault(key, {})['timeZone'] = timezone

            else:
                key = name.lower()
                event_time = event.get(key) or {}
                timezone = event_time.get('timeZone') or \
                    calendar.get('timeZone', '')
                date_default, time_default = \
                    self._time_defaults(event_time)
                _, event[key] = self._read_time(
                    name, timezone, date_default, time_default)

        updated = self.client.update_event(calendar['id'], event['id'], event)
        cli.print_msg(colors.success, 'Event updated. Link to event: %s\n' %
                      updated.get('htmlLink', ''))
        return updated

    def view(self):
        calendar = self.select_calendar()
        event = self.search_and_select(calendar, 'view')
        if event is not None:
            self._view(event)

    def _view(self, event):
        start = event.get('start') or {}
        attendees = [a.get('email', '') for a in event.get('attendees', [])]
        details = [
            ('Summary', event.get('summary')),
            ('Location', event.get('location')),
            ('Description', event.get('description')),
            ('Start', when_str(start)),
            ('End', when_str(event.get('end'))),
            ('Timezone', start.get('timeZone')),
            ('Attendees', '\n'.join(a for a in attendees if a)),
            ('Recurrence', '\n'.join(event.get('recurrence', []))),
            ('Visibility', event.get('visibility')),
            ('Status', event.get('status')),
            ('Link to event', event.get('htmlLink')),
        ]

        cli.print_msg(colors.CLR_NRM(), '\n')
        for label, value in details:
            if not value or not value.strip():
                continue
            cli.print_msg(colors.heading, '%s:\n' % label)
            cli.print_msg(colors.CLR_NRM(), '\t%s\n' %
                          '\n\t'.join(value.strip().splitlines()))
