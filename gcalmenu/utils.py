from collections import namedtuple
from datetime import datetime
import re
import sys

from gcalmenu.exceptions import FormatError, InvalidField, UnresolvableTimezone

# Required 3rd party libraries
try:
    from dateutil import tz
    from dateutil.relativedelta import relativedelta
except ImportError as e:
    print("ERROR: Missing module - {}".format(e.args[0]))
    sys.exit(1)


EPOCH_YEAR = 1970

NUMERIC_FIELDS = ('year', 'month', 'day',
                  'hour', 'minute', 'second', 'nanosecond')

# Every field may be None (or an empty string straight from a prompt).
PartialDateTime = namedtuple('PartialDateTime',
                             NUMERIC_FIELDS + ('timezone',),
                             defaults=(None,) * (len(NUMERIC_FIELDS) + 1))

ResolvedInstant = namedtuple('ResolvedInstant', ['when', 'timezone'])


class AllDay(namedtuple('AllDay', ['date'])):

    def body(self):
        return {'date': self.date}


class Timestamped(namedtuple('Timestamped', ['dateTime', 'timeZone'])):

    def body(self):
        return {'dateTime': self.dateTime, 'timeZone': self.timeZone}


def _as_int(field, value):
    if value is None:
        return None
    if isinstance(value, int):
        return value
    value = str(value).strip()
    if not value:
        return None
    try:
        return int(value, 10)
    except ValueError:
        raise InvalidField(field, value)


def partial_from_text(date_text='', time_text='', timezone=None):
    """Split 'YYYY-MM-DD' and 'HH:MM:SS[.fraction]' into a PartialDateTime.

    Trailing parts may be left off ('2024-03', '9:30').  The pieces are
    not checked here, resolve() does that field by field.
    """
    date_text = (date_text or '').strip()
    time_text = (time_text or '').strip()

    date_parts = re.split(r'[-/]', date_text) if date_text else []
    if len(date_parts) > 3:
        raise InvalidField('date', date_text)

    nanosecond = None
    time_parts = time_text.split(':') if time_text else []
    if len(time_parts) > 3:
        raise InvalidField('time', time_text)
    if len(time_parts) == 3 and '.' in time_parts[2]:
        second, fraction = time_parts[2].split('.', 1)
        # '.5' is half a second, not five nanoseconds
        nanosecond = fraction.ljust(9, '0')[:9] if fraction else None
        time_parts[2] = second

    fields = dict(zip(('year', 'month', 'day'), date_parts))
    fields.update(zip(('hour', 'minute', 'second'), time_parts))
    return PartialDateTime(nanosecond=nanosecond, timezone=timezone,
                           **fields)


def load_timezone(name):
    if not name or not name.strip():
        raise UnresolvableTimezone(name)
    zone = tz.gettz(name.strip())
    if zone is None:
        raise UnresolvableTimezone(name)
    return zone


def known_timezone(name):
    try:
        load_timezone(name)
    except UnresolvableTimezone:
        return False
    return True


def resolve_timezone(name, fallback=None):
    """Return (tzinfo, name) for `name`, else `fallback`, else UTC.

    A name dateutil does not know is ignored without complaint, callers
    that want to warn about a typo should check known_timezone() first.
    """
    for candidate in (name, fallback):
        try:
            return load_timezone(candidate), candidate.strip()
        except UnresolvableTimezone:
            continue
    return tz.UTC, 'UTC'


def resolve(partial, fallback_timezone=None):
    """Turn a PartialDateTime into a ResolvedInstant.

    Missing fields default to 1970-01-01 00:00:00.  Present fields are
    applied as offsets from the start of the year, so out of range
    values roll over instead of failing (month 13 is January of the next
    year, day 0 the last day of the previous month).  Nanoseconds are
    truncated to microseconds.
    """
    values = {}
    for field in NUMERIC_FIELDS:
        values[field] = _as_int(field, getattr(partial, field))

    zone, zone_name = resolve_timezone(partial.timezone, fallback_timezone)

    year = values['year'] if values['year'] is not None else EPOCH_YEAR
    month = values['month'] if values['month'] is not None else 1
    day = values['day'] if values['day'] is not None else 1

    try:
        wall = datetime(year, 1, 1)
    except ValueError:
        raise InvalidField('year', partial.year)

    offsets = (('month', 'months', month - 1),
               ('day', 'days', day - 1),
               ('hour', 'hours', values['hour'] or 0),
               ('minute', 'minutes', values['minute'] or 0),
               ('second', 'seconds', values['second'] or 0),
               ('nanosecond', 'microseconds',
                (values['nanosecond'] or 0) // 1000))
    for field, unit, amount in offsets:
        try:
            wall += relativedelta(**{unit: amount})
        except (ValueError, OverflowError):
            raise InvalidField(field, getattr(partial, field))

    # wall clock times skipped by a DST jump move forward like the
    # clock did
    when = tz.resolve_imaginary(wall.replace(tzinfo=zone))
    return ResolvedInstant(when, zone_name)


def encode(instant):
    when = instant.when
    if when.hour == 0 and when.minute == 0 and when.second == 0:
        day = when.date().isoformat()
        if len(day) != 10:
            raise FormatError('failed to get all day event string: %s' % day)
        return AllDay(day)

    return Timestamped(when.replace(microsecond=0).isoformat(),
                       instant.timezone)


def from_body(event_time):
    """Map an API EventDateTime dict back onto AllDay/Timestamped."""
    if not event_time:
        return None
    if event_time.get('dateTime'):
        return Timestamped(event_time['dateTime'],
                           event_time.get('timeZone'))
    if event_time.get('date'):
        return AllDay(event_time['date'])
    return None
