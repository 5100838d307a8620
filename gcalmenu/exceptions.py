class GcalmenuError(Exception):
    """Base class for everything a workflow can report and recover from."""
    pass


class InvalidField(GcalmenuError):

    def __init__(self, field, value=None):
        self.field = field
        self.value = value
        if value is None:
            msg = 'Invalid %s' % field
        else:
            msg = 'Invalid %s: %r' % (field, value)
        super().__init__(msg)


class UnresolvableTimezone(GcalmenuError):

    def __init__(self, name):
        self.name = name
        super().__init__('Unknown timezone: %s' % name)


class FormatError(GcalmenuError):
    pass


class NoCalendarsAvailable(GcalmenuError):

    def __init__(self, msg='No valid calendars found'):
        super().__init__(msg)


class CollaboratorError(GcalmenuError):
    """A request to the calendar service failed.

    `status` and `reason` are filled in from the HTTP error when the
    service sent one back.
    """

    def __init__(self, action, msg, status=None, reason=None):
        self.action = action
        self.status = status
        self.reason = reason
        super().__init__('Unable to %s. %s' % (action, msg))


class WorkflowCancelled(GcalmenuError):

    def __init__(self, msg='Cancelled'):
        super().__init__(msg)
