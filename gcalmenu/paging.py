from collections import namedtuple

SHOW_NEXT = 'next'
SHOW_RESET = 'reset'
NO_MORE = 'none'


class PaginationCursor(namedtuple('PaginationCursor',
                                  ['current_token', 'initial_token'])):
    """Position in a token-paged result set.

    An empty token is both "first page" (as a request) and "no more
    pages" (as a response).  Some services wrap around to the page the
    search started from instead of ending; advance() reports that as
    SHOW_RESET so the menu can say so rather than page forever.
    """

    def __new__(cls, current_token='', initial_token=None):
        if initial_token is None:
            initial_token = current_token
        return super().__new__(cls, current_token or '', initial_token or '')

    def advance(self, next_token):
        next_token = next_token or ''
        if next_token == '':
            directive = NO_MORE
        elif (next_token == self.initial_token and
                self.current_token != self.initial_token):
            directive = SHOW_RESET
        else:
            directive = SHOW_NEXT
        return self._replace(current_token=next_token), directive

    def reset(self):
        return self._replace(current_token=self.initial_token)

    @property
    def at_start(self):
        return self.current_token == self.initial_token
