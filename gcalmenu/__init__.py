__program__ = 'gcalmenu'
__version__ = 'v1.0.0'
__author__ = 'gcalmenu contributors'
__doc__ = '''
usage:

%s [options] [command]

 Without a command an interactive menu is shown, after a list of the
 next upcoming events (see --upcoming).  Every step of every command can
 be cancelled with 'q' at a menu or Ctrl-D at a text prompt, nothing is
 changed on the calendar until the last step.

 Commands:

  add                      add an event to a calendar
                           - prompts for summary, location, description,
                             timezone, start, end, attendees and
                             recurrence rules
                           - dates are entered as YYYY-MM-DD and times as
                             HH:MM:SS (24-hour), trailing parts may be left
                             off ('2024-03', '9:30')
                           - an event starting at exactly 00:00:00 is
                             created as an all-day event

  remove                   search for an event and delete it
                           - deleting always asks for confirmation

  edit                     search for an event and edit it
                           - pick any number of details to change, they
                             are saved together at the end
                           - a blank answer keeps the current text, '-'
                             clears it

  view                     search for an event and show its details

 Searches are case insensitive and match any field of the event, like
 traditional Google search.  Results are shown one page at a time (see
 --page_size).

 Use --calendar to pick the calendar by name (or regex) instead of being
 asked every time.
'''
