import copy

import pytest

from gcalmenu.session import EventSession, event_label, match_calendars

LUNCH = {
    'id': 'e1',
    'summary': 'Lunch',
    'location': 'Cafe',
    'description': 'Bring the notes',
    'start': {'dateTime': '2024-03-05T12:00:00-05:00',
              'timeZone': 'America/New_York'},
    'end': {'dateTime': '2024-03-05T13:00:00-05:00',
            'timeZone': 'America/New_York'},
    'attendees': [{'email': 'a@example.com'}],
    'visibility': 'default',
    'status': 'confirmed',
    'htmlLink': 'https://calendar.test/e1',
}

HOLIDAY = {
    'id': 'e2',
    'summary': 'Holiday',
    'location': '',
    'start': {'date': '2024-07-04'},
    'end': {'date': '2024-07-05'},
}


@pytest.fixture
def stocked(client):
    client.events = {'e1': copy.deepcopy(LUNCH), 'e2': copy.deepcopy(HOLIDAY)}
    client.pages = {'': ([LUNCH, HOLIDAY], '')}
    return client


def test_add_timed_event(client, scripted, capsys):
    prompter = scripted('Dentist', 'Main St', '', '',
                        '2024-03-05', '09:30', '', '10:30',
                        'a@example.com, b@example.com', '')
    assert EventSession(client, prompter).run('add')

    assert client.count('insert_event') == 1
    _, calendar_id, body = client.calls[-1]
    assert calendar_id == 'cal1'
    assert body == {
        'summary': 'Dentist',
        'location': 'Main St',
        'start': {'dateTime': '2024-03-05T09:30:00-05:00',
                  'timeZone': 'America/New_York'},
        'end': {'dateTime': '2024-03-05T10:30:00-05:00',
                'timeZone': 'America/New_York'},
        'attendees': [{'email': 'a@example.com'},
                      {'email': 'b@example.com'}],
    }
    # the only calendar is picked without asking
    assert prompter.menus == []
    assert 'https://calendar.test/new' in capsys.readouterr().out


def test_add_all_day_event(client, scripted):
    prompter = scripted('Holiday', '', '', 'Europe/London',
                        '2024-07-04', '', '2024-07-05', '', '', '')
    assert EventSession(client, prompter).run('add')

    body = client.calls[-1][2]
    assert body['start'] == {'date': '2024-07-04'}
    assert body['end'] == {'date': '2024-07-05'}


def test_add_reprompts_bad_date(client, scripted, capsys):
    prompter = scripted('Dentist', '', '', '',
                        '2024-xx-05', '09:30',
                        '2024-03-05', '09:30',
                        '', '10:00', '', '')
    assert EventSession(client, prompter).run('add')

    assert 'Invalid month' in capsys.readouterr().out
    assert client.count('insert_event') == 1
    assert client.calls[-1][2]['start']['dateTime'] == \
        '2024-03-05T09:30:00-05:00'


def test_add_unknown_timezone_uses_calendar_zone(client, scripted, capsys):
    prompter = scripted('Dentist', '', '', 'Mars/Base',
                        '2024-03-05', '09:30', '', '10:30', '', '')
    assert EventSession(client, prompter).run('add')

    assert 'Unknown timezone "Mars/Base"' in capsys.readouterr().out
    assert client.calls[-1][2]['start']['timeZone'] == 'America/New_York'


def test_add_recurrence_rules(client, scripted):
    prompter = scripted('Standup', '', '', '',
                        '2024-03-04', '09:00', '', '09:15', '',
                        'FREQ=WEEKLY;BYDAY=MO', 'EXDATE:20240311T090000',
                        '')
    assert EventSession(client, prompter).run('add')

    assert client.calls[-1][2]['recurrence'] == [
        'RRULE:FREQ=WEEKLY;BYDAY=MO', 'EXDATE:20240311T090000']


def test_add_failure_is_reported_not_retried(client, scripted, capsys):
    client.fail.add('insert_event')
    prompter = scripted('Dentist', '', '', '',
                        '2024-03-05', '09:30', '', '10:30', '', '')
    assert not EventSession(client, prompter).run('add')

    assert client.count('insert_event') == 1
    assert 'Unable to insert_event' in capsys.readouterr().out


def test_add_cancelled_midway(client, scripted, capsys):
    prompter = scripted('Dentist', 'Main St', None)
    assert not EventSession(client, prompter).run('add')

    assert client.count('insert_event') == 0
    assert 'Cancelled' in capsys.readouterr().out


def test_no_calendars(client, scripted, capsys):
    client.calendars = []
    assert not EventSession(client, scripted()).run('add')
    assert 'No valid calendars found' in capsys.readouterr().out


def test_choose_between_calendars(client, scripted):
    client.calendars = [{'id': 'cal1', 'summary': 'Work'},
                        {'id': 'cal2', 'summary': 'Home',
                         'timeZone': 'Europe/Paris'}]
    prompter = scripted('Home', 'Dinner', '', '', '',
                        '2024-03-05', '19:00', '', '20:00', '', '')
    assert EventSession(client, prompter).run('add')

    assert prompter.menus == [['Work', 'Home']]
    _, calendar_id, body = client.calls[-1]
    assert calendar_id == 'cal2'
    assert body['start']['timeZone'] == 'Europe/Paris'


def test_cancel_calendar_choice(client, scripted):
    client.calendars = [{'id': 'cal1', 'summary': 'Work'},
                        {'id': 'cal2', 'summary': 'Home'}]
    assert not EventSession(client, scripted(None)).run('view')
    assert client.calls == [('list_calendars',)]


def test_calendar_filter(client, scripted):
    client.calendars = [{'id': 'cal1', 'summary': 'Work'},
                        {'id': 'cal2', 'summary': 'Home'}]
    session = EventSession(client, scripted(), calendar_filter='home')
    assert session.select_calendar()['id'] == 'cal2'


def test_match_calendars():
    cals = [{'summary': 'Work'}, {'summary': 'Work Travel'},
            {'summary': 'Home'}]
    assert match_calendars(cals, 'Work') == [{'summary': 'Work'}]
    assert match_calendars(cals, 'w.rk') == cals[:2]
    assert match_calendars(cals, '(') == []


def test_event_label_fallbacks():
    assert event_label({'id': 'e1', 'summary': 'Lunch'}) == 'Lunch'
    assert event_label({'id': 'e2', 'summary': ' ',
                        'description': 'Call mom\nabout the trip'}) == \
        'Call mom'
    assert event_label({'id': 'e3'}) == 'e3'
    assert event_label({}) == '(No title)'


def test_search_pages_forward(client, scripted):
    first = {'id': 'e1', 'summary': 'First'}
    second = {'id': 'e2', 'summary': 'Second'}
    client.events = {'e2': second}
    client.pages = {'': ([first], 'tok2'), 'tok2': ([second], '')}
    session = EventSession(client, scripted('jam', 'Next page', 'Second'))

    event = session.search_and_select({'id': 'cal1'}, 'view')

    assert event == second
    assert [call[3] for call in client.calls
            if call[0] == 'list_events'] == ['', 'tok2']
    assert session.prompter.menus == [['First', 'Next page'], ['Second']]


def test_search_offers_reset_when_tokens_wrap(client, scripted):
    first = {'id': 'e1', 'summary': 'First'}
    second = {'id': 'e2', 'summary': 'Second'}
    client.events = {'e1': first}
    client.pages = {'A': ([first], 'B'), 'B': ([second], 'A')}
    prompter = scripted('jam', 'Next page', 'Back to first page', 'First')
    session = EventSession(client, prompter)

    event = session.search_and_select({'id': 'cal1'}, 'view', page_token='A')

    assert event == first
    assert prompter.menus[1] == ['Second', 'Back to first page']
    assert [call[3] for call in client.calls
            if call[0] == 'list_events'] == ['A', 'B', 'A']


def test_search_without_results(client, scripted, capsys):
    assert EventSession(client, scripted('nothing')).run('view')
    assert 'No events found matching "nothing"' in capsys.readouterr().out
    assert client.count('get_event') == 0


def test_remove_after_confirmation(stocked, scripted, capsys):
    prompter = scripted('lunch', 'Lunch', 'Delete')
    assert EventSession(stocked, prompter).run('remove')

    assert ('delete_event', 'cal1', 'e1') in stocked.calls
    assert 'Event deleted: Lunch' in capsys.readouterr().out


@pytest.mark.parametrize('answer', ['Cancel', None])
def test_remove_cancelled_deletes_nothing(stocked, scripted, answer):
    prompter = scripted('lunch', 'Lunch', answer)
    assert not EventSession(stocked, prompter).run('remove')
    assert stocked.count('delete_event') == 0


def test_remove_failure_keeps_session(stocked, scripted, capsys):
    stocked.fail.add('delete_event')
    session = EventSession(stocked, scripted('lunch', 'Lunch', 'Delete',
                                             'lunch', 'Lunch'))
    assert not session.run('remove')
    assert 'Error: Unable to delete_event' in capsys.readouterr().out

    # the next workflow still works
    assert session.run('view')


def test_edit_only_changes_selected_fields(stocked, scripted):
    prompter = scripted('lunch', 'Lunch', ['Summary', 'Status'],
                        'Brunch', 'tentative')
    assert EventSession(stocked, prompter).run('edit')

    assert stocked.count('update_event') == 1
    _, calendar_id, event_id, body = stocked.calls[-1]
    assert (calendar_id, event_id) == ('cal1', 'e1')

    expected = copy.deepcopy(LUNCH)
    expected['summary'] = 'Brunch'
    expected['status'] = 'tentative'
    assert body == expected
    assert stocked.events['e1'] == LUNCH


def test_edit_can_clear_text_fields(stocked, scripted):
    prompter = scripted('lunch', 'Lunch', ['Location', 'Description'],
                        '-', '-')
    assert EventSession(stocked, prompter).run('edit')

    body = stocked.calls[-1][3]
    assert body['location'] == ''
    assert body['description'] == ''
    assert body['summary'] == 'Lunch'
    assert ('New location ("-" to clear)', 'Cafe') in prompter.prompts


def test_edit_blank_answer_keeps_value(stocked, scripted):
    prompter = scripted('lunch', 'Lunch', ['Location'], '')
    assert EventSession(stocked, prompter).run('edit')
    assert stocked.calls[-1][3]['location'] == 'Cafe'


def test_edit_shows_current_values(stocked, scripted):
    prompter = scripted('lunch', 'Lunch', None)
    assert not EventSession(stocked, prompter).run('edit')

    labels = prompter.menus[-1]
    assert labels[0] == 'Summary     | Lunch'
    assert labels[3] == 'Start       | 2024-03-05T12:00:00-05:00'
    assert labels[5] == 'Timezone    | America/New_York'
    assert stocked.count('update_event') == 0


@pytest.mark.parametrize('field,value', [('Visibility', 'secret'),
                                         ('Status', 'maybe')])
def test_edit_rejects_unknown_choices(stocked, scripted, capsys,
                                      field, value):
    prompter = scripted('lunch', 'Lunch', [field], value)
    assert not EventSession(stocked, prompter).run('edit')

    assert 'Invalid %s' % field.lower() in capsys.readouterr().out
    assert stocked.count('update_event') == 0


def test_edit_start_keeps_its_timezone(stocked, scripted):
    prompter = scripted('lunch', 'Lunch', ['Start'], '', '11:00')
    assert EventSession(stocked, prompter).run('edit')

    body = stocked.calls[-1][3]
    assert body['start'] == {'dateTime': '2024-03-05T11:00:00-05:00',
                             'timeZone': 'America/New_York'}
    assert body['end'] == LUNCH['end']
    # current date and time are offered as defaults
    assert ('Start date (YYYY-MM-DD)', '2024-03-05') in prompter.prompts
    assert ('Start time (HH:MM:SS, 24-hour)', '12:00:00') in prompter.prompts


def test_edit_timezone_applies_before_times(stocked, scripted):
    prompter = scripted('lunch', 'Lunch', ['End', 'Timezone'],
                        'Europe/London', '', '18:00')
    assert EventSession(stocked, prompter).run('edit')

    body = stocked.calls[-1][3]
    assert body['start'] == {'dateTime': '2024-03-05T12:00:00-05:00',
                             'timeZone': 'Europe/London'}
    assert body['end'] == {'dateTime': '2024-03-05T18:00:00+00:00',
                           'timeZone': 'Europe/London'}


def test_edit_all_day_event_to_timed(stocked, scripted):
    stocked.pages = {'': ([HOLIDAY], '')}
    prompter = scripted('holiday', 'Holiday', ['Start', 'End'],
                        '', '10:00', '2024-07-04', '16:00')
    assert EventSession(stocked, prompter).run('edit')

    body = stocked.calls[-1][3]
    assert body['start'] == {'dateTime': '2024-07-04T10:00:00-04:00',
                             'timeZone': 'America/New_York'}
    assert body['end'] == {'dateTime': '2024-07-04T16:00:00-04:00',
                           'timeZone': 'America/New_York'}


def test_edit_update_failure(stocked, scripted, capsys):
    stocked.fail.add('update_event')
    prompter = scripted('lunch', 'Lunch', ['Location'], 'Office')
    assert not EventSession(stocked, prompter).run('edit')
    assert 'Unable to update_event' in capsys.readouterr().out


def test_view_skips_empty_fields(stocked, scripted, capsys):
    assert EventSession(stocked, scripted('holiday', 'Holiday')).run('view')

    out = capsys.readouterr().out
    assert 'Summary:\n\tHoliday\n' in out
    assert 'Start:\n\t2024-07-04\n' in out
    assert 'Location' not in out
    assert 'Description' not in out
    assert stocked.count('update_event') == 0


def test_view_full_event(stocked, scripted, capsys):
    assert EventSession(stocked, scripted('lunch', 'Lunch')).run('view')

    out = capsys.readouterr().out
    assert 'Location:\n\tCafe\n' in out
    assert 'Attendees:\n\ta@example.com\n' in out
    assert 'Link to event:\n\thttps://calendar.test/e1\n' in out


def test_unknown_command(client, scripted, capsys):
    assert not EventSession(client, scripted()).run('frobnicate')
    assert 'frobnicate is an invalid command' in capsys.readouterr().out
    assert client.calls == []
