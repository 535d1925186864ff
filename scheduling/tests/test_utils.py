from datetime import date, datetime

from django.test import SimpleTestCase

from scheduling.document import ClubDocument
from scheduling.recurrence import expand_trainings
from scheduling.stats import schedule_kpis
from scheduling.utils import (
    apply_filters,
    calendar_window,
    group_by_day,
    month_weeks,
    parse_month_param,
    shift_month,
    window_instances,
)


def make_document(**settings):
    return ClubDocument.from_dict({
        'settings': settings or {'publicDaysAhead': 60},
        'players': [{'id': 'p_1', 'name': 'Ana'}, {'id': 'p_2', 'name': 'Luka'}],
        'coaches': [{'id': 'c_1', 'name': 'Marko'}, {'id': 'c_2', 'name': 'Nina'}],
        'locations': [{'id': 'l_1', 'name': 'Hall'}, {'id': 'l_2', 'name': 'Park'}],
        'trainings': [
            {'id': 't_a', 'start': '2024-01-01T18:00', 'locationId': 'l_1', 'headCoachId': 'c_1',
             'assistantCoachIds': ['c_2'], 'playerIds': ['p_1'], 'recurrence': {'type': 'weekly'}},
            {'id': 't_b', 'start': '2024-01-03T09:00', 'locationId': 'l_2', 'headCoachId': 'c_2',
             'playerIds': ['p_2'], 'recurrence': {'type': 'weekly'}},
        ],
    })


class FilterTest(SimpleTestCase):
    def setUp(self):
        self.instances = expand_trainings(make_document().trainings, datetime(2024, 1, 1), datetime(2024, 1, 31, 23, 59))

    def test_no_filters_keeps_everything(self):
        self.assertEqual(apply_filters(self.instances), self.instances)

    def test_coach_matches_head_or_assistant(self):
        head_only = apply_filters(self.instances, coach_id='c_1')
        head_or_assistant = apply_filters(self.instances, coach_id='c_2')

        self.assertEqual({i.training_id for i in head_only}, {'t_a'})
        self.assertEqual({i.training_id for i in head_or_assistant}, {'t_a', 't_b'})

    def test_filters_are_conjunctive(self):
        self.assertEqual(apply_filters(self.instances, coach_id='c_2', location_id='l_1', player_id='p_2'), [])
        matched = apply_filters(self.instances, coach_id='c_2', location_id='l_2', player_id='p_2')
        self.assertEqual({i.training_id for i in matched}, {'t_b'})

    def test_window_is_inclusive(self):
        first = self.instances[0]
        self.assertEqual(window_instances(self.instances, first.start, first.start), [first])


class CalendarHelpersTest(SimpleTestCase):
    def test_calendar_window_pads_a_day(self):
        self.assertEqual(calendar_window(2024, 2), (datetime(2024, 1, 31), datetime(2024, 3, 1)))

    def test_month_weeks_are_monday_first(self):
        weeks = month_weeks(2024, 1)
        self.assertEqual(weeks[0][0], date(2024, 1, 1))
        self.assertIsNone(weeks[-1][-1])
        self.assertTrue(all(len(week) == 7 for week in weeks))

    def test_group_by_day(self):
        instances = expand_trainings(make_document().trainings, datetime(2024, 1, 1), datetime(2024, 1, 8, 23, 0))
        days = group_by_day(instances)
        self.assertEqual(list(days), [date(2024, 1, 1), date(2024, 1, 3), date(2024, 1, 8)])

    def test_shift_month(self):
        self.assertEqual(shift_month(2024, 1, -1), (2023, 12))
        self.assertEqual(shift_month(2024, 12, 1), (2025, 1))

    def test_parse_month_param(self):
        today = datetime(2024, 5, 17)
        self.assertEqual(parse_month_param('', today), (2024, 5))
        self.assertEqual(parse_month_param('2023-11', today), (2023, 11))
        for bad in ('2023', '2023-13', 'May'):
            with self.assertRaises(ValueError):
                parse_month_param(bad, today)


class KpiTest(SimpleTestCase):
    def test_counts(self):
        document = make_document(publicDaysAhead=30)
        now = datetime(2024, 1, 1, 12, 0)
        instances = expand_trainings(document.trainings, datetime(2023, 12, 1), datetime(2024, 3, 1))

        kpis = schedule_kpis(document, instances, now)

        # Jan 8 18:00 falls just after the seven day cut-off.
        self.assertEqual(kpis['week'], 2)
        # Five Mondays (Jan 1 to Jan 29) and five Wednesdays (Jan 3 to Jan 31).
        self.assertEqual(kpis['upcoming'], 10)
        self.assertEqual(kpis['players'], 2)
        self.assertEqual(kpis['trainings'], 2)
