import re

from django.test import SimpleTestCase, override_settings

from scheduling.document import (
    ClubDocument,
    DocumentError,
    add_coach,
    add_location,
    add_player,
    add_training,
    parse_document,
    remove_entity,
    update_settings,
    update_training,
)

SAMPLE = {
    'settings': {'publicDaysAhead': 90},
    'players': [{'id': 'p_1', 'name': 'Ana'}, {'id': 'p_2', 'name': 'Luka'}],
    'coaches': [{'id': 'c_1', 'name': 'Marko'}, {'id': 'c_2', 'name': 'Nina'}],
    'locations': [{'id': 'l_1', 'name': 'Hall', 'address': 'Main St 1', 'mapsUrl': 'https://maps.example/1'}],
    'trainings': [{
        'id': 't_1',
        'title': 'Juniors',
        'start': '2024-01-01T18:00',
        'durationMin': 90,
        'locationId': 'l_1',
        'headCoachId': 'c_1',
        'assistantCoachIds': ['c_2'],
        'playerIds': ['p_1', 'p_2'],
        'notes': 'Bring water',
        'recurrence': {'type': 'weekly', 'interval': 1, 'until': '2024-06-30'},
    }],
    'siteTitle': 'Club',
}


class ClubDocumentTest(SimpleTestCase):
    def test_round_trip_keeps_shape(self):
        self.assertEqual(ClubDocument.from_dict(SAMPLE).to_dict(), SAMPLE)

    def test_missing_values_get_defaults(self):
        document = ClubDocument.from_dict({
            'players': [],
            'trainings': [{'id': 't_1', 'start': '2024-01-01T18:00', 'durationMin': None, 'assistantCoachIds': 'c_1'}],
        })
        definition = document.trainings[0]

        self.assertEqual(definition.title, 'Trening')
        self.assertEqual(definition.duration_min, 60)
        self.assertEqual(definition.assistant_coach_ids, ())
        self.assertEqual(definition.recurrence.type, 'none')
        self.assertEqual(document.settings.public_days_ahead, 60)
        self.assertEqual(document.locations, ())

    def test_non_recurring_serialises_to_bare_type(self):
        document = ClubDocument.from_dict({'players': [], 'trainings': [
            {'id': 't_1', 'start': '2024-01-01T18:00', 'recurrence': {'type': 'NONE', 'interval': 4}},
        ]})
        self.assertEqual(document.to_dict()['trainings'][0]['recurrence'], {'type': 'none'})

    def test_malformed_start_is_kept_verbatim(self):
        document = ClubDocument.from_dict({'players': [], 'trainings': [{'id': 't_1', 'start': 'someday'}]})
        self.assertEqual(document.to_dict()['trainings'][0]['start'], 'someday')

    def test_lookups(self):
        document = ClubDocument.from_dict(SAMPLE)
        self.assertEqual(document.coaches_by_id()['c_2'].name, 'Nina')
        self.assertEqual(document.locations_by_id()['l_1'].maps_url, 'https://maps.example/1')
        self.assertEqual(document.get_training('t_1').title, 'Juniors')
        self.assertIsNone(document.get_training('t_missing'))

    def test_fractional_duration_is_kept(self):
        document = ClubDocument.from_dict({'players': [], 'trainings': [
            {'id': 't_1', 'start': '2024-01-01T18:00', 'durationMin': 30.5},
            {'id': 't_2', 'start': '2024-01-01T18:00', 'durationMin': '45'},
        ]})
        self.assertEqual(document.trainings[0].duration_min, 30.5)
        self.assertEqual(document.trainings[1].duration_min, 45)
        self.assertEqual(document.to_dict()['trainings'][0]['durationMin'], 30.5)

    @override_settings(DEFAULT_PUBLIC_DAYS_AHEAD=90)
    def test_days_ahead_fallback_comes_from_settings(self):
        document = ClubDocument.from_dict({'players': [], 'trainings': []})
        self.assertEqual(document.settings.public_days_ahead, 90)
        self.assertEqual(ClubDocument.from_dict({'players': [], 'trainings': [], 'settings': {}})
                         .settings.public_days_ahead, 90)
        self.assertEqual(update_settings(document, 'abc').settings.public_days_ahead, 90)

    def test_parse_document_requires_lists(self):
        with self.assertRaises(DocumentError):
            parse_document([])
        with self.assertRaises(DocumentError):
            parse_document({'players': []})
        self.assertEqual(len(parse_document(SAMPLE).trainings), 1)


class DocumentOperationsTest(SimpleTestCase):
    def setUp(self):
        self.document = ClubDocument.from_dict(SAMPLE)

    def test_add_entities_with_prefixed_ids(self):
        document = add_player(self.document, '  Maja ')
        document = add_coach(document, 'Jure')
        document = add_location(document, 'Park', address='Park Rd', maps_url='https://maps.example/2')

        self.assertRegex(document.players[-1].id, r'^p_[0-9a-f]{8}_[0-9a-f]+$')
        self.assertEqual(document.players[-1].name, 'Maja')
        self.assertTrue(document.coaches[-1].id.startswith('c_'))
        self.assertTrue(document.locations[-1].id.startswith('l_'))
        self.assertEqual(document.locations[-1].address, 'Park Rd')
        # The input document is untouched.
        self.assertEqual(len(self.document.players), 2)

    def test_add_training_drops_head_coach_from_assistants(self):
        document = add_training(self.document, {
            'title': 'Seniors',
            'start': '2024-02-01T19:00',
            'headCoachId': 'c_1',
            'assistantCoachIds': ['c_1', 'c_2'],
            'recurrence': {'type': 'biweekly'},
        })
        added = document.trainings[-1]

        self.assertTrue(re.match(r'^t_', added.id))
        self.assertEqual(added.assistant_coach_ids, ('c_2',))
        self.assertEqual(added.recurrence.type, 'biweekly')

    def test_update_training(self):
        document = update_training(self.document, 't_1', {
            'title': 'Juniors B', 'start': '2024-01-02T17:00', 'headCoachId': 'c_2', 'assistantCoachIds': ['c_2'],
        })
        updated = document.get_training('t_1')

        self.assertEqual(updated.title, 'Juniors B')
        self.assertEqual(updated.assistant_coach_ids, ())
        self.assertEqual(len(document.trainings), 1)

    def test_update_missing_training(self):
        with self.assertRaises(KeyError):
            update_training(self.document, 't_missing', {})

    def test_remove_does_not_cascade(self):
        document = remove_entity(self.document, 'coaches', 'c_2')

        self.assertEqual([c.id for c in document.coaches], ['c_1'])
        self.assertEqual(document.trainings[0].assistant_coach_ids, ('c_2',))

    def test_remove_unknown_kind(self):
        with self.assertRaises(ValueError):
            remove_entity(self.document, 'teams', 'x')

    def test_update_settings_enforces_minimum(self):
        self.assertEqual(update_settings(self.document, 10).settings.public_days_ahead, 30)
        self.assertEqual(update_settings(self.document, 365).settings.public_days_ahead, 365)
        self.assertEqual(update_settings(self.document, 'abc').settings.public_days_ahead, 60)
