# scheduling/document.py
"""
The club document: players, coaches, locations, trainings and display settings.

The JSON document is read into frozen dataclasses. Loose or missing values are
coerced to safe defaults on the way in, so the rest of the app never has to
second-guess the data. Edits never mutate a document; each operation returns
a new one which the store then saves in place of the old.
"""
import math
import secrets
import time
from dataclasses import dataclass, field, replace
from typing import Optional

from django.conf import settings

DEFAULT_TITLE = "Trening"
DEFAULT_DURATION_MIN = 60
DEFAULT_PUBLIC_DAYS_AHEAD = 60
MIN_PUBLIC_DAYS_AHEAD = 30

ENTITY_PREFIXES = {
    'players': 'p_',
    'coaches': 'c_',
    'locations': 'l_',
    'trainings': 't_',
}


def _text(value, default=''):
    if value is None:
        return default
    return str(value).strip()


def _id_list(value):
    if not isinstance(value, (list, tuple, set)):
        return ()
    return tuple(_text(item) for item in value if _text(item))


def _int_or_default(value, default):
    """Falsy or non-numeric values fall back to ``default``; negatives pass through."""
    try:
        number = int(float(value or default))
    except (TypeError, ValueError, OverflowError):
        return default
    return number


def _number_or_default(value, default):
    """Like ``_int_or_default`` but keeps fractional values such as 30.5."""
    try:
        number = float(value or default)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number):
        return default
    return int(number) if number.is_integer() else number


def _default_public_days_ahead():
    return getattr(settings, 'DEFAULT_PUBLIC_DAYS_AHEAD', DEFAULT_PUBLIC_DAYS_AHEAD)


def new_entity_id(prefix):
    """A fresh id such as ``p_1a2b3c4d_18c5e0f1a2b``."""
    return f"{prefix}{secrets.token_hex(4)}_{int(time.time() * 1000):x}"


@dataclass(frozen=True)
class Player:
    id: str
    name: str = ''

    @classmethod
    def from_dict(cls, data):
        return cls(id=_text(data.get('id')), name=_text(data.get('name')))

    def to_dict(self):
        return {'id': self.id, 'name': self.name}


@dataclass(frozen=True)
class Coach:
    id: str
    name: str = ''

    @classmethod
    def from_dict(cls, data):
        return cls(id=_text(data.get('id')), name=_text(data.get('name')))

    def to_dict(self):
        return {'id': self.id, 'name': self.name}


@dataclass(frozen=True)
class Location:
    id: str
    name: str = ''
    address: str = ''
    maps_url: str = ''

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=_text(data.get('id')),
            name=_text(data.get('name')),
            address=_text(data.get('address')),
            maps_url=_text(data.get('mapsUrl')),
        )

    def to_dict(self):
        return {'id': self.id, 'name': self.name, 'address': self.address, 'mapsUrl': self.maps_url}


@dataclass(frozen=True)
class Recurrence:
    """Stored recurrence fields. ``scheduling.recurrence.build_rule`` interprets them."""
    type: str = 'none'
    interval: int = 1
    until: str = ''

    @classmethod
    def from_dict(cls, data):
        if not isinstance(data, dict):
            return cls()
        return cls(
            type=_text(data.get('type'), 'none').lower() or 'none',
            interval=_int_or_default(data.get('interval'), 1),
            until=_text(data.get('until')),
        )

    @property
    def is_recurring(self):
        return self.type != 'none'

    def to_dict(self):
        if not self.is_recurring:
            return {'type': 'none'}
        data = {'type': self.type, 'interval': self.interval}
        if self.until:
            data['until'] = self.until
        return data


@dataclass(frozen=True)
class TrainingDefinition:
    id: str
    start: str
    title: str = DEFAULT_TITLE
    duration_min: float = DEFAULT_DURATION_MIN
    location_id: str = ''
    head_coach_id: str = ''
    assistant_coach_ids: tuple = ()
    player_ids: tuple = ()
    notes: str = ''
    recurrence: Recurrence = field(default_factory=Recurrence)

    @classmethod
    def from_dict(cls, data):
        head_coach_id = _text(data.get('headCoachId'))
        return cls(
            id=_text(data.get('id')),
            # Kept verbatim; the expander decides whether it parses.
            start=_text(data.get('start')),
            title=_text(data.get('title')) or DEFAULT_TITLE,
            duration_min=_number_or_default(data.get('durationMin'), DEFAULT_DURATION_MIN),
            location_id=_text(data.get('locationId')),
            head_coach_id=head_coach_id,
            assistant_coach_ids=_id_list(data.get('assistantCoachIds')),
            player_ids=_id_list(data.get('playerIds')),
            notes=_text(data.get('notes')),
            recurrence=Recurrence.from_dict(data.get('recurrence')),
        )

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'start': self.start,
            'durationMin': self.duration_min,
            'locationId': self.location_id,
            'headCoachId': self.head_coach_id,
            'assistantCoachIds': list(self.assistant_coach_ids),
            'playerIds': list(self.player_ids),
            'notes': self.notes,
            'recurrence': self.recurrence.to_dict(),
        }


@dataclass(frozen=True)
class ScheduleSettings:
    public_days_ahead: int = field(default_factory=_default_public_days_ahead)

    @classmethod
    def from_dict(cls, data):
        if not isinstance(data, dict):
            return cls()
        return cls(public_days_ahead=_int_or_default(data.get('publicDaysAhead'), _default_public_days_ahead()))

    def to_dict(self):
        return {'publicDaysAhead': self.public_days_ahead}


class DocumentError(ValueError):
    """The stored or submitted document cannot be used."""


def _records(data, key, record_class):
    items = data.get(key)
    if not isinstance(items, list):
        return ()
    return tuple(record_class.from_dict(item) for item in items if isinstance(item, dict))


@dataclass(frozen=True)
class ClubDocument:
    players: tuple = ()
    coaches: tuple = ()
    locations: tuple = ()
    trainings: tuple = ()
    settings: ScheduleSettings = field(default_factory=ScheduleSettings)
    # Unrecognised top-level keys, carried through untouched.
    extra: dict = field(default_factory=dict, compare=False)

    @classmethod
    def from_dict(cls, data):
        known = {'players', 'coaches', 'locations', 'trainings', 'settings'}
        return cls(
            players=_records(data, 'players', Player),
            coaches=_records(data, 'coaches', Coach),
            locations=_records(data, 'locations', Location),
            trainings=_records(data, 'trainings', TrainingDefinition),
            settings=ScheduleSettings.from_dict(data.get('settings')),
            extra={key: value for key, value in data.items() if key not in known},
        )

    def to_dict(self):
        data = dict(self.extra)
        data.update({
            'settings': self.settings.to_dict(),
            'players': [player.to_dict() for player in self.players],
            'coaches': [coach.to_dict() for coach in self.coaches],
            'locations': [location.to_dict() for location in self.locations],
            'trainings': [training.to_dict() for training in self.trainings],
        })
        return data

    # --- Lookups ---

    def players_by_id(self):
        return {player.id: player for player in self.players}

    def coaches_by_id(self):
        return {coach.id: coach for coach in self.coaches}

    def locations_by_id(self):
        return {location.id: location for location in self.locations}

    def get_training(self, training_id) -> Optional[TrainingDefinition]:
        return next((t for t in self.trainings if t.id == training_id), None)


def parse_document(data):
    """Validates the outer shape of a raw document and builds a ``ClubDocument``."""
    if not isinstance(data, dict):
        raise DocumentError("The document must be a JSON object.")
    for key in ('players', 'trainings'):
        if not isinstance(data.get(key), list):
            raise DocumentError(f"The document has no '{key}' list.")
    return ClubDocument.from_dict(data)


# --- Document operations ---

def add_player(document, name):
    player = Player(id=new_entity_id(ENTITY_PREFIXES['players']), name=_text(name))
    return replace(document, players=document.players + (player,))


def add_coach(document, name):
    coach = Coach(id=new_entity_id(ENTITY_PREFIXES['coaches']), name=_text(name))
    return replace(document, coaches=document.coaches + (coach,))


def add_location(document, name, address='', maps_url=''):
    location = Location(
        id=new_entity_id(ENTITY_PREFIXES['locations']),
        name=_text(name),
        address=_text(address),
        maps_url=_text(maps_url),
    )
    return replace(document, locations=document.locations + (location,))


def _without_head_coach(training):
    assistants = tuple(cid for cid in training.assistant_coach_ids if cid != training.head_coach_id)
    return replace(training, assistant_coach_ids=assistants)


def add_training(document, data):
    """Appends a training built from raw form-style ``data`` under a fresh id."""
    payload = dict(data, id=new_entity_id(ENTITY_PREFIXES['trainings']))
    training = _without_head_coach(TrainingDefinition.from_dict(payload))
    return replace(document, trainings=document.trainings + (training,))


def update_training(document, training_id, data):
    """Replaces the training with ``training_id``; raises ``KeyError`` if there is none."""
    if document.get_training(training_id) is None:
        raise KeyError(training_id)
    updated = _without_head_coach(TrainingDefinition.from_dict(dict(data, id=training_id)))
    trainings = tuple(updated if t.id == training_id else t for t in document.trainings)
    return replace(document, trainings=trainings)


def remove_entity(document, kind, entity_id):
    """
    Drops the record with ``entity_id`` from the ``kind`` collection.

    References held by trainings are left in place; lookups simply come back
    empty for them.
    """
    if kind not in ENTITY_PREFIXES:
        raise ValueError(f"Unknown collection '{kind}'.")
    remaining = tuple(item for item in getattr(document, kind) if item.id != entity_id)
    return replace(document, **{kind: remaining})


def update_settings(document, public_days_ahead):
    days = max(MIN_PUBLIC_DAYS_AHEAD, _int_or_default(public_days_ahead, _default_public_days_ahead()))
    return replace(document, settings=ScheduleSettings(public_days_ahead=days))
