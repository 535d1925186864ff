# scheduling/recurrence.py
"""
Expands training definitions into concrete, time-bounded training instances.

A definition carries an anchor ``start`` and an optional recurrence rule. The
expander walks the series from the anchor, emitting every occurrence that
falls inside the requested ``[from, to]`` window, and returns the combined
instances of all definitions sorted by start time.

All date-times are naive local wall-clock values.
"""
import datetime
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Iterable, List, Optional

from django.utils.dateparse import parse_date, parse_datetime

logger = logging.getLogger(__name__)

# Hard bound on occurrences visited per definition.
MAX_OCCURRENCES = 600


@dataclass(frozen=True)
class ParseResult:
    """Outcome of parsing a date-time string: either a value or an error."""
    value: Optional[datetime.datetime] = None
    error: str = ''

    @property
    def ok(self):
        return self.value is not None


def parse_local_datetime(raw) -> ParseResult:
    """
    Parses a naive local date-time such as ``2024-01-01T18:00``.

    Seconds, a space separator and a bare date (midnight) are accepted too.
    A UTC offset, if present, is dropped and the wall-clock time kept.
    """
    text = str(raw or '').strip()
    if not text:
        return ParseResult(error='empty date-time')
    try:
        value = parse_datetime(text)
        if value is None:
            day = parse_date(text)
            if day is not None:
                value = datetime.datetime.combine(day, datetime.time.min)
    except ValueError as exc:
        return ParseResult(error=str(exc))
    if value is None:
        return ParseResult(error=f"unrecognised date-time '{text}'")
    return ParseResult(value=value.replace(tzinfo=None))


def parse_until(raw) -> ParseResult:
    """
    The inclusive end of a series: 23:59:59 on the ``until`` date.

    An empty ``until`` gives an empty result with no error. Anything else that
    is not a plain ``YYYY-MM-DD`` date is an error.
    """
    text = str(raw or '').strip()
    if not text:
        return ParseResult()
    try:
        day = parse_date(text)
    except ValueError as exc:
        return ParseResult(error=str(exc))
    if day is None:
        return ParseResult(error=f"unrecognised until date '{text}'")
    return ParseResult(value=datetime.datetime.combine(day, datetime.time(23, 59, 59)))


def add_months(value: datetime.datetime, months: int) -> datetime.datetime:
    """
    Moves ``value`` by whole calendar months, rolling overflow days forward.

    Jan 31 + 1 month is Mar 3 (Mar 2 in a leap year), matching how calendar
    arithmetic spills past a short month rather than clamping to its end.
    """
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    first_of_month = value.replace(year=year, month=month, day=1)
    return first_of_month + timedelta(days=value.day - 1)


def add_years(value: datetime.datetime, years: int) -> datetime.datetime:
    # Feb 29 rolls to Mar 1 in a non-leap year.
    return add_months(value, 12 * years)


# --- Recurrence rules ---

@dataclass(frozen=True)
class NoRecurrence:
    """A one-off training."""

    def next_after(self, current):
        return None


@dataclass(frozen=True)
class Weekly:
    interval: int = 1

    def next_after(self, current):
        return current + timedelta(days=7 * self.interval)


@dataclass(frozen=True)
class Biweekly:
    """Every 14 days; any stored interval is ignored."""

    def next_after(self, current):
        return current + timedelta(days=14)


@dataclass(frozen=True)
class Monthly:
    interval: int = 1

    def next_after(self, current):
        return add_months(current, self.interval)


@dataclass(frozen=True)
class Yearly:
    interval: int = 1

    def next_after(self, current):
        return add_years(current, self.interval)


@dataclass(frozen=True)
class UnknownRecurrence:
    """A rule type nobody recognises. The series ends after its anchor."""
    type_name: str = ''

    def next_after(self, current):
        return None


RULE_TYPES = {
    'none': NoRecurrence,
    'weekly': Weekly,
    'biweekly': Biweekly,
    'monthly': Monthly,
    'yearly': Yearly,
    'annual': Yearly,
}


def coerce_interval(raw) -> int:
    """Intervals below 1 or that are not numbers fall back to 1."""
    try:
        interval = int(float(raw or 1))
    except (TypeError, ValueError, OverflowError):
        return 1
    return interval if interval >= 1 else 1


def build_rule(type_name, interval=1):
    """Maps a stored ``type``/``interval`` pair onto a rule object."""
    key = str(type_name or 'none').strip().lower()
    rule_class = RULE_TYPES.get(key)
    if rule_class is None:
        return UnknownRecurrence(type_name=key)
    if rule_class in (Weekly, Monthly, Yearly):
        return rule_class(interval=coerce_interval(interval))
    return rule_class()


# --- Instances ---

@dataclass(frozen=True)
class TrainingInstance:
    instance_id: str
    training_id: str
    title: str
    start: datetime.datetime
    end: datetime.datetime
    location_id: str = ''
    head_coach_id: str = ''
    assistant_coach_ids: tuple = ()
    player_ids: tuple = ()
    notes: str = ''

    @property
    def date_key(self):
        return format_date(self.start)

    @property
    def time_range(self):
        return f"{format_time(self.start)}–{format_time(self.end)}"

    def to_dict(self):
        return {
            'instanceId': self.instance_id,
            'trainingId': self.training_id,
            'title': self.title,
            'start': self.start.isoformat(timespec='minutes'),
            'end': self.end.isoformat(timespec='minutes'),
            'locationId': self.location_id,
            'headCoachId': self.head_coach_id,
            'assistantCoachIds': list(self.assistant_coach_ids),
            'playerIds': list(self.player_ids),
            'notes': self.notes,
        }


def format_date(value):
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def format_time(value):
    return f"{value.hour:02d}:{value.minute:02d}"


def make_instance_id(training_id, start):
    return f"{training_id}__{format_date(start)}_{format_time(start).replace(':', '')}"


def _make_instance(definition, start):
    try:
        end = start + timedelta(minutes=definition.duration_min)
    except OverflowError:
        end = datetime.datetime.max
    return TrainingInstance(
        instance_id=make_instance_id(definition.id, start),
        training_id=definition.id,
        title=definition.title,
        start=start,
        end=end,
        location_id=definition.location_id,
        head_coach_id=definition.head_coach_id,
        assistant_coach_ids=tuple(definition.assistant_coach_ids),
        player_ids=tuple(definition.player_ids),
        notes=definition.notes,
    )


def expand_definition(definition, from_dt, to_dt) -> List[TrainingInstance]:
    """Instances of a single definition inside ``[from_dt, to_dt]``, in series order."""
    parsed = parse_local_datetime(definition.start)
    if not parsed.ok:
        logger.debug("Skipping training %s: %s", definition.id, parsed.error)
        return []
    anchor = parsed.value
    recurrence = definition.recurrence
    rule = build_rule(recurrence.type, recurrence.interval)

    if isinstance(rule, NoRecurrence):
        if from_dt <= anchor <= to_dt:
            return [_make_instance(definition, anchor)]
        return []

    parsed_until = parse_until(recurrence.until)
    if parsed_until.error:
        # Nothing compares below an invalid bound, so the series is empty.
        logger.debug("Skipping training %s: %s", definition.id, parsed_until.error)
        return []
    until = parsed_until.value or to_dt
    emitted = []
    current = anchor
    visited = 0
    while current is not None and current <= to_dt and current <= until and visited < MAX_OCCURRENCES:
        if current >= from_dt:
            emitted.append(_make_instance(definition, current))
        try:
            current = rule.next_after(current)
        except (ValueError, OverflowError):
            # Stepped past the last representable date.
            current = None
        visited += 1

    if isinstance(rule, UnknownRecurrence):
        logger.debug("Training %s has unknown recurrence type '%s'", definition.id, rule.type_name)
    elif visited >= MAX_OCCURRENCES:
        logger.debug("Training %s truncated after %d occurrences", definition.id, MAX_OCCURRENCES)
    return emitted


def expand_trainings(definitions: Iterable, from_dt: datetime.datetime, to_dt: datetime.datetime) -> List[TrainingInstance]:
    """
    Expands every definition over the inclusive window ``[from_dt, to_dt]``.

    The result is sorted by start time. Instances that start together keep
    the order of their definitions in the input.
    """
    instances = []
    for definition in definitions:
        instances.extend(expand_definition(definition, from_dt, to_dt))
    instances.sort(key=lambda instance: instance.start)
    return instances
