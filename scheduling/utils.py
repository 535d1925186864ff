# scheduling/utils.py

import calendar
from collections import OrderedDict
from datetime import date, datetime, time, timedelta


def get_month_start_end(year, month):
    """Returns the first and last day of a given month and year."""
    _, num_days = calendar.monthrange(year, month)
    start_date = date(year, month, 1)
    end_date = date(year, month, num_days)
    return start_date, end_date


def calendar_window(year, month):
    """
    The date-time range shown on a month's calendar grid.

    Runs from midnight the day before the 1st to midnight the day after the
    last day, so sessions in the spill-over cells are still picked up.
    """
    start_date, end_date = get_month_start_end(year, month)
    from_dt = datetime.combine(start_date - timedelta(days=1), time.min)
    to_dt = datetime.combine(end_date + timedelta(days=1), time.min)
    return from_dt, to_dt


def month_weeks(year, month):
    """Monday-first rows of dates for a month; cells outside the month are None."""
    return [
        [day if day.month == month else None for day in week]
        for week in calendar.Calendar(firstweekday=0).monthdatescalendar(year, month)
    ]


def shift_month(year, month, months):
    index = year * 12 + (month - 1) + months
    return index // 12, index % 12 + 1


def apply_filters(instances, coach_id=None, location_id=None, player_id=None):
    """
    Keeps the instances matching every filter that is set.

    A coach matches as head coach or as one of the assistants; a player
    matches when they are on the roster.
    """
    def matches(instance):
        if coach_id and instance.head_coach_id != coach_id and coach_id not in instance.assistant_coach_ids:
            return False
        if location_id and instance.location_id != location_id:
            return False
        if player_id and player_id not in instance.player_ids:
            return False
        return True

    return [instance for instance in instances if matches(instance)]


def window_instances(instances, from_dt, to_dt):
    """Instances starting inside the inclusive range ``[from_dt, to_dt]``."""
    return [instance for instance in instances if from_dt <= instance.start <= to_dt]


def group_by_day(instances):
    """Maps each local date to its instances, keeping their order."""
    days = OrderedDict()
    for instance in instances:
        days.setdefault(instance.start.date(), []).append(instance)
    return days


def parse_month_param(value, today):
    """Reads a ``YYYY-MM`` query value; blank means the month of ``today``."""
    if not value:
        return today.year, today.month
    try:
        year_text, month_text = value.split('-')
        year, month = int(year_text), int(month_text)
    except ValueError:
        raise ValueError(f"Invalid month '{value}', expected YYYY-MM.")
    if not 1 <= month <= 12 or not 2 <= year <= 9998:
        raise ValueError(f"Month '{value}' is out of range.")
    return year, month
