import json
import logging
import os
import tempfile
from datetime import datetime, timedelta
from pathlib import Path

from django.conf import settings

from .document import DocumentError, parse_document
from .recurrence import expand_trainings
from .stats import schedule_kpis
from .utils import apply_filters, calendar_window, group_by_day, window_instances

logger = logging.getLogger(__name__)

UPCOMING_LIMIT = 40
# How far before the 1st of the current month the public expansion starts.
LOOKBACK_DAYS = 10


class DocumentStore:
    """Reads and writes the club document as a JSON file."""

    def __init__(self, path):
        self.path = Path(path)

    def load(self):
        try:
            raw = self.path.read_text(encoding='utf-8')
        except FileNotFoundError:
            raise DocumentError(f"No club document at {self.path}.")
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise DocumentError(f"Club document at {self.path} is not valid JSON: {e}") from e
        return parse_document(data)

    def save(self, document):
        """Replaces the stored document wholesale, via a temp file and rename."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        text = json.dumps(document.to_dict(), indent=2, ensure_ascii=False) + "\n"
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix='.db-', suffix='.json')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as handle:
                handle.write(text)
            os.replace(tmp_name, self.path)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
        logger.info("Saved club document to %s (%d trainings)", self.path, len(document.trainings))


def get_document_store():
    return DocumentStore(settings.CLUB_DOCUMENT_PATH)


class ScheduleService:
    @staticmethod
    def build_public_schedule(document, now, coach_id=None, location_id=None, player_id=None, year=None, month=None):
        """
        Assembles everything the public schedule page shows.

        The calendar covers the viewed month (the current one by default);
        the upcoming list runs from ``now`` to ``publicDaysAhead`` days ahead.
        KPIs are counted before the filters are applied.
        """
        year = year or now.year
        month = month or now.month
        horizon = now + timedelta(days=document.settings.public_days_ahead)
        cal_from, cal_to = calendar_window(year, month)

        expand_from = min(datetime(now.year, now.month, 1) - timedelta(days=LOOKBACK_DAYS), cal_from)
        expand_to = max(horizon, cal_to)
        instances = expand_trainings(document.trainings, expand_from, expand_to)
        filtered = apply_filters(instances, coach_id=coach_id, location_id=location_id, player_id=player_id)

        return {
            'year': year,
            'month': month,
            'horizon': horizon,
            'calendar_days': group_by_day(window_instances(filtered, cal_from, cal_to)),
            'upcoming': window_instances(filtered, now, horizon)[:UPCOMING_LIMIT],
            'kpis': schedule_kpis(document, window_instances(instances, now, horizon), now),
        }

    @staticmethod
    def instance_details(instance, document):
        """
        Resolves the ids on an instance to display names.

        Ids that no longer exist in the document come back empty rather than
        failing.
        """
        locations = document.locations_by_id()
        coaches = document.coaches_by_id()
        players = document.players_by_id()
        location = locations.get(instance.location_id)
        head_coach = coaches.get(instance.head_coach_id)
        return {
            'location_name': location.name if location else '',
            'location_address': location.address if location else '',
            'maps_url': location.maps_url if location else '',
            'head_coach_name': head_coach.name if head_coach else '',
            'assistant_names': [coaches[cid].name for cid in instance.assistant_coach_ids if cid in coaches],
            'player_names': [players[pid].name for pid in instance.player_ids if pid in players],
        }
