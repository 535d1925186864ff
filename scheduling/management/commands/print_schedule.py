import json
from datetime import datetime, timedelta

from django.core.management.base import BaseCommand, CommandError

from scheduling.document import DocumentError
from scheduling.recurrence import expand_trainings, parse_local_datetime
from scheduling.services import ScheduleService, get_document_store
from scheduling.utils import apply_filters


class Command(BaseCommand):
    help = 'Prints the expanded training instances for a date range.'

    def add_arguments(self, parser):
        parser.add_argument('--from', dest='from_dt', help='Start of the range (YYYY-MM-DDTHH:MM). Defaults to now.')
        parser.add_argument('--to', dest='to_dt', help='End of the range. Defaults to publicDaysAhead days after the start.')
        parser.add_argument('--coach', help='Only trainings with this coach (head or assistant).')
        parser.add_argument('--location', help='Only trainings at this location.')
        parser.add_argument('--player', help='Only trainings with this player on the roster.')
        parser.add_argument('--json', action='store_true', help='Print the instances as JSON.')

    def _parse(self, value, label):
        parsed = parse_local_datetime(value)
        if not parsed.ok:
            raise CommandError(f'Invalid --{label} value "{value}": {parsed.error}')
        return parsed.value

    def handle(self, *args, **options):
        try:
            document = get_document_store().load()
        except DocumentError as e:
            raise CommandError(str(e))

        from_dt = self._parse(options['from_dt'], 'from') if options['from_dt'] else datetime.now()
        if options['to_dt']:
            to_dt = self._parse(options['to_dt'], 'to')
        else:
            to_dt = from_dt + timedelta(days=document.settings.public_days_ahead)
        if from_dt > to_dt:
            raise CommandError('--from cannot be after --to.')

        instances = apply_filters(
            expand_trainings(document.trainings, from_dt, to_dt),
            coach_id=options['coach'],
            location_id=options['location'],
            player_id=options['player'],
        )

        if options['json']:
            self.stdout.write(json.dumps([instance.to_dict() for instance in instances], indent=2, ensure_ascii=False))
            return

        self.stdout.write(self.style.SUCCESS(f"--- {len(instances)} trainings from {from_dt:%Y-%m-%d %H:%M} to {to_dt:%Y-%m-%d %H:%M} ---"))
        if not instances:
            self.stdout.write(self.style.WARNING("No trainings in this range."))
        for instance in instances:
            details = ScheduleService.instance_details(instance, document)
            self.stdout.write(
                f"{instance.date_key}  {instance.time_range}  {instance.title}"
                f"  | {details['location_name'] or '-'} | {details['head_coach_name'] or '-'}"
            )
