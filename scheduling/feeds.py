from datetime import datetime, timedelta

import icalendar
from django.conf import settings
from django.http import HttpResponse, JsonResponse

from .document import DocumentError
from .recurrence import expand_trainings
from .services import ScheduleService, get_document_store
from .utils import apply_filters


def build_schedule_calendar(document, instances, now):
    cal = icalendar.Calendar()
    cal.add('prodid', '-//ClubSync//clubsync//EN')
    cal.add('version', '2.0')
    cal.add('X-WR-CALNAME', getattr(settings, 'SITE_NAME', 'ClubSync') + ' Trainings')
    cal.add('X-WR-TIMEZONE', settings.TIME_ZONE)

    for instance in instances:
        details = ScheduleService.instance_details(instance, document)
        event = icalendar.Event()
        event.add('summary', instance.title)
        # Floating times: the schedule is local wall-clock.
        event.add('dtstart', instance.start)
        event.add('dtend', instance.end)
        event.add('dtstamp', now)
        if details['location_name']:
            event.add('location', details['location_name'])

        lines = []
        if details['head_coach_name']:
            lines.append(f"Coach: {details['head_coach_name']}")
        if details['assistant_names']:
            lines.append(f"Assistants: {', '.join(details['assistant_names'])}")
        if instance.notes:
            lines.append(instance.notes)
        if lines:
            event.add('description', "\n".join(lines))

        # Stable per occurrence so re-subscribing overwrites rather than duplicates.
        event.add('uid', f"{instance.instance_id}@clubsync")
        event.add('sequence', 0)
        cal.add_component(event)
    return cal


def schedule_feed(request):
    """iCalendar feed of the public window, honouring the same filters as the page."""
    try:
        document = get_document_store().load()
    except DocumentError as e:
        return JsonResponse({'status': 'error', 'message': str(e)}, status=503)

    now = datetime.now()
    horizon = now + timedelta(days=document.settings.public_days_ahead)
    instances = apply_filters(
        expand_trainings(document.trainings, now, horizon),
        coach_id=request.GET.get('coach') or None,
        location_id=request.GET.get('location') or None,
        player_id=request.GET.get('player') or None,
    )
    cal = build_schedule_calendar(document, instances, now)

    response = HttpResponse(cal.to_ical(), content_type='text/calendar; charset=utf-8')
    response['Content-Disposition'] = 'inline; filename=training_schedule.ics'
    return response
