# scheduling/views.py
import json
import logging
from datetime import datetime

from django.conf import settings
from django.http import HttpResponse, JsonResponse
from django.shortcuts import render
from django.views.decorators.csrf import csrf_exempt

from .document import DocumentError, parse_document
from .publishing import PUBLISH_KEY_HEADER, publish_key_matches
from .services import ScheduleService, get_document_store
from .utils import month_weeks, parse_month_param, shift_month

logger = logging.getLogger(__name__)


def homepage(request):
    """
    The public schedule: a month calendar, the upcoming list and headline counts.
    Filters come from the ``coach``, ``location`` and ``player`` query values.
    """
    now = datetime.now()
    try:
        year, month = parse_month_param(request.GET.get('month'), now)
    except ValueError as e:
        return JsonResponse({'status': 'error', 'message': str(e)}, status=400)

    try:
        document = get_document_store().load()
    except DocumentError as e:
        logger.error(f"[Homepage] Could not load the club document: {e}")
        return render(request, 'scheduling/public_schedule.html', {'page_title': 'Training Schedule', 'load_error': str(e)}, status=503)

    filters = {
        'coach_id': request.GET.get('coach') or None,
        'location_id': request.GET.get('location') or None,
        'player_id': request.GET.get('player') or None,
    }
    schedule = ScheduleService.build_public_schedule(document, now, year=year, month=month, **filters)
    calendar_days = schedule['calendar_days']
    weeks = [
        [{'date': day, 'instances': calendar_days.get(day, []) if day else []} for day in week]
        for week in month_weeks(year, month)
    ]
    upcoming = [
        {'instance': instance, 'details': ScheduleService.instance_details(instance, document)}
        for instance in schedule['upcoming']
    ]
    prev_year, prev_month = shift_month(year, month, -1)
    next_year, next_month = shift_month(year, month, 1)

    context = {
        'page_title': 'Training Schedule',
        'month_label': f"{year:04d}-{month:02d}",
        'prev_month': f"{prev_year:04d}-{prev_month:02d}",
        'next_month': f"{next_year:04d}-{next_month:02d}",
        'weeks': weeks,
        'upcoming': upcoming,
        'kpis': schedule['kpis'],
        'coaches': document.coaches,
        'locations': document.locations,
        'players': document.players,
        'selected': filters,
    }
    return render(request, 'scheduling/public_schedule.html', context)


def _publish_reply(payload, status):
    return JsonResponse(payload, status=status)


@csrf_exempt
def publish_document(request):
    """
    Receives a published document: ``POST {"db": {...}}`` with the shared key
    in the ``X-Publish-Key`` header. The stored document is replaced wholesale.
    """
    if request.method == 'OPTIONS':
        return HttpResponse(status=204)
    if request.method != 'POST':
        return _publish_reply({'error': 'Method not allowed'}, status=405)

    expected_key = getattr(settings, 'PUBLISH_KEY', '')
    if not expected_key:
        return _publish_reply({'error': 'Missing PUBLISH_KEY setting'}, status=500)
    if not publish_key_matches(request.headers.get(PUBLISH_KEY_HEADER, ''), expected_key):
        logger.warning("[Publish] Rejected publish attempt with a wrong key")
        return _publish_reply({'error': 'Unauthorized'}, status=401)

    try:
        payload = json.loads(request.body or b'{}')
    except (json.JSONDecodeError, UnicodeDecodeError):
        payload = {}
    db = payload.get('db') if isinstance(payload, dict) else None
    if not isinstance(db, dict):
        return _publish_reply({'error': 'Body must be JSON: { db: {...} }'}, status=400)

    try:
        document = parse_document(db)
        get_document_store().save(document)
    except DocumentError as e:
        return _publish_reply({'error': str(e)}, status=400)
    except OSError as e:
        logger.error(f"[Publish] Could not save the club document: {e}")
        return _publish_reply({'error': 'Could not save the document', 'details': str(e)}, status=500)

    logger.info(f"[Publish] Document published with {len(document.trainings)} trainings")
    return _publish_reply({'ok': True, 'trainings': len(document.trainings)}, status=200)
