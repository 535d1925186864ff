# scheduling/api_views.py
from datetime import datetime, timedelta

from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from .document import DocumentError
from .recurrence import expand_trainings
from .serializers import CalendarDaySerializer, InstanceQuerySerializer, TrainingInstanceSerializer
from .services import get_document_store
from .utils import apply_filters, calendar_window, group_by_day, parse_month_param


def _load_document():
    try:
        return get_document_store().load(), None
    except DocumentError as e:
        return None, Response({'status': 'error', 'message': str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)


class InstanceListView(APIView):
    """
    A read-only endpoint listing expanded training instances.

    Defaults to the public window: now until ``publicDaysAhead`` days ahead.
    """
    permission_classes = [permissions.AllowAny]

    def get(self, request):
        query = InstanceQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return Response({'status': 'error', 'message': query.errors}, status=status.HTTP_400_BAD_REQUEST)
        document, error_response = _load_document()
        if error_response:
            return error_response

        params = query.validated_data
        from_dt = params.get('from_dt') or datetime.now()
        to_dt = params.get('to_dt') or from_dt + timedelta(days=document.settings.public_days_ahead)
        instances = apply_filters(
            expand_trainings(document.trainings, from_dt, to_dt),
            coach_id=params.get('coach') or None,
            location_id=params.get('location') or None,
            player_id=params.get('player') or None,
        )
        serializer = TrainingInstanceSerializer(instances, many=True, context={'document': document})
        return Response(serializer.data)


class CalendarMonthView(APIView):
    """
    Instances for one month's calendar grid, grouped by day.
    """
    permission_classes = [permissions.AllowAny]

    def get(self, request):
        try:
            year, month = parse_month_param(request.query_params.get('month'), datetime.now())
        except ValueError as e:
            return Response({'status': 'error', 'message': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        document, error_response = _load_document()
        if error_response:
            return error_response

        from_dt, to_dt = calendar_window(year, month)
        instances = apply_filters(
            expand_trainings(document.trainings, from_dt, to_dt),
            coach_id=request.query_params.get('coach') or None,
            location_id=request.query_params.get('location') or None,
            player_id=request.query_params.get('player') or None,
        )
        days = [{'date': day, 'instances': items} for day, items in group_by_day(instances).items()]
        serializer = CalendarDaySerializer(days, many=True, context={'document': document})
        return Response({'month': f"{year:04d}-{month:02d}", 'days': serializer.data})
