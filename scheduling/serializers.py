# scheduling/serializers.py
from rest_framework import serializers

from .services import ScheduleService


class InstanceQuerySerializer(serializers.Serializer):
    """
    Validates the query string of the instance API.
    """
    start = serializers.DateTimeField(required=False, source='from_dt')
    end = serializers.DateTimeField(required=False, source='to_dt')
    coach = serializers.CharField(required=False, allow_blank=True)
    location = serializers.CharField(required=False, allow_blank=True)
    player = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):
        from_dt, to_dt = attrs.get('from_dt'), attrs.get('to_dt')
        if from_dt and to_dt and from_dt > to_dt:
            raise serializers.ValidationError("'start' cannot be after 'end'.")
        return attrs


class TrainingInstanceSerializer(serializers.Serializer):
    """
    Serializer for an expanded training instance. When a ``document`` is in
    the context, referenced ids are resolved to names as well.
    """
    instanceId = serializers.CharField(source='instance_id')
    trainingId = serializers.CharField(source='training_id')
    title = serializers.CharField()
    start = serializers.DateTimeField()
    end = serializers.DateTimeField()
    locationId = serializers.CharField(source='location_id')
    headCoachId = serializers.CharField(source='head_coach_id')
    assistantCoachIds = serializers.ListField(source='assistant_coach_ids', child=serializers.CharField())
    playerIds = serializers.ListField(source='player_ids', child=serializers.CharField())
    notes = serializers.CharField(allow_blank=True)
    details = serializers.SerializerMethodField()

    def get_details(self, instance):
        document = self.context.get('document')
        if document is None:
            return None
        return ScheduleService.instance_details(instance, document)


class CalendarDaySerializer(serializers.Serializer):
    date = serializers.DateField()
    instances = TrainingInstanceSerializer(many=True)
