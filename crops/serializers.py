"""
Serializers for Crop Tracking.
"""

from rest_framework import serializers

from core.parsing import parse_number
from .models import Crop


class CropSerializer(serializers.ModelSerializer):
    """Crop with its derived progress (progress is never accepted as input)"""
    field_size_value = serializers.FloatField(read_only=True)

    class Meta:
        model = Crop
        fields = [
            'id', 'name', 'crop_type', 'variety', 'field_size', 'field_size_value',
            'location', 'current_stage', 'progress', 'start_date',
            'expected_harvest', 'when_to_pluck', 'notes',
            'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'progress', 'created_at', 'updated_at']

    def validate_field_size(self, value):
        if parse_number(value) <= 0:
            raise serializers.ValidationError(
                "Field size must start with a positive number, e.g. '2.5 acres'"
            )
        return value

    def validate(self, attrs):
        start = attrs.get('start_date', getattr(self.instance, 'start_date', None))
        harvest = attrs.get('expected_harvest', getattr(self.instance, 'expected_harvest', None))
        if start and harvest and harvest < start:
            raise serializers.ValidationError({
                'expected_harvest': "Expected harvest cannot be before the start date"
            })
        return attrs


class HarvestCalendarQuerySerializer(serializers.Serializer):
    year = serializers.IntegerField(required=False, min_value=1900, max_value=2100)
    month = serializers.IntegerField(required=False, min_value=1, max_value=12)
