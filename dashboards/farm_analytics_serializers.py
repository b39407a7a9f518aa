"""
Farm Analytics Serializers

Query-parameter serializers for the farm analytics endpoints. Dates and
presets are passed through as text so the date-range resolver can report
which field was malformed.
"""

from django.conf import settings
from rest_framework import serializers

from .services.farm_analytics import (
    DISTRIBUTION_GROUPS,
    PERFORMANCE_SORT_FIELDS,
    PROFITABILITY_SORT_FIELDS,
    SORT_ORDERS,
)


class DateRangeQuerySerializer(serializers.Serializer):
    """Date range query parameters"""
    preset = serializers.CharField(
        required=False,
        allow_blank=True,
        help_text="today, yesterday, thisWeek, lastWeek, thisMonth, lastMonth, "
                  "thisQuarter, thisYear or lastYear. Wins over start_date/end_date."
    )
    start_date = serializers.CharField(required=False, allow_blank=True)
    end_date = serializers.CharField(required=False, allow_blank=True)


class YearQuerySerializer(serializers.Serializer):
    """Calendar year selector (defaults to the current year)"""
    year = serializers.IntegerField(required=False, min_value=1900, max_value=2100)


class CropProfitabilityQuerySerializer(DateRangeQuerySerializer):
    sort_by = serializers.ChoiceField(choices=PROFITABILITY_SORT_FIELDS, default='profit')
    sort_order = serializers.ChoiceField(choices=SORT_ORDERS, default='desc')


class CropPerformanceQuerySerializer(DateRangeQuerySerializer):
    sort_by = serializers.ChoiceField(choices=PERFORMANCE_SORT_FIELDS, default='progress')
    sort_order = serializers.ChoiceField(choices=SORT_ORDERS, default='desc')


class SalesDistributionQuerySerializer(DateRangeQuerySerializer):
    group_by = serializers.ChoiceField(choices=list(DISTRIBUTION_GROUPS), default='crop')


class CropFinancialSummaryQuerySerializer(DateRangeQuerySerializer):
    # Presence is checked by the report so a missing id reads MISSING_PARAMETER
    crop_id = serializers.CharField(required=False, allow_blank=True)
    page = serializers.IntegerField(required=False, default=1, min_value=1)
    page_size = serializers.IntegerField(required=False, min_value=1)

    def validate_page_size(self, value):
        if value > settings.ANALYTICS_MAX_PAGE_SIZE:
            raise serializers.ValidationError(
                f"page_size cannot exceed {settings.ANALYTICS_MAX_PAGE_SIZE}"
            )
        return value
