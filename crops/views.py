"""
Views for Crop Tracking.

All views are owner-scoped: a farmer only sees and edits their own crops.

API Endpoints:
- /api/crops/ - List/create crops
- /api/crops/{id}/ - Retrieve/update/delete a crop
- /api/crops/due-for-harvest/ - Crops whose pluck date is coming up
- /api/crops/harvest-calendar/ - Planting and harvest events for a month
"""

import calendar
import logging
from collections import defaultdict
from datetime import date, timedelta

import django_filters
from django.conf import settings
from django.utils import timezone
from rest_framework import generics, permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from core.scoping import OwnerScopedMixin
from .models import Crop, CropStage
from .serializers import CropSerializer, HarvestCalendarQuerySerializer

logger = logging.getLogger(__name__)


class CropFilter(django_filters.FilterSet):
    """Crop list filters; `stage` matches the current growth stage."""
    stage = django_filters.ChoiceFilter(field_name='current_stage', choices=CropStage.choices)

    class Meta:
        model = Crop
        fields = ['crop_type']


class CropListCreateView(OwnerScopedMixin, generics.ListCreateAPIView):
    """
    GET /api/crops/
    POST /api/crops/

    Query Parameters:
        stage (str): filter by current stage
        crop_type (str): filter by crop type
    """
    queryset = Crop.objects.all()
    serializer_class = CropSerializer
    filterset_class = CropFilter

    def get_queryset(self):
        return super().get_queryset().order_by('-created_at')

    def perform_create(self, serializer):
        super().perform_create(serializer)
        logger.info("Crop %s created by user %s", serializer.instance.id, self.request.user.pk)


class CropDetailView(OwnerScopedMixin, generics.RetrieveUpdateDestroyAPIView):
    """
    GET/PUT/PATCH/DELETE /api/crops/{id}/

    Deleting a crop keeps its sales (their crop becomes empty) and re-splits
    any field-size expenditures it was part of.
    """
    queryset = Crop.objects.all()
    serializer_class = CropSerializer

    def perform_destroy(self, instance):
        logger.info("Crop %s deleted by user %s", instance.id, self.request.user.pk)
        instance.delete()


class DueForHarvestView(OwnerScopedMixin, generics.ListAPIView):
    """
    GET /api/crops/due-for-harvest/?days=7

    Crops not yet harvested whose pluck date falls between today and
    today + days (inclusive).
    """
    queryset = Crop.objects.all()
    serializer_class = CropSerializer
    pagination_class = None

    def get_days(self):
        raw = self.request.query_params.get('days')
        if raw in (None, ''):
            return settings.HARVEST_DUE_DAYS_DEFAULT
        return int(raw)

    def list(self, request, *args, **kwargs):
        try:
            days = self.get_days()
        except ValueError:
            return Response(
                {'error': 'days must be a whole number', 'code': 'INVALID_PARAMETER'},
                status=status.HTTP_400_BAD_REQUEST
            )
        if days < 0:
            return Response(
                {'error': 'days cannot be negative', 'code': 'INVALID_PARAMETER'},
                status=status.HTTP_400_BAD_REQUEST
            )

        today = timezone.localdate()
        queryset = (
            self.get_queryset()
            .exclude(current_stage=CropStage.HARVESTED)
            .filter(when_to_pluck__gte=today, when_to_pluck__lte=today + timedelta(days=days))
            .order_by('when_to_pluck', 'name')
        )
        serializer = self.get_serializer(queryset, many=True)
        return Response({
            'days': days,
            'count': len(serializer.data),
            'crops': serializer.data,
        })


class HarvestCalendarView(APIView):
    """
    GET /api/crops/harvest-calendar/?year=2024&month=3

    Planting (start_date), expected harvest and pluck events in one month,
    grouped by day. Defaults to the current month.
    """
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        serializer = HarvestCalendarQuerySerializer(data=request.query_params)
        if not serializer.is_valid():
            return Response({
                'error': 'Invalid query parameters',
                'code': 'INVALID_PARAMETER',
                'details': serializer.errors,
            }, status=status.HTTP_400_BAD_REQUEST)

        today = timezone.localdate()
        year = serializer.validated_data.get('year', today.year)
        month = serializer.validated_data.get('month', today.month)
        first = date(year, month, 1)
        last = date(year, month, calendar.monthrange(year, month)[1])

        events = defaultdict(list)
        for crop in Crop.objects.filter(owner=request.user):
            for event, day in (
                ('planting', crop.start_date),
                ('expected_harvest', crop.expected_harvest),
                ('pluck', crop.when_to_pluck),
            ):
                if day is not None and first <= day <= last:
                    events[day].append({
                        'event': event,
                        'crop_id': str(crop.id),
                        'name': crop.name,
                        'variety': crop.variety,
                        'current_stage': crop.current_stage,
                    })

        days = [
            {'date': day.isoformat(), 'events': events[day]}
            for day in sorted(events)
        ]
        return Response({
            'year': year,
            'month': month,
            'days': days,
            'total_events': sum(len(entry['events']) for entry in days),
        })
