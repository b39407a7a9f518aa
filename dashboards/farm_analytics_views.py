"""
Farm Analytics Views

API endpoints for per-farmer analytics reports.

Endpoints:
- GET /api/analytics/overview/ - Revenue, expenditure, crop mix
- GET /api/analytics/revenue/monthly/ - Monthly revenue trend
- GET /api/analytics/crops/profitability/ - Profit per crop
- GET /api/analytics/crops/performance/ - Schedule and performance scores
- GET /api/analytics/crops/financial-summary/ - One crop's ledger
- GET /api/analytics/sales/distribution/ - Revenue share breakdown
- GET /api/analytics/seasonal/ - Kharif / Rabi / Zaid comparison
- GET /api/analytics/expenditure/ - Spending breakdown
- GET /api/analytics/diagnosis/ - Diagnosis statistics

Errors are returned as ``{'error': <message>, 'code': <CODE>}``.
"""

import logging
from django.conf import settings
from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from .services.date_ranges import resolve_date_range
from .services.exceptions import AggregationFailure, AnalyticsError
from .services.farm_analytics import FarmAnalyticsService
from .farm_analytics_serializers import (
    CropFinancialSummaryQuerySerializer,
    CropPerformanceQuerySerializer,
    CropProfitabilityQuerySerializer,
    DateRangeQuerySerializer,
    SalesDistributionQuerySerializer,
    YearQuerySerializer,
)

logger = logging.getLogger(__name__)


class BaseFarmAnalyticsView(APIView):
    """
    Base class for farm analytics views.

    Subclasses set ``query_serializer_class`` and implement ``get_report``.
    """
    permission_classes = [IsAuthenticated]
    query_serializer_class = DateRangeQuerySerializer

    def get_service(self, request):
        """Get analytics service for the authenticated user"""
        return FarmAnalyticsService(request.user)

    def pop_date_range(self, params):
        """Remove the date parameters from ``params`` and resolve them."""
        return resolve_date_range(
            preset=params.pop('preset', None),
            start_date=params.pop('start_date', None),
            end_date=params.pop('end_date', None),
        )

    def get_report(self, service, params):
        raise NotImplementedError

    def error_response(self, exc: AnalyticsError):
        data = exc.as_response_data()
        if isinstance(exc, AggregationFailure) and settings.DEBUG and exc.cause is not None:
            data['details'] = str(exc.cause)
        return Response(data, status=exc.status_code)

    def get(self, request):
        serializer = self.query_serializer_class(data=request.query_params)
        if not serializer.is_valid():
            return Response({
                'error': 'Invalid query parameters',
                'code': 'INVALID_PARAMETER',
                'details': serializer.errors,
            }, status=status.HTTP_400_BAD_REQUEST)

        params = dict(serializer.validated_data)
        try:
            report = self.get_report(self.get_service(request), params)
        except AnalyticsError as exc:
            logger.info(
                "%s rejected for user %s: %s (%s)",
                self.__class__.__name__, request.user.pk, exc.message, exc.code
            )
            return self.error_response(exc)
        return Response(report)


class OverviewAnalyticsView(BaseFarmAnalyticsView):
    """
    GET /api/analytics/overview/

    Query Parameters:
        preset, start_date, end_date: optional date filter for sales and
        expenditures
    """

    def get_report(self, service, params):
        return service.get_overview(self.pop_date_range(params))


class MonthlyRevenueView(BaseFarmAnalyticsView):
    """
    GET /api/analytics/revenue/monthly/?year=2024

    Twelve monthly entries of revenue, sale count, new crops and growth rate.
    """
    query_serializer_class = YearQuerySerializer

    def get_report(self, service, params):
        return service.get_monthly_revenue(year=params.get('year'))


class CropProfitabilityView(BaseFarmAnalyticsView):
    """
    GET /api/analytics/crops/profitability/

    Query Parameters:
        preset, start_date, end_date
        sort_by (str): any numeric column or 'crop' (default: profit)
        sort_order (str): asc or desc (default: desc)
    """
    query_serializer_class = CropProfitabilityQuerySerializer

    def get_report(self, service, params):
        date_range = self.pop_date_range(params)
        return service.get_crop_profitability(date_range, **params)


class CropPerformanceView(BaseFarmAnalyticsView):
    """
    GET /api/analytics/crops/performance/

    Query Parameters:
        preset, start_date, end_date: filter crops by when they were added
        sort_by (str): default progress
        sort_order (str): asc or desc (default: desc)
    """
    query_serializer_class = CropPerformanceQuerySerializer

    def get_report(self, service, params):
        date_range = self.pop_date_range(params)
        return service.get_crop_performance(date_range, **params)


class CropFinancialSummaryView(BaseFarmAnalyticsView):
    """
    GET /api/analytics/crops/financial-summary/?crop_id=<uuid>

    Query Parameters:
        crop_id (uuid): required
        preset, start_date, end_date
        page (int), page_size (int): line-item pagination
    """
    query_serializer_class = CropFinancialSummaryQuerySerializer

    def get_report(self, service, params):
        date_range = self.pop_date_range(params)
        return service.get_crop_financial_summary(
            crop_id=params.get('crop_id'),
            date_range=date_range,
            page=params.get('page', 1),
            page_size=params.get('page_size'),
        )


class SalesDistributionView(BaseFarmAnalyticsView):
    """
    GET /api/analytics/sales/distribution/?group_by=crop|type|variety
    """
    query_serializer_class = SalesDistributionQuerySerializer

    def get_report(self, service, params):
        date_range = self.pop_date_range(params)
        return service.get_sales_distribution(date_range, group_by=params['group_by'])


class SeasonalPerformanceView(BaseFarmAnalyticsView):
    """
    GET /api/analytics/seasonal/?year=2024

    Kharif and Zaid of ``year`` plus the Rabi season starting that November.
    """
    query_serializer_class = YearQuerySerializer

    def get_report(self, service, params):
        return service.get_seasonal_performance(year=params.get('year'))


class ExpenditureAnalysisView(BaseFarmAnalyticsView):
    """
    GET /api/analytics/expenditure/
    """

    def get_report(self, service, params):
        return service.get_expenditure_analysis(self.pop_date_range(params))


class DiagnosisStatsView(BaseFarmAnalyticsView):
    """
    GET /api/analytics/diagnosis/
    """

    def get_report(self, service, params):
        return service.get_diagnosis_stats(self.pop_date_range(params))
