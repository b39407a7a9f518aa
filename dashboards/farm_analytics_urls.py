"""
Farm Analytics URL Routes

All endpoints require authentication and return data scoped to the
requesting farmer.
"""

from django.urls import path
from .farm_analytics_views import (
    OverviewAnalyticsView,
    MonthlyRevenueView,
    CropProfitabilityView,
    CropPerformanceView,
    CropFinancialSummaryView,
    SalesDistributionView,
    SeasonalPerformanceView,
    ExpenditureAnalysisView,
    DiagnosisStatsView,
)

app_name = 'farm_analytics'

urlpatterns = [
    path('overview/', OverviewAnalyticsView.as_view(), name='overview'),
    path('revenue/monthly/', MonthlyRevenueView.as_view(), name='monthly-revenue'),

    # Crop-level reports
    path('crops/profitability/', CropProfitabilityView.as_view(), name='crop-profitability'),
    path('crops/performance/', CropPerformanceView.as_view(), name='crop-performance'),
    path('crops/financial-summary/', CropFinancialSummaryView.as_view(), name='crop-financial-summary'),

    path('sales/distribution/', SalesDistributionView.as_view(), name='sales-distribution'),
    path('seasonal/', SeasonalPerformanceView.as_view(), name='seasonal'),
    path('expenditure/', ExpenditureAnalysisView.as_view(), name='expenditure'),
    path('diagnosis/', DiagnosisStatsView.as_view(), name='diagnosis'),
]
