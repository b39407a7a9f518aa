"""
Farm Analytics Service

Per-farmer reports over crops, sales, expenditures and diagnoses:
1. Overview - Revenue, expenditure, profit, crop stage/type mix
2. Monthly Revenue - 12-month revenue, sales and planting trend
3. Crop Profitability - Revenue vs allocated expenses per crop
4. Sales Distribution - Revenue share by crop, crop type or variety
5. Seasonal Performance - Kharif / Rabi / Zaid comparison
6. Expenditure Analysis - Category, month, payment mode, frequency
7. Crop Financial Summary - One crop's sales and expenses, paginated
8. Crop Performance - Schedule progress, performance score, status
9. Diagnosis Stats - Severity, status and per-crop diagnosis counts

Every report is recomputed from the current records on each call and is
scoped to the service's user.
"""

import logging
import uuid
from datetime import date
from typing import Any, Dict, List, Optional

from django.conf import settings
from django.core.paginator import EmptyPage, Paginator
from django.utils import timezone

from crops.models import Crop, CropStage, CropType
from diagnosis.models import Diagnosis, DiagnosisStatus, DiagnosisType, Severity
from expenses.models import Expenditure, ExpenditureAllocation
from expenses.services import allocated_expenses_by_crop
from sales_revenue.models import Sale

from .aggregation import (
    AVG, MAX, MIN, SUM, UNKNOWN,
    GroupSpec, Measure, aggregate, index_buckets, totals, zero_filled,
)
from .date_ranges import DateRange, end_of_day, start_of_day, year_range
from .exceptions import InvalidParameter, MissingParameter, ResourceNotFound, report_operation
from . import metrics

logger = logging.getLogger(__name__)

MONTH_LABELS = ['Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun',
                'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec']

DISTRIBUTION_COLORS = ['#ef4444', '#f97316', '#eab308', '#22c55e',
                       '#8b5cf6', '#06b6d4', '#ec4899']

PROFITABILITY_SORT_FIELDS = [
    'crop', 'revenue', 'expenses', 'profit', 'margin', 'roi',
    'quantity', 'sales', 'avg_price', 'revenue_per_unit',
]

PERFORMANCE_SORT_FIELDS = [
    'name', 'progress', 'performance_score', 'expected_progress',
    'progress_variance', 'days_to_harvest', 'days_from_start',
    'total_revenue', 'total_expenses', 'net_profit', 'profit_margin', 'roi',
]

DISTRIBUTION_GROUPS = {
    'crop': 'crop_id',
    'type': 'crop__crop_type',
    'variety': 'crop__variety',
}

SORT_ORDERS = ['asc', 'desc']

TOP_N = 3


def local_date(moment) -> date:
    return timezone.localtime(moment).date()


def describe_range(date_range: Optional[DateRange]) -> Dict[str, Optional[str]]:
    if date_range is None:
        return {'start': None, 'end': None}
    return {
        'start': date_range.start.isoformat() if date_range.start else None,
        'end': date_range.end.isoformat() if date_range.end else None,
    }


def sort_rows(rows: List[Dict[str, Any]], sort_by: str, sort_order: str):
    """Stable in-place sort of report rows on one field."""
    def key(row):
        value = row.get(sort_by)
        if isinstance(value, str):
            return (0, value.lower())
        return (0, value) if value is not None else (1, 0)

    rows.sort(key=key, reverse=(sort_order == 'desc'))


def _check_choice(parameter, value, choices):
    if value not in choices:
        raise InvalidParameter(parameter, value, choices)


class FarmAnalyticsService:
    """
    Analytics reports for a single farmer.

    Usage:
        from dashboards.services.farm_analytics import FarmAnalyticsService

        service = FarmAnalyticsService(user)
        overview = service.get_overview(date_range)
        monthly = service.get_monthly_revenue(year=2024)
    """

    def __init__(self, user):
        self.user = user

    # =========================================================================
    # SCOPED QUERYSETS
    # =========================================================================

    def _crops(self, date_range: Optional[DateRange] = None):
        queryset = Crop.objects.filter(owner=self.user)
        if date_range is not None:
            queryset = queryset.filter(**date_range.filter_kwargs())
        return queryset

    def _sales(self, date_range: Optional[DateRange] = None):
        queryset = Sale.objects.filter(owner=self.user)
        if date_range is not None:
            queryset = queryset.filter(**date_range.filter_kwargs())
        return queryset

    def _expenditures(self, date_range: Optional[DateRange] = None):
        queryset = Expenditure.objects.filter(recorded_by=self.user)
        if date_range is not None:
            queryset = queryset.filter(**date_range.filter_kwargs())
        return queryset

    def _diagnoses(self, date_range: Optional[DateRange] = None):
        queryset = Diagnosis.objects.filter(owner=self.user)
        if date_range is not None:
            queryset = queryset.filter(**date_range.filter_kwargs())
        return queryset

    @staticmethod
    def _share_table(buckets, keys, total_count) -> Dict[str, Dict[str, float]]:
        """Zero-filled ``{key: {count, percentage}}`` over a closed set of keys."""
        table = {}
        for bucket in zero_filled(buckets, keys):
            table[bucket.key] = {
                'count': bucket.count,
                'percentage': metrics.round2(metrics.percentage(bucket.count, total_count)),
            }
        for bucket in buckets:
            # Stored values outside the choices
            if bucket.key not in table:
                table[bucket.key] = {
                    'count': bucket.count,
                    'percentage': metrics.round2(metrics.percentage(bucket.count, total_count)),
                }
        return table

    # =========================================================================
    # 1. OVERVIEW
    # =========================================================================

    @report_operation('overview')
    def get_overview(self, date_range: Optional[DateRange] = None) -> Dict[str, Any]:
        """
        Headline totals for the dashboard.

        The date range applies to sales and expenditures. Crop figures always
        describe every crop the farmer currently tracks.
        """
        sales = totals(
            self._sales(date_range).values('total_amount'),
            [Measure('revenue', 'total_amount')],
        )
        expenditure = totals(
            self._expenditures(date_range).values('amount'),
            [Measure('amount')],
        )

        crops = list(self._crops().values('current_stage', 'crop_type', 'progress', 'field_size'))
        crop_totals = totals(crops, [Measure('progress'), Measure('field_size')])
        by_stage = aggregate(crops, GroupSpec('current_stage', sort=False))
        by_type = aggregate(crops, GroupSpec('crop_type', sort=False))

        total_revenue = sales.sum('revenue')
        total_expenditure = expenditure.sum('amount')
        stage_counts = index_buckets(by_stage)
        ready = stage_counts.get(CropStage.HARVESTING)

        return {
            'period': describe_range(date_range),
            'total_revenue': metrics.round2(total_revenue),
            'total_sales': sales.count,
            'total_expenditure': metrics.round2(total_expenditure),
            'total_expenses': expenditure.count,
            'net_profit': metrics.round2(total_revenue - total_expenditure),
            'profit_margin': metrics.round2(metrics.profit_margin(total_revenue, total_expenditure)),
            'total_crops': crop_totals.count,
            'avg_progress': metrics.round2(crop_totals.avg('progress')),
            'total_field_size': metrics.round2(crop_totals.sum('field_size')),
            'crops_ready_to_harvest': ready.count if ready else 0,
            'crops_by_stage': self._share_table(by_stage, CropStage.values, crop_totals.count),
            'crops_by_type': self._share_table(by_type, CropType.values, crop_totals.count),
        }

    # =========================================================================
    # 2. MONTHLY REVENUE
    # =========================================================================

    @report_operation('monthly revenue')
    def get_monthly_revenue(self, year: Optional[int] = None) -> Dict[str, Any]:
        """
        Revenue, sale count and new crops for each month of ``year``.

        Always twelve entries, January first, zero-filled.
        """
        if year is None:
            year = timezone.localdate().year
        period = year_range(year)

        def month_of(record):
            return local_date(record['created_at']).month

        sales = aggregate(
            self._sales(period).values('created_at', 'total_amount'),
            GroupSpec(month_of, (Measure('revenue', 'total_amount'),), sort=False),
        )
        crops = index_buckets(aggregate(
            self._crops(period).values('created_at'),
            GroupSpec(month_of, sort=False),
        ))

        months = []
        previous_revenue = 0.0
        for bucket in zero_filled(sales, range(1, 13)):
            revenue = bucket.sum('revenue')
            crop_bucket = crops.get(bucket.key)
            months.append({
                'month': MONTH_LABELS[bucket.key - 1],
                'month_number': bucket.key,
                'revenue': metrics.round2(revenue),
                'sales': bucket.count,
                'crops': crop_bucket.count if crop_bucket else 0,
                'growth_rate': metrics.round2(metrics.growth_rate(revenue, previous_revenue)),
            })
            previous_revenue = revenue

        return {
            'year': year,
            'months': months,
            'total_revenue': metrics.round2(sum(b.sum('revenue') for b in sales)),
            'total_sales': sum(b.count for b in sales),
        }

    # =========================================================================
    # 3. CROP PROFITABILITY
    # =========================================================================

    @report_operation('crop profitability')
    def get_crop_profitability(self, date_range: Optional[DateRange] = None,
                               sort_by: str = 'profit', sort_order: str = 'desc') -> Dict[str, Any]:
        """
        Revenue against allocated expenses for every crop with activity.

        Expenses are the crop's allocation shares, not whole expenditures.
        Sales whose crop was deleted are reported under an ``Unknown`` row.
        """
        _check_choice('sort_by', sort_by, PROFITABILITY_SORT_FIELDS)
        _check_choice('sort_order', sort_order, SORT_ORDERS)

        sales = aggregate(
            self._sales(date_range).values('crop_id', 'total_amount', 'quantity', 'selling_price'),
            GroupSpec('crop_id', (
                Measure('revenue', 'total_amount'),
                Measure('quantity'),
                Measure('price', 'selling_price', (SUM, AVG, MIN, MAX)),
            ), primary='revenue'),
        )
        sales_by_crop = index_buckets(sales)
        expenses_by_crop = allocated_expenses_by_crop(self.user, date_range)

        crop_ids = [key for key in sales_by_crop if key != UNKNOWN]
        crop_ids += [key for key in expenses_by_crop if key not in sales_by_crop]
        crops = {
            crop['id']: crop
            for crop in self._crops().filter(id__in=crop_ids).values('id', 'name', 'crop_type', 'variety')
        }

        rows = []
        for crop_id in list(sales_by_crop) + [k for k in expenses_by_crop if k not in sales_by_crop]:
            bucket = sales_by_crop.get(crop_id)
            crop = crops.get(crop_id)
            revenue = bucket.sum('revenue') if bucket else 0.0
            quantity = bucket.sum('quantity') if bucket else 0.0
            expenses = expenses_by_crop.get(crop_id, 0.0)
            profit = revenue - expenses
            rows.append({
                'crop_id': str(crop_id) if crop else None,
                'crop': crop['name'] if crop else UNKNOWN,
                'type': crop['crop_type'] if crop else None,
                'variety': crop['variety'] if crop else None,
                'revenue': revenue,
                'expenses': expenses,
                'profit': profit,
                'margin': metrics.profit_margin(revenue, expenses),
                'roi': metrics.roi(profit, expenses),
                'quantity': quantity,
                'sales': bucket.count if bucket else 0,
                'avg_price': bucket.avg('price') if bucket else 0.0,
                'min_price': bucket.min('price') if bucket else 0.0,
                'max_price': bucket.max('price') if bucket else 0.0,
                'revenue_per_unit': metrics.revenue_per_unit(revenue, quantity),
            })

        sort_rows(rows, sort_by, sort_order)

        total_revenue = sum(row['revenue'] for row in rows)
        total_expenses = sum(row['expenses'] for row in rows)
        money_fields = ('revenue', 'expenses', 'profit', 'margin', 'roi', 'quantity',
                        'avg_price', 'min_price', 'max_price', 'revenue_per_unit')
        for row in rows:
            for name in money_fields:
                row[name] = metrics.round2(row[name])

        return {
            'period': describe_range(date_range),
            'sort_by': sort_by,
            'sort_order': sort_order,
            'crops': rows,
            'summary': {
                'total_revenue': metrics.round2(total_revenue),
                'total_expenses': metrics.round2(total_expenses),
                'total_profit': metrics.round2(total_revenue - total_expenses),
                'overall_margin': metrics.round2(metrics.profit_margin(total_revenue, total_expenses)),
            },
        }

    # =========================================================================
    # 4. SALES DISTRIBUTION
    # =========================================================================

    @report_operation('sales distribution')
    def get_sales_distribution(self, date_range: Optional[DateRange] = None,
                               group_by: str = 'crop') -> Dict[str, Any]:
        """Share of revenue and sales by crop, crop type or variety."""
        _check_choice('group_by', group_by, list(DISTRIBUTION_GROUPS))
        key_field = DISTRIBUTION_GROUPS[group_by]

        records = list(self._sales(date_range).values(
            'crop_id', 'crop__name', 'crop__crop_type', 'crop__variety',
            'total_amount', 'quantity', 'selling_price',
        ))
        buckets = aggregate(records, GroupSpec(key_field, (
            Measure('revenue', 'total_amount'),
            Measure('quantity'),
            Measure('price', 'selling_price', (SUM, AVG)),
        ), primary='revenue'))

        names = {r['crop_id']: r['crop__name'] for r in records if r['crop_id']}
        total_revenue = sum(b.sum('revenue') for b in buckets)
        total_sales = sum(b.count for b in buckets)

        distribution = []
        for index, bucket in enumerate(buckets):
            label = names.get(bucket.key, UNKNOWN) if group_by == 'crop' else bucket.key
            distribution.append({
                'name': label,
                'key': str(bucket.key),
                'revenue': metrics.round2(bucket.sum('revenue')),
                'revenue_percentage': metrics.round2(metrics.percentage(bucket.sum('revenue'), total_revenue)),
                'sales': bucket.count,
                'sales_percentage': metrics.round2(metrics.percentage(bucket.count, total_sales)),
                'quantity': metrics.round2(bucket.sum('quantity')),
                'avg_price': metrics.round2(bucket.avg('price')),
                'color': DISTRIBUTION_COLORS[index % len(DISTRIBUTION_COLORS)],
            })

        def top_by(field):
            ranked = sorted(distribution, key=lambda row: row[field], reverse=True)
            return [{'name': row['name'], field: row[field]} for row in ranked[:TOP_N]]

        return {
            'period': describe_range(date_range),
            'group_by': group_by,
            'total_revenue': metrics.round2(total_revenue),
            'total_sales': total_sales,
            'distribution': distribution,
            'top_by_revenue': top_by('revenue'),
            'top_by_sales': top_by('sales'),
            'top_by_quantity': top_by('quantity'),
        }

    # =========================================================================
    # 5. SEASONAL PERFORMANCE
    # =========================================================================

    @report_operation('seasonal performance')
    def get_seasonal_performance(self, year: Optional[int] = None) -> Dict[str, Any]:
        """
        Compare the three seasons that start in ``year``.

        Rabi runs from November of ``year`` to April of the next year.
        ``avg_yield`` is the average stage progress of crops planted in the
        season.
        """
        if year is None:
            year = timezone.localdate().year

        season_days = {season: metrics.season_bounds(season, year) for season in metrics.SEASONS}
        first_day = min(first for first, _ in season_days.values())
        last_day = max(last for _, last in season_days.values())
        period = DateRange(start_of_day(first_day), end_of_day(last_day))

        def season_of(record):
            return metrics.season_for(local_date(record['created_at']))

        season_keys = [(season, year) for season in metrics.SEASONS]
        sales = zero_filled(aggregate(
            self._sales(period).values('created_at', 'total_amount'),
            GroupSpec(season_of, (Measure('revenue', 'total_amount'),), sort=False),
        ), season_keys)
        expenses = zero_filled(aggregate(
            self._expenditures(period).values('created_at', 'amount'),
            GroupSpec(season_of, (Measure('amount'),), sort=False),
        ), season_keys)
        crops = zero_filled(aggregate(
            self._crops(period).values('created_at', 'progress'),
            GroupSpec(season_of, (Measure('progress'),), sort=False),
        ), season_keys)

        seasons = []
        for sale_bucket, expense_bucket, crop_bucket in zip(sales, expenses, crops):
            season, _ = sale_bucket.key
            first, last = season_days[season]
            revenue = sale_bucket.sum('revenue')
            spent = expense_bucket.sum('amount')
            seasons.append({
                'season': season,
                'start_date': first.isoformat(),
                'end_date': last.isoformat(),
                'revenue': revenue,
                'sales': sale_bucket.count,
                'expenses': spent,
                'net_profit': revenue - spent,
                'margin': metrics.profit_margin(revenue, spent),
                'avg_yield': crop_bucket.avg('progress'),
                'crops': crop_bucket.count,
            })

        best_revenue = max(seasons, key=lambda s: s['revenue'])
        best_profit = max(seasons, key=lambda s: s['net_profit'])
        has_activity = any(s['sales'] or s['expenses'] for s in seasons)

        for row in seasons:
            for name in ('revenue', 'expenses', 'net_profit', 'margin', 'avg_yield'):
                row[name] = metrics.round2(row[name])

        return {
            'year': year,
            'seasons': seasons,
            'best_revenue_season': best_revenue['season'] if best_revenue['revenue'] > 0 else None,
            'best_profit_season': best_profit['season'] if has_activity else None,
        }

    # =========================================================================
    # 6. EXPENDITURE ANALYSIS
    # =========================================================================

    @report_operation('expenditure analysis')
    def get_expenditure_analysis(self, date_range: Optional[DateRange] = None) -> Dict[str, Any]:
        """Spending broken down by category, month, payment mode and frequency."""
        amount = Measure('amount', reducers=(SUM, AVG, MIN, MAX))
        records = list(self._expenditures(date_range).values(
            'category', 'sub_category', 'amount', 'payment_mode', 'frequency', 'created_at',
        ))
        overall = totals(records, [amount])
        total_amount = overall.sum('amount')

        def bucket_row(bucket, key_name):
            return {
                key_name: bucket.key,
                'total_amount': metrics.round2(bucket.sum('amount')),
                'count': bucket.count,
                'avg_amount': metrics.round2(bucket.avg('amount')),
                'min_amount': metrics.round2(bucket.min('amount')),
                'max_amount': metrics.round2(bucket.max('amount')),
                'percentage': metrics.round2(metrics.percentage(bucket.sum('amount'), total_amount)),
            }

        categories = aggregate(records, GroupSpec('category', (amount,), primary='amount'))
        sub_categories = aggregate(records, GroupSpec(
            lambda r: (r['category'] or UNKNOWN, r['sub_category'] or UNKNOWN),
            (amount,), primary='amount',
        ))

        by_category = []
        for bucket in categories:
            row = bucket_row(bucket, 'category')
            row['sub_categories'] = []
            for sub in sub_categories:
                if sub.key[0] == bucket.key:
                    sub_row = bucket_row(sub, 'sub_category')
                    sub_row['sub_category'] = sub.key[1]
                    sub_row['percentage'] = metrics.round2(
                        metrics.percentage(sub.sum('amount'), bucket.sum('amount'))
                    )
                    row['sub_categories'].append(sub_row)
            by_category.append(row)

        months = aggregate(records, GroupSpec(
            lambda r: (local_date(r['created_at']).year, local_date(r['created_at']).month),
            (amount,), sort=False,
        ))
        by_month = []
        for bucket in sorted(months, key=lambda b: b.key):
            row_year, row_month = bucket.key
            row = bucket_row(bucket, 'label')
            row['label'] = f"{MONTH_LABELS[row_month - 1]} {row_year}"
            row['year'] = row_year
            row['month'] = row_month
            by_month.append(row)

        by_payment_mode = [
            bucket_row(b, 'payment_mode')
            for b in aggregate(records, GroupSpec('payment_mode', (amount,), primary='amount'))
        ]
        by_frequency = [
            bucket_row(b, 'frequency')
            for b in aggregate(records, GroupSpec('frequency', (amount,), primary='amount'))
        ]

        return {
            'period': describe_range(date_range),
            'summary': {
                'total_amount': metrics.round2(total_amount),
                'count': overall.count,
                'avg_amount': metrics.round2(overall.avg('amount')),
                'min_amount': metrics.round2(overall.min('amount')),
                'max_amount': metrics.round2(overall.max('amount')),
            },
            'by_category': by_category,
            'by_month': by_month,
            'by_payment_mode': by_payment_mode,
            'by_frequency': by_frequency,
            'highest_category': by_category[0]['category'] if by_category else None,
            'lowest_category': by_category[-1]['category'] if by_category else None,
        }

    # =========================================================================
    # 7. CROP FINANCIAL SUMMARY
    # =========================================================================

    def _get_crop(self, crop_id):
        try:
            crop_uuid = uuid.UUID(str(crop_id))
        except ValueError:
            raise ResourceNotFound(f"Crop {crop_id} not found") from None
        crop = self._crops().filter(pk=crop_uuid).first()
        if crop is None:
            raise ResourceNotFound(f"Crop {crop_id} not found")
        return crop

    @staticmethod
    def _paginate(queryset, page: int, page_size: int, serialize):
        paginator = Paginator(queryset, page_size)
        try:
            items = [serialize(obj) for obj in paginator.page(page).object_list]
        except EmptyPage:
            items = []
        return {
            'count': paginator.count,
            'total_pages': paginator.num_pages if paginator.count else 0,
            'page': page,
            'page_size': page_size,
            'results': items,
        }

    @report_operation('crop financial summary')
    def get_crop_financial_summary(self, crop_id=None, date_range: Optional[DateRange] = None,
                                   page: int = 1, page_size: Optional[int] = None) -> Dict[str, Any]:
        """
        One crop's revenue, allocated expenses and profit, with paginated line
        items for its sales and expense allocations.

        Raises:
            MissingParameter: ``crop_id`` not supplied.
            ResourceNotFound: no such crop for this user.
        """
        if not crop_id:
            raise MissingParameter('crop_id')

        if page_size is None:
            page_size = settings.ANALYTICS_DEFAULT_PAGE_SIZE
        page_size = max(1, min(int(page_size), settings.ANALYTICS_MAX_PAGE_SIZE))
        page = max(1, int(page))

        crop = self._get_crop(crop_id)

        sales = self._sales(date_range).filter(crop=crop).order_by('-created_at', 'id')
        allocations = (
            ExpenditureAllocation.objects
            .filter(crop=crop, expenditure__recorded_by=self.user)
            .select_related('expenditure')
            .order_by('-expenditure__created_at', 'id')
        )
        if date_range is not None:
            allocations = allocations.filter(**date_range.filter_kwargs('expenditure__created_at'))

        revenue = totals(sales.values('total_amount'), [Measure('revenue', 'total_amount')])
        expense = totals(allocations.values('allocated_amount'), [Measure('allocated', 'allocated_amount')])
        total_revenue = revenue.sum('revenue')
        total_expenses = expense.sum('allocated')
        profit = total_revenue - total_expenses

        def sale_item(sale):
            return {
                'id': str(sale.id),
                'sale_date': sale.sale_date.isoformat(),
                'created_at': sale.created_at.isoformat(),
                'quantity': sale.quantity,
                'selling_price': float(sale.selling_price),
                'total_amount': float(sale.total_amount),
                'buyer_name': sale.buyer_name,
                'payment_status': sale.payment_status,
            }

        def expense_item(allocation):
            expenditure = allocation.expenditure
            return {
                'expenditure_id': str(expenditure.id),
                'category': expenditure.category,
                'sub_category': expenditure.sub_category,
                'expense_date': expenditure.expense_date.isoformat(),
                'created_at': expenditure.created_at.isoformat(),
                'allocation_method': expenditure.allocation_method,
                'expenditure_amount': float(expenditure.amount),
                'allocated_amount': float(allocation.allocated_amount),
            }

        return {
            'period': describe_range(date_range),
            'crop': {
                'id': str(crop.id),
                'name': crop.name,
                'type': crop.crop_type,
                'variety': crop.variety,
                'current_stage': crop.current_stage,
                'field_size': crop.field_size,
            },
            'total_revenue': metrics.round2(total_revenue),
            'total_expenses': metrics.round2(total_expenses),
            'profit': metrics.round2(profit),
            'profit_margin': metrics.round2(metrics.profit_margin(total_revenue, total_expenses)),
            'roi': metrics.round2(metrics.roi(profit, total_expenses)),
            'sales': self._paginate(sales, page, page_size, sale_item),
            'expenses': self._paginate(allocations, page, page_size, expense_item),
        }

    # =========================================================================
    # 8. CROP PERFORMANCE
    # =========================================================================

    @report_operation('crop performance')
    def get_crop_performance(self, date_range: Optional[DateRange] = None,
                             sort_by: str = 'progress', sort_order: str = 'desc',
                             today: Optional[date] = None) -> Dict[str, Any]:
        """
        Schedule and financial performance of each crop.

        The date range selects crops by when they were added. Revenue and
        expenses cover every sale and allocation of the selected crops.
        """
        _check_choice('sort_by', sort_by, PERFORMANCE_SORT_FIELDS)
        _check_choice('sort_order', sort_order, SORT_ORDERS)
        if today is None:
            today = timezone.localdate()

        crops = list(self._crops(date_range))
        crop_ids = [crop.id for crop in crops]
        sales_by_crop = index_buckets(aggregate(
            self._sales().filter(crop_id__in=crop_ids).values('crop_id', 'total_amount'),
            GroupSpec('crop_id', (Measure('revenue', 'total_amount'),), sort=False),
        ))
        expenses_by_crop = allocated_expenses_by_crop(self.user, crop_ids=crop_ids)

        rows = []
        for crop in crops:
            days_from_start = metrics.days_between(crop.start_date, today)
            days_to_harvest = metrics.days_between(today, crop.expected_harvest)
            total_cycle_days = metrics.days_between(crop.start_date, crop.expected_harvest)
            expected = metrics.expected_progress(days_from_start, total_cycle_days)
            variance = metrics.progress_variance(crop.progress, expected)

            sales = sales_by_crop.get(crop.id)
            revenue = sales.sum('revenue') if sales else 0.0
            expenses = expenses_by_crop.get(crop.id, 0.0)
            net_profit = revenue - expenses

            rows.append({
                'id': str(crop.id),
                'name': crop.name,
                'type': crop.crop_type,
                'variety': crop.variety,
                'current_stage': crop.current_stage,
                'progress': crop.progress,
                'field_size': crop.field_size,
                'location': crop.location,
                'start_date': crop.start_date.isoformat(),
                'expected_harvest': crop.expected_harvest.isoformat(),
                'when_to_pluck': crop.when_to_pluck.isoformat() if crop.when_to_pluck else None,
                'days_from_start': days_from_start,
                'days_to_harvest': days_to_harvest,
                'total_cycle_days': total_cycle_days,
                'expected_progress': expected,
                'progress_variance': variance,
                'performance_score': metrics.performance_score(crop.progress, variance, days_to_harvest),
                'total_revenue': revenue,
                'total_sales': sales.count if sales else 0,
                'total_expenses': expenses,
                'net_profit': net_profit,
                'profit_margin': metrics.profit_margin(revenue, expenses),
                'roi': metrics.roi(net_profit, expenses),
                'status': metrics.crop_status(days_to_harvest, crop.current_stage),
            })

        sort_rows(rows, sort_by, sort_order)
        summary = self._performance_summary(rows)

        for row in rows:
            for name in ('expected_progress', 'progress_variance', 'performance_score',
                         'total_revenue', 'total_expenses', 'net_profit', 'profit_margin', 'roi'):
                row[name] = metrics.round2(row[name])

        return {
            'period': describe_range(date_range),
            'as_of': today.isoformat(),
            'sort_by': sort_by,
            'sort_order': sort_order,
            'crops': rows,
            'summary': summary,
        }

    @staticmethod
    def _performance_summary(rows) -> Dict[str, Any]:
        overall = totals(rows, [
            Measure('progress'),
            Measure('performance_score'),
            Measure('total_revenue'),
            Measure('total_expenses'),
        ])
        profitable = totals([row for row in rows if row['roi'] > 0], [Measure('roi')])
        statuses = index_buckets(aggregate(rows, GroupSpec('status', sort=False)))

        def status_count(label):
            bucket = statuses.get(label)
            return bucket.count if bucket else 0

        top = None
        for row in rows:
            if top is None or row['performance_score'] > top['performance_score']:
                top = row

        total_revenue = overall.sum('total_revenue')
        total_expenses = overall.sum('total_expenses')
        return {
            'total_crops': overall.count,
            'avg_progress': metrics.round2(overall.avg('progress')),
            'avg_performance_score': metrics.round2(overall.avg('performance_score')),
            'total_revenue': metrics.round2(total_revenue),
            'total_expenses': metrics.round2(total_expenses),
            'total_profit': metrics.round2(total_revenue - total_expenses),
            'avg_profit_margin': metrics.round2(metrics.profit_margin(total_revenue, total_expenses)),
            'avg_roi': metrics.round2(profitable.avg('roi')),
            'crops_overdue': status_count('Overdue'),
            'crops_due_soon': status_count('Due Soon'),
            'crops_ready': status_count('Ready'),
            'crops_completed': status_count('Completed'),
            'crops_in_progress': status_count('In Progress'),
            'top_performer': {
                'id': top['id'],
                'name': top['name'],
                'performance_score': metrics.round2(top['performance_score']),
            } if top else None,
        }

    # =========================================================================
    # 9. DIAGNOSIS STATS
    # =========================================================================

    @report_operation('diagnosis stats')
    def get_diagnosis_stats(self, date_range: Optional[DateRange] = None) -> Dict[str, Any]:
        """Diagnosis counts by severity, status, type and crop."""
        records = list(self._diagnoses(date_range).values(
            'crop', 'severity', 'status', 'diagnosis_type', 'confidence',
        ))
        total = len(records)

        by_crop = aggregate(records, GroupSpec('crop'))
        confidence = index_buckets(aggregate(
            [r for r in records if r['confidence'] is not None],
            GroupSpec('crop', (Measure('confidence', reducers=(AVG,)),), sort=False),
        ))

        resolved = sum(1 for r in records if r['status'] == DiagnosisStatus.RESOLVED)

        return {
            'period': describe_range(date_range),
            'total_diagnoses': total,
            'resolution_rate': metrics.round2(metrics.percentage(resolved, total)),
            'by_severity': self._share_table(
                aggregate(records, GroupSpec('severity', sort=False)), Severity.values, total),
            'by_status': self._share_table(
                aggregate(records, GroupSpec('status', sort=False)), DiagnosisStatus.values, total),
            'by_type': self._share_table(
                aggregate(records, GroupSpec('diagnosis_type', sort=False)), DiagnosisType.values, total),
            'by_crop': [
                {
                    'crop': bucket.key,
                    'count': bucket.count,
                    'avg_confidence': metrics.round2(
                        confidence[bucket.key].avg('confidence') if bucket.key in confidence else 0
                    ),
                }
                for bucket in by_crop
            ],
        }
