"""
Tests for the business metric helpers.
"""
import pytest
from datetime import date

from dashboards.services import metrics


class TestFinancialMetrics:

    def test_profit_margin(self):
        assert metrics.profit_margin(200, 50) == 75.0
        assert metrics.profit_margin(100, 150) == -50.0

    @pytest.mark.parametrize('revenue', [0, -10])
    def test_profit_margin_without_revenue(self, revenue):
        assert metrics.profit_margin(revenue, 50) == 0.0

    def test_roi(self):
        assert metrics.roi(150, 50) == 300.0
        assert metrics.roi(100, 0) == 0.0

    def test_revenue_per_unit(self):
        assert metrics.revenue_per_unit(200, 10) == 20.0
        assert metrics.revenue_per_unit(200, 0) == 0.0

    @pytest.mark.parametrize('current, previous, expected', [
        (150, 100, 50.0),
        (50, 100, -50.0),
        (100, 0, 100.0),
        (0, 0, 0.0),
    ])
    def test_growth_rate(self, current, previous, expected):
        assert metrics.growth_rate(current, previous) == expected

    def test_percentage_of_nothing(self):
        assert metrics.percentage(5, 0) == 0.0

    def test_round2_only_at_the_edge(self):
        assert metrics.round2(metrics.percentage(1, 3)) == 33.33
        assert metrics.round2(None) == 0.0


class TestScheduleMetrics:

    def test_expected_progress(self):
        assert metrics.expected_progress(45, 90) == 50.0
        assert metrics.expected_progress(10, 0) == 0.0

    def test_days_between_missing_date(self):
        assert metrics.days_between(None, date(2024, 1, 1)) == 0

    def test_score_on_schedule(self):
        # 0.4*40 + 0.3*0 + 0.3*30
        assert metrics.performance_score(40, 0, 10) == pytest.approx(25.0)

    def test_variance_points_are_capped(self):
        ahead = metrics.performance_score(40, 50, 10)
        behind = metrics.performance_score(40, -50, 10)
        assert ahead == pytest.approx(16 + 9 + 9)
        assert behind == pytest.approx(16 - 9 + 9)

    def test_overdue_loses_harvest_points(self):
        assert metrics.performance_score(40, 0, -10) == pytest.approx(16 + 6)
        assert metrics.performance_score(40, 0, -45) == pytest.approx(16)

    @pytest.mark.parametrize('days_to_harvest, stage, expected', [
        (-1, 'Harvested', 'Overdue'),
        (0, 'Growing', 'Due Soon'),
        (7, 'Sowing', 'Due Soon'),
        (8, 'Harvested', 'Completed'),
        (8, 'Harvesting', 'Ready'),
        (30, 'Flowering', 'In Progress'),
    ])
    def test_crop_status(self, days_to_harvest, stage, expected):
        assert metrics.crop_status(days_to_harvest, stage) == expected


class TestSeasons:

    @pytest.mark.parametrize('day, expected', [
        (date(2024, 1, 15), ('Rabi', 2023)),
        (date(2024, 4, 30), ('Rabi', 2023)),
        (date(2024, 5, 10), ('Zaid', 2024)),
        (date(2024, 6, 1), ('Kharif', 2024)),
        (date(2024, 10, 31), ('Kharif', 2024)),
        (date(2024, 11, 1), ('Rabi', 2024)),
    ])
    def test_season_for(self, day, expected):
        assert metrics.season_for(day) == expected

    def test_rabi_spans_new_year(self):
        assert metrics.season_bounds('Rabi', 2024) == (date(2024, 11, 1), date(2025, 4, 30))

    def test_seasons_partition_the_year(self):
        day = date(2024, 1, 1)
        while day.year == 2024:
            season, season_year = metrics.season_for(day)
            first, last = metrics.season_bounds(season, season_year)
            assert first <= day <= last
            day = date.fromordinal(day.toordinal() + 1)

    def test_unknown_season(self):
        with pytest.raises(ValueError):
            metrics.season_bounds('Monsoon', 2024)
