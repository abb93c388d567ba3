"""
Tests for period classification and comparison baselines.
"""

import pytest

from utils.kpi_dashboard.calendar_model import CalendarConfigError
from utils.kpi_dashboard.constants import (
    SELECTION_SINGLE_MONTH,
    SELECTION_TWO_MONTHS,
    SELECTION_QUARTER,
    SELECTION_CUSTOM,
    COMPARISON_MOM,
    COMPARISON_QOQ,
    COMPARISON_YOY,
    COMPARISON_NONE,
    COMPARISON_KIND_PREVIOUS_MONTH,
    COMPARISON_KIND_PREVIOUS_QUARTER,
    COMPARISON_KIND_PREVIOUS_YEAR,
    FULL_MONTHS,
)
from utils.kpi_dashboard.period_resolver import (
    LivePeriod,
    PeriodResolver,
    compute_change_percent,
    format_comparison_change,
)


class TestClassify:

    def test_single_month(self, resolver):
        context = resolver.classify(['January'], 'FY2026')
        assert context.type == SELECTION_SINGLE_MONTH
        assert context.label == 'January FY2026'
        assert context.mom_months.to_dict() == {'current': 'January', 'previous': 'December'}
        assert context.mom_months.previous_year == 'FY2025'

    def test_live_month_is_month_over_month(self, resolver):
        context = resolver.classify(['February'], 'FY2026')
        assert context.comparison_mode == COMPARISON_MOM
        assert context.is_current
        assert context.mom_months.to_dict() == {'current': 'February', 'previous': 'January'}

    def test_month_after_live_is_month_over_month(self, resolver):
        context = resolver.classify(['March'], 'FY2026')
        assert context.comparison_mode == COMPARISON_MOM
        assert not context.is_current

    def test_month_away_from_live_has_no_comparison(self, resolver):
        context = resolver.classify(['July'], 'FY2026')
        assert context.type == SELECTION_SINGLE_MONTH
        assert context.comparison_mode == COMPARISON_NONE
        assert not context.has_comparison

    def test_live_month_in_other_year_is_not_current(self, resolver):
        context = resolver.classify(['February'], 'FY2025')
        assert not context.is_current
        assert context.comparison_mode == COMPARISON_NONE

    def test_two_consecutive_months(self, resolver):
        context = resolver.classify(['January', 'February'], 'FY2026')
        assert context.type == SELECTION_TWO_MONTHS
        assert context.comparison_mode == COMPARISON_MOM
        assert context.label == 'January - February FY2026'
        assert context.mom_months.to_dict() == {'current': 'February', 'previous': 'January'}

    def test_two_non_consecutive_months_are_custom(self, resolver):
        context = resolver.classify(['January', 'March'], 'FY2026')
        assert context.type == SELECTION_CUSTOM
        assert context.comparison_mode == COMPARISON_NONE

    def test_december_january_pair_is_custom(self, resolver):
        assert resolver.classify(['December', 'January'], 'FY2026').type == SELECTION_CUSTOM

    def test_complete_quarter(self, resolver):
        context = resolver.classify(['January', 'February', 'March'], 'FY2026')
        assert context.type == SELECTION_QUARTER
        assert context.comparison_mode == COMPARISON_QOQ
        assert context.quarter == 'Q4'
        assert context.label == 'Q4 FY2026'
        assert context.quarter_months == ('January', 'February', 'March')

    def test_three_months_not_a_quarter_are_custom(self, resolver):
        context = resolver.classify(['April', 'May', 'July'], 'FY2026')
        assert context.type == SELECTION_CUSTOM
        assert context.label == '3 months (Custom)'

    def test_whole_year_is_custom(self, resolver):
        context = resolver.classify(FULL_MONTHS, 'FY2026')
        assert context.type == SELECTION_CUSTOM
        assert context.label == '12 months (Custom)'

    def test_input_order_and_spelling_do_not_matter(self, resolver):
        context = resolver.classify(['Feb', 'jan'], 'FY2026')
        assert context.type == SELECTION_TWO_MONTHS
        assert context.selected_months == ('January', 'February')

    def test_empty_selection_is_rejected(self, resolver):
        with pytest.raises(ValueError):
            resolver.classify([], 'FY2026')

    def test_unknown_month_is_rejected(self, resolver):
        with pytest.raises(CalendarConfigError):
            resolver.classify(['Smarch'], 'FY2026')


class TestComparisonPeriods:

    def test_single_month_baseline_is_previous_month(self, resolver):
        periods = resolver.get_comparison_periods(['February'], 'FY2026')
        assert periods.primary.months == ('February',)
        assert periods.comparison.months == ('January',)
        assert periods.comparison.year == 'FY2026'
        assert periods.comparison.kind == COMPARISON_KIND_PREVIOUS_MONTH

    def test_january_baseline_crosses_year(self, calendar):
        resolver = PeriodResolver(calendar, LivePeriod('January', 'Q4', 'FY2026'))
        periods = resolver.get_comparison_periods(['January'], 'FY2026')
        assert periods.comparison.months == ('December',)
        assert periods.comparison.year == 'FY2025'

    def test_consecutive_pair_baseline_is_earlier_month(self, resolver):
        periods = resolver.get_comparison_periods(['January', 'February'], 'FY2026')
        assert periods.comparison.months == ('January',)
        assert periods.comparison.label == 'January'

    def test_quarter_baseline_is_preceding_quarter(self, resolver):
        periods = resolver.get_comparison_periods(['April', 'May', 'June'], 'FY2026')
        assert periods.comparison.months == ('January', 'February', 'March')
        assert periods.comparison.year == 'FY2026'
        assert periods.comparison.label == 'Q4 FY2026'
        assert periods.comparison.kind == COMPARISON_KIND_PREVIOUS_QUARTER

    def test_first_quarter_wraps_into_prior_year(self, resolver):
        periods = resolver.get_comparison_periods(['January', 'February', 'March'], 'FY2026')
        assert periods.comparison.label == 'Q4 FY2025'
        assert periods.comparison.year == 'FY2025'

    def test_first_quarter_without_prior_year_has_no_baseline(self, resolver):
        periods = resolver.get_comparison_periods(['January', 'February', 'March'], 'FY2025')
        assert not periods.has_comparison

    def test_custom_has_no_baseline(self, resolver):
        periods = resolver.get_comparison_periods(['January', 'March'], 'FY2026')
        assert not periods.has_comparison
        assert 'comparison' not in periods.to_dict()

    def test_year_over_year_single_month(self, resolver):
        context = resolver.with_year_over_year(resolver.classify(['February'], 'FY2026'))
        assert context.comparison_mode == COMPARISON_YOY
        assert context.yoy_months.to_dict() == {'current': 'February', 'previous': 'February'}

        periods = resolver.compute_comparison_period(context)
        assert periods.comparison.months == ('February',)
        assert periods.comparison.year == 'FY2025'
        assert periods.comparison.kind == COMPARISON_KIND_PREVIOUS_YEAR
        assert periods.comparison.label == 'February FY2025'

    def test_year_over_year_quarter(self, resolver):
        context = resolver.with_year_over_year(
            resolver.classify(['January', 'February', 'March'], 'FY2026')
        )
        assert context.yoy_months is None
        periods = resolver.compute_comparison_period(context)
        assert periods.comparison.label == 'Q4 FY2025'


class TestLabels:

    def test_month_over_month_label(self, resolver):
        context = resolver.classify(['February'], 'FY2026')
        assert resolver.comparison_label(context) == 'February (vs January)'

    def test_live_quarter_label(self, resolver):
        context = resolver.classify(['January', 'February', 'March'], 'FY2026')
        assert resolver.comparison_label(context) == 'Q4 FY2026 (current)'

    def test_other_quarter_label(self, resolver):
        context = resolver.classify(['April', 'May', 'June'], 'FY2026')
        assert resolver.comparison_label(context) == 'Q1 FY2026'

    def test_custom_label(self, resolver):
        context = resolver.classify(['April', 'May', 'July', 'August', 'October'], 'FY2026')
        assert resolver.comparison_label(context) == '5 months (Custom)'

    def test_year_over_year_labels(self, resolver):
        single = resolver.with_year_over_year(resolver.classify(['February'], 'FY2026'))
        assert resolver.comparison_label(single) == 'February (vs February last year)'

        quarter = resolver.with_year_over_year(resolver.classify(['April', 'May', 'June'], 'FY2026'))
        assert resolver.comparison_label(quarter) == 'Q1 FY2026 (vs FY2025)'

    def test_metric_description(self, resolver):
        mom = resolver.classify(['February'], 'FY2026')
        assert PeriodResolver.metric_description(mom) == {
            'current': 'February FY2026 (Current)',
            'comparison': 'January (Previous)',
        }
        custom = resolver.classify(['April', 'July'], 'FY2026')
        assert PeriodResolver.metric_description(custom)['comparison'] is None

    def test_is_current_period(self, resolver):
        assert resolver.is_current_period(['January', 'February'], 'FY2026')
        assert not resolver.is_current_period(['January', 'February'], 'FY2025')


class TestChangeFormatting:

    @pytest.mark.parametrize("current,previous,expected", [
        (110, 100, "↑ 10.0%"),
        (90, 100, "↓ 10.0%"),
        (100, 100, "↑ 0.0%"),
        (5, 0, "N/A"),
        (5, None, "N/A"),
    ])
    def test_format_comparison_change(self, current, previous, expected):
        assert format_comparison_change(current, previous) == expected

    def test_compute_change_percent(self):
        assert compute_change_percent(125, 100) == pytest.approx(25.0)
        assert compute_change_percent(125, float('nan')) is None


class TestLivePeriod:

    def test_validate_accepts_consistent_period(self, calendar, live_period):
        assert live_period.validate(calendar) is live_period

    def test_validate_rejects_wrong_quarter(self, calendar):
        with pytest.raises(CalendarConfigError, match="mismatch"):
            LivePeriod('February', 'Q1', 'FY2026').validate(calendar)

    def test_validate_rejects_unknown_year(self, calendar):
        with pytest.raises(CalendarConfigError):
            LivePeriod('February', 'Q4', 'FY2030').validate(calendar)

    def test_is_live_month_normalises_name(self, live_period):
        assert live_period.is_live_month('feb', 'FY2026')
        assert not live_period.is_live_month('February', 'FY2025')
