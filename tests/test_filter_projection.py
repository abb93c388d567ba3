"""
Tests for the read-only filter projection.
"""

from types import SimpleNamespace

import pandas as pd
import pytest

from utils.kpi_dashboard.constants import COMPARISON_YOY
from utils.kpi_dashboard.filter_projection import (
    FilterProjection,
    filter_rows_for_period,
    get_row_field,
)
from utils.kpi_dashboard.filters import get_selection_summary
from utils.kpi_dashboard.period_resolver import PeriodDescriptor
from utils.kpi_dashboard.selection_state import SelectionState


def project(machine, resolver, **kwargs):
    return FilterProjection.from_machine(machine, resolver, **kwargs)


class TestDisplayLabel:

    def test_live_month_label(self, machine, resolver):
        assert project(machine, resolver).display_label() == 'February (vs January)'

    def test_full_year_label(self, machine, resolver):
        machine.select_all_months()
        projection = project(machine, resolver)
        assert projection.display_label() == 'Full Year (FY2026)'
        assert projection.is_full_year()

    def test_all_quarters_is_full_year(self, machine, resolver):
        machine.select_all_quarters()
        assert project(machine, resolver).display_label() == 'Full Year (FY2026)'

    def test_custom_label(self, machine, resolver):
        machine.toggle_month('March')
        projection = project(machine, resolver)
        assert projection.display_label() == '2 months (Custom)'
        assert projection.is_custom_mode()

    def test_single_non_live_month_is_custom(self, machine, resolver):
        machine.toggle_month('July')
        machine.toggle_month('February')
        assert project(machine, resolver).display_label() == '1 months (Custom)'

    def test_quarter_labels(self, machine, resolver):
        machine.toggle_quarter('Q1')
        assert project(machine, resolver).display_label() == 'Q1 (FY2026)'

        machine.toggle_quarter('Q2')
        projection = project(machine, resolver)
        assert projection.display_label() == 'Q1, Q2 (FY2026)'
        assert projection.is_quarter_mode()

    def test_repr(self, machine, resolver):
        assert 'February (vs January)' in repr(project(machine, resolver))


class TestPredicates:

    @pytest.mark.parametrize("value,expected", [
        ('February', True),
        ('february', True),
        ('FEB', True),
        ('March', False),
        (None, False),
        (2, False),
    ])
    def test_month_matches(self, machine, resolver, value, expected):
        assert project(machine, resolver).month_matches(value) is expected

    def test_nothing_matches_empty_selection(self, resolver):
        projection = FilterProjection(SelectionState((), (), 'FY2026'), resolver)
        assert not projection.month_matches('February')
        assert not projection.quarter_matches('Q4')

    def test_quarter_matches(self, machine, resolver):
        machine.toggle_quarter('Q1')
        projection = project(machine, resolver)
        assert projection.quarter_matches('q1')
        assert not projection.quarter_matches('Q2')

    def test_quarter_never_matches_in_custom_mode(self, machine, resolver):
        assert not project(machine, resolver).quarter_matches('Q4')

    def test_row_matches_any_row_shape(self, machine, resolver):
        projection = project(machine, resolver)
        assert projection.row_matches({'month': 'Feb'})
        assert projection.row_matches(SimpleNamespace(month='February'))
        assert projection.row_matches(pd.Series({'month': 'february'}))
        assert not projection.row_matches({'kpi_name': 'Leads'})
        assert projection.row_matches({'period': 'February'}, field='period')

    def test_row_matches_quarter(self, machine, resolver):
        machine.toggle_quarter('Q4')
        projection = project(machine, resolver)
        assert projection.row_matches_quarter({'quarter': 'Q4'})
        assert not projection.row_matches_quarter(SimpleNamespace(quarter='Q1'))

    def test_get_row_field_missing(self):
        assert get_row_field(object(), 'month') is None


class TestDataFrameFiltering:

    def test_filter_rows_by_month_and_year(self, machine, resolver, kpi_rows):
        result = project(machine, resolver).filter_rows(kpi_rows)
        assert len(result) == 2
        assert set(result['kpi_name']) == {'Leads', 'Deals'}
        assert set(result['year']) == {'FY2026'}

    def test_filter_rows_accepts_short_and_lowercase_months(self, machine, resolver, kpi_rows):
        machine.toggle_quarter('Q4')
        machine.toggle_quarter('Q1')
        result = project(machine, resolver).filter_rows(kpi_rows)
        assert len(result) == 6

    def test_filter_rows_without_year_column(self, machine, resolver, kpi_rows):
        result = project(machine, resolver).filter_rows(kpi_rows.drop(columns=['year']))
        assert len(result) == 3

    def test_missing_month_column_matches_nothing(self, machine, resolver, kpi_rows):
        result = project(machine, resolver).filter_rows(kpi_rows.drop(columns=['month']))
        assert result.empty
        assert list(result.columns) == ['kpi_name', 'quarter', 'year', 'actual', 'target']

    def test_filter_rows_by_quarter(self, machine, resolver, kpi_rows):
        machine.toggle_quarter('Q1')
        result = project(machine, resolver).filter_rows_by_quarter(kpi_rows)
        assert result['month'].tolist() == ['april']

    def test_filter_rows_for_period(self, kpi_rows):
        period = PeriodDescriptor(months=('February',), year='FY2025', label='February FY2025')
        result = filter_rows_for_period(kpi_rows, period)
        assert result['actual'].tolist() == [60]


class TestDerivedContext:

    def test_context_and_comparison(self, machine, resolver):
        projection = project(machine, resolver)
        assert projection.context.selected_months == ('February',)
        assert projection.comparison_period.comparison.months == ('January',)
        assert projection.comparison_label() == 'February (vs January)'
        assert projection.is_live_period()

    def test_year_over_year_toggle(self, machine, resolver):
        projection = project(machine, resolver, compare_yoy=True)
        assert projection.context.comparison_mode == COMPARISON_YOY
        assert projection.comparison_period.comparison.year == 'FY2025'
        assert projection.comparison_label() == 'February (vs February last year)'

    def test_live_month_label_follows_year_over_year(self, machine, resolver):
        projection = project(machine, resolver, compare_yoy=True)
        assert projection.comparison_period.comparison.months == ('February',)
        assert projection.display_label() == 'February (vs February last year)'
        assert 'January' not in projection.display_label()

    def test_live_month_label_without_year_over_year(self, machine, resolver):
        assert project(machine, resolver, compare_yoy=False).display_label() == 'February (vs January)'

    def test_non_live_selection(self, machine, resolver):
        machine.toggle_quarter('Q2')
        assert not project(machine, resolver).is_live_period()


class TestSelectionSummary:

    def test_quarter_summary_lists_short_months(self, machine, resolver):
        machine.toggle_quarter('Q4')
        summary = get_selection_summary(project(machine, resolver))
        assert summary == 'Q4 (FY2026) • Jan, Feb, Mar • live'

    def test_long_selection_summary_counts_months(self, machine, resolver):
        machine.toggle_quarter('Q1')
        machine.toggle_quarter('Q2')
        summary = get_selection_summary(project(machine, resolver))
        assert summary == 'Q1, Q2 (FY2026) • 6 months'
