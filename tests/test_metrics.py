"""
Tests for period totals and baseline comparison.
"""

import pandas as pd
import pytest

from utils.kpi_dashboard.metrics import (
    compare_periods,
    get_status,
    summarize_by_kpi,
    summarize_period,
)
from utils.kpi_dashboard.period_resolver import PeriodDescriptor


@pytest.mark.parametrize("achievement,expected", [
    (100, 'on-track'),
    (80, 'on-track'),
    (120, 'on-track'),
    (70, 'at-risk'),
    (50, 'off-track'),
    (130, 'off-track'),
    (None, 'off-track'),
])
def test_get_status(achievement, expected):
    assert get_status(achievement) == expected


def test_summarize_period(kpi_rows):
    period = PeriodDescriptor(months=('February',), year='FY2026', label='February FY2026')
    summary = summarize_period(kpi_rows, period)
    assert summary['rows'] == 2
    assert summary['actual'] == 130
    assert summary['target'] == 110
    assert summary['achievement'] == pytest.approx(118.18, abs=0.01)
    assert summary['status'] == 'on-track'


def test_summarize_period_without_target(kpi_rows):
    period = PeriodDescriptor(months=('May',), year='FY2026', label='May FY2026')
    summary = summarize_period(kpi_rows, period)
    assert summary['rows'] == 0
    assert summary['achievement'] is None


def test_compare_month_over_month(kpi_rows, resolver):
    periods = resolver.get_comparison_periods(['February'], 'FY2026')
    result = compare_periods(kpi_rows, periods)
    assert result['current']['actual'] == 130
    assert result['baseline']['actual'] == 108
    assert result['change_percent'] == pytest.approx(20.37, abs=0.01)
    assert result['change_text'] == '↑ 20.4%'


def test_compare_without_baseline(kpi_rows, resolver):
    periods = resolver.get_comparison_periods(['January', 'March'], 'FY2026')
    result = compare_periods(kpi_rows, periods)
    assert result['baseline'] is None
    assert result['change_text'] is None


def test_compare_with_empty_baseline(kpi_rows, resolver):
    periods = resolver.get_comparison_periods(['April', 'May', 'June'], 'FY2026')
    result = compare_periods(kpi_rows, periods)
    assert result['current']['actual'] == 80
    assert result['baseline']['actual'] == 328
    assert result['change_text'] == '↓ 75.6%'


def test_summarize_by_kpi(kpi_rows):
    february = kpi_rows[(kpi_rows['month'] == 'February') & (kpi_rows['year'] == 'FY2026')]
    summary = summarize_by_kpi(february).set_index('kpi_name')
    assert summary.loc['Leads', 'achievement'] == 120.0
    assert summary.loc['Deals', 'achievement'] == 100.0


def test_summarize_by_kpi_empty():
    summary = summarize_by_kpi(pd.DataFrame())
    assert summary.empty
    assert 'achievement' in summary.columns
