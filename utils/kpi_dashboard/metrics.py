# utils/kpi_dashboard/metrics.py
"""
Period Metrics for KPI Dashboard

Sums actual/target for the selected period and for its comparison
baseline. Plain arithmetic over rows already filtered by period.
"""

import logging
from typing import Dict, Optional

import pandas as pd

from .constants import (
    ROW_ACTUAL_FIELD,
    ROW_TARGET_FIELD,
    ROW_KPI_FIELD,
    STATUS_ON_TRACK_MIN,
    STATUS_ON_TRACK_MAX,
    STATUS_AT_RISK_MIN,
)
from .filter_projection import filter_rows_for_period
from .period_resolver import (
    ComparisonPeriod,
    PeriodDescriptor,
    compute_change_percent,
    format_comparison_change,
)

logger = logging.getLogger(__name__)


def get_status(achievement: Optional[float]) -> str:
    """on-track: 80-120%, at-risk: 60-80%, off-track otherwise"""
    if achievement is None:
        return 'off-track'
    if STATUS_ON_TRACK_MIN <= achievement <= STATUS_ON_TRACK_MAX:
        return 'on-track'
    if STATUS_AT_RISK_MIN <= achievement < STATUS_ON_TRACK_MIN:
        return 'at-risk'
    return 'off-track'


def _safe_sum(df: pd.DataFrame, column: str) -> float:
    if df.empty or column not in df.columns:
        return 0.0
    return float(pd.to_numeric(df[column], errors='coerce').fillna(0).sum())


def summarize_period(df: pd.DataFrame, period: PeriodDescriptor) -> Dict:
    """Totals for one period descriptor."""
    rows = filter_rows_for_period(df, period)
    actual = _safe_sum(rows, ROW_ACTUAL_FIELD)
    target = _safe_sum(rows, ROW_TARGET_FIELD)
    achievement = (actual / target * 100) if target > 0 else None

    return {
        'label': period.label,
        'year': period.year,
        'rows': len(rows),
        'actual': actual,
        'target': target,
        'achievement': achievement,
        'status': get_status(achievement),
    }


def compare_periods(df: pd.DataFrame, periods: ComparisonPeriod) -> Dict:
    """
    Primary totals plus baseline totals and change, when a baseline exists.

    Returns:
        Dict with 'current', 'baseline' (or None), 'change_percent', 'change_text'
    """
    current = summarize_period(df, periods.primary)

    if not periods.has_comparison:
        return {
            'current': current,
            'baseline': None,
            'change_percent': None,
            'change_text': None,
        }

    baseline = summarize_period(df, periods.comparison)
    if baseline['rows'] == 0:
        logger.info(f"No baseline rows for {periods.comparison.label}")

    return {
        'current': current,
        'baseline': baseline,
        'change_percent': compute_change_percent(current['actual'], baseline['actual']),
        'change_text': format_comparison_change(current['actual'], baseline['actual']),
    }


def summarize_by_kpi(df: pd.DataFrame) -> pd.DataFrame:
    """Actual/target/achievement per KPI for already-filtered rows."""
    if df.empty or ROW_KPI_FIELD not in df.columns:
        return pd.DataFrame(columns=[ROW_KPI_FIELD, ROW_ACTUAL_FIELD, ROW_TARGET_FIELD, 'achievement'])

    numeric = df.assign(**{
        col: pd.to_numeric(df[col], errors='coerce')
        for col in (ROW_ACTUAL_FIELD, ROW_TARGET_FIELD) if col in df.columns
    })
    agg = {col: 'sum' for col in (ROW_ACTUAL_FIELD, ROW_TARGET_FIELD) if col in numeric.columns}
    if not agg:
        return pd.DataFrame({ROW_KPI_FIELD: df[ROW_KPI_FIELD].drop_duplicates().tolist()})
    summary = numeric.groupby(ROW_KPI_FIELD, as_index=False).agg(agg)

    if ROW_ACTUAL_FIELD in summary.columns and ROW_TARGET_FIELD in summary.columns:
        target = summary[ROW_TARGET_FIELD].where(summary[ROW_TARGET_FIELD] > 0)
        summary['achievement'] = (summary[ROW_ACTUAL_FIELD] / target * 100).round(1)
    return summary
