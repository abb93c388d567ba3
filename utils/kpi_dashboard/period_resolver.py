# utils/kpi_dashboard/period_resolver.py
"""
Period Classification and Comparison Baselines

Classifies a set of selected months within a financial year and derives
which prior period the dashboard compares against:

    1 month                      -> single-month, MoM when it touches the live month
    2 consecutive months         -> two-consecutive-months, MoM (later vs earlier)
    3 months == a whole quarter  -> complete-quarter, QoQ
    anything else                -> custom, no comparison

The cascade is evaluated strictly by count; there is no best-fit search.
Year-over-year is never inferred, it is opted into with
with_year_over_year() (the "Compare YoY" toggle).

Usage:
    resolver = PeriodResolver(calendar, live_period)

    context = resolver.classify(['January', 'February'], 'FY2026')
    context.type                      # 'two-consecutive-months'
    context.mom_months.to_dict()      # {'current': 'February', 'previous': 'January'}

    periods = resolver.compute_comparison_period(context)
    periods.comparison.months         # ('January',)
"""

import logging
from dataclasses import dataclass, replace
from typing import Dict, Iterable, Optional, Tuple

import pandas as pd

from .calendar_model import CalendarModel, CalendarConfigError, month_index, normalize_month, sort_months
from .constants import (
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
    MONTHS_PER_QUARTER,
)

logger = logging.getLogger(__name__)


# =============================================================================
# VALUE TYPES
# =============================================================================

@dataclass(frozen=True)
class LivePeriod:
    """
    The reporting period the business currently treats as "now".

    Configuration, not wall-clock time: rolling to a new month is a
    deliberate config change.
    """
    month: str
    quarter: str
    year: str

    def is_live_month(self, month: str, year: str) -> bool:
        return normalize_month(month) == self.month and year == self.year

    def is_live_quarter(self, quarter: str, year: str) -> bool:
        return quarter == self.quarter and year == self.year

    def validate(self, calendar: CalendarModel) -> 'LivePeriod':
        """Check the live period is consistent with the calendar tables."""
        if not calendar.has_year(self.year):
            raise CalendarConfigError(f"Live year {self.year!r} is not in the calendar")
        quarter = calendar.quarter_of_month(self.year, self.month)
        if quarter != self.quarter:
            raise CalendarConfigError(
                f"Live period mismatch: {self.month} is in {quarter} of {self.year}, "
                f"not {self.quarter}"
            )
        return self


@dataclass(frozen=True)
class MonthPair:
    """Current vs previous month used for MoM / YoY comparisons."""
    current: str
    previous: str
    current_year: str
    previous_year: str

    def to_dict(self) -> Dict[str, str]:
        return {'current': self.current, 'previous': self.previous}


@dataclass(frozen=True)
class TimeSelectionContext:
    """
    Classification of a month selection. Derived, never stored.

    Attributes:
        type: single-month | two-consecutive-months | complete-quarter | custom
        selected_months: Selected months in calendar order
        year: Financial year of the selection
        is_current: True if the live month is part of the selection
        comparison_mode: month-over-month | quarter-over-quarter | year-over-year | none
        label: Base label, e.g. 'February FY2026', 'Q4 FY2026', '5 months (Custom)'
        mom_months: Current/previous month pair (single-month and consecutive pair)
        yoy_months: Same month this year / prior year (YoY, single month only)
        quarter: Matched quarter (complete-quarter only)
    """
    type: str
    selected_months: Tuple[str, ...]
    year: str
    is_current: bool
    comparison_mode: str
    label: str
    mom_months: Optional[MonthPair] = None
    yoy_months: Optional[MonthPair] = None
    quarter: Optional[str] = None

    @property
    def quarter_months(self) -> Tuple[str, ...]:
        return self.selected_months if self.quarter else ()

    @property
    def has_comparison(self) -> bool:
        return self.comparison_mode != COMPARISON_NONE


@dataclass(frozen=True)
class PeriodDescriptor:
    months: Tuple[str, ...]
    year: str
    label: str
    kind: Optional[str] = None

    def to_dict(self) -> Dict:
        data = {'months': list(self.months), 'year': self.year, 'label': self.label}
        if self.kind:
            data['kind'] = self.kind
        return data


@dataclass(frozen=True)
class ComparisonPeriod:
    """Primary period plus the baseline it is compared with (absent for custom)."""
    primary: PeriodDescriptor
    comparison: Optional[PeriodDescriptor] = None

    @property
    def has_comparison(self) -> bool:
        return self.comparison is not None

    def to_dict(self) -> Dict:
        data = {'primary': self.primary.to_dict()}
        if self.comparison is not None:
            data['comparison'] = self.comparison.to_dict()
        return data


# =============================================================================
# RESOLVER
# =============================================================================

class PeriodResolver:
    """
    Stateless classifier for month selections.

    Usage:
        resolver = PeriodResolver(calendar, live_period)
        context = resolver.classify(['February'], 'FY2026')
        resolver.comparison_label(context)   # 'February (vs January)'
    """

    def __init__(self, calendar: CalendarModel, live_period: LivePeriod):
        self.calendar = calendar
        self.live_period = live_period

    # =========================================================================
    # CLASSIFICATION
    # =========================================================================

    def classify(self, selected_months: Iterable[str], year: str) -> TimeSelectionContext:
        """
        Classify a non-empty month selection.

        Raises:
            ValueError: if no months are given
            CalendarConfigError: if a month name is not recognised
        """
        months = self._normalize(selected_months)
        if not months:
            raise ValueError("classify() requires at least one selected month")

        is_current = self.is_current_period(months, year)

        if len(months) == 1:
            return self._classify_single(months[0], year)

        if len(months) == 2:
            earlier, later = months
            if month_index(later) == month_index(earlier) + 1:
                return TimeSelectionContext(
                    type=SELECTION_TWO_MONTHS,
                    selected_months=months,
                    year=year,
                    is_current=is_current,
                    comparison_mode=COMPARISON_MOM,
                    label=f"{earlier} - {later} {year}",
                    mom_months=MonthPair(later, earlier, year, year),
                )
            return self._custom(months, year, is_current)

        if len(months) == MONTHS_PER_QUARTER:
            quarter = self.calendar.match_quarter(year, months)
            if quarter:
                return TimeSelectionContext(
                    type=SELECTION_QUARTER,
                    selected_months=months,
                    year=year,
                    is_current=is_current,
                    comparison_mode=COMPARISON_QOQ,
                    label=f"{quarter} {year}",
                    quarter=quarter,
                )

        return self._custom(months, year, is_current)

    def _classify_single(self, month: str, year: str) -> TimeSelectionContext:
        previous = self.calendar.previous_month(month, year)
        touches_live = (
            self.live_period.is_live_month(month, year)
            or self.live_period.is_live_month(previous.month, previous.year)
        )
        return TimeSelectionContext(
            type=SELECTION_SINGLE_MONTH,
            selected_months=(month,),
            year=year,
            is_current=self.live_period.is_live_month(month, year),
            comparison_mode=COMPARISON_MOM if touches_live else COMPARISON_NONE,
            label=f"{month} {year}",
            mom_months=MonthPair(month, previous.month, year, previous.year),
        )

    @staticmethod
    def _custom(months: Tuple[str, ...], year: str, is_current: bool) -> TimeSelectionContext:
        return TimeSelectionContext(
            type=SELECTION_CUSTOM,
            selected_months=months,
            year=year,
            is_current=is_current,
            comparison_mode=COMPARISON_NONE,
            label=f"{len(months)} months (Custom)",
        )

    def with_year_over_year(self, context: TimeSelectionContext) -> TimeSelectionContext:
        """Switch a context to YoY: same months, prior financial year."""
        prior = self.calendar.prior_year(context.year)
        yoy_months = None
        if len(context.selected_months) == 1:
            month = context.selected_months[0]
            yoy_months = MonthPair(month, month, context.year, prior)
        return replace(context, comparison_mode=COMPARISON_YOY, yoy_months=yoy_months)

    # =========================================================================
    # COMPARISON PERIODS
    # =========================================================================

    def compute_comparison_period(
        self,
        context: TimeSelectionContext,
        year: Optional[str] = None
    ) -> ComparisonPeriod:
        """
        Build the primary period and its baseline.

        MoM compares against the month before mom_months.current, QoQ against
        the preceding quarter in canonical order, YoY against the same months
        a year earlier. Custom selections get no baseline.
        """
        year = year or context.year
        primary = PeriodDescriptor(months=context.selected_months, year=year, label=context.label)

        if context.comparison_mode == COMPARISON_MOM and context.mom_months:
            previous = self.calendar.previous_month(context.mom_months.current, year)
            comparison = PeriodDescriptor(
                months=(previous.month,),
                year=previous.year,
                label=previous.month,
                kind=COMPARISON_KIND_PREVIOUS_MONTH,
            )
            return ComparisonPeriod(primary, comparison)

        if context.comparison_mode == COMPARISON_QOQ and context.quarter:
            return ComparisonPeriod(primary, self._previous_quarter(context.quarter, year))

        if context.comparison_mode == COMPARISON_YOY:
            prior = self.calendar.prior_year(year)
            comparison = PeriodDescriptor(
                months=context.selected_months,
                year=prior,
                label=self._yoy_label(context, prior),
                kind=COMPARISON_KIND_PREVIOUS_YEAR,
            )
            return ComparisonPeriod(primary, comparison)

        return ComparisonPeriod(primary)

    def _previous_quarter(self, quarter: str, year: str) -> Optional[PeriodDescriptor]:
        """
        Preceding quarter in canonical order.

        Only the first quarter of a year wraps, and only into a configured
        prior year; otherwise there is no baseline.
        """
        quarters = self.calendar.available_quarters(year)
        position = quarters.index(quarter)

        if position > 0:
            previous_quarter, previous_year = quarters[position - 1], year
        elif self.calendar.has_prior_year(year):
            previous_year = self.calendar.prior_year(year)
            previous_quarter = self.calendar.available_quarters(previous_year)[-1]
        else:
            logger.debug(f"No quarter before {quarter} {year}")
            return None

        return PeriodDescriptor(
            months=tuple(self.calendar.months_of_quarter(previous_year, previous_quarter)),
            year=previous_year,
            label=f"{previous_quarter} {previous_year}",
            kind=COMPARISON_KIND_PREVIOUS_QUARTER,
        )

    def get_comparison_periods(self, selected_months: Iterable[str], year: str) -> ComparisonPeriod:
        return self.compute_comparison_period(self.classify(selected_months, year), year)

    # =========================================================================
    # LABELS
    # =========================================================================

    def comparison_label(self, context: TimeSelectionContext) -> str:
        """
        Display text for a selection with its comparison context.

        E.g. 'February (vs January)', 'Q4 FY2026 (current)', '5 months (Custom)'
        """
        if context.comparison_mode == COMPARISON_MOM and context.mom_months:
            return f"{context.mom_months.current} (vs {context.mom_months.previous})"

        if context.comparison_mode == COMPARISON_YOY:
            if context.yoy_months:
                return f"{context.yoy_months.current} (vs {context.yoy_months.previous} last year)"
            return f"{context.label} (vs {self.calendar.prior_year(context.year)})"

        if context.comparison_mode == COMPARISON_QOQ:
            suffix = " (current)" if context.is_current else ""
            return f"{context.label}{suffix}"

        return context.label

    @staticmethod
    def _yoy_label(context: TimeSelectionContext, prior_year: str) -> str:
        if context.quarter:
            return f"{context.quarter} {prior_year}"
        if len(context.selected_months) == 1:
            return f"{context.selected_months[0]} {prior_year}"
        return f"{len(context.selected_months)} months {prior_year}"

    @staticmethod
    def metric_description(context: TimeSelectionContext) -> Dict[str, Optional[str]]:
        """Captions for the current value and its comparison baseline."""
        if context.comparison_mode == COMPARISON_MOM:
            return {
                'current': f"{context.label} (Current)",
                'comparison': f"{context.mom_months.previous} (Previous)" if context.mom_months else None,
            }
        if context.comparison_mode == COMPARISON_QOQ:
            return {
                'current': f"{context.label} (Current Quarter)",
                'comparison': "Previous Quarter",
            }
        if context.comparison_mode == COMPARISON_YOY:
            return {
                'current': f"{context.label} (Current)",
                'comparison': "Same Period Last Year",
            }
        return {'current': context.label, 'comparison': None}

    # =========================================================================
    # HELPERS
    # =========================================================================

    def is_current_period(self, selected_months: Iterable[str], year: str) -> bool:
        return any(self.live_period.is_live_month(m, year) for m in selected_months)

    @staticmethod
    def _normalize(selected_months: Iterable[str]) -> Tuple[str, ...]:
        months = set()
        for month in selected_months:
            full = normalize_month(month)
            if full is None:
                raise CalendarConfigError(f"Unknown month: {month!r}")
            months.add(full)
        return tuple(sort_months(months))


# =============================================================================
# CHANGE FORMATTING
# =============================================================================

def compute_change_percent(current: float, previous: float) -> Optional[float]:
    """Percent change from previous to current; None without a usable baseline."""
    if previous is None or pd.isna(previous) or previous == 0 or current is None or pd.isna(current):
        return None
    return (current - previous) / abs(previous) * 100


def format_comparison_change(current: float, previous: float) -> str:
    """
    Format change vs baseline, e.g. '↑ 12.5%' or '↓ 8.0%'.

    Returns 'N/A' when there is no baseline.
    """
    change = compute_change_percent(current, previous)
    if change is None:
        return "N/A"
    symbol = "↑" if change >= 0 else "↓"
    return f"{symbol} {abs(change):.1f}%"
