# utils/kpi_dashboard/filter_projection.py
"""
Filter Projection - read-only view of the period selection

Everything presentation code needs from the current selection:
- Row predicates (month / quarter, case-insensitive, short names accepted)
- DataFrame filtering helpers
- Display label and mode flags
- Time selection context and comparison period

Rows are anything exposing a month-like (or quarter-like) field:
dicts, pandas Series, or objects with the attribute.

Usage:
    projection = FilterProjection.from_machine(machine, resolver)

    projection.display_label()                     # 'February (vs January)'
    df = projection.filter_rows(sales_df)          # rows for selected months
    projection.month_matches('feb')                # True
"""

import logging
from collections.abc import Mapping
from functools import cached_property
from typing import Any, Optional

import pandas as pd

from .calendar_model import normalize_month
from .constants import ROW_MONTH_FIELD, ROW_QUARTER_FIELD, ROW_YEAR_FIELD
from .period_resolver import ComparisonPeriod, PeriodDescriptor, PeriodResolver, TimeSelectionContext
from .selection_state import SelectionState, SelectionStateMachine

logger = logging.getLogger(__name__)

FULL_YEAR_MONTHS = 12


def get_row_field(row: Any, field: str) -> Any:
    """Read a field from a dict-like row or an object attribute."""
    if isinstance(row, (Mapping, pd.Series)):
        return row.get(field)
    return getattr(row, field, None)


class FilterProjection:
    """
    Derived view over a SelectionState snapshot.

    Build a new projection after each state change (cheap); it never
    mutates the selection.
    """

    def __init__(
        self,
        state: SelectionState,
        resolver: PeriodResolver,
        compare_yoy: bool = False
    ):
        self.state = state
        self.resolver = resolver
        self.compare_yoy = compare_yoy
        self._month_keys = {m.lower() for m in state.selected_months}
        self._quarter_keys = {q.lower() for q in state.selected_quarters}

    @classmethod
    def from_machine(
        cls,
        machine: SelectionStateMachine,
        resolver: Optional[PeriodResolver] = None,
        compare_yoy: bool = False
    ) -> 'FilterProjection':
        resolver = resolver or PeriodResolver(machine.calendar, machine.live_period)
        return cls(machine.state, resolver, compare_yoy=compare_yoy)

    # =========================================================================
    # SELECTION ACCESS
    # =========================================================================

    @property
    def selected_months(self):
        return list(self.state.selected_months)

    @property
    def selected_quarters(self):
        return list(self.state.selected_quarters)

    @property
    def selected_year(self) -> str:
        return self.state.selected_year

    # =========================================================================
    # PREDICATES
    # =========================================================================

    def month_matches(self, data_month: Any) -> bool:
        """True if the row month is selected. Nothing matches an empty selection."""
        if not self._month_keys:
            return False
        full = normalize_month(data_month) if isinstance(data_month, str) else None
        return full is not None and full.lower() in self._month_keys

    def quarter_matches(self, data_quarter: Any) -> bool:
        if not self._quarter_keys or not isinstance(data_quarter, str):
            return False
        return data_quarter.strip().lower() in self._quarter_keys

    def row_matches(self, row: Any, field: str = ROW_MONTH_FIELD) -> bool:
        return self.month_matches(get_row_field(row, field))

    def row_matches_quarter(self, row: Any, field: str = ROW_QUARTER_FIELD) -> bool:
        return self.quarter_matches(get_row_field(row, field))

    # =========================================================================
    # DATAFRAME FILTERING
    # =========================================================================

    def filter_rows(
        self,
        df: pd.DataFrame,
        month_column: str = ROW_MONTH_FIELD,
        year_column: Optional[str] = ROW_YEAR_FIELD
    ) -> pd.DataFrame:
        """
        Keep rows whose month is selected (and whose year matches, when the
        year column exists).
        """
        if df.empty:
            return df

        if month_column not in df.columns:
            logger.warning(f"Column '{month_column}' not found in DataFrame - no rows match")
            return df.iloc[0:0]

        mask = df[month_column].map(self.month_matches).astype(bool)
        if year_column and year_column in df.columns:
            mask &= df[year_column].astype(str).str.strip() == self.selected_year
        return df[mask]

    def filter_rows_by_quarter(
        self,
        df: pd.DataFrame,
        quarter_column: str = ROW_QUARTER_FIELD
    ) -> pd.DataFrame:
        if df.empty:
            return df

        if quarter_column not in df.columns:
            logger.warning(f"Column '{quarter_column}' not found in DataFrame - no rows match")
            return df.iloc[0:0]

        return df[df[quarter_column].map(self.quarter_matches).astype(bool)]

    # =========================================================================
    # DERIVED CONTEXT
    # =========================================================================

    @cached_property
    def context(self) -> TimeSelectionContext:
        context = self.resolver.classify(self.state.selected_months, self.selected_year)
        if self.compare_yoy:
            context = self.resolver.with_year_over_year(context)
        return context

    @cached_property
    def comparison_period(self) -> ComparisonPeriod:
        return self.resolver.compute_comparison_period(self.context, self.selected_year)

    def is_custom_mode(self) -> bool:
        return self.state.is_custom_mode

    def is_quarter_mode(self) -> bool:
        return self.state.is_quarter_mode

    def is_full_year(self) -> bool:
        return len(self.state.selected_months) == FULL_YEAR_MONTHS

    def is_live_period(self) -> bool:
        """True if the selection contains the live month of the live year."""
        return self.resolver.is_current_period(self.state.selected_months, self.selected_year)

    def display_label(self) -> str:
        """
        Label for the current filter.

        Precedence: live single month (comparison label, YoY-aware) > full year >
        custom months > quarters.
        """
        months = self.state.selected_months
        year = self.selected_year

        if len(months) == 1 and self.resolver.live_period.is_live_month(months[0], year):
            return self.comparison_label()

        if self.is_full_year():
            return f"Full Year ({year})"

        if self.is_custom_mode():
            return f"{len(months)} months (Custom)"

        return f"{', '.join(self.state.selected_quarters)} ({year})"

    def comparison_label(self) -> str:
        return self.resolver.comparison_label(self.context)

    def __repr__(self) -> str:
        return f"FilterProjection({self.display_label()!r})"


def filter_rows_for_period(
    df: pd.DataFrame,
    period: PeriodDescriptor,
    month_column: str = ROW_MONTH_FIELD,
    year_column: Optional[str] = ROW_YEAR_FIELD
) -> pd.DataFrame:
    """Rows belonging to an arbitrary period descriptor (e.g. a comparison baseline)."""
    if df.empty or month_column not in df.columns:
        return df.iloc[0:0]

    wanted = {m.lower() for m in period.months}
    mask = df[month_column].map(
        lambda v: isinstance(v, str) and (normalize_month(v) or '').lower() in wanted
    ).astype(bool)
    if year_column and year_column in df.columns:
        mask &= df[year_column].astype(str).str.strip() == period.year
    return df[mask]
