# utils/kpi_dashboard/selection_state.py
"""
Period Selection State Machine

Single owner of the dashboard's mutable period selection:
selected months, selected quarters and the financial year.

Rules enforced by every public operation (one atomic transition each):
- Quarter mode: selected months are derived from the selected quarters
  and replace any previous custom months.
- Month (custom) mode: toggling a month always clears selected quarters.
- Never empty: a transition that would leave both lists empty falls back
  to the default selection (live month, or a fallback quarter when the
  live month is not part of the active year).
- Changing the year resets to that year's first quarter.

Derivation only ever runs quarters -> months inside a transition, so there
is no feedback loop between the two lists.

Usage:
    machine = SelectionStateMachine(calendar, live_period)

    machine.toggle_quarter('Q1')
    machine.selected_months        # ['April', 'May', 'June']

    machine.toggle_month('April')
    machine.selected_quarters      # []
    machine.selected_months        # ['May', 'June']
"""

import logging
import threading
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from .calendar_model import CalendarModel, PeriodSelectionError, normalize_month, sort_months
from .period_resolver import LivePeriod

logger = logging.getLogger(__name__)


# ==================== CUSTOM EXCEPTIONS ====================

class InvalidSelectionError(PeriodSelectionError):
    """Raised when a month, quarter or year is not valid for the active calendar"""
    def __init__(self, kind: str, value: str, year: str):
        self.kind = kind
        self.value = value
        self.year = year
        super().__init__(f"{kind} {value!r} is not available in {year}")


# ==================== SNAPSHOT ====================

@dataclass(frozen=True)
class SelectionState:
    """Immutable snapshot of the selection handed to readers."""
    selected_months: Tuple[str, ...]
    selected_quarters: Tuple[str, ...]
    selected_year: str

    @property
    def is_quarter_mode(self) -> bool:
        return len(self.selected_quarters) > 0

    @property
    def is_custom_mode(self) -> bool:
        return len(self.selected_months) > 0 and not self.selected_quarters

    def to_dict(self) -> Dict:
        return {
            'selected_months': list(self.selected_months),
            'selected_quarters': list(self.selected_quarters),
            'selected_year': self.selected_year,
        }


# ==================== STATE MACHINE ====================

class SelectionStateMachine:
    """
    Owns the period selection for one dashboard session.

    Args:
        calendar: Validated CalendarModel
        live_period: Current reporting period (drives defaults)
        initial_year: Starting financial year (default: live year)
        default_quarter: Fallback quarter when the live month is not in the
                         active year (default: the year's first quarter)
    """

    def __init__(
        self,
        calendar: CalendarModel,
        live_period: LivePeriod,
        initial_year: Optional[str] = None,
        default_quarter: Optional[str] = None
    ):
        self.calendar = calendar
        self.live_period = live_period
        self.default_quarter = default_quarter
        self._lock = threading.RLock()
        self._version = 0

        year = initial_year or live_period.year
        if not calendar.has_year(year):
            raise InvalidSelectionError("Year", year, "the calendar")

        self._state = self._default_state(year)
        logger.debug(f"Selection initialised: {self._state.to_dict()}")

    # ==================== READ ACCESS ====================

    @property
    def state(self) -> SelectionState:
        return self._state

    @property
    def selected_months(self) -> List[str]:
        return list(self._state.selected_months)

    @property
    def selected_quarters(self) -> List[str]:
        return list(self._state.selected_quarters)

    @property
    def selected_year(self) -> str:
        return self._state.selected_year

    @property
    def version(self) -> int:
        """Incremented on every transition; lets views detect changes."""
        return self._version

    # ==================== TRANSITIONS ====================

    def toggle_month(self, month: str) -> SelectionState:
        """Add/remove a month. Always leaves quarter mode."""
        with self._lock:
            year = self._state.selected_year
            full = self._require_month(month, year)

            months = list(self._state.selected_months)
            if full in months:
                months.remove(full)
            else:
                months.append(full)

            return self._commit(months, [], year, f"toggle_month({full})")

    def toggle_quarter(self, quarter: str) -> SelectionState:
        """Add/remove a quarter. Months are re-derived from the quarters."""
        with self._lock:
            year = self._state.selected_year
            quarter = self._require_quarter(quarter, year)

            quarters = list(self._state.selected_quarters)
            if quarter in quarters:
                quarters.remove(quarter)
            else:
                quarters.append(quarter)

            months = self.calendar.months_of_quarters(year, quarters)
            return self._commit(months, quarters, year, f"toggle_quarter({quarter})")

    def select_all_months(self) -> SelectionState:
        """Every month of the active year, as a custom selection."""
        with self._lock:
            year = self._state.selected_year
            return self._commit(self.calendar.months_of_year(year), [], year, "select_all_months")

    def select_all_quarters(self) -> SelectionState:
        with self._lock:
            year = self._state.selected_year
            quarters = self.calendar.available_quarters(year)
            months = self.calendar.months_of_quarters(year, quarters)
            return self._commit(months, quarters, year, "select_all_quarters")

    def clear_selection(self) -> SelectionState:
        """Reset to the default selection for the active year."""
        with self._lock:
            default = self._default_state(self._state.selected_year)
            return self._commit(
                default.selected_months, default.selected_quarters,
                default.selected_year, "clear_selection"
            )

    def set_year(self, year: str) -> SelectionState:
        """
        Switch financial year.

        Quarter/month meaning is year-relative, so the selection resets to
        the new year's first quarter.
        """
        with self._lock:
            if not self.calendar.has_year(year):
                logger.error(f"set_year rejected: unknown financial year {year!r}")
                raise InvalidSelectionError("Year", year, "the calendar")

            first_quarter = self.calendar.available_quarters(year)[0]
            months = self.calendar.months_of_quarter(year, first_quarter)
            return self._commit(months, [first_quarter], year, f"set_year({year})")

    # ==================== INTERNALS ====================

    def _commit(
        self,
        months: Iterable[str],
        quarters: Iterable[str],
        year: str,
        operation: str
    ) -> SelectionState:
        quarter_set = set(quarters)
        ordered_quarters = tuple(
            q for q in self.calendar.available_quarters(year) if q in quarter_set
        )
        ordered_months = tuple(sort_months(set(months)))

        if not ordered_months and not ordered_quarters:
            logger.debug(f"{operation} emptied the selection, restoring default")
            state = self._default_state(year)
        else:
            state = SelectionState(ordered_months, ordered_quarters, year)

        self._state = state
        self._version += 1
        logger.debug(f"{operation} -> {state.to_dict()}")
        return state

    def _default_state(self, year: str) -> SelectionState:
        if self.calendar.is_valid_month(year, self.live_period.month):
            return SelectionState((self.live_period.month,), (), year)

        quarter = self.default_quarter
        if not quarter or not self.calendar.is_valid_quarter(year, quarter):
            quarter = self.calendar.available_quarters(year)[0]
        months = tuple(self.calendar.months_of_quarter(year, quarter))
        return SelectionState(months, (quarter,), year)

    def _require_month(self, month: str, year: str) -> str:
        full = normalize_month(month)
        if full is None or not self.calendar.is_valid_month(year, full):
            logger.error(f"toggle_month rejected: {month!r} not in {year}")
            raise InvalidSelectionError("Month", month, year)
        return full

    def _require_quarter(self, quarter: str, year: str) -> str:
        label = str(quarter).strip().upper()
        if not self.calendar.is_valid_quarter(year, label):
            logger.error(f"toggle_quarter rejected: {quarter!r} not in {year}")
            raise InvalidSelectionError("Quarter", quarter, year)
        return label

    def __repr__(self) -> str:
        state = self._state
        mode = "QUARTER" if state.is_quarter_mode else "CUSTOM"
        return (
            f"SelectionStateMachine({state.selected_year}, {mode}, "
            f"months={list(state.selected_months)}, quarters={list(state.selected_quarters)})"
        )
