# utils/kpi_dashboard/calendar_model.py
"""
Financial Year Calendar for KPI Dashboard

Pure lookup tables for financial years, quarters and their months.
No mutable state after construction.

Quarter meaning is year-dependent: the same label can map to different
months in different financial years, and a year may expose only some
quarters (FY2025 only exposes Q4). The month -> quarter lookup is therefore
rebuilt per financial year from the forward table.

Usage:
    calendar = CalendarModel(FINANCIAL_YEAR_QUARTERS)

    calendar.available_quarters("FY2026")          # ['Q4', 'Q1', 'Q2', 'Q3']
    calendar.months_of_quarter("FY2026", "Q1")     # ['April', 'May', 'June']
    calendar.previous_month("January", "FY2026")   # MonthRef('December', 'FY2025')
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from .constants import FULL_MONTHS, SHORT_MONTHS, MONTHS_PER_QUARTER, QUARTER_LABELS

logger = logging.getLogger(__name__)

_YEAR_PATTERN = re.compile(r"^(\D*)(\d+)$")


# ==================== CUSTOM EXCEPTIONS ====================

class PeriodSelectionError(Exception):
    """Base exception for period selection errors"""
    pass


class CalendarConfigError(PeriodSelectionError):
    """Raised when calendar tables are missing or inconsistent"""
    pass


# ==================== VALUE TYPES ====================

@dataclass(frozen=True)
class MonthRef:
    """A month within a specific financial year."""
    month: str
    year: str

    @property
    def month_index(self) -> int:
        return FULL_MONTHS.index(self.month)

    def to_dict(self) -> Dict[str, str]:
        return {'month': self.month, 'year': self.year}


# ==================== MONTH NAME HELPERS ====================

def normalize_month(value: str) -> Optional[str]:
    """
    Map a month label to its full name, case-insensitively.

    Accepts full ("January") and short ("Jan") names.
    Returns None for anything else.
    """
    if not isinstance(value, str):
        return None
    key = value.strip().lower()
    for full, short in zip(FULL_MONTHS, SHORT_MONTHS):
        if key == full.lower() or key == short.lower():
            return full
    return None


def month_index(month: str) -> int:
    """Calendar index (0 = January). Raises CalendarConfigError for unknown names."""
    full = normalize_month(month)
    if full is None:
        raise CalendarConfigError(f"Unknown month: {month!r}")
    return FULL_MONTHS.index(full)


def sort_months(months: Iterable[str]) -> List[str]:
    """Sort full month names by calendar order."""
    return sorted(months, key=month_index)


def get_short_month(month: str) -> str:
    full = normalize_month(month)
    return SHORT_MONTHS[FULL_MONTHS.index(full)] if full else month


# ==================== CALENDAR MODEL ====================

class CalendarModel:
    """
    Financial year -> quarter -> months lookup.

    The forward table is validated on construction so that a broken
    calendar fails at startup instead of producing wrong comparisons:
    - every quarter label is one of Q1..Q4
    - every quarter holds exactly 3 distinct, known months
    - no month appears in two quarters of the same year
    """

    def __init__(self, quarter_tables: Mapping[str, Mapping[str, Sequence[str]]]):
        if not quarter_tables:
            raise CalendarConfigError("Calendar has no financial years configured")

        self._tables: Dict[str, Dict[str, List[str]]] = {}
        self._month_to_quarter: Dict[str, Dict[str, str]] = {}

        for year, quarters in quarter_tables.items():
            self._tables[year] = self._validate_year(year, quarters)
            self._month_to_quarter[year] = {
                month: quarter
                for quarter, months in self._tables[year].items()
                for month in months
            }

        summary = ", ".join(f"{y} [{', '.join(q)}]" for y, q in self._tables.items())
        logger.info(f"📅 Calendar loaded: {summary}")

    @staticmethod
    def _validate_year(year: str, quarters: Mapping[str, Sequence[str]]) -> Dict[str, List[str]]:
        if not quarters:
            raise CalendarConfigError(f"{year} has no quarters configured")

        validated = {}
        seen = {}
        for quarter, months in quarters.items():
            if quarter not in QUARTER_LABELS:
                raise CalendarConfigError(f"{year}: unknown quarter label {quarter!r}")

            full_months = []
            for month in months:
                full = normalize_month(month)
                if full is None:
                    raise CalendarConfigError(f"{year} {quarter}: unknown month {month!r}")
                if full in seen:
                    raise CalendarConfigError(
                        f"{year}: {full} is in both {seen[full]} and {quarter}"
                    )
                seen[full] = quarter
                full_months.append(full)

            if len(full_months) != MONTHS_PER_QUARTER:
                raise CalendarConfigError(
                    f"{year} {quarter}: expected {MONTHS_PER_QUARTER} months, got {len(full_months)}"
                )
            validated[quarter] = sort_months(full_months)

        return validated

    def _year_table(self, year: str) -> Dict[str, List[str]]:
        table = self._tables.get(year)
        if table is None:
            raise CalendarConfigError(f"Unknown financial year: {year!r}")
        return table

    # ==================== FORWARD / INVERSE LOOKUP ====================

    def available_years(self) -> List[str]:
        return list(self._tables)

    def has_year(self, year: str) -> bool:
        return year in self._tables

    def available_quarters(self, year: str) -> List[str]:
        """Quarters defined for the year, in canonical business order."""
        return list(self._year_table(year))

    def months_of_quarter(self, year: str, quarter: str) -> List[str]:
        """Months of (year, quarter) in calendar order; empty if the year lacks that quarter."""
        return list(self._year_table(year).get(quarter, []))

    def quarter_of_month(self, year: str, month: str, strict: bool = True) -> Optional[str]:
        """
        Quarter containing the month in the given year.

        With strict=True (default) a month the year does not cover is a
        configuration error; strict=False returns None instead.
        """
        self._year_table(year)
        full = normalize_month(month)
        quarter = self._month_to_quarter[year].get(full) if full else None
        if quarter is None and strict:
            raise CalendarConfigError(f"{month!r} is not part of any quarter in {year}")
        return quarter

    def months_of_year(self, year: str) -> List[str]:
        """All months the year's quarters cover, calendar order."""
        self._year_table(year)
        return sort_months(self._month_to_quarter[year])

    def is_valid_month(self, year: str, month: str) -> bool:
        return self.quarter_of_month(year, month, strict=False) is not None

    def is_valid_quarter(self, year: str, quarter: str) -> bool:
        return quarter in self._year_table(year)

    # ==================== MULTI-VALUE HELPERS ====================

    def quarters_of_months(self, year: str, months: Iterable[str]) -> List[str]:
        """Quarters touched by any of the months, canonical order."""
        touched = {self.quarter_of_month(year, m, strict=False) for m in months}
        return [q for q in self.available_quarters(year) if q in touched]

    def months_of_quarters(self, year: str, quarters: Iterable[str]) -> List[str]:
        """Union of the quarters' months, calendar order."""
        months = set()
        for quarter in quarters:
            months.update(self.months_of_quarter(year, quarter))
        return sort_months(months)

    def is_quarter_selected(self, year: str, months: Iterable[str], quarter: str) -> bool:
        """True if every month of the quarter is among the given months."""
        quarter_months = self.months_of_quarter(year, quarter)
        if not quarter_months:
            return False
        selected = {normalize_month(m) for m in months}
        return all(m in selected for m in quarter_months)

    def match_quarter(self, year: str, months: Iterable[str]) -> Optional[str]:
        """The quarter whose months exactly equal the given set, if any."""
        selected = {normalize_month(m) for m in months}
        for quarter in self.available_quarters(year):
            if set(self.months_of_quarter(year, quarter)) == selected:
                return quarter
        return None

    def is_complete_quarter(self, year: str, months: Iterable[str]) -> bool:
        return self.match_quarter(year, months) is not None

    # ==================== YEAR STEPPING ====================

    def prior_year(self, year: str) -> str:
        """
        Identifier of the financial year before `year`.

        Uses the configured year order when possible, otherwise steps the
        numeric suffix (FY2025 -> FY2024).
        """
        years = self.available_years()
        if year in years and years.index(year) > 0:
            return years[years.index(year) - 1]
        return self._shift_year(year, -1)

    def next_year(self, year: str) -> str:
        years = self.available_years()
        if year in years and years.index(year) < len(years) - 1:
            return years[years.index(year) + 1]
        return self._shift_year(year, 1)

    def has_prior_year(self, year: str) -> bool:
        years = self.available_years()
        return year in years and years.index(year) > 0

    @staticmethod
    def _shift_year(year: str, delta: int) -> str:
        match = _YEAR_PATTERN.match(str(year))
        if not match:
            raise CalendarConfigError(f"Cannot derive adjacent year for {year!r}")
        prefix, number = match.groups()
        return f"{prefix}{int(number) + delta}"

    # ==================== MONTH STEPPING ====================

    def previous_month(self, month: str, year: str) -> MonthRef:
        """Step back one month; January rolls to December of the prior year."""
        index = month_index(month)
        if index == 0:
            return MonthRef(FULL_MONTHS[11], self.prior_year(year))
        return MonthRef(FULL_MONTHS[index - 1], year)

    def next_month(self, month: str, year: str) -> MonthRef:
        """Step forward one month; December rolls to January of the next year."""
        index = month_index(month)
        if index == 11:
            return MonthRef(FULL_MONTHS[0], self.next_year(year))
        return MonthRef(FULL_MONTHS[index + 1], year)

    def same_month_prior_year(self, month: str, year: str) -> MonthRef:
        return MonthRef(FULL_MONTHS[month_index(month)], self.prior_year(year))

    # ==================== DISPLAY ====================

    @staticmethod
    def display_year(year: str) -> str:
        """'FY2026' -> 'FY 2026'"""
        match = _YEAR_PATTERN.match(str(year))
        if not match or not match.group(1):
            return str(year)
        return f"{match.group(1).strip()} {match.group(2)}"

    def describe_quarter(self, year: str, quarter: str) -> str:
        """Tooltip text, e.g. 'Q1: April, May, June'"""
        return f"{quarter}: {', '.join(self.months_of_quarter(year, quarter))}"
