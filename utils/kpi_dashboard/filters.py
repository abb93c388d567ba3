# utils/kpi_dashboard/filters.py
"""
Sidebar Period Selector for KPI Dashboard

Renders filter UI elements:
- Financial year selector
- Quarter toggle buttons (canonical business order)
- Month toggle buttons
- Quick actions (All quarters / All months / Reset)
- YoY comparison toggle

Every control calls exactly one SelectionStateMachine operation through
an on_click / on_change callback, so the state is settled before the
script reruns and redraws the buttons.

The machine is stored per session in st.session_state; calendar, live
period and resolver are built once per process from config.
"""

import logging
from typing import Optional, Tuple

import streamlit as st

from .calendar_model import CalendarModel, get_short_month, normalize_month
from .constants import (
    FULL_MONTHS,
    SESSION_KEY_SELECTION,
    SESSION_KEY_COMPARE_YOY,
)
from .filter_projection import FilterProjection
from .period_resolver import LivePeriod, PeriodResolver
from .selection_state import SelectionStateMachine

logger = logging.getLogger(__name__)

_YEAR_WIDGET_KEY = "kpi_period_year"


# =============================================================================
# ENGINE BOOTSTRAP
# =============================================================================

@st.cache_resource(show_spinner=False)
def get_period_engine() -> Tuple[CalendarModel, LivePeriod, PeriodResolver]:
    """
    Build calendar, live period and resolver from config (once per process).

    Raises CalendarConfigError on an inconsistent calendar or live period,
    which stops the app before any selection is shown.
    """
    from utils.config import config

    calendar = CalendarModel(config.get_calendar_tables())
    live_cfg = config.get_live_period_config()
    live_period = LivePeriod(
        month=live_cfg.month,
        quarter=live_cfg.quarter,
        year=live_cfg.year,
    ).validate(calendar)

    logger.info(f"✅ Live period: {live_period.month} {live_period.quarter} {live_period.year}")
    return calendar, live_period, PeriodResolver(calendar, live_period)


def get_selection_machine() -> SelectionStateMachine:
    """Per-session selection state machine (created on first access)."""
    if SESSION_KEY_SELECTION not in st.session_state:
        from utils.config import config

        calendar, live_period, _ = get_period_engine()
        st.session_state[SESSION_KEY_SELECTION] = SelectionStateMachine(
            calendar,
            live_period,
            default_quarter=config.get_live_period_config().default_quarter,
        )
    return st.session_state[SESSION_KEY_SELECTION]


def get_filter_projection(compare_yoy: Optional[bool] = None) -> FilterProjection:
    """Projection of the current session's selection."""
    _, _, resolver = get_period_engine()
    if compare_yoy is None:
        compare_yoy = st.session_state.get(SESSION_KEY_COMPARE_YOY, False)
    return FilterProjection.from_machine(get_selection_machine(), resolver, compare_yoy=compare_yoy)


# =============================================================================
# SIDEBAR SELECTOR
# =============================================================================

class PeriodFilters:
    """
    Sidebar period selector bound to the session's state machine.

    Usage:
        filters = PeriodFilters()
        projection = filters.render_sidebar()
        df = projection.filter_rows(df)
    """

    def __init__(self, machine: Optional[SelectionStateMachine] = None):
        self.machine = machine or get_selection_machine()
        self.calendar = self.machine.calendar

    def render_sidebar(self) -> FilterProjection:
        """Render all period controls and return the resulting projection."""
        st.sidebar.markdown("### 📅 Reporting Period")

        self._render_year_selector()
        self._render_quarter_buttons()
        self._render_month_buttons()
        self._render_quick_actions()
        compare_yoy = self._render_yoy_toggle()

        st.sidebar.markdown("---")
        return get_filter_projection(compare_yoy=compare_yoy)

    # =========================================================================
    # YEAR
    # =========================================================================

    def _render_year_selector(self):
        years = self.calendar.available_years()
        current = self.machine.selected_year

        # Keep widget in sync when the machine changed year elsewhere
        if st.session_state.get(_YEAR_WIDGET_KEY) != current:
            st.session_state[_YEAR_WIDGET_KEY] = current

        st.sidebar.selectbox(
            "📆 Financial Year",
            options=years,
            format_func=self.calendar.display_year,
            key=_YEAR_WIDGET_KEY,
            on_change=self._on_year_change,
        )

    def _on_year_change(self):
        self.machine.set_year(st.session_state[_YEAR_WIDGET_KEY])

    # =========================================================================
    # QUARTERS & MONTHS
    # =========================================================================

    def _render_quarter_buttons(self):
        year = self.machine.selected_year
        quarters = self.calendar.available_quarters(year)
        selected = set(self.machine.selected_quarters)

        st.sidebar.caption("Quarters")
        cols = st.sidebar.columns(len(quarters))
        for col, quarter in zip(cols, quarters):
            with col:
                st.button(
                    quarter,
                    key=f"kpi_quarter_{year}_{quarter}",
                    type="primary" if quarter in selected else "secondary",
                    help=self.calendar.describe_quarter(year, quarter),
                    on_click=self.machine.toggle_quarter,
                    args=(quarter,),
                    use_container_width=True,
                )

    def _render_month_buttons(self):
        year = self.machine.selected_year
        months = self.calendar.months_of_year(year)
        selected = set(self.machine.selected_months)

        st.sidebar.caption("Months")
        for row_start in range(0, len(months), 4):
            row = months[row_start:row_start + 4]
            cols = st.sidebar.columns(4)
            for col, month in zip(cols, row):
                with col:
                    st.button(
                        get_short_month(month),
                        key=f"kpi_month_{year}_{month}",
                        type="primary" if month in selected else "secondary",
                        help=month,
                        on_click=self.machine.toggle_month,
                        args=(month,),
                        use_container_width=True,
                    )

    # =========================================================================
    # QUICK ACTIONS
    # =========================================================================

    def _render_quick_actions(self):
        year = self.machine.selected_year
        col1, col2, col3 = st.sidebar.columns(3)

        with col1:
            st.button(
                "All Q",
                key="kpi_all_quarters",
                help="Select all quarters",
                on_click=self.machine.select_all_quarters,
                disabled=len(self.machine.selected_quarters) == len(self.calendar.available_quarters(year)),
                use_container_width=True,
            )
        with col2:
            st.button(
                "All M",
                key="kpi_all_months",
                help="Select all months",
                on_click=self.machine.select_all_months,
                disabled=len(self.machine.selected_months) == len(self.calendar.months_of_year(year)),
                use_container_width=True,
            )
        with col3:
            st.button(
                "✖ Reset",
                key="kpi_reset_period",
                help="Reset to the current reporting month",
                on_click=self.machine.clear_selection,
                use_container_width=True,
            )

    def _render_yoy_toggle(self) -> bool:
        from utils.config import config

        if not config.is_feature_enabled("YOY_COMPARISON"):
            return False

        return st.sidebar.checkbox(
            "📊 Compare YoY",
            value=False,
            key=SESSION_KEY_COMPARE_YOY,
            help="Compare with the same months of the prior financial year",
        )


# =============================================================================
# STANDALONE HELPERS
# =============================================================================

def get_selection_summary(projection: FilterProjection) -> str:
    """Human-readable summary, e.g. 'Q4 (FY2026) • Jan, Feb, Mar • live'"""
    parts = [projection.display_label()]

    months = projection.selected_months
    if len(months) <= 3:
        parts.append(", ".join(get_short_month(m) for m in months))
    else:
        parts.append(f"{len(months)} months")

    if projection.is_live_period():
        parts.append("live")

    return " • ".join(parts)


def month_sort_key(month: str) -> int:
    """Sort key for DataFrame month columns (unknown labels last)."""
    full = normalize_month(month) if isinstance(month, str) else None
    return FULL_MONTHS.index(full) if full else len(FULL_MONTHS)
