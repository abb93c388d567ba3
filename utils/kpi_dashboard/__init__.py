# utils/kpi_dashboard/__init__.py
"""
KPI Dashboard Module

Time-period selection and comparison engine for the departmental KPI
dashboards, plus the Streamlit pieces that drive it.

Components:
- calendar_model: Financial year / quarter / month lookup tables
- period_resolver: Selection classification + MoM/QoQ/YoY baselines
- selection_state: Selection state machine (months <-> quarters)
- filter_projection: Read-only filter view (predicates, labels)
- data_loader: Cached department rows from the database
- metrics: Period totals and comparison deltas
- filters: Sidebar period selector
- fragments: Filter badges and metric cards

Usage:
    from utils.kpi_dashboard import (
        CalendarModel,
        PeriodResolver,
        SelectionStateMachine,
        FilterProjection,
        DashboardDataStore,
        PeriodFilters,
    )
"""

from .calendar_model import (
    CalendarModel,
    MonthRef,
    PeriodSelectionError,
    CalendarConfigError,
    normalize_month,
    sort_months,
)
from .period_resolver import (
    PeriodResolver,
    LivePeriod,
    MonthPair,
    TimeSelectionContext,
    PeriodDescriptor,
    ComparisonPeriod,
    format_comparison_change,
)
from .selection_state import (
    SelectionStateMachine,
    SelectionState,
    InvalidSelectionError,
)
from .filter_projection import FilterProjection, filter_rows_for_period
from .data_loader import DashboardDataStore
from .metrics import compare_periods, summarize_period, summarize_by_kpi
from .filters import (
    PeriodFilters,
    get_period_engine,
    get_selection_machine,
    get_filter_projection,
)
from .fragments import (
    render_filter_status_badge,
    render_filter_info_alert,
    render_comparison_caption,
    render_period_metrics,
)

# Constants
from .constants import (
    FULL_MONTHS,
    SHORT_MONTHS,
    FINANCIAL_YEAR_QUARTERS,
    DEPARTMENT_TABLES,
    DEPARTMENT_LABELS,
    COLORS,
)

__all__ = [
    # Core
    'CalendarModel',
    'MonthRef',
    'PeriodResolver',
    'LivePeriod',
    'MonthPair',
    'TimeSelectionContext',
    'PeriodDescriptor',
    'ComparisonPeriod',
    'SelectionStateMachine',
    'SelectionState',
    'FilterProjection',

    # Errors
    'PeriodSelectionError',
    'CalendarConfigError',
    'InvalidSelectionError',

    # Helpers
    'normalize_month',
    'sort_months',
    'format_comparison_change',
    'filter_rows_for_period',

    # Data & metrics
    'DashboardDataStore',
    'compare_periods',
    'summarize_period',
    'summarize_by_kpi',

    # UI
    'PeriodFilters',
    'get_period_engine',
    'get_selection_machine',
    'get_filter_projection',
    'render_filter_status_badge',
    'render_filter_info_alert',
    'render_comparison_caption',
    'render_period_metrics',

    # Constants
    'FULL_MONTHS',
    'SHORT_MONTHS',
    'FINANCIAL_YEAR_QUARTERS',
    'DEPARTMENT_TABLES',
    'DEPARTMENT_LABELS',
    'COLORS',
]
