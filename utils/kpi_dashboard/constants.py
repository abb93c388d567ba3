# utils/kpi_dashboard/constants.py
"""
Constants for KPI Dashboard Module

Centralized configuration for:
- Month names (full + short)
- Default financial year quarter tables
- Default live reporting period
- Comparison modes and selection types
- Department data sources
- Session state keys
- Color scheme
"""

# =====================================================================
# MONTH ORDER
# =====================================================================

FULL_MONTHS = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December"
]

SHORT_MONTHS = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"
]

MONTHS_PER_QUARTER = 3

# =====================================================================
# FINANCIAL YEAR CALENDAR
# =====================================================================

# Key order is the canonical business order of quarters for that year.
# FY2025 is a legacy partial year: only Q4 (Jan-Mar 2025) was reported.
FINANCIAL_YEAR_QUARTERS = {
    "FY2025": {
        "Q4": ["January", "February", "March"],
    },
    "FY2026": {
        "Q4": ["January", "February", "March"],
        "Q1": ["April", "May", "June"],
        "Q2": ["July", "August", "September"],
        "Q3": ["October", "November", "December"],
    },
}

QUARTER_LABELS = ["Q1", "Q2", "Q3", "Q4"]

# =====================================================================
# LIVE REPORTING PERIOD
# =====================================================================

# What the business currently considers "now". Overridden via LIVE_MONTH /
# LIVE_QUARTER / LIVE_YEAR settings.
DEFAULT_LIVE_MONTH = "February"
DEFAULT_LIVE_QUARTER = "Q4"
DEFAULT_LIVE_YEAR = "FY2026"

# =====================================================================
# SELECTION TYPES & COMPARISON MODES
# =====================================================================

SELECTION_SINGLE_MONTH = "single-month"
SELECTION_TWO_MONTHS = "two-consecutive-months"
SELECTION_QUARTER = "complete-quarter"
SELECTION_CUSTOM = "custom"

COMPARISON_MOM = "month-over-month"
COMPARISON_QOQ = "quarter-over-quarter"
COMPARISON_YOY = "year-over-year"
COMPARISON_NONE = "none"

COMPARISON_KIND_PREVIOUS_MONTH = "previous-month"
COMPARISON_KIND_PREVIOUS_QUARTER = "previous-quarter"
COMPARISON_KIND_PREVIOUS_YEAR = "previous-year"

COMPARISON_SHORT_LABELS = {
    COMPARISON_MOM: "MoM",
    COMPARISON_QOQ: "QoQ",
    COMPARISON_YOY: "YoY",
    COMPARISON_NONE: "",
}

# =====================================================================
# DEPARTMENT DATA SOURCES
# =====================================================================

DEPARTMENT_TABLES = {
    "product": "product_dashboard",
    "sales": "sales_dashboard",
    "marketing": "marketing_dashboard",
    "rnd": "rnd_dashboard",
    "finance": "finance_dashboard",
    "bd": "bd_dashboard",
}

DEPARTMENT_LABELS = {
    "product": "Product Engineering",
    "sales": "Sales",
    "marketing": "Marketing",
    "rnd": "Research & Development",
    "finance": "Finance",
    "bd": "Business Development",
}

# Columns every department table is expected to expose
ROW_MONTH_FIELD = "month"
ROW_QUARTER_FIELD = "quarter"
ROW_YEAR_FIELD = "year"
ROW_ACTUAL_FIELD = "actual"
ROW_TARGET_FIELD = "target"
ROW_KPI_FIELD = "kpi_name"

# =====================================================================
# CACHE & SESSION KEYS
# =====================================================================

CACHE_TTL_SECONDS = 300

SESSION_KEY_SELECTION = "kpi_dashboard_selection"
SESSION_KEY_COMPARE_YOY = "kpi_dashboard_compare_yoy"
SESSION_KEY_DEPARTMENT = "kpi_dashboard_department"

# =====================================================================
# COLOR SCHEME
# =====================================================================

COLORS = {
    "selected": "#1f77b4",             # Blue
    "unselected": "#e0e0e0",           # Grey
    "live": "#17becf",                 # Cyan
    "change_positive": "#28a745",      # Green
    "change_negative": "#dc3545",      # Red
    "text_dark": "#333333",
    "text_light": "#666666",
}

# Achievement bands (actual / target, in percent)
STATUS_ON_TRACK_MIN = 80
STATUS_ON_TRACK_MAX = 120
STATUS_AT_RISK_MIN = 60
