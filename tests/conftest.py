"""
Shared fixtures for the KPI dashboard period engine tests.

Live period for all fixtures: February / Q4 / FY2026.
"""

import pandas as pd
import pytest

from utils.kpi_dashboard.calendar_model import CalendarModel
from utils.kpi_dashboard.constants import FINANCIAL_YEAR_QUARTERS
from utils.kpi_dashboard.data_loader import DashboardDataStore
from utils.kpi_dashboard.period_resolver import LivePeriod, PeriodResolver
from utils.kpi_dashboard.selection_state import SelectionStateMachine


@pytest.fixture
def calendar():
    return CalendarModel(FINANCIAL_YEAR_QUARTERS)


@pytest.fixture
def live_period():
    return LivePeriod(month="February", quarter="Q4", year="FY2026")


@pytest.fixture
def resolver(calendar, live_period):
    return PeriodResolver(calendar, live_period)


@pytest.fixture
def machine(calendar, live_period):
    return SelectionStateMachine(calendar, live_period)


@pytest.fixture
def make_machine(calendar):
    """Factory for machines with a custom live period / start year."""
    def _make(month="February", quarter="Q4", year="FY2026", **kwargs):
        return SelectionStateMachine(calendar, LivePeriod(month, quarter, year), **kwargs)
    return _make


@pytest.fixture
def kpi_rows():
    """Long-format department rows across FY2025 and FY2026."""
    return pd.DataFrame({
        'kpi_name': ['Leads', 'Leads', 'Leads', 'Leads', 'Deals', 'Deals', 'Leads', 'Leads'],
        'month': ['January', 'February', 'Mar', 'april', 'February', 'January', 'February', 'December'],
        'quarter': ['Q4', 'Q4', 'Q4', 'Q1', 'Q4', 'Q4', 'Q4', 'Q3'],
        'year': ['FY2026', 'FY2026', 'FY2026', 'FY2026', 'FY2026', 'FY2026', 'FY2025', 'FY2025'],
        'actual': [100, 120, 90, 80, 10, 8, 60, 70],
        'target': [100, 100, 100, 100, 10, 10, 50, 50],
    })


@pytest.fixture(autouse=True)
def clear_data_store_cache():
    DashboardDataStore.clear_cache()
    yield
    DashboardDataStore.clear_cache()
