# app.py
"""
KPI Dashboard - Main Entry Point

Version: 1.0.0
"""

import streamlit as st
from utils.db import check_db_connection
from utils.kpi_dashboard import (
    get_period_engine,
    DEPARTMENT_LABELS,
    PeriodSelectionError,
)
import logging

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# ==================== PAGE CONFIGURATION ====================

APP_NAME = "KPI Dashboard"
APP_ICON = "📊"
APP_VERSION = "1.0.0"

st.set_page_config(
    page_title=APP_NAME,
    page_icon=APP_ICON,
    layout="wide",
    initial_sidebar_state="expanded"
)

# ==================== CUSTOM CSS ====================

st.markdown("""
<style>
    .main-header {
        font-size: 2.5rem;
        font-weight: bold;
        margin-bottom: 0.5rem;
        color: #1f77b4;
    }

    .sub-header {
        font-size: 1.1rem;
        color: #666;
        margin-bottom: 2rem;
    }

    .info-card {
        background: #f8f9fa;
        padding: 1.5rem;
        border-radius: 0.5rem;
        border-left: 4px solid #1f77b4;
        margin-bottom: 1rem;
    }

    .footer {
        text-align: center;
        color: #888;
        padding: 1rem;
        margin-top: 3rem;
        border-top: 1px solid #eee;
        font-size: 0.9rem;
    }
</style>
""", unsafe_allow_html=True)

# ==================== HELPER FUNCTIONS ====================

def show_reporting_period():
    """Show the configured live reporting period"""
    try:
        calendar, live_period, _ = get_period_engine()
    except PeriodSelectionError as e:
        logger.exception("Invalid calendar configuration")
        st.error("⚠️ Calendar configuration is invalid - fix it before using the dashboards.")
        st.exception(e)
        st.stop()

    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Current Month", live_period.month)
    with col2:
        st.metric("Current Quarter", live_period.quarter)
    with col3:
        st.metric("Financial Year", calendar.display_year(live_period.year))

    with st.expander("📅 Financial Year Calendar"):
        for year in calendar.available_years():
            quarters = " · ".join(
                calendar.describe_quarter(year, q) for q in calendar.available_quarters(year)
            )
            st.markdown(f"**{calendar.display_year(year)}** - {quarters}")


def show_main_app():
    """Display the landing page"""
    st.markdown(f'<p class="main-header">{APP_ICON} {APP_NAME}</p>', unsafe_allow_html=True)
    st.markdown('<p class="sub-header">Departmental performance by month and quarter</p>', unsafe_allow_html=True)

    # Check database connection
    db_ok, db_error = check_db_connection()
    if not db_ok:
        st.warning(f"⚠️ {db_error}")
        st.info("Dashboards will show no data until the database is reachable.")

    show_reporting_period()

    # Available dashboards info
    st.markdown("### 📊 Available Dashboards")

    for label in DEPARTMENT_LABELS.values():
        st.markdown(f"""
        <div class="info-card">
            <strong>{label}</strong><br>
            <span style="color: #666;">KPI actuals vs targets with MoM / QoQ / YoY comparison.</span>
        </div>
        """, unsafe_allow_html=True)

    st.info("👈 Open **KPI Overview** from the sidebar and pick a reporting period.")

    # Footer
    st.markdown(f"""
    <div class="footer">
        {APP_NAME} v{APP_VERSION}
    </div>
    """, unsafe_allow_html=True)


# ==================== MAIN ====================

show_main_app()
