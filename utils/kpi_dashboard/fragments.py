# utils/kpi_dashboard/fragments.py
"""
Display fragments for the period filter.

- Filter status badge (inline / pill / card)
- Filter info alert (custom or full-year selections)
- Comparison caption and period metric cards
"""

import logging
from typing import Dict

import streamlit as st

from .constants import COLORS, COMPARISON_SHORT_LABELS
from .filter_projection import FilterProjection

logger = logging.getLogger(__name__)


def render_filter_status_badge(projection: FilterProjection, variant: str = 'inline', show_icon: bool = True):
    """
    Show the current filter label.

    Args:
        projection: Current FilterProjection
        variant: 'inline' | 'pill' | 'card'
        show_icon: Prefix with a calendar/clock icon
    """
    label = projection.display_label()
    if not label:
        return

    icon = ""
    if show_icon:
        icon = "🕒 " if projection.is_custom_mode() else "📅 "

    if variant == 'pill':
        st.markdown(
            f'<span style="display:inline-block;padding:0.25rem 0.75rem;border-radius:999px;'
            f'background:#eef5fc;border:1px solid {COLORS["selected"]};color:{COLORS["selected"]};'
            f'font-size:0.8rem;font-weight:500;">{icon}{label}</span>',
            unsafe_allow_html=True
        )
        return

    if variant == 'card':
        with st.container(border=True):
            st.caption("Current Filter")
            st.markdown(f"**{icon}{label}**")
            if projection.is_custom_mode():
                st.caption(f"Custom selection: {len(projection.selected_months)} months")
            if projection.is_full_year():
                st.caption(f"All 12 months of {projection.selected_year}")
        return

    st.caption(f"{icon}{label}")


def render_filter_info_alert(projection: FilterProjection):
    """Explain custom and full-year selections."""
    months = projection.selected_months
    if not months:
        return

    if projection.is_full_year():
        st.info(
            f"📅 **Full Year View** - All 12 months of {projection.selected_year} are included."
        )
    elif projection.is_custom_mode():
        st.info(
            f"📅 **Custom Period Selected** - {len(months)} specific month(s). "
            f"Dashboards show data only for these months."
        )


def render_comparison_caption(projection: FilterProjection):
    """One-line caption describing the comparison baseline, if any."""
    periods = projection.comparison_period
    mode = COMPARISON_SHORT_LABELS.get(projection.context.comparison_mode, "")

    if not periods.has_comparison:
        st.caption("No comparison baseline for this selection")
        return

    baseline = periods.comparison
    st.caption(
        f"{mode}: {projection.comparison_label()} · baseline "
        f"{', '.join(baseline.months)} {baseline.year}"
    )


def render_period_metrics(comparison: Dict, unit_format: str = "{:,.0f}"):
    """
    Actual / target / achievement cards with delta vs baseline.

    Args:
        comparison: Output of metrics.compare_periods()
    """
    current = comparison['current']
    baseline = comparison.get('baseline')

    col1, col2, col3 = st.columns(3)

    with col1:
        delta = None
        if baseline is not None and comparison.get('change_percent') is not None:
            delta = f"{comparison['change_percent']:+.1f}% vs {baseline['label']}"
        st.metric("Actual", unit_format.format(current['actual']), delta=delta)

    with col2:
        st.metric("Target", unit_format.format(current['target']))

    with col3:
        achievement = current['achievement']
        st.metric(
            "Achievement",
            f"{achievement:.1f}%" if achievement is not None else "N/A",
            help=f"Status: {current['status']}",
        )
