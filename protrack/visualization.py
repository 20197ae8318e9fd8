"""Plotly visualisation helpers for ProTrack.

Each function accepts the plain mappings and frames produced by
:mod:`protrack.aggregation` and :mod:`protrack.dashboard` and returns a
``plotly.graph_objects.Figure`` that Streamlit can render via
``st.plotly_chart``.  Empty input yields an empty figure titled
"No data to display" rather than an error.
"""

from __future__ import annotations

from typing import Dict, Hashable

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from .budget import OVER_LIMIT_THRESHOLD, WARNING_THRESHOLD
from .common.formatting import format_currency
from .config import CURRENCY_SYMBOL
from .taxonomy import activity_color, category_color


def _empty_figure() -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title="No data to display")
    return fig


def _mapping_frame(mapping: Dict[Hashable, float], key: str, value: str) -> pd.DataFrame:
    return pd.DataFrame({key: list(mapping.keys()), value: list(mapping.values())})


def create_expense_category_chart(categories: Dict[Hashable, float], title: str | None = None) -> go.Figure:
    """Doughnut chart of spend per category.

    Parameters
    ----------
    categories : dict
        Category name to summed amount, e.g. from
        :func:`protrack.aggregation.amount_by_category`.
    title : str, optional
        Chart title.

    Returns
    -------
    plotly.graph_objects.Figure
        Doughnut chart coloured with the category palette.
    """
    if not categories:
        return _empty_figure()
    df = _mapping_frame(categories, "Category", "Amount")
    fig = px.pie(
        df,
        names="Category",
        values="Amount",
        hole=0.5,
        color="Category",
        color_discrete_map={c: category_color(c) for c in df["Category"]},
    )
    fig.update_traces(hovertemplate="%{label}: " + CURRENCY_SYMBOL + "%{value:,.2f}<extra></extra>")
    fig.update_layout(title=title or "Spending by category")
    return fig


def create_time_allocation_chart(activity_hours: Dict[Hashable, float], title: str | None = None) -> go.Figure:
    """Pie chart of hours per activity."""
    if not activity_hours:
        return _empty_figure()
    df = _mapping_frame(activity_hours, "Activity", "Hours")
    fig = px.pie(
        df,
        names="Activity",
        values="Hours",
        color="Activity",
        color_discrete_map={a: activity_color(a) for a in df["Activity"]},
    )
    fig.update_traces(hovertemplate="%{label}: %{value}h<extra></extra>")
    fig.update_layout(title=title or "Time allocation")
    return fig


def create_daily_expense_chart(daily: Dict[str, float], title: str | None = None) -> go.Figure:
    """Filled line chart of spend per day of the month.

    The x axis shows the day of the month taken from each ISO date key.
    """
    if not daily:
        return _empty_figure()
    df = pd.DataFrame({
        "Day": [int(day[-2:]) for day in daily],
        "Amount": list(daily.values()),
    })
    fig = px.area(df, x="Day", y="Amount", line_shape="spline")
    fig.update_layout(
        title=title or "Daily spending",
        xaxis_title="Day",
        yaxis_title=f"Amount ({CURRENCY_SYMBOL})",
        yaxis_rangemode="tozero",
    )
    return fig


def create_payment_mode_chart(payment_modes: Dict[Hashable, float], title: str | None = None) -> go.Figure:
    """Bar chart of spend per payment mode."""
    if not payment_modes:
        return _empty_figure()
    df = _mapping_frame(payment_modes, "Payment Mode", "Amount")
    fig = px.bar(df, x="Payment Mode", y="Amount")
    fig.update_layout(
        title=title or "Spending by payment mode",
        xaxis_title="Payment Mode",
        yaxis_title=f"Amount ({CURRENCY_SYMBOL})",
    )
    return fig


def create_weekly_comparison_chart(weekly: pd.DataFrame, title: str | None = None) -> go.Figure:
    """Bar chart of the last seven days from :func:`protrack.dashboard.weekly_comparison`."""
    if weekly.empty:
        return _empty_figure()
    fig = px.bar(weekly, x="Day", y="Amount", hover_data=["Date"])
    fig.update_layout(
        title=title or "Last 7 days",
        xaxis_title="Day",
        yaxis_title=f"Amount ({CURRENCY_SYMBOL})",
    )
    return fig


def create_budget_gauge(percentage: float, budget: float, spent: float) -> go.Figure:
    """Gauge showing budget use; the needle caps at 100 while the label does not."""
    fig = go.Figure(go.Indicator(
        mode="gauge+number",
        value=min(percentage, 100.0),
        number={"suffix": "%"},
        title={"text": f"{percentage:.1f}% used ({format_currency(spent)} of {format_currency(budget)})"},
        gauge={
            "axis": {"range": [0, 100]},
            "steps": [
                {"range": [0, WARNING_THRESHOLD], "color": "#c6f6d5"},
                {"range": [WARNING_THRESHOLD, OVER_LIMIT_THRESHOLD], "color": "#fefcbf"},
            ],
            "threshold": {"line": {"color": "#f5576c", "width": 4}, "value": OVER_LIMIT_THRESHOLD},
        },
    ))
    return fig
