"""
Plotly chart factory functions with consistent styling for the dashboard.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

from vetting_dashboard.data.models import RISK_LEVEL_COLORS
from vetting_dashboard.risk.network import RelationshipGraph

DEFAULT_TEMPLATE = "plotly_white"
DEFAULT_COLOR_SEQUENCE = [
    "#1f77b4",  # blue for in-flight work
    "#ff7f0e",  # orange for pending / warnings
    "#2ca02c",  # green for cleared / complete
    "#d62728",  # red for adverse / overdue
    "#9467bd",
    "#8c564b",
]
GAUGE_STEPS = [
    (0, 25, "#d1fae5"),
    (25, 50, "#fef3c7"),
    (50, 75, "#fed7aa"),
    (75, 100, "#fecaca"),
]


def _configure_layout(
    fig: go.Figure,
    title: Optional[str] = None,
    yaxis_title: Optional[str] = None,
    yaxis_tickformat: Optional[str] = None,
    legend_title: Optional[str] = None,
) -> go.Figure:
    fig.update_layout(
        template=DEFAULT_TEMPLATE,
        colorway=DEFAULT_COLOR_SEQUENCE,
        title=title,
        legend_title=legend_title,
        hovermode="x unified",
        margin=dict(l=40, r=20, t=60, b=40),
    )
    if yaxis_title:
        fig.update_yaxes(title=yaxis_title)
    if yaxis_tickformat:
        fig.update_yaxes(tickformat=yaxis_tickformat)
    fig.update_xaxes(showgrid=False)
    fig.update_yaxes(showgrid=True, zeroline=True)
    return fig


def render_plotly(fig: go.Figure, key: Optional[str] = None) -> None:
    st.plotly_chart(fig, width="stretch", config={"displayModeBar": False}, key=key)


def counts_frame(counts: Dict[str, int], label: str = "label", value: str = "count") -> pd.DataFrame:
    return pd.DataFrame({label: list(counts.keys()), value: list(counts.values())})


def line_chart(
    df: pd.DataFrame,
    x: str,
    y: str,
    color: Optional[str] = None,
    title: Optional[str] = None,
    yaxis_title: Optional[str] = None,
    yaxis_tickformat: Optional[str] = None,
    markers: bool = True,
    hover_data: Optional[List[str]] = None,
) -> go.Figure:
    fig = px.line(df, x=x, y=y, color=color, markers=markers, hover_data=hover_data)
    fig = _configure_layout(fig, title, yaxis_title, yaxis_tickformat)
    return fig


def bar_chart(
    df: pd.DataFrame,
    x: str,
    y: str,
    color: Optional[str] = None,
    barmode: str = "group",
    orientation: str = "v",
    title: Optional[str] = None,
    yaxis_title: Optional[str] = None,
    yaxis_tickformat: Optional[str] = None,
    category_orders: Optional[Dict[str, List[str]]] = None,
    color_discrete_map: Optional[Dict[str, str]] = None,
    text_auto: bool = False,
) -> go.Figure:
    fig = px.bar(
        df,
        x=x,
        y=y,
        color=color,
        barmode=barmode,
        orientation=orientation,
        category_orders=category_orders,
        color_discrete_map=color_discrete_map,
        text_auto=text_auto,
    )
    fig = _configure_layout(fig, title, yaxis_title, yaxis_tickformat)
    if text_auto:
        fig.update_traces(textposition="outside", cliponaxis=False)
    return fig


def pie_chart(
    df: pd.DataFrame,
    names: str,
    values: str,
    title: Optional[str] = None,
    hole: float = 0.5,
    color_discrete_map: Optional[Dict[str, str]] = None,
) -> go.Figure:
    fig = px.pie(df, names=names, values=values, hole=hole, color=names, color_discrete_map=color_discrete_map)
    fig = _configure_layout(fig, title)
    fig.update_traces(textinfo="percent+label", textposition="inside")
    fig.update_layout(hovermode="closest", showlegend=False)
    return fig


def gauge_chart(value: Optional[float], title: str, max_value: float = 100) -> go.Figure:
    fig = go.Figure(
        go.Indicator(
            mode="gauge+number",
            value=value if value is not None else 0,
            number={"suffix": "%"},
            title={"text": title},
            gauge={
                "axis": {"range": [0, max_value]},
                "bar": {"color": "#1f2937"},
                "steps": [{"range": [lo, hi], "color": color} for lo, hi, color in GAUGE_STEPS],
            },
        )
    )
    fig.update_layout(template=DEFAULT_TEMPLATE, height=220, margin=dict(l=20, r=20, t=50, b=10))
    return fig


def progress_timeline(
    df: pd.DataFrame,
    start: str,
    end: str,
    y: str,
    color: Optional[str] = None,
    title: Optional[str] = None,
) -> go.Figure:
    fig = px.timeline(df, x_start=start, x_end=end, y=y, color=color)
    fig = _configure_layout(fig, title)
    fig.update_yaxes(autorange="reversed", showgrid=False)
    fig.update_layout(hovermode="closest")
    return fig


def risk_map(
    sites: pd.DataFrame,
    suppliers: pd.DataFrame,
    title: Optional[str] = None,
) -> go.Figure:
    """Mine sites and suppliers on a South Africa map, suppliers coloured by risk level."""
    fig = go.Figure()
    if not sites.empty:
        fig.add_trace(
            go.Scattergeo(
                lat=sites["latitude"],
                lon=sites["longitude"],
                text=sites["name"] + " (" + sites["province"] + ")",
                mode="markers",
                marker=dict(size=16, symbol="square", color="#111827", opacity=0.8),
                name="Mine sites",
            )
        )
    if not suppliers.empty:
        for level, group in suppliers.groupby("risk_level"):
            fig.add_trace(
                go.Scattergeo(
                    lat=group["latitude"],
                    lon=group["longitude"],
                    text=group["name"] + " - risk " + group["risk_score"].astype(str),
                    mode="markers",
                    marker=dict(size=10, color=RISK_LEVEL_COLORS.get(level, "#6b7280")),
                    name=f"{level} risk suppliers",
                )
            )
    fig.update_geos(
        scope="africa",
        center=dict(lat=-26.5, lon=27.5),
        projection_scale=5,
        showcountries=True,
        showland=True,
        landcolor="#f3f4f6",
    )
    fig.update_layout(
        template=DEFAULT_TEMPLATE,
        title=title,
        height=480,
        margin=dict(l=0, r=0, t=50, b=0),
        legend=dict(orientation="h", y=-0.05),
    )
    return fig


def network_graph(
    graph: RelationshipGraph,
    positions: Dict[str, Tuple[float, float]],
    title: Optional[str] = None,
) -> go.Figure:
    edge_x: List[Optional[float]] = []
    edge_y: List[Optional[float]] = []
    for a, b in graph.edges:
        edge_x += [positions[a][0], positions[b][0], None]
        edge_y += [positions[a][1], positions[b][1], None]

    fig = go.Figure(
        go.Scatter(x=edge_x, y=edge_y, mode="lines", line=dict(width=1, color="#9ca3af"), hoverinfo="skip",
                   showlegend=False)
    )
    degree = graph.degree()
    for kind, symbol in (("supplier", "circle"), ("director", "diamond")):
        nodes = [node for node in graph.nodes if node.kind == kind]
        if not nodes:
            continue
        fig.add_trace(
            go.Scatter(
                x=[positions[n.node_id][0] for n in nodes],
                y=[positions[n.node_id][1] for n in nodes],
                mode="markers+text",
                text=[n.label for n in nodes],
                textposition="top center",
                textfont=dict(size=9),
                hovertext=[f"{n.label}<br>Risk {n.risk_score:.0f}<br>Links {degree[n.node_id]}" for n in nodes],
                hoverinfo="text",
                marker=dict(
                    symbol=symbol,
                    size=[12 + 3 * degree[n.node_id] for n in nodes],
                    color=[n.risk_score for n in nodes],
                    colorscale="RdYlGn_r",
                    cmin=0,
                    cmax=100,
                    line=dict(width=1, color="#111827"),
                    showscale=kind == "supplier",
                    colorbar=dict(title="Risk"),
                ),
                name=f"{kind.title()}s",
            )
        )
    fig = _configure_layout(fig, title)
    fig.update_xaxes(visible=False)
    fig.update_yaxes(visible=False)
    fig.update_layout(hovermode="closest", height=520)
    return fig
