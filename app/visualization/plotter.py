"""
Interactive Visualization using Plotly
Functions for plotting optimization convergence, Pareto fronts and
calculator profiles
"""

from typing import Any, Dict, List

import pandas as pd
import plotly.graph_objects as go
from plotly.subplots import make_subplots


def plot_convergence(history: List[Dict[str, Any]]) -> go.Figure:
    """
    Plot best and average fitness per generation, with population diversity.

    Args:
        history: convergence_history records (generation, best_fitness,
            average_fitness, diversity)

    Returns:
        plotly Figure object

    Example:
        >>> fig = plot_convergence(data["convergence_history"])
        >>> st.plotly_chart(fig, use_container_width=True)
    """
    generations = [h["generation"] for h in history]

    fig = make_subplots(specs=[[{"secondary_y": True}]])
    fig.add_trace(
        go.Scatter(
            x=generations,
            y=[h["best_fitness"] for h in history],
            mode='lines',
            name='Best',
            line=dict(color='royalblue', width=3)
        ),
        secondary_y=False
    )
    fig.add_trace(
        go.Scatter(
            x=generations,
            y=[h["average_fitness"] for h in history],
            mode='lines',
            name='Average',
            line=dict(color='orange', width=2, dash='dash')
        ),
        secondary_y=False
    )
    fig.add_trace(
        go.Scatter(
            x=generations,
            y=[h["diversity"] for h in history],
            mode='lines',
            name='Diversity',
            line=dict(color='gray', width=1, dash='dot')
        ),
        secondary_y=True
    )

    fig.update_layout(
        title="Convergence History",
        xaxis_title="Generation",
        hovermode='x unified',
        height=450
    )
    fig.update_yaxes(title_text="Fitness", range=[0, 1], secondary_y=False)
    fig.update_yaxes(title_text="Diversity", secondary_y=True)
    return fig


def plot_pareto_front(df: pd.DataFrame) -> go.Figure:
    """
    Scatter of Pareto solutions: cost vs. time, colored by quality.

    Args:
        df: Flattened Pareto table with cost, time, quality, energy columns
    """
    fig = go.Figure(go.Scatter(
        x=df["cost"],
        y=df["time"],
        mode='markers',
        marker=dict(
            size=12,
            color=df["quality"],
            colorscale='Viridis',
            showscale=True,
            colorbar=dict(title="Quality"),
            line=dict(color='black', width=1)
        ),
        text=[f"{p:.0f} W, {s:.0f} mm/min" for p, s in zip(df["power"], df["speed"])],
        hovertemplate='<b>%{text}</b><br>' +
                      'Cost: %{x:.2f} USD<br>' +
                      'Time: %{y:.2f} min<br>' +
                      '<extra></extra>'
    ))
    fig.update_layout(
        title="Pareto Front",
        xaxis_title="Cost (USD)",
        yaxis_title="Time (min)",
        height=450
    )
    return fig


def plot_temperature_profile(profile: List[Dict[str, float]]) -> go.Figure:
    """Temperature vs. distance from the cut edge."""
    fig = go.Figure(go.Scatter(
        x=[p["distance"] for p in profile],
        y=[p["temperature"] for p in profile],
        mode='lines+markers',
        line=dict(color='firebrick', width=3),
        fill='tozeroy',
        name='Temperature'
    ))
    fig.update_layout(
        title="Temperature Profile",
        xaxis_title="Distance from cut edge (mm)",
        yaxis_title="Temperature (°C)",
        height=400
    )
    return fig


def plot_time_breakdown(breakdown: Dict[str, float]) -> go.Figure:
    """Pie chart of cutting/piercing/moving time shares."""
    fig = go.Figure(go.Pie(
        labels=[name.title() for name in breakdown],
        values=list(breakdown.values()),
        hole=0.4
    ))
    fig.update_layout(title="Time Breakdown (%)", height=400)
    return fig
