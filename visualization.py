"""
Visualization Module
Recovery-curve charts: observations as points, fitted curves as lines.

Every plotting call returns its own figure object; saving takes that
figure explicitly.
"""

import os
from pathlib import Path
from typing import Optional, Union

import numpy as np
import pandas as pd
from matplotlib.figure import Figure
import plotly.graph_objects as go

from frap_models import TidyObservation
from frap_models.recovery import recovery_curve

PathLike = Union[str, os.PathLike]

RAW_TITLE = "Synthetic data"
FIT_TITLE = "FRAP curves fitted to the groups"
CURVE_POINTS = 100


def _curve_grid(tidy: TidyObservation, n_points: int = CURVE_POINTS) -> np.ndarray:
    return np.linspace(float(np.min(tidy.times)), float(np.max(tidy.times)), n_points)


def _fitted_curves(tidy: TidyObservation, parameter_table: pd.DataFrame, n_points: int):
    grid = _curve_grid(tidy, n_points)
    for label, row in parameter_table.iterrows():
        yield label, grid, recovery_curve(grid, row['thalf'], row['f0'], row['finf'])


def plot_recovery(
    tidy: TidyObservation,
    parameter_table: Optional[pd.DataFrame] = None,
    title: Optional[str] = None,
    n_points: int = CURVE_POINTS,
    figsize=(12, 8)
) -> Figure:
    """
    Plot observations coloured by group, optionally with fitted curves.

    Args:
        tidy: Long-format observations
        parameter_table: Fitted parameters with columns thalf, f0, finf,
            one row per group; when given, one black curve is drawn per row
        title: Chart title; defaults to "Synthetic data" or
            "FRAP curves fitted to the groups"
        n_points: Number of points per fitted curve
        figsize: Figure size in inches

    Returns:
        The matplotlib figure
    """
    fig = Figure(figsize=figsize)
    ax = fig.add_subplot(1, 1, 1)

    for label in tidy.labels:
        mask = tidy.groups == label
        ax.scatter(tidy.times[mask], tidy.values[mask], s=16, label=label)

    if parameter_table is None:
        default_title = RAW_TITLE
    else:
        for _, grid, curve in _fitted_curves(tidy, parameter_table, n_points):
            ax.plot(grid, curve, color='black', linewidth=1.0)
        default_title = FIT_TITLE

    ax.set_title(title or default_title)
    ax.set_xlabel("times")
    ax.set_ylabel("ft")
    ax.legend(title="grp")
    ax.grid(True, alpha=0.3)
    return fig


def save_png(figure: Figure, basename: PathLike, width: float = 12, height: float = 8, dpi: int = 100) -> Path:
    """
    Save a figure as `<basename>.png`.

    Args:
        figure: Figure returned by a plotting call
        basename: Output path without extension
        width, height: Size in inches

    Returns:
        Path of the written file
    """
    path = Path(f"{basename}.png")
    path.parent.mkdir(parents=True, exist_ok=True)
    figure.set_size_inches(width, height)
    figure.savefig(path, format='png', dpi=dpi)
    return path


def plot_recovery_interactive(
    tidy: TidyObservation,
    parameter_table: Optional[pd.DataFrame] = None,
    title: Optional[str] = None,
    n_points: int = CURVE_POINTS
) -> go.Figure:
    """Interactive version of `plot_recovery`."""
    fig = go.Figure()

    for label in tidy.labels:
        mask = tidy.groups == label
        fig.add_trace(go.Scatter(
            x=tidy.times[mask],
            y=tidy.values[mask],
            mode='markers',
            name=str(label),
        ))

    if parameter_table is None:
        default_title = RAW_TITLE
    else:
        for label, grid, curve in _fitted_curves(tidy, parameter_table, n_points):
            fig.add_trace(go.Scatter(
                x=grid,
                y=curve,
                mode='lines',
                line=dict(color='black', width=1),
                name=f"fit {label}",
                showlegend=False,
            ))
        default_title = FIT_TITLE

    fig.update_layout(
        title=title or default_title,
        xaxis_title="times",
        yaxis_title="ft",
        legend_title="grp",
        template="plotly_white",
    )
    return fig


def save_html(figure: go.Figure, path: PathLike) -> Path:
    """Write an interactive figure as a standalone HTML file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    figure.write_html(str(path), include_plotlyjs='cdn')
    return path
