"""
ImputeLab - Chart Service
Plotly figures for a comparison report and a missingness profile.

Usage:
    from services.report.chart_service import ChartFactory as CF

    fig = CF.density_overlay(report, title="Birth weight: imputation comparison")
    CF.save_figure(fig, "reports/density.html")

Every builder returns a `plotly.graph_objects.Figure`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import numpy as np
import plotly.graph_objects as go
from loguru import logger
from plotly.subplots import make_subplots

from config.constants import FALLBACK_STYLE, SERIES_STYLES
from agents.eda.distribution_comparator import ComparisonReport

__all__ = ["ChartFactory", "CF"]


# =========================
# Layout
# =========================


def _get_base_layout() -> Dict[str, Any]:
    """Default Plotly layout (dark text, white background)."""
    return dict(
        template="plotly_white",
        paper_bgcolor="white",
        plot_bgcolor="white",
        font=dict(family="Inter, Segoe UI, Arial, sans-serif", size=12, color="#2c3e50"),
        margin=dict(l=60, r=30, t=60, b=60),
        hoverlabel=dict(bgcolor="white", font_size=12),
    )


def _apply_layout(fig: go.Figure, title: Optional[str] = None, height: Optional[int] = None) -> go.Figure:
    fig.update_layout(**_get_base_layout())
    if title:
        fig.update_layout(title=dict(text=title, x=0.01, xanchor="left"))
    if height:
        fig.update_layout(height=height)
    return fig


def _as_path(path: Union[str, Path]) -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    return p


# =========================
# Chart factory
# =========================

class ChartFactory:
    """Static builders for the imputation walkthrough figures."""

    @staticmethod
    def density_overlay(
        report: ComparisonReport,
        title: Optional[str] = "Distribution after imputation",
        x_title: str = "value",
        height: Optional[int] = 520,
    ) -> go.Figure:
        """One density line per series, on the report's shared axes."""
        fig = go.Figure()
        for name, summary in report.series.items():
            color, dash = SERIES_STYLES.get(name, FALLBACK_STYLE)
            fig.add_trace(
                go.Scatter(
                    x=report.grid,
                    y=summary.density,
                    mode="lines",
                    name=summary.label,
                    line=dict(color=color, dash=dash, width=2),
                    hovertemplate=(
                        f"{summary.label}<br>n={summary.count} "
                        f"mean={summary.mean:.1f}<extra></extra>"
                    ),
                )
            )

        fig.update_xaxes(title_text=x_title, range=list(report.x_domain))
        fig.update_yaxes(title_text="density", range=[0.0, report.y_domain[1] * 1.05])
        fig.update_layout(legend=dict(x=0.99, y=0.99, xanchor="right", yanchor="top"))

        if report.skipped:
            fig.add_annotation(
                text="skipped: " + ", ".join(sorted(report.skipped)),
                xref="paper", yref="paper", x=0.0, y=-0.15,
                showarrow=False, font=dict(size=10),
            )

        return _apply_layout(fig, title, height)

    @staticmethod
    def missingness_bars(
        profile: Mapping[str, Any],
        title: Optional[str] = "Missing data",
        height: Optional[int] = 420,
    ) -> go.Figure:
        """
        Two panels: proportion missing per column, and the row patterns
        (rows = patterns, columns = variables, dark = missing) with counts.
        """
        columns: List[Dict[str, Any]] = list(profile.get("columns", []))
        patterns: List[Dict[str, Any]] = list(profile.get("patterns", []))

        if not columns:
            fig = go.Figure()
            fig.add_annotation(
                text="No data to profile",
                xref="paper", yref="paper", x=0.5, y=0.5, showarrow=False,
            )
            return _apply_layout(fig, title, 320)

        names = [c["column"] for c in columns]
        fig = make_subplots(
            rows=1, cols=2,
            column_widths=[0.45, 0.55],
            subplot_titles=("Proportion of missings", "Combinations"),
        )

        fig.add_trace(
            go.Bar(
                x=names,
                y=[c["proportion"] for c in columns],
                marker_color="#c0392b",
                name="missing",
                showlegend=False,
            ),
            row=1, col=1,
        )

        if patterns:
            z = np.array([[1.0 if p["pattern"].get(n, False) else 0.0 for n in names] for p in patterns])
            fig.add_trace(
                go.Heatmap(
                    z=z,
                    x=names,
                    y=[
                        f"#{i + 1}: {p['count']} ({p['proportion']:.1%})"
                        for i, p in enumerate(patterns)
                    ],
                    colorscale=[[0.0, "#2e86c1"], [1.0, "#c0392b"]],
                    zmin=0, zmax=1,
                    showscale=False,
                    xgap=2, ygap=2,
                ),
                row=1, col=2,
            )
            fig.update_yaxes(autorange="reversed", row=1, col=2)

        fig.update_yaxes(title_text="proportion", row=1, col=1)
        return _apply_layout(fig, title, height)

    @staticmethod
    def save_figure(
        fig: go.Figure,
        path: Union[str, Path],
        width: Optional[int] = None,
        height: Optional[int] = None,
    ) -> Path:
        """Write the figure as standalone HTML (other suffixes are replaced)."""
        path = _as_path(path)

        if width:
            fig.update_layout(width=width)
        if height:
            fig.update_layout(height=height)

        out = path.with_suffix(".html")
        fig.write_html(out, include_plotlyjs="cdn", full_html=True)

        logger.success(f"Chart saved: {out}")
        return out

    @staticmethod
    def save_batch(figs: Mapping[str, go.Figure], directory: Union[str, Path]) -> List[Path]:
        """Save several figures named after their keys."""
        out_dir = Path(directory)
        out_dir.mkdir(parents=True, exist_ok=True)
        return [ChartFactory.save_figure(fig, out_dir / f"{name}.html") for name, fig in figs.items()]


# Syntactic sugar alias
CF = ChartFactory
