"""
Plotting helpers for the regression report.

Each function accepts workflow outputs and returns a matplotlib Figure so
that entry scripts (and notebooks) only decide where to save or show it.
"""

from __future__ import annotations

from typing import Dict

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from .diagnostics import qq_points
from .plot_styles import quantile_colors, style
from .records import EXCESS_RETURN, MKT_RF
from .regression import CONST, OLSResult, QuantileRegressionResult, quantile_coefficient_table


def plot_security_market_scatter(
    combined: pd.DataFrame,
    ols: OLSResult,
    quantile_results: Dict[float, QuantileRegressionResult] | None = None,
    title: str | None = None,
):
    """
    Scatter excess security return against Mkt-RF with the CAPM OLS line
    and, optionally, one line per quantile regression.

    Only single-factor (CAPM) fits can be drawn as lines in this plane.
    """
    if ols.factors != (MKT_RF,):
        raise ValueError(f"Scatter plot needs a CAPM (Mkt-RF only) fit, got {ols.factors}")

    x = combined[MKT_RF].to_numpy(dtype=float)
    y = combined[EXCESS_RETURN].to_numpy(dtype=float)
    grid = np.linspace(np.min(x), np.max(x), 100)

    fig, ax = plt.subplots(figsize=(8, 5))
    ax.scatter(x, y, **style("scatter", "observations"))
    ax.plot(
        grid,
        ols.params[CONST] + ols.params[MKT_RF] * grid,
        **style("fit", "ols", label=f"OLS (β = {ols.params[MKT_RF]:.2f})"),
    )

    if quantile_results:
        colors = quantile_colors(quantile_results.keys())
        for q, res in sorted(quantile_results.items()):
            line_style = style("fit", "quantile", label=f"τ = {q:.2f} (β = {res.params[MKT_RF]:.2f})")
            line_style["color"] = colors[q]
            ax.plot(grid, res.params[CONST] + res.params[MKT_RF] * grid, **line_style)

    ax.axhline(0.0, color="gray", linewidth=0.6)
    ax.axvline(0.0, color="gray", linewidth=0.6)
    ax.set_xlabel("Market excess return, Mkt-RF (%)")
    ax.set_ylabel("Security excess return (%)")
    ax.set_title(title or "Security vs market excess returns")
    ax.legend(loc="upper left", fontsize="small")
    ax.grid(True, linestyle="--", alpha=0.4)
    fig.tight_layout()
    return fig


def plot_qq(values, title: str = "Normal QQ plot"):
    """Normal QQ plot of one sample (residuals or returns)."""
    qq = qq_points(values)

    fig, ax = plt.subplots(figsize=(5, 5))
    ax.scatter(qq["theoretical"], qq["ordered"], **style("scatter", "qq_sample"))
    ends = np.array([qq["theoretical"].min(), qq["theoretical"].max()])
    ax.plot(ends, qq["intercept"] + qq["slope"] * ends, **style("reference", "qq_line"))
    ax.set_xlabel("Theoretical normal quantiles")
    ax.set_ylabel("Sample quantiles")
    ax.set_title(f"{title} (r = {qq['r']:.3f})")
    ax.legend(loc="upper left", fontsize="small")
    ax.grid(True, linestyle="--", alpha=0.4)
    fig.tight_layout()
    return fig


def plot_quantile_coefficients(
    quantile_results: Dict[float, QuantileRegressionResult],
    ols: OLSResult | None = None,
    title: str | None = None,
):
    """
    One panel per coefficient: quantile estimate (with ±1.96·SE band)
    across τ, and the OLS estimate as a dashed horizontal reference.
    """
    table = quantile_coefficient_table(quantile_results)
    se = pd.DataFrame({q: r.bse for q, r in quantile_results.items()}).T.sort_index()
    terms = list(table.columns)
    taus = table.index.to_numpy(dtype=float)

    fig, axes = plt.subplots(1, len(terms), figsize=(4 * len(terms), 3.8), squeeze=False)
    for ax, term in zip(axes[0], terms):
        est = table[term].to_numpy(dtype=float)
        band = 1.96 * se[term].to_numpy(dtype=float)
        ax.fill_between(taus, est - band, est + band, color="C0", alpha=0.15)
        ax.plot(taus, est, marker="o", **style("fit", "quantile", label="Quantile regression"))
        if ols is not None and term in ols.params.index:
            ax.axhline(float(ols.params[term]), **style("reference", "ols", label="OLS"))
        ax.set_xlabel("Quantile τ")
        ax.set_title("Intercept" if term == CONST else term)
        ax.grid(True, linestyle="--", alpha=0.4)
    axes[0][0].legend(loc="best", fontsize="small")
    if title:
        fig.suptitle(title)
    fig.tight_layout()
    return fig
