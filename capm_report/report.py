"""
Summary tables and short commentary for the fitted models.

This module turns `OLSResult`/`QuantileRegressionResult` objects into
DataFrames that print cleanly, plus simple, rule-based commentary about
the CAPM vs three-factor comparison.
"""

from __future__ import annotations

from typing import Dict

import numpy as np
import pandas as pd

from .regression import CONST, OLSResult, QuantileRegressionResult, quantile_coefficient_table


def significance_stars(pvalue: float) -> str:
    """*** p<0.01, ** p<0.05, * p<0.1."""
    if pvalue < 0.01:
        return "***"
    if pvalue < 0.05:
        return "**"
    if pvalue < 0.1:
        return "*"
    return ""


def coefficient_table(result: OLSResult) -> pd.DataFrame:
    """
    Per-term coefficient table for one OLS fit.

    Returns a DataFrame indexed by term with columns
    ['coef', 'std_err', 't', 'p_value', 'stars'].
    """
    table = pd.DataFrame(
        {
            "coef": result.params,
            "std_err": result.bse,
            "t": result.tvalues,
            "p_value": result.pvalues,
        }
    )
    table["stars"] = [significance_stars(p) for p in table["p_value"]]
    table.index.name = "term"
    return table


def compare_models(results: Dict[str, OLSResult]) -> pd.DataFrame:
    """
    One row per model: alpha (intercept), its p-value, each beta, R²,
    adjusted R² and the number of observations.
    """
    rows = []
    for name, res in results.items():
        row = {
            "model": name,
            "alpha": float(res.params[CONST]),
            "alpha_p_value": float(res.pvalues[CONST]),
        }
        for factor in res.factors:
            row[f"beta_{factor}"] = float(res.params[factor])
        row["r_squared"] = res.rsquared
        row["adj_r_squared"] = res.rsquared_adj
        row["nobs"] = res.nobs
        rows.append(row)
    return pd.DataFrame(rows).set_index("model")


def quantile_summary(results: Dict[float, QuantileRegressionResult]) -> pd.DataFrame:
    """Coefficients per τ plus the pseudo R² of each fit."""
    table = quantile_coefficient_table(results)
    table["pseudo_r_squared"] = [results[q].prsquared for q in table.index]
    return table


def format_model_summary(result: OLSResult) -> str:
    """Full statsmodels text summary, titled with the model name."""
    return str(result.model.summary(title=f"{result.name} OLS regression"))


def print_model_comparison(summary: pd.DataFrame, base: str = "CAPM", alpha_level: float = 0.05) -> None:
    """
    Print simple rule-based commentary comparing models in `summary`
    (output of compare_models) against the `base` model.
    """
    if base not in summary.index:
        print(f"Baseline model '{base}' not found in summary; skipping comparison.")
        return

    base_adj = summary.loc[base, "adj_r_squared"]
    for name, row in summary.iterrows():
        if row["alpha_p_value"] < alpha_level:
            alpha_comment = (
                f"alpha {row['alpha']:.4f}%/day is significant at {alpha_level:.0%} "
                "(returns not fully explained by the factors)."
            )
        else:
            alpha_comment = f"alpha {row['alpha']:.4f}%/day is not significant at {alpha_level:.0%}."
        print(f"[{name}] {alpha_comment}")

        if name == base:
            continue
        diff = row["adj_r_squared"] - base_adj
        if np.isnan(diff):
            continue
        if abs(diff) < 0.01:
            comment = f"adds little explanatory power over {base}."
        elif diff > 0:
            comment = f"explains noticeably more variation than {base}."
        else:
            comment = f"fits worse than {base} after adjusting for the extra factors."
        print(f"[{name}] Adjusted R² change vs {base}: {diff:+.3f} → {comment}")
