"""
End-to-end report workflow: transform -> join -> regress -> summarise.

Design goal: every table is passed explicitly from one stage to the next
and returned in a single result dict, so entry scripts and notebooks stay a
few descriptive calls long and nothing depends on session state.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable

import pandas as pd

from .config import JOIN_MIN_COVERAGE, JOIN_MIN_ROWS, QUANTILES, WINDOW_YEARS
from .diagnostics import normality_tests, qq_points
from .join import combine_returns_factors
from .records import EXCESS_RETURN, MKT_RF
from .regression import MODEL_SPECS, fit_models, fit_quantile_models
from .report import coefficient_table, compare_models, quantile_summary
from .returns import log_returns, select_window, window_bounds


def run_factor_regressions(
    prices: pd.DataFrame,
    factors: pd.DataFrame,
    window_years: int = WINDOW_YEARS,
    quantiles: Iterable[float] = QUANTILES,
    specs: Dict[str, tuple] | None = None,
    require_full_window: bool = True,
    min_rows: int = JOIN_MIN_ROWS,
    min_coverage: float = JOIN_MIN_COVERAGE,
) -> dict[str, Any]:
    """
    Run the CAPM / three-factor OLS and quantile regressions for one stock.

    Parameters
    ----------
    prices : DataFrame
        Date-indexed adjusted close prices ('Adj Close').
    factors : DataFrame
        Date-indexed daily factors ['Mkt-RF', 'SMB', 'HML', 'RF'] in percent.

    Returns a dict with:
    - inputs: window bounds and sample size
    - tables: returns / windowed returns / combined (joined) table
    - models: OLS results per specification
    - quantile_models: {model name -> {τ -> result}}
    - summary_tables: model comparison, coefficient and quantile tables
    - diagnostics: normality tests for excess returns and each model's residuals
    - plot_data: QQ points for excess returns and residuals
    """
    specs = specs or MODEL_SPECS
    quantiles = tuple(quantiles)

    returns = log_returns(prices)
    windowed = select_window(
        returns,
        years=window_years,
        require_full_window=require_full_window,
        history_start=prices.index.min(),
    )
    start, end = window_bounds(returns.index.max(), window_years)
    combined = combine_returns_factors(windowed, factors, min_rows=min_rows, min_coverage=min_coverage)

    models = fit_models(combined, specs)
    quantile_models = fit_quantile_models(combined, specs, quantiles=quantiles)

    diagnostics = {"excess_return": normality_tests(combined[EXCESS_RETURN])}
    for name, res in models.items():
        diagnostics[f"{name}_residuals"] = normality_tests(res.resid)

    plot_data = {
        "qq": {
            "excess_return": qq_points(combined[EXCESS_RETURN]),
            **{name: qq_points(res.resid) for name, res in models.items()},
        }
    }

    return {
        "inputs": {
            "window_start": start,
            "window_end": end,
            "window_years": window_years,
            "first_date": combined.index.min(),
            "last_date": combined.index.max(),
            "n_prices": int(len(prices)),
            "n_returns_in_window": int(len(windowed)),
            "n_obs": int(len(combined)),
            "quantiles": quantiles,
        },
        "tables": {"returns": returns, "windowed": windowed, "combined": combined},
        "models": models,
        "quantile_models": quantile_models,
        "summary_tables": {
            "comparison": compare_models(models),
            "coefficients": {name: coefficient_table(res) for name, res in models.items()},
            "quantiles": {name: quantile_summary(qr) for name, qr in quantile_models.items()},
        },
        "diagnostics": diagnostics,
        "plot_data": plot_data,
    }


def build_figures(result: dict[str, Any]) -> dict[str, Any]:
    """
    Build the report figures from `run_factor_regressions` output.

    Returns a dict name -> matplotlib Figure.
    """
    from .plot_regression import plot_qq, plot_quantile_coefficients, plot_security_market_scatter

    combined = result["tables"]["combined"]
    models = result["models"]
    quantile_models = result["quantile_models"]
    inputs = result["inputs"]
    span = f"{inputs['first_date'].date()} to {inputs['last_date'].date()}"

    figures: dict[str, Any] = {
        "qq_excess_return": plot_qq(combined[EXCESS_RETURN], title="Excess return QQ plot"),
    }
    for name, res in models.items():
        figures[f"qq_{name}_residuals"] = plot_qq(res.resid, title=f"{name} residual QQ plot")
        figures[f"quantile_coefficients_{name}"] = plot_quantile_coefficients(
            quantile_models[name], ols=res, title=f"{name} quantile regression coefficients ({span})"
        )
        if res.factors == (MKT_RF,):
            figures[f"scatter_{name}"] = plot_security_market_scatter(
                combined, res, quantile_models[name], title=f"{name}: excess returns ({span})"
            )
    return figures
