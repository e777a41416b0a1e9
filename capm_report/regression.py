"""
OLS and quantile regressions of excess security returns on factor returns.

Two fixed OLS specifications are reported:
- CAPM: excess_return ~ const + Mkt-RF
- FF3:  excess_return ~ const + Mkt-RF + SMB + HML

Quantile regressions fit the same design at several quantiles τ by
minimising the pinball loss ρ_τ(u) = u·(τ - 1[u<0]). Both estimators are
delegated to statsmodels; this module owns input checks and a small,
stable result container so that reporting code does not depend on the
statsmodels result API directly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Sequence, Tuple

import numpy as np
import pandas as pd
import statsmodels.api as sm

from .config import QUANTILES
from .errors import DegenerateInputError, InputFormatError, InvalidInputError
from .records import EXCESS_RETURN, HML, MKT_RF, SMB

CONST = "const"

MODEL_SPECS: Dict[str, Tuple[str, ...]] = {
    "CAPM": (MKT_RF,),
    "FF3": (MKT_RF, SMB, HML),
}


@dataclass
class OLSResult:
    """Fitted OLS model: coefficients and fit statistics."""

    name: str
    factors: Tuple[str, ...]
    params: pd.Series
    bse: pd.Series
    tvalues: pd.Series
    pvalues: pd.Series
    rsquared: float
    rsquared_adj: float
    nobs: int
    resid: pd.Series
    fittedvalues: pd.Series
    model: Any  # statsmodels RegressionResults


@dataclass
class QuantileRegressionResult:
    """One quantile-regression fit at level `quantile`."""

    name: str
    quantile: float
    factors: Tuple[str, ...]
    params: pd.Series
    bse: pd.Series
    pvalues: pd.Series
    prsquared: float
    nobs: int
    model: Any  # statsmodels QuantRegResults


def design_matrix(
    combined: pd.DataFrame,
    factors: Sequence[str],
    response: str = EXCESS_RETURN,
) -> Tuple[pd.Series, pd.DataFrame]:
    """
    Build (y, X) with a leading constant and check that X has full rank.

    Raises
    ------
    ValueError
        Not 1–3 factors.
    InputFormatError
        Response or factor column missing.
    InvalidInputError
        NaN/inf in the used columns.
    DegenerateInputError
        Fewer observations than parameters, or collinear columns.
    """
    factors = tuple(factors)
    if not 1 <= len(factors) <= 3:
        raise ValueError(f"Expected 1 to 3 factor columns, got {len(factors)}")
    missing = [c for c in (response, *factors) if c not in combined.columns]
    if missing:
        raise InputFormatError(f"Regression columns not found: {missing}")

    data = combined[[response, *factors]].astype(float)
    if not np.isfinite(data.to_numpy()).all():
        raise InvalidInputError("Regression inputs contain NaN or infinite values")

    y = data[response]
    X = sm.add_constant(data[list(factors)], prepend=True, has_constant="add")

    k = X.shape[1]
    if len(X) < k:
        raise DegenerateInputError(
            f"{len(X)} observations cannot identify {k} parameters"
        )
    rank = np.linalg.matrix_rank(X.to_numpy())
    if rank < k:
        raise DegenerateInputError(
            f"Design matrix is rank-deficient (rank {rank} < {k}); "
            f"check for constant or collinear factors among {list(factors)}"
        )
    return y, X


def fit_ols(
    combined: pd.DataFrame,
    factors: Sequence[str],
    name: str | None = None,
    cov_type: str = "nonrobust",
    maxlags: int | None = None,
) -> OLSResult:
    """
    Fit excess_return ~ const + Σ β_i·factor_i by ordinary least squares.

    Parameters
    ----------
    combined : DataFrame
        Output of `join.combine_returns_factors`.
    factors : sequence of str
        One to three factor column names.
    cov_type : str, default 'nonrobust'
        Passed to statsmodels. Use 'HAC' (with `maxlags`) for
        Newey–West standard errors.
    """
    y, X = design_matrix(combined, factors)
    factors = tuple(factors)

    if cov_type == "HAC":
        lags = maxlags if maxlags is not None else int(np.floor(4 * (len(y) / 100.0) ** (2.0 / 9.0)))
        res = sm.OLS(y, X).fit(cov_type="HAC", cov_kwds={"maxlags": lags})
    else:
        res = sm.OLS(y, X).fit(cov_type=cov_type)

    return OLSResult(
        name=name or "+".join(factors),
        factors=factors,
        params=res.params,
        bse=res.bse,
        tvalues=res.tvalues,
        pvalues=res.pvalues,
        rsquared=float(res.rsquared),
        rsquared_adj=float(res.rsquared_adj),
        nobs=int(res.nobs),
        resid=res.resid,
        fittedvalues=res.fittedvalues,
        model=res,
    )


def fit_models(
    combined: pd.DataFrame,
    specs: Dict[str, Tuple[str, ...]] | None = None,
    **ols_kwargs,
) -> Dict[str, OLSResult]:
    """Fit every named specification (default: CAPM and FF3)."""
    specs = specs or MODEL_SPECS
    return {name: fit_ols(combined, factors, name=name, **ols_kwargs) for name, factors in specs.items()}


def _check_quantiles(quantiles: Iterable[float]) -> Tuple[float, ...]:
    qs = tuple(float(q) for q in quantiles)
    if not qs:
        raise ValueError("At least one quantile is required")
    for q in qs:
        if not 0.0 < q < 1.0:
            raise ValueError(f"Quantile levels must lie strictly between 0 and 1, got {q}")
    if len(set(qs)) != len(qs):
        raise ValueError(f"Duplicate quantile levels in {qs}")
    return tuple(sorted(qs))


def fit_quantile_regressions(
    combined: pd.DataFrame,
    factors: Sequence[str],
    quantiles: Iterable[float] = QUANTILES,
    name: str | None = None,
    max_iter: int = 5000,
) -> Dict[float, QuantileRegressionResult]:
    """
    Fit one linear quantile regression per τ in `quantiles`.

    Returns
    -------
    dict
        Mapping τ -> QuantileRegressionResult, in ascending τ.
    """
    qs = _check_quantiles(quantiles)
    y, X = design_matrix(combined, factors)
    factors = tuple(factors)
    model = sm.QuantReg(y, X)

    out: Dict[float, QuantileRegressionResult] = {}
    for q in qs:
        res = model.fit(q=q, max_iter=max_iter)
        out[q] = QuantileRegressionResult(
            name=name or "+".join(factors),
            quantile=q,
            factors=factors,
            params=res.params,
            bse=res.bse,
            pvalues=res.pvalues,
            prsquared=float(res.prsquared),
            nobs=int(res.nobs),
            model=res,
        )
    return out


def fit_quantile_models(
    combined: pd.DataFrame,
    specs: Dict[str, Tuple[str, ...]] | None = None,
    quantiles: Iterable[float] = QUANTILES,
) -> Dict[str, Dict[float, QuantileRegressionResult]]:
    """Quantile regressions for every named specification."""
    specs = specs or MODEL_SPECS
    return {
        name: fit_quantile_regressions(combined, factors, quantiles=quantiles, name=name)
        for name, factors in specs.items()
    }


def quantile_coefficient_table(results: Dict[float, QuantileRegressionResult]) -> pd.DataFrame:
    """
    Stack per-τ coefficients into a table.

    Returns
    -------
    DataFrame
        Index: quantile (τ). Columns: 'const' followed by the factor names.
    """
    rows = {q: r.params for q, r in sorted(results.items())}
    table = pd.DataFrame(rows).T
    table.index.name = "quantile"
    return table


def pinball_loss(residuals: np.ndarray, quantile: float) -> float:
    """Mean check loss ρ_τ(u) = u·(τ - 1[u<0]) of a residual vector."""
    u = np.asarray(residuals, dtype=float).reshape(-1)
    return float(np.mean(u * (quantile - (u < 0))))
