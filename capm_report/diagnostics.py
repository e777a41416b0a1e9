"""
Normality checks for regression residuals and excess returns.

OLS inference (t and p values) leans on roughly normal errors; daily
equity returns are usually fat-tailed, which is what the QQ plots and the
tests below are meant to show.
"""

from __future__ import annotations

from typing import Dict

import numpy as np
from scipy import stats

SHAPIRO_MAX_N = 5000


def _clean(values) -> np.ndarray:
    x = np.asarray(values, dtype=float).reshape(-1)
    return x[np.isfinite(x)]


def normality_tests(values) -> Dict[str, float]:
    """
    Skewness, excess kurtosis, Jarque–Bera and Shapiro–Wilk for one sample.

    Shapiro–Wilk is run on the first 5000 observations (scipy's p-value is
    not reliable above that size).
    """
    x = _clean(values)
    if len(x) < 3:
        raise ValueError("At least three finite observations are needed for normality tests")

    jb = stats.jarque_bera(x)
    sw = stats.shapiro(x[:SHAPIRO_MAX_N])
    return {
        "nobs": int(len(x)),
        "mean": float(np.mean(x)),
        "std": float(np.std(x, ddof=1)),
        "skew": float(stats.skew(x)),
        "excess_kurtosis": float(stats.kurtosis(x, fisher=True)),
        "jarque_bera": float(jb.statistic),
        "jarque_bera_pvalue": float(jb.pvalue),
        "shapiro": float(sw.statistic),
        "shapiro_pvalue": float(sw.pvalue),
    }


def qq_points(values) -> Dict[str, np.ndarray | float]:
    """
    Normal QQ data: theoretical vs ordered sample quantiles and the fitted
    reference line (slope, intercept, r).
    """
    x = _clean(values)
    (theoretical, ordered), (slope, intercept, r) = stats.probplot(x, dist="norm")
    return {
        "theoretical": np.asarray(theoretical),
        "ordered": np.asarray(ordered),
        "slope": float(slope),
        "intercept": float(intercept),
        "r": float(r),
    }
