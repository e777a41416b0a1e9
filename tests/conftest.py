"""Shared fixtures for the report tests."""

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

from capm_report.records import ADJ_CLOSE, DATE, HML, MKT_RF, RF, SMB


@pytest.fixture
def synthetic_market():
    """
    Business-day prices and factors from 2021-01-04 to 2024-02-29 where the
    stock's excess log return is 0.05 + 1.2*Mkt-RF + 0.3*SMB - 0.4*HML + noise.
    """
    rng = np.random.default_rng(7)
    dates = pd.bdate_range("2021-01-04", "2024-02-29", name=DATE)
    n = len(dates)
    factors = pd.DataFrame(
        {
            MKT_RF: rng.normal(0.05, 1.0, n),
            SMB: rng.normal(0.0, 0.6, n),
            HML: rng.normal(0.0, 0.6, n),
            RF: np.full(n, 0.015),
        },
        index=dates,
    )
    excess = (
        0.05
        + 1.2 * factors[MKT_RF]
        + 0.3 * factors[SMB]
        - 0.4 * factors[HML]
        + rng.normal(0.0, 0.2, n)
    )
    log_ret = (excess + factors[RF]).to_numpy(copy=True)
    log_ret[0] = 0.0  # first price has no return
    prices = pd.DataFrame({ADJ_CLOSE: 100.0 * np.exp(np.cumsum(log_ret) / 100.0)}, index=dates)
    return prices, factors
