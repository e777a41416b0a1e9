"""Tests for normality diagnostics."""

import numpy as np
import pytest

from capm_report.diagnostics import normality_tests, qq_points


def test_normal_sample_passes_and_fat_tails_fail():
    rng = np.random.default_rng(11)
    normal = normality_tests(rng.normal(size=2000))
    fat = normality_tests(rng.standard_t(df=3, size=2000))

    assert normal["jarque_bera_pvalue"] > 0.001
    assert abs(normal["skew"]) < 0.2
    assert fat["jarque_bera_pvalue"] < 1e-6
    assert fat["excess_kurtosis"] > 1.0
    assert fat["nobs"] == 2000


def test_non_finite_values_are_ignored():
    values = np.array([0.1, np.nan, -0.3, 0.2, np.inf, 0.05, -0.1])
    assert normality_tests(values)["nobs"] == 5
    with pytest.raises(ValueError):
        normality_tests([1.0, np.nan])


def test_qq_points_line_up_for_normal_data():
    rng = np.random.default_rng(12)
    qq = qq_points(rng.normal(2.0, 3.0, 1000))

    assert len(qq["theoretical"]) == len(qq["ordered"]) == 1000
    assert np.all(np.diff(qq["ordered"]) >= 0)
    assert qq["slope"] == pytest.approx(3.0, rel=0.1)
    assert qq["intercept"] == pytest.approx(2.0, abs=0.3)
    assert qq["r"] > 0.99
