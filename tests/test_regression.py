"""Tests for the OLS and quantile estimators."""

import numpy as np
import pytest

from capm_report.errors import DegenerateInputError, InputFormatError, InvalidInputError
from capm_report.records import EXCESS_RETURN, HML, MKT_RF, SMB
from capm_report.regression import (
    CONST,
    MODEL_SPECS,
    fit_models,
    fit_ols,
    fit_quantile_regressions,
    pinball_loss,
    quantile_coefficient_table,
)

from synthetic import make_combined


def test_ols_recovers_known_line():
    rng = np.random.default_rng(0)
    x = rng.normal(0.0, 1.0, 500)
    y = 2.0 + 1.5 * x + rng.normal(0.0, 1e-4, 500)

    res = fit_ols(make_combined(x, y), [MKT_RF], name="CAPM")

    assert res.params[MKT_RF] == pytest.approx(1.5, abs=0.01)
    assert res.params[CONST] == pytest.approx(2.0, abs=0.01)
    assert res.rsquared > 0.999
    assert res.nobs == 500
    assert set(res.pvalues.index) == {CONST, MKT_RF}
    assert res.tvalues[MKT_RF] == pytest.approx(res.params[MKT_RF] / res.bse[MKT_RF])


def test_fit_models_runs_capm_and_three_factor():
    rng = np.random.default_rng(1)
    n = 400
    x, smb, hml = rng.normal(size=(3, n))
    y = 0.1 + 0.9 * x + 0.5 * smb - 0.3 * hml + rng.normal(0.0, 0.05, n)

    results = fit_models(make_combined(x, y, smb=smb, hml=hml))

    assert set(results) == set(MODEL_SPECS)
    ff3 = results["FF3"]
    assert ff3.factors == (MKT_RF, SMB, HML)
    assert ff3.params[SMB] == pytest.approx(0.5, abs=0.02)
    assert ff3.params[HML] == pytest.approx(-0.3, abs=0.02)
    assert ff3.rsquared > results["CAPM"].rsquared


def test_hac_standard_errors_are_available():
    rng = np.random.default_rng(2)
    x = rng.normal(size=300)
    y = 1.0 + x + rng.normal(size=300)

    plain = fit_ols(make_combined(x, y), [MKT_RF])
    hac = fit_ols(make_combined(x, y), [MKT_RF], cov_type="HAC", maxlags=5)

    np.testing.assert_allclose(plain.params, hac.params)
    assert not np.allclose(plain.bse, hac.bse)


def test_identical_factor_columns_are_degenerate():
    rng = np.random.default_rng(3)
    x = rng.normal(size=100)
    y = 1.0 + x + rng.normal(size=100)
    combined = make_combined(x, y, smb=x)

    with pytest.raises(DegenerateInputError, match="rank-deficient"):
        fit_ols(combined, [MKT_RF, SMB])
    with pytest.raises(DegenerateInputError):
        fit_quantile_regressions(combined, [MKT_RF, SMB], quantiles=[0.5])


def test_too_few_observations_are_degenerate():
    combined = make_combined([0.1, 0.2], [0.3, 0.1])
    with pytest.raises(DegenerateInputError, match="observations"):
        fit_ols(combined, [MKT_RF, SMB, HML])


def test_factor_list_validation():
    combined = make_combined(np.arange(10.0), np.arange(10.0) * 2 + 1)
    with pytest.raises(ValueError):
        fit_ols(combined, [])
    with pytest.raises(ValueError):
        fit_ols(combined, [MKT_RF, SMB, HML, MKT_RF])
    with pytest.raises(InputFormatError, match="RMW"):
        fit_ols(combined, [MKT_RF, "RMW"])


def test_nan_inputs_are_rejected():
    x = np.linspace(-1, 1, 50)
    y = 1.0 + x
    y[10] = np.nan
    with pytest.raises(InvalidInputError):
        fit_ols(make_combined(x, y), [MKT_RF])


def test_median_regression_tracks_ols_under_symmetric_noise():
    rng = np.random.default_rng(4)
    n = 2000
    x = rng.normal(size=n)
    y = 0.5 + 1.2 * x + rng.normal(0.0, 1.0, n)
    combined = make_combined(x, y)

    ols = fit_ols(combined, [MKT_RF])
    qr = fit_quantile_regressions(combined, [MKT_RF], quantiles=[0.5])

    assert qr[0.5].params[MKT_RF] == pytest.approx(ols.params[MKT_RF], abs=0.1)
    assert qr[0.5].params[CONST] == pytest.approx(ols.params[CONST], abs=0.1)


def test_tail_quantiles_differ_under_heteroskedasticity():
    rng = np.random.default_rng(5)
    n = 3000
    x = rng.uniform(0.0, 2.0, n)
    y = 1.0 + x + (0.2 + x) * rng.normal(size=n)

    qr = fit_quantile_regressions(make_combined(x, y), [MKT_RF], quantiles=[0.05, 0.5, 0.95])

    median_slope = qr[0.5].params[MKT_RF]
    assert qr[0.05].params[MKT_RF] < median_slope - 0.5
    assert qr[0.95].params[MKT_RF] > median_slope + 0.5


def test_quantile_fit_beats_ols_line_on_pinball_loss():
    rng = np.random.default_rng(6)
    n = 1500
    x = rng.uniform(0.0, 2.0, n)
    y = 1.0 + x + (0.2 + x) * rng.normal(size=n)
    combined = make_combined(x, y)

    ols = fit_ols(combined, [MKT_RF])
    qr = fit_quantile_regressions(combined, [MKT_RF], quantiles=[0.9])[0.9]

    def loss(params):
        fitted = params[CONST] + params[MKT_RF] * combined[MKT_RF]
        return pinball_loss(combined[EXCESS_RETURN] - fitted, 0.9)

    assert loss(qr.params) < loss(ols.params)


def test_quantile_table_is_sorted_by_tau():
    rng = np.random.default_rng(8)
    x = rng.normal(size=400)
    y = 1.0 + x + rng.normal(size=400)

    results = fit_quantile_regressions(make_combined(x, y), [MKT_RF], quantiles=[0.9, 0.05, 0.5])
    table = quantile_coefficient_table(results)

    assert list(table.index) == [0.05, 0.5, 0.9]
    assert list(table.columns) == [CONST, MKT_RF]
    assert all(r.nobs == 400 for r in results.values())


@pytest.mark.parametrize("bad", [[0.0], [1.0], [-0.1], [0.5, 0.5], []])
def test_invalid_quantile_levels(bad):
    combined = make_combined(np.linspace(-1, 1, 50), np.linspace(0, 2, 50))
    with pytest.raises(ValueError):
        fit_quantile_regressions(combined, [MKT_RF], quantiles=bad)


def test_pinball_loss_weights_signs_asymmetrically():
    assert pinball_loss([1.0, -1.0], 0.5) == pytest.approx(0.5)
    assert pinball_loss([2.0], 0.9) == pytest.approx(1.8)
    assert pinball_loss([-2.0], 0.9) == pytest.approx(0.2)
