"""End-to-end tests for the report workflow and figures."""

import matplotlib.pyplot as plt
import pandas as pd
import pytest
from matplotlib.figure import Figure

from capm_report.errors import InsufficientHistoryError, JoinMismatchError
from capm_report.process_french import parse_ff3_daily_text
from capm_report.records import EXCESS_RETURN, HML, LOG_RETURN, MKT_RF, RF, SMB
from capm_report.stock_data import load_prices_csv
from capm_report.workflows import build_figures, run_factor_regressions


def test_run_factor_regressions_end_to_end(synthetic_market):
    prices, factors = synthetic_market

    result = run_factor_regressions(prices, factors)

    inputs = result["inputs"]
    assert inputs["window_end"] == pd.Timestamp("2024-02-29")
    assert inputs["window_start"] == pd.Timestamp("2022-02-28")
    assert inputs["first_date"] == pd.Timestamp("2022-02-28")

    combined = result["tables"]["combined"]
    assert len(combined) == inputs["n_obs"] == inputs["n_returns_in_window"]
    assert (combined[EXCESS_RETURN] - (combined[LOG_RETURN] - combined[RF])).abs().max() < 1e-9

    capm, ff3 = result["models"]["CAPM"], result["models"]["FF3"]
    assert capm.params[MKT_RF] == pytest.approx(1.2, abs=0.05)
    assert ff3.params[SMB] == pytest.approx(0.3, abs=0.05)
    assert ff3.params[HML] == pytest.approx(-0.4, abs=0.05)
    assert ff3.rsquared > capm.rsquared

    assert set(result["quantile_models"]["FF3"]) == {0.05, 0.25, 0.5, 0.75, 0.9}
    assert list(result["summary_tables"]["comparison"].index) == ["CAPM", "FF3"]
    assert set(result["diagnostics"]) == {"excess_return", "CAPM_residuals", "FF3_residuals"}
    assert set(result["plot_data"]["qq"]) == {"excess_return", "CAPM", "FF3"}


def test_run_does_not_mutate_inputs(synthetic_market):
    prices, factors = synthetic_market
    prices_before, factors_before = prices.copy(), factors.copy()

    run_factor_regressions(prices, factors, quantiles=[0.5])

    pd.testing.assert_frame_equal(prices, prices_before)
    pd.testing.assert_frame_equal(factors, factors_before)


def test_short_history_fails_by_default(synthetic_market):
    prices, factors = synthetic_market
    recent = prices.loc["2023-01-01":]

    with pytest.raises(InsufficientHistoryError):
        run_factor_regressions(recent, factors)

    result = run_factor_regressions(recent, factors, quantiles=[0.5], require_full_window=False)
    assert result["inputs"]["n_obs"] == len(recent) - 1


def test_window_starting_on_a_weekend_is_fully_covered(synthetic_market):
    prices, factors = synthetic_market
    # Last price Monday 2024-02-26, so the window starts Saturday 2022-02-26.
    prices = prices.loc["2022-02-25":"2024-02-26"]

    result = run_factor_regressions(prices, factors, quantiles=[0.5])

    assert result["inputs"]["window_start"] == pd.Timestamp("2022-02-26")
    assert result["inputs"]["first_date"] == pd.Timestamp("2022-02-28")
    assert result["inputs"]["n_returns_in_window"] == len(prices) - 1


def test_factor_gap_is_reported_as_join_mismatch(synthetic_market):
    prices, factors = synthetic_market
    with pytest.raises(JoinMismatchError):
        run_factor_regressions(prices, factors.loc[:"2022-12-31"])


def test_yyyymmdd_factors_join_iso_prices(tmp_path, synthetic_market):
    prices, factors = synthetic_market

    lines = [",Mkt-RF,SMB,HML,RF"]
    for date, row in factors.iterrows():
        lines.append(f"{date:%Y%m%d},{row[MKT_RF]:.6f},{row[SMB]:.6f},{row[HML]:.6f},{row[RF]:.6f}")
    parsed_factors = parse_ff3_daily_text("header text\n\n" + "\n".join(lines) + "\n")

    price_path = tmp_path / "prices.csv"
    prices.to_csv(price_path, date_format="%Y-%m-%d")
    loaded_prices = load_prices_csv(price_path)

    result = run_factor_regressions(loaded_prices, parsed_factors, quantiles=[0.5])
    assert result["inputs"]["n_obs"] == result["inputs"]["n_returns_in_window"]


def test_build_figures(synthetic_market):
    prices, factors = synthetic_market
    result = run_factor_regressions(prices, factors, quantiles=[0.1, 0.5, 0.9])

    figures = build_figures(result)

    assert set(figures) == {
        "qq_excess_return",
        "qq_CAPM_residuals",
        "qq_FF3_residuals",
        "quantile_coefficients_CAPM",
        "quantile_coefficients_FF3",
        "scatter_CAPM",
    }
    assert all(isinstance(fig, Figure) for fig in figures.values())
    assert len(figures["quantile_coefficients_FF3"].axes) == 4
    for fig in figures.values():
        plt.close(fig)
