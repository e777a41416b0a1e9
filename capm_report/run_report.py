"""
Run the CAPM / Fama–French regression report.

Usage (from the project root, after `python -m capm_report.setup_data`):

    python -m capm_report.run_report

Prints the regression summaries, normality diagnostics and quantile tables,
and saves figures under `capm_report_data/figures/`. Any input or
estimation error aborts the run; no partial report is written.
"""

from __future__ import annotations

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import pandas as pd  # noqa: E402

from .config import FACTORS_FILENAME, FIGURES_DIR, PRICES_FILENAME, RAW_DIR, TICKER  # noqa: E402
from .process_french import load_ff3_daily  # noqa: E402
from .report import format_model_summary, print_model_comparison  # noqa: E402
from .stock_data import load_prices_csv  # noqa: E402
from .workflows import build_figures, run_factor_regressions  # noqa: E402


def _print_header(text: str) -> None:
    print("\n" + "=" * 70)
    print(text)
    print("=" * 70)


def main() -> None:
    """Load inputs, run every stage and write the report to stdout/figures."""
    factors = load_ff3_daily(RAW_DIR / FACTORS_FILENAME)
    prices = load_prices_csv(RAW_DIR / PRICES_FILENAME)

    result = run_factor_regressions(prices, factors)
    inputs = result["inputs"]

    _print_header(f"{TICKER}: CAPM and Fama–French three-factor regressions")
    print(
        f"Window: {inputs['window_start'].date()} -> {inputs['window_end'].date()} "
        f"({inputs['n_obs']} joined trading days of {inputs['n_returns_in_window']} returns)"
    )

    with pd.option_context("display.width", 120, "display.float_format", "{:.4f}".format):
        for name, res in result["models"].items():
            _print_header(f"{name} OLS")
            print(format_model_summary(res))

        _print_header("Model comparison")
        print(result["summary_tables"]["comparison"])
        print_model_comparison(result["summary_tables"]["comparison"])

        _print_header("Normality diagnostics")
        print(pd.DataFrame(result["diagnostics"]).T)

        for name, table in result["summary_tables"]["quantiles"].items():
            _print_header(f"{name} quantile regression coefficients")
            print(table)

    FIGURES_DIR.mkdir(parents=True, exist_ok=True)
    for name, fig in build_figures(result).items():
        path = FIGURES_DIR / f"{TICKER}_{name}.png"
        fig.savefig(path, dpi=150)
        plt.close(fig)
        print(f"  ✓ Saved {path}")

    print("\n✓ Report complete.")


if __name__ == "__main__":
    main()
