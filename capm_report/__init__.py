"""
CAPM / Fama–French factor regression report helpers.

This package contains reusable utilities for:
- Downloading the daily Fama–French 3-factor file and a stock's daily prices
- Turning prices into log returns over a trailing evaluation window
- Joining those returns with the factor table and computing excess returns
- Fitting OLS (CAPM, three-factor) and quantile regressions
- Normality diagnostics, summary tables and figures

Each stage is a plain function from table(s) to table/result, so the whole
report can be re-run from `workflows.run_factor_regressions` without any
notebook state.
"""
