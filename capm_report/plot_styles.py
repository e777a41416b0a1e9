"""
Central styling for the regression report figures.

Use style(role, series) for all plot/scatter calls. Colours and labels come
from one SERIES palette; roles only add the line/marker geometry. Quantile
lines get their colour from QUANTILE_CMAP so any τ grid stays readable.
"""

# --- Base styles (kwargs for ax.plot / ax.scatter) ---
SCATTER_STYLE = {
    "s": 10,
    "alpha": 0.35,
    "zorder": 1,
}

FIT_STYLE = {
    "linewidth": 1.8,
    "zorder": 3,
}

REFERENCE_STYLE = {
    "linewidth": 1.2,
    "linestyle": "--",
    "zorder": 2,
}

# --- Single series palette ---
SERIES = {
    "observations": {"color": "C7", "label": "Daily observations"},
    "ols": {"color": "C3", "linestyle": "-", "label": "OLS fit"},
    "quantile": {"linestyle": "--", "label": "Quantile fit"},
    "qq_sample": {"color": "C0", "label": "Sample quantiles"},
    "qq_line": {"color": "C3", "label": "Normal reference"},
}

QUANTILE_CMAP = "viridis"

ROLE_BASES = {
    "scatter": SCATTER_STYLE,
    "fit": FIT_STYLE,
    "reference": REFERENCE_STYLE,
}


def style(role: str, series: str, *, label: str | None = None) -> dict:
    """
    Return a single style dict for ax.plot(...) or ax.scatter(...).

    - role: "scatter" | "fit" | "reference"
    - series: key into SERIES (e.g. "ols", "observations", "qq_line")
    - label: optional legend override

    Example: ax.plot(x, y, **style("fit", "ols"))
             ax.plot(x, y, **style("fit", "quantile", label="τ = 0.05"))
    """
    base = ROLE_BASES.get(role)
    if base is None:
        raise ValueError(f"Unknown role: {role}")
    series_d = SERIES.get(series)
    if series_d is None:
        raise ValueError(f"Unknown series: {series!r}")
    out = {**base, **series_d}

    # scatter() does not accept linestyle
    if role == "scatter":
        out.pop("linestyle", None)
    if role == "reference" and series == "ols":
        out["linestyle"] = REFERENCE_STYLE["linestyle"]

    if label is not None:
        out["label"] = label
    return out


def quantile_colors(quantiles) -> dict:
    """Map each τ to a colour sampled evenly from QUANTILE_CMAP."""
    import matplotlib

    qs = sorted(quantiles)
    cmap = matplotlib.colormaps[QUANTILE_CMAP]
    if len(qs) == 1:
        return {qs[0]: cmap(0.5)}
    return {q: cmap(i / (len(qs) - 1)) for i, q in enumerate(qs)}
