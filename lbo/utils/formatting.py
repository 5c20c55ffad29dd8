"""
formatting.py
-------------
Number formatting helpers for Streamlit tables and charts.

Model percentages and IRRs are whole numbers (8.45 = 8.45%), so the
percent helpers append a sign rather than scaling.
"""

import numpy as np
import pandas as pd


def _missing(val) -> bool:
    return val is None or pd.isna(val)


def fmt_millions(val, decimals: int = 1) -> str:
    if _missing(val):
        return "—"
    return f"${val:,.{decimals}f}M"


def fmt_pct(val, decimals: int = 1) -> str:
    if _missing(val):
        return "—"
    return f"{val:.{decimals}f}%"


def fmt_multiple(val, decimals: int = 2) -> str:
    if _missing(val):
        return "—"
    return f"{val:.{decimals}f}x"


def fmt_ratio(val, decimals: int = 2) -> str:
    """Credit ratios: a zero denominator comes through as inf / nan."""
    if _missing(val) or np.isinf(val):
        return "n/m"
    return f"{val:.{decimals}f}x"


def fmt_irr(val) -> str:
    if _missing(val):
        return "N/A"
    return f"{val:.1f}%"


def fmt_moic(val) -> str:
    if _missing(val) or np.isinf(val):
        return "N/A"
    return f"{val:.2f}x"


def format_statement_df(df: pd.DataFrame, pct_rows: set | None = None) -> pd.DataFrame:
    """Format a wide statement DataFrame: $M for dollar rows, % for percent rows."""
    pct_rows = pct_rows or set()
    out = df.copy().astype(object)
    for row_label in df.index:
        fmt = fmt_pct if row_label in pct_rows else fmt_millions
        for col in df.columns:
            out.loc[row_label, col] = fmt(df.loc[row_label, col])
    return out


def format_columns(df: pd.DataFrame, money: list = (), ratio: list = (), pct: list = ()) -> pd.DataFrame:
    """Format selected columns of a long DataFrame for display."""
    out = df.copy()
    for cols, fmt in ((money, fmt_millions), (ratio, fmt_ratio), (pct, fmt_pct)):
        for col in cols:
            if col in out:
                out[col] = out[col].apply(fmt)
    return out


def irr_color(val) -> str:
    if not isinstance(val, (int, float)) or np.isnan(val):
        return "background-color: #444; color: #aaa"
    if val < 10:
        return "background-color: #c0392b; color: white"
    if val < 15:
        return "background-color: #e74c3c; color: white"
    if val < 18:
        return "background-color: #e67e22; color: white"
    if val < 22:
        return "background-color: #f1c40f; color: black"
    if val < 27:
        return "background-color: #2ecc71; color: black"
    return "background-color: #16a085; color: white"


def moic_color(val) -> str:
    if not isinstance(val, (int, float)) or np.isnan(val):
        return "background-color: #444; color: #aaa"
    if val < 1.5:
        return "background-color: #c0392b; color: white"
    if val < 2.0:
        return "background-color: #e74c3c; color: white"
    if val < 2.5:
        return "background-color: #f1c40f; color: black"
    if val < 3.0:
        return "background-color: #2ecc71; color: black"
    return "background-color: #16a085; color: white"


def style_sensitivity_table(df: pd.DataFrame, is_irr: bool = True):
    """
    Apply banded coloring to a raw numeric sensitivity DataFrame.
    Returns a pandas Styler object.
    """
    color_fn = irr_color if is_irr else moic_color
    fmt_fn   = fmt_irr if is_irr else fmt_moic
    return df.style.apply(
        lambda col: [color_fn(v) for v in col], axis=0
    ).format(fmt_fn)
