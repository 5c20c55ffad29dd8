"""
income_statement.py
-------------------
Projects the Income Statement for the historical year and each year of
the projection horizon.

Revenue → COGS / SG&A → EBITDA → D&A → EBIT → Interest → EBT → Taxes → Net Income

Notes:
  - Interest expense is an input here, supplied by the debt schedule.
    The circular dependency (interest → net income → cash flow → sweep →
    interest) is broken with a fixed two-pass order rather than a solver:
    project with zero interest, build the schedule, then re-derive only the
    interest-dependent tail (``finalize_income_statement``).
  - Taxes are floored at zero; losses generate no tax benefit.
"""

import pandas as pd

from lbo.model.state import IncomeStatement, IncomeStatementYear, LBOModel


def _derive_operating(line: IncomeStatementYear) -> None:
    """Revenue-driven lines (revenue already set)."""
    line.cogs   = line.revenue * (line.cogs_pct / 100)
    line.sga    = line.revenue * (line.sga_pct / 100)
    line.ebitda = line.revenue - line.cogs - line.sga
    line.da     = line.revenue * (line.da_pct / 100)
    line.ebit   = line.ebitda - line.da


def _derive_tail(line: IncomeStatementYear) -> None:
    """Interest-dependent lines."""
    line.ebt        = line.ebit - line.interest_expense
    line.taxes      = max(0.0, line.ebt * (line.tax_rate / 100))
    line.net_income = line.ebt - line.taxes


def project_income_statement(
    model: LBOModel,
    interest_expense: list[float] | None = None,
) -> IncomeStatement:
    """
    Rebuild the income statement from the operating drivers.

    Parameters
    ----------
    model            : LBOModel (reads ``assumptions``, writes ``income_statement``)
    interest_expense : optional per-year interest; defaults to zero for every
                       year, which is the seed the debt schedule expects.
    """
    a = model.assumptions
    hist = a.historical

    historical = IncomeStatementYear(
        year=0,
        cogs_pct=hist.cogs_pct,
        sga_pct=hist.sga_pct,
        da_pct=hist.da_pct,
        tax_rate=hist.tax_rate,
        revenue=hist.revenue,
    )
    _derive_operating(historical)
    _derive_tail(historical)

    projections = []
    prev_revenue = historical.revenue
    for i, drivers in enumerate(a.operating):
        line = IncomeStatementYear(
            year=i + 1,
            revenue_growth_pct=drivers.revenue_growth_pct,
            cogs_pct=drivers.cogs_pct,
            sga_pct=drivers.sga_pct,
            da_pct=drivers.da_pct,
            tax_rate=drivers.tax_rate,
        )
        line.revenue = prev_revenue * (1 + drivers.revenue_growth_pct / 100)
        _derive_operating(line)
        line.interest_expense = interest_expense[i] if interest_expense is not None else 0.0
        _derive_tail(line)

        projections.append(line)
        prev_revenue = line.revenue

    model.income_statement = IncomeStatement(historical=historical, projections=projections)
    return model.income_statement


def finalize_income_statement(income_statement: IncomeStatement) -> IncomeStatement:
    """Re-derive EBT / taxes / net income from the interest now on each year."""
    for line in income_statement.projections:
        _derive_tail(line)
    return income_statement


# ---------------------------------------------------------------------------
# Display
# ---------------------------------------------------------------------------
IS_ROWS = [
    ("Revenue Growth %",  "revenue_growth_pct"),
    ("Revenue",           "revenue"),
    ("COGS",              "cogs"),
    ("SG&A",              "sga"),
    ("EBITDA",            "ebitda"),
    ("EBITDA Margin %",   None),
    ("D&A",               "da"),
    ("EBIT",              "ebit"),
    ("Interest Expense",  "interest_expense"),
    ("EBT",               "ebt"),
    ("Taxes",             "taxes"),
    ("Net Income",        "net_income"),
]

PCT_ROWS = {"Revenue Growth %", "EBITDA Margin %"}


def income_statement_df(income_statement: IncomeStatement) -> pd.DataFrame:
    """
    Returns a wide DataFrame with one column per year
    ("Historical", "Year 1", ...).  Index = line item labels.
    """
    years = [("Historical", income_statement.historical)]
    years += [(f"Year {line.year}", line) for line in income_statement.projections]

    data = {}
    for col, line in years:
        d = {}
        for label, attr in IS_ROWS:
            if attr is None:
                d[label] = line.ebitda / line.revenue * 100 if line.revenue else 0.0
            else:
                d[label] = getattr(line, attr)
        data[col] = d
    return pd.DataFrame(data).loc[[label for label, _ in IS_ROWS]]
