"""
credit_metrics.py
-----------------
Credit ratios on the projected capital structure.

Computed metrics (by year):
  - Debt / EBITDA        (beginning total debt balance / EBITDA)
  - Interest Coverage    (EBIT / interest expense)
  - Debt Service Coverage (EBITDA / (interest + total amortization))

Zero denominators are not errors: the ratio comes back as inf / -inf / nan
and is displayed as such.
"""

import pandas as pd

from lbo.model.state import CreditRatio, LBOModel
from lbo.utils.numeric import safe_divide


def calculate_credit_ratios(model: LBOModel) -> list[CreditRatio]:
    totals = model.debt_schedule.totals_by_year

    ratios = []
    for line in model.income_statement.projections:
        debt_year = totals[line.year]
        debt_service = debt_year.interest_expense + debt_year.total_amortization

        ratios.append(CreditRatio(
            year=line.year,
            debt_to_ebitda=safe_divide(debt_year.beginning_balance, line.ebitda),
            interest_coverage=safe_divide(line.ebit, line.interest_expense),
            debt_service_coverage=safe_divide(line.ebitda, debt_service),
        ))

    model.credit_ratios = ratios
    return ratios


def credit_df(ratios: list[CreditRatio]) -> pd.DataFrame:
    return pd.DataFrame([{
        "Year":                  r.year,
        "Debt / EBITDA (x)":     r.debt_to_ebitda,
        "Interest Coverage (x)": r.interest_coverage,
        "DSCR (x)":              r.debt_service_coverage,
    } for r in ratios])
