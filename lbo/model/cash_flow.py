"""
cash_flow.py
------------
Derives free cash flow per projection year from the Income Statement,
the cash-flow drivers and the debt schedule.

Structure:
    Net Income
  + D&A (non-cash)
  - Δ NWC            (NWC % x change in revenue)
  - CapEx            (CapEx % x revenue)
  = FCF before debt service
  - Interest expense
  - Scheduled amortization
  = Available for sweep
  - Additional amortization (cash sweep)
  = FCF to equity

Built once from the Phase-A debt schedule (interest and scheduled
amortization before any sweep); after the sweep only the sweep-dependent
fields are refreshed.
"""

import pandas as pd

from lbo.model.state import CashFlowYear, LBOModel


def build_cash_flows(model: LBOModel) -> list[CashFlowYear]:
    drivers = model.assumptions.cash_flow
    income_statement = model.income_statement
    totals = model.debt_schedule.totals_by_year

    flows = []
    prev_revenue = income_statement.historical.revenue
    for i, line in enumerate(income_statement.projections):
        debt_year = totals[i + 1]

        revenue_change = line.revenue - prev_revenue
        nwc_change = revenue_change * (drivers.nwc_pcts[i] / 100)
        capex = line.revenue * (drivers.capex_pcts[i] / 100)

        fcf_before_debt = line.net_income + line.da - nwc_change - capex
        available = (fcf_before_debt
                     - debt_year.interest_expense
                     - debt_year.scheduled_amortization)

        flows.append(CashFlowYear(
            year=line.year,
            net_income=line.net_income,
            da=line.da,
            revenue_change=revenue_change,
            nwc_change=nwc_change,
            capex=capex,
            fcf_before_debt=fcf_before_debt,
            interest_expense=debt_year.interest_expense,
            scheduled_amortization=debt_year.scheduled_amortization,
            available_for_sweep=available,
            additional_amortization=debt_year.additional_amortization,
            fcf_to_equity=available - debt_year.additional_amortization,
        ))
        prev_revenue = line.revenue

    model.cash_flows = flows
    return flows


def refresh_equity_cash_flows(model: LBOModel) -> list[CashFlowYear]:
    """Pull the final sweep amounts from the debt totals into each year."""
    for flow, totals in zip(model.cash_flows, model.debt_schedule.totals_by_year[1:]):
        flow.additional_amortization = totals.additional_amortization
        flow.fcf_to_equity = flow.available_for_sweep - flow.additional_amortization
    return model.cash_flows


def cash_flow_df(flows: list[CashFlowYear]) -> pd.DataFrame:
    """
    Returns a wide DataFrame (one column per year, index = line items).
    Outflows are shown as negatives.
    """
    data = {}
    for f in flows:
        data[f"Year {f.year}"] = {
            "Net Income":              f.net_income,
            "(+) D&A":                 f.da,
            "(-) Δ NWC":               -f.nwc_change,
            "(-) CapEx":               -f.capex,
            "FCF Before Debt Service": f.fcf_before_debt,
            "(-) Interest Expense":    -f.interest_expense,
            "(-) Scheduled Amort.":    -f.scheduled_amortization,
            "Available for Sweep":     f.available_for_sweep,
            "(-) Cash Sweep":          -f.additional_amortization,
            "FCF to Equity":           f.fcf_to_equity,
        }
    return pd.DataFrame(data)
