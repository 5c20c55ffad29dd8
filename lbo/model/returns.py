"""
returns.py
----------
Equity returns: cash-flow vector, MOIC, IRR, return attribution and the
management / sponsor split.

Cash-flow vector
  t = 0             : -equity contribution
  t = 1..exit-1     : FCF to equity (interim distributions)
  t = exit year     : exit equity + that year's FCF to equity
  exit equity       = exit-year EBITDA x exit multiple - exit-year ending debt

IRR is returned in percentage units (8.45 means 8.45%).
"""

import logging

import numpy as np
import pandas as pd

from lbo.model.state import EquityClassReturns, LBOModel, Returns
from lbo.utils.numeric import safe_divide

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# IRR / NPV
# ---------------------------------------------------------------------------
IRR_MAX_ITERATIONS = 1000
IRR_TOLERANCE      = 1e-6     # on |NPV|
IRR_MIN_DERIVATIVE = 1e-10
IRR_FAILURE        = -100.0   # sentinel, percentage units


def _npv_and_derivative(cash_flows: list[float], rate: float) -> tuple[float, float]:
    """NPV and dNPV/dr at ``rate``; zero cash flows are skipped."""
    npv = 0.0
    derivative = 0.0
    with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
        for t, cf in enumerate(cash_flows):
            if cf == 0:
                continue
            npv += cf / np.power(1.0 + rate, t)
            derivative -= t * cf / np.power(1.0 + rate, t + 1)
    return float(npv), float(derivative)


def npv(rate: float, cash_flows: list[float]) -> float:
    """Net present value at ``rate`` (a fraction, 0.08 = 8%)."""
    return _npv_and_derivative(cash_flows, rate)[0]


def calc_irr(cash_flows: list[float]) -> float:
    """
    Newton-Raphson IRR, in percentage units.

    - Fewer than two flows, or a two-flow vector with no initial outflow: 0.
    - Two flows returning less than was invested: start from -50%, keep the
      guess above -99% (a jump beyond 10,000% resets it to 100%); if that
      never converges the result is the -100% sentinel.
    - Anything else: start from 10%.  A vanishing derivative stops the
      search at the current guess; a guess at or below -100% returns the
      sentinel.  Non-convergence returns the last guess.
    """
    flows = [float(cf) for cf in cash_flows]

    if len(flows) <= 1 or (len(flows) == 2 and flows[0] == 0):
        return 0.0

    if len(flows) == 2 and flows[1] < abs(flows[0]):
        guess = -0.5
        for _ in range(IRR_MAX_ITERATIONS):
            value, derivative = _npv_and_derivative(flows, guess)
            if abs(value) < IRR_TOLERANCE:
                return guess * 100
            if abs(derivative) < IRR_MIN_DERIVATIVE:
                return guess * 100

            new_guess = guess - value / derivative
            if new_guess < -0.99:
                guess = -0.99
            elif new_guess > 100:
                guess = 1.0
            else:
                guess = new_guess

        logger.warning("IRR did not converge for %s; reporting %s%%", flows, IRR_FAILURE)
        return IRR_FAILURE

    guess = 0.1
    for _ in range(IRR_MAX_ITERATIONS):
        value, derivative = _npv_and_derivative(flows, guess)
        if abs(value) < IRR_TOLERANCE:
            return guess * 100
        if abs(derivative) < IRR_MIN_DERIVATIVE:
            break

        guess = guess - value / derivative
        if guess <= -1:
            logger.warning("IRR search fell below -100%% for %s", flows)
            return IRR_FAILURE

    return guess * 100


# ---------------------------------------------------------------------------
# Returns
# ---------------------------------------------------------------------------

def _equity_class(pct: float, initial: float, exit_equity: float,
                  moic: float, irr: float) -> EquityClassReturns:
    # Same timing for both classes, so MOIC and IRR are shared
    return EquityClassReturns(
        ownership_pct=pct * 100,
        initial_equity=initial * pct,
        exit_equity=exit_equity * pct,
        moic=moic,
        irr=irr,
    )


def calculate_returns(model: LBOModel) -> Returns:
    a = model.assumptions
    n = model.projection_years
    flows = model.cash_flows

    exit_year = max(1, min(a.exit.exit_year, n))
    r = Returns(exit_year=exit_year, exit_multiple=a.exit.exit_multiple)
    r.initial_equity = model.sources_uses.equity_contribution

    # ---- Exit ----
    exit_ebitda = model.income_statement.projections[exit_year - 1].ebitda
    r.exit_enterprise_value = exit_ebitda * r.exit_multiple
    r.exit_debt   = model.debt_schedule.totals_by_year[exit_year].ending_balance
    r.exit_equity = r.exit_enterprise_value - r.exit_debt

    # ---- Cash-flow vector ----
    r.cash_flows = [-r.initial_equity]
    r.cash_flows += [f.fcf_to_equity for f in flows[:exit_year - 1]]
    r.cash_flows.append(r.exit_equity + flows[exit_year - 1].fcf_to_equity)

    r.moic = safe_divide(sum(r.cash_flows[1:]), r.initial_equity)
    r.irr  = calc_irr(r.cash_flows)
    r.cumulative_cash_flows = [0.0] + [float(v) for v in np.cumsum(r.cash_flows[1:])]

    # ---- Attribution ----
    total_return = r.moic * r.initial_equity
    r.cash_flow_attribution  = safe_divide(total_return - r.exit_equity, total_return) * 100
    r.exit_value_attribution = safe_divide(r.exit_equity, total_return) * 100

    # ---- Management / sponsor split ----
    mgmt_pct = a.transaction.management_equity_pct / 100
    r.management = _equity_class(mgmt_pct, r.initial_equity, r.exit_equity, r.moic, r.irr)
    r.sponsor    = _equity_class(1 - mgmt_pct, r.initial_equity, r.exit_equity, r.moic, r.irr)

    model.returns = r
    return r


# ---------------------------------------------------------------------------
# Display
# ---------------------------------------------------------------------------

def returns_df(returns: Returns) -> pd.DataFrame:
    """Equity cash flows by year (Year 0 = initial investment)."""
    return pd.DataFrame({
        "Year":                 list(range(len(returns.cash_flows))),
        "Equity Cash Flow":     returns.cash_flows,
        "Cumulative Cash Flow": returns.cumulative_cash_flows,
    })


def equity_split_df(returns: Returns) -> pd.DataFrame:
    rows = []
    for label, cls in (("Management", returns.management), ("Sponsor", returns.sponsor)):
        rows.append({
            "Class":          label,
            "Ownership %":    cls.ownership_pct,
            "Initial Equity": cls.initial_equity,
            "Exit Equity":    cls.exit_equity,
            "MOIC":           cls.moic,
            "IRR %":          cls.irr,
        })
    return pd.DataFrame(rows)
