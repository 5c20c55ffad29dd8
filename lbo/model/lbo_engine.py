"""
lbo_engine.py
-------------
Master orchestrator: runs one full pass of the LBO model over an
``LBOModel`` aggregate.

Handles the circular dependency between the Income Statement and the
Debt Schedule (interest expense → IS → FCF → sweep → interest expense)
with a fixed single pass rather than iterating to convergence:

  1. Sources & Uses
  2. Debt assumptions (merge + boundary rate overrides)
  3. Income Statement with zero interest
  4. Debt Schedule phase A (scheduled; adds interest into the IS)
  5. Cash Flow (available-for-sweep from the phase-A figures)
  6. Debt Schedule phase B (sweep; overwrites IS interest, refreshes FCF)
  7. IS tail re-derived from the final interest (EBT / taxes / net income)
  8. Credit ratios
  9. Returns

All monetary values in the unit of LTM EBITDA.
"""

import logging

from lbo.analysis.credit_metrics import calculate_credit_ratios
from lbo.model.cash_flow import build_cash_flows
from lbo.model.debt_schedule import apply_cash_sweep, build_debt_schedule, populate_debt_assumptions
from lbo.model.income_statement import finalize_income_statement, project_income_statement
from lbo.model.returns import calculate_returns
from lbo.model.sources_uses import calculate_sources_uses
from lbo.model.state import LBOModel, Returns

logger = logging.getLogger(__name__)


def _run_statements(model: LBOModel) -> None:
    """Steps 3-7: statements and debt schedule, from a zero-interest seed."""
    project_income_statement(model)
    build_debt_schedule(model)
    build_cash_flows(model)
    apply_cash_sweep(model)
    finalize_income_statement(model.income_statement)


def run_projection(model: LBOModel) -> Returns:
    """
    Statements, debt schedule and returns against the Sources & Uses and
    debt assumptions already on the model.  Used by the sensitivity sweeps.
    """
    _run_statements(model)
    return calculate_returns(model)


def run_model(model: LBOModel) -> LBOModel:
    """
    Run the full single-pass model.

    Parameters
    ----------
    model : LBOModel with ``assumptions`` populated; every derived
            attribute is overwritten.

    Returns
    -------
    The same ``model``, for chaining.
    """
    logger.debug("Running model over %d projection years", model.projection_years)

    calculate_sources_uses(model)
    populate_debt_assumptions(model, apply_overrides=True)
    _run_statements(model)
    calculate_credit_ratios(model)
    r = calculate_returns(model)

    logger.info(
        "Model run: equity %.2f, exit equity %.2f, MOIC %.2fx, IRR %.2f%%",
        r.initial_equity, r.exit_equity, r.moic, r.irr,
    )
    return model
