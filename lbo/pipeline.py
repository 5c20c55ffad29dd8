"""
pipeline.py
-----------
``calculate_model``: the one call a boundary adapter needs.

Loads assumptions (a plain dict or a ``DealAssumptions``), runs the full
model, optionally the sensitivity analysis, and hands back a deep-copied
snapshot of every derived structure.
"""

import logging

from lbo.analysis.sensitivity import run_sensitivity_analysis
from lbo.model.assumptions import DealAssumptions
from lbo.model.lbo_engine import run_model
from lbo.model.state import LBOModel

logger = logging.getLogger(__name__)


def calculate_model(
    assumptions: DealAssumptions | dict | None = None,
    model: LBOModel | None = None,
    include_sensitivity: bool = True,
) -> dict:
    """
    Parameters
    ----------
    assumptions         : inputs from the boundary; a dict goes through
                          ``DealAssumptions.from_dict``.  ``None`` keeps the
                          assumptions already on ``model`` (or the defaults).
    model               : existing aggregate to run against, so previously
                          applied tranche rates carry over.  A new one is
                          created when omitted.
    include_sensitivity : run the entry/exit grid and growth sweep.

    Returns
    -------
    dict keyed transaction, sources_uses, debt_assumptions, income_statement,
    debt_schedule, credit_ratios, cash_flow, returns, sensitivity.
    """
    model = model if model is not None else LBOModel()

    if isinstance(assumptions, dict):
        model.assumptions = DealAssumptions.from_dict(assumptions)
    elif isinstance(assumptions, DealAssumptions):
        model.assumptions = assumptions
    elif assumptions is not None:
        raise TypeError(f"expected DealAssumptions or dict, got {type(assumptions).__name__}")
    model.assumptions.normalize()

    run_model(model)
    if include_sensitivity:
        run_sensitivity_analysis(model)
    else:
        logger.debug("Sensitivity analysis skipped")

    return model.snapshot()
