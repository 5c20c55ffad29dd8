"""
sensitivity.py
--------------
Sensitivity of LBO returns to the deal's key levers.

Table 1: Entry EV/EBITDA (rows) vs Exit EV/EBITDA (cols) → MOIC and IRR
Table 2: uniform Revenue Growth (one row per rate)       → MOIC and IRR

Both sweeps perturb the live ``LBOModel`` in place and re-run the
pipeline for every point (5 x 5 + 5 = 30 runs with the default grids).
Between the two, only the multiples and the purchase EV go back to base;
the growth cases reuse the financing of the last grid cell.  Everything
is restored at the end and the full model is re-run once more, so a
caller sees exactly the state a plain ``run_model`` would have produced.

IRR values are in percentage units (15.0 = 15%).
"""

import logging
from copy import deepcopy

import pandas as pd

from lbo.model.debt_schedule import populate_debt_assumptions
from lbo.model.lbo_engine import run_model, run_projection
from lbo.model.sources_uses import calculate_sources_uses
from lbo.model.state import (DEFAULT_ENTRY_MULTIPLES, DEFAULT_EXIT_MULTIPLES,
                             DEFAULT_GROWTH_RATES, LBOModel, SensitivityAnalysis)

logger = logging.getLogger(__name__)


def _snapshot(model: LBOModel) -> dict:
    a = model.assumptions
    return {
        "entry_multiple":   a.transaction.entry_multiple,
        "exit_multiple":    a.exit.exit_multiple,
        "growth":           [d.revenue_growth_pct for d in a.operating],
        "sources_uses":     deepcopy(model.sources_uses),
        "debt_assumptions": deepcopy(model.debt_assumptions),
    }


def _restore(model: LBOModel, saved: dict) -> None:
    a = model.assumptions
    a.transaction.entry_multiple = saved["entry_multiple"]
    a.exit.exit_multiple         = saved["exit_multiple"]
    for drivers, growth in zip(a.operating, saved["growth"]):
        drivers.revenue_growth_pct = growth
    model.sources_uses     = deepcopy(saved["sources_uses"])
    model.debt_assumptions = deepcopy(saved["debt_assumptions"])


def _restore_multiples(model: LBOModel, saved: dict) -> None:
    a = model.assumptions
    a.transaction.entry_multiple   = saved["entry_multiple"]
    a.exit.exit_multiple           = saved["exit_multiple"]
    model.sources_uses.purchase_ev = saved["sources_uses"].purchase_ev


def _entry_exit_grid(model: LBOModel, analysis: SensitivityAnalysis) -> None:
    a = model.assumptions
    analysis.moic_matrix = []
    analysis.irr_matrix  = []

    for entry_m in analysis.entry_multiples:
        moic_row, irr_row = [], []
        for exit_m in analysis.exit_multiples:
            a.transaction.entry_multiple = entry_m
            a.exit.exit_multiple         = exit_m

            calculate_sources_uses(model)
            populate_debt_assumptions(model, apply_overrides=False)
            r = run_projection(model)

            logger.debug("Entry %.1fx / exit %.1fx: MOIC %.2fx, IRR %.2f%%",
                         entry_m, exit_m, r.moic, r.irr)
            moic_row.append(r.moic)
            irr_row.append(r.irr)
        analysis.moic_matrix.append(moic_row)
        analysis.irr_matrix.append(irr_row)


def _growth_sweep(model: LBOModel, analysis: SensitivityAnalysis) -> None:
    analysis.growth_moic_values = []
    analysis.growth_irr_values  = []

    for growth in analysis.growth_rates:
        for drivers in model.assumptions.operating:
            drivers.revenue_growth_pct = growth
        r = run_projection(model)

        logger.debug("Growth %.1f%%: MOIC %.2fx, IRR %.2f%%", growth, r.moic, r.irr)
        analysis.growth_moic_values.append(r.moic)
        analysis.growth_irr_values.append(r.irr)


def run_sensitivity_analysis(
    model: LBOModel,
    entry_multiples: list[float] | None = None,
    exit_multiples:  list[float] | None = None,
    growth_rates:    list[float] | None = None,
) -> SensitivityAnalysis:
    """
    Run both sweeps and leave ``model`` as a plain ``run_model`` would.

    Parameters
    ----------
    model           : LBOModel, run or not
    entry_multiples : rows of the grid (default 8x..12x)
    exit_multiples  : columns of the grid (default 6x..10x)
    growth_rates    : uniform revenue growth % per year (default 3..7)

    Returns
    -------
    SensitivityAnalysis, also stored on ``model.sensitivity``.
    """
    analysis = SensitivityAnalysis(
        entry_multiples=list(DEFAULT_ENTRY_MULTIPLES if entry_multiples is None else entry_multiples),
        exit_multiples=list(DEFAULT_EXIT_MULTIPLES if exit_multiples is None else exit_multiples),
        growth_rates=list(DEFAULT_GROWTH_RATES if growth_rates is None else growth_rates),
    )

    # Base financing, so a model that was never run sweeps from a real deal
    calculate_sources_uses(model)
    populate_debt_assumptions(model)

    saved = _snapshot(model)
    try:
        _entry_exit_grid(model, analysis)
        _restore_multiples(model, saved)
        _growth_sweep(model, analysis)
    finally:
        _restore(model, saved)

    run_model(model)
    model.sensitivity = analysis

    logger.info("Sensitivity analysis complete: %dx%d grid, %d growth cases",
                len(analysis.entry_multiples), len(analysis.exit_multiples),
                len(analysis.growth_rates))
    return analysis


# ---------------------------------------------------------------------------
# Display
# ---------------------------------------------------------------------------

def sensitivity_tables(analysis: SensitivityAnalysis) -> tuple[pd.DataFrame, pd.DataFrame, pd.DataFrame]:
    """
    Returns (moic_df, irr_df, growth_df).
    Rows = entry EV/EBITDA, Columns = exit EV/EBITDA; growth_df has one
    row per growth rate.
    """
    rows = [f"{m:.1f}x" for m in analysis.entry_multiples]
    cols = [f"Exit {m:.1f}x" for m in analysis.exit_multiples]

    moic_df = pd.DataFrame(analysis.moic_matrix, index=rows, columns=cols)
    irr_df  = pd.DataFrame(analysis.irr_matrix,  index=rows, columns=cols)
    moic_df.index.name = "Entry Multiple"
    irr_df.index.name  = "Entry Multiple"

    growth_df = pd.DataFrame({
        "MOIC":  analysis.growth_moic_values,
        "IRR %": analysis.growth_irr_values,
    }, index=[f"{g:.1f}%" for g in analysis.growth_rates])
    growth_df.index.name = "Revenue Growth"
    return moic_df, irr_df, growth_df
