"""
debt_schedule.py
----------------
Builds the debt amortization schedule for every tranche and runs the
cash-flow sweep waterfall.

Key mechanics:
  - Year 0 is the draw at close: beginning = ending = tranche amount.
  - Scheduled amortization and interest are both % of the *beginning*
    balance of the year.
  - Ending balance never goes below zero; if scheduled amortization alone
    would overshoot, it is clamped to the beginning balance.
  - Cash sweep: surplus cash is offered to tranches in list order
    (first = most senior).  Each tranche takes its sweep % of what is
    left, capped at its principal remaining after scheduled payments.
    Whatever a tranche cannot absorb stays available to the next one.

Two phases per model run:
  Phase A  ``build_debt_schedule``  scheduled figures only; adds each
           tranche-year's interest to the income statement.
  Phase B  ``apply_cash_sweep``     allocates the sweep, rolls the new
           balances forward, re-sums totals and overwrites the income
           statement's interest with the final figures.
"""

import logging

import pandas as pd

from lbo.model.assumptions import DebtAssumption, DebtRates, merge_debt_assumptions
from lbo.model.cash_flow import refresh_equity_cash_flows
from lbo.model.state import DebtSchedule, DebtScheduleEntry, LBOModel, TrancheSchedule

logger = logging.getLogger(__name__)

SCHEDULE_FIELDS = (
    "beginning_balance",
    "scheduled_amortization",
    "additional_amortization",
    "total_amortization",
    "ending_balance",
    "interest_expense",
)


def populate_debt_assumptions(model: LBOModel, apply_overrides: bool = True) -> list[DebtAssumption]:
    """
    Re-derive one DebtAssumption per tranche from the current Sources & Uses.

    Rates carry over for tranches unchanged by name and position; then, if
    ``apply_overrides``, the boundary's per-tranche ``DebtRates`` are applied.
    """
    a = model.assumptions
    model.debt_assumptions = merge_debt_assumptions(
        model.debt_assumptions, a.debt_tranches, model.sources_uses.tranche_amounts,
    )
    if apply_overrides:
        for assumption, rates in zip(model.debt_assumptions, a.debt_rates):
            if isinstance(rates, DebtRates):
                assumption.apply_rates(rates)
    return model.debt_assumptions


def _roll_forward(entry: DebtScheduleEntry, beginning: float, assumption: DebtAssumption) -> None:
    """(Re)derive one tranche-year from its beginning balance."""
    entry.beginning_balance      = beginning
    entry.scheduled_amortization = beginning * (assumption.amortization_pct / 100)
    entry.interest_expense       = beginning * (assumption.interest_rate / 100)
    entry.total_amortization     = entry.scheduled_amortization + entry.additional_amortization
    entry.ending_balance         = beginning - entry.total_amortization

    if entry.ending_balance < 0:
        entry.ending_balance          = 0.0
        entry.total_amortization      = beginning
        entry.scheduled_amortization  = beginning
        entry.additional_amortization = 0.0


def _sum_totals(tranches: list[TrancheSchedule], n: int) -> list[DebtScheduleEntry]:
    totals = [DebtScheduleEntry(year=yr) for yr in range(n + 1)]
    for tranche in tranches:
        for yr, entry in enumerate(tranche.schedule):
            for name in SCHEDULE_FIELDS:
                setattr(totals[yr], name, getattr(totals[yr], name) + getattr(entry, name))
    return totals


# ---------------------------------------------------------------------------
# Phase A: scheduled pass
# ---------------------------------------------------------------------------

def build_debt_schedule(model: LBOModel) -> DebtSchedule:
    """
    Scheduled amortization and interest for every tranche, years 0..N.

    Side effect: each tranche-year's interest is *added* to the matching
    income statement year.  Callers must start from zero interest (a fresh
    ``project_income_statement``) or the interest is double counted.
    """
    n = model.projection_years
    projections = model.income_statement.projections

    tranches = []
    for assumption in model.debt_assumptions:
        schedule = [DebtScheduleEntry(
            year=0,
            beginning_balance=assumption.amount,
            ending_balance=assumption.amount,
        )]
        for yr in range(1, n + 1):
            entry = DebtScheduleEntry(year=yr)
            _roll_forward(entry, schedule[-1].ending_balance, assumption)
            schedule.append(entry)
            projections[yr - 1].interest_expense += entry.interest_expense
        tranches.append(TrancheSchedule(name=assumption.name, schedule=schedule))

    model.debt_schedule = DebtSchedule(tranches=tranches, totals_by_year=_sum_totals(tranches, n))
    return model.debt_schedule


# ---------------------------------------------------------------------------
# Phase B: cash-sweep waterfall
# ---------------------------------------------------------------------------

def _propagate(schedule: list[DebtScheduleEntry], from_year: int, assumption: DebtAssumption) -> None:
    """Roll a changed ending balance through every later year of a tranche."""
    for yr in range(from_year + 1, len(schedule)):
        _roll_forward(schedule[yr], schedule[yr - 1].ending_balance, assumption)


def apply_cash_sweep(model: LBOModel) -> DebtSchedule:
    """
    Allocate each year's ``available_for_sweep`` to additional principal
    paydown, senior tranche first.

    Requires ``model.cash_flows`` built from the Phase-A schedule.  Years
    are processed in ascending order so a sweep in year y is reflected in
    the balances, amortization and interest of every year after y.
    """
    debt = model.debt_schedule
    n = model.projection_years

    for flow in model.cash_flows:
        yr = flow.year
        remaining = flow.available_for_sweep
        if remaining <= 0:
            continue

        for assumption, tranche in zip(model.debt_assumptions, debt.tranches):
            entry = tranche.schedule[yr]
            cap = entry.beginning_balance - entry.scheduled_amortization
            allocation = min(remaining * (assumption.cash_sweep_pct / 100), cap)

            entry.additional_amortization = allocation
            entry.total_amortization      = entry.scheduled_amortization + allocation
            entry.ending_balance          = max(0.0, entry.beginning_balance - entry.total_amortization)
            _propagate(tranche.schedule, yr, assumption)

            logger.debug("Year %d sweep: %.4f to %s", yr, allocation, tranche.name)
            remaining -= allocation
            if remaining <= 0:
                break

    # Totals are re-summed from the final tranche schedules, not patched
    debt.totals_by_year = _sum_totals(debt.tranches, n)
    for line, totals in zip(model.income_statement.projections, debt.totals_by_year[1:]):
        line.interest_expense = totals.interest_expense

    refresh_equity_cash_flows(model)
    return debt


# ---------------------------------------------------------------------------
# Extraction helpers
# ---------------------------------------------------------------------------

def get_interest_expense_by_year(debt: DebtSchedule) -> list[float]:
    """Total interest expense, years 1..N."""
    return [t.interest_expense for t in debt.totals_by_year[1:]]


def get_ending_debt_by_year(debt: DebtSchedule) -> list[float]:
    """Total ending debt, years 0..N."""
    return [t.ending_balance for t in debt.totals_by_year]


# ---------------------------------------------------------------------------
# Display
# ---------------------------------------------------------------------------

def _entry_row(entry: DebtScheduleEntry) -> dict:
    return {
        "Year":                   entry.year,
        "Beginning Balance":      entry.beginning_balance,
        "Scheduled Amortization": entry.scheduled_amortization,
        "Additional (Sweep)":     entry.additional_amortization,
        "Total Amortization":     entry.total_amortization,
        "Ending Balance":         entry.ending_balance,
        "Interest Expense":       entry.interest_expense,
    }


def debt_summary_df(debt: DebtSchedule) -> pd.DataFrame:
    """Year-by-year totals plus each tranche's ending balance."""
    rows = []
    for yr, totals in enumerate(debt.totals_by_year):
        row = _entry_row(totals)
        for tranche in debt.tranches:
            row[f"{tranche.name} (End)"] = tranche.schedule[yr].ending_balance
        rows.append(row)
    return pd.DataFrame(rows)


def tranche_dfs(debt: DebtSchedule) -> dict[str, pd.DataFrame]:
    return {
        tranche.name: pd.DataFrame([_entry_row(e) for e in tranche.schedule])
        for tranche in debt.tranches
    }
