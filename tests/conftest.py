"""
Shared fixtures for the LBO model tests.
"""

import pytest

from lbo.model.assumptions import DealAssumptions, DebtAssumption, base_case
from lbo.model.income_statement import project_income_statement
from lbo.model.lbo_engine import run_model
from lbo.model.state import CashFlowYear, LBOModel


@pytest.fixture
def base_model() -> LBOModel:
    """Default deal (EBITDA 100, 10x entry, 2x + 1x debt), fully run."""
    return run_model(LBOModel(assumptions=base_case()))


@pytest.fixture
def varied_growth() -> DealAssumptions:
    """Default deal with a distinct growth rate in every projection year."""
    a = base_case()
    for drivers, growth in zip(a.operating, [4.0, 5.0, 6.0, 7.0, 8.0]):
        drivers.revenue_growth_pct = growth
    return a


def make_schedule_model(debt_assumptions: list[DebtAssumption]) -> LBOModel:
    """A five-year model with hand-set debt assumptions and zero sweep cash."""
    model = LBOModel(assumptions=base_case())
    project_income_statement(model)
    model.debt_assumptions = debt_assumptions
    model.cash_flows = [CashFlowYear(year=y) for y in range(1, model.projection_years + 1)]
    return model


@pytest.fixture
def schedule_model_factory():
    return make_schedule_model
