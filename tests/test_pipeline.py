"""
Unit Tests -- Model Pipeline
============================
``calculate_model`` end to end: input forms, snapshot contents and
isolation, and the logging it emits.
"""

import logging

import pytest

from lbo import calculate_model
from lbo.model.assumptions import DealAssumptions, base_case
from lbo.model.state import LBOModel

SNAPSHOT_KEYS = {
    "transaction", "sources_uses", "debt_assumptions", "income_statement",
    "debt_schedule", "credit_ratios", "cash_flow", "returns", "sensitivity",
}


class TestCalculateModel:

    def test_defaults(self):
        snap = calculate_model(include_sensitivity=False)
        assert set(snap) == SNAPSHOT_KEYS
        assert snap["sources_uses"].equity_contribution == pytest.approx(729.0)
        assert len(snap["income_statement"].projections) == 5

    def test_dict_and_dataclass_inputs_agree(self):
        from_dict = calculate_model({"transaction": {"entry_multiple": 11}}, include_sensitivity=False)
        a = base_case()
        a.transaction.entry_multiple = 11.0
        from_obj = calculate_model(a, include_sensitivity=False)
        assert from_dict["returns"].irr == pytest.approx(from_obj["returns"].irr)
        assert from_dict["sources_uses"] == from_obj["sources_uses"]

    def test_invalid_input_type(self):
        with pytest.raises(TypeError):
            calculate_model("entry=10x")

    def test_invalid_values_defaulted(self):
        snap = calculate_model({"transaction": {"ltm_ebitda": "n/a"}}, include_sensitivity=False)
        assert snap["sources_uses"].purchase_ev == pytest.approx(1000.0)

    def test_horizon_clamped(self):
        snap = calculate_model({"projection_years": 25}, include_sensitivity=False)
        assert len(snap["income_statement"].projections) == 10
        assert len(snap["debt_schedule"].totals_by_year) == 11
        assert len(snap["credit_ratios"]) == 10

    def test_sensitivity_included(self):
        snap = calculate_model()
        s = snap["sensitivity"]
        assert len(s.irr_matrix) == 5
        assert s.irr_matrix[2][2] == pytest.approx(snap["returns"].irr, abs=1e-9)

    def test_sensitivity_does_not_change_results(self):
        with_sens = calculate_model()
        without = calculate_model(include_sensitivity=False)
        assert with_sens["returns"] == without["returns"]
        assert with_sens["debt_schedule"] == without["debt_schedule"]

    def test_snapshot_is_isolated(self):
        model = LBOModel()
        snap = calculate_model(model=model, include_sensitivity=False)
        snap["returns"].irr = 999.0
        snap["income_statement"].projections[0].revenue = -1.0
        assert model.returns.irr != 999.0
        assert model.income_statement.projections[0].revenue == pytest.approx(525.0)

    def test_existing_model_keeps_assumptions(self):
        model = LBOModel(assumptions=DealAssumptions.from_dict({"exit": {"exit_multiple": 9}}))
        snap = calculate_model(model=model, include_sensitivity=False)
        assert snap["returns"].exit_multiple == 9.0

    def test_logs_run_summary(self, caplog):
        with caplog.at_level(logging.INFO, logger="lbo"):
            calculate_model()
        messages = [r.getMessage() for r in caplog.records]
        assert any(m.startswith("Model run:") for m in messages)
        assert any(m.startswith("Sensitivity analysis complete") for m in messages)
