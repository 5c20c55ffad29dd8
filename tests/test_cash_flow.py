"""
Unit Tests -- Cash Flow
=======================
Year-1 figures for the default deal are worked by hand:
  EBIT 89.25, pre-interest net income 66.9375, capex 15.75, no NWC,
  phase-A interest 18 and scheduled amortization 15.
"""

import pytest

from lbo.model.assumptions import DealAssumptions
from lbo.model.cash_flow import cash_flow_df
from lbo.model.lbo_engine import run_model
from lbo.model.state import LBOModel


class TestCashFlows:

    def test_year_one_build(self, base_model):
        f = base_model.cash_flows[0]
        assert f.net_income == pytest.approx(66.9375)
        assert f.da == pytest.approx(15.75)
        assert f.revenue_change == pytest.approx(25.0)
        assert f.nwc_change == 0.0
        assert f.capex == pytest.approx(15.75)
        assert f.fcf_before_debt == pytest.approx(66.9375)
        assert f.interest_expense == pytest.approx(18.0)
        assert f.scheduled_amortization == pytest.approx(15.0)
        assert f.available_for_sweep == pytest.approx(33.9375)

    def test_year_one_sweep(self, base_model):
        """Senior takes half of 33.9375, subordinated half of the rest."""
        f = base_model.cash_flows[0]
        assert f.additional_amortization == pytest.approx(16.96875 + 8.484375)
        assert f.fcf_to_equity == pytest.approx(8.484375)

    def test_identities_every_year(self, base_model):
        for f in base_model.cash_flows:
            assert f.fcf_before_debt == pytest.approx(f.net_income + f.da - f.nwc_change - f.capex)
            assert f.available_for_sweep == pytest.approx(
                f.fcf_before_debt - f.interest_expense - f.scheduled_amortization)
            assert f.fcf_to_equity == pytest.approx(f.available_for_sweep - f.additional_amortization)

    def test_additional_matches_debt_totals(self, base_model):
        for f, totals in zip(base_model.cash_flows, base_model.debt_schedule.totals_by_year[1:]):
            assert f.additional_amortization == pytest.approx(totals.additional_amortization)

    def test_nwc_on_revenue_change(self):
        model = run_model(LBOModel(assumptions=DealAssumptions.from_dict({
            "cash_flow": {"nwc_pcts": [10.0] * 5, "capex_pcts": [4.0] * 5},
        })))
        f = model.cash_flows[0]
        assert f.nwc_change == pytest.approx(2.5)
        assert f.capex == pytest.approx(21.0)

    def test_negative_available_not_swept(self):
        model = run_model(LBOModel(assumptions=DealAssumptions.from_dict({
            "cash_flow": {"capex_pcts": [40.0] * 5},
        })))
        for f in model.cash_flows:
            assert f.available_for_sweep < 0
            assert f.additional_amortization == 0.0
            assert f.fcf_to_equity == pytest.approx(f.available_for_sweep)


class TestCashFlowTable:

    def test_outflows_negative(self, base_model):
        df = cash_flow_df(base_model.cash_flows)
        assert list(df.columns) == [f"Year {i}" for i in range(1, 6)]
        assert df.loc["(-) CapEx", "Year 1"] == pytest.approx(-15.75)
        assert df.loc["FCF to Equity", "Year 1"] == pytest.approx(8.484375)
