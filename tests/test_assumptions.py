"""
Unit Tests -- Deal Assumptions
==============================
Defaults, boundary loading, defaulting / clamping of invalid values,
horizon resizing and tranche management.
"""

import math

import pytest

from lbo.model.assumptions import (DEFAULT_AMORTIZATION_PCT, DEFAULT_CAPEX_PCT,
                                   DEFAULT_CASH_SWEEP_PCT, DEFAULT_INTEREST_RATE,
                                   DealAssumptions, DebtAssumption, DebtTranche,
                                   OperatingDrivers, base_case, coerce_number,
                                   merge_debt_assumptions)


# -----------------------------------------------------------------------
# Defaults
# -----------------------------------------------------------------------
class TestDefaults:

    def test_transaction_defaults(self):
        t = base_case().transaction
        assert (t.ltm_ebitda, t.entry_multiple) == (100.0, 10.0)
        assert (t.transaction_fees_pct, t.debt_fees_pct, t.management_equity_pct) == (2.0, 3.0, 10.0)

    def test_default_tranches(self):
        tranches = base_case().debt_tranches
        assert [(t.name, t.multiple) for t in tranches] == [("Senior Debt", 2.0), ("Subordinated Debt", 1.0)]

    def test_per_year_lists_sized_to_horizon(self):
        a = base_case()
        assert a.projection_years == 5
        assert len(a.operating) == len(a.cash_flow.nwc_pcts) == len(a.cash_flow.capex_pcts) == 5
        assert a.cash_flow.capex_pcts == [DEFAULT_CAPEX_PCT] * 5

    def test_instances_do_not_share_lists(self):
        a, b = base_case(), base_case()
        a.operating[0].revenue_growth_pct = 99.0
        a.debt_tranches.append(DebtTranche("Extra", 0.5))
        assert b.operating[0].revenue_growth_pct == 5.0
        assert len(b.debt_tranches) == 2


# -----------------------------------------------------------------------
# Boundary loading
# -----------------------------------------------------------------------
class TestFromDict:

    def test_empty_dict_gives_defaults(self):
        assert DealAssumptions.from_dict({}) == base_case()

    def test_partial_mapping_keeps_other_defaults(self):
        a = DealAssumptions.from_dict({"transaction": {"entry_multiple": 12.0}})
        assert a.transaction.entry_multiple == 12.0
        assert a.transaction.ltm_ebitda == 100.0

    def test_unknown_keys_ignored(self):
        a = DealAssumptions.from_dict({"transaction": {"ltm_ebitda": 50, "ticker": "XYZ"}})
        assert a.transaction.ltm_ebitda == 50.0

    def test_non_numeric_replaced_by_default(self, caplog):
        a = DealAssumptions.from_dict({
            "transaction": {"ltm_ebitda": "abc", "entry_multiple": None},
            "operating": [{"revenue_growth_pct": "n/a", "tax_rate": 30}],
        })
        assert a.transaction.ltm_ebitda == 100.0
        assert a.transaction.entry_multiple == 10.0
        assert a.operating[0].revenue_growth_pct == 5.0
        assert a.operating[0].tax_rate == 30.0
        assert "ltm_ebitda" in caplog.text

    def test_nan_and_inf_replaced(self):
        a = DealAssumptions.from_dict({
            "historical": {"revenue": float("nan")},
            "cash_flow": {"capex_pcts": [float("inf"), 4.0]},
        })
        assert a.historical.revenue == 500.0
        assert a.cash_flow.capex_pcts[:2] == [DEFAULT_CAPEX_PCT, 4.0]

    def test_zero_is_kept(self):
        """Zero is a valid input, not a missing one."""
        a = DealAssumptions.from_dict({
            "transaction": {"transaction_fees_pct": 0},
            "operating": [{"revenue_growth_pct": 0}],
        })
        assert a.transaction.transaction_fees_pct == 0.0
        assert a.operating[0].revenue_growth_pct == 0.0

    def test_negative_percentages_floored(self):
        a = DealAssumptions.from_dict({
            "transaction": {"transaction_fees_pct": -2, "debt_fees_pct": -1,
                            "management_equity_pct": -5},
            "debt_tranches": [{"name": "A", "multiple": -1.5}],
        })
        t = a.transaction
        assert (t.transaction_fees_pct, t.debt_fees_pct, t.management_equity_pct) == (0.0, 0.0, 0.0)
        assert a.debt_tranches[0].multiple == 0.0

    def test_sweep_clamped_to_0_100(self):
        a = DealAssumptions.from_dict({
            "debt_tranches": [{"name": "A", "multiple": 1}, {"name": "B", "multiple": 1}],
            "debt_rates": [{"cash_sweep_pct": 150}, {"cash_sweep_pct": -10}],
        })
        assert a.debt_rates[0].cash_sweep_pct == 100.0
        assert a.debt_rates[1].cash_sweep_pct == 0.0

    def test_missing_rate_fields_take_defaults(self):
        a = DealAssumptions.from_dict({
            "debt_tranches": [{"name": "A", "multiple": 1}],
            "debt_rates": [{"interest_rate": 9}],
        })
        r = a.debt_rates[0]
        assert (r.amortization_pct, r.interest_rate, r.cash_sweep_pct) == \
               (DEFAULT_AMORTIZATION_PCT, 9.0, DEFAULT_CASH_SWEEP_PCT)

    def test_extra_rates_truncated(self):
        a = DealAssumptions.from_dict({
            "debt_tranches": [{"name": "A", "multiple": 1}],
            "debt_rates": [{}, {}, {}],
        })
        assert len(a.debt_rates) == 1

    def test_duplicate_and_blank_names_made_unique(self):
        a = DealAssumptions.from_dict({"debt_tranches": [
            {"name": "Term Loan", "multiple": 1},
            {"name": "Term Loan", "multiple": 1},
            {"name": "", "multiple": 1},
        ]})
        assert [t.name for t in a.debt_tranches] == ["Term Loan", "Term Loan (2)", "Debt Tranche 3"]

    def test_non_mapping_raises(self):
        with pytest.raises(TypeError):
            DealAssumptions.from_dict([1, 2, 3])

    def test_to_dict_round_trip(self, varied_growth):
        assert DealAssumptions.from_dict(varied_growth.to_dict()) == varied_growth


# -----------------------------------------------------------------------
# Horizon and exit year
# -----------------------------------------------------------------------
class TestProjectionYears:

    @pytest.mark.parametrize("requested, expected", [(3, 5), (5, 5), (7, 7), (10, 10), (15, 10)])
    def test_clamped_to_5_10(self, requested, expected):
        a = base_case()
        assert a.set_projection_years(requested) == expected
        assert len(a.operating) == expected
        assert len(a.cash_flow.nwc_pcts) == expected

    def test_extension_keeps_existing_years(self, varied_growth):
        varied_growth.set_projection_years(7)
        growth = [d.revenue_growth_pct for d in varied_growth.operating]
        assert growth == [4.0, 5.0, 6.0, 7.0, 8.0, 5.0, 5.0]

    def test_shrink_caps_exit_year(self):
        a = base_case()
        a.set_projection_years(10)
        a.exit.exit_year = 9
        a.set_projection_years(6)
        assert a.exit.exit_year == 6

    @pytest.mark.parametrize("exit_year, expected", [(12, 5), (3, 3), (0, 1), (-4, 1), ("x", 5)])
    def test_exit_year_clamped(self, exit_year, expected):
        a = DealAssumptions.from_dict({"exit": {"exit_year": exit_year}})
        assert a.exit.exit_year == expected

    def test_invalid_horizon_defaults(self):
        assert DealAssumptions.from_dict({"projection_years": "ten"}).projection_years == 5


# -----------------------------------------------------------------------
# Tranche management
# -----------------------------------------------------------------------
class TestTranches:

    def test_add_tranche_default_name(self):
        a = base_case()
        t = a.add_tranche()
        assert t.name == "Debt Tranche 3"
        assert t.multiple == 1.0
        assert a.debt_tranches[-1] is t

    def test_add_tranche_unique_name(self):
        a = base_case()
        assert a.add_tranche("Senior Debt", 0.5).name == "Senior Debt (2)"

    def test_remove_tranche_drops_rate_override(self):
        a = DealAssumptions.from_dict({
            "debt_rates": [{"interest_rate": 7}, {"interest_rate": 11}],
        })
        removed = a.remove_tranche(0)
        assert removed.name == "Senior Debt"
        assert [r.interest_rate for r in a.debt_rates] == [11.0]

    def test_remove_out_of_range(self):
        with pytest.raises(IndexError):
            base_case().remove_tranche(5)


class TestMergeDebtAssumptions:

    def test_unchanged_tranche_keeps_rates(self):
        prior = [DebtAssumption("A", 200, 10, 8, 75), DebtAssumption("B", 100, 2, 9, 20)]
        merged = merge_debt_assumptions(prior, [DebtTranche("A", 3), DebtTranche("B", 1)], [300, 100])
        assert (merged[0].amount, merged[0].amortization_pct, merged[0].interest_rate,
                merged[0].cash_sweep_pct) == (300, 10, 8, 75)
        assert merged[1].interest_rate == 9

    def test_renamed_or_moved_tranche_gets_defaults(self):
        prior = [DebtAssumption("A", 200, 10, 8, 75), DebtAssumption("B", 100, 2, 9, 20)]
        merged = merge_debt_assumptions(prior, [DebtTranche("B", 1), DebtTranche("C", 1)], [100, 100])
        for m in merged:
            assert (m.amortization_pct, m.interest_rate, m.cash_sweep_pct) == \
                   (DEFAULT_AMORTIZATION_PCT, DEFAULT_INTEREST_RATE, DEFAULT_CASH_SWEEP_PCT)

    def test_new_tranche_gets_defaults(self):
        merged = merge_debt_assumptions([], [DebtTranche("A", 1)], [100])
        assert merged[0].interest_rate == DEFAULT_INTEREST_RATE


class TestCoerceNumber:

    @pytest.mark.parametrize("raw, expected", [
        ("4.5", 4.5), (3, 3.0), (None, 7.0), ("", 7.0), (float("nan"), 7.0), (math.inf, 7.0),
    ])
    def test_coerce(self, raw, expected):
        assert coerce_number(raw, 7.0) == expected

    def test_operating_driver_defaults(self):
        d = OperatingDrivers()
        assert (d.revenue_growth_pct, d.cogs_pct, d.sga_pct, d.da_pct, d.tax_rate) == (5.0, 60.0, 20.0, 3.0, 25.0)
