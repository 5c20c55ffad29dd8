"""
Unit Tests -- Display Helpers
=============================
Formatting of whole-number percentages, edge ratios and the chart builders.
"""

import math

import numpy as np
import pandas as pd
import plotly.graph_objects as go
import pytest

from lbo.analysis.sensitivity import run_sensitivity_analysis, sensitivity_tables
from lbo.model.income_statement import PCT_ROWS, income_statement_df
from lbo.model.debt_schedule import get_ending_debt_by_year
from lbo.utils.charts import (debt_paydown_chart, deleveraging_chart,
                              equity_cash_flow_chart, sensitivity_heatmap)
from lbo.utils.formatting import (fmt_irr, fmt_millions, fmt_moic, fmt_multiple, fmt_pct,
                                  fmt_ratio, format_columns, format_statement_df,
                                  irr_color, moic_color)


class TestFormatters:

    def test_millions(self):
        assert fmt_millions(1029) == "$1,029.0M"
        assert fmt_millions(None) == "—"
        assert fmt_millions(float("nan")) == "—"

    def test_pct_is_whole_number(self):
        assert fmt_pct(8.4472) == "8.4%"
        assert fmt_pct(100.0, 0) == "100%"

    def test_multiples(self):
        assert fmt_multiple(2.857142) == "2.86x"
        assert fmt_moic(1.5) == "1.50x"
        assert fmt_moic(math.inf) == "N/A"

    def test_ratio_edge_values(self):
        assert fmt_ratio(4.958) == "4.96x"
        assert fmt_ratio(math.inf) == "n/m"
        assert fmt_ratio(-math.inf) == "n/m"
        assert fmt_ratio(math.nan) == "n/m"

    def test_irr(self):
        assert fmt_irr(-100.0) == "-100.0%"
        assert fmt_irr(None) == "N/A"

    @pytest.mark.parametrize("irr, fragment", [
        (5.0, "#c0392b"), (12.0, "#e74c3c"), (16.0, "#e67e22"),
        (20.0, "#f1c40f"), (25.0, "#2ecc71"), (30.0, "#16a085"), (math.nan, "#444"),
    ])
    def test_irr_bands(self, irr, fragment):
        assert fragment in irr_color(irr)

    def test_moic_bands(self):
        assert "#c0392b" in moic_color(1.2)
        assert "#16a085" in moic_color(3.5)


class TestFrameFormatting:

    def test_statement_rows(self, base_model):
        out = format_statement_df(income_statement_df(base_model.income_statement), PCT_ROWS)
        assert out.loc["Revenue", "Year 1"] == "$525.0M"
        assert out.loc["EBITDA Margin %", "Historical"] == "20.0%"

    def test_selected_columns(self):
        df = pd.DataFrame({"Year": [1], "Amount": [10.0], "Ratio": [math.inf]})
        out = format_columns(df, money=["Amount"], ratio=["Ratio", "Missing"])
        assert out.loc[0, "Amount"] == "$10.0M"
        assert out.loc[0, "Ratio"] == "n/m"
        assert out.loc[0, "Year"] == 1


class TestCharts:

    def test_deleveraging(self, base_model):
        is_df = income_statement_df(base_model.income_statement)
        fig = deleveraging_chart(is_df, base_model.debt_schedule)
        assert isinstance(fig, go.Figure)
        assert [t.name for t in fig.data] == ["EBITDA", "Interest Expense", "Net Income", "Total Debt"]
        assert fig.data[1].y[0] == 0.0
        assert fig.data[1].y[1] == pytest.approx(18.0)
        assert list(fig.data[3].y) == pytest.approx(get_ending_debt_by_year(base_model.debt_schedule))
        assert fig.data[3].y[0] == pytest.approx(300.0)

    def test_debt_paydown_one_trace_per_tranche(self, base_model):
        fig = debt_paydown_chart(base_model.debt_schedule)
        assert [t.name for t in fig.data] == ["Senior Debt", "Subordinated Debt"]
        assert fig.data[0].x[0] == "Entry"

    def test_equity_cash_flows(self, base_model):
        fig = equity_cash_flow_chart(base_model.returns)
        assert len(fig.data[0].y) == len(base_model.returns.cash_flows)

    def test_heatmap(self, base_model):
        _, irr_df, _ = sensitivity_tables(run_sensitivity_analysis(base_model))
        fig = sensitivity_heatmap(irr_df, "IRR Sensitivity")
        assert np.shape(fig.data[0].z) == (5, 5)
