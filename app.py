"""
app.py  —  LBO Model
====================
Streamlit dashboard for the leveraged-buyout model.  Collects the deal
inputs, hands them to ``lbo.calculate_model`` as a plain dict and renders
the returned structures.  No model logic lives here.

Tabs
----
  0  Sources & Uses
  1  Income Statement
  2  Debt Schedule  (summary + tranche detail)
  3  Credit Ratios
  4  Cash Flow
  5  Returns  (MOIC, IRR, attribution, management / sponsor split)
  6  Sensitivity  (entry x exit; revenue growth)
"""

import logging

import pandas as pd
import streamlit as st

from lbo import calculate_model
from lbo.model.assumptions import (DEFAULT_AMORTIZATION_PCT, DEFAULT_CAPEX_PCT,
                                   DEFAULT_CASH_SWEEP_PCT, DEFAULT_INTEREST_RATE,
                                   DEFAULT_NWC_PCT, MAX_PROJECTION_YEARS,
                                   MIN_PROJECTION_YEARS, DealAssumptions)
from lbo.model.income_statement import PCT_ROWS, income_statement_df
from lbo.model.cash_flow import cash_flow_df
from lbo.model.debt_schedule import debt_summary_df, tranche_dfs
from lbo.model.returns import equity_split_df, returns_df
from lbo.model.state import LBOModel
from lbo.model.sources_uses import sources_uses_df
from lbo.analysis.credit_metrics import credit_df
from lbo.analysis.sensitivity import sensitivity_tables
from lbo.utils.formatting import (fmt_millions, fmt_pct, fmt_multiple, fmt_irr, fmt_moic,
                                  format_columns, format_statement_df,
                                  style_sensitivity_table)
from lbo.utils.charts import (deleveraging_chart, debt_paydown_chart,
                              equity_cash_flow_chart, sensitivity_heatmap)

logging.basicConfig(level=logging.INFO,
                    format="%(asctime)s %(levelname)s %(name)s: %(message)s")

# ---------------------------------------------------------------------------
# Page Config
# ---------------------------------------------------------------------------
st.set_page_config(
    page_title="LBO Model",
    page_icon="💼",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    div[data-testid="stMetricValue"] { color: #C9A84C !important; font-weight: 700; }
    div[data-testid="stMetricLabel"] { color: #8A8D93 !important; }
    .section-header {
        color: #C9A84C; font-size: 1.1rem; font-weight: 700;
        border-bottom: 1px solid #2D3035; padding-bottom: 6px; margin: 16px 0 10px 0;
    }
    .stTabs [aria-selected="true"] { color: #C9A84C !important; border-bottom: 2px solid #C9A84C; }
</style>
""", unsafe_allow_html=True)


def _section(title: str) -> None:
    st.markdown(f'<div class="section-header">{title}</div>', unsafe_allow_html=True)


defaults = DealAssumptions()

# ---------------------------------------------------------------------------
# Sidebar — Deal Assumptions
# ---------------------------------------------------------------------------
st.sidebar.title("⚙️ Deal Assumptions")

st.sidebar.markdown("### 📊 Transaction")
ltm_ebitda     = st.sidebar.number_input("LTM EBITDA ($M)", value=defaults.transaction.ltm_ebitda, step=10.0)
entry_multiple = st.sidebar.number_input("Entry EV/EBITDA (x)", value=defaults.transaction.entry_multiple, step=0.5)
txn_fees_pct   = st.sidebar.number_input("Transaction Fees (% of EV)", min_value=0.0,
                                         value=defaults.transaction.transaction_fees_pct, step=0.5)
debt_fees_pct  = st.sidebar.number_input("Debt Fees (% of Debt)", min_value=0.0,
                                         value=defaults.transaction.debt_fees_pct, step=0.5)
mgmt_pct       = st.sidebar.number_input("Management Equity (%)", min_value=0.0, max_value=100.0,
                                         value=defaults.transaction.management_equity_pct, step=1.0)

st.sidebar.markdown("### 📈 Historical Year")
hist_revenue = st.sidebar.number_input("Revenue ($M)", value=defaults.historical.revenue, step=25.0)
hist_cogs    = st.sidebar.number_input("COGS (% of Revenue)", value=defaults.historical.cogs_pct, step=1.0)
hist_sga     = st.sidebar.number_input("SG&A (% of Revenue)", value=defaults.historical.sga_pct, step=1.0)
hist_da      = st.sidebar.number_input("D&A (% of Revenue)",  value=defaults.historical.da_pct,  step=0.5)
hist_tax     = st.sidebar.number_input("Tax Rate (%)",        value=defaults.historical.tax_rate, step=1.0)

st.sidebar.markdown("### 🚪 Exit")
projection_years = st.sidebar.slider("Projection Years", MIN_PROJECTION_YEARS, MAX_PROJECTION_YEARS,
                                     defaults.projection_years, 1)
exit_year     = st.sidebar.slider("Exit Year", 1, projection_years,
                                  min(defaults.exit.exit_year, projection_years), 1)
exit_multiple = st.sidebar.number_input("Exit EV/EBITDA (x)", value=defaults.exit.exit_multiple, step=0.5)

run_sens = st.sidebar.toggle("Run Sensitivity Analysis", value=True,
                             help="30 extra model runs (5x5 entry/exit grid + 5 growth cases).")

# ---------------------------------------------------------------------------
# Editable tables — capital structure & per-year drivers
# ---------------------------------------------------------------------------
st.markdown("""
<h1 style='color:#C9A84C; font-size:2rem; margin-bottom:4px;'>💼 Leveraged Buyout Model</h1>
""", unsafe_allow_html=True)

with st.expander("Capital Structure & Projection Drivers", expanded=False):
    st.caption("Tranche order is seniority: the first row is swept first.")
    tranche_seed = pd.DataFrame([{
        "Tranche":          t.name,
        "Multiple (x)":     t.multiple,
        "Amortization %":   DEFAULT_AMORTIZATION_PCT,
        "Interest Rate %":  DEFAULT_INTEREST_RATE,
        "Cash Sweep %":     DEFAULT_CASH_SWEEP_PCT,
    } for t in defaults.debt_tranches])
    tranche_table = st.data_editor(tranche_seed, num_rows="dynamic",
                                   use_container_width=True, key="tranches")

    year_cols = [f"Year {y}" for y in range(1, projection_years + 1)]
    op = defaults.operating[0]
    driver_seed = pd.DataFrame({
        "Revenue Growth %":     [op.revenue_growth_pct] * projection_years,
        "COGS %":               [op.cogs_pct] * projection_years,
        "SG&A %":               [op.sga_pct] * projection_years,
        "D&A %":                [op.da_pct] * projection_years,
        "Tax Rate %":           [op.tax_rate] * projection_years,
        "NWC % of Rev. Change": [DEFAULT_NWC_PCT] * projection_years,
        "CapEx % of Revenue":   [DEFAULT_CAPEX_PCT] * projection_years,
    }, index=year_cols)
    driver_table = st.data_editor(driver_seed, use_container_width=True,
                                  key=f"drivers_{projection_years}")


def _build_inputs() -> dict:
    """Plain-dict assumptions for ``calculate_model``."""
    tranches = tranche_table.dropna(subset=["Tranche"])
    return {
        "transaction": {
            "ltm_ebitda":            ltm_ebitda,
            "entry_multiple":        entry_multiple,
            "transaction_fees_pct":  txn_fees_pct,
            "debt_fees_pct":         debt_fees_pct,
            "management_equity_pct": mgmt_pct,
        },
        "debt_tranches": [
            {"name": row["Tranche"], "multiple": row["Multiple (x)"]}
            for _, row in tranches.iterrows()
        ],
        "debt_rates": [
            {"amortization_pct": row["Amortization %"],
             "interest_rate":    row["Interest Rate %"],
             "cash_sweep_pct":   row["Cash Sweep %"]}
            for _, row in tranches.iterrows()
        ],
        "historical": {
            "revenue": hist_revenue, "cogs_pct": hist_cogs, "sga_pct": hist_sga,
            "da_pct": hist_da, "tax_rate": hist_tax,
        },
        "projection_years": projection_years,
        "operating": [
            {"revenue_growth_pct": row["Revenue Growth %"], "cogs_pct": row["COGS %"],
             "sga_pct": row["SG&A %"], "da_pct": row["D&A %"], "tax_rate": row["Tax Rate %"]}
            for _, row in driver_table.iterrows()
        ],
        "cash_flow": {
            "nwc_pcts":   list(driver_table["NWC % of Rev. Change"]),
            "capex_pcts": list(driver_table["CapEx % of Revenue"]),
        },
        "exit": {"exit_year": exit_year, "exit_multiple": exit_multiple},
    }


@st.cache_data(show_spinner=False)
def _run_model_cached(inputs: dict, sensitivity: bool) -> dict:
    return calculate_model(inputs, include_sensitivity=sensitivity)


with st.spinner("Running model…"):
    inputs = _build_inputs()
    result = _run_model_cached(inputs, run_sens)

# Display views are built from a model shell carrying the snapshot
assumptions = DealAssumptions.from_dict(inputs)
model = LBOModel(
    assumptions=assumptions,
    sources_uses=result["sources_uses"],
    debt_assumptions=result["debt_assumptions"],
    income_statement=result["income_statement"],
    debt_schedule=result["debt_schedule"],
    cash_flows=result["cash_flow"],
    credit_ratios=result["credit_ratios"],
    returns=result["returns"],
    sensitivity=result["sensitivity"],
)
su      = model.sources_uses
returns = model.returns

# KPI strip
c1, c2, c3, c4, c5, c6 = st.columns(6)
c1.metric("Purchase EV",     fmt_millions(su.purchase_ev))
c2.metric("Total Debt",      fmt_millions(su.total_debt))
c3.metric("Equity",          fmt_millions(su.equity_contribution))
c4.metric("Exit Equity",     fmt_millions(returns.exit_equity))
c5.metric("IRR",             fmt_irr(returns.irr))
c6.metric("MOIC",            fmt_moic(returns.moic))

st.markdown("---")

tabs = st.tabs([
    "💰 Sources & Uses",
    "📊 Income Statement",
    "🏦 Debt Schedule",
    "📉 Credit Ratios",
    "💵 Cash Flow",
    "📈 Returns",
    "🔢 Sensitivity",
])


# ============================================================
# TAB 0 — Sources & Uses
# ============================================================
with tabs[0]:
    _section("Sources & Uses")
    sources, uses = sources_uses_df(model)
    col_s, col_u = st.columns(2)
    with col_s:
        st.caption("**SOURCES**")
        st.dataframe(format_columns(sources, money=["Amount"], pct=["% of Total"]),
                     use_container_width=True, hide_index=True)
    with col_u:
        st.caption("**USES**")
        st.dataframe(format_columns(uses, money=["Amount"], pct=["% of Total"]),
                     use_container_width=True, hide_index=True)

    col1, col2, col3 = st.columns(3)
    col1.metric("Debt / Total Sources",   fmt_pct(su.debt_pct))
    col2.metric("Equity / Total Sources", fmt_pct(su.equity_pct))
    col3.metric("Entry Leverage",         fmt_multiple(su.total_debt / ltm_ebitda if ltm_ebitda else None, 1))


# ============================================================
# TAB 1 — Income Statement
# ============================================================
with tabs[1]:
    _section("Projected Income Statement ($M)")
    is_df = income_statement_df(model.income_statement)
    st.plotly_chart(deleveraging_chart(is_df, model.debt_schedule), use_container_width=True,
                    key="chart_is_debt")
    st.dataframe(format_statement_df(is_df, PCT_ROWS), use_container_width=True)


# ============================================================
# TAB 2 — Debt Schedule
# ============================================================
with tabs[2]:
    _section("Debt Amortization Schedule")
    st.plotly_chart(debt_paydown_chart(model.debt_schedule), use_container_width=True,
                    key="chart_debt_paydown")

    summary = debt_summary_df(model.debt_schedule)
    st.markdown("**Summary by Year**")
    st.dataframe(format_columns(summary, money=[c for c in summary.columns if c != "Year"]),
                 use_container_width=True, hide_index=True)

    details = tranche_dfs(model.debt_schedule)
    if details:
        st.markdown("**Tranche-Level Detail**")
        tranche_tabs = st.tabs(list(details.keys()))
        for tab, assumption, (name, df) in zip(tranche_tabs, model.debt_assumptions, details.items()):
            with tab:
                col_a, col_b, col_c, col_d = st.columns(4)
                col_a.metric("Amount",       fmt_millions(assumption.amount))
                col_b.metric("Amortization", fmt_pct(assumption.amortization_pct))
                col_c.metric("Interest",     fmt_pct(assumption.interest_rate))
                col_d.metric("Cash Sweep",   fmt_pct(assumption.cash_sweep_pct))
                st.dataframe(format_columns(df, money=[c for c in df.columns if c != "Year"]),
                             use_container_width=True, hide_index=True)


# ============================================================
# TAB 3 — Credit Ratios
# ============================================================
with tabs[3]:
    _section("Credit Statistics")
    cr = credit_df(model.credit_ratios)
    st.dataframe(format_columns(cr, ratio=["Debt / EBITDA (x)", "Interest Coverage (x)", "DSCR (x)"]),
                 use_container_width=True, hide_index=True)
    st.caption("*n/m: not meaningful (zero denominator).*")


# ============================================================
# TAB 4 — Cash Flow
# ============================================================
with tabs[4]:
    _section("Free Cash Flow ($M)")
    st.dataframe(format_statement_df(cash_flow_df(model.cash_flows)), use_container_width=True)


# ============================================================
# TAB 5 — Returns
# ============================================================
with tabs[5]:
    _section("Exit Returns Summary")
    c1, c2, c3, c4, c5 = st.columns(5)
    c1.metric("Equity Invested", fmt_millions(returns.initial_equity))
    c2.metric("Exit EV",         fmt_millions(returns.exit_enterprise_value))
    c3.metric("Exit Debt",       fmt_millions(returns.exit_debt))
    c4.metric("IRR",             fmt_irr(returns.irr))
    c5.metric("MOIC",            fmt_moic(returns.moic))

    st.plotly_chart(equity_cash_flow_chart(returns), use_container_width=True, key="chart_equity_cf")

    col_l, col_r = st.columns(2)
    with col_l:
        st.markdown("**Equity Cash Flows**")
        st.dataframe(format_columns(returns_df(returns),
                                    money=["Equity Cash Flow", "Cumulative Cash Flow"]),
                     use_container_width=True, hide_index=True)
        st.markdown(f"Return from interim cash flows: **{fmt_pct(returns.cash_flow_attribution)}**  \n"
                    f"Return from exit value: **{fmt_pct(returns.exit_value_attribution)}**")
    with col_r:
        st.markdown("**Management / Sponsor Split**")
        split = equity_split_df(returns)
        split["MOIC"]  = split["MOIC"].apply(fmt_moic)
        split["IRR %"] = split["IRR %"].apply(fmt_irr)
        st.dataframe(format_columns(split, money=["Initial Equity", "Exit Equity"], pct=["Ownership %"]),
                     use_container_width=True, hide_index=True)


# ============================================================
# TAB 6 — Sensitivity
# ============================================================
with tabs[6]:
    _section("Sensitivity Analysis")
    if not run_sens:
        st.info("Enable 'Run Sensitivity Analysis' in the sidebar.")
    else:
        moic_table, irr_table, growth_table = sensitivity_tables(model.sensitivity)

        st.markdown("### Entry EV/EBITDA vs. Exit EV/EBITDA → IRR")
        st.plotly_chart(sensitivity_heatmap(irr_table, "IRR Sensitivity", is_irr=True),
                        use_container_width=True, key="chart_sens_irr")
        st.dataframe(style_sensitivity_table(irr_table, is_irr=True), use_container_width=True)

        st.markdown("### Entry EV/EBITDA vs. Exit EV/EBITDA → MOIC")
        st.plotly_chart(sensitivity_heatmap(moic_table, "MOIC Sensitivity", is_irr=False),
                        use_container_width=True, key="chart_sens_moic")
        st.dataframe(style_sensitivity_table(moic_table, is_irr=False), use_container_width=True)

        st.markdown("### Uniform Revenue Growth → Returns")
        shown = growth_table.copy()
        shown["MOIC"]  = shown["MOIC"].apply(fmt_moic)
        shown["IRR %"] = shown["IRR %"].apply(fmt_irr)
        st.dataframe(shown, use_container_width=True)

        st.markdown("""
**Color Key:**
🔴 IRR < 15% &nbsp;|&nbsp; 🟠 15–18% &nbsp;|&nbsp; 🟡 18–22% &nbsp;|&nbsp; 🟢 22–27% &nbsp;|&nbsp; 🟦 > 27%
""")


# ---------------------------------------------------------------------------
# Footer
# ---------------------------------------------------------------------------
st.markdown("---")
st.markdown(
    f"<p style='text-align:center; color:#444; font-size:0.75rem;'>"
    f"LBO Model &nbsp;|&nbsp; Entry {entry_multiple:.1f}x "
    f"| Exit {exit_multiple:.1f}x in Year {returns.exit_year} "
    f"| IRR {fmt_irr(returns.irr)} "
    f"| MOIC {fmt_moic(returns.moic)}"
    f"</p>",
    unsafe_allow_html=True,
)
