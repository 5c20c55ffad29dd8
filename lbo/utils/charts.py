"""
charts.py
---------
Plotly chart builders for the LBO Streamlit dashboard.
All charts share one dark theme; money axes are in $M.
"""

import pandas as pd
import plotly.graph_objects as go
from plotly.subplots import make_subplots

from lbo.model.debt_schedule import get_ending_debt_by_year, get_interest_expense_by_year
from lbo.model.state import DebtSchedule, Returns

# ---------------------------------------------------------------------------
# Theme
# ---------------------------------------------------------------------------
COLORS = {
    "gold":    "#C9A84C",
    "teal":    "#4ECDC4",
    "coral":   "#FF6B6B",
    "gain":    "#27AE60",
    "loss":    "#E74C3C",
    "bg":      "#0E1117",
    "panel":   "#161B22",
    "grid":    "#252D3A",
    "line":    "#2D3748",
    "text":    "#E8EAF0",
    "muted":   "#8A9BB0",
}

TRANCHE_COLORS = ["#3B82F6", "#10B981", "#F59E0B", "#8B5CF6", "#EF4444"]

FONT = "Inter, 'Segoe UI', sans-serif"

LAYOUT_BASE = dict(
    paper_bgcolor=COLORS["bg"],
    plot_bgcolor=COLORS["panel"],
    font=dict(family=FONT, size=12, color=COLORS["text"]),
    margin=dict(l=60, r=40, t=60, b=50),
    hoverlabel=dict(bgcolor=COLORS["panel"], bordercolor=COLORS["line"], font_family=FONT),
    legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1,
                bgcolor=COLORS["panel"], font_size=11),
)

AXIS_STYLE = dict(
    gridcolor=COLORS["grid"],
    zerolinecolor=COLORS["line"],
    linecolor=COLORS["line"],
    showline=True,
    tickfont=dict(size=11, color=COLORS["muted"]),
)


def _base(fig: go.Figure, title: str, height: int = 420) -> go.Figure:
    fig.update_layout(
        **LAYOUT_BASE,
        title=dict(text=title, x=0, xanchor="left",
                   font=dict(size=15, color=COLORS["gold"])),
        height=height,
    )
    fig.update_xaxes(**AXIS_STYLE)
    fig.update_yaxes(**AXIS_STYLE)
    return fig


# ---------------------------------------------------------------------------
# Earnings vs. Debt
# ---------------------------------------------------------------------------

def deleveraging_chart(is_df: pd.DataFrame, debt: DebtSchedule) -> go.Figure:
    """
    EBITDA, interest and net income per year as bars, total ending debt as
    a line on a second axis.  ``is_df`` is ``income_statement_df``; its
    "Historical" column lines up with the debt drawn at close.
    """
    years    = list(is_df.columns)
    ebitda   = list(is_df.loc["EBITDA"])
    income   = list(is_df.loc["Net Income"])
    interest = [0.0] + get_interest_expense_by_year(debt)
    ending   = get_ending_debt_by_year(debt)

    fig = make_subplots(specs=[[{"secondary_y": True}]])
    for name, values, color in (("EBITDA", ebitda, COLORS["gold"]),
                                ("Interest Expense", interest, COLORS["coral"]),
                                ("Net Income", income, COLORS["teal"])):
        fig.add_trace(go.Bar(
            x=years, y=values, name=name,
            marker=dict(color=color, line_width=0),
            hovertemplate=f"<b>%{{x}}</b><br>{name}: $%{{y:,.1f}}M<extra></extra>",
        ), secondary_y=False)

    fig.add_trace(go.Scatter(
        x=years, y=ending, name="Total Debt",
        mode="lines+markers",
        line=dict(color=COLORS["text"], width=2.5),
        hovertemplate="<b>%{x}</b><br>Total Debt: $%{y:,.1f}M<extra></extra>",
    ), secondary_y=True)

    fig = _base(fig, "Earnings vs. Debt Outstanding")
    fig.update_layout(barmode="group")
    fig.update_yaxes(title_text="USD Millions", secondary_y=False)
    fig.update_yaxes(title_text="Ending Debt ($M)", secondary_y=True, showgrid=False)
    return fig


# ---------------------------------------------------------------------------
# Debt Paydown (stacked bar)
# ---------------------------------------------------------------------------

def debt_paydown_chart(debt: DebtSchedule) -> go.Figure:
    fig = go.Figure()
    for i, tranche in enumerate(debt.tranches):
        color = TRANCHE_COLORS[i % len(TRANCHE_COLORS)]
        fig.add_trace(go.Bar(
            name=tranche.name,
            x=["Entry" if e.year == 0 else f"Year {e.year}" for e in tranche.schedule],
            y=[e.ending_balance for e in tranche.schedule],
            marker=dict(color=color, line_width=0, opacity=0.88),
            hovertemplate=f"<b>{tranche.name}</b><br>%{{x}}: $%{{y:,.1f}}M<extra></extra>",
        ))

    fig = _base(fig, "Debt Paydown by Tranche")
    fig.update_layout(barmode="stack")
    fig.update_yaxes(title_text="Ending Balance ($M)", tickformat="$,.0f")
    return fig


# ---------------------------------------------------------------------------
# Equity Cash Flows
# ---------------------------------------------------------------------------

def equity_cash_flow_chart(returns: Returns) -> go.Figure:
    years = [f"Year {t}" for t in range(len(returns.cash_flows))]
    bar_colors = [COLORS["gain"] if v >= 0 else COLORS["loss"] for v in returns.cash_flows]

    fig = go.Figure()
    fig.add_trace(go.Bar(
        x=years, y=returns.cash_flows,
        name="Equity Cash Flow",
        marker=dict(color=bar_colors, opacity=0.8, line_width=0),
        hovertemplate="<b>%{x}</b><br>Cash Flow: $%{y:,.1f}M<extra></extra>",
    ))
    fig.add_trace(go.Scatter(
        x=years, y=returns.cumulative_cash_flows,
        name="Cumulative (ex. investment)",
        mode="lines+markers",
        line=dict(color=COLORS["gold"], width=2.5),
        marker=dict(size=9, symbol="circle", line=dict(width=2, color=COLORS["bg"])),
        hovertemplate="<b>%{x}</b><br>Cumulative: $%{y:,.1f}M<extra></extra>",
    ))

    fig = _base(fig, f"Equity Cash Flows  |  MOIC {returns.moic:.2f}x  |  IRR {returns.irr:.1f}%")
    fig.update_yaxes(title_text="$M", tickformat="$,.0f")
    return fig


# ---------------------------------------------------------------------------
# Sensitivity Heatmap
# ---------------------------------------------------------------------------

def sensitivity_heatmap(df: pd.DataFrame, title: str, is_irr: bool = True) -> go.Figure:
    """Heatmap of a ``sensitivity_tables`` grid (rows = entry, cols = exit)."""
    text = [[f"{v:.1f}%" if is_irr else f"{v:.2f}x" for v in row] for row in df.values]
    fig = go.Figure(go.Heatmap(
        z=df.values,
        x=list(df.columns),
        y=list(df.index),
        text=text,
        texttemplate="%{text}",
        colorscale="RdYlGn",
        colorbar=dict(
            title="IRR (%)" if is_irr else "MOIC (x)",
            title_font=dict(size=11, color=COLORS["muted"]),
            tickfont=dict(size=10, color=COLORS["muted"]),
        ),
        hovertemplate="Entry %{y} / %{x}<br>%{text}<extra></extra>",
    ))
    fig = _base(fig, title, height=400)
    fig.update_yaxes(title_text="Entry Multiple", autorange="reversed")
    return fig
