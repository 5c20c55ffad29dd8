"""
sources_uses.py
---------------
Sources & Uses of funds at close.

Uses    : purchase EV + transaction fees + debt issuance fees
Sources : debt tranches (LTM EBITDA x tranche multiple) + equity plug

Equity is the plug (floored at zero), then split between management and
the sponsor by the management ownership percentage.
"""

import pandas as pd

from lbo.model.state import LBOModel, SourcesUses


def calculate_sources_uses(model: LBOModel) -> SourcesUses:
    t = model.assumptions.transaction
    su = SourcesUses()

    # --- Uses ---
    su.purchase_ev      = t.ltm_ebitda * t.entry_multiple
    su.transaction_fees = su.purchase_ev * (t.transaction_fees_pct / 100)

    # --- Debt sized off LTM EBITDA ---
    su.tranche_amounts    = [t.ltm_ebitda * tranche.multiple
                             for tranche in model.assumptions.debt_tranches]
    su.total_debt         = sum(su.tranche_amounts)
    su.debt_issuance_fees = su.total_debt * (t.debt_fees_pct / 100)

    su.total_uses = su.purchase_ev + su.transaction_fees + su.debt_issuance_fees

    # --- Equity plug ---
    su.equity_contribution = max(0.0, su.total_uses - su.total_debt)
    su.management_equity   = su.equity_contribution * (t.management_equity_pct / 100)
    su.sponsor_equity      = su.equity_contribution - su.management_equity

    su.total_sources = su.total_debt + su.equity_contribution
    if su.total_sources > 0:
        su.debt_pct   = su.total_debt / su.total_sources * 100
        su.equity_pct = su.equity_contribution / su.total_sources * 100

    model.sources_uses = su
    return su


def sources_uses_df(model: LBOModel) -> tuple[pd.DataFrame, pd.DataFrame]:
    """Build Sources & Uses tables for display (amounts plus % of total)."""
    su = model.sources_uses

    sources = [
        {"Item": f"{tranche.name} ({tranche.multiple:.1f}x)", "Amount": amount}
        for tranche, amount in zip(model.assumptions.debt_tranches, su.tranche_amounts)
    ]
    sources.append({"Item": "Management Equity", "Amount": su.management_equity})
    sources.append({"Item": "Sponsor Equity",    "Amount": su.sponsor_equity})

    uses = [
        {"Item": "Purchase Enterprise Value", "Amount": su.purchase_ev},
        {"Item": "Transaction Fees",          "Amount": su.transaction_fees},
        {"Item": "Debt Issuance Fees",        "Amount": su.debt_issuance_fees},
    ]

    def _with_total(rows, total, label):
        for r in rows:
            r["% of Total"] = r["Amount"] / total * 100 if total else 0.0
        rows.append({"Item": label, "Amount": total, "% of Total": 100.0 if total else 0.0})
        return pd.DataFrame(rows)

    return (_with_total(sources, su.total_sources, "Total Sources"),
            _with_total(uses, su.total_uses, "Total Uses"))
