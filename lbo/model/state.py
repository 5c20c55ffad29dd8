"""
state.py
--------
The mutable ``LBOModel`` aggregate and the derived record types each
pipeline stage writes into it.

One aggregate is passed by reference through every stage.  The inputs
(``assumptions``) are the single source of truth; every other attribute
is owned by exactly one stage and fully overwritten each time that stage
runs.  The only in-place edits across stages are the ones the debt
schedule makes to the income statement (interest expense) and to the
cash flows (sweep amounts).
"""

from copy import deepcopy
from dataclasses import dataclass, field
from typing import List

from lbo.model.assumptions import DealAssumptions, DebtAssumption


DEFAULT_ENTRY_MULTIPLES = [8.0, 9.0, 10.0, 11.0, 12.0]
DEFAULT_EXIT_MULTIPLES  = [6.0, 7.0, 8.0, 9.0, 10.0]
DEFAULT_GROWTH_RATES    = [3.0, 4.0, 5.0, 6.0, 7.0]


@dataclass
class SourcesUses:
    purchase_ev: float = 0.0
    transaction_fees: float = 0.0
    tranche_amounts: List[float] = field(default_factory=list)   # tranche order
    total_debt: float = 0.0
    debt_issuance_fees: float = 0.0
    total_uses: float = 0.0
    equity_contribution: float = 0.0
    management_equity: float = 0.0
    sponsor_equity: float = 0.0
    total_sources: float = 0.0
    debt_pct: float = 0.0      # of total sources
    equity_pct: float = 0.0


@dataclass
class IncomeStatementYear:
    """Drivers and derived lines for one year (year 0 = historical)."""
    year: int
    revenue_growth_pct: float = 0.0
    cogs_pct: float = 0.0
    sga_pct: float = 0.0
    da_pct: float = 0.0
    tax_rate: float = 0.0

    revenue: float = 0.0
    cogs: float = 0.0
    sga: float = 0.0
    ebitda: float = 0.0
    da: float = 0.0
    ebit: float = 0.0
    interest_expense: float = 0.0
    ebt: float = 0.0
    taxes: float = 0.0
    net_income: float = 0.0


@dataclass
class IncomeStatement:
    historical: IncomeStatementYear = field(default_factory=lambda: IncomeStatementYear(year=0))
    projections: List[IncomeStatementYear] = field(default_factory=list)


@dataclass
class DebtScheduleEntry:
    year: int
    beginning_balance: float = 0.0
    scheduled_amortization: float = 0.0
    additional_amortization: float = 0.0    # from the cash sweep
    total_amortization: float = 0.0
    ending_balance: float = 0.0
    interest_expense: float = 0.0


@dataclass
class TrancheSchedule:
    name: str
    schedule: List[DebtScheduleEntry] = field(default_factory=list)   # years 0..N


@dataclass
class DebtSchedule:
    tranches: List[TrancheSchedule] = field(default_factory=list)
    totals_by_year: List[DebtScheduleEntry] = field(default_factory=list)   # years 0..N


@dataclass
class CashFlowYear:
    year: int
    net_income: float = 0.0
    da: float = 0.0
    revenue_change: float = 0.0
    nwc_change: float = 0.0
    capex: float = 0.0
    fcf_before_debt: float = 0.0
    interest_expense: float = 0.0
    scheduled_amortization: float = 0.0
    available_for_sweep: float = 0.0
    additional_amortization: float = 0.0
    fcf_to_equity: float = 0.0


@dataclass
class CreditRatio:
    year: int
    debt_to_ebitda: float = 0.0
    interest_coverage: float = 0.0
    debt_service_coverage: float = 0.0


@dataclass
class EquityClassReturns:
    ownership_pct: float = 0.0
    initial_equity: float = 0.0
    exit_equity: float = 0.0
    moic: float = 0.0
    irr: float = 0.0


@dataclass
class Returns:
    exit_year: int = 5
    exit_multiple: float = 8.0
    initial_equity: float = 0.0
    exit_enterprise_value: float = 0.0
    exit_debt: float = 0.0
    exit_equity: float = 0.0
    moic: float = 0.0
    irr: float = 0.0                       # percentage units (8.45 = 8.45%)
    cash_flows: List[float] = field(default_factory=list)
    cumulative_cash_flows: List[float] = field(default_factory=list)
    cash_flow_attribution: float = 0.0     # % of total return from interim cash flows
    exit_value_attribution: float = 0.0    # % of total return from exit equity
    management: EquityClassReturns = field(default_factory=EquityClassReturns)
    sponsor: EquityClassReturns = field(default_factory=EquityClassReturns)


@dataclass
class SensitivityAnalysis:
    entry_multiples: List[float] = field(default_factory=lambda: list(DEFAULT_ENTRY_MULTIPLES))
    exit_multiples: List[float] = field(default_factory=lambda: list(DEFAULT_EXIT_MULTIPLES))
    growth_rates: List[float] = field(default_factory=lambda: list(DEFAULT_GROWTH_RATES))
    moic_matrix: List[List[float]] = field(default_factory=list)   # [entry][exit]
    irr_matrix: List[List[float]] = field(default_factory=list)
    growth_moic_values: List[float] = field(default_factory=list)
    growth_irr_values: List[float] = field(default_factory=list)


@dataclass
class LBOModel:
    """Inputs plus every derived structure of one model run."""
    assumptions: DealAssumptions = field(default_factory=DealAssumptions)
    sources_uses: SourcesUses = field(default_factory=SourcesUses)
    debt_assumptions: List[DebtAssumption] = field(default_factory=list)
    income_statement: IncomeStatement = field(default_factory=IncomeStatement)
    debt_schedule: DebtSchedule = field(default_factory=DebtSchedule)
    cash_flows: List[CashFlowYear] = field(default_factory=list)
    credit_ratios: List[CreditRatio] = field(default_factory=list)
    returns: Returns = field(default_factory=Returns)
    sensitivity: SensitivityAnalysis = field(default_factory=SensitivityAnalysis)

    @property
    def projection_years(self) -> int:
        return len(self.assumptions.operating)

    def snapshot(self) -> dict:
        """Deep copy of every structure, safe to hand to a caller."""
        return deepcopy({
            "transaction":      self.assumptions.transaction,
            "sources_uses":     self.sources_uses,
            "debt_assumptions": self.debt_assumptions,
            "income_statement": self.income_statement,
            "debt_schedule":    self.debt_schedule,
            "credit_ratios":    self.credit_ratios,
            "cash_flow":        self.cash_flows,
            "returns":          self.returns,
            "sensitivity":      self.sensitivity,
        })
