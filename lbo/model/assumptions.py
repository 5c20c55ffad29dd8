"""
assumptions.py
--------------
Central dataclasses for every LBO model input.

Structured in five logical blocks so a caller (UI, notebook, test) can
swap just the fields it cares about:
  1. Transaction terms
  2. Capital structure (tranches + per-tranche rate overrides)
  3. Operating projections (historical year + per-year drivers)
  4. Cash-flow drivers (NWC, CapEx per year)
  5. Exit

Every field carries a default, so the engine never sees a "missing"
value.  Invalid values (non-numeric, NaN, inf) arriving from the boundary
are replaced by the field default and logged rather than rejected.

All monetary values share the unit of LTM EBITDA ($M by convention).
Percentages are whole numbers (5.0 = 5%).
"""

import logging
import math
from copy import deepcopy
from dataclasses import asdict, dataclass, field, fields
from typing import List, Optional

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------
MIN_PROJECTION_YEARS = 5
MAX_PROJECTION_YEARS = 10

DEFAULT_AMORTIZATION_PCT = 5.0
DEFAULT_INTEREST_RATE    = 6.0
DEFAULT_CASH_SWEEP_PCT   = 50.0

DEFAULT_REVENUE_GROWTH_PCT = 5.0
DEFAULT_COGS_PCT           = 60.0
DEFAULT_SGA_PCT            = 20.0
DEFAULT_DA_PCT             = 3.0
DEFAULT_TAX_RATE           = 25.0

DEFAULT_NWC_PCT   = 0.0   # % of revenue change
DEFAULT_CAPEX_PCT = 3.0   # % of revenue


def coerce_number(value, default: float, label: str = "value") -> float:
    """Return ``value`` as a finite float, falling back to ``default``."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.warning("Invalid %s %r; using default %s", label, value, default)
        return float(default)
    if math.isnan(number) or math.isinf(number):
        logger.warning("Non-finite %s %r; using default %s", label, value, default)
        return float(default)
    return number


def _coerce_record(record, label: str) -> None:
    """Coerce every float field of a dataclass instance in place."""
    for f in fields(record):
        if f.type is float:
            raw = getattr(record, f.name)
            setattr(record, f.name, coerce_number(raw, f.default, f"{label}.{f.name}"))


def _floor(record, names: tuple, label: str, floor: float = 0.0) -> None:
    for name in names:
        value = getattr(record, name)
        if value < floor:
            logger.warning("%s.%s=%s below %s; clamped", label, name, value, floor)
            setattr(record, name, floor)


def _from_mapping(cls, data):
    """Build a dataclass from a mapping, ignoring unknown keys."""
    if data is None:
        return cls()
    if isinstance(data, cls):
        return deepcopy(data)
    known = {f.name for f in fields(cls)}
    return cls(**{k: v for k, v in dict(data).items() if k in known})


# ---------------------------------------------------------------------------
# 1. TRANSACTION
# ---------------------------------------------------------------------------
@dataclass
class TransactionAssumptions:
    ltm_ebitda: float = 100.0              # LTM EBITDA used for entry pricing
    entry_multiple: float = 10.0           # EV / LTM EBITDA
    transaction_fees_pct: float = 2.0      # % of purchase EV
    debt_fees_pct: float = 3.0             # % of total debt raised
    management_equity_pct: float = 10.0    # management share of the equity check


# ---------------------------------------------------------------------------
# 2. CAPITAL STRUCTURE
# ---------------------------------------------------------------------------
@dataclass
class DebtTranche:
    """One piece of the capital structure, sized as a multiple of LTM EBITDA.

    List order is seniority: the first tranche is paid first by the sweep.
    """
    name: str = ""
    multiple: float = 1.0


@dataclass
class DebtRates:
    """Boundary override for one tranche's rates (matched by position)."""
    amortization_pct: float = DEFAULT_AMORTIZATION_PCT   # of beginning balance
    interest_rate: float = DEFAULT_INTEREST_RATE         # of beginning balance
    cash_sweep_pct: float = DEFAULT_CASH_SWEEP_PCT       # share of surplus cash


@dataclass
class DebtAssumption:
    """Derived per tranche: dollar amount plus the rates the schedule runs on."""
    name: str
    amount: float = 0.0
    amortization_pct: float = DEFAULT_AMORTIZATION_PCT
    interest_rate: float = DEFAULT_INTEREST_RATE
    cash_sweep_pct: float = DEFAULT_CASH_SWEEP_PCT

    def apply_rates(self, rates: DebtRates) -> None:
        self.amortization_pct = rates.amortization_pct
        self.interest_rate    = rates.interest_rate
        self.cash_sweep_pct   = rates.cash_sweep_pct


def merge_debt_assumptions(
    previous: List[DebtAssumption],
    tranches: List[DebtTranche],
    amounts: List[float],
) -> List[DebtAssumption]:
    """
    Re-derive one DebtAssumption per tranche, in tranche order.

    A tranche whose name is unchanged at the same position keeps the rates
    it had before; any other tranche starts from the default rates.
    """
    merged = []
    for i, (tranche, amount) in enumerate(zip(tranches, amounts)):
        prior = previous[i] if i < len(previous) else None
        if prior is not None and prior.name == tranche.name:
            merged.append(DebtAssumption(
                name=tranche.name,
                amount=amount,
                amortization_pct=prior.amortization_pct,
                interest_rate=prior.interest_rate,
                cash_sweep_pct=prior.cash_sweep_pct,
            ))
        else:
            merged.append(DebtAssumption(name=tranche.name, amount=amount))
    return merged


# ---------------------------------------------------------------------------
# 3. OPERATING PROJECTIONS
# ---------------------------------------------------------------------------
@dataclass
class HistoricalDrivers:
    revenue: float = 500.0
    cogs_pct: float = DEFAULT_COGS_PCT
    sga_pct: float = DEFAULT_SGA_PCT
    da_pct: float = DEFAULT_DA_PCT
    tax_rate: float = DEFAULT_TAX_RATE


@dataclass
class OperatingDrivers:
    """Drivers for one projection year (percentages of that year's revenue)."""
    revenue_growth_pct: float = DEFAULT_REVENUE_GROWTH_PCT
    cogs_pct: float = DEFAULT_COGS_PCT
    sga_pct: float = DEFAULT_SGA_PCT
    da_pct: float = DEFAULT_DA_PCT
    tax_rate: float = DEFAULT_TAX_RATE


# ---------------------------------------------------------------------------
# 4. CASH FLOW DRIVERS  (lists index 0 = Year 1, ..., n-1 = Year N)
# ---------------------------------------------------------------------------
@dataclass
class CashFlowDrivers:
    nwc_pcts: List[float] = field(default_factory=list)     # % of revenue change
    capex_pcts: List[float] = field(default_factory=list)   # % of revenue


# ---------------------------------------------------------------------------
# 5. EXIT
# ---------------------------------------------------------------------------
@dataclass
class ExitAssumptions:
    exit_year: int = 5              # capped at the projection horizon
    exit_multiple: float = 8.0      # EV / exit-year EBITDA


# ---------------------------------------------------------------------------
# MASTER CONTAINER
# ---------------------------------------------------------------------------
def _default_tranches() -> List[DebtTranche]:
    return [
        DebtTranche(name="Senior Debt", multiple=2.0),
        DebtTranche(name="Subordinated Debt", multiple=1.0),
    ]


@dataclass
class DealAssumptions:
    """
    Master container for all LBO model inputs.

    ``operating`` and the two ``cash_flow`` lists always have exactly
    ``projection_years`` entries; ``set_projection_years`` keeps them in step.
    ``debt_rates`` holds optional per-tranche rate overrides by position
    (``None`` = keep the rates already on the model).
    """
    transaction: TransactionAssumptions = field(default_factory=TransactionAssumptions)
    debt_tranches: List[DebtTranche] = field(default_factory=_default_tranches)
    debt_rates: List[Optional[DebtRates]] = field(default_factory=list)
    historical: HistoricalDrivers = field(default_factory=HistoricalDrivers)
    projection_years: int = MIN_PROJECTION_YEARS
    operating: List[OperatingDrivers] = field(default_factory=list)
    cash_flow: CashFlowDrivers = field(default_factory=CashFlowDrivers)
    exit: ExitAssumptions = field(default_factory=ExitAssumptions)

    def __post_init__(self):
        self.set_projection_years(self.projection_years)

    # -----------------------------------------------------------------------
    # Horizon
    # -----------------------------------------------------------------------
    def set_projection_years(self, years) -> int:
        """Clamp the horizon to [5, 10] and resize every per-year list."""
        years = int(coerce_number(years, MIN_PROJECTION_YEARS, "projection_years"))
        years = max(MIN_PROJECTION_YEARS, min(MAX_PROJECTION_YEARS, years))

        del self.operating[years:]
        while len(self.operating) < years:
            self.operating.append(OperatingDrivers())

        del self.cash_flow.nwc_pcts[years:]
        del self.cash_flow.capex_pcts[years:]
        while len(self.cash_flow.nwc_pcts) < years:
            self.cash_flow.nwc_pcts.append(DEFAULT_NWC_PCT)
        while len(self.cash_flow.capex_pcts) < years:
            self.cash_flow.capex_pcts.append(DEFAULT_CAPEX_PCT)

        self.projection_years = years
        exit_year = int(coerce_number(self.exit.exit_year, years, "exit.exit_year"))
        self.exit.exit_year = min(exit_year, years)
        return years

    # -----------------------------------------------------------------------
    # Tranche management
    # -----------------------------------------------------------------------
    def add_tranche(self, name: Optional[str] = None, multiple: float = 1.0) -> DebtTranche:
        name = name or f"Debt Tranche {len(self.debt_tranches) + 1}"
        tranche = DebtTranche(name=self._unique_name(name), multiple=multiple)
        self.debt_tranches.append(tranche)
        return tranche

    def remove_tranche(self, index: int) -> DebtTranche:
        tranche = self.debt_tranches.pop(index)
        if index < len(self.debt_rates):
            self.debt_rates.pop(index)
        return tranche

    def _unique_name(self, name: str, taken: Optional[set] = None) -> str:
        taken = {t.name for t in self.debt_tranches} if taken is None else taken
        candidate, k = name, 2
        while candidate in taken:
            candidate = f"{name} ({k})"
            k += 1
        return candidate

    # -----------------------------------------------------------------------
    # Validation / defaulting
    # -----------------------------------------------------------------------
    def normalize(self) -> "DealAssumptions":
        """Replace invalid values with defaults and enforce the input floors."""
        _coerce_record(self.transaction, "transaction")
        _floor(self.transaction,
               ("transaction_fees_pct", "debt_fees_pct", "management_equity_pct"),
               "transaction")

        taken = set()
        for i, tranche in enumerate(self.debt_tranches):
            name = str(tranche.name).strip() if tranche.name is not None else ""
            tranche.name = self._unique_name(name or f"Debt Tranche {i + 1}", taken)
            taken.add(tranche.name)
            tranche.multiple = coerce_number(tranche.multiple, 0.0, f"{tranche.name}.multiple")
            _floor(tranche, ("multiple",), tranche.name)

        del self.debt_rates[len(self.debt_tranches):]
        for i, rates in enumerate(self.debt_rates):
            if rates is None:
                continue
            label = f"debt_rates[{i}]"
            _coerce_record(rates, label)
            _floor(rates, ("amortization_pct", "cash_sweep_pct"), label)
            if rates.cash_sweep_pct > 100.0:
                logger.warning("%s.cash_sweep_pct=%s above 100; clamped", label, rates.cash_sweep_pct)
                rates.cash_sweep_pct = 100.0

        _coerce_record(self.historical, "historical")
        self.set_projection_years(self.projection_years)
        for year, drivers in enumerate(self.operating, start=1):
            _coerce_record(drivers, f"operating[year {year}]")
        self.cash_flow.nwc_pcts = [
            coerce_number(v, DEFAULT_NWC_PCT, f"nwc_pct[year {y}]")
            for y, v in enumerate(self.cash_flow.nwc_pcts, start=1)
        ]
        self.cash_flow.capex_pcts = [
            coerce_number(v, DEFAULT_CAPEX_PCT, f"capex_pct[year {y}]")
            for y, v in enumerate(self.cash_flow.capex_pcts, start=1)
        ]

        self.exit.exit_multiple = coerce_number(self.exit.exit_multiple, 8.0, "exit.exit_multiple")
        self.exit.exit_year = max(1, self.exit.exit_year)
        return self

    # -----------------------------------------------------------------------
    # Boundary (de)serialization
    # -----------------------------------------------------------------------
    @classmethod
    def from_dict(cls, data: dict) -> "DealAssumptions":
        """
        Build assumptions from a plain mapping (JSON, form values, ...).

        Missing keys take the documented defaults; invalid values are
        defaulted by ``normalize``.
        """
        if not isinstance(data, dict):
            raise TypeError(f"expected a dict of assumptions, got {type(data).__name__}")

        tranches = data.get("debt_tranches")
        rates = data.get("debt_rates") or []
        cash_flow = data.get("cash_flow") or {}

        assumptions = cls(
            transaction=_from_mapping(TransactionAssumptions, data.get("transaction")),
            debt_tranches=(_default_tranches() if tranches is None
                           else [_from_mapping(DebtTranche, t) for t in tranches]),
            debt_rates=[None if r is None else _from_mapping(DebtRates, r) for r in rates],
            historical=_from_mapping(HistoricalDrivers, data.get("historical")),
            projection_years=data.get("projection_years", MIN_PROJECTION_YEARS),
            operating=[_from_mapping(OperatingDrivers, d) for d in data.get("operating") or []],
            cash_flow=CashFlowDrivers(
                nwc_pcts=list(cash_flow.get("nwc_pcts") or []),
                capex_pcts=list(cash_flow.get("capex_pcts") or []),
            ),
            exit=_from_mapping(ExitAssumptions, data.get("exit")),
        )
        return assumptions.normalize()

    def to_dict(self) -> dict:
        return asdict(self)


# ---------------------------------------------------------------------------
# Convenience
# ---------------------------------------------------------------------------

def base_case() -> DealAssumptions:
    return DealAssumptions()
