"""
lbo
---
Leveraged-buyout projection model: Sources & Uses, income statement,
debt schedule with cash sweep, cash flow, credit ratios, returns and
sensitivity analysis.
"""

import logging

from lbo.model.assumptions import DealAssumptions, DebtRates, DebtTranche, base_case
from lbo.model.state import LBOModel
from lbo.model.lbo_engine import run_model
from lbo.analysis.sensitivity import run_sensitivity_analysis
from lbo.pipeline import calculate_model

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "DealAssumptions",
    "DebtRates",
    "DebtTranche",
    "LBOModel",
    "base_case",
    "calculate_model",
    "run_model",
    "run_sensitivity_analysis",
]
