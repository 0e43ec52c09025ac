"""
Global constants for sglife.

Purpose
-------
Centralizes the Singapore policy numbers and planning defaults used by the
projection engine, the module catalog and the scenario manager. Values are
stub constants (CPF Board, HDB, MAS figures as of 2024); no market data is
fetched at runtime.

Usage
-----
>>> from sglife.constants import TERMINAL_AGE, ORDINARY_WAGE_CEILING
>>> TERMINAL_AGE
123

Categories
----------
- Horizon: terminal age, time conversions
- CPF: wage ceilings, base interest, extra interest tiers
- Grants: baby bonus
- Housing: HDB concessionary loan defaults
- Defaults: starting financial profile
- Scenarios: preset color palette
- Retirement: safe withdrawal rates
"""

from typing import Dict, Tuple

__all__ = [
    # Horizon
    "TERMINAL_AGE",
    "MONTHS_PER_YEAR",
    "WEEKS_PER_YEAR",
    "DAYS_PER_YEAR",
    # CPF
    "ORDINARY_WAGE_CEILING",
    "CALCULATOR_WAGE_CEILING",
    "ADDITIONAL_WAGE_CEILING",
    "OA_INTEREST_RATE",
    "SA_INTEREST_RATE",
    "MA_INTEREST_RATE",
    "RA_INTEREST_RATE",
    "EXTRA_INTEREST_POOL_BELOW_55",
    "EXTRA_INTEREST_OA_CAP",
    "EXTRA_INTEREST_RATE_BELOW_55",
    "EXTRA_INTEREST_TIERS_55_PLUS",
    # Grants
    "BABY_BONUS",
    "BTO_ENHANCED_GRANT",
    # Housing
    "HDB_INTEREST_RATE_PCT",
    "HDB_MAX_TENURE_YEARS",
    "DEFAULT_CPF_USAGE_PCT",
    "DEFAULT_LOAN_MULTIPLE",
    # Defaults
    "DEFAULT_CURRENT_AGE",
    "DEFAULT_MONTHLY_INCOME",
    "DEFAULT_ANNUAL_BONUS",
    "DEFAULT_SALARY_GROWTH_RATE",
    "DEFAULT_CPF_OA",
    "DEFAULT_CPF_SA",
    "DEFAULT_CPF_MA",
    "DEFAULT_CASH_SAVINGS",
    "DEFAULT_INVESTMENTS",
    "DEFAULT_INFLATION_RATE",
    # Scenarios
    "SCENARIO_PALETTE",
    "MAIN_SCENARIO_NAME",
    # Retirement
    "RETIREMENT_TARGET_AGE",
    "WITHDRAWAL_RATES",
]


# =============================================================================
# Horizon
# =============================================================================

TERMINAL_AGE: int = 123
"""Last simulated age (practical upper bound on lifespan, not a mortality model)."""

MONTHS_PER_YEAR: int = 12
WEEKS_PER_YEAR: int = 52
DAYS_PER_YEAR: int = 365


# =============================================================================
# CPF
# =============================================================================

ORDINARY_WAGE_CEILING: float = 6800.0
"""Monthly ordinary-wage ceiling applied by the projection engine."""

CALCULATOR_WAGE_CEILING: float = 6000.0
"""Ceiling used by the employee/employer contribution calculator table."""

ADDITIONAL_WAGE_CEILING: float = 102000.0

OA_INTEREST_RATE: float = 0.025
SA_INTEREST_RATE: float = 0.04
MA_INTEREST_RATE: float = 0.04
RA_INTEREST_RATE: float = 0.04

EXTRA_INTEREST_POOL_BELOW_55: float = 60000.0
"""Combined balance earning the extra 1% below age 55."""

EXTRA_INTEREST_OA_CAP: float = 20000.0
"""Maximum OA balance counted toward any extra-interest pool."""

EXTRA_INTEREST_RATE_BELOW_55: float = 0.01

EXTRA_INTEREST_TIERS_55_PLUS: Tuple[Tuple[float, float], ...] = (
    (30000.0, 0.02),
    (30000.0, 0.01),
)
"""(tier size, extra rate) pairs applied in order from age 55."""


# =============================================================================
# Grants
# =============================================================================

BABY_BONUS: float = 10000.0
"""Flat cash gift credited in the year a child module occurs."""

BTO_ENHANCED_GRANT: float = 80000.0
"""Default Enhanced Housing Grant pre-filled for BTO templates."""


# =============================================================================
# Housing
# =============================================================================

HDB_INTEREST_RATE_PCT: float = 2.6
"""HDB concessionary loan rate, percent per annum."""

HDB_MAX_TENURE_YEARS: int = 25

DEFAULT_CPF_USAGE_PCT: float = 80.0
"""Share of a house down payment financed from CPF OA by default."""

DEFAULT_LOAN_MULTIPLE: float = 3.0
"""Loan amount as a multiple of the down payment (25% down payment)."""


# =============================================================================
# Starting profile defaults
# =============================================================================

DEFAULT_CURRENT_AGE: int = 30
DEFAULT_MONTHLY_INCOME: float = 5000.0
DEFAULT_ANNUAL_BONUS: float = 10000.0
DEFAULT_SALARY_GROWTH_RATE: float = 3.0
DEFAULT_CPF_OA: float = 50000.0
DEFAULT_CPF_SA: float = 30000.0
DEFAULT_CPF_MA: float = 20000.0
DEFAULT_CASH_SAVINGS: float = 20000.0
DEFAULT_INVESTMENTS: float = 10000.0

DEFAULT_INFLATION_RATE: float = 0.023
"""Ten-year historical inflation used by adjust_for_inflation."""


# =============================================================================
# Scenarios
# =============================================================================

SCENARIO_PALETTE: Tuple[Dict[str, str], ...] = (
    {"id": "blue", "name": "Ocean Blue", "color": "#66d9ef", "dark": "#4db8d9"},
    {"id": "green", "name": "Forest Green", "color": "#a6e22e", "dark": "#8bc621"},
    {"id": "pink", "name": "Cherry Pink", "color": "#ff6b9d", "dark": "#e5518a"},
    {"id": "purple", "name": "Royal Purple", "color": "#ae81ff", "dark": "#9b6ce6"},
    {"id": "orange", "name": "Sunset Orange", "color": "#fd971f", "dark": "#e87d0c"},
    {"id": "yellow", "name": "Golden Yellow", "color": "#ffeb3b", "dark": "#fdd835"},
    {"id": "red", "name": "Ruby Red", "color": "#f92672", "dark": "#e01558"},
    {"id": "cyan", "name": "Sky Cyan", "color": "#00bcd4", "dark": "#0097a7"},
)
"""Eight preset scenario colors, assigned in order and cycled once exhausted."""

MAIN_SCENARIO_NAME: str = "Main"


# =============================================================================
# Retirement
# =============================================================================

RETIREMENT_TARGET_AGE: int = 65

WITHDRAWAL_RATES: Dict[str, float] = {
    "conservative": 0.03,
    "moderate": 0.04,
    "aggressive": 0.05,
}
"""Annual safe-withdrawal rate by risk tolerance (4% rule and neighbours)."""
