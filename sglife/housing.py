"""
HDB housing helpers.

Purpose
-------
Mortgage arithmetic and the housing grant / stamp duty tables used when a
house module is placed on a timeline.

Key components
--------------
- calculate_monthly_payment : amortized instalment with zero-rate and
  zero-tenure guards
- hdb_loan_limits : loan ceiling from loan-to-value and the instalment
  ceiling from the mortgage servicing ratio
- enhanced_housing_grant : Enhanced CPF Housing Grant by income band
- buyers_stamp_duty : progressive Buyer's Stamp Duty

Example
-------
>>> from sglife.housing import calculate_monthly_payment
>>> calculate_monthly_payment(240_000, 2.6, 25)
1089.0
"""

from __future__ import annotations

from typing import Any, Dict, Tuple

import numpy as np

from .constants import HDB_INTEREST_RATE_PCT, HDB_MAX_TENURE_YEARS, MONTHS_PER_YEAR
from .exceptions import ValidationError
from .utils import check_finite, round_currency

__all__ = [
    "HDB_LOAN_TO_VALUE",
    "HDB_MORTGAGE_SERVICING_RATIO",
    "PROXIMITY_GRANTS",
    "SINGLES_GRANTS",
    "BSD_BRACKETS",
    "calculate_monthly_payment",
    "hdb_loan_limits",
    "enhanced_housing_grant",
    "buyers_stamp_duty",
]


HDB_LOAN_TO_VALUE: float = 0.8
HDB_MORTGAGE_SERVICING_RATIO: float = 0.3

PROXIMITY_GRANTS: Dict[str, float] = {
    "living_with_parents": 30000.0,
    "living_near_parents": 20000.0,
}

SINGLES_GRANTS: Dict[str, float] = {
    "2-room": 15000.0,
    "3-room": 10000.0,
    "4-room": 5000.0,
}

# Upper income bound of each $500 band (monthly household income).
_EHG_BAND_UPPER = np.arange(1500, 9001, 500)
_EHG_FAMILIES = np.arange(80000, 4999, -5000, dtype=float)
_EHG_SINGLES = np.arange(40000, 9999, -5000, dtype=float)

BSD_BRACKETS: Tuple[Tuple[float, float], ...] = (
    (180000, 0.01),
    (360000, 0.02),
    (1000000, 0.03),
    (float("inf"), 0.04),
)


def calculate_monthly_payment(
    principal: float,
    annual_rate_pct: float = HDB_INTEREST_RATE_PCT,
    tenure_years: float = HDB_MAX_TENURE_YEARS,
) -> float:
    """
    Amortized monthly instalment.

    Parameters
    ----------
    principal : float
        Loan amount.
    annual_rate_pct : float, default 2.6
        Nominal annual interest rate in percent.
    tenure_years : float, default 25
        Loan tenure in years.

    Returns
    -------
    float
        ``P*r*(1+r)^n / ((1+r)^n - 1)`` rounded to whole dollars, with
        ``r = rate/100/12`` and ``n = tenure*12``. A zero rate returns the
        straight-line ``P/n``.

    Raises
    ------
    ValidationError
        If the tenure is not positive or any input is not finite.
    """
    principal = check_finite("principal", principal)
    rate = check_finite("annual_rate_pct", annual_rate_pct)
    tenure = check_finite("tenure_years", tenure_years)

    months = tenure * MONTHS_PER_YEAR
    if months <= 0:
        raise ValidationError(f"tenure_years must be positive (got {tenure_years})")
    if principal <= 0:
        return 0.0

    r = rate / 100.0 / MONTHS_PER_YEAR
    if r == 0:
        return principal / months

    growth = (1.0 + r) ** months
    return float(round_currency(principal * r * growth / (growth - 1.0)))


def hdb_loan_limits(
    price: float,
    monthly_income: float,
    annual_rate_pct: float = HDB_INTEREST_RATE_PCT,
    tenure_years: float = HDB_MAX_TENURE_YEARS,
) -> Dict[str, Any]:
    """
    Loan ceilings for an HDB flat.

    Returns
    -------
    dict
        ``max_loan`` (LTV cap on *price*), ``max_instalment`` (MSR cap on
        *monthly_income*), ``instalment`` for ``max_loan`` and whether that
        instalment is within the MSR cap (``affordable``).
    """
    max_loan = price * HDB_LOAN_TO_VALUE
    max_instalment = monthly_income * HDB_MORTGAGE_SERVICING_RATIO
    instalment = calculate_monthly_payment(max_loan, annual_rate_pct, tenure_years)
    return {
        "max_loan": float(max_loan),
        "max_instalment": float(max_instalment),
        "instalment": float(instalment),
        "affordable": instalment <= max_instalment,
    }


def enhanced_housing_grant(monthly_household_income: float, family: bool = True) -> float:
    """
    Enhanced CPF Housing Grant for a first-timer application.

    Families receive $80k at or below $1,500/month, stepping down $5k per
    $500 band to $5k at $9,000. Singles start at $40k and step down the same
    way to $10k at $4,500.
    Income above the ceiling receives nothing.
    """
    income = check_finite("monthly_household_income", monthly_household_income)
    table = _EHG_FAMILIES if family else _EHG_SINGLES
    idx = int(np.searchsorted(_EHG_BAND_UPPER, income, side="left"))
    if idx >= len(table):
        return 0.0
    return float(table[idx])


def buyers_stamp_duty(price: float) -> float:
    """Progressive Buyer's Stamp Duty on a residential purchase price."""
    price = max(0.0, check_finite("price", price))
    duty = 0.0
    previous = 0.0
    for upper, rate in BSD_BRACKETS:
        portion = min(price, upper) - previous
        if portion <= 0:
            break
        duty += portion * rate
        previous = upper
    return duty
