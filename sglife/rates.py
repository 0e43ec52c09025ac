"""
Singapore rate tables and helpers.

Purpose
-------
Age-banded CPF tables and the statutory calculators that sit on top of them:

- Total contribution rate used by the projection engine (step function).
- OA / SA / MA allocation ratios (shift toward Medisave with age).
- Employee / employer split for the stand-alone contribution calculator.
- Extra interest on the first $60k of CPF balances.
- Progressive resident income tax and simple inflation adjustment.

All bands share one set of upper bounds:

    <=35 | 36-45 | 46-50 | 51-55 | 56-60 | 61-65 | >65

Example
-------
>>> from sglife.rates import cpf_contribution_rate, cpf_allocation_ratios
>>> cpf_contribution_rate(30)
0.37
>>> cpf_allocation_ratios(30)
(0.6217, 0.1622, 0.2161)
"""

from __future__ import annotations

from typing import Dict, Tuple

import numpy as np

from .constants import (
    CALCULATOR_WAGE_CEILING,
    DEFAULT_INFLATION_RATE,
    EXTRA_INTEREST_OA_CAP,
    EXTRA_INTEREST_POOL_BELOW_55,
    EXTRA_INTEREST_RATE_BELOW_55,
    EXTRA_INTEREST_TIERS_55_PLUS,
)
from .types import CPFContributionDict

__all__ = [
    "AGE_GROUPS",
    "age_group",
    "cpf_contribution_rate",
    "cpf_allocation_ratios",
    "calculate_cpf_contribution",
    "extra_interest",
    "INCOME_TAX_BRACKETS",
    "calculate_income_tax",
    "adjust_for_inflation",
]


# ---------------------------------------------------------------------------
# Age bands
# ---------------------------------------------------------------------------

_BAND_UPPER = np.array([35, 45, 50, 55, 60, 65])

AGE_GROUPS: Tuple[str, ...] = ("<=35", "36-45", "46-50", "51-55", "56-60", "61-65", ">65")

# Combined employer + employee rate applied by the projection engine.
_TOTAL_RATE = np.array([0.37, 0.37, 0.37, 0.35, 0.28, 0.165, 0.05])

# Percent of wage, calculator table.
_EMPLOYEE_PCT = np.array([20.0, 20.0, 20.0, 19.0, 15.0, 9.5, 7.0])
_EMPLOYER_PCT = np.array([17.0, 17.0, 17.0, 16.0, 13.0, 9.0, 7.5])

# Share of the total contribution credited to each account.
_ALLOCATION = np.array([
    [0.6217, 0.1622, 0.2161],
    [0.5676, 0.1892, 0.2432],
    [0.5135, 0.2162, 0.2703],
    [0.4054, 0.3108, 0.2838],
    [0.4615, 0.1154, 0.4231],
    [0.0263, 0.2105, 0.7632],
    [0.08, 0.08, 0.84],
])


def _band(age: float) -> int:
    return int(np.searchsorted(_BAND_UPPER, age, side="left"))


def age_group(age: float) -> str:
    """Return the band label for *age* (e.g. ``"36-45"``)."""
    return AGE_GROUPS[_band(age)]


def cpf_contribution_rate(age: float) -> float:
    """Combined CPF contribution rate for *age* as a fraction of wages."""
    return float(_TOTAL_RATE[_band(age)])


def cpf_allocation_ratios(age: float) -> Tuple[float, float, float]:
    """(OA, SA, MA) fractions of the total contribution for *age*; sums to 1."""
    oa, sa, ma = _ALLOCATION[_band(age)]
    return float(oa), float(sa), float(ma)


def calculate_cpf_contribution(
    age: float,
    salary: float,
    *,
    wage_ceiling: float = CALCULATOR_WAGE_CEILING,
) -> CPFContributionDict:
    """
    Monthly employee and employer CPF contributions on a capped salary.

    Parameters
    ----------
    age : float
        Member age; selects the rate band.
    salary : float
        Gross monthly ordinary wage.
    wage_ceiling : float, default 6000
        Ordinary wage ceiling applied before the rates.

    Returns
    -------
    CPFContributionDict
        Employee, employer and total dollar amounts plus the OA/SA/MA split
        of the total.

    Examples
    --------
    >>> c = calculate_cpf_contribution(30, 8000)
    >>> c["total"]  # capped at 6000 * 37%
    2220.0
    """
    b = _band(age)
    capped = min(float(salary), wage_ceiling)
    employee = capped * _EMPLOYEE_PCT[b] / 100.0
    employer = capped * _EMPLOYER_PCT[b] / 100.0
    total = employee + employer
    oa, sa, ma = _ALLOCATION[b]
    return {
        "employee": float(employee),
        "employer": float(employer),
        "total": float(total),
        "allocation": {"OA": float(total * oa), "SA": float(total * sa), "MA": float(total * ma)},
    }


# ---------------------------------------------------------------------------
# Extra interest
# ---------------------------------------------------------------------------

def extra_interest(age: float, oa: float, sa: float, ma: float, ra: float = 0.0) -> Dict[str, float]:
    """
    Annual extra interest earned by each account.

    Below 55 the first $60k of combined balances earns an extra 1%, drawn
    from OA (at most $20k), then SA, then MA. From 55 the first $30k earns
    an extra 2% and the next $30k an extra 1%, drawn from RA, OA (capped),
    SA, then MA.

    Returns
    -------
    dict
        Extra interest keyed by source account {"OA", "SA", "MA", "RA"}.
    """
    ei = {"OA": 0.0, "SA": 0.0, "MA": 0.0, "RA": 0.0}
    oa_eligible = min(max(oa, 0.0), EXTRA_INTEREST_OA_CAP)
    order = [("OA", oa_eligible), ("SA", max(sa, 0.0)), ("MA", max(ma, 0.0))]

    if age < 55:
        tiers = ((EXTRA_INTEREST_POOL_BELOW_55, EXTRA_INTEREST_RATE_BELOW_55),)
    else:
        order.insert(0, ("RA", max(ra, 0.0)))
        tiers = EXTRA_INTEREST_TIERS_55_PLUS

    remaining = dict(order)
    for size, rate in tiers:
        room = size
        for name, _ in order:
            take = min(room, remaining[name])
            if take > 0:
                ei[name] += take * rate
                remaining[name] -= take
                room -= take
            if room <= 0:
                break
    return ei


# ---------------------------------------------------------------------------
# Income tax
# ---------------------------------------------------------------------------

INCOME_TAX_BRACKETS: Tuple[Tuple[float, float], ...] = (
    (20000, 0.0),
    (30000, 0.02),
    (40000, 0.035),
    (80000, 0.07),
    (120000, 0.115),
    (160000, 0.15),
    (200000, 0.18),
    (240000, 0.19),
    (280000, 0.195),
    (320000, 0.20),
    (500000, 0.22),
    (1000000, 0.23),
    (float("inf"), 0.24),
)
"""(upper bound of chargeable income, marginal rate) for residents."""


def calculate_income_tax(annual_income: float, reliefs: float = 0.0) -> float:
    """
    Progressive resident income tax on ``annual_income - reliefs``.

    Examples
    --------
    >>> calculate_income_tax(50_000)
    1250.0
    """
    taxable = max(0.0, float(annual_income) - float(reliefs))
    tax = 0.0
    previous = 0.0
    for upper, rate in INCOME_TAX_BRACKETS:
        in_bracket = min(taxable, upper) - previous
        if in_bracket > 0:
            tax += in_bracket * rate
        if taxable <= upper:
            break
        previous = upper
    return tax


def adjust_for_inflation(amount: float, years: float,
                         inflation_rate: float = DEFAULT_INFLATION_RATE) -> float:
    """Future nominal value of *amount* after *years* of compounding inflation."""
    return float(amount * (1.0 + inflation_rate) ** years)
