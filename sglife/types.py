"""
Type definitions for sglife.

Purpose
-------
TypedDict definitions for the dictionary shapes returned by sglife.
Snapshots, contribution breakdowns and comparison rows are exposed as
plain dicts when serialized or tabulated.

Type Definitions
----------------
SnapshotDict
    One projected year: {"age", "year", "netWorth", ...} (camelCase, wire format)

CPFAllocationDict
    Contribution split by account: {"OA", "SA", "MA"}

CPFContributionDict
    Calculator output: {"employee", "employer", "total", "allocation"}

ProfileStatsDict
    Summary stats embedded in an exported profile
"""

from typing_extensions import TypedDict

__all__ = [
    "SnapshotDict",
    "CPFAllocationDict",
    "CPFContributionDict",
    "ProfileStatsDict",
]


class SnapshotDict(TypedDict):
    """
    Projection snapshot in wire format.

    All values are whole currency units except ``age`` and ``year``.
    ``cashFlow`` is the monthly equivalent of the year's cash flow.
    """

    year: int
    age: int
    netWorth: int
    cashFlow: int
    cpfTotal: int
    cpfOA: int
    cpfSA: int
    cpfMA: int
    cpfRA: int
    cashSavings: int
    monthlyIncome: int
    annualExpenses: int
    grantsReceived: int
    moduleIncome: int
    investments: int


class CPFAllocationDict(TypedDict):
    OA: float
    SA: float
    MA: float


class CPFContributionDict(TypedDict):
    """
    Monthly CPF contribution on a capped salary.

    Examples
    --------
    >>> c: CPFContributionDict = calculate_cpf_contribution(30, 5000)
    >>> c["total"]
    1850.0
    """

    employee: float
    employer: float
    total: float
    allocation: CPFAllocationDict


class ProfileStatsDict(TypedDict):
    retirementAge: int
    finalNetWorth: int
    peakCashFlow: int
    totalLifeEvents: int
