"""
Financial state of one scenario.

Purpose
-------
FinancialState holds the starting position a projection runs from: age
and calendar year, salary, CPF balances, cash and investments. It is the
only mutable domain object; every update recomputes net worth so that

    net_worth == cash_savings + investments + cpf_balances.total

holds whenever the state is observed.

Savings
-------
``savings_rate`` (percent of monthly income) is the stored value. The
dollar figure ``monthly_savings`` is derived from it, so an income change
moves the amount and leaves the rate alone. update_savings converts a
dollar amount into a rate against the current income.

Example
-------
>>> state = FinancialState()
>>> state.net_worth
130000.0
>>> state.update_starting_capital(cash_savings=50_000)
>>> state.net_worth
160000.0
"""

from __future__ import annotations

import copy as _copy
import datetime
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from .constants import (
    DEFAULT_ANNUAL_BONUS,
    DEFAULT_CASH_SAVINGS,
    DEFAULT_CPF_MA,
    DEFAULT_CPF_OA,
    DEFAULT_CPF_SA,
    DEFAULT_CURRENT_AGE,
    DEFAULT_INVESTMENTS,
    DEFAULT_MONTHLY_INCOME,
    DEFAULT_SALARY_GROWTH_RATE,
    MONTHS_PER_YEAR,
)
from .exceptions import ValidationError
from .utils import check_finite

__all__ = ["CPFBalances", "FinancialState"]


def _this_year() -> int:
    return datetime.date.today().year


@dataclass
class CPFBalances:
    """CPF account balances. ``retirement`` is only present from 55."""

    ordinary: float = DEFAULT_CPF_OA
    special: float = DEFAULT_CPF_SA
    medisave: float = DEFAULT_CPF_MA
    retirement: Optional[float] = None

    @property
    def total(self) -> float:
        return self.ordinary + self.special + self.medisave + (self.retirement or 0.0)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "ordinary": self.ordinary,
            "special": self.special,
            "medisave": self.medisave,
        }
        if self.retirement is not None:
            out["retirement"] = self.retirement
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CPFBalances":
        return cls(
            ordinary=data.get("ordinary", 0.0),
            special=data.get("special", 0.0),
            medisave=data.get("medisave", 0.0),
            retirement=data.get("retirement"),
        )


@dataclass
class FinancialState:
    """
    Starting financial position of a scenario.

    Parameters
    ----------
    current_age : int, default 30
    current_year : int
        Defaults to the current calendar year.
    monthly_income : float, default 5000
        Base monthly salary.
    annual_bonus : float, default 10000
    salary_growth_rate : float, default 3.0
        Percent per year applied to the base salary.
    cpf_balances : CPFBalances
    cash_savings : float, default 20000
    investments : float, default 10000
        Held constant by the projection.
    savings_rate : float, default 0.0
        Percent of monthly income set aside.
    """

    current_age: int = DEFAULT_CURRENT_AGE
    current_year: int = field(default_factory=_this_year)
    monthly_income: float = DEFAULT_MONTHLY_INCOME
    annual_bonus: float = DEFAULT_ANNUAL_BONUS
    salary_growth_rate: float = DEFAULT_SALARY_GROWTH_RATE
    cpf_balances: CPFBalances = field(default_factory=CPFBalances)
    cash_savings: float = DEFAULT_CASH_SAVINGS
    investments: float = DEFAULT_INVESTMENTS
    savings_rate: float = 0.0
    net_worth: float = field(init=False, default=0.0)

    def __post_init__(self) -> None:
        if isinstance(self.cpf_balances, Mapping):
            self.cpf_balances = CPFBalances.from_dict(self.cpf_balances)
        try:
            self.recompute_net_worth()
        except TypeError:
            # Missing balances; validate() reports which one.
            self.net_worth = float("nan")

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    def recompute_net_worth(self) -> float:
        self.net_worth = self.cash_savings + self.investments + self.cpf_balances.total
        return self.net_worth

    @property
    def monthly_savings(self) -> float:
        return self.monthly_income * self.savings_rate / 100.0

    @property
    def annual_income(self) -> float:
        return self.monthly_income * MONTHS_PER_YEAR + self.annual_bonus

    # ------------------------------------------------------------------
    # Updates
    # ------------------------------------------------------------------

    def update_starting_capital(
        self,
        cash_savings: Optional[float] = None,
        cpf_oa: Optional[float] = None,
        cpf_sa: Optional[float] = None,
        cpf_ma: Optional[float] = None,
        investments: Optional[float] = None,
    ) -> None:
        """Overwrite any subset of the starting balances. Negatives are accepted."""
        if cash_savings is not None:
            self.cash_savings = check_finite("cash_savings", cash_savings)
        if cpf_oa is not None:
            self.cpf_balances.ordinary = check_finite("cpf_oa", cpf_oa)
        if cpf_sa is not None:
            self.cpf_balances.special = check_finite("cpf_sa", cpf_sa)
        if cpf_ma is not None:
            self.cpf_balances.medisave = check_finite("cpf_ma", cpf_ma)
        if investments is not None:
            self.investments = check_finite("investments", investments)
        self.recompute_net_worth()

    def update_income(self, monthly_income: float, annual_bonus: Optional[float] = None) -> None:
        self.monthly_income = check_finite("monthly_income", monthly_income)
        if annual_bonus is not None:
            self.annual_bonus = check_finite("annual_bonus", annual_bonus)

    def update_salary_growth_rate(self, rate: float) -> None:
        self.salary_growth_rate = check_finite("salary_growth_rate", rate)

    def update_savings_rate(self, rate: float) -> None:
        self.savings_rate = check_finite("savings_rate", rate)

    def update_savings(self, amount: float) -> None:
        """
        Set monthly savings in dollars by converting it to a rate.

        Raises
        ------
        ValidationError
            If income is zero and *amount* is positive (no rate expresses it).
        """
        amount = check_finite("monthly_savings", amount)
        if self.monthly_income == 0:
            if amount > 0:
                raise ValidationError(
                    "Cannot set monthly savings with zero monthly income; set income first."
                )
            self.savings_rate = 0.0
            return
        self.savings_rate = amount / self.monthly_income * 100.0

    # ------------------------------------------------------------------
    # Validation & copies
    # ------------------------------------------------------------------

    def validate(self) -> "FinancialState":
        """Raise ValidationError if any numeric field is missing or not finite."""
        check_finite("current_age", self.current_age)
        check_finite("current_year", self.current_year)
        for name in ("monthly_income", "annual_bonus", "salary_growth_rate",
                     "cash_savings", "investments", "savings_rate"):
            check_finite(name, getattr(self, name))
        cpf = self.cpf_balances
        for name in ("ordinary", "special", "medisave"):
            check_finite(f"cpf_balances.{name}", getattr(cpf, name))
        if cpf.retirement is not None:
            check_finite("cpf_balances.retirement", cpf.retirement)
        return self

    def copy(self) -> "FinancialState":
        return _copy.deepcopy(self)

    # ------------------------------------------------------------------
    # Construction & wire format
    # ------------------------------------------------------------------

    @classmethod
    def from_profile(cls, profile: Mapping[str, Any]) -> "FinancialState":
        """
        Build from a wizard-style user profile.

        Missing or zero values fall back to the planning defaults. The
        profile's monthly bonus is annualized.

        Examples
        --------
        >>> FinancialState.from_profile({"age": 28, "monthlyIncome": {"basic": 4200}}).monthly_income
        4200.0
        """
        income = profile.get("monthlyIncome") or {}
        cpf = profile.get("cpfBalances") or {}
        cash = profile.get("cashAndInvestments") or {}
        stocks = cash.get("stocks") or {}

        state = cls(
            current_age=int(profile.get("age") or DEFAULT_CURRENT_AGE),
            monthly_income=float(income.get("basic") or DEFAULT_MONTHLY_INCOME),
            annual_bonus=float(income.get("bonus") or 0.0) * MONTHS_PER_YEAR,
            salary_growth_rate=float(profile.get("salaryGrowthRate") or DEFAULT_SALARY_GROWTH_RATE),
            cpf_balances=CPFBalances(
                ordinary=float(cpf.get("ordinary") or DEFAULT_CPF_OA),
                special=float(cpf.get("special") or DEFAULT_CPF_SA),
                medisave=float(cpf.get("medisave") or DEFAULT_CPF_MA),
                retirement=cpf.get("retirement"),
            ),
            cash_savings=float(cash.get("savingsAccount") or DEFAULT_CASH_SAVINGS),
            investments=float(stocks.get("singapore") or DEFAULT_INVESTMENTS),
        )
        return state.validate()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "currentAge": self.current_age,
            "currentYear": self.current_year,
            "monthlyIncome": self.monthly_income,
            "annualBonus": self.annual_bonus,
            "salaryGrowthRate": self.salary_growth_rate,
            "cpfBalances": self.cpf_balances.to_dict(),
            "cashSavings": self.cash_savings,
            "investments": self.investments,
            "netWorth": self.net_worth,
            "savingsRate": self.savings_rate,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FinancialState":
        """Build from camelCase; a stored ``netWorth`` is ignored and recomputed."""
        return cls(
            current_age=int(data.get("currentAge", DEFAULT_CURRENT_AGE)),
            current_year=int(data.get("currentYear") or _this_year()),
            monthly_income=data.get("monthlyIncome", DEFAULT_MONTHLY_INCOME),
            annual_bonus=data.get("annualBonus", 0.0),
            salary_growth_rate=data.get("salaryGrowthRate", DEFAULT_SALARY_GROWTH_RATE),
            cpf_balances=CPFBalances.from_dict(data.get("cpfBalances") or {}),
            cash_savings=data.get("cashSavings", 0.0),
            investments=data.get("investments", 0.0),
            savings_rate=data.get("savingsRate", 0.0),
        )
