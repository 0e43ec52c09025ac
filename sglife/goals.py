"""
Retirement goal evaluation.

Purpose
-------
Compares the projected net worth at a target retirement age with the nest
egg needed to fund a monthly income under a safe-withdrawal rule:

    required_nest_egg = monthly_income_needed * 12 / withdrawal_rate

Withdrawal rates by risk tolerance: conservative 3%, moderate 4%,
aggressive 5%.

Example
-------
>>> goal = RetirementGoal(target_age=65, monthly_income_needed=4_000)
>>> goal.required_nest_egg
1200000.0
>>> readiness = goal.evaluate(ctx.project(), current_age=30)
>>> readiness.status
'good'
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Literal, Optional, Sequence, Union

from .constants import RETIREMENT_TARGET_AGE, WITHDRAWAL_RATES
from .engine import ProjectionResult, YearSnapshot
from .exceptions import ValidationError

__all__ = ["RetirementGoal", "RetirementReadiness"]

RiskTolerance = Literal["conservative", "moderate", "aggressive"]
ReadinessStatus = Literal["on_track", "good", "attention", "significant_gap"]


@dataclass(frozen=True)
class RetirementReadiness:
    """
    Result of RetirementGoal.evaluate.

    Attributes
    ----------
    projected_net_worth : float
        Net worth at the target age (0 if the projection does not reach it).
    required_nest_egg : float
    gap : float
        ``required - projected``; negative values are a surplus.
    percent_to_goal : float
    status : str
        on_track (>= 100%), good (>= 75%), attention (>= 50%), significant_gap.
    years_to_retirement : int
    extra_monthly_saving : float
        Saving needed per month to close a positive gap by the target age.
    delay_years : int, optional
        Years of further accumulation at the current average pace that
        would close the gap.
    sustainable_monthly_income : float
        Monthly income the projected net worth supports at the goal's rate.
    """
    projected_net_worth: float
    required_nest_egg: float
    gap: float
    percent_to_goal: float
    status: ReadinessStatus
    years_to_retirement: int
    extra_monthly_saving: float
    delay_years: Optional[int]
    sustainable_monthly_income: float

    @property
    def on_track(self) -> bool:
        return self.gap <= 0


@dataclass(frozen=True)
class RetirementGoal:
    target_age: int = RETIREMENT_TARGET_AGE
    monthly_income_needed: float = 4000.0
    risk_tolerance: RiskTolerance = "moderate"

    def __post_init__(self) -> None:
        if self.risk_tolerance not in WITHDRAWAL_RATES:
            raise ValidationError(
                f"risk_tolerance must be one of {sorted(WITHDRAWAL_RATES)} (got {self.risk_tolerance!r})"
            )
        if self.monthly_income_needed < 0:
            raise ValidationError("monthly_income_needed must be non-negative")

    @property
    def withdrawal_rate(self) -> float:
        return WITHDRAWAL_RATES[self.risk_tolerance]

    @property
    def required_nest_egg(self) -> float:
        return self.monthly_income_needed * 12 / self.withdrawal_rate

    def evaluate(
        self,
        projection: Union[ProjectionResult, Sequence[YearSnapshot]],
        current_age: Optional[int] = None,
    ) -> RetirementReadiness:
        """
        Measure a projection against this goal.

        Parameters
        ----------
        projection : ProjectionResult or sequence of YearSnapshot
        current_age : int, optional
            Defaults to the first projected age.
        """
        snapshots = list(projection)
        if current_age is None:
            current_age = snapshots[0].age if snapshots else self.target_age
        at_target = next((s for s in snapshots if s.age == self.target_age), None)
        projected = float(at_target.net_worth) if at_target else 0.0

        required = self.required_nest_egg
        gap = required - projected
        percent = projected / required * 100.0 if required > 0 else 100.0
        years = self.target_age - current_age

        if percent >= 100:
            status = "on_track"
        elif percent >= 75:
            status = "good"
        elif percent >= 50:
            status = "attention"
        else:
            status = "significant_gap"

        extra = gap / (years * 12) if gap > 0 and years > 0 else 0.0
        delay: Optional[int] = None
        if gap > 0 and years > 0 and projected > 0:
            delay = math.ceil(gap / (projected / years))

        return RetirementReadiness(
            projected_net_worth=projected,
            required_nest_egg=required,
            gap=gap,
            percent_to_goal=percent,
            status=status,
            years_to_retirement=years,
            extra_monthly_saving=extra,
            delay_years=delay,
            sustainable_monthly_income=projected * self.withdrawal_rate / 12,
        )
