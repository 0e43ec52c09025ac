"""
Cost and income records for timeline modules.

Purpose
-------
A single normalized record, FlexibleCost, describes both what a life event
costs and what it pays. It has two independent parts:

- an up-front part (``one_time``) paid once at the record's start age
- a recurring part (``amount`` every ``frequency`` period) active between
  the start age and the end age

Supported frequencies are one-time, daily, weekly, monthly, yearly and
custom (every ``custom_period_days`` days). A recurring part is annualized
before it reaches the engine:

    daily x 365, weekly x 52, monthly x 12, yearly x 1, custom x 365/days

``duration`` counts periods of the frequency. It is converted to whole
years and the record stays active through ``start + floor(years)``
inclusive, so a 300-month mortgage placed at 35 is paid from 35 to 60.

Legacy records
--------------
Older profiles store costs as scalar fields ``oneTime``, ``monthly`` and
``yearly``. FlexibleCost.from_dict accepts those and the new
``amount``/``frequency`` shape interchangeably; to_dict always writes the
new shape.

Example
-------
>>> from sglife.costs import FlexibleCost, Frequency
>>> c = FlexibleCost.from_dict({"oneTime": 80_000, "monthly": 1_800, "duration": 300})
>>> c.annual_amount()
21600.0
>>> c.recurring_bounds(module_age=35)
(35, 60)
>>> c.recurring_for_age(61, module_age=35)
0.0
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from .constants import DAYS_PER_YEAR, MONTHS_PER_YEAR, WEEKS_PER_YEAR
from .exceptions import ValidationError
from .utils import check_finite

__all__ = [
    "Frequency",
    "FlexibleCost",
    "periods_per_year",
]


class Frequency(str, Enum):
    """Billing frequency of a recurring amount."""

    ONE_TIME = "one-time"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    CUSTOM = "custom"

    @classmethod
    def parse(cls, value: Any) -> "Frequency":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError as exc:
            allowed = ", ".join(f.value for f in cls)
            raise ValidationError(
                f"Unknown frequency {value!r}; expected one of: {allowed}"
            ) from exc


def periods_per_year(frequency: Frequency, custom_period_days: Optional[float] = None) -> float:
    """Number of billing periods in one year for *frequency*."""
    if frequency == Frequency.DAILY:
        return float(DAYS_PER_YEAR)
    if frequency == Frequency.WEEKLY:
        return float(WEEKS_PER_YEAR)
    if frequency == Frequency.MONTHLY:
        return float(MONTHS_PER_YEAR)
    if frequency == Frequency.YEARLY:
        return 1.0
    if frequency == Frequency.CUSTOM:
        if not custom_period_days or custom_period_days <= 0:
            raise ValidationError(
                f"custom frequency requires custom_period_days > 0 (got {custom_period_days})"
            )
        return DAYS_PER_YEAR / float(custom_period_days)
    return 0.0


@dataclass(frozen=True)
class FlexibleCost:
    """
    Normalized cost or income record.

    Parameters
    ----------
    one_time : float, default 0.0
        Up-front amount paid (or received) once at the start age.
    amount : float, default 0.0
        Recurring amount per ``frequency`` period. Negative values reduce
        expenses (e.g. rental income recorded on an investment property).
    frequency : Frequency, default MONTHLY
        Period of ``amount``. A one-time frequency folds ``amount`` into
        ``one_time``.
    custom_period_days : int, optional
        Period length for the custom frequency. Dropped for other frequencies.
    duration : float, optional
        Number of periods the recurring part runs for. Unbounded if None or 0.
    start_age, end_age : int, optional
        Explicit bounds. ``start_age`` defaults to the module's age.
    cpf_usage : float, default 0.0
        Percent (0-100) of the up-front gross amount financed from CPF OA.
        Only honored for house modules.
    grants : float, default 0.0
        Grants credited to cash in the start year.
    cpf_deduction, cash_required : float, optional
        Funding outcome written back after a projection.
    fixed_ages : bool, default False
        ``start_age``/``end_age`` are calendar ages, not offsets from the
        placement age. Placement and moves leave them unchanged.
    """

    one_time: float = 0.0
    amount: float = 0.0
    frequency: Frequency = Frequency.MONTHLY
    custom_period_days: Optional[int] = None
    duration: Optional[float] = None
    start_age: Optional[int] = None
    end_age: Optional[int] = None
    cpf_usage: float = 0.0
    grants: float = 0.0
    cpf_deduction: Optional[float] = None
    cash_required: Optional[float] = None
    fixed_ages: bool = False

    def __post_init__(self) -> None:
        freq = Frequency.parse(self.frequency)
        object.__setattr__(self, "frequency", freq)

        for name in ("one_time", "amount", "cpf_usage", "grants"):
            object.__setattr__(self, name, check_finite(name, getattr(self, name)))
        for name in ("duration", "cpf_deduction", "cash_required"):
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, check_finite(name, value))
        for name in ("start_age", "end_age"):
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, int(check_finite(name, value)))

        if not 0.0 <= self.cpf_usage <= 100.0:
            raise ValidationError(f"cpf_usage must be within [0, 100] (got {self.cpf_usage})")
        if self.duration is not None and self.duration < 0:
            raise ValidationError(f"duration must be non-negative (got {self.duration})")

        if freq == Frequency.CUSTOM:
            periods_per_year(freq, self.custom_period_days)
        elif self.custom_period_days is not None:
            object.__setattr__(self, "custom_period_days", None)

        if freq == Frequency.ONE_TIME and self.amount != 0.0:
            object.__setattr__(self, "one_time", self.one_time + self.amount)
            object.__setattr__(self, "amount", 0.0)

    # ------------------------------------------------------------------
    # Recurring evaluation
    # ------------------------------------------------------------------

    @property
    def is_recurring(self) -> bool:
        return self.frequency != Frequency.ONE_TIME and self.amount != 0.0

    def annual_amount(self) -> float:
        """Recurring amount converted to a per-year figure."""
        if not self.is_recurring:
            return 0.0
        return self.amount * periods_per_year(self.frequency, self.custom_period_days)

    def duration_years(self) -> Optional[int]:
        """Whole years covered by ``duration``, or None when unbounded."""
        if not self.duration or not self.is_recurring:
            return None
        years = self.duration / periods_per_year(self.frequency, self.custom_period_days)
        return int(math.floor(years + 1e-9))

    def recurring_bounds(self, module_age: int) -> Tuple[int, Optional[int]]:
        """
        Inclusive (start, end) ages of the recurring part.

        ``end`` is None when neither ``end_age`` nor ``duration`` bounds it.
        When both are set the earlier one wins.
        """
        start = self.start_age if self.start_age is not None else module_age
        ends = []
        if self.end_age is not None:
            ends.append(self.end_age)
        years = self.duration_years()
        if years is not None:
            ends.append(start + years)
        return start, (min(ends) if ends else None)

    def recurring_for_age(self, age: int, module_age: int) -> float:
        """Annualized recurring amount contributed at *age* (0 outside bounds)."""
        if not self.is_recurring:
            return 0.0
        start, end = self.recurring_bounds(module_age)
        if age < start or (end is not None and age > end):
            return 0.0
        return self.annual_amount()

    def one_time_age(self, module_age: int) -> int:
        """Age at which the up-front part and grants take effect."""
        return self.start_age if self.start_age is not None else module_age

    # ------------------------------------------------------------------
    # Derivation
    # ------------------------------------------------------------------

    def rebased(self, placement_age: int) -> "FlexibleCost":
        """Copy with template-relative start/end offsets turned into ages."""
        if self.fixed_ages:
            return self
        return replace(
            self,
            start_age=None if self.start_age is None else placement_age + self.start_age,
            end_age=None if self.end_age is None else placement_age + self.end_age,
        )

    def with_funding(self, cpf_deduction: float, cash_required: float) -> "FlexibleCost":
        return replace(self, cpf_deduction=cpf_deduction, cash_required=cash_required)

    # ------------------------------------------------------------------
    # Wire format
    # ------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FlexibleCost":
        """
        Build from a camelCase mapping in either the legacy or the new shape.

        Legacy ``monthly``/``yearly`` scalars are used only when the record
        has no ``amount``.
        """
        if not isinstance(data, Mapping):
            raise ValidationError(f"cost record must be a mapping (got {type(data).__name__})")

        one_time = data.get("oneTime", data.get("one_time")) or 0.0
        if data.get("amount") is not None:
            amount = data["amount"]
            frequency = Frequency.parse(data.get("frequency", Frequency.ONE_TIME))
        elif data.get("monthly") is not None:
            amount, frequency = data["monthly"], Frequency.MONTHLY
        elif data.get("yearly") is not None:
            amount, frequency = data["yearly"], Frequency.YEARLY
        else:
            amount, frequency = 0.0, Frequency.parse(data.get("frequency", Frequency.ONE_TIME))

        def pick(camel: str, snake: str) -> Any:
            return data.get(camel, data.get(snake))

        return cls(
            one_time=one_time,
            amount=amount,
            frequency=frequency,
            custom_period_days=pick("customPeriodDays", "custom_period_days"),
            duration=data.get("duration"),
            start_age=pick("startAge", "start_age"),
            end_age=pick("endAge", "end_age"),
            cpf_usage=pick("cpfUsage", "cpf_usage") or 0.0,
            grants=data.get("grants") or 0.0,
            cpf_deduction=pick("cpfDeduction", "cpf_deduction"),
            cash_required=pick("cashRequired", "cash_required"),
            fixed_ages=bool(pick("fixedAges", "fixed_ages")),
        )

    def to_dict(self) -> Dict[str, Any]:
        """camelCase mapping in the normalized shape; unset optionals omitted."""
        out: Dict[str, Any] = {
            "oneTime": self.one_time,
            "amount": self.amount,
            "frequency": self.frequency.value,
        }
        optional = {
            "customPeriodDays": self.custom_period_days,
            "duration": self.duration,
            "startAge": self.start_age,
            "endAge": self.end_age,
            "cpfDeduction": self.cpf_deduction,
            "cashRequired": self.cash_required,
        }
        out.update({k: v for k, v in optional.items() if v is not None})
        if self.cpf_usage:
            out["cpfUsage"] = self.cpf_usage
        if self.grants:
            out["grants"] = self.grants
        if self.fixed_ages:
            out["fixedAges"] = True
        return out
