"""
Timeline modules: life events placed at an age.

Purpose
-------
A TimelineModule is one life event (job, wedding, child, flat, insurance
plan, ...) with cost and income records and an optional effect on the
running base salary. Catalog templates are placed onto a timeline with
place_module; user-defined events are built with create_custom_module.

Key components
--------------
- ModuleType : closed set of event categories
- SalaryChange : replace / add / multiply effect on salary
- TimelineModule : immutable placed event
- ModuleCustomization : placement-time inputs (CPF usage, grants, loan)
- place_module : template -> placed instance
- create_custom_module : validated user-defined template

Placement rules
---------------
- The instance id is the template id plus a unique suffix.
- ``year = current_year + (age - current_age)``.
- Catalog templates store cost/income ``start_age``/``end_age`` as offsets
  from the placement age; placement turns them into ages. Custom modules
  carry absolute ages and are left untouched.
- House modules are re-costed: the up-front amount is reduced by the total
  grants (floored at 0), the recurring cost becomes the amortized mortgage
  instalment and the CPF usage and grants are carried on the cost record.

Example
-------
>>> from sglife.catalog import get_template
>>> from sglife.state import FinancialState
>>> state = FinancialState()
>>> flat = place_module(get_template("bto-4room"), age=32, financial=state)
>>> flat.costs.one_time   # 80k down payment less the 80k enhanced grant
0.0
>>> flat.costs.grants
80000.0
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional, Tuple, Union

from .constants import (
    BTO_ENHANCED_GRANT,
    DEFAULT_CPF_USAGE_PCT,
    DEFAULT_LOAN_MULTIPLE,
    HDB_INTEREST_RATE_PCT,
    HDB_MAX_TENURE_YEARS,
    MONTHS_PER_YEAR,
)
from .costs import FlexibleCost, Frequency
from .exceptions import ModuleCreationError, ValidationError
from .housing import calculate_monthly_payment
from .utils import check_finite

if TYPE_CHECKING:
    from .state import FinancialState

__all__ = [
    "ModuleType",
    "SalaryChangeType",
    "SalaryChange",
    "TimelineModule",
    "ModuleCustomization",
    "new_instance_id",
    "place_module",
    "create_custom_module",
]


class ModuleType(str, Enum):
    CAR = "car"
    HOUSE = "house"
    MARRIAGE = "marriage"
    CHILD = "child"
    EDUCATION = "education"
    INVESTMENT = "investment"
    CAREER = "career"
    RETIREMENT = "retirement"
    CUSTOM = "custom"


class SalaryChangeType(str, Enum):
    REPLACE = "replace"
    ADD = "add"
    MULTIPLY = "multiply"


def new_instance_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


# ---------------------------------------------------------------------------
# Salary change
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SalaryChange:
    """
    Effect of a career module on the running salary.

    - replace: base salary becomes ``amount`` (new job)
    - add: ``amount`` is added to cumulative side income (side hustle)
    - multiply: base salary is scaled by ``amount`` (promotion, career break)

    Examples
    --------
    >>> SalaryChange("multiply", 1.2).apply(5000.0, 0.0)
    (6000.0, 0.0)
    """

    type: SalaryChangeType
    amount: float

    def __post_init__(self) -> None:
        try:
            kind = SalaryChangeType(self.type)
        except ValueError as exc:
            raise ValidationError(f"Unknown salary change type {self.type!r}") from exc
        object.__setattr__(self, "type", kind)
        object.__setattr__(self, "amount", check_finite("salary_change.amount", self.amount))

    def apply(self, base: float, additional: float) -> Tuple[float, float]:
        """Return the (base, additional) salary pair after this change."""
        if self.type == SalaryChangeType.REPLACE:
            return self.amount, additional
        if self.type == SalaryChangeType.ADD:
            return base, additional + self.amount
        return base * self.amount, additional

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type.value, "amount": self.amount}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SalaryChange":
        return cls(type=data.get("type"), amount=data.get("amount"))


# ---------------------------------------------------------------------------
# Timeline module
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TimelineModule:
    """
    A life event on a timeline.

    Parameters
    ----------
    id : str
        Instance id (template id plus a unique suffix once placed).
    type : ModuleType
        Event category. House and child modules get special engine treatment.
    name : str
        Display name.
    age, year : int
        Placement age and calendar year. Both 0 on catalog templates.
    costs : FlexibleCost
        What the event costs.
    income : FlexibleCost, optional
        What the event pays (e.g. an endowment payout).
    salary_change : SalaryChange, optional
        Effect on the running base salary.
    template_id : str, optional
        Catalog id this instance was placed from.
    icon, color, description, category : str
        Presentation only.
    removable : bool
        Whether the user may delete it from a timeline.
    is_custom : bool
        User-defined module (absolute cost/income ages).
    sequence : int
        Creation ordinal; orders salary changes placed at the same age.
    """

    id: str
    type: ModuleType
    name: str
    age: int = 0
    year: int = 0
    costs: FlexibleCost = field(default_factory=FlexibleCost)
    income: Optional[FlexibleCost] = None
    salary_change: Optional[SalaryChange] = None
    template_id: Optional[str] = None
    icon: str = ""
    color: str = ""
    description: str = ""
    category: str = ""
    removable: bool = True
    is_custom: bool = False
    sequence: int = 0

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, "type", ModuleType(self.type))
        except ValueError as exc:
            raise ValidationError(f"Unknown module type {self.type!r}") from exc
        object.__setattr__(self, "age", int(check_finite(f"{self.id}.age", self.age)))
        object.__setattr__(self, "year", int(check_finite(f"{self.id}.year", self.year)))

    @property
    def is_house(self) -> bool:
        return self.type == ModuleType.HOUSE

    @property
    def is_child(self) -> bool:
        return self.type == ModuleType.CHILD

    def updated(self, **changes: Any) -> "TimelineModule":
        """Copy with *changes* applied (field names as on the dataclass)."""
        return replace(self, **changes)

    def moved_to(self, age: int, current_age: int, current_year: int) -> "TimelineModule":
        """
        Copy at a new age with the year recomputed.

        Catalog instances shift their cost/income bounds with the module;
        custom modules and ``fixed_ages`` records keep their absolute bounds.
        """
        delta = int(age) - self.age
        changes: Dict[str, Any] = {"age": int(age), "year": current_year + (int(age) - current_age)}
        if not self.is_custom and delta:
            changes["costs"] = _shift(self.costs, delta)
            if self.income is not None:
                changes["income"] = _shift(self.income, delta)
        return replace(self, **changes)

    # ------------------------------------------------------------------
    # Wire format
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "type": self.type.value,
            "name": self.name,
            "age": self.age,
            "year": self.year,
            "costs": self.costs.to_dict(),
            "removable": self.removable,
        }
        if self.income is not None:
            out["income"] = self.income.to_dict()
        if self.salary_change is not None:
            out["salaryChange"] = self.salary_change.to_dict()
        if self.template_id:
            out["templateId"] = self.template_id
        for key, value in (("icon", self.icon), ("color", self.color),
                           ("description", self.description), ("category", self.category)):
            if value:
                out[key] = value
        if self.is_custom:
            out["isCustom"] = True
        if self.sequence:
            out["sequence"] = self.sequence
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TimelineModule":
        """Build from a camelCase mapping; legacy cost shapes are accepted."""
        income = data.get("income")
        salary = data.get("salaryChange")
        return cls(
            id=str(data["id"]),
            type=data["type"],
            name=str(data.get("name", "")),
            age=data.get("age", 0),
            year=data.get("year", 0),
            costs=FlexibleCost.from_dict(data.get("costs") or {}),
            income=FlexibleCost.from_dict(income) if income else None,
            salary_change=SalaryChange.from_dict(salary) if salary else None,
            template_id=data.get("templateId"),
            icon=data.get("icon") or "",
            color=data.get("color") or "",
            description=data.get("description") or "",
            category=data.get("category") or "",
            removable=bool(data.get("removable", True)),
            is_custom=bool(data.get("isCustom", False)),
            sequence=int(data.get("sequence", 0)),
        )


def _shift(cost: FlexibleCost, delta: int) -> FlexibleCost:
    if cost.fixed_ages:
        return cost
    return replace(
        cost,
        start_age=None if cost.start_age is None else cost.start_age + delta,
        end_age=None if cost.end_age is None else cost.end_age + delta,
    )


# ---------------------------------------------------------------------------
# Placement
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ModuleCustomization:
    """
    Placement-time inputs for a module.

    Parameters
    ----------
    cpf_usage : float, default 80
        Percent of the house down payment financed from CPF OA.
    enhanced_grant, proximity_grant, singles_grant : float
        Housing grants; their sum reduces the up-front cost.
    loan_amount : float, optional
        Mortgage principal. Defaults to three times the down payment.
    interest_rate : float, default 2.6
        Mortgage rate in percent per annum.
    tenure_years : float, default 25
        Mortgage tenure; the instalment runs for ``tenure_years * 12`` months.
    """

    cpf_usage: float = DEFAULT_CPF_USAGE_PCT
    enhanced_grant: float = 0.0
    proximity_grant: float = 0.0
    singles_grant: float = 0.0
    loan_amount: Optional[float] = None
    interest_rate: float = HDB_INTEREST_RATE_PCT
    tenure_years: float = HDB_MAX_TENURE_YEARS

    @classmethod
    def for_template(cls, template: TimelineModule, **overrides: Any) -> "ModuleCustomization":
        """Defaults for *template*: BTO flats pre-fill the enhanced grant."""
        source = template.template_id or template.id
        defaults: Dict[str, Any] = {
            "enhanced_grant": BTO_ENHANCED_GRANT if template.is_house and "bto" in source else 0.0,
            "loan_amount": template.costs.one_time * DEFAULT_LOAN_MULTIPLE,
        }
        defaults.update(overrides)
        return cls(**defaults)

    @property
    def total_grants(self) -> float:
        return self.enhanced_grant + self.proximity_grant + self.singles_grant

    def monthly_payment(self, down_payment: float) -> float:
        principal = self.loan_amount if self.loan_amount is not None else down_payment * DEFAULT_LOAN_MULTIPLE
        return calculate_monthly_payment(principal, self.interest_rate, self.tenure_years)


def _customized_costs(template: TimelineModule, custom: ModuleCustomization) -> FlexibleCost:
    costs = template.costs
    grants = custom.total_grants
    effective_one_time = max(0.0, costs.one_time - grants)
    if template.is_house:
        return replace(
            costs,
            one_time=effective_one_time,
            amount=custom.monthly_payment(costs.one_time),
            frequency=Frequency.MONTHLY,
            duration=custom.tenure_years * MONTHS_PER_YEAR,
            cpf_usage=custom.cpf_usage,
            grants=grants,
        )
    return replace(costs, one_time=effective_one_time, cpf_usage=0.0, grants=grants)


def place_module(
    template: TimelineModule,
    age: int,
    financial: Union["FinancialState", Any],
    customization: Optional[ModuleCustomization] = None,
    sequence: int = 0,
) -> TimelineModule:
    """
    Produce a placed instance of *template* at *age*.

    Parameters
    ----------
    template : TimelineModule
        Catalog template or custom module.
    age : int
        Placement age.
    financial : FinancialState
        Supplies ``current_age`` and ``current_year`` for the year.
    customization : ModuleCustomization, optional
        Placement inputs. House templates fall back to
        ModuleCustomization.for_template; other templates are placed as-is
        when omitted.
    sequence : int, default 0
        Creation ordinal stamped on the instance.

    Returns
    -------
    TimelineModule
        New instance with a fresh id. The template is not modified.
    """
    age = int(check_finite("age", age))
    source_id = template.template_id or template.id

    costs = template.costs
    income = template.income
    if not template.is_custom:
        costs = costs.rebased(age)
        income = income.rebased(age) if income is not None else None

    if customization is None and template.is_house:
        customization = ModuleCustomization.for_template(template)
    if customization is not None:
        costs = _customized_costs(replace(template, costs=costs), customization)

    return replace(
        template,
        id=new_instance_id(source_id),
        template_id=source_id,
        age=age,
        year=financial.current_year + (age - financial.current_age),
        costs=costs,
        income=income,
        sequence=sequence,
    )


# ---------------------------------------------------------------------------
# Custom modules
# ---------------------------------------------------------------------------

def create_custom_module(
    name: str,
    amount: float,
    frequency: Union[str, Frequency] = Frequency.ONE_TIME,
    is_expense: bool = True,
    icon: str = "💰",
    category: str = "Personal",
    color: str = "#66d9ef",
    description: str = "",
    custom_period_days: Optional[int] = None,
    duration: Optional[float] = None,
    start_age: Optional[int] = None,
    end_age: Optional[int] = None,
) -> TimelineModule:
    """
    Build a user-defined module template.

    The record goes into ``costs`` for an expense and into ``income``
    otherwise. ``custom_period_days`` is kept only for the custom frequency.
    Start and end ages are absolute.

    Raises
    ------
    ModuleCreationError
        Blank name or ``amount <= 0``. No module is produced.
    """
    if not name or not str(name).strip():
        raise ModuleCreationError("Module name is required.")
    try:
        value = check_finite("amount", amount)
    except ValidationError as exc:
        raise ModuleCreationError(str(exc)) from exc
    if value <= 0:
        raise ModuleCreationError(f"amount must be greater than 0 (got {amount})")

    try:
        freq = Frequency.parse(frequency)
        record = FlexibleCost(
            amount=value,
            frequency=freq,
            custom_period_days=custom_period_days if freq == Frequency.CUSTOM else None,
            duration=duration,
            start_age=start_age,
            end_age=end_age,
        )
    except ValidationError as exc:
        raise ModuleCreationError(str(exc)) from exc

    return TimelineModule(
        id=new_instance_id("custom"),
        type=ModuleType.CUSTOM,
        name=str(name).strip(),
        costs=record if is_expense else FlexibleCost(),
        income=None if is_expense else record,
        icon=icon,
        color=color,
        description=description,
        category=category,
        removable=True,
        is_custom=True,
    )
