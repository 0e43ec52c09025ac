"""
Scenario (branch) management.

Purpose
-------
A PlanningContext owns every scenario of one life plan. Scenarios are held
in an ordered mapping keyed by id and one of them is active. The live
module list and financial state ARE the active scenario's, so switching is
a pointer change and edits never need syncing back.

Key components
--------------
- ScenarioColor : preset or custom display color
- Scenario : named module list + financial state with lineage fields
- PlanningContext : the store; module, capital, branch and comparison ops

Example
-------
>>> ctx = PlanningContext()
>>> ctx.place_module("bto-4room", age=32)
>>> alt = ctx.create_branch("Condo instead")
>>> ctx.active_scenario_id == alt.id
True
>>> ctx.compare_scenarios()[["name", "final_net_worth"]]
"""

from __future__ import annotations

import copy
import datetime
import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

import pandas as pd

from .catalog import get_template
from .config import ProjectionConfig
from .constants import MAIN_SCENARIO_NAME, RETIREMENT_TARGET_AGE, SCENARIO_PALETTE
from .engine import ProjectionResult, run_projection
from .exceptions import (
    ScenarioNotFoundError,
    TimelineError,
    UnknownModuleError,
    ValidationError,
)
from .modules import ModuleCustomization, TimelineModule, new_instance_id
from .modules import place_module as _place
from .state import FinancialState

__all__ = [
    "ScenarioColor",
    "Scenario",
    "PlanningContext",
]

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


@dataclass(frozen=True)
class ScenarioColor:
    id: str
    name: str
    color: str
    dark: str

    @classmethod
    def palette(cls) -> List["ScenarioColor"]:
        return [cls(**c) for c in SCENARIO_PALETTE]

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "name": self.name, "color": self.color, "dark": self.dark}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ScenarioColor":
        return cls(id=data["id"], name=data["name"], color=data["color"], dark=data["dark"])


@dataclass
class Scenario:
    """
    One alternative life plan.

    ``branched_from`` and ``branch_age`` are lineage for display only.
    """
    id: str
    name: str
    color: ScenarioColor
    financial: FinancialState
    modules: List[TimelineModule] = field(default_factory=list)
    description: str = ""
    branched_from: Optional[str] = None
    branch_age: Optional[int] = None
    created_at: str = field(default_factory=_now_iso)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "color": self.color.to_dict(),
            "createdAt": self.created_at,
            "modules": [m.to_dict() for m in self.modules],
            "financial": self.financial.to_dict(),
        }
        if self.branched_from is not None:
            out["branchedFrom"] = self.branched_from
        if self.branch_age is not None:
            out["branchAge"] = self.branch_age
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Scenario":
        return cls(
            id=data["id"],
            name=data["name"],
            description=data.get("description") or "",
            color=ScenarioColor.from_dict(data["color"]),
            branched_from=data.get("branchedFrom"),
            branch_age=data.get("branchAge"),
            created_at=data.get("createdAt") or _now_iso(),
            modules=[TimelineModule.from_dict(m) for m in data.get("modules") or []],
            financial=FinancialState.from_dict(data["financial"]),
        )


class PlanningContext:
    """
    Authoritative store for a life plan.

    Parameters
    ----------
    financial : FinancialState, optional
        Starting state of the initial "Main" scenario. Defaults apply if None.
    config : ProjectionConfig, optional
        Engine parameters used by project() and compare_scenarios().

    Notes
    -----
    Unknown scenario ids raise ScenarioNotFoundError; unknown module ids
    raise UnknownModuleError. Placing or moving a module before the active
    scenario's current age raises TimelineError.
    """

    def __init__(self, financial: Optional[FinancialState] = None,
                 config: Optional[ProjectionConfig] = None) -> None:
        self.config = config or ProjectionConfig()
        self.custom_modules: List[TimelineModule] = []
        self._scenarios: Dict[str, Scenario] = {}
        self._sequence = itertools.count(1)

        main = Scenario(
            id=new_instance_id("scenario"),
            name=MAIN_SCENARIO_NAME,
            color=ScenarioColor.palette()[0],
            financial=financial if financial is not None else FinancialState(),
        )
        self._scenarios[main.id] = main
        self.active_scenario_id: str = main.id

    @classmethod
    def from_scenarios(cls, scenarios: Iterable[Scenario], active_scenario_id: Optional[str] = None,
                       custom_modules: Iterable[TimelineModule] = (),
                       config: Optional[ProjectionConfig] = None) -> "PlanningContext":
        """Rebuild a context from stored scenarios (e.g. an imported profile)."""
        scenarios = list(scenarios)
        if not scenarios:
            raise ValidationError("A planning context needs at least one scenario.")
        ctx = cls.__new__(cls)
        ctx.config = config or ProjectionConfig()
        ctx.custom_modules = list(custom_modules)
        ctx._scenarios = {s.id: s for s in scenarios}
        ctx.active_scenario_id = (
            active_scenario_id if active_scenario_id in ctx._scenarios else scenarios[0].id
        )
        last = max((m.sequence for s in scenarios for m in s.modules), default=0)
        ctx._sequence = itertools.count(last + 1)
        return ctx

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def scenarios(self) -> List[Scenario]:
        return list(self._scenarios.values())

    @property
    def active(self) -> Scenario:
        return self._scenarios[self.active_scenario_id]

    @property
    def financial(self) -> FinancialState:
        return self.active.financial

    @property
    def modules(self) -> List[TimelineModule]:
        return self.active.modules

    def get_scenario(self, scenario_id: str) -> Scenario:
        try:
            return self._scenarios[scenario_id]
        except KeyError:
            raise ScenarioNotFoundError(f"No scenario with id '{scenario_id}'") from None

    def get_module(self, module_id: str) -> TimelineModule:
        return self.modules[self._module_index(module_id)]

    def _module_index(self, module_id: str) -> int:
        for i, m in enumerate(self.modules):
            if m.id == module_id:
                return i
        raise UnknownModuleError(f"No module with id '{module_id}' on the active timeline")

    def _check_age(self, age: int) -> None:
        if age < self.financial.current_age:
            raise TimelineError(
                f"Cannot place a module at age {age}: current age is {self.financial.current_age}"
            )

    def _year_for(self, age: int) -> int:
        return self.financial.current_year + (age - self.financial.current_age)

    # ------------------------------------------------------------------
    # Module operations (active scenario)
    # ------------------------------------------------------------------

    def add_module(self, module: TimelineModule) -> TimelineModule:
        """
        Append an already-built module to the active timeline.

        The year and creation sequence are recomputed; a module whose id is
        already on the timeline gets a fresh instance id.
        """
        self._check_age(module.age)
        module_id = module.id
        if any(m.id == module_id for m in self.modules):
            module_id = new_instance_id(module.template_id or module.id)
        placed = module.updated(
            id=module_id,
            year=self._year_for(module.age),
            sequence=next(self._sequence),
        )
        self.modules.append(placed)
        logger.debug("Added module %s at age %d", placed.id, placed.age)
        return placed

    def place_module(
        self,
        template: Union[str, TimelineModule],
        age: int,
        customization: Optional[ModuleCustomization] = None,
    ) -> TimelineModule:
        """
        Place a catalog template (by id or instance) or custom module at *age*.

        String ids are looked up in the custom library first, then the catalog.
        """
        if isinstance(template, str):
            template = self._resolve_template(template)
        self._check_age(int(age))
        placed = _place(template, age, self.financial, customization=customization,
                        sequence=next(self._sequence))
        self.modules.append(placed)
        logger.debug("Placed %s as %s at age %d", template.id, placed.id, placed.age)
        return placed

    def _resolve_template(self, template_id: str) -> TimelineModule:
        for m in self.custom_modules:
            if m.id == template_id:
                return m
        return get_template(template_id)

    def remove_module(self, module_id: str) -> TimelineModule:
        removed = self.modules.pop(self._module_index(module_id))
        logger.debug("Removed module %s", module_id)
        return removed

    def update_module(self, module_id: str, **changes: Any) -> TimelineModule:
        """Replace fields of a placed module; ``age`` changes go through move_module."""
        idx = self._module_index(module_id)
        if "age" in changes:
            self.move_module(module_id, changes.pop("age"))
        updated = self.modules[idx].updated(**changes)
        self.modules[idx] = updated
        return updated

    def move_module(self, module_id: str, new_age: int) -> TimelineModule:
        idx = self._module_index(module_id)
        self._check_age(int(new_age))
        moved = self.modules[idx].moved_to(new_age, self.financial.current_age,
                                           self.financial.current_year)
        self.modules[idx] = moved
        return moved

    def reset_timeline(self) -> None:
        self.modules.clear()

    # ------------------------------------------------------------------
    # Financial state (active scenario)
    # ------------------------------------------------------------------

    def update_starting_capital(self, **balances: Optional[float]) -> None:
        self.financial.update_starting_capital(**balances)

    def update_income(self, monthly_income: float, annual_bonus: Optional[float] = None) -> None:
        self.financial.update_income(monthly_income, annual_bonus)

    def update_salary_growth_rate(self, rate: float) -> None:
        self.financial.update_salary_growth_rate(rate)

    def update_savings(self, amount: float) -> None:
        self.financial.update_savings(amount)

    def update_savings_rate(self, rate: float) -> None:
        self.financial.update_savings_rate(rate)

    # ------------------------------------------------------------------
    # Scenario operations
    # ------------------------------------------------------------------

    def next_default_color(self) -> ScenarioColor:
        """First palette color no scenario uses; cycles by count once all are taken."""
        palette = ScenarioColor.palette()
        used = {s.color.id for s in self._scenarios.values()}
        for c in palette:
            if c.id not in used:
                return c
        return palette[len(self._scenarios) % len(palette)]

    def create_branch(self, name: str, description: str = "",
                      color: Optional[ScenarioColor] = None,
                      branch_age: Optional[int] = None) -> Scenario:
        """Fork the active scenario into a new one and make it active."""
        if not name or not name.strip():
            raise ValidationError("Scenario name is required.")
        parent = self.active
        branch = Scenario(
            id=new_instance_id("scenario"),
            name=name.strip(),
            description=description,
            color=color or self.next_default_color(),
            financial=parent.financial.copy(),
            modules=copy.deepcopy(parent.modules),
            branched_from=parent.id,
            branch_age=branch_age if branch_age is not None else parent.financial.current_age,
        )
        self._scenarios[branch.id] = branch
        self.active_scenario_id = branch.id
        logger.debug("Branched %s from %s", branch.id, parent.id)
        return branch

    def switch_scenario(self, scenario_id: str) -> Scenario:
        scenario = self.get_scenario(scenario_id)
        self.active_scenario_id = scenario.id
        return scenario

    def delete_scenario(self, scenario_id: str) -> None:
        """
        Remove a scenario. Deleting the active one activates the first
        remaining scenario. The last scenario cannot be deleted.
        """
        self.get_scenario(scenario_id)
        if len(self._scenarios) == 1:
            raise ValidationError("Cannot delete the only scenario of a plan.")
        del self._scenarios[scenario_id]
        if self.active_scenario_id == scenario_id:
            self.active_scenario_id = next(iter(self._scenarios))
        logger.debug("Deleted scenario %s", scenario_id)

    def rename_scenario(self, scenario_id: str, name: str) -> None:
        if not name or not name.strip():
            raise ValidationError("Scenario name is required.")
        self.get_scenario(scenario_id).name = name.strip()

    def recolor_scenario(self, scenario_id: str, color: ScenarioColor) -> None:
        self.get_scenario(scenario_id).color = color

    def duplicate_scenario(self, scenario_id: str, name: Optional[str] = None) -> Scenario:
        """Deep copy under a new id and name. The active scenario does not change."""
        source = self.get_scenario(scenario_id)
        dup = Scenario(
            id=new_instance_id("scenario"),
            name=name or f"{source.name} (Copy)",
            description=source.description,
            color=self.next_default_color(),
            financial=source.financial.copy(),
            modules=copy.deepcopy(source.modules),
            branched_from=source.id,
            branch_age=source.branch_age,
        )
        self._scenarios[dup.id] = dup
        return dup

    # ------------------------------------------------------------------
    # Custom module library
    # ------------------------------------------------------------------

    def add_custom_module(self, module: TimelineModule) -> TimelineModule:
        stored = module.updated(
            id=new_instance_id("custom"),
            age=0,
            year=0,
            is_custom=True,
            removable=True,
        )
        self.custom_modules.append(stored)
        return stored

    def _custom_index(self, module_id: str) -> int:
        for i, m in enumerate(self.custom_modules):
            if m.id == module_id:
                return i
        raise UnknownModuleError(f"No custom module with id '{module_id}'")

    def delete_custom_module(self, module_id: str) -> None:
        del self.custom_modules[self._custom_index(module_id)]

    def update_custom_module(self, module_id: str, **changes: Any) -> TimelineModule:
        idx = self._custom_index(module_id)
        updated = self.custom_modules[idx].updated(**changes)
        self.custom_modules[idx] = updated
        return updated

    # ------------------------------------------------------------------
    # Projection
    # ------------------------------------------------------------------

    def project(self, scenario_id: Optional[str] = None,
                config: Optional[ProjectionConfig] = None) -> ProjectionResult:
        """Run the engine on a scenario (the active one by default)."""
        scenario = self.get_scenario(scenario_id) if scenario_id else self.active
        return run_projection(scenario.financial.current_age, scenario.financial,
                              scenario.modules, config or self.config)

    def compare_scenarios(self, scenario_ids: Optional[Iterable[str]] = None,
                          retirement_age: int = RETIREMENT_TARGET_AGE) -> pd.DataFrame:
        """
        Re-run the engine for each scenario and tabulate headline metrics.

        Returns
        -------
        pd.DataFrame
            Indexed by scenario id with columns ``name``, ``final_net_worth``,
            ``net_worth_at_retirement``, ``peak_monthly_cash_flow``,
            ``module_count``, ``cash_depletion_age`` and ``active``.
        """
        ids = list(scenario_ids) if scenario_ids is not None else list(self._scenarios)
        rows = []
        for sid in ids:
            scenario = self.get_scenario(sid)
            summary = self.project(sid).summary(retirement_age)
            rows.append({
                "scenario_id": sid,
                "name": scenario.name,
                "final_net_worth": summary["final_net_worth"],
                "net_worth_at_retirement": summary["net_worth_at_retirement"],
                "peak_monthly_cash_flow": summary["peak_monthly_cash_flow"],
                "module_count": len(scenario.modules),
                "cash_depletion_age": summary["cash_depletion_age"],
                "active": sid == self.active_scenario_id,
            })
        columns = ["scenario_id", "name", "final_net_worth", "net_worth_at_retirement",
                   "peak_monthly_cash_flow", "module_count", "cash_depletion_age", "active"]
        return pd.DataFrame(rows, columns=columns).set_index("scenario_id")
