"""
sglife: Singapore life-timeline financial projection

A library for placing life events (housing, marriage, children, career
moves, insurance and savings plans) on a personal timeline and projecting
net worth, cash flow and CPF balances year by year.

Modules
-------
- state      : Starting financial position and capital operations
- costs      : Normalized cost / income records
- modules    : Timeline modules, placement and custom events
- catalog    : Built-in life-event templates
- engine     : Deterministic year-by-year projection
- scenarios  : Branching, switching and comparing alternative plans
- goals      : Retirement readiness
- rates      : CPF contribution tables, income tax, inflation
- housing    : Mortgage, HDB loan, grants and stamp duty helpers
- serialization : Life-plan profile export / import

"""

__version__ = "0.1.0"

from .state import CPFBalances, FinancialState
from .costs import FlexibleCost, Frequency
from .modules import (
    ModuleCustomization,
    ModuleType,
    SalaryChange,
    SalaryChangeType,
    TimelineModule,
    create_custom_module,
    place_module,
)
from .catalog import get_template, list_templates
from .config import ProjectionConfig
from .engine import ProjectionResult, YearSnapshot, run_projection, simulate
from .scenarios import PlanningContext, Scenario, ScenarioColor
from .goals import RetirementGoal, RetirementReadiness
from . import utils

__all__ = [
    "__version__",
    "CPFBalances",
    "FinancialState",
    "FlexibleCost",
    "Frequency",
    "ModuleCustomization",
    "ModuleType",
    "SalaryChange",
    "SalaryChangeType",
    "TimelineModule",
    "create_custom_module",
    "place_module",
    "get_template",
    "list_templates",
    "ProjectionConfig",
    "ProjectionResult",
    "YearSnapshot",
    "run_projection",
    "simulate",
    "PlanningContext",
    "Scenario",
    "ScenarioColor",
    "RetirementGoal",
    "RetirementReadiness",
    "utils",
]
