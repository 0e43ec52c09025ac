"""
Pytest configuration and fixtures for the sglife test suite.

This module provides reusable fixtures for testing all sglife components.
Fixtures follow the principle of "arrange-act-assert" with clear separation.
"""

from typing import List

import pytest

from sglife.catalog import get_template
from sglife.config import ProjectionConfig
from sglife.costs import FlexibleCost, Frequency
from sglife.modules import ModuleType, TimelineModule
from sglife.scenarios import PlanningContext
from sglife.state import CPFBalances, FinancialState


# ---------------------------------------------------------------------------
# Financial State Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def current_year() -> int:
    """Fixed calendar year so placement years are deterministic."""
    return 2025


@pytest.fixture
def default_state(current_year) -> FinancialState:
    """
    Planning defaults at age 30.

    Income: 5,000/month, 10,000 bonus, 3% growth
    CPF: OA 50k / SA 30k / MA 20k
    Cash 20k, investments 10k
    """
    return FinancialState(current_year=current_year)


@pytest.fixture
def flat_state(current_year) -> FinancialState:
    """Age 30, 5,000/month, no bonus and no salary growth."""
    return FinancialState(
        current_age=30,
        current_year=current_year,
        monthly_income=5000,
        annual_bonus=0,
        salary_growth_rate=0,
        cpf_balances=CPFBalances(ordinary=50000, special=30000, medisave=20000),
        cash_savings=20000,
        investments=10000,
    )


# ---------------------------------------------------------------------------
# Module Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def bto_template() -> TimelineModule:
    return get_template("bto-4room")


@pytest.fixture
def house_module() -> TimelineModule:
    """
    House at 35: 120k up front after 20k grants, 80% CPF usage.
    """
    return TimelineModule(
        id="house-test",
        type=ModuleType.HOUSE,
        name="Test Flat",
        age=35,
        costs=FlexibleCost(one_time=120000, cpf_usage=80, grants=20000),
        sequence=1,
    )


@pytest.fixture
def monthly_expense() -> TimelineModule:
    """1,000/month from age 32 to 34 inclusive."""
    return TimelineModule(
        id="expense-test",
        type=ModuleType.CUSTOM,
        name="Rent",
        age=32,
        costs=FlexibleCost(amount=1000, frequency=Frequency.MONTHLY, end_age=34),
        is_custom=True,
    )


# ---------------------------------------------------------------------------
# Context Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def short_config() -> ProjectionConfig:
    """Projection ending at 70 to keep tests fast."""
    return ProjectionConfig(terminal_age=70)


@pytest.fixture
def context(default_state) -> PlanningContext:
    """Fresh context holding only the Main scenario."""
    return PlanningContext(default_state)


@pytest.fixture
def populated_context(default_state) -> PlanningContext:
    """Main scenario with a wedding, a BTO flat and a first child."""
    ctx = PlanningContext(default_state)
    ctx.place_module("marriage", 31)
    ctx.place_module("bto-4room", 32)
    ctx.place_module("child1", 34)
    return ctx


@pytest.fixture
def template_ids() -> List[str]:
    return ["bto-4room", "car", "marriage", "child1", "promotion"]
