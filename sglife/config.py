"""
Configuration management module for sglife.

Purpose
-------
Pydantic models for engine parameters, the camelCase wire schema used by
exported life-plan profiles, and environment-driven application settings.

Design Principles
-----------------
- Type-safe: Pydantic enforces types and validates ranges
- Immutable: engine config is frozen
- Wire-compatible: profile schemas read and write camelCase keys and accept
  legacy cost fields (``oneTime``, ``monthly``, ``yearly``)
- Environment-aware: AppSettings reads ``SGLIFE_*`` variables and ``.env``

Example
-------
>>> from sglife.config import ProjectionConfig, CompleteProfileModel
>>> cfg = ProjectionConfig(extra_interest=True)
>>> cfg.terminal_age
123
>>> profile = CompleteProfileModel.model_validate_json(open("plan.json").read())
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    BABY_BONUS,
    MA_INTEREST_RATE,
    OA_INTEREST_RATE,
    ORDINARY_WAGE_CEILING,
    SA_INTEREST_RATE,
    TERMINAL_AGE,
)

__all__ = [
    "ProjectionConfig",
    "FlexibleCostModel",
    "SalaryChangeModel",
    "TimelineModuleModel",
    "CPFBalancesModel",
    "FinancialStateModel",
    "ScenarioColorModel",
    "ScenarioModel",
    "ProfileStatsModel",
    "CompleteProfileModel",
    "AppSettings",
]


# ---------------------------------------------------------------------------
# Projection Configuration
# ---------------------------------------------------------------------------

class ProjectionConfig(BaseModel):
    """
    Parameters of the projection engine.

    Attributes
    ----------
    terminal_age : int
        Last simulated age (inclusive).
    ordinary_wage_ceiling : float
        Monthly wage cap for CPF contributions.
    baby_bonus : float
        Grant credited per child module in its year.
    oa_interest, sa_interest, ma_interest : float
        Annual base interest per CPF account.
    extra_interest : bool
        Credit extra interest on the first $60k of CPF balances.

    Examples
    --------
    >>> ProjectionConfig(terminal_age=100).terminal_age
    100
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    terminal_age: int = Field(
        default=TERMINAL_AGE,
        ge=1,
        le=150,
        description="Last simulated age (inclusive)"
    )
    ordinary_wage_ceiling: float = Field(
        default=ORDINARY_WAGE_CEILING,
        gt=0,
        description="Monthly ordinary wage ceiling for CPF"
    )
    baby_bonus: float = Field(
        default=BABY_BONUS,
        ge=0,
        description="Grant per child module"
    )
    oa_interest: float = Field(default=OA_INTEREST_RATE, ge=0, le=1)
    sa_interest: float = Field(default=SA_INTEREST_RATE, ge=0, le=1)
    ma_interest: float = Field(default=MA_INTEREST_RATE, ge=0, le=1)
    extra_interest: bool = Field(
        default=False,
        description="Apply CPF extra interest tiers"
    )


# ---------------------------------------------------------------------------
# Wire schema (CompleteProfile)
# ---------------------------------------------------------------------------

class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        allow_inf_nan=False,
    )


FrequencyName = Literal["one-time", "daily", "weekly", "monthly", "yearly", "custom"]
ModuleKind = Literal[
    "car", "house", "marriage", "child", "education",
    "investment", "career", "retirement", "custom",
]


class FlexibleCostModel(_WireModel):
    """Cost/income record; new (amount/frequency) and legacy fields both allowed."""

    amount: Optional[float] = None
    frequency: Optional[FrequencyName] = None
    custom_period_days: Optional[int] = Field(default=None, gt=0)
    duration: Optional[float] = Field(default=None, ge=0)
    start_age: Optional[int] = None
    end_age: Optional[int] = None
    one_time: Optional[float] = None
    monthly: Optional[float] = None
    yearly: Optional[float] = None
    cpf_usage: Optional[float] = Field(default=None, ge=0, le=100)
    grants: Optional[float] = None
    cpf_deduction: Optional[float] = None
    cash_required: Optional[float] = None
    fixed_ages: Optional[bool] = None


class SalaryChangeModel(_WireModel):
    type: Literal["replace", "add", "multiply"]
    amount: float


class TimelineModuleModel(_WireModel):
    id: str = Field(min_length=1)
    type: ModuleKind
    name: str = ""
    age: int = 0
    year: int = 0
    costs: FlexibleCostModel = Field(default_factory=FlexibleCostModel)
    income: Optional[FlexibleCostModel] = None
    salary_change: Optional[SalaryChangeModel] = None
    template_id: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    removable: bool = True
    is_custom: bool = False
    sequence: int = 0


class CPFBalancesModel(_WireModel):
    ordinary: float
    special: float
    medisave: float
    retirement: Optional[float] = None


class FinancialStateModel(_WireModel):
    current_age: int = Field(ge=0, le=150)
    current_year: int
    monthly_income: float
    annual_bonus: float = 0.0
    salary_growth_rate: float = 0.0
    cpf_balances: CPFBalancesModel
    cash_savings: float
    investments: float = 0.0
    net_worth: Optional[float] = None
    savings_rate: float = 0.0


class ScenarioColorModel(_WireModel):
    id: str
    name: str
    color: str
    dark: str


class ScenarioModel(_WireModel):
    id: str = Field(min_length=1)
    name: str
    description: Optional[str] = None
    color: ScenarioColorModel
    branched_from: Optional[str] = None
    branch_age: Optional[int] = None
    created_at: str
    modules: List[TimelineModuleModel] = Field(default_factory=list)
    financial: FinancialStateModel


class ProfileStatsModel(_WireModel):
    retirement_age: int
    final_net_worth: float
    peak_cash_flow: float
    total_life_events: int


class CompleteProfileModel(_WireModel):
    """
    Shareable life plan: financial state, every scenario and the custom
    module library, plus summary statistics for previews.
    """

    id: str
    name: str = Field(min_length=1)
    description: str = ""
    author: Optional[str] = None
    created_at: str
    updated_at: str
    version: str
    is_template: bool = False
    tags: List[str] = Field(default_factory=list)
    financial: FinancialStateModel
    scenarios: List[ScenarioModel] = Field(default_factory=list)
    active_scenario_id: Optional[str] = None
    custom_modules: List[TimelineModuleModel] = Field(default_factory=list)
    stats: ProfileStatsModel

    @field_validator("active_scenario_id")
    @classmethod
    def validate_active_scenario(cls, v, info):
        """Active id must name one of the scenarios."""
        scenarios = info.data.get("scenarios") or []
        if v is not None and scenarios and v not in {s.id for s in scenarios}:
            raise ValueError(f"activeScenarioId '{v}' does not match any scenario")
        return v


# ---------------------------------------------------------------------------
# Application Settings (Environment Variables)
# ---------------------------------------------------------------------------

class AppSettings(BaseSettings):
    """
    Global application settings loaded from environment variables.

    Environment variables are prefixed with SGLIFE_ (e.g. SGLIFE_LOG_LEVEL=DEBUG).

    Attributes
    ----------
    debug : bool
        Enable debug mode (forces DEBUG logging).
    log_level : str
        Logging level: "DEBUG", "INFO", "WARNING", "ERROR".
    default_currency : str
        Currency label used in CLI output.
    profiles_dir : Path
        Default directory for saved life-plan profiles.

    Examples
    --------
    >>> settings = AppSettings()
    >>> settings.default_currency
    'SGD'
    """

    model_config = SettingsConfigDict(
        env_prefix="SGLIFE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    debug: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging level"
    )
    default_currency: str = Field(
        default="SGD",
        description="Currency label for reports"
    )
    profiles_dir: Path = Field(
        default=Path.home() / ".sglife" / "profiles",
        description="Directory for saved profiles"
    )

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.debug else self.log_level
