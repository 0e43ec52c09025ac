"""
Projection engine.

Purpose
-------
Year-by-year deterministic simulation of salary, CPF accounts, cash and net
worth from a starting FinancialState and a list of TimelineModules, from
``start_age`` to the terminal age (123 by default) inclusive.

Per-year algorithm
------------------
For each age ``a``:

1. Base salary grows by ``salary_growth_rate`` for ``a > start_age``.
2. Salary changes of modules placed at ``a`` apply in ascending
   ``sequence`` (stable on list order): replace, add (side income), multiply.
3. ``monthly_income = base + additional``;
   ``annual_income = monthly_income * 12 + annual_bonus``.
4. Recurring costs of every active module are annualized and summed.
5. One-time effects at each record's start age: grants accumulate, house
   modules with CPF usage draw ``min(cpf_share, OA)`` from OA and put the
   rest on cash, other modules pay ``one_time`` in cash, child modules add
   the baby bonus. Module income (recurring and one-time) is summed.
6. CPF contribution ``min(monthly_income, ceiling) * rate * 12`` split by
   the age-banded allocation ratios.
7. Interest: OA x 1.025, SA x 1.04, MA x 1.04 (plus optional extra interest).
8. ``cash_flow = take_home - expenses - one_time_costs + grants + module_income``
   with ``take_home = annual_income * (1 - rate)``.
9. Snapshot rounded to whole dollars; cash flow reported per month.

The engine is pure: inputs are never mutated and no I/O happens. Negative
cash is reported, never raised. Non-finite inputs raise ValidationError.

Example
-------
>>> from sglife.state import FinancialState
>>> from sglife.engine import run_projection
>>> result = run_projection(30, FinancialState(), [])
>>> len(result)
94
>>> result.final.age
123
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

import pandas as pd

from .config import ProjectionConfig
from .constants import MONTHS_PER_YEAR, RA_INTEREST_RATE, RETIREMENT_TARGET_AGE
from .exceptions import ConfigurationError, ValidationError
from .modules import TimelineModule
from .rates import cpf_allocation_ratios, cpf_contribution_rate, extra_interest
from .state import FinancialState
from .types import SnapshotDict
from .utils import check_finite, round_currency

__all__ = [
    "YearSnapshot",
    "ModuleFunding",
    "ProjectionResult",
    "simulate",
    "run_projection",
]

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class YearSnapshot:
    """One projected year. Currency fields are whole dollars."""
    age: int
    year: int
    net_worth: int
    cash_flow: int
    cpf_total: int
    cpf_oa: int
    cpf_sa: int
    cpf_ma: int
    cpf_ra: int
    cash_savings: int
    monthly_income: int
    annual_expenses: int
    grants_received: int
    module_income: int
    investments: int

    def to_dict(self) -> SnapshotDict:
        """camelCase mapping as used by exported profiles and charts."""
        return {
            "year": self.year,
            "age": self.age,
            "netWorth": self.net_worth,
            "cashFlow": self.cash_flow,
            "cpfTotal": self.cpf_total,
            "cpfOA": self.cpf_oa,
            "cpfSA": self.cpf_sa,
            "cpfMA": self.cpf_ma,
            "cpfRA": self.cpf_ra,
            "cashSavings": self.cash_savings,
            "monthlyIncome": self.monthly_income,
            "annualExpenses": self.annual_expenses,
            "grantsReceived": self.grants_received,
            "moduleIncome": self.module_income,
            "investments": self.investments,
        }


@dataclass(frozen=True)
class ModuleFunding:
    """How a house module's up-front cost was split between CPF OA and cash."""
    module_id: str
    age: int
    cpf_deduction: float
    cash_required: float


@dataclass(frozen=True)
class ProjectionResult:
    """
    Output of run_projection.

    Attributes
    ----------
    snapshots : list of YearSnapshot
        One per age from ``start_age`` to the terminal age.
    funding : dict
        ModuleFunding keyed by module id, for house modules drawing on CPF.
    modules : tuple of TimelineModule
        Modules the projection ran on (unchanged).
    start_age : int
    config : ProjectionConfig

    Methods
    -------
    at_age(age) -> YearSnapshot or None
    annotated_modules() -> list of TimelineModule
    to_frame() -> pd.DataFrame
    cash_depletion_age() -> int or None
    summary() -> dict
    """
    snapshots: List[YearSnapshot]
    funding: Dict[str, ModuleFunding]
    modules: Tuple[TimelineModule, ...]
    start_age: int
    config: ProjectionConfig = field(default_factory=ProjectionConfig)

    def __len__(self) -> int:
        return len(self.snapshots)

    def __iter__(self) -> Iterator[YearSnapshot]:
        return iter(self.snapshots)

    @property
    def final(self) -> YearSnapshot:
        return self.snapshots[-1]

    def at_age(self, age: int) -> Optional[YearSnapshot]:
        idx = age - self.start_age
        if 0 <= idx < len(self.snapshots):
            return self.snapshots[idx]
        return None

    def annotated_modules(self) -> List[TimelineModule]:
        """Copies of the modules with ``cpf_deduction``/``cash_required`` set."""
        out = []
        for m in self.modules:
            f = self.funding.get(m.id)
            if f is None:
                out.append(m)
            else:
                out.append(m.updated(costs=m.costs.with_funding(f.cpf_deduction, f.cash_required)))
        return out

    def to_frame(self) -> pd.DataFrame:
        """Snapshots as a DataFrame indexed by age (snake_case columns)."""
        rows = [asdict(s) for s in self.snapshots]
        df = pd.DataFrame(rows)
        if df.empty:
            return df
        return df.set_index("age")

    def cash_depletion_age(self) -> Optional[int]:
        """First age at which cash savings are negative, if any."""
        for s in self.snapshots:
            if s.cash_savings < 0:
                return s.age
        return None

    def summary(self, retirement_age: int = RETIREMENT_TARGET_AGE) -> Dict[str, Optional[float]]:
        at_retirement = self.at_age(retirement_age)
        return {
            "start_age": self.start_age,
            "final_net_worth": self.final.net_worth,
            "net_worth_at_retirement": at_retirement.net_worth if at_retirement else None,
            "peak_monthly_cash_flow": max(s.cash_flow for s in self.snapshots),
            "cash_depletion_age": self.cash_depletion_age(),
            "cpf_total_at_retirement": at_retirement.cpf_total if at_retirement else None,
        }


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def _validate_inputs(start_age, state: FinancialState,
                     modules: Sequence[TimelineModule], config: ProjectionConfig) -> int:
    start = check_finite("start_age", start_age)
    if start != int(start):
        raise ValidationError(f"start_age must be a whole number (got {start_age})")
    start = int(start)
    if start > config.terminal_age:
        raise ConfigurationError(
            f"start_age ({start}) is beyond terminal_age ({config.terminal_age})"
        )
    state.validate()
    for m in modules:
        if not isinstance(m, TimelineModule):
            raise ValidationError(f"Expected TimelineModule, got {type(m).__name__}")
    return start


def _extra_interest_credit(age: int, oa: float, sa: float, ma: float,
                           ra: Optional[float]) -> Tuple[float, float, float]:
    """Extra interest routed to (SA, MA, RA). From 55 OA/SA/RA extra goes to RA when held."""
    ei = extra_interest(age, oa, sa, ma, ra or 0.0)
    to_pool = ei["OA"] + ei["SA"] + ei["RA"]
    if age >= 55 and ra is not None:
        return 0.0, ei["MA"], to_pool
    return to_pool, ei["MA"], 0.0


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

def run_projection(
    start_age: int,
    state: FinancialState,
    modules: Sequence[TimelineModule],
    config: Optional[ProjectionConfig] = None,
) -> ProjectionResult:
    """
    Project net worth, cash flow and CPF balances year by year.

    Parameters
    ----------
    start_age : int
        First simulated age (normally ``state.current_age``).
    state : FinancialState
        Starting position. Not modified.
    modules : sequence of TimelineModule
        Placed life events. Not modified.
    config : ProjectionConfig, optional
        Engine parameters; defaults to ProjectionConfig().

    Returns
    -------
    ProjectionResult
        ``terminal_age - start_age + 1`` snapshots with contiguous ages.

    Raises
    ------
    ValidationError
        Non-finite numbers in the state or a module.
    ConfigurationError
        ``start_age`` beyond the terminal age.
    """
    config = config or ProjectionConfig()
    start = _validate_inputs(start_age, state, modules, config)
    modules = tuple(modules)

    by_sequence = sorted(modules, key=lambda m: m.sequence)
    salary_changes: Dict[int, List[TimelineModule]] = {}
    for m in by_sequence:
        if m.salary_change is not None:
            salary_changes.setdefault(m.age, []).append(m)

    cpf = state.cpf_balances
    oa, sa, ma = cpf.ordinary, cpf.special, cpf.medisave
    ra = cpf.retirement
    cash = state.cash_savings
    investments = state.investments
    base_salary = state.monthly_income
    additional = 0.0
    growth = state.salary_growth_rate / 100.0

    snapshots: List[YearSnapshot] = []
    funding: Dict[str, ModuleFunding] = {}
    depleted_at: Optional[int] = None

    logger.debug(
        "Projecting ages %d-%d with %d modules (extra_interest=%s)",
        start, config.terminal_age, len(modules), config.extra_interest,
    )

    for age in range(start, config.terminal_age + 1):
        year = state.current_year + (age - start)

        # 1-3. Salary
        if age > start:
            base_salary *= 1.0 + growth
        for m in salary_changes.get(age, ()):
            base_salary, additional = m.salary_change.apply(base_salary, additional)
        monthly_income = base_salary + additional
        annual_income = monthly_income * MONTHS_PER_YEAR + state.annual_bonus

        # 4-5. Module effects
        annual_expenses = 0.0
        one_time_costs = 0.0
        grants = 0.0
        module_income = 0.0

        for m in modules:
            costs = m.costs
            annual_expenses += costs.recurring_for_age(age, m.age)

            if costs.one_time_age(m.age) == age:
                grants += costs.grants
                gross = costs.one_time + costs.grants
                if m.is_house and costs.cpf_usage > 0:
                    share = costs.cpf_usage / 100.0
                    cpf_amount = gross * share
                    cash_amount = gross * (1.0 - share)
                    deduction = min(cpf_amount, max(oa, 0.0))
                    oa -= deduction
                    cash_required = cash_amount + (cpf_amount - deduction)
                    one_time_costs += cash_required
                    funding[m.id] = ModuleFunding(m.id, age, deduction, cash_required)
                else:
                    one_time_costs += costs.one_time

            if m.is_child and m.age == age:
                grants += config.baby_bonus

            if m.income is not None:
                module_income += m.income.recurring_for_age(age, m.age)
                if m.income.one_time_age(m.age) == age:
                    module_income += m.income.one_time

        # 6. CPF contributions
        rate = cpf_contribution_rate(age)
        contribution = min(monthly_income, config.ordinary_wage_ceiling) * rate * MONTHS_PER_YEAR
        oa_ratio, sa_ratio, ma_ratio = cpf_allocation_ratios(age)
        oa += contribution * oa_ratio
        sa += contribution * sa_ratio
        ma += contribution * ma_ratio

        # 7. Interest
        extra = _extra_interest_credit(age, oa, sa, ma, ra) if config.extra_interest else None
        oa *= 1.0 + config.oa_interest
        sa *= 1.0 + config.sa_interest
        ma *= 1.0 + config.ma_interest
        if ra is not None:
            ra *= 1.0 + RA_INTEREST_RATE
        if extra is not None:
            sa += extra[0]
            ma += extra[1]
            if ra is not None:
                ra += extra[2]

        # 8. Cash flow
        take_home = annual_income * (1.0 - rate)
        cash_flow = take_home - annual_expenses - one_time_costs + grants + module_income
        cash += cash_flow

        if cash < 0 and depleted_at is None:
            depleted_at = age

        # 9. Snapshot
        # Totals are sums of the rounded fields
        r_oa, r_sa, r_ma = round_currency(oa), round_currency(sa), round_currency(ma)
        r_ra = round_currency(ra or 0.0)
        r_cash, r_investments = round_currency(cash), round_currency(investments)
        cpf_total = r_oa + r_sa + r_ma + r_ra
        snapshots.append(YearSnapshot(
            age=age,
            year=year,
            net_worth=r_cash + cpf_total + r_investments,
            cash_flow=round_currency(cash_flow / MONTHS_PER_YEAR),
            cpf_total=cpf_total,
            cpf_oa=r_oa,
            cpf_sa=r_sa,
            cpf_ma=r_ma,
            cpf_ra=r_ra,
            cash_savings=r_cash,
            monthly_income=round_currency(monthly_income),
            annual_expenses=round_currency(annual_expenses),
            grants_received=round_currency(grants),
            module_income=round_currency(module_income),
            investments=r_investments,
        ))

    if depleted_at is not None:
        logger.warning("Cash savings turn negative at age %d", depleted_at)

    return ProjectionResult(
        snapshots=snapshots,
        funding=funding,
        modules=modules,
        start_age=start,
        config=config,
    )


def simulate(
    start_age: int,
    state: FinancialState,
    modules: Sequence[TimelineModule],
    config: Optional[ProjectionConfig] = None,
) -> List[YearSnapshot]:
    """Snapshot list of run_projection (see there)."""
    return run_projection(start_age, state, modules, config).snapshots
