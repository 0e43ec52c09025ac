"""
Built-in module catalog.

Templates are TimelineModule instances with ``age=0`` and ``year=0``.
Cost and income ``start_age``/``end_age`` values on templates are offsets
from the placement age (an endowment paying out 10 years after it starts
has ``income.start_age == 10``); place_module turns them into ages.
Records flagged ``fixed_ages`` (retirement payouts from 65) hold ages.

Categories: Housing, Transport, Family, Education, Career, Health,
Insurance, Savings, Life.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from .costs import FlexibleCost, Frequency
from .exceptions import UnknownModuleError
from .modules import ModuleType, SalaryChange, TimelineModule

__all__ = [
    "CATALOG",
    "CATEGORIES",
    "get_template",
    "list_templates",
]


def _cost(one_time: float = 0.0, monthly: float = 0.0, *, yearly: float = 0.0,
          duration: Optional[float] = None, start: Optional[int] = None,
          end: Optional[int] = None, cpf_usage: float = 0.0,
          fixed_ages: bool = False) -> FlexibleCost:
    if yearly:
        amount, freq = yearly, Frequency.YEARLY
    else:
        amount, freq = monthly, Frequency.MONTHLY
    return FlexibleCost(one_time=one_time, amount=amount, frequency=freq,
                        duration=duration, start_age=start, end_age=end,
                        cpf_usage=cpf_usage, fixed_ages=fixed_ages)


def _template(id: str, type: ModuleType, name: str, category: str, costs: FlexibleCost,
              icon: str, color: str, description: str = "", **extra: Any) -> TimelineModule:
    return TimelineModule(id=id, type=type, name=name, costs=costs, icon=icon,
                          color=color, description=description, category=category,
                          template_id=id, **extra)


_HOUSE = "#ff6b9d"

CATALOG: Tuple[TimelineModule, ...] = (
    # Housing
    _template("bto-1room", ModuleType.HOUSE, "1-Room BTO", "Housing",
              _cost(25000, 600, duration=300, cpf_usage=80), "🏠", _HOUSE),
    _template("bto-2room", ModuleType.HOUSE, "2-Room BTO", "Housing",
              _cost(40000, 1000, duration=300, cpf_usage=80), "🏠", _HOUSE),
    _template("bto-3room", ModuleType.HOUSE, "3-Room BTO", "Housing",
              _cost(60000, 1400, duration=300, cpf_usage=80), "🏠", _HOUSE),
    _template("bto-4room", ModuleType.HOUSE, "4-Room BTO", "Housing",
              _cost(80000, 1800, duration=300, cpf_usage=80), "🏠", _HOUSE),
    _template("bto-5room", ModuleType.HOUSE, "5-Room BTO", "Housing",
              _cost(100000, 2200, duration=300, cpf_usage=80), "🏠", _HOUSE),
    _template("resale-3room", ModuleType.HOUSE, "3-Room Resale HDB", "Housing",
              _cost(90000, 1600, duration=300, cpf_usage=80), "🏘️", _HOUSE),
    _template("resale-4room", ModuleType.HOUSE, "4-Room Resale HDB", "Housing",
              _cost(120000, 2200, duration=300, cpf_usage=80), "🏘️", _HOUSE),
    _template("resale-5room", ModuleType.HOUSE, "5-Room Resale HDB", "Housing",
              _cost(150000, 2600, duration=300, cpf_usage=80), "🏘️", _HOUSE),
    _template("ec", ModuleType.HOUSE, "Executive Condo", "Housing",
              _cost(200000, 3200, duration=300, cpf_usage=60), "🏗️", _HOUSE),
    _template("condo", ModuleType.HOUSE, "Private Condo", "Housing",
              _cost(250000, 3800, duration=300, cpf_usage=50), "🏢", _HOUSE),

    # Transport
    _template("car", ModuleType.CAR, "Car (with COE)", "Transport",
              _cost(120000, 2000, duration=120), "🚗", "#66d9ef"),

    # Family
    _template("marriage", ModuleType.MARRIAGE, "Wedding", "Family",
              _cost(30000), "💑", "#ffeb3b"),
    _template("child1", ModuleType.CHILD, "First Child", "Family",
              _cost(10000, 1500, duration=264), "👶", "#a6e22e"),
    _template("child2", ModuleType.CHILD, "Second Child", "Family",
              _cost(8000, 1200, duration=264), "👶", "#a6e22e"),
    _template("child3", ModuleType.CHILD, "Third Child", "Family",
              _cost(7000, 1100, duration=264), "👶", "#a6e22e"),
    _template("child4", ModuleType.CHILD, "Fourth Child", "Family",
              _cost(6000, 1000, duration=264), "👶", "#a6e22e"),
    _template("child5", ModuleType.CHILD, "Fifth Child", "Family",
              _cost(5000, 900, duration=264), "👶", "#a6e22e"),

    # Education
    _template("masters", ModuleType.EDUCATION, "Masters Degree", "Education",
              _cost(40000, duration=24), "🎓", "#f92672"),

    # Career
    _template("business", ModuleType.CAREER, "Start Business", "Career",
              _cost(50000), "💼", "#fd971f",
              income=_cost(monthly=3000)),
    _template("investment-property", ModuleType.INVESTMENT, "Investment Property", "Career",
              _cost(300000, -2000), "🏦", "#ae81ff",
              description="Negative monthly cost is net rental income"),
    _template("starting-job", ModuleType.CAREER, "Starting Job", "Career",
              _cost(), "💼", "#66d9ef",
              "Your current or starting job - establishes baseline income",
              salary_change=SalaryChange("replace", 5000)),
    _template("change-job", ModuleType.CAREER, "Change Job", "Career",
              _cost(), "🔄", "#66d9ef",
              "Switch to a new job with different salary",
              salary_change=SalaryChange("replace", 6000)),
    _template("side-hustle", ModuleType.CAREER, "Side Hustle", "Career",
              _cost(5000), "💰", "#a6e22e",
              "Additional income stream (freelance, part-time, etc)",
              salary_change=SalaryChange("add", 1500)),
    _template("promotion", ModuleType.CAREER, "Promotion", "Career",
              _cost(), "📈", "#a6e22e",
              "Salary increase (default 20% raise)",
              salary_change=SalaryChange("multiply", 1.2)),
    _template("career-break", ModuleType.CAREER, "Career Break", "Career",
              _cost(), "🏖️", "#fd971f",
              "Temporary pause in active income (sabbatical, parental leave)",
              salary_change=SalaryChange("multiply", 0)),
    _template("full-retirement", ModuleType.RETIREMENT, "Retirement", "Career",
              _cost(), "🏝️", "#ae81ff",
              "Stop active income, live off savings and investments",
              salary_change=SalaryChange("multiply", 0)),

    # Health
    _template("critical-illness-cancer", ModuleType.CUSTOM, "Critical Illness (Cancer)", "Health",
              _cost(80000, 3000, duration=60), "🏥", "#f92672",
              "Cancer diagnosis with five years of treatment costs"),
    _template("major-surgery", ModuleType.CUSTOM, "Major Surgery", "Health",
              _cost(50000, 1000, duration=6), "⚕️", "#f92672",
              "Major surgical procedure with recovery period"),
    _template("hospitalization", ModuleType.CUSTOM, "Hospitalization", "Health",
              _cost(15000), "🏨", "#ff6b9d",
              "Hospital stay and medical treatment"),
    _template("chronic-illness", ModuleType.CUSTOM, "Chronic Illness", "Health",
              _cost(monthly=800, duration=600), "💊", "#fd971f",
              "Ongoing medication and treatment costs"),
    _template("disability", ModuleType.CUSTOM, "Disability (Income Loss)", "Health",
              _cost(monthly=2000, duration=120), "♿", "#f92672",
              "Income loss due to disability"),

    # Insurance
    _template("term-life-insurance-500k", ModuleType.INVESTMENT, "Term Life Insurance ($500K)",
              "Insurance", _cost(monthly=40, duration=360), "🛡️", "#66d9ef",
              "Term life insurance for death/TPD protection"),
    _template("term-life-insurance-1m", ModuleType.INVESTMENT, "Term Life Insurance ($1M)",
              "Insurance", _cost(monthly=75, duration=360), "🛡️", "#66d9ef",
              "Term life insurance for death/TPD protection"),
    _template("whole-life-insurance", ModuleType.INVESTMENT, "Whole Life Insurance",
              "Insurance", _cost(monthly=300, duration=300), "💼", "#ae81ff",
              "Lifetime coverage with savings component"),
    _template("integrated-shield-plan", ModuleType.INVESTMENT, "Integrated Shield Plan",
              "Insurance", _cost(monthly=150, duration=600), "🏥", "#f92672",
              "Enhanced hospitalization coverage"),
    _template("critical-illness-insurance-100k", ModuleType.INVESTMENT,
              "Critical Illness Insurance ($100K)", "Insurance",
              _cost(monthly=80, duration=360), "💊", "#f92672",
              "Lump sum payout for critical illnesses"),
    _template("critical-illness-insurance-200k", ModuleType.INVESTMENT,
              "Critical Illness Insurance ($200K)", "Insurance",
              _cost(monthly=150, duration=360), "💊", "#f92672",
              "Lump sum payout for critical illnesses"),
    _template("income-protection-insurance", ModuleType.INVESTMENT,
              "Income Protection Insurance", "Insurance",
              _cost(monthly=100, duration=360), "💰", "#a6e22e",
              "Monthly payout if unable to work due to disability"),
    _template("early-critical-illness", ModuleType.INVESTMENT, "Early Critical Illness (ECI)",
              "Insurance", _cost(monthly=50, duration=360), "🩺", "#fd971f",
              "Coverage for early-stage critical illnesses"),
    _template("cancer-insurance", ModuleType.INVESTMENT, "Cancer Insurance",
              "Insurance", _cost(monthly=60, duration=360), "🎗️", "#ff6b9d",
              "Specialized cancer coverage with multiple payouts"),

    # Savings
    _template("endowment-plan-short", ModuleType.INVESTMENT, "Endowment Plan (10-year)",
              "Savings", _cost(monthly=500, duration=120), "📊", "#ffeb3b",
              "Short-term savings plan with guaranteed returns",
              income=_cost(70000, start=10)),
    _template("endowment-plan-long", ModuleType.INVESTMENT, "Endowment Plan (25-year)",
              "Savings", _cost(monthly=400, duration=300), "📊", "#ffeb3b",
              "Long-term savings plan with guaranteed returns",
              income=_cost(150000, start=25)),
    _template("ilp-investment-plan", ModuleType.INVESTMENT, "Investment-Linked Policy (ILP)",
              "Savings", _cost(monthly=800, duration=240), "📈", "#ae81ff",
              "Insurance + investment with market-linked returns",
              income=_cost(250000, start=20)),
    _template("retirement-income-plan", ModuleType.INVESTMENT, "Retirement Income Plan",
              "Savings", _cost(monthly=1000, duration=240), "🏖️", "#66d9ef",
              "Guaranteed monthly retirement income from age 65",
              income=_cost(monthly=2000, start=65, end=90, fixed_ages=True)),
    _template("childrens-education-plan", ModuleType.INVESTMENT, "Children's Education Plan",
              "Savings", _cost(monthly=600, duration=180), "🎓", "#a6e22e",
              "Education savings plan with a payout after 18 years",
              income=_cost(150000, start=18)),
    _template("srs-contribution", ModuleType.INVESTMENT, "SRS Annual Contribution",
              "Savings", _cost(yearly=15300, duration=30), "💼", "#66d9ef",
              "Supplementary Retirement Scheme, withdrawn from 65 to 75",
              income=_cost(monthly=1500, start=65, end=75, fixed_ages=True)),

    # Life
    _template("death", ModuleType.CUSTOM, "End of Life", "Life",
              _cost(), "🕊️", "#8a8a8a",
              "Expected end of life - movable to adjust your planning horizon"),
)

CATEGORIES: Tuple[str, ...] = tuple(dict.fromkeys(t.category for t in CATALOG))

_BY_ID: Dict[str, TimelineModule] = {t.id: t for t in CATALOG}


def get_template(template_id: str) -> TimelineModule:
    """Return the catalog template with *template_id*."""
    try:
        return _BY_ID[template_id]
    except KeyError:
        raise UnknownModuleError(f"No catalog template with id '{template_id}'") from None


def list_templates(category: Optional[str] = None,
                   type: Optional[ModuleType] = None) -> List[TimelineModule]:
    """Templates in catalog order, optionally filtered by category and/or type."""
    out = list(CATALOG)
    if category is not None:
        out = [t for t in out if t.category.lower() == category.lower()]
    if type is not None:
        kind = ModuleType(type)
        out = [t for t in out if t.type == kind]
    return out
