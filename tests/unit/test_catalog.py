"""
Unit tests for catalog.py module.
"""

import pytest

from sglife.catalog import CATALOG, CATEGORIES, get_template, list_templates
from sglife.exceptions import UnknownModuleError
from sglife.modules import ModuleType, SalaryChangeType


class TestCatalog:

    def test_ids_unique(self):
        ids = [t.id for t in CATALOG]
        assert len(ids) == len(set(ids))

    def test_templates_unplaced(self):
        for t in CATALOG:
            assert t.age == 0 and t.year == 0
            assert t.template_id == t.id

    def test_categories(self):
        assert CATEGORIES == (
            "Housing", "Transport", "Family", "Education", "Career",
            "Health", "Insurance", "Savings", "Life",
        )

    def test_house_templates_use_cpf(self):
        houses = list_templates(type=ModuleType.HOUSE)
        assert len(houses) == 10
        assert all(h.costs.cpf_usage > 0 for h in houses)

    def test_children_are_child_type(self):
        children = [t for t in list_templates(category="Family") if t.id.startswith("child")]
        assert len(children) == 5
        assert all(c.is_child for c in children)

    def test_promotion_multiplies(self):
        promo = get_template("promotion")
        assert promo.salary_change.type is SalaryChangeType.MULTIPLY
        assert promo.salary_change.amount == pytest.approx(1.2)

    def test_investment_property_nets_rent(self):
        assert get_template("investment-property").costs.annual_amount() == pytest.approx(-24000.0)

    def test_srs_yearly_contribution(self):
        srs = get_template("srs-contribution")
        assert srs.costs.annual_amount() == pytest.approx(15300.0)
        assert srs.income.fixed_ages
        assert srs.income.recurring_bounds(0) == (65, 75)

    def test_retirement_income_pays_from_65(self):
        plan = get_template("retirement-income-plan")
        assert plan.income.fixed_ages
        assert (plan.income.start_age, plan.income.end_age) == (65, 90)
        assert plan.income.annual_amount() == pytest.approx(24000.0)

    def test_savings_plan_payouts_stay_relative(self):
        assert not get_template("endowment-plan-long").income.fixed_ages
        assert not get_template("childrens-education-plan").income.fixed_ages

    def test_unknown_template(self):
        with pytest.raises(UnknownModuleError, match="yacht"):
            get_template("yacht")

    def test_category_filter_case_insensitive(self):
        assert list_templates(category="housing") == list_templates(category="Housing")

    def test_type_filter_accepts_string(self):
        assert list_templates(type="career") == list_templates(type=ModuleType.CAREER)

    def test_unfiltered_is_full_catalog(self):
        assert list_templates() == list(CATALOG)
