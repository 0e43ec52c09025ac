"""
Integration test for the full sglife workflow.

Builds a plan, branches it into alternative scenarios, compares them,
checks retirement readiness and carries the plan through a profile file.
"""

import pytest

from sglife.config import ProjectionConfig
from sglife.goals import RetirementGoal
from sglife.modules import ModuleCustomization
from sglife.catalog import get_template
from sglife.scenarios import PlanningContext
from sglife.serialization import export_profile, import_profile, load_profile, save_profile
from sglife.state import FinancialState


@pytest.mark.integration
class TestFullWorkflow:
    """Plan -> branch -> compare -> goal -> profile round trip."""

    @pytest.fixture
    def plan(self, current_year):
        state = FinancialState(current_age=28, current_year=current_year, monthly_income=4500)
        ctx = PlanningContext(state, config=ProjectionConfig(terminal_age=90))
        ctx.place_module("marriage", 30)
        bto = get_template("bto-4room")
        ctx.place_module(bto, 31, ModuleCustomization.for_template(bto, cpf_usage=100))
        return ctx

    def test_branch_compare_and_goal(self, plan):
        main_id = plan.active_scenario_id

        # 1. Branch: promotion at 35
        branch = plan.create_branch("Promotion")
        plan.place_module("promotion", 35)
        assert plan.active_scenario_id == branch.id
        assert len(plan.get_scenario(main_id).modules) == 2
        assert len(branch.modules) == 3

        # 2. Projections differ only after the promotion
        main = plan.project(main_id)
        promoted = plan.project(branch.id)
        assert main.at_age(34).monthly_income == pytest.approx(promoted.at_age(34).monthly_income)
        assert promoted.at_age(36).monthly_income > main.at_age(36).monthly_income
        assert main.final.age == 90

        # 3. Compare
        table = plan.compare_scenarios()
        assert list(table["name"]) == ["Main", "Promotion"]
        assert table.loc[branch.id, "active"]
        assert table.loc[branch.id, "module_count"] == 3

        # 4. Goal
        readiness = RetirementGoal(target_age=65).evaluate(promoted, current_age=28)
        assert readiness.years_to_retirement == 37
        assert readiness.projected_net_worth == pytest.approx(promoted.at_age(65).net_worth)

    def test_house_draws_on_cpf(self, plan):
        result = plan.project()
        house = next(m for m in plan.modules if m.is_house)
        assert house.costs.cpf_usage == 100
        funding = result.funding[house.id]
        assert funding.cpf_deduction > 0
        assert funding.age == 31

    def test_profile_roundtrip(self, plan, tmp_path):
        plan.create_branch("Renting")
        bto = next(m for m in plan.modules if m.is_house)
        plan.remove_module(bto.id)

        path = save_profile(export_profile(plan, "Starter"), tmp_path / "starter.json")
        restored = import_profile(PlanningContext(config=plan.config), load_profile(path))

        assert [s.name for s in restored.scenarios] == ["Main", "Renting"]
        assert restored.active.name == "Renting"
        for original, copy in zip(plan.scenarios, restored.scenarios):
            before = plan.project(original.id).final.net_worth
            after = restored.project(copy.id).final.net_worth
            assert after == pytest.approx(before)
