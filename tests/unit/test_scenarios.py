"""
Unit tests for scenarios.py module.

Tests the PlanningContext: module placement and editing on the active
scenario, branching, switching, duplication, deletion, the custom module
library and scenario comparison.
"""

import pandas as pd
import pytest

from sglife.catalog import get_template
from sglife.config import ProjectionConfig
from sglife.exceptions import (
    ScenarioNotFoundError,
    TimelineError,
    UnknownModuleError,
    ValidationError,
)
from sglife.modules import ModuleCustomization, TimelineModule, create_custom_module
from sglife.scenarios import PlanningContext, Scenario, ScenarioColor


# ============================================================================
# CONTEXT
# ============================================================================

class TestPlanningContextInit:

    def test_starts_with_main(self, context):
        assert len(context.scenarios) == 1
        main = context.active
        assert main.name == "Main"
        assert main.id.startswith("scenario-")
        assert main.color == ScenarioColor.palette()[0]
        assert context.modules == []

    def test_active_views_are_scenario_state(self, context, default_state):
        assert context.financial is default_state
        assert context.modules is context.active.modules

    def test_from_scenarios_needs_one(self):
        with pytest.raises(ValidationError):
            PlanningContext.from_scenarios([])

    def test_from_scenarios_unknown_active_falls_back(self, populated_context):
        rebuilt = PlanningContext.from_scenarios(populated_context.scenarios, "missing")
        assert rebuilt.active_scenario_id == populated_context.scenarios[0].id

    def test_from_scenarios_continues_sequence(self, populated_context):
        rebuilt = PlanningContext.from_scenarios(populated_context.scenarios)
        placed = rebuilt.place_module("car", 40)
        assert placed.sequence > max(m.sequence for m in populated_context.modules)


# ============================================================================
# MODULE OPERATIONS
# ============================================================================

class TestModuleOperations:

    def test_place_by_id(self, context, default_state):
        placed = context.place_module("car", 35)
        assert context.modules == [placed]
        assert placed.year == default_state.current_year + 5
        assert placed.template_id == "car"

    def test_place_instance(self, context):
        placed = context.place_module(get_template("marriage"), 31)
        assert placed.template_id == "marriage"

    def test_sequences_increase(self, context):
        a = context.place_module("car", 35)
        b = context.place_module("promotion", 35)
        assert b.sequence > a.sequence

    def test_same_template_twice_distinct_ids(self, context):
        a = context.place_module("child1", 33)
        b = context.place_module("child1", 35)
        assert a.id != b.id

    def test_place_before_current_age(self, context):
        with pytest.raises(TimelineError, match="current age"):
            context.place_module("car", 29)

    def test_place_unknown_template(self, context):
        with pytest.raises(UnknownModuleError):
            context.place_module("yacht", 40)

    def test_place_house_with_customization(self, context):
        custom = ModuleCustomization(cpf_usage=50, enhanced_grant=0)
        placed = context.place_module("bto-4room", 32, custom)
        assert placed.costs.cpf_usage == 50
        assert placed.costs.grants == 0

    def test_add_module_recomputes_year(self, context, default_state):
        m = TimelineModule(id="gift", type="custom", name="Gift", age=40, year=1999)
        added = context.add_module(m)
        assert added.year == default_state.current_year + 10
        assert added.sequence > 0

    def test_add_module_duplicate_id_renamed(self, context):
        m = TimelineModule(id="gift", type="custom", name="Gift", age=40)
        first = context.add_module(m)
        second = context.add_module(m)
        assert first.id == "gift"
        assert second.id != "gift"

    def test_remove(self, populated_context):
        target = populated_context.modules[0]
        removed = populated_context.remove_module(target.id)
        assert removed is target
        assert target not in populated_context.modules

    def test_remove_unknown(self, context):
        with pytest.raises(UnknownModuleError):
            context.remove_module("nope")

    def test_move_recomputes_year_and_bounds(self, context, default_state):
        plan = context.place_module("endowment-plan-short", 35)
        moved = context.move_module(plan.id, 40)
        assert moved.year == default_state.current_year + 10
        assert moved.income.start_age == 50
        assert context.get_module(plan.id) is moved

    def test_move_before_current_age(self, populated_context):
        target = populated_context.modules[0]
        with pytest.raises(TimelineError):
            populated_context.move_module(target.id, 20)

    def test_update_fields(self, populated_context):
        target = populated_context.modules[0]
        updated = populated_context.update_module(target.id, name="Big Wedding")
        assert updated.name == "Big Wedding"
        assert populated_context.get_module(target.id).name == "Big Wedding"

    def test_update_age_moves(self, populated_context, default_state):
        target = populated_context.modules[0]
        updated = populated_context.update_module(target.id, age=40, name="Late Wedding")
        assert updated.age == 40
        assert updated.year == default_state.current_year + 10
        assert updated.name == "Late Wedding"

    def test_reset_timeline(self, populated_context):
        populated_context.reset_timeline()
        assert populated_context.modules == []


# ============================================================================
# FINANCIAL STATE
# ============================================================================

class TestFinancialOperations:

    def test_updates_go_to_active(self, context):
        context.update_income(7000, annual_bonus=0)
        context.update_salary_growth_rate(2)
        context.update_starting_capital(cash_savings=1000)
        context.update_savings(700)
        fin = context.active.financial
        assert fin.monthly_income == 7000
        assert fin.salary_growth_rate == 2
        assert fin.cash_savings == 1000
        assert fin.savings_rate == pytest.approx(10.0)

    def test_update_savings_rate(self, context):
        context.update_savings_rate(25)
        assert context.financial.monthly_savings == pytest.approx(1250.0)

    def test_branch_state_isolated(self, context):
        context.create_branch("High income")
        context.update_income(9000)
        main = context.scenarios[0]
        assert main.financial.monthly_income == 5000


# ============================================================================
# SCENARIO OPERATIONS
# ============================================================================

class TestBranching:

    def test_create_branch(self, populated_context):
        parent = populated_context.active
        branch = populated_context.create_branch("Condo", description="Skip BTO")
        assert populated_context.active is branch
        assert branch.branched_from == parent.id
        assert branch.branch_age == parent.financial.current_age
        assert branch.description == "Skip BTO"
        assert branch.color != parent.color
        assert branch.modules == parent.modules
        assert branch.modules is not parent.modules

    def test_branch_edits_do_not_leak(self, populated_context):
        main = populated_context.active
        populated_context.create_branch("No kids")
        child = next(m for m in populated_context.modules if m.is_child)
        populated_context.remove_module(child.id)
        assert any(m.is_child for m in main.modules)

    def test_branch_name_required(self, context):
        with pytest.raises(ValidationError, match="name"):
            context.create_branch("   ")

    def test_explicit_branch_age_and_color(self, context):
        color = ScenarioColor("custom", "Custom", "#123456", "#000000")
        branch = context.create_branch("Later", color=color, branch_age=40)
        assert branch.branch_age == 40
        assert branch.color == color

    def test_switch(self, context):
        main_id = context.active_scenario_id
        context.create_branch("Alt")
        context.switch_scenario(main_id)
        assert context.active_scenario_id == main_id

    def test_switch_unknown(self, context):
        with pytest.raises(ScenarioNotFoundError):
            context.switch_scenario("scenario-missing")

    def test_colors_cycle_after_palette(self, context):
        for i in range(len(ScenarioColor.palette()) - 1):
            context.create_branch(f"B{i}")
        used = {s.color.id for s in context.scenarios}
        assert used == {c.id for c in ScenarioColor.palette()}
        ninth = context.create_branch("Ninth")
        assert ninth.color in ScenarioColor.palette()


class TestDeleteRenameDuplicate:

    def test_delete_inactive(self, context):
        main_id = context.active_scenario_id
        alt = context.create_branch("Alt")
        context.switch_scenario(main_id)
        context.delete_scenario(alt.id)
        assert [s.id for s in context.scenarios] == [main_id]

    def test_delete_active_falls_back_to_first(self, context):
        main_id = context.active_scenario_id
        alt = context.create_branch("Alt")
        context.delete_scenario(alt.id)
        assert context.active_scenario_id == main_id

    def test_cannot_delete_last(self, context):
        with pytest.raises(ValidationError, match="only scenario"):
            context.delete_scenario(context.active_scenario_id)

    def test_delete_unknown(self, context):
        with pytest.raises(ScenarioNotFoundError):
            context.delete_scenario("nope")

    def test_rename(self, context):
        context.rename_scenario(context.active_scenario_id, "  Base case ")
        assert context.active.name == "Base case"

    def test_rename_blank(self, context):
        with pytest.raises(ValidationError):
            context.rename_scenario(context.active_scenario_id, "")

    def test_recolor(self, context):
        color = ScenarioColor.palette()[3]
        context.recolor_scenario(context.active_scenario_id, color)
        assert context.active.color == color

    def test_duplicate_deep_equal_identity_distinct(self, populated_context):
        source = populated_context.active
        dup = populated_context.duplicate_scenario(source.id)
        assert dup.name == "Main (Copy)"
        assert dup.id != source.id
        assert populated_context.active is source
        assert dup.modules == source.modules
        assert dup.financial == source.financial
        assert dup.modules is not source.modules
        assert dup.financial is not source.financial
        assert all(a is not b for a, b in zip(dup.modules, source.modules))

    def test_duplicate_custom_name(self, context):
        dup = context.duplicate_scenario(context.active_scenario_id, "Plan B")
        assert dup.name == "Plan B"


# ============================================================================
# CUSTOM MODULE LIBRARY
# ============================================================================

class TestCustomLibrary:

    def test_add_and_place(self, context):
        stored = context.add_custom_module(create_custom_module("Gym", 150, "monthly"))
        assert stored in context.custom_modules
        placed = context.place_module(stored.id, 35)
        assert placed.is_custom
        assert placed.template_id == stored.id
        assert placed.costs.annual_amount() == pytest.approx(1800.0)

    def test_library_shared_across_scenarios(self, context):
        stored = context.add_custom_module(create_custom_module("Gym", 150, "monthly"))
        context.create_branch("Alt")
        assert context.place_module(stored.id, 40).template_id == stored.id

    def test_update_and_delete(self, context):
        stored = context.add_custom_module(create_custom_module("Gym", 150, "monthly"))
        updated = context.update_custom_module(stored.id, name="Yoga")
        assert updated.name == "Yoga"
        context.delete_custom_module(stored.id)
        assert context.custom_modules == []

    def test_unknown_custom(self, context):
        with pytest.raises(UnknownModuleError):
            context.delete_custom_module("custom-missing")


# ============================================================================
# PROJECTION & COMPARISON
# ============================================================================

class TestComparison:

    def test_project_active(self, populated_context):
        result = populated_context.project()
        assert result.start_age == 30
        assert len(result.modules) == 3

    def test_project_uses_context_config(self, default_state):
        ctx = PlanningContext(default_state, config=ProjectionConfig(terminal_age=80))
        assert ctx.project().final.age == 80

    def test_compare_columns(self, populated_context):
        populated_context.create_branch("No flat")
        flat = next(m for m in populated_context.modules if m.is_house)
        populated_context.remove_module(flat.id)
        df = populated_context.compare_scenarios()
        assert isinstance(df, pd.DataFrame)
        assert list(df.columns) == [
            "name", "final_net_worth", "net_worth_at_retirement", "peak_monthly_cash_flow",
            "module_count", "cash_depletion_age", "active",
        ]
        assert list(df["name"]) == ["Main", "No flat"]
        assert list(df["module_count"]) == [3, 2]
        assert df["active"].sum() == 1

    def test_compare_subset(self, populated_context):
        main_id = populated_context.active_scenario_id
        populated_context.create_branch("Alt")
        df = populated_context.compare_scenarios([main_id])
        assert list(df.index) == [main_id]

    def test_compare_empty_selection(self, context):
        df = context.compare_scenarios([])
        assert df.empty
        assert "final_net_worth" in df.columns

    def test_compare_unknown(self, context):
        with pytest.raises(ScenarioNotFoundError):
            context.compare_scenarios(["nope"])


class TestScenarioWire:

    def test_dict_roundtrip(self, populated_context):
        branch = populated_context.create_branch("Alt", branch_age=33)
        restored = Scenario.from_dict(branch.to_dict())
        assert restored.id == branch.id
        assert restored.branched_from == branch.branched_from
        assert restored.branch_age == 33
        assert restored.modules == branch.modules
        assert restored.financial == branch.financial

    def test_main_has_no_lineage(self, context):
        data = context.active.to_dict()
        assert "branchedFrom" not in data and "branchAge" not in data
