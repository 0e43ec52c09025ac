"""
Unit tests for CLI module.

Tests command-line interface functionality using Click's testing utilities.
"""

import json

import matplotlib
matplotlib.use('Agg')

import pytest
from click.testing import CliRunner

from sglife.cli import main, __version__
from sglife.scenarios import PlanningContext
from sglife.serialization import export_profile, save_profile


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def runner():
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture
def temp_profile(tmp_path, populated_context):
    """Profile with a Main scenario and a 'Renting' branch."""
    populated_context.create_branch("Renting")
    bto = next(m for m in populated_context.modules if m.template_id == "bto-4room")
    populated_context.remove_module(bto.id)
    data = export_profile(populated_context, "Family Plan")
    return save_profile(data, tmp_path / "family-plan-life-plan.json")


# ============================================================================
# MAIN
# ============================================================================

class TestMainCommand:

    def test_main_help(self, runner):
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        assert "project" in result.output
        assert "profile" in result.output

    def test_main_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


# ============================================================================
# PROJECT
# ============================================================================

class TestProjectCommand:

    def test_project_quiet_rows(self, runner):
        result = runner.invoke(main, ["-q", "project", "--age", "30"])
        assert result.exit_code == 0
        lines = result.output.strip().splitlines()
        assert lines[0].startswith("30\t")
        assert lines[-1].startswith("123\t")
        assert len(lines) == 20

    def test_project_step(self, runner):
        result = runner.invoke(main, ["-q", "project", "--age", "30", "--step", "10"])
        assert result.exit_code == 0
        ages = [line.split("\t")[0] for line in result.output.strip().splitlines()]
        assert ages[:3] == ["30", "40", "50"]
        assert ages[-1] == "123"

    def test_project_bad_step(self, runner):
        result = runner.invoke(main, ["project", "--step", "0"])
        assert result.exit_code != 0

    def test_project_rich_table(self, runner):
        result = runner.invoke(main, ["project", "--age", "30", "-m", "bto-4room@32"])
        assert result.exit_code == 0
        assert "Projection: Main" in result.output

    def test_project_bad_placement_syntax(self, runner):
        result = runner.invoke(main, ["project", "-m", "bto-4room"])
        assert result.exit_code != 0
        assert "TEMPLATE@AGE" in result.output

    def test_project_unknown_template(self, runner):
        result = runner.invoke(main, ["-q", "project", "-m", "yacht@40"])
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_project_placement_in_past(self, runner):
        result = runner.invoke(main, ["-q", "project", "--age", "40", "-m", "car@35"])
        assert result.exit_code == 1

    def test_project_csv_output(self, runner, tmp_path):
        out = tmp_path / "snapshots.csv"
        result = runner.invoke(main, ["-q", "project", "--age", "30", "-o", str(out)])
        assert result.exit_code == 0
        header = out.read_text().splitlines()[0]
        assert header.startswith("age,")
        assert "net_worth" in header

    def test_project_json_output(self, runner, tmp_path):
        out = tmp_path / "snapshots.json"
        result = runner.invoke(main, ["project", "--age", "30", "-o", str(out)])
        assert result.exit_code == 0
        assert "Snapshots saved" in result.output
        data = json.loads(out.read_text())
        assert len(data) == 94
        assert data[0]["age"] == 30
        assert "netWorth" in data[0]

    def test_project_profile_scenario(self, runner, temp_profile):
        result = runner.invoke(main, ["project", "-p", str(temp_profile)])
        assert result.exit_code == 0
        assert "Projection: Renting" in result.output

    def test_project_unknown_scenario(self, runner, temp_profile):
        result = runner.invoke(main, ["-q", "project", "-p", str(temp_profile), "-s", "nope"])
        assert result.exit_code == 1

    def test_project_profile_rejects_age_and_income(self, runner, temp_profile):
        for extra in (["--age", "40"], ["--income", "9000"]):
            result = runner.invoke(main, ["-q", "project", "-p", str(temp_profile)] + extra)
            assert result.exit_code == 2
            assert "cannot be combined with --profile" in result.output

    def test_project_profile_extra_interest(self, runner, temp_profile):
        def final_net_worth(*flags):
            result = runner.invoke(main, ["-q", "project", "-p", str(temp_profile), *flags])
            assert result.exit_code == 0
            return float(result.output.strip().splitlines()[-1].split("\t")[2])

        assert final_net_worth("--extra-interest") > final_net_worth()

    def test_project_plot(self, runner, tmp_path):
        chart = tmp_path / "chart.png"
        result = runner.invoke(main, ["-q", "project", "--age", "30", "--plot", str(chart)])
        assert result.exit_code == 0
        assert chart.exists()


# ============================================================================
# COMPARE
# ============================================================================

class TestCompareCommand:

    def test_compare_plain(self, runner, temp_profile):
        result = runner.invoke(main, ["-q", "compare", str(temp_profile)])
        assert result.exit_code == 0
        names = [line.split("\t")[0] for line in result.output.strip().splitlines()]
        assert names == ["Main", "Renting"]

    def test_compare_rich(self, runner, temp_profile):
        result = runner.invoke(main, ["compare", str(temp_profile), "-r", "60"])
        assert result.exit_code == 0
        assert "Scenario Comparison" in result.output
        assert "* Renting" in result.output

    def test_compare_invalid_profile(self, runner, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text('{"name": "x"}')
        result = runner.invoke(main, ["compare", str(bad)])
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_compare_plot(self, runner, temp_profile, tmp_path):
        chart = tmp_path / "compare.png"
        result = runner.invoke(main, ["-q", "compare", str(temp_profile), "--plot", str(chart)])
        assert result.exit_code == 0
        assert chart.exists()


# ============================================================================
# CATALOG / CPF
# ============================================================================

class TestCatalogCommand:

    def test_catalog_all(self, runner):
        result = runner.invoke(main, ["-q", "catalog"])
        assert result.exit_code == 0
        assert len(result.output.strip().splitlines()) == 49

    def test_catalog_category(self, runner):
        result = runner.invoke(main, ["-q", "catalog", "-c", "housing"])
        assert result.exit_code == 0
        rows = [line.split("\t") for line in result.output.strip().splitlines()]
        assert rows
        assert all(r[2] == "Housing" for r in rows)
        assert any(r[0] == "bto-4room" for r in rows)

    def test_catalog_unknown_category(self, runner):
        result = runner.invoke(main, ["catalog", "-c", "Yachts"])
        assert result.exit_code == 1
        assert "unknown category" in result.output


class TestCpfCommand:

    def test_cpf_plain(self, runner):
        result = runner.invoke(main, ["-q", "cpf", "30", "5000"])
        assert result.exit_code == 0
        assert "Age group: <=35" in result.output
        assert "Employee: $1,000.00" in result.output
        assert "Employer: $850.00" in result.output
        assert "Total: $1,850.00" in result.output

    def test_cpf_capped(self, runner):
        result = runner.invoke(main, ["-q", "cpf", "30", "8000"])
        assert "Total: $2,220.00" in result.output

    def test_cpf_rich(self, runner):
        result = runner.invoke(main, ["cpf", "40", "7000"])
        assert result.exit_code == 0
        assert "MediSave Account" in result.output


# ============================================================================
# PROFILE
# ============================================================================

class TestProfileCommand:

    def test_profile_help(self, runner):
        result = runner.invoke(main, ["profile", "--help"])
        assert result.exit_code == 0
        assert "create" in result.output
        assert "validate" in result.output

    def test_profile_create(self, runner, tmp_path):
        out = tmp_path / "plan.json"
        result = runner.invoke(main, [
            "profile", "create", str(out), "--name", "First flat",
            "--tag", "Housing", "--age", "28", "--income", "4500", "-m", "bto-4room@32",
        ])
        assert result.exit_code == 0
        assert "Created profile" in result.output
        data = json.loads(out.read_text())
        assert data["name"] == "First flat"
        assert data["tags"] == ["Housing"]
        assert data["financial"]["currentAge"] == 28
        assert data["financial"]["monthlyIncome"] == 4500
        assert len(data["scenarios"][0]["modules"]) == 1

    def test_profile_create_default_dir(self, runner, tmp_path, monkeypatch):
        monkeypatch.setenv("SGLIFE_PROFILES_DIR", str(tmp_path / "profiles"))
        result = runner.invoke(main, ["-q", "profile", "create", "--name", "My Plan"])
        assert result.exit_code == 0
        assert (tmp_path / "profiles" / "my-plan-life-plan.json").exists()

    def test_profile_create_requires_name(self, runner, tmp_path):
        result = runner.invoke(main, ["profile", "create", str(tmp_path / "x.json")])
        assert result.exit_code != 0

    def test_profile_validate_valid(self, runner, temp_profile):
        result = runner.invoke(main, ["-q", "profile", "validate", str(temp_profile)])
        assert result.exit_code == 0
        assert "Profile is valid" in result.output
        assert "Scenarios: 2" in result.output

    def test_profile_validate_rich(self, runner, temp_profile):
        result = runner.invoke(main, ["profile", "validate", str(temp_profile)])
        assert result.exit_code == 0
        assert "Profile Summary" in result.output

    def test_profile_validate_invalid(self, runner, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text("not json")
        result = runner.invoke(main, ["profile", "validate", str(bad)])
        assert result.exit_code == 1
        assert "Profile validation failed" in result.output

    def test_profile_validate_missing_path(self, runner):
        result = runner.invoke(main, ["profile", "validate", "nonexistent.json"])
        assert result.exit_code != 0

    def test_profile_show_json(self, runner, temp_profile):
        result = runner.invoke(main, ["profile", "show", str(temp_profile), "--format", "json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["name"] == "Family Plan"

    def test_profile_show_table(self, runner, temp_profile):
        result = runner.invoke(main, ["profile", "show", str(temp_profile)])
        assert result.exit_code == 0
        assert "Financial State" in result.output
        assert "Timeline: Renting" in result.output


# ============================================================================
# INFO
# ============================================================================

class TestInfoCommand:

    def test_info_shows_version(self, runner):
        result = runner.invoke(main, ["info"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_info_shows_dependencies(self, runner):
        result = runner.invoke(main, ["info"])
        assert "numpy" in result.output
        assert "pandas" in result.output


def test_profile_roundtrip_through_cli(runner, tmp_path):
    ctx = PlanningContext()
    ctx.place_module("car", ctx.financial.current_age + 5)
    path = save_profile(export_profile(ctx, "Car"), tmp_path / "car.json")
    result = runner.invoke(main, ["-q", "compare", str(path)])
    assert result.exit_code == 0
    assert result.output.startswith("Main\t")
