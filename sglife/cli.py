"""
Command-Line Interface for sglife.

Purpose
-------
Runs projections, compares scenarios and manages life-plan profiles from
the shell without writing Python code.

Commands
--------
- project: Project one scenario year by year
- compare: Compare every scenario of a saved profile
- catalog: List the built-in life-event templates
- cpf: CPF contribution breakdown for an age and salary
- profile: Create, validate and display life-plan profile files
- info: Show version and dependency information

Example Usage
-------------
    # Project a fresh plan with a flat at 32 and a child at 34
    $ sglife project --age 30 --income 6000 -m bto-4room@32 -m child1@34

    # Save the same plan as a profile, then compare its scenarios
    $ sglife profile create plan.json --name "First flat" -m bto-4room@32
    $ sglife compare plan.json

    # Monthly CPF split for a 40-year-old earning $7,000
    $ sglife cpf 40 7000
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import click

from . import __version__


# Lazy imports for performance
def _import_rich():
    """Lazy import Rich for better startup time."""
    try:
        from rich.console import Console
        from rich.table import Table
        from rich.panel import Panel
        return Console(), Table, Panel
    except ImportError:
        return None, None, None


def _get_console():
    """Get Rich console or fallback to basic printing."""
    console, *_ = _import_rich()
    return console


def _configure_logging() -> None:
    from .config import AppSettings

    settings = AppSettings()
    logging.basicConfig(
        level=settings.effective_log_level,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _parse_placements(values: Sequence[str]) -> List[Tuple[str, int]]:
    """``["bto-4room@32"]`` -> ``[("bto-4room", 32)]``."""
    out = []
    for raw in values:
        template_id, sep, age = raw.rpartition("@")
        if not sep or not template_id:
            raise click.BadParameter(f"'{raw}' is not TEMPLATE@AGE", param_hint="--module")
        try:
            out.append((template_id, int(age)))
        except ValueError:
            raise click.BadParameter(f"'{age}' is not a whole age", param_hint="--module") from None
    return out


def _build_context(age: Optional[int], income: Optional[float],
                   placements: Sequence[str], extra_interest: bool = False):
    from .config import ProjectionConfig
    from .scenarios import PlanningContext
    from .state import FinancialState

    state = FinancialState()
    if age is not None:
        state.current_age = age
    if income is not None:
        state.update_income(income)
    ctx = PlanningContext(state, config=ProjectionConfig(extra_interest=extra_interest))
    for template_id, at in _parse_placements(placements):
        ctx.place_module(template_id, at)
    return ctx


@click.group()
@click.version_option(version=__version__, prog_name="sglife")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.pass_context
def main(ctx: click.Context, quiet: bool) -> None:
    """
    sglife - Singapore life-timeline financial projection.

    Place life events (housing, family, career, insurance) on a timeline and
    project net worth, cash flow and CPF balances year by year.

    Use 'sglife COMMAND --help' for command-specific help.
    """
    _configure_logging()
    ctx.ensure_object(dict)
    ctx.obj["quiet"] = quiet
    ctx.obj["console"] = _get_console()


@main.command()
@click.option(
    "--profile", "-p",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Life-plan profile to project (JSON)"
)
@click.option("--scenario", "-s", type=str, default=None,
              help="Scenario id within the profile (default: active)")
@click.option("--age", "-a", type=int, default=None, help="Current age (without --profile)")
@click.option("--income", "-i", type=float, default=None,
              help="Monthly income (without --profile)")
@click.option("--module", "-m", "modules", multiple=True,
              help="Place a catalog template as TEMPLATE@AGE (repeatable)")
@click.option("--step", type=int, default=5, help="Show every N-th year (default: 5)")
@click.option("--extra-interest", is_flag=True, help="Credit CPF extra interest")
@click.option(
    "--output", "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Write all snapshots to a .csv or .json file"
)
@click.option("--plot", type=click.Path(path_type=Path), default=None,
              help="Save a projection chart (PNG)")
@click.pass_context
def project(
    ctx: click.Context,
    profile: Optional[Path],
    scenario: Optional[str],
    age: Optional[int],
    income: Optional[float],
    modules: Tuple[str, ...],
    step: int,
    extra_interest: bool,
    output: Optional[Path],
    plot: Optional[Path],
) -> None:
    """
    Project a life plan to the terminal age.

    Example:
        sglife project --age 30 -m bto-4room@32 -m child1@34 --step 10
    """
    console = ctx.obj.get("console")
    quiet = ctx.obj.get("quiet", False)

    if step < 1:
        raise click.BadParameter("step must be >= 1", param_hint="--step")
    if profile is not None and (age is not None or income is not None):
        raise click.UsageError("--age and --income cannot be combined with --profile")

    from .exceptions import SgLifeError
    from .utils import format_currency

    try:
        if profile is not None:
            from .config import ProjectionConfig
            from .scenarios import PlanningContext
            from .serialization import import_profile, load_profile

            base = PlanningContext(config=ProjectionConfig(extra_interest=extra_interest))
            plan = import_profile(base, load_profile(profile))
            for template_id, at in _parse_placements(modules):
                plan.place_module(template_id, at)
        else:
            plan = _build_context(age, income, modules, extra_interest)
        result = plan.project(scenario)
    except SgLifeError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    rows = [s for i, s in enumerate(result.snapshots)
            if i % step == 0 or s is result.final]

    if console and not quiet:
        from rich.table import Table

        shown = plan.get_scenario(scenario) if scenario else plan.active
        table = Table(title=f"Projection: {shown.name}", show_header=True)
        table.add_column("Age", style="cyan", justify="right")
        table.add_column("Year", justify="right")
        table.add_column("Net Worth", style="green", justify="right")
        table.add_column("Cash Flow /mo", justify="right")
        table.add_column("CPF", justify="right")
        table.add_column("Cash", justify="right")
        for s in rows:
            table.add_row(
                str(s.age), str(s.year), format_currency(s.net_worth),
                format_currency(s.cash_flow), format_currency(s.cpf_total),
                format_currency(s.cash_savings),
            )
        console.print(table)
    else:
        for s in rows:
            click.echo(f"{s.age}\t{s.year}\t{s.net_worth}\t{s.cash_flow}\t{s.cpf_total}\t{s.cash_savings}")

    depleted = result.cash_depletion_age()
    if depleted is not None and not quiet:
        click.echo(f"Warning: cash savings turn negative at age {depleted}", err=True)

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        if output.suffix.lower() == ".json":
            with open(output, "w", encoding="utf-8") as f:
                json.dump([s.to_dict() for s in result.snapshots], f, indent=2)
        else:
            result.to_frame().to_csv(output)
        if not quiet:
            click.echo(f"Snapshots saved to {output}")

    if plot:
        from .plotting import plot_projection

        plot_projection(result, title=f"Life Projection ({plan.active.name})", save_path=str(plot))
        if not quiet:
            click.echo(f"Chart saved to {plot}")


@main.command()
@click.argument("profile_file", type=click.Path(exists=True, path_type=Path))
@click.option("--retirement-age", "-r", type=int, default=65,
              help="Age at which net worth is compared (default: 65)")
@click.option("--plot", type=click.Path(path_type=Path), default=None,
              help="Save a net-worth comparison chart (PNG)")
@click.pass_context
def compare(ctx: click.Context, profile_file: Path, retirement_age: int,
            plot: Optional[Path]) -> None:
    """
    Compare every scenario of a saved profile.

    Example:
        sglife compare plan.json --retirement-age 60
    """
    console = ctx.obj.get("console")
    quiet = ctx.obj.get("quiet", False)

    from .exceptions import SgLifeError
    from .serialization import import_profile, load_profile
    from .utils import format_currency, format_large_number
    import pandas as pd

    try:
        plan = import_profile(None, load_profile(profile_file))
        table_df = plan.compare_scenarios(retirement_age=retirement_age)
    except SgLifeError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if console and not quiet:
        from rich.table import Table

        table = Table(title="Scenario Comparison", show_header=True)
        table.add_column("Scenario", style="cyan")
        table.add_column("Modules", justify="right")
        table.add_column(f"Net Worth @{retirement_age}", style="green", justify="right")
        table.add_column("Final Net Worth", justify="right")
        table.add_column("Cash < 0 at", justify="right")
        for _, row in table_df.iterrows():
            at_retirement = row["net_worth_at_retirement"]
            depleted = row["cash_depletion_age"]
            table.add_row(
                ("* " if row["active"] else "") + row["name"],
                str(row["module_count"]),
                "-" if pd.isna(at_retirement) else format_currency(at_retirement),
                format_large_number(row["final_net_worth"], prefix="$"),
                "-" if pd.isna(depleted) else str(int(depleted)),
            )
        console.print(table)
    else:
        for _, row in table_df.iterrows():
            click.echo(f"{row['name']}\t{row['net_worth_at_retirement']}\t{row['final_net_worth']}")

    if plot:
        from .plotting import plot_scenarios

        results = {s.name: plan.project(s.id) for s in plan.scenarios}
        colors = {s.name: s.color.color for s in plan.scenarios}
        plot_scenarios(results, colors=colors, save_path=str(plot))
        if not quiet:
            click.echo(f"Chart saved to {plot}")


@main.command()
@click.option("--category", "-c", type=str, default=None,
              help="Only show one category (e.g. Housing)")
@click.pass_context
def catalog(ctx: click.Context, category: Optional[str]) -> None:
    """
    List the built-in life-event templates.

    Example:
        sglife catalog --category Housing
    """
    console = ctx.obj.get("console")
    quiet = ctx.obj.get("quiet", False)

    from .catalog import CATEGORIES, list_templates
    from .utils import format_currency

    if category is not None and category.lower() not in {c.lower() for c in CATEGORIES}:
        click.echo(f"Error: unknown category '{category}'. Valid: {', '.join(CATEGORIES)}", err=True)
        sys.exit(1)

    templates = list_templates(category=category)

    if console and not quiet:
        from rich.table import Table

        table = Table(title="Module Catalog", show_header=True)
        table.add_column("Id", style="cyan", no_wrap=True)
        table.add_column("Name")
        table.add_column("Category")
        table.add_column("One-time", justify="right")
        table.add_column("Recurring /yr", justify="right")
        for t in templates:
            table.add_row(
                t.id, t.name, t.category,
                format_currency(t.costs.one_time),
                format_currency(t.costs.annual_amount()),
            )
        console.print(table)
    else:
        for t in templates:
            click.echo(f"{t.id}\t{t.name}\t{t.category}")


@main.command()
@click.argument("age", type=int)
@click.argument("salary", type=float)
@click.pass_context
def cpf(ctx: click.Context, age: int, salary: float) -> None:
    """
    Monthly CPF contribution for AGE and monthly SALARY.

    Example:
        sglife cpf 40 7000
    """
    console = ctx.obj.get("console")
    quiet = ctx.obj.get("quiet", False)

    from .exceptions import SgLifeError
    from .rates import age_group, calculate_cpf_contribution
    from .utils import format_currency

    try:
        c = calculate_cpf_contribution(age, salary)
    except SgLifeError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    lines = [
        ("Age group", age_group(age)),
        ("Employee", format_currency(c["employee"], 2)),
        ("Employer", format_currency(c["employer"], 2)),
        ("Total", format_currency(c["total"], 2)),
        ("Ordinary Account", format_currency(c["allocation"]["OA"], 2)),
        ("Special Account", format_currency(c["allocation"]["SA"], 2)),
        ("MediSave Account", format_currency(c["allocation"]["MA"], 2)),
    ]

    if console and not quiet:
        from rich.table import Table

        table = Table(title="CPF Contribution (monthly)", show_header=True)
        table.add_column("Item", style="cyan")
        table.add_column("Amount", style="green", justify="right")
        for label, value in lines:
            table.add_row(label, value)
        console.print(table)
    else:
        for label, value in lines:
            click.echo(f"{label}: {value}")


@main.group()
def profile() -> None:
    """
    Life-plan profile commands.

    Create, validate, and display CompleteProfile JSON files.
    """
    pass


@profile.command("create")
@click.argument("output_file", type=click.Path(path_type=Path), required=False)
@click.option("--name", "-n", type=str, required=True, help="Profile name")
@click.option("--description", "-d", type=str, default="", help="Profile description")
@click.option("--tag", "tags", multiple=True, help="Tag (repeatable)")
@click.option("--author", type=str, default=None, help="Author name")
@click.option("--age", "-a", type=int, default=None, help="Current age")
@click.option("--income", "-i", type=float, default=None, help="Monthly income")
@click.option("--module", "-m", "modules", multiple=True,
              help="Place a catalog template as TEMPLATE@AGE (repeatable)")
@click.pass_context
def profile_create(
    ctx: click.Context,
    output_file: Optional[Path],
    name: str,
    description: str,
    tags: Tuple[str, ...],
    author: Optional[str],
    age: Optional[int],
    income: Optional[float],
    modules: Tuple[str, ...],
) -> None:
    """
    Create a profile file from a fresh plan.

    Without OUTPUT_FILE the profile is written to the profiles directory
    (SGLIFE_PROFILES_DIR) as <name>-life-plan.json.

    Example:
        sglife profile create plan.json --name "First flat" -m bto-4room@32
    """
    quiet = ctx.obj.get("quiet", False)

    from .config import AppSettings
    from .exceptions import SgLifeError
    from .serialization import export_profile, profile_filename, save_profile

    try:
        plan = _build_context(age, income, modules)
        data = export_profile(plan, name, description=description, tags=tags, author=author)
    except SgLifeError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if output_file is None:
        output_file = AppSettings().profiles_dir / profile_filename(name)
    path = save_profile(data, output_file)

    if not quiet:
        click.echo(f"Created profile: {path}")


@profile.command("validate")
@click.argument("profile_file", type=click.Path(exists=True, path_type=Path))
@click.pass_context
def profile_validate(ctx: click.Context, profile_file: Path) -> None:
    """
    Validate a profile file.

    Checks that the file is valid JSON, conforms to the CompleteProfile
    structure and imports into a plan.

    Example:
        sglife profile validate plan.json
    """
    console = ctx.obj.get("console")
    quiet = ctx.obj.get("quiet", False)

    from .exceptions import SgLifeError
    from .serialization import import_profile, load_profile

    try:
        model = load_profile(profile_file)
        plan = import_profile(None, model)
    except SgLifeError as e:
        click.echo(f"Profile validation failed: {e}", err=True)
        sys.exit(1)

    if console and not quiet:
        from rich.panel import Panel

        info = f"""
[bold]Profile Valid[/bold]

[cyan]Name:[/cyan] {model.name}
[cyan]Version:[/cyan] {model.version}
[cyan]Scenarios ({len(plan.scenarios)}):[/cyan]
"""
        for s in plan.scenarios:
            info += f"  - {s.name}: {len(s.modules)} modules\n"
        console.print(Panel(info, title="Profile Summary", border_style="green"))
    else:
        click.echo("Profile is valid")
        click.echo(f"Scenarios: {len(plan.scenarios)}")


@profile.command("show")
@click.argument("profile_file", type=click.Path(exists=True, path_type=Path))
@click.option("--format", "-f", type=click.Choice(["json", "table"]), default="table")
@click.pass_context
def profile_show(ctx: click.Context, profile_file: Path, format: str) -> None:
    """
    Display a profile's financial state and timeline.

    Example:
        sglife profile show plan.json --format table
    """
    console = ctx.obj.get("console")

    from .exceptions import SgLifeError
    from .serialization import import_profile, load_profile
    from .utils import format_currency, format_percentage

    if format == "json":
        with open(profile_file, "r", encoding="utf-8") as f:
            click.echo(json.dumps(json.load(f), indent=2, ensure_ascii=False))
        return

    try:
        plan = import_profile(None, load_profile(profile_file))
    except SgLifeError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    fin = plan.financial
    if console:
        from rich.table import Table

        state_table = Table(title="Financial State")
        state_table.add_column("Field", style="cyan")
        state_table.add_column("Value", justify="right")
        state_table.add_row("Age", str(fin.current_age))
        state_table.add_row("Monthly income", format_currency(fin.monthly_income))
        state_table.add_row("Annual bonus", format_currency(fin.annual_bonus))
        state_table.add_row("Salary growth", format_percentage(fin.salary_growth_rate))
        state_table.add_row("CPF OA / SA / MA", " / ".join(
            format_currency(v) for v in (fin.cpf_balances.ordinary, fin.cpf_balances.special,
                                         fin.cpf_balances.medisave)))
        state_table.add_row("Cash", format_currency(fin.cash_savings))
        state_table.add_row("Investments", format_currency(fin.investments))
        state_table.add_row("Net worth", format_currency(fin.net_worth))
        console.print(state_table)

        timeline = Table(title=f"Timeline: {plan.active.name}")
        timeline.add_column("Age", justify="right")
        timeline.add_column("Year", justify="right")
        timeline.add_column("Module", style="cyan")
        timeline.add_column("One-time", justify="right")
        timeline.add_column("Recurring /yr", justify="right")
        for m in sorted(plan.modules, key=lambda m: (m.age, m.sequence)):
            timeline.add_row(str(m.age), str(m.year), m.name,
                             format_currency(m.costs.one_time),
                             format_currency(m.costs.annual_amount()))
        console.print(timeline)
    else:
        click.echo(f"Age: {fin.current_age}")
        click.echo(f"Net worth: {format_currency(fin.net_worth)}")
        for m in sorted(plan.modules, key=lambda m: (m.age, m.sequence)):
            click.echo(f"{m.age}\t{m.name}")


@main.command()
@click.pass_context
def info(ctx: click.Context) -> None:
    """
    Display system and package information.

    Shows version numbers, installed dependencies, and
    active settings.
    """
    console = ctx.obj.get("console")

    from .config import AppSettings

    settings = AppSettings()
    info_lines = [
        f"sglife Version: {__version__}",
        f"Python: {sys.version.split()[0]}",
        f"Log level: {settings.effective_log_level}",
        f"Profiles dir: {settings.profiles_dir}",
    ]

    # Check dependencies
    dependencies = {
        "numpy": "numpy",
        "pandas": "pandas",
        "pydantic": "pydantic",
        "matplotlib": "matplotlib",
        "rich": "rich",
        "click": "click",
    }

    for name, module in dependencies.items():
        try:
            mod = __import__(module)
            version = getattr(mod, "__version__", "installed")
            info_lines.append(f"{name}: {version}")
        except ImportError:
            info_lines.append(f"{name}: not installed")

    if console:
        from rich.panel import Panel
        console.print(Panel("\n".join(info_lines), title="System Information"))
    else:
        for line in info_lines:
            click.echo(line)


if __name__ == "__main__":
    main()
