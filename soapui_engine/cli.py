"""
soapui-engine CLI - run SOAP-UI tests the way the host does and manage engine settings.
"""
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

import click
from rich.console import Console
from rich.table import Table

from soapui_engine.adapters import PathFileSelector, SoapUIEngine, select_runner_location
from soapui_engine.config import (
    CONFIG_FILENAME,
    EngineSettings,
    find_config_file,
    load_config,
    resolve_settings,
    save_config,
)
from soapui_engine.exceptions import SoapUIEngineError
from soapui_engine.types import AutomatedTestRun, ExecutionStatus, TestRunParameter
from soapui_engine.utils.commands import runner_script_name

console = Console()


def _parse_parameters(values: Tuple[str, ...]) -> Optional[list]:
    """Turn ``name=value`` options into TestRunParameters."""
    if not values:
        return None
    parameters = []
    for item in values:
        if "=" not in item:
            raise click.BadParameter(f"expected name=value, got '{item}'", param_hint="-P/--param")
        name, value = item.split("=", 1)
        parameters.append(TestRunParameter(name=name, value=value))
    return parameters


def _resolve_location(location: str) -> str:
    """Accept either the bin directory or the runner script inside it."""
    candidate = Path(location).expanduser()
    if candidate.is_file():
        selected = select_runner_location(PathFileSelector(candidate))
        if selected is None:
            raise click.BadParameter(f"{candidate} is not a SOAP-UI runner script", param_hint="--location")
        return selected
    return str(candidate)


@click.group()
@click.version_option(version=None, package_name="soapui-engine")
@click.option('--verbose', '-v', is_flag=True, help='Show debug logging')
def main(verbose: bool) -> None:
    """soapui-engine - drive the SOAP-UI command-line runner."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument('locator')
@click.option('--param', '-P', 'params', multiple=True, help='Test run parameter as name=value')
@click.option('--config', type=click.Path(exists=True), help='Path to settings file')
@click.option('--location', help='SOAP-UI bin directory (overrides settings)')
@click.option('--pro/--free', 'pro_license', default=None, help='Parse the SOAP-UI Pro XML report')
@click.option('--load-test/--functional', 'load_test', default=None, help='Use loadtestrunner')
@click.option('--trace', 'trace_logging', is_flag=True, help='Enable trace logging')
@click.option('--json', 'json_output', is_flag=True, help='Output results as JSON')
def run(
    locator: str,
    params: Tuple[str, ...],
    config: Optional[str],
    location: Optional[str],
    pro_license: Optional[bool],
    load_test: Optional[bool],
    trace_logging: Optional[bool],
    json_output: bool,
) -> None:
    """Run a test from a 'project|suite|case[|switches]' LOCATOR."""
    try:
        settings = resolve_settings(config)
        overrides = {}
        if location:
            overrides["location"] = _resolve_location(location)
        if pro_license is not None:
            overrides["pro_license"] = pro_license
        if load_test is not None:
            overrides["load_test"] = load_test
        if trace_logging:
            overrides["trace_logging"] = True
            logging.getLogger("soapui_engine").setLevel(logging.INFO)
        if overrides:
            settings = settings.model_copy(update=overrides)

        test_run = AutomatedTestRun(
            filename_or_url=locator,
            parameters=_parse_parameters(params),
        )

        engine = SoapUIEngine(settings)
        if not json_output:
            console.print(f"[bold cyan]Running SOAP-UI test[/bold cyan] [dim]{locator}[/dim]")

        engine.start_execution(test_run)

    except SoapUIEngineError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(2)

    if json_output:
        click.echo(json.dumps(test_run.to_dict(), indent=2))
    else:
        _display_results(test_run)

    sys.exit(0 if test_run.execution_status == ExecutionStatus.PASSED else 1)


@main.command()
@click.option('--force', is_flag=True, help='Overwrite existing settings file')
@click.option('--location', help='SOAP-UI bin directory or runner script')
def init(force: bool, location: Optional[str]) -> None:
    """Initialize soapui-engine.yaml settings file."""
    config_path = Path(CONFIG_FILENAME)

    if config_path.exists() and not force:
        console.print(f"[yellow]Warning:[/yellow] {config_path} already exists")
        console.print("Use --force to overwrite")
        sys.exit(1)

    settings = EngineSettings(location=_resolve_location(location) if location else "")
    save_config(settings, config_path)

    console.print(f"[green]Created {config_path}[/green]")
    console.print("\nNext steps:")
    console.print("  1. Set the SOAP-UI bin directory with 'soapui-engine settings set --location'")
    console.print("  2. Run 'soapui-engine settings validate' to check configuration")
    console.print("  3. Run 'soapui-engine run \"project.xml|Suite|Case\"' to execute a test")


@main.group()
def settings() -> None:
    """Show and edit engine settings."""
    pass


@settings.command('show')
@click.option('--config', type=click.Path(exists=True), help='Path to settings file')
def settings_show(config: Optional[str]) -> None:
    """Display the current settings."""
    try:
        engine_settings = resolve_settings(config)
    except SoapUIEngineError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(2)

    _display_settings(engine_settings)


@settings.command('set')
@click.option('--config', type=click.Path(), help='Path to settings file')
@click.option('--location', help='SOAP-UI bin directory or runner script')
@click.option('--pro-license/--no-pro-license', default=None, help='SOAP-UI Pro license')
@click.option('--load-test/--no-load-test', default=None, help='Run load tests')
@click.option('--trace-logging/--no-trace-logging', default=None, help='Trace logging')
@click.option('--output-folder', help='Folder for run artifacts')
def settings_set(
    config: Optional[str],
    location: Optional[str],
    pro_license: Optional[bool],
    load_test: Optional[bool],
    trace_logging: Optional[bool],
    output_folder: Optional[str],
) -> None:
    """Change one or more settings and save them."""
    config_path = Path(config) if config else (find_config_file() or Path(CONFIG_FILENAME))

    try:
        engine_settings = load_config(config_path) if config_path.exists() else EngineSettings()
    except SoapUIEngineError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(2)

    updates = {}
    if location is not None:
        updates["location"] = _resolve_location(location)
    if pro_license is not None:
        updates["pro_license"] = pro_license
    if load_test is not None:
        updates["load_test"] = load_test
    if trace_logging is not None:
        updates["trace_logging"] = trace_logging
    if output_folder is not None:
        updates["output_folder"] = output_folder

    engine_settings = EngineSettings(**{**engine_settings.model_dump(), **updates})
    save_config(engine_settings, config_path)

    console.print(f"[green]Saved {config_path}[/green]")
    _display_settings(engine_settings)


@settings.command('validate')
@click.option('--config', type=click.Path(exists=True), help='Path to settings file')
def settings_validate(config: Optional[str]) -> None:
    """Check that the settings point at a SOAP-UI installation."""
    try:
        config_path = Path(config) if config else find_config_file()
        if not config_path:
            console.print(f"[red]Error:[/red] No {CONFIG_FILENAME} found")
            sys.exit(2)

        console.print(f"Validating [cyan]{config_path}[/cyan]...")
        engine_settings = load_config(config_path)
    except SoapUIEngineError as e:
        console.print(f"[red]Validation failed:[/red] {e}")
        sys.exit(1)

    problems = []
    if not engine_settings.location:
        problems.append("location is not set")
    elif not engine_settings.location_path.is_dir():
        problems.append(f"location {engine_settings.location} is not a directory")
    else:
        script = runner_script_name(engine_settings.load_test)
        if not (engine_settings.location_path / script).is_file():
            problems.append(f"{script} not found in {engine_settings.location}")

    _display_settings(engine_settings)

    if problems:
        for problem in problems:
            console.print(f"[red]Problem:[/red] {problem}")
        sys.exit(1)

    console.print("\n[green]Configuration is valid![/green]")


@main.command('token')
@click.argument('parameter_name')
def token(parameter_name: str) -> None:
    """Print the token used to reference a test run parameter."""
    click.echo(SoapUIEngine.create_parameter_token(parameter_name))


def _display_settings(engine_settings: EngineSettings) -> None:
    table = Table(title="Engine Settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Location", engine_settings.location or "[dim](not set)[/dim]")
    table.add_row("Pro License", str(engine_settings.pro_license))
    table.add_row("Load Test", str(engine_settings.load_test))
    table.add_row("Trace Logging", str(engine_settings.trace_logging))
    table.add_row("Output Folder", engine_settings.output_folder or "[dim](default)[/dim]")

    console.print(table)


def _display_results(test_run: AutomatedTestRun) -> None:
    """Display test results in a formatted table."""
    table = Table(title="Test Run Summary")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="white")

    status = test_run.execution_status
    if status == ExecutionStatus.PASSED:
        table.add_row("Status", "[green bold]Passed[/green bold]")
    else:
        table.add_row("Status", f"[red bold]{status.value}[/red bold]")

    table.add_row("Test", test_run.runner_test_name or "")
    table.add_row("Message", test_run.runner_message or "")
    table.add_row("Failed Assertions", str(test_run.runner_assert_count))
    if test_run.duration is not None:
        table.add_row("Duration", f"{test_run.duration:.2f}s")

    console.print(table)

    if test_run.test_run_steps:
        steps = Table(title="Detailed Steps")
        steps.add_column("#", justify="right")
        steps.add_column("Status")
        steps.add_column("Description")
        steps.add_column("Actual Result", overflow="fold")
        for step in test_run.test_run_steps:
            color = "green" if step.status == ExecutionStatus.PASSED else "red"
            steps.add_row(
                str(step.position),
                f"[{color}]{step.status.value}[/{color}]",
                step.description,
                step.actual_result,
            )
        console.print(steps)

    if status == ExecutionStatus.PASSED:
        console.print("\n[green bold]======== PASSED ========[/green bold]")
    else:
        console.print("\n[red bold]======== FAILED ========[/red bold]")


if __name__ == '__main__':
    main()
