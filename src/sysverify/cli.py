"""Command line interface entry point."""

from __future__ import annotations

import sys

import click

from sysverify.checks import default_registry
from sysverify.configuration import (
    DEFAULT_CONFIG_FILENAME,
    ConfigurationError,
    load_configuration,
    resolve_checks,
    write_placeholder_configuration,
)
from sysverify.logging_setup import LOG_LEVELS, configure_logging
from sysverify.results_writing import available_report_formats
from sysverify.run_execution import RunExecutionError, RunRequest, execute_check_run


class CliError(Exception):
    """Custom CLI error."""


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="sysverify")
def cli() -> None:
    """Declarative system verification runner."""


@cli.command(name="generate-config")
@click.option(
    "--output",
    "output_path",
    required=False,
    default=DEFAULT_CONFIG_FILENAME,
    show_default=True,
    type=click.Path(path_type=str),
    help="Path to the YAML check configuration to write",
)
def generate_config(output_path: str) -> None:
    """Generate a placeholder YAML check configuration with guidance comments."""
    try:
        resolved_output = write_placeholder_configuration(output_path)
    except (FileExistsError, OSError) as exc:
        raise CliError(str(exc)) from exc
    click.echo(str(resolved_output))


@cli.command(name="list-types")
def list_types() -> None:
    """Print every registered check type."""
    for name in default_registry().names():
        click.echo(name)


@cli.command(name="list-tests")
@click.option(
    "--conf",
    "config_path",
    required=True,
    type=click.Path(path_type=str),
    help="Path to YAML/JSON check configuration file",
)
def list_tests(config_path: str) -> None:
    """Print configured suites with their tests."""
    try:
        document = load_configuration(config_path)
    except ConfigurationError as exc:
        raise CliError(str(exc)) from exc

    resolved = resolve_checks(document)
    for suite, names in sorted(resolved.suites.items()):
        click.echo(f"{suite}:")
        for name in names:
            click.echo(f"  {name}")

    unassigned = [name for name, check in resolved.tests.items() if not check.suites]
    if unassigned:
        click.echo("(no suite):")
        for name in unassigned:
            click.echo(f"  {name}")

    if resolved.errors:
        raise CliError(
            f"{len(resolved.errors)} configuration problem(s):\n" + "\n".join(resolved.errors)
        )


# pylint: disable=too-many-arguments
@cli.command(name="run")
@click.option(
    "--conf",
    "config_path",
    required=True,
    type=click.Path(path_type=str),
    help="Path to YAML/JSON check configuration file",
)
@click.option(
    "--test",
    "tests",
    multiple=True,
    help="Name of a test to run; repeatable",
)
@click.option(
    "--suite",
    "suites",
    multiple=True,
    help="Name of a suite to run; repeatable",
)
@click.option(
    "--jobs",
    "jobs",
    required=False,
    type=click.IntRange(min=1),
    help="Number of checks to run in parallel (defaults to the config options)",
)
@click.option(
    "--output",
    "output_path",
    required=False,
    type=click.Path(path_type=str),
    help="Optional path for the rendered results",
)
@click.option(
    "--format",
    "report_format",
    required=False,
    type=click.Choice(available_report_formats()),
    help="Results format (defaults to the config options)",
)
@click.option("--quiet", is_flag=True, default=False, help="Do not print results to stdout.")
@click.option(
    "--log-level",
    "log_level",
    default="WARNING",
    show_default=True,
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    help="Diagnostic log level",
)
@click.option(
    "--log-file",
    "log_file",
    required=False,
    type=click.Path(path_type=str),
    help="Optional file receiving diagnostic logs",
)
def run_checks(
    config_path: str,
    tests: tuple[str, ...],
    suites: tuple[str, ...],
    jobs: int | None,
    output_path: str | None,
    report_format: str | None,
    quiet: bool,
    log_level: str,
    log_file: str | None,
) -> None:
    """Run the selected tests, or every configured test when none are selected."""
    configure_logging(log_level, log_file)
    try:
        outcome = execute_check_run(
            RunRequest(
                config_path=config_path,
                tests=tuple(tests),
                suites=tuple(suites),
                jobs=jobs,
                output_path=output_path,
                report_format=report_format,
                quiet=quiet,
            )
        )
    except RunExecutionError as exc:
        raise CliError(str(exc)) from exc

    problems = [*outcome.resolution_errors, *outcome.selection_errors]
    if outcome.report_error:
        problems.append(outcome.report_error)
    if problems:
        raise CliError("\n".join(problems))


# pylint: enable=too-many-arguments


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for console_scripts wiring."""
    argv = argv if argv is not None else sys.argv[1:]
    try:
        cli.main(args=list(argv), standalone_mode=False)
    except CliError as exc:
        click.echo(str(exc), err=True)
        return 1
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.Abort:
        click.echo("Aborted.", err=True)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
