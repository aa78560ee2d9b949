"""doccov CLI — top-level command group."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any

import click
import yaml
from rich.console import Console

from doccov import __version__
from doccov.agents.analyzers.coverage import (
    DocCoverageAnalyzer,
    DocCoverageTask,
    ThresholdResult,
    ThresholdSettings,
)
from doccov.agents.reporters.html import HTMLReporter
from doccov.agents.reporters.json_reporter import JSON_FILENAME, JSONReporter
from doccov.agents.reporters.pages import PageRegistry
from doccov.agents.reporters.terminal import reporter
from doccov.config import (
    DEFAULT_COVERAGE_MINIMUM_PER_FILE,
    DEFAULT_COVERAGE_THRESHOLD,
    SUPPORTED_EXPORT_FORMATS,
    DocCovConfig,
    load_config,
    validate_config,
)
from doccov.models.entities import ModelLoadError, load_model
from doccov.utils.locales import LocalesHelper

logger = logging.getLogger(__name__)
console = Console()

_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def _config_to_dict(config: DocCovConfig) -> dict[str, Any]:
    """Convert DocCovConfig to dictionary for display."""
    result = asdict(config)
    result.pop("raw", None)
    return result


def _apply_overrides(
    config: DocCovConfig,
    *,
    output: str | None,
    export_format: str | None,
    locale: str | None,
    coverage_test: int | None,
    coverage_test_per_file: bool,
    coverage_min_per_file: int | None,
    disable_protected: bool,
    disable_internal: bool,
) -> DocCovConfig:
    """Apply command-line options on top of the file configuration."""
    if output is not None:
        config.report.output_dir = output
    if export_format is not None:
        config.report.export_format = export_format.lower()
    if locale is not None:
        config.report.locale = locale
    if coverage_test is not None:
        config.coverage.test = True
        config.coverage.threshold = coverage_test
    if coverage_test_per_file:
        config.coverage.test_per_file = True
    if coverage_min_per_file is not None:
        config.coverage.minimum_per_file = coverage_min_per_file
    if disable_protected:
        config.coverage.disable_protected = True
    if disable_internal:
        config.coverage.disable_internal = True
    return config


def _resolve_model_path(model_file: str | None, config: DocCovConfig) -> Path:
    if model_file:
        return Path(model_file)
    if config.project.model:
        return Path(config.project.root) / config.project.model
    raise click.UsageError("No entity model given (pass MODEL_FILE or set project.model).")


def _emit_outcome(threshold: ThresholdResult, *, ci_mode: bool) -> None:
    """Report the threshold decision lines.

    CI mode keeps stdout for the JSON summary, so the lines go to the log;
    otherwise the terminal reporter prints each line once.
    """
    for message in threshold.messages:
        if ci_mode:
            logger.log(message.level, message.text)
        elif message.level >= logging.ERROR:
            reporter.print_error(message.text)
        else:
            reporter.print_info(message.text)


def _coverage_summary(config: DocCovConfig, output: dict[str, Any]) -> dict[str, Any]:
    coverage = output["coverage"]
    threshold: ThresholdResult = output["threshold"]
    return {
        "count": coverage.count,
        "status": coverage.status.value,
        "entities": len(coverage.files),
        "outcome": threshold.outcome.value,
        "exit_code": threshold.exit_code,
        "threshold": config.coverage.threshold if config.coverage.test else None,
        "minimum_per_file": (
            config.coverage.minimum_per_file if config.coverage.test_per_file else None
        ),
        "under_files": [r.to_dict() for r in threshold.under_files],
        "messages": [m.text for m in threshold.messages],
    }


@click.group()
@click.option(
    "--ci",
    is_flag=True,
    help="CI mode: machine-readable JSON output, exit codes for pass/fail.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.version_option(version=__version__, prog_name="doccov")
@click.pass_context
def cli(ctx: click.Context, *, ci: bool, verbose: bool) -> None:
    """doccov — documentation coverage for parsed source projects."""
    ctx.ensure_object(dict)
    ctx.obj["ci"] = ci
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=_LOG_FORMAT,
    )


@cli.group("config")
def config_group() -> None:
    """Inspect `.doccov.yml` configuration."""


@config_group.command("show")
@click.option(
    "--path",
    default=".",
    type=click.Path(exists=True, file_okay=False, resolve_path=True),
    help="Project root directory.",
)
@click.option(
    "--json-output",
    "as_json",
    is_flag=True,
    help="Output as JSON instead of YAML.",
)
def config_show(path: str, *, as_json: bool) -> None:
    """Display the resolved configuration.

    Example:
      doccov config show
      doccov config show --json-output
    """
    try:
        config = load_config(path)
    except (OSError, ValueError, yaml.YAMLError) as e:
        reporter.print_error(f"Failed to load configuration: {e}")
        raise click.Abort from e

    config_dict = _config_to_dict(config)
    if as_json:
        click.echo(json.dumps(config_dict, indent=2))
    else:
        console.print()
        console.print("[bold cyan]Configuration:[/bold cyan]")
        console.print()
        click.echo(yaml.safe_dump(config_dict, sort_keys=False, default_flow_style=False))


@config_group.command("validate")
@click.option(
    "--path",
    default=".",
    type=click.Path(exists=True, file_okay=False, resolve_path=True),
    help="Project root directory.",
)
def config_validate(path: str) -> None:
    """Validate `.doccov.yml` configuration.

    Example:
      doccov config validate
    """
    try:
        config = load_config(path)
    except (OSError, ValueError, yaml.YAMLError) as e:
        reporter.print_error(f"Failed to load configuration: {e}")
        raise click.Abort from e

    errors = validate_config(config)
    if not errors:
        reporter.print_success("Configuration is valid!")
        return

    reporter.print_error(f"Found {len(errors)} configuration error(s):")
    console.print()
    for idx, error in enumerate(errors, start=1):
        console.print(f"  {idx}. [red]{error}[/red]")
    console.print()
    raise click.Abort


@cli.command()
@click.argument("model_file", required=False, type=click.Path(dir_okay=False))
@click.option(
    "--path",
    default=".",
    type=click.Path(exists=True, file_okay=False, resolve_path=True),
    help="Project root directory (where `.doccov.yml` lives).",
)
@click.option("--output", "-d", default=None, help="Documentation output directory.")
@click.option(
    "--export-format",
    "-e",
    type=click.Choice(SUPPORTED_EXPORT_FORMATS, case_sensitive=False),
    default=None,
    help="Export format.",
)
@click.option("--locale", default=None, help="Language of report labels.")
@click.option(
    "--coverage-test",
    type=click.IntRange(0, 100),
    is_flag=False,
    flag_value=DEFAULT_COVERAGE_THRESHOLD,
    default=None,
    help=f"Fail when project coverage is under THRESHOLD (default {DEFAULT_COVERAGE_THRESHOLD}).",
)
@click.option(
    "--coverage-test-per-file",
    is_flag=True,
    help="Fail when any entity is under the per-file minimum.",
)
@click.option(
    "--coverage-min-per-file",
    type=click.IntRange(0, 100),
    is_flag=False,
    flag_value=DEFAULT_COVERAGE_MINIMUM_PER_FILE,
    default=None,
    help="Per-file minimum coverage used by --coverage-test-per-file.",
)
@click.option("--disable-protected", is_flag=True, help="Leave protected members out.")
@click.option("--disable-internal", is_flag=True, help="Leave internal members out.")
@click.pass_context
def coverage(
    ctx: click.Context,
    model_file: str | None,
    path: str,
    output: str | None,
    export_format: str | None,
    locale: str | None,
    coverage_test: int | None,
    coverage_min_per_file: int | None,
    *,
    coverage_test_per_file: bool,
    disable_protected: bool,
    disable_internal: bool,
) -> None:
    """Compute documentation coverage of an entity model.

    Exits with status 1 when an enabled coverage check fails and 0 when it
    passes or when no check is enabled.  Pages and the JSON export are only
    written when no check is enabled; a checked run stops after the badge.

    Example:
      doccov coverage documentation-model.json --coverage-test 80
      doccov coverage model.json --coverage-test-per-file --coverage-min-per-file 50
    """
    ci_mode = bool(ctx.obj.get("ci")) if ctx.obj else False

    try:
        config = load_config(path)
    except (OSError, ValueError, yaml.YAMLError) as e:
        reporter.print_error(f"Failed to load configuration: {e}")
        raise click.Abort from e

    config = _apply_overrides(
        config,
        output=output,
        export_format=export_format,
        locale=locale,
        coverage_test=coverage_test,
        coverage_test_per_file=coverage_test_per_file,
        coverage_min_per_file=coverage_min_per_file,
        disable_protected=disable_protected,
        disable_internal=disable_internal,
    )

    errors = validate_config(config)
    if errors:
        for error in errors:
            reporter.print_error(error)
        raise click.Abort

    model_path = _resolve_model_path(model_file, config)
    try:
        model = load_model(
            model_path,
            disable_protected=config.coverage.disable_protected,
            disable_internal=config.coverage.disable_internal,
        )
    except ModelLoadError as e:
        reporter.print_error(str(e))
        raise click.Abort from e

    output_dir = Path(config.report.output_dir)
    locales = LocalesHelper(config.report.locale)
    pages = PageRegistry()
    html_reporter = HTMLReporter(output_dir, locales=locales)
    analyzer = DocCoverageAnalyzer(
        pages,
        html_reporter,
        export_format=config.report.export_format,
    )
    task = DocCoverageTask(
        target=str(model_path),
        model=model,
        settings=ThresholdSettings(
            coverage_test=config.coverage.test,
            coverage_test_per_file=config.coverage.test_per_file,
            threshold=config.coverage.threshold,
            minimum_per_file=config.coverage.minimum_per_file,
        ),
    )

    result = asyncio.run(analyzer.run(task))
    if "coverage" not in result.result:
        reporter.print_error(f"Coverage analysis failed: {', '.join(result.errors)}")
        raise click.Abort

    project_coverage = result.result["coverage"]
    threshold: ThresholdResult = result.result["threshold"]

    if ci_mode:
        click.echo(json.dumps(_coverage_summary(config, result.result), indent=2))

    # A pass/fail decision ends the run before any page is rendered.
    if threshold.is_terminal:
        _emit_outcome(threshold, ci_mode=ci_mode)
        sys.exit(threshold.exit_code)

    if config.report.export_format == "json":
        JSONReporter().generate(output_dir / JSON_FILENAME, coverage=project_coverage)
    else:
        html_reporter.render_pages(pages)

    if not ci_mode:
        reporter.print_doc_coverage(project_coverage, locales=locales)


if __name__ == "__main__":
    cli()
