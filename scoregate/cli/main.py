"""Main CLI entry point for scoregate."""

import json
import sys
from pathlib import Path

import click

from scoregate import __version__
from scoregate.config.loader import (
    GradingConfiguration,
    load_configuration_file,
    parse_configurations,
)
from scoregate.core.exceptions import ConfigurationError, ScoreGateError
from scoregate.core.logging import configure_logging, run_context
from scoregate.core.settings import ScoreGateSettings, get_settings
from scoregate.gates import (
    OverallStatus,
    applicable_gates,
    evaluate_aggregated,
    quality_gates_from_settings,
)
from scoregate.paths import PathMapper
from scoregate.reports.bundle import ReportBundle, load_diff
from scoregate.scoring import AggregatedScore, Score

# Exit codes
EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_ERROR = 2


class CliContext:
    """Settings shared by all commands of one invocation."""

    def __init__(self) -> None:
        self.verbose = False
        self._settings: ScoreGateSettings | None = None

    @property
    def settings(self) -> ScoreGateSettings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings


pass_cli_context = click.make_pass_decorator(CliContext, ensure=True)


@click.group(invoke_without_command=True)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable debug logging",
)
@click.version_option(version=__version__, prog_name="scoregate")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """scoregate - grade quality reports and evaluate quality gates.

    Examples:

      # Grade a run and check the gates of SCOREGATE_QUALITY_GATES
      scoregate grade --config grading.json --reports reports.json

      # Treat unstable gates as failures
      scoregate grade --config grading.json --reports reports.json \\
          --fail-on-unstable

      # Map the paths of a diff to the paths of the reports
      scoregate map-paths --diff diff.json --reports reports.json
    """
    ctx.ensure_object(CliContext)
    cli_ctx = ctx.obj
    cli_ctx.verbose = verbose

    try:
        settings = cli_ctx.settings
    except ValueError as e:
        click.echo(f"Error: Invalid settings: {e}", err=True)
        sys.exit(EXIT_ERROR)
    configure_logging(
        level="DEBUG" if verbose else settings.log_level,
        json_output=settings.log_json,
    )

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


def _load_grading_configuration(
    config_file: Path | None, settings: ScoreGateSettings
) -> GradingConfiguration:
    if config_file is not None:
        return load_configuration_file(config_file)
    if settings.config and settings.config.strip():
        return parse_configurations(settings.config)
    raise ConfigurationError(
        "No grading configuration given: use --config or SCOREGATE_CONFIG"
    )


def _format_score(score: Score) -> str:
    if score.has_max_score:
        return f"{score.name} - {score.value} of {score.max_score}"
    return score.name


def _echo_grade(score: AggregatedScore) -> None:
    click.echo(
        f"Total score: {score.achieved_score} of {score.max_score} "
        f"({score.ratio}%)"
    )
    for category in score.all_scores:
        click.echo(f"{_format_score(category)}: {category.summary}")
        for leaf in category.sub_scores:
            click.echo(f"  - {leaf.name}: {leaf.summary}")


@cli.command(name="grade")
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Grading configuration (JSON); defaults to SCOREGATE_CONFIG",
)
@click.option(
    "--reports",
    "reports_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help="Already parsed reports (JSON)",
)
@click.option(
    "--diff",
    "diff_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Changed lines per SCM path (JSON), for modified lines baselines",
)
@click.option(
    "--fail-on-unstable",
    is_flag=True,
    help="Exit with a failure if a gate of criticality UNSTABLE fails",
)
@click.option(
    "--run-id",
    default=None,
    help="ID bound to all log events of this run",
)
@pass_cli_context
def grade_cmd(
    cli_ctx: CliContext,
    config_file: Path | None,
    reports_file: Path,
    diff_file: Path | None,
    fail_on_unstable: bool,
    run_id: str | None,
) -> None:
    """Grade the reports of a run and evaluate the quality gates.

    Quality gates are read from SCOREGATE_QUALITY_GATES or from the variable
    named by SCOREGATE_QUALITY_GATES_ENV. Gates on metrics that the run did
    not produce are skipped.

    Exit Codes:

      0 - All gates passed (or only unstable gates failed)
      1 - A gate of criticality FAILURE failed, or an UNSTABLE gate
          failed with --fail-on-unstable
      2 - Error occurred (invalid configuration, reports or diff)
    """
    settings = cli_ctx.settings
    try:
        with run_context(run_id):
            configuration = _load_grading_configuration(config_file, settings)
            reports = ReportBundle.load(reports_file)
            if diff_file is not None:
                reports.mark_modified_lines(load_diff(diff_file))

            score = AggregatedScore(configuration, reports).grade()
            gates = applicable_gates(score, quality_gates_from_settings(settings))
            result = evaluate_aggregated(score, gates)
    except ScoreGateError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_ERROR)

    _echo_grade(score)
    summary = result.create_summary()
    if summary:
        click.echo(summary)

    status = result.overall_status
    if status == OverallStatus.FAILURE:
        sys.exit(EXIT_FAILURE)
    if status == OverallStatus.UNSTABLE and fail_on_unstable:
        sys.exit(EXIT_FAILURE)
    sys.exit(EXIT_SUCCESS)


@cli.command(name="map-paths")
@click.option(
    "--diff",
    "diff_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help="Modified SCM paths (JSON array or object of changed lines)",
)
@click.option(
    "--reports",
    "reports_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help="Already parsed reports (JSON)",
)
def map_paths_cmd(diff_file: Path, reports_file: Path) -> None:
    """Map the SCM paths of a diff to the file paths of the reports.

    Prints a JSON object that maps each SCM path to the longest report path
    it ends with, or to an empty string if no report path matches.

    Exit Codes:

      0 - Mapping printed
      2 - Error occurred (invalid input or ambiguous mapping)
    """
    try:
        scm_paths = load_diff(diff_file).keys()
        reports = ReportBundle.load(reports_file)
        mapping = PathMapper().map_scm_to_report_paths(
            scm_paths, reports.report_paths()
        )
    except ScoreGateError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_ERROR)

    click.echo(json.dumps(mapping, indent=2))


def main() -> None:
    """Main entry point for the CLI."""
    cli(auto_envvar_prefix="SCOREGATE")


if __name__ == "__main__":
    main()
