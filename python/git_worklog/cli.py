"""
git-worklog - Estimate coding time from Git commits and export work logs.

Commits are grouped into sessions (same author, no gap longer than --gap
hours). A session lasts from its first to its last commit plus
--session-time minutes, never less than --min-session minutes; a lone
commit counts --session-time minutes.

USAGE:
    git-worklog analyze . --since 2025-11-01
    git-worklog analyze --author john@example.com -o results.json
    git-worklog csv /path/to/repo timesheet.csv --project "Client Project" --summary
    git-worklog report . --since 2025-11-01 --author john@example.com

    # Kimai (connection options also read KIMAI_URL, KIMAI_TOKEN, ...)
    git-worklog kimai test-connection
    git-worklog kimai analyze /path/to/repo --since 2025-11-01
    git-worklog kimai --project 2 import analysis.json
    git-worklog kimai explore
"""

from __future__ import annotations

from pathlib import Path

import click

from git_worklog import __version__
from git_worklog.console import log
from git_worklog.export import (
    default_analysis_filename,
    format_report,
    format_summary,
    load_analysis,
    project_name,
    write_analysis,
    write_csv,
)
from git_worklog.gitlog import read_commits
from git_worklog.kimai import DEFAULT_KIMAI_URL, KimaiClient, KimaiConfig
from git_worklog.models import (
    DEFAULT_MAX_GAP_HOURS,
    DEFAULT_MIN_SESSION_MINUTES,
    DEFAULT_SESSION_MINUTES,
    Session,
    SessionConfig,
)
from git_worklog.sessions import build_sessions
from git_worklog.worklog import DEFAULT_REPORTS_DIR, write_worklog

POSITIVE = click.FloatRange(min=0, min_open=True)


ANALYSIS_OPTIONS = [
    click.option("--since", default=None, help='Only commits since this date (e.g. "2025-11-01")'),
    click.option("--until", default=None, help="Only commits until this date"),
    click.option("--author", default=None, help="Only commits whose author name or email contains this"),
    click.option(
        "--gap",
        type=POSITIVE,
        default=DEFAULT_MAX_GAP_HOURS,
        show_default=True,
        help="Max hours between commits in one session",
    ),
    click.option(
        "--session-time",
        type=POSITIVE,
        default=DEFAULT_SESSION_MINUTES,
        show_default=True,
        help="Minutes for single commits and after the last commit",
    ),
    click.option(
        "--min-session",
        type=POSITIVE,
        default=DEFAULT_MIN_SESSION_MINUTES,
        show_default=True,
        help="Minimum minutes for a multi-commit session",
    ),
    click.option("-v", "--verbose", is_flag=True, help="Verbose output"),
]


def analysis_options(func):
    """Options shared by every command that reads a repository."""
    for option in reversed(ANALYSIS_OPTIONS):
        func = option(func)
    return func


def session_config(gap: float, session_time: float, min_session: float) -> SessionConfig:
    return SessionConfig(
        max_session_gap_hours=gap,
        min_session_minutes=min_session,
        default_single_event_minutes=session_time,
    )


def analyze_repository(
    repository: str,
    since: str | None,
    until: str | None,
    author: str | None,
    config: SessionConfig,
    verbose: bool,
) -> list[Session]:
    click.echo(f"Analyzing Git repository: {Path(repository).resolve()}")
    if since:
        click.echo(f"  Since: {since}")
    if until:
        click.echo(f"  Until: {until}")
    if author:
        click.echo(f"  Author: {author}")

    events = read_commits(repository, since=since, until=until, author=author, verbose=verbose)
    click.echo(f"  Found {len(events)} commits")
    if not events:
        return []

    log(
        f"Session gap {config.max_session_gap_hours}h, session time "
        f"{config.default_single_event_minutes}min, minimum {config.min_session_minutes}min",
        verbose,
    )
    sessions = build_sessions(events, config)
    total_hours = sum(s.hours for s in sessions)
    click.echo(f"  Estimated {total_hours:.2f} hours across {len(sessions)} coding sessions")
    return sessions


def parse_project_map(ctx, param, values: tuple[str, ...]) -> dict[str, int]:
    mapping: dict[str, int] = {}
    for value in values:
        name, sep, project_id = value.partition("=")
        if not sep or not name:
            raise click.BadParameter(f"expected REPO=PROJECT_ID, got {value!r}")
        try:
            mapping[name] = int(project_id)
        except ValueError:
            raise click.BadParameter(f"project id must be an integer in {value!r}") from None
    return mapping


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__)
def cli():
    """Estimate coding time from Git commits and export work logs."""


@cli.command("analyze")
@click.argument("repository", default=".", type=click.Path(exists=True, file_okay=False))
@analysis_options
@click.option("-o", "--output", type=click.Path(path_type=Path), default=None, help="Write analysis JSON here")
@click.option("--save", is_flag=True, help="Write analysis JSON to git-time-analysis-<date>.json")
def analyze_command(
    repository: str,
    since: str | None,
    until: str | None,
    author: str | None,
    gap: float,
    session_time: float,
    min_session: float,
    verbose: bool,
    output: Path | None,
    save: bool,
):
    """Analyze REPOSITORY (default: current directory) and print a time report."""
    config = session_config(gap, session_time, min_session)
    sessions = analyze_repository(repository, since, until, author, config, verbose)
    if not sessions:
        click.echo("No commit data found.")
        return

    click.echo()
    click.echo(format_report(repository, sessions))

    if output is None and save:
        output = Path(default_analysis_filename())
    if output is not None:
        write_analysis(output, repository, sessions)
        click.echo(f"Analysis saved to: {output}")


@cli.command("csv")
@click.argument("repository", type=click.Path(exists=True, file_okay=False))
@click.argument("output", default="git-timesheet.csv", type=click.Path(path_type=Path))
@analysis_options
@click.option("--project", default=None, help="Project name for every row (default: repository name)")
@click.option("--summary", is_flag=True, help="Also write time-summary.txt next to the CSV")
def csv_command(
    repository: str,
    output: Path,
    since: str | None,
    until: str | None,
    author: str | None,
    gap: float,
    session_time: float,
    min_session: float,
    verbose: bool,
    project: str | None,
    summary: bool,
):
    """Export sessions of REPOSITORY as a CSV timesheet."""
    config = session_config(gap, session_time, min_session)
    sessions = analyze_repository(repository, since, until, author, config, verbose)
    if not sessions:
        click.echo("No commit data found.")
        return

    write_csv(output, sessions, project_name(repository, project))
    click.echo(f"\nExported {len(sessions)} sessions to: {output}")

    if summary:
        summary_path = output.parent / "time-summary.txt"
        summary_path.write_text(format_summary(repository, sessions, since, until), encoding="utf-8")
        click.echo(f"Summary report saved to: {summary_path}")


@cli.command("report")
@click.argument("repository", default=".", type=click.Path(exists=True, file_okay=False))
@analysis_options
@click.option("--project", default=None, help="Project name for the CSV timesheet")
@click.option(
    "-o",
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=DEFAULT_REPORTS_DIR,
    show_default=True,
    help="Directory for generated reports",
)
def report_command(
    repository: str,
    since: str | None,
    until: str | None,
    author: str | None,
    gap: float,
    session_time: float,
    min_session: float,
    verbose: bool,
    project: str | None,
    output_dir: Path,
):
    """Write analysis JSON, CSV timesheet, text summary and HTML dashboard."""
    config = session_config(gap, session_time, min_session)
    click.echo("Stage 1: Analyzing commits...")
    sessions = analyze_repository(repository, since, until, author, config, verbose)
    if not sessions:
        click.echo("No commit data found.")
        return

    click.echo("Stage 2: Writing reports...")
    files = write_worklog(repository, sessions, output_dir, project=project, since=since, until=until)

    click.echo("\nGenerated files:")
    for label, path in files.items():
        click.echo(f"  {label + ':':<16} {path}")
    click.echo(f"\nOpen the dashboard: file://{files.dashboard.resolve()}")


# ---------------------------------------------------------------------------
# Kimai
# ---------------------------------------------------------------------------


@cli.group("kimai")
@click.option("--url", envvar="KIMAI_URL", default=DEFAULT_KIMAI_URL, show_default=True, help="Kimai server URL")
@click.option("--username", envvar="KIMAI_USERNAME", default=None, help="Kimai username")
@click.option("--password", envvar="KIMAI_PASSWORD", default=None, help="Kimai password")
@click.option("--token", envvar="KIMAI_TOKEN", default=None, help="Kimai API token (instead of username/password)")
@click.option("--project", "project_id", envvar="KIMAI_PROJECT", type=int, default=1, show_default=True, help="Default project ID")
@click.option("--activity", envvar="KIMAI_ACTIVITY", type=int, default=1, show_default=True, help="Default activity ID")
@click.pass_context
def kimai_group(
    ctx: click.Context,
    url: str,
    username: str | None,
    password: str | None,
    token: str | None,
    project_id: int,
    activity: int,
):
    """Send estimated sessions to a Kimai time-tracking server."""
    ctx.obj = KimaiConfig(
        url=url,
        username=username,
        password=password,
        api_token=token,
        default_project=project_id,
        default_activity=activity,
    )


def _import(config: KimaiConfig, repository: str, sessions: list[Session], project_map, verbose: bool):
    click.echo(f"Importing {len(sessions)} sessions into {config.url}...")
    with KimaiClient(config) as client:
        client.authenticate()
        log("Authenticated with Kimai", verbose)
        result = client.import_sessions(repository, sessions, project_map, verbose=verbose)

    click.echo("\nImport Summary:")
    click.echo(f"  Created: {result.created} entries")
    click.echo(f"  Failed:  {result.failed} entries")
    click.echo(f"  Total time imported: {result.hours:.2f}h")
    if result.failed:
        raise click.ClickException(f"{result.failed} timesheet entries could not be created.")


@kimai_group.command("test-connection")
@click.pass_obj
def kimai_test_connection(config: KimaiConfig):
    """Authenticate and list available projects and activities."""
    click.echo(f"Testing connection to {config.url}...")
    with KimaiClient(config) as client:
        client.authenticate()
        projects = client.get_projects()
        activities = client.get_activities()
    click.echo(f"Connection successful! Found {len(projects)} projects and {len(activities)} activities.")


@kimai_group.command("import")
@click.argument("analysis_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--project-map", multiple=True, callback=parse_project_map, help="REPO=PROJECT_ID (repeatable)")
@click.option("-v", "--verbose", is_flag=True, help="Verbose output")
@click.pass_obj
def kimai_import(config: KimaiConfig, analysis_file: Path, project_map: dict[str, int], verbose: bool):
    """Import a saved analysis JSON file into Kimai."""
    repository, sessions = load_analysis(analysis_file)
    if not sessions:
        click.echo("No sessions in analysis file.")
        return
    _import(config, repository, sessions, project_map, verbose)


@kimai_group.command("analyze")
@click.argument("repository", type=click.Path(exists=True, file_okay=False))
@analysis_options
@click.option("--project-map", multiple=True, callback=parse_project_map, help="REPO=PROJECT_ID (repeatable)")
@click.pass_obj
def kimai_analyze(
    config: KimaiConfig,
    repository: str,
    since: str | None,
    until: str | None,
    author: str | None,
    gap: float,
    session_time: float,
    min_session: float,
    verbose: bool,
    project_map: dict[str, int],
):
    """Analyze REPOSITORY and import the sessions directly."""
    session_cfg = session_config(gap, session_time, min_session)
    sessions = analyze_repository(repository, since, until, author, session_cfg, verbose)
    if not sessions:
        click.echo("No commit data found.")
        return
    _import(config, str(Path(repository).resolve()), sessions, project_map, verbose)


@kimai_group.command("explore")
@click.pass_obj
def kimai_explore(config: KimaiConfig):
    """Probe common Kimai API endpoints and report their status."""
    click.echo(f"Exploring Kimai API endpoints at {config.url}...\n")
    with KimaiClient(config) as client:
        if config.api_token:
            client.authenticate()
        for endpoint, status, detail in client.explore():
            label = "ERR" if status is None else str(status)
            click.echo(f"  {label:>3}  {endpoint:<18} {detail}")


if __name__ == "__main__":
    cli()
