"""JSON, CSV and plain-text renderings of an analysis."""

from __future__ import annotations

import csv
import io
import json
from datetime import date, datetime, timedelta
from pathlib import Path

from git_worklog.aggregate import daily_totals, summarize, weekly_totals
from git_worklog.console import truncate
from git_worklog.errors import AnalysisFileError
from git_worklog.gitlog import parse_timestamp
from git_worklog.models import Event, Session

CSV_HEADERS = [
    "Date",
    "Start Time",
    "End Time",
    "Duration (hours)",
    "Description",
    "Project",
    "Author",
    "Commits",
]

RULE = "=" * 50


def format_datetime(dt: datetime) -> str:
    """Format datetime as 'YYYY-MM-DD HH:MM'."""
    return dt.strftime("%Y-%m-%d %H:%M")


def default_analysis_filename(today: date | None = None) -> str:
    today = today or date.today()
    return f"git-time-analysis-{today.isoformat()}.json"


def project_name(repository: str | Path, project: str | None = None) -> str:
    return project or Path(repository).resolve().name or "Development"


# ---------------------------------------------------------------------------
# Analysis JSON
# ---------------------------------------------------------------------------


def analysis_to_dict(repository: str | Path, sessions: list[Session]) -> dict:
    summary = summarize(sessions)
    return {
        "repository": str(Path(repository).resolve()),
        "generated_at": datetime.now().astimezone().isoformat(timespec="seconds"),
        "total_commits": summary.commit_count,
        "total_sessions": summary.session_count,
        "total_hours": summary.total_hours,
        "summary": summary.to_dict(),
        "daily": [b.to_dict() for b in daily_totals(sessions)],
        "weekly": [b.to_dict() for b in weekly_totals(sessions)],
        "sessions": [s.to_dict() for s in sessions],
    }


def write_analysis(path: str | Path, repository: str | Path, sessions: list[Session]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = analysis_to_dict(repository, sessions)
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    return path


def _session_from_dict(data: dict) -> Session:
    events = []
    for c in data.get("commits", []):
        ts = parse_timestamp(c.get("timestamp"))
        if ts is None:
            raise ValueError(f"commit {c.get('id')!r} has an invalid timestamp")
        events.append(
            Event(
                id=c.get("id", ""),
                author=c.get("author", ""),
                email=c.get("email", ""),
                timestamp=ts,
                message=c.get("message", ""),
            )
        )

    start = parse_timestamp(data.get("start"))
    end = parse_timestamp(data.get("end"))
    if start is None or end is None:
        raise ValueError("session has an invalid start or end")

    return Session(
        start=start,
        end=end,
        author=data["author"],
        email=data.get("email", ""),
        events=tuple(events),
        duration=float(data.get("duration", data["duration_minutes"])),
        description=data.get("description", ""),
    )


def load_analysis(path: str | Path) -> tuple[str, list[Session]]:
    """Read an analysis JSON back into ``(repository, sessions)``."""
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise AnalysisFileError(f"Analysis file not found: {path}") from exc
    except (OSError, json.JSONDecodeError) as exc:
        raise AnalysisFileError(f"Cannot read analysis file {path}: {exc}") from exc

    try:
        sessions = [_session_from_dict(s) for s in data["sessions"]]
    except (KeyError, TypeError, ValueError) as exc:
        raise AnalysisFileError(f"Malformed analysis file {path}: {exc}") from exc

    return data.get("repository", ""), sessions


# ---------------------------------------------------------------------------
# CSV timesheet
# ---------------------------------------------------------------------------


def session_rows(sessions: list[Session], project: str) -> list[list[str]]:
    rows = []
    for session in sessions:
        end = session.start + timedelta(minutes=session.duration_minutes)
        rows.append([
            session.start.strftime("%Y-%m-%d"),
            session.start.strftime("%H:%M:%S"),
            end.strftime("%H:%M:%S"),
            f"{session.duration_minutes / 60:.2f}",
            session.description,
            project,
            session.author,
            str(session.commit_count),
        ])
    return rows


def format_csv(sessions: list[Session], project: str) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    writer.writerows(session_rows(sessions, project))
    return buffer.getvalue()


def write_csv(path: str | Path, sessions: list[Session], project: str) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(format_csv(sessions, project), encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Text reports
# ---------------------------------------------------------------------------


def format_report(repository: str | Path, sessions: list[Session]) -> str:
    """Console report: totals followed by one block per session."""
    summary = summarize(sessions)
    lines = [
        "CODING TIME ANALYSIS REPORT",
        RULE,
        f"Repository: {Path(repository).resolve()}",
        f"Total Commits: {summary.commit_count}",
        f"Total Hours: {summary.total_hours:.2f}h",
        f"Sessions: {summary.session_count}",
        RULE,
    ]
    for i, session in enumerate(sessions, 1):
        lines.append("")
        lines.append(f"{i}. {format_datetime(session.start)}")
        lines.append(f"   Duration: {session.hours:.2f}h ({session.duration_minutes}min)")
        lines.append(f"   Commits: {session.commit_count}")
        lines.append(f"   Author: {session.author}")
        lines.append(f"   Description: {truncate(session.description, 80)}")
    return "\n".join(lines) + "\n"


def format_summary(
    repository: str | Path,
    sessions: list[Session],
    since: str | None = None,
    until: str | None = None,
) -> str:
    """Work-log summary with weekly, daily and per-session breakdowns."""
    summary = summarize(sessions)
    lines = [
        "FREELANCER WORK LOG SUMMARY",
        "=" * 29,
        "",
        f"Repository: {Path(repository).resolve()}",
        f"Report Date: {format_datetime(datetime.now())}",
        f"Analysis Period: {since or 'All time'} to {until or 'Present'}",
        f"Total Commits: {summary.commit_count}",
        f"Total Sessions: {summary.session_count}",
        f"Total Hours: {summary.total_hours:.2f}h",
        "",
    ]

    weekly = weekly_totals(sessions)
    if len(weekly) > 1:
        lines += ["WEEKLY BREAKDOWN:", "=" * 17]
        for bucket in weekly:
            lines.append(
                f"Week of {bucket.key}: {bucket.total_hours:.2f}h "
                f"({bucket.session_count} sessions, {bucket.commit_count} commits)"
            )
        lines.append("")

    lines += ["DAILY BREAKDOWN:", "=" * 16]
    for bucket in daily_totals(sessions):
        lines.append(f"{bucket.key}: {bucket.total_hours:.2f}h ({bucket.session_count} sessions)")
    lines.append("")

    lines += ["SESSION DETAILS:", "=" * 16]
    for i, session in enumerate(sessions, 1):
        lines.append(f"{i}. {format_datetime(session.start)}")
        lines.append(f"   Duration: {session.duration_minutes / 60:.2f}h ({session.duration_minutes}min)")
        lines.append(f"   Author: {session.author}")
        lines.append(f"   Commits: {session.commit_count}")
        lines.append(f"   Description: {session.description}")
        lines.append("")

    return "\n".join(lines)
