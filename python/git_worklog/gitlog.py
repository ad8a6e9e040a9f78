"""Read commits from a git repository as Events."""

from __future__ import annotations

import subprocess
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path

from git_worklog.console import log
from git_worklog.errors import GitLogError
from git_worklog.models import Event
from git_worklog.sessions import sort_events

FIELD_SEPARATOR = "|"
# %aI is the strict ISO 8601 author date, keeping the author's UTC offset
LOG_FORMAT = FIELD_SEPARATOR.join(["%h", "%an", "%ae", "%aI", "%s"])


def parse_timestamp(ts: str | None) -> datetime | None:
    if not ts:
        return None
    try:
        ts = ts.strip()
        if ts.endswith("Z"):
            ts = ts[:-1] + "+00:00"
        return datetime.fromisoformat(ts)
    except (ValueError, AttributeError):
        return None


def git_log_command(since: str | None = None, until: str | None = None) -> list[str]:
    cmd = ["git", "log", "--all", f"--pretty=format:{LOG_FORMAT}"]
    if since:
        cmd.append(f"--since={since}")
    if until:
        cmd.append(f"--until={until}")
    return cmd


def parse_git_log(output: str, verbose: bool = False) -> list[Event]:
    """Parse ``git log`` output produced with LOG_FORMAT.

    The subject is everything after the fourth separator, so subjects
    containing ``|`` survive. Lines that don't parse are skipped.
    """
    events: list[Event] = []
    for lineno, line in enumerate(output.splitlines(), start=1):
        if not line.strip():
            continue
        parts = line.split(FIELD_SEPARATOR, 4)
        if len(parts) < 4:
            log(f"Skipping malformed git log line {lineno}: {line!r}", verbose, "WARN")
            continue

        commit_id, author, email, date_str = parts[:4]
        message = parts[4] if len(parts) == 5 else ""
        timestamp = parse_timestamp(date_str)
        if timestamp is None or not author:
            log(f"Skipping git log line {lineno} without date or author", verbose, "WARN")
            continue

        events.append(Event(id=commit_id, author=author, email=email, timestamp=timestamp, message=message))
    return events


def filter_events(events: Iterable[Event], author: str | None) -> list[Event]:
    """Keep events whose author name or email contains ``author`` (case-insensitive)."""
    if not author:
        return list(events)
    needle = author.lower()
    return [e for e in events if needle in e.author.lower() or needle in e.email.lower()]


def read_commits(
    repository: str | Path = ".",
    since: str | None = None,
    until: str | None = None,
    author: str | None = None,
    verbose: bool = False,
) -> list[Event]:
    """Run ``git log`` in ``repository`` and return its commits oldest first."""
    repo_path = Path(repository)
    if not repo_path.is_dir():
        raise GitLogError(f"Repository not found: {repo_path}")

    cmd = git_log_command(since, until)
    log(f"Running: {' '.join(cmd)} (in {repo_path.resolve()})", verbose)

    try:
        result = subprocess.run(cmd, cwd=repo_path, capture_output=True, text=True, check=True)
    except FileNotFoundError as exc:
        raise GitLogError("git executable not found. Is git installed?") from exc
    except subprocess.CalledProcessError as exc:
        stderr = (exc.stderr or "").strip()
        # a repository without commits is not an error
        if "does not have any commits" in stderr:
            return []
        raise GitLogError(f"git log failed in {repo_path}: {stderr or exc}") from exc

    events = filter_events(parse_git_log(result.stdout, verbose), author)
    return sort_events(events)
