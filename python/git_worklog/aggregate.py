"""Daily/weekly totals and summary statistics over finalized sessions."""

from __future__ import annotations

import calendar
from collections.abc import Iterable
from datetime import date, timedelta

from git_worklog.models import Bucket, Session, Summary

# Weeks start on Sunday regardless of locale.
WEEK_START = calendar.SUNDAY


def week_start(day: date) -> date:
    """Return the WEEK_START day on or before ``day``."""
    return day - timedelta(days=(day.weekday() - WEEK_START) % 7)


def _bucketize(sessions: Iterable[Session], key_func) -> list[Bucket]:
    buckets: dict[date, Bucket] = {}
    for session in sessions:
        key = key_func(session.start.date())
        bucket = buckets.get(key)
        if bucket is None:
            bucket = buckets[key] = Bucket(key=key.isoformat())
        bucket.total_hours += session.duration_minutes / 60
        bucket.session_count += 1
        bucket.commit_count += session.commit_count
    return [buckets[k] for k in sorted(buckets)]


def daily_totals(sessions: Iterable[Session]) -> list[Bucket]:
    """Totals per calendar day of the session start, in the session's own offset."""
    return _bucketize(sessions, lambda d: d)


def weekly_totals(sessions: Iterable[Session]) -> list[Bucket]:
    """Totals per Sunday-anchored week."""
    return _bucketize(sessions, week_start)


def summarize(sessions: Iterable[Session]) -> Summary:
    sessions = list(sessions)
    summary = Summary()
    if not sessions:
        return summary

    summary.total_hours = round(sum(s.hours for s in sessions), 2)
    summary.session_count = len(sessions)
    summary.commit_count = sum(s.commit_count for s in sessions)
    summary.authors = sorted({s.author for s in sessions})
    summary.author_count = len(summary.authors)
    summary.average_session_hours = round(summary.total_hours / summary.session_count, 2)
    if summary.total_hours > 0:
        summary.commits_per_hour = round(summary.commit_count / summary.total_hours, 2)
    return summary
