"""Estimate coding time from Git commits."""

__version__ = "0.1.0"

from git_worklog.aggregate import WEEK_START, daily_totals, summarize, weekly_totals
from git_worklog.models import Bucket, Event, Session, SessionConfig, Summary
from git_worklog.sessions import build_sessions, continues_session, describe_session, finalize_session

__all__ = [
    "WEEK_START",
    "Bucket",
    "Event",
    "Session",
    "SessionConfig",
    "Summary",
    "build_sessions",
    "continues_session",
    "daily_totals",
    "describe_session",
    "finalize_session",
    "summarize",
    "weekly_totals",
]
