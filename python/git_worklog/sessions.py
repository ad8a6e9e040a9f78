"""Group time-ordered commits into work sessions and estimate their duration.

A session is a run of commits by the same author where no two consecutive
commits are further apart than ``max_session_gap_hours``. Its duration is the
span between first and last commit plus a flat buffer for the work that went
into the last commit, floored at ``min_session_minutes``. A lone commit gets
``default_single_event_minutes``.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from git_worklog.models import Event, Session, SessionConfig, round_minutes

MAX_DESCRIBED_MESSAGES = 3


def _validate(event: Event):
    if not isinstance(event.timestamp, datetime):
        raise ValueError(f"Event {event.id!r} has no valid timestamp: {event.timestamp!r}")
    if not event.author:
        raise ValueError(f"Event {event.id!r} has no author")


def sort_events(events: Iterable[Event]) -> list[Event]:
    """Stable ascending sort by timestamp."""
    events = list(events)
    for event in events:
        _validate(event)
    try:
        return sorted(events, key=lambda e: e.timestamp)
    except TypeError as exc:
        # naive and aware datetimes can't be compared
        raise ValueError(f"Event timestamps are not comparable: {exc}") from exc


def continues_session(previous: Event, event: Event, config: SessionConfig) -> bool:
    """Return True if ``event`` belongs to the session whose last commit is ``previous``."""
    gap_hours = (event.timestamp - previous.timestamp).total_seconds() / 3600
    return gap_hours <= config.max_session_gap_hours and event.author == previous.author


def estimate_duration(events: list[Event], config: SessionConfig) -> float:
    """Estimated minutes of work for one session, unrounded."""
    if len(events) == 1:
        return float(config.default_single_event_minutes)

    span_minutes = (events[-1].timestamp - events[0].timestamp).total_seconds() / 60
    return float(max(span_minutes + config.default_single_event_minutes, config.min_session_minutes))


def estimate_minutes(events: list[Event], config: SessionConfig) -> int:
    return round_minutes(estimate_duration(events, config))


def describe_session(events: list[Event]) -> str:
    """Single commit: its message. Otherwise the first few messages joined."""
    if len(events) == 1:
        return events[0].message

    description = "; ".join(e.message for e in events[:MAX_DESCRIBED_MESSAGES])
    remaining = len(events) - MAX_DESCRIBED_MESSAGES
    if remaining > 0:
        description += f" (and {remaining} more commits)"
    return description


def finalize_session(events: list[Event], config: SessionConfig) -> Session:
    if not events:
        raise ValueError("Cannot finalize an empty session")

    first = events[0]
    return Session(
        start=first.timestamp,
        end=events[-1].timestamp,
        author=first.author,
        email=first.email,
        events=tuple(events),
        duration=estimate_duration(events, config),
        description=describe_session(events),
    )


def build_sessions(events: Iterable[Event], config: SessionConfig | None = None) -> list[Session]:
    """Partition commits into chronological, non-overlapping sessions."""
    config = config or SessionConfig()
    ordered = sort_events(events)
    if not ordered:
        return []

    sessions: list[Session] = []
    current = [ordered[0]]

    for event in ordered[1:]:
        if continues_session(current[-1], event, config):
            current.append(event)
        else:
            sessions.append(finalize_session(current, config))
            current = [event]

    sessions.append(finalize_session(current, config))
    return sessions
