"""Data models shared by the session builder, aggregator and exporters."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_MAX_GAP_HOURS = 2.0
DEFAULT_MIN_SESSION_MINUTES = 15
DEFAULT_SESSION_MINUTES = 30  # single-commit sessions and trailing buffer


def round_minutes(minutes: float) -> int:
    # half-up, not banker's rounding
    return int(math.floor(minutes + 0.5))


@dataclass(frozen=True)
class Event:
    """A single authored commit."""

    id: str
    author: str
    email: str
    timestamp: datetime
    message: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "author": self.author,
            "email": self.email,
            "timestamp": self.timestamp.isoformat(),
            "message": self.message,
        }


@dataclass(frozen=True)
class SessionConfig:
    """Tuning knobs for grouping commits into sessions."""

    max_session_gap_hours: float = DEFAULT_MAX_GAP_HOURS
    min_session_minutes: float = DEFAULT_MIN_SESSION_MINUTES
    default_single_event_minutes: float = DEFAULT_SESSION_MINUTES

    def __post_init__(self):
        for name in ("max_session_gap_hours", "min_session_minutes", "default_single_event_minutes"):
            value = getattr(self, name)
            if value is None or value <= 0:
                raise ValueError(f"{name} must be positive, got {value!r}")


@dataclass(frozen=True)
class Session:
    """A contiguous run of same-author commits treated as one work period.

    ``duration`` is the estimate in minutes before rounding. ``hours`` is
    derived from it; ``duration_minutes`` is the whole-minute display value.
    """

    start: datetime
    end: datetime
    author: str
    email: str
    events: tuple[Event, ...]
    duration: float
    description: str

    @property
    def duration_minutes(self) -> int:
        return round_minutes(self.duration)

    @property
    def hours(self) -> float:
        return round(self.duration / 60, 2)

    @property
    def commit_count(self) -> int:
        return len(self.events)

    def to_dict(self) -> dict:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "author": self.author,
            "email": self.email,
            "duration": self.duration,
            "duration_minutes": self.duration_minutes,
            "hours": self.hours,
            "commit_count": self.commit_count,
            "description": self.description,
            "commits": [e.to_dict() for e in self.events],
        }


@dataclass
class Bucket:
    """Daily or weekly total. ``key`` is an ISO date."""

    key: str
    total_hours: float = 0.0
    session_count: int = 0
    commit_count: int = 0

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "total_hours": round(self.total_hours, 2),
            "session_count": self.session_count,
            "commit_count": self.commit_count,
        }


@dataclass
class Summary:
    total_hours: float = 0.0
    session_count: int = 0
    commit_count: int = 0
    author_count: int = 0
    average_session_hours: float = 0.0
    commits_per_hour: float = 0.0
    authors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "total_hours": self.total_hours,
            "session_count": self.session_count,
            "commit_count": self.commit_count,
            "author_count": self.author_count,
            "average_session_hours": self.average_session_hours,
            "commits_per_hour": self.commits_per_hour,
            "authors": list(self.authors),
        }
