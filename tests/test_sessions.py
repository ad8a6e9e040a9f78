"""Tests for grouping commits into sessions."""

from datetime import timedelta, timezone

import pytest

from conftest import make_event
from git_worklog.models import Event, SessionConfig
from git_worklog.sessions import (
    build_sessions,
    continues_session,
    describe_session,
    estimate_minutes,
    sort_events,
)


def test_single_commit_gets_default_time():
    sessions = build_sessions([make_event("A", "10:00")])

    assert len(sessions) == 1
    assert sessions[0].duration_minutes == 30
    assert sessions[0].hours == 0.5


def test_close_commits_form_one_session_with_buffer():
    events = [make_event("A", "10:00"), make_event("A", "10:02"), make_event("A", "10:32")]

    sessions = build_sessions(events, SessionConfig(max_session_gap_hours=2))

    assert len(sessions) == 1
    session = sessions[0]
    assert session.start == events[0].timestamp
    assert session.end == events[-1].timestamp
    assert session.duration_minutes == 62
    assert session.hours == 1.03


def test_long_gap_splits_sessions():
    sessions = build_sessions([make_event("A", "10:00"), make_event("A", "13:45")])

    assert [s.commit_count for s in sessions] == [1, 1]
    assert [s.duration_minutes for s in sessions] == [30, 30]


def test_author_change_splits_sessions():
    sessions = build_sessions([make_event("A", "10:00"), make_event("B", "10:05")])

    assert [s.author for s in sessions] == ["A", "B"]


def test_empty_input():
    assert build_sessions([]) == []


def test_gap_exactly_at_threshold_continues():
    config = SessionConfig(max_session_gap_hours=2)
    first, second = make_event("A", "10:00"), make_event("A", "12:00")

    assert continues_session(first, second, config)
    assert not continues_session(first, make_event("A", "12:01"), config)


def test_gap_is_measured_from_last_commit_not_session_start():
    events = [make_event("A", "08:00"), make_event("A", "09:30"), make_event("A", "11:00")]

    sessions = build_sessions(events, SessionConfig(max_session_gap_hours=2))

    assert len(sessions) == 1
    assert sessions[0].duration_minutes == 180 + 30


def test_unsorted_input_is_sorted():
    events = [make_event("A", "10:32"), make_event("A", "10:00"), make_event("A", "10:02")]

    sessions = build_sessions(events)

    assert [e.timestamp for e in sessions[0].events] == sorted(e.timestamp for e in events)


def test_identical_timestamps_keep_input_order():
    first = make_event("A", "10:00", "first")
    second = Event(id="x", author="A", email="a@example.com", timestamp=first.timestamp, message="second")

    assert sort_events([first, second]) == [first, second]
    assert sort_events([second, first]) == [second, first]


def test_sessions_partition_sorted_input():
    events = [
        make_event("A", "09:00"),
        make_event("B", "09:10"),
        make_event("B", "09:20"),
        make_event("A", "09:25"),
        make_event("A", "14:00"),
        make_event("A", "14:30"),
        make_event("B", "18:00"),
    ]

    sessions = build_sessions(events)

    flattened = [e for s in sessions for e in s.events]
    assert flattened == sort_events(events)
    assert [s.commit_count for s in sessions] == [1, 2, 1, 2, 1]
    for session in sessions:
        assert {e.author for e in session.events} == {session.author}
    for earlier, later in zip(sessions, sessions[1:]):
        assert earlier.end <= later.start


def test_boundaries_follow_gap_and_author_rule():
    config = SessionConfig(max_session_gap_hours=1)
    events = [make_event(author, t) for author, t in [
        ("A", "09:00"), ("A", "09:50"), ("B", "10:00"), ("B", "11:30"), ("B", "12:00"), ("A", "12:10"),
    ]]

    sessions = build_sessions(events, config)

    for session in sessions:
        for prev, cur in zip(session.events, session.events[1:]):
            assert continues_session(prev, cur, config)
    for earlier, later in zip(sessions, sessions[1:]):
        assert not continues_session(earlier.events[-1], later.events[0], config)


def test_building_twice_gives_equal_output():
    events = [make_event("A", "10:00"), make_event("B", "10:05"), make_event("A", "11:00")]

    assert build_sessions(events) == build_sessions(events)


def test_single_commit_duration_ignores_other_settings():
    config = SessionConfig(max_session_gap_hours=0.5, min_session_minutes=120, default_single_event_minutes=45)

    sessions = build_sessions([make_event("A", "10:00")], config)

    assert sessions[0].duration_minutes == 45


def test_minimum_session_floor_applies_to_multi_commit_sessions():
    config = SessionConfig(min_session_minutes=60, default_single_event_minutes=10)

    sessions = build_sessions([make_event("A", "10:00"), make_event("A", "10:05")], config)

    assert sessions[0].duration_minutes == 60


def test_duration_grows_with_span():
    config = SessionConfig()
    start = make_event("A", "10:00")
    durations = []
    for minutes in (0, 1, 10, 45, 90, 119):
        later = Event(
            id=f"c{minutes}",
            author="A",
            email="a@example.com",
            timestamp=start.timestamp + timedelta(minutes=minutes),
        )
        durations.append(estimate_minutes([start, later], config))

    assert durations == sorted(durations)
    assert min(durations) >= config.min_session_minutes


def test_duration_rounds_half_up():
    start = make_event("A", "10:00")
    later = Event(id="b", author="A", email="", timestamp=start.timestamp + timedelta(seconds=30))

    # 0.5 minute span + 30 minutes
    assert estimate_minutes([start, later], SessionConfig()) == 31


def test_hours_come_from_unrounded_duration():
    start = make_event("A", "10:00")
    later = Event(id="b", author="A", email="", timestamp=start.timestamp + timedelta(seconds=30))

    session = build_sessions([start, later])[0]

    assert session.duration == 30.5
    assert session.duration_minutes == 31
    # 30.5 / 60, not 31 / 60
    assert session.hours == 0.51


def test_description_single_commit_is_verbatim():
    assert describe_session([make_event("A", "10:00", "Fix login; again")]) == "Fix login; again"


def test_description_joins_first_three_messages():
    events = [make_event("A", f"10:0{i}", f"msg {i}") for i in range(5)]

    assert describe_session(events[:3]) == "msg 0; msg 1; msg 2"
    assert describe_session(events) == "msg 0; msg 1; msg 2 (and 2 more commits)"


def test_timestamps_in_other_offsets_compare_by_instant():
    plus_two = timezone(timedelta(hours=2))
    events = [make_event("A", "10:00"), make_event("A", "13:30", tz=plus_two)]  # 11:30 UTC

    sessions = build_sessions(events)

    assert len(sessions) == 1
    assert sessions[0].duration_minutes == 90 + 30


def test_event_without_author_is_rejected():
    event = Event(id="x", author="", email="", timestamp=make_event("A", "10:00").timestamp)

    with pytest.raises(ValueError, match="no author"):
        build_sessions([event])


def test_event_without_timestamp_is_rejected():
    with pytest.raises(ValueError, match="timestamp"):
        build_sessions([Event(id="x", author="A", email="", timestamp=None)])


def test_mixed_naive_and_aware_timestamps_are_rejected():
    aware = make_event("A", "10:00")
    naive = Event(id="n", author="A", email="", timestamp=aware.timestamp.replace(tzinfo=None))

    with pytest.raises(ValueError, match="not comparable"):
        build_sessions([aware, naive])


@pytest.mark.parametrize("field", ["max_session_gap_hours", "min_session_minutes", "default_single_event_minutes"])
def test_config_rejects_non_positive_values(field):
    with pytest.raises(ValueError, match=field):
        SessionConfig(**{field: 0})
