"""Unit tests for family_dashboard.domain.publisher."""

from __future__ import annotations

import pytest

from family_dashboard.calendar.models import CalendarConfig, FamilySnapshot
from family_dashboard.domain.publisher import SnapshotPublisher

pytestmark = pytest.mark.unit


def test_current_when_nothing_published_then_returns_initial_snapshot():
    initial = FamilySnapshot.empty([CalendarConfig(name="Alice", id="a1")])
    publisher = SnapshotPublisher(initial)

    assert publisher.current() is initial
    assert publisher.version == 0
    assert publisher.state().published_at is None


def test_current_when_no_initial_then_returns_empty_snapshot():
    publisher = SnapshotPublisher()

    assert publisher.current().calendars == ()


def test_publish_when_called_then_swaps_whole_snapshot_and_bumps_version():
    publisher = SnapshotPublisher()
    first = FamilySnapshot.empty([CalendarConfig(name="Alice", id="a1")])
    second = FamilySnapshot.empty([CalendarConfig(name="Bob", id="b2")])

    assert publisher.publish(first) == 1
    held = publisher.current()
    assert publisher.publish(second) == 2

    assert publisher.current() is second
    # A reader keeps the reference it took, untouched by the later publish.
    assert held is first
    assert held.calendars[0].calendar_name == "Alice"


def test_state_when_published_then_snapshot_and_version_are_consistent():
    publisher = SnapshotPublisher()
    snapshot = FamilySnapshot.empty([CalendarConfig(name="Alice", id="a1")])

    publisher.publish(snapshot)
    state = publisher.state()

    assert state.snapshot is snapshot
    assert state.version == 1
    assert state.published_at is not None


def test_publish_when_not_a_snapshot_then_raises_and_keeps_previous():
    initial = FamilySnapshot()
    publisher = SnapshotPublisher(initial)

    with pytest.raises(TypeError):
        publisher.publish({"memberCalendars": []})  # type: ignore[arg-type]

    assert publisher.current() is initial
    assert publisher.version == 0
