"""
Property-based tests for timeline invariants using Hypothesis.

In-memory stores only: Hypothesis replays examples many times per test and
function-scoped fixtures (the autouse DAYBOOK_HOME redirect included) are
not reset between them.
"""

from datetime import timedelta

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from daybook.timeline import (
    Block,
    BlockManager,
    OverlapConflict,
    overlaps,
    split_at_midnight,
    storage_key,
)
from tests.fixtures import DAY, NEXT_DAY, MemoryDayStore, at

MIDNIGHT = at(DAY, 0)
MINUTES_PER_DAY = 24 * 60

# (start minute, length in minutes), kept inside DAY
intervals = st.integers(min_value=0, max_value=MINUTES_PER_DAY - 2).flatmap(
    lambda start: st.tuples(
        st.just(start), st.integers(min_value=1, max_value=MINUTES_PER_DAY - 1 - start)
    )
)


def _block(start_minute: int, length: int) -> Block:
    start = MIDNIGHT + timedelta(minutes=start_minute)
    return Block(start, start + timedelta(minutes=length))


# ============================================================================
# Overlap Guard
# ============================================================================


@settings(max_examples=200, suppress_health_check=[HealthCheck.function_scoped_fixture])
@given(st.lists(intervals, max_size=25))
def test_record_never_overlaps(candidates):
    """Whatever is appended, the stored record stays pairwise disjoint."""
    store = MemoryDayStore()
    manager = BlockManager(store)
    accepted = []
    for start, length in candidates:
        block = _block(start, length)
        try:
            manager.append(block)
            accepted.append(block)
        except OverlapConflict as e:
            assert e.conflicts

    stored = store.read(DAY)
    assert stored == accepted
    for i, a in enumerate(stored):
        for b in stored[i + 1 :]:
            assert not overlaps(a, b)


# ============================================================================
# Split
# ============================================================================


@settings(suppress_health_check=[HealthCheck.function_scoped_fixture])
@given(intervals, st.data())
def test_split_partitions_block(interval, data):
    start, length = interval
    if length < 2:
        return
    offset = data.draw(st.integers(min_value=1, max_value=length - 1))
    original = _block(start, length)
    manager = BlockManager(MemoryDayStore({DAY: [original]}))
    split_time = original.start + timedelta(minutes=offset)

    first, second = manager.split(original.start, original.end, split_time, (1, "a"), (2, "b"))

    assert first.start == original.start
    assert first.end == second.start == split_time
    assert second.end == original.end
    assert first.duration + second.duration == original.duration
    assert manager.store.read(DAY) == [first, second]


# ============================================================================
# Day Crossing
# ============================================================================


@settings(suppress_health_check=[HealthCheck.function_scoped_fixture])
@given(
    st.integers(min_value=0, max_value=MINUTES_PER_DAY - 1),
    st.integers(min_value=1, max_value=MINUTES_PER_DAY - 1),
)
def test_day_crossing_preserves_duration(start_minute, end_minute):
    start = MIDNIGHT + timedelta(minutes=start_minute)
    end = at(NEXT_DAY, 0) + timedelta(minutes=end_minute)
    block = Block(start, end, 3, "Night")

    pieces = split_at_midnight(block)

    assert sum((p.duration for p in pieces), timedelta()) == end - start
    assert [storage_key(p) for p in pieces] == [DAY, NEXT_DAY]
    assert all((p.category_id, p.title) == (3, "Night") for p in pieces)
    assert all(p.start.date() == p.end.date() for p in pieces)
