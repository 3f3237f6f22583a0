"""
Timeline Module

The day-partitioned record of what the user did and when.

Objects:
- Block (labelled, categorized half-open interval)
- CurrentBlock (template for the block in progress)
- DayStore (one JSON record per date)

Invariants:
- A block is stored under the date of its END
- Blocks in one day record never overlap
- Blocks crossing midnight are stored as two halves
- Sync only extends the recorded timeline forward
"""

from .block import (
    DAY_END,
    DAY_START,
    Block,
    check_overlaps,
    day_end,
    day_start,
    find_overlaps,
    overlaps,
    split_at_midnight,
    storage_key,
    storage_key_for,
)
from .block_manager import BlockManager
from .current_block import CurrentBlock, CurrentBlockStore
from .day_store import DayStore
from .errors import (
    DecodeFailure,
    InvalidBlock,
    IOFailure,
    NotFound,
    OverlapConflict,
    TimelineError,
)
from .locks import DateLocks
from .reconciler import DateOutcome, Reconciler, ReconcileReport

__all__ = [
    "Block",
    "BlockManager",
    "CurrentBlock",
    "CurrentBlockStore",
    "DAY_END",
    "DAY_START",
    "DateLocks",
    "DateOutcome",
    "DayStore",
    "DecodeFailure",
    "IOFailure",
    "InvalidBlock",
    "NotFound",
    "OverlapConflict",
    "ReconcileReport",
    "Reconciler",
    "TimelineError",
    "check_overlaps",
    "day_end",
    "day_start",
    "find_overlaps",
    "overlaps",
    "split_at_midnight",
    "storage_key",
    "storage_key_for",
]
