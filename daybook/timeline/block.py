"""
Block - the atomic unit of the recorded timeline.

A block is a half-open interval [start, end) with a category and a title.
Timestamps carry a fixed UTC offset which is part of the value: the calendar
date of a timestamp is always taken in its own offset, never re-derived from
the reader's local zone.

Also home to the pure helpers every mutator shares:
- storage_key: which day record a block belongs to (its END date)
- overlaps / check_overlaps / find_overlaps: the overlap guard
- split_at_midnight: the day-crossing normalizer's pure half
"""

from dataclasses import dataclass, replace
from datetime import date, datetime, time, timedelta

from .errors import InvalidBlock

# Closing instant of a day as persisted. A block ending here is treated as
# running until the next midnight when measuring duration.
DAY_END = time(23, 59, 59)
DAY_START = time(0, 0, 0)

DEFAULT_CATEGORY_ID = 0


@dataclass(frozen=True)
class Block:
    start: datetime
    end: datetime
    category_id: int = DEFAULT_CATEGORY_ID
    title: str = ""

    def __post_init__(self):
        if self.start.tzinfo is None or self.end.tzinfo is None:
            raise InvalidBlock("Block timestamps must carry a UTC offset")
        if not self.start < self.end:
            raise InvalidBlock(
                f"Block start {self.start.isoformat()} must be before end {self.end.isoformat()}"
            )
        if not 0 <= self.category_id <= 255:
            raise InvalidBlock(f"category_id out of range: {self.category_id}")

    @property
    def duration(self) -> timedelta:
        """Length of the block, counting a day-end sentinel as midnight."""
        span = self.end - self.start
        if is_day_end(self.end):
            span += timedelta(seconds=1)
        return span

    def with_bounds(self, start: datetime = None, end: datetime = None) -> "Block":
        """Fresh block with replaced bounds (blocks are never mutated in place)."""
        return replace(
            self,
            start=self.start if start is None else start,
            end=self.end if end is None else end,
        )

    def matches(self, start: datetime, end: datetime) -> bool:
        return self.start == start and self.end == end

    def to_dict(self) -> dict:
        return {
            "start_time": self.start.isoformat(),
            "end_time": self.end.isoformat(),
            "block_type_id": self.category_id,
            "title": self.title,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Block":
        """
        Build a block from its persisted form.

        Raises:
            KeyError, TypeError, ValueError: malformed input (InvalidBlock is
            a ValueError). Callers translate these into their own errors.
        """
        return cls(
            start=datetime.fromisoformat(data["start_time"]),
            end=datetime.fromisoformat(data["end_time"]),
            category_id=int(data.get("block_type_id", DEFAULT_CATEGORY_ID)),
            title=str(data.get("title", "")),
        )


def storage_key(block: Block) -> date:
    """Date of the day record a block is stored under: the date of its end."""
    return storage_key_for(block.end)


def storage_key_for(end: datetime) -> date:
    """Day record holding the block that ends at `end`, in end's own offset."""
    return end.date()


def day_start(moment: datetime) -> datetime:
    """00:00:00 on moment's date, keeping moment's offset."""
    return datetime.combine(moment.date(), DAY_START, tzinfo=moment.tzinfo)


def day_end(moment: datetime) -> datetime:
    """23:59:59 on moment's date, keeping moment's offset."""
    return datetime.combine(moment.date(), DAY_END, tzinfo=moment.tzinfo)


def is_day_end(moment: datetime) -> bool:
    return moment.time() == DAY_END


def crosses_midnight(block: Block) -> bool:
    return block.start.date() != block.end.date()


# =============================================================================
# OVERLAP GUARD
# =============================================================================


def overlaps(a: Block, b: Block) -> bool:
    """True iff neither block ends at or before the other starts."""
    return a.start < b.end and b.start < a.end


def find_overlaps(candidate: Block, blocks) -> list[Block]:
    """All blocks in `blocks` that overlap `candidate`."""
    return [block for block in blocks if overlaps(candidate, block)]


def check_overlaps(candidate: Block, blocks) -> bool:
    """True if `candidate` overlaps any block in `blocks`."""
    return any(overlaps(candidate, block) for block in blocks)


# =============================================================================
# DAY CROSSING
# =============================================================================


def split_at_midnight(block: Block) -> list[Block]:
    """
    Split a block whose start and end fall on different dates.

    Returns at most two pieces: [start, day-end of start date) and
    [day-start of end date, end). A piece that would be empty is dropped,
    e.g. for a block ending exactly at midnight.

    Raises:
        InvalidBlock: the block spans more than one midnight
    """
    if not crosses_midnight(block):
        return [block]
    if block.end.date() - block.start.date() > timedelta(days=1):
        raise InvalidBlock(
            f"Block {block.start.isoformat()} - {block.end.isoformat()} "
            "spans more than one midnight"
        )

    pieces = []
    first_end = day_end(block.start)
    if block.start < first_end:
        pieces.append(block.with_bounds(end=first_end))
    second_start = day_start(block.end)
    if second_start < block.end:
        pieces.append(block.with_bounds(start=second_start))
    return pieces
