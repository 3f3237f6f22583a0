"""
Block Manager - the mutating operations on the timeline.

Every operation reads the affected day record(s), validates, and rewrites
the whole record. Enforces invariants:
- No two blocks in a day record overlap
- A block is stored under the date of its end (storage_key)
- Blocks crossing midnight are split so each half lives on its own date

No locking happens here. Two mutations racing on the same date are
last-writer-wins; callers that need more serialise per date (see locks.py).
"""

import logging
from datetime import date, datetime, timedelta

from .block import (
    Block,
    crosses_midnight,
    day_start,
    find_overlaps,
    split_at_midnight,
    storage_key,
    storage_key_for,
)
from .current_block import CurrentBlock, CurrentBlockStore
from .day_store import DayStore
from .errors import InvalidBlock, NotFound, OverlapConflict

logger = logging.getLogger(__name__)


class BlockManager:
    """
    Append, split and adjust blocks in a DayStore.

    Responsibilities:
    - Guard every append against overlap
    - Normalize day-crossing blocks into per-day halves
    - Keep the timeline gapless around split and adjusted blocks
    - Close the running block when the user moves on (next_block)
    """

    def __init__(self, store: DayStore, current_store: CurrentBlockStore | None = None):
        self.store = store
        self.current_store = current_store

    # -------------------------------------------------------------------------
    # Append
    # -------------------------------------------------------------------------

    def append(self, block: Block) -> list[Block]:
        """
        Append a block to its day record.

        Returns:
            The pieces actually stored (two for a day-crossing block)

        Raises:
            OverlapConflict: the block (or either half) overlaps the record;
                nothing is written
            InvalidBlock: the block spans more than one midnight, or lies
                entirely inside the day-end second (23:59:59 to midnight)
        """
        if crosses_midnight(block):
            return self._append_day_crossing(block)

        day = storage_key(block)
        existing = self.store.read(day)
        conflicts = find_overlaps(block, existing)
        if conflicts:
            raise OverlapConflict(block, conflicts)

        existing.append(block)
        self.store.write(day, existing)
        return [block]

    def _append_day_crossing(self, block: Block) -> list[Block]:
        """
        Store each half of a midnight-crossing block on its own date.

        Both halves are checked before either is written. If the second write
        fails after the first succeeded the first half stays committed; that
        window is logged and the error re-raised.
        """
        pieces = split_at_midnight(block)
        if not pieces:
            raise InvalidBlock(
                f"Block {block.start.isoformat()} - {block.end.isoformat()} "
                "lies inside the day-end second and cannot be stored"
            )
        staged = []
        for piece in pieces:
            day = storage_key(piece)
            existing = self.store.read(day)
            conflicts = find_overlaps(piece, existing)
            if conflicts:
                raise OverlapConflict(piece, conflicts)
            staged.append((day, existing + [piece]))

        for index, (day, blocks) in enumerate(staged):
            try:
                self.store.write(day, blocks)
            except Exception:
                if index:
                    logger.error(
                        f"Day-crossing append partially committed: "
                        f"{staged[0][0].isoformat()} written, {day.isoformat()} failed",
                        extra={"days": [d for d, _ in staged], "day": day},
                    )
                raise
        logger.info(
            f"Split day-crossing block {block.start.isoformat()} - {block.end.isoformat()} "
            f"into {len(pieces)} piece(s)",
            extra={"days": [d for d, _ in staged], "pieces": len(pieces)},
        )
        return pieces

    # -------------------------------------------------------------------------
    # Split
    # -------------------------------------------------------------------------

    def split(
        self,
        start: datetime,
        end: datetime,
        split_time: datetime,
        before: tuple[int, str],
        after: tuple[int, str],
    ) -> tuple[Block, Block]:
        """
        Replace the block [start, end) with [start, split_time) and
        [split_time, end), in the same slot.

        Args:
            start, end: bounds identifying the existing block
            split_time: must lie strictly inside (start, end)
            before, after: (category_id, title) for each resulting piece

        Raises:
            NotFound: no block with these bounds
            InvalidBlock: split_time outside the block
        """
        day = storage_key_for(end)
        blocks = self.store.read(day)
        index = self._locate(blocks, day, start, end)

        if not start < split_time < end:
            raise InvalidBlock(
                f"Split time {split_time.isoformat()} is not inside "
                f"{start.isoformat()} - {end.isoformat()}"
            )

        original = blocks[index]
        first = Block(original.start, split_time, before[0], before[1])
        second = Block(split_time, original.end, after[0], after[1])
        blocks[index : index + 1] = [first, second]
        self.store.write(day, blocks)
        return first, second

    # -------------------------------------------------------------------------
    # Adjust
    # -------------------------------------------------------------------------

    def adjust(
        self,
        start: datetime,
        end: datetime,
        new_start: datetime,
        new_end: datetime,
        category_id: int,
        title: str,
    ) -> Block:
        """
        Move a block's bounds and relabel it, dragging its neighbours along.

        The slot before the target gets end = new_start and the slot after
        gets start = new_end, so the timeline stays gapless. The rewritten
        slots are then checked against every other block in the record.

        Raises:
            NotFound: no block with bounds (start, end)
            InvalidBlock: new bounds inverted, outside the record's date, or
                collapsing a neighbour
            OverlapConflict: new bounds reach past a neighbour into another block
        """
        day = storage_key_for(end)
        blocks = self.store.read(day)
        index = self._locate(blocks, day, start, end)

        if not new_start < new_end:
            raise InvalidBlock(
                f"Adjusted start {new_start.isoformat()} must be before end {new_end.isoformat()}"
            )
        if new_start.date() != day or new_end.date() != day:
            raise InvalidBlock(f"Adjusted bounds must stay within {day.isoformat()}")

        target = Block(new_start, new_end, category_id, title)
        changed = {index: target}
        if index > 0:
            changed[index - 1] = self._reshape(blocks[index - 1], end=new_start)
        if index + 1 < len(blocks):
            changed[index + 1] = self._reshape(blocks[index + 1], start=new_end)

        for slot, block in changed.items():
            blocks[slot] = block
        for slot, block in changed.items():
            others = [other for i, other in enumerate(blocks) if i != slot]
            conflicts = find_overlaps(block, others)
            if conflicts:
                raise OverlapConflict(block, conflicts)

        self.store.write(day, blocks)
        return target

    @staticmethod
    def _reshape(neighbour: Block, start: datetime = None, end: datetime = None) -> Block:
        try:
            return neighbour.with_bounds(start=start, end=end)
        except InvalidBlock as e:
            raise InvalidBlock(
                f"Adjustment would collapse neighbouring block "
                f"{neighbour.start.isoformat()} - {neighbour.end.isoformat()}"
            ) from e

    # -------------------------------------------------------------------------
    # Next block
    # -------------------------------------------------------------------------

    def next_block(self, new_current: CurrentBlock, now: datetime | None = None) -> list[Block]:
        """
        Close the running block and switch to `new_current`.

        The closed block runs from the end of the last recorded block (today,
        else yesterday, else today's midnight) until `now`, and carries the
        previously stored current template.

        Returns:
            The stored pieces of the closed block (empty if no time elapsed)
        """
        if self.current_store is None:
            raise RuntimeError("next_block needs a CurrentBlockStore")
        now = now or datetime.now().astimezone()
        previous = self.current_store.get_or_default()

        start = self._last_end(now.date()) or self._last_end(now.date() - timedelta(days=1))
        if start is None:
            start = day_start(now)

        stored = []
        closed = previous.make_block(start, now) if start < now else None
        if closed is None or not split_at_midnight(closed):
            logger.info(f"No time elapsed since {start.isoformat()}, nothing to close")
        else:
            stored = self.append(closed)
        self.current_store.save(new_current)
        return stored

    def _last_end(self, day: date) -> datetime | None:
        blocks = self.store.read(day)
        if not blocks:
            return None
        return max(block.end for block in blocks)

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    @staticmethod
    def _locate(blocks: list[Block], day: date, start: datetime, end: datetime) -> int:
        for index, block in enumerate(blocks):
            if block.matches(start, end):
                return index
        raise NotFound(day, start, end)
