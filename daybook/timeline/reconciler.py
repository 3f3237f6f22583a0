"""
Reconciler - merge a second copy of the timeline into the store.

A client that was offline keeps recording blocks; when it reconnects it
sends its blocks grouped by date together with its current template. The
server always wins for any span it has already recorded: sync only extends
the known timeline forward.

Per date, ascending:
1. self_end = latest end among the server's blocks for that date
2. If self_end exists:
   - incoming blocks starting before self_end are dropped
   - nothing left: fill [self_end, day-end) unless the day is already closed
   - otherwise fill [self_end, earliest incoming start) if there is a gap,
     then append the incoming blocks
3. Otherwise append every incoming block
Filler blocks carry the template the server had before the client's data
arrived. The incoming template is stored last.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date

from .block import Block, day_end
from .block_manager import BlockManager
from .current_block import CurrentBlock, CurrentBlockStore

logger = logging.getLogger(__name__)


@dataclass
class DateOutcome:
    day: date
    appended: int = 0
    dropped: int = 0
    filler: Block | None = None


@dataclass
class ReconcileReport:
    dates: list[DateOutcome] = field(default_factory=list)

    @property
    def appended(self) -> int:
        return sum(outcome.appended for outcome in self.dates)

    @property
    def dropped(self) -> int:
        return sum(outcome.dropped for outcome in self.dates)

    @property
    def fillers(self) -> list[Block]:
        return [outcome.filler for outcome in self.dates if outcome.filler is not None]


class Reconciler:
    """
    Merges incoming per-date timelines through a BlockManager.

    Both stores are injected so the algorithm can run against in-memory
    stores in tests.
    """

    def __init__(self, manager: BlockManager, current_store: CurrentBlockStore):
        self.manager = manager
        self.store = manager.store
        self.current_store = current_store

    def reconcile(
        self, incoming: Mapping[date, list[Block]], current: CurrentBlock
    ) -> ReconcileReport:
        """
        Merge `incoming` date by date, then store `current`.

        Raises:
            OverlapConflict, InvalidBlock, IOFailure, DecodeFailure: from the
                first failing append. Dates processed before it stay committed
                and `current` is not stored.
        """
        template = self.current_store.get() or current
        report = ReconcileReport()

        for day in sorted(incoming):
            outcome = self._reconcile_date(day, incoming[day], template)
            report.dates.append(outcome)
            logger.info(
                f"Reconciled {day.isoformat()}: {outcome.appended} appended, "
                f"{outcome.dropped} dropped, filler={'yes' if outcome.filler else 'no'}",
                extra={
                    "day": day,
                    "appended": outcome.appended,
                    "dropped": outcome.dropped,
                    "filler": outcome.filler is not None,
                },
            )

        self.current_store.save(current)
        return report

    def _reconcile_date(
        self, day: date, blocks: list[Block], template: CurrentBlock
    ) -> DateOutcome:
        outcome = DateOutcome(day=day)
        existing = self.store.read(day)
        ordered = sorted(blocks, key=lambda block: block.start)

        if not existing:
            for block in ordered:
                self.manager.append(block)
                outcome.appended += 1
            return outcome

        self_end = max(block.end for block in existing)
        kept = [block for block in ordered if block.start >= self_end]
        outcome.dropped = len(ordered) - len(kept)

        if not kept:
            if self_end < day_end(self_end):
                outcome.filler = template.make_block(self_end, day_end(self_end))
                self.manager.append(outcome.filler)
            return outcome

        if kept[0].start > self_end:
            outcome.filler = template.make_block(self_end, kept[0].start)
            self.manager.append(outcome.filler)

        for block in kept:
            self.manager.append(block)
            outcome.appended += 1
        return outcome
