"""
DayStore - one JSON record per calendar date.

Layout under the data root:

    timeblocks/
        2025-03-14.json   [{"start_time", "end_time", "block_type_id", "title"}, ...]

A record holds the blocks whose END falls on that date (see storage_key).
Order inside a record is insertion order; readers must not assume it is
sorted.
"""

import json
import logging
from datetime import date
from pathlib import Path

from daybook.json_file import atomic_write_json, read_json

from .block import Block
from .errors import DecodeFailure, IOFailure

logger = logging.getLogger(__name__)

RECORD_DIR = "timeblocks"


class DayStore:
    """
    File-backed day records rooted at an explicit data directory.

    Corrupt records raise DecodeFailure unless `treat_corrupt_as_empty` is
    set, in which case they are logged and read as empty. The next write to
    that date then replaces the corrupt file.
    """

    def __init__(self, root: Path, treat_corrupt_as_empty: bool = False):
        self.root = Path(root)
        self.record_dir = self.root / RECORD_DIR
        self.treat_corrupt_as_empty = treat_corrupt_as_empty

    def path_for(self, day: date) -> Path:
        return self.record_dir / f"{day.isoformat()}.json"

    def _ensure_dir(self) -> None:
        try:
            self.record_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise IOFailure(f"Cannot create {self.record_dir}: {e}", self.record_dir) from e

    def read(self, day: date) -> list[Block]:
        """Blocks stored for `day`, or [] if the day has no record yet."""
        self._ensure_dir()
        path = self.path_for(day)
        try:
            payload = read_json(path)
        except FileNotFoundError:
            return []
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return self._corrupt(path, f"invalid JSON: {e}")
        except OSError as e:
            raise IOFailure(f"Cannot read {path}: {e}", path) from e

        if not isinstance(payload, list):
            return self._corrupt(path, f"expected a list, got {type(payload).__name__}")

        blocks = []
        for index, item in enumerate(payload):
            if not isinstance(item, dict):
                return self._corrupt(path, f"item {index} is not an object")
            try:
                blocks.append(Block.from_dict(item))
            except (KeyError, TypeError, ValueError) as e:
                return self._corrupt(path, f"item {index}: {e}")
        return blocks

    def write(self, day: date, blocks: list[Block]) -> None:
        """Atomically replace the whole record for `day`."""
        self._ensure_dir()
        path = self.path_for(day)
        try:
            atomic_write_json(path, [block.to_dict() for block in blocks])
        except OSError as e:
            raise IOFailure(f"Cannot write {path}: {e}", path) from e
        logger.debug(f"Wrote {len(blocks)} block(s) to {path.name}")

    def dates(self) -> list[date]:
        """Dates that currently have a record, ascending."""
        self._ensure_dir()
        found = []
        try:
            entries = list(self.record_dir.glob("*.json"))
        except OSError as e:
            raise IOFailure(f"Cannot list {self.record_dir}: {e}", self.record_dir) from e
        for entry in entries:
            try:
                found.append(date.fromisoformat(entry.stem))
            except ValueError:
                logger.debug(f"Ignoring non-record file {entry.name}")
        return sorted(found)

    def _corrupt(self, path: Path, reason: str) -> list[Block]:
        if self.treat_corrupt_as_empty:
            logger.warning(
                f"Corrupt day record {path} read as empty: {reason}", extra={"path": str(path)}
            )
            return []
        raise DecodeFailure(f"Corrupt day record {path}: {reason}", path)
