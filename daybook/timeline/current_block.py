"""
Current block - what the user is doing right now.

A single record with no timestamps, overwritten wholesale on every change.
It is the template for blocks manufactured by next_block and by the
reconciler's gap filler.
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from daybook.json_file import atomic_write_json, read_json

from .block import DEFAULT_CATEGORY_ID, Block
from .errors import DecodeFailure, IOFailure

logger = logging.getLogger(__name__)

CURRENT_FILE = "currentblock.json"


@dataclass(frozen=True)
class CurrentBlock:
    category_id: int = DEFAULT_CATEGORY_ID
    title: str = ""

    def make_block(self, start: datetime, end: datetime) -> Block:
        """Block over [start, end) carrying this template's category and title."""
        return Block(start=start, end=end, category_id=self.category_id, title=self.title)

    def to_dict(self) -> dict:
        return {"block_type_id": self.category_id, "current_block_name": self.title}

    @classmethod
    def from_dict(cls, data: dict) -> "CurrentBlock":
        return cls(
            category_id=int(data["block_type_id"]),
            title=str(data.get("current_block_name", "")),
        )


class CurrentBlockStore:
    """File-backed current block at <root>/currentblock.json."""

    def __init__(self, root: Path):
        self.path = Path(root) / CURRENT_FILE

    def get(self) -> CurrentBlock | None:
        """The stored template, or None if none has been saved yet."""
        try:
            payload = read_json(self.path)
        except FileNotFoundError:
            return None
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise DecodeFailure(f"Corrupt current block {self.path}: {e}", self.path) from e
        except OSError as e:
            raise IOFailure(f"Cannot read {self.path}: {e}", self.path) from e
        try:
            return CurrentBlock.from_dict(payload)
        except (KeyError, TypeError, ValueError) as e:
            raise DecodeFailure(f"Corrupt current block {self.path}: {e}", self.path) from e

    def get_or_default(self) -> CurrentBlock:
        current = self.get()
        if current is None:
            logger.info("No current block stored, using the default category")
            return CurrentBlock()
        return current

    def save(self, current: CurrentBlock) -> None:
        try:
            atomic_write_json(self.path, current.to_dict())
        except OSError as e:
            raise IOFailure(f"Cannot write {self.path}: {e}", self.path) from e
