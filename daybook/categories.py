"""
Category catalog - the flat list of block categories.

Stored wholesale in <root>/blocktypes.json:

    [{"id": 0, "name": "Uncategorized", "color": {"r": 128, "g": 128, "b": 128}}, ...]

Id 0 is reserved for the default category and is created the first time the
catalog is loaded.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from daybook.json_file import atomic_write_json, read_json
from daybook.timeline.errors import DecodeFailure, IOFailure, TimelineError

logger = logging.getLogger(__name__)

CATALOG_FILE = "blocktypes.json"
MAX_CATEGORY_ID = 255


class DuplicateCategory(TimelineError):
    """A new category repeats an existing name or colour, or no id is left."""

    pass


@dataclass(frozen=True)
class Color:
    r: int
    g: int
    b: int

    def __post_init__(self):
        for channel in (self.r, self.g, self.b):
            if not 0 <= channel <= 255:
                raise ValueError(f"Colour channel out of range: {channel}")

    def to_dict(self) -> dict:
        return {"r": self.r, "g": self.g, "b": self.b}


@dataclass(frozen=True)
class Category:
    id: int
    name: str
    color: Color

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "color": self.color.to_dict()}

    @classmethod
    def from_dict(cls, data: dict) -> "Category":
        color = data["color"]
        return cls(
            id=int(data["id"]),
            name=str(data["name"]),
            color=Color(int(color["r"]), int(color["g"]), int(color["b"])),
        )


DEFAULT_CATEGORY = Category(id=0, name="Uncategorized", color=Color(128, 128, 128))


class CategoryCatalog:
    def __init__(self, root: Path):
        self.path = Path(root) / CATALOG_FILE

    def load(self) -> list[Category]:
        """All categories, creating the catalog with the default entry if missing."""
        try:
            payload = read_json(self.path)
        except FileNotFoundError:
            logger.info(f"Creating category catalog at {self.path}")
            self.save([DEFAULT_CATEGORY])
            return [DEFAULT_CATEGORY]
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise DecodeFailure(f"Corrupt category catalog {self.path}: {e}", self.path) from e
        except OSError as e:
            raise IOFailure(f"Cannot read {self.path}: {e}", self.path) from e

        if not isinstance(payload, list):
            raise DecodeFailure(f"Corrupt category catalog {self.path}: expected a list", self.path)
        try:
            return [Category.from_dict(item) for item in payload]
        except (KeyError, TypeError, ValueError) as e:
            raise DecodeFailure(f"Corrupt category catalog {self.path}: {e}", self.path) from e

    def save(self, categories: list[Category]) -> None:
        try:
            atomic_write_json(self.path, [category.to_dict() for category in categories])
        except OSError as e:
            raise IOFailure(f"Cannot write {self.path}: {e}", self.path) from e

    def add(self, name: str, color: Color) -> Category:
        """
        Append a new category with the next free id.

        Raises:
            DuplicateCategory: name or colour already used
        """
        categories = self.load()
        for existing in categories:
            if existing.name == name:
                raise DuplicateCategory(f"Category name already exists: {name}")
            if existing.color == color:
                raise DuplicateCategory(f"Category colour already used by {existing.name}")

        next_id = max((c.id for c in categories), default=-1) + 1
        if next_id > MAX_CATEGORY_ID:
            raise DuplicateCategory("No free category id left")
        category = Category(id=next_id, name=name, color=color)
        categories.append(category)
        self.save(categories)
        return category

    def merge(self, incoming: list[Category]) -> list[Category]:
        """Add every incoming category not already in the catalog. Returns the added ones."""
        categories = self.load()
        added = []
        for category in incoming:
            if category not in categories:
                categories.append(category)
                added.append(category)
        if added:
            self.save(categories)
            logger.info(f"Merged {len(added)} new categor{'y' if len(added) == 1 else 'ies'}")
        return added
