"""
Tests for the category catalog.
"""

import pytest

from daybook.categories import (
    CATALOG_FILE,
    DEFAULT_CATEGORY,
    Category,
    CategoryCatalog,
    Color,
    DuplicateCategory,
)
from daybook.timeline import DecodeFailure


@pytest.fixture
def catalog(data_root):
    return CategoryCatalog(data_root)


def test_first_load_creates_default(catalog, data_root):
    assert catalog.load() == [DEFAULT_CATEGORY]
    assert (data_root / CATALOG_FILE).exists()
    assert DEFAULT_CATEGORY.id == 0


def test_add_assigns_next_id(catalog):
    work = catalog.add("Work", Color(0, 120, 255))
    rest = catalog.add("Rest", Color(0, 200, 0))

    assert (work.id, rest.id) == (1, 2)
    assert [c.name for c in catalog.load()] == ["Uncategorized", "Work", "Rest"]


def test_add_rejects_duplicate_name(catalog):
    catalog.add("Work", Color(0, 120, 255))
    with pytest.raises(DuplicateCategory):
        catalog.add("Work", Color(1, 2, 3))


def test_add_rejects_duplicate_colour(catalog):
    with pytest.raises(DuplicateCategory):
        catalog.add("Grey", Color(128, 128, 128))


def test_colour_channels_validated():
    with pytest.raises(ValueError):
        Color(0, 256, 0)


def test_merge_adds_only_unknown(catalog):
    work = catalog.add("Work", Color(0, 120, 255))
    music = Category(id=7, name="Music", color=Color(200, 0, 200))

    added = catalog.merge([DEFAULT_CATEGORY, work, music])

    assert added == [music]
    assert catalog.load()[-1] == music
    assert catalog.merge([music]) == []


def test_corrupt_catalog_raises(catalog, data_root):
    (data_root / CATALOG_FILE).write_text('[{"id": 0}]')
    with pytest.raises(DecodeFailure):
        catalog.load()


def test_undecodable_catalog_raises(catalog, data_root):
    (data_root / CATALOG_FILE).write_bytes(b"[\xff]")
    with pytest.raises(DecodeFailure):
        catalog.load()
