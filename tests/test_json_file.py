"""
Tests for the atomic JSON writer.
"""

import json
import os
import stat

import pytest

from daybook import json_file
from daybook.json_file import atomic_write_json, read_json

pytestmark = pytest.mark.skipif(os.name != "posix", reason="POSIX file modes")


def _mode(path):
    return stat.S_IMODE(path.stat().st_mode)


def test_new_file_gets_umask_default(tmp_path):
    target = tmp_path / "days" / "2025-03-14.json"
    atomic_write_json(target, [])
    assert _mode(target) == 0o666 & ~json_file._UMASK


@pytest.mark.parametrize("mode", [0o644, 0o640])
def test_existing_mode_preserved(tmp_path, mode):
    target = tmp_path / "categories.json"
    target.write_text("[]")
    target.chmod(mode)

    atomic_write_json(target, [{"id": 0}])

    assert _mode(target) == mode
    assert read_json(target) == [{"id": 0}]


def test_no_temporary_left_behind(tmp_path):
    target = tmp_path / "current.json"
    atomic_write_json(target, {"block_type_id": 1})
    assert [p.name for p in tmp_path.iterdir()] == ["current.json"]
    assert json.loads(target.read_text()) == {"block_type_id": 1}
