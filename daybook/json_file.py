"""
JSON file helpers shared by every file-backed record.

Writes go to a temporary file in the target directory and are moved into
place with os.replace, so a reader sees either the old record or the new
one, never a truncated file. The replacement keeps the mode of the file it
replaces; a new file gets the mode open() would give it under the umask.
"""

import json
import os
import stat
import tempfile
from pathlib import Path
from typing import Any

_UMASK = os.umask(0)
os.umask(_UMASK)


def read_json(path: Path) -> Any:
    """
    Load a JSON document.

    Raises:
        FileNotFoundError: the file does not exist
        OSError: any other filesystem failure
        json.JSONDecodeError: the content is not valid JSON
        UnicodeDecodeError: the content is not UTF-8
    """
    with open(path, encoding="utf-8") as handle:
        return json.load(handle)


def _target_mode(path: Path) -> int:
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        return 0o666 & ~_UMASK


def atomic_write_json(path: Path, payload: Any) -> None:
    """Replace `path` with the JSON encoding of `payload`."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    mode = _target_mode(path)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            json.dump(payload, handle, indent=2, ensure_ascii=False)
            handle.flush()
            os.fsync(handle.fileno())
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise
