from __future__ import annotations

import os
from pathlib import Path

APP_ENV_HOME = "DAYBOOK_HOME"


def app_home() -> Path:
    """
    User-writable home for Daybook.
    Override with DAYBOOK_HOME.
    """
    if os.environ.get(APP_ENV_HOME):
        return Path(os.environ[APP_ENV_HOME]).expanduser().resolve()
    return (Path.home() / ".daybook").resolve()


def data_dir() -> Path:
    """
    Data root holding timeblocks/, blocktypes.json and currentblock.json.
    """
    d = app_home() / "data"
    d.mkdir(parents=True, exist_ok=True)
    return d
