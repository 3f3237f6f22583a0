"""
HTTP surface of Daybook.

Usage:
    from daybook.api import create_app

    app = create_app(data_root=Path("~/.daybook/data").expanduser())
"""

from .server import create_app

__all__ = ["create_app"]
