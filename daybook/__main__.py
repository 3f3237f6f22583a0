"""
Daybook - `python -m daybook` entry point.
"""

import sys

from daybook.cli import main

if __name__ == "__main__":
    sys.exit(main())
