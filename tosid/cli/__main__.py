"""
TOSID CLI entry point.

Usage:
    python -m tosid.cli parse <code>
    python -m tosid.cli info <code>
    python -m tosid.cli match <pattern> <code>...
    python -m tosid.cli hierarchy <code>... [--label CODE=LABEL]
    python -m tosid.cli demo
"""

import sys
from .main import main

if __name__ == "__main__":
    sys.exit(main())
