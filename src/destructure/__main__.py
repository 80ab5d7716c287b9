"""
Entry point for module execution (``python -m destructure``).

This module delegates execution to the CLI handler in ``destructure.cli.__main__``.
"""

import sys
from destructure.cli.__main__ import main

if __name__ == "__main__":
  sys.exit(main())
