"""
CLI Command Handlers Facade.

Re-exports handlers from ``destructure.cli.handlers`` so the dispatcher (and
tests patching it) import from a single module.
"""

from destructure.cli.handlers.check import handle_check
from destructure.cli.handlers.expand import (
  handle_expand,
  _expand_single_file,
  _print_batch_summary,
)
from destructure.cli.handlers.inspect import handle_inspect

__all__ = [
  "_expand_single_file",
  "_print_batch_summary",
  "handle_check",
  "handle_expand",
  "handle_inspect",
]
