from .check import handle_check
from .expand import handle_expand, _expand_single_file, _print_batch_summary
from .inspect import handle_inspect

__all__ = [
  "_expand_single_file",
  "_print_batch_summary",
  "handle_check",
  "handle_expand",
  "handle_inspect",
]
