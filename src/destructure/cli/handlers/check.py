"""
Check Command Handler.

Runs the full expansion in memory and reports diagnostics without writing
anything. Intended for CI: the exit code is 1 if any annotated class would
fail to expand.
"""

from pathlib import Path
from typing import Dict, List, Optional

from destructure.config import GeneratorConfig
from destructure.core.engine import ExpansionEngine, ExpansionResult
from destructure.cli.handlers.expand import _print_batch_summary
from destructure.utils.console import log_error, log_warning


def handle_check(input_path: Path, prefix: Optional[str]) -> int:
  """
  Handles the 'check' command execution.

  Args:
      input_path: Source file or directory.
      prefix: Override for the companion type prefix.

  Returns:
      int: 0 if every annotated class expands cleanly, 1 otherwise.
  """
  if not input_path.exists():
    log_error(f"Input not found: {input_path}")
    return 1

  try:
    config = GeneratorConfig.load(
      companion_prefix=prefix,
      search_path=input_path if input_path.is_dir() else input_path.parent,
    )
  except ValueError as e:
    log_error(f"Invalid configuration: {e}")
    return 1

  files: List[Path] = [input_path] if input_path.is_file() else sorted(input_path.rglob("*.py"))
  if not files:
    log_warning(f"No .py files found in {input_path}")
    return 0

  engine = ExpansionEngine(config)
  results: Dict[str, ExpansionResult] = {}
  for path in files:
    key = path.name if path == input_path else str(path.relative_to(input_path))
    try:
      code = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
      results[key] = ExpansionResult(success=False, errors=[str(e)])
      continue
    results[key] = engine.run(code, filename=str(path))

  _print_batch_summary(results)
  return 0 if all(r.success for r in results.values()) else 1
