"""
Expand Command Handler.

This module implements the ``destructure expand`` command. It orchestrates:
1. Configuration loading (``[tool.destructure]`` plus CLI overrides).
2. Module expansion via the ExpansionEngine.
3. Output writing, or printing to stdout for a single file without ``--out``.

A file that produces any diagnostic is never written.
"""

from pathlib import Path
from typing import Dict, Optional

from rich.table import Table

from destructure.config import GeneratorConfig
from destructure.core.engine import ExpansionEngine, ExpansionResult
from destructure.utils.console import console, log_error, log_info, log_success, log_warning


def handle_expand(
  input_path: Path,
  output_path: Optional[Path],
  prefix: Optional[str],
  inject_imports: Optional[bool],
) -> int:
  """
  Handles the 'expand' command execution.

  Args:
      input_path: Path to the source file or directory to expand.
      output_path: Where expanded code should be saved.
      prefix: Override for the companion type prefix.
      inject_imports: Override for import injection (None keeps the toml value).

  Returns:
      int: Exit code (0 for success, 1 if any file failed).
  """
  if not input_path.exists():
    log_error(f"Input not found: {input_path}")
    return 1

  try:
    config = GeneratorConfig.load(
      companion_prefix=prefix,
      inject_imports=inject_imports,
      search_path=input_path if input_path.is_dir() else input_path.parent,
    )
  except ValueError as e:
    log_error(f"Invalid configuration: {e}")
    return 1

  engine = ExpansionEngine(config)
  batch_results: Dict[str, ExpansionResult] = {}

  if input_path.is_file():
    result = _expand_single_file(input_path, output_path, engine)
    batch_results[input_path.name] = result
    if not result.success:
      _print_batch_summary(batch_results)
      return 1
    return 0

  if not output_path:
    log_error("Directory expansion requires --out destination directory.")
    return 1

  py_files = sorted(input_path.rglob("*.py"))
  if not py_files:
    log_warning(f"No .py files found in {input_path}")
    return 0

  log_info(f"Processing {len(py_files)} files from {input_path}...")

  for src_file in py_files:
    rel_path = src_file.relative_to(input_path)
    result = _expand_single_file(src_file, output_path / rel_path, engine)
    batch_results[str(rel_path)] = result

  _print_batch_summary(batch_results)
  return 0 if all(r.success for r in batch_results.values()) else 1


def _expand_single_file(
  input_path: Path,
  output_path: Optional[Path],
  engine: ExpansionEngine,
) -> ExpansionResult:
  """
  Expands a single file.

  Args:
      input_path: Source file path.
      output_path: Destination file path, or None to print to stdout.
      engine: The configured engine.

  Returns:
      ExpansionResult: Result object containing status and code.
  """
  try:
    code = input_path.read_text(encoding="utf-8")
  except (OSError, UnicodeDecodeError) as e:
    log_error(f"Failed to read {input_path}: {e}")
    return ExpansionResult(success=False, errors=[str(e)])

  result = engine.run(code, filename=str(input_path))
  if not result.success:
    for error in result.errors:
      log_error(error)
    return result

  if output_path:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(result.code, encoding="utf-8")
    if result.models:
      log_success(f"Expanded {', '.join(result.expanded_types)}: [path]{input_path}[/path] -> [path]{output_path}[/path]")
  else:
    print(result.code, end="")

  return result


def _print_batch_summary(results: Dict[str, ExpansionResult]) -> None:
  """
  Renders a summary table of expansion results to the console.

  Args:
      results: Dictionary mapping filenames to expansion results.
  """
  total = len(results)
  expanded = sum(len(r.models) for r in results.values())
  failures = sum(1 for r in results.values() if not r.success)

  if failures == 0:
    log_success(f"Batch Complete: {total} files processed, {expanded} classes expanded.")
    return

  table = Table(title="Expansion Report")
  table.add_column("File", style="cyan")
  table.add_column("Status", justify="center")
  table.add_column("Issues", style="red")

  for filename, res in results.items():
    if res.success:
      continue
    issues = "\n".join(res.errors) if res.errors else "Unknown Error"
    table.add_row(filename, "❌ Failed", issues)

  console.print(table)
  console.print(f"\n[bold]Summary:[/bold] {total - failures} Passed, {failures} Failed.")
