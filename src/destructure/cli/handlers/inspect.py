"""
Inspect Command Handler.

Prints the record models extracted from the annotated classes of a file,
either as a rich table per class or as JSON.
"""

import json
from pathlib import Path

from rich.table import Table

from destructure.core.engine import ExpansionEngine
from destructure.utils.console import console, log_error, log_warning


def handle_inspect(input_path: Path, as_json: bool) -> int:
  """
  Handles the 'inspect' command execution.

  Args:
      input_path: Source file.
      as_json: Print the models as a JSON list instead of tables.

  Returns:
      int: Exit code (1 if the file is missing or any class is unsupported).
  """
  if not input_path.is_file():
    log_error(f"Input file not found: {input_path}")
    return 1

  code = input_path.read_text(encoding="utf-8")
  result = ExpansionEngine().inspect(code, filename=str(input_path))

  for error in result.errors:
    log_error(error)

  if as_json:
    print(json.dumps([m.model_dump(mode="json") for m in result.models], indent=2))
    return 0 if result.success else 1

  if not result.models and result.success:
    log_warning(f"No annotated classes in {input_path}")

  for model in result.models:
    caps = ", ".join(sorted(c.value for c in model.requested_capabilities))
    generics = ", ".join(p.declaration for p in model.generic_parameters) or "-"
    table = Table(title=f"{model.type_name} ({caps})", caption=f"{model.location}  generics: {generics}")
    table.add_column("#", justify="right")
    table.add_column("Field", style="cyan")
    table.add_column("Type", style="magenta")
    table.add_column("Visibility")
    for f in model.fields:
      table.add_row(str(f.order_index), f.name, f.declared_type, f.visibility.value)
    console.print(table)

  return 0 if result.success else 1
