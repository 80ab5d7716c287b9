"""
Source emission helpers for the synthesizers.

Artifacts are emitted as unindented source text with four-space blocks. The
expansion engine re-indents them to match the host module.
"""

from typing import Iterable, List

from destructure.enums import GenericStyle
from destructure.model import RecordTypeModel

INDENT = "    "


def emit(lines: Iterable[str]) -> str:
  """Joins lines into a source unit ending in a newline."""
  return "\n".join(lines) + "\n"


def indent(lines: Iterable[str], depth: int = 1) -> List[str]:
  """Indents non-empty lines by ``depth`` levels."""
  prefix = INDENT * depth
  return [f"{prefix}{line}" if line else line for line in lines]


def docstring(text: str, depth: int = 0) -> List[str]:
  """
  Formats a docstring block.

  Single-line text stays on one line; multi-line text gets the opening and
  closing quotes on their own lines.
  """
  body = text.strip().splitlines()
  if len(body) == 1:
    return indent([f'"""{body[0]}"""'], depth)
  return indent(['"""', *body, '"""'], depth)


def quote(type_text: str) -> str:
  """
  Turns a type expression into a string annotation.

  Args:
      type_text: e.g. ``Optional['Node']``.

  Returns:
      str: A Python string literal, unchanged if already quoted.
  """
  if type_text[:1] in ("'", '"'):
    return type_text
  return repr(type_text)


def class_header(name: str, model: RecordTypeModel) -> str:
  """
  Builds a ``class`` line carrying the model's generic parameters verbatim.

  Args:
      name: Name of the generated class.
      model: The record the class is derived from.

  Returns:
      str: e.g. ``class DestructBox[T: int]:`` or ``class DestructBox(Generic[T]):``.
  """
  if model.generic_style == GenericStyle.TYPE_PARAMS:
    type_params = ", ".join(p.declaration for p in model.generic_parameters)
    return f"class {name}[{type_params}]:"
  if model.generic_style == GenericStyle.GENERIC_BASE and model.generic_base:
    return f"class {name}({model.generic_base}):"
  return f"class {name}:"


def reindent(code: str, unit: str, prefix: str = "") -> str:
  """
  Re-indents emitted source for a host module.

  Every ``INDENT`` level becomes ``unit`` and each non-empty line gets
  ``prefix``. Docstring bodies are plain lines at the block's indentation, so
  they move along with the code around them.

  Args:
      code: Source produced by ``emit``.
      unit: Indentation of one block level in the host module.
      prefix: Leading whitespace of the scope the code is placed in.

  Returns:
      str: The re-indented source.
  """
  lines = []
  for line in code.splitlines():
    stripped = line.lstrip(" ")
    if not stripped:
      lines.append("")
      continue
    depth = (len(line) - len(stripped)) // len(INDENT)
    lines.append(f"{prefix}{unit * depth}{stripped}")
  return emit(lines)
