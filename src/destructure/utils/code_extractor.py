"""
Utility to extract source code from live Python classes.

The runtime decorators generate code from the same class syntax the source
expansion engine sees. This module reads that syntax back with ``inspect`` and
records where it came from, so diagnostics point at the user's file.
"""

import inspect
import textwrap
from typing import Any, NamedTuple, Optional, Type

from destructure.errors import SourceLocation, SourceUnavailable


class ExtractedSource(NamedTuple):
  """Dedented class source and its position in the defining file."""

  code: str
  location: SourceLocation


class CodeExtractor:
  """
  Extracts the source code of decorated classes.
  """

  @staticmethod
  def extract_class(cls_obj: Type[Any]) -> ExtractedSource:
    """
    Reads the source code of a class, decorators included.

    Args:
        cls_obj (Type[Any]): The class object being decorated.

    Returns:
        ExtractedSource: The dedented definition and its location.

    Raises:
        SourceUnavailable: If source code cannot be retrieved (interactive
            sessions, ``exec`` strings, compiled modules).
        TypeError: If input is not a class.
    """
    if not inspect.isclass(cls_obj):
      raise TypeError(f"Expected a class, got {type(cls_obj)}")

    filename: Optional[str] = None
    try:
      filename = inspect.getsourcefile(cls_obj)
      lines, first_line = inspect.getsourcelines(cls_obj)
    except (OSError, TypeError) as e:
      raise SourceUnavailable(
        f"could not read the class definition ({e}); use 'destructure expand' to generate the code ahead of time",
        type_name=cls_obj.__name__,
        location=SourceLocation(filename),
      ) from e

    # Nested definitions are indented
    return ExtractedSource(
      code=textwrap.dedent("".join(lines)),
      location=SourceLocation(filename, first_line, 0),
    )
