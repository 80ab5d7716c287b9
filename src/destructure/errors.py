"""
Generation Diagnostics.

Every failure of the generator is a diagnostic attached to the annotated class.
There is no recovery path: a diagnostic aborts generation for that class and
no partial artifacts are emitted.

Hierarchy:

- ``DestructureError``
    - ``UnsupportedShape``: the class is not a named-field record.
    - ``MissingDestructureCapability``: ``mutation`` requested without ``destructure``.
    - ``NamingCollision``: duplicate or reserved identifiers.
    - ``SourceUnavailable``: the class source cannot be retrieved at runtime.
    - ``GenerationError``: emitted code failed to parse.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class SourceLocation:
  """Position of the annotated class in its source file."""

  filename: Optional[str] = None
  line: Optional[int] = None
  column: Optional[int] = None

  def __str__(self) -> str:
    parts = [self.filename or "<unknown>"]
    if self.line is not None:
      parts.append(str(self.line))
      if self.column is not None:
        parts.append(str(self.column))
    return ":".join(parts)


class DestructureError(Exception):
  """
  Base class for all generation diagnostics.

  Attributes:
      message (str): Human-readable description.
      type_name (Optional[str]): Name of the annotated class, if known.
      location (Optional[SourceLocation]): Where the class is defined.
  """

  kind = "DestructureError"

  def __init__(
    self,
    message: str,
    type_name: Optional[str] = None,
    location: Optional[SourceLocation] = None,
  ) -> None:
    super().__init__(message)
    self.message = message
    self.type_name = type_name
    self.location = location

  def with_location(self, location: Optional[SourceLocation]) -> "DestructureError":
    """
    Attaches a location unless one is already known.

    Args:
        location: Position of the annotated class.

    Returns:
        DestructureError: self, for chaining in ``raise`` statements.
    """
    if self.location is None:
      self.location = location
    return self

  def format(self) -> str:
    """
    Renders the diagnostic in compiler style.

    Returns:
        str: e.g. ``models.py:12:0: [NamingCollision] Point: duplicate field 'x'``.
    """
    prefix = f"{self.location}: " if self.location else ""
    subject = f"{self.type_name}: " if self.type_name else ""
    return f"{prefix}[{self.kind}] {subject}{self.message}"

  def __str__(self) -> str:
    return self.format()


class UnsupportedShape(DestructureError):
  """The annotated definition is not a named-field record class."""

  kind = "UnsupportedShape"


class MissingDestructureCapability(DestructureError):
  """Mutation was requested on a class that does not request Destructure."""

  kind = "MissingDestructureCapability"


class NamingCollision(DestructureError):
  """A field or generated name clashes with another identifier."""

  kind = "NamingCollision"


class SourceUnavailable(DestructureError):
  """The runtime decorator could not read the class definition."""

  kind = "SourceUnavailable"


class GenerationError(DestructureError):
  """Generated code is not valid Python. Always a defect in the synthesizers."""

  kind = "GenerationError"
