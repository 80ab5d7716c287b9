"""
Enumerations for destructure.

This module defines the capability markers a class can request and the
categories used to describe generated code.
"""

from enum import Enum


class Capability(str, Enum):
  """
  Capability annotations recognised on a record class.

  The value is the decorator name that requests the capability in source code.
  """

  DESTRUCTURE = "destructure"
  MUTATION = "mutation"
  DESTRUCTURE_REF = "destructure_ref"


class ArtifactKind(str, Enum):
  """
  Kinds of generated code units.
  """

  COMPANION_TYPE = "companion_type"
  CONVERSION = "conversion"  # into_destruct
  RESTORE = "restore"  # from_destruct
  RECONSTRUCT = "reconstruct"
  SUBSTITUTE = "substitute"
  MUTATION_VIEW = "mutation_view"  # Destruct<T>Ref
  REFERENCE_VIEW = "reference_view"  # Destruct<T>View
  AS_DESTRUCT = "as_destruct"


class Placement(str, Enum):
  """
  Where an artifact is spliced relative to the original class.
  """

  MODULE = "module"  # Sibling statement following the class
  CLASS_BODY = "class_body"  # Appended to the class body


class Visibility(str, Enum):
  """
  Python naming convention of a field in the original class.
  """

  PUBLIC = "public"  # x
  PRIVATE = "private"  # _x
  MANGLED = "mangled"  # __x
  SPECIAL = "special"  # __x__


class GenericStyle(str, Enum):
  """
  How the original class declares its generic parameters.
  """

  NONE = "none"
  TYPE_PARAMS = "type_params"  # class Box[T]: ...
  GENERIC_BASE = "generic_base"  # class Box(Generic[T]): ...
