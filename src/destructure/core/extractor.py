"""
Field Model Extractor.

Turns a class definition into a ``RecordTypeModel``. Extraction is purely
syntactic: annotations, generic parameters and bases are read as source text
with LibCST and never evaluated or type-checked.

A class qualifies as a named-field record when:

1.  It is not an enum, tuple-style (``NamedTuple``/``tuple``) or ``TypedDict`` class.
2.  Its body declares at least one instance field as ``name: annotation``.

Fields are kept in textual declaration order. ``ClassVar`` and ``InitVar``
annotations describe class-level or init-only values and are not fields, and
the dataclass ``_: KW_ONLY`` sentinel only marks where keyword-only fields
start. A field annotated ``Annotated[..., Skip]`` is carried by the companion
but kept out of its public surface.
"""

import logging
from typing import Iterator, List, Optional, Set

import libcst as cst

from destructure.enums import Capability, GenericStyle, Visibility
from destructure.errors import SourceLocation, UnsupportedShape
from destructure.model import FieldDescriptor, GenericParameter, RecordTypeModel

logger = logging.getLogger(__name__)

# A dummy module used as a context to render detached nodes.
_RENDER_CTX = cst.parse_module("")

ENUM_BASES = {"Enum", "IntEnum", "StrEnum", "Flag", "IntFlag", "ReprEnum"}
TUPLE_BASES = {"NamedTuple", "tuple"}
MAPPING_BASES = {"TypedDict"}
NON_FIELD_WRAPPERS = {"ClassVar", "InitVar", "KW_ONLY"}
SKIP_MARKER = "Skip"


def render(node: cst.CSTNode) -> str:
  """
  Renders a detached LibCST node to source text.

  Args:
      node: Any CST node.

  Returns:
      str: Source text without surrounding whitespace.
  """
  return _RENDER_CTX.code_for_node(node).strip()


def dotted_name(node: cst.BaseExpression) -> str:
  """
  Resolves a Name or Attribute chain to a dot-separated string.

  Returns an empty string for any other expression.

  Example:
    >>> dotted_name(cst.Attribute(value=cst.Name("typing"), attr=cst.Name("Generic")))
    'typing.Generic'
  """
  if isinstance(node, cst.Name):
    return node.value
  if isinstance(node, cst.Attribute):
    head = dotted_name(node.value)
    return f"{head}.{node.attr.value}" if head else ""
  return ""


def _last_segment(node: cst.BaseExpression) -> str:
  if isinstance(node, cst.Subscript):
    node = node.value
  return dotted_name(node).rsplit(".", 1)[-1]


def decorator_capability(decorator: cst.Decorator) -> Optional[Capability]:
  """
  Maps a decorator to the capability it requests.

  ``@destructure``, ``@ds.destructure`` and ``@destructure()`` all request
  ``Capability.DESTRUCTURE``.

  Args:
      decorator: The decorator node.

  Returns:
      Optional[Capability]: The capability, or None for unrelated decorators.
  """
  expr = decorator.decorator
  if isinstance(expr, cst.Call):
    expr = expr.func
  name = _last_segment(expr)
  try:
    return Capability(name)
  except ValueError:
    return None


def classify_visibility(name: str) -> Visibility:
  if name.startswith("__") and name.endswith("__"):
    return Visibility.SPECIAL
  if name.startswith("__"):
    return Visibility.MANGLED
  if name.startswith("_"):
    return Visibility.PRIVATE
  return Visibility.PUBLIC


def _iter_body_statements(body: cst.BaseSuite) -> Iterator[cst.CSTNode]:
  """Yields compound statements and the small statements of each simple line."""
  if isinstance(body, cst.IndentedBlock):
    for stmt in body.body:
      if isinstance(stmt, cst.SimpleStatementLine):
        yield from stmt.body
      else:
        yield stmt
  else:
    yield from body.body


def _is_non_field_annotation(annotation: cst.BaseExpression) -> bool:
  text = render(annotation).strip("'\"")
  head = text.split("[", 1)[0].strip()
  return head.rsplit(".", 1)[-1] in NON_FIELD_WRAPPERS


def _is_skipped(annotation: cst.BaseExpression) -> bool:
  if not isinstance(annotation, cst.Subscript) or _last_segment(annotation.value) != "Annotated":
    return False
  for element in annotation.slice[1:]:
    if not isinstance(element.slice, cst.Index):
      continue
    marker = element.slice.value
    if isinstance(marker, cst.Call):
      marker = marker.func
    if _last_segment(marker) == SKIP_MARKER:
      return True
  return False


class FieldModelExtractor:
  """
  Builds a RecordTypeModel from a LibCST class definition.
  """

  def extract(
    self,
    node: cst.CSTNode,
    location: Optional[SourceLocation] = None,
  ) -> RecordTypeModel:
    """
    Extracts the record model of a class definition.

    Args:
        node: The annotated definition. Must be a ``cst.ClassDef``.
        location: Position of the definition, attached to diagnostics.

    Returns:
        RecordTypeModel: Fields, generics and requested capabilities.

    Raises:
        UnsupportedShape: If the definition is not a named-field record class.
    """
    if not isinstance(node, cst.ClassDef):
      name = getattr(getattr(node, "name", None), "value", None)
      raise UnsupportedShape(
        f"expected a class definition, got {type(node).__name__}",
        type_name=name,
        location=location,
      )

    type_name = node.name.value
    self._check_bases(node, type_name, location)

    fields: List[FieldDescriptor] = []
    members: List[str] = []
    for stmt in _iter_body_statements(node.body):
      if isinstance(stmt, cst.AnnAssign) and isinstance(stmt.target, cst.Name):
        name = stmt.target.value
        annotation = stmt.annotation.annotation
        if _is_non_field_annotation(annotation):
          members.append(name)
          continue
        fields.append(
          FieldDescriptor(
            name=name,
            declared_type=render(annotation),
            order_index=len(fields),
            visibility=classify_visibility(name),
            skip=_is_skipped(annotation),
          )
        )
      elif isinstance(stmt, (cst.FunctionDef, cst.ClassDef)):
        members.append(stmt.name.value)
      elif isinstance(stmt, cst.Assign):
        for target in stmt.targets:
          if isinstance(target.target, cst.Name):
            members.append(target.target.value)

    if not fields:
      raise UnsupportedShape(
        "declares no fields; unit-like classes have nothing to destructure",
        type_name=type_name,
        location=location,
      )

    style, params, generic_base = self._extract_generics(node)

    model = RecordTypeModel(
      type_name=type_name,
      generic_style=style,
      generic_parameters=params,
      generic_base=generic_base,
      fields=fields,
      requested_capabilities=frozenset(self.capabilities(node)),
      member_names=members,
      location=location,
    )
    logger.debug("Extracted %d fields from %s", len(fields), type_name)
    return model

  def extract_source(
    self,
    code: str,
    type_name: Optional[str] = None,
    location: Optional[SourceLocation] = None,
  ) -> RecordTypeModel:
    """
    Parses ``code`` and extracts the first top-level class (or the one named ``type_name``).

    Args:
        code: Python source containing the class definition.
        type_name: Optional class name to select.
        location: Position of the definition, attached to diagnostics.

    Returns:
        RecordTypeModel: The extracted model.

    Raises:
        UnsupportedShape: If no matching class definition exists.
        libcst.ParserSyntaxError: If ``code`` is not valid Python.
    """
    module = cst.parse_module(code)
    candidates = [stmt for stmt in module.body if not isinstance(stmt, cst.SimpleStatementLine)]

    for stmt in candidates:
      if isinstance(stmt, cst.ClassDef) and (type_name is None or stmt.name.value == type_name):
        return self.extract(stmt, location)

    if type_name is not None:
      raise UnsupportedShape(f"no class named '{type_name}' found", type_name=type_name, location=location)
    if candidates:
      return self.extract(candidates[0], location)

    raise UnsupportedShape("no class definition found", location=location)

  @staticmethod
  def capabilities(node: cst.ClassDef) -> Set[Capability]:
    """
    Collects the capabilities requested by the class decorators.

    Args:
        node: The class definition.

    Returns:
        Set[Capability]: Possibly empty.
    """
    caps = set()
    for decorator in node.decorators:
      cap = decorator_capability(decorator)
      if cap is not None:
        caps.add(cap)
    return caps

  def _check_bases(self, node: cst.ClassDef, type_name: str, location: Optional[SourceLocation]) -> None:
    for base in node.bases:
      if base.keyword is not None or base.star:
        continue
      name = _last_segment(base.value)
      if name in ENUM_BASES:
        shape = "an enum"
      elif name in TUPLE_BASES:
        shape = "a tuple-style class"
      elif name in MAPPING_BASES:
        shape = "a TypedDict mapping"
      else:
        continue
      raise UnsupportedShape(
        f"is {shape} (base '{render(base.value)}'); only named-field record classes are supported",
        type_name=type_name,
        location=location,
      )

  def _extract_generics(self, node: cst.ClassDef):
    type_params = getattr(node, "type_parameters", None)
    if type_params is not None and type_params.params:
      params = []
      for tp in type_params.params:
        declaration = render(tp.with_changes(comma=cst.MaybeSentinel.DEFAULT))
        params.append(GenericParameter(name=self._type_param_name(tp.param), declaration=declaration))
      return GenericStyle.TYPE_PARAMS, params, None

    for base in node.bases:
      expr = base.value
      if isinstance(expr, cst.Subscript) and _last_segment(expr) == "Generic":
        params = []
        for element in expr.slice:
          text = render(element.slice)
          params.append(GenericParameter(name=text, declaration=text))
        return GenericStyle.GENERIC_BASE, params, render(expr)

    return GenericStyle.NONE, [], None

  @staticmethod
  def _type_param_name(param: cst.CSTNode) -> str:
    name = param.name.value
    if isinstance(param, cst.TypeVarTuple):
      return f"*{name}"
    return name
