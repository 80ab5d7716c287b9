"""
Module Expansion Engine.

This module provides the ``ExpansionEngine``, which plays the role of the
host's attribute dispatch for whole source files. For every class tagged with
a capability decorator (``@destructure``, ``@mutation``, ``@destructure_ref``)
it:

1.  **Extracts** the RecordTypeModel from the original class syntax.
2.  **Generates** the artifacts through ``ArtifactGenerator``.
3.  **Splices** class-body artifacts (``into_destruct``, ``reconstruct``, ...)
    at the end of the class body and module-level artifacts (``DestructT``,
    ``DestructTRef``, ...) right after the class, in the same scope.
4.  **Strips** the capability decorators, since the expanded module must not
    trigger runtime generation a second time.
5.  **Injects** ``import dataclasses``, ``import typing`` and ``import copy``
    when the generated code needs them.

Any diagnostic fails the whole file: the result carries the original code,
``success=False`` and every diagnostic found.
"""

import logging
from typing import List, Optional, Sequence, Set, Union

import libcst as cst
from libcst.metadata import MetadataWrapper, PositionProvider
from pydantic import BaseModel, Field

from destructure.config import GeneratorConfig
from destructure.core.emit import INDENT, reindent
from destructure.core.extractor import FieldModelExtractor, decorator_capability, dotted_name
from destructure.core.generator import ArtifactGenerator
from destructure.core.imports import ImportInjector
from destructure.enums import Capability, Placement
from destructure.errors import DestructureError, SourceLocation, UnsupportedShape
from destructure.model import GeneratedArtifact, RecordTypeModel

logger = logging.getLogger(__name__)


class ExpansionResult(BaseModel):
  """
  Structured result of a single module expansion.
  """

  code: str = Field(default="", description="The expanded source code (original code on failure).")
  errors: List[str] = Field(default_factory=list, description="Formatted diagnostics.")
  success: bool = Field(default=True, description="True if every annotated class was expanded.")
  models: List[RecordTypeModel] = Field(default_factory=list, description="Models of the expanded classes.")
  artifacts: List[GeneratedArtifact] = Field(default_factory=list, description="Every generated artifact.")

  @property
  def expanded_types(self) -> List[str]:
    return [m.type_name for m in self.models]


def bound_names(statements: Sequence[cst.BaseStatement]) -> Set[str]:
  """
  Collects names bound by the statements of one suite.

  Args:
      statements: Statements of a module or block body.

  Returns:
      Set[str]: Class, function, assignment and import names.
  """
  names: Set[str] = set()
  for stmt in statements:
    if isinstance(stmt, (cst.ClassDef, cst.FunctionDef)):
      names.add(stmt.name.value)
      continue
    if not isinstance(stmt, cst.SimpleStatementLine):
      continue
    for small in stmt.body:
      if isinstance(small, cst.Assign):
        for target in small.targets:
          if isinstance(target.target, cst.Name):
            names.add(target.target.value)
      elif isinstance(small, cst.AnnAssign) and isinstance(small.target, cst.Name):
        names.add(small.target.value)
      elif isinstance(small, (cst.Import, cst.ImportFrom)) and not isinstance(small.names, cst.ImportStar):
        for alias in small.names:
          if alias.asname is not None and isinstance(alias.asname.name, cst.Name):
            names.add(alias.asname.name.value)
          else:
            names.add(dotted_name(alias.name).split(".")[0])
  return names


def module_bound_names(module: cst.Module) -> Set[str]:
  """Names bound by top-level statements of a module."""
  return bound_names(module.body)


def _parameter_names(params: cst.Parameters) -> Set[str]:
  names = {p.name.value for p in [*params.posonly_params, *params.params, *params.kwonly_params]}
  for star in (params.star_arg, params.star_kwarg):
    if isinstance(star, cst.Param):
      names.add(star.name.value)
  return names


def _has_capability(node: Union[cst.ClassDef, cst.FunctionDef]) -> bool:
  return any(decorator_capability(d) is not None for d in node.decorators)


class ExpansionTransformer(cst.CSTTransformer):
  """
  Splices generated artifacts next to every annotated class.

  Attributes:
      errors (List[DestructureError]): Diagnostics collected during the walk.
      models (List[RecordTypeModel]): Models of successfully expanded classes.
      artifacts (List[GeneratedArtifact]): Artifacts spliced into the tree.
  """

  METADATA_DEPENDENCIES = (PositionProvider,)

  def __init__(
    self,
    generator: ArtifactGenerator,
    filename: Optional[str] = None,
    module_names: Optional[Set[str]] = None,
    indent_unit: str = INDENT,
  ) -> None:
    super().__init__()
    self.generator = generator
    self.extractor = FieldModelExtractor()
    self.filename = filename
    self.module_names = module_names
    self.indent_unit = indent_unit
    self.errors: List[DestructureError] = []
    self.models: List[RecordTypeModel] = []
    self.artifacts: List[GeneratedArtifact] = []
    self._scopes: List[str] = []
    # Names bound by each open block, and where each open function's names start
    self._suites: List[Set[str]] = []
    self._function_marks: List[int] = []

  def _location(self, node: cst.CSTNode) -> SourceLocation:
    pos = self.get_metadata(PositionProvider, node)
    return SourceLocation(self.filename, pos.start.line, pos.start.column)

  def _local_names(self) -> Set[str]:
    """Names bound in the innermost enclosing function, up to the current block."""
    names: Set[str] = set()
    for suite in self._suites[self._function_marks[-1]:]:
      names |= suite
    return names

  def visit_IndentedBlock(self, node: cst.IndentedBlock) -> Optional[bool]:
    self._suites.append(bound_names(node.body))
    return True

  def leave_IndentedBlock(self, original_node: cst.IndentedBlock, updated_node: cst.IndentedBlock) -> cst.IndentedBlock:
    self._suites.pop()
    return updated_node

  def visit_FunctionDef(self, node: cst.FunctionDef) -> Optional[bool]:
    self._scopes.append("function")
    self._function_marks.append(len(self._suites))
    self._suites.append(_parameter_names(node.params))
    return True

  def leave_FunctionDef(self, original_node: cst.FunctionDef, updated_node: cst.FunctionDef) -> cst.FunctionDef:
    self._scopes.pop()
    del self._suites[self._function_marks.pop():]
    if _has_capability(original_node):
      self.errors.append(
        UnsupportedShape(
          "capability decorators apply to classes only",
          type_name=original_node.name.value,
          location=self._location(original_node),
        )
      )
    return updated_node

  def visit_ClassDef(self, node: cst.ClassDef) -> Optional[bool]:
    self._scopes.append("class")
    return True

  def leave_ClassDef(
    self, original_node: cst.ClassDef, updated_node: cst.ClassDef
  ) -> Union[cst.ClassDef, cst.FlattenSentinel]:
    self._scopes.pop()
    if not _has_capability(original_node):
      return updated_node

    location = self._location(original_node)
    top_level = not self._scopes
    try:
      model = self.extractor.extract(original_node, location)
      if self._scopes and self._scopes[-1] == "class":
        # Methods cannot see names bound in an enclosing class body
        raise UnsupportedShape(
          "is nested in a class body; use the runtime decorators or move it to module level",
          type_name=model.type_name,
        )
      scope_names = self.module_names if top_level else self._local_names()
      artifacts = self.generator.run(model, scope_names)
    except DestructureError as e:
      self.errors.append(e.with_location(location))
      return updated_node

    self.models.append(model)
    self.artifacts.extend(artifacts)
    logger.debug("Expanding %s with %d artifacts", model.type_name, len(artifacts))

    column = " " * location.column
    blank = cst.EmptyLine(indent=False)
    methods = [
      self._parse_artifact(a, column + self.indent_unit).with_changes(leading_lines=[blank])
      for a in artifacts
      if a.placement == Placement.CLASS_BODY
    ]
    separator = [blank, blank] if top_level else [blank]
    siblings = [
      self._parse_artifact(a, column).with_changes(leading_lines=separator)
      for a in artifacts
      if a.placement == Placement.MODULE
    ]

    decorators = [d for d in updated_node.decorators if decorator_capability(d) is None]
    new_class = updated_node.with_changes(
      decorators=decorators,
      body=self._append_to_body(updated_node.body, methods),
    )
    return cst.FlattenSentinel([new_class, *siblings])

  def _parse_artifact(self, artifact: GeneratedArtifact, prefix: str) -> cst.BaseStatement:
    """
    Parses an artifact indented as it will appear in the host module.

    Docstring bodies are part of string literals, which LibCST renders
    verbatim, so the artifact is re-indented before parsing rather than after.
    """
    code = reindent(artifact.code, self.indent_unit, prefix)
    if not prefix:
      return cst.parse_statement(code)
    return cst.ensure_type(cst.parse_statement(f"class _:\n{code}").body, cst.IndentedBlock).body[0]

  @staticmethod
  def _append_to_body(body: cst.BaseSuite, statements: List[cst.BaseStatement]) -> cst.IndentedBlock:
    if isinstance(body, cst.IndentedBlock):
      return body.with_changes(body=[*body.body, *statements])
    # class Point: x: int; y: int
    lines = [cst.SimpleStatementLine(body=[s.with_changes(semicolon=cst.MaybeSentinel.DEFAULT)]) for s in body.body]
    return cst.IndentedBlock(body=[*lines, *statements])


class AnnotatedClassCollector(cst.CSTVisitor):
  """
  Finds every class carrying a capability decorator, at any depth.

  Attributes:
      found (List[tuple]): ``(ClassDef, SourceLocation)`` pairs in source order.
  """

  METADATA_DEPENDENCIES = (PositionProvider,)

  def __init__(self, filename: Optional[str] = None) -> None:
    super().__init__()
    self.filename = filename
    self.found = []

  def visit_ClassDef(self, node: cst.ClassDef) -> Optional[bool]:
    if _has_capability(node):
      pos = self.get_metadata(PositionProvider, node)
      self.found.append((node, SourceLocation(self.filename, pos.start.line, pos.start.column)))
    return True


class ExpansionEngine:
  """
  Expands one source module at a time.
  """

  def __init__(self, config: Optional[GeneratorConfig] = None) -> None:
    self.config = config or GeneratorConfig()
    self.generator = ArtifactGenerator(self.config)

  def parse(self, code: str) -> cst.Module:
    """
    Parses source string into a LibCST Module.

    Raises:
        libcst.ParserSyntaxError: If the input code is invalid Python.
    """
    return cst.parse_module(code)

  def run(self, code: str, filename: Optional[str] = None) -> ExpansionResult:
    """
    Expands every annotated class of a module.

    Args:
        code: The module source.
        filename: Used in diagnostics.

    Returns:
        ExpansionResult: Expanded code, or the original code and diagnostics.
    """
    try:
      tree = self.parse(code)
    except cst.ParserSyntaxError as e:
      return ExpansionResult(code=code, errors=[f"Parse Error: {e}"], success=False)

    transformer = ExpansionTransformer(self.generator, filename, module_bound_names(tree), tree.default_indent)
    new_tree = MetadataWrapper(tree).visit(transformer)

    if transformer.errors:
      return ExpansionResult(
        code=code,
        errors=[e.format() for e in transformer.errors],
        success=False,
      )

    if transformer.models and self.config.inject_imports:
      injector = ImportInjector(self._required_imports(transformer.models))
      new_tree = new_tree.visit(injector)

    return ExpansionResult(
      code=new_tree.code,
      models=transformer.models,
      artifacts=transformer.artifacts,
    )

  def inspect(self, code: str, filename: Optional[str] = None) -> ExpansionResult:
    """
    Extracts the models of annotated classes without generating code.

    Args:
        code: The module source.
        filename: Used in diagnostics.

    Returns:
        ExpansionResult: ``models`` populated; ``code`` is the input unchanged.
    """
    try:
      tree = self.parse(code)
    except cst.ParserSyntaxError as e:
      return ExpansionResult(code=code, errors=[f"Parse Error: {e}"], success=False)

    collector = AnnotatedClassCollector(filename)
    MetadataWrapper(tree).visit(collector)

    models, errors = [], []
    for node, location in collector.found:
      try:
        models.append(self.generator.extractor.extract(node, location))
      except DestructureError as e:
        errors.append(e.format())

    return ExpansionResult(code=code, errors=errors, success=not errors, models=models)

  @staticmethod
  def _required_imports(models: List[RecordTypeModel]) -> List[str]:
    required = []
    if any(m.requests(Capability.DESTRUCTURE) for m in models):
      required.append("dataclasses")
    if any(m.requests(Capability.MUTATION) for m in models):
      required.extend(["typing", "copy"])
    return required


def expand(code: str, config: Optional[GeneratorConfig] = None, filename: Optional[str] = None) -> str:
  """
  Expands a module and returns the new source.

  Args:
      code: The module source.
      config: Naming configuration.
      filename: Used in diagnostics.

  Returns:
      str: The expanded source.

  Raises:
      ValueError: If any annotated class could not be expanded.
  """
  result = ExpansionEngine(config).run(code, filename)
  if not result.success:
    error_msg = "\n".join(result.errors)
    raise ValueError(f"Expansion failed:\n{error_msg}")
  return result.code
