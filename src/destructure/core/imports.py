"""
Import Injection Transformer.

Generated code refers to ``dataclasses.dataclass``, ``typing.Callable`` and
``copy.copy`` by module attribute. This transformer makes sure the expanded
module imports each of them, inserting the missing statements after the
module docstring and any ``from __future__`` imports.

Usage:
    injector = ImportInjector(["dataclasses", "typing"])
    new_tree = tree.visit(injector)
"""

from typing import List, Sequence, Set

import libcst as cst

from destructure.core.extractor import dotted_name


class ImportInjector(cst.CSTTransformer):
  """
  LibCST Transformer that adds ``import <module>`` statements when missing.

  Attributes:
      required (List[str]): Modules that must be importable by plain name.
      injected (List[str]): Modules actually added during the last visit.
  """

  def __init__(self, required: Sequence[str]) -> None:
    self.required = list(required)
    self.injected: List[str] = []

  def leave_Module(self, original_node: cst.Module, updated_node: cst.Module) -> cst.Module:
    present = self._imported_modules(updated_node)
    missing = [mod for mod in self.required if mod not in present]
    if not missing:
      return updated_node

    self.injected = missing
    new_stmts = [cst.parse_statement(f"import {mod}") for mod in missing]

    body = list(updated_node.body)
    insert_at = self._insertion_index(body)
    return updated_node.with_changes(body=[*body[:insert_at], *new_stmts, *body[insert_at:]])

  @staticmethod
  def _imported_modules(module: cst.Module) -> Set[str]:
    """Names bound at top level by plain ``import x`` statements."""
    names = set()
    for stmt in module.body:
      if not isinstance(stmt, cst.SimpleStatementLine):
        continue
      for small in stmt.body:
        if isinstance(small, cst.Import):
          for alias in small.names:
            if alias.asname is None:
              names.add(dotted_name(alias.name).split(".")[0])
            elif isinstance(alias.asname.name, cst.Name):
              names.add(alias.asname.name.value)
    return names

  @staticmethod
  def _insertion_index(body: List[cst.BaseStatement]) -> int:
    """Index after the docstring and ``from __future__`` imports."""
    index = 0
    for i, stmt in enumerate(body):
      if not isinstance(stmt, cst.SimpleStatementLine) or len(stmt.body) != 1:
        break
      small = stmt.body[0]
      is_docstring = i == 0 and isinstance(small, cst.Expr) and isinstance(small.value, cst.SimpleString)
      is_future = (
        isinstance(small, cst.ImportFrom)
        and isinstance(small.module, (cst.Name, cst.Attribute))
        and dotted_name(small.module) == "__future__"
      )
      if not (is_docstring or is_future):
        break
      index = i + 1
    return index
