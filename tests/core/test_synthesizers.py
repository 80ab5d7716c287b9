"""
Tests for the Companion, Conversion, Mutation and Reference Synthesizers.

These check the emitted source text; behaviour of the generated code is
covered by the expansion tests, which execute it.
"""

import textwrap

import libcst as cst
import pytest

from destructure.config import GeneratorConfig
from destructure.core.companion import CompanionSynthesizer
from destructure.core.conversion import ConversionSynthesizer
from destructure.core.emit import reindent
from destructure.core.extractor import FieldModelExtractor
from destructure.core.mutation import MutationSynthesizer
from destructure.core.reference import ReferenceSynthesizer
from destructure.enums import ArtifactKind, Capability, Placement, Visibility
from destructure.errors import MissingDestructureCapability

POINT = """
@destructure
@mutation
class Point:
    x: int
    _y: "Optional[int]"
"""


@pytest.fixture
def config():
  return GeneratorConfig()


@pytest.fixture
def point():
  return FieldModelExtractor().extract_source(textwrap.dedent(POINT))


def test_companion_mirrors_fields(config, point):
  companion, artifact = CompanionSynthesizer(config).synthesize(point)

  assert companion.name == "DestructPoint"
  assert companion.original_name == "Point"
  assert [f.name for f in companion.fields] == ["x", "_y"]
  assert all(f.visibility == Visibility.PUBLIC for f in companion.fields)
  assert [f.declared_type for f in companion.fields] == ["int", '"Optional[int]"']

  assert artifact.kind == ArtifactKind.COMPANION_TYPE
  assert artifact.placement == Placement.MODULE
  lines = artifact.code.splitlines()
  assert lines[0] == "@dataclasses.dataclass"
  assert lines[1] == "class DestructPoint:"
  assert lines[-2:] == ["    x: int", '    _y: "Optional[int]"']


def test_companion_has_no_methods(config, point):
  _, artifact = CompanionSynthesizer(config).synthesize(point)
  node = cst.parse_statement(artifact.code)
  assert not any(isinstance(stmt, cst.FunctionDef) for stmt in node.body.body)


def test_companion_respects_prefix(point):
  companion, artifact = CompanionSynthesizer(GeneratorConfig(companion_prefix="Open")).synthesize(point)
  assert companion.name == "OpenPoint"
  assert "class OpenPoint:" in artifact.code


def test_companion_generic_base():
  model = FieldModelExtractor().extract_source("class Box(Generic[T]):\n    item: T\n")
  _, artifact = CompanionSynthesizer(GeneratorConfig()).synthesize(model)
  assert "class DestructBox(Generic[T]):" in artifact.code


def test_conversion_moves_every_field(config, point):
  companion, _ = CompanionSynthesizer(config).synthesize(point)
  into, restore = ConversionSynthesizer().synthesize(point, companion)

  assert into.name == "into_destruct"
  assert into.placement == Placement.CLASS_BODY
  assert "def into_destruct(self) -> 'DestructPoint':" in into.code
  assert "x=self.x," in into.code
  assert "_y=self._y," in into.code

  assert restore.kind == ArtifactKind.RESTORE
  assert restore.code.startswith("@classmethod\ndef from_destruct(cls, destruct: 'DestructPoint') -> 'Point':")
  assert "instance = object.__new__(cls)" in restore.code
  assert 'object.__setattr__(instance, "_y", destruct._y)' in restore.code


def test_conversion_generic_annotations():
  model = FieldModelExtractor().extract_source("@destructure\nclass Box(Generic[T]):\n    item: T\n")
  companion, _ = CompanionSynthesizer(GeneratorConfig()).synthesize(model)
  into, restore = ConversionSynthesizer().synthesize(model, companion)
  assert "-> 'DestructBox[T]':" in into.code
  assert "destruct: 'DestructBox[T]') -> 'Box[T]':" in restore.code


def test_mutation_artifacts(config, point):
  companion, _ = CompanionSynthesizer(config).synthesize(point)
  view, reconstruct, substitute = MutationSynthesizer(config).synthesize(point, companion)

  assert view.kind == ArtifactKind.MUTATION_VIEW
  assert view.name == "DestructPointRef"
  assert view.placement == Placement.MODULE
  assert '__slots__ = ("_target",)' in view.code
  assert "@_y.setter" in view.code

  assert "def reconstruct(self, f: 'typing.Callable[[DestructPoint], object]') -> 'Point':" in reconstruct.code
  assert "instance = copy.copy(self)" in reconstruct.code
  assert 'object.__setattr__(instance, "_y", destruct._y)' in reconstruct.code

  assert "view = DestructPointRef(self)" in substitute.code
  assert "finally:" in substitute.code
  assert "view._target = None" in substitute.code


def test_mutation_requires_companion(config, point):
  bare = point.model_copy(update={"requested_capabilities": frozenset({Capability.MUTATION})})
  with pytest.raises(MissingDestructureCapability):
    MutationSynthesizer(config).synthesize(bare, None)


def test_reference_view_is_read_only(config, point):
  view, method = ReferenceSynthesizer(config).synthesize(point)

  assert view.kind == ArtifactKind.REFERENCE_VIEW
  assert view.name == "DestructPointView"
  assert ".setter" not in view.code
  assert "ReferenceError" not in view.code
  assert method.name == "as_destruct"
  assert "return DestructPointView(self)" in method.code


def test_every_artifact_parses(config, point):
  companion, companion_artifact = CompanionSynthesizer(config).synthesize(point)
  artifacts = [
    companion_artifact,
    *ConversionSynthesizer().synthesize(point, companion),
    *MutationSynthesizer(config).synthesize(point, companion),
    *ReferenceSynthesizer(config).synthesize(point),
  ]
  for artifact in artifacts:
    assert artifact.code.endswith("\n")
    cst.parse_statement(artifact.code)


def test_skipped_field_is_carried_but_hidden(config):
  model = FieldModelExtractor().extract_source(
    "@destructure\n@mutation\nclass Domain:\n    a: str\n    d: Annotated[str, Skip]\n"
  )
  companion, artifact = CompanionSynthesizer(config).synthesize(model)
  into, restore = ConversionSynthesizer().synthesize(model, companion)
  view, _, _ = MutationSynthesizer(config).synthesize(model, companion)

  assert "    d: Annotated[str, Skip] = dataclasses.field(init=False, repr=False, compare=False)" in artifact.code
  assert "d=self.d," not in into.code
  assert "destruct.d = self.d\n    return destruct" in into.code
  assert 'object.__setattr__(instance, "d", destruct.d)' in restore.code
  assert "def d(self)" not in view.code
  assert "def a(self)" in view.code


def test_reindent_moves_docstring_bodies():
  code = 'def f():\n    """\n    Summary.\n\n    Details.\n    """\n    return 1\n'
  assert reindent(code, "  ", "  ") == '  def f():\n    """\n    Summary.\n\n    Details.\n    """\n    return 1\n'
  assert reindent(code, "    ") == code
