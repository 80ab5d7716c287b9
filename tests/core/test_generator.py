"""
Tests for the Artifact Generator pipeline.

Covers capability gating, naming-collision diagnostics and emission order.
"""

import pytest

from destructure.config import GeneratorConfig
from destructure.core.generator import ArtifactGenerator, generate
from destructure.core.naming import generated_method_names, generated_type_names, validate_model
from destructure.core.extractor import FieldModelExtractor
from destructure.enums import ArtifactKind, Capability
from destructure.errors import MissingDestructureCapability, NamingCollision, UnsupportedShape


def _model(code: str):
  return FieldModelExtractor().extract_source(code)


def test_generate_destructure_only():
  artifacts = generate("@destructure\nclass Point:\n    x: int\n    y: int\n")
  assert [a.kind for a in artifacts] == [ArtifactKind.COMPANION_TYPE, ArtifactKind.CONVERSION, ArtifactKind.RESTORE]
  assert {a.owner for a in artifacts} == {"Point"}


def test_generate_all_capabilities_in_order():
  code = "@destructure\n@mutation\n@destructure_ref\nclass Point:\n    x: int\n"
  kinds = [a.kind for a in generate(code)]
  assert kinds == [
    ArtifactKind.COMPANION_TYPE,
    ArtifactKind.CONVERSION,
    ArtifactKind.RESTORE,
    ArtifactKind.MUTATION_VIEW,
    ArtifactKind.RECONSTRUCT,
    ArtifactKind.SUBSTITUTE,
    ArtifactKind.REFERENCE_VIEW,
    ArtifactKind.AS_DESTRUCT,
  ]


def test_no_capability_generates_nothing():
  assert generate("class Point:\n    x: int\n") == []


def test_mutation_without_destructure_is_rejected():
  with pytest.raises(MissingDestructureCapability) as exc:
    generate("@mutation\nclass Point:\n    x: int\n")
  assert exc.value.type_name == "Point"
  assert "requires 'destructure'" in exc.value.message


def test_destructure_ref_alone_is_allowed():
  artifacts = generate("@destructure_ref\nclass Point:\n    x: int\n")
  assert [a.name for a in artifacts] == ["DestructPointView", "as_destruct"]


def test_unsupported_shape_propagates():
  with pytest.raises(UnsupportedShape):
    generate("@destructure\nclass Empty:\n    pass\n")


def test_accepts_model_input():
  model = _model("@destructure\nclass Point:\n    x: int\n")
  assert len(ArtifactGenerator().run(model)) == 3
  assert len(generate(model)) == 3


@pytest.mark.parametrize(
  "body, fragment",
  [
    ("x: int\n    x: str\n", "duplicate field 'x'"),
    ("__dict__: int\n", "reserved special name"),
    ("__secret: int\n", "name-mangled"),
    ("into_destruct: int\n", "generated method"),
    ("DestructPoint: int\n", "generated type"),
    ("x: int\n    def reconstruct(self): ...\n", "already defines 'reconstruct'"),
    ("_target: int\n", "reserved by the generated view"),
    ("property: int\n", "reserved by the generated view"),
  ],
)
def test_naming_collisions(body, fragment):
  code = f"@destructure\n@mutation\nclass Point:\n    {body}"
  with pytest.raises(NamingCollision) as exc:
    generate(code)
  assert fragment in exc.value.message


def test_view_names_allowed_without_views():
  artifacts = generate("@destructure\nclass Point:\n    _target: int\n")
  assert artifacts[0].name == "DestructPoint"


def test_scope_collision():
  with pytest.raises(NamingCollision) as exc:
    generate("@destructure\nclass Point:\n    x: int\n", scope_names={"Point", "DestructPoint"})
  assert "collides with an existing name" in exc.value.message


def test_distinct_types_do_not_collide():
  config = GeneratorConfig()
  a = _model("@destructure\n@mutation\nclass A:\n    x: int\n")
  b = _model("@destructure\n@mutation\nclass B:\n    x: int\n")
  assert not set(generated_type_names(a, config)) & set(generated_type_names(b, config))


def test_generated_method_names():
  model = _model("@destructure\n@destructure_ref\nclass P:\n    x: int\n")
  assert generated_method_names(model) == ["into_destruct", "from_destruct", "as_destruct"]


def test_validate_model_passes_clean_model():
  model = _model("@destructure\n@mutation\nclass P:\n    x: int\n    _y: int\n")
  validate_model(model, GeneratorConfig(), scope_names={"P"})


def test_capability_added_programmatically():
  model = _model("class P:\n    x: int\n").with_capability(Capability.DESTRUCTURE)
  assert [a.name for a in generate(model)] == ["DestructP", "into_destruct", "from_destruct"]
