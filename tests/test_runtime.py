"""
Tests for the Runtime Capability Decorators.

Classes under test are defined at module level (so generated types are
published in this module) and inside test functions (so they are reachable
only through ``companion_of``).
"""

import dataclasses
import sys
from dataclasses import dataclass
from typing import Annotated, Generic, List, Optional, TypeVar

import pytest

from destructure import (
  GeneratorConfig,
  MissingDestructureCapability,
  NamingCollision,
  Skip,
  SourceUnavailable,
  UnsupportedShape,
  companion_of,
  destructure,
  destructure_ref,
  generated_types,
  mutation,
)
from destructure.runtime import OWNER_ATTR, model_of

T = TypeVar("T")


@destructure
@mutation
@dataclass(frozen=True)
class Point:
  x: int
  y: int


@destructure
@destructure_ref
class Node(Generic[T]):
  value: T
  children: "List[Node[T]]"
  parent: Optional["Node[T]"]

  def __init__(self, value: T) -> None:
    self.value = value
    self.children = []
    self.parent = None


def test_point_scenario():
  assert Point(x=1, y=2).into_destruct() == DestructPoint(x=1, y=2)  # noqa: F821
  assert Point(1, 2).reconstruct(lambda p: setattr(p, "y", 9)) == Point(1, 9)

  p = Point(1, 2)
  p.substitute(lambda r: setattr(r, "y", 9))
  assert p == Point(1, 9)


def test_types_published_in_module():
  module = sys.modules[__name__]
  assert module.DestructPoint is companion_of(Point)
  assert module.DestructPointRef.__name__ == "DestructPointRef"
  assert getattr(module.DestructPoint, OWNER_ATTR) == "Point"
  assert module.DestructPoint.__module__ == __name__


def test_companion_fields_follow_declaration_order():
  fields = dataclasses.fields(companion_of(Node))
  assert [f.name for f in fields] == ["value", "children", "parent"]
  assert "List[Node[T]]" in fields[1].type


def test_methods_have_class_qualnames():
  assert Point.into_destruct.__qualname__ == "Point.into_destruct"
  assert Point.from_destruct.__qualname__ == "Point.from_destruct"
  assert Point.reconstruct.__qualname__ == "Point.reconstruct"


def test_into_destruct_moves_references():
  root = Node(1)
  root.children.append(Node(2))
  companion = root.into_destruct()
  assert companion.children is root.children
  assert companion.parent is None


def test_from_destruct_skips_init():
  restored = Node.from_destruct(companion_of(Node)(value="v", children=[], parent=None))
  assert restored.value == "v"
  assert isinstance(restored, Node)


def test_as_destruct_view():
  node = Node(5)
  view = node.as_destruct()
  node.value = 6
  assert view.value == 6
  assert "DestructNodeView" in generated_types(Node)
  with pytest.raises(AttributeError):
    view.value = 1


def test_both_stacked_orders():
  @mutation
  @destructure
  class Pair:
    a: int
    b: int

  pair = Pair()
  pair.a, pair.b = 1, 2
  rebuilt = pair.reconstruct(lambda d: setattr(d, "a", 10))
  assert (rebuilt.a, rebuilt.b) == (10, 2)
  assert sorted(generated_types(Pair)) == ["DestructPair", "DestructPairRef"]


def test_substitute_keeps_identity():
  @destructure
  @mutation
  class Basket:
    items: list
    total: int

  basket = Basket()
  basket.items, basket.total = ["apple"], 1
  before, items = id(basket), basket.items

  basket.substitute(lambda r: setattr(r, "total", 2))
  assert id(basket) == before
  assert basket.items is items
  assert basket.total == 2


def test_reconstruct_keeps_inherited_fields():
  @destructure
  @mutation
  @dataclass(frozen=True)
  class Point3(Point):
    z: int

  rebuilt = Point3(1, 2, 3).reconstruct(lambda d: setattr(d, "z", 30))
  assert rebuilt == Point3(1, 2, 30)
  assert [f.name for f in dataclasses.fields(companion_of(Point3))] == ["z"]


def test_skipped_field():
  @destructure
  @destructure_ref
  class Secretive:
    name: str
    token: Annotated[str, Skip]

  item = Secretive()
  item.name, item.token = "n", "t"
  companion = item.into_destruct()
  assert repr(companion) == "DestructSecretive(name='n')"
  assert Secretive.from_destruct(companion).token == "t"
  assert not hasattr(item.as_destruct(), "token")


def test_local_class_is_not_published():
  @destructure
  class Hidden:
    secret: str

  assert companion_of(Hidden).__name__ == "DestructHidden"
  assert not hasattr(sys.modules[__name__], "DestructHidden")


def test_decorator_with_config():
  @destructure(config=GeneratorConfig(companion_prefix="Open"))
  class Configured:
    value: int

  assert companion_of(Configured).__name__ == "OpenConfigured"


def test_mutation_without_destructure():
  with pytest.raises(MissingDestructureCapability) as exc:

    @mutation
    class Lonely:
      value: int

  assert exc.value.type_name == "Lonely"
  assert exc.value.location.line is not None


def test_programmatic_capability_addition():
  class Later:
    value: int

  destructure(Later)
  mutation(Later)
  destructure(Later)

  later = Later()
  later.value = 1
  later.substitute(lambda r: setattr(r, "value", 2))
  assert later.value == 2
  assert sorted(generated_types(Later)) == ["DestructLater", "DestructLaterRef"]


def test_non_class_rejected():
  with pytest.raises(UnsupportedShape):
    destructure(lambda: None)


def test_unit_class_rejected():
  with pytest.raises(UnsupportedShape):

    @destructure
    class Unit:
      pass


def test_naming_collision_raised():
  with pytest.raises(NamingCollision):

    @destructure
    class Clash:
      value: int

      def into_destruct(self):
        return None


def test_source_unavailable():
  namespace = {"__name__": "generated_at_runtime", "destructure": destructure}
  with pytest.raises(SourceUnavailable):
    exec("@destructure\nclass Dynamic:\n  x: int\n", namespace)


def test_model_of_and_undecorated_errors():
  assert model_of(Point).field_names == ["x", "y"]

  class Plain:
    x: int

  with pytest.raises(TypeError):
    companion_of(Plain)
  with pytest.raises(TypeError):
    generated_types(Plain)
