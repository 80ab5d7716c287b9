"""
Runtime Capability Decorators.

``@destructure``, ``@mutation`` and ``@destructure_ref`` generate the same
artifacts as ``destructure expand`` but at class-creation time:

1.  The class source is read back with ``inspect`` (decorators included), so
    stacked capability decorators are all visible to the first one that runs.
2.  The artifacts are generated from that syntax and compiled with postponed
    annotation evaluation, in a namespace seeded from the defining module.
3.  Methods are attached to the class; companion and view types are published
    in the defining module when the class is defined at module level.

Usage::

    @destructure
    @mutation
    @dataclass(frozen=True)
    class Point:
      x: int
      y: int

    p = Point(1, 2).reconstruct(lambda d: setattr(d, "x", 10))
"""

import __future__

import copy
import dataclasses
import inspect
import linecache
import logging
import sys
import typing
from typing import Any, Callable, Dict, List, Optional, Set, Type, TypeVar, Union

from destructure.config import GeneratorConfig
from destructure.core.extractor import FieldModelExtractor
from destructure.core.generator import ArtifactGenerator
from destructure.core.naming import companion_name
from destructure.enums import ArtifactKind, Capability, Placement
from destructure.errors import UnsupportedShape
from destructure.model import GeneratedArtifact, RecordTypeModel
from destructure.utils.code_extractor import CodeExtractor

logger = logging.getLogger(__name__)

C = TypeVar("C", bound=type)

STATE_ATTR = "__destructure__"
OWNER_ATTR = "__destructure_owner__"

ARTIFACT_CAPABILITY: Dict[ArtifactKind, Capability] = {
  ArtifactKind.COMPANION_TYPE: Capability.DESTRUCTURE,
  ArtifactKind.CONVERSION: Capability.DESTRUCTURE,
  ArtifactKind.RESTORE: Capability.DESTRUCTURE,
  ArtifactKind.MUTATION_VIEW: Capability.MUTATION,
  ArtifactKind.RECONSTRUCT: Capability.MUTATION,
  ArtifactKind.SUBSTITUTE: Capability.MUTATION,
  ArtifactKind.REFERENCE_VIEW: Capability.DESTRUCTURE_REF,
  ArtifactKind.AS_DESTRUCT: Capability.DESTRUCTURE_REF,
}


class Skip:
  """
  Field marker keeping a field out of the companion's public surface.

  Usage::

      @destructure
      class Domain:
        a: str
        d: Annotated[str, Skip]

  The companion still carries ``d`` so ``from_destruct`` can rebuild the
  record, but ``d`` is not a constructor argument of ``DestructDomain`` and the
  views have no property for it. Only the marker's name matters; it is read
  from the annotation syntax and never evaluated.
  """


@dataclasses.dataclass
class RuntimeState:
  """
  Bookkeeping stored on each decorated class.

  Attributes:
      config: Naming configuration used for every generation on this class.
      model: The latest extracted model.
      capabilities: Capabilities whose artifacts are installed.
      types: Generated companion and view types, by name.
      namespace: Globals of the generated code.
  """

  config: GeneratorConfig
  model: RecordTypeModel
  capabilities: Set[Capability] = dataclasses.field(default_factory=set)
  types: Dict[str, type] = dataclasses.field(default_factory=dict)
  namespace: Dict[str, Any] = dataclasses.field(default_factory=dict)


def _state(cls: type) -> Optional[RuntimeState]:
  # Looked up in the class' own dict; subclasses must be decorated themselves.
  return cls.__dict__.get(STATE_ATTR)


def _is_top_level(cls: type) -> bool:
  return "." not in cls.__qualname__


def _scope_names(cls: type) -> Optional[List[str]]:
  """Module globals a generated type would shadow, ignoring types this class owns."""
  module = sys.modules.get(cls.__module__)
  if module is None or not _is_top_level(cls):
    return None
  return [
    name for name, value in vars(module).items() if getattr(value, OWNER_ATTR, None) != cls.__qualname__
  ]


def _base_namespace(cls: type) -> Dict[str, Any]:
  module = sys.modules.get(cls.__module__)
  namespace = dict(vars(module)) if module is not None else {}
  namespace.update(
    {
      "__name__": cls.__module__,
      "copy": copy,
      "dataclasses": dataclasses,
      "typing": typing,
      cls.__name__: cls,
    }
  )
  return namespace


def _compile(cls: type, artifacts: List[GeneratedArtifact], namespace: Dict[str, Any]) -> None:
  source = "\n\n".join(a.code for a in artifacts)
  filename = f"<destructure:{cls.__module__}.{cls.__qualname__}>"
  # Lets tracebacks and inspect show generated lines
  linecache.cache[filename] = (len(source), None, source.splitlines(True), filename)
  code = compile(source, filename, "exec", flags=__future__.annotations.compiler_flag, dont_inherit=True)
  exec(code, namespace)


def _install(cls: type, state: RuntimeState, artifacts: List[GeneratedArtifact]) -> None:
  module = sys.modules.get(cls.__module__)
  publish = module is not None and _is_top_level(cls)

  for artifact in artifacts:
    obj = state.namespace[artifact.name]
    if artifact.placement == Placement.CLASS_BODY:
      func = obj.__func__ if isinstance(obj, classmethod) else obj
      func.__qualname__ = f"{cls.__qualname__}.{artifact.name}"
      setattr(cls, artifact.name, obj)
      continue

    setattr(obj, OWNER_ATTR, cls.__qualname__)
    state.types[artifact.name] = obj
    if publish:
      setattr(module, artifact.name, obj)


def _dispatch(cls: Any, capability: Capability, config: Optional[GeneratorConfig]) -> Any:
  if not inspect.isclass(cls):
    raise UnsupportedShape(
      f"@{capability.value} applies to classes only, got {type(cls).__name__}",
      type_name=getattr(cls, "__name__", None),
    )

  state = _state(cls)
  if state is not None and capability in state.capabilities:
    return cls

  config = state.config if state is not None else (config or GeneratorConfig())
  source = CodeExtractor.extract_class(cls)
  model = FieldModelExtractor().extract_source(source.code, cls.__name__, source.location)
  model = model.with_capability(capability)
  if state is not None:
    for installed in state.capabilities:
      model = model.with_capability(installed)

  artifacts = ArtifactGenerator(config).run(model, _scope_names(cls))

  if state is None:
    state = RuntimeState(config=config, model=model, namespace=_base_namespace(cls))
    setattr(cls, STATE_ATTR, state)

  pending = [a for a in artifacts if ARTIFACT_CAPABILITY[a.kind] not in state.capabilities]
  _compile(cls, pending, state.namespace)
  _install(cls, state, pending)

  state.model = model
  state.capabilities |= set(model.requested_capabilities)
  logger.debug(
    "Installed %s on %s",
    ", ".join(sorted(c.value for c in model.requested_capabilities)),
    cls.__qualname__,
  )
  return cls


def _decorator(
  capability: Capability,
  cls: Optional[C],
  config: Optional[GeneratorConfig],
) -> Union[C, Callable[[C], C]]:
  if cls is None:
    return lambda target: _dispatch(target, capability, config)
  return _dispatch(cls, capability, config)


def destructure(cls: Optional[C] = None, *, config: Optional[GeneratorConfig] = None) -> Union[C, Callable[[C], C]]:
  """
  Adds ``Destruct<T>``, ``into_destruct()`` and ``from_destruct()``.

  Usable bare (``@destructure``) or called (``@destructure(config=...)``).

  Args:
      cls: The record class.
      config: Naming configuration; only honoured by the first capability
          decorator applied to a class.

  Returns:
      The same class, extended in place.

  Raises:
      UnsupportedShape: If ``cls`` is not a named-field record class.
      NamingCollision: If generated names clash with fields, members or globals.
      SourceUnavailable: If the class source cannot be read.
  """
  return _decorator(Capability.DESTRUCTURE, cls, config)


def mutation(cls: Optional[C] = None, *, config: Optional[GeneratorConfig] = None) -> Union[C, Callable[[C], C]]:
  """
  Adds ``reconstruct()``, ``substitute()`` and ``Destruct<T>Ref``.

  The class must also be decorated with ``@destructure``; otherwise
  ``MissingDestructureCapability`` is raised and nothing is installed.
  """
  return _decorator(Capability.MUTATION, cls, config)


def destructure_ref(
  cls: Optional[C] = None, *, config: Optional[GeneratorConfig] = None
) -> Union[C, Callable[[C], C]]:
  """Adds ``as_destruct()`` and the read-only ``Destruct<T>View``."""
  return _decorator(Capability.DESTRUCTURE_REF, cls, config)


def generated_types(cls: type) -> Dict[str, type]:
  """
  Returns the companion and view types generated for a decorated class.

  Args:
      cls: A class decorated with at least one capability decorator.

  Returns:
      Dict[str, type]: Generated types by name.

  Raises:
      TypeError: If ``cls`` was never decorated.
  """
  state = _state(cls)
  if state is None:
    raise TypeError(f"{cls!r} is not decorated with a destructure capability")
  return dict(state.types)


def companion_of(cls: type) -> Type[Any]:
  """
  Returns the ``Destruct<T>`` companion type of a decorated class.

  Needed for classes defined inside functions or other classes, whose
  generated types are not published in the module namespace.

  Raises:
      TypeError: If ``cls`` does not have the Destructure capability.
  """
  state = _state(cls)
  if state is None or Capability.DESTRUCTURE not in state.capabilities:
    raise TypeError(f"{cls!r} is not decorated with @destructure")
  return state.types[companion_name(cls.__name__, state.config)]


def model_of(cls: type) -> RecordTypeModel:
  """Returns the model extracted for a decorated class."""
  state = _state(cls)
  if state is None:
    raise TypeError(f"{cls!r} is not decorated with a destructure capability")
  return state.model
