"""
Mutation Synthesizer.

Emits the two scoped-mutation operations and the reference view they share:

- ``reconstruct(self, f)``: decomposes ``self`` with ``into_destruct()``, calls
  ``f`` once with the companion, then writes the companion's fields into a
  shallow ``copy.copy(self)``. Starting from a copy keeps attributes the
  companion does not carry, such as fields inherited from a base class. If
  ``f`` raises, the exception propagates and ``self`` is left untouched.
- ``substitute(self, f)``: calls ``f`` once with a ``Destruct<T>Ref`` view
  writing straight into ``self``. No record is allocated; the view is
  released when ``f`` returns or raises.

Both are expressed in terms of the companion's shape, so they require the
Destructure capability on the same class.
"""

from typing import List, Optional

from destructure.config import GeneratorConfig
from destructure.core.emit import docstring, emit, indent, quote
from destructure.core.naming import VIEW_TARGET_SLOT, mutation_view_name
from destructure.core.views import build_view_class
from destructure.enums import ArtifactKind, Capability, Placement
from destructure.errors import MissingDestructureCapability
from destructure.model import CompanionTypeModel, GeneratedArtifact, RecordTypeModel


class MutationSynthesizer:
  """
  Builds ``reconstruct``, ``substitute`` and the ``Destruct<T>Ref`` view.
  """

  def __init__(self, config: GeneratorConfig) -> None:
    self.config = config

  def synthesize(
    self,
    model: RecordTypeModel,
    companion: Optional[CompanionTypeModel],
  ) -> List[GeneratedArtifact]:
    """
    Generates the mutation artifacts.

    Args:
        model: The extracted record.
        companion: The companion derived for the same record.

    Returns:
        List[GeneratedArtifact]: View type, reconstruct and substitute.

    Raises:
        MissingDestructureCapability: If Destructure was not requested (or no
            companion was derived) for this record.
    """
    if companion is None or not model.requests(Capability.DESTRUCTURE):
      raise MissingDestructureCapability(
        "'mutation' requires 'destructure' on the same class; reconstruct() and substitute() "
        "are defined in terms of the companion type",
        type_name=model.type_name,
        location=model.location,
      )

    view_name = mutation_view_name(model.type_name, self.config)
    return [
      self._view(model, view_name),
      self._reconstruct(model, companion),
      self._substitute(model, view_name),
    ]

  def _view(self, model: RecordTypeModel, view_name: str) -> GeneratedArtifact:
    code = build_view_class(model, view_name, writable=True, scope=f"{model.type_name}.substitute()")
    return GeneratedArtifact(
      kind=ArtifactKind.MUTATION_VIEW,
      name=view_name,
      owner=model.type_name,
      placement=Placement.MODULE,
      code=code,
    )

  def _reconstruct(self, model: RecordTypeModel, companion: CompanionTypeModel) -> GeneratedArtifact:
    scratch = model.apply_generics(companion.name)
    result = model.apply_generics(model.type_name)
    writes = [f'object.__setattr__(instance, "{f.name}", destruct.{f.name})' for f in companion.fields]

    lines = [
      f"def reconstruct(self, f: {quote(f'typing.Callable[[{scratch}], object]')}) -> {quote(result)}:",
      *docstring(
        f"Edits the fields through a ``{companion.name}`` and returns a new ``{model.type_name}``.\n\n"
        "``f`` is called exactly once; fields it leaves alone carry over unchanged.\n"
        "If ``f`` raises, the exception propagates and ``self`` is not modified.",
        depth=1,
      ),
      *indent(
        [
          "destruct = self.into_destruct()",
          "f(destruct)",
          "instance = copy.copy(self)",
          *writes,
          "return instance",
        ]
      ),
    ]
    return GeneratedArtifact(
      kind=ArtifactKind.RECONSTRUCT,
      name="reconstruct",
      owner=model.type_name,
      placement=Placement.CLASS_BODY,
      code=emit(lines),
    )

  def _substitute(self, model: RecordTypeModel, view_name: str) -> GeneratedArtifact:
    view = model.apply_generics(view_name)

    lines = [
      f"def substitute(self, f: {quote(f'typing.Callable[[{view}], object]')}) -> None:",
      *docstring(
        f"Edits the fields of ``self`` in place through a ``{view_name}``.\n\n"
        "``f`` is called exactly once. The view writes straight into ``self`` and\n"
        "stops working once ``f`` returns.",
        depth=1,
      ),
      *indent(
        [
          f"view = {view_name}(self)",
          "try:",
          *indent(["f(view)"]),
          "finally:",
          *indent([f"view.{VIEW_TARGET_SLOT} = None"]),
        ]
      ),
    ]
    return GeneratedArtifact(
      kind=ArtifactKind.SUBSTITUTE,
      name="substitute",
      owner=model.type_name,
      placement=Placement.CLASS_BODY,
      code=emit(lines),
    )
