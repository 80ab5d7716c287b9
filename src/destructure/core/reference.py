"""
Reference Synthesizer.

Emits ``as_destruct(self)``, returning a read-only ``Destruct<T>View`` whose
properties read the record's own attributes. Unlike ``into_destruct`` the
record is neither consumed nor copied, and the view reflects later changes.
"""

from typing import List

from destructure.config import GeneratorConfig
from destructure.core.emit import docstring, emit, indent, quote
from destructure.core.naming import reference_view_name
from destructure.core.views import build_view_class
from destructure.enums import ArtifactKind, Placement
from destructure.model import GeneratedArtifact, RecordTypeModel


class ReferenceSynthesizer:
  def __init__(self, config: GeneratorConfig) -> None:
    self.config = config

  def synthesize(self, model: RecordTypeModel) -> List[GeneratedArtifact]:
    view_name = reference_view_name(model.type_name, self.config)

    view = GeneratedArtifact(
      kind=ArtifactKind.REFERENCE_VIEW,
      name=view_name,
      owner=model.type_name,
      placement=Placement.MODULE,
      code=build_view_class(model, view_name, writable=False, scope=f"{model.type_name}.as_destruct()"),
    )

    lines = [
      f"def as_destruct(self) -> {quote(model.apply_generics(view_name))}:",
      *docstring(f"Returns a read-only ``{view_name}`` over the fields of ``self``.", depth=1),
      *indent([f"return {view_name}(self)"]),
    ]
    method = GeneratedArtifact(
      kind=ArtifactKind.AS_DESTRUCT,
      name="as_destruct",
      owner=model.type_name,
      placement=Placement.CLASS_BODY,
      code=emit(lines),
    )
    return [view, method]
