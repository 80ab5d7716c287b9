"""
Conversion Synthesizer.

Emits the two methods linking a record and its companion:

- ``into_destruct(self)``: moves every field, by reference, into the companion.
  It performs no validation and cannot fail. Skipped fields are assigned after
  the companion is built, since they are not constructor arguments.
- ``from_destruct(cls, destruct)``: rebuilds the record from a companion. The
  instance is allocated with ``object.__new__`` and each field is written with
  ``object.__setattr__``, so frozen dataclasses, slotted classes and classes
  guarding ``__setattr__`` are rebuilt without running ``__init__``. Only the
  companion's fields are written: attributes declared on base classes are not
  part of the companion and are left unset.
"""

from typing import List

from destructure.core.emit import docstring, emit, indent, quote
from destructure.enums import ArtifactKind, Placement
from destructure.model import CompanionTypeModel, GeneratedArtifact, RecordTypeModel


class ConversionSynthesizer:
  """
  Builds ``into_destruct`` and ``from_destruct`` for one record.
  """

  def synthesize(self, model: RecordTypeModel, companion: CompanionTypeModel) -> List[GeneratedArtifact]:
    return [self._into_destruct(model, companion), self._from_destruct(model, companion)]

  def _into_destruct(self, model: RecordTypeModel, companion: CompanionTypeModel) -> GeneratedArtifact:
    target = model.apply_generics(companion.name)
    moves = [f"{f.name}=self.{f.name}," for f in companion.fields if not f.skip]
    hidden = [f"destruct.{f.name} = self.{f.name}" for f in companion.fields if f.skip]

    if hidden:
      body = [f"destruct = {companion.name}(", *indent(moves), ")", *hidden, "return destruct"]
    else:
      body = [f"return {companion.name}(", *indent(moves), ")"]

    lines = [
      f"def into_destruct(self) -> {quote(target)}:",
      *docstring(
        f"Moves every field into a fully exposed ``{companion.name}``.\n\n"
        "Field values are handed over by reference, not copied.",
        depth=1,
      ),
      *indent(body),
    ]
    return GeneratedArtifact(
      kind=ArtifactKind.CONVERSION,
      name="into_destruct",
      owner=model.type_name,
      placement=Placement.CLASS_BODY,
      code=emit(lines),
    )

  def _from_destruct(self, model: RecordTypeModel, companion: CompanionTypeModel) -> GeneratedArtifact:
    source = model.apply_generics(companion.name)
    result = model.apply_generics(model.type_name)
    writes = [f'object.__setattr__(instance, "{f.name}", destruct.{f.name})' for f in companion.fields]

    lines = [
      "@classmethod",
      f"def from_destruct(cls, destruct: {quote(source)}) -> {quote(result)}:",
      *docstring(f"Rebuilds a ``{model.type_name}`` from its companion without calling ``__init__``.", depth=1),
      *indent(["instance = object.__new__(cls)", *writes, "return instance"]),
    ]
    return GeneratedArtifact(
      kind=ArtifactKind.RESTORE,
      name="from_destruct",
      owner=model.type_name,
      placement=Placement.CLASS_BODY,
      code=emit(lines),
    )
