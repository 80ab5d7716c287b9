"""
Companion-Type Synthesizer.

Emits the fully exposed mirror of a record class: a plain mutable dataclass
with the same fields, declared types, order and generics as the original.
It is a passive data holder; the only behaviour it carries is the
field-by-field ``__init__``/``__repr__``/``__eq__`` a dataclass provides.

Fields marked ``Annotated[..., Skip]`` are still carried, so the record can be
rebuilt, but they are declared ``init=False, repr=False, compare=False``.
``into_destruct`` sets them after construction, and they stay out of the
generated ``__init__``/``__repr__``/``__eq__``.
"""

from typing import Tuple

from destructure.config import GeneratorConfig
from destructure.core.emit import class_header, docstring, emit, indent
from destructure.core.naming import companion_name
from destructure.enums import ArtifactKind, Placement, Visibility
from destructure.model import CompanionTypeModel, FieldDescriptor, GeneratedArtifact, RecordTypeModel


class CompanionSynthesizer:
  """
  Derives the CompanionTypeModel and its class definition.
  """

  def __init__(self, config: GeneratorConfig) -> None:
    self.config = config

  def derive(self, model: RecordTypeModel) -> CompanionTypeModel:
    """
    Mirrors the record's fields with visibility forced to public.

    Field names, declared types and order are copied unchanged.

    Args:
        model: The extracted record.

    Returns:
        CompanionTypeModel: The structural mirror.
    """
    fields = [f.model_copy(update={"visibility": Visibility.PUBLIC}) for f in model.fields]
    return CompanionTypeModel(
      name=companion_name(model.type_name, self.config),
      original_name=model.type_name,
      generic_parameters=list(model.generic_parameters),
      fields=fields,
    )

  def synthesize(self, model: RecordTypeModel) -> Tuple[CompanionTypeModel, GeneratedArtifact]:
    """
    Builds the companion class definition.

    Args:
        model: The extracted record.

    Returns:
        Tuple[CompanionTypeModel, GeneratedArtifact]: The derived model and its source.
    """
    companion = self.derive(model)

    lines = [
      "@dataclasses.dataclass",
      class_header(companion.name, model),
      *docstring(
        f"Fully exposed fields of ``{model.type_name}``.\n\n"
        f"Produced by ``{model.type_name}.into_destruct()``; "
        f"turn it back with ``{model.type_name}.from_destruct()``.",
        depth=1,
      ),
      "",
      *indent([self._declaration(f) for f in companion.fields]),
    ]

    artifact = GeneratedArtifact(
      kind=ArtifactKind.COMPANION_TYPE,
      name=companion.name,
      owner=model.type_name,
      placement=Placement.MODULE,
      code=emit(lines),
    )
    return companion, artifact

  @staticmethod
  def _declaration(field: FieldDescriptor) -> str:
    if field.skip:
      return f"{field.name}: {field.declared_type} = dataclasses.field(init=False, repr=False, compare=False)"
    return f"{field.name}: {field.declared_type}"
