"""
Data structures shared by the extraction and synthesis stages.

A ``RecordTypeModel`` is built once per annotated class, consumed by the
synthesizers and discarded once code has been emitted. All models are frozen:
nothing downstream of extraction may alter the field list.
"""

from typing import FrozenSet, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from destructure.enums import ArtifactKind, Capability, GenericStyle, Placement, Visibility
from destructure.errors import SourceLocation


class FieldDescriptor(BaseModel):
  """
  A single declared field of a record class.
  """

  model_config = ConfigDict(frozen=True)

  name: str = Field(description="Attribute name, e.g. 'author'.")
  declared_type: str = Field(description="Annotation source text, copied verbatim.")
  order_index: int = Field(description="Zero-based textual declaration position.")
  visibility: Visibility = Field(Visibility.PUBLIC, description="Naming convention of the field.")
  skip: bool = Field(False, description="Marked with Annotated[..., Skip]; kept out of the public surface.")


class GenericParameter(BaseModel):
  """
  A generic parameter captured as opaque source text.
  """

  model_config = ConfigDict(frozen=True)

  name: str = Field(description="Text used when applying the parameter, e.g. 'T' or '*Ts'.")
  declaration: str = Field(description="Text used when declaring it, e.g. 'T: int'.")


class RecordTypeModel(BaseModel):
  """
  Syntactic description of an annotated record class.
  """

  model_config = ConfigDict(frozen=True)

  type_name: str
  generic_style: GenericStyle = GenericStyle.NONE
  generic_parameters: List[GenericParameter] = Field(default_factory=list)
  generic_base: Optional[str] = Field(None, description="Verbatim 'Generic[...]' base text.")
  fields: List[FieldDescriptor] = Field(default_factory=list)
  requested_capabilities: FrozenSet[Capability] = Field(default_factory=frozenset)
  member_names: List[str] = Field(
    default_factory=list,
    description="Names bound in the class body other than fields (methods, attributes).",
  )
  location: Optional[SourceLocation] = None

  @property
  def field_names(self) -> List[str]:
    return [f.name for f in self.fields]

  @property
  def exposed_fields(self) -> List[FieldDescriptor]:
    """Fields visible through views and the companion constructor."""
    return [f for f in self.fields if not f.skip]

  def requests(self, capability: Capability) -> bool:
    return capability in self.requested_capabilities

  def with_capability(self, capability: Capability) -> "RecordTypeModel":
    """
    Returns a copy that additionally requests ``capability``.

    Args:
        capability: The capability to add.

    Returns:
        RecordTypeModel: A new model; ``self`` is unchanged.
    """
    caps = frozenset(self.requested_capabilities | {capability})
    return self.model_copy(update={"requested_capabilities": caps})

  def apply_generics(self, name: str) -> str:
    """
    Formats a type reference carrying this model's generic parameters.

    Args:
        name: Bare type name (the original or a generated one).

    Returns:
        str: ``name`` or ``name[A, B]``.
    """
    if not self.generic_parameters:
      return name
    args = ", ".join(p.name for p in self.generic_parameters)
    return f"{name}[{args}]"


class CompanionTypeModel(BaseModel):
  """
  The fully exposed mirror of a RecordTypeModel.

  Derived by ``CompanionSynthesizer.derive``; it never holds state of its own.
  """

  model_config = ConfigDict(frozen=True)

  name: str
  original_name: str
  generic_parameters: List[GenericParameter] = Field(default_factory=list)
  fields: List[FieldDescriptor] = Field(default_factory=list)


class GeneratedArtifact(BaseModel):
  """
  A self-contained unit of generated Python source.
  """

  model_config = ConfigDict(frozen=True)

  kind: ArtifactKind
  name: str = Field(description="Name bound by the artifact (class or method name).")
  owner: str = Field(description="Name of the original class the artifact belongs to.")
  placement: Placement
  code: str = Field(description="Source text, unindented, ending in a newline.")
