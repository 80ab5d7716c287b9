"""
Artifact Generator.

The pure entry point of the pipeline::

    generate(class syntax) -> list of GeneratedArtifact  (or raises a DestructureError)

Pipeline for one class:

1.  **Extraction**: ``FieldModelExtractor`` builds the RecordTypeModel
    (``UnsupportedShape`` on non-record classes).
2.  **Capability gating**: Mutation without Destructure aborts the whole class
    (``MissingDestructureCapability``).
3.  **Naming validation**: ``NamingCollision`` on duplicate or reserved names.
4.  **Synthesis**: companion, conversion, mutation and reference artifacts.
5.  **Syntax check**: every artifact must parse as a Python statement.

The generator holds no state between calls; each call re-derives everything
from the class syntax it is given.
"""

import logging
from typing import Iterable, List, Optional, Union

import libcst as cst

from destructure.config import GeneratorConfig
from destructure.core.companion import CompanionSynthesizer
from destructure.core.conversion import ConversionSynthesizer
from destructure.core.extractor import FieldModelExtractor
from destructure.core.mutation import MutationSynthesizer
from destructure.core.naming import validate_model
from destructure.core.reference import ReferenceSynthesizer
from destructure.enums import Capability
from destructure.errors import GenerationError, MissingDestructureCapability, SourceLocation
from destructure.model import CompanionTypeModel, GeneratedArtifact, RecordTypeModel

logger = logging.getLogger(__name__)

TypeSyntax = Union[str, cst.CSTNode, RecordTypeModel]


class ArtifactGenerator:
  """
  Runs synthesis for one record model at a time.
  """

  def __init__(self, config: Optional[GeneratorConfig] = None) -> None:
    self.config = config or GeneratorConfig()
    self.extractor = FieldModelExtractor()
    self.companion = CompanionSynthesizer(self.config)
    self.conversion = ConversionSynthesizer()
    self.mutation = MutationSynthesizer(self.config)
    self.reference = ReferenceSynthesizer(self.config)

  def model_of(self, syntax: TypeSyntax, location: Optional[SourceLocation] = None) -> RecordTypeModel:
    """
    Normalizes any accepted input into a RecordTypeModel.

    Args:
        syntax: Source text, a ``cst.ClassDef`` or an already extracted model.
        location: Position attached to diagnostics.

    Returns:
        RecordTypeModel: The model.
    """
    if isinstance(syntax, RecordTypeModel):
      return syntax
    if isinstance(syntax, str):
      return self.extractor.extract_source(syntax, location=location)
    return self.extractor.extract(syntax, location)

  def run(
    self,
    model: RecordTypeModel,
    scope_names: Optional[Iterable[str]] = None,
  ) -> List[GeneratedArtifact]:
    """
    Synthesizes every artifact the model's capabilities request.

    Args:
        model: The extracted record.
        scope_names: Names already bound next to the class, checked for collisions.

    Returns:
        List[GeneratedArtifact]: In emission order; empty if nothing is requested.

    Raises:
        MissingDestructureCapability: Mutation without Destructure.
        NamingCollision: Duplicate or reserved identifiers.
        GenerationError: An artifact is not valid Python.
    """
    if model.requests(Capability.MUTATION) and not model.requests(Capability.DESTRUCTURE):
      raise MissingDestructureCapability(
        "'mutation' requires 'destructure' on the same class; reconstruct() and substitute() "
        "are defined in terms of the companion type",
        type_name=model.type_name,
        location=model.location,
      )

    validate_model(model, self.config, scope_names)

    artifacts: List[GeneratedArtifact] = []
    companion: Optional[CompanionTypeModel] = None

    if model.requests(Capability.DESTRUCTURE):
      companion, companion_artifact = self.companion.synthesize(model)
      artifacts.append(companion_artifact)
      artifacts.extend(self.conversion.synthesize(model, companion))

    if model.requests(Capability.MUTATION):
      artifacts.extend(self.mutation.synthesize(model, companion))

    if model.requests(Capability.DESTRUCTURE_REF):
      artifacts.extend(self.reference.synthesize(model))

    for artifact in artifacts:
      self._check_syntax(model, artifact)

    logger.debug("Generated %d artifacts for %s", len(artifacts), model.type_name)
    return artifacts

  def _check_syntax(self, model: RecordTypeModel, artifact: GeneratedArtifact) -> None:
    try:
      cst.parse_statement(artifact.code)
    except cst.ParserSyntaxError as e:
      raise GenerationError(
        f"generated {artifact.kind.value} '{artifact.name}' is not valid Python: {e.message}",
        type_name=model.type_name,
        location=model.location,
      ) from e


def generate(
  syntax: TypeSyntax,
  config: Optional[GeneratorConfig] = None,
  scope_names: Optional[Iterable[str]] = None,
  location: Optional[SourceLocation] = None,
) -> List[GeneratedArtifact]:
  """
  Generates the artifacts of one annotated class.

  Args:
      syntax: Class source text, a ``cst.ClassDef`` or a RecordTypeModel.
      config: Naming configuration. Defaults to ``GeneratorConfig()``.
      scope_names: Names already bound next to the class, checked for collisions.
      location: Position attached to diagnostics.

  Returns:
      List[GeneratedArtifact]: The generated code units.

  Raises:
      DestructureError: On any diagnostic. No partial output is returned.
  """
  generator = ArtifactGenerator(config)
  return generator.run(generator.model_of(syntax, location), scope_names)
