"""
Name derivation and collision checks shared by every synthesizer.

Generated names are plain string concatenations keyed off the original type
name, so distinct type names in one scope always produce distinct generated
names.
"""

from typing import Dict, Iterable, List, Optional

from destructure.config import GeneratorConfig
from destructure.enums import Capability
from destructure.errors import NamingCollision
from destructure.model import RecordTypeModel

# Slot holding the viewed instance, and the builtin the view body rebinds per field.
VIEW_TARGET_SLOT = "_target"
VIEW_RESERVED_NAMES = (VIEW_TARGET_SLOT, "property")

# Methods added to the original class, per capability.
GENERATED_METHODS: Dict[Capability, List[str]] = {
  Capability.DESTRUCTURE: ["into_destruct", "from_destruct"],
  Capability.MUTATION: ["reconstruct", "substitute"],
  Capability.DESTRUCTURE_REF: ["as_destruct"],
}


def companion_name(type_name: str, config: GeneratorConfig) -> str:
  """
  Derives the companion type name.

  Args:
      type_name: Name of the original class, e.g. 'Point'.
      config: Generator configuration.

  Returns:
      str: e.g. 'DestructPoint'.
  """
  return f"{config.companion_prefix}{type_name}"


def mutation_view_name(type_name: str, config: GeneratorConfig) -> str:
  """Name of the reference view handed to ``substitute`` callbacks, e.g. 'DestructPointRef'."""
  return f"{companion_name(type_name, config)}{config.mutation_suffix}"


def reference_view_name(type_name: str, config: GeneratorConfig) -> str:
  """Name of the read-only view returned by ``as_destruct``, e.g. 'DestructPointView'."""
  return f"{companion_name(type_name, config)}{config.view_suffix}"


def generated_type_names(model: RecordTypeModel, config: GeneratorConfig) -> List[str]:
  """
  Lists the module-level names the model's capabilities will bind.

  Args:
      model: The extracted record.
      config: Generator configuration.

  Returns:
      List[str]: Type names in emission order.
  """
  names = []
  if model.requests(Capability.DESTRUCTURE):
    names.append(companion_name(model.type_name, config))
  if model.requests(Capability.MUTATION):
    names.append(mutation_view_name(model.type_name, config))
  if model.requests(Capability.DESTRUCTURE_REF):
    names.append(reference_view_name(model.type_name, config))
  return names


def generated_method_names(model: RecordTypeModel) -> List[str]:
  """Methods the model's capabilities will add to the original class."""
  names = []
  for capability in Capability:
    if model.requests(capability):
      names.extend(GENERATED_METHODS[capability])
  return names


def validate_model(
  model: RecordTypeModel,
  config: GeneratorConfig,
  scope_names: Optional[Iterable[str]] = None,
) -> None:
  """
  Raises ``NamingCollision`` for the first clash found.

  Checked, in order: duplicate fields, mangled or special field names, fields
  named like a generated type, method or view slot, existing class members
  named like a generated method, and generated types already bound in the
  enclosing scope.

  Args:
      model: The extracted record.
      config: Generator configuration.
      scope_names: Names already bound next to the class (module globals or
          sibling statements), if known.

  Raises:
      NamingCollision: On the first collision.
  """

  def fail(message: str) -> NamingCollision:
    return NamingCollision(message, type_name=model.type_name, location=model.location)

  seen = set()
  for f in model.fields:
    if f.name in seen:
      raise fail(f"duplicate field '{f.name}'")
    seen.add(f.name)

  for f in model.fields:
    if f.name.startswith("__") and f.name.endswith("__"):
      raise fail(f"field '{f.name}' uses a reserved special name")
    if f.name.startswith("__"):
      raise fail(f"field '{f.name}' is name-mangled and would resolve differently inside generated types")

  type_names = generated_type_names(model, config)
  method_names = generated_method_names(model)
  has_view = model.requests(Capability.MUTATION) or model.requests(Capability.DESTRUCTURE_REF)

  for f in model.fields:
    if f.name in type_names:
      raise fail(f"field '{f.name}' collides with the generated type of the same name")
    if f.name in method_names:
      raise fail(f"field '{f.name}' collides with generated method '{f.name}()'")
    if has_view and f.name in VIEW_RESERVED_NAMES:
      raise fail(f"field '{f.name}' is reserved by the generated view types")

  for member in model.member_names:
    if member in method_names:
      raise fail(f"class already defines '{member}', which would be replaced by a generated method")

  if scope_names is not None:
    bound = set(scope_names)
    for name in type_names:
      if name in bound:
        raise fail(f"generated type '{name}' collides with an existing name in the same scope")
