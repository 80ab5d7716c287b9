"""
Generator Configuration Store.

Naming conventions for generated types and expansion behaviour, loaded from the
``[tool.destructure]`` table of the nearest ``pyproject.toml`` and overridden by
CLI arguments.
"""

import sys
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, Field, field_validator, model_validator

if sys.version_info >= (3, 11):
  import tomllib
else:
  import tomli as tomllib


class GeneratorConfig(BaseModel):
  """
  Global configuration container for the generator.
  """

  companion_prefix: str = Field("Destruct", description="Prefix of the companion type name.")
  mutation_suffix: str = Field("Ref", description="Suffix of the reference view used by substitute().")
  view_suffix: str = Field("View", description="Suffix of the read-only view returned by as_destruct().")
  inject_imports: bool = Field(True, description="Add 'import dataclasses'/'import typing' when expanding.")

  @field_validator("companion_prefix", "mutation_suffix", "view_suffix")
  @classmethod
  def validate_affix(cls, v: str) -> str:
    """
    Ensures the affix can be part of a Python identifier.

    Args:
        v (str): The configured prefix or suffix.

    Returns:
        str: The stripped affix.

    Raises:
        ValueError: If empty or not usable inside an identifier.
    """
    v_clean = v.strip()
    if not v_clean:
      raise ValueError("Affix must not be empty; generated names would shadow the original type.")
    if not f"X{v_clean}".isidentifier():
      raise ValueError(f"Affix '{v_clean}' is not valid inside a Python identifier.")
    return v_clean

  @model_validator(mode="after")
  def validate_distinct_suffixes(self) -> "GeneratorConfig":
    if self.mutation_suffix == self.view_suffix:
      raise ValueError("mutation_suffix and view_suffix must differ.")
    return self

  @classmethod
  def load(
    cls,
    companion_prefix: Optional[str] = None,
    mutation_suffix: Optional[str] = None,
    view_suffix: Optional[str] = None,
    inject_imports: Optional[bool] = None,
    search_path: Optional[Path] = None,
  ) -> "GeneratorConfig":
    """
    Loads configuration from pyproject.toml and overrides with CLI arguments.

    Args:
        companion_prefix (Optional[str]): Override for the companion prefix.
        mutation_suffix (Optional[str]): Override for the reference view suffix.
        view_suffix (Optional[str]): Override for the read-only view suffix.
        inject_imports (Optional[bool]): Override for import injection.
        search_path (Optional[Path]): Directory to start searching for TOML config.

    Returns:
        GeneratorConfig: The fully resolved configuration object.
    """
    toml_config, _ = _load_toml_settings(search_path or Path.cwd())

    settings: Dict[str, Any] = {k: v for k, v in toml_config.items() if k in cls.model_fields}
    overrides = {
      "companion_prefix": companion_prefix,
      "mutation_suffix": mutation_suffix,
      "view_suffix": view_suffix,
      "inject_imports": inject_imports,
    }
    settings.update({k: v for k, v in overrides.items() if v is not None})

    return cls(**settings)


def _load_toml_settings(start_path: Path) -> Tuple[Dict[str, Any], Optional[Path]]:
  """
  Searches ``start_path`` and its parents for 'pyproject.toml' and extracts config.

  Args:
      start_path (Path): Directory to start search from.

  Returns:
      Tuple[Dict, Optional[Path]]: The ``[tool.destructure]`` table and the directory it was found in.
  """
  current = start_path.resolve()

  for parent in [current, *current.parents]:
    toml_path = parent / "pyproject.toml"
    if toml_path.is_file():
      with open(toml_path, "rb") as f:
        data = tomllib.load(f)
      return data.get("tool", {}).get("destructure", {}), parent

  return {}, None
