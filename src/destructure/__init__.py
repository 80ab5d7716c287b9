"""
destructure Package.

Generates a fully exposed companion type for record classes, conversions to
and from it, and scoped mutation helpers.

Usage
-----

Runtime Decorators
^^^^^^^^^^^^^^^^^^

.. code-block:: python

    from dataclasses import dataclass
    from destructure import destructure, mutation

    @destructure
    @mutation
    @dataclass(frozen=True)
    class Point:
        x: int
        y: int

    Point(1, 2).into_destruct()
    # DestructPoint(x=1, y=2)
    Point(1, 2).reconstruct(lambda p: setattr(p, "y", 9))
    # Point(x=1, y=9)

Source Expansion
^^^^^^^^^^^^^^^^

.. code-block:: python

    import destructure as ds

    code = open("models.py").read()
    print(ds.expand(code))

or from the shell: ``destructure expand models.py --out models_expanded.py``.
"""

from destructure.config import GeneratorConfig
from destructure.core.engine import ExpansionEngine, ExpansionResult, expand
from destructure.core.generator import ArtifactGenerator, generate
from destructure.enums import ArtifactKind, Capability, Placement
from destructure.errors import (
  DestructureError,
  GenerationError,
  MissingDestructureCapability,
  NamingCollision,
  SourceLocation,
  SourceUnavailable,
  UnsupportedShape,
)
from destructure.model import GeneratedArtifact, RecordTypeModel
from destructure.runtime import Skip, companion_of, destructure, destructure_ref, generated_types, mutation

__version__ = "0.3.0"

__all__ = [
  "ArtifactGenerator",
  "ArtifactKind",
  "Capability",
  "DestructureError",
  "ExpansionEngine",
  "ExpansionResult",
  "GeneratedArtifact",
  "GenerationError",
  "GeneratorConfig",
  "MissingDestructureCapability",
  "NamingCollision",
  "Placement",
  "RecordTypeModel",
  "Skip",
  "SourceLocation",
  "SourceUnavailable",
  "UnsupportedShape",
  "__version__",
  "companion_of",
  "destructure",
  "destructure_ref",
  "expand",
  "generate",
  "generated_types",
  "mutation",
]
