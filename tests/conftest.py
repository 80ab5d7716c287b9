"""
Pytest Configuration and Fixtures.

Includes:
- Syspath patching for local imports.
- Snapshot testing fixture for generated source.
- Helpers to expand a module and execute the result.
"""

import sys
import textwrap
import pytest
from pathlib import Path
from typing import Any, Callable, Dict, Optional

# Add src to path so we can import 'destructure' without installing it
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from destructure.config import GeneratorConfig  # noqa: E402
from destructure.core.engine import ExpansionEngine  # noqa: E402


class SnapshotAssert:
  """
  Simple snapshot comparison logic to verify generated code stability.
  """

  def __init__(self, request: pytest.FixtureRequest):
    self.request = request
    self.test_name = request.node.name
    self.module_path = Path(request.node.fspath).parent
    self.snapshot_dir = self.module_path / "__snapshots__"
    self.update_mode = request.config.getoption("--update-snapshots", default=False)

  def assert_match(self, content: str, extension: str = "txt", normalizer: Optional[Callable[[str], str]] = None):
    """
    Compares content against stored file.

    Args:
        content: The actual output string.
        extension: File extension (default 'txt', 'py', etc).
        normalizer: Optional function to clean both content and expected string before comparison.
    """
    if not self.snapshot_dir.exists():
      self.snapshot_dir.mkdir(parents=True)

    snapshot_file = self.snapshot_dir / f"{self.test_name}.{extension}"

    content = content.replace("\r\n", "\n")

    if self.update_mode or not snapshot_file.exists():
      normalized_to_write = normalizer(content) if normalizer else content
      snapshot_file.write_text(normalized_to_write, encoding="utf-8")
      if self.update_mode:
        return

    expected = snapshot_file.read_text(encoding="utf-8").replace("\r\n", "\n")

    lhs = content
    rhs = expected

    if normalizer:
      lhs = normalizer(lhs)
      rhs = normalizer(rhs)

    assert lhs == rhs, (
      f"Snapshot mismatch for {snapshot_file.name}. Run pytest with --update-snapshots to accept changes."
    )


@pytest.fixture
def snapshot(request):
  """Fixture to assert text matches a stored snapshot."""
  return SnapshotAssert(request)


@pytest.fixture
def engine() -> ExpansionEngine:
  """An expansion engine with default naming."""
  return ExpansionEngine(GeneratorConfig())


@pytest.fixture
def expand_and_exec(engine) -> Callable[[str], Dict[str, Any]]:
  """
  Expands dedented source, asserts success and executes the result.

  Returns:
      Callable returning the namespace of the executed module.
  """

  def _run(code: str) -> Dict[str, Any]:
    result = engine.run(textwrap.dedent(code), filename="<test>")
    assert result.success, result.errors
    namespace: Dict[str, Any] = {"__name__": "expanded_under_test"}
    exec(compile(result.code, "<expanded>", "exec"), namespace)
    return namespace

  return _run


def pytest_addoption(parser):
  """Add CLI flag to update snapshots."""
  parser.addoption("--update-snapshots", action="store_true", default=False, help="Update snapshots for visual tests")
