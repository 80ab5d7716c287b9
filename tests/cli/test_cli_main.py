"""
Tests for CLI argument parsing and dispatch.

Handlers are patched on the ``commands`` facade; these tests only verify that
arguments reach them unchanged.
"""

from pathlib import Path
from unittest.mock import patch

import pytest

from destructure.cli.__main__ import main


@patch("destructure.cli.commands.handle_expand", return_value=0)
def test_expand_defaults(mock_handle):
  assert main(["expand", "models.py"]) == 0
  mock_handle.assert_called_once_with(Path("models.py"), None, None, None)


@patch("destructure.cli.commands.handle_expand", return_value=0)
def test_expand_options(mock_handle):
  main(["expand", "src/", "--out", "build/", "--prefix", "Open", "--no-imports"])
  mock_handle.assert_called_once_with(Path("src/"), Path("build/"), "Open", False)


@patch("destructure.cli.commands.handle_check", return_value=1)
def test_check_propagates_exit_code(mock_handle):
  assert main(["check", "models.py"]) == 1
  mock_handle.assert_called_once_with(Path("models.py"), None)


@patch("destructure.cli.commands.handle_inspect", return_value=0)
def test_inspect_json_flag(mock_handle):
  main(["inspect", "models.py", "--json"])
  mock_handle.assert_called_once_with(Path("models.py"), True)


@patch("destructure.cli.__main__.configure_logging")
@patch("destructure.cli.commands.handle_check", return_value=0)
def test_verbose_enables_debug(mock_handle, mock_logging):
  main(["-v", "check", "models.py"])
  mock_logging.assert_called_once_with(True)


def test_command_required():
  with pytest.raises(SystemExit):
    main([])


def test_version(capsys):
  with pytest.raises(SystemExit) as exc:
    main(["--version"])
  assert exc.value.code == 0
  assert "0.3.0" in capsys.readouterr().out
