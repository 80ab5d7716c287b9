"""
Central Logging and Console Utilities.

This module unifies the CLI's output using the standard ``logging`` library,
backed by ``rich`` for formatting.

1.  **Standard Logging Integration**: adapter functions (``log_success``,
    ``log_warning``, ...) route to standard logging channels, rendered by a
    ``RichHandler`` bound to the active console.
2.  **Console Injection**: a proxy around the Rich Console lets tests swap the
    output destination (stdout or an in-memory recording console) at runtime
    via ``set_console`` while modules keep importing the same ``console``.

Only the CLI imports this module; the library itself logs through plain
module loggers and never configures handlers.

Attributes:
    console (_ConsoleProxy): A global, stable reference to the active Rich Console.
"""

import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

# Custom level between INFO and WARNING
SUCCESS_LEVEL_NUM = 25
logging.addLevelName(SUCCESS_LEVEL_NUM, "SUCCESS")

_THEME = Theme(
  {
    "logging.level.success": "green",
    "info": "dim cyan",
    "warning": "yellow",
    "error": "bold red",
    "success": "green",
    "path": "bold blue",
    "code": "bold magenta",
  }
)


class _ConsoleProxy:
  """
  A Proxy wrapper around ``rich.console.Console``.

  When the backend changes, the proxy also re-binds the ``logging`` handler so
  ``logging.info(...)`` writes to the new destination.

  Attributes:
      _backend (Console): The active Rich Console instance.
      _level (int): Root logger level applied on every reconfiguration.
  """

  def __init__(self) -> None:
    self._backend: Console = Console(theme=_THEME)
    self._level = logging.INFO

  def set_backend(self, new_console: Console) -> None:
    """
    Injects a new Console backend and updates logging handlers.

    Args:
        new_console (Console): The new Rich Console instance to use.
    """
    self._backend = new_console
    self.configure_logging(self._level)

  def reset(self) -> None:
    """Resets the proxy to a fresh standard output console."""
    self._backend = Console(theme=_THEME)
    self.configure_logging(self._level)

  @property
  def backend(self) -> Console:
    return self._backend

  def configure_logging(self, level: int = logging.INFO) -> None:
    """
    Directs the root logger to the current backend console.

    Args:
        level (int): Minimum level to emit, e.g. ``logging.DEBUG`` for ``--verbose``.
    """
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
      if isinstance(handler, RichHandler):
        root_logger.removeHandler(handler)

    rich_handler = RichHandler(
      console=self._backend,
      show_time=False,
      omit_repeated_times=False,
      show_path=False,
      markup=True,
      rich_tracebacks=True,
    )

    self._level = level
    root_logger.setLevel(level)
    root_logger.addHandler(rich_handler)

  def print(self, *args: Any, **kwargs: Any) -> None:
    self._backend.print(*args, **kwargs)

  def export_text(self, **kwargs: Any) -> str:
    """
    Forwards ``export_text`` (requires a recording console).

    Returns:
        str: The captured text output.
    """
    return self._backend.export_text(**kwargs)

  def __getattr__(self, name: str) -> Any:
    return getattr(self._backend, name)


console = _ConsoleProxy()


def set_console(new_console: Console) -> None:
  """
  Global helper to inject a specific console instance.

  Args:
      new_console (Console): The configured Rich console to use globally.
  """
  console.set_backend(new_console)


def reset_console() -> None:
  """Global helper to reset logging and console to standard output."""
  console.reset()


def get_console() -> Console:
  return console.backend


def configure_logging(verbose: bool = False) -> None:
  """
  Installs the Rich logging handler on the root logger.

  Args:
      verbose (bool): Emit DEBUG records from the generator modules.
  """
  console.configure_logging(logging.DEBUG if verbose else logging.INFO)


def log_info(msg: str) -> None:
  """
  Logs an informational message via standard logging.

  Args:
      msg (str): The message content. Can include rich markup like [bold].
  """
  logging.info(f"ℹ️  {msg}", extra={"markup": True})


def log_success(msg: str) -> None:
  logging.log(SUCCESS_LEVEL_NUM, f"✅ {msg}", extra={"markup": True})


def log_warning(msg: str) -> None:
  logging.warning(f"⚠️  {msg}", extra={"markup": True})


def log_error(msg: str) -> None:
  """
  Logs an error message via standard logging.

  Args:
      msg (str): The message content.
  """
  logging.error(f"❌ {msg}", extra={"markup": True})
