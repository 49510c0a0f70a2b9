"""
Central Logging and Console Utilities.

Routes the package's standard ``logging`` output through a ``rich`` handler
bound to a swappable console. Library code logs through
``logging.getLogger(__name__)``; records propagate to the ``idiomizer``
package logger, which this module equips with a ``RichHandler``.

The console behind the handler can be replaced at runtime via
``set_console`` (for example with a recording console in tests). The
package logger defaults to WARNING; the root logger is left untouched.

Attributes:
    console (_ConsoleProxy): A stable reference to the active Rich Console.
"""

import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

PACKAGE_LOGGER = "idiomizer"

# Custom level between INFO and WARNING for completed-work messages.
SUCCESS_LEVEL_NUM = 25
logging.addLevelName(SUCCESS_LEVEL_NUM, "SUCCESS")

_THEME = Theme(
  {
    "logging.level.success": "green",
    "info": "dim cyan",
    "warning": "yellow",
    "error": "bold red",
    "success": "green",
    "code": "bold magenta",
  }
)


class _ConsoleProxy:
  """
  Proxy around ``rich.console.Console``.

  Holds a backend console and keeps the package logger's ``RichHandler``
  pointed at it, so modules that imported ``console`` keep a valid reference
  after the backend is swapped.

  Attributes:
      _backend (Console): The active Rich Console instance.
  """

  def __init__(self) -> None:
    self._backend: Console = Console(theme=_THEME, stderr=True)
    self._configure_logging()

  def set_backend(self, new_console: Console) -> None:
    """
    Injects a new Console backend and rebinds the log handler.

    Args:
        new_console (Console): The new Rich Console instance to use.
    """
    self._backend = new_console
    self._configure_logging()

  def reset(self) -> None:
    """Resets the proxy to a fresh standard-error console."""
    self._backend = Console(theme=_THEME, stderr=True)
    self._configure_logging()

  @property
  def backend(self) -> Console:
    """The currently active Rich Console."""
    return self._backend

  def _configure_logging(self) -> None:
    """Replaces the package logger's RichHandler with one bound to the backend."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
      if isinstance(handler, RichHandler):
        logger.removeHandler(handler)

    logger.addHandler(
      RichHandler(
        console=self._backend,
        show_time=False,
        show_path=False,
        markup=True,
        rich_tracebacks=True,
      )
    )
    if logger.level == logging.NOTSET:
      logger.setLevel(logging.WARNING)

  def print(self, *args: Any, **kwargs: Any) -> None:
    """Forwards ``print`` calls to the active backend."""
    self._backend.print(*args, **kwargs)

  def export_text(self, **kwargs: Any) -> str:
    """Forwards ``export_text`` (useful with a recording console)."""
    return self._backend.export_text(**kwargs)

  def __getattr__(self, name: str) -> Any:
    return getattr(self._backend, name)


console = _ConsoleProxy()


def set_console(new_console: Console) -> None:
  """
  Injects a specific console instance for all package log output.

  Args:
      new_console (Console): The configured Rich console to use.
  """
  console.set_backend(new_console)


def reset_console() -> None:
  """Resets logging output to a standard-error console."""
  console.reset()


def get_console() -> Console:
  """
  Retrieves the currently active console backend.

  Returns:
      Console: The active Rich Console.
  """
  return console.backend


def log_info(msg: str) -> None:
  """Logs an informational message on the package logger."""
  logging.getLogger(PACKAGE_LOGGER).info(msg, extra={"markup": True})


def log_success(msg: str) -> None:
  """Logs a success message on the package logger."""
  logging.getLogger(PACKAGE_LOGGER).log(SUCCESS_LEVEL_NUM, msg, extra={"markup": True})


def log_warning(msg: str) -> None:
  """Logs a warning on the package logger."""
  logging.getLogger(PACKAGE_LOGGER).warning(msg, extra={"markup": True})


def log_error(msg: str) -> None:
  """Logs an error on the package logger."""
  logging.getLogger(PACKAGE_LOGGER).error(msg, extra={"markup": True})
