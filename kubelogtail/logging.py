import os

from rich.console import Console
from rich.theme import Theme

VERBOSE_ENV = "KUBE_LOG_TAIL_VERBOSE"

DEFAULT_THEME = Theme(
    {
        "info": "bold cyan",
        "warn": "bold yellow",
        "error": "bold red",
        "success": "bold green",
    }
)


_console = Console(theme=DEFAULT_THEME)
_err_console = Console(theme=DEFAULT_THEME, stderr=True)


def get_console() -> Console:
    return _console


def get_err_console() -> Console:
    """Console for diagnostics, kept off stdout so tailed output stays pipeable."""
    return _err_console


def is_verbose() -> bool:
    return bool(os.environ.get(VERBOSE_ENV))


def set_verbose(enabled: bool) -> None:
    if enabled:
        os.environ[VERBOSE_ENV] = "1"
    else:
        os.environ.pop(VERBOSE_ENV, None)
