import logging
import os

from rich.logging import RichHandler

_ROOT = "retailpulse"


class CenteredFormatter(logging.Formatter):
    """Pads logger names to the widest one seen so far."""

    longest_name_length = 14

    def __init__(self, fmt=None, datefmt=None, style="%", initial_width=14):
        super().__init__(fmt, datefmt, style)
        CenteredFormatter.longest_name_length = initial_width

    def format(self, record):
        CenteredFormatter.longest_name_length = max(
            CenteredFormatter.longest_name_length, len(record.name)
        )
        record.name = record.name.center(CenteredFormatter.longest_name_length)
        return super().format(record)


def _level() -> int:
    return logging.DEBUG if os.getenv("DEBUG") else logging.INFO


def _root_logger() -> logging.Logger:
    root = logging.getLogger(_ROOT)
    if not root.handlers:
        handler = RichHandler(
            show_time=True,
            show_level=True,
            show_path=False,
            rich_tracebacks=True,
            log_time_format="[%X]",
        )
        handler.setFormatter(CenteredFormatter("[%(name)s]  %(message)s"))
        root.addHandler(handler)
        root.setLevel(_level())
        root.propagate = False
    return root


def get_logger(name=None) -> logging.Logger:
    """
    Return a logger under the shared "retailpulse" root, which owns a single
    RichHandler. Level is DEBUG when the DEBUG env var is set.
    """
    root = _root_logger()
    if not name:
        return root
    return root.getChild(name)


def set_debug(enabled: bool) -> None:
    _root_logger().setLevel(logging.DEBUG if enabled else logging.INFO)
