"""
Root logger configuration shared by the CLI commands.
"""
import json
import logging
import sys
from typing import Optional, Union

from .. import __version__

_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

_handler: Optional[logging.Handler] = None


class JsonFormatter(logging.Formatter):
    """
    Formats each record as a single JSON object per line.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["error"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def resolve_level(level: Union[str, int]) -> int:
    """
    Maps a level name ('debug', 'INFO', ...) or number to a logging level.
    Unknown names fall back to INFO.
    """
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(level: Union[str, int] = "INFO", json_output: bool = False) -> None:
    """
    Installs a single stream handler on the root logger.

    :param level: Log level name or number.
    :param json_output: Emit JSON lines instead of the text format.
    """
    global _handler

    root = logging.getLogger()
    root.setLevel(resolve_level(level))

    if _handler is not None:
        root.removeHandler(_handler)

    _handler = logging.StreamHandler(sys.stderr)
    _handler.setFormatter(JsonFormatter() if json_output else logging.Formatter(_FORMAT))
    root.addHandler(_handler)


def log_build_info(logger: logging.Logger) -> None:
    """Logs the running version and interpreter."""
    logger.info(f"d2sd version {__version__}, python {sys.version.split()[0]}")
