import logging
import sys
from typing import IO

REDACTED = "***"

# Context keys whose values are provider credentials.
SECRET_KEY_PARTS = ("token", "secret", "access_key", "api_key", "password")


def is_secret_key(key: str) -> bool:
    key = key.lower()
    return any(part in key for part in SECRET_KEY_PARTS)


class ContextFormatter(logging.Formatter):
    """Appends the keyword context given to `Log.*` as sorted `key=value` pairs."""

    def __init__(self) -> None:
        super().__init__("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = getattr(record, "context", None)
        if not context:
            return line
        pairs = " ".join(f"{key}={value}" for key, value in sorted(context.items()))
        head, newline, traceback = line.partition("\n")
        return f"{head} | {pairs}{newline}{traceback}"


class Log:
    """Process-wide logging facade for the upload pipeline.

    Keyword arguments become the record's `context` mapping; credential-like
    keys are masked before anything reaches a handler.
    """

    _logger: logging.Logger = logging.getLogger("mediaflowz")

    @classmethod
    def configure(cls, log_level: str, stream: IO[str] | None = None) -> None:
        """Set the level and attach one context-aware handler (stdout by default)."""
        cls._logger.setLevel(log_level.upper())
        if not cls._logger.handlers:
            handler = logging.StreamHandler(stream or sys.stdout)
            handler.setFormatter(ContextFormatter())
            cls._logger.addHandler(handler)

    @classmethod
    def info(cls, message: str, **context: object) -> None:
        cls._log(logging.INFO, message, context)

    @classmethod
    def error(cls, message: str, **context: object) -> None:
        cls._log(logging.ERROR, message, context)

    @classmethod
    def warning(cls, message: str, **context: object) -> None:
        cls._log(logging.WARNING, message, context)

    @classmethod
    def debug(cls, message: str, **context: object) -> None:
        cls._log(logging.DEBUG, message, context)

    @classmethod
    def exception(cls, message: str, **context: object) -> None:
        """Log at ERROR with the active exception's traceback."""
        cls._log(logging.ERROR, message, context, exc_info=True)

    @classmethod
    def _log(
        cls,
        level: int,
        message: str,
        context: dict[str, object],
        exc_info: bool = False,
    ) -> None:
        if not cls._logger.isEnabledFor(level):
            return
        masked = {
            key: REDACTED if is_secret_key(key) and value else value
            for key, value in context.items()
        }
        cls._logger.log(
            level, message, extra={"context": masked}, exc_info=exc_info, stacklevel=3
        )
