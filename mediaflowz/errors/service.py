"""Classification and reporting of upload failures."""

from collections.abc import Callable
from typing import ClassVar

import httpx

from mediaflowz.errors.exceptions import (
    ConfigError,
    EditorError,
    NetworkError,
    UploadError,
)
from mediaflowz.errors.models import ErrorType, StructuredError
from mediaflowz.logging.logger import Log

Notifier = Callable[[str], None]
Reporter = Callable[[StructuredError], None]


class ErrorService:
    """Turns raw exceptions into StructuredError and surfaces them.

    Classification is stateless: the same exception always yields the same
    StructuredError type and message.
    """

    MESSAGES: ClassVar[dict[ErrorType, str]] = {
        ErrorType.CONFIG: "The media service is not configured",
        ErrorType.NETWORK: "Network error while contacting the media service",
        ErrorType.UPLOAD: "Media upload failed",
        ErrorType.EDITOR: "Could not insert the media into the document",
        ErrorType.UNEXPECTED: "An unexpected error occurred",
    }

    HINTS: ClassVar[dict[ErrorType, str]] = {
        ErrorType.CONFIG: "Check the plugin settings.",
        ErrorType.NETWORK: "Check your internet connection.",
    }

    NETWORK_SIGNATURES: ClassVar[tuple[str, ...]] = ("network", "fetch", "connection")

    def __init__(
        self,
        notifier: Notifier | None = None,
        reporter: Reporter | None = None,
    ) -> None:
        self._notifier = notifier if notifier is not None else Log.warning
        self._reporter = reporter

    def create_error(
        self,
        error_type: ErrorType,
        original_error: BaseException | None = None,
        context: dict[str, object] | None = None,
        message: str | None = None,
    ) -> StructuredError:
        """Build a StructuredError with the catalog message for its type."""
        return StructuredError(
            type=error_type,
            message=message or self.MESSAGES[error_type],
            original_error=original_error,
            context=dict(context or {}),
        )

    def classify(
        self,
        error: BaseException,
        context: dict[str, object] | None = None,
    ) -> StructuredError:
        """Map an exception onto the closed error taxonomy."""
        return self.create_error(self.error_type_of(error), error, context)

    def error_type_of(self, error: BaseException) -> ErrorType:
        if isinstance(error, ConfigError):
            return ErrorType.CONFIG
        if self.is_network_error(error):
            return ErrorType.NETWORK
        if isinstance(error, (UploadError, httpx.HTTPStatusError)):
            return ErrorType.UPLOAD
        if isinstance(error, EditorError):
            return ErrorType.EDITOR
        return ErrorType.UNEXPECTED

    def is_network_error(self, error: BaseException) -> bool:
        """True for transport failures where no usable response was received."""
        if isinstance(error, (NetworkError, httpx.TransportError)):
            return True
        if isinstance(error, (TypeError, ConnectionError)):
            message = str(error).lower()
            return any(signature in message for signature in self.NETWORK_SIGNATURES)
        return False

    def handle(self, error: StructuredError) -> None:
        """Log the error, notify the user once, and report unexpected ones."""
        Log.error(f"[{error.type.value}] {error.message}: {error.original_error}", **error.context)
        self._notifier(self.notice_text(error))
        if error.type is ErrorType.UNEXPECTED and self._reporter is not None:
            self._reporter(error)

    def notice_text(self, error: StructuredError) -> str:
        hint = self.HINTS.get(error.type)
        if hint is None:
            return error.message
        return f"{error.message}\n{hint}"
