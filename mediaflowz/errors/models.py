from dataclasses import dataclass, field
from enum import Enum


class ErrorType(str, Enum):
    """Closed set of error categories surfaced to the user."""

    CONFIG = "config"
    UPLOAD = "upload"
    EDITOR = "editor"
    NETWORK = "network"
    UNEXPECTED = "unexpected"


@dataclass(frozen=True)
class StructuredError:
    """A classified failure, ready for logging and notification."""

    type: ErrorType
    message: str
    original_error: BaseException | None = None
    context: dict[str, object] = field(default_factory=dict)
