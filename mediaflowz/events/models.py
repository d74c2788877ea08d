from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from mediaflowz.errors.models import StructuredError

if TYPE_CHECKING:
    from mediaflowz.config.settings import Settings
    from mediaflowz.upload.models import MediaFile, UploadResult


class EventName(str, Enum):
    """Every event that travels over the EventBus."""

    SETTINGS_UPDATED = "settings:updated"
    SETTINGS_SAVED = "settings:saved"
    MEDIA_PASTED = "media:pasted"
    MEDIA_DROPPED = "media:dropped"
    MEDIA_UPLOADED = "media:uploaded"
    MEDIA_UPLOAD_ERROR = "media:upload:error"


@dataclass(frozen=True)
class SettingsUpdatedEvent:
    """Full settings snapshot after an update or save."""

    settings: "Settings"


@dataclass(frozen=True)
class MediaBatchEvent:
    """Files pasted or dropped into a document at once."""

    files: list["MediaFile"] = field(default_factory=list)
    source_path: str | None = None  # vault path of the active document
    name_prefix: str | None = None


@dataclass(frozen=True)
class MediaUploadedEvent:
    """One file reached its provider."""

    url: str
    file_name: str
    result: "UploadResult | None" = None


@dataclass(frozen=True)
class MediaUploadErrorEvent:
    """One file (or a whole batch, with file_name "unknown") failed."""

    error: StructuredError
    file_name: str
