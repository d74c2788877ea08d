import mimetypes
from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class MediaFile:
    """A pasted or dropped file, held in memory."""

    content: bytes
    content_type: str
    name: str
    source_path: str | None = None  # vault path of the document it was pasted into

    @property
    def is_video(self) -> bool:
        return self.content_type.startswith("video/")

    @property
    def is_media(self) -> bool:
        return self.content_type.startswith(("image/", "video/"))

    @classmethod
    def from_path(cls, path: Path, source_path: str | None = None) -> "MediaFile":
        """Read a file from disk, guessing its media type from the extension."""
        content_type, _ = mimetypes.guess_type(path.name)
        return cls(
            content=path.read_bytes(),
            content_type=content_type or "application/octet-stream",
            name=path.name,
            source_path=source_path,
        )


@dataclass(frozen=True)
class UploadOptions:
    """Optional destination hints for a single upload."""

    path: str | None = None
    folder: str | None = None
    transformation: str | None = None
    variant: str | None = None
    tags: tuple[str, ...] = ()
    metadata: dict[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class UploadResult:
    """Where an uploaded file now lives."""

    url: str
    public_id: str
    width: int | None = None
    height: int | None = None
    format: str | None = None
    metadata: dict[str, object] = field(default_factory=dict)
