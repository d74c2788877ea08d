"""File names for uploaded media, derived from the note they are pasted into."""

import re
import time
from collections.abc import Mapping
from pathlib import PurePosixPath

from mediaflowz.upload.models import MediaFile

FRONTMATTER_PREFIX_KEY = "img-prefix"


def to_kebab_case(text: str) -> str:
    text = re.sub(r"([a-z])([A-Z])", r"\1-\2", text)
    text = re.sub(r"[\s_]+", "-", text)
    text = re.sub(r"&+", "and", text)
    text = re.sub(r"[^a-zA-Z0-9-]", "", text)
    return text.lower()


def note_prefix(note_path: str, frontmatter: Mapping[str, object] | None = None) -> str:
    """Prefix for media pasted into a note.

    The note's `img-prefix` frontmatter wins; otherwise the note title in
    kebab-case.
    """
    if frontmatter:
        custom = frontmatter.get(FRONTMATTER_PREFIX_KEY)
        if custom:
            return str(custom)
    return to_kebab_case(PurePosixPath(note_path.replace("\\", "/")).stem)


def generate_file_name(original_name: str, prefix: str, timestamp: int | None = None) -> str:
    """`{prefix}_{timestamp_ms}.{ext}`, keeping the original extension."""
    if timestamp is None:
        timestamp = int(time.time() * 1000)
    extension = original_name.rsplit(".", 1)[-1] if "." in original_name else ""
    name = f"{prefix}_{timestamp}"
    return f"{name}.{extension}" if extension else name


def rename(file: MediaFile, new_name: str) -> MediaFile:
    return MediaFile(
        content=file.content,
        content_type=file.content_type,
        name=new_name,
        source_path=file.source_path,
    )
