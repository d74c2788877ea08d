from dataclasses import FrozenInstanceError
from pathlib import Path

import pytest

from mediaflowz.upload.models import MediaFile, UploadOptions, UploadResult


class TestMediaFile:
    @pytest.mark.parametrize(
        ("content_type", "is_media", "is_video"),
        [
            ("image/png", True, False),
            ("image/svg+xml", True, False),
            ("video/mp4", True, True),
            ("application/pdf", False, False),
            ("text/plain", False, False),
        ],
    )
    def test_media_kind(self, content_type: str, is_media: bool, is_video: bool) -> None:
        file = MediaFile(content=b"", content_type=content_type, name="f")
        assert file.is_media is is_media
        assert file.is_video is is_video

    def test_from_path_guesses_type(self, tmp_path: Path) -> None:
        path = tmp_path / "clip.mp4"
        path.write_bytes(b"data")

        file = MediaFile.from_path(path, source_path="Blog/a.md")

        assert file.content == b"data"
        assert file.content_type == "video/mp4"
        assert file.name == "clip.mp4"
        assert file.source_path == "Blog/a.md"

    def test_from_path_unknown_extension(self, tmp_path: Path) -> None:
        path = tmp_path / "blob.zzz"
        path.write_bytes(b"?")
        assert MediaFile.from_path(path).content_type == "application/octet-stream"

    def test_is_immutable(self, png_file: MediaFile) -> None:
        with pytest.raises(FrozenInstanceError):
            png_file.name = "other.png"  # type: ignore[misc]


class TestOptionsAndResult:
    def test_option_defaults(self) -> None:
        options = UploadOptions()
        assert options.path is None
        assert options.tags == ()
        assert options.metadata == {}

    def test_result_optional_fields(self) -> None:
        result = UploadResult(url="https://x", public_id="x")
        assert (result.width, result.height, result.format) == (None, None, None)
        assert result.metadata == {}
