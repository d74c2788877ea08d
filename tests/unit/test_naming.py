from unittest.mock import patch

from mediaflowz.upload.models import MediaFile
from mediaflowz.upload.naming import generate_file_name, note_prefix, rename, to_kebab_case


class TestToKebabCase:
    def test_spaces(self) -> None:
        assert to_kebab_case("My Blog Post") == "my-blog-post"

    def test_camel_case(self) -> None:
        assert to_kebab_case("weeklyReview") == "weekly-review"

    def test_ampersand(self) -> None:
        assert to_kebab_case("Tom & Jerry") == "tom-and-jerry"

    def test_strips_punctuation(self) -> None:
        assert to_kebab_case("Hello, World!") == "hello-world"


class TestNotePrefix:
    def test_uses_note_title(self) -> None:
        assert note_prefix("Blog/2024/My First Post.md") == "my-first-post"

    def test_windows_separators(self) -> None:
        assert note_prefix("Blog\\Trip Notes.md") == "trip-notes"

    def test_frontmatter_wins(self) -> None:
        assert note_prefix("Blog/Post.md", {"img-prefix": "custom"}) == "custom"

    def test_empty_frontmatter_value_is_ignored(self) -> None:
        assert note_prefix("Blog/Post.md", {"img-prefix": ""}) == "post"


class TestGenerateFileName:
    def test_keeps_extension(self) -> None:
        assert generate_file_name("photo.png", "my-note", 1700000000000) == (
            "my-note_1700000000000.png"
        )

    def test_without_extension(self) -> None:
        assert generate_file_name("blob", "my-note", 5) == "my-note_5"

    def test_defaults_to_current_time(self) -> None:
        with patch("mediaflowz.upload.naming.time.time", return_value=1.5):
            assert generate_file_name("a.gif", "p") == "p_1500.gif"


class TestRename:
    def test_keeps_content_and_source(self) -> None:
        file = MediaFile(content=b"x", content_type="image/png", name="a.png",
                         source_path="Blog/Post.md")

        renamed = rename(file, "post_1.png")

        assert renamed.name == "post_1.png"
        assert renamed.content == b"x"
        assert renamed.content_type == "image/png"
        assert renamed.source_path == "Blog/Post.md"
