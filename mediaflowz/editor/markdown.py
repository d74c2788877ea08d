"""Markdown references for uploaded media, and how they sit on the cursor line."""

import re

from mediaflowz.errors.exceptions import EditorError

VIDEO_URL_PATTERN = re.compile(r"\.(mp4|webm|ogg)$", re.IGNORECASE)


def media_markdown(url: str, file_name: str) -> str:
    """`![name](url)` for images, an HTML video tag for video URLs."""
    if VIDEO_URL_PATTERN.search(url):
        return f'<video src="{url}" controls title="{file_name}"></video>'
    return f"![{file_name}]({url})"


def insertion_text(line: str, column: int, markdown: str) -> str:
    """Pad markdown with a space on each side that touches existing text."""
    if not 0 <= column <= len(line):
        raise EditorError(f"Cursor column {column} is outside a line of length {len(line)}")
    at_start = column == 0
    at_end = column == len(line)
    if not at_start and not at_end:
        return f" {markdown} "
    if not at_start:
        return f" {markdown}"
    if not at_end:
        return f"{markdown} "
    return markdown


def insert_into_line(line: str, column: int, markdown: str) -> tuple[str, int]:
    """New line content and the cursor column just after the inserted text."""
    text = insertion_text(line, column, markdown)
    return line[:column] + text + line[column:], column + len(text)
