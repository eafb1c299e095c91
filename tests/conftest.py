"""
Shared fixtures: small on-disk books in temporary directories.
"""

import pytest


SAMPLE_SUMMARY = """\
# My Book

[Preface](preface.md)

- [One](one.md)
  - [One A](one-a.md)
- [Two](two.md)

[Afterword](afterword.md)
"""

SAMPLE_FILES = {
    "SUMMARY.md": SAMPLE_SUMMARY,
    "preface.md": "# Preface\n\nHello.\n",
    "one.md": "# One\n\n## Details\n\nText with `code`.\n",
    "one-a.md": "Sub.\n",
    "two.md": "# Two\n\n> Quoted.\n",
    "afterword.md": "Bye.\n",
}


@pytest.fixture
def make_book(tmp_path):
    """Return a function that writes {relative path: content} into a book dir."""
    def _make(files, name="src"):
        book_dir = tmp_path / name
        book_dir.mkdir(exist_ok=True)
        for rel_path, content in files.items():
            path = book_dir / rel_path
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return book_dir
    return _make


@pytest.fixture
def sample_book(make_book):
    """A complete book with front, body and back matter."""
    return make_book(SAMPLE_FILES)
