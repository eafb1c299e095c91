"""
Tests for navigation extraction from the manifest.
"""

import pytest

from mdcontext import document as doc
from mdcontext.builder import build_fragment
from mdcontext.errors import ErrorKind, ExtractionError, OrphanSublistError
from mdcontext.navigation import (
    Level,
    NavigationEntry,
    extract_navigation,
    links_to_entries,
    load_navigation,
)
from mdcontext.tokens import tokenize


def manifest(source):
    return extract_navigation(build_fragment(tokenize(source)))


def link(title, dest):
    return doc.Link(dest, [doc.Text(title)])


# =============================================================================
# Levels
# =============================================================================

def test_level_ordering():
    assert Level.part() < Level.chapter() < Level.section(0) < Level.section(1)
    assert Level.section(2) == Level.section(2)
    assert Level.section(1) != Level.section(2)
    assert sorted([Level.section(1), Level.part(), Level.section(0)]) == [
        Level.part(), Level.section(0), Level.section(1)
    ]


def test_level_commands():
    assert Level.part().command == "part"
    assert Level.chapter().command == "chapter"
    assert Level.section(0).command == "section"
    assert Level.section(2).command == "subsubsection"


# =============================================================================
# Extraction
# =============================================================================

def test_sample_manifest(sample_book):
    tree = load_navigation(sample_book)

    assert tree.title == "My Book"
    assert [e.path for e in tree.front_matter] == ["preface.md"]
    assert [e.path for e in tree.body_matter] == ["one.md", "two.md"]
    assert [e.path for e in tree.back_matter] == ["afterword.md"]
    assert tree.appendices == []

    one, two = tree.body_matter
    assert one.children == [NavigationEntry(Level.section(1), "One A", "one-a.md")]
    assert two.children == []


def test_groups_are_in_output_order(sample_book):
    tree = load_navigation(sample_book)
    assert [name for name, _ in tree.groups()] == [
        "frontmatter", "bodymatter", "appendices", "backmatter"
    ]
    assert [e.path for e in tree.walk()] == [
        "preface.md", "one.md", "one-a.md", "two.md", "afterword.md"
    ]


def test_book_structure():
    tree = extract_navigation([
        doc.Heading(1, [doc.Text("Book")]),
        doc.Paragraph([link("Intro", "intro.md")]),
        doc.List([
            [link("First", "first.md")],
            [link("Second", "second.md"), doc.List([[link("Second A", "second-a.md")]])],
        ]),
        doc.Paragraph([link("Outro", "outro.md")]),
    ])

    assert tree.title == "Book"
    assert len(tree.front_matter) == 1
    assert len(tree.body_matter) == 2
    assert len(tree.body_matter[0].children) == 0
    assert len(tree.body_matter[1].children) == 1
    assert len(tree.back_matter) == 1
    assert len(tree.appendices) == 0


def test_depths_follow_list_nesting():
    tree = manifest(
        "- [A](a.md)\n"
        "  - [B](b.md)\n"
        "    - [C](c.md)\n"
    )
    [a] = tree.body_matter
    [b] = a.children
    [c] = b.children
    assert (a.level, b.level, c.level) == (Level.section(0), Level.section(1), Level.section(2))
    assert c.path == "c.md"


def test_every_top_level_list_is_body_matter():
    tree = manifest(
        "[Front](front.md)\n"
        "\n"
        "- [A](a.md)\n"
        "\n"
        "[Middle](middle.md)\n"
        "\n"
        "1. [B](b.md)\n"
    )
    assert [e.path for e in tree.front_matter] == ["front.md"]
    assert [e.path for e in tree.body_matter] == ["a.md", "b.md"]
    assert [e.path for e in tree.back_matter] == ["middle.md"]


def test_inline_list_in_paragraph_gives_depth_zero_entries():
    tree = extract_navigation([
        doc.Paragraph([doc.List([[link("A", "a.md")], [link("B", "b.md")]])]),
    ])
    assert [(e.level, e.path) for e in tree.front_matter] == [
        (Level.section(0), "a.md"),
        (Level.section(0), "b.md"),
    ]


def test_titles_are_rendered():
    tree = manifest("# 100% {Done}\n\n- [*New* \"notes\"](new.md)\n")
    assert tree.title == "100\\char`\\% \\char`\\{Done\\char`\\}"
    assert tree.body_matter[0].title == "{\\it New} \u201cnotes\u201d"


def test_empty_manifest():
    tree = manifest("")
    assert tree.title == ""
    assert list(tree.walk()) == []


# =============================================================================
# Malformed manifests
# =============================================================================

def test_sublist_without_entry():
    with pytest.raises(OrphanSublistError) as exc:
        manifest("- - [A](a.md)\n")
    assert exc.value.kind is ErrorKind.EXTRACTION
    assert exc.value.message == "sublist without an entry"


def test_orphan_sublist_is_an_extraction_error():
    with pytest.raises(ExtractionError):
        links_to_entries([doc.List([[link("A", "a.md")]])], 0)


@pytest.mark.parametrize("source", [
    "## Chapter\n",
    "```\ncode\n```\n",
    "> [A](a.md)\n",
    "Just text.\n",
    "[A](a.md) and [B](b.md)\n",
    "[A](a.md)\n[B](b.md)\n",
    "- plain item\n",
])
def test_unexpected_manifest_content(source):
    with pytest.raises(ExtractionError):
        manifest(source)


def test_manifest_errors_carry_the_manifest_path(make_book):
    book_dir = make_book({"SUMMARY.md": "# Book\n\n## Oops\n"})
    with pytest.raises(ExtractionError) as exc:
        load_navigation(book_dir)
    assert exc.value.path == str(book_dir / "SUMMARY.md")


def test_non_ascii_file_names(make_book):
    book_dir = make_book({"SUMMARY.md": "- [Café](café.md)\n", "café.md": "Hi.\n"})
    entry = load_navigation(book_dir).body_matter[0]
    assert entry.title == "Café"
    assert entry.path == "café.md"


def test_custom_manifest_name(make_book):
    book_dir = make_book({"TOC.md": "- [A](a.md)\n"})
    tree = load_navigation(book_dir, summary="TOC.md")
    assert [e.path for e in tree.body_matter] == ["a.md"]
