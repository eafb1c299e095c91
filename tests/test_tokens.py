"""
Tests for the Markdown event stream.
"""

from mdcontext.tokens import (
    HARD_BREAK,
    RULE,
    SOFT_BREAK,
    Alignment,
    EventKind,
    LinkTarget,
    Tag,
    code,
    end,
    footnote_ref,
    start,
    text,
    tokenize,
)


def shape(events):
    """(kind, tag) pairs, for checking structure without payloads."""
    return [(e.kind, e.tag) for e in events]


def test_paragraph_with_soft_break():
    events = tokenize("one\ntwo\n")
    assert events == [
        start(Tag.PARAGRAPH),
        text("one"),
        SOFT_BREAK,
        text("two"),
        end(Tag.PARAGRAPH),
    ]


def test_heading_carries_level():
    events = tokenize("## Title\n")
    assert events == [start(Tag.HEADING, 2), text("Title"), end(Tag.HEADING)]


def test_tight_list_items_hold_inline_content_directly():
    events = tokenize("- [A](a.md)\n- [B](b.md)\n")
    assert events == [
        start(Tag.LIST),
        start(Tag.ITEM),
        start(Tag.LINK, LinkTarget("a.md", None)),
        text("A"),
        end(Tag.LINK),
        end(Tag.ITEM),
        start(Tag.ITEM),
        start(Tag.LINK, LinkTarget("b.md", None)),
        text("B"),
        end(Tag.LINK),
        end(Tag.ITEM),
        end(Tag.LIST),
    ]


def test_loose_list_items_keep_paragraphs():
    events = tokenize("- a\n\n- b\n")
    assert (EventKind.START, Tag.PARAGRAPH) in shape(events)


def test_link_title_is_kept_in_metadata():
    events = tokenize('[A](a.md "The A")\n')
    assert start(Tag.LINK, LinkTarget("a.md", "The A")) in events


def test_table_events_and_alignments():
    events = tokenize("| a | b | c |\n|:--|--:|---|\n| 1 | 2 | 3 |\n")

    assert events[0] == start(Tag.TABLE, [Alignment.LEFT, Alignment.RIGHT, Alignment.NONE])
    assert shape(events) == [
        (EventKind.START, Tag.TABLE),
        (EventKind.START, Tag.TABLE_HEAD),
        (EventKind.START, Tag.TABLE_CELL), (EventKind.TEXT, None), (EventKind.END, Tag.TABLE_CELL),
        (EventKind.START, Tag.TABLE_CELL), (EventKind.TEXT, None), (EventKind.END, Tag.TABLE_CELL),
        (EventKind.START, Tag.TABLE_CELL), (EventKind.TEXT, None), (EventKind.END, Tag.TABLE_CELL),
        (EventKind.END, Tag.TABLE_HEAD),
        (EventKind.START, Tag.TABLE_ROW),
        (EventKind.START, Tag.TABLE_CELL), (EventKind.TEXT, None), (EventKind.END, Tag.TABLE_CELL),
        (EventKind.START, Tag.TABLE_CELL), (EventKind.TEXT, None), (EventKind.END, Tag.TABLE_CELL),
        (EventKind.START, Tag.TABLE_CELL), (EventKind.TEXT, None), (EventKind.END, Tag.TABLE_CELL),
        (EventKind.END, Tag.TABLE_ROW),
        (EventKind.END, Tag.TABLE),
    ]


def test_centered_column():
    events = tokenize("| a |\n|:-:|\n| 1 |\n")
    assert events[0] == start(Tag.TABLE, [Alignment.CENTER])


def test_fenced_code_block():
    events = tokenize("```python\nx = {1}\n```\n")
    assert events == [
        start(Tag.CODE_BLOCK, "python"),
        text("x = {1}\n"),
        end(Tag.CODE_BLOCK),
    ]


def test_indented_code_block_has_no_info():
    events = tokenize("    x = 1\n")
    assert events == [start(Tag.CODE_BLOCK), text("x = 1\n"), end(Tag.CODE_BLOCK)]


def test_inline_code_and_strikethrough():
    events = tokenize("`a{b}` ~~gone~~\n")
    assert code("a{b}") in events
    assert (EventKind.START, Tag.STRIKETHROUGH) in shape(events)
    assert text("gone") in events


def test_emphasis_and_strong():
    events = tokenize("*it* **bold**\n")
    kinds = shape(events)
    assert (EventKind.START, Tag.EMPHASIS) in kinds
    assert (EventKind.START, Tag.STRONG) in kinds


def test_image_alt_text_is_nested():
    events = tokenize("![A picture](pic.png)\n")
    assert events == [
        start(Tag.PARAGRAPH),
        start(Tag.IMAGE, LinkTarget("pic.png", None)),
        text("A picture"),
        end(Tag.IMAGE),
        end(Tag.PARAGRAPH),
    ]


def test_destinations_are_not_percent_encoded():
    events = tokenize("[Café](café.md) ![Bild](bilder/straße.png)\n")
    assert start(Tag.LINK, LinkTarget("café.md", None)) in events
    assert start(Tag.IMAGE, LinkTarget("bilder/straße.png", None)) in events


def test_rule_hard_break_and_html():
    events = tokenize("a  \nb\n\n***\n\n<div>x</div>\n")
    assert HARD_BREAK in events
    assert RULE in events
    assert any(e.kind is EventKind.HTML and "<div>" in e.value for e in events)


def test_footnotes():
    events = tokenize("Text[^n].\n\n[^n]: The note.\n")
    assert footnote_ref("n") in events
    assert start(Tag.FOOTNOTE_DEFINITION, "n") in events
    assert text("The note.") in events


def test_footnote_names_take_the_prefix():
    events = tokenize("x[^1]\n\n[^1]: n\n", note_prefix="a-md:")
    assert footnote_ref("a-md:1") in events
    assert start(Tag.FOOTNOTE_DEFINITION, "a-md:1") in events
    assert text("n") in events


def test_footnotes_can_be_disabled():
    events = tokenize("Text[^n].\n", footnotes=False)
    assert all(e.kind is not EventKind.FOOTNOTE_REF for e in events)


def test_events_are_well_nested():
    source = "# T\n\n> - a *b*\n>   - c\n\n| x |\n|---|\n| `y` |\n"
    open_tags = []
    for event in tokenize(source):
        if event.kind is EventKind.START:
            open_tags.append(event.tag)
        elif event.kind is EventKind.END:
            assert open_tags.pop() is event.tag
    assert open_tags == []
