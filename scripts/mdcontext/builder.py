"""
Tree builder: turn a flat event stream into a document fragment.

Recursive descent over one shared iterator. Every START of a nestable
construct recurses until the next END, whatever its tag: the stream is
trusted to be well nested. Only the list and table loops look at END tags,
because they must tell their own END apart from the ones of their children.
Wrap the stream in validate.checked_events() for strict checking.
"""

import os

from mdcontext import document as doc
from mdcontext.errors import BookError, BookIOError, BuildError
from mdcontext.tokens import Alignment, EventKind, Tag, tokenize
from mdcontext.validate import check_table_widths, checked_events


ALIGNMENT_CODES = {
    Alignment.NONE: doc.ALIGN_NONE,
    Alignment.LEFT: doc.ALIGN_LEFT,
    Alignment.CENTER: doc.ALIGN_CENTER,
    Alignment.RIGHT: doc.ALIGN_RIGHT,
}

FORMATS = {
    Tag.EMPHASIS: doc.Format.EMPHASIS,
    Tag.STRONG: doc.Format.STRONG,
    Tag.STRIKETHROUGH: doc.Format.STRIKETHROUGH,
}

# Constructs whose content is one fragment, wrapped by a single factory
WRAPPERS = {
    Tag.PARAGRAPH: lambda event, frag: doc.Paragraph(frag),
    Tag.BLOCK_QUOTE: lambda event, frag: doc.BlockQuote(frag),
    Tag.CODE_BLOCK: lambda event, frag: doc.CodeBlock(frag),
    Tag.HEADING: lambda event, frag: doc.Heading(event.value, frag),
    # link and image titles are dropped
    Tag.LINK: lambda event, frag: doc.Link(event.value.dest, frag),
    Tag.IMAGE: lambda event, frag: doc.Image(event.value.dest, frag),
    Tag.FOOTNOTE_DEFINITION: lambda event, frag: doc.FootnoteDefinition(event.value, frag),
}


def build_fragment(events):
    """
    Build the fragment of a whole document.

    There is no START/END pair around the document, so the recursive
    builder runs repeatedly until it returns an empty fragment.
    """
    events = iter(events)
    elements = []
    while True:
        fragment = _build_until_end(events)
        if not fragment:
            break
        elements.extend(fragment)
    return elements


def _build_until_end(events):
    elements = []
    for event in events:
        kind = event.kind

        if kind is EventKind.END:
            break
        elif kind is EventKind.TEXT:
            elements.append(doc.Text(event.value))
        elif kind is EventKind.CODE:
            elements.append(doc.Code(event.value))
        elif kind is EventKind.SOFT_BREAK:
            elements.append(doc.Text("\n"))
        elif kind is EventKind.HTML:
            elements.append(doc.HtmlFragment(event.value))
        elif kind is EventKind.FOOTNOTE_REF:
            elements.append(doc.FootnoteRef(event.value))
        elif kind is EventKind.START:
            elements.append(_build_construct(event, events))
        else:
            raise BuildError("unhandled event", construct=event)

    return elements


def _build_construct(event, events):
    tag = event.tag

    if tag in WRAPPERS:
        return WRAPPERS[tag](event, _build_until_end(events))
    if tag in FORMATS:
        return doc.Formatting(FORMATS[tag], _build_until_end(events))
    if tag is Tag.LIST:
        return doc.List(_build_list_items(events))
    if tag is Tag.TABLE:
        alignments = [ALIGNMENT_CODES[al] for al in (event.value or [])]
        return _build_table(events, alignments)

    raise BuildError("unhandled construct", construct=event)


def _build_list_items(events):
    items = []
    for event in events:
        if event.kind is EventKind.END and event.tag is Tag.LIST:
            break
        if event.kind is EventKind.START and event.tag is Tag.ITEM:
            items.append(_build_until_end(events))
        else:
            raise BuildError("unexpected event while building list items", construct=event)
    return items


def _build_table(events, alignments):
    table = doc.Table(alignments=alignments)
    for event in events:
        if event.kind is EventKind.END and event.tag is Tag.TABLE:
            break
        if event.kind is EventKind.START and event.tag is Tag.TABLE_HEAD:
            table.header_rows.append(_build_table_row(events))
        elif event.kind is EventKind.START and event.tag is Tag.TABLE_ROW:
            table.body_rows.append(_build_table_row(events))
        else:
            raise BuildError("unexpected event while building table", construct=event)
    return table


def _build_table_row(events):
    cells = []
    for event in events:
        # header rows end with the head group's END
        if event.kind is EventKind.END and event.tag in (Tag.TABLE_ROW, Tag.TABLE_HEAD):
            break
        if event.kind is EventKind.START and event.tag is Tag.TABLE_CELL:
            cells.append(_build_until_end(events))
        else:
            raise BuildError("unexpected event while building table row", construct=event)
    return cells


# ── Loading ────────────────────────────────────────────────────────────


def read_source(path):
    """Read a Markdown file as UTF-8 text. Raises BookIOError."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise BookIOError(f"failed to read Markdown file: {e}", path=os.fspath(path)) from e


def load_document(path, footnotes=True, strict=False, note_prefix=""):
    """
    Read, tokenize and build one Markdown file.

    Args:
        path:       Markdown file to load
        footnotes:  enable the footnote extension
        strict:     check event nesting and table widths (validate module)
        note_prefix: prepended to footnote names (see tokenize)

    Any BookError raised on the way is re-raised with `path` attached.
    """
    source = read_source(path)
    try:
        events = tokenize(source, footnotes=footnotes, note_prefix=note_prefix)
        if strict:
            fragment = build_fragment(checked_events(events))
            check_table_widths(fragment)
        else:
            fragment = build_fragment(events)
    except BookError as e:
        e.at(os.fspath(path))
        raise

    return fragment
