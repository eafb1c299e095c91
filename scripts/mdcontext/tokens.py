"""
Markdown token stream.

markdown-it-py produces block tokens with inline children. The tree
builder wants one flat, well-nested sequence of events instead, so this
module flattens the token list into Event objects:

    START(tag, value)   a construct opens; value carries its metadata
    END(tag)            the innermost construct closes
    TEXT, CODE, HTML, FOOTNOTE_REF    leaves carrying a string
    SOFT_BREAK, HARD_BREAK, RULE      leaves without a payload

Tokenizing enables the table and strikethrough extensions, and footnotes
unless switched off. Tight-list paragraphs (hidden tokens) are dropped, so
a tight list item holds its inline content directly.
"""

from collections import namedtuple
from dataclasses import dataclass, replace
from enum import Enum

from markdown_it import MarkdownIt
from mdit_py_plugins.footnote import footnote_plugin

from mdcontext.errors import TokenizationError


class EventKind(Enum):
    START = "start"
    END = "end"
    TEXT = "text"
    CODE = "code"
    SOFT_BREAK = "soft_break"
    HARD_BREAK = "hard_break"
    RULE = "rule"
    HTML = "html"
    FOOTNOTE_REF = "footnote_ref"


class Tag(Enum):
    PARAGRAPH = "paragraph"
    HEADING = "heading"
    LIST = "list"
    ITEM = "item"
    BLOCK_QUOTE = "block_quote"
    CODE_BLOCK = "code_block"
    EMPHASIS = "emphasis"
    STRONG = "strong"
    STRIKETHROUGH = "strikethrough"
    LINK = "link"
    IMAGE = "image"
    TABLE = "table"
    TABLE_HEAD = "table_head"
    TABLE_ROW = "table_row"
    TABLE_CELL = "table_cell"
    FOOTNOTE_DEFINITION = "footnote_definition"


class Alignment(Enum):
    NONE = "none"
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


# Metadata of LINK and IMAGE starts
LinkTarget = namedtuple("LinkTarget", ["dest", "title"])


@dataclass(frozen=True)
class Event:
    kind: EventKind
    tag: Tag = None
    value: object = None

    def __repr__(self):
        parts = [self.kind.name]
        if self.tag is not None:
            parts.append(self.tag.name)
        if self.value is not None:
            parts.append(repr(self.value))
        return f"Event({', '.join(parts)})"


# ── Event constructors ─────────────────────────────────────────────────


def start(tag, value=None):
    return Event(EventKind.START, tag, value)


def end(tag):
    return Event(EventKind.END, tag)


def text(value):
    return Event(EventKind.TEXT, value=value)


def code(value):
    return Event(EventKind.CODE, value=value)


def html(value):
    return Event(EventKind.HTML, value=value)


def footnote_ref(name):
    return Event(EventKind.FOOTNOTE_REF, value=name)


SOFT_BREAK = Event(EventKind.SOFT_BREAK)
HARD_BREAK = Event(EventKind.HARD_BREAK)
RULE = Event(EventKind.RULE)


# ── markdown-it token mapping ──────────────────────────────────────────

# "<name>_open" / "<name>_close" token pairs and the tag they map to
PAIRED_TOKENS = {
    "paragraph": Tag.PARAGRAPH,
    "heading": Tag.HEADING,
    "bullet_list": Tag.LIST,
    "ordered_list": Tag.LIST,
    "list_item": Tag.ITEM,
    "blockquote": Tag.BLOCK_QUOTE,
    "em": Tag.EMPHASIS,
    "strong": Tag.STRONG,
    "s": Tag.STRIKETHROUGH,
    "link": Tag.LINK,
    "table": Tag.TABLE,
    "thead": Tag.TABLE_HEAD,
    "tr": Tag.TABLE_ROW,
    "th": Tag.TABLE_CELL,
    "td": Tag.TABLE_CELL,
    "footnote": Tag.FOOTNOTE_DEFINITION,
}

# Wrappers with no counterpart in the event vocabulary
TRANSPARENT_PAIRS = {"tbody", "footnote_block"}

ALIGNMENT_STYLES = {
    "left": Alignment.LEFT,
    "center": Alignment.CENTER,
    "right": Alignment.RIGHT,
}


def markdown_parser(footnotes=True):
    """
    CommonMark parser with tables and strikethrough (and footnotes).

    Link and image destinations are kept as written: they name files of
    the book, so they must not be percent-encoded.
    """
    md = MarkdownIt("commonmark").enable(["table", "strikethrough"])
    md.normalizeLink = lambda url: url
    if footnotes:
        md.use(footnote_plugin)
    return md


def tokenize(source, footnotes=True, note_prefix=""):
    """
    Tokenize one Markdown document into a list of Events.

    Footnote names are local to a document; `note_prefix` is prepended to
    every one of them so that several documents can share one output file.

    Raises TokenizationError if markdown-it fails or produces a token
    type this module does not translate.
    """
    try:
        tokens = markdown_parser(footnotes).parse(source)
    except Exception as e:
        raise TokenizationError(f"failed to tokenize Markdown: {e}") from e
    events = list(_flatten(tokens))
    if note_prefix:
        events = [_qualify_note(event, note_prefix) for event in events]
    return events


def _flatten(tokens):
    in_head = False

    for index, token in enumerate(tokens):
        ttype = token.type

        if ttype == "inline":
            yield from _flatten(token.children or [])
            continue

        # Leaves
        if ttype in ("text", "text_special"):
            yield text(token.content)
        elif ttype == "code_inline":
            yield code(token.content)
        elif ttype == "softbreak":
            yield SOFT_BREAK
        elif ttype == "hardbreak":
            yield HARD_BREAK
        elif ttype == "hr":
            yield RULE
        elif ttype in ("html_block", "html_inline"):
            yield html(token.content)
        elif ttype == "footnote_ref":
            yield footnote_ref(_footnote_name(token.meta))
        elif ttype == "footnote_anchor":
            continue

        # Self-contained constructs that still open and close in the stream
        elif ttype in ("fence", "code_block"):
            yield start(Tag.CODE_BLOCK, token.info.strip() or None)
            if token.content:
                yield text(token.content)
            yield end(Tag.CODE_BLOCK)
        elif ttype == "image":
            yield start(Tag.IMAGE, LinkTarget(token.attrGet("src") or "", token.attrGet("title")))
            yield from _flatten(token.children or [])
            yield end(Tag.IMAGE)

        # Open/close pairs
        else:
            name, _, side = ttype.rpartition("_")
            if side not in ("open", "close") or (
                name not in PAIRED_TOKENS and name not in TRANSPARENT_PAIRS
            ):
                raise TokenizationError("unsupported Markdown token", construct=ttype)

            if name in TRANSPARENT_PAIRS:
                continue
            if name == "paragraph" and token.hidden:
                continue
            if name == "thead":
                in_head = side == "open"
            elif name == "tr" and in_head:
                continue

            tag = PAIRED_TOKENS[name]
            if side == "close":
                yield end(tag)
            else:
                yield start(tag, _start_value(tag, token, tokens, index))


def _start_value(tag, token, tokens, index):
    """Metadata attached to a START event."""
    if tag is Tag.HEADING:
        return int(token.tag[1:])
    if tag is Tag.LINK:
        return LinkTarget(token.attrGet("href") or "", token.attrGet("title"))
    if tag is Tag.LIST:
        return token.attrGet("start")
    if tag is Tag.TABLE:
        return _table_alignments(tokens, index)
    if tag is Tag.FOOTNOTE_DEFINITION:
        return _footnote_name(token.meta)
    return None


def _table_alignments(tokens, index):
    """Read the column alignments off the header cells following table_open."""
    alignments = []
    for token in tokens[index + 1:]:
        if token.type == "thead_close":
            break
        if token.type == "th_open":
            style = token.attrGet("style") or ""
            value = style.partition("text-align:")[2].strip()
            alignments.append(ALIGNMENT_STYLES.get(value, Alignment.NONE))
    return alignments


def _qualify_note(event, prefix):
    if event.kind is EventKind.FOOTNOTE_REF or (
        event.kind is EventKind.START and event.tag is Tag.FOOTNOTE_DEFINITION
    ):
        return replace(event, value=prefix + event.value)
    return event


def _footnote_name(meta):
    """Labelled footnotes use their label, inline ones their numeric id."""
    meta = meta or {}
    label = meta.get("label")
    if label:
        return label
    return str(meta.get("id"))
