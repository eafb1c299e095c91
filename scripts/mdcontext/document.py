"""
Document model: the tree built from one Markdown document.

A fragment is a plain list of elements in reading order. Elements carry
data only; the builder, renderer and navigation extractor dispatch on
their type. Every nested fragment belongs to exactly one parent.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List as ListOf, Union


class Format(Enum):
    EMPHASIS = "emphasis"
    STRONG = "strong"
    STRIKETHROUGH = "strikethrough"


# Alignment codes stored in Table.alignments
ALIGN_NONE = " "
ALIGN_LEFT = "l"
ALIGN_CENTER = "c"
ALIGN_RIGHT = "r"


@dataclass
class Text:
    text: str


@dataclass
class Heading:
    level: int
    content: Fragment = field(default_factory=list)


@dataclass
class Paragraph:
    content: Fragment = field(default_factory=list)


@dataclass
class List:
    items: ListOf[Fragment] = field(default_factory=list)


@dataclass
class Link:
    dest: str
    label: Fragment = field(default_factory=list)


@dataclass
class Image:
    dest: str
    alt: Fragment = field(default_factory=list)


@dataclass
class Code:
    text: str


@dataclass
class BlockQuote:
    content: Fragment = field(default_factory=list)


@dataclass
class CodeBlock:
    content: Fragment = field(default_factory=list)


@dataclass
class Formatting:
    kind: Format
    content: Fragment = field(default_factory=list)


@dataclass
class Table:
    """
    A table. `alignments` holds one code per column (ALIGN_*); each row is
    a list of cell fragments. Rows are not forced to len(alignments) cells.
    """
    alignments: ListOf[str] = field(default_factory=list)
    header_rows: ListOf[ListOf[Fragment]] = field(default_factory=list)
    body_rows: ListOf[ListOf[Fragment]] = field(default_factory=list)


@dataclass
class HtmlFragment:
    raw: str


@dataclass
class FootnoteRef:
    name: str


@dataclass
class FootnoteDefinition:
    name: str
    content: Fragment = field(default_factory=list)


Element = Union[
    Text, Heading, Paragraph, List, Link, Image, Code, BlockQuote, CodeBlock,
    Formatting, Table, HtmlFragment, FootnoteRef, FootnoteDefinition,
]

Fragment = ListOf[Element]
