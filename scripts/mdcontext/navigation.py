"""
Navigation tree: the book structure read from the manifest (SUMMARY.md).

Manifest layout, top-level elements only:

    # Title                  level-1 heading, the book title
    [Preface](preface.md)    paragraphs before the first list: front matter
    - [Chapter](ch1.md)      the first list: body matter
        - [Section](s1.md)   nested lists: children of the entry above
    [Notes](notes.md)        paragraphs after the first list: back matter

Anything else is an ExtractionError. No rule produces appendices; the group
exists so the writer can emit it, and it is always empty.
"""

import os
from dataclasses import dataclass, field
from functools import total_ordering
from typing import List, Optional

from mdcontext import document as doc
from mdcontext.builder import load_document
from mdcontext.errors import BookError, ExtractionError, OrphanSublistError
from mdcontext.render import render_fragment


@total_ordering
@dataclass(frozen=True, eq=False)
class Level:
    """
    Heading level of a navigation entry: part, chapter or section(depth).

    Levels compare by rank (part 0, chapter 1, section(d) 2 + d). The rank
    picks the heading command; it says nothing about entry order.
    """
    kind: str
    depth: int = 0

    @classmethod
    def part(cls):
        return cls("part")

    @classmethod
    def chapter(cls):
        return cls("chapter")

    @classmethod
    def section(cls, depth=0):
        return cls("section", depth)

    @property
    def rank(self):
        if self.kind == "part":
            return 0
        if self.kind == "chapter":
            return 1
        return 2 + self.depth

    @property
    def command(self):
        """ConTeXt sectioning command name, without the backslash."""
        if self.kind == "section":
            return "sub" * self.depth + "section"
        return self.kind

    def __eq__(self, other):
        if not isinstance(other, Level):
            return NotImplemented
        return self.rank == other.rank

    def __lt__(self, other):
        if not isinstance(other, Level):
            return NotImplemented
        return self.rank < other.rank

    def __hash__(self):
        return hash(self.rank)


@dataclass
class NavigationEntry:
    level: Level
    title: str
    path: Optional[str] = None
    children: List["NavigationEntry"] = field(default_factory=list)


@dataclass
class NavigationTree:
    title: str = ""
    front_matter: List[NavigationEntry] = field(default_factory=list)
    body_matter: List[NavigationEntry] = field(default_factory=list)
    appendices: List[NavigationEntry] = field(default_factory=list)
    back_matter: List[NavigationEntry] = field(default_factory=list)

    def groups(self):
        """(ConTeXt name, entries) for the four groups in output order."""
        return [
            ("frontmatter", self.front_matter),
            ("bodymatter", self.body_matter),
            ("appendices", self.appendices),
            ("backmatter", self.back_matter),
        ]

    def walk(self):
        """Every entry, depth first, in output order."""
        for _, entries in self.groups():
            yield from _walk_entries(entries)


def _walk_entries(entries):
    for entry in entries:
        yield entry
        yield from _walk_entries(entry.children)


# ── Extraction ─────────────────────────────────────────────────────────


def links_to_entries(elements, depth):
    """
    Convert list-item elements to entries at `depth`.

    A Link becomes an entry; a List holds the children of the entry just
    before it, converted one level deeper.
    """
    entries = []
    for element in elements:
        if isinstance(element, doc.Link):
            entries.append(NavigationEntry(
                level=Level.section(depth),
                title=render_fragment(element.label),
                path=element.dest,
            ))
        elif isinstance(element, doc.List):
            if not entries:
                raise OrphanSublistError(construct=element)
            parent = entries[-1]
            for item in element.items:
                parent.children.extend(links_to_entries(item, depth + 1))
        else:
            raise ExtractionError("unexpected navigation list item", construct=element)
    return entries


def extract_navigation(fragment):
    """Interpret a manifest fragment as a NavigationTree."""
    tree = NavigationTree()
    front_matter_done = False

    for element in fragment:
        if isinstance(element, doc.Heading):
            if element.level != 1:
                raise ExtractionError("unexpected navigation heading", construct=element)
            tree.title = render_fragment(element.content)

        elif isinstance(element, doc.Paragraph):
            for inline in element.content:
                if isinstance(inline, doc.Link):
                    entries = links_to_entries([inline], 0)
                elif isinstance(inline, doc.List):
                    entries = links_to_entries(
                        [e for item in inline.items for e in item], 0
                    )
                else:
                    raise ExtractionError("unexpected navigation paragraph item", construct=inline)

                if front_matter_done:
                    tree.back_matter.extend(entries)
                else:
                    tree.front_matter.extend(entries)

        elif isinstance(element, doc.List):
            # front matter is the paragraphs before the first list
            front_matter_done = True
            for item in element.items:
                tree.body_matter.extend(links_to_entries(item, 0))

        else:
            raise ExtractionError("unexpected navigation item", construct=element)

    return tree


def load_navigation(book_dir, summary="SUMMARY.md", footnotes=True, strict=False):
    """Load the manifest document of a book and extract its navigation tree."""
    summary_path = os.path.join(book_dir, summary)
    fragment = load_document(summary_path, footnotes=footnotes, strict=strict)
    try:
        return extract_navigation(fragment)
    except BookError as e:
        e.at(summary_path)
        raise
