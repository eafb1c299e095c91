"""
ConTeXt builder.

Pipeline:
    1. Load SUMMARY.md and extract the navigation tree
    2. Write the preamble (title, \\starttext, TOC placeholder)
    3. For each group, write every entry's heading and rendered document
    4. Write \\stoptext

The output file is written as it goes. If a document fails to load or
render, the build stops and what was written so far stays on disk; the
failure message says the file is incomplete.
"""

import os
import re

from mdcontext import document as doc
from mdcontext.builder import load_document
from mdcontext.builders.base import BaseBuilder
from mdcontext.errors import BookError
from mdcontext.navigation import load_navigation
from mdcontext.render import render_fragment


# Runs of characters that cannot appear in a footnote label
NOTE_LABEL_RE = re.compile(r"[^0-9A-Za-z]+")


def note_prefix(path):
    """Footnote label prefix of one document: "ch/intro.md" gives "ch-intro-md:"."""
    return NOTE_LABEL_RE.sub("-", path).strip("-") + ":"


def write_preamble(out, title, toc_macro="mdcontextplacetoc"):
    out.write(f"\\setupinteraction[title={{{title}}}]\n\n\\starttext\n\n")
    if toc_macro:
        out.write(f"\\{toc_macro}\n\n")


def write_book(out, tree, book_dir, title=None, toc_macro="mdcontextplacetoc",
               footnotes=True, strict=False, on_entry=None):
    """
    Write a whole book to `out`.

    Args:
        out:        writable text stream
        tree:       NavigationTree of the book
        book_dir:   directory entry paths are relative to
        title:      rendered title; defaults to the tree's title
        toc_macro:  TOC placeholder macro, or "" for none
        footnotes:  enable the footnote extension when loading documents
        strict:     load documents with strict checks
        on_entry:   called with each entry before it is written
    """
    write_preamble(out, tree.title if title is None else title, toc_macro)

    for group_name, entries in tree.groups():
        if not entries:
            continue

        out.write(f"\n\\start{group_name}\n")
        for entry in entries:
            write_entry(out, entry, book_dir, footnotes, strict, on_entry)
        out.write(f"\n\\stop{group_name}\n")

    out.write("\\stoptext\n")


def write_entry(out, entry, book_dir, footnotes=True, strict=False, on_entry=None):
    """Write an entry's heading, its document if it has one, then its children."""
    if on_entry:
        on_entry(entry)

    out.write(f"\n\\{entry.level.command}{{{entry.title}}}\n")

    if entry.path:
        path = os.path.join(book_dir, entry.path)
        fragment = load_document(
            path, footnotes=footnotes, strict=strict, note_prefix=note_prefix(entry.path)
        )
        try:
            tex = render_fragment(fragment)
        except BookError as e:
            e.at(path)
            raise
        out.write(tex)

    for child in entry.children:
        write_entry(out, child, book_dir, footnotes, strict, on_entry)


class TexBuilder(BaseBuilder):
    format_name = "ConTeXt"
    extension = ".tex"

    @property
    def output_file(self):
        return self.tex_file

    def build(self):
        self.header()
        config = self.config

        # ── Step 1: navigation ────────────────────────────
        try:
            tree = load_navigation(
                self.book_dir,
                summary=config.summary,
                footnotes=config.footnotes,
                strict=config.strict,
            )
        except BookError as e:
            return self.fail(f"failed to load navigation: {e}")

        entry_count = sum(1 for _ in tree.walk())
        self.log(f"  Summary: {config.summary_path}")
        self.log(f"  Entries: {entry_count}")

        title = tree.title
        if config.title:
            title = render_fragment([doc.Text(config.title)])

        # ── Step 2: write ─────────────────────────────────
        try:
            with open(self.output_file, "w", encoding="utf-8") as out:
                write_book(
                    out,
                    tree,
                    self.book_dir,
                    title=title,
                    toc_macro=config.toc_macro,
                    footnotes=config.footnotes,
                    strict=config.strict,
                    on_entry=self._log_entry,
                )
        except OSError as e:
            return self.fail(f"failed to write {self.output_file}: {e}")
        except BookError as e:
            self.fail(f"failed to build book: {e}")
            return self.fail(f"{self.output_file} is incomplete")

        print(f"  ✓ {self.output_file}")
        return True

    def _log_entry(self, entry):
        indent = "  " * entry.level.depth
        self.log(f"    {indent}{entry.path or '(heading)'}")
