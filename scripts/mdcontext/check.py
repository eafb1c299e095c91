"""
Book checker.

Loads SUMMARY.md and every document it lists with strict checks, and
reports problems per file without writing any output:

    error    the build would fail (bad manifest, missing file, broken
             nesting, unrenderable element)
    warning  the build succeeds but the result is probably not what was
             meant (ragged tables, Markdown files the manifest never lists)

Invoked from the CLI as `check`.
"""

import os
import re

from mdcontext.builder import build_fragment, read_source
from mdcontext.errors import BookError
from mdcontext.navigation import extract_navigation
from mdcontext.render import render_fragment
from mdcontext.tokens import tokenize
from mdcontext.validate import checked_events, table_width_problems


# ── Severity display ───────────────────────────────────────────────────

SEVERITY_COLOR = {
    "error":   "\033[31m✗\033[0m",
    "warning": "\033[33m!\033[0m",
}

SEVERITY_PLAIN = {
    "error":   "[ERROR]",
    "warning": "[WARN]",
}


def natural_sort_key(s):
    """Sort strings with embedded numbers naturally (2.md before 10.md)."""
    return [
        int(text) if text.isdigit() else text.lower()
        for text in re.split(r"(\d+)", s)
    ]


# ── Checker class ──────────────────────────────────────────────────────


class BookChecker:
    """
    Book checker.

    Usage:
        checker = BookChecker(book_dir, config, color=True)
        success = checker.run()
    """

    def __init__(self, book_dir, config, verbose=False, color=True):
        self.book_dir = book_dir
        self.config = config
        self.verbose = verbose
        self.symbols = SEVERITY_COLOR if color else SEVERITY_PLAIN
        self.total_counts = {"error": 0, "warning": 0}
        self.files_checked = 0
        self.files_with_issues = 0

    def run(self):
        """Check the manifest and every listed file. Returns True if no errors found."""
        tree, findings = self._check_manifest()
        self._report(self.config.summary, findings)

        if tree is not None:
            listed = set()
            for entry in tree.walk():
                if not entry.path:
                    continue
                path = os.path.normpath(os.path.join(self.book_dir, entry.path))
                if path in listed:
                    self._report(entry.path, [("warning", "listed more than once")])
                    continue
                listed.add(path)
                self._report(entry.path, self._check_document(path))

            self._report_unlisted(listed)

        self._summary()
        return self.total_counts["error"] == 0

    def _check_manifest(self):
        self.files_checked += 1
        try:
            fragment = self._load(self.config.summary_path)
            return extract_navigation(fragment), []
        except BookError as e:
            return None, [("error", _describe(e))]

    def _check_document(self, path):
        """Scan a single file. Returns a list of (severity, message)."""
        self.files_checked += 1
        if not os.path.exists(path):
            return [("error", "file does not exist")]

        try:
            fragment = self._load(path)
            render_fragment(fragment)
        except BookError as e:
            return [("error", _describe(e))]

        return [("warning", problem) for problem in table_width_problems(fragment)]

    def _load(self, path):
        events = tokenize(read_source(path), footnotes=self.config.footnotes)
        return build_fragment(checked_events(events))

    def _report_unlisted(self, listed):
        """Warn about Markdown files in the book the manifest never mentions."""
        summary = os.path.normpath(self.config.summary_path)
        for root, dirs, files in os.walk(self.book_dir):
            dirs.sort(key=natural_sort_key)
            for fname in sorted(files, key=natural_sort_key):
                if not fname.endswith(".md"):
                    continue
                path = os.path.normpath(os.path.join(root, fname))
                if path == summary or path in listed:
                    continue
                rel_path = os.path.relpath(path, self.book_dir)
                self._report(rel_path, [("warning", "not listed in the summary")])

    def _report(self, rel_path, findings):
        for severity, _ in findings:
            self.total_counts[severity] += 1

        if findings:
            self.files_with_issues += 1
            print(f"  {rel_path}")
            for severity, message in findings:
                print(f"  {self.symbols[severity]} {message}")
            print()
        elif self.verbose:
            print(f"  {rel_path}: clean")

    def _summary(self):
        """Print the summary line."""
        total = sum(self.total_counts.values())

        print(f"{'─' * 50}")

        if total == 0:
            print(f"  No issues found across {self.files_checked} files.")
            return

        parts = []
        if self.total_counts["error"]:
            parts.append(f"{self.total_counts['error']} errors")
        if self.total_counts["warning"]:
            parts.append(f"{self.total_counts['warning']} warnings")

        print(f"  {', '.join(parts)} in {self.files_with_issues} files ({self.files_checked} checked)")


def _describe(error):
    """Error text without the path, which the report already shows."""
    message = error.message
    if error.construct is not None:
        message = f"{message}: {error.construct!r}"
    return f"{error.kind.value} error: {message}"
