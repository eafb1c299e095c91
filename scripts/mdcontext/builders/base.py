"""
Shared builder machinery.

A builder turns a book directory into one output file. TexBuilder writes
the ConTeXt source itself; later formats (PDF) run external tools on it.
"""

import os
import shutil
import subprocess
import sys
from abc import ABC, abstractmethod


class BaseBuilder(ABC):
    """
    One output format.

    Subclasses set `format_name` ("ConTeXt", "PDF") and `extension`
    (".tex", ".pdf") and implement build(), which reports its own failures
    and returns False instead of raising.
    """

    format_name = None  # Override in subclass
    extension = None    # Override in subclass

    def __init__(self, config, book_dir, tex_file, verbose=False):
        self.config = config
        self.book_dir = book_dir
        self.tex_file = tex_file
        self.verbose = verbose

    # ── Output path ────────────────────────────────────────

    @property
    def output_file(self):
        """The ConTeXt source path with this format's extension."""
        return os.path.splitext(self.tex_file)[0] + self.extension

    # ── Console ────────────────────────────────────────────

    def log(self, msg):
        if self.verbose:
            print(msg)

    def header(self):
        rule = "─" * 60
        print(f"\n{rule}\n  Building {self.format_name}: {self.book_dir}\n{rule}")

    def fail(self, msg):
        """Report a failure on stderr. Returns False for `return self.fail(...)`."""
        print(f"  ✗ {msg}", file=sys.stderr)
        return False

    # ── External tools ─────────────────────────────────────

    def exec_cmd(self, cmd, label="Command", cwd=None):
        """
        Run an external tool, echoing its output only in verbose mode.

        Returns True if it exited with status 0. On failure the first lines
        of its stderr are shown.
        """
        try:
            result = subprocess.run(cmd, capture_output=not self.verbose, text=True, cwd=cwd)
        except FileNotFoundError:
            return self.fail(f"{cmd[0]} not found")

        if result.returncode == 0:
            return True

        self.fail(f"{label} failed (exit {result.returncode})")
        for line in (result.stderr or "").strip().splitlines()[:20]:
            print(f"    {line}", file=sys.stderr)
        return False

    def check_tool(self, name):
        """True if `name` is on PATH; reports it otherwise."""
        if shutil.which(name) is None:
            return self.fail(f"{name} not found on PATH")
        return True

    @abstractmethod
    def build(self):
        """Produce output_file. Returns True on success, False on failure."""
