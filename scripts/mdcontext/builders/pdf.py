"""
PDF builder.

Runs the ConTeXt engine on the .tex file TexBuilder wrote, from the
directory holding it so the engine's auxiliary files and the PDF land next
to the source. ConTeXt schedules its own extra runs for the table of
contents, so the engine is called once.
"""

import os
import re
import sys

from mdcontext.builders.base import BaseBuilder


# Lines of a ConTeXt/LuaTeX log that report an error
TEX_ERROR_RE = re.compile(r"^!|\b(?:tex|lua|mkiv lua) error\b", re.IGNORECASE)

INSTALL_HINTS = [
    "Install ConTeXt (ConTeXt standalone or TeX Live):",
    "  Ubuntu: sudo apt install context",
    "  macOS:  brew install --cask mactex",
]


class PdfBuilder(BaseBuilder):
    format_name = "PDF"
    extension = ".pdf"

    @property
    def output_dir(self):
        return os.path.dirname(os.path.abspath(self.tex_file))

    @property
    def job_name(self):
        return os.path.splitext(os.path.basename(self.tex_file))[0]

    @property
    def log_file(self):
        return os.path.join(self.output_dir, self.job_name + ".log")

    def build(self):
        self.header()
        engine = self.config.pdf["engine"]

        if not os.path.exists(self.tex_file):
            return self.fail(f"{self.tex_file} not found, build the ConTeXt source first")

        if not self.check_tool(engine):
            for hint in INSTALL_HINTS:
                print(f"  {hint}", file=sys.stderr)
            return False

        cmd = [engine, *self.config.pdf["args"], os.path.basename(self.tex_file)]
        self.log(f"  Running: {' '.join(cmd)} (in {self.output_dir})")

        if not self.exec_cmd(cmd, f"{engine} run", cwd=self.output_dir):
            self._show_log_errors()
            return False

        print(f"  ✓ {self.output_file}")
        return True

    def _show_log_errors(self):
        """Point at the engine's own diagnostics after a failed run."""
        try:
            with open(self.log_file, encoding="utf-8", errors="replace") as f:
                lines = f.read().splitlines()
        except OSError:
            return

        errors = [line for line in lines if TEX_ERROR_RE.search(line)]
        if errors:
            print(f"  From {self.log_file}:", file=sys.stderr)
            shown = errors[:10]
        else:
            print(f"  End of {self.log_file}:", file=sys.stderr)
            shown = lines[-20:]

        for line in shown:
            print(f"    {line}", file=sys.stderr)
