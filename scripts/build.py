#!/usr/bin/env python3
"""
Build script for mdcontext, usable without installing the package.

Usage:
    python scripts/build.py                      Build src/ into book.tex
    python scripts/build.py src book.tex --pdf   Build book.tex, then book.pdf
    python scripts/build.py check src            Check the book for problems

Requires: markdown-it-py, mdit-py-plugins, PyYAML
Optional: ConTeXt (PDF)
"""

import os
import sys

# Ensure mdcontext is importable from the scripts/ directory
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from mdcontext.cli import run


if __name__ == "__main__":
    run()
