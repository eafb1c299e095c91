"""
mdcontext: Markdown book to ConTeXt converter.

Public API:
    from mdcontext.tokens import tokenize
    from mdcontext.builder import build_fragment, load_document
    from mdcontext.navigation import extract_navigation, load_navigation
    from mdcontext.render import render_fragment
    from mdcontext.builders import BUILDERS, DEFAULT_FORMATS
    from mdcontext.check import BookChecker
"""

__version__ = "0.3.0"
