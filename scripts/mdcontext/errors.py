"""
Error taxonomy for the whole pipeline.

Every failure raised by mdcontext is a BookError carrying one ErrorKind,
so callers (and tests) can branch on the kind instead of parsing messages.
Errors are never recovered where they are raised; they travel up to the
builder/CLI layer, picking up the path of the file being processed.
"""

from enum import Enum


class ErrorKind(Enum):
    TOKENIZATION = "tokenization"
    BUILD = "build"
    EXTRACTION = "extraction"
    RENDER = "render"
    IO = "io"
    CONFIG = "config"


class BookError(Exception):
    """
    Base error.

    Attributes:
        message:    human-readable description
        construct:  the offending event or element, when known
        path:       the file being processed, when known
    """

    kind = None  # Override in subclass

    def __init__(self, message, construct=None, path=None):
        super().__init__(message)
        self.message = message
        self.construct = construct
        self.path = path

    def at(self, path):
        """Attach the path of the file being processed, keeping an existing one."""
        if self.path is None:
            self.path = path
        return self

    def __str__(self):
        text = self.message
        if self.construct is not None:
            text = f"{text}: {self.construct!r}"
        if self.path is not None:
            text = f"{self.path}: {text}"
        return text


class TokenizationError(BookError):
    """The Markdown tokenizer rejected a document."""
    kind = ErrorKind.TOKENIZATION


class BuildError(BookError):
    """The event stream holds a construct the tree builder does not handle."""
    kind = ErrorKind.BUILD


class ExtractionError(BookError):
    """The manifest document does not have the expected shape."""
    kind = ErrorKind.EXTRACTION


class OrphanSublistError(ExtractionError):
    """A nested list in the manifest has no entry before it to attach to."""

    def __init__(self, construct=None, path=None):
        super().__init__("sublist without an entry", construct, path)


class RenderError(BookError):
    """A document element cannot be rendered as ConTeXt."""
    kind = ErrorKind.RENDER


class BookIOError(BookError):
    """Reading a source document or writing the output failed."""
    kind = ErrorKind.IO


class ConfigError(BookError):
    """Raised when book.yaml is invalid."""
    kind = ErrorKind.CONFIG
