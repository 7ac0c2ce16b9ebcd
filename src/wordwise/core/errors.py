# src/wordwise/core/errors.py
"""
Error types raised by the annotation pipeline.

Matching never fails; only loading a lexicon and reading/writing documents do.
"""

from enum import Enum
from pathlib import Path


class WordwiseError(Exception):
    """Base class for all wordwise failures."""


class LoadErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    PARSE_ERROR = "parse_error"


class LexiconLoadError(WordwiseError):
    def __init__(self, language: str, path: Path | str, kind: LoadErrorKind, detail: str = ""):
        self.language = language
        self.path = Path(path)
        self.kind = kind
        self.detail = detail
        message = f"cannot load {language!r} lexicon from {self.path}: {kind.value}"
        if detail:
            message += f" ({detail})"
        super().__init__(message)


class DocumentError(WordwiseError):
    """Anything that went wrong while rewriting a document."""

    partial_path: Path | None = None


class DocumentIOError(DocumentError):
    def __init__(self, path: Path | str, side: str, detail: str = ""):
        if side not in ("source", "sink"):
            raise ValueError(f"side must be 'source' or 'sink', got {side!r}")
        self.path = Path(path)
        self.side = side
        self.detail = detail
        verb = "read" if side == "source" else "write"
        message = f"cannot {verb} {self.path}"
        if detail:
            message += f": {detail}"
        super().__init__(message)


class DocumentFormatError(DocumentError):
    def __init__(self, message: str, path: Path | str | None = None):
        self.path = Path(path) if path is not None else None
        if self.path is not None:
            message = f"{self.path}: {message}"
        super().__init__(message)


class RewriteCancelled(DocumentError):
    def __init__(self, message: str = "rewrite cancelled"):
        super().__init__(message)
