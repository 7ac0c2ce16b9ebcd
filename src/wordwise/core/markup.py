# src/wordwise/core/markup.py
"""
Incremental text/markup classifier for (X)HTML.

Splits a stream of string chunks into units:
  - MARKUP: tags, comments, CDATA, doctype, processing instructions,
    script/style bodies, and text inside elements that must not be glossed
  - TEXT: everything a reader sees

Only the unfinished tail of the input is buffered. Joining the text of every
unit gives back the input exactly.

A text run longer than max_text_size is cut after whitespace into several
TEXT units; every piece but the last has `continues` set, so the consumer can
carry phrase matching across the cut.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator

from wordwise.core.errors import DocumentFormatError


class UnitKind(str, Enum):
    TEXT = "text"
    MARKUP = "markup"


@dataclass(frozen=True)
class Unit:
    kind: UnitKind
    text: str
    # the next unit carries on the same text run
    continues: bool = False

    @property
    def is_text(self) -> bool:
        return self.kind is UnitKind.TEXT


RAW_TEXT_ELEMENTS = frozenset({"script", "style"})
OPAQUE_ELEMENTS = frozenset({"title", "ruby", "rt", "rp", "textarea"})

DEFAULT_MAX_TEXT_SIZE = 256 * 1024
DEFAULT_MAX_MARKUP_SIZE = 1024 * 1024

_TAG_RE = re.compile(r"""</?[A-Za-z][^\s/>]*(?:"[^"]*"|'[^']*'|[^'">])*>""")
_TAG_NAME_RE = re.compile(r"</?([A-Za-z][^\s/>]*)")
_WHITESPACE = " \t\n\r\f"

# (opening, closing) for constructs that end with a fixed delimiter
_DELIMITED = (
    ("<!--", "-->"),
    ("<![CDATA[", "]]>"),
    ("<?", "?>"),
    ("<!", ">"),
)


def split_at_whitespace(text: str) -> tuple[str, str]:
    """Cut just after the last whitespace character. Head is "" if there is none."""
    cut = max(text.rfind(c) for c in _WHITESPACE)
    if cut < 0:
        return "", text
    return text[:cut + 1], text[cut + 1:]


def _starts_markup(buf: str, i: int) -> bool:
    """Does the '<' at i open markup? Caller ensures buf[i + 1] exists."""
    c = buf[i + 1]
    if c in "!?":
        return True
    if c == "/":
        # "</" must be followed by a letter; decide once we can see it
        return i + 2 >= len(buf) or (buf[i + 2].isascii() and buf[i + 2].isalpha())
    return c.isascii() and c.isalpha()


def _markup_end(buf: str, i: int) -> int | None:
    """Index just past the markup construct starting at i, None if incomplete."""
    rest = len(buf) - i
    for opening, closing in _DELIMITED:
        if rest < len(opening) and opening.startswith(buf[i:]):
            # could still become this construct
            return None
        if buf.startswith(opening, i):
            end = buf.find(closing, i + len(opening))
            return None if end < 0 else end + len(closing)

    m = _TAG_RE.match(buf, i)
    return m.end() if m else None


class MarkupLexer:
    """Push-style lexer: feed() chunks, then close()."""

    def __init__(self, max_text_size: int = DEFAULT_MAX_TEXT_SIZE, max_markup_size: int = DEFAULT_MAX_MARKUP_SIZE):
        self.max_text_size = max_text_size
        self.max_markup_size = max_markup_size
        self._buf = ""
        self._text = ""
        self._offset = 0  # characters consumed before _buf
        self._raw_tag: str | None = None
        self._raw_end_re: re.Pattern | None = None
        self._opaque_depth = 0
        self._continuing = False

    def feed(self, chunk: str) -> Iterator[Unit]:
        self._buf += chunk
        yield from self._drain(eof=False)

    def close(self) -> Iterator[Unit]:
        yield from self._drain(eof=True)
        yield from self._flush_text()

    def _flush_text(self) -> Iterator[Unit]:
        # a continued run always gets its closing unit, even an empty one
        if self._text or self._continuing:
            kind = UnitKind.MARKUP if self._opaque_depth else UnitKind.TEXT
            yield Unit(kind, self._text)
            self._text = ""
            self._continuing = False

    def _split_long_text(self) -> Iterator[Unit]:
        if len(self._text) <= self.max_text_size:
            return
        head, self._text = split_at_whitespace(self._text)
        if not head:
            return
        if self._opaque_depth:
            yield Unit(UnitKind.MARKUP, head)
        else:
            self._continuing = True
            yield Unit(UnitKind.TEXT, head, continues=True)

    def _track(self, markup: str) -> None:
        """Update raw-text / opaque element state after a tag."""
        m = _TAG_NAME_RE.match(markup)
        if not m:
            return
        name = m.group(1).lower()
        if markup.startswith("</"):
            if name in OPAQUE_ELEMENTS and self._opaque_depth:
                self._opaque_depth -= 1
            return
        if markup.endswith("/>"):
            return
        if name in RAW_TEXT_ELEMENTS:
            self._raw_tag = name
            self._raw_end_re = re.compile(rf"</{name}[\s/>]", re.IGNORECASE)
        elif name in OPAQUE_ELEMENTS:
            self._opaque_depth += 1

    def _drain_raw(self, buf: str, pos: int, eof: bool) -> tuple[list[Unit], int, bool]:
        """Consume a script/style body. Returns (units, new pos, finished)."""
        m = self._raw_end_re.search(buf, pos)
        if m is None:
            # hold back enough to recognise a split closing tag
            cut = len(buf) if eof else max(pos, len(buf) - len(self._raw_tag) - 3)
            units = [Unit(UnitKind.MARKUP, buf[pos:cut])] if cut > pos else []
            return units, cut, eof
        units = [Unit(UnitKind.MARKUP, buf[pos:m.start()])] if m.start() > pos else []
        self._raw_tag = None
        self._raw_end_re = None
        return units, m.start(), True

    def _drain(self, eof: bool) -> Iterator[Unit]:
        buf = self._buf
        pos = 0
        while pos < len(buf):
            if self._raw_tag is not None:
                units, pos, finished = self._drain_raw(buf, pos, eof)
                yield from units
                if not finished or self._raw_tag is not None:
                    break
                continue

            lt = buf.find("<", pos)
            if lt < 0:
                self._text += buf[pos:]
                pos = len(buf)
                break

            self._text += buf[pos:lt]
            pos = lt
            if lt + 1 >= len(buf):
                if eof:
                    self._text += "<"
                    pos += 1
                break

            if not _starts_markup(buf, lt):
                self._text += "<"
                pos = lt + 1
                continue

            end = _markup_end(buf, lt)
            if end is None:
                where = self._offset + lt
                if eof:
                    raise DocumentFormatError(f"unterminated markup at character {where}")
                if len(buf) - lt > self.max_markup_size:
                    raise DocumentFormatError(
                        f"markup at character {where} exceeds {self.max_markup_size} characters"
                    )
                break

            markup = buf[lt:end]
            yield from self._flush_text()
            yield Unit(UnitKind.MARKUP, markup)
            self._track(markup)
            pos = end

        self._buf = buf[pos:]
        self._offset += pos
        yield from self._split_long_text()


def iter_units(
    chunks: Iterable[str],
    max_text_size: int = DEFAULT_MAX_TEXT_SIZE,
    max_markup_size: int = DEFAULT_MAX_MARKUP_SIZE,
) -> Iterator[Unit]:
    """Classify a chunked document into text and markup units, in order."""
    lexer = MarkupLexer(max_text_size, max_markup_size)
    for chunk in chunks:
        yield from lexer.feed(chunk)
    yield from lexer.close()
