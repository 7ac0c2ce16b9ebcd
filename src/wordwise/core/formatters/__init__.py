# src/wordwise/core/formatters/__init__.py
"""
Gloss formatters.

A formatter renders one matched term:
  - takes the definition record and the surface text that matched
  - picks the short or long gloss (plus pronunciation if asked)
  - wraps the surface core, leaving its decoration outside the wrapper

Any object with a `name` and a `format` method is a formatter; the matcher
never cares which one it gets.
"""

from enum import IntEnum
from typing import Protocol

from wordwise.core.lexicon import DefinitionRecord


class DetailLevel(IntEnum):
    SHORT = 1
    LONG = 2


def check_detail(value: int) -> DetailLevel:
    """Validate a requested detail tier. Only short (1) and long (2) exist."""
    try:
        return DetailLevel(value)
    except ValueError:
        allowed = ", ".join(str(int(d)) for d in DetailLevel)
        raise ValueError(f"Unknown definition detail {value!r}. Allowed: {allowed}")


def gloss_text(record: DefinitionRecord, max_definition_detail: int, include_pronunciation: bool) -> str:
    """
    The definition shown for a record.

    Falls back to the other gloss when the chosen one is empty.
    """
    if max_definition_detail <= DetailLevel.SHORT:
        text = record.short_gloss or record.long_gloss
    else:
        text = record.long_gloss or record.short_gloss

    if include_pronunciation and record.pronunciation:
        return f"{record.pronunciation} {text}"
    return text


class GlossFormatter(Protocol):
    name: str

    def format(
        self,
        record: DefinitionRecord,
        surface: str,
        max_definition_detail: int,
        include_pronunciation: bool,
    ) -> str:
        ...


# Formatter registry
FORMATTERS: dict[str, GlossFormatter] = {}


def register_formatter(formatter: GlossFormatter) -> GlossFormatter:
    """Register a formatter instance."""
    FORMATTERS[formatter.name] = formatter
    return formatter


def get_formatter(name: str) -> GlossFormatter:
    if name not in FORMATTERS:
        available = ", ".join(FORMATTERS.keys())
        raise ValueError(f"Unknown formatter: {name}. Available: {available}")
    return FORMATTERS[name]


def list_formatters() -> list[str]:
    return list(FORMATTERS.keys())


# Import built-in formatters to register them
from wordwise.core.formatters import ruby, bracket, tooltip  # noqa: E402,F401
