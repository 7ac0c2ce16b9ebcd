# src/wordwise/core/formatters/bracket.py
"""
Bracket formatter - plain text, no markup.

    versatile.  →  versatile (able to do different things).
"""

from wordwise.core.clean import clean_token
from wordwise.core.formatters import gloss_text, register_formatter
from wordwise.core.lexicon import DefinitionRecord


class BracketFormatter:
    name = "bracket"

    def format(
        self,
        record: DefinitionRecord,
        surface: str,
        max_definition_detail: int,
        include_pronunciation: bool,
    ) -> str:
        core, prefix, suffix = clean_token(surface, lowercase=False)
        gloss = gloss_text(record, max_definition_detail, include_pronunciation)
        return f"{prefix}{core} ({gloss}){suffix}"


register_formatter(BracketFormatter())
