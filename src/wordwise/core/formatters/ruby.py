# src/wordwise/core/formatters/ruby.py
"""
Ruby formatter - interlinear gloss above the word.

    pictorials.  →  <ruby>pictorials<rt>relating to a drawing</rt></ruby>.
"""

from html import escape

from wordwise.core.clean import clean_token
from wordwise.core.formatters import gloss_text, register_formatter
from wordwise.core.lexicon import DefinitionRecord


class RubyFormatter:
    name = "ruby"

    def format(
        self,
        record: DefinitionRecord,
        surface: str,
        max_definition_detail: int,
        include_pronunciation: bool,
    ) -> str:
        core, prefix, suffix = clean_token(surface, lowercase=False)
        gloss = escape(gloss_text(record, max_definition_detail, include_pronunciation), quote=False)
        return f"{prefix}<ruby>{core}<rt>{gloss}</rt></ruby>{suffix}"


register_formatter(RubyFormatter())
