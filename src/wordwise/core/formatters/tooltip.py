# src/wordwise/core/formatters/tooltip.py
"""
Tooltip formatter - gloss in a title attribute, shown on hover.
"""

from html import escape

from wordwise.core.clean import clean_token
from wordwise.core.formatters import gloss_text, register_formatter
from wordwise.core.lexicon import DefinitionRecord


class TooltipFormatter:
    name = "tooltip"
    css_class = "wordwise"

    def format(
        self,
        record: DefinitionRecord,
        surface: str,
        max_definition_detail: int,
        include_pronunciation: bool,
    ) -> str:
        core, prefix, suffix = clean_token(surface, lowercase=False)
        title = escape(gloss_text(record, max_definition_detail, include_pronunciation), quote=True)
        return f'{prefix}<span class="{self.css_class}" title="{title}">{core}</span>{suffix}'


register_formatter(TooltipFormatter())
