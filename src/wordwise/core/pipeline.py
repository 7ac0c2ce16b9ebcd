# src/wordwise/core/pipeline.py
"""
Pipeline for annotating a text or a whole document with a lexicon.
"""

import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Callable

from wordwise.core.documents import TEXT_SUFFIXES, rewrite_document
from wordwise.core.formatters import DetailLevel, check_detail, get_formatter
from wordwise.core.lexicon import Lexicon
from wordwise.core.matcher import MatchResult, render_match, scan_tokens
from wordwise.core.rewriter import ProgressSink, RewriteStats

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnnotationOptions:
    language: str = "en"
    max_definition_detail: int = DetailLevel.SHORT
    include_pronunciation: bool = False
    min_difficulty: int = 1
    formatter: str = "ruby"

    def __post_init__(self):
        check_detail(self.max_definition_detail)
        get_formatter(self.formatter)

    def to_dict(self) -> dict:
        return {**asdict(self), "max_definition_detail": int(self.max_definition_detail)}

    @classmethod
    def from_dict(cls, data: dict) -> "AnnotationOptions":
        return cls(**data)


class TextAnnotator:
    """
    Text transform for the rewriter.

    Whitespace at either end of a text run is kept, so the spacing between
    the run and its neighbouring markup survives annotation.

    A run cut into pieces is fed through partial() and closed by a normal
    call. Tokens whose match window reaches past the end of a piece are held
    back and scanned with the next one, so the result is the same as for the
    uncut run.
    """

    def __init__(self, lexicon: Lexicon, options: AnnotationOptions, entities: bool = False):
        self.lexicon = lexicon
        self.options = options
        self.entities = entities
        self.formatter = get_formatter(options.formatter)
        self._in_run = False
        self._emitted = False
        self._carry = ""

    def _render(self, matches: list[MatchResult]) -> str:
        out = []
        for match in matches:
            if self._emitted:
                out.append(" ")
            out.append(render_match(
                match,
                self.formatter,
                self.options.max_definition_detail,
                self.options.include_pronunciation,
                self.entities,
            ))
            self._emitted = True
        return "".join(out)

    def _scan(self, tokens: list[str], final: bool) -> tuple[list[MatchResult], int]:
        return scan_tokens(tokens, self.lexicon, self.options.min_difficulty, final=final, entities=self.entities)

    def partial(self, text: str) -> str:
        buf = self._carry + text
        lead = ""
        if not self._in_run:
            lead = buf[:len(buf) - len(buf.lstrip())]
            buf = buf[len(lead):]
            self._in_run = True

        tokens = buf.split()
        ends_clean = buf[-1:].isspace()
        # an unfinished last token waits for the rest of it
        complete = tokens if ends_clean else tokens[:-1]
        matches, used = self._scan(complete, final=False)
        rest = tokens[used:]
        self._carry = " ".join(rest) + buf[len(buf.rstrip()):]
        return lead + self._render(matches)

    def __call__(self, text: str) -> str:
        if not self._in_run:
            body = text.strip()
            if not body:
                return text
            lead = text[:len(text) - len(text.lstrip())]
            trail = text[len(text.rstrip()):]
            matches, _ = self._scan(body.split(), final=True)
            self._emitted = False
            annotated = self._render(matches)
            self._emitted = False
            return f"{lead}{annotated}{trail}"

        buf = self._carry + text
        trail = buf[len(buf.rstrip()):]
        matches, _ = self._scan(buf.split(), final=True)
        annotated = self._render(matches)
        self._in_run = False
        self._emitted = False
        self._carry = ""
        return f"{annotated}{trail}"


def make_text_transform(lexicon: Lexicon, options: AnnotationOptions, entities: bool = False) -> TextAnnotator:
    """
    Text transform for the rewriter.

    With entities=True character references at token edges count as
    decoration, for text taken straight from (X)HTML source.
    """
    return TextAnnotator(lexicon, options, entities)


def annotate_document(
    input_path: Path | str,
    output_path: Path | str,
    lexicon: Lexicon,
    options: AnnotationOptions,
    progress: ProgressSink | None = None,
    should_cancel: Callable[[], bool] | None = None,
    **stream_options,
) -> RewriteStats:
    logger.info(
        "Annotating %s → %s (language=%s, hint_level=%d, detail=%d, phoneme=%s, formatter=%s)",
        input_path, output_path, options.language, options.min_difficulty,
        options.max_definition_detail, options.include_pronunciation, options.formatter,
    )
    # text from markup is still escaped source
    entities = Path(input_path).suffix.lower() not in TEXT_SUFFIXES
    return rewrite_document(
        input_path,
        output_path,
        make_text_transform(lexicon, options, entities),
        progress=progress,
        should_cancel=should_cancel,
        **stream_options,
    )
