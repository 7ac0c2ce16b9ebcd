# src/wordwise/core/matcher.py
"""
Greedy longest-match annotation of running text.

At each token the longest phrase (up to MAX_PHRASE_TOKENS words) that is a
dictionary key wins and consumes all its tokens. Single words that are not
keys get one more chance through the lemma table.

A step only looks MAX_PHRASE_TOKENS tokens ahead, so a long text can be
scanned piece by piece: scan_tokens(..., final=False) stops before any step
whose window is not complete yet and reports how many tokens it used.
"""

from dataclasses import dataclass
from typing import Iterator

from wordwise.core.clean import clean_token
from wordwise.core.formatters import GlossFormatter
from wordwise.core.lexicon import DefinitionRecord, Lexicon


MAX_PHRASE_TOKENS = 5


@dataclass
class MatchResult:
    surface: str
    length: int  # tokens consumed
    record: DefinitionRecord | None = None

    @property
    def matched(self) -> bool:
        return self.record is not None


def _gate(record: DefinitionRecord | None, min_difficulty: int) -> DefinitionRecord | None:
    if record is not None and record.difficulty >= min_difficulty:
        return record
    return None


def resolve(surface: str, lexicon: Lexicon, min_difficulty: int, entities: bool = False) -> DefinitionRecord | None:
    """
    Find the record for a surface word or phrase, or None.

    Direct hits below the threshold are not retried through the lemma table.
    """
    core, _, _ = clean_token(surface, lowercase=True, entities=entities)

    record = lexicon.get(core)
    if record is not None:
        return _gate(record, min_difficulty)

    # lemma fallback is for single words only
    if " " not in surface:
        base = lexicon.base_form(core)
        if base is not None:
            return _gate(lexicon.get(base), min_difficulty)

    return None


def _longest_phrase(tokens: list[str], i: int, lexicon: Lexicon, entities: bool) -> int:
    """Token count of the longest dictionary phrase starting at i, or 0."""
    longest = 0
    for j in range(i + 1, min(len(tokens), i + MAX_PHRASE_TOKENS) + 1):
        phrase = " ".join(tokens[i:j])
        core, _, _ = clean_token(phrase, lowercase=True, entities=entities)
        if core in lexicon:
            longest = j - i
    return longest


def scan_tokens(
    tokens: list[str],
    lexicon: Lexicon,
    min_difficulty: int,
    final: bool = True,
    entities: bool = False,
) -> tuple[list[MatchResult], int]:
    """
    Scan steps over tokens, left to right. Returns (steps, tokens consumed).

    With final=False more tokens may follow, so scanning stops at the first
    step that cannot see a full MAX_PHRASE_TOKENS window.
    """
    results = []
    i = 0
    while i < len(tokens):
        if not final and i + MAX_PHRASE_TOKENS > len(tokens):
            break
        length = _longest_phrase(tokens, i, lexicon, entities) or 1
        surface = " ".join(tokens[i:i + length])
        results.append(MatchResult(surface, length, resolve(surface, lexicon, min_difficulty, entities)))
        i += length
    return results, i


def scan_text(text: str, lexicon: Lexicon, min_difficulty: int, entities: bool = False) -> Iterator[MatchResult]:
    """Yield one MatchResult per scan step, left to right."""
    results, _ = scan_tokens(text.split(), lexicon, min_difficulty, entities=entities)
    yield from results


def render_match(
    match: MatchResult,
    formatter: GlossFormatter,
    max_definition_detail: int,
    include_pronunciation: bool,
    entities: bool = False,
) -> str:
    """Surface text of a step, with its core wrapped if it matched."""
    if match.record is None:
        return match.surface
    core, prefix, suffix = clean_token(match.surface, lowercase=False, entities=entities)
    return prefix + formatter.format(match.record, core, max_definition_detail, include_pronunciation) + suffix


def annotate_text(
    text: str,
    lexicon: Lexicon,
    max_definition_detail: int,
    include_pronunciation: bool,
    min_difficulty: int,
    formatter: GlossFormatter,
    entities: bool = False,
) -> str:
    pieces = [
        render_match(match, formatter, max_definition_detail, include_pronunciation, entities)
        for match in scan_text(text, lexicon, min_difficulty, entities)
    ]
    return " ".join(pieces).rstrip()
