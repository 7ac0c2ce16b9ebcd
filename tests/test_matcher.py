# tests/test_matcher.py
"""Tests for term resolution and longest-match annotation."""

import re

import pytest

from wordwise.core.lexicon import DefinitionRecord, Lexicon
from wordwise.core.matcher import MAX_PHRASE_TOKENS, annotate_text, resolve, scan_text


def annotate(text, lexicon, ruby, level=1, detail=1, phoneme=False):
    return annotate_text(text, lexicon, detail, phoneme, level, ruby)


def annotated_terms(html: str) -> set[str]:
    return set(re.findall(r"<ruby>(.*?)<rt>", html))


# === resolve ===

def test_resolve_direct(lexicon):
    assert resolve("pictorial", lexicon, 1).term == "pictorial"


def test_resolve_case_and_decoration(lexicon):
    assert resolve("(Pictorial),", lexicon, 1).term == "pictorial"


def test_resolve_lemma_fallback(lexicon):
    record = resolve("riboses", lexicon, 1)

    assert record is not None
    assert record.term == "ribose"


def test_resolve_below_threshold(lexicon):
    assert resolve("pictorial", lexicon, 2) is None
    assert resolve("riboses", lexicon, 3) is None


def test_resolve_lemma_to_missing_base(lexicon):
    # "ascertains" → "ascertain", which is not itself a headword
    assert resolve("ascertains", lexicon, 1) is None


def test_resolve_phrase_never_uses_lemmas(lexicon):
    assert resolve("kicked the bucket", lexicon, 1) is None
    assert resolve("kick the bucket", lexicon, 1).term == "kick the bucket"


def test_resolve_unknown(lexicon):
    assert resolve("the", lexicon, 0) is None


# === annotate_text ===

@pytest.mark.parametrize("text, expected, level", [
    (
        "I think this is in someone's pocket, but I'm not ascertained.",
        "I think this is <ruby>in someone's pocket<rt>under someone's control</rt></ruby>, "
        "but I'm not <ruby>ascertained<rt>discovered by a method</rt></ruby>.",
        1,
    ),
    (
        "I think this is in someone's pocket but I'm not ascertained",
        "I think this is <ruby>in someone's pocket<rt>under someone's control</rt></ruby> "
        "but I'm not <ruby>ascertained<rt>discovered by a method</rt></ruby>",
        1,
    ),
    (
        "I think this is in someone's pocket but I'm not ascertained.",
        "I think this is in someone's pocket but I'm not ascertained.",
        2,
    ),
    (
        "The business of eating being concluded, and no one uttering a word of sociable "
        "conversation, I approached a window to examine the weather.",
        "The business of eating being concluded, and no one <ruby>uttering<rt>complete and total</rt></ruby> "
        "a word of <ruby>sociable<rt>involving friendly relations</rt></ruby> conversation, "
        "I approached a window to examine the weather.",
        1,
    ),
    (
        "unreasonable versatile.",
        "<ruby>unreasonable<rt>not fair or appropriate</rt></ruby> "
        "<ruby>versatile<rt>able to do different things</rt></ruby>.",
        3,
    ),
    (
        "unreasonable versatile.",
        "unreasonable <ruby>versatile<rt>able to do different things</rt></ruby>.",
        4,
    ),
    (
        "two <span>unreasonable</span> versatile one.",
        "two <span>unreasonable</span> <ruby>versatile<rt>able to do different things</rt></ruby> one.",
        4,
    ),
])
def test_annotate_phrase(lexicon, ruby, text, expected, level):
    assert annotate(text, lexicon, ruby, level=level) == expected


def test_pictorials_long_with_pronunciation(lexicon, ruby):
    result = annotate("pictorials.", lexicon, ruby, level=1, detail=2, phoneme=True)

    assert result == "<ruby>pictorials<rt>/pɪkˈtɔriəl/ of or relating to painting or drawing</rt></ruby>."


def test_pictorials_above_threshold_unchanged(lexicon, ruby):
    assert annotate("pictorials.", lexicon, ruby, level=2, detail=2, phoneme=True) == "pictorials."


def test_unmatched_text_only_normalizes_whitespace(lexicon, ruby):
    text = "  The   cat\tsat\n on the  mat.  "
    assert annotate(text, lexicon, ruby) == "The cat sat on the mat."


def test_empty_text(lexicon, ruby):
    assert annotate("", lexicon, ruby) == ""
    assert annotate("   ", lexicon, ruby) == ""


def test_longest_match_beats_single_word(lexicon, ruby):
    result = annotate("in someone's pocket", lexicon, ruby)

    assert annotated_terms(result) == {"in someone's pocket"}
    assert result.count("<ruby>") == 1


def test_phrase_below_threshold_still_consumes_tokens(lexicon, ruby):
    # "at loggerheads" (2) wins the match, so "loggerheads" alone is never tried
    assert annotate("at loggerheads", lexicon, ruby, level=3) == "at loggerheads"
    steps = list(scan_text("at loggerheads", lexicon, 3))
    assert len(steps) == 1
    assert steps[0].length == 2
    assert not steps[0].matched


def test_single_token_lemma(lexicon, ruby):
    assert annotate("Pockets", lexicon, ruby) == "<ruby>Pockets<rt>small bag in clothing</rt></ruby>"


def test_surface_case_is_kept(lexicon, ruby):
    assert annotate("VERSATILE!", lexicon, ruby, level=1).startswith("<ruby>VERSATILE<rt>")


@pytest.mark.parametrize("text", [
    "I think this is in someone's pocket, but I'm not ascertained.",
    "unreasonable versatile cacophony, utter pictorials and riboses",
    "at loggerheads over amperage in someone's pockets",
])
def test_difficulty_gating_monotonic(lexicon, ruby, text):
    previous = None
    for level in range(0, 7):
        terms = annotated_terms(annotate(text, lexicon, ruby, level=level))
        if previous is not None:
            assert terms <= previous
        previous = terms
    assert previous == set()


def test_phrase_window_is_capped():
    six = "one two three four five six"
    lex = Lexicon.from_records([
        DefinitionRecord(six, short_gloss="too long", difficulty=1),
        DefinitionRecord("one two three four five", short_gloss="five words", difficulty=1),
    ])
    steps = list(scan_text(six, lex, 1))

    assert MAX_PHRASE_TOKENS == 5
    assert steps[0].length == 5
    assert steps[0].record.short_gloss == "five words"
    assert steps[1].surface == "six"


def test_scan_text_reports_every_step(lexicon):
    steps = list(scan_text("a versatile man", lexicon, 1))

    assert [s.surface for s in steps] == ["a", "versatile", "man"]
    assert [s.matched for s in steps] == [False, True, False]
