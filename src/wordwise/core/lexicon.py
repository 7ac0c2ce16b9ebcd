# src/wordwise/core/lexicon.py
"""
Lexicon of glossable terms.

Maps a dictionary key ("pictorial", "in someone's pocket") to its definition
record, plus a lemma table mapping inflected single words to their base form
("riboses" → "ribose").

Loaded once per job from CSV files in the data directory:

    wordwise-dict.<language>.csv      id, word, phoneme, full_def, short_def, examples, hint_lvl
    lemmatization-<language>.csv      lemma, form
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Mapping

import pandas as pd

from wordwise.core.errors import LexiconLoadError, LoadErrorKind

logger = logging.getLogger(__name__)

DICTIONARY_FILE = "wordwise-dict.{language}.csv"
LEMMA_FILE = "lemmatization-{language}.csv"

# language identifiers become part of file names
LANGUAGE_RE = re.compile(r"^[A-Za-z0-9_-]+$")


@dataclass(frozen=True)
class DefinitionRecord:
    term: str
    pronunciation: str = ""
    long_gloss: str = ""
    short_gloss: str = ""
    usage_examples: str = ""
    difficulty: int = 0

    def to_dict(self) -> dict:
        return {
            "term": self.term,
            "pronunciation": self.pronunciation,
            "long_gloss": self.long_gloss,
            "short_gloss": self.short_gloss,
            "usage_examples": self.usage_examples,
            "difficulty": self.difficulty,
        }


class Lexicon:
    """Read-only term and lemma tables. Safe to share between readers."""

    def __init__(self, definitions: Mapping[str, DefinitionRecord], lemmas: Mapping[str, str] | None = None):
        self.definitions = MappingProxyType(dict(definitions))
        self.lemmas = MappingProxyType(dict(lemmas or {}))

    @classmethod
    def from_records(cls, records: Iterable[DefinitionRecord], lemmas: Mapping[str, str] | None = None) -> "Lexicon":
        return cls({r.term: r for r in records}, lemmas)

    def __len__(self) -> int:
        return len(self.definitions)

    def __contains__(self, term: str) -> bool:
        return term in self.definitions

    def get(self, term: str) -> DefinitionRecord | None:
        return self.definitions.get(term)

    def base_form(self, form: str) -> str | None:
        return self.lemmas.get(form)


def _read_csv(path: Path, language: str, min_columns: int) -> pd.DataFrame:
    try:
        df = pd.read_csv(path, dtype=str, keep_default_na=False, encoding="utf-8")
    except FileNotFoundError:
        raise LexiconLoadError(language, path, LoadErrorKind.NOT_FOUND)
    except OSError as e:
        raise LexiconLoadError(language, path, LoadErrorKind.NOT_FOUND, str(e))
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise LexiconLoadError(language, path, LoadErrorKind.PARSE_ERROR, str(e))

    if len(df.columns) < min_columns:
        raise LexiconLoadError(
            language, path, LoadErrorKind.PARSE_ERROR,
            f"expected at least {min_columns} columns, found {len(df.columns)}",
        )
    return df


def load_definitions(path: Path, language: str) -> dict[str, DefinitionRecord]:
    df = _read_csv(path, language, min_columns=7)

    definitions = {}
    for row_num, row in enumerate(df.iloc[:, 1:7].itertuples(index=False, name=None), start=2):
        term, phoneme, full_def, short_def, examples, hint_lvl = row
        try:
            difficulty = int(hint_lvl)
        except ValueError:
            raise LexiconLoadError(
                language, path, LoadErrorKind.PARSE_ERROR,
                f"line {row_num}: hint level {hint_lvl!r} is not an integer",
            )
        definitions[term] = DefinitionRecord(
            term=term,
            pronunciation=phoneme,
            long_gloss=full_def,
            short_gloss=short_def,
            usage_examples=examples,
            difficulty=difficulty,
        )
    return definitions


def load_lemmas(path: Path, language: str) -> dict[str, str]:
    df = _read_csv(path, language, min_columns=2)
    return {form: lemma for lemma, form in df.iloc[:, 0:2].itertuples(index=False, name=None)}


def load_lexicon(language: str, data_dir: Path | str) -> Lexicon:
    """
    Load the dictionary and lemma table for a language.

    A missing dictionary is fatal. A missing lemma table only disables the
    lemma fallback, since not every language ships one.
    """
    data_dir = Path(data_dir)
    if not LANGUAGE_RE.fullmatch(language):
        raise LexiconLoadError(language, data_dir, LoadErrorKind.NOT_FOUND, "invalid language identifier")

    definitions = load_definitions(data_dir / DICTIONARY_FILE.format(language=language), language)

    lemma_path = data_dir / LEMMA_FILE.format(language=language)
    if lemma_path.exists():
        lemmas = load_lemmas(lemma_path, language)
    else:
        logger.warning("No lemma table for %r at %s, lemma fallback disabled", language, lemma_path)
        lemmas = {}

    logger.info("Loaded %r lexicon: %d terms, %d lemmas", language, len(definitions), len(lemmas))
    return Lexicon(definitions, lemmas)
