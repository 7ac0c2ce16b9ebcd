"""
Annotation options shared by the local commands.
"""

from argparse import ArgumentParser, BooleanOptionalAction, Namespace
from pathlib import Path

from wordwise.config import get_settings
from wordwise.core.formatters import list_formatters
from wordwise.core.lexicon import Lexicon, load_lexicon
from wordwise.core.pipeline import AnnotationOptions


def add_annotation_options(parser: ArgumentParser):
    parser.add_argument("--language", "-l", help="Lexicon language (default from settings)")
    parser.add_argument("--hint-level", "-H", type=int, help="Only gloss terms at least this difficult")
    parser.add_argument("--detail", "-d", type=int, choices=[1, 2], help="1 = short gloss, 2 = long gloss")
    parser.add_argument("--phoneme", "-p", action=BooleanOptionalAction, default=None, help="Show pronunciation")
    parser.add_argument("--formatter", "-f", choices=list_formatters(), help="Gloss rendering")
    parser.add_argument("--data-dir", help="Directory with lexicon CSV files")


def options_from_args(args: Namespace) -> AnnotationOptions:
    settings = get_settings()
    return AnnotationOptions(
        language=args.language or settings.language,
        max_definition_detail=args.detail or settings.detail,
        include_pronunciation=args.phoneme if args.phoneme is not None else settings.show_phoneme,
        min_difficulty=args.hint_level if args.hint_level is not None else settings.hint_level,
        formatter=args.formatter or settings.formatter,
    )


def lexicon_from_args(args: Namespace, language: str) -> Lexicon:
    data_dir = Path(args.data_dir) if args.data_dir else get_settings().data_dir
    return load_lexicon(language, data_dir)
