"""
Lookup commands - inspect the lexicon and the matcher.
"""

import sys

from rich import print_json
from rich.console import Console
from rich.table import Table

from wordwise.cli.options import lexicon_from_args
from wordwise.config import get_settings
from wordwise.core.clean import clean_token
from wordwise.core.errors import LexiconLoadError
from wordwise.core.matcher import resolve, scan_text

console = Console()


def add_subparser(subparsers):
    parser = subparsers.add_parser("lookup", help="Inspect the lexicon")
    lookup_sub = parser.add_subparsers(dest="lookup_command", required=True)

    # term
    term_p = lookup_sub.add_parser("term", help="Show the entry for a word or phrase")
    term_p.add_argument("term", help="Word or phrase")
    _add_lexicon_args(term_p)
    term_p.set_defaults(func=lookup_term)

    # scan
    scan_p = lookup_sub.add_parser("scan", help="Show which terms a text would match")
    scan_p.add_argument("text", help="Text to scan")
    _add_lexicon_args(scan_p)
    scan_p.set_defaults(func=lookup_scan)

    # clean
    clean_p = lookup_sub.add_parser("clean", help="Show how a token is split for matching")
    clean_p.add_argument("token", help="Raw token")
    clean_p.set_defaults(func=lookup_clean)


def _add_lexicon_args(parser):
    parser.add_argument("--language", "-l", help="Lexicon language")
    parser.add_argument("--hint-level", "-H", type=int, default=0, help="Minimum difficulty")
    parser.add_argument("--data-dir", help="Directory with lexicon CSV files")


def _load(args):
    language = args.language or get_settings().language
    try:
        return lexicon_from_args(args, language)
    except LexiconLoadError as e:
        console.print(f"[red]✗ Error: {e}[/red]")
        sys.exit(1)


def lookup_term(args):
    lexicon = _load(args)
    record = resolve(args.term, lexicon, args.hint_level)
    if record is None:
        console.print(f"[yellow]No entry for {args.term!r}[/yellow]")
        sys.exit(1)
    print_json(data=record.to_dict())


def lookup_scan(args):
    lexicon = _load(args)

    table = Table("surface", "tokens", "term", "difficulty", "short gloss")
    for match in scan_text(args.text, lexicon, args.hint_level):
        if match.matched:
            r = match.record
            table.add_row(match.surface, str(match.length), r.term, str(r.difficulty), r.short_gloss)

    if not table.row_count:
        console.print("No terms matched.")
        return
    console.print(table)


def lookup_clean(args):
    core, prefix, suffix = clean_token(args.token, lowercase=False)
    console.print(f"prefix: {prefix!r}")
    console.print(f"core:   {core!r}")
    console.print(f"suffix: {suffix!r}")
