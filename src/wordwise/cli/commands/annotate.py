"""
Annotate commands - run the pipeline locally.
"""

import signal
import sys
import threading
from pathlib import Path

from rich.console import Console
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn, TimeElapsedColumn

from wordwise.cli import client
from wordwise.cli.options import add_annotation_options, lexicon_from_args, options_from_args
from wordwise.core.documents import default_output_path
from wordwise.core.errors import RewriteCancelled, WordwiseError
from wordwise.core.formatters import get_formatter
from wordwise.core.matcher import annotate_text
from wordwise.core.pipeline import annotate_document

console = Console()


def add_subparser(subparsers):
    parser = subparsers.add_parser("annotate", help="Annotate text or documents")
    annotate_sub = parser.add_subparsers(dest="annotate_command", required=True)

    # text
    text_p = annotate_sub.add_parser("text", help="Annotate a piece of text")
    text_p.add_argument("text", help="Text to annotate")
    text_p.add_argument("--remote", action="store_true", help="Annotate through the API server")
    add_annotation_options(text_p)
    text_p.set_defaults(func=annotate_text_cmd)

    # file
    file_p = annotate_sub.add_parser("file", help="Annotate an HTML, XHTML, text or EPUB file")
    file_p.add_argument("input", help="Input document")
    file_p.add_argument("--output", "-o", help="Output path (default: <name>.wordwise.<ext>)")
    file_p.add_argument("--keep-partial", action="store_true", help="Keep <output>.part if the rewrite fails")
    add_annotation_options(file_p)
    file_p.set_defaults(func=annotate_file_cmd)


def annotate_text_cmd(args):
    try:
        options = options_from_args(args)
        if args.remote:
            result = client.annotate(
                args.text,
                language=options.language,
                hint_level=options.min_difficulty,
                detail=int(options.max_definition_detail),
                show_phoneme=options.include_pronunciation,
                formatter=options.formatter,
            )
            print(result["text"])
            return

        lexicon = lexicon_from_args(args, options.language)
        print(annotate_text(
            args.text,
            lexicon,
            options.max_definition_detail,
            options.include_pronunciation,
            options.min_difficulty,
            get_formatter(options.formatter),
        ))
    except Exception as e:
        console.print(f"[red]✗ Error: {e}[/red]")
        sys.exit(1)


def annotate_file_cmd(args):
    input_path = Path(args.input)
    output_path = Path(args.output) if args.output else default_output_path(input_path)

    try:
        options = options_from_args(args)
        lexicon = lexicon_from_args(args, options.language)
    except (WordwiseError, ValueError) as e:
        console.print(f"[red]✗ Error: {e}[/red]")
        sys.exit(1)

    console.print(f"[dim]Loaded {len(lexicon)} terms for {options.language!r}[/dim]")

    # Ctrl-C stops after the current text unit
    interrupted = threading.Event()
    previous = signal.signal(signal.SIGINT, lambda signum, frame: interrupted.set())

    try:
        with Progress(
            TextColumn("[bold]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            TimeElapsedColumn(),
            console=console,
        ) as bar:
            task = bar.add_task(f"Annotating {input_path.name}", total=1.0)
            stats = annotate_document(
                input_path,
                output_path,
                lexicon,
                options,
                progress=lambda fraction: bar.update(task, completed=fraction),
                should_cancel=interrupted.is_set,
            )
    except WordwiseError as e:
        partial = getattr(e, "partial_path", None)
        if partial is not None and not args.keep_partial:
            partial.unlink(missing_ok=True)
        elif partial is not None:
            console.print(f"[yellow]Partial output kept at {partial}[/yellow]")
        if isinstance(e, RewriteCancelled):
            console.print("[yellow]○ Cancelled[/yellow]")
        else:
            console.print(f"[red]✗ Error: {e}[/red]")
        sys.exit(1)
    finally:
        signal.signal(signal.SIGINT, previous)

    console.print(f"✓ Wrote {output_path}")
    console.print(f"  [dim]{stats.transformed} of {stats.text_units} text units annotated[/dim]")
