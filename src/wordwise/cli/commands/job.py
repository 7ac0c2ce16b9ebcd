"""
Job commands - via API.
"""

import argparse
import sys
import time

from rich.console import Console
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn

from wordwise.cli import client

console = Console()

STATUS_ICONS = {"done": "✓", "failed": "✗", "cancelled": "○", "running": "…", "queued": "○"}
FINISHED = {"done", "failed", "cancelled"}


def add_subparser(subparsers):
    parser = subparsers.add_parser("job", help="Annotation jobs on the API server")
    job_sub = parser.add_subparsers(dest="job_command", required=True)

    # start
    start_p = job_sub.add_parser("start", help="Start annotating a book")
    start_p.add_argument("book", help="Path to the book (as seen by the server)")
    start_p.add_argument("--output", "-o", help="Output path")
    start_p.add_argument("--language", "-l", help="Lexicon language")
    start_p.add_argument("--hint-level", "-H", type=int, help="Minimum difficulty")
    start_p.add_argument("--allow-long", action="store_true", help="Use long glosses")
    start_p.add_argument("--phoneme", "-p", action=argparse.BooleanOptionalAction, default=None, help="Show pronunciation")
    start_p.add_argument("--formatter", "-f", help="Gloss rendering")
    start_p.add_argument("--watch", "-w", action="store_true", help="Follow progress until the job ends")
    start_p.set_defaults(func=job_start)

    # show
    show_p = job_sub.add_parser("show", help="Show a job")
    show_p.add_argument("job_id", help="Job ID")
    show_p.set_defaults(func=job_show)

    # watch
    watch_p = job_sub.add_parser("watch", help="Follow a job's progress")
    watch_p.add_argument("job_id", help="Job ID")
    watch_p.add_argument("--interval", type=float, default=0.5, help="Poll interval in seconds")
    watch_p.set_defaults(func=job_watch)

    # list
    list_p = job_sub.add_parser("list", help="List jobs")
    list_p.set_defaults(func=job_list)

    # cancel
    cancel_p = job_sub.add_parser("cancel", help="Cancel a running job")
    cancel_p.add_argument("job_id", help="Job ID")
    cancel_p.set_defaults(func=job_cancel)


def job_start(args):
    try:
        job = client.create_job(
            args.book,
            args.output,
            language=args.language,
            hint_level=args.hint_level,
            allow_long=args.allow_long,
            show_phoneme=args.phoneme,
            formatter=args.formatter,
        )
        print(f"✓ Created job: {job['id']}")
        print(f"  output: {job['output_path']}")
    except Exception as e:
        print(f"✗ Error: {e}")
        sys.exit(1)

    if args.watch:
        _watch(job["id"], 0.5)


def job_show(args):
    try:
        job = client.get_job(args.job_id)
        icon = STATUS_ICONS.get(job["status"], "?")
        print(f"Job: {job['id']}")
        print(f"Book: {job['input_path']}")
        print(f"Output: {job['output_path']}")
        print(f"Status: {icon} {job['status']} ({job['progress']:.0%})")
        if job.get("message"):
            print(f"Message: {job['message']}")
        print(f"Created: {job['created_at']}")
    except Exception as e:
        print(f"✗ Error: {e}")
        sys.exit(1)


def job_watch(args):
    _watch(args.job_id, args.interval)


def _watch(job_id: str, interval: float):
    try:
        with Progress(TextColumn("[bold]{task.description}"), BarColumn(), TaskProgressColumn(), console=console) as bar:
            task = bar.add_task(f"Job {job_id}", total=1.0)
            while True:
                job = client.get_job(job_id)
                bar.update(task, completed=job["progress"])
                if job["status"] in FINISHED:
                    break
                time.sleep(interval)
    except Exception as e:
        console.print(f"[red]✗ Error: {e}[/red]")
        sys.exit(1)

    icon = STATUS_ICONS[job["status"]]
    console.print(f"{icon} {job['status']}: {job.get('message', '')}")
    if job["status"] != "done":
        sys.exit(1)


def job_list(args):
    try:
        jobs = client.list_jobs()
        if not jobs:
            print("No jobs.")
            return
        for j in jobs:
            icon = STATUS_ICONS.get(j["status"], "?")
            print(f"{j['id']}  {icon} {j['status']:<9} {j['progress']:>4.0%}  {j['input_path']}")
    except Exception as e:
        print(f"✗ Error: {e}")
        sys.exit(1)


def job_cancel(args):
    try:
        client.cancel_job(args.job_id)
        print(f"✓ Cancel requested for {args.job_id}")
    except Exception as e:
        print(f"✗ Error: {e}")
        sys.exit(1)
