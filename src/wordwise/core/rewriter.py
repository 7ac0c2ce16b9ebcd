# src/wordwise/core/rewriter.py
"""
Streaming document rewriter.

Pulls classified units from a source one at a time:
  - text units go through the text transform
  - markup (and blank text) is written through untouched

Progress is best-effort: a failing progress sink is logged and dropped.
Cancellation is checked between text transforms, never inside one.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Protocol

from wordwise.core.errors import RewriteCancelled
from wordwise.core.markup import Unit

logger = logging.getLogger(__name__)

ProgressSink = Callable[[float], None]
TextTransform = Callable[[str], str]


class DocumentSink(Protocol):
    def write(self, text: str) -> None:
        ...


@dataclass
class RewriteStats:
    units: int = 0
    text_units: int = 0
    transformed: int = 0
    chars_in: int = 0
    chars_out: int = 0

    def __add__(self, other: "RewriteStats") -> "RewriteStats":
        return RewriteStats(
            self.units + other.units,
            self.text_units + other.text_units,
            self.transformed + other.transformed,
            self.chars_in + other.chars_in,
            self.chars_out + other.chars_out,
        )

    def to_dict(self) -> dict:
        return {
            "units": self.units,
            "text_units": self.text_units,
            "transformed": self.transformed,
            "chars_in": self.chars_in,
            "chars_out": self.chars_out,
        }


class ProgressReporter:
    """Throttled, monotonic, failure-tolerant wrapper around a progress sink."""

    def __init__(self, sink: ProgressSink | None, step: float = 0.01):
        self.sink = sink
        self.step = step
        self.last = 0.0

    def update(self, fraction: float, force: bool = False) -> None:
        if self.sink is None:
            return
        fraction = min(1.0, max(self.last, fraction))
        if not force and fraction - self.last < self.step:
            return
        self.last = fraction
        try:
            self.sink(fraction)
        except Exception:
            logger.warning("Progress sink failed, disabling progress reports", exc_info=True)
            self.sink = None

    def finish(self) -> None:
        self.update(1.0, force=True)


def _transform(text_transform: TextTransform, unit: Unit) -> str:
    if unit.continues:
        partial = getattr(text_transform, "partial", None)
        if partial is not None:
            return partial(unit.text)
    return text_transform(unit.text)


def rewrite(
    source: Iterable[Unit],
    sink: DocumentSink,
    text_transform: TextTransform,
    progress: ProgressSink | None = None,
    should_cancel: Callable[[], bool] | None = None,
) -> RewriteStats:
    """
    Copy units from source to sink, transforming text units.

    If the source has a `fraction` attribute (0..1 read so far) it drives
    intermediate progress reports; otherwise only completion is reported.

    A unit with `continues` set is handed to `text_transform.partial` when
    the transform has one; the closing piece of the run goes to the
    transform itself. Plain callables see every piece on its own.
    """
    stats = RewriteStats()
    reporter = ProgressReporter(progress)
    in_run = False

    for unit in source:
        stats.units += 1
        out = unit.text
        if unit.is_text:
            stats.text_units += 1
            # pieces of a split run all go through the transform, blank or not
            if unit.text.strip() or in_run or unit.continues:
                if should_cancel is not None and should_cancel():
                    raise RewriteCancelled()
                out = _transform(text_transform, unit)
                stats.transformed += 1
            in_run = unit.continues

        sink.write(out)
        stats.chars_in += len(unit.text)
        stats.chars_out += len(out)

        fraction = getattr(source, "fraction", None)
        if fraction is not None:
            reporter.update(fraction)

    reporter.finish()
    return stats
