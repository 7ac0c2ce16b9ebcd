# src/wordwise/core/documents.py
"""
Document sources and sinks on disk.

Supported inputs:
  - .html / .htm / .xhtml  streamed through the markup classifier
  - .txt                   every line is a text unit
  - .epub                  content documents rewritten entry by entry,
                           every other zip entry copied as is

Output is written to "<output>.part" and renamed only when the whole
document succeeded. On failure the .part file is left for the caller and its
path is attached to the raised error.
"""

import codecs
import logging
import os
import posixpath
import zipfile
import zlib
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Callable, Iterable, Iterator
from urllib.parse import unquote

from bs4 import BeautifulSoup

from wordwise.core.errors import DocumentError, DocumentFormatError, DocumentIOError
from wordwise.core.markup import DEFAULT_MAX_TEXT_SIZE, Unit, UnitKind, iter_units, split_at_whitespace
from wordwise.core.rewriter import ProgressReporter, ProgressSink, RewriteStats, TextTransform, rewrite

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024

HTML_SUFFIXES = (".html", ".htm", ".xhtml")
TEXT_SUFFIXES = (".txt",)
EPUB_SUFFIXES = (".epub",)
SUPPORTED_SUFFIXES = HTML_SUFFIXES + TEXT_SUFFIXES + EPUB_SUFFIXES

CONTENT_MEDIA_TYPES = frozenset({"application/xhtml+xml", "text/html"})


def iter_lines(chunks: Iterable[str], max_text_size: int = DEFAULT_MAX_TEXT_SIZE) -> Iterator[Unit]:
    """
    Plain text: one text unit per line, line ending included.

    A line longer than max_text_size is cut after whitespace into continued
    pieces, the same way the markup classifier cuts long text runs.
    """
    pending = ""
    continuing = False
    for chunk in chunks:
        # only the new chunk is searched for line ends
        start = 0
        nl = chunk.find("\n")
        while nl >= 0:
            yield Unit(UnitKind.TEXT, pending + chunk[start:nl + 1])
            pending = ""
            continuing = False
            start = nl + 1
            nl = chunk.find("\n", start)
        pending += chunk[start:]
        if len(pending) > max_text_size:
            head, pending = split_at_whitespace(pending)
            if head:
                continuing = True
                yield Unit(UnitKind.TEXT, head, continues=True)
    if pending or continuing:
        yield Unit(UnitKind.TEXT, pending)


class StreamSource:
    """Units decoded from a UTF-8 byte stream, tracking how much was read."""

    def __init__(
        self,
        stream: BinaryIO,
        total_bytes: int | None,
        name: str,
        classify: Callable[[Iterable[str]], Iterator[Unit]] = iter_units,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        self.stream = stream
        self.total_bytes = total_bytes
        self.name = name
        self.classify = classify
        self.chunk_size = chunk_size
        self.bytes_read = 0

    @property
    def fraction(self) -> float | None:
        if not self.total_bytes:
            return None
        return min(1.0, self.bytes_read / self.total_bytes)

    def chunks(self) -> Iterator[str]:
        decoder = codecs.getincrementaldecoder("utf-8")()
        while True:
            try:
                data = self.stream.read(self.chunk_size)
            except OSError as e:
                raise DocumentIOError(self.name, "source", str(e)) from e
            self.bytes_read += len(data)
            try:
                text = decoder.decode(data, final=not data)
            except UnicodeDecodeError as e:
                raise DocumentFormatError(f"not valid UTF-8 near byte {self.bytes_read}: {e.reason}", self.name) from e
            if text:
                yield text
            if not data:
                return

    def __iter__(self) -> Iterator[Unit]:
        try:
            yield from self.classify(self.chunks())
        except DocumentFormatError as e:
            if e.path is None:
                raise DocumentFormatError(str(e), self.name) from e
            raise


class StreamSink:
    """Encodes text to a byte stream, reporting failures as sink errors."""

    def __init__(self, stream: BinaryIO, name: str):
        self.stream = stream
        self.name = name

    def write(self, text: str) -> None:
        try:
            self.stream.write(text.encode("utf-8"))
        except OSError as e:
            raise DocumentIOError(self.name, "sink", str(e)) from e


def partial_path(output_path: Path) -> Path:
    return output_path.with_name(output_path.name + ".part")


@contextmanager
def open_output(output_path: Path) -> Iterator[BinaryIO]:
    """Write to <output>.part, promote it to output_path only on success."""
    part = partial_path(output_path)
    try:
        f = open(part, "wb")
    except OSError as e:
        raise DocumentIOError(output_path, "sink", str(e)) from e

    try:
        with f:
            yield f
    except DocumentError as e:
        e.partial_path = part
        logger.warning("Rewrite of %s failed, partial output kept at %s", output_path, part)
        raise
    except OSError as e:
        err = DocumentIOError(output_path, "sink", str(e))
        err.partial_path = part
        raise err from e

    try:
        part.replace(output_path)
    except OSError as e:
        raise DocumentIOError(output_path, "sink", str(e)) from e


def _open_input(path: Path) -> tuple[BinaryIO, int]:
    try:
        f = open(path, "rb")
        return f, os.fstat(f.fileno()).st_size
    except OSError as e:
        raise DocumentIOError(path, "source", str(e)) from e


def rewrite_stream_file(
    input_path: Path | str,
    output_path: Path | str,
    text_transform: TextTransform,
    progress: ProgressSink | None = None,
    should_cancel: Callable[[], bool] | None = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    max_text_size: int = DEFAULT_MAX_TEXT_SIZE,
) -> RewriteStats:
    """Rewrite a single HTML/XHTML or plain text file."""
    input_path = Path(input_path)
    output_path = Path(output_path)

    if input_path.suffix.lower() in TEXT_SUFFIXES:
        def classify(chunks):
            return iter_lines(chunks, max_text_size=max_text_size)
    else:
        def classify(chunks):
            return iter_units(chunks, max_text_size=max_text_size)

    src, total = _open_input(input_path)
    with src, open_output(output_path) as out:
        source = StreamSource(src, total, str(input_path), classify, chunk_size)
        stats = rewrite(source, StreamSink(out, str(output_path)), text_transform, progress, should_cancel)

    logger.info("Rewrote %s → %s (%d of %d text units)", input_path, output_path, stats.transformed, stats.text_units)
    return stats


# === EPUB ===

def content_documents(zf: zipfile.ZipFile) -> set[str]:
    """
    Names of the entries holding readable content.

    Read from the OPF manifest; if the book has no usable container/OPF,
    fall back to file extensions.
    """
    names = set(zf.namelist())
    try:
        container = BeautifulSoup(zf.read("META-INF/container.xml"), "xml")
        rootfile = container.find("rootfile")
        opf_path = rootfile["full-path"]
        opf = BeautifulSoup(zf.read(opf_path), "xml")
    except (KeyError, TypeError):
        logger.warning("EPUB has no readable OPF manifest, selecting content by extension")
        return {n for n in names if n.lower().endswith(HTML_SUFFIXES)}

    base = posixpath.dirname(opf_path)
    docs = set()
    for item in opf.find_all("item"):
        if item.get("media-type") not in CONTENT_MEDIA_TYPES or not item.get("href"):
            continue
        name = posixpath.normpath(posixpath.join(base, unquote(item["href"])))
        if name in names:
            docs.add(name)
    return docs


def _clone_info(info: zipfile.ZipInfo) -> zipfile.ZipInfo:
    clone = zipfile.ZipInfo(info.filename, date_time=info.date_time)
    clone.compress_type = zipfile.ZIP_STORED if info.filename == "mimetype" else info.compress_type
    clone.external_attr = info.external_attr
    clone.create_system = info.create_system
    return clone


def _copy_entry(src: BinaryIO, dst: BinaryIO, input_name: str, output_name: str, chunk_size: int) -> None:
    while True:
        try:
            data = src.read(chunk_size)
        except OSError as e:
            raise DocumentIOError(input_name, "source", str(e)) from e
        if not data:
            return
        try:
            dst.write(data)
        except OSError as e:
            raise DocumentIOError(output_name, "sink", str(e)) from e


def rewrite_epub(
    input_path: Path | str,
    output_path: Path | str,
    text_transform: TextTransform,
    progress: ProgressSink | None = None,
    should_cancel: Callable[[], bool] | None = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    max_text_size: int = DEFAULT_MAX_TEXT_SIZE,
) -> RewriteStats:
    input_path = Path(input_path)
    output_path = Path(output_path)

    try:
        zin = zipfile.ZipFile(input_path)
    except OSError as e:
        raise DocumentIOError(input_path, "source", str(e)) from e
    except zipfile.BadZipFile as e:
        raise DocumentFormatError(f"not an EPUB archive: {e}", input_path) from e

    def classify(chunks):
        return iter_units(chunks, max_text_size=max_text_size)

    stats = RewriteStats()
    reporter = ProgressReporter(progress)

    with zin, open_output(output_path) as out:
        try:
            with zipfile.ZipFile(out, "w") as zout:
                targets = content_documents(zin)
                # mimetype must stay the first entry
                infos = sorted(zin.infolist(), key=lambda i: i.filename != "mimetype")
                total = sum(i.file_size for i in infos if i.filename in targets) or 1
                done = 0

                for info in infos:
                    entry_in = f"{input_path}!{info.filename}"
                    entry_out = f"{output_path}!{info.filename}"
                    with zin.open(info) as src, zout.open(_clone_info(info), "w") as dst:
                        if info.filename not in targets:
                            _copy_entry(src, dst, entry_in, entry_out, chunk_size)
                            continue

                        start = done / total
                        span = info.file_size / total
                        source = StreamSource(src, info.file_size, entry_in, classify, chunk_size)
                        stats += rewrite(
                            source,
                            StreamSink(dst, entry_out),
                            text_transform,
                            lambda f, start=start, span=span: reporter.update(start + span * f),
                            should_cancel,
                        )
                    done += info.file_size
        except (zipfile.BadZipFile, zlib.error) as e:
            raise DocumentFormatError(f"corrupt EPUB archive: {e}", input_path) from e

    reporter.finish()
    logger.info(
        "Rewrote EPUB %s → %s (%d content documents, %d of %d text units)",
        input_path, output_path, len(targets), stats.transformed, stats.text_units,
    )
    return stats


def rewrite_document(
    input_path: Path | str,
    output_path: Path | str,
    text_transform: TextTransform,
    progress: ProgressSink | None = None,
    should_cancel: Callable[[], bool] | None = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    max_text_size: int = DEFAULT_MAX_TEXT_SIZE,
) -> RewriteStats:
    """Rewrite any supported document, picking the format from its suffix."""
    suffix = Path(input_path).suffix.lower()
    if suffix in EPUB_SUFFIXES:
        rewriter = rewrite_epub
    elif suffix in HTML_SUFFIXES + TEXT_SUFFIXES:
        rewriter = rewrite_stream_file
    else:
        supported = ", ".join(SUPPORTED_SUFFIXES)
        raise DocumentFormatError(f"unsupported document type {suffix!r}. Supported: {supported}", input_path)

    return rewriter(
        input_path, output_path, text_transform,
        progress=progress,
        should_cancel=should_cancel,
        chunk_size=chunk_size,
        max_text_size=max_text_size,
    )


def default_output_path(input_path: Path | str) -> Path:
    """book.epub → book.wordwise.epub"""
    input_path = Path(input_path)
    return input_path.with_name(f"{input_path.stem}.wordwise{input_path.suffix}")
