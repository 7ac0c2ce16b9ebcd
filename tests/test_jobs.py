# tests/test_jobs.py
"""Tests for the Redis job store and job execution."""

import pytest

from wordwise.core.documents import partial_path
from wordwise.core.errors import LexiconLoadError, LoadErrorKind
from wordwise.core.jobs import Job, JobStatus, run_job
from wordwise.core.pipeline import AnnotationOptions


PAGE = "<html><body><p>A versatile and sociable man.</p><p>Nothing else.</p></body></html>"


@pytest.fixture
def book(tmp_path):
    path = tmp_path / "page.html"
    path.write_text(PAGE, encoding="utf-8")
    return path


def loader_for(lexicon):
    def load(language):
        return lexicon
    return load


# === Store ===

def test_create_and_get(store):
    options = AnnotationOptions(min_difficulty=2, formatter="bracket")
    job_id = store.create("in.epub", "out.epub", options)

    job = store.get(job_id)

    assert job.status is JobStatus.QUEUED
    assert job.options == options
    assert job.progress == 0.0
    assert job.input_path == "in.epub"


def test_get_unknown(store):
    assert store.get("nope") is None
    assert store.request_cancel("nope") is False


def test_job_dict_round_trip(store):
    job = store.get(store.create("a.html", "b.html", AnnotationOptions()))
    assert Job.from_dict(job.to_dict()) == job


def test_list_all_newest_first(store):
    first = store.create("a.html", "a.out.html", AnnotationOptions())
    second = store.create("b.html", "b.out.html", AnnotationOptions())

    ids = [j.id for j in store.list_all()]

    assert set(ids) == {first, second}
    assert len(ids) == 2


def test_progress_never_goes_backwards(store):
    job_id = store.create("a.html", "b.html", AnnotationOptions())

    store.set_progress(job_id, 0.4)
    store.set_progress(job_id, 0.2)

    assert store.get(job_id).progress == 0.4


def test_set_status_unknown(store):
    with pytest.raises(ValueError):
        store.set_status("nope", JobStatus.RUNNING)


def test_finished_states():
    assert not JobStatus.QUEUED.finished
    assert not JobStatus.RUNNING.finished
    assert JobStatus.DONE.finished
    assert JobStatus.FAILED.finished
    assert JobStatus.CANCELLED.finished


# === Running ===

def test_run_job_done(store, lexicon, book, tmp_path):
    output = tmp_path / "page.out.html"
    job_id = store.create(str(book), str(output), AnnotationOptions())

    job = run_job(store, job_id, loader_for(lexicon))

    assert job.status is JobStatus.DONE
    assert job.progress == 1.0
    assert job.stats["transformed"] == 2
    assert "<ruby>versatile<rt>able to do different things</rt></ruby>" in output.read_text(encoding="utf-8")


def test_run_job_missing_lexicon(store, book, tmp_path):
    def load(language):
        raise LexiconLoadError(language, tmp_path / "missing.csv", LoadErrorKind.NOT_FOUND)

    job_id = store.create(str(book), str(tmp_path / "out.html"), AnnotationOptions())

    job = run_job(store, job_id, load)

    assert job.status is JobStatus.FAILED
    assert "not_found" in job.message


def test_run_job_bad_document_discards_partial(store, lexicon, tmp_path):
    book = tmp_path / "broken.html"
    book.write_text("<p>versatile</p><p class='open", encoding="utf-8")
    output = tmp_path / "broken.out.html"
    job_id = store.create(str(book), str(output), AnnotationOptions())

    job = run_job(store, job_id, loader_for(lexicon))

    assert job.status is JobStatus.FAILED
    assert "unterminated markup" in job.message
    assert not output.exists()
    assert not partial_path(output).exists()


def test_cancel_before_start(store, lexicon, book, tmp_path):
    output = tmp_path / "out.html"
    job_id = store.create(str(book), str(output), AnnotationOptions())
    store.request_cancel(job_id)

    job = run_job(store, job_id, loader_for(lexicon))

    assert job.status is JobStatus.CANCELLED
    assert not output.exists()


def test_cancel_while_running(store, lexicon, book, tmp_path):
    output = tmp_path / "out.html"
    job_id = store.create(str(book), str(output), AnnotationOptions())

    def load(language):
        # arrives after the job has started
        store.request_cancel(job_id)
        return lexicon

    job = run_job(store, job_id, load)

    assert job.status is JobStatus.CANCELLED
    assert not output.exists()
    assert not partial_path(output).exists()


def test_run_unknown_job(store, lexicon):
    with pytest.raises(ValueError):
        run_job(store, "nope", loader_for(lexicon))
