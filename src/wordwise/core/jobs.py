# src/wordwise/core/jobs.py
"""
Annotation jobs - one document rewrite tracked in Redis.

    queued → running → done | failed | cancelled

Progress is written by the running pipeline and read by whoever polls the
job. Cancellation is a separate flag the pipeline checks between text units.
"""

import json
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable

import redis

from wordwise.core.errors import RewriteCancelled, WordwiseError
from wordwise.core.lexicon import Lexicon
from wordwise.core.pipeline import AnnotationOptions, annotate_document

logger = logging.getLogger(__name__)


def generate_id() -> str:
    return uuid.uuid4().hex[:12]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class JobStatus(str, Enum):
    QUEUED = "queued"
    RUNNING = "running"
    DONE = "done"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def finished(self) -> bool:
        return self in (JobStatus.DONE, JobStatus.FAILED, JobStatus.CANCELLED)


@dataclass
class Job:
    id: str
    input_path: str
    output_path: str
    options: AnnotationOptions
    status: JobStatus
    created_at: str
    updated_at: str
    progress: float = 0.0
    message: str = ""
    stats: dict | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "input_path": self.input_path,
            "output_path": self.output_path,
            "options": self.options.to_dict(),
            "status": self.status.value,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "progress": self.progress,
            "message": self.message,
            "stats": self.stats,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Job":
        return cls(
            id=data["id"],
            input_path=data["input_path"],
            output_path=data["output_path"],
            options=AnnotationOptions.from_dict(data["options"]),
            status=JobStatus(data["status"]),
            created_at=data["created_at"],
            updated_at=data["updated_at"],
            progress=data.get("progress", 0.0),
            message=data.get("message", ""),
            stats=data.get("stats"),
        )


class JobStore:
    """Stores jobs in Redis."""

    def __init__(self, client: redis.Redis, prefix: str = "wordwise"):
        self.client = client
        self.prefix = prefix

    def _job_key(self, job_id: str) -> str:
        return f"{self.prefix}:job:{job_id}"

    def _cancel_key(self, job_id: str) -> str:
        return f"{self.prefix}:job:{job_id}:cancel"

    def _index_key(self) -> str:
        return f"{self.prefix}:job_index"

    def _save(self, job: Job) -> None:
        job.updated_at = _now()
        self.client.set(self._job_key(job.id), json.dumps(job.to_dict()))

    def create(self, input_path: str, output_path: str, options: AnnotationOptions) -> str:
        """Create a queued job, returns job_id."""
        now = _now()
        job = Job(
            id=generate_id(),
            input_path=str(input_path),
            output_path=str(output_path),
            options=options,
            status=JobStatus.QUEUED,
            created_at=now,
            updated_at=now,
        )
        self._save(job)
        self.client.sadd(self._index_key(), job.id)
        return job.id

    def get(self, job_id: str) -> Job | None:
        data = self.client.get(self._job_key(job_id))
        if data is None:
            return None
        return Job.from_dict(json.loads(data))

    def list_all(self) -> list[Job]:
        jobs = []
        for job_id in self.client.smembers(self._index_key()):
            job = self.get(job_id.decode())
            if job:
                jobs.append(job)
        return sorted(jobs, key=lambda j: j.created_at, reverse=True)

    def set_status(self, job_id: str, status: JobStatus, message: str = "", stats: dict | None = None) -> None:
        job = self.get(job_id)
        if job is None:
            raise ValueError(f"Job {job_id} not found")
        job.status = status
        job.message = message
        if stats is not None:
            job.stats = stats
        if status is JobStatus.DONE:
            job.progress = 1.0
        self._save(job)

    def set_progress(self, job_id: str, fraction: float) -> None:
        """Record progress. Never moves backwards."""
        job = self.get(job_id)
        if job is None:
            raise ValueError(f"Job {job_id} not found")
        fraction = min(1.0, max(job.progress, fraction))
        if fraction == job.progress:
            return
        job.progress = fraction
        self._save(job)

    def request_cancel(self, job_id: str) -> bool:
        job = self.get(job_id)
        if job is None:
            return False
        self.client.set(self._cancel_key(job_id), 1)
        return True

    def is_cancel_requested(self, job_id: str) -> bool:
        return bool(self.client.exists(self._cancel_key(job_id)))


class JobProgress:
    """Progress sink that records into the job store."""

    def __init__(self, store: JobStore, job_id: str):
        self.store = store
        self.job_id = job_id

    def __call__(self, fraction: float) -> None:
        self.store.set_progress(self.job_id, fraction)


def _discard_partial(error: Exception) -> None:
    partial = getattr(error, "partial_path", None)
    if partial is not None:
        partial.unlink(missing_ok=True)
        logger.info("Discarded partial output %s", partial)


def run_job(store: JobStore, job_id: str, load_lexicon: Callable[[str], Lexicon], **stream_options) -> Job:
    """
    Execute a queued job to completion.

    Failures are recorded on the job, not raised: the caller polls the store.
    Partial output of a failed or cancelled job is deleted.
    """
    job = store.get(job_id)
    if job is None:
        raise ValueError(f"Job {job_id} not found")

    if store.is_cancel_requested(job_id):
        store.set_status(job_id, JobStatus.CANCELLED, "cancelled before start")
        return store.get(job_id)

    store.set_status(job_id, JobStatus.RUNNING)
    logger.info("Job %s started: %s", job_id, job.input_path)

    try:
        lexicon = load_lexicon(job.options.language)
        stats = annotate_document(
            job.input_path,
            job.output_path,
            lexicon,
            job.options,
            progress=JobProgress(store, job_id),
            should_cancel=lambda: store.is_cancel_requested(job_id),
            **stream_options,
        )
    except RewriteCancelled as e:
        _discard_partial(e)
        store.set_status(job_id, JobStatus.CANCELLED, str(e))
        logger.info("Job %s cancelled", job_id)
    except WordwiseError as e:
        _discard_partial(e)
        store.set_status(job_id, JobStatus.FAILED, str(e))
        logger.error("Job %s failed: %s", job_id, e)
    else:
        message = f"{stats.transformed} text units annotated"
        store.set_status(job_id, JobStatus.DONE, message, stats.to_dict())
        logger.info("Job %s done: %s", job_id, message)

    return store.get(job_id)
