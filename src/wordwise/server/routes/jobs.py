"""
Job routes: /api/jobs
"""

from pathlib import Path

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from pydantic import BaseModel, Field

from wordwise.config import Settings, get_settings
from wordwise.core.documents import SUPPORTED_SUFFIXES, default_output_path
from wordwise.core.jobs import JobStore, run_job
from wordwise.core.lexicon import LANGUAGE_RE
from wordwise.core.pipeline import AnnotationOptions
from wordwise.server.deps import LexiconLoader, get_job_store, get_lexicon_loader


router = APIRouter(prefix="/api/jobs", tags=["jobs"])


class CreateJobRequest(BaseModel):
    book: str
    output: str | None = None
    language: str | None = Field(None, pattern=LANGUAGE_RE.pattern)
    hint_level: int | None = None
    allow_long: bool = False
    show_phoneme: bool | None = None
    formatter: str | None = None


@router.post("")
async def create_job(
    req: CreateJobRequest,
    background_tasks: BackgroundTasks,
    settings: Settings = Depends(get_settings),
    store: JobStore = Depends(get_job_store),
    loader: LexiconLoader = Depends(get_lexicon_loader),
):
    """Create an annotation job for a book and start it in the background."""
    book = Path(req.book)
    if book.suffix.lower() not in SUPPORTED_SUFFIXES:
        supported = ", ".join(SUPPORTED_SUFFIXES)
        raise HTTPException(status_code=400, detail=f"Unsupported format {book.suffix!r}. Supported: {supported}")
    if not book.is_file():
        raise HTTPException(status_code=404, detail=f"Book not found: {req.book}")

    try:
        options = AnnotationOptions(
            language=req.language or settings.language,
            max_definition_detail=2 if req.allow_long else 1,
            include_pronunciation=req.show_phoneme if req.show_phoneme is not None else settings.show_phoneme,
            min_difficulty=req.hint_level if req.hint_level is not None else settings.hint_level,
            formatter=req.formatter or settings.formatter,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    output = req.output or str(default_output_path(book))
    job_id = store.create(str(book), output, options)
    background_tasks.add_task(
        run_job, store, job_id, loader,
        chunk_size=settings.chunk_size,
        max_text_size=settings.max_text_size,
    )
    return store.get(job_id).to_dict()


@router.get("")
async def list_jobs(store: JobStore = Depends(get_job_store)):
    """List all jobs, newest first."""
    return {"jobs": [j.to_dict() for j in store.list_all()]}


@router.get("/{job_id}")
async def get_job(job_id: str, store: JobStore = Depends(get_job_store)):
    """Get a job with its status and progress."""
    job = store.get(job_id)
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    return job.to_dict()


@router.post("/{job_id}/cancel")
async def cancel_job(job_id: str, store: JobStore = Depends(get_job_store)):
    """Ask a running job to stop after the current text unit."""
    if not store.request_cancel(job_id):
        raise HTTPException(status_code=404, detail="Job not found")
    return {"success": True}
