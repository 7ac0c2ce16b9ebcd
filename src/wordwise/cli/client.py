"""
HTTP client for the Wordwise API.
"""

import httpx

from wordwise.config import get_settings


def _url(path: str) -> str:
    return f"{get_settings().api_url}{path}"


# === Annotate ===

def annotate(text: str, **options) -> dict:
    payload = {"text": text, **{k: v for k, v in options.items() if v is not None}}
    r = httpx.post(_url("/annotate"), json=payload, timeout=60)
    r.raise_for_status()
    return r.json()


# === Jobs ===

def create_job(book: str, output: str | None = None, **options) -> dict:
    payload = {"book": book, **{k: v for k, v in options.items() if v is not None}}
    if output:
        payload["output"] = output
    r = httpx.post(_url("/jobs"), json=payload, timeout=60)
    r.raise_for_status()
    return r.json()


def get_job(job_id: str) -> dict:
    r = httpx.get(_url(f"/jobs/{job_id}"))
    r.raise_for_status()
    return r.json()


def list_jobs() -> list[dict]:
    r = httpx.get(_url("/jobs"))
    r.raise_for_status()
    return r.json()["jobs"]


def cancel_job(job_id: str) -> dict:
    r = httpx.post(_url(f"/jobs/{job_id}/cancel"))
    r.raise_for_status()
    return r.json()
