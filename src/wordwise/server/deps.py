"""
Shared dependencies for routes.
"""

from functools import lru_cache
from typing import Callable

import redis
from fastapi import Depends, HTTPException

from wordwise.config import Settings, get_settings
from wordwise.core.errors import LexiconLoadError, LoadErrorKind
from wordwise.core.jobs import JobStore
from wordwise.core.lexicon import Lexicon, load_lexicon

LexiconLoader = Callable[[str], Lexicon]


def get_redis(settings: Settings = Depends(get_settings)) -> redis.Redis:
    return redis.Redis(host=settings.redis_host, port=settings.redis_port, db=settings.redis_db)


def get_job_store(client: redis.Redis = Depends(get_redis)) -> JobStore:
    return JobStore(client)


@lru_cache(maxsize=8)
def cached_lexicon(language: str, data_dir: str) -> Lexicon:
    """One lexicon per language for the life of the process."""
    return load_lexicon(language, data_dir)


def get_lexicon_loader(settings: Settings = Depends(get_settings)) -> LexiconLoader:
    def load(language: str) -> Lexicon:
        return cached_lexicon(language, str(settings.data_dir))
    return load


def lexicon_or_http_error(loader: LexiconLoader, language: str) -> Lexicon:
    try:
        return loader(language)
    except LexiconLoadError as e:
        status = 404 if e.kind is LoadErrorKind.NOT_FOUND else 500
        raise HTTPException(status_code=status, detail=str(e))
