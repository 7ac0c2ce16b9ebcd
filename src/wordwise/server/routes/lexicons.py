"""
Lexicon routes: /api/annotate, /api/lexicons, /api/formatters
"""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from wordwise.config import Settings, get_settings
from wordwise.core.formatters import get_formatter, list_formatters
from wordwise.core.lexicon import LANGUAGE_RE
from wordwise.core.matcher import annotate_text, resolve, scan_text
from wordwise.server.deps import LexiconLoader, get_lexicon_loader, lexicon_or_http_error


router = APIRouter(prefix="/api", tags=["lexicons"])


class AnnotateRequest(BaseModel):
    text: str
    language: str | None = Field(None, pattern=LANGUAGE_RE.pattern)
    hint_level: int | None = None
    detail: int | None = Field(None, ge=1, le=2)
    show_phoneme: bool | None = None
    formatter: str | None = None


@router.post("/annotate")
async def annotate(
    req: AnnotateRequest,
    settings: Settings = Depends(get_settings),
    loader: LexiconLoader = Depends(get_lexicon_loader),
):
    """Annotate a piece of text and list what matched."""
    language = req.language or settings.language
    hint_level = req.hint_level if req.hint_level is not None else settings.hint_level
    detail = req.detail or settings.detail
    show_phoneme = req.show_phoneme if req.show_phoneme is not None else settings.show_phoneme

    try:
        formatter = get_formatter(req.formatter or settings.formatter)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    lexicon = lexicon_or_http_error(loader, language)
    matches = [
        {"surface": m.surface, "tokens": m.length, "term": m.record.term}
        for m in scan_text(req.text, lexicon, hint_level)
        if m.matched
    ]
    return {
        "text": annotate_text(req.text, lexicon, detail, show_phoneme, hint_level, formatter),
        "matches": matches,
    }


@router.get("/lexicons/{language}/terms/{term}")
async def lookup_term(
    language: str,
    term: str,
    hint_level: int = 0,
    loader: LexiconLoader = Depends(get_lexicon_loader),
):
    """Look up a word or phrase, following the lemma table for single words."""
    lexicon = lexicon_or_http_error(loader, language)
    record = resolve(term, lexicon, hint_level)
    if record is None:
        raise HTTPException(status_code=404, detail=f"No entry for {term!r}")
    return record.to_dict()


@router.get("/formatters")
async def formatters():
    """List registered gloss formatters."""
    return {"formatters": list_formatters()}
