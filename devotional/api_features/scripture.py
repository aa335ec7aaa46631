from __future__ import annotations

import logging
from typing import List, Optional

from django.conf import settings
from fastapi import HTTPException

from ..schemas import BookOut, ScripturePassage
from ..services.scripture import (
    BIBLE_BOOKS,
    ScriptureClient,
    ScriptureConfigurationError,
    ScriptureLookupError,
)


logger = logging.getLogger(__name__)


def _list_books() -> List[BookOut]:
    return [BookOut(id=b.id, name=b.name, chapters=b.chapters) for b in BIBLE_BOOKS]


def _lookup_scripture(
    book: str,
    chapter: int,
    verse_from: Optional[int] = None,
    verse_to: Optional[int] = None,
) -> List[ScripturePassage]:
    """
    Fetch a chapter, verse or verse range as plain text.

    One passage per configured version (SCRIPTURE_BIBLE_IDS), or a single
    passage from SCRIPTURE_BIBLE_ID.
    """
    try:
        client = ScriptureClient.from_settings()
    except ScriptureConfigurationError as e:
        raise HTTPException(status_code=503, detail=str(e))

    try:
        if settings.SCRIPTURE_BIBLE_IDS:
            return client.lookup_versions(
                book, chapter, verse_from, verse_to, bible_ids=settings.SCRIPTURE_BIBLE_IDS
            )
        return [client.lookup(book, chapter, verse_from, verse_to)]
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ScriptureLookupError as e:
        logger.warning("Scripture lookup failed for %s %s: %s", book, chapter, e)
        raise HTTPException(status_code=502, detail=str(e))
