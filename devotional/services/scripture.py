"""
Scripture lookup through the API.Bible REST service.

Passages are requested as plain text (no verse or chapter numbers) either for
a whole chapter or for a verse / verse range within one chapter.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import requests
from django.conf import settings

from ..schemas import ScripturePassage


logger = logging.getLogger(__name__)

API_BASE = "https://api.scripture.api.bible/v1"

TEXT_PARAMS = {
    "content-type": "text",
    "include-verse-numbers": "false",
    "include-chapter-numbers": "false",
}

EMPTY_PASSAGE_TEXT = "(No scripture text for this passage)"

DEFAULT_SCRIPTURE = ScripturePassage(
    reference="Psalm 46:10",
    text="Be still, and know that I am God: I will be exalted among the heathen, "
         "I will be exalted in the earth.",
)


class ScriptureConfigurationError(RuntimeError):
    """The scripture API key is not configured."""


class ScriptureLookupError(RuntimeError):
    """The scripture provider returned an error."""


@dataclass(frozen=True)
class BibleBook:
    id: str
    name: str
    chapters: int


BIBLE_BOOKS: List[BibleBook] = [
    BibleBook(id, name, chapters)
    for id, name, chapters in [
        ("GEN", "Genesis", 50), ("EXO", "Exodus", 40), ("LEV", "Leviticus", 27),
        ("NUM", "Numbers", 36), ("DEU", "Deuteronomy", 34), ("JOS", "Joshua", 24),
        ("JDG", "Judges", 21), ("RUT", "Ruth", 4), ("1SA", "1 Samuel", 31),
        ("2SA", "2 Samuel", 24), ("1KI", "1 Kings", 22), ("2KI", "2 Kings", 25),
        ("1CH", "1 Chronicles", 29), ("2CH", "2 Chronicles", 36), ("EZR", "Ezra", 10),
        ("NEH", "Nehemiah", 13), ("EST", "Esther", 10), ("JOB", "Job", 42),
        ("PSA", "Psalms", 150), ("PRO", "Proverbs", 31), ("ECC", "Ecclesiastes", 12),
        ("SNG", "Song of Songs", 8), ("ISA", "Isaiah", 66), ("JER", "Jeremiah", 52),
        ("LAM", "Lamentations", 5), ("EZK", "Ezekiel", 48), ("DAN", "Daniel", 12),
        ("HOS", "Hosea", 14), ("JOL", "Joel", 3), ("AMO", "Amos", 9),
        ("OBA", "Obadiah", 1), ("JON", "Jonah", 4), ("MIC", "Micah", 7),
        ("NAM", "Nahum", 3), ("HAB", "Habakkuk", 3), ("ZEP", "Zephaniah", 3),
        ("HAG", "Haggai", 2), ("ZEC", "Zechariah", 14), ("MAL", "Malachi", 4),
        ("MAT", "Matthew", 28), ("MRK", "Mark", 16), ("LUK", "Luke", 24),
        ("JHN", "John", 21), ("ACT", "Acts", 28), ("ROM", "Romans", 16),
        ("1CO", "1 Corinthians", 16), ("2CO", "2 Corinthians", 13), ("GAL", "Galatians", 6),
        ("EPH", "Ephesians", 6), ("PHP", "Philippians", 4), ("COL", "Colossians", 4),
        ("1TH", "1 Thessalonians", 5), ("2TH", "2 Thessalonians", 3), ("1TI", "1 Timothy", 6),
        ("2TI", "2 Timothy", 4), ("TIT", "Titus", 3), ("PHM", "Philemon", 1),
        ("HEB", "Hebrews", 13), ("JAS", "James", 5), ("1PE", "1 Peter", 5),
        ("2PE", "2 Peter", 3), ("1JN", "1 John", 5), ("2JN", "2 John", 1),
        ("3JN", "3 John", 1), ("JUD", "Jude", 1), ("REV", "Revelation", 22),
    ]
]

_BOOKS_BY_ID: Dict[str, BibleBook] = {b.id: b for b in BIBLE_BOOKS}


def get_book(book_id: str) -> BibleBook:
    try:
        return _BOOKS_BY_ID[book_id.strip().upper()]
    except KeyError:
        raise ValueError(f"Unknown book id {book_id!r}.")


@dataclass(frozen=True)
class PassageQuery:
    """A resolved lookup: which endpoint to call and how to label the result."""
    path: str
    reference: str


def build_query(
    book_id: str,
    chapter: int,
    verse_from: Optional[int] = None,
    verse_to: Optional[int] = None,
) -> PassageQuery:
    """
    Resolve book/chapter/verse input into an API path and a display reference.

    A missing or non-positive ``verse_from`` means the whole chapter; a
    missing, non-positive or smaller ``verse_to`` means a single verse.

    Raises:
        ValueError: Unknown book, chapter out of range, or start verse after end verse.
    """
    book = get_book(book_id)
    if not 1 <= chapter <= book.chapters:
        raise ValueError(f"{book.name} has chapters 1-{book.chapters}, got {chapter}.")

    start = verse_from or 0
    end = verse_to or 0
    if start > 0 and end > 0 and start > end:
        raise ValueError("The start verse cannot be after the end verse.")

    if start <= 0:
        return PassageQuery(
            path=f"chapters/{book.id}.{chapter}",
            reference=f"{book.name} {chapter}",
        )
    if end > 0 and end >= start:
        return PassageQuery(
            path=f"passages/{book.id}.{chapter}.{start}-{book.id}.{chapter}.{end}",
            reference=f"{book.name} {chapter}:{start}-{end}",
        )
    return PassageQuery(
        path=f"passages/{book.id}.{chapter}.{start}",
        reference=f"{book.name} {chapter}:{start}",
    )


def normalize_text(raw: str) -> str:
    # Collapse runs of blank lines into a single line break.
    return re.sub(r"\n{2,}", "\n", (raw or "").strip())


class ScriptureClient:
    def __init__(
        self,
        *,
        api_key: str,
        bible_id: str,
        timeout_seconds: int = 15,
        base_url: str = API_BASE,
    ) -> None:
        self._api_key = api_key
        self._bible_id = bible_id
        self._timeout_seconds = timeout_seconds
        self._base_url = base_url.rstrip("/")

    @classmethod
    def from_settings(cls) -> "ScriptureClient":
        api_key = getattr(settings, "SCRIPTURE_API_KEY", "")
        if not api_key:
            raise ScriptureConfigurationError(
                "Set SCRIPTURE_API_KEY in the environment "
                "(request a key at https://scripture.api.bible)."
            )
        return cls(
            api_key=api_key,
            bible_id=settings.SCRIPTURE_BIBLE_ID,
            timeout_seconds=settings.SCRIPTURE_HTTP_TIMEOUT_SECONDS,
        )

    def _get(self, bible_id: str, path: str) -> dict:
        url = f"{self._base_url}/bibles/{bible_id}/{path}"
        try:
            resp = requests.get(
                url,
                headers={"api-key": self._api_key},
                params=TEXT_PARAMS,
                timeout=self._timeout_seconds,
            )
        except requests.RequestException as e:
            raise ScriptureLookupError(f"Failed to load scripture: {e}") from e

        if resp.status_code >= 400:
            message = None
            try:
                message = (resp.json().get("error") or {}).get("message")
            except (ValueError, AttributeError):
                pass
            logger.warning("Scripture lookup %s returned HTTP %s", path, resp.status_code)
            raise ScriptureLookupError(message or f"Failed to load scripture ({resp.status_code})")

        # requests' JSONDecodeError is a ValueError, which callers treat as bad input.
        try:
            payload = resp.json()
        except ValueError as e:
            logger.warning("Scripture lookup %s returned a body that is not JSON", path)
            raise ScriptureLookupError("Failed to load scripture (invalid response)") from e
        if not isinstance(payload, dict):
            raise ScriptureLookupError("Failed to load scripture (invalid response)")
        return payload

    def lookup(
        self,
        book_id: str,
        chapter: int,
        verse_from: Optional[int] = None,
        verse_to: Optional[int] = None,
        *,
        bible_id: Optional[str] = None,
    ) -> ScripturePassage:
        """
        Fetch one passage as plain text.

        Raises:
            ValueError: Invalid book/chapter/verse input (no request is made).
            ScriptureLookupError: The provider failed or returned an error.
        """
        query = build_query(book_id, chapter, verse_from, verse_to)
        bible = bible_id or self._bible_id
        payload = self._get(bible, query.path)

        data = payload.get("data")
        if not isinstance(data, dict):
            data = {}
        raw = data.get("content")
        if raw is None:
            passages = data.get("passages")
            first = passages[0] if isinstance(passages, list) and passages else None
            raw = first.get("content", "") if isinstance(first, dict) else ""

        text = normalize_text(str(raw))
        return ScripturePassage(
            reference=query.reference,
            text=text or EMPTY_PASSAGE_TEXT,
            version=bible_id,
        )

    def lookup_versions(
        self,
        book_id: str,
        chapter: int,
        verse_from: Optional[int] = None,
        verse_to: Optional[int] = None,
        *,
        bible_ids: Sequence[str],
    ) -> List[ScripturePassage]:
        """One passage per bible id, in the order given."""
        return [
            self.lookup(book_id, chapter, verse_from, verse_to, bible_id=b)
            for b in bible_ids
        ]
