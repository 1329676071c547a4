"""Scripture client with per-session memoization."""

import logging
from typing import Dict, List, Optional, Tuple, Union

import httpx

from bible_mirror.backend.sources import ApiBibleSource, GetBibleSource
from bible_mirror.config import Config
from bible_mirror.data.canon import all_books
from bible_mirror.data.types import (
    DEFAULT_VERSION,
    UNAVAILABLE_MARKER,
    BibleBook,
    BibleVerse,
)
from bible_mirror.errors import FetchError

logger = logging.getLogger(__name__)

MAX_SEARCH_RESULTS = 20

Source = Union[GetBibleSource, ApiBibleSource]

UNAVAILABLE_TEXT = (
    f"{UNAVAILABLE_MARKER}. Please check your internet connection "
    "or try a different version.]"
)


def unavailable_chapter(book_id: str, chapter: int) -> List[BibleVerse]:
    """Placeholder returned when a chapter cannot be fetched."""
    return [BibleVerse(book_id=book_id, chapter=chapter, verse=1, text=UNAVAILABLE_TEXT)]


class ScriptureClient:
    """Fetches books and chapters, caching every successful chapter.

    The cache is keyed by (version, book, chapter), never evicts and lives as
    long as the client. Failed chapters are not cached so a later request can
    succeed.
    """

    def __init__(
        self,
        source: Optional[Source] = None,
        *,
        timeout: float = 15.0,
        http: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.source = source or GetBibleSource()
        self._http = http or httpx.AsyncClient(timeout=timeout)
        self._books_cache: Dict[str, List[BibleBook]] = {}
        self._verses_cache: Dict[Tuple[str, str, int], List[BibleVerse]] = {}

    async def __aenter__(self) -> "ScriptureClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client and drop cached data."""
        await self._http.aclose()
        self._books_cache.clear()
        self._verses_cache.clear()

    def get_books(self, version: str = DEFAULT_VERSION) -> List[BibleBook]:
        """Get all books for a version.

        Book metadata is identical across the supported versions, so the
        bundled table is used instead of a remote lookup.
        """
        if version not in self._books_cache:
            self._books_cache[version] = all_books()
        return self._books_cache[version]

    def is_cached(self, book_id: str, chapter: int, version: str = DEFAULT_VERSION) -> bool:
        return (version, book_id, chapter) in self._verses_cache

    async def get_chapter(
        self, book_id: str, chapter: int, version: str = DEFAULT_VERSION
    ) -> List[BibleVerse]:
        """Get a chapter's verses.

        Never raises for network or API problems: a chapter that cannot be
        loaded comes back as a single verse whose text starts with
        UNAVAILABLE_MARKER.
        """
        key = (version, book_id, chapter)
        cached = self._verses_cache.get(key)
        if cached is not None:
            return cached

        try:
            verses = await self.source.fetch_chapter(self._http, book_id, chapter, version)
        except (httpx.HTTPError, FetchError) as exc:
            logger.error("Failed to fetch %s/%s %s: %s", version, book_id, chapter, exc)
            return unavailable_chapter(book_id, chapter)

        self._verses_cache[key] = verses
        return verses

    async def get_verse(
        self, book_id: str, chapter: int, verse: int, version: str = DEFAULT_VERSION
    ) -> Optional[BibleVerse]:
        """Get a single verse, or None if the chapter has no such verse."""
        for item in await self.get_chapter(book_id, chapter, version):
            if item.verse == verse and not item.unavailable:
                return item
        return None

    async def search_verses(
        self,
        query: str,
        version: str = DEFAULT_VERSION,
        limit: int = MAX_SEARCH_RESULTS,
    ) -> List[BibleVerse]:
        """Case-insensitive substring search, chapter by chapter in canon order.

        Stops fetching as soon as `limit` results have been collected.
        """
        needle = query.strip().lower()
        if not needle:
            return []

        results: List[BibleVerse] = []
        for book in self.get_books(version):
            for chapter in range(1, book.chapters + 1):
                if len(results) >= limit:
                    return results[:limit]
                verses = await self.get_chapter(book.id, chapter, version)
                results.extend(
                    v for v in verses if not v.unavailable and needle in v.text.lower()
                )
        return results[:limit]


def create_client(config: Config) -> ScriptureClient:
    """Build a client for the configured source.

    Raises:
        ConfigurationError: if API.Bible is selected without an API key
    """
    if config.source == "apibible":
        source: Source = ApiBibleSource(config.api_bible_url, config.require_api_key())
    else:
        source = GetBibleSource(config.getbible_url)
    return ScriptureClient(source, timeout=config.request_timeout)
