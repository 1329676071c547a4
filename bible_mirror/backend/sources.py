"""HTTP scripture sources (GetBible and API.Bible)."""

import asyncio
import logging
from typing import Dict, List

import httpx

from bible_mirror.data.canon import api_bible_book_id, book_number
from bible_mirror.data.types import BibleVerse
from bible_mirror.errors import ConfigurationError, FetchError

logger = logging.getLogger(__name__)

# Version id -> API.Bible bible id
API_BIBLE_IDS: Dict[str, str] = {
    "kjv": "de4e12af7f28f599-02",
    "web": "9879dbb7cfe39e4d-04",
    "cns": "3e27b3e43e1df61d-01",
    "cus": "ccb9229763033d43-01",
}

_VERSE_CONTENT_PARAMS = {
    "content-type": "text",
    "include-notes": "false",
    "include-titles": "false",
    "include-chapter-numbers": "false",
    "include-verse-numbers": "false",
    "include-verse-spans": "false",
}


def _check(response: httpx.Response) -> None:
    if response.status_code != 200:
        raise FetchError(
            f"API returned {response.status_code}", status_code=response.status_code
        )


class GetBibleSource:
    """Chapters from the keyless GetBible v2 JSON API."""

    name = "getbible"

    def __init__(self, base_url: str = "https://api.getbible.net/v2") -> None:
        self.base_url = base_url.rstrip("/")

    def chapter_url(self, book_id: str, chapter: int, version: str) -> str:
        return f"{self.base_url}/{version}/{book_number(book_id)}/{chapter}.json"

    async def fetch_chapter(
        self, http: httpx.AsyncClient, book_id: str, chapter: int, version: str
    ) -> List[BibleVerse]:
        """Fetch one chapter, ordered by verse number.

        Raises:
            FetchError: on a non-success status or an unusable payload
            httpx.HTTPError: on transport failures
        """
        response = await http.get(
            self.chapter_url(book_id, chapter, version),
            headers={"Accept": "application/json"},
        )
        _check(response)

        try:
            raw = response.json()["verses"]
            verses = [
                BibleVerse(
                    book_id=book_id,
                    chapter=int(item["chapter"]),
                    verse=int(item["verse"]),
                    text=str(item["text"]).strip(),
                )
                for item in raw
            ]
        except (ValueError, KeyError, TypeError) as exc:
            raise FetchError(f"Malformed chapter payload: {exc}") from exc

        if not verses:
            raise FetchError("Chapter payload has no verses")
        verses.sort(key=lambda v: v.verse)
        return verses


class ApiBibleSource:
    """Chapters from API.Bible, which needs an API key."""

    name = "apibible"

    def __init__(self, base_url: str, api_key: str) -> None:
        if not api_key:
            raise ConfigurationError("Bible API key not configured")
        self.base_url = base_url.rstrip("/")
        self._headers = {"api-key": api_key}

    async def fetch_chapter(
        self, http: httpx.AsyncClient, book_id: str, chapter: int, version: str
    ) -> List[BibleVerse]:
        """Fetch the verse list of a chapter, then each verse's text."""
        bible_id = API_BIBLE_IDS.get(version)
        if not bible_id:
            raise FetchError(f"Unsupported version: {version}")

        chapter_id = f"{api_bible_book_id(book_id)}.{chapter}"
        response = await http.get(
            f"{self.base_url}/bibles/{bible_id}/chapters/{chapter_id}/verses",
            headers=self._headers,
        )
        _check(response)
        try:
            verse_ids = [item["id"] for item in response.json()["data"]]
        except (ValueError, KeyError, TypeError) as exc:
            raise FetchError(f"Malformed verse list: {exc}") from exc

        verses = await asyncio.gather(
            *(
                self._fetch_verse(http, bible_id, book_id, chapter, vid)
                for vid in verse_ids
            )
        )
        if not verses:
            raise FetchError("Chapter has no verses")
        return sorted(verses, key=lambda v: v.verse)

    async def _fetch_verse(
        self,
        http: httpx.AsyncClient,
        bible_id: str,
        book_id: str,
        chapter: int,
        api_verse_id: str,
    ) -> BibleVerse:
        # Ids look like "GEN.1.5"
        try:
            number = int(api_verse_id.split(".")[2])
        except (AttributeError, IndexError, ValueError) as exc:
            raise FetchError(f"Malformed verse id: {api_verse_id!r}") from exc

        response = await http.get(
            f"{self.base_url}/bibles/{bible_id}/verses/{api_verse_id}",
            headers=self._headers,
            params=_VERSE_CONTENT_PARAMS,
        )
        if response.status_code != 200:
            logger.warning("Verse %s returned %s", api_verse_id, response.status_code)
            return BibleVerse(book_id, chapter, number, "")
        try:
            content = (response.json().get("data") or {}).get("content") or ""
        except (ValueError, AttributeError) as exc:
            raise FetchError(f"Malformed verse payload for {api_verse_id}: {exc}") from exc
        return BibleVerse(book_id, chapter, number, str(content).strip())

    async def list_bibles(self, http: httpx.AsyncClient, language: str = "eng") -> List[dict]:
        """List the bibles available for a language."""
        response = await http.get(
            f"{self.base_url}/bibles",
            headers=self._headers,
            params={"language": language},
        )
        _check(response)
        try:
            return [
                {
                    "id": bible["id"],
                    "name": bible["name"],
                    "abbreviation": bible.get("abbreviation", ""),
                    "description": bible.get("description", ""),
                    "language": (bible.get("language") or {}).get("name", ""),
                }
                for bible in response.json()["data"]
            ]
        except (ValueError, KeyError, TypeError) as exc:
            raise FetchError(f"Malformed bible list: {exc}") from exc
