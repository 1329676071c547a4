"""Scripture API backends."""

from bible_mirror.backend.client import (
    MAX_SEARCH_RESULTS,
    ScriptureClient,
    create_client,
    unavailable_chapter,
)
from bible_mirror.backend.pages import ChapterPage, load_page
from bible_mirror.backend.sources import ApiBibleSource, GetBibleSource

__all__ = [
    "MAX_SEARCH_RESULTS",
    "ScriptureClient",
    "create_client",
    "unavailable_chapter",
    "ChapterPage",
    "load_page",
    "ApiBibleSource",
    "GetBibleSource",
]
