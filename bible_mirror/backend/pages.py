"""Chapter pages: primary text plus an optional second-language column."""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence, Tuple

from bible_mirror.data.types import BibleVerse, version_language

if TYPE_CHECKING:
    from bible_mirror.backend.client import ScriptureClient

DEFAULT_VERSION_FOR = {"en": "kjv", "zh": "cus"}


def choose_versions(version: str, languages: Sequence[str]) -> Tuple[str, str, Optional[str]]:
    """Pick the versions to load for a language selection.

    Returns:
        Tuple of (primary version, primary language, secondary version or None)
    """
    selected = set(languages)
    primary = version
    primary_language = version_language(version)

    # A single selected language overrides a version in the other language
    if selected == {"zh"} and primary_language == "en":
        primary, primary_language = DEFAULT_VERSION_FOR["zh"], "zh"
    elif selected == {"en"} and primary_language == "zh":
        primary, primary_language = DEFAULT_VERSION_FOR["en"], "en"

    secondary = None
    if selected == {"en", "zh"}:
        secondary = DEFAULT_VERSION_FOR["en" if primary_language == "zh" else "zh"]
    return primary, primary_language, secondary


@dataclass
class ChapterPage:
    """Everything a display surface needs to render one chapter."""

    book_id: str
    chapter: int
    verses: List[BibleVerse]
    languages: Tuple[str, ...]
    primary_language: str = "en"
    primary_version: str = "kjv"
    # Verse id -> text in the other language (dual-language mode only)
    translations: Dict[str, str] = field(default_factory=dict)

    @property
    def dual(self) -> bool:
        return len(self.languages) == 2

    @property
    def unavailable(self) -> bool:
        return bool(self.verses) and self.verses[0].unavailable

    def texts(self, verse: BibleVerse) -> Tuple[str, str]:
        """Return (chinese, english) text of a verse, falling back to the primary."""
        other = self.translations.get(verse.id, verse.text)
        if self.primary_language == "zh":
            return verse.text, other
        return other, verse.text

    def text(self, verse: BibleVerse) -> str:
        """Text shown in single-language mode."""
        chinese, english = self.texts(verse)
        if "zh" in self.languages and "en" not in self.languages:
            return chinese
        return english

    def rows(self) -> List[Tuple[BibleVerse, str, str]]:
        """Return (verse, chinese, english) for every verse."""
        return [(v, *self.texts(v)) for v in self.verses]


async def load_page(
    client: "ScriptureClient",
    book_id: str,
    chapter: int,
    version: str,
    languages: Sequence[str],
) -> ChapterPage:
    """Load the primary chapter, then the second language if both are selected.

    A failed second-language load leaves the translation map empty and does
    not affect the primary text.
    """
    primary, primary_language, secondary = choose_versions(version, languages)
    verses = await client.get_chapter(book_id, chapter, primary)

    translations: Dict[str, str] = {}
    if secondary:
        other = await client.get_chapter(book_id, chapter, secondary)
        translations = {v.id: v.text for v in other if not v.unavailable}

    return ChapterPage(
        book_id=book_id,
        chapter=chapter,
        verses=verses,
        languages=tuple(languages),
        primary_language=primary_language,
        primary_version=primary,
        translations=translations,
    )
