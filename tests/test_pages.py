"""Tests for chapter pages and language selection."""

import asyncio

import pytest

from bible_mirror.backend.client import unavailable_chapter
from bible_mirror.backend.pages import choose_versions, load_page
from bible_mirror.data.types import BibleVerse


class FakeClient:
    """Returns canned chapters per version; missing versions are unavailable."""

    def __init__(self, texts):
        self.texts = texts
        self.calls = []

    async def get_chapter(self, book_id, chapter, version="kjv"):
        self.calls.append(version)
        if version not in self.texts:
            return unavailable_chapter(book_id, chapter)
        return [
            BibleVerse(book_id, chapter, number, text)
            for number, text in enumerate(self.texts[version], start=1)
        ]


class TestChooseVersions:
    """Test which versions a language selection loads."""

    @pytest.mark.parametrize(
        "version, languages, expected",
        [
            ("kjv", ["en"], ("kjv", "en", None)),
            ("web", ["en"], ("web", "en", None)),
            ("kjv", ["zh"], ("cus", "zh", None)),
            ("cns", ["zh"], ("cns", "zh", None)),
            ("cus", ["en"], ("kjv", "en", None)),
            ("kjv", ["en", "zh"], ("kjv", "en", "cus")),
            ("cns", ["en", "zh"], ("cns", "zh", "kjv")),
        ],
    )
    def test_choose(self, version, languages, expected):
        assert choose_versions(version, languages) == expected


class TestLoadPage:
    """Test page loading."""

    def test_single_language(self):
        client = FakeClient({"kjv": ["In the beginning"]})
        page = asyncio.run(load_page(client, "GEN", 1, "kjv", ("en",)))
        assert client.calls == ["kjv"]
        assert not page.dual
        assert page.text(page.verses[0]) == "In the beginning"

    def test_chinese_only_with_english_version(self):
        client = FakeClient({"cus": ["起初"]})
        page = asyncio.run(load_page(client, "GEN", 1, "kjv", ("zh",)))
        assert client.calls == ["cus"]
        assert page.primary_language == "zh"
        assert page.text(page.verses[0]) == "起初"

    def test_dual_language_rows(self):
        client = FakeClient({"kjv": ["In the beginning", "And the earth"], "cus": ["起初"]})
        page = asyncio.run(load_page(client, "GEN", 1, "kjv", ("en", "zh")))
        assert client.calls == ["kjv", "cus"]
        assert page.dual
        rows = [(v.verse, zh, en) for v, zh, en in page.rows()]
        # Verse 2 has no translation and falls back to the primary text
        assert rows == [(1, "起初", "In the beginning"), (2, "And the earth", "And the earth")]

    def test_dual_with_chinese_primary(self):
        client = FakeClient({"cns": ["起初"], "kjv": ["In the beginning"]})
        page = asyncio.run(load_page(client, "GEN", 1, "cns", ("en", "zh")))
        assert client.calls == ["cns", "kjv"]
        assert page.texts(page.verses[0]) == ("起初", "In the beginning")

    def test_secondary_failure_keeps_primary(self):
        client = FakeClient({"kjv": ["In the beginning"]})
        page = asyncio.run(load_page(client, "GEN", 1, "kjv", ("en", "zh")))
        assert page.translations == {}
        assert not page.unavailable
        assert page.verses[0].text == "In the beginning"

    def test_primary_failure(self):
        page = asyncio.run(load_page(FakeClient({}), "GEN", 1, "kjv", ("en",)))
        assert page.unavailable
