"""Tests for the scripture client and HTTP sources."""

import asyncio

import httpx
import pytest

from bible_mirror.backend import (
    ApiBibleSource,
    GetBibleSource,
    ScriptureClient,
    create_client,
)
from bible_mirror.backend.sources import API_BIBLE_IDS
from bible_mirror.config import Config
from bible_mirror.data.types import UNAVAILABLE_MARKER
from bible_mirror.errors import ConfigurationError

BASE = "https://getbible.test/v2"


def chapter_payload(chapter, texts):
    return {
        "verses": [
            {"chapter": chapter, "verse": number, "text": text}
            for number, text in texts.items()
        ]
    }


class Recorder:
    """MockTransport handler that records requested paths."""

    def __init__(self, respond):
        self.respond = respond
        self.paths = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.paths.append(request.url.path)
        return self.respond(request)


def chapter_from(request: httpx.Request) -> int:
    """Chapter number of a GetBible chapter URL."""
    return int(request.url.path.rsplit("/", 1)[1].split(".")[0])


def make_client(handler, source=None):
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ScriptureClient(source or GetBibleSource(BASE), http=http)


def run(client, coro_factory):
    async def scenario():
        async with client:
            return await coro_factory(client)

    return asyncio.run(scenario())


class TestGetChapter:
    """Test chapter fetching through GetBible."""

    def test_fetch_parses_and_sorts(self):
        recorder = Recorder(
            lambda request: httpx.Response(
                200, json=chapter_payload(1, {2: " And the earth ", 1: "In the beginning"})
            )
        )
        client = make_client(recorder)
        verses = run(client, lambda c: c.get_chapter("GEN", 1, "kjv"))

        assert recorder.paths == ["/v2/kjv/1/1.json"]
        assert [v.verse for v in verses] == [1, 2]
        assert verses[1].text == "And the earth"
        assert verses[0].id == "GEN-1-1"

    def test_book_number_in_url(self):
        recorder = Recorder(lambda request: httpx.Response(200, json=chapter_payload(3, {16: "For God"})))
        client = make_client(recorder)
        run(client, lambda c: c.get_chapter("JHN", 3, "web"))
        assert recorder.paths == ["/v2/web/43/3.json"]

    def test_cached_after_first_fetch(self):
        recorder = Recorder(lambda request: httpx.Response(200, json=chapter_payload(1, {1: "text"})))
        client = make_client(recorder)

        async def twice(c):
            first = await c.get_chapter("GEN", 1, "kjv")
            second = await c.get_chapter("GEN", 1, "kjv")
            return first, second, c.is_cached("GEN", 1, "kjv")

        first, second, cached = run(client, twice)
        assert first == second
        assert cached
        assert len(recorder.paths) == 1

    def test_cache_is_per_version(self):
        recorder = Recorder(lambda request: httpx.Response(200, json=chapter_payload(1, {1: "text"})))
        client = make_client(recorder)

        async def both(c):
            await c.get_chapter("GEN", 1, "kjv")
            await c.get_chapter("GEN", 1, "cus")

        run(client, both)
        assert recorder.paths == ["/v2/kjv/1/1.json", "/v2/cus/1/1.json"]

    def test_error_status_gives_sentinel_not_cached(self):
        recorder = Recorder(lambda request: httpx.Response(500))
        client = make_client(recorder)

        async def twice(c):
            first = await c.get_chapter("GEN", 1, "kjv")
            await c.get_chapter("GEN", 1, "kjv")
            return first, c.is_cached("GEN", 1, "kjv")

        verses, cached = run(client, twice)
        assert len(verses) == 1
        assert verses[0].verse == 1
        assert verses[0].text.startswith(UNAVAILABLE_MARKER)
        assert verses[0].unavailable
        assert not cached
        assert len(recorder.paths) == 2

    def test_malformed_payload_gives_sentinel(self):
        client = make_client(lambda request: httpx.Response(200, json={"nope": []}))
        verses = run(client, lambda c: c.get_chapter("GEN", 1, "kjv"))
        assert verses[0].unavailable

    def test_transport_error_gives_sentinel(self):
        def fail(request):
            raise httpx.ConnectError("offline", request=request)

        client = make_client(fail)
        verses = run(client, lambda c: c.get_chapter("GEN", 1, "kjv"))
        assert verses[0].unavailable

    def test_get_verse(self):
        client = make_client(
            lambda request: httpx.Response(200, json=chapter_payload(1, {1: "a", 2: "b"}))
        )

        async def lookup(c):
            return await c.get_verse("GEN", 1, 2), await c.get_verse("GEN", 1, 9)

        found, missing = run(client, lookup)
        assert found.text == "b"
        assert missing is None


class TestGetBooks:
    """Test the bundled book list."""

    def test_books_are_bundled(self):
        client = make_client(lambda request: httpx.Response(404))
        books = client.get_books("kjv")
        assert len(books) == 66
        assert books[0].id == "GEN"
        assert client.get_books("kjv") is books
        asyncio.run(client.aclose())


class TestSearch:
    """Test verse text search."""

    def test_search_stops_at_limit(self):
        recorder = Recorder(
            lambda request: httpx.Response(
                200, json=chapter_payload(chapter_from(request), {1: "Let there be Light"})
            )
        )
        client = make_client(recorder)
        results = run(client, lambda c: c.search_verses("light", "kjv", limit=3))
        assert len(results) == 3
        assert len(recorder.paths) == 3
        assert [(v.book_id, v.chapter) for v in results] == [("GEN", 1), ("GEN", 2), ("GEN", 3)]

    def test_empty_query(self):
        recorder = Recorder(lambda request: httpx.Response(200, json=chapter_payload(1, {1: "x"})))
        client = make_client(recorder)
        assert run(client, lambda c: c.search_verses("  ")) == []
        assert recorder.paths == []

    def test_search_skips_unavailable_chapters(self):
        def respond(request):
            if request.url.path == "/v2/kjv/1/1.json":
                return httpx.Response(500)
            return httpx.Response(
                200, json=chapter_payload(chapter_from(request), {1: "unable to stand"})
            )

        client = make_client(respond)
        results = run(client, lambda c: c.search_verses("unable", "kjv", limit=2))
        assert [(v.book_id, v.chapter) for v in results] == [("GEN", 2), ("GEN", 3)]


class TestApiBibleSource:
    """Test the API.Bible source."""

    def test_requires_api_key(self):
        with pytest.raises(ConfigurationError):
            ApiBibleSource("https://api.test/v1", "")

    def test_create_client_without_key(self, monkeypatch):
        monkeypatch.delenv("BIBLE_API_KEY", raising=False)
        with pytest.raises(ConfigurationError):
            create_client(Config(source="apibible"))

    def test_fetch_chapter(self):
        bible_id = API_BIBLE_IDS["kjv"]
        keys = []

        def respond(request):
            keys.append(request.headers.get("api-key"))
            path = request.url.path
            if path == f"/v1/bibles/{bible_id}/chapters/SNG.2/verses":
                return httpx.Response(200, json={"data": [{"id": "SNG.2.2"}, {"id": "SNG.2.1"}]})
            if path == f"/v1/bibles/{bible_id}/verses/SNG.2.1":
                return httpx.Response(200, json={"data": {"content": " I am the rose "}})
            return httpx.Response(404)

        source = ApiBibleSource("https://api.test/v1", "secret")
        client = make_client(respond, source)
        verses = run(client, lambda c: c.get_chapter("SOS", 2, "kjv"))

        assert [v.verse for v in verses] == [1, 2]
        assert verses[0].text == "I am the rose"
        assert verses[1].text == ""
        assert set(keys) == {"secret"}

    def test_non_json_verse_gives_sentinel(self):
        bible_id = API_BIBLE_IDS["kjv"]

        def respond(request):
            if request.url.path.endswith("/chapters/GEN.1/verses"):
                return httpx.Response(200, json={"data": [{"id": "GEN.1.1"}]})
            if request.url.path == f"/v1/bibles/{bible_id}/verses/GEN.1.1":
                return httpx.Response(200, text="<html>gateway</html>")
            return httpx.Response(404)

        client = make_client(respond, ApiBibleSource("https://api.test/v1", "secret"))
        verses = run(client, lambda c: c.get_chapter("GEN", 1, "kjv"))
        assert len(verses) == 1
        assert verses[0].unavailable

    @pytest.mark.parametrize(
        "verse_ids, verse_json",
        [
            (["GEN.1.1"], {"data": ["not", "a", "dict"]}),
            (["GEN.1"], {"data": {"content": "text"}}),
            (["GEN.1.x"], {"data": {"content": "text"}}),
        ],
    )
    def test_malformed_verse_gives_sentinel(self, verse_ids, verse_json):
        def respond(request):
            if request.url.path.endswith("/chapters/GEN.1/verses"):
                return httpx.Response(200, json={"data": [{"id": vid} for vid in verse_ids]})
            return httpx.Response(200, json=verse_json)

        client = make_client(respond, ApiBibleSource("https://api.test/v1", "secret"))
        verses = run(client, lambda c: c.get_chapter("GEN", 1, "kjv"))
        assert verses[0].unavailable

    def test_unsupported_version_gives_sentinel(self):
        source = ApiBibleSource("https://api.test/v1", "secret")
        client = make_client(lambda request: httpx.Response(200, json={"data": []}), source)
        verses = run(client, lambda c: c.get_chapter("GEN", 1, "basicenglish"))
        assert verses[0].unavailable

    def test_list_bibles(self):
        def respond(request):
            assert request.url.params["language"] == "zho"
            return httpx.Response(
                200,
                json={"data": [{"id": "b1", "name": "CUV", "language": {"name": "Chinese"}}]},
            )

        source = ApiBibleSource("https://api.test/v1", "secret")
        http = httpx.AsyncClient(transport=httpx.MockTransport(respond))

        async def scenario():
            async with http:
                return await source.list_bibles(http, "zho")

        bibles = asyncio.run(scenario())
        assert bibles == [
            {"id": "b1", "name": "CUV", "abbreviation": "", "description": "", "language": "Chinese"}
        ]
