"""Tests for the NYT headline source."""

from __future__ import annotations

import pytest

from pulseboard.cache import CacheStore
from pulseboard.config import settings
from pulseboard.engine import Dispatcher
from pulseboard.services import news
from tests.fakes import FakeClock, FakeUpstream


def top_stories(section: str, count: int, with_images: bool = True) -> dict:
    return {
        "status": "OK",
        "results": [
            {
                "title": f"{section} story {i}",
                "abstract": f"About {section} {i}",
                "url": f"https://www.nytimes.com/{section}/{i}.html",
                "multimedia": [{"url": f"https://static01.nyt.com/{section}/{i}.jpg"}]
                if with_images
                else [],
            }
            for i in range(count)
        ],
    }


def script_all_sections(upstream: FakeUpstream, count: int = 4) -> None:
    for section in news.SECTIONS:
        upstream.on(news.TOP_STORIES_URL.format(section=section), top_stories(section, count))


class TestHelpers:
    def test_format_section_name(self) -> None:
        assert news.format_section_name("t-magazine") == "T Magazine"
        assert news.format_section_name("science") == "Science"

    def test_resolve_section_keeps_known(self, dispatcher: Dispatcher) -> None:
        assert news.resolve_section("science", dispatcher.context) == "science"

    def test_resolve_section_randomizes_unknown(self, dispatcher: Dispatcher) -> None:
        assert news.resolve_section("gossip", dispatcher.context) in news.SECTIONS
        assert news.resolve_section(None, dispatcher.context) in news.SECTIONS


class TestNewsSource:
    @pytest.mark.asyncio
    async def test_live_headline(self, dispatcher: Dispatcher, upstream: FakeUpstream) -> None:
        script_all_sections(upstream)

        result = await dispatcher.dispatch(news.source, news.NewsQuery("science"))

        payload = result.payload
        assert result.origin == "live"
        assert payload["section"] == "science"
        assert payload["sectionName"] == "Science"
        assert payload["source"] == "The New York Times"
        assert payload["photo_url"].endswith(".jpg")
        assert payload["link"].startswith("https://www.nytimes.com/")
        # Requested section plus one extra, fetched together
        assert len(upstream.calls) == 2
        assert upstream.calls[0].url.params["api-key"] == "test-nyt-key"

    @pytest.mark.asyncio
    async def test_articles_without_images_are_skipped(
        self, dispatcher: Dispatcher, upstream: FakeUpstream
    ) -> None:
        for section in news.SECTIONS:
            upstream.on(
                news.TOP_STORIES_URL.format(section=section),
                top_stories(section, 3, with_images=False),
            )

        result = await dispatcher.dispatch(news.source, news.NewsQuery("arts"))

        assert result.origin == "fallback"

    @pytest.mark.asyncio
    async def test_one_failing_section_is_tolerated(
        self,
        dispatcher: Dispatcher,
        upstream: FakeUpstream,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        # Pin the extra section so only the requested one fails
        monkeypatch.setattr(news, "SECTIONS", ("world",))
        upstream.on(news.TOP_STORIES_URL.format(section="world"), top_stories("world", 3))
        upstream.on(news.TOP_STORIES_URL.format(section="books"), 500)

        result = await dispatcher.dispatch(news.source, news.NewsQuery("books"))

        assert result.origin == "live"
        assert result.payload["section"] == "books"
        assert "/world/" in result.payload["link"]

    @pytest.mark.asyncio
    async def test_cached_pool_serves_distinct_articles(
        self, dispatcher: Dispatcher, upstream: FakeUpstream
    ) -> None:
        script_all_sections(upstream, count=6)

        links = []
        for _ in range(6):
            result = await dispatcher.dispatch(news.source, news.NewsQuery("world"))
            links.append(result.payload["link"])

        # One upstream round trip, then picks from the cached pool
        assert len(upstream.calls) == 2
        assert all(a != b for a, b in zip(links, links[1:]))

    @pytest.mark.asyncio
    async def test_cache_window(
        self, dispatcher: Dispatcher, upstream: FakeUpstream, clock: FakeClock
    ) -> None:
        script_all_sections(upstream)

        await dispatcher.dispatch(news.source, news.NewsQuery("world"))
        clock.advance(settings.CACHE_NEWS + 1)
        result = await dispatcher.dispatch(news.source, news.NewsQuery("world"))

        assert result.origin == "live"
        assert len(upstream.calls) == 4

    @pytest.mark.asyncio
    async def test_fallback_headline_keeps_section(
        self, dispatcher: Dispatcher, upstream: FakeUpstream, cache: CacheStore
    ) -> None:
        result = await dispatcher.dispatch(news.source, news.NewsQuery("travel"))

        assert result.origin == "fallback"
        assert result.payload["section"] == "travel"
        assert result.payload["sectionName"] == "Travel"
        assert result.payload["headline"] in {h["headline"] for h in news.CANNED_HEADLINES}
        assert cache.get("news:travel") is None

    @pytest.mark.asyncio
    async def test_fallback_never_repeats_back_to_back(
        self, dispatcher: Dispatcher, upstream: FakeUpstream
    ) -> None:
        headlines = []
        for _ in range(12):
            result = await dispatcher.dispatch(news.source, news.NewsQuery("us"))
            headlines.append(result.payload["headline"])
        assert all(a != b for a, b in zip(headlines, headlines[1:]))

    @pytest.mark.asyncio
    async def test_no_key_skips_upstream(
        self,
        dispatcher: Dispatcher,
        upstream: FakeUpstream,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setattr(settings, "NYT_API_KEY", "")
        script_all_sections(upstream)

        result = await dispatcher.dispatch(news.source, news.NewsQuery("us"))

        assert result.origin == "fallback"
        assert upstream.calls == []

    @pytest.mark.asyncio
    async def test_live_and_fallback_share_schema(
        self, dispatcher: Dispatcher, upstream: FakeUpstream
    ) -> None:
        synthetic = await dispatcher.dispatch(news.source, news.NewsQuery("us"))
        script_all_sections(upstream)
        live = await dispatcher.dispatch(news.source, news.NewsQuery("us"))
        assert live.origin == "live"
        assert set(live.payload) == set(synthetic.payload)
