"""NYT Top Stories headlines with photos.

Each refresh pulls the requested section plus one random extra section
concurrently and caches the shuffled pool of illustrated articles per
section.  Every request then picks one article from the cached pool,
skipping recently shown ones when duplicates are to be avoided.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

import httpx

from pulseboard import schemas
from pulseboard.config import settings
from pulseboard.engine import Context, Provider, Source
from pulseboard.errors import ProviderMalformed
from pulseboard.fallback import pick_fresh
from pulseboard.services.http import get_json

log = logging.getLogger(__name__)

TOP_STORIES_URL = "https://api.nytimes.com/svc/topstories/v2/{section}.json"
SOURCE_NAME = "The New York Times"

SECTIONS = (
    "arts", "automobiles", "books", "business", "fashion", "food", "health",
    "home", "insider", "magazine", "movies", "nyregion", "obituaries",
    "opinion", "politics", "realestate", "science", "sports", "sundayreview",
    "technology", "theater", "t-magazine", "travel", "upshot", "us", "world",
)

CANNED_HEADLINES = (
    {
        "headline": "Global climate conference proposes new emissions targets",
        "photo_url": "https://images.unsplash.com/photo-1611270629569-8b357cb88da9?q=80&w=1000&auto=format&fit=crop",
        "link": "https://www.nytimes.com/",
        "snippet": "World leaders gathered to discuss new climate initiatives.",
    },
    {
        "headline": "Researchers discover promising treatment for rare disease",
        "photo_url": "https://images.unsplash.com/photo-1576086213369-97a306d36557?q=80&w=1000&auto=format&fit=crop",
        "link": "https://www.nytimes.com/section/health",
        "snippet": "New study shows potential breakthrough for patients.",
    },
    {
        "headline": "Space agency announces plans for new lunar mission",
        "photo_url": "https://images.unsplash.com/photo-1454789548928-9efd52dc4031?q=80&w=1000&auto=format&fit=crop",
        "link": "https://www.nytimes.com/section/science",
        "snippet": "Mission expected to launch within the next five years.",
    },
    {
        "headline": "Tech giant unveils innovative sustainable energy solution",
        "photo_url": "https://images.unsplash.com/photo-1508514177221-188b1cf16e9d?q=80&w=1000&auto=format&fit=crop",
        "link": "https://www.nytimes.com/section/technology",
        "snippet": "New technology could reduce carbon footprint by 30%.",
    },
    {
        "headline": "International summit addresses economic cooperation",
        "photo_url": "https://images.unsplash.com/photo-1551836022-d5d88e9218df?q=80&w=1000&auto=format&fit=crop",
        "link": "https://www.nytimes.com/section/business",
        "snippet": "Leaders agree on framework for future trade relations.",
    },
    {
        "headline": "Breakthrough in material science leads to stronger, lighter composites",
        "photo_url": "https://images.unsplash.com/photo-1507413245164-6160d8298b31?q=80&w=1000&auto=format&fit=crop",
        "link": "https://www.nytimes.com/section/science",
        "snippet": "New materials could revolutionize aerospace industry.",
    },
)


@dataclass(frozen=True)
class NewsQuery:
    section: str
    prevent_duplicates: bool = True


def format_section_name(section: str) -> str:
    """Title-case a section slug: ``t-magazine`` -> ``T Magazine``."""
    return " ".join(word[:1].upper() + word[1:] for word in section.split("-"))


def resolve_section(section: str | None, ctx: Context) -> str:
    if section in SECTIONS:
        return section
    return ctx.rng.choice(SECTIONS)


def _illustrated(data: dict) -> list[dict]:
    """Normalize results that carry at least one image."""
    articles = []
    for item in data.get("results") or []:
        media = item.get("multimedia") or []
        if not media or not item.get("title") or not item.get("url"):
            continue
        articles.append(
            {
                "headline": item["title"],
                "photo_url": media[0].get("url"),
                "link": item["url"],
                "snippet": item.get("abstract") or None,
            }
        )
    return articles


async def _section_articles(client: httpx.AsyncClient, section: str) -> list[dict]:
    data = await get_json(
        client,
        TOP_STORIES_URL.format(section=section),
        params={"api-key": settings.NYT_API_KEY},
    )
    if not isinstance(data, dict):
        raise ProviderMalformed(f"{section}: not an object")
    return _illustrated(data)


async def fetch_top_stories(
    client: httpx.AsyncClient, query: NewsQuery, ctx: Context
) -> list[dict]:
    extra = ctx.rng.choice(SECTIONS)
    results = await asyncio.gather(
        _section_articles(client, query.section),
        _section_articles(client, extra),
        return_exceptions=True,
    )
    articles: list[dict] = []
    for section, result in zip((query.section, extra), results):
        if isinstance(result, BaseException):
            if not isinstance(result, Exception):
                raise result
            log.warning("Top stories for %s failed: %s", section, result)
            continue
        articles.extend(result)

    if not articles:
        raise ProviderMalformed("no articles with images found")

    ctx.rng.shuffle(articles)
    log.info(
        "Loaded %d articles for %s (extra section %s)",
        len(articles),
        query.section,
        extra,
    )
    return articles


def _headline(article: dict, section: str) -> dict:
    return {
        "section": section,
        "headline": article["headline"],
        "source": SOURCE_NAME,
        "sectionName": format_section_name(section),
        "photo_url": article.get("photo_url"),
        "link": article["link"],
        "snippet": article.get("snippet"),
    }


def pick_article(articles: list[dict], query: NewsQuery, ctx: Context) -> dict:
    if query.prevent_duplicates:
        article = pick_fresh(
            articles, ctx.rng, ctx.cache.recent("news"), key=lambda a: a["link"]
        )
    else:
        article = ctx.rng.choice(articles)
    return _headline(article, query.section)


def canned(query: NewsQuery, ctx: Context) -> dict:
    article = pick_fresh(
        CANNED_HEADLINES,
        ctx.rng,
        ctx.cache.recent("news-fallback"),
        key=lambda a: a["photo_url"],
    )
    return _headline(article, query.section)


source: Source[NewsQuery] = Source(
    name="news",
    providers=(
        Provider(
            "NYT Top Stories",
            fetch_top_stories,
            enabled=lambda: bool(settings.NYT_API_KEY),
        ),
    ),
    schema=schemas.headline,
    payload_schema=schemas.news_articles,
    cache_key=lambda query: f"news:{query.section}",
    max_age=lambda: settings.CACHE_NEWS,
    present=pick_article,
    fallback=canned,
)
