"""Recently edited English Wikipedia articles."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from urllib.parse import quote

import httpx

from pulseboard import schemas
from pulseboard.config import settings
from pulseboard.engine import Context, Provider, Source
from pulseboard.errors import ProviderMalformed
from pulseboard.fallback import pick_fresh
from pulseboard.services.http import get_json, require

log = logging.getLogger(__name__)

API_URL = "https://en.wikipedia.org/w/api.php"
ARTICLE_URL = "https://en.wikipedia.org/wiki/"

RECENT_CHANGES_PARAMS = {
    "action": "query",
    "list": "recentchanges",
    "rcnamespace": "0",
    "rclimit": "50",
    "rctype": "edit",
    "rcshow": "!minor|!bot|!redirect",
    "rcprop": "title|timestamp",
    "format": "json",
}

_MONTHS = (
    "January|February|March|April|May|June|July|"
    "August|September|October|November|December"
)
# Titles that make for a dull tile
BORING_TITLES = (
    re.compile(r"^\d+$"),
    re.compile(rf"^\d{{1,2}} ({_MONTHS})"),
    re.compile(r"^List of"),
    re.compile(r"\(disambiguation\)"),
    re.compile(r"^(Draft|Wikipedia|Template|Category|Portal|File|Help|Module):"),
)

CANNED_TOPICS = (
    "Artificial intelligence",
    "Mars rover",
    "Quantum computing",
    "Solar System",
    "Black hole",
    "Climate change",
)


@dataclass(frozen=True)
class WikiQuery:
    prevent_duplicates: bool = True


def article_link(title: str) -> str:
    return ARTICLE_URL + quote(title.replace(" ", "_"), safe="()!'*")


def is_interesting(title: str) -> bool:
    return not any(pattern.search(title) for pattern in BORING_TITLES)


async def fetch_recent_changes(
    client: httpx.AsyncClient, query: WikiQuery, ctx: Context
) -> list[dict]:
    data = await get_json(client, API_URL, params=RECENT_CHANGES_PARAMS)
    changes = require(data, "query", "recentchanges")
    edits = [
        {
            "title": change["title"],
            "link": article_link(change["title"]),
            "timestamp": change.get("timestamp", ""),
        }
        for change in changes
        if change.get("title") and is_interesting(change["title"])
    ]
    if not edits:
        raise ProviderMalformed("no interesting recent changes")
    return edits


def pick_edit(edits: list[dict], query: WikiQuery, ctx: Context) -> dict:
    if query.prevent_duplicates:
        return pick_fresh(
            edits, ctx.rng, ctx.cache.recent("wikipedia"), key=lambda e: e["title"]
        )
    return ctx.rng.choice(edits)


def canned(query: WikiQuery, ctx: Context) -> dict:
    title = pick_fresh(CANNED_TOPICS, ctx.rng, ctx.cache.recent("wikipedia-fallback"))
    stamp = datetime.fromtimestamp(ctx.now(), tz=timezone.utc)
    return {
        "title": title,
        "link": article_link(title),
        "timestamp": stamp.isoformat().replace("+00:00", "Z"),
    }


source: Source[WikiQuery] = Source(
    name="wikipedia",
    providers=(Provider("MediaWiki recentchanges", fetch_recent_changes),),
    schema=schemas.wiki_edit,
    payload_schema=schemas.wiki_edits,
    cache_key=lambda query: "wikipedia",
    max_age=lambda: settings.CACHE_WIKIPEDIA,
    present=pick_edit,
    fallback=canned,
)
