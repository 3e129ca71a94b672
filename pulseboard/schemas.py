"""Response shapes served to the dashboard tiles.

Live, cached and synthetic payloads for a source all pass through the same
model, so tiles never branch on where the data came from.  Field names
follow what the front end already reads (camelCase included).
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class PriceQuote(BaseModel):
    price: float = Field(gt=0)
    changePercent24h: float
    source: str


class Earthquake(BaseModel):
    magnitude: float
    location: str
    time: str
    timeAgo: str
    url: str


class IssCoordinates(BaseModel):
    latitude: str
    longitude: str


class IssPosition(BaseModel):
    message: str
    timestamp: int
    iss_position: IssCoordinates


class NewsArticle(BaseModel):
    """One cached top-story, before a section label is attached."""

    headline: str
    photo_url: str | None = None
    link: str
    snippet: str | None = None


class Headline(BaseModel):
    section: str
    headline: str
    source: str
    sectionName: str
    photo_url: str | None = None
    link: str
    snippet: str | None = None


class IndexQuote(BaseModel):
    symbol: str
    name: str
    change: float
    changePercent: float


class Conditions(BaseModel):
    city: str
    country: str
    temperature: float
    condition: str
    humidity: float
    windSpeed: float


class WikiEdit(BaseModel):
    title: str
    link: str
    timestamp: str


class GeocodeResult(BaseModel):
    """Provider passthrough; only ``display_name`` is required."""

    model_config = ConfigDict(extra="allow")

    display_name: str


price_quote = TypeAdapter(PriceQuote)
earthquake = TypeAdapter(Earthquake)
iss_position = TypeAdapter(IssPosition)
news_articles = TypeAdapter(list[NewsArticle])
headline = TypeAdapter(Headline)
index_quotes = TypeAdapter(list[IndexQuote])
conditions = TypeAdapter(Conditions)
wiki_edits = TypeAdapter(list[WikiEdit])
wiki_edit = TypeAdapter(WikiEdit)
geocode_result = TypeAdapter(GeocodeResult)
