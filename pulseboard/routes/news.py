from __future__ import annotations

from fastapi import APIRouter, Query, Request, Response

from pulseboard.routes.common import serve
from pulseboard.services import news

router = APIRouter(prefix="/api")


@router.get("/news")
async def get_news(
    request: Request,
    response: Response,
    section: str | None = Query(None),
    prevent_duplicates: bool = Query(True, alias="preventDuplicates"),
    unique_id: str | None = Query(None, alias="uniqueId"),
    force_refresh: bool = Query(False, alias="forceRefresh"),
):
    # uniqueId only busts browser caches; variety comes from dedup
    ctx = request.app.state.dispatcher.context
    query = news.NewsQuery(
        section=news.resolve_section(section, ctx),
        prevent_duplicates=prevent_duplicates,
    )
    return await serve(
        request, response, news.source, query, force_refresh=force_refresh
    )
