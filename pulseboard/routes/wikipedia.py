from __future__ import annotations

from fastapi import APIRouter, Query, Request, Response

from pulseboard.routes.common import serve
from pulseboard.services import wikipedia

router = APIRouter(prefix="/api")


@router.get("/wikipedia")
async def get_wikipedia(
    request: Request,
    response: Response,
    unique_id: str | None = Query(None, alias="uniqueId"),
    refresh: bool = Query(False),
    prevent_duplicates: bool = Query(True, alias="preventDuplicates"),
):
    # uniqueId is accepted for tile cache-busting only
    query = wikipedia.WikiQuery(prevent_duplicates=prevent_duplicates)
    return await serve(
        request, response, wikipedia.source, query, force_refresh=refresh
    )
