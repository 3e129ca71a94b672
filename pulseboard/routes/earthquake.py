from __future__ import annotations

from fastapi import APIRouter, Query, Request, Response

from pulseboard.routes.common import serve
from pulseboard.services import earthquake

router = APIRouter(prefix="/api")


@router.get("/earthquake")
async def get_earthquake(
    request: Request,
    response: Response,
    unique_id: str | None = Query(None, alias="uniqueId"),
):
    # Tiles send a uniqueId when they want a different quake than last time
    return await serve(
        request, response, earthquake.source, force_refresh=unique_id is not None
    )
