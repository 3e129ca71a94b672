from __future__ import annotations

from fastapi import APIRouter, Query, Request, Response

from pulseboard.routes.common import serve
from pulseboard.services import stocks

router = APIRouter(prefix="/api")


@router.get("/stocks")
async def get_stocks(
    request: Request,
    response: Response,
    force_refresh: bool = Query(False, alias="forceRefresh"),
):
    return await serve(request, response, stocks.source, force_refresh=force_refresh)
