from __future__ import annotations

from fastapi import APIRouter, Query, Request, Response

from pulseboard.routes.common import serve
from pulseboard.services import bitcoin

router = APIRouter(prefix="/api")


@router.get("/bitcoin")
async def get_bitcoin(
    request: Request,
    response: Response,
    force_refresh: bool = Query(False, alias="forceRefresh"),
):
    return await serve(request, response, bitcoin.source, force_refresh=force_refresh)
