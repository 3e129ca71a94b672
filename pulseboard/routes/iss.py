from __future__ import annotations

from fastapi import APIRouter, Request, Response

from pulseboard.routes.common import serve
from pulseboard.services import iss

router = APIRouter(prefix="/api")


@router.get("/iss")
async def get_iss(request: Request, response: Response):
    return await serve(request, response, iss.source)
