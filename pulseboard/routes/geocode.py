from __future__ import annotations

from fastapi import APIRouter, Query, Request, Response
from fastapi.responses import JSONResponse

from pulseboard.routes.common import serve
from pulseboard.services import geocode

router = APIRouter(prefix="/api")


@router.get("/geocode")
async def get_geocode(
    request: Request,
    response: Response,
    lat: str | None = Query(None),
    lon: str | None = Query(None),
):
    if not lat or not lon:
        return JSONResponse({"error": "Missing coordinates"}, status_code=400)
    try:
        coords = geocode.Coordinates.parse(lat, lon)
    except ValueError:
        return JSONResponse(
            {"error": "Invalid coordinates", "coordinates": {"lat": lat, "lon": lon}},
            status_code=400,
        )
    return await serve(request, response, geocode.source, coords)
