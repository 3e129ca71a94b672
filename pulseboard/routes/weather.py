from __future__ import annotations

from fastapi import APIRouter, Query, Request, Response

from pulseboard.geography import resolve_city
from pulseboard.routes.common import serve
from pulseboard.services import weather

router = APIRouter(prefix="/api")


@router.get("/weather")
async def get_weather(
    request: Request,
    response: Response,
    city: str | None = Query(None),
    unique_id: str | None = Query(None, alias="uniqueId"),
):
    rng = request.app.state.dispatcher.context.rng
    query = weather.WeatherQuery(city=resolve_city(city, unique_id, rng))
    return await serve(request, response, weather.source, query)
