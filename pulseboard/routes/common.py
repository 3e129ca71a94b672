from __future__ import annotations

from typing import Any

from fastapi import Request, Response

from pulseboard.engine import Dispatcher, Source


async def serve(
    request: Request,
    response: Response,
    source: Source,
    query: Any = None,
    *,
    force_refresh: bool = False,
) -> Any:
    """Run one dispatch cycle and tag the response with its origin."""
    dispatcher: Dispatcher = request.app.state.dispatcher
    result = await dispatcher.dispatch(source, query, force_refresh=force_refresh)
    response.headers.update(result.headers())
    return result.payload
