"""Shared upstream HTTP helpers.

Every adapter goes through ``get_json`` so transport, status and decoding
failures all surface as ``ProviderError`` subclasses the engine understands.
"""
from __future__ import annotations

import json
from typing import Any

import httpx

from pulseboard.errors import ProviderMalformed, ProviderUnavailable

USER_AGENT = "pulseboard/0.1 (dashboard proxy)"


def create_client(timeout: float) -> httpx.AsyncClient:
    """Build the process-wide client with a fixed per-call timeout."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout),
        headers={"Accept": "application/json", "User-Agent": USER_AGENT},
        follow_redirects=True,
    )


async def get_json(
    client: httpx.AsyncClient,
    url: str,
    params: dict[str, Any] | None = None,
) -> Any:
    """GET *url* and decode the JSON body."""
    try:
        resp = await client.get(url, params=params)
        resp.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise ProviderUnavailable(
            f"{url} responded {e.response.status_code}"
        ) from e
    except httpx.HTTPError as e:
        raise ProviderUnavailable(f"{url} unreachable: {e!r}") from e
    try:
        return resp.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ProviderMalformed(f"{url} returned invalid JSON") from e


def require(data: Any, *path: str) -> Any:
    """Walk nested keys in *data*, raising ``ProviderMalformed`` on a gap."""
    node = data
    for key in path:
        if not isinstance(node, dict) or node.get(key) in (None, "", [], {}):
            raise ProviderMalformed("missing field " + ".".join(path))
        node = node[key]
    return node


def rate_limit_note(data: Any) -> str | None:
    """Return the throttling message some APIs send in a 200 body."""
    if not isinstance(data, dict):
        return None
    for marker in ("Note", "Information"):
        note = data.get(marker)
        if isinstance(note, str) and (
            "call frequency" in note or "rate limit" in note.lower()
        ):
            return note
    return None
