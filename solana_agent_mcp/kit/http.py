import json
from typing import Any

import httpx
from mcp.server.fastmcp.utilities.logging import get_logger

from solana_agent_mcp.exceptions import UpstreamError

logger = get_logger(__name__)


async def request_json(client: httpx.AsyncClient, method: str, url: str, **kwargs: Any) -> Any:
    """Issues one HTTP request and decodes the JSON body. Any failure is an UpstreamError."""
    logger.debug(f"{method} {url} params={kwargs.get('params')}")
    try:
        response = await client.request(method, url, **kwargs)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise UpstreamError(
            f"{method} {url} returned HTTP {e.response.status_code}: {e.response.text[:200]}"
        ) from e
    except httpx.HTTPError as e:
        raise UpstreamError(f"Failed to reach {url}: {e}") from e

    try:
        return response.json()
    except json.JSONDecodeError as e:
        raise UpstreamError(
            f"{url} returned non-JSON response (HTTP {response.status_code})"
        ) from e
