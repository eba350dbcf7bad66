from typing import Any, Dict, List, Optional

from solana_agent_mcp.config import DUNE_LENDING_PROTOCOLS_QUERY
from solana_agent_mcp.kit.http import request_json

# the lending protocols query returns well under this many rows
LENDING_PROTOCOLS_LIMIT = 1000


async def get_dune_query_results(agent, query_id: int, limit: int = 100) -> List[Dict[str, Any]]:
    """Rows of the latest execution of a Dune query."""
    api_key = agent.require_api_key("dune")
    url = f"{agent.endpoints.dune}/query/{query_id}/results"
    data = await request_json(
        agent.http,
        "GET",
        url,
        params={"limit": limit},
        headers={"X-Dune-API-Key": api_key},
    )
    return (data.get("result") or {}).get("rows", [])


async def get_lending_protocols(agent, chain: Optional[str] = None) -> List[Dict[str, Any]]:
    rows = await get_dune_query_results(agent, DUNE_LENDING_PROTOCOLS_QUERY, LENDING_PROTOCOLS_LIMIT)
    if chain:
        rows = [row for row in rows if str(row.get("chain", "")).lower() == chain.lower()]
    return rows
