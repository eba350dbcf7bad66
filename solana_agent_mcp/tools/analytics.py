from typing import Any, Dict, List

from solana_agent_mcp.actions import ActionName
from solana_agent_mcp.tools.base import ToolAdapter
from solana_agent_mcp.validation import FieldConstraint


class LendingProtocolsTool(ToolAdapter):
    name = ActionName.GET_LENDING_PROTOCOLS
    description = """
    Lists lending protocols with their supplied and borrowed totals (Dune Analytics).

    Input: A JSON object with:
    {
        "chain": "string, optional, only protocols on this chain, e.g. 'ethereum'"
    }
    Output:
    {
        "protocols": "list, one row per protocol",
        "message": "string, 'Success' or the error"
    }
    """
    schema = {
        "chain": FieldConstraint(type=str, required=False, description="Blockchain to filter by"),
    }
    result_fields = ("protocols",)
    error_label = "fetching lending protocols"

    async def call(self, data: Dict[str, Any]) -> List[Dict[str, Any]]:
        return await self.agent.get_lending_protocols(data.get("chain"))


class DuneQueryResultsTool(ToolAdapter):
    name = ActionName.GET_DUNE_QUERY_RESULTS
    description = """
    Fetches the latest result rows of a Dune Analytics query.

    Input: A JSON object with:
    {
        "query_id": "int, Dune query id",
        "limit": "int, optional, maximum rows to return (default 100, max 1000)"
    }
    Output:
    {
        "rows": "list, result rows",
        "message": "string, 'Success' or the error"
    }
    Example: {"query_id": 3509967, "limit": 10} -> {"rows": [...], "message": "Success"}
    """
    schema = {
        "query_id": FieldConstraint(type=int, min=1, description="Dune query id"),
        "limit": FieldConstraint(type=int, required=False, min=1, max=1000, default=100, description="Maximum rows"),
    }
    result_fields = ("rows",)
    error_label = "fetching Dune query results"

    async def call(self, data: Dict[str, Any]) -> List[Dict[str, Any]]:
        return await self.agent.get_dune_query_results(data["query_id"], data["limit"])
