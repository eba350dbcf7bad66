"""Price oracle, token risk and perp market tools backed by public REST APIs."""

from typing import Any, Dict

from solana_agent_mcp.actions import ActionName
from solana_agent_mcp.tools.base import ToolAdapter
from solana_agent_mcp.validation import FieldConstraint


class FetchPriceTool(ToolAdapter):
    name = ActionName.FETCH_PRICE
    description = """
    Fetches the USD price of a token from Jupiter.

    Input: A JSON object with:
    {
        "token_id": "string, token mint address"
    }
    Output:
    {
        "price": "float, price in USD",
        "message": "string, 'Success' or the error"
    }
    Example: {"token_id": "So11111111111111111111111111111111111111112"}
    -> {"price": 148.21, "message": "Success"}
    """
    schema = {
        "token_id": FieldConstraint(type=str, description="Token mint address"),
    }
    result_fields = ("price",)
    error_label = "fetching price"

    async def call(self, data: Dict[str, Any]) -> float:
        return await self.agent.fetch_price(data["token_id"])


class PythPriceTool(ToolAdapter):
    name = ActionName.GET_PYTH_PRICE
    description = """
    Fetches the latest price of a Pyth price feed.

    Input: A JSON object with:
    {
        "feed_id": "string, Pyth price feed id (hex)"
    }
    Output:
    {
        "price_data": "dict, price, confidence_interval and publish_time",
        "message": "string, 'Success' or the error"
    }
    """
    schema = {
        "feed_id": FieldConstraint(type=str, description="Pyth price feed id"),
    }
    result_fields = ("price_data",)
    error_label = "fetching Pyth price"

    async def call(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self.agent.get_pyth_price(data["feed_id"])


class StorkPriceTool(ToolAdapter):
    name = ActionName.GET_STORK_PRICE
    description = """
    Fetches the latest price of an asset from the Stork oracle.

    Input: A JSON object with:
    {
        "asset_id": "string, Stork asset id, e.g. 'BTCUSD'"
    }
    Output:
    {
        "price_data": "dict, price and timestamp",
        "message": "string, 'Success' or the error"
    }
    """
    schema = {
        "asset_id": FieldConstraint(type=str, description="Stork asset id"),
    }
    result_fields = ("price_data",)
    error_label = "fetching Stork price"

    async def call(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self.agent.get_stork_price(data["asset_id"])


class RugCheckReportTool(ToolAdapter):
    name = ActionName.GET_RUGCHECK_REPORT
    description = """
    Fetches the RugCheck risk report summary of a token.

    Input: A JSON object with:
    {
        "mint": "string, token mint address"
    }
    Output:
    {
        "report": "dict, RugCheck report summary (score, risks)",
        "message": "string, 'Success' or the error"
    }
    """
    schema = {
        "mint": FieldConstraint(type=str, description="Token mint address"),
    }
    result_fields = ("report",)
    error_label = "fetching RugCheck report"

    async def call(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self.agent.get_rugcheck_report(data["mint"])


class DriftPerpFundingRateTool(ToolAdapter):
    name = ActionName.GET_DRIFT_PERP_MARKET_FUNDING_RATE
    description = """
    Retrieves the funding rate for a Drift perpetual market.

    Input: A JSON object with:
    {
        "symbol": "string, market symbol (must end in '-PERP')",
        "period": "string, optional, 'year' or 'hour' (default: 'year')"
    }
    Output:
    {
        "funding_rate": "dict, funding rate details",
        "message": "string, 'Success' or the error"
    }
    Example: {"symbol": "SOL-PERP"}
    -> {"funding_rate": {"symbol": "SOL-PERP", "period": "year", "rate": 10.95, ...}, "message": "Success"}
    """
    schema = {
        "symbol": FieldConstraint(type=str, description="Market symbol ending in '-PERP'"),
        "period": FieldConstraint(type=str, required=False, default="year", description="'year' or 'hour'"),
    }
    result_fields = ("funding_rate",)
    error_label = "fetching Drift perp market funding rate"

    async def call(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self.agent.get_drift_perp_market_funding_rate(
            symbol=data["symbol"],
            period=data["period"],
        )
