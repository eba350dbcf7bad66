"""Price oracles, token risk reports and Drift market data, all over HTTP."""

from typing import Any, Dict

from mcp.server.fastmcp.utilities.logging import get_logger

from solana_agent_mcp.exceptions import UpstreamError
from solana_agent_mcp.kit.http import request_json

logger = get_logger(__name__)

STORK_PRICE_SCALE = 10**18
DRIFT_FUNDING_RATE_PRECISION = 10**9
DRIFT_PRICE_PRECISION = 10**6
HOURS_PER_YEAR = 24 * 365
FUNDING_RATE_PERIODS = ("year", "hour")


async def fetch_price(agent, token_id: str) -> float:
    """USD price of a token mint from the Jupiter price API."""
    data = await request_json(agent.http, "GET", agent.endpoints.jupiter_price, params={"ids": token_id})
    entry = data.get(token_id) if isinstance(data, dict) else None
    if not entry or entry.get("usdPrice") is None:
        raise UpstreamError(f"No price data for token {token_id}.")
    return float(entry["usdPrice"])


async def get_pyth_price(agent, feed_id: str) -> Dict[str, Any]:
    """Latest Pyth price for a feed id, scaled by the feed exponent."""
    url = f"{agent.endpoints.pyth_hermes}/v2/updates/price/latest"
    data = await request_json(agent.http, "GET", url, params={"ids[]": feed_id, "parsed": "true"})
    parsed = data.get("parsed") or []
    if not parsed:
        raise UpstreamError(f"No Pyth price for feed {feed_id}.")
    price = parsed[0]["price"]
    scale = 10 ** int(price["expo"])
    return {
        "price": int(price["price"]) * scale,
        "confidence_interval": int(price["conf"]) * scale,
        "publish_time": price["publish_time"],
    }


async def get_stork_price(agent, asset_id: str) -> Dict[str, Any]:
    api_key = agent.require_api_key("stork")
    asset = asset_id.upper()
    url = f"{agent.endpoints.stork}/v1/prices/latest"
    data = await request_json(
        agent.http,
        "GET",
        url,
        params={"assets": asset},
        headers={"accept": "application/json", "Authorization": f"Basic {api_key}"},
    )
    if "error" in data:
        raise UpstreamError(str(data["error"]))
    price_data = (data.get("data") or {}).get(asset)
    if not price_data:
        raise UpstreamError(f"No Stork price data for {asset}.")
    return {
        "price": float(price_data["price"]) / STORK_PRICE_SCALE,
        "timestamp": price_data["timestamp"],
    }


async def get_rugcheck_report(agent, mint: str) -> Dict[str, Any]:
    url = f"{agent.endpoints.rugcheck}/tokens/{mint}/report/summary"
    return await request_json(agent.http, "GET", url)


async def get_drift_perp_market_funding_rate(agent, symbol: str, period: str = "year") -> Dict[str, Any]:
    """
    Latest funding rate of a Drift perpetual market, as a percentage.

    Drift reports the hourly rate in quote units per base unit; it is divided by
    the oracle TWAP to get a percentage, then annualised for ``period="year"``.
    """
    if not symbol.upper().endswith("-PERP"):
        raise ValueError(f"Market symbol must end in '-PERP', got '{symbol}'.")
    if period not in FUNDING_RATE_PERIODS:
        raise ValueError(f"Period must be one of {', '.join(FUNDING_RATE_PERIODS)}, got '{period}'.")

    url = f"{agent.endpoints.drift_data}/fundingRates"
    data = await request_json(agent.http, "GET", url, params={"marketName": symbol.upper()})
    records = data.get("fundingRates") or []
    if not records:
        raise UpstreamError(f"No funding rate data for {symbol}.")

    latest = records[-1]
    funding_rate = float(latest["fundingRate"]) / DRIFT_FUNDING_RATE_PRECISION
    oracle_twap = float(latest["oraclePriceTwap"]) / DRIFT_PRICE_PRECISION
    if oracle_twap == 0:
        raise UpstreamError(f"Drift returned a zero oracle price for {symbol}.")
    hourly_pct = funding_rate / oracle_twap * 100
    rate = hourly_pct * HOURS_PER_YEAR if period == "year" else hourly_pct
    logger.debug(f"{symbol} funding rate: {hourly_pct}%/h ({period}: {rate}%)")
    return {
        "symbol": symbol.upper(),
        "period": period,
        "rate": rate,
        "slot": latest.get("slot"),
        "timestamp": latest.get("ts"),
    }
