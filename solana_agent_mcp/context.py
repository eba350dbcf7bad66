"""
The shared agent context handed to every action handler.

An ``AgentContext`` is built once at process start (``AgentContext.from_env()``)
and passed explicitly to the dispatcher. Handlers only read from it: the RPC
connection, the wallet signer, API keys and service endpoints are fixed at
construction, and the only member created later is the shared HTTP client.
"""

from typing import Any, Dict, List, Optional

import httpx
from mcp.server.fastmcp.utilities.logging import get_logger
from pydantic import BaseModel, ConfigDict
from solana.rpc.async_api import AsyncClient
from solders.keypair import Keypair

from solana_agent_mcp import config
from solana_agent_mcp.exceptions import AgentContextError, AgentKitError, UpstreamError
from solana_agent_mcp.kit import chain, dune, market
from solana_agent_mcp.kit.wallet import KeypairSigner, PrivySigner, Signer

logger = get_logger(__name__)


class ServiceEndpoints(BaseModel):
    model_config = ConfigDict(frozen=True)

    jupiter_price: str = config.JUPITER_PRICE_URL
    jupiter_blinks: str = config.JUPITER_BLINKS_URL
    pyth_hermes: str = config.PYTH_HERMES_URL
    stork: str = config.STORK_API_URL
    rugcheck: str = config.RUGCHECK_API_URL
    drift_data: str = config.DRIFT_DATA_API_URL
    dune: str = config.DUNE_API_URL
    privy: str = config.PRIVY_API_URL


def _signer_from_env(generate_wallet: bool) -> Optional[Signer]:
    if generate_wallet:
        keypair = Keypair()
        logger.info(f"Generated new wallet: {keypair.pubkey()}")
        return KeypairSigner(keypair)
    if config.PRIVY_APP_ID or config.PRIVY_APP_SECRET:
        missing = [
            name
            for name, value in (
                ("PRIVY_APP_ID", config.PRIVY_APP_ID),
                ("PRIVY_APP_SECRET", config.PRIVY_APP_SECRET),
                ("PRIVY_WALLET_ID", config.PRIVY_WALLET_ID),
            )
            if not value
        ]
        if missing:
            raise AgentContextError(f"Incomplete Privy configuration, missing: {', '.join(missing)}")
        return PrivySigner(config.PRIVY_APP_ID, config.PRIVY_APP_SECRET, config.PRIVY_WALLET_ID, config.PRIVY_CAIP2)
    if config.SOLANA_PRIVATE_KEY:
        try:
            return KeypairSigner(Keypair.from_base58_string(config.SOLANA_PRIVATE_KEY))
        except ValueError as e:
            raise AgentContextError(f"SOLANA_PRIVATE_KEY is not a valid base58 keypair: {e}") from e
    logger.warning("No wallet configured (SOLANA_PRIVATE_KEY or PRIVY_*), signing actions are unavailable.")
    return None


class AgentContext:
    """Connection handles, wallet signer and API credentials shared by all handlers."""

    def __init__(
        self,
        rpc_url: str,
        keypair: Optional[Keypair] = None,
        api_keys: Optional[Dict[str, str]] = None,
        endpoints: Optional[ServiceEndpoints] = None,
        connection: Optional[AsyncClient] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        http_timeout: float = config.HTTP_TIMEOUT,
        signer: Optional[Signer] = None,
    ):
        if keypair is not None and signer is not None:
            raise AgentContextError("Pass either a keypair or a signer, not both.")
        self._rpc_url = rpc_url
        self._signer = KeypairSigner(keypair) if keypair is not None else signer
        self._api_keys = {k: v for k, v in (api_keys or {}).items() if v}
        self._endpoints = endpoints if endpoints is not None else ServiceEndpoints()
        self._connection = connection if connection is not None else AsyncClient(rpc_url)
        self._http = http_client
        self._http_timeout = http_timeout

    @classmethod
    def from_env(cls, generate_wallet: bool = False) -> "AgentContext":
        """Builds a context from the values loaded by ``solana_agent_mcp.config``."""
        return cls(
            rpc_url=config.SOLANA_RPC_URL,
            signer=_signer_from_env(generate_wallet),
            api_keys={"stork": config.STORK_API_KEY, "dune": config.DUNE_API_KEY},
            http_timeout=config.HTTP_TIMEOUT,
        )

    # --- Read-only state ---

    @property
    def rpc_url(self) -> str:
        return self._rpc_url

    @property
    def connection(self) -> AsyncClient:
        return self._connection

    @property
    def endpoints(self) -> ServiceEndpoints:
        return self._endpoints

    @property
    def signer(self) -> Optional[Signer]:
        return self._signer

    @property
    def http(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=self._http_timeout)
        return self._http

    def require_signer(self) -> Signer:
        if self._signer is None:
            raise AgentContextError(
                "No wallet configured. Set SOLANA_PRIVATE_KEY or the PRIVY_* settings to use signing actions."
            )
        return self._signer

    def require_api_key(self, service: str) -> str:
        key = self._api_keys.get(service)
        if not key:
            raise AgentContextError(f"{service.upper()}_API_KEY is not configured.")
        return key

    async def aclose(self) -> None:
        if self._http is not None:
            await self._http.aclose()
        await self._connection.close()

    async def __aenter__(self) -> "AgentContext":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # --- Operations ---

    async def _call(self, operation, *args, **kwargs) -> Any:
        try:
            return await operation(self, *args, **kwargs)
        except (AgentKitError, ValueError):
            raise
        except Exception as e:
            raise UpstreamError(str(e) or type(e).__name__) from e

    async def get_balance(self, token_address: Optional[str] = None) -> float:
        return await self._call(chain.get_balance, token_address)

    async def transfer(self, to: str, amount: float, mint: Optional[str] = None) -> str:
        return await self._call(chain.transfer, to, amount, mint)

    async def get_tps(self) -> float:
        return await self._call(chain.get_tps)

    async def request_faucet_funds(self, amount: float = config.DEFAULT_AIRDROP_SOL) -> str:
        return await self._call(chain.request_faucet_funds, amount)

    async def stake_with_jup(self, amount: float) -> Dict[str, Any]:
        return await self._call(chain.stake_with_jup, amount)

    async def fetch_price(self, token_id: str) -> float:
        return await self._call(market.fetch_price, token_id)

    async def get_pyth_price(self, feed_id: str) -> Dict[str, Any]:
        return await self._call(market.get_pyth_price, feed_id)

    async def get_stork_price(self, asset_id: str) -> Dict[str, Any]:
        return await self._call(market.get_stork_price, asset_id)

    async def get_rugcheck_report(self, mint: str) -> Dict[str, Any]:
        return await self._call(market.get_rugcheck_report, mint)

    async def get_drift_perp_market_funding_rate(self, symbol: str, period: str = "year") -> Dict[str, Any]:
        return await self._call(market.get_drift_perp_market_funding_rate, symbol, period)

    async def get_lending_protocols(self, chain: Optional[str] = None) -> List[Dict[str, Any]]:
        return await self._call(dune.get_lending_protocols, chain)

    async def get_dune_query_results(self, query_id: int, limit: int = 100) -> List[Dict[str, Any]]:
        return await self._call(dune.get_dune_query_results, query_id, limit)
