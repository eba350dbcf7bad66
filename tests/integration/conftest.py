import sys
from pathlib import Path
from typing import Any, AsyncGenerator, Callable, Dict, List, Optional, Union
from unittest.mock import AsyncMock

import httpx
import pytest
import pytest_asyncio
from solders.keypair import Keypair

# Ensure the package can be imported without installing it
ROOT_DIR = Path(__file__).parent.parent.parent
sys.path.insert(0, str(ROOT_DIR))

from solana_agent_mcp.context import AgentContext, ServiceEndpoints
from solana_agent_mcp.kit.wallet import Signer

API_KEYS = {"stork": "stork-test-key", "dune": "dune-test-key"}

# Every service gets its own host so requests are easy to tell apart
ENDPOINTS = ServiceEndpoints(
    jupiter_price="https://jupiter.test/price/v3",
    jupiter_blinks="https://jupiter.test/blinks/swap",
    pyth_hermes="https://pyth.test",
    stork="https://stork.test",
    rugcheck="https://rugcheck.test/v1",
    drift_data="https://drift.test",
    dune="https://dune.test/api/v1",
    privy="https://privy.test",
)

Route = Union[Any, Callable[[httpx.Request], httpx.Response]]


class MockUpstream:
    """
    Stand-in for every REST service, used as an ``httpx.MockTransport`` handler.

    Routes are keyed by ``(host, path)``. A route is either a JSON payload or a
    callable returning an ``httpx.Response``. Unrouted requests get a 404.
    Every request is recorded in ``requests``.
    """

    def __init__(self):
        self.routes: Dict[tuple, Route] = {}
        self.statuses: Dict[tuple, int] = {}
        self.requests: List[httpx.Request] = []

    def add(self, url: str, payload: Route, status_code: int = 200) -> None:
        parsed = httpx.URL(url)
        key = (parsed.host, parsed.path)
        self.routes[key] = payload
        self.statuses[key] = status_code

    def requests_to(self, host: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.host == host]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.url.host, request.url.path)
        if key not in self.routes:
            return httpx.Response(404, json={"error": f"no route for {request.url.path}"})
        route = self.routes[key]
        if callable(route):
            return route(request)
        return httpx.Response(self.statuses[key], json=route)


def make_agent(
    rpc: AsyncMock,
    upstream: MockUpstream,
    keypair: Optional[Keypair] = None,
    api_keys: Optional[Dict[str, str]] = None,
    signer: Optional[Signer] = None,
) -> AgentContext:
    return AgentContext(
        rpc_url="http://localhost:8899",
        keypair=keypair,
        api_keys=API_KEYS if api_keys is None else api_keys,
        endpoints=ENDPOINTS,
        connection=rpc,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(upstream)),
        signer=signer,
    )


# --- Fixtures ---

@pytest.fixture(scope="function")
def keypair() -> Keypair:
    """The agent wallet."""
    return Keypair()


@pytest.fixture(scope="function")
def rpc() -> AsyncMock:
    """A mocked solana-py AsyncClient; every RPC method is awaitable."""
    return AsyncMock()


@pytest.fixture(scope="function")
def upstream() -> MockUpstream:
    return MockUpstream()


@pytest_asyncio.fixture(scope="function")
async def agent(rpc: AsyncMock, upstream: MockUpstream, keypair: Keypair) -> AsyncGenerator[AgentContext, None]:
    """An AgentContext wired to the mocked RPC client and REST services."""
    ctx = make_agent(rpc, upstream, keypair=keypair)
    yield ctx
    await ctx.aclose()


@pytest_asyncio.fixture(scope="function")
async def bare_agent(rpc: AsyncMock, upstream: MockUpstream) -> AsyncGenerator[AgentContext, None]:
    """An AgentContext with no wallet and no API keys."""
    ctx = make_agent(rpc, upstream, api_keys={})
    yield ctx
    await ctx.aclose()


@pytest.fixture(scope="function")
def agent_factory(rpc: AsyncMock, upstream: MockUpstream) -> Callable[..., AgentContext]:
    """Builds AgentContexts over the shared mocks; the caller closes them."""
    return lambda **kwargs: make_agent(rpc, upstream, **kwargs)
