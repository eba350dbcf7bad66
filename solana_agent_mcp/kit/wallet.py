"""
Wallet signers: who holds the agent's key and how its transactions get signed.

``KeypairSigner`` signs locally with a solders ``Keypair`` and submits through
the context's RPC connection. ``PrivySigner`` keeps the key in a Privy server
wallet: the unsigned transaction goes to Privy's wallet RPC, which signs and
broadcasts it and answers with the signature.
"""

import base64
from typing import Dict, Optional

from mcp.server.fastmcp.utilities.logging import get_logger
from solana.rpc.commitment import Confirmed
from solana.rpc.types import TxOpts
from solders.keypair import Keypair
from solders.message import MessageV0
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import VersionedTransaction

from solana_agent_mcp.config import PRIVY_CAIP2
from solana_agent_mcp.exceptions import UpstreamError
from solana_agent_mcp.kit.http import request_json

logger = get_logger(__name__)


class Signer:
    """Base class for the agent wallet."""

    async def get_address(self, agent) -> Pubkey:
        raise NotImplementedError

    async def sign_and_send(self, agent, message: MessageV0) -> str:
        """Signs ``message`` as its fee payer, submits it and returns the signature."""
        raise NotImplementedError


class KeypairSigner(Signer):
    def __init__(self, keypair: Keypair):
        self.keypair = keypair

    async def get_address(self, agent) -> Pubkey:
        return self.keypair.pubkey()

    async def sign_and_send(self, agent, message: MessageV0) -> str:
        tx = VersionedTransaction(message, [self.keypair])
        tx_resp = await agent.connection.send_transaction(tx, opts=TxOpts(preflight_commitment=Confirmed))
        return str(tx_resp.value)


class PrivySigner(Signer):
    """
    A Privy server wallet, addressed by its wallet id.

    Requests authenticate with HTTP basic auth over the app id and secret. The
    wallet address is looked up once and then reused.
    """

    def __init__(self, app_id: str, app_secret: str, wallet_id: str, caip2: str = PRIVY_CAIP2):
        self.app_id = app_id
        self.app_secret = app_secret
        self.wallet_id = wallet_id
        self.caip2 = caip2
        self._address: Optional[Pubkey] = None

    def _headers(self) -> Dict[str, str]:
        credentials = base64.b64encode(f"{self.app_id}:{self.app_secret}".encode()).decode()
        return {
            "Authorization": f"Basic {credentials}",
            "privy-app-id": self.app_id,
        }

    def _wallet_url(self, agent) -> str:
        return f"{agent.endpoints.privy}/v1/wallets/{self.wallet_id}"

    async def get_address(self, agent) -> Pubkey:
        if self._address is None:
            data = await request_json(agent.http, "GET", self._wallet_url(agent), headers=self._headers())
            if "address" not in data:
                raise UpstreamError(f"Privy returned no address for wallet {self.wallet_id}: {data}")
            self._address = Pubkey.from_string(data["address"])
            logger.info(f"Using Privy wallet {self.wallet_id} ({self._address})")
        return self._address

    async def sign_and_send(self, agent, message: MessageV0) -> str:
        # Privy fills in the placeholder signatures before broadcasting
        placeholders = [Signature.default()] * message.header.num_required_signatures
        unsigned = VersionedTransaction.populate(message, placeholders)
        payload = {
            "method": "signAndSendTransaction",
            "caip2": self.caip2,
            "params": {
                "transaction": base64.b64encode(bytes(unsigned)).decode(),
                "encoding": "base64",
            },
        }
        data = await request_json(
            agent.http, "POST", f"{self._wallet_url(agent)}/rpc", json=payload, headers=self._headers()
        )
        signature = (data.get("data") or {}).get("hash")
        if not signature:
            raise UpstreamError(f"Privy did not return a transaction hash: {data}")
        return signature
