"""Wallet and network tools backed by the Solana RPC."""

from typing import Any, Dict

from solana_agent_mcp.actions import ActionName
from solana_agent_mcp.config import DEFAULT_AIRDROP_SOL, MAX_AIRDROP_SOL
from solana_agent_mcp.tools.base import ToolAdapter
from solana_agent_mcp.validation import FieldConstraint


class GetBalanceTool(ToolAdapter):
    name = ActionName.GET_BALANCE
    description = """
    Fetches the agent wallet's SOL balance, or its balance of an SPL token.

    Input: A JSON object with:
    {
        "token_address": "string, optional, SPL token mint address"
    }
    Output:
    {
        "balance": "float, balance in SOL or in token units",
        "message": "string, 'Success' or the error"
    }
    Example: {"token_address": "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"}
    -> {"balance": 12.5, "message": "Success"}
    """
    schema = {
        "token_address": FieldConstraint(type=str, required=False, description="Optional SPL token mint address"),
    }
    result_fields = ("balance",)
    error_label = "fetching balance"

    async def call(self, data: Dict[str, Any]) -> float:
        return await self.agent.get_balance(data.get("token_address"))


class TransferTool(ToolAdapter):
    name = ActionName.TRANSFER
    description = """
    Transfers SOL or an SPL token from the agent wallet to a recipient.

    Input: A JSON object with:
    {
        "to": "string, recipient wallet address",
        "amount": "float, amount to transfer (SOL or token units)",
        "mint": "string, optional, SPL token mint address"
    }
    Output:
    {
        "transaction_signature": "string, signature of the submitted transaction",
        "message": "string, 'Success' or the error"
    }
    Example: {"to": "8x2dR8Mpzuz2YqyZyZjUbYWKSWesBo5jMx2Q9Y86udVk", "amount": 0.1}
    -> {"transaction_signature": "5Vh...", "message": "Success"}
    """
    schema = {
        "to": FieldConstraint(type=str, description="Recipient wallet address"),
        "amount": FieldConstraint(type=float, min=0, description="Amount to transfer"),
        "mint": FieldConstraint(type=str, required=False, description="Optional SPL token mint address"),
    }
    result_fields = ("transaction_signature",)
    error_label = "transferring tokens"

    async def call(self, data: Dict[str, Any]) -> str:
        return await self.agent.transfer(data["to"], data["amount"], data.get("mint"))


class GetTpsTool(ToolAdapter):
    name = ActionName.GET_TPS
    description = """
    Gets the current transactions per second of the Solana network.

    Input: An empty JSON object {}.
    Output:
    {
        "tps": "float, transactions per second from the latest performance sample",
        "message": "string, 'Success' or the error"
    }
    """
    schema = {}
    result_fields = ("tps",)
    error_label = "fetching TPS"

    async def call(self, data: Dict[str, Any]) -> float:
        return await self.agent.get_tps()


class RequestFaucetFundsTool(ToolAdapter):
    name = ActionName.REQUEST_FAUCET_FUNDS
    description = f"""
    Requests an airdrop of SOL to the agent wallet. Only works on devnet and testnet.

    Input: A JSON object with:
    {{
        "amount": "float, optional, SOL to request (default {DEFAULT_AIRDROP_SOL}, max {MAX_AIRDROP_SOL})"
    }}
    Output:
    {{
        "transaction_signature": "string, airdrop transaction signature",
        "message": "string, 'Success' or the error"
    }}
    """
    schema = {
        "amount": FieldConstraint(
            type=float,
            required=False,
            min=0,
            max=MAX_AIRDROP_SOL,
            default=DEFAULT_AIRDROP_SOL,
            description="SOL to request",
        ),
    }
    result_fields = ("transaction_signature",)
    error_label = "requesting faucet funds"

    async def call(self, data: Dict[str, Any]) -> str:
        return await self.agent.request_faucet_funds(data["amount"])


class StakeWithJupTool(ToolAdapter):
    name = ActionName.STAKE_WITH_JUP
    description = """
    Stakes SOL by swapping it into jupSOL through Jupiter.

    Input: A JSON object with:
    {
        "amount": "float, amount of SOL to stake"
    }
    Output:
    {
        "signature": "string, transaction signature",
        "explorer": "string, explorer URL of the transaction",
        "message": "string, 'Success' or the error"
    }
    Example: {"amount": 0.5}
    -> {"signature": "3Fk...", "explorer": "https://solscan.io/tx/3Fk...", "message": "Success"}
    """
    schema = {
        "amount": FieldConstraint(type=float, min=0, description="Amount of SOL to stake"),
    }
    result_fields = ("signature", "explorer")
    error_label = "staking with Jupiter"

    async def call(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self.agent.stake_with_jup(data["amount"])
