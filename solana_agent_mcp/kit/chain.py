"""
On-chain operations: balances, transfers, network stats, faucet and jupSOL staking.

Every function takes the shared AgentContext and performs one logical
operation against the Solana RPC (plus, for staking, one Jupiter HTTP call).
Nothing is cached and nothing is retried here.
"""

import base64
from decimal import Decimal
from typing import Any, Dict, List, Optional

from mcp.server.fastmcp.utilities.logging import get_logger
from solana.rpc.commitment import Confirmed
from solana.rpc.core import RPCException
from solders.instruction import Instruction
from solders.message import MessageV0
from solders.pubkey import Pubkey
from solders.system_program import TransferParams, transfer as sol_transfer
from solders.transaction import VersionedTransaction
from spl.token.constants import TOKEN_PROGRAM_ID
from spl.token.instructions import (
    TransferCheckedParams,
    create_associated_token_account,
    get_associated_token_address,
    transfer_checked,
)

from solana_agent_mcp.config import EXPLORER_TX_URL, JUPSOL_MINT, LAMPORTS_PER_SOL, WSOL_MINT
from solana_agent_mcp.exceptions import UpstreamError
from solana_agent_mcp.kit.http import request_json
from solana_agent_mcp.kit.wallet import Signer

logger = get_logger(__name__)


def _is_missing_account(err: Exception) -> bool:
    err_str = str(err).lower()
    return "could not find account" in err_str or "account not found" in err_str


def _require_positive(amount: float, action: str) -> None:
    if amount <= 0:
        raise ValueError(f"Amount to {action} must be positive.")


def _format_amount(amount: float) -> str:
    """Plain decimal notation: 1e-05 is written 0.00001."""
    return format(Decimal(repr(amount)).normalize(), "f")


async def _send_instructions(agent, signer: Signer, instructions: List[Instruction]) -> str:
    payer = await signer.get_address(agent)
    bh_resp = await agent.connection.get_latest_blockhash()
    msg = MessageV0.try_compile(
        payer=payer,
        instructions=instructions,
        address_lookup_table_accounts=[],
        recent_blockhash=bh_resp.value.blockhash,
    )
    return await signer.sign_and_send(agent, msg)


async def get_balance(agent, token_address: Optional[str] = None) -> float:
    """
    Returns the wallet's SOL balance, or its UI balance of an SPL token when
    ``token_address`` (the mint) is given. A missing token account is a zero balance.
    """
    owner = await agent.require_signer().get_address(agent)

    if token_address is None:
        resp = await agent.connection.get_balance(owner, commitment=Confirmed)
        logger.debug(f"Balance of {owner}: {resp.value} lamports")
        return resp.value / LAMPORTS_PER_SOL

    mint = Pubkey.from_string(token_address)
    ata = get_associated_token_address(owner, mint)
    try:
        resp = await agent.connection.get_token_account_balance(ata, commitment=Confirmed)
    except RPCException as rpc_err:
        if _is_missing_account(rpc_err):
            logger.warning(f"Token account {ata} for mint {mint} not found. Assuming 0 balance.")
            return 0.0
        raise
    if resp.value is None:
        return 0.0
    return float(resp.value.ui_amount_string)


async def transfer(agent, to: str, amount: float, mint: Optional[str] = None) -> str:
    """Transfers SOL, or an SPL token when ``mint`` is given. Returns the signature."""
    _require_positive(amount, "transfer")
    signer = agent.require_signer()
    recipient = Pubkey.from_string(to)
    sender = await signer.get_address(agent)
    instructions: List[Instruction] = []

    if mint is None:
        instructions.append(sol_transfer(TransferParams(
            from_pubkey=sender,
            to_pubkey=recipient,
            lamports=int(round(amount * LAMPORTS_PER_SOL)),
        )))
    else:
        mint_pubkey = Pubkey.from_string(mint)
        supply = await agent.connection.get_token_supply(mint_pubkey)
        decimals = supply.value.decimals
        sender_ata = get_associated_token_address(sender, mint_pubkey)
        recipient_ata = get_associated_token_address(recipient, mint_pubkey)

        ata_info = await agent.connection.get_account_info(recipient_ata)
        if ata_info.value is None:
            logger.info(f"Creating associated token account {recipient_ata} for {recipient}")
            instructions.append(create_associated_token_account(
                payer=sender,
                owner=recipient,
                mint=mint_pubkey,
            ))
        instructions.append(transfer_checked(TransferCheckedParams(
            program_id=TOKEN_PROGRAM_ID,
            source=sender_ata,
            mint=mint_pubkey,
            dest=recipient_ata,
            owner=sender,
            amount=int(round(amount * (10 ** decimals))),
            decimals=decimals,
        )))

    signature = await _send_instructions(agent, signer, instructions)
    logger.info(f"Transferred {amount} {mint or 'SOL'} to {to}: {signature}")
    return signature


async def get_tps(agent) -> float:
    resp = await agent.connection.get_recent_performance_samples(1)
    if not resp.value:
        raise UpstreamError("RPC returned no performance samples.")
    sample = resp.value[0]
    return sample.num_transactions / sample.sample_period_secs


async def request_faucet_funds(agent, amount: float) -> str:
    """Requests an airdrop to the wallet (devnet/testnet only) and waits for confirmation."""
    _require_positive(amount, "request")
    owner = await agent.require_signer().get_address(agent)
    resp = await agent.connection.request_airdrop(
        owner, int(round(amount * LAMPORTS_PER_SOL)), commitment=Confirmed
    )
    signature = resp.value
    await agent.connection.confirm_transaction(signature, commitment=Confirmed)
    logger.info(f"Airdropped {amount} SOL to {owner}: {signature}")
    return str(signature)


async def stake_with_jup(agent, amount: float) -> Dict[str, Any]:
    """Swaps ``amount`` SOL into jupSOL through the Jupiter blinks endpoint."""
    _require_positive(amount, "stake")
    signer = agent.require_signer()
    account = await signer.get_address(agent)
    url = f"{agent.endpoints.jupiter_blinks}/{WSOL_MINT}/{JUPSOL_MINT}/{_format_amount(amount)}"
    data = await request_json(agent.http, "POST", url, json={"account": str(account)})
    if "transaction" not in data:
        raise UpstreamError(f"Jupiter returned no transaction: {data}")

    unsigned = VersionedTransaction.from_bytes(base64.b64decode(data["transaction"]))
    signature = await signer.sign_and_send(agent, unsigned.message)
    logger.info(f"Staked {amount} SOL for jupSOL: {signature}")
    return {"signature": signature, "explorer": EXPLORER_TX_URL.format(signature)}
