"""
Integration Tests for On-Chain Operations

Runs the AgentContext wallet and network operations against a mocked
solana-py ``AsyncClient``. Transactions are really compiled and signed with
solders, so the tests inspect what would have been sent.

Test Coverage:
- SOL and SPL token balances, including a missing token account
- SOL and SPL transfers (with and without creating the recipient's token account)
- Network TPS from performance samples
- Faucet airdrops
- jupSOL staking through the Jupiter blinks endpoint
- Missing wallet and upstream failures
"""

import base64
import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from solana.rpc.core import RPCException
from solders.hash import Hash
from solders.keypair import Keypair
from solders.message import MessageV0, to_bytes_versioned
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.system_program import TransferParams, transfer as sol_transfer
from solders.transaction import VersionedTransaction
from spl.token.instructions import get_associated_token_address

from solana_agent_mcp.config import JUPSOL_MINT, WSOL_MINT
from solana_agent_mcp.context import AgentContext
from solana_agent_mcp.exceptions import AgentContextError, UpstreamError

# Mark all tests in this module as asyncio
pytestmark = pytest.mark.asyncio

USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"


def _prime_send(rpc: AsyncMock) -> Signature:
    """Makes the mocked RPC hand out a blockhash and accept one transaction."""
    signature = Signature.default()
    rpc.get_latest_blockhash.return_value = MagicMock(value=MagicMock(blockhash=Hash.default()))
    rpc.send_transaction.return_value = MagicMock(value=signature)
    return signature


def _sent_transaction(rpc: AsyncMock) -> VersionedTransaction:
    rpc.send_transaction.assert_awaited_once()
    return rpc.send_transaction.await_args.args[0]


# --- Balances ---

async def test_get_sol_balance(agent: AgentContext, rpc: AsyncMock, keypair: Keypair):
    rpc.get_balance.return_value = MagicMock(value=2_500_000_000)

    balance = await agent.get_balance()

    assert balance == 2.5
    assert rpc.get_balance.await_args.args[0] == keypair.pubkey()


async def test_get_token_balance(agent: AgentContext, rpc: AsyncMock, keypair: Keypair):
    rpc.get_token_account_balance.return_value = MagicMock(value=MagicMock(ui_amount_string="12.5"))

    balance = await agent.get_balance(USDC_MINT)

    assert balance == 12.5
    expected_ata = get_associated_token_address(keypair.pubkey(), Pubkey.from_string(USDC_MINT))
    assert rpc.get_token_account_balance.await_args.args[0] == expected_ata


async def test_get_token_balance_missing_account(agent: AgentContext, rpc: AsyncMock):
    """A wallet that never held the token has no token account: balance 0."""
    rpc.get_token_account_balance.side_effect = RPCException("Invalid param: could not find account")

    assert await agent.get_balance(USDC_MINT) == 0.0


async def test_get_token_balance_other_rpc_error(agent: AgentContext, rpc: AsyncMock):
    rpc.get_token_account_balance.side_effect = RPCException("node is behind")

    with pytest.raises(UpstreamError, match="node is behind"):
        await agent.get_balance(USDC_MINT)


async def test_get_balance_is_not_cached(agent: AgentContext, rpc: AsyncMock):
    """Two identical reads hit the RPC twice and agree."""
    rpc.get_balance.return_value = MagicMock(value=1_000_000_000)

    first = await agent.get_balance()
    second = await agent.get_balance()

    assert first == second == 1.0
    assert rpc.get_balance.await_count == 2


async def test_get_balance_without_wallet(bare_agent: AgentContext, rpc: AsyncMock):
    with pytest.raises(AgentContextError, match="No wallet configured"):
        await bare_agent.get_balance()
    rpc.get_balance.assert_not_awaited()


# --- Transfers ---

async def test_transfer_sol(agent: AgentContext, rpc: AsyncMock, keypair: Keypair):
    signature = _prime_send(rpc)
    recipient = Keypair().pubkey()

    result = await agent.transfer(str(recipient), 0.25)

    assert result == str(signature)
    tx = _sent_transaction(rpc)
    assert tx.message.account_keys[0] == keypair.pubkey()
    assert recipient in tx.message.account_keys
    assert len(tx.message.instructions) == 1
    # lamports are the last 8 bytes of a system transfer instruction
    assert int.from_bytes(bytes(tx.message.instructions[0].data)[-8:], "little") == 250_000_000


async def test_transfer_spl_creates_recipient_account(agent: AgentContext, rpc: AsyncMock):
    _prime_send(rpc)
    rpc.get_token_supply.return_value = MagicMock(value=MagicMock(decimals=6))
    rpc.get_account_info.return_value = MagicMock(value=None)
    recipient = Keypair().pubkey()

    await agent.transfer(str(recipient), 3.5, mint=USDC_MINT)

    tx = _sent_transaction(rpc)
    # create associated token account + transfer_checked
    assert len(tx.message.instructions) == 2
    recipient_ata = get_associated_token_address(recipient, Pubkey.from_string(USDC_MINT))
    assert rpc.get_account_info.await_args.args[0] == recipient_ata


async def test_transfer_spl_existing_recipient_account(agent: AgentContext, rpc: AsyncMock):
    _prime_send(rpc)
    rpc.get_token_supply.return_value = MagicMock(value=MagicMock(decimals=6))
    rpc.get_account_info.return_value = MagicMock(value=MagicMock())

    await agent.transfer(str(Keypair().pubkey()), 3.5, mint=USDC_MINT)

    assert len(_sent_transaction(rpc).message.instructions) == 1


async def test_transfer_rejects_non_positive_amount(agent: AgentContext, rpc: AsyncMock):
    with pytest.raises(ValueError, match="must be positive"):
        await agent.transfer(str(Keypair().pubkey()), 0)
    rpc.send_transaction.assert_not_awaited()


async def test_transfer_invalid_recipient(agent: AgentContext, rpc: AsyncMock):
    with pytest.raises(ValueError):
        await agent.transfer("not-a-pubkey", 1.0)
    rpc.send_transaction.assert_not_awaited()


async def test_transfer_rejected_by_chain(agent: AgentContext, rpc: AsyncMock):
    _prime_send(rpc)
    rpc.send_transaction.side_effect = RPCException("insufficient funds for rent")

    with pytest.raises(UpstreamError, match="insufficient funds"):
        await agent.transfer(str(Keypair().pubkey()), 1.0)


# --- Network stats ---

async def test_get_tps(agent: AgentContext, rpc: AsyncMock):
    rpc.get_recent_performance_samples.return_value = MagicMock(
        value=[MagicMock(num_transactions=120_000, sample_period_secs=60)]
    )

    assert await agent.get_tps() == 2000.0
    rpc.get_recent_performance_samples.assert_awaited_once_with(1)


async def test_get_tps_without_samples(agent: AgentContext, rpc: AsyncMock):
    rpc.get_recent_performance_samples.return_value = MagicMock(value=[])

    with pytest.raises(UpstreamError, match="no performance samples"):
        await agent.get_tps()


# --- Faucet ---

async def test_request_faucet_funds(agent: AgentContext, rpc: AsyncMock, keypair: Keypair):
    signature = Signature.default()
    rpc.request_airdrop.return_value = MagicMock(value=signature)

    result = await agent.request_faucet_funds(2.0)

    assert result == str(signature)
    args = rpc.request_airdrop.await_args.args
    assert args[0] == keypair.pubkey()
    assert args[1] == 2_000_000_000
    rpc.confirm_transaction.assert_awaited_once()


@pytest.mark.parametrize("amount", [0, -1.0])
async def test_faucet_rejects_non_positive_amount(agent: AgentContext, rpc: AsyncMock, amount):
    with pytest.raises(ValueError, match="must be positive"):
        await agent.request_faucet_funds(amount)
    rpc.request_airdrop.assert_not_awaited()


# --- Staking ---

def _unsigned_swap_transaction(payer: Keypair) -> str:
    message = MessageV0.try_compile(
        payer=payer.pubkey(),
        instructions=[sol_transfer(TransferParams(from_pubkey=payer.pubkey(), to_pubkey=Keypair().pubkey(), lamports=1))],
        address_lookup_table_accounts=[],
        recent_blockhash=Hash.default(),
    )
    unsigned = VersionedTransaction.populate(message, [Signature.default()])
    return base64.b64encode(bytes(unsigned)).decode()


async def test_stake_with_jup(agent: AgentContext, rpc: AsyncMock, upstream, keypair: Keypair):
    signature = Signature.default()
    rpc.send_transaction.return_value = MagicMock(value=signature)
    upstream.add(
        f"https://jupiter.test/blinks/swap/{WSOL_MINT}/{JUPSOL_MINT}/0.5",
        {"transaction": _unsigned_swap_transaction(keypair)},
    )

    result = await agent.stake_with_jup(0.5)

    assert result == {"signature": str(signature), "explorer": f"https://solscan.io/tx/{signature}"}
    request = upstream.requests[0]
    assert request.method == "POST"
    assert json.loads(request.content) == {"account": str(keypair.pubkey())}
    signed = _sent_transaction(rpc)
    assert signed.signatures[0] != Signature.default()
    assert signed.signatures[0] == keypair.sign_message(to_bytes_versioned(signed.message))


async def test_stake_with_jup_no_transaction(agent: AgentContext, rpc: AsyncMock, upstream):
    upstream.add(
        f"https://jupiter.test/blinks/swap/{WSOL_MINT}/{JUPSOL_MINT}/0.5",
        {"message": "amount too small"},
    )

    with pytest.raises(UpstreamError, match="no transaction"):
        await agent.stake_with_jup(0.5)
    rpc.send_transaction.assert_not_awaited()


async def test_stake_small_amount_url_is_plain_decimal(agent: AgentContext, rpc: AsyncMock, upstream, keypair: Keypair):
    rpc.send_transaction.return_value = MagicMock(value=Signature.default())
    upstream.add(
        f"https://jupiter.test/blinks/swap/{WSOL_MINT}/{JUPSOL_MINT}/0.00001",
        {"transaction": _unsigned_swap_transaction(keypair)},
    )

    await agent.stake_with_jup(0.00001)

    assert upstream.requests[0].url.path.endswith("/0.00001")


async def test_stake_whole_amount_url(agent: AgentContext, rpc: AsyncMock, upstream, keypair: Keypair):
    rpc.send_transaction.return_value = MagicMock(value=Signature.default())
    upstream.add(
        f"https://jupiter.test/blinks/swap/{WSOL_MINT}/{JUPSOL_MINT}/100",
        {"transaction": _unsigned_swap_transaction(keypair)},
    )

    await agent.stake_with_jup(100.0)

    assert upstream.requests[0].url.path.endswith("/100")


@pytest.mark.parametrize("amount", [0, -0.5])
async def test_stake_rejects_non_positive_amount(agent: AgentContext, rpc: AsyncMock, upstream, amount):
    with pytest.raises(ValueError, match="must be positive"):
        await agent.stake_with_jup(amount)
    assert upstream.requests == []
    rpc.send_transaction.assert_not_awaited()