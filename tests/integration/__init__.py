"""
Integration Tests for Solana Agent MCP

These tests build a real AgentContext around a mocked Solana RPC client
(``unittest.mock.AsyncMock``) and an ``httpx.AsyncClient`` served by
``httpx.MockTransport``, then drive it through the public surfaces.

Test files:
- conftest.py: Pytest fixtures and the mocked upstream services
- test_chain.py: balances, transfers, TPS, faucet and jupSOL staking
- test_market.py: price oracles, RugCheck, Drift funding rates and Dune
- test_tools.py: tool adapters, input handling and failure envelopes
- test_server.py: dispatcher, server state machine and MCP handlers
- test_cli.py: the command line

No test touches the network.
"""

# Integration tests for solana-agent-mcp
