"""
Test Package for Solana Agent MCP

This package contains the test suite for the Solana Agent MCP server. Unit tests
cover the pieces with no I/O (schema validation, response envelopes, the action
registry); integration tests run the tool adapters, the AgentContext operations,
the dispatcher, the MCP server and the CLI against mocked upstream services.

Test Structure:
- unit/: validator, envelope and registry tests
- integration/: adapters, upstream operations, dispatch server and CLI
- integration/conftest.py: Pytest fixtures (mocked RPC client and HTTP services)
"""

# Test package for solana-agent-mcp
