"""
Solana Agent MCP Package

This package exposes Solana wallet, market-data and analytics operations as
named actions that an LLM tool-calling runtime can invoke through MCP (Model
Context Protocol). Each action validates its JSON input against a declared
schema, calls one upstream service and answers with a fixed-shape envelope.

Main components:
- context.py: the AgentContext shared by every handler (RPC client, wallet signer, API keys)
- kit/: the upstream calls (Solana RPC, Privy wallet, Jupiter, Pyth, Stork, RugCheck, Drift, Dune)
- validation.py, envelope.py: schema validation and success/failure responses
- tools/: one adapter per action
- actions.py: the action registry
- server.py, cli.py: the dispatch server and its command line
"""

__version__ = "0.1.0"
