"""Upstream calls behind the AgentContext operations (Solana RPC and REST services)."""
