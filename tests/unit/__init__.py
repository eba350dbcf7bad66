# Unit tests for solana-agent-mcp
