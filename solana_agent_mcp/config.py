import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from the .env file at the project root
dotenv_path = Path(__file__).parent.parent / '.env'
load_dotenv(dotenv_path=dotenv_path)

# --- Chain ---
SOLANA_RPC_URL = os.getenv("SOLANA_RPC_URL", "https://api.mainnet-beta.solana.com")
SOLANA_PRIVATE_KEY = os.getenv("SOLANA_PRIVATE_KEY", "")  # base58, optional for read-only use
LAMPORTS_PER_SOL = 1_000_000_000
DEFAULT_AIRDROP_SOL = 1.0
MAX_AIRDROP_SOL = 5.0

# --- Privy server wallet (used instead of SOLANA_PRIVATE_KEY when configured) ---
PRIVY_API_URL = os.getenv("PRIVY_API_URL", "https://api.privy.io")
PRIVY_APP_ID = os.getenv("PRIVY_APP_ID", "")
PRIVY_APP_SECRET = os.getenv("PRIVY_APP_SECRET", "")
PRIVY_WALLET_ID = os.getenv("PRIVY_WALLET_ID", "")
PRIVY_CAIP2 = os.getenv("PRIVY_CAIP2", "solana:5eykt4UsFv8P8NJdTREpY1vzqKqZKvdp")  # mainnet

# --- External services ---
JUPITER_PRICE_URL = os.getenv("JUPITER_PRICE_URL", "https://lite-api.jup.ag/price/v3")
JUPITER_BLINKS_URL = os.getenv("JUPITER_BLINKS_URL", "https://worker.jup.ag/blinks/swap")
PYTH_HERMES_URL = os.getenv("PYTH_HERMES_URL", "https://hermes.pyth.network")
STORK_API_URL = os.getenv("STORK_API_URL", "https://rest.jp.stork-oracle.network")
STORK_API_KEY = os.getenv("STORK_API_KEY", "")
RUGCHECK_API_URL = os.getenv("RUGCHECK_API_URL", "https://api.rugcheck.xyz/v1")
DRIFT_DATA_API_URL = os.getenv("DRIFT_DATA_API_URL", "https://data.api.drift.trade")
DUNE_API_URL = os.getenv("DUNE_API_URL", "https://api.dune.com/api/v1")
DUNE_API_KEY = os.getenv("DUNE_API_KEY", "")
DUNE_LENDING_PROTOCOLS_QUERY = 3509967
HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "30"))

JUPSOL_MINT = "jupSoLaHXQiZZTSfEWMTRRgpnyFm8f6sZdosWBjx93v"
WSOL_MINT = "So11111111111111111111111111111111111111112"
EXPLORER_TX_URL = "https://solscan.io/tx/{}"

# --- Server ---
MCP_SERVER_NAME = os.getenv("MCP_SERVER_NAME", "solana-agent-mcp")
SERVER_VERSION = "0.1.0"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
SSE_HOST = os.getenv("SSE_HOST", "127.0.0.1")
SSE_PORT = int(os.getenv("SSE_PORT", "3001"))
