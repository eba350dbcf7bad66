from typing import Iterable, Optional, Union

from solana_agent_mcp.actions import ActionDescriptor, ActionName, ActionRegistry
from solana_agent_mcp.tools.analytics import DuneQueryResultsTool, LendingProtocolsTool
from solana_agent_mcp.tools.base import ToolAdapter
from solana_agent_mcp.tools.core import (
    GetBalanceTool,
    GetTpsTool,
    RequestFaucetFundsTool,
    StakeWithJupTool,
    TransferTool,
)
from solana_agent_mcp.tools.market import (
    DriftPerpFundingRateTool,
    FetchPriceTool,
    PythPriceTool,
    RugCheckReportTool,
    StorkPriceTool,
)

ALL_TOOLS = (
    GetBalanceTool,
    TransferTool,
    GetTpsTool,
    RequestFaucetFundsTool,
    StakeWithJupTool,
    FetchPriceTool,
    PythPriceTool,
    StorkPriceTool,
    RugCheckReportTool,
    DriftPerpFundingRateTool,
    LendingProtocolsTool,
    DuneQueryResultsTool,
)


def build_registry(selected: Optional[Iterable[Union[str, ActionName]]] = None) -> ActionRegistry:
    """The registry of every tool, or of the ``selected`` action names only."""
    registry = ActionRegistry(
        (ActionDescriptor.from_adapter(tool) for tool in ALL_TOOLS),
        exhaustive=True,
    )
    if selected is not None:
        registry = registry.select(selected)
    return registry


__all__ = [
    "ALL_TOOLS",
    "ToolAdapter",
    "build_registry",
    "DriftPerpFundingRateTool",
    "DuneQueryResultsTool",
    "FetchPriceTool",
    "GetBalanceTool",
    "GetTpsTool",
    "LendingProtocolsTool",
    "PythPriceTool",
    "RequestFaucetFundsTool",
    "RugCheckReportTool",
    "StakeWithJupTool",
    "StorkPriceTool",
    "TransferTool",
]
