"""
Action registry: the name -> (description, schema, handler) table the dispatcher serves.

Names are members of ``ActionName`` rather than free strings, so a registry
can be checked for completeness at startup. A registry is immutable once built.
"""

import inspect
from enum import Enum
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Dict, Iterable, Iterator, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, field_validator

from solana_agent_mcp.exceptions import RegistryError, UnknownActionError
from solana_agent_mcp.validation import FieldConstraint, normalize_schema, to_json_schema


class ActionName(str, Enum):
    GET_BALANCE = "get_balance"
    TRANSFER = "transfer"
    GET_TPS = "get_tps"
    REQUEST_FAUCET_FUNDS = "request_faucet_funds"
    STAKE_WITH_JUP = "stake_with_jup"
    FETCH_PRICE = "fetch_price"
    GET_PYTH_PRICE = "get_pyth_price"
    GET_STORK_PRICE = "get_stork_price"
    GET_RUGCHECK_REPORT = "get_rugcheck_report"
    GET_DRIFT_PERP_MARKET_FUNDING_RATE = "get_drift_perp_market_funding_rate"
    GET_LENDING_PROTOCOLS = "get_lending_protocols"
    GET_DUNE_QUERY_RESULTS = "get_dune_query_results"

    def __str__(self) -> str:
        return self.value


Handler = Callable[[Any, Dict[str, Any]], Awaitable[Any]]


class ActionDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: ActionName
    description: str
    input_schema: Dict[str, FieldConstraint]
    result_fields: Tuple[str, ...]
    handler: Handler

    @field_validator("input_schema", mode="before")
    @classmethod
    def _normalize_schema(cls, value: Any) -> Dict[str, FieldConstraint]:
        # plain dict field specs are accepted as well as FieldConstraint
        return normalize_schema(value)

    @classmethod
    def from_adapter(cls, adapter_cls) -> "ActionDescriptor":
        async def handler(agent, arguments):
            return await adapter_cls(agent).invoke(arguments)

        return cls(
            name=adapter_cls.name,
            description=inspect.cleandoc(adapter_cls.description),
            input_schema=adapter_cls.schema,
            result_fields=adapter_cls.result_fields,
            handler=handler,
        )

    def to_tool_entry(self) -> Dict[str, Any]:
        return {
            "name": self.name.value,
            "description": self.description,
            "input_schema": to_json_schema(self.input_schema),
        }


class ActionRegistry:
    """Immutable mapping of ``ActionName`` to ``ActionDescriptor``."""

    def __init__(self, descriptors: Iterable[ActionDescriptor], exhaustive: bool = False):
        table: Dict[ActionName, ActionDescriptor] = {}
        for descriptor in descriptors:
            if descriptor.name in table:
                raise RegistryError(f"Duplicate action name: {descriptor.name.value}")
            table[descriptor.name] = descriptor
        if exhaustive:
            missing = [name.value for name in ActionName if name not in table]
            if missing:
                raise RegistryError(f"Actions without a handler: {', '.join(missing)}")
        self._actions = MappingProxyType(table)

    @staticmethod
    def _resolve(name: Union[str, ActionName]) -> Optional[ActionName]:
        try:
            return ActionName(name)
        except ValueError:
            return None

    def lookup(self, name: Union[str, ActionName]) -> ActionDescriptor:
        key = self._resolve(name)
        if key is None or key not in self._actions:
            raise UnknownActionError(getattr(name, "value", name))
        return self._actions[key]

    def select(self, names: Iterable[Union[str, ActionName]]) -> "ActionRegistry":
        """A registry holding only ``names``; every name must already be registered."""
        selected = {}
        for name in names:
            descriptor = self.lookup(name)
            selected[descriptor.name] = descriptor
        return ActionRegistry(selected.values())

    def names(self) -> Tuple[str, ...]:
        return tuple(name.value for name in self._actions)

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        key = self._resolve(name)
        return key is not None and key in self._actions

    def __iter__(self) -> Iterator[ActionDescriptor]:
        return iter(self._actions.values())

    def __len__(self) -> int:
        return len(self._actions)
