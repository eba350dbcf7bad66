from typing import Any, ClassVar, Dict, Mapping, Tuple, Union

from mcp.server.fastmcp.utilities.logging import get_logger

from solana_agent_mcp.context import AgentContext
from solana_agent_mcp.envelope import Envelope
from solana_agent_mcp.exceptions import ParseError, ValidationError
from solana_agent_mcp.validation import FieldConstraint, coerce_input, parse_input, validate_input

logger = get_logger(__name__)


class ToolAdapter:
    """
    Wraps one AgentContext operation behind a schema-validated JSON interface.

    Subclasses declare ``name``, ``description``, ``schema``, ``result_fields``
    and ``error_label`` and implement ``call``. A single-field tool may return the
    bare value from ``call``; a multi-field tool returns a dict holding every
    declared result field.
    """

    name: ClassVar[str]
    description: ClassVar[str]
    schema: ClassVar[Dict[str, FieldConstraint]] = {}
    result_fields: ClassVar[Tuple[str, ...]]
    error_label: ClassVar[str]

    def __init__(self, agent: AgentContext):
        self.agent = agent

    async def call(self, data: Dict[str, Any]) -> Any:
        raise NotImplementedError

    async def invoke(self, raw_input: Union[str, bytes, Mapping[str, Any], None]) -> Envelope:
        """Parses, validates and runs one call. Never raises: failures come back as envelopes."""
        try:
            data = parse_input(raw_input)
            validate_input(data, self.schema)
            arguments = coerce_input(data, self.schema)
            logger.info(f"Running {self.name} with {arguments}")
            result = await self.call(arguments)
            values = result if len(self.result_fields) > 1 else {self.result_fields[0]: result}
            return Envelope.success(self.result_fields, values)
        except (ParseError, ValidationError) as e:
            logger.warning(f"Rejected input for {self.name}: {e}")
            return Envelope.failure(self.result_fields, f"Error {self.error_label}: {e}")
        except Exception as e:
            logger.exception(f"Error in {self.name}: {e}")
            return Envelope.failure(self.result_fields, f"Error {self.error_label}: {e}")
