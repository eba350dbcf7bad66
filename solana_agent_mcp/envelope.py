"""Fixed-shape responses returned by every tool and by dispatch."""

import json
from typing import Any, Dict, Iterable, Mapping, Optional

from pydantic import BaseModel, ConfigDict

UNKNOWN_ERROR = "UNKNOWN_ERROR"


class Envelope(BaseModel):
    """
    Success carries every declared result field; failure carries every declared
    result field set to ``None``. Nothing in between.
    """

    model_config = ConfigDict(frozen=True)

    ok: bool
    result: Dict[str, Any]
    message: str
    code: Optional[str] = None

    @classmethod
    def success(
        cls, result_fields: Iterable[str], values: Mapping[str, Any], message: str = "Success"
    ) -> "Envelope":
        result_fields = tuple(result_fields)
        missing = [f for f in result_fields if f not in values]
        if missing:
            raise ValueError(f"Result is missing declared fields: {', '.join(missing)}")
        return cls(ok=True, result={f: values[f] for f in result_fields}, message=message)

    @classmethod
    def failure(
        cls, result_fields: Iterable[str], message: str, code: Optional[str] = None
    ) -> "Envelope":
        return cls(ok=False, result={f: None for f in result_fields}, message=message, code=code)

    def to_dict(self) -> Dict[str, Any]:
        payload = dict(self.result)
        payload["message"] = self.message
        if self.code is not None:
            payload["code"] = self.code
        return payload

    def render(self) -> str:
        # signatures and pubkeys from solders are rendered through str()
        return json.dumps(self.to_dict(), indent=2, default=str)


class UnknownAction(BaseModel):
    """Dispatch result for a name that is not in the registry."""

    model_config = ConfigDict(frozen=True)

    name: str
    ok: bool = False

    @property
    def message(self) -> str:
        return f"Unknown action: {self.name}"

    def render(self) -> str:
        return self.message
