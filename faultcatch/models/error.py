"""Error record data models."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Literal, Mapping, Optional

from pydantic import BaseModel, Field

from .entity import Entity


class Severity(str, Enum):
    """Severity classification of a captured fault."""

    FATAL = "FATAL"
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"
    STRICT = "STRICT"
    EXCEPTION = "EXCEPTION"
    UNCLASSIFIED = "UNCLASSIFIED"


class ScopeValue(BaseModel):
    """
    Tagged snapshot of one variable binding at the fault site.

    Strings, numbers, booleans and None are kept as they are. Any other
    value is tagged opaque and keeps the original object, which may not
    be serializable.
    """

    kind: Literal["string", "number", "bool", "null", "opaque"]
    type_name: str
    value: Any = None

    @classmethod
    def of(cls, value: Any) -> "ScopeValue":
        """Tag a Python value."""
        if value is None:
            kind = "null"
        elif isinstance(value, bool):
            kind = "bool"
        elif isinstance(value, (int, float)):
            kind = "number"
        elif isinstance(value, str):
            kind = "string"
        else:
            kind = "opaque"
        return cls(kind=kind, type_name=type(value).__name__, value=value)


def snapshot_scope(variables: Optional[Mapping[str, Any]]) -> Dict[str, ScopeValue]:
    """Convert a mapping of variable bindings to tagged scope values."""
    if not variables:
        return {}
    return {
        str(name): value if isinstance(value, ScopeValue) else ScopeValue.of(value)
        for name, value in variables.items()
    }


class ErrorRecord(Entity):
    """Canonical record of one captured fault."""

    message: str = ""
    file: str = ""
    line: str = ""
    severity: Optional[Severity] = None
    raw_level: str = ""
    caller_address: Optional[str] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    scope_variables: Dict[str, ScopeValue] = {}
    backtrace: List[Dict[str, Any]] = []


RECORD_FIELDS = tuple(ErrorRecord.model_fields)
