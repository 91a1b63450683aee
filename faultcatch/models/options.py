"""Dispatcher options data model."""

from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .error import RECORD_FIELDS


class DispatcherOptions(BaseModel):
    """Options controlling what the dispatcher does with a captured fault."""

    model_config = ConfigDict(extra="forbid")

    write: bool = True
    display: bool = True
    allowed_caller_addresses: List[str] = []
    included_fields: List[str] = Field(default_factory=lambda: list(RECORD_FIELDS))

    @field_validator("included_fields")
    @classmethod
    def check_included_fields(cls, value: List[str]) -> List[str]:
        unknown = [name for name in value if name not in RECORD_FIELDS]
        if unknown:
            raise ValueError(f"Unknown error record fields: {', '.join(unknown)}")
        return list(dict.fromkeys(value))

    def allows_caller(self, address) -> bool:
        """Return True if the given caller address may see rendered faults."""
        if not self.allowed_caller_addresses:
            return True
        return address in self.allowed_caller_addresses
