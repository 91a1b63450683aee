"""Structured entity base with whitelisted JSON serialization."""

import json
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict


class Entity(BaseModel):
    """
    Base class for structured entities.

    Fields are plain attributes; assignments are validated so an entity
    cannot be mutated into an invalid state.
    """

    model_config = ConfigDict(validate_assignment=True, arbitrary_types_allowed=True)

    def serialize(self, fields: Iterable[str]) -> Optional[str]:
        """
        Serialize the whitelisted fields to a JSON object.

        Fields appear in the order given by the whitelist. Names that are
        not fields of the entity are ignored.

        Args:
            fields: Names of the fields to include

        Returns:
            JSON string, or None if the entity cannot be represented as JSON
        """
        names = [name for name in dict.fromkeys(fields) if name in type(self).model_fields]

        try:
            data = self.model_dump(mode="json", include=set(names))
            return json.dumps({name: data[name] for name in names}, allow_nan=False)
        except (TypeError, ValueError):
            return None
