"""Event payloads delivered to subscribed handler units."""
import copy
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Dict, Mapping
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from handlerkit.domain.context import Context


class Event(BaseModel):
    """
    Immutable notification payload.

    The payload is deep-copied once on construction and stored behind a
    read-only mapping, so neither the caller nor a subscriber can change what
    later subscribers receive.
    """
    model_config = ConfigDict(frozen=True)

    event_id: str = Field(default_factory=lambda: str(uuid4()))
    occurred_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    event_type: str
    payload: Mapping[str, Any] = Field(default_factory=dict, validate_default=True)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("event_type")
    @classmethod
    def validate_event_type(cls, v: str) -> str:
        """Event type must be a non-empty tag."""
        if not v or not v.strip():
            raise ValueError("Event type cannot be empty")
        return v

    @field_validator("payload")
    @classmethod
    def freeze_payload(cls, v: Mapping[str, Any]) -> Mapping[str, Any]:
        """Store a private deep copy behind a read-only view."""
        return MappingProxyType(copy.deepcopy(dict(v)))

    def to_context(self) -> Context:
        """Seed a fresh context from a deep copy of the payload."""
        return Context.from_mapping(copy.deepcopy(dict(self.payload)))
