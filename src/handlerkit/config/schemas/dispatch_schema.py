"""Dispatch configuration schema."""
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class DispatchConfig(BaseModel):
    """Runtime behavior of the dispatcher."""

    trace_enabled: bool = Field(True, description="Record a trace for every run")
    max_state_steps: int = Field(
        1000, description="Advance limit for one state machine run before it faults"
    )
    default_deadline_seconds: Optional[float] = Field(
        None, description="Deadline applied to runs that pass no cancellation token"
    )
    raise_on_fault: bool = Field(False, description="Raise HandlerFaultError instead of returning Fault")
    warn_on_unreachable_states: bool = Field(
        True, description="Log a warning for states unreachable from the initial state"
    )

    @field_validator("max_state_steps")
    @classmethod
    def validate_max_state_steps(cls, v: int) -> int:
        """Validate step limit."""
        if v < 1:
            raise ValueError("max_state_steps must be at least 1")
        return v

    @field_validator("default_deadline_seconds", mode="before")
    @classmethod
    def empty_deadline_is_none(cls, v):
        """Treat an empty value (e.g. an unset environment variable) as no deadline."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        return v

    @field_validator("default_deadline_seconds")
    @classmethod
    def validate_deadline(cls, v: Optional[float]) -> Optional[float]:
        """Validate deadline."""
        if v is not None and v <= 0:
            raise ValueError("default_deadline_seconds must be positive")
        return v
