"""Trace - ordered, append-only audit log of handler evaluations."""
import json
from typing import Any, Dict, Iterator, List

from pydantic import BaseModel, ConfigDict, Field

SKIPPED = "Skipped"


class TraceEntry(BaseModel):
    """One handler evaluation within a dispatch."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    handler: str
    matched: bool
    outcome: str
    revision_before: int = Field(alias="revisionBefore")
    revision_after: int = Field(alias="revisionAfter")


class Trace:
    """Append-only list of TraceEntry objects."""

    def __init__(self) -> None:
        self._entries: List[TraceEntry] = []

    def record(
        self,
        handler: str,
        matched: bool,
        outcome: str,
        revision_before: int,
        revision_after: int,
    ) -> TraceEntry:
        entry = TraceEntry(
            handler=handler,
            matched=matched,
            outcome=outcome,
            revision_before=revision_before,
            revision_after=revision_after,
        )
        self._entries.append(entry)
        return entry

    @property
    def entries(self) -> List[TraceEntry]:
        return list(self._entries)

    def handlers(self) -> List[str]:
        """Names of every evaluated handler, in evaluation order."""
        return [entry.handler for entry in self._entries]

    def to_list(self) -> List[Dict[str, Any]]:
        """Export using the public schema (camelCase revision keys)."""
        return [entry.model_dump(by_alias=True) for entry in self._entries]

    def to_json(self, indent: int = None) -> str:
        return json.dumps(self.to_list(), indent=indent)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[TraceEntry]:
        return iter(list(self._entries))

    def __getitem__(self, index: int) -> TraceEntry:
        return self._entries[index]

    def __repr__(self) -> str:
        return f"Trace({self.to_list()!r})"
