"""Context - the mutable blackboard passed through a single dispatch."""
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Sequence

from handlerkit.domain.base.exceptions import (
    ContextKeyError,
    ContextTypeError,
    RevisionConflictError,
)

_MISSING = object()

MergeFunction = Callable[[Mapping[str, Any], List[Mapping[str, Any]]], Mapping[str, Any]]


class Context:
    """
    Mapping of string keys to values plus a monotonically increasing revision.

    A Context is owned by exactly one in-flight dispatch. Every successful
    mutation increments ``revision`` by one; reads never change it. Use
    ``fork()`` to hand an independent copy to another dispatch.
    """

    __slots__ = ("_data", "_revision")

    def __init__(self, data: Optional[Mapping[str, Any]] = None, revision: int = 0):
        if revision < 0:
            raise ValueError("Context revision cannot be negative")
        self._data: Dict[str, Any] = dict(data or {})
        self._revision = revision

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Context":
        """Seed a fresh context (revision 0) from a mapping."""
        return cls(data)

    @property
    def revision(self) -> int:
        return self._revision

    # Reads

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def require(self, key: str, expected_type: Optional[type] = None) -> Any:
        """
        Get a value that must be present.

        Args:
            key: Context key
            expected_type: Optional type the value must be an instance of

        Returns:
            The stored value

        Raises:
            ContextKeyError: If the key is missing
            ContextTypeError: If the value has the wrong type
        """
        value = self._data.get(key, _MISSING)
        if value is _MISSING:
            raise ContextKeyError(key)
        if expected_type is not None and not isinstance(value, expected_type):
            raise ContextTypeError(key, expected_type, type(value))
        return value

    def keys(self) -> List[str]:
        return list(self._data.keys())

    def snapshot(self) -> Mapping[str, Any]:
        """Read-only view over a copy of the current data."""
        return MappingProxyType(dict(self._data))

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __getitem__(self, key: str) -> Any:
        return self.require(key)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._data))

    def __len__(self) -> int:
        return len(self._data)

    # Mutations

    def set(self, key: str, value: Any) -> "Context":
        """Store a value and bump the revision."""
        self._data[key] = value
        self._revision += 1
        return self

    def update(self, values: Mapping[str, Any]) -> "Context":
        """Store several values as a single mutation."""
        if not values:
            return self
        self._data.update(values)
        self._revision += 1
        return self

    def delete(self, key: str) -> "Context":
        """Remove a key; deleting an absent key is not a mutation."""
        if key in self._data:
            del self._data[key]
            self._revision += 1
        return self

    def compare_and_set(self, key: str, value: Any, expected_revision: int) -> "Context":
        """
        Optimistic write: only applies if nobody else has mutated since
        ``expected_revision`` was observed.

        Raises:
            RevisionConflictError: If the revision has moved on
        """
        if self._revision != expected_revision:
            raise RevisionConflictError(expected_revision, self._revision)
        return self.set(key, value)

    # Forking

    def fork(self) -> "Context":
        """Shallow clone keeping both data and revision."""
        return Context(self._data, self._revision)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Context):
            return NotImplemented
        return self._revision == other._revision and self._data == other._data

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Context(revision={self._revision}, data={self._data!r})"


def merge_forks(base: Context, forks: Sequence[Context], merge_fn: MergeFunction) -> Context:
    """
    Merge independently mutated forks of ``base`` with a caller-supplied function.

    ``merge_fn`` receives a read-only view of the base data and one view per
    fork and returns the merged data. The merged context's revision is one past
    the highest fork revision, so it is strictly newer than every input.

    Raises:
        RevisionConflictError: If a fork is older than ``base``
    """
    if merge_fn is None:
        raise ValueError("merge_forks requires an explicit merge function")

    for fork in forks:
        if fork.revision < base.revision:
            raise RevisionConflictError(base.revision, fork.revision)

    merged = merge_fn(base.snapshot(), [fork.snapshot() for fork in forks])
    latest = max([base.revision] + [fork.revision for fork in forks])
    return Context(merged, latest + 1)
