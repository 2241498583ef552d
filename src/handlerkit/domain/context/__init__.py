"""Context package."""

from .context import Context, MergeFunction, merge_forks

__all__ = ["Context", "MergeFunction", "merge_forks"]
