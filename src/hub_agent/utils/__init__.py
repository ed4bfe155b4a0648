"""Utility functions for the Hub agent."""

from .context import PassContext, get_context_dict, get_correlation_id, sync_pass
from .errors import (
    sanitize_dict,
    sanitize_error_message,
    sanitize_exception,
)
from .events import emit_event, emit_sync_failed, emit_synced
from .hashing import content_hash, sorted_pairs
from .naming import fnv32
from .rate_limit import rate_limit_k8s
from .selectors import Selector, label_selector_as_selector

__all__ = [
    "PassContext",
    "sync_pass",
    "get_correlation_id",
    "get_context_dict",
    "sanitize_error_message",
    "sanitize_exception",
    "sanitize_dict",
    "emit_event",
    "emit_synced",
    "emit_sync_failed",
    "content_hash",
    "sorted_pairs",
    "fnv32",
    "rate_limit_k8s",
    "Selector",
    "label_selector_as_selector",
]
