"""
Event sequence storage.

This module provides:
- EventSequenceStore: Per-deployment registry of write-once sequences
- EventSequence: Sparse index -> event map with completeness queries
- PutResult: Outcome of a put (stored or duplicate)
"""

from .store import EventSequenceStore, EventSequence, PutResult

__all__ = [
    "EventSequenceStore",
    "EventSequence",
    "PutResult",
]
