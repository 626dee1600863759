"""Data models for extraction runs.

Architecture:
    This module exports the Pydantic v2 models that describe the outcome of
    a run. All models are immutable (frozen=True); they are assembled after
    the fact and handed to the caller.

Model Categories:
    - Page level: PageSnapshot
    - Partition level: PartitionLog
    - Run level: RunSummary
"""

from .logs import PageSnapshot, PartitionLog, RunSummary

__all__ = [
    "PageSnapshot",
    "PartitionLog",
    "RunSummary",
]
