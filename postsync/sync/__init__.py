"""Offline synchronization: reconciliation, queue replay and connectivity."""

from .connectivity import ConnectivityMonitor
from .processor import DEFAULT_MAX_ATTEMPTS, QueueProcessor
from .reconcile import ReconciliationEngine, merge_snapshots

__all__ = [
    "ConnectivityMonitor",
    "QueueProcessor",
    "ReconciliationEngine",
    "merge_snapshots",
    "DEFAULT_MAX_ATTEMPTS",
]
