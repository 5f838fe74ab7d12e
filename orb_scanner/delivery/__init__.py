"""
Snapshot delivery sinks.
"""

from .base import BaseSnapshotDelivery, DeliveryResult, DeliveryStatus
from .file import FileSnapshotDelivery
from .stdout import StdoutSnapshotDelivery

__all__ = [
    "BaseSnapshotDelivery",
    "DeliveryResult",
    "DeliveryStatus",
    "FileSnapshotDelivery",
    "StdoutSnapshotDelivery",
]
