"""Sync policy for bugzsync.

New front ends should go through SyncCoordinator rather than calling the
store or the bugz adapter directly.
"""

from bugzsync.sync.coordinator import SyncCoordinator
from bugzsync.sync.mode import ConnectivityMode

__all__ = [
    "SyncCoordinator",
    "ConnectivityMode",
]
