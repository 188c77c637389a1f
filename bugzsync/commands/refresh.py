"""
bzs refresh - Re-fetch locally stored bugs.
"""

from bugzsync.commands.show import print_report
from bugzsync.sync.coordinator import SyncCoordinator


def cmd_refresh(args, coordinator: SyncCoordinator) -> int:
    """Refresh the given bugs, or every local bug if none are given."""
    report = coordinator.refresh_all(args.ids or None)
    if not report.outcomes:
        print("Nothing to refresh.")
        return 0
    print("Refresh")
    print("-" * 60)
    print_report(report)
    return 0 if report.ok else 1
