"""
bzs comment - Add a comment to a bug.
"""

import sys

from bugzsync.sync.coordinator import SyncCoordinator


def cmd_comment(args, coordinator: SyncCoordinator) -> int:
    """Post a comment. Run 'bzs show --force' afterwards to see it."""
    text = args.message
    if text is None:
        text = sys.stdin.read()
    coordinator.add_comment(args.id, text, external=True)
    print(f"Comment added to bug {args.id}.")
    print(f"  Refresh with: bzs show {args.id} --force")
    return 0
