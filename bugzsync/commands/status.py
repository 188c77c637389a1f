"""
bzs status - Show configuration, store contents and bugz availability.
"""

from bugzsync.lib.bugz import check_bugz_available
from bugzsync.lib.config import SyncConfig
from bugzsync.sync.coordinator import SyncCoordinator


def cmd_status(args, config: SyncConfig, coordinator: SyncCoordinator) -> int:
    """Print a summary of the session. Returns 1 if bugz is unusable."""
    store = coordinator.store
    bug_count = len(store.list_bug_ids())
    attachment_count = 0
    if store.attachments_dir.is_dir():
        attachment_count = sum(
            1 for p in store.attachments_dir.iterdir()
            if p.is_file() and not p.name.startswith(".")
        )

    print("bzs status")
    print("=" * 60)
    print(f"Config dir:   {config.config_dir}")
    print(f"Store:        {store.root}")
    print(f"Bugs:         {bug_count}")
    print(f"Attachments:  {attachment_count}")
    print(f"Queries:      {len(coordinator.queries)}")
    print(f"Mode:         {'offline' if coordinator.offline else 'online'}")
    print(f"Tracker:      {config.base_url or '(bugz default)'}")
    print()

    ok, msg = check_bugz_available(config.bugz_command)
    if not ok:
        print("bugz:         unavailable")
        print(f"  {msg}")
        return 1
    print(f"bugz:         {config.bugz_command}")
    return 0
