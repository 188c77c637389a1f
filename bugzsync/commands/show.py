"""
bzs show / attachment / attachments - Open bugs and attachments.

IDs typed on the command line are explicit requests, so they may be
fetched even while unplugged.
"""

import sys
from pathlib import Path

from bugzsync.lib.bugparse import parse_bug
from bugzsync.lib.types import BugRecord, BulkReport
from bugzsync.sync.coordinator import SyncCoordinator


def print_record(record: BugRecord) -> None:
    print(f"Bug {record.bug_id}: {record.title}")
    print("=" * 60)
    for name, value in record.headers.items():
        if name != "Title":
            print(f"{name + ':':<13}{value}")
    print()

    if record.attachments:
        print("Attachments")
        print("-" * 40)
        for att in record.attachments:
            print(f"  {att.attachment_id:<10} {att.description}")
        print()

    for comment in record.comments:
        print(f"Comment #{comment.number} {comment.header}".rstrip())
        print("-" * 40)
        print(comment.body)
        print()


def print_report(report: BulkReport) -> None:
    for outcome in report.outcomes:
        if outcome.ok:
            print(f"  [+] {outcome.entity_id}")
        else:
            print(f"  [x] {outcome.entity_id}: {outcome.error}")
    print()
    print(f"{len(report.succeeded)} ok, {len(report.failed)} failed")


def cmd_show(args, coordinator: SyncCoordinator) -> int:
    """Print a bug, fetching it if not stored locally."""
    raw = coordinator.open_bug(args.id, force_fetch=args.force, external=True)
    if args.raw:
        sys.stdout.write(raw.decode("utf-8", errors="replace"))
        return 0
    print_record(parse_bug(raw, bug_id=str(args.id)))
    return 0


def cmd_attachment(args, coordinator: SyncCoordinator) -> int:
    """Write an attachment to a file or stdout."""
    data = coordinator.open_attachment(args.id, force_fetch=args.force, external=True)
    if args.output:
        Path(args.output).write_bytes(data)
        print(f"Saved attachment {args.id} to {args.output} ({len(data)} bytes)")
    else:
        sys.stdout.buffer.write(data)
        sys.stdout.flush()
    return 0


def cmd_attachments(args, coordinator: SyncCoordinator) -> int:
    """Fetch every attachment referenced by a bug."""
    report = coordinator.fetch_attachments(args.id, force_fetch=args.force, external=True)
    if not report.outcomes:
        print(f"Bug {args.id} has no attachments.")
        return 0
    print(f"Attachments of bug {args.id}")
    print("-" * 60)
    print_report(report)
    return 0 if report.ok else 1
