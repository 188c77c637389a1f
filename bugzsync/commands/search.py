"""
bzs list / search / queries / where - Browse local and remote bugs.
"""

from bugzsync.lib.queries import find_query
from bugzsync.lib.types import SearchCriteria, ViewEntry
from bugzsync.sync.coordinator import SyncCoordinator

LOCAL_MARKER = "*"


def format_view_entry(view: ViewEntry) -> str:
    """One line per bug; local copies are marked with '*'."""
    marker = LOCAL_MARKER if view.present else " "
    if view.error:
        return f"{marker} {view.bug_id:<8} [unreadable: {view.error}]"
    title = view.entry.title
    title = title[:60] + "..." if len(title) > 60 else title
    return f"{marker} {view.bug_id:<8} {view.entry.assignee:<28} {title}"


def print_view(entries: list[ViewEntry], heading: str) -> None:
    print(heading)
    print("-" * 60)
    if not entries:
        print("  (no bugs)")
    for view in entries:
        print(format_view_entry(view))
    print()
    local = sum(1 for v in entries if v.present)
    print(f"{len(entries)} bug(s), {local} stored locally")


def criteria_from_args(args) -> SearchCriteria:
    """Build SearchCriteria from argparse options."""
    return SearchCriteria(
        terms=" ".join(args.terms) if args.terms else None,
        assigned_to=args.assigned_to,
        reporter=args.reporter,
        cc=args.cc,
        commenter=args.commenter,
        status=tuple(args.status) if args.status else None,
        severity=args.severity,
        priority=args.priority,
        product=args.product,
        component=args.component,
        comments=args.comments,
        keywords=args.keywords,
        order=args.order,
    )


def cmd_list(args, coordinator: SyncCoordinator) -> int:
    """List locally stored bugs."""
    coordinator.clear_search()
    print_view(coordinator.list_current_view(), f"Local bugs ({coordinator.store.root})")
    return 0


def cmd_search(args, coordinator: SyncCoordinator) -> int:
    """Search the remote tracker, or run a named query."""
    if args.query:
        query = find_query(coordinator.queries, args.query)
        if query is None:
            print(f"ERROR: No named query with key '{args.query}'. See 'bzs queries'.")
            return 1
        entries = coordinator.run_named_query(query)
        print_view(entries, f"Query [{query.key}] {query.name}")
        return 0

    criteria = criteria_from_args(args)
    entries = coordinator.search(criteria)
    heading = "Search results" if not criteria.is_empty() else "Local bugs"
    print_view(entries, heading)
    return 0


def cmd_queries(args, coordinator: SyncCoordinator) -> int:
    """List configured named queries."""
    if not coordinator.queries:
        print("No named queries configured.")
        print("  Define them in queries.yaml in the config directory")
        return 0

    print("Named queries")
    print("-" * 60)
    for q in coordinator.queries:
        filters = ", ".join(f"{k}={v}" for k, v in q.criteria.to_dict().items())
        print(f"  [{q.key}] {q.name:<24} {filters}")
    return 0


def cmd_where(args, coordinator: SyncCoordinator) -> int:
    """List local bugs whose header field matches a value."""
    records = coordinator.local_bugs_where(args.field, args.value)
    print(f"Local bugs with {args.field} = {args.value}")
    print("-" * 60)
    for record in records:
        print(f"  {record.bug_id:<8} {record.status or '':<12} {record.title}")
    print()
    print(f"{len(records)} bug(s)")
    return 0
