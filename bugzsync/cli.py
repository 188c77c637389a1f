#!/usr/bin/env python3
"""bzs CLI entrypoint."""

import argparse
import logging
import sys
from pathlib import Path

from bugzsync.commands import comment as cmd_comment_module
from bugzsync.commands import refresh as cmd_refresh_module
from bugzsync.commands import search as cmd_search_module
from bugzsync.commands import show as cmd_show_module
from bugzsync.commands import status as cmd_status_module
from bugzsync.lib.config import SyncConfig, load_sync_config
from bugzsync.lib.constants import HEADER_FIELDS, ORDERINGS, PRIORITIES, SEVERITIES
from bugzsync.lib.errors import BugzSyncError, ConfigError, ValidationError
from bugzsync.sync.coordinator import SyncCoordinator

# Exit codes
EXIT_FAILURE = 1
EXIT_CONFIG = 2


def get_config(args) -> SyncConfig:
    config_dir = Path(args.config_dir).expanduser() if args.config_dir else None
    return load_sync_config(config_dir)


def get_coordinator(args, config: SyncConfig | None = None) -> SyncCoordinator:
    """Load config and build the coordinator for this invocation."""
    config = config or get_config(args)
    coordinator = SyncCoordinator.from_config(config)
    if args.offline:
        coordinator.unplug()
    return coordinator


def cmd_list(args):
    return cmd_search_module.cmd_list(args, get_coordinator(args))


def cmd_search(args):
    return cmd_search_module.cmd_search(args, get_coordinator(args))


def cmd_queries(args):
    return cmd_search_module.cmd_queries(args, get_coordinator(args))


def cmd_where(args):
    return cmd_search_module.cmd_where(args, get_coordinator(args))


def cmd_show(args):
    return cmd_show_module.cmd_show(args, get_coordinator(args))


def cmd_attachment(args):
    return cmd_show_module.cmd_attachment(args, get_coordinator(args))


def cmd_attachments(args):
    return cmd_show_module.cmd_attachments(args, get_coordinator(args))


def cmd_refresh(args):
    return cmd_refresh_module.cmd_refresh(args, get_coordinator(args))


def cmd_comment(args):
    return cmd_comment_module.cmd_comment(args, get_coordinator(args))


def cmd_status(args):
    config = get_config(args)
    return cmd_status_module.cmd_status(args, config, get_coordinator(args, config))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='bzs', description='Local Bugzilla cache over the bugz CLI')
    parser.add_argument('--config-dir', help='Config directory (default: $BUGZSYNC_HOME or ~/.bugzsync)')
    parser.add_argument('--offline', action='store_true', help='Unplugged: only explicit IDs reach the tracker')
    parser.add_argument('--verbose', '-v', action='store_true', help='Log cache and bugz activity')
    subparsers = parser.add_subparsers(dest='command', required=True)

    # bzs list
    p_list = subparsers.add_parser('list', help='List locally stored bugs')
    p_list.set_defaults(func=cmd_list)

    # bzs search
    p_search = subparsers.add_parser('search', help='Search the tracker')
    p_search.add_argument('terms', nargs='*', help='Words to match in bug titles')
    p_search.add_argument('--query', '-q', help='Run the named query with this key')
    p_search.add_argument('--assigned-to', '-a', help='Assignee email')
    p_search.add_argument('--reporter', '-r', help='Reporter email')
    p_search.add_argument('--cc', help='CC email')
    p_search.add_argument('--commenter', help='Commenter email')
    p_search.add_argument('--status', '-s', action='append', help='Status (repeatable)')
    p_search.add_argument('--severity', choices=SEVERITIES, help='Severity')
    p_search.add_argument('--priority', choices=PRIORITIES, help='Priority')
    p_search.add_argument('--product', help='Product')
    p_search.add_argument('--component', '-C', help='Component')
    p_search.add_argument('--comments', '-c', help='Text contained in comments')
    p_search.add_argument('--keywords', '-k', help='Keywords')
    p_search.add_argument('--order', '-o', choices=ORDERINGS, help='Result ordering')
    p_search.set_defaults(func=cmd_search)

    # bzs queries
    p_queries = subparsers.add_parser('queries', help='List named queries')
    p_queries.set_defaults(func=cmd_queries)

    # bzs where
    p_where = subparsers.add_parser('where', help='Find local bugs by header value')
    p_where.add_argument('field', choices=HEADER_FIELDS, help='Header field, e.g. Assignee')
    p_where.add_argument('value', help='Value to match (case-insensitive)')
    p_where.set_defaults(func=cmd_where)

    # bzs show
    p_show = subparsers.add_parser('show', help='Show a bug (fetches if not stored)')
    p_show.add_argument('id', help='Bug ID')
    p_show.add_argument('--force', '-f', action='store_true', help='Re-fetch even if stored locally')
    p_show.add_argument('--raw', action='store_true', help='Print stored text as-is')
    p_show.set_defaults(func=cmd_show)

    # bzs attachment
    p_attachment = subparsers.add_parser('attachment', help='Get an attachment')
    p_attachment.add_argument('id', help='Attachment ID')
    p_attachment.add_argument('--force', '-f', action='store_true', help='Re-fetch even if stored locally')
    p_attachment.add_argument('--output', '-O', help='Write to file instead of stdout')
    p_attachment.set_defaults(func=cmd_attachment)

    # bzs attachments
    p_attachments = subparsers.add_parser('attachments', help='Fetch all attachments of a bug')
    p_attachments.add_argument('id', help='Bug ID')
    p_attachments.add_argument('--force', '-f', action='store_true', help='Re-fetch stored attachments too')
    p_attachments.set_defaults(func=cmd_attachments)

    # bzs refresh
    p_refresh = subparsers.add_parser('refresh', help='Re-fetch local bugs')
    p_refresh.add_argument('ids', nargs='*', help='Bug IDs (default: every local bug)')
    p_refresh.set_defaults(func=cmd_refresh)

    # bzs comment
    p_comment = subparsers.add_parser('comment', help='Add a comment to a bug')
    p_comment.add_argument('id', help='Bug ID')
    p_comment.add_argument('--message', '-m', help='Comment text (read from stdin if omitted)')
    p_comment.set_defaults(func=cmd_comment)

    # bzs status
    p_status = subparsers.add_parser('status', help='Show config, store and bugz availability')
    p_status.set_defaults(func=cmd_status)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    try:
        return args.func(args)
    except (ConfigError, ValidationError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_CONFIG
    except BugzSyncError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_FAILURE


if __name__ == '__main__':
    sys.exit(main())
