"""
Sync coordinator: decides, per request, whether a bug or attachment is
served from the local store, fetched and written through, or refused
because the session is offline.

Policy for opening a bug or attachment:
  1. A local copy and no force_fetch: serve it, never touching the remote.
  2. Otherwise the remote is needed. Offline without an external override
     raises OfflineError and the remote is not called.
  3. Fetch, then replace the local copy. A failed fetch leaves the
     previous copy untouched.

Session state (connectivity mode, current search) lives on the
coordinator instance, never in module globals.
"""

import logging
from contextlib import nullcontext

from bugzsync.lib.bugparse import header_matches, parse_bug
from bugzsync.lib.bugz import BugzRemote
from bugzsync.lib.config import SyncConfig
from bugzsync.lib.constants import HEADER_FIELDS
from bugzsync.lib.errors import OfflineError, ParseError, RemoteError, ValidationError
from bugzsync.lib.queries import find_query, load_named_queries
from bugzsync.lib.remote import RemoteSource
from bugzsync.lib.store import LocalStore
from bugzsync.lib.types import (
    BugRecord,
    BulkReport,
    NamedQuery,
    SearchCriteria,
    SearchResultEntry,
    ViewEntry,
)
from bugzsync.lib.validate import validate_criteria, validate_id
from bugzsync.sync.mode import ConnectivityMode

logger = logging.getLogger(__name__)

# Per-item errors a bulk operation records instead of aborting
BULK_ITEM_ERRORS = (RemoteError, OfflineError, ValidationError, ParseError, OSError)


class SyncCoordinator:
    """Cache policy between a LocalStore and a RemoteSource."""

    def __init__(
        self,
        store: LocalStore,
        remote: RemoteSource,
        offline: bool = False,
        queries: tuple[NamedQuery, ...] = (),
    ):
        self.store = store
        self.remote = remote
        self.mode = ConnectivityMode(offline=offline)
        self.queries = tuple(queries)
        self.current_criteria: SearchCriteria | None = None
        self.current_results: list[SearchResultEntry] = []

    @classmethod
    def from_config(cls, config: SyncConfig, remote: RemoteSource | None = None) -> "SyncCoordinator":
        """Build a coordinator from loaded config.

        Raises:
            ConfigError: if the store directory is missing or queries.yaml is invalid
        """
        store = LocalStore(config.store_dir)
        queries = load_named_queries(config.queries_path)
        return cls(
            store=store,
            remote=remote or BugzRemote.from_config(config),
            offline=config.unplugged,
            queries=queries,
        )

    # Connectivity

    @property
    def offline(self) -> bool:
        return self.mode.offline

    def unplug(self) -> None:
        self.mode.go_offline()

    def plug(self) -> None:
        self.mode.go_online()

    def external_override(self):
        """Context manager allowing remote calls while unplugged."""
        return self.mode.external_override()

    def _override_if(self, external: bool):
        return self.mode.external_override() if external else nullcontext()

    def _require_network(self, operation: str, entity_id: str | None = None) -> None:
        if not self.mode.network_allowed:
            raise OfflineError(operation, entity_id)

    # Opening bugs and attachments

    def open_bug(self, bug_id, force_fetch: bool = False, external: bool = False) -> bytes:
        """Return the bug's text, fetching it only when needed.

        Args:
            bug_id: Bug to open
            force_fetch: Re-fetch even if a local copy exists
            external: The user asked for this bug explicitly; allowed while offline

        Raises:
            ValidationError: bad bug id
            OfflineError: remote needed but offline
            RemoteError: fetch failed (local copy untouched)
        """
        bug_id = validate_id(bug_id, "bug")
        with self._override_if(external):
            if not force_fetch and self.store.bug_exists(bug_id):
                return self.store.read_bug(bug_id)

            self._require_network("fetch bug", bug_id)
            data = _as_bytes(self.remote.fetch_bug(bug_id))
            self.store.write_bug(bug_id, data)
            return data

    def open_attachment(self, attachment_id, force_fetch: bool = False, external: bool = False) -> bytes:
        """Return attachment bytes. Same policy as open_bug, separate namespace."""
        attachment_id = validate_id(attachment_id, "attachment")
        with self._override_if(external):
            if not force_fetch and self.store.attachment_exists(attachment_id):
                return self.store.read_attachment(attachment_id)

            self._require_network("fetch attachment", attachment_id)
            data = _as_bytes(self.remote.fetch_attachment(attachment_id))
            self.store.write_attachment(attachment_id, data)
            return data

    def load_bug(self, bug_id, force_fetch: bool = False, external: bool = False) -> BugRecord:
        """Open a bug and parse it.

        Raises:
            ParseError: the stored file is malformed (it stays on disk)
        """
        bug_id = validate_id(bug_id, "bug")
        raw = self.open_bug(bug_id, force_fetch=force_fetch, external=external)
        return parse_bug(raw, bug_id=bug_id)

    # Searching

    def search(self, criteria: SearchCriteria | None = None) -> list[ViewEntry]:
        """Run a search and make it the current view.

        Empty criteria switch back to the local view without a remote call.

        Raises:
            ValidationError: bad severity/priority/order (raised before any remote call)
            OfflineError: remote search while offline
            RemoteError: search failed (current view unchanged)
        """
        criteria = criteria or SearchCriteria()
        validate_criteria(criteria)

        if criteria.is_empty():
            self.clear_search()
            return self.list_current_view()

        self._require_network("search")
        results = self.remote.search(criteria)
        self.current_criteria = criteria
        self.current_results = list(results)
        return self.list_current_view()

    def run_named_query(self, query: NamedQuery | str) -> list[ViewEntry]:
        """Run a named query, given the query itself or its selector key."""
        if isinstance(query, str):
            found = find_query(self.queries, query)
            if found is None:
                raise ValidationError("named_query", f"No named query with key '{query}'")
            query = found
        logger.debug(f"Running named query '{query.name}'")
        return self.search(query.criteria)

    def clear_search(self) -> None:
        self.current_criteria = None
        self.current_results = []

    def list_current_view(self) -> list[ViewEntry]:
        """Current view with presence computed fresh from the store."""
        if self.current_criteria is None:
            return self._local_view()
        return [ViewEntry(entry=e, present=self._is_local(e.bug_id)) for e in self.current_results]

    def _is_local(self, bug_id: str) -> bool:
        try:
            return self.store.bug_exists(bug_id)
        except ValidationError:
            logger.warning(f"Search returned unusable bug id '{bug_id}'")
            return False

    def _local_view(self) -> list[ViewEntry]:
        view = []
        for bug_id in self.store.list_bug_ids():
            try:
                record = parse_bug(self.store.read_bug(bug_id), bug_id=bug_id)
            except ParseError as e:
                logger.warning(f"Local bug {bug_id} is unreadable: {e}")
                view.append(ViewEntry(
                    entry=SearchResultEntry(bug_id=bug_id, assignee="", title=""),
                    present=True,
                    error=str(e),
                ))
                continue
            view.append(ViewEntry(
                entry=SearchResultEntry(bug_id=bug_id, assignee=record.assignee, title=record.title),
                present=True,
            ))
        return view

    def local_bugs_where(self, field: str, value: str) -> list[BugRecord]:
        """Local bugs whose header `field` equals `value`. No remote calls."""
        if field not in HEADER_FIELDS:
            raise ValidationError("header_field", f"Unknown header field '{field}'")

        matches = []
        for bug_id in self.store.list_bug_ids():
            try:
                record = parse_bug(self.store.read_bug(bug_id), bug_id=bug_id)
            except ParseError as e:
                logger.warning(f"Skipping unreadable local bug {bug_id}: {e}")
                continue
            if header_matches(record, field, value):
                matches.append(record)
        return matches

    # Bulk operations

    def refresh_all(self, bug_ids=None) -> BulkReport:
        """Force re-fetch bugs one at a time. Attachments are not touched.

        Args:
            bug_ids: Bugs to refresh. Defaults to the locally present bugs
                in the current view.

        Raises:
            OfflineError: if offline (nothing is attempted)
        """
        self._require_network("refresh bugs")
        if bug_ids is None:
            targets = [v.bug_id for v in self.list_current_view() if v.present]
        else:
            targets = [str(b) for b in bug_ids]

        report = BulkReport(operation="refresh")
        for bug_id in targets:
            try:
                self.open_bug(bug_id, force_fetch=True)
            except BULK_ITEM_ERRORS as e:
                logger.warning(f"Refresh of bug {bug_id} failed: {e}")
                report.record_failure(bug_id, e)
                continue
            report.record_success(bug_id)

        logger.info(f"Refreshed {len(report.succeeded)}/{len(targets)} bug(s)")
        return report

    def fetch_attachments(self, bug_id, force_fetch: bool = False, external: bool = False) -> BulkReport:
        """Fetch every attachment the bug references.

        Attachments already stored are skipped unless force_fetch is set.
        The bug itself is fetched first if it is not local.
        """
        record = self.load_bug(bug_id, external=external)

        report = BulkReport(operation="fetch attachments")
        for att in record.attachments:
            try:
                self.open_attachment(att.attachment_id, force_fetch=force_fetch, external=external)
            except BULK_ITEM_ERRORS as e:
                logger.warning(f"Attachment {att.attachment_id} of bug {record.bug_id} failed: {e}")
                report.record_failure(att.attachment_id, e)
                continue
            report.record_success(att.attachment_id)
        return report

    # Writing

    def add_comment(self, bug_id, text: str, external: bool = False) -> None:
        """Post a comment. The local copy is not refreshed afterwards.

        Raises:
            ValidationError: empty comment or bad bug id
            OfflineError: offline without override
            RemoteError: post failed
        """
        bug_id = validate_id(bug_id, "bug")
        if not text or not text.strip():
            raise ValidationError("comment", "Comment text is empty")
        with self._override_if(external):
            self._require_network("post comment", bug_id)
            self.remote.post_comment(bug_id, text)
        logger.info(f"Posted comment to bug {bug_id}")


def _as_bytes(data) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    return data
