"""
Remote source interface.

The coordinator only talks to the bug tracker through this protocol, so the
bugz CLI adapter can be swapped for a native client (or a test fake)
without touching the sync policy.

Every method blocks until the remote call completes. Failures raise
RemoteError; implementations own authentication and any timeout.
"""

from typing import Protocol

from bugzsync.lib.types import SearchCriteria, SearchResultEntry


class RemoteSource(Protocol):
    """Capabilities the coordinator needs from a bug tracker."""

    def search(self, criteria: SearchCriteria) -> list[SearchResultEntry]:
        """Run a search, returning results in the tracker's order."""
        ...

    def fetch_bug(self, bug_id: str) -> bytes:
        """Fetch the full text of a bug."""
        ...

    def fetch_attachment(self, attachment_id: str) -> bytes:
        """Fetch the raw content of an attachment."""
        ...

    def post_comment(self, bug_id: str, text: str) -> None:
        """Add a comment to a bug."""
        ...
