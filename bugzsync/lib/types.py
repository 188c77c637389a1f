"""
Shared data types for bugzsync.

This module contains dataclasses used across the store, parser, adapter and
coordinator to avoid circular imports.
"""

from dataclasses import dataclass, field, fields


@dataclass(frozen=True)
class SearchCriteria:
    """Filters for a remote bug search.

    Every field is optional. An empty criteria set means "show what is
    stored locally" and never reaches the remote source.
    """
    terms: str | None = None  # Free text matched against titles
    assigned_to: str | None = None
    reporter: str | None = None
    cc: str | None = None
    commenter: str | None = None
    status: str | tuple[str, ...] | None = None
    severity: str | None = None
    priority: str | None = None
    product: str | None = None
    component: str | None = None
    comments: str | None = None  # Comment text contains
    keywords: str | None = None
    order: str | None = None  # importance, assignee, date, number

    def is_empty(self) -> bool:
        return not self.to_dict()

    def statuses(self) -> tuple[str, ...]:
        """Status filter as a tuple, whether given as one value or several."""
        if not self.status:
            return ()
        if isinstance(self.status, str):
            return (self.status,)
        return tuple(self.status)

    def to_dict(self) -> dict:
        """Set fields only. Status sets become lists for schema validation."""
        result = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None or value == "" or value == ():
                continue
            if isinstance(value, (tuple, list, set, frozenset)):
                value = list(value)
            result[f.name] = value
        return result

    @classmethod
    def from_dict(cls, data: dict) -> "SearchCriteria":
        """Build criteria from a plain mapping (e.g. parsed YAML)."""
        values = dict(data)
        status = values.get("status")
        if isinstance(status, list):
            values["status"] = tuple(status)
        return cls(**values)


@dataclass(frozen=True)
class SearchResultEntry:
    """One line of search output. Does not imply the bug is cached."""
    bug_id: str
    assignee: str
    title: str


@dataclass(frozen=True)
class ViewEntry:
    """A search result annotated with local presence."""
    entry: SearchResultEntry
    present: bool
    error: str | None = None  # Set when a local file could not be parsed

    @property
    def bug_id(self) -> str:
        return self.entry.bug_id


@dataclass
class Comment:
    """A `[Comment #N]` sub-record of a bug."""
    number: int
    body: str
    header: str = ""  # Remainder of the delimiter line (author, date)


@dataclass
class AttachmentRef:
    """An `[Attachment] [id] [description]` reference."""
    attachment_id: str
    description: str


@dataclass
class BugRecord:
    """Structured view of a persisted bug."""
    headers: dict[str, str]
    comments: list[Comment] = field(default_factory=list)
    attachments: list[AttachmentRef] = field(default_factory=list)
    bug_id: str | None = None

    @property
    def title(self) -> str:
        return self.headers["Title"]

    @property
    def assignee(self) -> str:
        return self.headers["Assignee"]

    @property
    def status(self) -> str | None:
        return self.headers.get("Status")


@dataclass(frozen=True)
class NamedQuery:
    """User-defined search shortcut, selected by a single key."""
    name: str
    key: str
    criteria: SearchCriteria


@dataclass
class FetchOutcome:
    """Result of one item in a bulk operation."""
    entity_id: str
    ok: bool
    error: str | None = None


@dataclass
class BulkReport:
    """Per-item outcomes of a bulk refresh or fetch, in processing order."""
    operation: str
    outcomes: list[FetchOutcome] = field(default_factory=list)

    def record_success(self, entity_id: str) -> None:
        self.outcomes.append(FetchOutcome(entity_id=entity_id, ok=True))

    def record_failure(self, entity_id: str, error: Exception) -> None:
        self.outcomes.append(FetchOutcome(entity_id=entity_id, ok=False, error=str(error)))

    @property
    def succeeded(self) -> list[str]:
        return [o.entity_id for o in self.outcomes if o.ok]

    @property
    def failed(self) -> dict[str, str]:
        return {o.entity_id: o.error for o in self.outcomes if not o.ok}

    @property
    def ok(self) -> bool:
        return all(o.ok for o in self.outcomes)
