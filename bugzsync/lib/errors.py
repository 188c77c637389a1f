"""
Error taxonomy for bugzsync.

Every error carries enough context (operation, identifier) for a front end
to report it precisely. Nothing in the library swallows these; only bulk
operations turn per-item failures into report entries.
"""


class BugzSyncError(Exception):
    """Base class for all bugzsync errors."""
    pass


class ConfigError(BugzSyncError):
    """Configuration is unusable (e.g. the store root does not exist)."""
    pass


class ValidationError(BugzSyncError):
    """Input rejected before any I/O."""

    def __init__(self, schema_name: str, message: str, path: str = None):
        self.schema_name = schema_name
        self.path = path
        super().__init__(f"[{schema_name}] {message}" + (f" at {path}" if path else ""))


class RemoteError(BugzSyncError):
    """The remote source failed a search, fetch or comment post."""

    def __init__(self, operation: str, message: str, entity_id: str | None = None):
        self.operation = operation
        self.entity_id = entity_id
        self.message = message
        target = f" {entity_id}" if entity_id else ""
        super().__init__(f"{operation}{target} failed: {message}")


class ParseError(BugzSyncError):
    """A persisted bug file is malformed. The file is left on disk."""

    def __init__(self, message: str, bug_id: str | None = None):
        self.bug_id = bug_id
        prefix = f"bug {bug_id}: " if bug_id else ""
        super().__init__(f"{prefix}{message}")


class OfflineError(BugzSyncError):
    """A network operation was attempted while unplugged."""

    def __init__(self, operation: str, entity_id: str | None = None):
        self.operation = operation
        self.entity_id = entity_id
        target = f" {entity_id}" if entity_id else ""
        super().__init__(f"Cannot {operation}{target}: offline mode is active")


class NotFoundError(BugzSyncError):
    """Requested entity has no copy in the local store."""

    def __init__(self, namespace: str, entity_id: str):
        self.namespace = namespace
        self.entity_id = entity_id
        super().__init__(f"No local copy of {namespace} {entity_id}")
