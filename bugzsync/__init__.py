"""Local cache and sync layer for Bugzilla bugs fetched through the bugz CLI."""

__version__ = "0.3.0"
