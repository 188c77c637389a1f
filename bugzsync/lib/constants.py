"""Shared constants for bugzsync."""

import re

# Bug and attachment IDs double as filenames in the local store
ID_PATTERN = re.compile(r'^[A-Za-z0-9][A-Za-z0-9_.-]*$')
MAX_ID_LEN = 64

# Header fields printed by `bugz get`, in display order
HEADER_FIELDS = (
    "Title",
    "Assignee",
    "Reported",
    "Updated",
    "Status",
    "Severity",
    "Priority",
    "Reporter",
    "Product",
    "Component",
    "CC",
    "Comments",
    "Attachments",
    "Blocked",
    "DependsOn",
)
REQUIRED_HEADER_FIELDS = ("Title", "Assignee")

SEVERITIES = ("blocker", "critical", "major", "normal", "minor", "trivial", "enhancement", "QA")
PRIORITIES = ("P1", "P2", "P3", "P4", "P5")
ORDERINGS = ("importance", "assignee", "date", "number")

# Local store layout
BUG_SUFFIX = ".bug"
ATTACHMENTS_DIR = "attachments"
