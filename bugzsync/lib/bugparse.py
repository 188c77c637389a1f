"""
Bug file parser for bugzsync.

Extracts headers, comments and attachment references from the text that
`bugz get` prints and the local store persists:

    Title       : Crash on startup
    Assignee    : alice@example.com
    Status      : NEW
    [Attachment] [4471] [backtrace.txt]
    [Comment #1] bob : 2024-03-01 10:12
    reproduced
"""

import re

from bugzsync.lib.constants import HEADER_FIELDS, REQUIRED_HEADER_FIELDS
from bugzsync.lib.errors import ParseError
from bugzsync.lib.types import AttachmentRef, BugRecord, Comment

HEADER_RE = re.compile(r'^\s*(' + '|'.join(HEADER_FIELDS) + r')\s*:\s*(.*?)\s*$')
COMMENT_RE = re.compile(r'^\[Comment #(\d+)\]\s*(.*?)\s*$')
ATTACHMENT_RE = re.compile(r'^\[Attachment\]\s*\[([^\]]+)\]\s*\[(.*)\]\s*$')

# Column width used when writing headers back out
HEADER_WIDTH = 12


def _close_comment(current: Comment | None, body_lines: list[str], comments: list[Comment]) -> None:
    if current is None:
        return
    # Trim blank lines at either end, keep inner spacing
    while body_lines and not body_lines[0].strip():
        body_lines.pop(0)
    while body_lines and not body_lines[-1].strip():
        body_lines.pop()
    current.body = "\n".join(body_lines)
    comments.append(current)


def parse_bug(raw: str | bytes, bug_id: str | None = None) -> BugRecord:
    """Parse a persisted bug into a BugRecord.

    Unknown header-like lines are ignored. Title and Assignee are the only
    required fields.

    Raises:
        ParseError: if Title or Assignee is missing
    """
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")

    headers: dict[str, str] = {}
    comments: list[Comment] = []
    attachments: list[AttachmentRef] = []
    current = None
    body_lines: list[str] = []

    for line in raw.splitlines():
        comment_match = COMMENT_RE.match(line)
        if comment_match:
            _close_comment(current, body_lines, comments)
            current = Comment(
                number=int(comment_match.group(1)),
                body="",
                header=comment_match.group(2),
            )
            body_lines = []
            continue

        attachment_match = ATTACHMENT_RE.match(line)
        if attachment_match:
            _close_comment(current, body_lines, comments)
            current = None
            body_lines = []
            attachments.append(AttachmentRef(
                attachment_id=attachment_match.group(1).strip(),
                description=attachment_match.group(2).strip(),
            ))
            continue

        if current is not None:
            body_lines.append(line)
            continue

        header_match = HEADER_RE.match(line)
        if header_match:
            headers[header_match.group(1)] = header_match.group(2)

    _close_comment(current, body_lines, comments)

    missing = [f for f in REQUIRED_HEADER_FIELDS if f not in headers]
    if missing:
        raise ParseError(f"Missing required header(s): {', '.join(missing)}", bug_id=bug_id)

    return BugRecord(
        headers=headers,
        comments=comments,
        attachments=attachments,
        bug_id=bug_id,
    )


def render_bug(record: BugRecord) -> str:
    """Write a BugRecord out in the grammar parse_bug() reads."""
    lines = []
    for name in HEADER_FIELDS:
        if name in record.headers:
            lines.append(f"{name:<{HEADER_WIDTH}}: {record.headers[name]}")

    for att in record.attachments:
        lines.append(f"[Attachment] [{att.attachment_id}] [{att.description}]")

    for comment in record.comments:
        delimiter = f"[Comment #{comment.number}]"
        if comment.header:
            delimiter += f" {comment.header}"
        lines.append("")
        lines.append(delimiter)
        if comment.body:
            lines.append(comment.body)

    return "\n".join(lines) + "\n"


def header_matches(record: BugRecord, field: str, value: str) -> bool:
    """True if the record's header `field` equals `value` (case-insensitive).

    Raises:
        ValueError: if field is not a known header name
    """
    if field not in HEADER_FIELDS:
        raise ValueError(f"Unknown header field: {field}")
    actual = record.headers.get(field)
    if actual is None:
        return False
    return actual.strip().lower() == value.strip().lower()
