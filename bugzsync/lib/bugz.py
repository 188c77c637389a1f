"""
Remote source adapter for the bugz command-line client.

Each operation is one blocking `bugz` invocation with a timeout. Non-zero
exits, timeouts and a missing executable all surface as RemoteError.
"""

import logging
import re
import shlex
import subprocess
from dataclasses import dataclass

from bugzsync.lib.config import DEFAULT_BUGZ_TIMEOUT, SyncConfig
from bugzsync.lib.errors import RemoteError
from bugzsync.lib.types import SearchCriteria, SearchResultEntry

logger = logging.getLogger(__name__)


# `bugz search` prints " <id> <assignee padded> <title>" per result
SEARCH_LINE_RE = re.compile(r'^\s*(\d+)\s+(\S+)(?:\s+(.*?))?\s*$')

# SearchCriteria field -> bugz search option
SEARCH_OPTIONS = (
    ("assigned_to", "--assigned-to"),
    ("reporter", "--reporter"),
    ("cc", "--cc"),
    ("commenter", "--commenter"),
    ("severity", "--severity"),
    ("priority", "--priority"),
    ("product", "--product"),
    ("component", "--component"),
    ("comments", "--comments"),
    ("keywords", "--keywords"),
    ("order", "--order"),
)


@dataclass
class BugzResult:
    """Result of a bugz command."""
    returncode: int
    stdout: bytes
    stderr: str
    timed_out: bool = False

    @property
    def success(self) -> bool:
        return self.returncode == 0 and not self.timed_out

    @property
    def text(self) -> str:
        return self.stdout.decode("utf-8", errors="replace")

    def error_message(self) -> str:
        if self.timed_out:
            return self.stderr
        return self.stderr.strip() or f"bugz exited with code {self.returncode}"


def run_bugz(cmd: list[str], timeout: int = DEFAULT_BUGZ_TIMEOUT) -> BugzResult:
    """
    Run a bugz command with timeout handling.

    stdout is kept as bytes since attachments may be binary.

    Raises:
        FileNotFoundError: if the bugz executable is missing
    """
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            timeout=timeout,
        )
        return BugzResult(
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr.decode("utf-8", errors="replace"),
        )
    except subprocess.TimeoutExpired:
        return BugzResult(
            returncode=-1,
            stdout=b"",
            stderr=f"Command timed out after {timeout}s",
            timed_out=True,
        )


def build_search_args(criteria: SearchCriteria) -> list[str]:
    """Translate criteria into `bugz search` arguments."""
    args = ["search"]
    for status in criteria.statuses():
        args += ["--status", status]
    for attr, option in SEARCH_OPTIONS:
        value = getattr(criteria, attr)
        if value:
            args += [option, value]
    if criteria.terms:
        # terms may start with "-"
        args += ["--"] + criteria.terms.split()
    return args


def parse_search_output(output: str) -> list[SearchResultEntry]:
    """Parse `bugz search` stdout. Info and blank lines are skipped."""
    results = []
    for line in output.splitlines():
        match = SEARCH_LINE_RE.match(line)
        if not match:
            continue
        results.append(SearchResultEntry(
            bug_id=match.group(1),
            assignee=match.group(2),
            title=match.group(3) or "",
        ))
    return results


class BugzRemote:
    """RemoteSource backed by the bugz CLI."""

    def __init__(
        self,
        command: str = "bugz",
        base_url: str = "",
        user: str = "",
        skip_auth: bool = False,
        columns: int | None = None,
        timeout: int = DEFAULT_BUGZ_TIMEOUT,
    ):
        self.command = shlex.split(command)
        self.base_url = base_url
        self.user = user
        self.skip_auth = skip_auth
        self.columns = columns
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: SyncConfig) -> "BugzRemote":
        return cls(
            command=config.bugz_command,
            base_url=config.base_url,
            user=config.user,
            skip_auth=config.skip_auth,
            columns=config.columns,
            timeout=config.timeout,
        )

    def base_command(self) -> list[str]:
        """bugz executable plus global options, before the subcommand."""
        cmd = list(self.command)
        if self.base_url:
            cmd += ["--base", self.base_url]
        if self.user:
            cmd += ["--user", self.user]
        if self.skip_auth:
            cmd.append("--skip-auth")
        if self.columns:
            cmd += ["--columns", str(self.columns)]
        return cmd

    def _run(self, operation: str, args: list[str], entity_id: str | None = None) -> BugzResult:
        cmd = self.base_command() + args
        logger.debug(f"Running {operation}: {shlex.join(cmd)}")
        try:
            result = run_bugz(cmd, timeout=self.timeout)
        except FileNotFoundError:
            raise RemoteError(operation, f"bugz command not found: {self.command[0]}", entity_id) from None
        except subprocess.SubprocessError as e:
            raise RemoteError(operation, str(e), entity_id) from None

        if not result.success:
            raise RemoteError(operation, result.error_message(), entity_id)
        return result

    def search(self, criteria: SearchCriteria) -> list[SearchResultEntry]:
        result = self._run("search", build_search_args(criteria))
        entries = parse_search_output(result.text)
        logger.info(f"Search returned {len(entries)} bug(s)")
        return entries

    def fetch_bug(self, bug_id: str) -> bytes:
        logger.info(f"Fetching bug {bug_id}")
        return self._run("fetch bug", ["get", str(bug_id)], str(bug_id)).stdout

    def fetch_attachment(self, attachment_id: str) -> bytes:
        logger.info(f"Fetching attachment {attachment_id}")
        result = self._run(
            "fetch attachment", ["attachment", "--view", str(attachment_id)], str(attachment_id)
        )
        return result.stdout

    def post_comment(self, bug_id: str, text: str) -> None:
        logger.info(f"Posting comment to bug {bug_id}")
        self._run("post comment", ["modify", f"--comment={text}", str(bug_id)], str(bug_id))


def check_bugz_available(command: str = "bugz") -> tuple[bool, str]:
    """Check the bugz CLI is installed.

    Returns: (ok, error_message)
    """
    try:
        result = subprocess.run(
            shlex.split(command) + ["--help"],
            capture_output=True,
            timeout=10,
        )
        if result.returncode != 0:
            return False, f"bugz command failed: {command}"
        return True, ""
    except FileNotFoundError:
        return False, f"bugz command not found: {command}\n  Install: pip install pybugz"
    except subprocess.TimeoutExpired:
        return False, "bugz timed out"
