"""
Configuration loader for bugzsync.

Loads bugzsync.env from the config directory, then applies environment
overrides. A missing file means "use the defaults".
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from bugzsync.lib import envparse
from bugzsync.lib.errors import ConfigError

logger = logging.getLogger(__name__)


CONFIG_FILENAME = "bugzsync.env"
QUERIES_FILENAME = "queries.yaml"
DEFAULT_HOME = "~/.bugzsync"
DEFAULT_BUGZ_COMMAND = "bugz"
DEFAULT_BUGZ_TIMEOUT = 120


@dataclass
class SyncConfig:
    """Settings for the store and the bugz adapter."""
    config_dir: Path
    store_dir: Path
    bugz_command: str = DEFAULT_BUGZ_COMMAND
    base_url: str = ""
    user: str = ""
    skip_auth: bool = False
    columns: int | None = None
    timeout: int = DEFAULT_BUGZ_TIMEOUT
    unplugged: bool = False
    extra: dict[str, str] = field(default_factory=dict)  # Unrecognised keys

    @property
    def queries_path(self) -> Path:
        return self.config_dir / QUERIES_FILENAME


def get_config_dir() -> Path:
    """Config directory: $BUGZSYNC_HOME, else ~/.bugzsync."""
    home = os.environ.get("BUGZSYNC_HOME")
    if home:
        return Path(home).expanduser()
    return Path(DEFAULT_HOME).expanduser()


def _parse_int(env: dict, key: str, default: int | None) -> int | None:
    raw = env.get(key, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{key} must be an integer, got '{raw}'") from None
    if value <= 0:
        raise ConfigError(f"{key} must be positive, got {value}")
    return value


KNOWN_KEYS = {
    "STORE_DIR", "BUGZ_COMMAND", "BUGZ_BASE_URL", "BUGZ_USER",
    "BUGZ_SKIP_AUTH", "BUGZ_COLUMNS", "BUGZ_TIMEOUT", "UNPLUGGED",
}


def load_sync_config(config_dir: Path | None = None) -> SyncConfig:
    """Load bugzsync.env and return SyncConfig.

    Raises:
        ConfigError: if the file is malformed
    """
    config_dir = Path(config_dir) if config_dir else get_config_dir()
    env_path = config_dir / CONFIG_FILENAME

    env: dict[str, str] = {}
    if env_path.exists():
        try:
            env = envparse.load_env(env_path)
        except ValueError as e:
            raise ConfigError(str(e)) from None
    else:
        logger.debug(f"No {CONFIG_FILENAME} in {config_dir}, using defaults")

    store_dir = os.environ.get("BUGZSYNC_STORE_DIR") or env.get("STORE_DIR")
    store_path = Path(store_dir).expanduser() if store_dir else config_dir / "bugs"

    unplugged = envparse.parse_bool(env.get("UNPLUGGED"))
    if "BUGZSYNC_UNPLUGGED" in os.environ:
        unplugged = envparse.parse_bool(os.environ["BUGZSYNC_UNPLUGGED"])

    extra = {k: v for k, v in env.items() if k not in KNOWN_KEYS}
    for key in extra:
        logger.warning(f"Unknown key {key} in {env_path}, ignoring")

    return SyncConfig(
        config_dir=config_dir,
        store_dir=store_path,
        bugz_command=env.get("BUGZ_COMMAND", DEFAULT_BUGZ_COMMAND) or DEFAULT_BUGZ_COMMAND,
        base_url=env.get("BUGZ_BASE_URL", ""),
        user=env.get("BUGZ_USER", ""),
        skip_auth=envparse.parse_bool(env.get("BUGZ_SKIP_AUTH")),
        columns=_parse_int(env, "BUGZ_COLUMNS", None),
        timeout=_parse_int(env, "BUGZ_TIMEOUT", DEFAULT_BUGZ_TIMEOUT),
        unplugged=unplugged,
        extra=extra,
    )
