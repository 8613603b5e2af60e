# ==============================================================================
# config.py  –  Immutable run configuration
#
# Built once at process start from the environment (optionally primed from a
# .env file) and passed into every stage. Core logic never reads os.environ.
# ==============================================================================

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Final, Mapping, Optional, Union

from dotenv import load_dotenv
from sqlalchemy.engine import URL

from kickoffsync.utils.db_utils import DEFAULT_DRIVER, get_database_url, load_db_credentials
from kickoffsync.utils.errors import ConfigError

PROJECT_ROOT = Path(__file__).resolve().parents[2]
ENV_FILE = PROJECT_ROOT / ".env"

DEFAULT_LOGO_URL: Final[str] = "https://cdn-icons-png.flaticon.com/512/1165/1165218.png"
DEFAULT_SOURCES_FILE: Final[str] = "sources.json"
DEFAULT_SERVER_ID: Final[int] = 1
DEFAULT_HTTP_TIMEOUT: Final[float] = 15.0

# What to do with the destination category when the schedule fetch fails
FETCH_FAILURE_CLEAR: Final[str] = "clear"  # proceed with zero events (empties category)
FETCH_FAILURE_KEEP: Final[str] = "keep"  # skip the storage phase entirely
FETCH_FAILURE_POLICIES = (FETCH_FAILURE_CLEAR, FETCH_FAILURE_KEEP)


@dataclass(frozen=True)
class SyncConfig:
    category_name: str
    schedule_url: str
    database_url: Union[URL, str]
    daily_feed_url: str = ""
    sources_file: Path = Path(DEFAULT_SOURCES_FILE)
    logo_url: str = DEFAULT_LOGO_URL
    server_id: int = DEFAULT_SERVER_ID
    broadcaster_map: Mapping[str, str] = field(default_factory=dict)
    on_fetch_failure: str = FETCH_FAILURE_CLEAR
    http_timeout: float = DEFAULT_HTTP_TIMEOUT


# ------------------------------------------------------------------------------
# Parsing helpers
# ------------------------------------------------------------------------------


def _required(env: Mapping[str, str], key: str) -> str:
    value = (env.get(key) or "").strip()
    if not value:
        raise ConfigError(f"Missing required setting {key}")
    return value


def _parse_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"{key} must be an integer, got {raw!r}") from exc


def _parse_float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigError(f"{key} must be a number, got {raw!r}") from exc


def _parse_broadcaster_map(raw: Optional[str]) -> Dict[str, str]:
    """Decode BROADCASTER_MAP (JSON object: broadcaster name → catalog type)."""
    if raw is None or not raw.strip():
        return {}
    try:
        decoded = json.loads(raw)
    except ValueError as exc:
        raise ConfigError("BROADCASTER_MAP is not valid JSON") from exc

    if not isinstance(decoded, dict) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in decoded.items()
    ):
        raise ConfigError("BROADCASTER_MAP must map names to type strings")
    return decoded


# ------------------------------------------------------------------------------
# Public API
# ------------------------------------------------------------------------------


def load_config(
    env: Optional[Mapping[str, str]] = None,
    env_file: Optional[Path] = ENV_FILE,
) -> SyncConfig:
    """
    Build the run configuration.

    When ``env`` is omitted, ``env_file`` is loaded into the process
    environment first (existing variables win) and ``os.environ`` is read.

    Raises
    ------
    ConfigError
        If a required setting is missing or a value cannot be parsed.
    """
    if env is None:
        if env_file is not None:
            load_dotenv(dotenv_path=env_file, override=False)
        env = os.environ

    category_name = _required(env, "CATEGORY_NAME_DESTINATION")
    schedule_url = _required(env, "SCHEDULE_API_URL")

    policy = (env.get("ON_FETCH_FAILURE") or FETCH_FAILURE_CLEAR).strip().lower()
    if policy not in FETCH_FAILURE_POLICIES:
        raise ConfigError(
            f"ON_FETCH_FAILURE must be one of {FETCH_FAILURE_POLICIES}, got {policy!r}"
        )

    creds = load_db_credentials(env)
    database_url = get_database_url(creds, env.get("DB_DRIVER") or DEFAULT_DRIVER)

    return SyncConfig(
        category_name=category_name,
        schedule_url=schedule_url,
        database_url=database_url,
        daily_feed_url=(env.get("DAILY_FEED_URL") or "").strip(),
        sources_file=Path(env.get("SOURCES_FILE") or DEFAULT_SOURCES_FILE),
        logo_url=env.get("CHANNEL_LOGO_URL") or DEFAULT_LOGO_URL,
        server_id=_parse_int(env, "DEFAULT_SERVER_ID", DEFAULT_SERVER_ID),
        broadcaster_map=_parse_broadcaster_map(env.get("BROADCASTER_MAP")),
        on_fetch_failure=policy,
        http_timeout=_parse_float(env, "HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT),
    )
