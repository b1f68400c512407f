"""Runtime configuration read from the environment.

Every setting has a default so the tool works without any configuration.
CLI flags take precedence over these values.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Environment configuration
# ---------------------------------------------------------------------------

DEFAULT_RAW_BASE_URL = "https://raw.githubusercontent.com"
DEFAULT_HTTP_TIMEOUT = 30.0
DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_PATCHES_FILE = "patches.json"


@dataclass(frozen=True)
class Settings:
    """Resolved settings for a single invocation."""

    raw_base_url: str = DEFAULT_RAW_BASE_URL
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    log_level: str = DEFAULT_LOG_LEVEL
    github_token: str = ""


def load_settings(environ: dict[str, str] | None = None) -> Settings:
    """Build ``Settings`` from *environ* (defaults to ``os.environ``)."""
    env = os.environ if environ is None else environ

    timeout_raw = env.get("VENDAUDIT_HTTP_TIMEOUT", "")
    try:
        timeout = float(timeout_raw) if timeout_raw else DEFAULT_HTTP_TIMEOUT
    except ValueError:
        raise ValueError(f"VENDAUDIT_HTTP_TIMEOUT must be a number, got: {timeout_raw!r}")

    return Settings(
        raw_base_url=env.get("VENDAUDIT_RAW_BASE_URL", DEFAULT_RAW_BASE_URL).rstrip("/"),
        http_timeout=timeout,
        log_level=env.get("VENDAUDIT_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
        github_token=env.get("GITHUB_TOKEN", ""),
    )
