"""
Siemens RDS cloud URL and environment configuration.

Loads .env and exposes the base URL, derived endpoint URLs and the fixed request
header values the cloud gateway expects. URLs can be overridden via environment
variables for environment switching (e.g. a local test gateway).

Environment variables:
  - RDS_API_BASE_URL       (optional, default: https://api.gla.siemens.com)
  - RDS_TIMEOUT_SECONDS    (optional; unset = no timeout, the requests default)
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional


_DEFAULT_API_BASE = "https://api.gla.siemens.com"

# Gateway header carrying the per-application subscription (API) key.
SUBSCRIPTION_KEY_HEADER = "Ocp-Apim-Subscription-Key"

# The token endpoint rejects requests without a recognised browser user agent.
USER_AGENT_BROWSER = "Mozilla/5.0 (Windows NT 10.0; WOW64; rv:40.0) Gecko/20100101 Firefox/40.0"

TEXT_PLAIN = "text/plain"

# Body of the token POST; values are percent-encoded by the caller.
TOKEN_REQUEST_TMPL = "grant_type=password&username={username}&password={password}"


def _load_dotenv(log: Optional[logging.LoggerAdapter] = None) -> None:
    """
    Load a .env file into the process environment (if one exists).

    Search order:
    1. Current working directory (.env)
    2. The project root, i.e. three levels up from this file
       (src/rds_cloud/config.py -> project root)

    Shell / CI environment variables already set take priority: load_dotenv()
    is always called with override=False.
    """
    from dotenv import load_dotenv

    cwd_env = Path.cwd() / ".env"
    project_root_env = Path(__file__).resolve().parents[2] / ".env"

    env_file: Optional[Path] = None
    if cwd_env.is_file():
        env_file = cwd_env
    elif project_root_env.is_file():
        env_file = project_root_env

    if env_file is None:
        return

    loaded = load_dotenv(env_file, override=False)
    if log is not None:
        if loaded:
            log.debug("loaded .env from %s (shell vars take precedence)", env_file)
        else:
            log.debug(
                ".env found at %s but all variables were already set in the environment",
                env_file,
            )


def _get_env(name: str, default: Optional[str] = None) -> Optional[str]:
    """Get environment variable, stripped; return default if unset or empty."""
    value = os.getenv(name)
    if value is None:
        return default
    value = value.strip()
    return value or default


# Load .env on module import so URL getters see env vars.
_load_dotenv()


def get_api_base_url() -> str:
    """Return API base URL (e.g. for /api/auth/token, /api/sitesfilter/...)."""
    return _get_env("RDS_API_BASE_URL", _DEFAULT_API_BASE) or _DEFAULT_API_BASE


def get_token_url() -> str:
    """Return full token endpoint URL."""
    return f"{get_api_base_url().rstrip('/')}/api/auth/token"


def get_plants_url() -> str:
    """Return plant list endpoint URL."""
    return f"{get_api_base_url().rstrip('/')}/api/sitesfilter/v1/plants"


def get_timeout_seconds() -> Optional[float]:
    """
    Return the HTTP timeout from RDS_TIMEOUT_SECONDS, or None.

    None means no timeout is passed to requests. Non-numeric or non-positive
    values are ignored.
    """
    raw = _get_env("RDS_TIMEOUT_SECONDS")
    if raw is None:
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    return value if value > 0 else None
