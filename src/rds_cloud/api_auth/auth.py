"""
Shared auth plumbing for the Siemens RDS cloud client.

- Credentials/config from environment variables (no hard-coded secrets)
- Logging setup with a per-run correlation id
- Redaction helpers so tokens, passwords and API keys never reach logs

Environment variables:
  - RDS_API_KEY       (required; gateway subscription key)
  - RDS_USERNAME      (required)
  - RDS_PASSWORD      (required)
  - RDS_LOG_LEVEL     (optional, default: INFO)
"""

from __future__ import annotations

import argparse
import hashlib
import logging
import re
from dataclasses import dataclass
from typing import Optional

from .. import config as _config


class CliError(RuntimeError):
    """Expected CLI failure with a user-facing message."""


LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] [run=%(run_id)s] %(message)s"

# Correlation id stamped on every record; "-" until a CLI run sets one.
_run_id = "-"
_base_factory = logging.getLogRecordFactory()


def _stamp_run_id(*args, **kwargs) -> logging.LogRecord:  # type: ignore[no-untyped-def]
    record = _base_factory(*args, **kwargs)
    record.run_id = _run_id
    return record


def configure_logging(*, run_id: str, level: str) -> logging.LoggerAdapter:
    """
    Set up root logging for one CLI run and tag every record with `run_id`.

    Unknown or empty level names mean INFO. An existing root handler setup is
    kept; only its level changes.
    """
    global _run_id
    _run_id = run_id
    # Installed once; urllib3/requests records are stamped as well.
    if logging.getLogRecordFactory() is not _stamp_run_id:
        logging.setLogRecordFactory(_stamp_run_id)

    numeric = logging.getLevelName((level or "").strip().upper())
    numeric = numeric if isinstance(numeric, int) else logging.INFO
    root = logging.getLogger()
    if root.handlers:
        root.setLevel(numeric)
    else:
        logging.basicConfig(level=numeric, format=LOG_FORMAT)
    return logging.LoggerAdapter(logging.getLogger("rds_cloud"), {})


def default_log(name: str) -> logging.LoggerAdapter:
    """Adapter over the module logger, used when a caller passes no log handle."""
    return logging.LoggerAdapter(logging.getLogger(name), {})


_REDACTED = "<redacted>"
_SECRET_FIELDS = frozenset({"password", "access_token", "api_key", "authorization", "ocp-apim-subscription-key"})

# Secret-bearing fragments of token bodies, form bodies and headers.
_SECRET_PATTERNS = [
    re.compile(r'("access_token"\s*:\s*")[^"]+(?=")', re.IGNORECASE),
    re.compile(r"((?:password|access_token)=)[^&\s]+", re.IGNORECASE),
    re.compile(r"(Bearer\s+)[^\s\"']+", re.IGNORECASE),
]


def _mask(value: object) -> str:
    if value is None:
        return "<none>"
    return _REDACTED if str(value) else "<empty>"


def _sanitize_mapping(d: dict) -> dict:
    """Copy of `d` safe for logging; secret fields are masked, never truncated."""
    return {k: _mask(v) if str(k).lower() in _SECRET_FIELDS else v for k, v in d.items()}


def _sanitize_text(text: str) -> str:
    """Scrub tokens and passwords from free-form text such as exception messages."""
    if not text:
        return text
    for pattern in _SECRET_PATTERNS:
        text = pattern.sub(lambda m: m.group(1) + _REDACTED, text)
    return text


@dataclass(frozen=True)
class Config:
    api_key: str
    username: str
    password: str
    timeout_seconds: Optional[float]


def load_config(args: argparse.Namespace, *, log: logging.LoggerAdapter) -> Config:
    _config._load_dotenv(log=log)
    api_key = _config._get_env("RDS_API_KEY")
    username = _config._get_env("RDS_USERNAME")
    password = _config._get_env("RDS_PASSWORD")

    missing = [
        k
        for k, v in [("RDS_API_KEY", api_key), ("RDS_USERNAME", username), ("RDS_PASSWORD", password)]
        if not v
    ]
    if missing:
        raise CliError(f"Missing required environment variables: {', '.join(missing)}")

    timeout_seconds: Optional[float] = _config.get_timeout_seconds()
    if getattr(args, "timeout_seconds", None):
        try:
            timeout_seconds = float(args.timeout_seconds)
        except ValueError as e:
            raise CliError(f"--timeout-seconds must be a number, got {args.timeout_seconds!r}") from e

    # Log high-level config without leaking secrets/PII.
    username_hash = hashlib.sha256(username.lower().encode("utf-8")).hexdigest()[:12]
    log.info("loaded configuration")
    log.debug(
        "config details (sanitized): %s",
        _sanitize_mapping(
            {
                "api_key": api_key,
                "username_sha256_12": username_hash,
                "token_url": _config.get_token_url(),
                "plants_url": _config.get_plants_url(),
                "timeout_seconds": timeout_seconds,
            }
        ),
    )

    return Config(
        api_key=api_key,
        username=username,
        password=password,
        timeout_seconds=timeout_seconds,
    )


__all__ = ["CliError", "Config", "configure_logging", "default_log", "load_config"]
