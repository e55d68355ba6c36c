#!/usr/bin/env python3
"""
Generic authenticated GET against the Siemens RDS cloud API.

The caller supplies a valid bearer token and any endpoint URL; the raw response
body comes back as text for the caller to decode (see `plants` for one decoder).
Token expiry is not checked here.
"""

from __future__ import annotations

import logging
from typing import Optional

import requests

from .. import config as config_mod
from ..api_auth import auth as auth_mod
from ..outcome import FailureKind, Outcome

_INVALID_URL_ERRORS = (
    requests.exceptions.MissingSchema,
    requests.exceptions.InvalidSchema,
    requests.exceptions.InvalidURL,
)


def http_generic_get(
    api_key: str,
    token: str,
    url: str,
    *,
    session: Optional[requests.Session] = None,
    timeout_seconds: Optional[float] = None,
    log: Optional[logging.LoggerAdapter] = None,
) -> Outcome[str]:
    """
    GET `url` with the subscription key and bearer token headers.

    Returns the UTF-8 decoded body on HTTP 200. Every failure (invalid URL,
    connection error, non-200, bad encoding, empty body) is logged with the
    failing step and returned as a failed Outcome; nothing is raised.
    """
    log = log if log is not None else auth_mod.default_log(__name__)
    headers = {
        "User-Agent": config_mod.USER_AGENT_BROWSER,
        config_mod.SUBSCRIPTION_KEY_HEADER: api_key,
        "Authorization": f"Bearer {token}",
    }

    sess = session if session is not None else requests.Session()
    try:
        resp = sess.get(url, headers=headers, timeout=timeout_seconds)
    except _INVALID_URL_ERRORS as e:
        log.error("http_generic_get: malformed url %r", url)
        return Outcome.failure(FailureKind.TRANSPORT, f"invalid URL {url!r}: {e}")
    except requests.RequestException as e:
        log.error("http_generic_get: unable to connect to cloud server (%s)", type(e).__name__)
        return Outcome.failure(FailureKind.TRANSPORT, auth_mod._sanitize_text(f"GET {url} failed: {e}"))
    finally:
        if session is None:
            sess.close()

    if resp.status_code != 200:
        log.error("http_generic_get: invalid HTTP response %s from cloud server", resp.status_code)
        return Outcome.failure(
            FailureKind.PROTOCOL,
            f"GET {url} failed: HTTP {resp.status_code}",
            status_code=resp.status_code,
        )

    try:
        body = resp.content.decode("utf-8")
    except UnicodeDecodeError as e:
        log.error("http_generic_get: unable to decode response from cloud server")
        return Outcome.failure(FailureKind.PAYLOAD, f"response is not UTF-8: {e}", status_code=resp.status_code)

    if not body:
        log.debug("http_generic_get: empty response body from %s", url)
        return Outcome.failure(FailureKind.PAYLOAD, "empty response body", status_code=resp.status_code)

    return Outcome.success(body, status_code=resp.status_code)


def fetch(api_key: str, token: str, url: str, **kwargs) -> str:
    """Return the raw body of an authenticated GET, or "" on any failure."""
    outcome = http_generic_get(api_key, token, url, **kwargs)
    return outcome.value if outcome.ok else ""


__all__ = ["fetch", "http_generic_get"]
