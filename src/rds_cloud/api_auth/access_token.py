"""
Access token for a Siemens RDS cloud user.

`request_access_token()` POSTs the API key and user credentials to the token
endpoint and wraps the JSON reply in an `AccessToken`. `AccessToken.is_expired()`
parses the server's `.expires` text once and memoizes the result; when the text
cannot be parsed the token is assumed valid for one day from the first check.

The token endpoint insists on a browser user agent and `text/plain` content
negotiation even though it answers with JSON. Square brackets in credentials
are sent literally; everything else is percent-encoded.
"""

from __future__ import annotations

import json
import logging
import re
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Optional
from urllib.parse import quote

import requests

from .. import config as _config
from ..outcome import FailureKind, Outcome
from .auth import _sanitize_text, default_log

# Server format "EEE, dd MMM yyyy HH:mm:ss z", e.g. "Wed, 21 Oct 2099 07:28:00 GMT".
# The zone is split off and resolved separately by _resolve_zone().
EXPIRES_FORMAT = "%a, %d %b %Y %H:%M:%S"

# Validity assumed when `.expires` is unparsable. Candidate for configurability.
EXPIRY_FALLBACK = timedelta(days=1)

# Zone abbreviations as fixed offsets in minutes; a daylight name carries its DST offset.
_ZONE_OFFSETS = {
    "GMT": 0,
    "UTC": 0,
    "UT": 0,
    "Z": 0,
    "WET": 0,
    "BST": 60,
    "WEST": 60,
    "CET": 60,
    "MET": 60,
    "CEST": 120,
    "MEST": 120,
    "EET": 120,
    "EEST": 180,
    "MSK": 180,
    "EST": -300,
    "EDT": -240,
    "CST": -360,
    "CDT": -300,
    "MST": -420,
    "MDT": -360,
    "PST": -480,
    "PDT": -420,
}

# "GMT+01:00", "UTC-5", "+0100", "-03:30"
_OFFSET_RE = re.compile(r"^(?:GMT|UTC)?([+-])(\d{1,2})(?::?(\d{2}))?$")


def _resolve_zone(zone: str) -> timezone:
    name = zone.upper()
    if name in _ZONE_OFFSETS:
        return timezone(timedelta(minutes=_ZONE_OFFSETS[name]))
    m = _OFFSET_RE.match(name)
    if m is None:
        raise ValueError(f"unknown time zone {zone!r}")
    hours, minutes = int(m.group(2)), int(m.group(3) or 0)
    if hours > 23 or minutes > 59:
        raise ValueError(f"time zone offset out of range {zone!r}")
    offset = timedelta(hours=hours, minutes=minutes)
    return timezone(-offset if m.group(1) == "-" else offset)


def _parse_expiry(raw: str) -> datetime:
    """
    Parse the `.expires` text into an aware UTC datetime.

    Accepts named zones (GMT, CET, PST, ...) and numeric offsets (GMT+01:00,
    +0100). Raises ValueError for anything else.
    """
    if not isinstance(raw, str) or not raw.strip():
        raise ValueError("empty expiry timestamp")
    stamp, _, zone = raw.strip().rpartition(" ")
    if not stamp:
        raise ValueError(f"missing time zone in {raw!r}")
    local = datetime.strptime(stamp, EXPIRES_FORMAT)
    return local.replace(tzinfo=_resolve_zone(zone)).astimezone(timezone.utc)


@dataclass(eq=False)
class AccessToken:
    token: str
    expires_raw: str = ""
    _expires_at: Optional[datetime] = field(default=None, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    @classmethod
    def from_payload(cls, payload: Any) -> Optional["AccessToken"]:
        """Build a token from the decoded JSON reply; None if `access_token` is missing."""
        if not isinstance(payload, dict):
            return None
        token = payload.get("access_token")
        if not isinstance(token, str) or not token:
            return None
        expires = payload.get(".expires")
        return cls(token=token, expires_raw=expires if isinstance(expires, str) else "")

    @classmethod
    def create(
        cls,
        api_key: str,
        username: str,
        password: str,
        **kwargs: Any,
    ) -> Optional["AccessToken"]:
        """
        Exchange credentials for a token. Returns None on any failure.

        Keyword arguments are passed to `request_access_token()`.
        """
        return request_access_token(api_key, username, password, **kwargs).value

    def get_token(self) -> str:
        return self.token

    def _resolve_expiry(self, now: datetime, log: logging.LoggerAdapter) -> datetime:
        with self._lock:
            if self._expires_at is None:
                try:
                    self._expires_at = _parse_expiry(self.expires_raw)
                except ValueError as e:
                    log.debug("is_expired: unparsable expiry %r (%s), assuming %s", self.expires_raw, e, EXPIRY_FALLBACK)
                    self._expires_at = now + EXPIRY_FALLBACK
            return self._expires_at

    @property
    def expires_at(self) -> datetime:
        """Resolved expiry; computed on first access and fixed afterwards."""
        return self._resolve_expiry(datetime.now(timezone.utc), default_log(__name__))

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """
        True once the resolved expiry lies strictly before `now` (default: current UTC time).
        """
        now = now if now is not None else datetime.now(timezone.utc)
        expires_at = self._resolve_expiry(now, default_log(__name__))
        return expires_at is None or expires_at < now


def build_token_request(username: str, password: str) -> bytes:
    """
    Return the token POST body as UTF-8 bytes.

    Credentials are percent-encoded except for "[" and "]", which the token
    endpoint expects verbatim.
    """
    return _config.TOKEN_REQUEST_TMPL.format(
        username=quote(username, safe="[]"),
        password=quote(password, safe="[]"),
    ).encode("utf-8")


def request_access_token(
    api_key: str,
    username: str,
    password: str,
    *,
    session: Optional[requests.Session] = None,
    url: Optional[str] = None,
    timeout_seconds: Optional[float] = None,
    log: Optional[logging.LoggerAdapter] = None,
) -> Outcome[AccessToken]:
    """
    POST the credentials to the token endpoint and decode the reply.

    Never raises: transport, HTTP-status and payload problems are logged and
    returned as a failed Outcome. No retries; one network call per invocation.
    """
    log = log if log is not None else default_log(__name__)
    url = url or _config.get_token_url()
    headers = {
        "User-Agent": _config.USER_AGENT_BROWSER,
        "Accept": _config.TEXT_PLAIN,
        "Content-Type": _config.TEXT_PLAIN,
        _config.SUBSCRIPTION_KEY_HEADER: api_key,
    }

    log.info("requesting access token")
    sess = session if session is not None else requests.Session()
    try:
        resp = sess.post(url, data=build_token_request(username, password), headers=headers, timeout=timeout_seconds)
    except requests.RequestException as e:
        log.error("request_access_token: unable to reach cloud server (%s)", type(e).__name__)
        return Outcome.failure(FailureKind.TRANSPORT, _sanitize_text(f"POST {url} failed: {e}"))
    finally:
        if session is None:
            sess.close()

    if resp.status_code != 200:
        log.error("request_access_token: invalid HTTP response %s from cloud server", resp.status_code)
        return Outcome.failure(
            FailureKind.PROTOCOL,
            f"POST {url} failed: HTTP {resp.status_code}",
            status_code=resp.status_code,
        )

    try:
        body = resp.content.decode("utf-8")
    except UnicodeDecodeError as e:
        log.error("request_access_token: unable to decode response from cloud server")
        return Outcome.failure(FailureKind.PAYLOAD, f"response is not UTF-8: {e}", status_code=resp.status_code)

    if not body.strip():
        log.debug("request_access_token: empty JSON element")
        return Outcome.failure(FailureKind.PAYLOAD, "empty response body", status_code=resp.status_code)

    try:
        payload = json.loads(body)
    except ValueError as e:
        log.debug("request_access_token: JSON syntax error (%s)", e)
        return Outcome.failure(FailureKind.PAYLOAD, f"malformed JSON: {e}", status_code=resp.status_code)

    token = AccessToken.from_payload(payload)
    if token is None:
        keys = sorted(payload.keys()) if isinstance(payload, dict) else type(payload).__name__
        log.warning("request_access_token: response missing access_token (keys=%s)", keys)
        return Outcome.failure(FailureKind.PAYLOAD, "response missing access_token", status_code=resp.status_code)

    log.info("access token acquired")
    return Outcome.success(token, status_code=resp.status_code)


__all__ = ["AccessToken", "EXPIRES_FORMAT", "EXPIRY_FALLBACK", "build_token_request", "request_access_token"]
