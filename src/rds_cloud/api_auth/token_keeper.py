"""
Caller-side token keeper: holds one AccessToken and replaces it once it expires.

`AccessToken` never refreshes itself. A polling worker keeps a TokenKeeper and
asks it for a token on every cycle; the keeper re-authenticates (one attempt,
no retry) only when it holds no token or the held one reports `is_expired()`.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

import requests

from ..cloud_data.http_fetch import http_generic_get
from ..cloud_data.plants import PlantList, fetch_plants
from ..outcome import Outcome
from .access_token import AccessToken, request_access_token
from .auth import default_log


class TokenKeeper:
    def __init__(
        self,
        api_key: str,
        username: str,
        password: str,
        *,
        session: Optional[requests.Session] = None,
        timeout_seconds: Optional[float] = None,
        log: Optional[logging.LoggerAdapter] = None,
    ) -> None:
        self._api_key = api_key
        self._username = username
        self._password = password
        self._session = session
        self._timeout_seconds = timeout_seconds
        self._log = log if log is not None else default_log(__name__)
        self._token: Optional[AccessToken] = None
        self._lock = threading.Lock()
        self.last_failure: Optional[Outcome] = None

    @property
    def token(self) -> Optional[AccessToken]:
        return self._token

    def invalidate(self) -> None:
        """Drop the held token so the next get_token() re-authenticates."""
        with self._lock:
            self._token = None

    def get_token(self) -> Optional[str]:
        """
        Return a usable bearer token, authenticating first if needed.

        None means the exchange failed; `last_failure` says why. The caller
        decides when to try again (typically the next polling cycle).
        """
        with self._lock:
            if self._token is not None and not self._token.is_expired():
                return self._token.get_token()

            if self._token is not None:
                self._log.info("access token expired, re-authenticating")
                self._token = None

            outcome = request_access_token(
                self._api_key,
                self._username,
                self._password,
                session=self._session,
                timeout_seconds=self._timeout_seconds,
                log=self._log,
            )
            if not outcome.ok:
                self.last_failure = outcome
                return None

            self.last_failure = None
            self._token = outcome.value
            return self._token.get_token()

    def fetch(self, url: str) -> str:
        """Authenticated GET of `url`; "" when no token or no data."""
        token = self.get_token()
        if token is None:
            return ""
        outcome = http_generic_get(
            self._api_key,
            token,
            url,
            session=self._session,
            timeout_seconds=self._timeout_seconds,
            log=self._log,
        )
        if not outcome.ok:
            self.last_failure = outcome
            return ""
        return outcome.value

    def plants(self, url: Optional[str] = None) -> Optional[PlantList]:
        """Fetch the plant list with a valid token; None on any failure."""
        token = self.get_token()
        if token is None:
            return None
        outcome = fetch_plants(
            self._api_key,
            token,
            url=url,
            session=self._session,
            timeout_seconds=self._timeout_seconds,
            log=self._log,
        )
        if not outcome.ok:
            self.last_failure = outcome
            return None
        return outcome.value


__all__ = ["TokenKeeper"]
