#!/usr/bin/env python3
"""
Plant list of a Siemens RDS cloud user.

The plants endpoint answers with:

    {"items": [{"id": "Pd1234567890", "isOnline": true, ...}, ...]}

Only `id` and `isOnline` are kept; other item fields are ignored. Server order
is preserved.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Iterator, Optional

import requests

from .. import config as config_mod
from ..api_auth import auth as auth_mod
from ..outcome import FailureKind, Outcome
from .http_fetch import http_generic_get


@dataclass(frozen=True)
class PlantInfo:
    id: str
    is_online: bool

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "isOnline": self.is_online}


def _plant_from_item(item: Any) -> Optional[PlantInfo]:
    if not isinstance(item, dict):
        return None
    plant_id = item.get("id")
    # Identifiers may come back as integers; keep them as strings. JSON booleans are not ids.
    if plant_id is None or plant_id == "" or isinstance(plant_id, bool) or not isinstance(plant_id, (str, int)):
        return None
    return PlantInfo(id=str(plant_id), is_online=item.get("isOnline") is True)


@dataclass(frozen=True)
class PlantList:
    plants: list[PlantInfo] = field(default_factory=list)

    def __iter__(self) -> Iterator[PlantInfo]:
        return iter(self.plants)

    def __len__(self) -> int:
        return len(self.plants)

    def to_list(self) -> list[dict[str, Any]]:
        return [p.to_dict() for p in self.plants]

    @classmethod
    def from_json(cls, text: str, *, log: Optional[logging.LoggerAdapter] = None) -> Outcome["PlantList"]:
        """Decode the plants endpoint body. Malformed input gives a failed Outcome."""
        log = log if log is not None else auth_mod.default_log(__name__)
        if not text:
            log.debug("PlantList.from_json: empty JSON element")
            return Outcome.failure(FailureKind.PAYLOAD, "empty plant list body")
        try:
            payload = json.loads(text)
        except ValueError as e:
            log.debug("PlantList.from_json: JSON syntax error (%s)", e)
            return Outcome.failure(FailureKind.PAYLOAD, f"malformed JSON: {e}")

        items = payload.get("items") if isinstance(payload, dict) else None
        if not isinstance(items, list):
            log.debug("PlantList.from_json: missing 'items' array")
            return Outcome.failure(FailureKind.PAYLOAD, "expected an object with an 'items' array")

        plants: list[PlantInfo] = []
        for index, item in enumerate(items):
            plant = _plant_from_item(item)
            if plant is None:
                log.debug("PlantList.from_json: invalid plant item at index %s", index)
                return Outcome.failure(FailureKind.PAYLOAD, f"invalid plant item at index {index}")
            plants.append(plant)
        return Outcome.success(cls(plants=plants))

    @classmethod
    def create(
        cls,
        api_key: str,
        token: str,
        *,
        url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout_seconds: Optional[float] = None,
        log: Optional[logging.LoggerAdapter] = None,
    ) -> Optional["PlantList"]:
        """Fetch and decode the plant list. Returns None on any failure."""
        return fetch_plants(
            api_key,
            token,
            url=url,
            session=session,
            timeout_seconds=timeout_seconds,
            log=log,
        ).value


def fetch_plants(
    api_key: str,
    token: str,
    *,
    url: Optional[str] = None,
    session: Optional[requests.Session] = None,
    timeout_seconds: Optional[float] = None,
    log: Optional[logging.LoggerAdapter] = None,
) -> Outcome[PlantList]:
    fetched = http_generic_get(
        api_key,
        token,
        url or config_mod.get_plants_url(),
        session=session,
        timeout_seconds=timeout_seconds,
        log=log,
    )
    if not fetched.ok:
        return Outcome.failure(fetched.kind, fetched.reason, status_code=fetched.status_code)
    return PlantList.from_json(fetched.value, log=log)


__all__ = ["PlantInfo", "PlantList", "fetch_plants"]
