from __future__ import annotations

import logging
import socket
from typing import Optional, Protocol
from urllib.parse import urlsplit

import requests

from ..core.exceptions import ConfigurationError, SyncError

logger = logging.getLogger(__name__)


class SubmitTransport(Protocol):
    def submit(self, payload: dict) -> dict:
        raise NotImplementedError


class HttpSubmitTransport(SubmitTransport):
    """POST events as JSON to the submission endpoint."""

    def __init__(self, url: str, *, session: Optional[requests.Session] = None, timeout: float = 10.0):
        if not url:
            raise ConfigurationError("Submission endpoint URL is not configured")
        self._url = url
        self._session = session or requests.Session()
        self._timeout = timeout

    @property
    def url(self) -> str:
        return self._url

    def submit(self, payload: dict) -> dict:
        try:
            resp = self._session.post(self._url, json=payload, timeout=self._timeout)
        except requests.RequestException as e:
            raise SyncError(f"network error: {e}") from e

        if not resp.ok:
            raise SyncError(f"HTTP {resp.status_code}: {resp.text[:200]}")

        try:
            body = resp.json()
        except ValueError:
            body = {}
        # The relay answers 200 with {"result": "error"} when its upstream fails.
        if isinstance(body, dict) and body.get("result") == "error":
            raise SyncError(str(body.get("message") or "upstream error"))
        return body if isinstance(body, dict) else {"data": body}


def probe_online(url: str, *, timeout: float = 1.5) -> bool:
    """Cheap reachability check: can a TCP connection to the endpoint host be opened?"""
    parts = urlsplit(url)
    host = parts.hostname
    if not host:
        return False
    port = parts.port or (443 if parts.scheme == "https" else 80)
    try:
        with socket.create_connection((host, port), timeout=timeout):
            return True
    except OSError:
        return False
