"""Track the externally reachable URL of the grant server."""

from __future__ import annotations

import logging
import threading
from typing import Any

from ..constants import (
    EVENT_REASON_GRANT_URL_CHANGED,
    GRANT_SERVER_PORT_NAME,
    KIND_SECURED_ACCESS,
)
from ..logging import log_resource_event

logger = logging.getLogger(__name__)


def select_endpoint(endpoints: list[dict[str, Any]], port_name: str = GRANT_SERVER_PORT_NAME) -> dict[str, Any] | None:
    """Pick the endpoint for the named port, falling back to the first one."""
    for endpoint in endpoints:
        if endpoint.get("name") == port_name and endpoint.get("host"):
            return endpoint
    for endpoint in endpoints:
        if endpoint.get("host"):
            return endpoint
    return None


class GrantServerUrl:
    """SecuredAccess watch handler recording where grants can be redeemed.

    An explicitly configured base URL always wins over assigned endpoints.
    """

    def __init__(self, base_url: str = ""):
        self._base_url = base_url
        self._url = base_url
        self._lock = threading.Lock()

    @property
    def url(self) -> str:
        with self._lock:
            return self._url

    def __call__(self, event_type: str, obj: dict[str, Any]) -> None:
        self.secured_access_changed(event_type, obj)

    def secured_access_changed(self, event_type: str, obj: dict[str, Any]) -> None:
        if self._base_url:
            return

        metadata = obj.get("metadata") or {}
        url = ""
        if event_type != "DELETED":
            endpoints = (obj.get("status") or {}).get("endpoints") or []
            endpoint = select_endpoint(endpoints)
            if endpoint is None:
                return
            url = f"https://{endpoint['host']}"
            if endpoint.get("port"):
                url += f":{endpoint['port']}"

        with self._lock:
            if url == self._url:
                return
            self._url = url

        log_resource_event(
            logger, KIND_SECURED_ACCESS, metadata.get("name", "unknown"), metadata.get("namespace", ""),
            event="grant_url", reason=EVENT_REASON_GRANT_URL_CHANGED,
            message=f"Grant server URL is now {url or 'unset'}",
        )
