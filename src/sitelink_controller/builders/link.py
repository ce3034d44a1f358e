"""Builder for Link updates."""

from __future__ import annotations

from typing import Any

from ..models import ManagedResource


def create_link_update(existing: dict[str, Any], cost: int = 0, tls_credentials: str = "") -> ManagedResource:
    """Desired state of an existing Link after applying a cost and TLS credentials.

    Zero cost and empty credentials leave the current values in place.
    """
    desired = ManagedResource.from_dict(existing)
    if cost > 0:
        desired.spec["cost"] = cost
    if tls_credentials:
        desired.spec["tlsCredentials"] = tls_credentials
    return desired
