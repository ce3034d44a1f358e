"""Builder for SecuredAccess resources."""

from __future__ import annotations

from ..constants import API_GROUP_VERSION, KIND_SECURED_ACCESS
from ..models import ManagedResource, OwnerReference


def create_secured_access(
    name: str,
    selector: dict[str, str],
    ports: dict[str, int],
    issuer: str,
    certificate: str,
    owner_references: list[OwnerReference] | None = None,
    access_type: str = "",
) -> ManagedResource:
    """Build a desired SecuredAccess exposing the selected pods.

    Args:
        name: SecuredAccess name
        selector: Label selector targeting the backing pods
        ports: Port name to port number, exposed in the given order
        issuer: Name of the Certificate that signs the TLS credentials
        certificate: Name of the secret holding the TLS credentials
        owner_references: Parents for cascading deletion
        access_type: Access type (e.g. "route", "loadbalancer"); empty for the site default
    """
    spec = {
        "selector": dict(selector),
        "ports": [{"name": port_name, "port": port} for port_name, port in ports.items()],
        "issuer": issuer,
        "certificate": certificate,
    }
    if access_type:
        spec["accessType"] = access_type

    return ManagedResource(
        kind=KIND_SECURED_ACCESS,
        api_version=API_GROUP_VERSION,
        name=name,
        owner_references=list(owner_references or []),
        spec=spec,
    )
