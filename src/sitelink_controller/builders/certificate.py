"""Builder for Certificate resources."""

from __future__ import annotations

from ..constants import API_GROUP_VERSION, KIND_CERTIFICATE
from ..models import ManagedResource, OwnerReference


def create_certificate(
    name: str,
    subject: str,
    owner_references: list[OwnerReference] | None = None,
    ca: str = "",
    signing: bool = False,
    client: bool = False,
    server: bool = False,
    hosts: list[str] | None = None,
) -> ManagedResource:
    """Build a desired Certificate.

    Args:
        name: Certificate name, also the name of the secret holding it
        subject: Certificate subject
        owner_references: Parents for cascading deletion
        ca: Name of the signing Certificate; empty for self-signed
        signing: Whether the certificate can sign others
        client: Whether the certificate is valid for client auth
        server: Whether the certificate is valid for server auth
        hosts: Subject alternative names
    """
    spec = {
        "ca": ca,
        "subject": subject,
        "signing": signing,
        "client": client,
        "server": server,
    }
    if hosts:
        spec["hosts"] = list(hosts)

    return ManagedResource(
        kind=KIND_CERTIFICATE,
        api_version=API_GROUP_VERSION,
        name=name,
        owner_references=list(owner_references or []),
        spec=spec,
    )
