"""Registry of the resource kinds the controller reads and writes."""

from __future__ import annotations

from dataclasses import dataclass

from ...constants import (
    API_GROUP,
    API_VERSION,
    KIND_CERTIFICATE,
    KIND_LINK,
    KIND_POD,
    KIND_SECRET,
    KIND_SECURED_ACCESS,
    KIND_SITE,
)
from ...utils.errors import StoreError


@dataclass(frozen=True)
class ResourceKind:
    """Addressing information for one resource kind."""

    kind: str
    group: str
    version: str
    plural: str

    @property
    def is_core(self) -> bool:
        return self.group == ""

    @property
    def api_version(self) -> str:
        return f"{self.group}/{self.version}" if self.group else self.version

    @property
    def resource(self) -> str:
        """Resource name as it appears in API server messages, e.g. ``links.skupper.io``."""
        return f"{self.plural}.{self.group}" if self.group else self.plural


KINDS: dict[str, ResourceKind] = {
    KIND_SITE: ResourceKind(KIND_SITE, API_GROUP, API_VERSION, "sites"),
    KIND_LINK: ResourceKind(KIND_LINK, API_GROUP, API_VERSION, "links"),
    KIND_CERTIFICATE: ResourceKind(KIND_CERTIFICATE, API_GROUP, API_VERSION, "certificates"),
    KIND_SECURED_ACCESS: ResourceKind(KIND_SECURED_ACCESS, API_GROUP, API_VERSION, "securedaccesses"),
    KIND_POD: ResourceKind(KIND_POD, "", "v1", "pods"),
    KIND_SECRET: ResourceKind(KIND_SECRET, "", "v1", "secrets"),
}


def get_kind(kind: str) -> ResourceKind:
    """Look up a registered kind.

    Raises:
        StoreError: If the kind is not registered
    """
    try:
        return KINDS[kind]
    except KeyError:
        raise StoreError(f"resource kind {kind} is not supported") from None
