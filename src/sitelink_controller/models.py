"""Value types for managed resources and their wire representation."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class OwnerReference:
    """A declared parent object, consumed by the store's garbage collector."""

    kind: str
    api_version: str
    name: str
    uid: str
    controller: bool | None = None
    block_owner_deletion: bool | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OwnerReference:
        return cls(
            kind=data.get("kind", ""),
            api_version=data.get("apiVersion", ""),
            name=data.get("name", ""),
            uid=data.get("uid", ""),
            controller=data.get("controller"),
            block_owner_deletion=data.get("blockOwnerDeletion"),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "kind": self.kind,
            "apiVersion": self.api_version,
            "name": self.name,
            "uid": self.uid,
        }
        if self.controller is not None:
            data["controller"] = self.controller
        if self.block_owner_deletion is not None:
            data["blockOwnerDeletion"] = self.block_owner_deletion
        return data

    def without_flags(self) -> OwnerReference:
        """Copy keeping only kind, apiVersion, name and uid."""
        return OwnerReference(
            kind=self.kind,
            api_version=self.api_version,
            name=self.name,
            uid=self.uid,
        )


def derive_owner_references(obj: dict[str, Any]) -> list[OwnerReference]:
    """Re-derive an object's owner references for resources it creates.

    Controller and blockOwnerDeletion flags are dropped so the new resources
    are owned by the same parents without claiming controller status.
    """
    refs = (obj.get("metadata") or {}).get("ownerReferences") or []
    return [OwnerReference.from_dict(ref).without_flags() for ref in refs]


@dataclass(frozen=True)
class Condition:
    """A status condition entry."""

    type: str
    status: str = "Unknown"
    reason: str = ""
    message: str = ""
    observed_generation: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Condition:
        return cls(
            type=data.get("type", ""),
            status=data.get("status", "Unknown"),
            reason=data.get("reason", ""),
            message=data.get("message", ""),
            observed_generation=data.get("observedGeneration") or 0,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "status": self.status,
            "reason": self.reason,
            "message": self.message,
            "observedGeneration": self.observed_generation,
        }


@dataclass
class ManagedResource:
    """A named, namespaced, typed object held by the remote store.

    Only ``owner_references`` and ``spec`` are kept in sync by the reconciler;
    ``conditions`` are owned by whatever reports progress on the object.
    """

    kind: str
    api_version: str
    name: str
    namespace: str | None = None
    owner_references: list[OwnerReference] = field(default_factory=list)
    spec: dict[str, Any] = field(default_factory=dict)
    conditions: list[Condition] = field(default_factory=list)
    resource_version: str | None = None
    generation: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ManagedResource:
        metadata = data.get("metadata") or {}
        status = data.get("status") or {}
        return cls(
            kind=data.get("kind", ""),
            api_version=data.get("apiVersion", ""),
            name=metadata.get("name", ""),
            namespace=metadata.get("namespace"),
            owner_references=[
                OwnerReference.from_dict(ref) for ref in metadata.get("ownerReferences") or []
            ],
            spec=copy.deepcopy(data.get("spec") or {}),
            conditions=[Condition.from_dict(c) for c in status.get("conditions") or []],
            resource_version=metadata.get("resourceVersion"),
            generation=metadata.get("generation") or 0,
        )

    def to_dict(self, namespace: str | None = None) -> dict[str, Any]:
        """Wire form used for create; status is never sent."""
        metadata: dict[str, Any] = {"name": self.name}
        ns = namespace or self.namespace
        if ns:
            metadata["namespace"] = ns
        if self.owner_references:
            metadata["ownerReferences"] = [ref.to_dict() for ref in self.owner_references]
        if self.resource_version:
            metadata["resourceVersion"] = self.resource_version
        return {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "metadata": metadata,
            "spec": copy.deepcopy(self.spec),
        }
