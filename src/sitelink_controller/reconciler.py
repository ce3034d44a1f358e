"""Drive a remote object toward a desired owner-reference list and spec."""

from __future__ import annotations

import copy
import logging
import time
from typing import Any, Callable

from . import metrics
from .constants import (
    EVENT_REASON_RECONCILE_FAILED,
    EVENT_REASON_RESOURCE_CREATED,
    EVENT_REASON_RESOURCE_UNCHANGED,
    EVENT_REASON_RESOURCE_UPDATED,
    RESULT_CREATED,
    RESULT_UNCHANGED,
    RESULT_UPDATED,
)
from .logging import log_resource_event
from .models import ManagedResource
from .services.kube.base import ObjectStore
from .tracing import trace_span
from .utils.errors import NotFoundError, sanitize_exception

SpecEquality = Callable[[dict[str, Any], dict[str, Any]], bool]

logger = logging.getLogger(__name__)


def default_spec_equal(current: dict[str, Any], desired: dict[str, Any]) -> bool:
    """Deep structural equality; list order matters."""
    return current == desired


class ResourceReconciler:
    """Ensure a remote object exists and matches a desired state with minimal writes.

    Only owner references and spec are managed. Status, resourceVersion and
    any other metadata on the stored object are left as found. Store errors,
    including conflicts, are never retried here.
    """

    def __init__(
        self,
        store: ObjectStore,
        spec_equality: dict[str, SpecEquality] | None = None,
    ):
        self.store = store
        self.spec_equality = dict(spec_equality or {})

    def register_equality(self, kind: str, equal: SpecEquality) -> None:
        """Use a kind-specific comparison for spec changes."""
        self.spec_equality[kind] = equal

    def _spec_equal(self, kind: str, current: dict[str, Any], desired: dict[str, Any]) -> bool:
        return self.spec_equality.get(kind, default_spec_equal)(current, desired)

    def ensure(
        self,
        namespace: str,
        desired: ManagedResource,
        create_missing: bool = True,
    ) -> str:
        """Create, update or leave alone the object named by ``desired``.

        Args:
            namespace: Namespace of the object
            desired: Desired state; kind and name must be set
            create_missing: If False, a missing object raises NotFoundError
                instead of being created

        Returns:
            One of "created", "updated" or "unchanged"

        Raises:
            StoreError: Any store failure, unchanged
        """
        start_time = time.time()
        try:
            with trace_span(f"ensure_{desired.kind.lower()}", kind=desired.kind,
                            attributes={"resource.name": desired.name}):
                result = self._ensure(namespace, desired, create_missing)
        except Exception as e:
            metrics.reconcile_total.labels(kind=desired.kind, result="error").inc()
            log_resource_event(
                logger, desired.kind, desired.name, namespace,
                event="reconcile", reason=EVENT_REASON_RECONCILE_FAILED,
                message="Reconciliation failed", level=logging.ERROR,
                error=sanitize_exception(e), error_type=type(e).__name__,
            )
            raise
        finally:
            duration = time.time() - start_time
            metrics.reconcile_duration_seconds.labels(kind=desired.kind).observe(duration)

        metrics.reconcile_total.labels(kind=desired.kind, result=result).inc()
        return result

    def _ensure(self, namespace: str, desired: ManagedResource, create_missing: bool) -> str:
        try:
            existing = self.store.get(desired.kind, namespace, desired.name)
        except NotFoundError:
            if not create_missing:
                raise
            self.store.create(desired.to_dict(namespace))
            log_resource_event(
                logger, desired.kind, desired.name, namespace,
                event="create", reason=EVENT_REASON_RESOURCE_CREATED,
                message=f"{desired.kind} created",
            )
            return RESULT_CREATED

        current = ManagedResource.from_dict(existing)
        updated = copy.deepcopy(existing)
        changed_fields = []

        if current.owner_references != desired.owner_references:
            metadata = updated.setdefault("metadata", {})
            if desired.owner_references:
                metadata["ownerReferences"] = [ref.to_dict() for ref in desired.owner_references]
            else:
                metadata.pop("ownerReferences", None)
            changed_fields.append("ownerReferences")

        if not self._spec_equal(desired.kind, current.spec, desired.spec):
            updated["spec"] = copy.deepcopy(desired.spec)
            changed_fields.append("spec")

        if not changed_fields:
            log_resource_event(
                logger, desired.kind, desired.name, namespace,
                event="noop", reason=EVENT_REASON_RESOURCE_UNCHANGED,
                message=f"{desired.kind} is up to date", level=logging.DEBUG,
            )
            return RESULT_UNCHANGED

        self.store.update(updated)
        log_resource_event(
            logger, desired.kind, desired.name, namespace,
            event="update", reason=EVENT_REASON_RESOURCE_UPDATED,
            message=f"{desired.kind} updated", fields=changed_fields,
        )
        return RESULT_UPDATED
