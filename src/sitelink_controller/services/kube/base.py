"""Object store interface required by the reconciler, waiter and grant setup."""

from __future__ import annotations

from typing import Any, Callable, Protocol

# Called with the event type ("ADDED", "MODIFIED", "DELETED") and the object
WatchHandler = Callable[[str, dict[str, Any]], None]


class ResourceWatch(Protocol):
    """Handle for a running watch."""

    def stop(self) -> None:
        """Stop delivering events."""
        ...

    def is_running(self) -> bool:
        """Check whether events are still being delivered."""
        ...


class ObjectStore(Protocol):
    """Protocol defining a namespaced, versioned, watchable object store.

    Objects travel in their Kubernetes JSON shape. Errors are reported as
    ``NotFoundError``, ``ConflictError`` or ``StoreError``.
    """

    def get(self, kind: str, namespace: str, name: str) -> dict[str, Any]:
        """Fetch one object."""
        ...

    def list(self, kind: str, namespace: str) -> list[dict[str, Any]]:
        """List all objects of a kind in a namespace."""
        ...

    def create(self, obj: dict[str, Any]) -> dict[str, Any]:
        """Create an object; namespace is taken from its metadata."""
        ...

    def update(self, obj: dict[str, Any]) -> dict[str, Any]:
        """Replace an object, rejected as a conflict if its resourceVersion is stale."""
        ...

    def watch(
        self,
        kind: str,
        namespace: str,
        handler: WatchHandler,
        name: str | None = None,
    ) -> ResourceWatch:
        """Deliver change events for a kind, optionally filtered by name, to a handler.

        Events arrive asynchronously; registration itself fails synchronously
        if the kind cannot be listed.
        """
        ...
