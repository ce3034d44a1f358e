"""Shared fixtures: an in-memory object store with write instrumentation."""

from __future__ import annotations

import copy
import threading
from typing import Any

import pytest

from sitelink_controller.services.kube.kinds import get_kind
from sitelink_controller.utils.errors import ConflictError, NotFoundError, StoreError


class FakeWatch:
    """Watch handle recorded by FakeObjectStore."""

    def __init__(self, kind: str, namespace: str, handler: Any, name: str | None):
        self.kind = kind
        self.namespace = namespace
        self.handler = handler
        self.name = name
        self.stopped = False

    def stop(self) -> None:
        self.stopped = True

    def is_running(self) -> bool:
        return not self.stopped


class FakeObjectStore:
    """Thread-safe in-memory store mimicking the Kubernetes API semantics."""

    def __init__(self, error: str | None = None, error_status: int | None = None):
        self.objects: dict[tuple[str, str, str], dict[str, Any]] = {}
        self.error = error
        self.error_status = error_status
        self.gets = 0
        self.creates: list[dict[str, Any]] = []
        self.updates: list[dict[str, Any]] = []
        self.watches: list[FakeWatch] = []
        self._version = 0
        self._lock = threading.Lock()

    @property
    def writes(self) -> int:
        return len(self.creates) + len(self.updates)

    def _next_version(self) -> str:
        self._version += 1
        return str(self._version)

    def _fail(self) -> None:
        if self.error:
            raise StoreError(self.error, status=self.error_status)

    def add(
        self,
        kind: str,
        name: str,
        namespace: str = "test",
        spec: dict[str, Any] | None = None,
        conditions: list[dict[str, Any]] | None = None,
        generation: int | None = None,
        **metadata: Any,
    ) -> dict[str, Any]:
        """Seed an object without counting it as a write."""
        obj: dict[str, Any] = {
            "apiVersion": get_kind(kind).api_version,
            "kind": kind,
            "metadata": {"name": name, "namespace": namespace, **metadata},
        }
        if spec is not None:
            obj["spec"] = spec
        if conditions is not None:
            obj["status"] = {"conditions": conditions}
        if generation is not None:
            obj["metadata"]["generation"] = generation
        with self._lock:
            obj["metadata"]["resourceVersion"] = self._next_version()
            self.objects[(kind, namespace, name)] = obj
        return obj

    def set_conditions(self, kind: str, name: str, conditions: list[dict[str, Any]], namespace: str = "test") -> None:
        with self._lock:
            obj = self.objects[(kind, namespace, name)]
            obj.setdefault("status", {})["conditions"] = copy.deepcopy(conditions)
            obj["metadata"]["resourceVersion"] = self._next_version()

    def get(self, kind: str, namespace: str, name: str) -> dict[str, Any]:
        with self._lock:
            self.gets += 1
            self._fail()
            obj = self.objects.get((kind, namespace, name))
            if obj is None:
                raise NotFoundError(get_kind(kind).resource, name)
            return copy.deepcopy(obj)

    def list(self, kind: str, namespace: str) -> list[dict[str, Any]]:
        with self._lock:
            self._fail()
            return [
                copy.deepcopy(obj)
                for (k, ns, _), obj in self.objects.items()
                if k == kind and ns == namespace
            ]

    def create(self, obj: dict[str, Any]) -> dict[str, Any]:
        with self._lock:
            self._fail()
            metadata = obj["metadata"]
            key = (obj["kind"], metadata["namespace"], metadata["name"])
            if key in self.objects:
                raise ConflictError(f'{get_kind(obj["kind"]).resource} "{metadata["name"]}" already exists')
            stored = copy.deepcopy(obj)
            stored["metadata"]["resourceVersion"] = self._next_version()
            stored["metadata"].setdefault("generation", 1)
            self.objects[key] = stored
            self.creates.append(copy.deepcopy(obj))
            return copy.deepcopy(stored)

    def update(self, obj: dict[str, Any]) -> dict[str, Any]:
        with self._lock:
            self._fail()
            metadata = obj["metadata"]
            key = (obj["kind"], metadata["namespace"], metadata["name"])
            current = self.objects.get(key)
            if current is None:
                raise NotFoundError(get_kind(obj["kind"]).resource, metadata["name"])
            if metadata.get("resourceVersion") != current["metadata"]["resourceVersion"]:
                raise ConflictError(
                    f'Operation cannot be fulfilled on {get_kind(obj["kind"]).resource} '
                    f'"{metadata["name"]}": the object has been modified'
                )
            stored = copy.deepcopy(obj)
            stored["metadata"]["resourceVersion"] = self._next_version()
            self.objects[key] = stored
            self.updates.append(copy.deepcopy(obj))
            return copy.deepcopy(stored)

    def watch(self, kind: str, namespace: str, handler: Any, name: str | None = None) -> FakeWatch:
        with self._lock:
            self._fail()
            fake_watch = FakeWatch(kind, namespace, handler, name)
            self.watches.append(fake_watch)
            return fake_watch


@pytest.fixture
def store() -> FakeObjectStore:
    """Empty in-memory object store."""
    return FakeObjectStore()
