"""Object store backed by the Kubernetes API."""

from __future__ import annotations

import json
import logging
import threading
import time
from typing import Any, Callable

from kubernetes import client, config, watch
from kubernetes.client.exceptions import ApiException

from ... import metrics
from ...constants import FIELD_MANAGER
from ...utils.errors import ConflictError, NotFoundError, StoreError, sanitize_exception
from ...utils.rate_limit import rate_limit_k8s
from .base import WatchHandler
from .kinds import ResourceKind, get_kind

logger = logging.getLogger(__name__)

_BACKOFF_MIN_S = 1.0
_BACKOFF_MAX_S = 60.0
_WATCH_TIMEOUT_S = 300


def get_k8s_clients() -> tuple[client.CustomObjectsApi, client.CoreV1Api]:
    """Build API clients from in-cluster config, falling back to kubeconfig."""
    try:
        config.load_incluster_config()
    except config.ConfigException:
        config.load_kube_config()

    return client.CustomObjectsApi(), client.CoreV1Api()


def _api_message(error: ApiException) -> str | None:
    try:
        body = json.loads(error.body or "")
    except (TypeError, ValueError):
        return None
    return body.get("message") if isinstance(body, dict) else None


def translate_api_exception(error: ApiException, kind: ResourceKind, name: str | None) -> StoreError:
    """Map an API exception to the store error taxonomy."""
    message = _api_message(error)
    if error.status == 404 and name:
        return NotFoundError(kind.resource, name)
    if error.status == 409:
        return ConflictError(message or f'Operation cannot be fulfilled on {kind.resource} "{name}"')
    return StoreError(message or f"{error.status} {error.reason}", status=error.status)


class KubeObjectStore:
    """ObjectStore implementation over CustomObjectsApi and CoreV1Api."""

    def __init__(self, custom_api: Any, core_api: Any):
        self.custom_api = custom_api
        self.core_api = core_api

    def _call(
        self,
        operation: str,
        kind: ResourceKind,
        name: str | None,
        func: Callable[..., Any],
        /,
        **kwargs: Any,
    ) -> Any:
        start_time = time.time()
        try:
            result = rate_limit_k8s(func)(**kwargs)
            metrics.api_call_total.labels(operation=operation, kind=kind.kind, result="success").inc()
            return result
        except ApiException as e:
            metrics.api_call_total.labels(operation=operation, kind=kind.kind, result="error").inc()
            raise translate_api_exception(e, kind, name) from e
        finally:
            duration = time.time() - start_time
            metrics.api_call_duration_seconds.labels(operation=operation, kind=kind.kind).observe(duration)

    def _core_func(self, verb: str, kind: ResourceKind) -> Callable[..., Any]:
        return getattr(self.core_api, f"{verb}_namespaced_{kind.kind.lower()}")

    def _core_to_dict(self, kind: ResourceKind, obj: Any) -> dict[str, Any]:
        data = self.core_api.api_client.sanitize_for_serialization(obj)
        data.setdefault("kind", kind.kind)
        data.setdefault("apiVersion", kind.api_version)
        return data

    def get(self, kind: str, namespace: str, name: str) -> dict[str, Any]:
        rk = get_kind(kind)
        if rk.is_core:
            obj = self._call("get", rk, name, self._core_func("read", rk), name=name, namespace=namespace)
            return self._core_to_dict(rk, obj)
        return self._call(
            "get",
            rk,
            name,
            self.custom_api.get_namespaced_custom_object,
            group=rk.group,
            version=rk.version,
            namespace=namespace,
            plural=rk.plural,
            name=name,
        )

    def _list_raw(self, rk: ResourceKind, namespace: str, name: str | None = None) -> tuple[list[dict[str, Any]], str]:
        kwargs: dict[str, Any] = {"namespace": namespace}
        if name:
            kwargs["field_selector"] = f"metadata.name={name}"
        if rk.is_core:
            result = self._call("list", rk, None, self._core_func("list", rk), **kwargs)
            items = [self._core_to_dict(rk, item) for item in result.items]
            return items, result.metadata.resource_version or ""
        result = self._call(
            "list",
            rk,
            None,
            self.custom_api.list_namespaced_custom_object,
            group=rk.group,
            version=rk.version,
            plural=rk.plural,
            **kwargs,
        )
        return result.get("items", []), (result.get("metadata") or {}).get("resourceVersion", "")

    def list(self, kind: str, namespace: str) -> list[dict[str, Any]]:
        items, _ = self._list_raw(get_kind(kind), namespace)
        return items

    def create(self, obj: dict[str, Any]) -> dict[str, Any]:
        rk = get_kind(obj["kind"])
        metadata = obj.get("metadata") or {}
        name = metadata.get("name")
        namespace = metadata["namespace"]
        if rk.is_core:
            created = self._call(
                "create", rk, name, self._core_func("create", rk),
                namespace=namespace, body=obj, field_manager=FIELD_MANAGER,
            )
            return self._core_to_dict(rk, created)
        return self._call(
            "create",
            rk,
            name,
            self.custom_api.create_namespaced_custom_object,
            group=rk.group,
            version=rk.version,
            namespace=namespace,
            plural=rk.plural,
            body=obj,
            field_manager=FIELD_MANAGER,
        )

    def update(self, obj: dict[str, Any]) -> dict[str, Any]:
        rk = get_kind(obj["kind"])
        metadata = obj.get("metadata") or {}
        name = metadata["name"]
        namespace = metadata["namespace"]
        if rk.is_core:
            updated = self._call(
                "update", rk, name, self._core_func("replace", rk),
                name=name, namespace=namespace, body=obj, field_manager=FIELD_MANAGER,
            )
            return self._core_to_dict(rk, updated)
        return self._call(
            "update",
            rk,
            name,
            self.custom_api.replace_namespaced_custom_object,
            group=rk.group,
            version=rk.version,
            namespace=namespace,
            plural=rk.plural,
            name=name,
            body=obj,
            field_manager=FIELD_MANAGER,
        )

    def watch(
        self,
        kind: str,
        namespace: str,
        handler: WatchHandler,
        name: str | None = None,
    ) -> KubeResourceWatch:
        rk = get_kind(kind)
        # List synchronously so that missing CRDs or RBAC problems fail registration
        items, resource_version = self._list_raw(rk, namespace, name)
        resource_watch = KubeResourceWatch(self, rk, namespace, handler, name)
        resource_watch.start(items, resource_version)
        return resource_watch

    def _watch_func(self, rk: ResourceKind) -> tuple[Callable[..., Any], dict[str, Any]]:
        if rk.is_core:
            return self._core_func("list", rk), {}
        return self.custom_api.list_namespaced_custom_object, {
            "group": rk.group,
            "version": rk.version,
            "plural": rk.plural,
        }


class KubeResourceWatch:
    """Background watch delivering events to a handler on a daemon thread.

    Resumes from the last seen resourceVersion, relists after the version
    expires (HTTP 410) and backs off exponentially on other failures.
    """

    def __init__(
        self,
        store: KubeObjectStore,
        kind: ResourceKind,
        namespace: str,
        handler: WatchHandler,
        name: str | None = None,
    ):
        self.store = store
        self.kind = kind
        self.namespace = namespace
        self.handler = handler
        self.name = name
        self._resource_version = ""
        self._stopped = threading.Event()
        self._watch: watch.Watch | None = None
        self._thread: threading.Thread | None = None
        self._known: dict[str | None, dict[str, Any]] = {}

    def start(self, initial_items: list[dict[str, Any]], resource_version: str) -> None:
        self._resource_version = resource_version
        self._thread = threading.Thread(
            target=self._run,
            args=(initial_items,),
            name=f"watch-{self.kind.plural}",
            daemon=True,
        )
        self._thread.start()

    def stop(self) -> None:
        self._stopped.set()
        if self._watch is not None:
            self._watch.stop()

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and not self._stopped.is_set()

    def _deliver(self, event_type: str, obj: dict[str, Any]) -> None:
        name = (obj.get("metadata") or {}).get("name")
        if event_type == "DELETED":
            self._known.pop(name, None)
        else:
            self._known[name] = obj
        metrics.watch_events_total.labels(kind=self.kind.kind, event_type=event_type).inc()
        try:
            self.handler(event_type, obj)
        except Exception as e:
            # A failing handler must not end the watch; the next event retries it
            logger.error(
                f"Handler for {self.kind.kind} {name} failed: {sanitize_exception(e)}"
            )

    def _run(self, initial_items: list[dict[str, Any]]) -> None:
        for item in initial_items:
            self._deliver("ADDED", item)

        backoff = _BACKOFF_MIN_S
        relist = False
        while not self._stopped.is_set():
            try:
                if relist:
                    self._relist()
                    relist = False
                self._stream_once()
                backoff = _BACKOFF_MIN_S
                continue
            except ApiException as e:
                if e.status == 410:
                    metrics.watch_restarts_total.labels(kind=self.kind.kind, reason="expired").inc()
                    relist = True
                    continue
                metrics.watch_restarts_total.labels(kind=self.kind.kind, reason="error").inc()
                logger.warning(f"Watch on {self.kind.resource} failed: {sanitize_exception(e)}; retrying in {backoff}s")
            except StoreError as e:
                metrics.watch_restarts_total.labels(kind=self.kind.kind, reason="relist_failed").inc()
                logger.warning(f"Relist of {self.kind.resource} failed: {sanitize_exception(e)}; retrying in {backoff}s")
            except Exception as e:
                # Connection resets and read timeouts from urllib3
                metrics.watch_restarts_total.labels(kind=self.kind.kind, reason="connection").inc()
                logger.warning(f"Watch on {self.kind.resource} interrupted: {sanitize_exception(e)}; retrying in {backoff}s")
            self._stopped.wait(backoff)
            backoff = min(backoff * 2, _BACKOFF_MAX_S)

    def _relist(self) -> None:
        """Replay current objects as MODIFIED and vanished ones as DELETED."""
        items, resource_version = self.store._list_raw(self.kind, self.namespace, self.name)
        present = {(item.get("metadata") or {}).get("name") for item in items}
        for name, obj in list(self._known.items()):
            if name not in present:
                self._deliver("DELETED", obj)
        for item in items:
            self._deliver("MODIFIED", item)
        self._resource_version = resource_version

    def _stream_once(self) -> None:
        func, kwargs = self.store._watch_func(self.kind)
        kwargs = dict(kwargs, namespace=self.namespace, timeout_seconds=_WATCH_TIMEOUT_S)
        if self.name:
            kwargs["field_selector"] = f"metadata.name={self.name}"
        if self._resource_version:
            kwargs["resource_version"] = self._resource_version

        self._watch = watch.Watch()
        for event in self._watch.stream(func, **kwargs):
            if self._stopped.is_set():
                self._watch.stop()
                return
            event_type = event.get("type", "")
            obj = event.get("raw_object") or event.get("object") or {}
            if event_type == "ERROR":
                raise ApiException(status=obj.get("code"), reason=obj.get("reason"))

            resource_version = (obj.get("metadata") or {}).get("resourceVersion")
            if resource_version:
                self._resource_version = resource_version
            if event_type == "BOOKMARK":
                continue
            self._deliver(event_type, obj)
