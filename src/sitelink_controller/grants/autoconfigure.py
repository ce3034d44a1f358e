"""Provision the certificate and secured access behind the grant server.

At startup the grant server looks up its own pod, makes the resources it
needs owned by the same parents as the pod, reconciles a self-signed signing
Certificate and a SecuredAccess targeting the pod, then watches that
SecuredAccess so externally assigned endpoints reach the server.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from .. import metrics
from ..builders import SPEC_EQUALITY, create_certificate, create_secured_access
from ..config import GrantConfig
from ..constants import (
    EVENT_REASON_GRANT_CONFIGURED,
    GRANT_SERVER_CA_NAME,
    GRANT_SERVER_CA_SUBJECT,
    GRANT_SERVER_NAME,
    GRANT_SERVER_PORT_NAME,
    KIND_POD,
    KIND_SECURED_ACCESS,
)
from ..logging import log_resource_event
from ..models import OwnerReference, derive_owner_references
from ..reconciler import ResourceReconciler
from ..services.kube.base import ObjectStore, ResourceWatch, WatchHandler
from ..tracing import trace_span
from ..utils.errors import GrantConfigurationError

logger = logging.getLogger(__name__)


@dataclass
class AutoConfigure:
    """Result of grant server auto-configuration."""

    port: int
    pod_name: str
    tls_credentials_secret: str
    owner_references: list[OwnerReference] = field(default_factory=list)
    selector: dict[str, str] = field(default_factory=dict)
    results: dict[str, str] = field(default_factory=dict)
    watch: ResourceWatch | None = None

    def stop(self) -> None:
        if self.watch is not None:
            self.watch.stop()


class GrantAutoConfigurer:
    """Stand up the grant server's signing certificate and secured access."""

    def __init__(self, store: ObjectStore, reconciler: ResourceReconciler | None = None):
        self.store = store
        self.reconciler = reconciler or ResourceReconciler(store, SPEC_EQUALITY)

    def configure(self, namespace: str, config: GrantConfig, handler: WatchHandler) -> AutoConfigure:
        """Reconcile the grant server resources and start watching its SecuredAccess.

        Raises:
            GrantConfigurationError: Pod lookup or resource reconciliation failed
            StoreError: The watch could not be registered
        """
        ac = AutoConfigure(
            port=config.port,
            pod_name=config.hostname,
            tls_credentials_secret=config.effective_tls_credentials,
        )
        try:
            with trace_span("configure_grant_server", kind=KIND_SECURED_ACCESS):
                self._read_pod(ac, namespace)
                self._ensure_resources(ac, namespace)
        except Exception as e:
            metrics.grant_autoconfigure_total.labels(result="failed").inc()
            raise GrantConfigurationError(f"Error creating resources for grant server: {e}") from e

        ac.watch = self.store.watch(KIND_SECURED_ACCESS, namespace, handler, name=GRANT_SERVER_NAME)
        metrics.grant_autoconfigure_total.labels(result="success").inc()
        log_resource_event(
            logger, KIND_SECURED_ACCESS, GRANT_SERVER_NAME, namespace,
            event="configure", reason=EVENT_REASON_GRANT_CONFIGURED,
            message="Grant server resources configured", **ac.results,
        )
        return ac

    def _read_pod(self, ac: AutoConfigure, namespace: str) -> None:
        pod: dict[str, Any] = self.store.get(KIND_POD, namespace, ac.pod_name)
        ac.owner_references = derive_owner_references(pod)
        ac.selector = dict((pod.get("metadata") or {}).get("labels") or {})

    def _ensure_resources(self, ac: AutoConfigure, namespace: str) -> None:
        cert = create_certificate(
            GRANT_SERVER_CA_NAME,
            subject=GRANT_SERVER_CA_SUBJECT,
            owner_references=ac.owner_references,
            signing=True,
        )
        ac.results["certificate"] = self.reconciler.ensure(namespace, cert)

        secured_access = create_secured_access(
            GRANT_SERVER_NAME,
            selector=ac.selector,
            ports={GRANT_SERVER_PORT_NAME: ac.port},
            issuer=GRANT_SERVER_CA_NAME,
            certificate=ac.tls_credentials_secret,
            owner_references=ac.owner_references,
        )
        ac.results["secured_access"] = self.reconciler.ensure(namespace, secured_access)
