"""Main entry point for the site link controller.

Run with ``kopf run -m sitelink_controller.main --namespace <ns>``.
"""

from __future__ import annotations

import logging
from typing import Any

import kopf

from . import health, tracing
from . import logging as structured_logging
from .config import ControllerConfig
from .grants import GrantAutoConfigurer, GrantServerUrl
from .services.kube import KubeObjectStore, get_k8s_clients
from .utils.errors import GrantConfigurationError, StoreError, ValidationError

logger = logging.getLogger(__name__)

# Objects owned by the running operator process
_state: dict[str, Any] = {}


def is_ready() -> bool:
    """Ready once grant auto-configuration, when enabled, has completed."""
    config: ControllerConfig | None = _state.get("config")
    if config is None:
        return False
    if config.grants.enabled and config.grants.auto_configure:
        return "auto_configure" in _state
    return True


@kopf.on.startup()
def configure(settings: kopf.OperatorSettings, **_: Any) -> None:
    """Configure the operator."""
    try:
        config = ControllerConfig.from_env()
    except ValidationError as e:
        raise kopf.PermanentError(str(e)) from e
    _state["config"] = config

    structured_logging.setup_structured_logging(config.log_level)
    tracing.initialize_tracing()

    settings.posting.level = 0
    settings.networking.request_timeout = 30.0
    settings.execution.max_workers = 4

    _state["server"] = health.start_http_server(config.metrics_port, ready=is_ready)


@kopf.on.startup()
def configure_grant_server(**_: Any) -> None:
    """Provision the grant server's certificate and secured access."""
    config: ControllerConfig = _state["config"]
    if not (config.grants.enabled and config.grants.auto_configure):
        return

    custom_api, core_api = get_k8s_clients()
    store = KubeObjectStore(custom_api, core_api)
    grant_url = GrantServerUrl(config.grants.base_url)
    try:
        auto_configure = GrantAutoConfigurer(store).configure(config.namespace, config.grants, grant_url)
    except GrantConfigurationError as e:
        raise kopf.TemporaryError(str(e), delay=10) from e
    except StoreError as e:
        raise kopf.PermanentError(f"Could not watch the grant server SecuredAccess: {e}") from e

    _state["grant_url"] = grant_url
    _state["auto_configure"] = auto_configure


@kopf.on.cleanup()
def cleanup(**_: Any) -> None:
    """Stop background watches and the metrics server."""
    auto_configure = _state.pop("auto_configure", None)
    if auto_configure is not None:
        auto_configure.stop()
    server = _state.pop("server", None)
    if server is not None:
        server.shutdown()
