"""Controller configuration read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping

from .constants import DEFAULT_GRANT_SERVER_PORT, GRANT_SERVER_NAME
from .utils.errors import ValidationError

SERVICE_ACCOUNT_NAMESPACE_FILE = "/var/run/secrets/kubernetes.io/serviceaccount/namespace"

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_bool(env: Mapping[str, str], key: str, default: bool = False) -> bool:
    value = env.get(key)
    if value is None or value == "":
        return default
    return value.strip().lower() in _TRUE_VALUES


def _env_int(env: Mapping[str, str], key: str, default: int) -> int:
    value = env.get(key)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ValidationError(f"{key} is not valid: {value!r} is not an integer") from None


@dataclass
class GrantConfig:
    """Settings of the grant-issuing server."""

    enabled: bool = False
    auto_configure: bool = False
    port: int = DEFAULT_GRANT_SERVER_PORT
    base_url: str = ""
    tls_credentials_secret: str = ""
    hostname: str = ""

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> GrantConfig:
        env = os.environ if env is None else env
        config = cls(
            enabled=_env_bool(env, "SKUPPER_ENABLE_GRANTS"),
            auto_configure=_env_bool(env, "SKUPPER_GRANT_SERVER_AUTOCONFIGURE"),
            port=_env_int(env, "SKUPPER_GRANT_SERVER_PORT", DEFAULT_GRANT_SERVER_PORT),
            base_url=env.get("SKUPPER_GRANT_SERVER_BASE_URL", ""),
            tls_credentials_secret=env.get("SKUPPER_GRANT_SERVER_TLS_CREDENTIALS", ""),
            hostname=env.get("HOSTNAME", ""),
        )
        config.validate()
        return config

    def validate(self) -> None:
        problems = []
        if not 0 < self.port < 65536:
            problems.append(f"grant server port is not valid: {self.port} is out of range")
        if self.auto_configure and not self.hostname:
            problems.append("grant server auto-configuration requires the pod name (HOSTNAME)")
        if problems:
            raise ValidationError(problems)

    @property
    def effective_tls_credentials(self) -> str:
        """TLS secret used by the grant server; defaults to the server's own name."""
        return self.tls_credentials_secret or GRANT_SERVER_NAME


def current_namespace(env: Mapping[str, str] | None = None) -> str:
    """Namespace the controller runs in."""
    env = os.environ if env is None else env
    if env.get("NAMESPACE"):
        return env["NAMESPACE"]
    if os.path.exists(SERVICE_ACCOUNT_NAMESPACE_FILE):
        with open(SERVICE_ACCOUNT_NAMESPACE_FILE, encoding="utf-8") as f:
            namespace = f.read().strip()
        if namespace:
            return namespace
    return "default"


@dataclass
class ControllerConfig:
    """Process-level settings."""

    namespace: str = "default"
    metrics_port: int = 8080
    log_level: str = "info"
    grants: GrantConfig = field(default_factory=GrantConfig)

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> ControllerConfig:
        env = os.environ if env is None else env
        return cls(
            namespace=current_namespace(env),
            metrics_port=_env_int(env, "METRICS_PORT", 8080),
            log_level=env.get("LOG_LEVEL", "info"),
            grants=GrantConfig.from_env(env),
        )
