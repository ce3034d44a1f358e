"""Kubernetes object store access."""

from .base import ObjectStore, ResourceWatch, WatchHandler
from .client import KubeObjectStore, get_k8s_clients
from .kinds import KINDS, ResourceKind, get_kind

__all__ = [
    "ObjectStore",
    "ResourceWatch",
    "WatchHandler",
    "KubeObjectStore",
    "get_k8s_clients",
    "KINDS",
    "ResourceKind",
    "get_kind",
]
