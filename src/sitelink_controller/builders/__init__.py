"""Builders for desired resource states."""

from ..constants import KIND_CERTIFICATE, KIND_LINK, KIND_SECURED_ACCESS
from .certificate import create_certificate
from .equality import prune_zero_values, spec_equal_ignoring_zero_values
from .link import create_link_update
from .secured_access import create_secured_access

# Spec comparison per kind, for ResourceReconciler
SPEC_EQUALITY = {
    KIND_CERTIFICATE: spec_equal_ignoring_zero_values,
    KIND_SECURED_ACCESS: spec_equal_ignoring_zero_values,
    KIND_LINK: spec_equal_ignoring_zero_values,
}

__all__ = [
    "SPEC_EQUALITY",
    "create_certificate",
    "create_link_update",
    "create_secured_access",
    "prune_zero_values",
    "spec_equal_ignoring_zero_values",
]
