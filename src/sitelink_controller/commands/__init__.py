"""Lifecycle commands composed from validation, reconciliation and waits."""

from .link_update import CmdLinkUpdate, LinkUpdateFlags

__all__ = ["CmdLinkUpdate", "LinkUpdateFlags"]
