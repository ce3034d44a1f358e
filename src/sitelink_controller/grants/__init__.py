"""Grant server setup."""

from .autoconfigure import AutoConfigure, GrantAutoConfigurer
from .server import GrantServerUrl

__all__ = ["AutoConfigure", "GrantAutoConfigurer", "GrantServerUrl"]
