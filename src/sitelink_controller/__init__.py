"""Control plane for secure links between cluster sites."""

__version__ = "0.1.0"
