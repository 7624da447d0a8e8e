"""granite-bridge: version-tolerant adapter for the granitectl database tool."""

from granite_bridge.__about__ import __version__

__all__ = ["__version__"]
