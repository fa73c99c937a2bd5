"""
Typed values and the resolved configuration accessor.
"""

from .value import Value, ValueSource
from .server_config import ServerConfig

__all__ = ["Value", "ValueSource", "ServerConfig"]
