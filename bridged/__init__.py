"""bridged: overridable async operations with a never-lost default.

Main entry points:
- create_bridge / Bridge: build a registry from default implementations
- Bridge.register / Bridge.deregister: push and remove overrides
- load_config / BridgeConfig: registry behaviour settings
"""
from __future__ import annotations

from .bridge import (
    Bridge,
    Dispatcher,
    UnregisterHandle,
    active_implementation,
    create_bridge,
    override_depth,
    override_stack,
)
from .config import BridgeConfig, load_config
from .contracts import RESERVED_NAMES, FnMap, Implementation
from .errors import (
    BridgeError,
    InvalidOperationError,
    ReservedNameError,
    UnknownOperationError,
)

__all__ = [
    # Registry
    "Bridge",
    "Dispatcher",
    "UnregisterHandle",
    "create_bridge",
    # Introspection
    "active_implementation",
    "override_stack",
    "override_depth",
    # Config
    "BridgeConfig",
    "load_config",
    # Types
    "FnMap",
    "Implementation",
    "RESERVED_NAMES",
    # Errors
    "BridgeError",
    "InvalidOperationError",
    "ReservedNameError",
    "UnknownOperationError",
    # Version
    "__version__",
]

__version__ = "0.1.0"
