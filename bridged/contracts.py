"""Shared type surface for the registry modules."""
from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, TypeAlias

Implementation: TypeAlias = Callable[..., Any]
FnMap: TypeAlias = Mapping[str, Implementation]

# Names taken by the control operations on every registry.
RESERVED_NAMES: frozenset[str] = frozenset({"register", "deregister"})


def is_reserved(name: str) -> bool:
    return name in RESERVED_NAMES
