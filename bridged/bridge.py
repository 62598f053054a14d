"""Override registry for named async operations.

A bridge is built from a mapping of operation name to default implementation.
Each name owns a stack of implementations: index 0 is the default, the last
element is the active implementation. Calling ``bridge.<name>(...)`` awaits
whatever is on top; ``register`` pushes an override and ``deregister``
removes the most recent installation of an exact implementation object.

Example:
    bridge = create_bridge({"fetch_user": fetch_user})
    with bridge.register("fetch_user", fake_fetch_user):
        await bridge.fetch_user(42)  # runs fake_fetch_user
    await bridge.fetch_user(42)  # back to fetch_user
"""
from __future__ import annotations

import inspect
import logging
import threading
from collections.abc import Awaitable, Callable, Iterator
from dataclasses import dataclass
from types import TracebackType
from typing import Any

from .config import DEFAULT_CONFIG, BridgeConfig
from .contracts import FnMap, Implementation, is_reserved
from .errors import InvalidOperationError, ReservedNameError, UnknownOperationError

logger = logging.getLogger(__name__)

Dispatcher = Callable[..., Awaitable[Any]]


def _validate_defaults(defaults: FnMap) -> None:
    """Reject a defaults mapping before any stack or entry exists."""
    if not defaults:
        raise InvalidOperationError("At least one operation is required")

    # Reserved names are checked first so they always surface as ReservedNameError.
    for name in defaults:
        if is_reserved(name):
            raise ReservedNameError(name)

    for name, default in defaults.items():
        if not isinstance(name, str) or not name.isidentifier() or name.startswith("_"):
            raise InvalidOperationError(
                f"Operation name {name!r} must be an identifier not starting with '_'",
                name=name if isinstance(name, str) else None,
            )
        if not callable(default):
            raise TypeError(
                f"Default implementation for {name!r} must be callable; got {type(default)!r}"
            )


def _last_index_of(stack: list[Implementation], implementation: Implementation) -> int:
    for index in range(len(stack) - 1, -1, -1):
        if stack[index] is implementation:
            return index
    return -1


@dataclass(frozen=True, slots=True, eq=False)
class UnregisterHandle:
    """Removes the registration that produced it.

    Calling the handle is the same as ``bridge.deregister(name, implementation)``
    and is safe to repeat. Used as a context manager it deregisters on exit.
    """

    bridge: Bridge
    name: str
    implementation: Implementation

    def __call__(self) -> None:
        self.bridge.deregister(self.name, self.implementation)

    def __enter__(self) -> UnregisterHandle:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self()


class Bridge:
    """Per-name override stacks with an async dispatch entry for each name.

    ``register`` and ``deregister`` are the only public attributes besides the
    declared operations; read-only inspection lives in module-level helpers
    (``active_implementation``, ``override_stack``, ``override_depth``).
    """

    __slots__ = ("_config", "_lock", "_stacks", "_entries")

    def __init__(self, defaults: FnMap, *, config: BridgeConfig | None = None) -> None:
        _validate_defaults(defaults)
        self._config = config or DEFAULT_CONFIG
        self._lock = threading.Lock()
        self._stacks: dict[str, list[Implementation]] = {}
        self._entries: dict[str, Dispatcher] = {}
        for name, default in defaults.items():
            self._stacks[name] = [default]
            self._entries[name] = self._make_dispatcher(name)

    def _make_dispatcher(self, name: str) -> Dispatcher:
        stack = self._stacks[name]
        lock = self._lock

        async def dispatch(*args: Any, **kwargs: Any) -> Any:
            # Capture the active implementation before the first suspension point.
            with lock:
                active = stack[-1]
            result = active(*args, **kwargs)
            if inspect.isawaitable(result):
                result = await result
            return result

        dispatch.__name__ = name
        dispatch.__qualname__ = f"{type(self).__name__}.{name}"
        return dispatch

    def _control_stack(self, name: str) -> list[Implementation] | None:
        """Return the stack for a control call, or None under the ignore policy."""
        stack = self._stacks.get(name)
        if stack is not None:
            return stack
        if self._config.ignores_unknown:
            logger.warning("Ignoring control call for unknown operation %r", name)
            return None
        raise UnknownOperationError(name, self._stacks)

    def _snapshot(self, name: str) -> tuple[Implementation, ...]:
        try:
            stack = self._stacks[name]
        except KeyError as exc:
            raise UnknownOperationError(name, self._stacks) from exc
        with self._lock:
            return tuple(stack)

    def register(self, name: str, implementation: Implementation) -> UnregisterHandle:
        """Install ``implementation`` as the active implementation for ``name``."""
        if not callable(implementation):
            raise TypeError(
                f"Implementation for {name!r} must be callable; got {type(implementation)!r}"
            )
        stack = self._control_stack(name)
        if stack is not None:
            with self._lock:
                stack.append(implementation)
                depth = len(stack) - 1
            logger.debug("Registered %r for %r (overrides: %d)", implementation, name, depth)
        return UnregisterHandle(self, name, implementation)

    def deregister(self, name: str, implementation: Implementation) -> None:
        """Remove the most recent installation of ``implementation`` for ``name``.

        The default at index 0 is never removed. An implementation that is
        not installed is ignored.
        """
        stack = self._control_stack(name)
        if stack is None:
            return
        with self._lock:
            index = _last_index_of(stack, implementation) if len(stack) > 1 else -1
            if index > 0:
                del stack[index]
            depth = len(stack) - 1
        if index > 0:
            logger.debug("Deregistered %r from %r (overrides: %d)", implementation, name, depth)
        else:
            logger.debug("Deregister of %r from %r had no override to remove", implementation, name)

    def __getattr__(self, name: str) -> Dispatcher:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._entries[name]
        except KeyError as exc:
            raise AttributeError(
                f"{type(self).__name__!r} object has no operation {name!r}"
            ) from exc

    def __getitem__(self, name: str) -> Dispatcher:
        try:
            return self._entries[name]
        except KeyError as exc:
            raise UnknownOperationError(name, self._entries) from exc

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __dir__(self) -> list[str]:
        return sorted(set(super().__dir__()) | set(self._entries))

    def __repr__(self) -> str:
        depths = ", ".join(f"{name}={len(stack) - 1}" for name, stack in self._stacks.items())
        return f"{type(self).__name__}({depths})"


def create_bridge(defaults: FnMap, *, config: BridgeConfig | None = None) -> Bridge:
    """Build a bridge whose stacks start with the given defaults."""
    return Bridge(defaults, config=config)


def active_implementation(bridge: Bridge, name: str) -> Implementation:
    """Return the implementation a dispatch of ``name`` would call right now."""
    return bridge._snapshot(name)[-1]


def override_stack(bridge: Bridge, name: str) -> tuple[Implementation, ...]:
    """Return a snapshot of the stack for ``name``; index 0 is the default."""
    return bridge._snapshot(name)


def override_depth(bridge: Bridge, name: str) -> int:
    """Return how many overrides sit above the default for ``name``."""
    return len(bridge._snapshot(name)) - 1
