# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Dependency container and the process-wide service locator.

``Container`` resolves shared dependencies by name:

- plain values are returned as stored (parameters)
- callables taking the container are services, built on first access and cached
- ``factory(fn)`` callables are rebuilt on every access
- ``protect(fn)`` stores a callable as a parameter

Application code should receive the container explicitly (the FastAPI app keeps
it on ``app.state``). The locator functions below hold one instance for code
that cannot get it passed in; the holder is not safe for concurrent mutation.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterator, Optional


class Container:
    def __init__(self, values: Optional[Dict[str, Any]] = None) -> None:
        self._definitions: Dict[str, Any] = {}
        self._instances: Dict[str, Any] = {}
        self._factories: Dict[int, Any] = {}
        self._protected: Dict[int, Any] = {}
        for key, value in (values or {}).items():
            self[key] = value

    def __setitem__(self, key: str, value: Any) -> None:
        self._definitions[key] = value
        self._instances.pop(key, None)

    def __getitem__(self, key: str) -> Any:
        if key not in self._definitions:
            raise KeyError(f"Identifier '{key}' is not defined.")
        if key in self._instances:
            return self._instances[key]

        definition = self._definitions[key]
        if not callable(definition) or id(definition) in self._protected:
            return definition
        if id(definition) in self._factories:
            return definition(self)

        instance = definition(self)
        self._instances[key] = instance
        return instance

    def __delitem__(self, key: str) -> None:
        definition = self._definitions.pop(key)
        self._instances.pop(key, None)
        # The same callable may still be registered under another key.
        if any(d is definition for d in self._definitions.values()):
            return
        self._factories.pop(id(definition), None)
        self._protected.pop(id(definition), None)

    def __contains__(self, key: object) -> bool:
        return key in self._definitions

    def __iter__(self) -> Iterator[str]:
        return iter(self._definitions)

    def keys(self):
        return self._definitions.keys()

    def factory(self, fn: Callable[["Container"], Any]) -> Callable[["Container"], Any]:
        """Mark ``fn`` so a new object is built on every lookup."""
        if not callable(fn):
            raise TypeError("Service definition is not a callable.")
        self._factories[id(fn)] = fn
        return fn

    def protect(self, fn: Callable[..., Any]) -> Callable[..., Any]:
        """Mark ``fn`` so it is returned as-is instead of being called."""
        if not callable(fn):
            raise TypeError("Callable is not a Closure or invokable object.")
        self._protected[id(fn)] = fn
        return fn

    def raw(self, key: str) -> Any:
        if key not in self._definitions:
            raise KeyError(f"Identifier '{key}' is not defined.")
        return self._definitions[key]


_INSTANCE: Optional[Container] = None


def set_container(container: Container) -> bool:
    global _INSTANCE
    _INSTANCE = container
    return True


def get_instance() -> Optional[Container]:
    """Return the stored container, or None if ``set_container`` was never called."""
    return _INSTANCE


def clear() -> None:
    global _INSTANCE
    _INSTANCE = None
