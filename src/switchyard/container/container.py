# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Lightweight DI container with type-hint based constructor injection."""

from __future__ import annotations

import difflib
import inspect
import types
import typing
from dataclasses import dataclass
from typing import Any, Protocol, TypeVar, cast, runtime_checkable

from switchyard.kernel.exceptions import ResolutionException

T = TypeVar("T")


@runtime_checkable
class DependencyResolver(Protocol):
    """Turns a string reference (handler class or middleware name) into an instance.

    Any exception raised by ``resolve_by_name`` is reported to callers as a
    RoutingException chained to the original error.
    """

    def contains(self, name: str) -> bool: ...

    def resolve_by_name(self, name: str) -> Any: ...


@dataclass
class Registration:
    impl_type: type
    name: str
    instance: Any = None


class Container:
    """Singleton-scoped dependency container.

    Components are registered by class (instantiated lazily, constructor
    parameters resolved from their type hints) or as ready-made instances.
    Each registration is also reachable by name, the class ``__name__`` unless
    another name is given.
    """

    def __init__(self) -> None:
        self._registrations: dict[type, Registration] = {}
        self._named: dict[str, Registration] = {}
        self._resolving: dict[type, None] = {}

    def register(self, cls: type, name: str = "") -> None:
        """Register a class for lazy construction."""
        self._add(Registration(impl_type=cls, name=name or cls.__name__))

    def register_instance(self, instance: object, name: str = "") -> None:
        """Register an already-built component."""
        cls = type(instance)
        self._add(Registration(impl_type=cls, name=name or cls.__name__, instance=instance))

    def _add(self, reg: Registration) -> None:
        self._registrations[reg.impl_type] = reg
        self._named[reg.name] = reg

    def contains(self, name: str) -> bool:
        return name in self._named

    def resolve(self, cls: type[T]) -> T:
        """Resolve an instance of *cls*, constructing unregistered concrete classes on the fly."""
        reg = self._find(cls)
        if reg is None:
            if inspect.isabstract(cls) or getattr(cls, "_is_protocol", False):
                raise ResolutionException(
                    f"No component of type '{cls.__name__}' is registered",
                    context={"type": cls.__name__},
                )
            return cast(T, self.create(cls))
        return cast(T, self._resolve_registration(reg))

    def _find(self, cls: type) -> Registration | None:
        if cls in self._registrations:
            return self._registrations[cls]
        for candidate in self._registrations.values():
            try:
                if issubclass(candidate.impl_type, cls):
                    return candidate
            except TypeError:
                # Protocols without @runtime_checkable refuse issubclass().
                return None
        return None

    def resolve_by_name(self, name: str) -> Any:
        if name not in self._named:
            suggestions = difflib.get_close_matches(name, list(self._named), n=3)
            raise ResolutionException(
                f"No component named '{name}' is registered",
                context={"name": name, "suggestions": suggestions},
            )
        return self._resolve_registration(self._named[name])

    def _resolve_registration(self, reg: Registration) -> Any:
        if reg.instance is None:
            reg.instance = self.create(reg.impl_type)
        return reg.instance

    def create(self, cls: type[T]) -> T:
        """Build a new *cls*, resolving annotated constructor parameters from the container."""
        if cls in self._resolving:
            chain = " -> ".join(t.__name__ for t in [*self._resolving, cls])
            raise ResolutionException(f"Circular dependency: {chain}", context={"chain": chain})

        self._resolving[cls] = None
        try:
            return cls(**self._constructor_kwargs(cls))
        finally:
            del self._resolving[cls]

    def _constructor_kwargs(self, cls: type) -> dict[str, Any]:
        init = cls.__init__
        if init is object.__init__:
            return {}

        try:
            hints = typing.get_type_hints(init)
        except NameError as exc:
            raise ResolutionException(
                f"Cannot read constructor annotations of '{cls.__name__}': {exc}",
                context={"type": cls.__name__},
            ) from exc

        kwargs: dict[str, Any] = {}
        for param in list(inspect.signature(init).parameters.values())[1:]:
            if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
                continue
            hint = _unwrap_optional(hints.get(param.name))
            has_default = param.default is not inspect.Parameter.empty
            if isinstance(hint, type) and hint not in (str, int, float, bool):
                if has_default and self._find(hint) is None:
                    continue
                kwargs[param.name] = self.resolve(hint)
            elif not has_default:
                raise ResolutionException(
                    f"Cannot resolve parameter '{param.name}' of '{cls.__name__}'",
                    context={"type": cls.__name__, "parameter": param.name},
                )
        return kwargs


def _unwrap_optional(hint: Any) -> Any:
    """``Foo | None`` and ``Optional[Foo]`` resolve as ``Foo``."""
    if typing.get_origin(hint) in (typing.Union, types.UnionType):
        args = [arg for arg in typing.get_args(hint) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return hint
