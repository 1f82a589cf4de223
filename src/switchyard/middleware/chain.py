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
"""Middleware pipeline — cross-cutting concerns wrapped around message dispatch."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Protocol, runtime_checkable

from switchyard.container.container import DependencyResolver
from switchyard.kernel.exceptions import RoutingException
from switchyard.messaging.types import Message, Response

NextHandler = Callable[[Message], Response | None]


@runtime_checkable
class Middleware(Protocol):
    """Wraps dispatch of one message.

    Implementations may replace the message before calling ``next_handler``,
    answer on their own without calling it, or pass its result through.
    """

    def handle(self, message: Message, next_handler: NextHandler) -> Response | None: ...


def resolve_middleware(
    middlewares: Sequence[Middleware | str],
    resolver: DependencyResolver | None = None,
) -> list[Middleware]:
    """Turn name references into middleware instances, validating every entry."""
    resolved: list[Middleware] = []
    for entry in middlewares:
        instance: object = entry
        if isinstance(entry, str):
            if resolver is None:
                raise RoutingException(
                    f"Middleware '{entry}' is referenced by name but no dependency resolver was given.",
                    context={"middleware": entry},
                )
            try:
                instance = resolver.resolve_by_name(entry)
            except Exception as exc:
                raise RoutingException(
                    f"Middleware '{entry}' could not be resolved.",
                    context={"middleware": entry},
                ) from exc

        if not isinstance(instance, Middleware):
            raise RoutingException(
                f"Middleware {entry!r} does not implement handle(message, next_handler).",
                context={"middleware": repr(entry)},
            )
        resolved.append(instance)
    return resolved


def compile_pipeline(
    middlewares: Sequence[Middleware | str],
    kernel: NextHandler,
    resolver: DependencyResolver | None = None,
) -> NextHandler:
    """Compose *middlewares* around *kernel*.

    The first middleware is the outermost layer: it sees the message first
    and the response last.
    """
    chain = kernel
    for middleware in reversed(resolve_middleware(middlewares, resolver)):
        chain = _wrap(middleware, chain)
    return chain


def _wrap(middleware: Middleware, next_handler: NextHandler) -> NextHandler:
    def _next(message: Message) -> Response | None:
        return middleware.handle(message, next_handler)

    return _next
