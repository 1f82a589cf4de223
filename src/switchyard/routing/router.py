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
"""Router — resolves an inbound message to the first matching handler."""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from types import MappingProxyType
from typing import Any, Protocol, runtime_checkable

import structlog

from switchyard.kernel.exceptions import RoutingException
from switchyard.messaging.types import Message
from switchyard.routing.decorators import consume_rules
from switchyard.routing.matchers import match_fields, match_payload, match_string
from switchyard.routing.types import HandlerReference, Route

logger = structlog.get_logger("switchyard.routing")


@runtime_checkable
class RouterPort(Protocol):
    def resolve(self, message: Message) -> HandlerReference | None: ...


class Router:
    """Ordered route table evaluated first-match-wins.

    Routes come from two places, in this order:

    1. ``routes`` — explicit :class:`Route` objects built in code.
    2. ``handlers`` — classes or instances whose methods carry ``@consume``
       rules. Each becomes a ``"<ClassName>@<method>"`` route, in class body
       order, then inherited methods not overridden by the class.

    The table is validated and frozen at construction: a decorated method
    that is not public, or that carries more than one rule, raises
    RoutingException.
    """

    def __init__(
        self,
        handlers: Sequence[type | object] = (),
        *,
        routes: Sequence[Route] = (),
        default: HandlerReference | None = None,
    ) -> None:
        self._default = default
        self._handler_types: dict[str, type | object] = {}
        table = list(routes)
        for handler in handlers:
            table.extend(self._build_routes(handler))
        self._routes: tuple[Route, ...] = tuple(table)

    @property
    def routes(self) -> tuple[Route, ...]:
        return self._routes

    @property
    def default(self) -> HandlerReference | None:
        return self._default

    @property
    def handler_types(self) -> Mapping[str, type | object]:
        """Class name -> handler class or instance, for turning named routes into invocables."""
        return MappingProxyType(self._handler_types)

    def resolve(self, message: Message) -> HandlerReference | None:
        payload = message.parsed_payload if message.parsed_payload is not None else message.payload

        for route in self._routes:
            rule = route.rule
            if (
                match_string(message.topic, rule.topic)
                and match_payload(payload, rule.payload)
                and match_fields(message.headers, rule.headers)
                and match_fields(message.attributes, rule.attributes)
            ):
                logger.debug("route_matched", topic=message.topic, handler=str(route.handler))
                return route.handler

        return self._default

    def _build_routes(self, handler: type | object) -> list[Route]:
        cls = handler if isinstance(handler, type) else type(handler)
        class_name = cls.__name__

        registered = self._handler_types.get(class_name)
        if registered is not None and registered is not handler:
            raise RoutingException(
                f"Handler class name '{class_name}' is registered more than once.",
                context={"handler": class_name},
            )
        self._handler_types[class_name] = handler

        routes: list[Route] = []
        for name, member in _declared_members(cls):
            rules = consume_rules(member)
            if not rules:
                continue

            if name.startswith("_"):
                raise RoutingException(
                    f"Handler {class_name}@{name} must be public.",
                    context={"handler": f"{class_name}@{name}"},
                )

            if len(rules) > 1:
                raise RoutingException(
                    f"Handler {class_name}@{name} has more than one @consume rule. "
                    "A handler can only have a single @consume rule.",
                    context={"handler": f"{class_name}@{name}", "rules": len(rules)},
                )

            routes.append(Route(handler=f"{class_name}@{name}", rule=rules[0]))

        return routes


def _declared_members(cls: type) -> Iterator[tuple[str, Any]]:
    seen: set[str] = set()
    for klass in cls.__mro__:
        if klass is object:
            continue
        for name, member in vars(klass).items():
            if name in seen:
                continue
            seen.add(name)
            yield name, member
