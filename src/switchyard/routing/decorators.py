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
"""Decorator for declaring which messages a handler method consumes."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Any, TypeVar

from switchyard.routing.types import MatchRule

F = TypeVar("F", bound=Callable[..., Any])

CONSUME_RULES_ATTR = "__switchyard_consume_rules__"


def consume(
    topic: str | Sequence[str] = (),
    payload: Mapping[str, str | Sequence[str]] | None = None,
    attributes: Mapping[str, str | Sequence[str]] | None = None,
    headers: Mapping[str, str | Sequence[str]] | None = None,
) -> Callable[[F], F]:
    """Attach a routing rule to a handler method.

    Usage:
        class OrderHandlers:
            @consume(topic="orders.*", payload={"$.type": "created"})
            def on_created(self, message: Message) -> Response: ...

    A method may carry only one rule; stacking the decorator is rejected
    when the router builds its table.
    """
    rule = MatchRule(
        topic=topic,
        payload=payload or {},
        attributes=attributes or {},
        headers=headers or {},
    )

    def decorator(func: F) -> F:
        rules = getattr(func, CONSUME_RULES_ATTR, ())
        setattr(func, CONSUME_RULES_ATTR, (*rules, rule))
        return func

    return decorator


def consume_rules(member: Any) -> tuple[MatchRule, ...]:
    """Rules attached to a class attribute, unwrapping static and class methods."""
    func = getattr(member, "__func__", member)
    return tuple(getattr(func, CONSUME_RULES_ATTR, ()))
