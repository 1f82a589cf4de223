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
"""Routing data types: match rules, routes and handler references."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from switchyard.kernel.exceptions import RoutingException

HandlerReference = Callable[..., Any] | str


def _freeze(patterns: Mapping[str, str | Sequence[str]] | None) -> Mapping[str, str | tuple[str, ...]]:
    frozen = {
        key: value if isinstance(value, str) else tuple(value)
        for key, value in (patterns or {}).items()
    }
    return MappingProxyType(frozen)


@dataclass(frozen=True)
class MatchRule:
    """Criteria a message must meet for a route to apply.

    Every part is optional and an empty part matches anything:

    - ``topic``: one pattern or several, ORed.
    - ``payload``: JSON path -> pattern(s); paths are ANDed.
    - ``attributes`` / ``headers``: key -> pattern(s); keys are ANDed and
      must be present on the message.

    Patterns are literal text where ``*`` matches any run of characters.
    """

    topic: str | tuple[str, ...] = ()
    payload: Mapping[str, str | tuple[str, ...]] = field(default_factory=dict)
    attributes: Mapping[str, str | tuple[str, ...]] = field(default_factory=dict)
    headers: Mapping[str, str | tuple[str, ...]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.topic, str):
            object.__setattr__(self, "topic", tuple(self.topic))
        object.__setattr__(self, "payload", _freeze(self.payload))
        object.__setattr__(self, "attributes", _freeze(self.attributes))
        object.__setattr__(self, "headers", _freeze(self.headers))


@dataclass(frozen=True)
class Route:
    handler: HandlerReference
    rule: MatchRule


@dataclass(frozen=True)
class CallableHandler:
    func: Callable[..., Any]


@dataclass(frozen=True)
class NamedHandler:
    """A ``"<ClassName>@<method>"`` reference, resolved to an instance at dispatch time."""

    class_name: str
    method: str

    @classmethod
    def parse(cls, reference: str) -> NamedHandler:
        class_name, sep, method = reference.rpartition("@")
        if not sep or not class_name or not method:
            raise RoutingException(
                f"Handler reference '{reference}' must have the form 'ClassName@method'.",
                context={"handler": reference},
            )
        return cls(class_name=class_name, method=method)

    def __str__(self) -> str:
        return f"{self.class_name}@{self.method}"


def to_handler(reference: HandlerReference) -> CallableHandler | NamedHandler:
    if isinstance(reference, str):
        return NamedHandler.parse(reference)
    if callable(reference):
        return CallableHandler(reference)
    raise RoutingException(
        f"Handler {reference!r} is neither callable nor a 'ClassName@method' string.",
    )
