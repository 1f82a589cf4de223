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
"""Messaging data types."""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any


@dataclass(frozen=True)
class Message:
    """A message to publish, or one pulled off a broker.

    ``reference`` belongs to the adapter that produced the message and is only
    meaningful to that adapter's ``ack``/``nack``. ``parsed_payload`` is set by
    middleware through :meth:`with_parsed_payload`.
    """

    topic: str
    payload: str | bytes = ""
    attributes: Mapping[str, str] = field(default_factory=dict)
    headers: Mapping[str, str] = field(default_factory=dict)
    reference: Any = field(default=None, compare=False)
    parsed_payload: Any = None

    def __post_init__(self) -> None:
        if not isinstance(self.topic, str) or not self.topic:
            raise ValueError("Message.topic must be a non-empty string")
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    def __hash__(self) -> int:
        # parsed_payload is usually a dict, so it stays out of the hash.
        return hash(
            (self.topic, self.payload, frozenset(self.attributes.items()), frozenset(self.headers.items()))
        )

    def with_parsed_payload(self, parsed_payload: Any) -> Message:
        """Return a copy carrying *parsed_payload*; the reference is preserved."""
        return dataclasses.replace(self, parsed_payload=parsed_payload)

    def with_topic(self, topic: str) -> Message:
        """Return a fresh copy addressed to *topic*, without the adapter reference."""
        return Message(
            topic=topic,
            payload=self.payload,
            attributes=dict(self.attributes),
            headers=dict(self.headers),
        )


class Response(Enum):
    """How the application should dispose of the message a handler received.

    A handler returning ``None`` is treated as ``ACK``.
    """

    ACK = "ack"
    NACK = "nack"
    DEADLETTER = "deadletter"


def split_topics(topics: str | Sequence[str]) -> list[str]:
    """Normalize ``"a, b"`` or ``["a", "b"]`` into a list of topic names."""
    if isinstance(topics, str):
        topics = topics.split(",")
    return [topic.strip() for topic in topics if topic.strip()]
