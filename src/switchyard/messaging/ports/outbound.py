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
"""Outbound ports for broker adapters and message validators."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any, Protocol, runtime_checkable

from switchyard.messaging.types import Message, Response

MessageCallback = Callable[[Message], Response | None]


@runtime_checkable
class ConsumerPort(Protocol):
    """Pull-style source: the application asks for messages.

    Adapters raise ConnectionException for transport failures and
    ConsumeException when the broker cannot honor the call.
    """

    def consume(
        self,
        topic: str,
        max_messages: int = 1,
        options: dict[str, Any] | None = None,
    ) -> list[Message]: ...

    def ack(self, message: Message) -> None: ...

    def nack(self, message: Message, timeout: int = 0) -> None: ...


@runtime_checkable
class SubscriberPort(Protocol):
    """Push-style source: the broker drives delivery into callbacks."""

    def subscribe(
        self,
        topics: str | Sequence[str],
        callback: MessageCallback,
        options: dict[str, Any] | None = None,
    ) -> None: ...

    def loop(self, options: dict[str, Any] | None = None) -> None: ...

    def shutdown(self) -> None: ...


@runtime_checkable
class PublisherPort(Protocol):
    def publish(self, message: Message, options: dict[str, Any] | None = None) -> str | None: ...


@runtime_checkable
class ValidatorPort(Protocol):
    """Checks a message against a contract, raising MessageValidationException on failure."""

    def validate(self, message: Message) -> bool: ...
