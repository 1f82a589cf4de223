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
"""In-memory queue and pub/sub bus for testing and single-process applications."""

from __future__ import annotations

import secrets
from collections.abc import Sequence
from typing import Any

from switchyard.kernel.exceptions import ConsumeException, PublishException
from switchyard.messaging.ports.outbound import MessageCallback
from switchyard.messaging.types import Message, split_topics


class _TopicStore:
    def __init__(self, messages: dict[str, list[Message]] | None = None) -> None:
        self._messages: dict[str, list[Message]] = {
            topic: list(queued) for topic, queued in (messages or {}).items()
        }

    def publish(self, message: Message, options: dict[str, Any] | None = None) -> str | None:
        """Append *message* to its topic and return a random receipt id.

        Passing ``{"exception": True}`` as options simulates a broker failure.
        """
        if (options or {}).get("exception"):
            raise PublishException("Failed to publish message.", context={"topic": message.topic})

        self._messages.setdefault(message.topic, []).append(message)
        return secrets.token_hex(12)

    def messages(self, topic: str) -> list[Message]:
        return list(self._messages.get(topic, []))

    def flush(self, topic: str | None = None) -> None:
        if topic is None:
            self._messages.clear()
        else:
            self._messages[topic] = []

    def _take(self, topic: str, count: int) -> list[Message]:
        queued = self._messages.get(topic, [])
        taken, self._messages[topic] = queued[:count], queued[count:]
        return taken


class InMemoryQueue(_TopicStore):
    """Publisher and pull consumer over per-topic FIFO lists.

    ``ack`` drops the message (it was already dequeued) and ``nack`` puts it
    back at the tail of its topic.
    """

    def consume(
        self,
        topic: str,
        max_messages: int = 1,
        options: dict[str, Any] | None = None,
    ) -> list[Message]:
        if (options or {}).get("exception"):
            raise ConsumeException("Failed to consume messages.", context={"topic": topic})

        return self._take(topic, max_messages)

    def ack(self, message: Message) -> None:
        return None

    def nack(self, message: Message, timeout: int = 0) -> None:
        self.publish(message)


class InMemoryPubSub(_TopicStore):
    """Publisher and push subscriber.

    ``loop`` drains every subscribed topic one message at a time, in
    subscription order, and returns early once ``shutdown`` is called.
    """

    def __init__(self, messages: dict[str, list[Message]] | None = None) -> None:
        super().__init__(messages)
        self._subscriptions: dict[str, MessageCallback] = {}
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def subscribe(
        self,
        topics: str | Sequence[str],
        callback: MessageCallback,
        options: dict[str, Any] | None = None,
    ) -> None:
        for topic in split_topics(topics):
            self._subscriptions[topic] = callback

    def subscription(self, topic: str) -> MessageCallback | None:
        return self._subscriptions.get(topic)

    def loop(self, options: dict[str, Any] | None = None) -> None:
        self._running = True

        for topic, callback in list(self._subscriptions.items()):
            while self._messages.get(topic):
                (message,) = self._take(topic, 1)
                callback(message)

                if not self._running:
                    return

    def shutdown(self) -> None:
        self._running = False
