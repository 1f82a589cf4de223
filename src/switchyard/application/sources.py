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
"""Message source variants: pull (consumer) or push (subscriber)."""

from __future__ import annotations

from dataclasses import dataclass

from switchyard.kernel.exceptions import ConfigurationException
from switchyard.messaging.ports.outbound import ConsumerPort, SubscriberPort


@dataclass(frozen=True)
class ConsumerSource:
    """The application polls ``consumer`` and acks/nacks each message itself."""

    consumer: ConsumerPort


@dataclass(frozen=True)
class SubscriberSource:
    """The broker pushes into a callback from inside ``subscriber.loop()``."""

    subscriber: SubscriberPort


MessageSource = ConsumerSource | SubscriberSource


def as_source(source: object) -> MessageSource:
    """Classify an adapter by capability; subscribers win when both are offered."""
    if isinstance(source, (ConsumerSource, SubscriberSource)):
        return source
    if isinstance(source, SubscriberPort):
        return SubscriberSource(source)
    if isinstance(source, ConsumerPort):
        return ConsumerSource(source)
    raise ConfigurationException(
        f"{type(source).__name__} implements neither the consumer nor the subscriber interface.",
        context={"source": type(source).__name__},
    )
