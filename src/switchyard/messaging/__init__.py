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
"""Switchyard Messaging — message types, broker ports and in-memory adapters."""

from switchyard.messaging.adapters.memory import InMemoryPubSub, InMemoryQueue
from switchyard.messaging.ports.outbound import (
    ConsumerPort,
    MessageCallback,
    PublisherPort,
    SubscriberPort,
    ValidatorPort,
)
from switchyard.messaging.publishers import DeadletterPublisher, ValidatingPublisher
from switchyard.messaging.types import Message, Response

__all__ = [
    "ConsumerPort",
    "DeadletterPublisher",
    "InMemoryPubSub",
    "InMemoryQueue",
    "Message",
    "MessageCallback",
    "PublisherPort",
    "Response",
    "SubscriberPort",
    "ValidatingPublisher",
    "ValidatorPort",
]
