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
"""Publisher decorators: deadletter redirection and validate-before-publish."""

from __future__ import annotations

from typing import Any

from switchyard.kernel.exceptions import MessageValidationException
from switchyard.messaging.ports.outbound import PublisherPort, ValidatorPort
from switchyard.messaging.types import Message


class DeadletterPublisher:
    """Republishes a copy of each message to a fixed deadletter topic.

    Payload, attributes and headers are carried over; the adapter reference
    and any parsed payload are not.
    """

    def __init__(self, publisher: PublisherPort, topic: str) -> None:
        self._publisher = publisher
        self._topic = topic

    @property
    def topic(self) -> str:
        return self._topic

    def publish(self, message: Message, options: dict[str, Any] | None = None) -> str | None:
        return self._publisher.publish(message.with_topic(self._topic), options)


class ValidatingPublisher:
    """Validates each message before handing it to the wrapped publisher."""

    def __init__(self, validator: ValidatorPort, publisher: PublisherPort) -> None:
        self._validator = validator
        self._publisher = publisher

    def publish(self, message: Message, options: dict[str, Any] | None = None) -> str | None:
        if self._validator.validate(message) is False:
            raise MessageValidationException("Message failed validation.", failed_message=message)

        return self._publisher.publish(message, options)
