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
"""Built-in middleware: JSON parsing, validation, deadlettering and logging."""

from __future__ import annotations

import json
from typing import Any

import structlog

from switchyard.kernel.exceptions import MessageValidationException
from switchyard.messaging.ports.outbound import PublisherPort, ValidatorPort
from switchyard.messaging.types import Message, Response
from switchyard.middleware.chain import NextHandler


class ParseJsonPayload:
    """Decodes the payload as JSON and attaches it as ``parsed_payload``.

    Invalid JSON answers ``DEADLETTER`` without reaching the handler, or
    raises MessageValidationException when ``deadletter_on_error`` is off.
    """

    def __init__(self, deadletter_on_error: bool = True) -> None:
        self._deadletter_on_error = deadletter_on_error

    def handle(self, message: Message, next_handler: NextHandler) -> Response | None:
        try:
            parsed = json.loads(message.payload)
        except ValueError as exc:
            if self._deadletter_on_error:
                return Response.DEADLETTER
            raise MessageValidationException("Payload is not valid JSON.", failed_message=message) from exc

        return next_handler(message.with_parsed_payload(parsed))


class ValidateMessage:
    """Runs a validator; a failed contract answers ``DEADLETTER``."""

    def __init__(self, validator: ValidatorPort) -> None:
        self._validator = validator

    def handle(self, message: Message, next_handler: NextHandler) -> Response | None:
        try:
            valid = self._validator.validate(message)
        except MessageValidationException:
            return Response.DEADLETTER

        if valid is False:
            return Response.DEADLETTER

        return next_handler(message)


class DeadletterMessage:
    """Publishes messages whose handler asked for ``DEADLETTER`` and acks them instead."""

    def __init__(self, deadletter: PublisherPort) -> None:
        self._deadletter = deadletter

    def handle(self, message: Message, next_handler: NextHandler) -> Response | None:
        response = next_handler(message)

        if response is Response.DEADLETTER:
            self._deadletter.publish(message)
            return Response.ACK

        return response


class LoggingMiddleware:
    """Logs message handling."""

    def __init__(self, logger: Any = None) -> None:
        self._logger = logger or structlog.get_logger("switchyard.middleware")

    def handle(self, message: Message, next_handler: NextHandler) -> Response | None:
        self._logger.info("message_handling", topic=message.topic)
        response = next_handler(message)
        self._logger.info(
            "message_handled",
            topic=message.topic,
            response=response.value if isinstance(response, Response) else None,
        )
        return response
