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
"""Unified exception hierarchy for Switchyard.

All library exceptions inherit from SwitchyardException, enabling unified
error handling across modules.

Categories:
- ConfigurationException: Broken route tables, middleware or settings
- InfrastructureException: Broker transport and protocol failures
- MessageValidationException: Payloads failing a structural contract
"""

from __future__ import annotations

from typing import Any

# =============================================================================
# Base Exception
# =============================================================================


class SwitchyardException(Exception):
    """Base exception for all Switchyard errors.

    Carries an optional error code and context dict for structured error data.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "ROUTING_001").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict = context if context is not None else {}


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigurationException(SwitchyardException):
    """Invalid wiring or settings detected before or while listening."""


class RoutingException(ConfigurationException):
    """A route table, handler or middleware registration is unusable.

    Raised for malformed handler registrations, ambiguous payload paths,
    bad patterns, and deadletter requests with no deadletter target.
    """


class ResolutionException(ConfigurationException):
    """The dependency container could not produce the requested component."""


# =============================================================================
# Infrastructure Exceptions
# =============================================================================


class InfrastructureException(SwitchyardException):
    """Broker failures raised by adapters and passed through unmodified."""


class ConnectionException(InfrastructureException):
    """Transport or authentication failure talking to a broker."""


class ConsumeException(InfrastructureException):
    """The broker accepted a consume, ack or nack call but could not honor it."""


class PublishException(InfrastructureException):
    """The broker could not accept a published message."""


class SubscriptionException(InfrastructureException):
    """The broker rejected a subscription or its loop failed."""


# =============================================================================
# Validation Exceptions
# =============================================================================


class MessageValidationException(SwitchyardException):
    """A message failed a schema or structural contract.

    The offending message is kept on ``failed_message`` so callers can
    deadletter or inspect it.
    """

    def __init__(
        self,
        message: str,
        failed_message: Any = None,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message, code=code, context=context)
        self.failed_message = failed_message
