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
"""Switchyard — message routing and dispatch over pluggable queue and pub/sub adapters."""

from switchyard.application import Application, ApplicationState, ShutdownToken
from switchyard.container import Container
from switchyard.core import ApplicationProperties, Config
from switchyard.kernel import RoutingException, SwitchyardException
from switchyard.messaging import DeadletterPublisher, InMemoryPubSub, InMemoryQueue, Message, Response
from switchyard.middleware import Middleware, compile_pipeline
from switchyard.routing import MatchRule, Route, Router, consume

__version__ = "0.1.0"

__all__ = [
    "Application",
    "ApplicationProperties",
    "ApplicationState",
    "Config",
    "Container",
    "DeadletterPublisher",
    "InMemoryPubSub",
    "InMemoryQueue",
    "MatchRule",
    "Message",
    "Middleware",
    "Response",
    "Route",
    "Router",
    "RoutingException",
    "ShutdownToken",
    "SwitchyardException",
    "compile_pipeline",
    "consume",
]
