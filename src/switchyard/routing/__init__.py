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
"""Switchyard Routing — match rules and the first-match router."""

from switchyard.routing.decorators import consume
from switchyard.routing.matchers import match_fields, match_payload, match_string
from switchyard.routing.router import Router, RouterPort
from switchyard.routing.types import (
    CallableHandler,
    HandlerReference,
    MatchRule,
    NamedHandler,
    Route,
)

__all__ = [
    "CallableHandler",
    "HandlerReference",
    "MatchRule",
    "NamedHandler",
    "Route",
    "Router",
    "RouterPort",
    "consume",
    "match_fields",
    "match_payload",
    "match_string",
]
