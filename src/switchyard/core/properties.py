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
"""Typed settings for the application loop."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from switchyard.core.config import config_properties


@config_properties(prefix="switchyard.application")
class ApplicationProperties(BaseModel):
    """Listening defaults, overridable per ``Application.listen`` call.

    ``signals`` holds signal names (``SIGINT``, ``SIGTERM`` ...) rather than
    numbers so the same file works on platforms that lack some of them.
    """

    max_messages: int = Field(default=1, ge=1)
    nack_timeout: int = Field(default=0, ge=0)
    polling_timeout: int = Field(default=10, ge=0)
    signals: list[str] = Field(default_factory=lambda: ["SIGINT"])

    @field_validator("signals", mode="before")
    @classmethod
    def _split_signals(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [name.strip().upper() for name in value.split(",") if name.strip()]
        return value
