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
"""StructlogAdapter: routes switchyard's structlog events through stdlib logging."""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from switchyard.core.config import Config
from switchyard.kernel.exceptions import ConfigurationException

_FORMATS = ("console", "json")
_STREAMS = ("stdout", "stderr")


def _processors(fmt: str) -> list[structlog.types.Processor]:
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if fmt == "json":
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer())
    return processors


class StructlogAdapter:
    """Default logging adapter backed by structlog.

    Reads, under ``switchyard.logging``:

    - ``level.root`` and per-logger levels, either dotted
      (``switchyard.routing: DEBUG``) or nested;
    - ``format``: ``console`` (default) or ``json``;
    - ``stream``: ``stdout`` (default) or ``stderr``.
    """

    def __init__(self) -> None:
        self._root_level: str = "INFO"
        self._format: str = "console"
        self._stream: str = "stdout"
        self._module_levels: dict[str, str] = {}

    def configure(self, config: Config) -> None:
        levels = dict(config.get_section("switchyard.logging.level"))
        self._root_level = str(levels.pop("root", "INFO")).upper()
        self._module_levels = _flatten_levels(levels)

        self._format = str(config.get("switchyard.logging.format", "console")).lower()
        if self._format not in _FORMATS:
            raise ConfigurationException(
                f"Unknown log format '{self._format}'; expected one of {', '.join(_FORMATS)}.",
                context={"format": self._format},
            )

        self._stream = str(config.get("switchyard.logging.stream", "stdout")).lower()
        if self._stream not in _STREAMS:
            raise ConfigurationException(
                f"Unknown log stream '{self._stream}'; expected stdout or stderr.",
                context={"stream": self._stream},
            )

        # Module-level loggers are created at import time; keep them uncached.
        structlog.configure(
            processors=_processors(self._format),
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=False,
        )
        logging.basicConfig(
            format="%(message)s",
            stream=getattr(sys, self._stream),
            level=getattr(logging, self._root_level, logging.INFO),
            force=True,
        )

        for name, level in self._module_levels.items():
            self.set_level(name, level)

    def get_logger(self, name: str) -> Any:
        return structlog.get_logger(name)

    def set_level(self, name: str, level: str) -> None:
        """Set the level of one stdlib logger; unknown level names fall back to INFO."""
        logging.getLogger(name).setLevel(getattr(logging, level.upper(), logging.INFO))


def _flatten_levels(section: dict[str, Any], prefix: str = "") -> dict[str, str]:
    # {"switchyard": {"routing": "DEBUG"}} -> {"switchyard.routing": "DEBUG"}
    levels: dict[str, str] = {}
    for key, value in section.items():
        name = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, dict):
            levels.update(_flatten_levels(value, name))
        else:
            levels[name] = str(value).upper()
    return levels
