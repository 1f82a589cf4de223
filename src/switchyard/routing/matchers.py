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
"""Predicates used by the router: wildcard strings, key/value fields, JSON paths.

All three treat an empty pattern collection as "no constraint". Configuration
problems (an unusable pattern, an undecodable payload, a JSON path that is too
broad) raise RoutingException instead of reporting a mismatch, so a broken
route table surfaces on the first message rather than silently dropping traffic.
"""

from __future__ import annotations

import functools
import json
import re
from collections.abc import Mapping, Sequence
from typing import Any

from jsonpath_ng.exceptions import JsonPathLexerError, JsonPathParserError
from jsonpath_ng.ext import parse as parse_jsonpath
from jsonpath_ng.jsonpath import JSONPath

from switchyard.kernel.exceptions import RoutingException

Patterns = str | Sequence[str]


@functools.lru_cache(maxsize=1024)
def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a wildcard pattern: ``*`` matches any run of characters, all else is literal."""
    expression = re.escape(pattern).replace(r"\*", ".*")
    try:
        return re.compile(expression, re.DOTALL)
    except re.error as exc:
        raise RoutingException(
            f"Pattern '{pattern}' could not be compiled.",
            code="ROUTING_PATTERN",
            context={"pattern": pattern, "expression": expression},
        ) from exc


def match_string(value: str, patterns: Patterns) -> bool:
    """True when *value* fully matches any of *patterns*."""
    if not patterns:
        return True

    if isinstance(patterns, str):
        patterns = [patterns]

    return any(compile_pattern(pattern).fullmatch(value) is not None for pattern in patterns)


def match_fields(values: Mapping[str, Any], patterns: Mapping[str, Patterns]) -> bool:
    """True when every key in *patterns* exists in *values* and its value matches."""
    for key, key_patterns in patterns.items():
        if key not in values:
            return False

        if not match_string(str(values[key]), key_patterns):
            return False

    return True


@functools.lru_cache(maxsize=256)
def compile_path(path: str) -> JSONPath:
    try:
        return parse_jsonpath(path)
    except (JsonPathLexerError, JsonPathParserError) as exc:
        raise RoutingException(
            f"JSON path \"{path}\" is not a valid expression.",
            code="ROUTING_PATH",
            context={"path": path},
        ) from exc


def _is_scalar(value: Any) -> bool:
    return isinstance(value, (str, int, float)) and not isinstance(value, bool)


def match_payload(payload: Any, paths: Mapping[str, Patterns]) -> bool:
    """True when each JSON path resolves to exactly one scalar that matches its patterns.

    A ``str``/``bytes`` payload is decoded as JSON first. Paths resolving to
    nothing are a mismatch; paths resolving to several values or to an object,
    array, boolean or null raise RoutingException.
    """
    if not paths:
        return True

    if isinstance(payload, (str, bytes, bytearray)):
        try:
            payload = json.loads(payload)
        except ValueError as exc:
            raise RoutingException(
                "Payload was not able to be JSON decoded.",
                code="ROUTING_PAYLOAD",
            ) from exc

    for path, path_patterns in paths.items():
        found = [match.value for match in compile_path(path).find(payload)]

        if not found:
            return False

        if len(found) > 1 or not _is_scalar(found[0]):
            raise RoutingException(
                f"JSON path \"{path}\" matched more than one value or the value is not a string or number. "
                "Please refine your JSON path to return just a single string or number value.",
                code="ROUTING_PATH_AMBIGUOUS",
                context={"path": path, "matches": len(found)},
            )

        if not match_string(str(found[0]), path_patterns):
            return False

    return True
