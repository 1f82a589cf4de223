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
"""Tests for Message, Response and topic helpers."""
from __future__ import annotations

import dataclasses

import pytest

from switchyard.messaging.ports.outbound import ConsumerPort, PublisherPort, SubscriberPort
from switchyard.messaging.types import Message, Response, split_topics


class TestMessage:
    def test_defaults(self) -> None:
        msg = Message(topic="orders")
        assert msg.payload == ""
        assert msg.attributes == {}
        assert msg.headers == {}
        assert msg.reference is None
        assert msg.parsed_payload is None

    def test_empty_topic_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            Message(topic="")

    def test_is_immutable(self) -> None:
        msg = Message(topic="orders")
        with pytest.raises(dataclasses.FrozenInstanceError):
            msg.topic = "other"  # type: ignore[misc]

    def test_headers_and_attributes_are_read_only(self) -> None:
        msg = Message(topic="orders", attributes={"a": "1"}, headers={"h": "v"})
        with pytest.raises(TypeError):
            msg.headers["h"] = "changed"  # type: ignore[index]
        with pytest.raises(TypeError):
            msg.attributes["b"] = "2"  # type: ignore[index]
        assert msg.headers == {"h": "v"}
        assert msg.attributes == {"a": "1"}

    def test_source_dict_changes_do_not_leak_in(self) -> None:
        headers = {"h": "v"}
        msg = Message(topic="orders", headers=headers)
        headers["h"] = "changed"
        assert msg.headers == {"h": "v"}

    def test_equal_messages_hash_equal(self) -> None:
        first = Message(topic="orders", payload="p", attributes={"a": "1"}, reference=1)
        second = Message(topic="orders", payload="p", attributes={"a": "1"}, reference=2)
        assert hash(first) == hash(second)
        assert len({first, second}) == 1

    def test_with_parsed_payload_keeps_everything_else(self) -> None:
        msg = Message(topic="orders", payload='{"a": 1}', headers={"h": "v"}, reference=object())
        parsed = msg.with_parsed_payload({"a": 1})
        assert parsed.parsed_payload == {"a": 1}
        assert parsed.reference is msg.reference
        assert parsed.headers == msg.headers
        assert msg.parsed_payload is None

    def test_with_topic_drops_reference(self) -> None:
        msg = Message(topic="orders", payload="p", attributes={"a": "1"}, reference="ref")
        copy = msg.with_topic("deadletter")
        assert copy.topic == "deadletter"
        assert copy.payload == "p"
        assert copy.attributes == {"a": "1"}
        assert copy.reference is None

    def test_equality_ignores_reference(self) -> None:
        assert Message(topic="t", payload="p", reference=1) == Message(topic="t", payload="p", reference=2)


class TestResponse:
    def test_values(self) -> None:
        assert [r.value for r in Response] == ["ack", "nack", "deadletter"]


class TestSplitTopics:
    def test_comma_separated_string(self) -> None:
        assert split_topics("fruits, vegetables ,grains") == ["fruits", "vegetables", "grains"]

    def test_sequence_is_stripped(self) -> None:
        assert split_topics([" fruits ", "", "meat"]) == ["fruits", "meat"]


class TestPortProtocols:
    def test_runtime_checkable(self) -> None:
        class _Consumer:
            def consume(self, topic, max_messages=1, options=None):
                return []

            def ack(self, message):
                pass

            def nack(self, message, timeout=0):
                pass

        assert isinstance(_Consumer(), ConsumerPort)
        assert not isinstance(_Consumer(), SubscriberPort)
        assert not isinstance(_Consumer(), PublisherPort)
