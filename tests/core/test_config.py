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
"""Tests for Config loading, overrides and property binding."""

from dataclasses import dataclass
from pathlib import Path

import pytest

from switchyard.core.config import Config, config_properties, env_key
from switchyard.core.properties import ApplicationProperties
from switchyard.kernel.exceptions import ConfigurationException


@config_properties(prefix="switchyard.broker")
@dataclass
class BrokerProperties:
    host: str = "localhost"
    port: int = 5672
    durable: bool = False


class TestConfigGet:
    def test_get_nested_value(self):
        config = Config({"switchyard": {"application": {"max_messages": 5}}})
        assert config.get("switchyard.application.max_messages") == 5

    def test_get_with_default(self):
        assert Config({}).get("missing.key", "fallback") == "fallback"

    def test_env_var_override(self, monkeypatch):
        monkeypatch.setenv("SWITCHYARD_APPLICATION_POLLING_TIMEOUT", "30")
        config = Config({"switchyard": {"application": {"polling_timeout": 5}}})
        assert config.get("switchyard.application.polling_timeout") == "30"

    def test_dashes_map_to_underscores(self, monkeypatch):
        monkeypatch.setenv("SWITCHYARD_BROKER_DEAD_LETTER", "dlq")
        assert Config({}).get("switchyard.broker.dead-letter") == "dlq"

    def test_get_section(self):
        config = Config({"switchyard": {"logging": {"level": {"root": "WARNING"}}}})
        assert config.get_section("switchyard.logging.level") == {"root": "WARNING"}
        assert config.get_section("switchyard.nothing") == {}


class TestPlaceholders:
    def test_default_used_when_unset(self, monkeypatch):
        monkeypatch.delenv("BROKER_HOST", raising=False)
        config = Config({"switchyard": {"broker": {"host": "${BROKER_HOST:localhost}"}}})
        assert config.get("switchyard.broker.host") == "localhost"

    def test_environment_wins(self, monkeypatch):
        monkeypatch.setenv("BROKER_HOST", "rabbit.internal")
        config = Config({"switchyard": {"broker": {"host": "${BROKER_HOST:localhost}"}}})
        assert config.get("switchyard.broker.host") == "rabbit.internal"

    def test_other_config_keys(self):
        config = Config({"topics": {"prefix": "shop"}, "deadletter": "${topics.prefix}.deadletter"})
        assert config.get("deadletter") == "shop.deadletter"

    def test_unresolvable_raises(self, monkeypatch):
        monkeypatch.delenv("NOT_THERE", raising=False)
        config = Config({"value": "${NOT_THERE}"})
        with pytest.raises(ConfigurationException):
            config.get("value")


class TestFromFile:
    def test_package_defaults_are_loaded(self, tmp_path: Path):
        config = Config.from_file(tmp_path / "absent.yaml")
        assert config.get("switchyard.application.polling_timeout") == 10
        assert config.get("switchyard.logging.format") == "console"
        assert config.loaded_sources == ["switchyard-defaults.yaml (package defaults)"]

    def test_file_overrides_defaults(self, tmp_path: Path):
        config_file = tmp_path / "switchyard.yaml"
        config_file.write_text("switchyard:\n  application:\n    max_messages: 25\n")

        config = Config.from_file(config_file)

        assert config.get("switchyard.application.max_messages") == 25
        assert config.get("switchyard.application.nack_timeout") == 0
        assert str(config_file) in config.loaded_sources

    def test_without_defaults(self, tmp_path: Path):
        config_file = tmp_path / "switchyard.yaml"
        config_file.write_text("switchyard:\n  application:\n    max_messages: 25\n")

        config = Config.from_file(config_file, load_defaults=False)

        assert config.get("switchyard.application.polling_timeout") is None

    def test_toml_file(self, tmp_path: Path):
        config_file = tmp_path / "switchyard.toml"
        config_file.write_text('[switchyard.application]\nsignals = ["SIGTERM"]\n')

        config = Config.from_file(config_file)

        assert config.get("switchyard.application.signals") == ["SIGTERM"]

    def test_profile_overlay(self, tmp_path: Path):
        base = tmp_path / "switchyard.yaml"
        base.write_text("switchyard:\n  application:\n    max_messages: 10\n    nack_timeout: 5\n")
        (tmp_path / "switchyard-prod.yaml").write_text("switchyard:\n  application:\n    max_messages: 100\n")

        config = Config.from_file(base, active_profiles=["prod", "missing"])

        assert config.get("switchyard.application.max_messages") == 100
        assert config.get("switchyard.application.nack_timeout") == 5
        assert len(config.loaded_sources) == 3


class TestBind:
    def test_application_properties_defaults(self):
        properties = Config({}).bind(ApplicationProperties)
        assert properties.max_messages == 1
        assert properties.nack_timeout == 0
        assert properties.polling_timeout == 10
        assert properties.signals == ["SIGINT"]

    def test_application_properties_from_section(self):
        config = Config({"switchyard": {"application": {"max_messages": 8, "signals": "sigint, sigterm"}}})
        properties = config.bind(ApplicationProperties)
        assert properties.max_messages == 8
        assert properties.signals == ["SIGINT", "SIGTERM"]

    def test_env_override_is_coerced(self, monkeypatch):
        monkeypatch.setenv("SWITCHYARD_APPLICATION_MAX_MESSAGES", "5")
        properties = Config({"switchyard": {"application": {"max_messages": 2}}}).bind(ApplicationProperties)
        assert properties.max_messages == 5

    def test_invalid_value_raises(self):
        config = Config({"switchyard": {"application": {"max_messages": 0}}})
        with pytest.raises(ConfigurationException, match="ApplicationProperties"):
            config.bind(ApplicationProperties)

    def test_bind_dataclass(self, monkeypatch):
        monkeypatch.setenv("SWITCHYARD_BROKER_PORT", "6000")
        monkeypatch.setenv("SWITCHYARD_BROKER_DURABLE", "yes")
        config = Config({"switchyard": {"broker": {"host": "rabbit"}}})

        broker = config.bind(BrokerProperties)

        assert broker == BrokerProperties(host="rabbit", port=6000, durable=True)

    def test_undecorated_class_raises(self):
        @dataclass
        class Plain:
            value: int = 1

        with pytest.raises(ConfigurationException):
            Config({}).bind(Plain)


class TestEnvKey:
    def test_prefix_is_not_repeated(self):
        assert env_key("switchyard.application.max-messages") == "SWITCHYARD_APPLICATION_MAX_MESSAGES"

    def test_other_keys_are_prefixed(self):
        assert env_key("broker.host") == "SWITCHYARD_BROKER_HOST"


class TestProfilesFromEnvironment:
    def test_profiles_variable_is_used_by_default(self, tmp_path: Path, monkeypatch):
        base = tmp_path / "switchyard.yaml"
        base.write_text("switchyard:\n  application:\n    max_messages: 10\n")
        (tmp_path / "switchyard-staging.yaml").write_text("switchyard:\n  application:\n    max_messages: 50\n")
        monkeypatch.setenv("SWITCHYARD_PROFILES", "staging")

        config = Config.from_file(base)

        assert config.get("switchyard.application.max_messages") == 50

    def test_bad_dataclass_value_raises(self, monkeypatch):
        monkeypatch.setenv("SWITCHYARD_BROKER_PORT", "amqp")
        with pytest.raises(ConfigurationException):
            Config({}).bind(BrokerProperties)
