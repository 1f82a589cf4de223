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
"""Tests for the dependency container."""

from __future__ import annotations

from abc import ABC, abstractmethod

import pytest

from switchyard.container.container import Container, DependencyResolver
from switchyard.kernel.exceptions import ResolutionException


class Clock:
    def now(self) -> int:
        return 42


class Repository(ABC):
    @abstractmethod
    def find(self) -> str: ...


class MemoryRepository(Repository):
    def find(self) -> str:
        return "memory"


class OrderHandlers:
    def __init__(self, clock: Clock, repository: Repository) -> None:
        self.clock = clock
        self.repository = repository


class OptionalDependency:
    def __init__(self, repository: Repository | None = None, retries: int = 3) -> None:
        self.repository = repository
        self.retries = retries


class NeedsName:
    def __init__(self, name: str) -> None:
        self.name = name


class Chicken:
    def __init__(self, egg: Egg) -> None:
        self.egg = egg


class Egg:
    def __init__(self, chicken: Chicken) -> None:
        self.chicken = chicken


class TestRegistration:
    def test_is_a_dependency_resolver(self) -> None:
        assert isinstance(Container(), DependencyResolver)

    def test_contains_uses_class_name(self) -> None:
        container = Container()
        container.register(Clock)
        assert container.contains("Clock")
        assert not container.contains("Calendar")

    def test_custom_name(self) -> None:
        container = Container()
        container.register(Clock, name="wall_clock")
        assert container.contains("wall_clock")
        assert isinstance(container.resolve_by_name("wall_clock"), Clock)

    def test_register_instance(self) -> None:
        container = Container()
        clock = Clock()
        container.register_instance(clock)
        assert container.resolve_by_name("Clock") is clock
        assert container.resolve(Clock) is clock


class TestResolution:
    def test_constructor_injection(self) -> None:
        container = Container()
        container.register(MemoryRepository)
        container.register(OrderHandlers)

        handlers = container.resolve_by_name("OrderHandlers")

        assert isinstance(handlers.clock, Clock)
        assert handlers.repository.find() == "memory"

    def test_singletons_are_cached(self) -> None:
        container = Container()
        container.register(Clock)
        assert container.resolve(Clock) is container.resolve_by_name("Clock")

    def test_unregistered_concrete_class_is_built(self) -> None:
        assert Container().resolve(Clock).now() == 42

    def test_unregistered_abstract_class_raises(self) -> None:
        with pytest.raises(ResolutionException):
            Container().resolve(Repository)

    def test_optional_dependency_left_to_default(self) -> None:
        built = Container().resolve(OptionalDependency)
        assert built.repository is None
        assert built.retries == 3

    def test_optional_dependency_injected_when_registered(self) -> None:
        container = Container()
        container.register(MemoryRepository)
        assert isinstance(container.resolve(OptionalDependency).repository, MemoryRepository)

    def test_unresolvable_parameter_raises(self) -> None:
        with pytest.raises(ResolutionException) as exc_info:
            Container().resolve(NeedsName)
        assert exc_info.value.context["parameter"] == "name"

    def test_circular_dependency_raises(self) -> None:
        with pytest.raises(ResolutionException, match="Circular dependency"):
            Container().resolve(Chicken)

    def test_unknown_name_suggests_close_matches(self) -> None:
        container = Container()
        container.register(OrderHandlers)
        with pytest.raises(ResolutionException) as exc_info:
            container.resolve_by_name("OrderHandler")
        assert exc_info.value.context["suggestions"] == ["OrderHandlers"]
