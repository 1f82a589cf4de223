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
"""Tests for ShutdownToken and signal handler installation."""

from __future__ import annotations

import signal
import threading

from switchyard.application.shutdown import ShutdownToken, install_signal_handlers


class TestShutdownToken:
    def test_starts_uncancelled(self) -> None:
        assert ShutdownToken().cancelled is False

    def test_cancel_runs_callbacks_once(self) -> None:
        token = ShutdownToken()
        calls: list[str] = []
        token.on_cancel(lambda: calls.append("first"))
        token.on_cancel(lambda: calls.append("second"))

        token.cancel()
        token.cancel()

        assert token.cancelled is True
        assert calls == ["first", "second"]

    def test_late_callback_runs_immediately(self) -> None:
        token = ShutdownToken()
        token.cancel()
        calls: list[str] = []

        token.on_cancel(lambda: calls.append("late"))

        assert calls == ["late"]

    def test_cancel_from_another_thread(self) -> None:
        token = ShutdownToken()
        worker = threading.Thread(target=token.cancel)
        worker.start()
        worker.join()
        assert token.cancelled is True


class TestInstallSignalHandlers:
    def test_installs_and_restores(self) -> None:
        previous = signal.getsignal(signal.SIGUSR1)
        received: list[int] = []

        restore = install_signal_handlers(["SIGUSR1"], lambda signum, frame: received.append(signum))
        try:
            signal.raise_signal(signal.SIGUSR1)
        finally:
            restore()

        assert received == [signal.SIGUSR1]
        assert signal.getsignal(signal.SIGUSR1) == previous

    def test_names_are_case_insensitive(self) -> None:
        previous = signal.getsignal(signal.SIGUSR2)
        handler = lambda signum, frame: None  # noqa: E731

        restore = install_signal_handlers(["sigusr2"], handler)
        try:
            assert signal.getsignal(signal.SIGUSR2) is handler
        finally:
            restore()

        assert signal.getsignal(signal.SIGUSR2) == previous

    def test_unknown_names_are_skipped(self) -> None:
        restore = install_signal_handlers(["SIGNOPE", "SIG_DFL"], lambda signum, frame: None)
        restore()

    def test_nothing_installed_off_main_thread(self) -> None:
        previous = signal.getsignal(signal.SIGUSR1)
        restores = []

        worker = threading.Thread(
            target=lambda: restores.append(install_signal_handlers(["SIGUSR1"], lambda signum, frame: None))
        )
        worker.start()
        worker.join()

        assert signal.getsignal(signal.SIGUSR1) == previous
        restores[0]()
