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
"""Cooperative shutdown: a cancellation token and the OS-signal adapter that trips it."""

from __future__ import annotations

import signal
import threading
from collections.abc import Callable, Sequence
from typing import Any

import structlog

logger = structlog.get_logger("switchyard.application")

SignalHandler = Callable[[int, Any], None]


class ShutdownToken:
    """One-shot cancellation flag shared by the loop and whoever stops it.

    Callbacks registered with :meth:`on_cancel` run once, on the thread that
    cancels; a callback registered after cancellation runs immediately.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._callbacks: list[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        if self._event.is_set():
            return
        self._event.set()
        for callback in self._callbacks:
            callback()

    def on_cancel(self, callback: Callable[[], None]) -> None:
        if self._event.is_set():
            callback()
        else:
            self._callbacks.append(callback)


def install_signal_handlers(names: Sequence[str], handler: SignalHandler) -> Callable[[], None]:
    """Route the named signals to *handler* and return a function restoring the previous handlers.

    Names the platform does not define are skipped, and nothing is installed
    outside the main thread, where Python refuses signal handlers.
    """
    if threading.current_thread() is not threading.main_thread():
        logger.warning("signal_handlers_skipped", reason="not running in the main thread")
        return lambda: None

    previous: dict[signal.Signals, Any] = {}
    for name in names:
        signum = getattr(signal, name.upper(), None)
        if not isinstance(signum, signal.Signals):
            logger.warning("signal_handlers_skipped", signal=name, reason="signal not available")
            continue
        previous[signum] = signal.signal(signum, handler)

    def restore() -> None:
        for signum, prior in previous.items():
            signal.signal(signum, prior if prior is not None else signal.SIG_DFL)

    return restore
