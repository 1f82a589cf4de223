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
"""Application — the consume, dispatch and disposition loop."""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum, auto
from typing import Any

import structlog

from switchyard.application.shutdown import ShutdownToken, install_signal_handlers
from switchyard.application.sources import ConsumerSource, MessageSource, SubscriberSource, as_source
from switchyard.container.container import DependencyResolver
from switchyard.core.config import Config
from switchyard.core.properties import ApplicationProperties
from switchyard.kernel.exceptions import ConfigurationException, RoutingException
from switchyard.logging.port import LoggingPort
from switchyard.logging.structlog_adapter import StructlogAdapter
from switchyard.messaging.ports.outbound import ConsumerPort, PublisherPort, SubscriberPort
from switchyard.messaging.types import Message, Response, split_topics
from switchyard.middleware.chain import Middleware, NextHandler, compile_pipeline
from switchyard.routing.router import Router, RouterPort
from switchyard.routing.types import CallableHandler, to_handler


class ApplicationState(Enum):
    IDLE = auto()
    LISTENING = auto()
    DRAINING = auto()
    STOPPED = auto()


class Application:
    """Routes messages from one source to handlers and settles each message.

    The source is classified once, at construction:

    - a consumer (pull) is polled for a single topic; every message goes
      through the middleware pipeline and is acked, nacked or deadlettered
      according to the handler's :class:`Response`;
    - a subscriber (push) receives the pipeline as its callback and drives
      delivery from its own blocking ``loop()``.

    ``listen()`` runs until :meth:`shutdown` is called, either directly, by a
    handler, or by one of the configured OS signals. Shutdown is cooperative:
    the batch being disposed of is always finished.

    Args:
        source: A consumer or subscriber adapter, or an explicit source variant.
        router: Resolves each message to a handler reference.
        deadletter: Publisher receiving messages answered with ``DEADLETTER``.
        middleware: Outermost first; names are resolved through *resolver*.
        resolver: Builds named handlers and middleware.
        signals: Signal names triggering shutdown; defaults to ``properties.signals``.
        logger: structlog-style logger; defaults to ``switchyard.application``.
        properties: Listening defaults.
    """

    def __init__(
        self,
        source: ConsumerPort | SubscriberPort | MessageSource,
        router: RouterPort,
        *,
        deadletter: PublisherPort | None = None,
        middleware: Sequence[Middleware | str] = (),
        resolver: DependencyResolver | None = None,
        signals: Sequence[str] | None = None,
        logger: Any = None,
        properties: ApplicationProperties | None = None,
    ) -> None:
        self._source: MessageSource = as_source(source)
        self._router = router
        self._deadletter = deadletter
        self._resolver = resolver
        self._properties = properties or ApplicationProperties()
        self._signals = list(signals) if signals is not None else list(self._properties.signals)
        self._logger = logger or structlog.get_logger("switchyard.application")
        self._pipeline: NextHandler = compile_pipeline(middleware, self.dispatch, resolver)
        self._instances: dict[str, object] = {}
        self._state = ApplicationState.IDLE
        self._token: ShutdownToken | None = None

    @classmethod
    def from_config(
        cls,
        config: Config,
        source: ConsumerPort | SubscriberPort | MessageSource,
        router: RouterPort,
        *,
        logging_port: LoggingPort | None = None,
        **kwargs: Any,
    ) -> Application:
        """Build an application from a loaded :class:`Config`.

        Logging is configured from ``switchyard.logging`` through *logging_port*
        (a :class:`StructlogAdapter` unless given), and the listening defaults
        are bound from ``switchyard.application``. Remaining keyword arguments
        go to the constructor; an explicit ``logger`` wins over the port's.
        """
        logging_port = logging_port or StructlogAdapter()
        logging_port.configure(config)
        kwargs.setdefault("logger", logging_port.get_logger("switchyard.application"))
        return cls(source, router, properties=config.bind(ApplicationProperties), **kwargs)

    @property
    def state(self) -> ApplicationState:
        return self._state

    @property
    def source(self) -> MessageSource:
        return self._source

    def listen(
        self,
        topics: str | Sequence[str],
        *,
        max_messages: int | None = None,
        nack_timeout: int | None = None,
        polling_timeout: int | None = None,
        token: ShutdownToken | None = None,
    ) -> None:
        """Listen on *topics* until shut down.

        Pull sources accept exactly one topic. Adapter errors propagate to
        the caller unchanged.
        """
        topic_list = split_topics(topics)
        if not topic_list:
            raise ConfigurationException("At least one topic is required to listen.")
        if isinstance(self._source, ConsumerSource) and len(topic_list) > 1:
            raise ConfigurationException(
                "A consumer can only listen on a single topic.",
                context={"topics": topic_list},
            )

        max_messages = max_messages if max_messages is not None else self._properties.max_messages
        nack_timeout = nack_timeout if nack_timeout is not None else self._properties.nack_timeout
        polling_timeout = polling_timeout if polling_timeout is not None else self._properties.polling_timeout

        token = token or ShutdownToken()
        self._token = token
        self._state = ApplicationState.LISTENING
        token.on_cancel(self._begin_draining)
        restore_signals = install_signal_handlers(self._signals, self.shutdown)

        self._logger.info(
            "listen_started",
            source=type(self._source).__name__,
            topics=topic_list,
            max_messages=max_messages,
            nack_timeout=nack_timeout,
            polling_timeout=polling_timeout,
        )

        try:
            if isinstance(self._source, SubscriberSource):
                self._listen_push(self._source.subscriber, token, topic_list, polling_timeout)
            else:
                self._listen_pull(
                    self._source.consumer, token, topic_list[0], max_messages, nack_timeout, polling_timeout
                )
        finally:
            restore_signals()
            self._state = ApplicationState.STOPPED
            self._token = None
            self._logger.info("listen_stopped", topics=topic_list)

    def _listen_pull(
        self,
        consumer: ConsumerPort,
        token: ShutdownToken,
        topic: str,
        max_messages: int,
        nack_timeout: int,
        polling_timeout: int,
    ) -> None:
        options = {"timeout": polling_timeout}

        while not token.cancelled:
            messages = consumer.consume(topic, max_messages, options)

            for message in messages:
                self._logger.info("message_dispatching", topic=message.topic)
                response = self._pipeline(message)
                self._dispose(consumer, message, response, nack_timeout)

    def _dispose(
        self,
        consumer: ConsumerPort,
        message: Message,
        response: Response | None,
        nack_timeout: int,
    ) -> None:
        disposition = response if isinstance(response, Response) else Response.ACK

        if disposition is Response.NACK:
            consumer.nack(message, nack_timeout)
        elif disposition is Response.DEADLETTER:
            if self._deadletter is None:
                consumer.nack(message, nack_timeout)
                raise RoutingException(
                    "Cannot route message to deadletter as no deadletter publisher was given.",
                    context={"topic": message.topic},
                )
            self._deadletter.publish(message)
            consumer.ack(message)
        else:
            consumer.ack(message)

        self._logger.debug("message_disposed", topic=message.topic, response=disposition.value)

    def _listen_push(
        self,
        subscriber: SubscriberPort,
        token: ShutdownToken,
        topics: list[str],
        polling_timeout: int,
    ) -> None:
        subscriber.subscribe(topics, self._on_pushed)
        token.on_cancel(subscriber.shutdown)
        # loop() resets the subscriber's own running flag.
        if token.cancelled:
            return
        subscriber.loop({"timeout": polling_timeout})

    def _on_pushed(self, message: Message) -> Response | None:
        self._logger.info("message_dispatching", topic=message.topic)
        response = self._pipeline(message)

        if response is Response.DEADLETTER:
            if self._deadletter is None:
                raise RoutingException(
                    "Cannot route message to deadletter as no deadletter publisher was given.",
                    context={"topic": message.topic},
                )
            self._deadletter.publish(message)
            return Response.ACK

        return response

    def dispatch(self, message: Message) -> Response | None:
        """Resolve and invoke the handler for *message*.

        A message no route claims is answered with ``DEADLETTER``.
        """
        reference = self._router.resolve(message)

        if reference is None:
            self._logger.warning(
                "handler_not_resolved",
                topic=message.topic,
                attributes=dict(message.attributes),
                headers=dict(message.headers),
            )
            return Response.DEADLETTER

        handler = to_handler(reference)
        if isinstance(handler, CallableHandler):
            return handler.func(message)

        instance = self._handler_instance(handler.class_name)
        method = getattr(instance, handler.method, None)
        if not callable(method):
            raise RoutingException(
                f"Handler {handler} does not exist or is not callable.",
                context={"handler": str(handler)},
            )
        return method(message)

    def _handler_instance(self, class_name: str) -> object:
        if class_name in self._instances:
            return self._instances[class_name]

        if self._resolver is not None and self._resolver.contains(class_name):
            try:
                instance = self._resolver.resolve_by_name(class_name)
            except Exception as exc:
                raise RoutingException(
                    f"Handler class '{class_name}' could not be built.",
                    context={"handler": class_name},
                ) from exc
        else:
            handler_types = self._router.handler_types if isinstance(self._router, Router) else {}
            if class_name not in handler_types:
                raise RoutingException(
                    f"Handler class '{class_name}' is not known to the router or the resolver.",
                    context={"handler": class_name},
                )
            target = handler_types[class_name]
            instance = target() if isinstance(target, type) else target

        self._instances[class_name] = instance
        return instance

    def _begin_draining(self) -> None:
        if self._state is ApplicationState.LISTENING:
            self._state = ApplicationState.DRAINING

    def shutdown(self, signum: int | None = None, frame: Any = None) -> None:
        """Stop listening after the current message or batch; a no-op unless listening."""
        if self._state is not ApplicationState.LISTENING or self._token is None:
            return

        self._logger.info("shutdown_requested", signal=signum)
        self._token.cancel()
