"""
Observer Pattern Implementation.

This module provides the HasObservers base class used by a drone session to
report flight state, movement state and telemetry changes. Notifications may
arrive from the command worker thread or from adapter threads, so the
listener table is guarded by a lock and callbacks run on a copy of it.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable

ObserverCallback = Callable[["HasObservers", str, Any], None]

WILDCARD = "*"


class HasObservers:
    """
    Mixin giving a session named, observable attributes.

    :py:class:`~universaldrone.dispatch.dispatcher.CommandDispatcher` reports
    ``flight_state``, ``movement_state`` and ``telemetry``.

    Listeners are registered explicitly or through the decorator:

        >>> drone.add_attribute_listener('flight_state', callback)
        >>> @drone.on_attribute(['flight_state', 'movement_state'])
        ... def state_callback(session, attr_name, value):
        ...     print(f"{attr_name} -> {value}")
    """

    def __init__(self) -> None:
        self._observer_logger = logging.getLogger(__name__)
        self._observer_lock = threading.Lock()
        self._attribute_listeners: dict[str, list[ObserverCallback]] = {}
        self._last_values: dict[str, Any] = {}

    def add_attribute_listener(self, attr_name: str, observer: ObserverCallback) -> None:
        """
        Register ``observer(session, attr_name, value)`` for ``attr_name``.

        Use ``'*'`` to receive every attribute. Adding the same callback
        twice for one attribute has no effect.
        """
        with self._observer_lock:
            listeners = self._attribute_listeners.setdefault(attr_name, [])
            if observer not in listeners:
                listeners.append(observer)

    def remove_attribute_listener(self, attr_name: str, observer: ObserverCallback) -> None:
        """
        Remove a listener added with :py:meth:`add_attribute_listener`.

        Raises:
            ValueError: If the callback is not registered for ``attr_name``.
        """
        with self._observer_lock:
            listeners = self._attribute_listeners.get(attr_name, [])
            listeners.remove(observer)
            if not listeners:
                self._attribute_listeners.pop(attr_name, None)

    def notify_attribute_listeners(
        self,
        attr_name: str,
        value: Any,
        cache: bool = False,
    ) -> None:
        """
        Deliver ``value`` to the listeners of ``attr_name`` and wildcard listeners.

        Args:
            attr_name: The attribute that changed.
            value: Its new value.
            cache: Only notify when ``value`` differs from the last one
                delivered. Used for state attributes.
        """
        with self._observer_lock:
            if cache:
                if attr_name in self._last_values and self._last_values[attr_name] == value:
                    return
                self._last_values[attr_name] = value
            observers = list(self._attribute_listeners.get(attr_name, ()))
            observers.extend(self._attribute_listeners.get(WILDCARD, ()))

        for fn in observers:
            try:
                fn(self, attr_name, value)
            except Exception:
                self._observer_logger.exception(
                    "Exception in attribute handler for %s", attr_name
                )

    def on_attribute(self, name: str | list[str]) -> Callable[[ObserverCallback], ObserverCallback]:
        """
        Decorator form of :py:meth:`add_attribute_listener`.

        Accepts one attribute name or a list of names. The decorated function
        is returned unchanged so it can later be passed to
        :py:meth:`remove_attribute_listener`.
        """
        names = name if isinstance(name, list) else [name]

        def decorator(fn: ObserverCallback) -> ObserverCallback:
            for attr_name in names:
                self.add_attribute_listener(attr_name, fn)
            return fn

        return decorator
