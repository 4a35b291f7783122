"""
Adapter Registry.

This module maps adapter names to adapter classes, so a session can be
opened by name (``connect("sim")``). Adapter modules register themselves
on import; third-party drone families call ``ADAPTERS.register`` the same
way.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from universaldrone.adapters.base import BaseAdapter

logger = logging.getLogger(__name__)


class AdapterRegistry:
    """Simple registry for mapping adapter names to classes."""

    def __init__(self) -> None:
        self._adapters: dict[str, type[BaseAdapter]] = {}

    def register(self, adapter: type[BaseAdapter]) -> type[BaseAdapter]:
        """
        Register an adapter class under its ``adapter_name``.

        Returns the class, so this can be used as a decorator.
        """
        identifier = adapter.adapter_name.lower()
        logger.debug("Registering adapter '%s'", identifier)
        self._adapters[identifier] = adapter
        return adapter

    def available_adapters(self) -> Iterable[str]:
        """Return the registered adapter names, sorted."""
        return sorted(self._adapters)

    def create(self, identifier: str, **options: Any) -> BaseAdapter:
        """
        Instantiate the adapter registered as ``identifier``.

        Args:
            identifier: Adapter name (case-insensitive)
            **options: Keyword arguments of the adapter's constructor

        Raises:
            KeyError: If no adapter has that name
        """
        adapter_cls = self._adapters.get(identifier.lower())
        if adapter_cls is None:
            raise KeyError(f"Unknown drone adapter '{identifier}'")
        logger.info("Creating adapter '%s'", identifier)
        return adapter_cls(**options)


ADAPTERS = AdapterRegistry()
