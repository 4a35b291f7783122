"""
Command Dispatch Module.

This module provides the CommandDispatcher through which every contract
operation reaches a drone, with its argument checks and error translation.
"""

from universaldrone.dispatch.dispatcher import CommandDispatcher
from universaldrone.dispatch.errors import translate_adapter_error

__all__ = ["CommandDispatcher", "translate_adapter_error"]
