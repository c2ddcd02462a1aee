"""
Registry of semantic action handlers. The API looks up the handler by the
action's @type and calls it; the registry itself holds no type-specific logic.

Handlers are registered once at start-up, after which the registry is frozen
and read-only, so concurrent requests can share it without locking.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable

from infisicalservice.errors import ServiceError, UnsupportedAction
from infisicalservice.semantic.models import SemanticAction

logger = logging.getLogger(__name__)

HandlerFunc = Callable[[SemanticAction], SemanticAction]


class ActionHandler(ABC):
    """Pluggable handler for one action type.

    handle() returns the (mutated) action on success and raises a
    ServiceError on failure.
    """

    action_type: str = ""

    @abstractmethod
    def handle(self, action: SemanticAction) -> SemanticAction:
        pass


class ActionRegistry:
    """Maps action type names to handler callables."""

    def __init__(self) -> None:
        self._handlers: dict[str, HandlerFunc] = {}
        self._frozen = False

    def register(self, action_type: str, handler: ActionHandler | HandlerFunc) -> None:
        """Register (or replace) the handler for action_type."""
        if self._frozen:
            raise RuntimeError("action registry is frozen; register handlers at start-up")
        if not action_type:
            raise ValueError("action_type must be a non-empty string")
        func = handler.handle if isinstance(handler, ActionHandler) else handler
        self._handlers[str(action_type)] = func
        logger.debug("Registered handler for %s", action_type)

    def must_register(self, action_type: str, handler: ActionHandler | HandlerFunc) -> None:
        """Register a handler, refusing to replace an existing one."""
        if str(action_type) in self._handlers:
            raise ValueError(f"handler for {action_type} already registered")
        self.register(action_type, handler)

    def add(self, handler: ActionHandler) -> None:
        self.must_register(handler.action_type, handler)

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, action_type: str) -> HandlerFunc | None:
        return self._handlers.get(action_type)

    def supported_types(self) -> list[str]:
        return sorted(self._handlers)

    def __contains__(self, action_type: object) -> bool:
        return action_type in self._handlers

    def handle(self, action: SemanticAction) -> SemanticAction:
        """Dispatch an action to its handler.

        A ServiceError raised by the handler leaves the action marked failed
        and is re-raised with the action attached, so the caller can return
        the failed envelope.
        """
        handler = self.get(action.type)
        if handler is None:
            raise UnsupportedAction(action.type, self.supported_types())

        try:
            return handler(action)
        except ServiceError as e:
            if not action.is_finished:
                action.fail(e.message, e.cause)
            e.action = action
            logger.warning("%s failed: %s", action.type, e)
            raise
