"""Route interpreted intents to page handlers.

Handlers are registered per intent type, optionally narrowed to one
action or toggle name. Handler failures never escape: client errors
become their message, anything else a generic spoken apology.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

from voxmail.client.errors import VoxmailError
from voxmail.voice.models import CommandResult, Intent, IntentType

logger = logging.getLogger(__name__)

# Handler type: async function(intent) -> CommandResult (None = nothing to say)
HandlerFn = Callable[[Intent], Awaitable["CommandResult | None"]]

GENERIC_FAILURE = "Something went wrong. Try again?"


class IntentRouter:
    """Routes intents to registered handlers."""

    def __init__(self):
        self._handlers: dict[tuple[IntentType, str | None], HandlerFn] = {}

    def register(self, intent: IntentType, handler: HandlerFn, name: str | None = None) -> None:
        """Register a handler for an intent type (and optional action/toggle name)."""
        self._handlers[(intent, name)] = handler

    def handles(self, intent: Intent) -> bool:
        return self._find(intent) is not None

    def _find(self, intent: Intent) -> HandlerFn | None:
        if intent.name is not None:
            handler = self._handlers.get((intent.type, intent.name))
            if handler is not None:
                return handler
        return self._handlers.get((intent.type, None))

    async def route(self, intent: Intent) -> CommandResult:
        """Route an intent to its handler."""
        if intent.type == IntentType.NONE:
            return CommandResult(success=False, intent=IntentType.NONE, error="no_intent")

        handler = self._find(intent)
        if handler is None:
            logger.debug(f"No handler for {intent.type.value} ({intent.name})")
            return CommandResult(success=False, intent=intent.type, error="no_handler")

        try:
            result = await handler(intent)
        except VoxmailError as e:
            logger.info(f"Voice command failed: {e}")
            return CommandResult(
                success=False,
                message=str(e),
                intent=intent.type,
                error=e.code,
            )
        except Exception as e:
            logger.exception(f"Voice command handler failed: {e}")
            return CommandResult(
                success=False,
                message=GENERIC_FAILURE,
                intent=intent.type,
                error=str(e),
            )

        if result is None:
            return CommandResult(success=True, intent=intent.type)
        result.intent = intent.type
        return result
