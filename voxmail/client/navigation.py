"""
Client-side navigation.

The Navigator holds the current route plus the state handed to it (the
compose page's reply/forward prefill) and tells listeners about every
change. match_route() maps a route to the page that renders it.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from voxmail.models import Folder
from voxmail.voice.models import PageName, Route

logger = logging.getLogger(__name__)

# Listener: async function(route, state)
RouteListener = Callable[[str, dict[str, Any]], Awaitable[None]]

_EMAIL_ROUTE = re.compile(r"^/email/(?P<email_id>[^/]+)$")

FOLDER_ROUTES: dict[str, Folder] = {
    Route.INBOX.value: Folder.INBOX,
    Route.STARRED.value: Folder.STARRED,
    Route.SENT.value: Folder.SENT,
}

PAGE_ROUTES: dict[str, PageName] = {
    Route.COMPOSE.value: PageName.COMPOSE,
    Route.SETTINGS.value: PageName.SETTINGS,
    Route.LOGIN.value: PageName.LOGIN,
    Route.REGISTER.value: PageName.REGISTER,
}


@dataclass(frozen=True)
class RouteMatch:
    """Which page renders a route, with its parameters."""

    page: PageName
    params: dict[str, Any] = field(default_factory=dict)


def match_route(route: str) -> RouteMatch | None:
    path = route.split("?", 1)[0] or "/"
    if path != "/":
        path = path.rstrip("/")
    if path in FOLDER_ROUTES:
        return RouteMatch(PageName.INBOX, {"folder": FOLDER_ROUTES[path]})
    if path in PAGE_ROUTES:
        return RouteMatch(PAGE_ROUTES[path])
    email = _EMAIL_ROUTE.match(path)
    if email:
        return RouteMatch(PageName.EMAIL_VIEW, {"email_id": email.group("email_id")})
    return None


class Navigator:
    """Current route, navigation state and history."""

    def __init__(self, initial: str = Route.INBOX.value):
        self.route = initial
        self.state: dict[str, Any] = {}
        self.history: list[str] = [initial]
        self._listeners: list[RouteListener] = []

    def add_listener(self, listener: RouteListener) -> None:
        self._listeners.append(listener)

    async def navigate(self, route: str, state: dict[str, Any] | None = None) -> None:
        """Go to ``route``. ``state`` is visible to the next page only."""
        logger.debug(f"Navigate {self.route} → {route}")
        self.route = route
        self.state = dict(state or {})
        self.history.append(route)
        for listener in list(self._listeners):
            await listener(route, self.state)

    def take_state(self) -> dict[str, Any]:
        """Read and clear the navigation state."""
        state, self.state = self.state, {}
        return state
