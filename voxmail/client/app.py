"""
VoxMail client application.

Wires the session controller, email store, navigator and speech adapters
together and mounts one page controller per route. Private routes need a
token; without one the app goes to /login. A sign-out (explicit or a 401
from any call) also lands on /login.

Usage:
    speech = ConsoleSpeech()
    app = VoxmailApp("http://127.0.0.1:5000", speech_input=speech, speech_output=speech)
    page = await app.start()
    page.voice.activate()
    await speech.feed("compose")
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from voxmail.client.api import DEFAULT_TIMEOUT
from voxmail.client.auth import AuthController, TokenStore
from voxmail.client.display import display_variables
from voxmail.client.email_store import EmailStore
from voxmail.client.navigation import Navigator, match_route
from voxmail.client.pages import PAGE_CLASSES, Page, PageContext
from voxmail.config import get_api_url, get_section, get_token_file, load_config
from voxmail.voice.models import PUBLIC_ROUTES, Route
from voxmail.voice.recognition.base import SpeechInput, SpeechOutput
from voxmail.voice.recognition.unavailable import UnavailableSpeech

logger = logging.getLogger(__name__)


class VoxmailApp:
    """One running client: a session, a store and the mounted page."""

    def __init__(
        self,
        base_url: str,
        *,
        speech_input: SpeechInput | None = None,
        speech_output: SpeechOutput | None = None,
        token_store: TokenStore | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        redirect_delay: float = 2.0,
        follow_navigation: bool = True,
    ):
        unavailable = UnavailableSpeech()
        self.auth = AuthController(
            base_url, token_store=token_store, transport=transport, timeout=timeout
        )
        self.store = EmailStore(self.auth.api)
        self.navigator = Navigator()
        self.context = PageContext(
            auth=self.auth,
            store=self.store,
            navigator=self.navigator,
            speech_input=speech_input or unavailable,
            speech_output=speech_output or unavailable,
            redirect_delay=redirect_delay,
        )
        self.follow_navigation = follow_navigation
        self.page: Page | None = None

        self.navigator.add_listener(self._on_route)
        self.auth.add_listener(self.store.on_signed_out)
        self.auth.add_listener(self._on_signed_out)

    @classmethod
    def from_config(cls, config: dict[str, Any] | None = None, **kwargs: Any) -> VoxmailApp:
        """Build from args/voxmail.yaml; keyword arguments win."""
        if config is None:
            config = load_config()
        client = get_section("client", config)
        voice = get_section("voice", config)
        compose = get_section("compose", config)

        kwargs.setdefault("token_store", TokenStore(get_token_file(config)))
        kwargs.setdefault("timeout", float(client.get("request_timeout", DEFAULT_TIMEOUT)))
        kwargs.setdefault("redirect_delay", float(compose.get("redirect_delay_seconds", 2.0)))
        kwargs.setdefault("follow_navigation", bool(voice.get("follow_navigation", True)))
        return cls(get_api_url(config), **kwargs)

    @property
    def route(self) -> str:
        return self.navigator.route

    @property
    def display(self) -> dict[str, str]:
        """CSS variables for the signed-in user's saved preferences."""
        return display_variables(self.auth.preferences)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def start(self, route: str = Route.INBOX.value) -> Page | None:
        """Restore a persisted session, then open ``route``."""
        restored = await self.auth.restore()
        logger.info(f"Client started ({'session restored' if restored else 'signed out'})")
        await self.navigator.navigate(route)
        return self.page

    async def aclose(self) -> None:
        if self.page is not None:
            self.page.unmount()
            self.page = None
        await self.auth.aclose()

    async def __aenter__(self) -> VoxmailApp:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    # =========================================================================
    # Routing
    # =========================================================================

    async def _on_route(self, route: str, state: dict[str, Any]) -> None:
        match = match_route(route)
        if match is None:
            logger.info(f"Unknown route {route}, going to the inbox")
            await self.navigator.navigate(Route.INBOX.value)
            return

        path = route.split("?", 1)[0]
        if path not in PUBLIC_ROUTES and not self.auth.authenticated:
            await self.navigator.navigate(Route.LOGIN.value)
            return

        previous = self.page
        keep_listening = (
            self.follow_navigation and previous is not None and previous.voice.listening
        )
        if previous is not None:
            previous.unmount()

        page = PAGE_CLASSES[match.page](self.context, route, match.params)
        self.page = page
        if keep_listening:
            page.voice.activate()
        await page.mount()

    async def _on_signed_out(self, reason: str) -> None:
        logger.info(f"Signed out ({reason})")
        if self.navigator.route not in PUBLIC_ROUTES:
            await self.navigator.navigate(Route.LOGIN.value)


__all__ = ["VoxmailApp"]
