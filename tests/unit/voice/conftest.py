"""Fixtures for voice layer tests."""

import pytest

from voxmail.voice.models import CommandResult, FocusContext, Intent, PageName
from voxmail.voice.parser.command_tables import build_table


class FakeHost:
    """Page stand-in that records every intent it is handed."""

    deactivation_message = "Voice commands deactivated"

    def __init__(self, page: PageName = PageName.COMPOSE, reply: str | None = "Done"):
        self.page = page
        self.reply = reply
        self.intents: list[Intent] = []

    @property
    def command_table(self):
        return build_table(self.page)

    def activation_message(self, focus: FocusContext) -> str:
        return f"Listening on {focus.value}"

    def focus_announcement(self, target: FocusContext) -> str:
        return f"Now on {target.value}"

    async def handle_intent(self, intent: Intent):
        self.intents.append(intent)
        if self.reply is None:
            return None
        return CommandResult(success=True, message=self.reply)


@pytest.fixture
def host_factory() -> type[FakeHost]:
    """The FakeHost class, for tests that need a custom host."""
    return FakeHost


@pytest.fixture
def host() -> FakeHost:
    """Compose page host that answers every intent with "Done"."""
    return FakeHost()
