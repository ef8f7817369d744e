"""Tests for routing intents to page handlers."""

import pytest

from voxmail.client.errors import NetworkFailure
from voxmail.voice.models import CommandResult, Intent, IntentType
from voxmail.voice.parser.command_router import GENERIC_FAILURE, IntentRouter


@pytest.fixture
def router() -> IntentRouter:
    return IntentRouter()


class TestIntentRouter:
    """Handler lookup and failure containment."""

    @pytest.mark.asyncio
    async def test_routes_by_type(self, router):
        async def on_submit(intent):
            return CommandResult(success=True, message="Sent")

        router.register(IntentType.SUBMIT, on_submit)
        result = await router.route(Intent.submit())
        assert result.success
        assert result.message == "Sent"
        assert result.intent == IntentType.SUBMIT

    @pytest.mark.asyncio
    async def test_named_handler_wins(self, router):
        seen = []

        async def generic(intent):
            seen.append("generic")

        async def reply(intent):
            seen.append("reply")

        router.register(IntentType.ACTION, generic)
        router.register(IntentType.ACTION, reply, name="reply")

        await router.route(Intent.action("reply"))
        await router.route(Intent.action("forward"))
        assert seen == ["reply", "generic"]

    @pytest.mark.asyncio
    async def test_none_intent(self, router):
        result = await router.route(Intent.none())
        assert not result.success
        assert result.error == "no_intent"

    @pytest.mark.asyncio
    async def test_unhandled(self, router):
        result = await router.route(Intent.action("label", "work"))
        assert not result.success
        assert result.error == "no_handler"
        assert not router.handles(Intent.action("label"))

    @pytest.mark.asyncio
    async def test_handler_without_result(self, router):
        async def quiet(intent):
            return None

        router.register(IntentType.SUBMIT, quiet)
        result = await router.route(Intent.submit())
        assert result.success
        assert result.message is None

    @pytest.mark.asyncio
    async def test_client_error_becomes_message(self, router):
        async def failing(intent):
            raise NetworkFailure("Failed to star email", status_code=500)

        router.register(IntentType.ACTION, failing, name="star")
        result = await router.route(Intent.action("star", "on"))
        assert not result.success
        assert result.message == "Failed to star email"
        assert result.error == NetworkFailure.code

    @pytest.mark.asyncio
    async def test_unexpected_error_is_contained(self, router):
        async def broken(intent):
            raise RuntimeError("boom")

        router.register(IntentType.SUBMIT, broken)
        result = await router.route(Intent.submit())
        assert not result.success
        assert result.message == GENERIC_FAILURE
