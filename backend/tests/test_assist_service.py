"""Writing assistant tests with mocked LiteLLM calls."""

from datetime import date
from unittest.mock import MagicMock, patch

import pytest

from teamsync.exceptions import AssistUnavailableError, ValidationError
from teamsync.schemas.assist import AssistCommand
from teamsync.schemas.common import Category
from teamsync.schemas.schedule import ScheduleEvent
from teamsync.services.assist_service import (
    FAILURE_MESSAGE,
    NOT_CONFIGURED_MESSAGE,
    SUMMARY_HEADER,
    AssistService,
    compose,
)
from teamsync.services.context import WorkspaceContext


def _configure(mock_settings):
    mock_settings.assist_model = "gpt-4o-mini"
    mock_settings.assist_api_key = "sk-test"
    mock_settings.assist_api_base = ""
    mock_settings.assist_timeout = 30


def _completion(text):
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = text
    return response


class TestConfig:
    def test_not_configured_by_default(self):
        assert AssistService.is_configured() is False
        assert AssistService().transform("hello", AssistCommand.FIX) == NOT_CONFIGURED_MESSAGE


class TestTransform:
    @patch("litellm.completion")
    @patch("teamsync.services.assist_service.settings")
    def test_returns_model_text(self, mock_settings, mock_completion):
        _configure(mock_settings)
        mock_completion.return_value = _completion("  Fixed text.  ")

        assert AssistService().transform("fixd txt", AssistCommand.FIX) == "Fixed text."
        kwargs = mock_completion.call_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["messages"][1]["content"].endswith("fixd txt")
        assert "api_base" not in kwargs

    @patch("litellm.completion", side_effect=RuntimeError("provider down"))
    @patch("teamsync.services.assist_service.settings")
    def test_failure_returns_message(self, mock_settings, mock_completion):
        _configure(mock_settings)
        assert AssistService().transform("text", AssistCommand.SUMMARIZE) == FAILURE_MESSAGE


class TestCompose:
    def test_summarize_prepends_quote_block(self):
        merged = compose("Body", "Short", AssistCommand.SUMMARIZE)
        assert merged.startswith(SUMMARY_HEADER)
        assert merged.endswith("---\n\nBody")

    def test_fix_replaces(self):
        assert compose("Body", "Better", AssistCommand.FIX) == "Better"

    def test_expand_appends(self):
        assert compose("Body", "More", AssistCommand.EXPAND) == "Body\n\nMore"


class TestApplyToDocument:
    @pytest.mark.asyncio
    async def test_expand_updates_document(self, sql_gateway, alice):
        ctx = WorkspaceContext(sql_gateway, lambda: alice)
        doc = await ctx.workspace.create_document(Category.TEAM, content="Intro.")

        with patch("teamsync.services.assist_service.settings") as mock_settings, \
                patch("litellm.completion", return_value=_completion("Extra detail.")):
            _configure(mock_settings)
            updated = await ctx.assist.apply_to_document(doc.id, AssistCommand.EXPAND)

        assert updated.content == "Intro.\n\nExtra detail."
        await ctx.store.flush()
        [stored] = await sql_gateway.docs.list()
        assert stored.content == "Intro.\n\nExtra detail."

    @pytest.mark.asyncio
    @pytest.mark.parametrize("command", list(AssistCommand))
    async def test_unconfigured_leaves_document_untouched(self, sql_gateway, alice, command):
        ctx = WorkspaceContext(sql_gateway, lambda: alice)
        doc = await ctx.workspace.create_document(Category.TEAM, content="My precious draft")

        with pytest.raises(AssistUnavailableError) as exc_info:
            await ctx.assist.apply_to_document(doc.id, command)

        assert exc_info.value.message == NOT_CONFIGURED_MESSAGE
        assert ctx.workspace.get_document(doc.id) is doc
        await ctx.store.flush()
        [stored] = await sql_gateway.docs.list()
        assert stored.content == "My precious draft"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("command", [AssistCommand.FIX, AssistCommand.SUMMARIZE])
    async def test_provider_failure_leaves_document_untouched(self, sql_gateway, alice, command):
        ctx = WorkspaceContext(sql_gateway, lambda: alice)
        doc = await ctx.workspace.create_document(Category.TEAM, content="My precious draft")

        with patch("teamsync.services.assist_service.settings") as mock_settings, \
                patch("litellm.completion", side_effect=RuntimeError("provider down")):
            _configure(mock_settings)
            with pytest.raises(AssistUnavailableError) as exc_info:
                await ctx.assist.apply_to_document(doc.id, command)

        assert exc_info.value.message == FAILURE_MESSAGE
        assert ctx.workspace.get_document(doc.id).content == "My precious draft"
        await ctx.store.flush()

    @pytest.mark.asyncio
    async def test_empty_document_rejected(self, sql_gateway, alice):
        ctx = WorkspaceContext(sql_gateway, lambda: alice)
        doc = await ctx.workspace.create_document(Category.TEAM)
        with pytest.raises(ValidationError):
            await ctx.assist.apply_to_document(doc.id, AssistCommand.SUMMARIZE)
        await ctx.store.flush()


class TestTeamInsight:
    @patch("litellm.completion")
    @patch("teamsync.services.assist_service.settings")
    def test_prompt_lists_schedules(self, mock_settings, mock_completion):
        _configure(mock_settings)
        mock_completion.return_value = _completion("Busy week.")
        event = ScheduleEvent(
            user_id="alice", user_name="Alice", title="Offsite",
            start_date=date(2024, 1, 10), end_date=date(2024, 1, 12), description="Seoul",
        )

        assert AssistService().team_insight([event]) == "Busy week."
        prompt = mock_completion.call_args.kwargs["messages"][1]["content"]
        assert "Alice: [Meeting] Offsite (2024-01-10 ~ 2024-01-12) - Seoul" in prompt
