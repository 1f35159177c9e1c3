"""Writing assistant backed by an LLM via LiteLLM.

``transform`` never raises: an unconfigured or failing provider yields a
generic message string. ``apply_to_document`` raises
``AssistUnavailableError`` instead, so the message never overwrites content.
"""

import asyncio
import logging
from typing import List, Optional

from ..core.config import settings
from ..exceptions import AssistUnavailableError, ValidationError
from ..schemas.assist import AssistCommand
from ..schemas.document import Document
from ..schemas.schedule import ScheduleEvent
from .workspace_service import WorkspaceService

logger = logging.getLogger(__name__)

NOT_CONFIGURED_MESSAGE = "The writing assistant is not configured. Set ASSIST_MODEL and ASSIST_API_KEY."
FAILURE_MESSAGE = "The writing assistant could not process this text. Please try again later."
EMPTY_RESPONSE_MESSAGE = "The writing assistant returned no text."
INSIGHT_FAILURE_MESSAGE = "Unable to analyse the team schedule right now."

SUMMARY_HEADER = "> 🤖 **AI summary**"

SYSTEM_PROMPT = (
    "You are a professional writing assistant. "
    "Respond only with the modified text, keeping a clean and professional tone."
)

INSIGHT_SYSTEM_PROMPT = (
    "You are a team schedule manager. Analyse the calendar events and "
    "give a short, professional briefing."
)

_COMMAND_PROMPTS = {
    AssistCommand.SUMMARIZE: "Summarize the following text in three lines:\n\n",
    AssistCommand.FIX: (
        "Correct the spelling of the following text and polish it so it reads "
        "naturally and professionally:\n\n"
    ),
    AssistCommand.EXPAND: "Expand the following text with more detail, building on what it says:\n\n",
}


def compose(content: str, result: str, command: AssistCommand) -> str:
    """Merge an assistant result into the existing document content."""
    if command == AssistCommand.SUMMARIZE:
        return f"{SUMMARY_HEADER}\n{result}\n\n---\n\n{content}"
    if command == AssistCommand.FIX:
        return result
    return f"{content}\n\n{result}"


def _schedule_line(event: ScheduleEvent) -> str:
    return (
        f"{event.user_name}: [{event.type.value}] {event.title} "
        f"({event.start_date.isoformat()} ~ {event.end_date.isoformat()}) - {event.description}"
    )


class AssistService:
    """Text transforms and schedule briefings.

    Public methods:
        is_configured      -- model and key present
        transform          -- summarize / fix / expand a piece of text
        apply_to_document  -- transform a document's content and save it
        team_insight       -- short briefing over upcoming schedules
    """

    def __init__(self, workspace: Optional[WorkspaceService] = None):
        self.workspace = workspace

    @staticmethod
    def is_configured() -> bool:
        return bool(settings.assist_model and settings.assist_api_key)

    def _complete(self, system_prompt: str, user_prompt: str) -> Optional[str]:
        """Run one completion. Returns None on any provider failure."""
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]
        try:
            import litellm

            kwargs: dict = {
                "model": settings.assist_model,
                "api_key": settings.assist_api_key,
                "messages": messages,
                "max_tokens": 1024,
                "temperature": 0.4,
                "timeout": settings.assist_timeout,
            }
            if settings.assist_api_base:
                kwargs["api_base"] = settings.assist_api_base

            response = litellm.completion(**kwargs)
            return response.choices[0].message.content
        except Exception:
            logger.exception("Assist completion failed", extra={"model": settings.assist_model})
            return None

    def _transform_or_raise(self, text: str, command: AssistCommand) -> str:
        if not self.is_configured():
            raise AssistUnavailableError(NOT_CONFIGURED_MESSAGE)
        command = AssistCommand(command)
        answer = self._complete(SYSTEM_PROMPT, f"{_COMMAND_PROMPTS[command]}{text}")
        if answer is None:
            raise AssistUnavailableError(FAILURE_MESSAGE)
        answer = answer.strip()
        if not answer:
            raise AssistUnavailableError(EMPTY_RESPONSE_MESSAGE)
        return answer

    def transform(self, text: str, command: AssistCommand) -> str:
        try:
            return self._transform_or_raise(text, command)
        except AssistUnavailableError as e:
            return e.message

    async def apply_to_document(self, doc_id: str, command: AssistCommand) -> Document:
        """Transform a document's content and write the merged result back.

        The completion runs in a worker thread; the document is re-read
        afterwards so edits made meanwhile are not lost. When no text comes
        back the document is left as it was and ``AssistUnavailableError``
        is raised.
        """
        if self.workspace is None:
            raise ValidationError("No workspace is attached to the assistant")
        command = AssistCommand(command)
        doc = self.workspace.get_document(doc_id)
        if not doc.content.strip():
            raise ValidationError("The assistant only works on documents with content", field="content")

        result = await asyncio.to_thread(self._transform_or_raise, doc.content, command)

        current = self.workspace.get_document(doc_id)
        logger.info("Assist applied", extra={"doc_id": doc_id, "command": command.value})
        return self.workspace.update_document(doc_id, content=compose(current.content, result, command))

    def team_insight(self, schedules: List[ScheduleEvent]) -> str:
        if not self.is_configured():
            return NOT_CONFIGURED_MESSAGE
        if not schedules:
            return "No upcoming schedules to analyse."
        schedule_data = "\n".join(_schedule_line(s) for s in schedules)
        prompt = (
            "These are the team's upcoming schedules. In three lines or fewer, brief "
            "the team on the main flow of the schedule, who is available, and anything "
            f"that needs to be shared:\n\n{schedule_data}"
        )
        answer = self._complete(INSIGHT_SYSTEM_PROMPT, prompt)
        if not answer:
            return INSIGHT_FAILURE_MESSAGE
        return answer.strip()
