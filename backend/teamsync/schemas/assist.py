"""Writing assistant schemas."""

from enum import Enum

from pydantic import BaseModel


class AssistCommand(str, Enum):
    SUMMARIZE = "summarize"
    FIX = "fix"
    EXPAND = "expand"


class AssistRequest(BaseModel):
    text: str
    command: AssistCommand


class AssistResponse(BaseModel):
    result: str
    model: str
