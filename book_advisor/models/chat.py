"""Chat API request/response models."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ChatMessage(BaseModel):
    """A message in the client-held conversation history."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    role: Literal["user", "assistant", "system", "tool"]
    content: str = ""
    tool_call_id: str | None = None


class ChatRequest(BaseModel):
    """Request model for the chat endpoint."""

    messages: list[ChatMessage] = Field(..., min_length=1)


class ChatResponse(BaseModel):
    """Response model for the chat endpoint."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    content: str
    tools_used: list[str] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """Error payload returned by the API."""

    error: str
    details: list[str] | None = None


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str
    timestamp: datetime
    version: str


class ToolCall(BaseModel):
    """A tool invocation requested by the LLM."""

    id: str
    name: str
    arguments: dict = Field(default_factory=dict)


class ToolResult(BaseModel):
    """Output of a tool invocation, serialized as JSON text."""

    tool_call_id: str
    content: str
    is_error: bool = False


class ChatValidationError(ValueError):
    """Raised when a conversation cannot be answered as sent, e.g. no user message."""
