"""State definitions for the chat turn graph."""

from typing import Literal

from pydantic import BaseModel, Field

from book_advisor.models.chat import ChatMessage, ToolCall, ToolResult
from book_advisor.models.llm import LLMMessage

# composed -> finalized, or composed -> tools_pending -> finalized
Phase = Literal["composed", "tools_pending", "finalized"]


class ChatState(BaseModel):
    """State of a single chat turn.

    A turn is stateless across requests: the client resends the whole history
    every time, so nothing here outlives the request.
    """

    turn_id: str

    # Client-supplied history and what is actually sent to the provider
    incoming: list[ChatMessage] = Field(default_factory=list)
    system_prompt: str = ""
    history: list[LLMMessage] = Field(default_factory=list)

    phase: Phase | None = None

    # Tool round
    assistant_message: LLMMessage | None = None
    tool_calls: list[ToolCall] = Field(default_factory=list)
    tool_results: list[ToolResult] = Field(default_factory=list)

    # Outcome
    content: str = ""
    tools_used: list[str] = Field(default_factory=list)

    # Token usage tracking
    total_input_tokens: int = 0
    total_output_tokens: int = 0
