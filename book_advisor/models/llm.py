"""LLM-related data models and types (provider-agnostic)."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict


class TextBlock(BaseModel):
    """Text content block."""

    model_config = ConfigDict(extra="ignore")

    type: Literal["text"] = "text"
    text: str


class ToolUseBlock(BaseModel):
    """Tool use content block."""

    model_config = ConfigDict(extra="ignore")

    type: Literal["tool_use"] = "tool_use"
    id: str
    name: str
    input: dict[str, Any]


class ToolResultBlock(BaseModel):
    """Tool result content block."""

    model_config = ConfigDict(extra="ignore")

    type: Literal["tool_result"] = "tool_result"
    tool_use_id: str
    content: str
    is_error: bool = False


ContentBlock = TextBlock | ToolUseBlock | ToolResultBlock


class LLMMessage(BaseModel):
    """A message for LLM conversation."""

    role: Literal["user", "assistant"]
    content: str | list[ContentBlock]

    def text(self) -> str:
        """Return the concatenated text of this message."""
        if isinstance(self.content, str):
            return self.content
        return "".join(block.text for block in self.content if isinstance(block, TextBlock))

