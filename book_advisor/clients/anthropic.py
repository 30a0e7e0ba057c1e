"""Anthropic API client with token estimation and error handling."""

import os
from dataclasses import dataclass
from typing import Any, Literal

import tiktoken
from anthropic import APIError, APIStatusError, AsyncAnthropic
from pydantic import BaseModel

from book_advisor.models.llm import ContentBlock, LLMMessage, TextBlock, ToolUseBlock
from book_advisor.utils.logging import get_logger

logger = get_logger(__name__)


class LLMProviderError(RuntimeError):
    """Raised when the LLM provider call fails or returns a non-success status."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class AnthropicTool(BaseModel):
    """Tool definition for Anthropic API."""

    name: str
    description: str
    input_schema: dict[str, Any]


@dataclass
class TokenUsage:
    """Token usage information from Anthropic API."""

    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0


@dataclass
class AnthropicResponse:
    """Structured response from Anthropic API."""

    content: list[ContentBlock]
    stop_reason: str | None
    usage: TokenUsage
    model: str

    @property
    def tool_uses(self) -> list[ToolUseBlock]:
        return [block for block in self.content if isinstance(block, ToolUseBlock)]

    @property
    def text(self) -> str:
        return "".join(block.text for block in self.content if isinstance(block, TextBlock))


@dataclass
class AnthropicConfig:
    """Configuration for Anthropic API client."""

    model: str = "claude-3-5-haiku-20241022"
    max_tokens: int = 1024
    temperature: float = 0.7
    base_url: str | None = None
    use_tokenizer: bool = True

    # Token budget for conversation truncation
    max_conversation_tokens: int = 200000
    token_headroom: int = 2000


class AnthropicClient:
    """Low-level Anthropic API client.

    Requests are never retried: a failed call surfaces as ``LLMProviderError``.
    """

    tokenizer: tiktoken.Encoding | None = None
    client: AsyncAnthropic
    config: AnthropicConfig

    def __init__(
        self,
        api_key: str | None = None,
        config: AnthropicConfig | None = None,
        client: AsyncAnthropic | None = None,
    ):
        """Initialize Anthropic client.

        Args:
            api_key: Anthropic API key (defaults to ANTHROPIC_API_KEY env var)
            config: Client configuration
            client: Preconfigured SDK client (used by tests)
        """
        self.config = config or AnthropicConfig()

        if client is None:
            anthropic_api_key = api_key or os.getenv("ANTHROPIC_API_KEY")
            if not anthropic_api_key:
                raise ValueError("ANTHROPIC_API_KEY environment variable is required")
            client = AsyncAnthropic(api_key=anthropic_api_key, base_url=self.config.base_url, max_retries=0)

        self.client = client

        if self.config.use_tokenizer:
            try:
                # Close approximation for Claude
                self.tokenizer = tiktoken.encoding_for_model("gpt-4")
            except Exception as e:
                logger.warning(f"Tokenizer unavailable, falling back to character estimate: {e}")
                self.tokenizer = None

    async def aclose(self) -> None:
        await self.client.close()

    async def create_message(
        self,
        messages: list[LLMMessage],
        system_prompt: str,
        tools: list[AnthropicTool] | None = None,
        tool_choice: Literal["auto", "none"] | None = None,
        **kwargs,
    ) -> AnthropicResponse:
        """Create a message with Claude API.

        Args:
            messages: Conversation history
            system_prompt: System prompt for Claude
            tools: Available tools for Claude
            tool_choice: ``"none"`` forbids tool use even when tools are attached
            **kwargs: Overrides for model, max_tokens or temperature

        Returns:
            Structured Anthropic response

        Raises:
            LLMProviderError: If the API call fails
        """
        request_params: dict[str, Any] = {
            "model": kwargs.get("model", self.config.model),
            "max_tokens": kwargs.get("max_tokens", self.config.max_tokens),
            "temperature": kwargs.get("temperature", self.config.temperature),
            "system": system_prompt,
            "messages": [msg.model_dump() for msg in messages],
        }
        if tools:
            request_params["tools"] = [tool.model_dump() for tool in tools]
            if tool_choice:
                request_params["tool_choice"] = {"type": tool_choice}

        logger.debug(
            f"Making Anthropic API call with model {request_params['model']}, "
            f"{len(messages)} messages, {len(tools) if tools else 0} tools, tool_choice={tool_choice}"
        )

        try:
            response = await self.client.messages.create(**request_params)
        except APIStatusError as e:
            logger.error(f"Anthropic API returned {e.status_code}: {e.message}")
            raise LLMProviderError(f"LLM provider error: {e.status_code}", status_code=e.status_code) from e
        except APIError as e:
            logger.error(f"Anthropic API request failed: {e}")
            raise LLMProviderError(f"LLM provider request failed: {e}") from e

        usage = TokenUsage()
        if getattr(response, "usage", None):
            usage = TokenUsage(
                input_tokens=response.usage.input_tokens,
                output_tokens=response.usage.output_tokens,
                total_tokens=response.usage.input_tokens + response.usage.output_tokens,
            )

        logger.debug(
            f"Response received - Stop reason: {response.stop_reason}, Content blocks: {len(response.content)}"
        )

        return AnthropicResponse(
            content=self._convert_content_blocks(response.content),
            stop_reason=response.stop_reason,
            usage=usage,
            model=response.model,
        )

    def _convert_content_blocks(self, anthropic_content: list[Any]) -> list[ContentBlock]:
        """Convert Anthropic content blocks to our ContentBlock types."""
        converted_blocks: list[ContentBlock] = []
        for block in anthropic_content:
            if hasattr(block, "model_dump"):
                block_dict = block.model_dump()
            elif hasattr(block, "__dict__"):
                block_dict = vars(block)
            else:
                block_dict = dict(block)

            block_type = block_dict.get("type")
            if block_type == "text":
                converted_blocks.append(TextBlock.model_validate(block_dict))
            elif block_type == "tool_use":
                converted_blocks.append(ToolUseBlock.model_validate(block_dict))
            else:
                logger.warning(f"Skipping unsupported content block type: {block_type}")

        return converted_blocks

    def estimate_message_tokens(self, message: str) -> int:
        """Estimate token count for a single message.

        Args:
            message: Message content

        Returns:
            Estimated token count
        """
        try:
            return len(self.tokenizer.encode(message)) if self.tokenizer else len(message) // 4
        except Exception:
            # Fallback: roughly 4 characters per token
            return len(message) // 4

    def truncate_conversation(
        self, messages: list[LLMMessage], system_prompt: str, tools: list[AnthropicTool] | None = None
    ) -> list[LLMMessage]:
        """Truncate conversation from the beginning to fit within token limits.

        The newest message is always kept, and the result always starts with a
        user message.

        Args:
            messages: Conversation messages
            system_prompt: System prompt
            tools: Available tools

        Returns:
            Truncated message list that fits within limits
        """
        if not messages:
            return messages

        available_tokens = self.config.max_conversation_tokens - self.config.token_headroom
        available_tokens -= self.estimate_message_tokens(system_prompt)

        if tools:
            tool_content = "".join(tool.name + tool.description + str(tool.input_schema) for tool in tools)
            available_tokens -= self.estimate_message_tokens(tool_content)

        truncated_messages: list[LLMMessage] = []
        current_tokens = 0

        for message in reversed(messages):
            message_tokens = self.estimate_message_tokens(message.text())

            if truncated_messages and current_tokens + message_tokens > available_tokens:
                break

            truncated_messages.insert(0, message)
            current_tokens += message_tokens

        while len(truncated_messages) > 1 and truncated_messages[0].role != "user":
            truncated_messages.pop(0)

        if len(truncated_messages) < len(messages):
            logger.warning(
                f"Truncated conversation from {len(messages)} to {len(truncated_messages)} messages "
                f"to fit within {available_tokens} token limit"
            )

        return truncated_messages
