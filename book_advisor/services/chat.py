"""Chat service running one stateless turn through the LangGraph workflow."""

from cuid2 import cuid_wrapper

from book_advisor.clients.anthropic import AnthropicClient
from book_advisor.graphs.chat import RECURSION_LIMIT, SYSTEM_PROMPT, create_chat_graph
from book_advisor.graphs.state import ChatState
from book_advisor.models.chat import ChatMessage, ChatResponse, ChatValidationError
from book_advisor.tools.registry import ToolsRegistry
from book_advisor.utils.logging import TurnLogger, get_logger

logger = get_logger(__name__)

cuid = cuid_wrapper()


class ChatService:
    """Service for handling chat turns.

    The client sends the full conversation on every request; nothing is kept
    between turns apart from what the tools persist in the reading list.
    """

    def __init__(
        self,
        llm_client: AnthropicClient,
        tools_registry: ToolsRegistry,
        max_input_chars: int = 2000,
        system_prompt: str = SYSTEM_PROMPT,
    ):
        self.max_input_chars = max_input_chars
        self.system_prompt = system_prompt
        self.graph = create_chat_graph(llm_client, tools_registry, system_prompt)

        logger.info("ChatService initialized with LangGraph")

    async def process_messages(self, messages: list[ChatMessage]) -> ChatResponse:
        """Process a conversation and return the assistant reply for its last user message.

        Args:
            messages: Full conversation history, oldest first

        Returns:
            Assistant reply and the names of the tools it requested

        Raises:
            ChatValidationError: If the conversation has no user message or the latest one is too long
            LLMProviderError: If the LLM provider call fails
        """
        self._validate_messages(messages)

        turn_id = cuid()
        log = TurnLogger(logger, turn_id)
        log.info(f"Processing chat turn with {len(messages)} messages")

        initial_state = ChatState(turn_id=turn_id, incoming=messages, system_prompt=self.system_prompt)
        result = await self.graph.ainvoke(initial_state.model_dump(), {"recursion_limit": RECURSION_LIMIT})

        log.info(
            f"Token usage - Input: {result.get('total_input_tokens', 0)}, "
            f"Output: {result.get('total_output_tokens', 0)}"
        )

        return ChatResponse(content=result.get("content", ""), tools_used=result.get("tools_used", []))

    def _validate_messages(self, messages: list[ChatMessage]) -> None:
        """Validate the latest user message.

        Raises:
            ChatValidationError: If there is no non-empty user message or it exceeds the character limit
        """
        latest = next((m for m in reversed(messages) if m.role == "user" and m.content.strip()), None)
        if latest is None:
            raise ChatValidationError("The conversation must contain at least one user message.")

        if len(latest.content) > self.max_input_chars:
            raise ChatValidationError(
                f"Your message is too long. Please keep messages under {self.max_input_chars} characters."
            )
