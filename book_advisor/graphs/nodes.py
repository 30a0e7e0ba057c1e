"""Node implementations for the chat turn graph."""

import json
from typing import Any

from book_advisor.clients.anthropic import AnthropicClient, AnthropicResponse
from book_advisor.graphs.state import ChatState
from book_advisor.models.chat import ChatMessage, ChatValidationError, ToolCall, ToolResult
from book_advisor.models.llm import LLMMessage, ToolResultBlock
from book_advisor.tools.registry import ToolsRegistry
from book_advisor.utils.logging import TurnLogger, get_logger

logger = get_logger(__name__)


def compose_history(messages: list[ChatMessage]) -> list[LLMMessage]:
    """Convert client history into provider messages.

    Only non-empty user and assistant messages are kept, and the result starts
    and ends with a user message. A trailing assistant message would be taken
    by the provider as a prefill of the reply, so it is dropped.
    """
    history: list[LLMMessage] = []
    for message in messages:
        content = (message.content or "").strip()
        if message.role not in ("user", "assistant"):
            logger.debug(f"Dropping {message.role} message from client history")
            continue
        if not content:
            continue
        history.append(LLMMessage(role=message.role, content=content))

    while history and history[0].role != "user":
        history.pop(0)
    while history and history[-1].role != "user":
        history.pop()

    return history


def _usage_updates(state: ChatState, response: AnthropicResponse) -> dict[str, int]:
    return {
        "total_input_tokens": state.total_input_tokens + response.usage.input_tokens,
        "total_output_tokens": state.total_output_tokens + response.usage.output_tokens,
    }


class ChatGraphNodes:
    """Nodes of the chat turn graph, bound to their collaborators."""

    def __init__(self, llm_client: AnthropicClient, tools_registry: ToolsRegistry, system_prompt: str):
        self.llm_client = llm_client
        self.tools_registry = tools_registry
        self.system_prompt = system_prompt
        self.tools = tools_registry.get_anthropic_tools()

    async def compose(self, state: ChatState) -> dict[str, Any]:
        """Prepend the system prompt and fit the history into the context budget."""
        log = TurnLogger(logger, state.turn_id)
        history = compose_history(state.incoming)
        if not history:
            raise ChatValidationError("The conversation must contain at least one user message.")

        history = self.llm_client.truncate_conversation(history, self.system_prompt, self.tools)
        log.info(f"Composed {len(history)} messages from {len(state.incoming)} received")

        return {"history": history, "system_prompt": state.system_prompt or self.system_prompt, "phase": "composed"}

    async def dispatch(self, state: ChatState) -> dict[str, Any]:
        """First LLM call, with the tool schemas on offer."""
        log = TurnLogger(logger, state.turn_id)
        log.info(f"Calling LLM with {len(self.tools)} tools")
        response = await self.llm_client.create_message(
            messages=state.history,
            system_prompt=state.system_prompt,
            tools=self.tools,
        )
        usage = _usage_updates(state, response)

        tool_uses = response.tool_uses
        if not tool_uses:
            log.info("Direct answer without tools")
            return {"phase": "finalized", "content": response.text, "tools_used": [], **usage}

        tool_calls = [ToolCall(id=block.id, name=block.name, arguments=block.input) for block in tool_uses]
        log.info(f"LLM wants to use {len(tool_calls)} tools: {[tc.name for tc in tool_calls]}")

        return {
            "phase": "tools_pending",
            "assistant_message": LLMMessage(role="assistant", content=response.content),
            "tool_calls": tool_calls,
            "tools_used": [tc.name for tc in tool_calls],
            **usage,
        }

    async def execute_tools(self, state: ChatState) -> dict[str, Any]:
        """Run every requested tool, one at a time and in order.

        Each call yields exactly one result, failures included.
        """
        log = TurnLogger(logger, state.turn_id)
        if state.phase != "tools_pending":
            raise RuntimeError(f"Cannot execute tools in phase {state.phase}")

        tool_results: list[ToolResult] = []
        for tool_call in state.tool_calls:
            log.info(f"Executing {tool_call.name}")
            result = await self.tools_registry.dispatch(tool_call.name, tool_call.arguments)
            tool_results.append(
                ToolResult(
                    tool_call_id=tool_call.id,
                    content=json.dumps(result, ensure_ascii=False, default=str),
                    is_error="error" in result,
                )
            )

        return {"tool_results": tool_results}

    async def finalize(self, state: ChatState) -> dict[str, Any]:
        """Second LLM call with the tool results.

        Tool use is switched off for this call, so a turn has at most one tool round.
        """
        log = TurnLogger(logger, state.turn_id)
        if state.phase != "tools_pending" or state.assistant_message is None:
            raise RuntimeError(f"Cannot finalize in phase {state.phase}")

        results_message = LLMMessage(
            role="user",
            content=[
                ToolResultBlock(tool_use_id=result.tool_call_id, content=result.content, is_error=result.is_error)
                for result in state.tool_results
            ],
        )

        log.info(f"Calling LLM with {len(state.tool_results)} tool results")
        response = await self.llm_client.create_message(
            messages=[*state.history, state.assistant_message, results_message],
            system_prompt=state.system_prompt,
            tools=self.tools,
            tool_choice="none",
        )

        if response.tool_uses:
            log.warning(f"Ignoring {len(response.tool_uses)} tool calls in final response")

        return {"phase": "finalized", "content": response.text, **_usage_updates(state, response)}
