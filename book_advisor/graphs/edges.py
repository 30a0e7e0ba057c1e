"""Edge logic and routing for the chat turn graph."""

from typing import Literal

from book_advisor.graphs.state import ChatState
from book_advisor.utils.logging import TurnLogger, get_logger

logger = get_logger(__name__)


def route_dispatch_output(state: ChatState) -> Literal["tools", "end"]:
    """Route from the first LLM call.

    Tool calls go to execution; a plain text answer ends the turn.
    """
    if state.phase == "tools_pending" and state.tool_calls:
        TurnLogger(logger, state.turn_id).debug(f"Routing {len(state.tool_calls)} tool calls to execution")
        return "tools"

    return "end"
