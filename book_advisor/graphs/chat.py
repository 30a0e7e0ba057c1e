"""Chat turn graph: compose, dispatch, optionally run tools, finalize."""

from langgraph.graph import END, StateGraph

from book_advisor.clients.anthropic import AnthropicClient
from book_advisor.graphs.edges import route_dispatch_output
from book_advisor.graphs.nodes import ChatGraphNodes
from book_advisor.graphs.state import ChatState
from book_advisor.tools.registry import ToolsRegistry
from book_advisor.utils.logging import get_logger

logger = get_logger(__name__)

SYSTEM_PROMPT = """You are "Book Advisor", a friendly and enthusiastic book recommendation assistant.

Your job is to help the user:
- Discover new books that match their interests
- Manage their personal reading list
- Keep track of the books they have read
- Understand their reading habits and statistics

Always answer in the language the user writes in.

CRITICAL RULES ABOUT CONTEXT:
Every book returned by "searchBooks" has an "id" field (its Google Books id).
If the user says "add the first one", "add that book" or "add it":
1. Do NOT search again
2. Take the "id" of the matching book from the previous results
3. Call "addToReadingList" with that id as bookId

Example:
- User: "Find books by Asimov"
- You call searchBooks and get [{id: "ABC123", title: "Foundation"}, {id: "XYZ789", title: "I, Robot"}]
- User: "Add the first one"
- You MUST call addToReadingList with bookId="ABC123" (do NOT search again)

RULES ABOUT TOOL USE:
1. Use "searchBooks" when the user asks for recommendations for the first time, looks for books on a topic,
   or mentions an author or title you have no previous results for.
2. Use "getBookDetails" when the user says "tell me more about [book]" or asks for specific details.
3. Use "addToReadingList" when the user says "add it", "save it", "I want to read it" or
   "add the first/second/third one", using the "id" of the previous search results.
4. Use "getReadingList" when the user asks what is on their list.
5. MARKING AS READ: if you do not already know the book's id, call "getReadingList" first, find the book the
   user means, and call "markAsRead" with its "externalId". NEVER invent ids.
6. Use "getReadingStats" when the user asks about statistics, numbers or analysis.

Be conversational, enthusiastic and encouraging about reading."""

# A turn takes at most four steps
RECURSION_LIMIT = 6


def create_chat_graph(llm_client: AnthropicClient, tools_registry: ToolsRegistry, system_prompt: str = SYSTEM_PROMPT):
    """Create the chat turn graph.

    The graph is a short state machine: ``composed`` then either ``finalized``
    directly, or ``tools_pending`` followed by ``finalized``. There is no edge
    back from ``finalize``, so a turn has at most one round of tool use.

    Args:
        llm_client: Client for the LLM provider
        tools_registry: Registry used to run requested tools
        system_prompt: Fixed instructions prepended to every conversation

    Returns:
        Compiled LangGraph workflow
    """
    logger.info("Creating chat graph")

    nodes = ChatGraphNodes(llm_client, tools_registry, system_prompt)
    workflow = StateGraph(ChatState)

    workflow.add_node("compose", nodes.compose)
    workflow.add_node("dispatch", nodes.dispatch)
    workflow.add_node("execute_tools", nodes.execute_tools)
    workflow.add_node("finalize", nodes.finalize)

    workflow.set_entry_point("compose")
    workflow.add_edge("compose", "dispatch")
    workflow.add_conditional_edges(
        "dispatch",
        route_dispatch_output,
        {
            "tools": "execute_tools",
            "end": END,
        },
    )
    workflow.add_edge("execute_tools", "finalize")
    workflow.add_edge("finalize", END)

    return workflow.compile()
