"""Tools registry: schemas for the LLM and dispatch by tool name."""

from typing import Any

from pydantic import ValidationError

from book_advisor.clients.anthropic import AnthropicTool
from book_advisor.clients.google_books import BookLookupClient
from book_advisor.services.reading_list import ReadingListService
from book_advisor.tools.base import ToolDefinition
from book_advisor.tools.books import create_get_book_details_tool, create_search_books_tool
from book_advisor.tools.reading_list import (
    create_add_to_reading_list_tool,
    create_get_reading_list_tool,
    create_get_reading_stats_tool,
    create_mark_as_read_tool,
)
from book_advisor.utils.logging import get_logger

logger = get_logger(__name__)

TOOL_NOT_FOUND = "tool not found"


def _format_validation_errors(error: ValidationError) -> list[str]:
    return [f"{'.'.join(str(part) for part in err['loc']) or 'arguments'}: {err['msg']}" for err in error.errors()]


class ToolsRegistry:
    """Registry for managing AI assistant tools."""

    def __init__(self, book_client: BookLookupClient, reading_list: ReadingListService):
        """Initialize tools registry with service dependencies."""
        self.book_client = book_client
        self.reading_list = reading_list
        self._tools: dict[str, ToolDefinition] = {}
        self._register_default_tools()

    def _register_default_tools(self) -> None:
        """Register the book search and reading list tools."""
        tools = [
            create_search_books_tool(self.book_client),
            create_get_book_details_tool(self.book_client),
            create_add_to_reading_list_tool(self.reading_list),
            create_get_reading_list_tool(self.reading_list),
            create_mark_as_read_tool(self.reading_list),
            create_get_reading_stats_tool(self.reading_list),
        ]

        for tool in tools:
            self.register_tool(tool)

    def register_tool(self, tool: ToolDefinition) -> None:
        """Register a new tool in the registry."""
        self._tools[tool.name] = tool

    def get_anthropic_tools(self) -> list[AnthropicTool]:
        """Get tool schemas in the format expected by the LLM provider."""
        return [
            AnthropicTool(name=tool.name, description=tool.description, input_schema=tool.get_json_schema())
            for tool in self._tools.values()
        ]

    def get_tool_names(self) -> list[str]:
        """Get list of all registered tool names."""
        return list(self._tools.keys())

    def has_tool(self, name: str) -> bool:
        """Check if a tool is registered."""
        return name in self._tools

    async def dispatch(self, name: str, arguments: dict[str, Any] | None) -> dict[str, Any]:
        """Run a tool by name.

        Never raises: unknown tools, invalid arguments and handler failures all
        come back as an ``{"error": ...}`` payload, so one failing tool cannot
        abort the rest of a turn.

        Args:
            name: Tool name as requested by the LLM
            arguments: Raw argument object from the LLM

        Returns:
            JSON-serializable tool result
        """
        tool = self._tools.get(name)
        if tool is None:
            logger.error(f"Unknown tool requested: {name}")
            return {"error": TOOL_NOT_FOUND, "tool": name}

        try:
            params = tool.parse_input(arguments or {})
        except ValidationError as e:
            logger.warning(f"Invalid arguments for {name}: {arguments}")
            return {"error": f"invalid arguments for {name}", "details": _format_validation_errors(e)}

        logger.debug(f"Executing tool: {name} with input: {arguments}")
        try:
            result = await tool.handler(params)
        except Exception as e:
            logger.error(f"Tool {name} failed: {e}", exc_info=True)
            return {"error": f"execution failed for {name}"}

        logger.debug(f"Tool {name} succeeded: {str(result)[:100]}...")
        return result
