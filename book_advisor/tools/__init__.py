"""Tools for the conversational AI assistant."""

from book_advisor.tools.base import ToolDefinition
from book_advisor.tools.registry import ToolsRegistry

__all__ = ["ToolDefinition", "ToolsRegistry"]
