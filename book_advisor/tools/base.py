"""Base types and definitions for tools."""

import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

ToolHandler = Callable[[Any], Awaitable[dict[str, Any]]]


@dataclass
class ToolDefinition:
    """Definition of a tool available to the AI assistant."""

    name: str
    description: str
    input_schema_class: type[BaseModel]
    handler: ToolHandler

    @classmethod
    def from_handler(cls, name: str, input_schema_class: type[BaseModel], handler: ToolHandler) -> "ToolDefinition":
        """Build a definition whose description is the handler's docstring."""
        return cls(
            name=name,
            description=inspect.getdoc(handler) or name,
            input_schema_class=input_schema_class,
            handler=handler,
        )

    def get_json_schema(self) -> dict[str, Any]:
        """Get JSON schema for this tool's input, using wire (alias) names."""
        return self.input_schema_class.model_json_schema(by_alias=True)

    def parse_input(self, raw_input: dict[str, Any]) -> BaseModel:
        """Parse and validate tool input."""
        return self.input_schema_class.model_validate(raw_input)
