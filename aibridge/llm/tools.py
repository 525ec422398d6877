"""
Tool Use / Function Calling — provider-agnostic tool definitions.

Tools are passed to `ChatService.complete_with_functions()`; each chat
client translates them to its provider's schema. The facade never executes
a tool: returned `FunctionCallContent` parts are the caller's to run and
answer with `FunctionResultContent`.

Usage:
    from aibridge.llm.tools import ToolDefinition

    weather = ToolDefinition(
        name="get_weather",
        description="Current weather for a city",
        parameters={
            "city": {"type": "string", "description": "City name"},
            "unit": {"type": "string", "enum": ["c", "f"]},
        },
        required=["city"],
    )

    response = await ai.chat.complete_with_functions(messages, [weather])
    for call in response.tool_calls:
        print(call.name, call.arguments)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ToolDefinition:
    """
    Provider-agnostic tool/function definition.

    Translates to Anthropic's tool format, OpenAI's function_calling format
    and Ollama's (OpenAI-shaped) tools list.
    """

    name: str
    description: str
    parameters: dict[str, Any] = field(default_factory=dict)
    required: list[str] = field(default_factory=list)

    def json_schema(self) -> dict[str, Any]:
        """Object schema for the tool arguments."""
        properties = {}
        for param_name, param_spec in self.parameters.items():
            if isinstance(param_spec, dict):
                properties[param_name] = param_spec
            else:
                properties[param_name] = {"type": "string", "description": str(param_spec)}

        return {
            "type": "object",
            "properties": properties,
            "required": self.required,
        }

    def to_anthropic(self) -> dict[str, Any]:
        """Convert to Anthropic Claude tool format."""
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.json_schema(),
        }

    def to_openai(self) -> dict[str, Any]:
        """Convert to OpenAI function_calling format."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.json_schema(),
            },
        }
