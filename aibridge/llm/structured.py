"""
Structured output helpers — JSON schema prompts and reply parsing.

Two request styles exist for a typed reply:
- schema-guided: the JSON schema is sent to the provider as a response
  format (OpenAI json_schema, Ollama `format`), and the prompt is left as-is;
- prompt-guided: the schema is appended to the prompt as an instruction.

Either way the reply text is parsed with pydantic. Models often wrap JSON
in markdown fences, so those are stripped before validation.
"""

from __future__ import annotations

import json
import re
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from aibridge.exceptions import StructuredParseError

T = TypeVar("T", bound=BaseModel)

_FENCE_PATTERN = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


def schema_for(result_type: type[BaseModel]) -> dict[str, Any]:
    return result_type.model_json_schema()


def schema_instruction_from_schema(schema: dict[str, Any]) -> str:
    """Prompt suffix asking for JSON that matches a JSON schema."""
    return (
        "\n\nRespond with a JSON value that conforms to the following schema. "
        "Return ONLY the JSON, no commentary.\n"
        f"{json.dumps(schema, indent=2)}"
    )


def schema_instruction(result_type: type[BaseModel]) -> str:
    return schema_instruction_from_schema(schema_for(result_type))


def extract_json_text(text: str) -> str:
    """Strip markdown code fences and surrounding whitespace."""
    stripped = text.strip()
    match = _FENCE_PATTERN.match(stripped)
    if match:
        return match.group(1)
    return stripped


def parse_structured(text: str, result_type: type[T]) -> T:
    """
    Parse a model reply into result_type.

    Raises:
        StructuredParseError: If the text is empty, not JSON, or does not
            validate against the model.
    """
    candidate = extract_json_text(text or "")
    if not candidate:
        raise StructuredParseError(
            "Failed to parse structured response: empty reply",
            raw_text=text or "",
        )

    try:
        return result_type.model_validate_json(candidate)
    except ValidationError as e:
        raise StructuredParseError(
            f"Failed to parse structured response as {result_type.__name__}",
            raw_text=text,
            details={"errors": e.errors(include_url=False)},
        ) from e
