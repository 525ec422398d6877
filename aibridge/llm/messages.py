"""
Chat data model — provider-neutral messages, contents and responses.

Every provider adapter translates these types to and from its own wire
format, so facades and callers never see SDK objects (except through
`raw_response`, kept for debugging).

Usage:
    from aibridge.llm.messages import ChatMessage, ChatRole, DataContent

    messages = [
        ChatMessage(ChatRole.SYSTEM, "You are terse."),
        ChatMessage(ChatRole.USER, [
            TextContent("What is in this picture?"),
            DataContent(png_bytes, "image/png"),
        ]),
    ]
"""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union


# ---------------------------------------------------------------------------
# Roles
# ---------------------------------------------------------------------------

class ChatRole(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


# ---------------------------------------------------------------------------
# Content parts
# ---------------------------------------------------------------------------

@dataclass
class TextContent:
    """Plain text part of a message."""

    text: str


@dataclass
class DataContent:
    """Binary payload (usually an image) tagged with its MIME type."""

    data: bytes
    media_type: str = "image/png"

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("utf-8")

    def to_data_uri(self) -> str:
        return f"data:{self.media_type};base64,{self.to_base64()}"


@dataclass
class FunctionCallContent:
    """A tool invocation requested by the model. The facade never runs it."""

    call_id: str
    name: str
    arguments: dict[str, Any] = field(default_factory=dict)


@dataclass
class FunctionResultContent:
    """Result of a tool invocation, sent back to the model by the caller."""

    call_id: str
    result: str
    is_error: bool = False


Content = Union[TextContent, DataContent, FunctionCallContent, FunctionResultContent]


# ---------------------------------------------------------------------------
# Message
# ---------------------------------------------------------------------------

@dataclass
class ChatMessage:
    """
    One message in a conversation.

    `contents` may be given as a plain string (wrapped into a single
    TextContent) or a list of parts. It must not be empty.
    """

    role: ChatRole
    contents: list[Content]

    def __init__(self, role: ChatRole | str, contents: str | Content | list[Content]):
        self.role = ChatRole(role)
        if isinstance(contents, str):
            contents = [TextContent(contents)]
        elif not isinstance(contents, list):
            contents = [contents]
        if not contents:
            raise ValueError("ChatMessage requires at least one content part")
        self.contents = list(contents)

    @property
    def text(self) -> str:
        """All text parts joined, or "" when the message has none."""
        return "".join(c.text for c in self.contents if isinstance(c, TextContent))

    @property
    def function_calls(self) -> list[FunctionCallContent]:
        return [c for c in self.contents if isinstance(c, FunctionCallContent)]

    @classmethod
    def user(cls, text: str) -> ChatMessage:
        return cls(ChatRole.USER, text)

    @classmethod
    def system(cls, text: str) -> ChatMessage:
        return cls(ChatRole.SYSTEM, text)


# ---------------------------------------------------------------------------
# Options & usage
# ---------------------------------------------------------------------------

@dataclass
class ChatOptions:
    """Per-request knobs forwarded to the chat client."""

    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    tools: list[Any] = field(default_factory=list)   # ToolDefinition list
    response_schema: Optional[dict[str, Any]] = None  # JSON schema
    response_schema_name: str = "response"


@dataclass
class UsageDetails:
    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

@dataclass
class ChatResponse:
    """Unified response from any chat client."""

    messages: list[ChatMessage]
    model_id: str = ""
    finish_reason: str = ""
    usage: UsageDetails = field(default_factory=UsageDetails)
    raw_response: Any = None

    @property
    def last_message(self) -> Optional[ChatMessage]:
        return self.messages[-1] if self.messages else None

    @property
    def text(self) -> str:
        """Text of the last message; the conventional answer."""
        last = self.last_message
        return last.text if last is not None else ""

    @property
    def tool_calls(self) -> list[FunctionCallContent]:
        return [c for m in self.messages for c in m.function_calls]


@dataclass
class StreamingChatResponse:
    """One incremental unit of a streamed completion."""

    content: Optional[str]
    is_complete: bool = False


@dataclass
class VisionResponse:
    content: str
    metadata: Optional[dict[str, Any]] = None


def as_messages(prompt_or_messages: str | ChatMessage | list[ChatMessage]) -> list[ChatMessage]:
    """Normalize the facade input: a bare string is one user message."""
    if isinstance(prompt_or_messages, str):
        return [ChatMessage.user(prompt_or_messages)]
    if isinstance(prompt_or_messages, ChatMessage):
        return [prompt_or_messages]
    return list(prompt_or_messages)
