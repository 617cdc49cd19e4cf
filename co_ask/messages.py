"""Conversation message shapes exchanged with the host runtime."""

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class TextContent:
    text: str
    type: Literal["text"] = "text"


@dataclass(frozen=True)
class ImageContent:
    data: str
    mime_type: str
    type: Literal["image"] = "image"


ContentBlock = TextContent | ImageContent


@dataclass
class AgentMessage:
    """A conversation entry as the host sees it.

    ``custom_type`` tags synthetic entries injected by extensions;
    ``display=False`` keeps them out of the rendered transcript.
    """

    role: str  # "user" | "assistant" | "toolResult" | "system" | "custom"
    content: str | list[ContentBlock] | None
    custom_type: str | None = None
    display: bool = True


def text_blocks(message: AgentMessage) -> list[str]:
    """Return the text of every text-typed block (or the whole string content)."""
    content = message.content
    if isinstance(content, str):
        return [content]
    if isinstance(content, (list, tuple)):
        return [
            block.text for block in content
            if getattr(block, "type", None) == "text" and isinstance(getattr(block, "text", None), str)
        ]
    return []
