"""Host contract — what the ask-mode controller needs from the agent runtime.

Contains HostProtocol, the event kinds the host delivers, and the payloads
handlers return. Implementations: AgentHost (pydantic-ai bridge),
RecordingHost (tests).
"""

import enum
from dataclasses import dataclass, field
from typing import Any, Literal, Protocol, runtime_checkable

from co_ask.messages import AgentMessage

NotifyLevel = Literal["info", "warning", "error"]


# ---------------------------------------------------------------------------
# HostProtocol — capability introspection, UI sinks, steering, idle
# ---------------------------------------------------------------------------


@runtime_checkable
class HostProtocol(Protocol):
    """Runtime surface the controller calls into."""

    def get_active_tools(self) -> list[str]:
        """Tool names currently offered to the model, in order."""
        ...

    def set_active_tools(self, names: list[str]) -> None:
        """Replace the active tool set."""
        ...

    def notify(self, text: str, level: NotifyLevel = "info") -> None:
        """User-visible notification."""
        ...

    def set_status(self, key: str, value: str | None) -> None:
        """Footer status entry; None clears it."""
        ...

    def set_widget(self, key: str, value: str | None) -> None:
        """Widget area entry; None clears it."""
        ...

    def send_user_message(self, text: str, *, deliver_as: Literal["steer", "followUp"] = "steer") -> None:
        """Inject a user message into the current (or next) agent turn."""
        ...

    async def wait_for_idle(self) -> None:
        """Return once the agent has finished its current work."""
        ...


# ---------------------------------------------------------------------------
# Events and handler results
# ---------------------------------------------------------------------------


class HostEvent(enum.Enum):
    TOOL_CALL = "tool_call"                    # before a tool executes
    CONTEXT = "context"                        # message list assembled for inference
    BEFORE_AGENT_START = "before_agent_start"  # right before each agent turn


@dataclass
class ToolCallEvent:
    tool_name: str
    input: dict[str, Any] = field(default_factory=dict)
    tool_call_id: str = ""


@dataclass(frozen=True)
class ToolCallBlock:
    """Veto: the host must not execute the tool call."""

    reason: str
    block: bool = True


@dataclass
class ContextEvent:
    messages: list[AgentMessage]


@dataclass
class ContextResult:
    messages: list[AgentMessage]


@dataclass
class AgentStartResult:
    message: AgentMessage
