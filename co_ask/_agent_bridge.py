"""pydantic-ai host bridge — runs the ask-mode controller against a live agent.

Public API:
    AgentHost            — HostProtocol over a pydantic-ai session
    filter_history       — context filter on ModelMessage lists
    make_history_processor — same, as an ``Agent(history_processors=[...])`` entry
    advisory_request     — advisory message as a ModelRequest
    guard_tool_call      — ToolCallPart → ToolDenied | None
    deny_blocked_calls   — pre-resolve DeferredToolRequests before approval prompts
"""

import asyncio
import json
import logging
from collections.abc import Callable
from dataclasses import replace
from typing import Any, Literal

from pydantic_ai import DeferredToolRequests, DeferredToolResults, RunContext, ToolDenied
from pydantic_ai.messages import (
    ModelMessage,
    ModelRequest,
    ModelRequestPart,
    ModelResponse,
    RetryPromptPart,
    TextPart,
    ToolCallPart,
    ToolReturnPart,
    UserPromptPart,
)
from pydantic_ai.tools import ToolDefinition

from co_ask._ask_mode import AskModeController, is_ask_mode_residue
from co_ask._host import AgentStartResult, ContextEvent, NotifyLevel, ToolCallEvent
from co_ask.display import TerminalUI
from co_ask.messages import AgentMessage, TextContent, text_blocks

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# AgentHost
# ---------------------------------------------------------------------------


class AgentHost:
    """HostProtocol implementation for a pydantic-ai chat session.

    Tool narrowing works through ``prepare_tools``: register it on the agent
    (``Agent(prepare_tools=host.prepare_tools)``) and only active tools are
    offered to the model. Steering messages queue until the chat loop picks
    them up; the loop brackets each turn with ``mark_busy``/``mark_idle``.
    """

    def __init__(self, tool_names: list[str], ui: TerminalUI | None = None) -> None:
        self.ui = ui or TerminalUI()
        self._active: list[str] = list(tool_names)
        self.steering: asyncio.Queue[str] = asyncio.Queue()
        self._idle = asyncio.Event()
        self._idle.set()

    # -- tools --

    def get_active_tools(self) -> list[str]:
        return list(self._active)

    def set_active_tools(self, names: list[str]) -> None:
        self._active = list(names)

    async def prepare_tools(
        self, ctx: RunContext[Any] | None, tool_defs: list[ToolDefinition],
    ) -> list[ToolDefinition]:
        active = set(self._active)
        return [td for td in tool_defs if td.name in active]

    # -- UI sinks --

    def notify(self, text: str, level: NotifyLevel = "info") -> None:
        self.ui.notify(text, level)

    def set_status(self, key: str, value: str | None) -> None:
        self.ui.set_status(key, value)

    def set_widget(self, key: str, value: str | None) -> None:
        self.ui.set_widget(key, value)

    # -- steering / idle --

    def send_user_message(self, text: str, *, deliver_as: Literal["steer", "followUp"] = "steer") -> None:
        # A message sent while idle starts the next turn, so the host is busy from here
        self._idle.clear()
        self.steering.put_nowait(text)

    def mark_busy(self) -> None:
        self._idle.clear()

    def mark_idle(self) -> None:
        self._idle.set()

    @property
    def is_idle(self) -> bool:
        return self._idle.is_set()

    async def wait_for_idle(self) -> None:
        await self._idle.wait()


# ---------------------------------------------------------------------------
# Message conversion
# ---------------------------------------------------------------------------


def _user_texts(part: UserPromptPart) -> list[TextContent]:
    if isinstance(part.content, str):
        return [TextContent(part.content)]
    return [TextContent(item) for item in part.content if isinstance(item, str)]


def _to_agent_message(msg: ModelMessage) -> AgentMessage:
    """View a pydantic-ai message through the host message shape.

    Only text survives conversion; non-text user content is never inspected.
    """
    if isinstance(msg, ModelResponse):
        return AgentMessage(
            role="assistant",
            content=[TextContent(p.content) for p in msg.parts if isinstance(p, TextPart)],
        )

    blocks: list[TextContent] = []
    for part in msg.parts:
        if isinstance(part, UserPromptPart):
            blocks.extend(_user_texts(part))
    if any(isinstance(p, UserPromptPart) for p in msg.parts):
        role = "user"
    elif any(isinstance(p, (ToolReturnPart, RetryPromptPart)) for p in msg.parts):
        role = "toolResult"
    else:
        role = "system"
    return AgentMessage(role=role, content=blocks)


def _is_residue_part(part: ModelRequestPart) -> bool:
    return isinstance(part, UserPromptPart) and is_ask_mode_residue(
        AgentMessage(role="user", content=_user_texts(part)),
    )


def _strip_residue(msg: ModelMessage) -> ModelMessage | None:
    """Drop only the residue parts of a request, None if nothing is left.

    Tool returns must stay paired with the calls in the preceding response.
    """
    if not isinstance(msg, ModelRequest):
        return None
    parts = [p for p in msg.parts if not _is_residue_part(p)]
    if not parts:
        return None
    return replace(msg, parts=parts)


def filter_history(controller: AskModeController, messages: list[ModelMessage]) -> list[ModelMessage]:
    """Apply the controller's context filter to a pydantic-ai message list."""
    views = [_to_agent_message(m) for m in messages]
    result = controller.on_context(ContextEvent(messages=views))
    if result is None:
        return messages

    kept = {id(v) for v in result.messages}
    filtered: list[ModelMessage] = []
    for msg, view in zip(messages, views):
        if id(view) in kept:
            filtered.append(msg)
            continue
        stripped = _strip_residue(msg)
        if stripped is not None:
            filtered.append(stripped)
    return filtered


def make_history_processor(
    controller: AskModeController,
) -> Callable[[list[ModelMessage]], list[ModelMessage]]:
    """History processor bound to *controller* — register on the agent."""

    def ask_mode_history(messages: list[ModelMessage]) -> list[ModelMessage]:
        return filter_history(controller, messages)

    return ask_mode_history


def advisory_request(result: AgentStartResult) -> ModelRequest:
    """Render the advisory as a user-prompt request for the next turn."""
    text = "\n".join(text_blocks(result.message))
    return ModelRequest(parts=[UserPromptPart(content=text)])


# ---------------------------------------------------------------------------
# Tool-call gate
# ---------------------------------------------------------------------------


def _call_args(call: ToolCallPart) -> dict[str, Any]:
    args = call.args
    if isinstance(args, str):
        try:
            args = json.loads(args)
        except json.JSONDecodeError:
            logger.debug("unparseable args for %s call %s", call.tool_name, call.tool_call_id)
            return {}
    return args if isinstance(args, dict) else {}


def guard_tool_call(controller: AskModeController, call: ToolCallPart) -> ToolDenied | None:
    """Return a ToolDenied for calls the controller vetoes, else None."""
    veto = controller.on_tool_call(ToolCallEvent(
        tool_name=call.tool_name,
        input=_call_args(call),
        tool_call_id=call.tool_call_id,
    ))
    if veto is None:
        return None
    return ToolDenied(veto.reason)


def deny_blocked_calls(
    controller: AskModeController, requests: DeferredToolRequests,
) -> tuple[DeferredToolResults, list[ToolCallPart]]:
    """Deny vetoed approval requests up front.

    Returns the partially filled results and the calls that still need the
    usual approval decision.
    """
    results = DeferredToolResults()
    pending: list[ToolCallPart] = []
    for call in requests.approvals:
        denied = guard_tool_call(controller, call)
        if denied is not None:
            results.approvals[call.tool_call_id] = denied
        else:
            pending.append(call)
    return results, pending
