"""Ask mode — read-only Q&A mode for safe code analysis.

When enabled, only read-only tools are offered to the model and the shell
tool is restricted to an allowlist of read-only commands. The controller
owns the mode state and reacts to three host events (see ``handlers``):

    tool_call          — veto shell commands that are not allowlisted
    context            — strip stale ask-mode residue once the mode is off
    before_agent_start — inject the advisory message while the mode is on

``ask()`` backs the ``/ask [question]`` command.
"""

import enum
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from co_ask._host import (
    AgentStartResult,
    ContextEvent,
    ContextResult,
    HostEvent,
    HostProtocol,
    ToolCallBlock,
    ToolCallEvent,
)
from co_ask._safety import is_safe_command
from co_ask.messages import AgentMessage, text_blocks

logger = logging.getLogger(__name__)


class Tool(str, enum.Enum):
    READ = "read"
    BASH = "bash"
    GREP = "grep"
    FIND = "find"
    LS = "ls"
    QUESTIONNAIRE = "questionnaire"
    EDIT = "edit"
    WRITE = "write"


ASK_MODE_TOOLS: tuple[Tool, ...] = (Tool.READ, Tool.BASH, Tool.GREP, Tool.FIND, Tool.LS, Tool.QUESTIONNAIRE)
# Fallback when no tool set was captured before activation
NORMAL_MODE_TOOLS: tuple[Tool, ...] = (Tool.READ, Tool.BASH, Tool.EDIT, Tool.WRITE)

ASK_MODE_CONTEXT_TYPE = "ask-mode-context"
ASK_MODE_SENTINEL = "[ASK MODE ACTIVE]"
STATUS_KEY = "ask-mode"

_BLOCKED_REASON = (
    "Ask mode: command blocked (not allowlisted). Use /ask to disable ask mode first.\n"
    "Command: {command}"
)


def _names(tools: Sequence[Tool]) -> list[str]:
    return [t.value for t in tools]


def advisory_text() -> str:
    allowed = ", ".join(_names(ASK_MODE_TOOLS))
    denied = ", ".join(t.value for t in NORMAL_MODE_TOOLS if t not in ASK_MODE_TOOLS)
    return (
        f"{ASK_MODE_SENTINEL}\n"
        "You are in ask mode - a read-only Q&A mode for safe code analysis.\n"
        "\n"
        "Restrictions:\n"
        f"- You can only use: {allowed}\n"
        f"- You CANNOT use: {denied} (file modifications are disabled)\n"
        "- Bash is restricted to an allowlist of read-only commands\n"
        "\n"
        "Answer the user's question. Do NOT attempt to make any changes."
    )


def is_ask_mode_residue(message: AgentMessage) -> bool:
    """True for advisory messages and user messages carrying the sentinel."""
    if message.custom_type == ASK_MODE_CONTEXT_TYPE:
        return True
    if message.role != "user":
        return False
    return any(ASK_MODE_SENTINEL in text for text in text_blocks(message))


@dataclass
class AskModeState:
    enabled: bool = False
    # Tool set active right before the last activation; stale while disabled
    saved_tools: list[str] = field(default_factory=list)


class AskModeController:
    """Mode state machine plus the host event handlers that enforce it."""

    def __init__(
        self,
        host: HostProtocol,
        *,
        safe_commands: Sequence[str] | None = None,
        shell_tool_name: str | None = None,
        state: AskModeState | None = None,
    ) -> None:
        if safe_commands is None or shell_tool_name is None:
            from co_ask.config import settings

            safe_commands = settings.ask_safe_commands if safe_commands is None else safe_commands
            shell_tool_name = settings.shell_tool_name if shell_tool_name is None else shell_tool_name
        self.host = host
        self.state = state or AskModeState()
        self.safe_commands = list(safe_commands)
        self.shell_tool_name = shell_tool_name
        self.handlers: dict[HostEvent, Callable[[Any], Any]] = {
            HostEvent.TOOL_CALL: self.on_tool_call,
            HostEvent.CONTEXT: self.on_context,
            HostEvent.BEFORE_AGENT_START: self.on_before_agent_start,
        }

    @property
    def enabled(self) -> bool:
        return self.state.enabled

    # -- Transitions -------------------------------------------------------

    def _update_status(self) -> None:
        if self.state.enabled:
            self.host.set_status(STATUS_KEY, "[warning]❓ ask[/warning]")
        else:
            self.host.set_status(STATUS_KEY, None)
        self.host.set_widget(STATUS_KEY, None)

    def activate(self) -> None:
        self.state.saved_tools = list(self.host.get_active_tools())
        self.state.enabled = True
        self.host.set_active_tools(_names(ASK_MODE_TOOLS))
        self.host.notify(f"Ask mode enabled. Tools: {', '.join(_names(ASK_MODE_TOOLS))}")
        self._update_status()
        logger.info("ask mode enabled (saved tools: %s)", self.state.saved_tools)

    def deactivate(self) -> None:
        self.state.enabled = False
        restored = list(self.state.saved_tools) or _names(NORMAL_MODE_TOOLS)
        self.host.set_active_tools(restored)
        self.host.notify("Ask mode disabled. Full access restored. All tools available.")
        self._update_status()
        logger.info("ask mode disabled (restored tools: %s)", restored)

    def toggle(self) -> None:
        if self.state.enabled:
            self.deactivate()
        else:
            self.activate()

    # -- Host event handlers -----------------------------------------------

    def on_tool_call(self, event: ToolCallEvent) -> ToolCallBlock | None:
        """Block non-allowlisted shell commands while ask mode is on."""
        if not self.state.enabled or event.tool_name != self.shell_tool_name:
            return None

        command = event.input.get("command") if isinstance(event.input, dict) else None
        if is_safe_command(command, self.safe_commands):
            return None
        logger.info("ask mode blocked command: %r", command)
        shown = command if isinstance(command, str) else ""
        return ToolCallBlock(reason=_BLOCKED_REASON.format(command=shown))

    def on_context(self, event: ContextEvent) -> ContextResult | None:
        """Drop stale ask-mode context when ask mode is off."""
        if self.state.enabled:
            return None

        kept = [m for m in event.messages if not is_ask_mode_residue(m)]
        dropped = len(event.messages) - len(kept)
        if dropped:
            logger.debug("ask mode: filtered %d stale context message(s)", dropped)
        return ContextResult(messages=kept)

    def on_before_agent_start(self, event: Any = None) -> AgentStartResult | None:
        """Tell the model about the restriction before each turn."""
        if not self.state.enabled:
            return None

        return AgentStartResult(message=AgentMessage(
            role="custom",
            content=advisory_text(),
            custom_type=ASK_MODE_CONTEXT_TYPE,
            display=False,
        ))

    def dispatch(self, kind: HostEvent, event: Any = None) -> Any:
        return self.handlers[kind](event)

    # -- /ask workflow -----------------------------------------------------

    async def ask(self, args: str | None) -> None:
        """Toggle ask mode, or answer one question under it.

        With a question and ask mode off, the mode is switched on for the
        answer and switched back off once the host reports idle. There is no
        timeout: if the host never goes idle, ask mode stays on until the
        user toggles it.
        """
        if not args or not args.strip():
            self.toggle()
            return

        question = args.strip()

        if self.state.enabled:
            self.host.notify("Answering in ask mode...", "info")
            self.host.send_user_message(question, deliver_as="steer")
            await self.host.wait_for_idle()
            return

        self.host.notify("Activating ask mode to answer...", "info")
        self.activate()
        self.host.send_user_message(question, deliver_as="steer")
        await self.host.wait_for_idle()
        self.deactivate()
        self.host.notify("Ask mode disabled. Full access restored.", "info")
