"""Slash command registry, handlers, and dispatch for the REPL."""

from __future__ import annotations

from collections.abc import Callable, Awaitable
from dataclasses import dataclass

from co_ask._ask_mode import AskModeController
from co_ask.display import console


# -- Types -----------------------------------------------------------------

@dataclass
class CommandContext:
    """Grab-bag passed to every slash-command handler."""

    controller: AskModeController


@dataclass(frozen=True)
class SlashCommand:
    """A registered slash command."""

    name: str
    description: str
    handler: Callable[[CommandContext, str], Awaitable[None]]


# -- Handlers --------------------------------------------------------------


async def _cmd_help(ctx: CommandContext, args: str) -> None:
    """List available slash commands."""
    from rich.table import Table

    table = Table(title="Slash Commands", border_style="accent", expand=False)
    table.add_column("Command", style="accent")
    table.add_column("Description")
    for cmd in COMMANDS.values():
        table.add_row(f"/{cmd.name}", cmd.description)
    console.print(table)


async def _cmd_tools(ctx: CommandContext, args: str) -> None:
    """List the tools currently offered to the model."""
    tools = ctx.controller.host.get_active_tools()
    mode = "ask mode" if ctx.controller.enabled else "normal mode"
    lines = [f"  [accent]{i + 1}.[/accent] {name}" for i, name in enumerate(tools)]
    console.print(f"[info]Active tools ({len(tools)}, {mode}):[/info]")
    console.print("\n".join(lines))


async def _cmd_ask(ctx: CommandContext, args: str) -> None:
    """Toggle ask mode, or answer one question in ask mode."""
    await ctx.controller.ask(args)


# -- Registry --------------------------------------------------------------

COMMANDS: dict[str, SlashCommand] = {
    "help": SlashCommand("help", "List available slash commands", _cmd_help),
    "tools": SlashCommand("tools", "List active agent tools", _cmd_tools),
    "ask": SlashCommand(
        "ask", "Toggle ask mode (read-only) or ask a question with /ask <question>", _cmd_ask,
    ),
}


# -- Dispatch --------------------------------------------------------------


async def dispatch(raw_input: str, ctx: CommandContext) -> bool:
    """Route slash-command input to the appropriate handler.

    Returns False when input was not a slash command (caller should send it
    to the agent), True once a command ran or was reported unknown.
    """
    if not raw_input.startswith("/"):
        return False

    parts = raw_input[1:].split(maxsplit=1)
    name = parts[0].lower() if parts else ""
    args = parts[1] if len(parts) > 1 else ""

    cmd = COMMANDS.get(name)
    if cmd is None:
        console.print(f"[bold red]Unknown command:[/bold red] /{name}")
        console.print("[dim]Type /help to see available commands.[/dim]")
        return True

    await cmd.handler(ctx, args)
    return True
