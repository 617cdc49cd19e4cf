import typer
from rich.markup import escape
from rich.table import Table

from co_ask._ask_mode import ASK_MODE_TOOLS, NORMAL_MODE_TOOLS
from co_ask._safety import is_safe_command
from co_ask.config import settings
from co_ask.display import console, set_theme, SUCCESS, ERROR

app = typer.Typer(
    help="Co Ask - read-only ask mode policy for coding agents",
    context_settings={"help_option_names": ["--help", "-h"]},
)


@app.command()
def check(
    command: str = typer.Argument(..., help="Shell command line to classify"),
    theme: str = typer.Option(None, "--theme", "-t", help="Color theme: light or dark"),
):
    """Classify a shell command under ask mode. Exit 0 when allowed, 1 when blocked."""
    if theme:
        set_theme(theme)
    if is_safe_command(command, settings.ask_safe_commands):
        console.print(f"[success]{SUCCESS} allowed:[/success] {escape(command)}")
        return
    console.print(f"[error]{ERROR} blocked:[/error] {escape(command)}")
    console.print("[dim]Not allowlisted, or contains chaining/redirection.[/dim]")
    raise typer.Exit(code=1)


@app.command()
def policy():
    """Show the ask-mode tool sets and the shell command allowlist."""
    tools = Table(title="Tool sets", border_style="accent", expand=False)
    tools.add_column("Mode", style="accent")
    tools.add_column("Tools")
    tools.add_row("ask", ", ".join(t.value for t in ASK_MODE_TOOLS))
    tools.add_row("normal (fallback)", ", ".join(t.value for t in NORMAL_MODE_TOOLS))
    console.print(tools)

    allow = Table(title=f"Shell allowlist ({settings.shell_tool_name})", border_style="accent", expand=False)
    allow.add_column("Prefix", style="accent")
    for prefix in settings.ask_safe_commands:
        allow.add_row(escape(prefix))
    console.print(allow)


if __name__ == "__main__":
    app()
