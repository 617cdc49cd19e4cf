"""Themed terminal display — console, semantic styles, UI sinks for the host."""

from rich.console import Console
from rich.markup import escape
from rich.theme import Theme

from co_ask.config import settings

# -- Theme palettes (keyed by theme name) ------------------------------------

_THEMES: dict[str, dict[str, str]] = {
    "dark":  {"status": "yellow",      "info": "cyan", "accent": "bold cyan", "error": "bold red", "success": "green", "warning": "orange3", "hint": "dim"},
    "light": {"status": "dark_orange", "info": "blue", "accent": "bold blue", "error": "bold red", "success": "green", "warning": "orange3", "hint": "dim"},
}

# -- Console (single instance, themed) --------------------------------------

console = Console(theme=Theme(_THEMES.get(settings.theme, _THEMES["light"])))

# -- Indicators ------------------------------------------------------------

BULLET      = "▸"
SUCCESS     = "✦"
ERROR       = "✖"
INFO        = "◈"


def set_theme(name: str) -> None:
    """Switch the console theme at runtime (e.g. from --theme flag)."""
    console.push_theme(Theme(_THEMES.get(name, _THEMES["light"])))


# -- TerminalUI (notification / status / widget sinks) ----------------------

_LEVEL_STYLE = {"info": "info", "warning": "warning", "error": "error"}
_LEVEL_ICON = {"info": INFO, "warning": BULLET, "error": ERROR}


class TerminalUI:
    """Rich-based UI sinks: notifications print immediately, status and
    widget entries are kept by key and rendered on demand (prompt footer).
    """

    def __init__(self, target: Console | None = None) -> None:
        self.console = target or console
        self.statuses: dict[str, str] = {}
        self.widgets: dict[str, str] = {}

    def notify(self, text: str, level: str = "info") -> None:
        style = _LEVEL_STYLE.get(level, "info")
        icon = _LEVEL_ICON.get(level, INFO)
        self.console.print(f"[{style}]{icon} {escape(text)}[/{style}]", highlight=False)

    def set_status(self, key: str, value: str | None) -> None:
        if value is None:
            self.statuses.pop(key, None)
        else:
            self.statuses[key] = value

    def set_widget(self, key: str, value: str | None) -> None:
        if value is None:
            self.widgets.pop(key, None)
        else:
            self.widgets[key] = value

    def status_line(self) -> str:
        """Rich markup for the footer — statuses joined in insertion order."""
        return "  ".join(self.statuses.values())
