import os
import json
from pathlib import Path
from typing import Literal
from pydantic import BaseModel, Field, field_validator, model_validator

APP_NAME = "co-ask"

# Read-only commands allowed through the shell tool while ask mode is on.
# Lexical filter only — not a sandbox. Prefix match: "git log" allows
# "git log --oneline" but not "git logx".
_DEFAULT_SAFE_COMMANDS: list[str] = [
    # Filesystem listing
    "ls", "tree", "find", "fd",
    # File reading
    "cat", "head", "tail",
    # Search
    "grep", "rg", "ag",
    # Text processing (read-only)
    "wc", "sort", "cut", "jq", "diff",
    # Output
    "echo", "printf",
    # Path resolution
    "pwd", "realpath", "readlink", "basename", "dirname",
    "which", "file", "stat",
    # System info
    "whoami", "uname", "date", "printenv", "id", "du", "df",
    # Git read-only
    "git status", "git diff", "git log", "git show", "git blame",
    "git ls-files", "git rev-parse", "git remote -v",
    "git branch --list", "git branch -a", "git branch -r", "git branch --show-current",
    "git tag --list", "git tag -l",
]

# XDG Paths - Explicit XDG resolution so ~/.config/ is used even on macOS
CONFIG_DIR = Path(os.getenv("XDG_CONFIG_HOME", Path.home() / ".config")) / APP_NAME
SETTINGS_FILE = CONFIG_DIR / "settings.json"


def _ensure_dirs() -> None:
    """Create the config directory (idempotent)."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)


class Settings(BaseModel):
    theme: Literal["light", "dark"] = Field(default="light")

    # Shell commands allowed while ask mode is active
    ask_safe_commands: list[str] = Field(default=_DEFAULT_SAFE_COMMANDS)
    # Tool whose "command" input is checked against ask_safe_commands
    shell_tool_name: str = Field(default="bash")

    @field_validator("ask_safe_commands", mode="before")
    @classmethod
    def _parse_safe_commands(cls, v: str | list[str]) -> list[str]:
        if isinstance(v, str):
            return [s.strip() for s in v.split(",") if s.strip()]
        return v

    @field_validator("shell_tool_name")
    @classmethod
    def _validate_shell_tool(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("shell_tool_name must not be empty")
        return v.strip()

    @model_validator(mode='before')
    @classmethod
    def fill_from_env(cls, data: dict) -> dict:
        """Env vars override all file-based values (highest precedence layer)."""
        env_map = {
            "theme": "CO_ASK_THEME",
            "ask_safe_commands": "CO_ASK_SAFE_COMMANDS",
            "shell_tool_name": "CO_ASK_SHELL_TOOL",
        }

        for field, env_var in env_map.items():
            val = os.getenv(env_var)
            if val:
                data[field] = val
        return data


def find_project_config() -> Path | None:
    """Return .co-ask/settings.json in cwd if it exists, else None."""
    candidate = Path.cwd() / ".co-ask" / "settings.json"
    return candidate if candidate.is_file() else None


def load_config() -> Settings:
    data: dict = {}

    # Layer 1: User config (~/.config/co-ask/settings.json)
    if SETTINGS_FILE.exists():
        with open(SETTINGS_FILE, "r") as f:
            try:
                data = json.load(f)
            except Exception as e:
                print(f"Error loading settings.json: {e}. Using defaults.")

    # Layer 2: Project config (<cwd>/.co-ask/settings.json) — shallow merge
    project_config = find_project_config()
    if project_config is not None:
        with open(project_config, "r") as f:
            try:
                data |= json.load(f)
            except Exception as e:
                print(f"Error loading project config {project_config}: {e}. Skipping.")

    # Layer 3: Env vars (handled by fill_from_env model_validator)
    return Settings.model_validate(data)


# Lazy settings singleton — directories created on first access, not at import time.
_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the global Settings instance, creating it on first call."""
    global _settings
    if _settings is None:
        _ensure_dirs()
        _settings = load_config()
    return _settings


def __getattr__(name: str):
    """Lazy module attribute — ``from co_ask.config import settings`` works without import-time side effects."""
    if name == "settings":
        return get_settings()
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
