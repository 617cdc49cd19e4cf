"""Shell command safety classification for ask mode."""

from collections.abc import Sequence
from dataclasses import dataclass

# Single-char ops also catch doubled forms (& catches &&, > catches >>, etc.)
_CHAIN_OPERATORS = (";", "&", "|", ">", "<", "`", "$(", "\n", "\r")


@dataclass(frozen=True)
class _FlagRule:
    """Options that make an otherwise read-only command write or execute."""

    words: tuple[str, ...] = ()  # whole-token options, also "--opt=value"
    letters: str = ""  # short options, matched inside clusters like "-xo"

    def matches(self, args: list[str]) -> bool:
        for arg in args:
            for word in self.words:
                if arg == word or arg.startswith(word + "="):
                    return True
            if self.letters and arg.startswith("-") and not arg.startswith("--"):
                if any(ch in self.letters for ch in arg[1:]):
                    return True
        return False


_MUTATING_FLAGS: dict[str, _FlagRule] = {
    "find": _FlagRule(words=(
        "-delete", "-exec", "-execdir", "-ok", "-okdir",
        "-fprint", "-fprint0", "-fprintf", "-fls",
    )),
    "fd": _FlagRule(words=("--exec", "--exec-batch"), letters="xX"),
    "sort": _FlagRule(words=("--output", "--compress-program"), letters="o"),
    "tree": _FlagRule(letters="o"),
    "rg": _FlagRule(words=("--pre",)),
    "ag": _FlagRule(words=("--pager",)),
    "date": _FlagRule(words=("--set",), letters="s"),
    "file": _FlagRule(words=("--compile",), letters="C"),
    "git branch": _FlagRule(
        words=(
            "--delete", "--move", "--copy", "--force", "--set-upstream-to",
            "--unset-upstream", "--edit-description", "--track",
        ),
        letters="dDmMcCfu",
    ),
    "git tag": _FlagRule(
        words=("--delete", "--annotate", "--sign", "--force", "--message", "--file", "--edit"),
        letters="adfmsuFe",
    ),
    "git remote": _FlagRule(words=(
        "add", "remove", "rm", "rename", "set-url", "set-head", "set-branches", "prune", "update",
    )),
    "git diff": _FlagRule(words=("--output",)),
    "git log": _FlagRule(words=("--output",)),
    "git show": _FlagRule(words=("--output",)),
}


def _match_prefix(tokens: list[str], safe_commands: Sequence[str]) -> str | None:
    """Return the longest allowlist entry the token list starts with."""
    normalized = [" ".join(p.split()) for p in safe_commands if isinstance(p, str)]
    for prefix in sorted(normalized, key=len, reverse=True):
        words = prefix.split()
        if words and tokens[:len(words)] == words:
            return prefix
    return None


def is_safe_command(command: str, safe_commands: Sequence[str]) -> bool:
    """Check if command starts with an allowlisted prefix and has no shell chaining.

    Best-effort lexical filter, not a security boundary. Anything that cannot
    be classified is unsafe.
    """
    if not isinstance(command, str):
        return False
    cmd = command.strip()
    if not cmd:
        return False
    # Chained commands are rejected outright, even when every segment is safe.
    if any(op in cmd for op in _CHAIN_OPERATORS):
        return False

    tokens = cmd.split()
    prefix = _match_prefix(tokens, safe_commands)
    if prefix is None:
        return False

    depth = len(prefix.split())
    args = tokens[depth:]
    # "git branch -a" is governed by the "git branch" rule as well
    for n in range(depth, 0, -1):
        rule = _MUTATING_FLAGS.get(" ".join(tokens[:n]))
        if rule is not None and rule.matches(args):
            return False
    return True
