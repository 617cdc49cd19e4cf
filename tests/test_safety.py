"""Functional tests for ask-mode shell command classification."""

from co_ask._safety import is_safe_command
from co_ask.config import _DEFAULT_SAFE_COMMANDS

_SAFE_LIST = _DEFAULT_SAFE_COMMANDS


def test_safe_command_simple():
    """Allowlisted listing, reading, searching and path commands pass."""
    assert is_safe_command("ls", _SAFE_LIST) is True
    assert is_safe_command("ls -la", _SAFE_LIST) is True
    assert is_safe_command("cat /etc/hosts", _SAFE_LIST) is True
    assert is_safe_command("grep -rn TODO src", _SAFE_LIST) is True
    assert is_safe_command("rg --files", _SAFE_LIST) is True
    assert is_safe_command("pwd", _SAFE_LIST) is True
    assert is_safe_command("head -n 20 README.md", _SAFE_LIST) is True


def test_safe_command_surrounding_whitespace_trimmed():
    assert is_safe_command("   ls -la   ", _SAFE_LIST) is True
    assert is_safe_command("git   status", _SAFE_LIST) is True


def test_unsafe_commands_blocked():
    """Anything not allowlisted is blocked — fail closed."""
    assert is_safe_command("rm -rf /", _SAFE_LIST) is False
    assert is_safe_command("mv a b", _SAFE_LIST) is False
    assert is_safe_command("cp a b", _SAFE_LIST) is False
    assert is_safe_command("python script.py", _SAFE_LIST) is False
    assert is_safe_command("./deploy.sh", _SAFE_LIST) is False
    assert is_safe_command("sudo ls", _SAFE_LIST) is False
    assert is_safe_command("/bin/rm file", _SAFE_LIST) is False


def test_safe_command_multi_word_prefix():
    """Multi-word prefix like 'git status' matches, but 'git push' does not."""
    assert is_safe_command("git status", _SAFE_LIST) is True
    assert is_safe_command("git status --short", _SAFE_LIST) is True
    assert is_safe_command("git diff HEAD~1", _SAFE_LIST) is True
    assert is_safe_command("git log --oneline -n 5", _SAFE_LIST) is True
    assert is_safe_command("git push origin main", _SAFE_LIST) is False
    assert is_safe_command("git commit -m 'test'", _SAFE_LIST) is False
    assert is_safe_command("git", _SAFE_LIST) is False


def test_safe_command_chaining_rejected():
    """Chaining, piping, redirection and substitution are always blocked."""
    assert is_safe_command("ls; rm -rf /", _SAFE_LIST) is False
    assert is_safe_command("cat file && rm file", _SAFE_LIST) is False
    assert is_safe_command("ls || echo fail", _SAFE_LIST) is False
    assert is_safe_command("ls | wc -l", _SAFE_LIST) is False
    assert is_safe_command("echo `whoami`", _SAFE_LIST) is False
    assert is_safe_command("echo $(whoami)", _SAFE_LIST) is False
    assert is_safe_command("ls & rm -rf /", _SAFE_LIST) is False
    assert is_safe_command("ls > /tmp/out", _SAFE_LIST) is False
    assert is_safe_command("ls >> /tmp/out", _SAFE_LIST) is False
    assert is_safe_command("sort < /etc/passwd", _SAFE_LIST) is False
    assert is_safe_command("cat << EOF", _SAFE_LIST) is False
    assert is_safe_command("ls\nrm -rf /", _SAFE_LIST) is False


def test_chaining_rejected_even_when_every_segment_is_safe():
    assert is_safe_command("ls; pwd", _SAFE_LIST) is False
    assert is_safe_command("cat a.txt | grep foo", _SAFE_LIST) is False


def test_safe_command_partial_name_no_match():
    """A command starting with a safe prefix but not followed by space should not match."""
    assert is_safe_command("lsblk", _SAFE_LIST) is False
    assert is_safe_command("caterpillar", _SAFE_LIST) is False
    assert is_safe_command("git statusx", _SAFE_LIST) is False


def test_empty_and_malformed_input_blocked():
    """Empty, blank and non-string input is blocked without raising."""
    assert is_safe_command("", _SAFE_LIST) is False
    assert is_safe_command("   ", _SAFE_LIST) is False
    assert is_safe_command("\t\n", _SAFE_LIST) is False
    assert is_safe_command(None, _SAFE_LIST) is False
    assert is_safe_command(42, _SAFE_LIST) is False
    assert is_safe_command("ls", []) is False


def test_mutating_options_blocked():
    """Read-only commands become unsafe with write/exec options."""
    assert is_safe_command("find . -name '*.py'", _SAFE_LIST) is True
    assert is_safe_command("find . -name '*.pyc' -delete", _SAFE_LIST) is False
    assert is_safe_command("find . -exec rm {} +", _SAFE_LIST) is False
    assert is_safe_command("fd -e py", _SAFE_LIST) is True
    assert is_safe_command("fd -x rm", _SAFE_LIST) is False
    assert is_safe_command("fd --exec=rm", _SAFE_LIST) is False
    assert is_safe_command("sort -k2 data.csv", _SAFE_LIST) is True
    assert is_safe_command("sort -ro out.txt data.csv", _SAFE_LIST) is False
    assert is_safe_command("rg --pre ./evil.sh foo", _SAFE_LIST) is False
    assert is_safe_command("git diff --output=patch.diff", _SAFE_LIST) is False
    assert is_safe_command("sort --compress-program=sh big.txt", _SAFE_LIST) is False
    assert is_safe_command("ag --pager 'rm -rf build' foo", _SAFE_LIST) is False
    assert is_safe_command("ag foo src", _SAFE_LIST) is True
    assert is_safe_command("date -s 2020-01-01", _SAFE_LIST) is False
    assert is_safe_command("date --set=2020-01-01", _SAFE_LIST) is False
    assert is_safe_command("date -u", _SAFE_LIST) is True
    assert is_safe_command("file -C -m mymagic", _SAFE_LIST) is False
    assert is_safe_command("file -b setup.cfg", _SAFE_LIST) is True


def test_git_branch_and_tag_listing_only():
    assert is_safe_command("git branch -a", _SAFE_LIST) is True
    assert is_safe_command("git branch --show-current", _SAFE_LIST) is True
    assert is_safe_command("git branch -a -D feature", _SAFE_LIST) is False
    assert is_safe_command("git branch feature", _SAFE_LIST) is False
    assert is_safe_command("git tag -l 'v1.*'", _SAFE_LIST) is True
    assert is_safe_command("git tag -l -d v1.0", _SAFE_LIST) is False
    assert is_safe_command("git tag v2.0", _SAFE_LIST) is False
    assert is_safe_command("git remote -v", _SAFE_LIST) is True
    assert is_safe_command("git remote -v add evil https://x", _SAFE_LIST) is False


def test_custom_allowlist():
    """Caller-supplied lists replace the defaults; entries are whitespace-normalized."""
    custom = ["make  test", "ls"]
    assert is_safe_command("make test", custom) is True
    assert is_safe_command("make install", custom) is False
    assert is_safe_command("cat file", custom) is False
