"""Layered ``.env`` loading for the rpm command.

Sources, lowest precedence first: ``$XDG_CONFIG_HOME/rpm/config.env``, then
``./.env``. Variables already present in the process environment always win,
so a shell ``export`` overrides both files.
"""

from __future__ import annotations

import os
from pathlib import Path

QUOTES = ('"', "'")


def config_dir() -> Path:
    """Directory holding the user-level ``config.env``."""
    xdg = os.environ.get("XDG_CONFIG_HOME", "").strip()
    root = Path(xdg) if xdg else Path.home() / ".config"
    return root / "rpm"


def config_files() -> list[Path]:
    """Candidate files in the order they are applied."""
    return [config_dir() / "config.env", Path.cwd() / ".env"]


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] in QUOTES and value[-1] == value[0]:
        return value[1:-1]
    # A '#' starts a comment only at the beginning or after whitespace.
    for index, char in enumerate(value):
        if char == "#" and (index == 0 or value[index - 1].isspace()):
            return value[:index].rstrip()
    return value


def _parse_line(raw: str) -> tuple[str, str] | None:
    line = raw.strip()
    if not line or line.startswith("#"):
        return None
    line = line.removeprefix("export ").strip()
    key, sep, value = line.partition("=")
    key = key.strip()
    if not sep or not key:
        return None
    return key, _unquote(value.strip())


def parse_env_file(path: str | Path) -> dict[str, str]:
    """Read ``KEY=value`` pairs from ``path``; a missing file yields ``{}``.

    Handles ``export`` prefixes, single or double quotes, full-line comments
    and inline comments after unquoted values. Malformed lines are skipped.
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return {}
    pairs = (_parse_line(line) for line in text.splitlines())
    return dict(pair for pair in pairs if pair is not None)


def load_config() -> dict[str, str]:
    """Apply the config files to ``os.environ`` and return what was set."""
    merged: dict[str, str] = {}
    for path in config_files():
        merged.update(parse_env_file(path))

    applied = {key: value for key, value in merged.items() if key not in os.environ}
    os.environ.update(applied)
    return applied
