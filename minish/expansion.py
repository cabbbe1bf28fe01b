"""Expansion of $NAME and $? inside words."""

from __future__ import annotations

import re

from minish.environment import ShellState
from minish.tokens import TokenType

_NAME = re.compile(r"[A-Za-z0-9_]+")
_DOLLAR = re.compile(r"\$(\?|[A-Za-z0-9_]+)")


def find_name(value: str, pos: int) -> str | None:
    """Return the variable name following the '$' at ``pos``, or None."""
    match = _NAME.match(value, pos + 1)
    return match.group(0) if match else None


def expand_word(value: str | None, shell: ShellState) -> str | None:
    """Replace $? and $NAME references in ``value``.

    Unset variables expand to an empty string; a '$' not followed by a
    name is kept as it is.
    """
    if value is None:
        return None

    def substitute(match: re.Match[str]) -> str:
        name = match.group(1)
        if name == "?":
            return str(shell.last_status)
        return shell.env.get(name) or ""

    return _DOLLAR.sub(substitute, value)


def expand_argument(
    value: str | None, token_type: TokenType, shell: ShellState
) -> str | None:
    """Turn a token's text into the argument it stands for."""
    if value is None:
        return None
    if token_type is TokenType.D_QUOTE:
        return expand_word(value.strip('"'), shell)
    if token_type is TokenType.S_QUOTE:
        return value.strip("'")
    if token_type in (TokenType.ENV_VAR, TokenType.WORD):
        return expand_word(value, shell)
    return value