"""Token kinds produced by the tokenizer and predicates over them."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class TokenType(Enum):
    """Kinds of lexical tokens recognised on a command line."""

    WORD = auto()
    REDIRECTION_IN = auto()
    REDIRECTION_OUT = auto()
    APPEND = auto()
    HEREDOC = auto()
    PIPE = auto()
    AND = auto()
    OR = auto()
    L_PAREN = auto()
    R_PAREN = auto()
    D_QUOTE = auto()
    S_QUOTE = auto()
    ENV_VAR = auto()
    WILDCARD = auto()
    END = auto()


@dataclass
class Token:
    """A single token: its kind and the text it was made from."""

    type: TokenType
    value: str | None = None


_REDIRECTIONS = frozenset(
    {
        TokenType.REDIRECTION_IN,
        TokenType.REDIRECTION_OUT,
        TokenType.APPEND,
        TokenType.HEREDOC,
    }
)

_QUOTE_OR_WORD = frozenset({TokenType.WORD, TokenType.S_QUOTE, TokenType.D_QUOTE})

_CMD_WORDS = frozenset(
    {TokenType.WORD, TokenType.ENV_VAR, TokenType.D_QUOTE, TokenType.S_QUOTE}
)

_FIRST_VALID = _REDIRECTIONS | {TokenType.WORD, TokenType.L_PAREN, TokenType.R_PAREN}


def is_first_token_valid(token_type: TokenType) -> bool:
    """Return True if a command line may start with this token kind."""
    return token_type in _FIRST_VALID


def is_redirection(token_type: TokenType) -> bool:
    """Return True for <, >, >> and <<."""
    return token_type in _REDIRECTIONS


def is_quote_or_word(token_type: TokenType) -> bool:
    """Return True for plain words and quoted strings."""
    return token_type in _QUOTE_OR_WORD


def is_token_valid_for_cmd(token_type: TokenType) -> bool:
    """Return True if the token becomes an argument of a simple command."""
    return token_type in _CMD_WORDS


def is_cmd_valid(token_type: TokenType) -> bool:
    """Return True if the token may appear inside a simple command."""
    return is_token_valid_for_cmd(token_type) or is_redirection(token_type)