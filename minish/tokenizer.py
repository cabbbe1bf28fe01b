"""Splitting a command line into tokens.

Operators become their own tokens, and words are returned already expanded.
Expansion covers quotes, $NAME and $?, and '*' filename patterns.
"""

from __future__ import annotations

import sys

from minish.environment import ShellState
from minish.expansion import expand_word
from minish.tokens import Token, TokenType
from minish.wildcard import expand_wildcard, is_blank_line

_BLANKS = " \t\n\v\f\r"
_SPECIAL = "<>|&()\"'"
_WORD_STOP = "<>|&()"

# Two-character operators come first so that "<<" is not read as two "<".
_OPERATORS: tuple[tuple[str, TokenType], ...] = (
    ("<<", TokenType.HEREDOC),
    (">>", TokenType.APPEND),
    ("&&", TokenType.AND),
    ("||", TokenType.OR),
    ("<", TokenType.REDIRECTION_IN),
    (">", TokenType.REDIRECTION_OUT),
    ("|", TokenType.PIPE),
    ("(", TokenType.L_PAREN),
    (")", TokenType.R_PAREN),
)


class TokenizeError(ValueError):
    """Raised when a command line cannot be split into tokens."""


def is_blank(char: str) -> bool:
    """Return True for space, tab, newline, vertical tab, form feed and CR."""
    return bool(char) and char in _BLANKS


def is_not_special_char(char: str) -> bool:
    """Return True for a character that may stand in an unquoted plain word."""
    return bool(char) and not is_blank(char) and char not in _SPECIAL


def _is_word_char(char: str) -> bool:
    return bool(char) and not is_blank(char) and char not in _WORD_STOP


def is_wildcard_present(word: str) -> bool:
    """Return True if the leading unquoted run of ``word`` contains '*'."""
    for char in word:
        if not is_not_special_char(char):
            return False
        if char == "*":
            return True
    return False


def _skip_blanks(line: str, pos: int) -> int:
    while pos < len(line) and is_blank(line[pos]):
        pos += 1
    return pos


def _scan_plain(line: str, pos: int) -> int:
    """Return the end of the run of unquoted, non-special characters."""
    while pos < len(line) and is_not_special_char(line[pos]):
        pos += 1
    return pos


def _join(final: str | None, piece: str) -> str:
    return piece if final is None else final + piece


def _quoted(line: str, pos: int, quote: str) -> tuple[str, int]:
    """Return the text inside the quote at ``pos`` and the index after it."""
    close = line.find(quote, pos + 1)
    if close < 0:
        raise TokenizeError("Error: unmatched quotes")
    return line[pos + 1:close], close + 1


def _read_quotes(
    line: str, pos: int, shell: ShellState, final: str | None
) -> tuple[int, str | None]:
    if line.startswith('"', pos):
        content, pos = _quoted(line, pos, '"')
        final = _join(final, expand_word(content, shell) or "")
    if line.startswith("'", pos):
        content, pos = _quoted(line, pos, "'")
        final = _join(final, content)
    return pos, final


def _append_word(tokens: list[Token], word: str, wildcard: bool) -> None:
    if wildcard:
        try:
            matches = expand_wildcard(word)
        except OSError as error:
            print(f"opendir: {error.strerror}", file=sys.stderr)
            matches = []
        if matches:
            tokens.extend(matches)
            return
    tokens.append(Token(TokenType.WORD, word))


def _read_word(line: str, pos: int, shell: ShellState, tokens: list[Token]) -> int:
    """Read one word starting at ``pos``, append its tokens, return the new index."""
    start = pos
    final: str | None = None
    wildcard = False
    while pos < len(line) and _is_word_char(line[pos]):
        end = _scan_plain(line, pos)
        wildcard = wildcard or is_wildcard_present(line[start:])
        if end > pos:
            expanded = expand_word(line[pos:end], shell)
            if expanded:
                final = _join(final, expanded)
        pos, final = _read_quotes(line, end, shell, final)
    if line.startswith("&", pos) and not line.startswith("&&", pos):
        raise TokenizeError("Error: single '&' is not allowed")
    if final is not None:
        _append_word(tokens, final, wildcard)
    return pos


def _match_operator(line: str, pos: int) -> tuple[str, TokenType] | None:
    for text, kind in _OPERATORS:
        if line.startswith(text, pos):
            return text, kind
    return None


def tokenize(line: str, shell: ShellState) -> list[Token]:
    """Split ``line`` into tokens ending with an END token.

    Returns an empty list when the line is blank or yields no tokens.
    Raises TokenizeError on unmatched quotes or parentheses and on a
    lone '&'.
    """
    if is_blank_line(line):
        return []
    tokens: list[Token] = []
    depth = 0
    pos = 0
    while pos < len(line):
        pos = _skip_blanks(line, pos)
        operator = _match_operator(line, pos)
        if operator is not None:
            text, kind = operator
            if kind is TokenType.L_PAREN:
                depth += 1
            elif kind is TokenType.R_PAREN:
                if depth == 0:
                    raise TokenizeError("Error: unmatched parenthesis")
                depth -= 1
            tokens.append(Token(kind, text))
            pos += len(text)
        pos = _skip_blanks(line, pos)
        pos = _read_word(line, pos, shell, tokens)
    if not tokens:
        return []
    if depth:
        raise TokenizeError("Error: unmatched parenthesis")
    tokens.append(Token(TokenType.END))
    return tokens