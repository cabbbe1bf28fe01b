"""Filename expansion of words containing '*'."""

from __future__ import annotations

import os
import sys
from enum import Enum, auto
from itertools import takewhile
from typing import Callable

from minish.tokens import Token, TokenType

_SPACES = " \t\n\v\f\r"
_SPECIAL = "<>|&()\"'"


class WildcardType(Enum):
    """Where the '*' characters sit in a word."""

    NONE = auto()
    ONLY = auto()
    START = auto()
    END = auto()


def _is_word_char(char: str) -> bool:
    return bool(char) and char not in _SPACES and char not in _SPECIAL


def _span(word: str, start: int, pred: Callable[[str], bool]) -> int:
    """Return the index after the run of word characters satisfying ``pred``."""
    run = takewhile(lambda c: _is_word_char(c) and pred(c), word[start:])
    return start + sum(1 for _ in run)


def _is_star(char: str) -> bool:
    return char == "*"


def _not_star(char: str) -> bool:
    return char != "*"


def match_pattern(name: str, pattern: str) -> bool:
    """Return True if ``name`` matches ``pattern``, where '*' matches any run."""
    if "*" not in pattern:
        return name == pattern
    first, *middle, last = pattern.split("*")
    if len(name) < len(first) + len(last):
        return False
    if not (name.startswith(first) and name.endswith(last)):
        return False
    pos, end = len(first), len(name) - len(last)
    for part in middle:
        found = name.find(part, pos, end)
        if found < 0:
            return False
        pos = found + len(part)
    return True


def expand_wildcard(pattern: str, directory: str = ".") -> list[Token]:
    """Return WORD tokens for the directory entries matching ``pattern``.

    The listing includes '.' and '..' as a directory read does; names are
    returned sorted. Raises OSError if the directory cannot be read.
    """
    names = [".", "..", *os.listdir(directory)]
    return [
        Token(TokenType.WORD, name)
        for name in sorted(names)
        if match_pattern(name, pattern)
    ]


def is_blank_line(line: str) -> bool:
    """Return True if ``line`` is empty or holds only whitespace."""
    return all(char in _SPACES for char in line)


def find_wildcard_type(word: str) -> WildcardType:
    """Classify a word by leading stars, text, and trailing stars."""
    stars = _span(word, 0, _is_star)
    text_end = _span(word, stars, _not_star)
    trailing = _span(word, text_end, _is_star)
    if stars:
        return WildcardType.START if text_end > stars else WildcardType.ONLY
    if trailing > text_end:
        return WildcardType.END
    return WildcardType.NONE


def list_matching(word: str, directory: str = ".") -> tuple[list[Token], int]:
    """Match the visible entries of ``directory`` against a simple wildcard.

    ``*text`` keeps names ending in text, ``text*`` names starting with it and
    ``*`` every name. Hidden names are skipped. Returns the WORD tokens, sorted
    by name, and the number of characters of ``word`` the wildcard took up.
    Raises OSError if the directory cannot be read.
    """
    kind = find_wildcard_type(word) if word else WildcardType.NONE
    stars = _span(word, 0, _is_star)
    text_end = _span(word, stars, _not_star)
    text = word[stars:text_end]
    if kind in (WildcardType.START, WildcardType.END):
        consumed = _span(word, text_end, _is_star)
    elif kind is WildcardType.ONLY:
        consumed = stars
    else:
        consumed = 0

    def accepts(name: str) -> bool:
        if kind is WildcardType.START:
            return name.endswith(text)
        if kind is WildcardType.END:
            return name.startswith(text)
        return kind is WildcardType.ONLY

    matches: list[Token] = []
    with os.scandir(directory) as entries:
        for entry in sorted(entries, key=lambda e: e.name):
            try:
                entry.stat()
            except OSError as error:
                print(f"stat: {error.strerror}", file=sys.stderr)
                continue
            if entry.name.startswith("."):
                continue
            if accepts(entry.name):
                matches.append(Token(TokenType.WORD, entry.name))
    return matches, consumed