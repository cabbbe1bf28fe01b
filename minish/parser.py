"""Building a command tree from a token list.

Precedence from loosest to tightest: '||', '&&', '|', then simple
commands and parenthesised subshells. All operators group to the left.
"""

from __future__ import annotations

import os
from collections.abc import Iterable

from minish.environment import ShellState
from minish.syntax import BinaryNode, CommandNode, Node, NodeType, Redirection, SubshellNode
from minish.tokens import (
    Token,
    TokenType,
    is_cmd_valid,
    is_quote_or_word,
    is_redirection,
    is_token_valid_for_cmd,
)

_BUILTINS = frozenset({"echo", "cd", "pwd", "export", "unset", "exit", "env"})

_AFTER_LOGICAL = frozenset({TokenType.WORD, TokenType.L_PAREN})
_AFTER_PIPE = frozenset(
    {
        TokenType.WORD,
        TokenType.L_PAREN,
        TokenType.S_QUOTE,
        TokenType.D_QUOTE,
        TokenType.ENV_VAR,
        TokenType.REDIRECTION_IN,
        TokenType.REDIRECTION_OUT,
        TokenType.APPEND,
        TokenType.HEREDOC,
    }
)

_INCOMPLETE = "minishell: incomplete command"
_UNEXPECTED = "minishell: syntax error near unexpected token"


class ParseError(ValueError):
    """Raised when a token list does not form a valid command line."""


def resolve_executable(name: str | None, shell: ShellState) -> str | None:
    """Find ``name`` in the directories of PATH.

    Names starting with '/' or '.' are used as given, as is any name that
    no PATH directory holds as an executable file.
    """
    if name is None:
        return None
    if name.startswith(("/", ".")):
        return name
    path = shell.env.get("PATH")
    if path is None:
        return name
    for directory in filter(None, path.split(":")):
        candidate = f"{directory}/{name}"
        if os.access(candidate, os.X_OK):
            return candidate
    return name


class _Parser:
    def __init__(self, tokens: list[Token], shell: ShellState) -> None:
        self._tokens = tokens
        self._pos = 0
        self._shell = shell

    def _peek(self) -> Token | None:
        if self._pos < len(self._tokens):
            return self._tokens[self._pos]
        return None

    def _at(self, kind: TokenType) -> bool:
        token = self._peek()
        return token is not None and token.type is kind

    def _advance(self) -> None:
        self._pos += 1

    def _expect_one_of(self, allowed: frozenset[TokenType]) -> None:
        token = self._peek()
        if token is None or token.type not in allowed:
            raise ParseError(_INCOMPLETE)

    def parse_or(self) -> Node:
        node = self.parse_and()
        while self._at(TokenType.OR):
            self._advance()
            self._expect_one_of(_AFTER_LOGICAL)
            node = BinaryNode(NodeType.OR, node, self.parse_and())
        return node

    def parse_and(self) -> Node:
        node = self.parse_pipe()
        while self._at(TokenType.AND):
            self._advance()
            self._expect_one_of(_AFTER_LOGICAL)
            node = BinaryNode(NodeType.AND, node, self.parse_pipe())
        return node

    def parse_pipe(self) -> Node:
        node = self.parse_word()
        while self._at(TokenType.PIPE):
            self._advance()
            self._expect_one_of(_AFTER_PIPE)
            node = BinaryNode(NodeType.PIPE, node, self.parse_word())
        return node

    def parse_word(self) -> Node:
        token = self._peek()
        if token is None:
            raise ParseError("minishell: syntax error")
        if is_cmd_valid(token.type):
            return self._parse_command()
        if token.type is TokenType.L_PAREN:
            return self._parse_subshell()
        raise ParseError(_UNEXPECTED)

    def _redirection(self, kind: TokenType, message: str) -> Redirection:
        target = self._peek()
        if target is None or not is_quote_or_word(target.type):
            raise ParseError(message)
        self._advance()
        return Redirection(kind, target.value or "")

    def _parse_command(self) -> CommandNode:
        argv: list[str] = []
        redirections: list[Redirection] = []
        while (token := self._peek()) is not None and is_cmd_valid(token.type):
            self._advance()
            if is_token_valid_for_cmd(token.type):
                argv.append(token.value or "")
            else:
                redirections.append(
                    self._redirection(token.type, "minishell: syntax error")
                )
        executable = None
        if argv:
            name = argv[0]
            executable = name if name in _BUILTINS else resolve_executable(name, self._shell)
        return CommandNode(executable, argv, redirections)

    def _parse_subshell(self) -> SubshellNode:
        self._advance()
        if self._at(TokenType.R_PAREN):
            raise ParseError(_UNEXPECTED)
        body = self.parse_or()
        if not self._at(TokenType.R_PAREN):
            raise ParseError("Error: no right parenthesis")
        self._advance()
        redirections: list[Redirection] = []
        while (token := self._peek()) is not None and is_redirection(token.type):
            self._advance()
            redirections.append(
                self._redirection(
                    token.type, "minishell: Redirection without or wrong target"
                )
            )
        return SubshellNode(body, redirections)


def parse(tokens: Iterable[Token], shell: ShellState) -> Node:
    """Parse ``tokens`` into a command tree.

    Parsing stops after the first complete '||' list; tokens after it are
    not looked at. Raises ParseError on a malformed command line.
    """
    return _Parser(list(tokens), shell).parse_or()