"""The syntax tree a parsed command line is turned into."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Union

from minish.tokens import TokenType


class NodeType(Enum):
    """Kinds of nodes in a command tree."""

    CMD = auto()
    PIPE = auto()
    AND = auto()
    OR = auto()
    SUBSHELL = auto()


_BINARY_TYPES = frozenset({NodeType.PIPE, NodeType.AND, NodeType.OR})


@dataclass
class Redirection:
    """A redirection: its kind (<, >, >> or <<) and its target word."""

    type: TokenType
    target: str


@dataclass
class CommandNode:
    """A simple command: program, arguments and redirections.

    ``executable`` is None and ``argv`` empty when the command holds only
    redirections.
    """

    executable: str | None = None
    argv: list[str] = field(default_factory=list)
    redirections: list[Redirection] = field(default_factory=list)

    @property
    def type(self) -> NodeType:
        return NodeType.CMD


@dataclass
class BinaryNode:
    """A pipe, '&&' or '||' joining two subtrees."""

    type: NodeType
    left: Node
    right: Node

    def __post_init__(self) -> None:
        if self.type not in _BINARY_TYPES:
            raise ValueError(f"not a binary operator: {self.type}")


@dataclass
class SubshellNode:
    """A parenthesised command list run in a child shell."""

    body: Node
    redirections: list[Redirection] = field(default_factory=list)

    @property
    def type(self) -> NodeType:
        return NodeType.SUBSHELL


Node = Union[CommandNode, BinaryNode, SubshellNode]