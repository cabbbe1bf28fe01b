"""Reading here-documents into temporary files before a command runs."""

from __future__ import annotations

import contextlib
import os
import signal
import sys
from collections.abc import Callable, Iterator
from typing import TextIO

from minish.environment import ShellState
from minish.syntax import BinaryNode, CommandNode, Node, NodeType
from minish.tokens import TokenType

PROMPT = "\033[0;35mheredoc>\033[0m"
_PREFIX = "/tmp/heredoc_"

Reader = Callable[[str], "str | None"]


class HeredocInterrupted(Exception):
    """Raised when reading a here-document is interrupted by the user."""


def is_delimiter(delimiter: str | None, line: str | None) -> bool:
    """Return True if ``line`` ends the here-document started with ``delimiter``.

    A newline in the delimiter ends the comparison.
    """
    if delimiter is None or line is None:
        return False
    head, newline, _ = delimiter.partition("\n")
    if newline:
        return line[: len(head) + 1] == head + "\n"
    return line == delimiter


def heredoc_path(counter: int) -> str:
    """Return the temporary file used for here-document number ``counter``."""
    return f"{_PREFIX}{counter}"


def _read_line(prompt: str) -> str | None:
    try:
        return input(prompt)
    except EOFError:
        return None


@contextlib.contextmanager
def _sigint_raises() -> Iterator[None]:
    """Let Ctrl-C raise KeyboardInterrupt while the block runs."""
    try:
        previous = signal.signal(signal.SIGINT, signal.default_int_handler)
    except ValueError:
        previous = None
    try:
        yield
    finally:
        if previous is not None:
            signal.signal(signal.SIGINT, previous)


def read_heredoc(delimiter: str, out: TextIO, reader: Reader | None = None) -> bool:
    """Copy lines from ``reader`` to ``out`` until ``delimiter``.

    Returns True when the delimiter was read and False at end of input.
    Raises HeredocInterrupted if reading is interrupted.
    """
    if delimiter is None:
        raise ValueError("here-document needs a delimiter")
    reader = reader or _read_line
    with _sigint_raises():
        while True:
            try:
                line = reader(PROMPT)
            except KeyboardInterrupt as interrupt:
                raise HeredocInterrupted() from interrupt
            if line is None:
                print("warning: here-doc delimited by end-of-file", file=sys.stderr)
                return False
            if is_delimiter(delimiter, line):
                return True
            out.write(line + "\n")


def _fill_command(node: CommandNode, shell: ShellState, reader: Reader | None) -> None:
    for redirection in node.redirections:
        if redirection.type is not TokenType.HEREDOC:
            continue
        path = heredoc_path(shell.heredoc_counter)
        shell.heredoc_counter += 1
        with open(path, "w", encoding="utf-8") as handle:
            os.chmod(path, 0o644)
            try:
                read_heredoc(redirection.target, handle, reader)
            except HeredocInterrupted:
                shell.last_status = 130
                handle.close()
                with contextlib.suppress(OSError):
                    os.unlink(path)
                raise
        redirection.type = TokenType.REDIRECTION_IN
        redirection.target = path


def preprocess_heredocs(
    node: Node | None, shell: ShellState, reader: Reader | None = None
) -> None:
    """Read every here-document of a command or pipeline into a file.

    Each '<<' redirection becomes a '<' from its temporary file. Raises
    HeredocInterrupted, with the last status set to 130, on interruption.
    """
    if node is None:
        return
    if isinstance(node, CommandNode):
        _fill_command(node, shell, reader)
    elif isinstance(node, BinaryNode) and node.type is NodeType.PIPE:
        preprocess_heredocs(node.left, shell, reader)
        preprocess_heredocs(node.right, shell, reader)


def cleanup_heredocs(node: Node | None, shell: ShellState) -> None:
    """Remove the temporary files made by preprocess_heredocs."""
    if node is None:
        return
    if isinstance(node, CommandNode):
        for redirection in node.redirections:
            if redirection.type is TokenType.REDIRECTION_IN and redirection.target.startswith(
                _PREFIX
            ):
                with contextlib.suppress(OSError):
                    os.unlink(redirection.target)
                shell.heredoc_counter -= 1
    elif isinstance(node, BinaryNode) and node.type is NodeType.PIPE:
        cleanup_heredocs(node.left, shell)
        cleanup_heredocs(node.right, shell)