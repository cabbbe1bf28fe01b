import io
import os

import pytest

from minish.environment import Environment, ShellState
from minish.heredoc import (
    HeredocInterrupted,
    cleanup_heredocs,
    heredoc_path,
    is_delimiter,
    preprocess_heredocs,
    read_heredoc,
)
from minish.syntax import BinaryNode, CommandNode, NodeType, Redirection
from minish.tokens import TokenType


def _reader(lines):
    it = iter(lines)

    def read(prompt):
        return next(it, None)

    return read


def _interrupting(prompt):
    raise KeyboardInterrupt


def _shell():
    return ShellState(Environment(), heredoc_counter=700000 + os.getpid())


@pytest.mark.parametrize(
    "delimiter, line, expected",
    [
        ("EOF", "EOF", True),
        ("EOF", "EOFX", False),
        ("EOF", "EO", False),
        ("EOF\nX", "EOF\nY", True),
        (None, "x", False),
    ],
)
def test_is_delimiter(delimiter, line, expected):
    assert is_delimiter(delimiter, line) is expected


def test_heredoc_path():
    assert heredoc_path(3) == "/tmp/heredoc_3"


def test_read_heredoc_stops_at_delimiter():
    out = io.StringIO()
    lines = iter(["a", "b", "EOF", "c"])
    assert read_heredoc("EOF", out, lambda prompt: next(lines, None)) is True
    assert out.getvalue() == "a\nb\n"
    assert next(lines) == "c"


def test_read_heredoc_end_of_input():
    out = io.StringIO()
    assert read_heredoc("EOF", out, _reader(["only"])) is False
    assert out.getvalue() == "only\n"


def test_read_heredoc_interrupted():
    with pytest.raises(HeredocInterrupted):
        read_heredoc("EOF", io.StringIO(), _interrupting)


def test_read_heredoc_needs_delimiter():
    with pytest.raises(ValueError):
        read_heredoc(None, io.StringIO(), _reader([]))


def test_preprocess_and_cleanup_command():
    shell = _shell()
    start = shell.heredoc_counter
    redirection = Redirection(TokenType.HEREDOC, "EOF")
    node = CommandNode("cat", ["cat"], [redirection])
    preprocess_heredocs(node, shell, _reader(["hello", "EOF"]))
    try:
        assert redirection.type is TokenType.REDIRECTION_IN
        assert redirection.target == heredoc_path(start)
        assert shell.heredoc_counter == start + 1
        with open(redirection.target, encoding="utf-8") as handle:
            assert handle.read() == "hello\n"
    finally:
        cleanup_heredocs(node, shell)
    assert not os.path.exists(heredoc_path(start))
    assert shell.heredoc_counter == start


def test_preprocess_pipe_reads_both_sides():
    shell = _shell()
    start = shell.heredoc_counter
    left = CommandNode("cat", ["cat"], [Redirection(TokenType.HEREDOC, "A")])
    right = CommandNode("cat", ["cat"], [Redirection(TokenType.HEREDOC, "B")])
    node = BinaryNode(NodeType.PIPE, left, right)
    preprocess_heredocs(node, shell, _reader(["x", "A", "y", "B"]))
    try:
        assert shell.heredoc_counter == start + 2
        with open(left.redirections[0].target, encoding="utf-8") as handle:
            assert handle.read() == "x\n"
        with open(right.redirections[0].target, encoding="utf-8") as handle:
            assert handle.read() == "y\n"
    finally:
        cleanup_heredocs(node, shell)
    assert shell.heredoc_counter == start


def test_preprocess_leaves_other_redirections():
    shell = _shell()
    redirection = Redirection(TokenType.REDIRECTION_OUT, "file.txt")
    node = CommandNode("ls", ["ls"], [redirection])
    preprocess_heredocs(node, shell, _reader([]))
    assert redirection == Redirection(TokenType.REDIRECTION_OUT, "file.txt")
    cleanup_heredocs(node, shell)
    assert shell.heredoc_counter == _shell().heredoc_counter


def test_preprocess_interrupted_sets_status():
    shell = _shell()
    start = shell.heredoc_counter
    redirection = Redirection(TokenType.HEREDOC, "EOF")
    node = CommandNode("cat", ["cat"], [redirection])
    with pytest.raises(HeredocInterrupted):
        preprocess_heredocs(node, shell, _interrupting)
    assert shell.last_status == 130
    assert redirection.type is TokenType.HEREDOC
    assert not os.path.exists(heredoc_path(start))