import pytest

from minish.syntax import BinaryNode, CommandNode, NodeType, Redirection, SubshellNode
from minish.tokens import TokenType


def test_command_node_defaults_are_empty():
    node = CommandNode()
    assert node.executable is None
    assert node.argv == []
    assert node.redirections == []
    assert node.type is NodeType.CMD


def test_command_nodes_do_not_share_lists():
    first = CommandNode()
    second = CommandNode()
    first.argv.append("ls")
    assert second.argv == []


@pytest.mark.parametrize("kind", [NodeType.PIPE, NodeType.AND, NodeType.OR])
def test_binary_node_accepts_operators(kind):
    left = CommandNode("a", ["a"])
    right = CommandNode("b", ["b"])
    node = BinaryNode(kind, left, right)
    assert node.type is kind
    assert node.left is left
    assert node.right is right


@pytest.mark.parametrize("kind", [NodeType.CMD, NodeType.SUBSHELL])
def test_binary_node_rejects_non_operators(kind):
    with pytest.raises(ValueError):
        BinaryNode(kind, CommandNode(), CommandNode())


def test_subshell_node_holds_body_and_redirections():
    body = CommandNode("ls", ["ls"])
    redirection = Redirection(TokenType.REDIRECTION_OUT, "out")
    node = SubshellNode(body, [redirection])
    assert node.type is NodeType.SUBSHELL
    assert node.body is body
    assert node.redirections == [Redirection(TokenType.REDIRECTION_OUT, "out")]


def test_redirection_can_be_rewritten():
    redirection = Redirection(TokenType.HEREDOC, "EOF")
    redirection.type = TokenType.REDIRECTION_IN
    redirection.target = "/tmp/heredoc_0"
    assert redirection == Redirection(TokenType.REDIRECTION_IN, "/tmp/heredoc_0")