"""Running a command tree with forks, pipes, redirections and exit statuses."""

from __future__ import annotations

import os
import signal
import sys
from collections.abc import Callable, Iterable
from typing import NoReturn

from minish.builtins import ShellExit, cd, echo, env, exit_builtin, export, is_builtin, pwd, unset
from minish.environment import ShellState
from minish.heredoc import HeredocInterrupted, cleanup_heredocs, preprocess_heredocs
from minish.syntax import BinaryNode, CommandNode, Node, NodeType, Redirection, SubshellNode
from minish.tokens import TokenType

_REDIRECT_MODES: dict[TokenType, tuple[int, int]] = {
    TokenType.APPEND: (os.O_WRONLY | os.O_CREAT | os.O_APPEND, 1),
    TokenType.REDIRECTION_OUT: (os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 1),
    TokenType.REDIRECTION_IN: (os.O_RDONLY, 0),
}


def exit_status_from_wait(status: int) -> int:
    """Turn a wait status into a shell exit status (128 + signal if killed)."""
    if os.WIFEXITED(status):
        return os.WEXITSTATUS(status)
    if os.WIFSIGNALED(status):
        return 128 + os.WTERMSIG(status)
    return -1


def apply_redirections(redirections: Iterable[Redirection]) -> None:
    """Point standard input and output at the redirection targets, in order.

    Raises OSError if a target cannot be opened.
    """
    for redirection in redirections:
        mode = _REDIRECT_MODES.get(redirection.type)
        if mode is None:
            continue
        flags, std_fd = mode
        fd = os.open(redirection.target, flags, 0o644)
        try:
            os.dup2(fd, std_fd)
        finally:
            os.close(fd)


def _report_redirection(error: OSError) -> None:
    print(f"minishell::: {error.filename or ''}: {error.strerror}", file=sys.stderr)


def _close_fds(*fds: int) -> None:
    for fd in fds:
        if fd != -1:
            os.close(fd)


def _redirect_stdio(in_fd: int, out_fd: int) -> None:
    if in_fd != -1:
        os.dup2(in_fd, 0)
        os.close(in_fd)
    if out_fd != -1:
        os.dup2(out_fd, 1)
        os.close(out_fd)


def _fork() -> int:
    """Fork with flushed streams; return -1 after reporting a failure."""
    sys.stdout.flush()
    sys.stderr.flush()
    try:
        return os.fork()
    except OSError as error:
        print(f"fork: {error.strerror}", file=sys.stderr)
        return -1


def _run_child(work: Callable[[], int]) -> NoReturn:
    """Run ``work`` in a forked child and leave with its status."""
    status = 1
    try:
        status = work()
    except ShellExit as request:
        status = request.status
    except BaseException as error:  # the child must never return to the caller
        print(f"minishell: {error}", file=sys.stderr)
        status = 1
    finally:
        try:
            sys.stdout.flush()
            sys.stderr.flush()
        finally:
            os._exit(status & 0xFF)


def _wait_child(pid: int) -> int:
    _, status = os.waitpid(pid, 0)
    if os.WIFSIGNALED(status):
        if os.WTERMSIG(status) == signal.SIGQUIT:
            print("Quit (core dumped)")
        elif os.WTERMSIG(status) == signal.SIGINT:
            print()
    return exit_status_from_wait(status)


def _exec_external(node: CommandNode, shell: ShellState) -> int:
    executable = node.executable
    if executable is None:
        return 1
    signal.signal(signal.SIGQUIT, signal.SIG_DFL)
    environment = dict(entry.partition("=")[::2] for entry in shell.env)
    try:
        os.execve(executable, node.argv, environment)
    except OSError as error:
        if not executable:
            return 0
        print(f"{executable}: {error.strerror}", file=sys.stderr)
        if os.path.isdir(executable):
            return 126
        if node.argv and node.argv[0]:
            return 127
    return 1


def _command_child(node: CommandNode, shell: ShellState, in_fd: int, out_fd: int) -> int:
    try:
        apply_redirections(node.redirections)
    except OSError as error:
        _report_redirection(error)
        return 1
    try:
        _redirect_stdio(in_fd, out_fd)
    except OSError as error:
        print(f"dup2: {error.strerror}", file=sys.stderr)
        return 1
    name = node.argv[0] if node.argv else None
    if is_builtin(name):
        with open(1, "w", closefd=False) as out:
            if name == "echo":
                echo(node.argv, out)
            elif name == "pwd":
                pwd(out)
            elif name == "env":
                env(shell, out)
        return 0
    return _exec_external(node, shell)


def _execute_command(node: CommandNode, shell: ShellState, in_fd: int, out_fd: int) -> int:
    try:
        preprocess_heredocs(node, shell)
    except HeredocInterrupted:
        return 130
    argv = node.argv
    name = argv[0] if argv else None
    if name == "cd":
        return cd(argv, shell)
    status = 0
    if name == "exit":
        status = exit_builtin(argv)
    elif name == "export":
        status = export(argv, shell)
    elif name == "unset":
        status = unset(argv, shell)
    if status:
        return status
    pid = _fork()
    if pid == -1:
        return -1
    if pid == 0:
        _run_child(lambda: _command_child(node, shell, in_fd, out_fd))
    _close_fds(in_fd, out_fd)
    return _wait_child(pid)


def _execute_subshell(node: SubshellNode, shell: ShellState, in_fd: int, out_fd: int) -> int:
    def work() -> int:
        try:
            apply_redirections(node.redirections)
            _redirect_stdio(in_fd, out_fd)
        except OSError as error:
            _report_redirection(error)
            return 1
        return execute(node.body, shell)

    pid = _fork()
    if pid == -1:
        return -1
    if pid == 0:
        _run_child(work)
    _, status = os.waitpid(pid, 0)
    _close_fds(in_fd, out_fd)
    return exit_status_from_wait(status)


def _execute_pipe(node: BinaryNode, shell: ShellState, in_fd: int, out_fd: int) -> int:
    try:
        preprocess_heredocs(node, shell)
    except HeredocInterrupted:
        return -1
    try:
        read_end, write_end = os.pipe()
    except OSError as error:
        print(f"pipe: {error.strerror}", file=sys.stderr)
        return -1

    def left_side() -> int:
        os.close(read_end)
        os.dup2(write_end, 1)
        os.close(write_end)
        return execute(node.left, shell, in_fd, -1)

    def right_side() -> int:
        os.close(write_end)
        os.dup2(read_end, 0)
        os.close(read_end)
        return execute(node.right, shell, -1, out_fd)

    left_pid = _fork()
    if left_pid == -1:
        _close_fds(read_end, write_end)
        return -1
    if left_pid == 0:
        _run_child(left_side)
    right_pid = _fork()
    if right_pid == -1:
        _close_fds(read_end, write_end)
        os.kill(left_pid, signal.SIGTERM)
        return -1
    if right_pid == 0:
        _run_child(right_side)
    _close_fds(read_end, write_end)
    os.waitpid(left_pid, 0)
    _, right_status = os.waitpid(right_pid, 0)
    cleanup_heredocs(node, shell)
    return exit_status_from_wait(right_status)


def execute(node: Node, shell: ShellState, in_fd: int = -1, out_fd: int = -1) -> int:
    """Run ``node`` and return its exit status.

    ``in_fd`` and ``out_fd`` replace standard input and output of the
    command when not -1; the executor closes them once they are used.
    Raises ShellExit when the exit builtin runs in the shell itself.
    """
    if isinstance(node, CommandNode):
        return _execute_command(node, shell, in_fd, out_fd)
    if isinstance(node, SubshellNode):
        return _execute_subshell(node, shell, in_fd, out_fd)
    if isinstance(node, BinaryNode):
        if node.type is NodeType.PIPE:
            return _execute_pipe(node, shell, in_fd, out_fd)
        status = execute(node.left, shell, in_fd, out_fd)
        if (node.type is NodeType.AND and status == 0) or (
            node.type is NodeType.OR and status != 0
        ):
            status = execute(node.right, shell, in_fd, out_fd)
        return status
    return -1