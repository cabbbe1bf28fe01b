"""The interactive read-tokenize-parse-execute loop."""

from __future__ import annotations

import contextlib
import os
import signal
import sys
from collections.abc import Iterator

from minish.builtins import ShellExit
from minish.environment import Environment, ShellState
from minish.executor import execute
from minish.parser import ParseError, parse
from minish.tokenizer import TokenizeError, tokenize
from minish.tokens import TokenType, is_first_token_valid

PROMPT = "minishell> "


def update_pwd(shell: ShellState) -> int:
    """Set PWD to the working directory, going back to OLDPWD if it is gone."""
    try:
        shell.env.set("PWD", os.getcwd(), True)
        return 0
    except OSError:
        pass
    old_pwd = shell.env.get("OLDPWD")
    if old_pwd is None:
        print("Error: OLDPWD not set", file=sys.stderr)
        return 1
    try:
        os.chdir(old_pwd)
    except OSError:
        print("Errror: Can't get back to OLDPWD", file=sys.stderr)
        return 1
    try:
        shell.env.set("PWD", os.getcwd(), True)
    except OSError:
        print("Error: problem with recovered path", file=sys.stderr)
        shell.env.set("PWD", old_pwd, True)
    return 0


@contextlib.contextmanager
def _interrupts_ignored() -> Iterator[None]:
    """Keep Ctrl-C from stopping the shell while a command runs."""
    try:
        previous = signal.signal(signal.SIGINT, lambda signum, frame: None)
    except ValueError:
        previous = None
    try:
        yield
    finally:
        if previous is not None:
            signal.signal(signal.SIGINT, previous)


def run_line(line: str, shell: ShellState) -> int | None:
    """Tokenize, parse and run one command line.

    Returns the exit status, which is also stored as the last status, or
    None when nothing was run. Raises ShellExit from the exit builtin.
    """
    try:
        tokens = tokenize(line, shell)
    except TokenizeError as error:
        print(error, file=sys.stderr)
        return None
    if not tokens or tokens[0].type is TokenType.END:
        return None
    if not is_first_token_valid(tokens[0].type):
        shell.last_status = 2
        print("minishell:: syntax error", file=sys.stderr)
        return None
    try:
        tree = parse(tokens, shell)
    except ParseError as error:
        print(error, file=sys.stderr)
        return None
    with _interrupts_ignored():
        shell.last_status = execute(tree, shell)
    return shell.last_status


def main(argv: list[str] | None = None) -> int:
    """Run the interactive shell until end of input or exit."""
    try:
        import readline
    except ImportError:
        readline = None
    shell = ShellState(Environment.from_environ(os.environ))
    previous_quit = signal.signal(signal.SIGQUIT, signal.SIG_IGN)
    try:
        while True:
            try:
                line = input(PROMPT)
            except EOFError:
                if readline is not None:
                    readline.clear_history()
                print("exit")
                return 0
            except KeyboardInterrupt:
                print()
                continue
            update_pwd(shell)
            try:
                run_line(line, shell)
            except ShellExit as request:
                return request.status
    finally:
        signal.signal(signal.SIGQUIT, previous_quit)