"""Commands the shell runs itself instead of starting a program."""

from __future__ import annotations

import os
import re
import sys
from itertools import takewhile
from typing import TextIO

from minish.environment import ShellState

_BUILTINS = frozenset({"echo", "cd", "pwd", "export", "unset", "exit", "env"})
_VALID_NAME = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_LEADING_INT = re.compile(r"[ \t\n\v\f\r]*([+-]?[0-9]+)")
_DIGITS = frozenset("0123456789")


class ShellExit(Exception):
    """Raised by the exit builtin; ``status`` is the shell's exit status."""

    def __init__(self, status: int) -> None:
        super().__init__(status)
        self.status = status


class _CdMemory:
    """The directory cd last left, kept for the whole session."""

    previous: str | None = None


def _error(message: str) -> None:
    print(message, file=sys.stderr)


def _atoi(text: str) -> int:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def is_builtin(name: str | None) -> bool:
    """Return True if ``name`` is one of the shell's own commands."""
    return name is not None and name in _BUILTINS


def is_n_flag(arg: str | None) -> bool:
    """Return True for an echo option made of '-' and any number of 'n'."""
    return bool(arg) and arg[0] == "-" and all(char == "n" for char in arg[1:])


def is_valid_name(name: str | None) -> bool:
    """Return True if ``name`` may name a shell variable."""
    return bool(name) and _VALID_NAME.fullmatch(name) is not None


def echo(argv: list[str], out: TextIO | None = None) -> None:
    """Write the arguments separated by spaces; -n drops the newline."""
    out = out or sys.stdout
    args = argv[1:]
    if not args:
        return
    flags = sum(1 for _ in takewhile(is_n_flag, args))
    text = " ".join(args[flags:])
    out.write(text if flags else text + "\n")


def env(shell: ShellState, out: TextIO | None = None) -> None:
    """Write every variable that has a non-empty value."""
    out = out or sys.stdout
    for entry in shell.env:
        _, sep, value = entry.partition("=")
        if sep and value:
            out.write(entry + "\n")


def pwd(out: TextIO | None = None) -> None:
    """Write the current working directory."""
    out = out or sys.stdout
    try:
        cwd = os.getcwd()
    except OSError:
        _error("Error: path is not found")
        return
    out.write(cwd + "\n")


def _cd_target(argv: list[str], shell: ShellState) -> str | None:
    target = argv[1] if len(argv) > 1 else None
    if target is None or target == "~":
        target = shell.env.get("HOME")
        if target is None:
            _error("Error: HOME is not set")
        return target
    if target == "-":
        if _CdMemory.previous is not None:
            return _CdMemory.previous
        target = shell.env.get("OLDPWD")
        if target is None:
            _error("Error: OLDPWD is not set")
    return target


def cd(argv: list[str], shell: ShellState) -> int:
    """Change directory and update PWD and OLDPWD; return the status."""
    if len(argv) > 2:
        _error("Error: too many argunents")
        return 1
    target = _cd_target(argv, shell)
    if target is None:
        return 1
    try:
        cwd = os.getcwd()
    except OSError:
        _error("Error: current working directory name not found")
        return 1
    try:
        os.chdir(target)
    except OSError:
        _error("Error: directory cannot be changed")
        return 1
    shell.env.set("OLDPWD", cwd, True)
    try:
        new_cwd = os.getcwd()
    except OSError:
        _error("Error: cannot set PWD to new directory")
        return 1
    shell.env.set("PWD", new_cwd, True)
    _CdMemory.previous = cwd
    return 0


def export_listing(shell: ShellState) -> list[str]:
    """Return the sorted 'declare -x' lines that export prints."""
    lines = []
    for entry in sorted(shell.env.entries()):
        if entry.startswith("_="):
            continue
        name, sep, value = entry.partition("=")
        lines.append(f'declare -x {name}="{value}"' if sep else f"declare -x {entry}")
    return lines


def export(argv: list[str], shell: ShellState, out: TextIO | None = None) -> int:
    """Set variables from NAME=value arguments, or list them; return the status."""
    out = out or sys.stdout
    if len(argv) < 2:
        for line in export_listing(shell):
            out.write(line + "\n")
        return 0
    status = 0
    for arg in argv[1:]:
        name, sep, value = arg.partition("=")
        if not sep:
            if not is_valid_name(arg):
                _error("Error: invalid export input")
                status = 1
            else:
                shell.env.set(arg, "", False)
        elif not is_valid_name(name):
            _error("Error: invalid variable name")
            status = 1
        else:
            shell.env.set(name, value, True)
    return status


def unset(argv: list[str], shell: ShellState) -> int:
    """Remove the variable named by the first argument."""
    if len(argv) > 1:
        shell.env.unset(argv[1])
    return 0


def exit_builtin(argv: list[str]) -> int:
    """Raise ShellExit with the requested status.

    Returns 1 without exiting when given more than one argument.
    """
    if len(argv) < 2:
        raise ShellExit(0)
    arg = argv[1]
    if any(char not in _DIGITS for char in arg.lstrip("+-")):
        _error(f"exit: {arg}: numeric argument required")
        raise ShellExit(2)
    if len(argv) > 2:
        _error("exit: too many arguments")
        return 1
    raise ShellExit(_atoi(arg) % 256)


def run_builtin(argv: list[str], shell: ShellState, out: TextIO | None = None) -> int:
    """Run the builtin named by ``argv[0]`` and return its status."""
    name = argv[0] if argv else None
    if name == "echo":
        echo(argv, out)
        return 0
    if name == "pwd":
        pwd(out)
        return 0
    if name == "env":
        env(shell, out)
        return 0
    if name == "cd":
        return cd(argv, shell)
    if name == "export":
        return export(argv, shell, out)
    if name == "unset":
        return unset(argv, shell)
    if name == "exit":
        return exit_builtin(argv)
    raise ValueError(f"not a builtin: {name!r}")