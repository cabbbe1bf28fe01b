"""The shell's environment list and per-session state."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass

_SHLVL_PREFIX = "SHLVL="
_SHLVL_LIMIT = 999
_SPACES = " \t\n\v\f\r"


def _atoi(text: str) -> int:
    """Parse a leading integer the way C's atoi does; 0 if there is none."""
    text = text.lstrip(_SPACES)
    sign = 1
    if text[:1] in ("+", "-"):
        sign = -1 if text[0] == "-" else 1
        text = text[1:]
    digits = ""
    for char in text:
        if not ("0" <= char <= "9"):
            break
        digits += char
    return sign * int(digits) if digits else 0


def _next_shlvl(entry: str) -> str:
    level = _atoi(entry[len(_SHLVL_PREFIX):])
    if level >= _SHLVL_LIMIT:
        print(f"warning: shell level ({level + 1}) too high, resetting to 1")
        return "SHLVL=1"
    return f"SHLVL={level + 1}"


def copy_env(envp: Iterable[str]) -> list[str]:
    """Copy NAME=value entries, raising SHLVL by one or adding SHLVL=1."""
    entries = list(envp)
    copy = [] if any(e.startswith(_SHLVL_PREFIX) for e in entries) else ["SHLVL=1"]
    copy.extend(
        _next_shlvl(entry) if entry.startswith(_SHLVL_PREFIX) else entry
        for entry in entries
    )
    return copy


class Environment:
    """An ordered list of NAME=value entries."""

    def __init__(self, entries: Iterable[str] | None = None) -> None:
        self._entries: list[str] = list(entries or ())

    @classmethod
    def from_environ(cls, envp: Mapping[str, str] | Iterable[str]) -> Environment:
        """Build the environment a new shell level starts with."""
        if isinstance(envp, Mapping):
            envp = [f"{name}={value}" for name, value in envp.items()]
        return cls(copy_env(envp))

    def get(self, name: str) -> str | None:
        """Return the value of ``name``, or None if it is not set."""
        for entry in self._entries:
            key, sep, value = entry.partition("=")
            if sep and key == name:
                return value
        return None

    def set(self, name: str, value: str, overwrite: bool = True) -> None:
        """Set ``name`` to ``value``; keep an existing value unless overwriting."""
        if name is None or value is None or "=" in name:
            raise ValueError(f"invalid environment name: {name!r}")
        if self.get(name) is not None and not overwrite:
            return
        self.put(f"{name}={value}")

    def put(self, entry: str) -> None:
        """Replace the entry with the same name, or append a new one."""
        if not entry or "=" not in entry:
            raise ValueError(f"environment entry needs '=': {entry!r}")
        name = entry.partition("=")[0]
        prefix = name + "="
        for index, existing in enumerate(self._entries):
            if existing.startswith(prefix):
                self._entries[index] = entry
                return
        self._entries.append(entry)

    def unset(self, name: str) -> bool:
        """Remove the first entry whose name ``name`` begins with.

        Returns True if an entry was removed.
        """
        for index, entry in enumerate(self._entries):
            key, sep, _ = entry.partition("=")
            if sep and name.startswith(key):
                del self._entries[index]
                return True
        return False

    def entries(self) -> list[str]:
        """Return a copy of the NAME=value entries, in order."""
        return list(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)


@dataclass
class ShellState:
    """Everything a running shell carries between command lines."""

    env: Environment
    last_status: int = 0
    heredoc_counter: int = 0