"""Shell variables and the state shared by one shell session."""

from __future__ import annotations

import string
from dataclasses import dataclass, field
from typing import Iterable, Iterator

_IDENTIFIER_CHARS = frozenset(string.ascii_letters + string.digits + "_")


class Environment:
    """Ordered shell variables; a value of None marks a name without a value."""

    def __init__(self, pairs: Iterable[tuple[str, str | None]] = ()) -> None:
        self._vars: dict[str, str | None] = {}
        for key, value in pairs:
            self.set(key, value)

    @classmethod
    def from_strings(cls, entries: Iterable[str]) -> "Environment":
        """Build from ``KEY=VALUE`` strings, keeping the first two '='-separated fields."""
        pairs = []
        for entry in entries:
            parts = [part for part in entry.split("=") if part]
            if not parts:
                continue
            pairs.append((parts[0], parts[1] if len(parts) > 1 else None))
        return cls(pairs)

    def get(self, key: str) -> str | None:
        """Return the value of ``key``, or None if unset or valueless."""
        return self._vars.get(key)

    def set(self, key: str, value: str | None) -> None:
        """Replace the value of an existing name or append a new one."""
        self._vars[key] = value

    def unset(self, key: str) -> None:
        """Remove ``key``; removing a missing name does nothing."""
        self._vars.pop(key, None)

    def items(self) -> list[tuple[str, str | None]]:
        """Return the variables in insertion order."""
        return list(self._vars.items())

    def __contains__(self, key: object) -> bool:
        return key in self._vars

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._vars))

    def __len__(self) -> int:
        return len(self._vars)


@dataclass
class ShellState:
    """Mutable state of a running shell."""

    env: Environment = field(default_factory=Environment)
    status: int = 0
    heredoc: str | None = None


def is_valid_identifier(text: str) -> bool:
    """Tell whether ``text`` is acceptable as an ``export`` argument."""
    if text and (text[0] == "=" or text[0] in string.digits):
        return False
    name, _, _ = text.partition("=")
    return all(char in _IDENTIFIER_CHARS for char in name)


def split_assignment(text: str) -> tuple[str, str | None]:
    """Split ``KEY=VALUE`` at the first '='; without '=' the value is None."""
    key, sep, value = text.partition("=")
    return key, (value if sep else None)