"""Grouping tokens into commands joined by pipes and redirections."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Iterable

_STDERR = 2


class TokenType(IntEnum):
    """What follows a command: nothing, or the operator that ends it."""

    EXEC = 0
    HEREDOC = 1
    PIPE = 2
    GREAT = 3
    GREATER = 4
    LESS = 5


@dataclass
class Command:
    """One segment of a command line.

    ``kind`` is the operator that closed the segment. ``args`` is None
    only for the last segment of a line that had no arguments at all.
    ``infile``, ``outfile`` and ``fd`` are file descriptors.
    """

    cmd: str | None = None
    args: list[str] | None = field(default_factory=list)
    kind: TokenType = TokenType.EXEC
    infile: int = 0
    outfile: int = 1
    fd: int = 1

    @property
    def redirected(self) -> bool:
        """Tell whether the next segment only names a file or a delimiter."""
        return (
            self.infile > _STDERR
            or self.outfile > _STDERR
            or self.kind is TokenType.HEREDOC
        )


def _operator_type(token: str) -> TokenType:
    if token.startswith("|"):
        return TokenType.PIPE
    if token.startswith(">>"):
        return TokenType.GREATER
    if token.startswith("<<"):
        return TokenType.HEREDOC
    if token.startswith(">"):
        return TokenType.GREAT
    return TokenType.LESS


def strip_quotes(text: str) -> str:
    """Remove one level of quoting; a quote inside the other kind is kept."""
    kept: list[str] = []
    quote: str | None = None
    for char in text:
        if char in "'\"" and (quote is None or quote == char):
            quote = char if quote is None else None
        else:
            kept.append(char)
    return "".join(kept)


def _strip_command(command: Command) -> None:
    if command.cmd is not None:
        command.cmd = strip_quotes(command.cmd)
    if command.args is not None:
        command.args = [strip_quotes(arg) for arg in command.args]


def parse(tokens: Iterable[str]) -> list[Command]:
    """Build the list of commands from expanded tokens.

    The first token of each pipeline segment is the command name unless it
    is ``<<``. Each operator closes the current segment; the words after a
    redirection land in the following segment's arguments. Quotes are
    stripped from the current segment after every token.
    """
    current = Command()
    commands = [current]
    position = 0
    has_text = False
    for token in tokens:
        first = position == 0
        position += 1
        if first and token != "<<":
            current.cmd = token
        elif token[:1] in ("|", ">", "<"):
            current.kind = _operator_type(token)
            if token.startswith("|"):
                position = 0
            _strip_command(current)
            current = Command()
            commands.append(current)
        elif token:
            assert current.args is not None
            current.args.append(token)
            has_text = True
        _strip_command(current)
    if not has_text:
        commands[-1].args = None
    return commands


def pipe_count(commands: Iterable[Command]) -> int:
    """Count the segments closed by a pipe."""
    return sum(1 for command in commands if command.kind is TokenType.PIPE)


def next_command(commands: list[Command], index: int) -> int | None:
    """Index of the command run after ``commands[index]``, or None at the end.

    A segment followed by a file name or heredoc delimiter skips that one.
    """
    step = 2 if commands[index].redirected else 1
    following = index + step
    return following if following < len(commands) else None