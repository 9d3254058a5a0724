"""Opening the files named by ``<``, ``>`` and ``>>``."""

from __future__ import annotations

import os

from .env import Environment
from .expander import lookup_variable
from .parser import Command, TokenType

_OUTPUT_FLAGS = {
    TokenType.GREAT: os.O_CREAT | os.O_RDWR | os.O_TRUNC,
    TokenType.GREATER: os.O_CREAT | os.O_RDWR | os.O_APPEND,
}
_MODE = 0o777


class RedirectError(Exception):
    """A redirection target could not be opened."""


def resolve_path(target: str, home: str | None, cwd: str | None = None) -> str:
    """Return ``target`` if it starts with ``home``, else join it to ``cwd``.

    Without a home directory the target is used as it is.
    """
    if not home or target.startswith(home):
        return target
    base = cwd if cwd is not None else os.getcwd()
    return f"{base}/{target}"


def _target_of(commands: list[Command], index: int) -> str:
    if index + 1 >= len(commands) or not commands[index + 1].args:
        raise RedirectError("minishell: syntax error near unexpected token")
    return commands[index + 1].args[0]


def _open_output(path: str, target: str, kind: TokenType) -> int:
    try:
        return os.open(path, _OUTPUT_FLAGS[kind], _MODE)
    except OSError as exc:
        raise RedirectError(f"minishell: {target}: {exc.strerror}") from exc


def _gather_trailing_args(commands: list[Command], index: int) -> None:
    extra: list[str] = []
    for later in commands[index + 1:]:
        if later.kind is TokenType.PIPE:
            break
        extra.extend((later.args or [])[1:])
    commands[index].args = (commands[index].args or []) + extra


def _open_output_for(
    commands: list[Command], index: int, home: str | None, cwd: str
) -> None:
    command = commands[index]
    following = commands[index + 1] if index + 1 < len(commands) else None
    target = _target_of(commands, index)
    path = resolve_path(target, home, cwd)
    assert following is not None
    if following.kind in _OUTPUT_FLAGS:
        _gather_trailing_args(commands, index)
        fd = _open_output(path, target, following.kind)
        command.fd = fd
        command.outfile = fd
        return
    fd = _open_output(path, target, command.kind)
    following.fd = fd
    if command.cmd is not None:
        command.outfile = fd
    elif commands[0].cmd is not None:
        commands[0].outfile = fd


def _open_input_for(
    commands: list[Command], index: int, home: str | None, cwd: str
) -> str | None:
    target = _target_of(commands, index)
    path = resolve_path(target, home, cwd)
    if not os.path.exists(path):
        return f"minishell: {target}: No such file or directory"
    try:
        fd = os.open(path, os.O_RDONLY)
    except OSError as exc:
        return f"minishell: {target}: {exc.strerror}"
    commands[index + 1].fd = fd
    commands[index].infile = fd
    return None


def open_redirections(commands: list[Command], env: Environment) -> list[Command]:
    """Open every redirection target and wire the descriptors into ``commands``.

    All redirections are processed in order; if the last input redirection
    failed, RedirectError is raised afterwards.
    """
    home = lookup_variable(env, "HOME")
    cwd = os.getcwd()
    failure: str | None = None
    for index, command in enumerate(commands):
        if command.kind in _OUTPUT_FLAGS:
            _open_output_for(commands, index, home, cwd)
        elif command.kind is TokenType.LESS:
            failure = _open_input_for(commands, index, home, cwd)
    if failure is not None:
        raise RedirectError(failure)
    return commands