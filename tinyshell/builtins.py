"""Commands the shell runs itself: echo, cd, pwd, export, unset, env and exit."""

from __future__ import annotations

import os
import re
import sys
from typing import TextIO

from .env import Environment, ShellState, is_valid_identifier, split_assignment
from .parser import Command

_BUILTIN_NAMES = frozenset({"echo", "ECHO", "pwd", "PWD", "env", "ENV", "cd", "export", "unset"})
_NUMERIC = re.compile(r"[\t\n\v\f\r ]*[+-]?[0-9]*[\t\n\v\f\r ]*")
_LEADING_NUMBER = re.compile(r"[\t\n\v\f\r ]*([+-]?)([0-9]*)")


class ExitRequest(Exception):
    """The ``exit`` builtin asks the shell to stop with ``code``."""

    def __init__(self, code: int) -> None:
        super().__init__(code)
        self.code = code


def is_builtin(name: str | None) -> bool:
    """Tell whether ``name`` is run by the shell itself (``exit`` excepted)."""
    return name in _BUILTIN_NAMES


def _only_n_flag(arg: str) -> bool:
    return arg.startswith("-n") and set(arg[2:]) <= {"n"}


def echo(args: list[str] | None, out: TextIO) -> int:
    """Print the arguments separated by spaces; a leading ``-n...`` drops the newline."""
    if args is None:
        out.write("\n")
    elif not args or args[0] == "":
        # An empty argument list writes a single NUL character.
        out.write("\0")
    elif _only_n_flag(args[0]):
        out.write(" ".join(args[1:]))
    else:
        out.write(" ".join(args) + "\n")
    return 0


def pwd(out: TextIO) -> int:
    """Print the current directory."""
    try:
        cwd = os.getcwd()
    except OSError as exc:
        print(f"getcwd: {exc.strerror}", file=sys.stderr)
        return 1
    out.write(cwd + "\n")
    return 0


def env_listing(env: Environment, out: TextIO) -> int:
    """Print every variable that has a value as ``KEY=VALUE``."""
    for key, value in env.items():
        if value is not None:
            out.write(f"{key}={value}\n")
    return 0


def _declare(env: Environment, out: TextIO) -> None:
    for key, value in env.items():
        line = "declare -x " + key
        if value and key and ord(key[0]) > 31:
            line += "="
        line += value or ""
        out.write(line + "\n")


def export(args: list[str] | None, env: Environment, out: TextIO) -> int:
    """Set variables from ``KEY[=VALUE]`` arguments, or list them all without arguments.

    Stops at the first invalid name and returns 1.
    """
    if args is None:
        _declare(env, out)
        return 0
    for text in args:
        if not is_valid_identifier(text):
            print(f"minishell: export: `{text}': not a valid identifier", file=sys.stderr)
            return 1
        key, value = split_assignment(text)
        env.set(key, value)
    return 0


def unset(args: list[str] | None, env: Environment) -> None:
    """Remove the named variables.

    Once one name has been removed, later names are only removed when
    they are the first variable.
    """
    if args is None:
        return
    removed = False
    for name in args:
        candidates = list(env)
        if removed:
            candidates = candidates[:1]
        if name in candidates:
            env.unset(name)
            removed = True


def _record_oldpwd(env: Environment, previous: str | None) -> None:
    if "OLDPWD" in env or len(env) > 0:
        env.set("OLDPWD", previous)


def _record_pwd(args: list[str] | None, env: Environment) -> None:
    if "PWD" not in env:
        return
    if args and args[0] == "~":
        env.set("PWD", env.get("HOME"))
        return
    try:
        env.set("PWD", os.getcwd())
    except OSError:
        env.set("PWD", None)


def cd(args: list[str] | None, env: Environment) -> int:
    """Change directory to the first argument, or to HOME without one."""
    try:
        previous: str | None = os.getcwd()
    except OSError:
        previous = None
    if args and args[0]:
        try:
            os.chdir(args[0])
        except OSError as exc:
            print(f"cd: {exc.strerror}", file=sys.stderr)
            return 1
        _record_oldpwd(env, previous)
        _record_pwd(args, env)
        return 0
    _record_oldpwd(env, previous)
    home = env.get("HOME")
    if home is not None:
        try:
            os.chdir(home)
        except OSError:
            pass
    _record_pwd(None, env)
    return 0


def is_numeric(text: str) -> bool:
    """Tell whether ``text`` is blanks, an optional sign, digits and blanks."""
    return _NUMERIC.fullmatch(text) is not None


def atoi(text: str) -> int:
    """Read a leading signed decimal number as a 32-bit integer; 0 if there is none."""
    match = _LEADING_NUMBER.match(text)
    assert match is not None
    sign, digits = match.groups()
    value = int(digits) if digits else 0
    if sign == "-":
        value = -value
    value &= 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return value


def exit_status(args: list[str] | None) -> int:
    """Carry out ``exit``: raise ExitRequest, or return 1 when given too many arguments.

    ``args`` is None when there are no arguments or the command is followed
    by an operator.
    """
    print("exit")
    if not args:
        raise ExitRequest(0)
    if not is_numeric(args[0]):
        print(f"bash: exit: {args[0]}: numeric argument required")
        raise ExitRequest(255)
    if len(args) == 1:
        raise ExitRequest(atoi(args[0]) & 0xFF)
    print("bash: exit: too many arguments")
    return 1


def run_builtin(command: Command, state: ShellState, out: TextIO) -> int:
    """Run a builtin command, record its status in ``state`` and return it."""
    name, args = command.cmd, command.args
    if name in ("echo", "ECHO"):
        state.status = echo(args, out)
    elif name == "cd":
        state.status = cd(args, state.env)
    elif name in ("pwd", "PWD"):
        state.status = pwd(out)
    elif name == "export":
        state.status = export(args, state.env, out)
    elif name == "unset":
        unset(args, state.env)
    elif name in ("env", "ENV"):
        state.status = env_listing(state.env, out)
    return state.status