"""The interactive read-evaluate loop and the command-line entry point."""

from __future__ import annotations

import os
import signal
import sys
from collections.abc import Iterable, Mapping
from typing import Callable

from .builtins import ExitRequest
from .env import Environment, ShellState
from .executor import collect_heredocs, execute
from .expander import expand
from .lexer import QuoteError, TokenSyntaxError, check_quotes, is_blank, tokenize, validate
from .parser import Command, parse
from .redirect import RedirectError, open_redirections

PROMPT = "minishell $ "
_WRONG_ARGS = "Error! Only needs program name."
_STDERR = 2

Reader = Callable[[str], "str | None"]


def _read_line(prompt: str) -> str | None:
    """Read one line from the terminal; None at end of input."""
    try:
        return input(prompt)
    except EOFError:
        return None


def _environment_from(environ: Mapping[str, str] | Iterable[str] | None) -> Environment:
    if environ is None:
        environ = os.environ
    if isinstance(environ, Mapping):
        entries = [f"{key}={value}" for key, value in environ.items()]
    else:
        entries = list(environ)
    return Environment.from_strings(entries)


def _close_descriptors(commands: list[Command]) -> None:
    descriptors = {
        fd
        for command in commands
        for fd in (command.infile, command.outfile, command.fd)
        if fd > _STDERR
    }
    for fd in descriptors:
        try:
            os.close(fd)
        except OSError:
            pass


class Shell:
    """One shell session: its variables, last status and line source."""

    def __init__(
        self,
        environ: Mapping[str, str] | Iterable[str] | None = None,
        reader: Reader | None = None,
    ) -> None:
        self.state = ShellState(env=_environment_from(environ))
        self._reader: Reader = reader if reader is not None else _read_line

    @property
    def env(self) -> Environment:
        """The session's variables."""
        return self.state.env

    @property
    def status(self) -> int:
        """The status of the last command."""
        return self.state.status

    def run_line(self, line: str) -> int:
        """Run one command line and return the resulting status.

        Errors in quoting, syntax or redirection are reported on standard
        output and leave the status unchanged. ``exit`` raises ExitRequest.
        """
        state = self.state
        if is_blank(line):
            return state.status
        try:
            check_quotes(line)
        except QuoteError as exc:
            print(exc)
            return state.status
        tokens = expand(tokenize(line), state.env, state.status)
        try:
            validate(tokens)
        except TokenSyntaxError as exc:
            print(exc)
            return state.status
        commands = parse(tokens)
        try:
            open_redirections(commands, state.env)
        except RedirectError as exc:
            print(exc)
            _close_descriptors(commands)
            return state.status
        if not collect_heredocs(commands, state, self._reader):
            state.heredoc = None
            _close_descriptors(commands)
            return state.status
        return execute(commands, state)

    def loop(self) -> int:
        """Read and run lines until ``exit`` or end of input; return the exit code.

        End of input gives 1. An interrupt abandons the current line.
        """
        while True:
            try:
                line = self._reader(PROMPT)
            except KeyboardInterrupt:
                print()
                continue
            if line is None:
                return 1
            try:
                self.run_line(line)
            except ExitRequest as request:
                return request.code
            except KeyboardInterrupt:
                print()


def _enable_line_editing() -> None:
    try:
        import readline  # noqa: F401  (gives input() editing and history)
    except ImportError:
        pass


def _install_signal_handlers() -> None:
    if hasattr(signal, "SIGQUIT"):
        signal.signal(signal.SIGQUIT, signal.SIG_IGN)
    signal.signal(signal.SIGINT, signal.default_int_handler)


def main(argv: list[str] | None = None) -> int:
    """Start an interactive shell; any argument is an error."""
    if argv is None:
        argv = sys.argv[1:]
    if argv:
        print(_WRONG_ARGS)
        return 1
    _enable_line_editing()
    _install_signal_handlers()
    return Shell(os.environ).loop()