"""Running parsed commands: builtins, external programs, pipelines and heredocs."""

from __future__ import annotations

import dataclasses
import io
import os
import subprocess
import sys
import threading
from contextlib import contextmanager
from typing import Callable, Iterator, TextIO

from .builtins import exit_status, is_builtin, run_builtin
from .env import Environment, ShellState
from .parser import Command, TokenType, next_command, pipe_count

_STDERR = 2
_MAX_PATH_ENTRIES = 10
_NOT_FOUND = "minishell: command not found\n"
_PROMPT = "> "

Reader = Callable[[str], "str | None"]


def search_path(cmd: str | None, path: str | None) -> str | None:
    """Return ``dir/cmd`` for the first of the first ten PATH entries where it exists.

    The search stops at an empty entry; when nothing is found ``cmd`` is
    returned unchanged.
    """
    if cmd is None or not path:
        return cmd
    for directory in path.split(":")[:_MAX_PATH_ENTRIES]:
        if not directory:
            break
        candidate = f"{directory}/{cmd}"
        if os.access(candidate, os.F_OK):
            return candidate
    return cmd


def build_argv(command: Command) -> list[str]:
    """Return the argument vector: the command name followed by its arguments.

    A segment without a command name yields an empty list.
    """
    if command.cmd is None:
        return []
    return [command.cmd, *(command.args or [])]


def read_heredoc(delimiter: str, reader: Reader) -> str:
    """Read lines with ``reader`` until ``delimiter`` or end of input.

    Each line read before the delimiter is kept with a trailing newline.
    """
    lines: list[str] = []
    while True:
        line = reader(_PROMPT)
        if line is None or line == delimiter:
            break
        lines.append(line + "\n")
    return "".join(lines)


def collect_heredocs(commands: list[Command], state: ShellState, reader: Reader) -> bool:
    """Read the body of every ``<<`` in order, appending it to ``state.heredoc``.

    Returns False if reading was interrupted, in which case nothing is to run.
    """
    for index, command in enumerate(commands):
        if command.kind is not TokenType.HEREDOC:
            continue
        following = commands[index + 1] if index + 1 < len(commands) else None
        delimiter = following.args[0] if following is not None and following.args else ""
        try:
            text = read_heredoc(delimiter, reader)
        except KeyboardInterrupt:
            return False
        if text:
            state.heredoc = (state.heredoc or "") + text
    return True


def _child_environment(env: Environment) -> dict[str, str]:
    return {key: value for key, value in env.items() if value is not None}


def _executable(path: str) -> str:
    # A name without a slash is run relative to the current directory.
    return path if "/" in path else os.path.join(".", path)


def _exit_code(returncode: int) -> int:
    # A program killed by a signal reports no exit code, which reads as 0.
    return returncode if returncode >= 0 else 0


def _feed(stream, data: bytes) -> None:
    try:
        stream.write(data)
    except (BrokenPipeError, OSError):
        pass
    finally:
        try:
            stream.close()
        except OSError:
            pass


def _spawn(command: Command, state: ShellState, stdin, stdout) -> subprocess.Popen | None:
    path = search_path(command.cmd, state.env.get("PATH"))
    if path is None:
        return None
    argv = build_argv(dataclasses.replace(command, cmd=path))
    input_data: bytes | None = None
    if command.infile > _STDERR:
        stdin = command.infile
    elif command.kind is TokenType.HEREDOC:
        stdin = subprocess.PIPE
        input_data = (state.heredoc or "").encode()
    if command.outfile > _STDERR:
        stdout = command.outfile
    sys.stdout.flush()
    try:
        process = subprocess.Popen(
            argv,
            executable=_executable(path),
            stdin=stdin,
            stdout=stdout,
            env=_child_environment(state.env),
        )
    except OSError:
        if path != "<<":
            sys.stderr.write(_NOT_FOUND)
            sys.stderr.flush()
        return None
    if input_data is not None:
        threading.Thread(target=_feed, args=(process.stdin, input_data), daemon=True).start()
    return process


def run_external(command: Command, state: ShellState, stdin=None, stdout=None) -> int:
    """Run a program and wait for it; its exit code becomes ``state.status``.

    A program that cannot be started gives 127.
    """
    process = _spawn(command, state, stdin, stdout)
    status = 127 if process is None else _exit_code(process.wait())
    state.status = status
    return status


@contextmanager
def _output_stream(fd: int) -> Iterator[TextIO]:
    if fd > _STDERR:
        stream = os.fdopen(fd, "w", closefd=False)
        try:
            yield stream
        finally:
            stream.flush()
    else:
        try:
            yield sys.stdout
        finally:
            sys.stdout.flush()


def _run_single(command: Command, state: ShellState) -> None:
    if command.kind is not TokenType.HEREDOC and is_builtin(command.cmd):
        with _output_stream(command.outfile) as out:
            run_builtin(command, state, out)
    else:
        run_external(command, state)


def _feeds_pipe(commands: list[Command], index: int) -> bool:
    if index + 1 >= len(commands):
        return False
    if commands[index + 1].cmd is not None:
        return True
    return commands[index].kind is TokenType.HEREDOC and index + 2 < len(commands)


def _builtin_output(command: Command, state: ShellState) -> str:
    # A stage of a pipeline works on a copy: its changes do not reach the shell.
    scratch = ShellState(
        env=Environment(state.env.items()), status=state.status, heredoc=state.heredoc
    )
    cwd = os.getcwd()
    buffer = io.StringIO()
    try:
        run_builtin(command, scratch, buffer)
    finally:
        os.chdir(cwd)
    return buffer.getvalue()


def _write_all(fd: int, data: bytes, close: bool) -> None:
    try:
        view = memoryview(data)
        while view:
            written = os.write(fd, view)
            view = view[written:]
    except OSError:
        pass
    finally:
        if close:
            os.close(fd)


def _run_pipeline(commands: list[Command], state: ShellState) -> None:
    processes: list[subprocess.Popen] = []
    writers: list[threading.Thread] = []
    stdin_fd: int | None = None
    index: int | None = 0
    while index is not None:
        command = commands[index]
        read_fd = write_fd = None
        if index + 1 < len(commands):
            read_fd, write_fd = os.pipe()
        pipe_out = write_fd if _feeds_pipe(commands, index) else None
        try:
            if is_builtin(command.cmd):
                text = _builtin_output(command, state)
                target = command.outfile if command.outfile > _STDERR else pipe_out
                if target is None:
                    sys.stdout.write(text)
                    sys.stdout.flush()
                else:
                    owns = target == write_fd
                    writer = threading.Thread(
                        target=_write_all, args=(target, text.encode(), owns), daemon=True
                    )
                    writer.start()
                    writers.append(writer)
                    if owns:
                        write_fd = None
            else:
                process = _spawn(command, state, stdin_fd, pipe_out)
                if process is not None:
                    processes.append(process)
        finally:
            if write_fd is not None:
                os.close(write_fd)
            if stdin_fd is not None:
                os.close(stdin_fd)
        index = next_command(commands, index)
        if index is None:
            if read_fd is not None:
                os.close(read_fd)
            stdin_fd = None
        else:
            stdin_fd = read_fd
    for writer in writers:
        writer.join()
    for process in processes:
        process.wait()
    # Every stage of a pipeline reports success to the shell.
    state.status = 0


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


def execute(commands: list[Command], state: ShellState) -> int:
    """Run a parsed and redirected command line and return the new status.

    ``exit`` alone raises ExitRequest. Descriptors opened for redirections
    are closed and the collected heredoc text is dropped afterwards.
    """
    try:
        first = commands[0]
        if first.cmd == "exit" and next_command(commands, 0) is None:
            args = first.args if first.kind is TokenType.EXEC else None
            state.status = exit_status(args)
            return state.status
        if pipe_count(commands) == 0:
            _run_single(first, state)
        else:
            _run_pipeline(commands, state)
        return state.status
    finally:
        state.heredoc = None
        _close_descriptors(commands)