# tinyshell

A small interactive command shell. It reads a line, splits it into tokens,
expands `~`, `$NAME` and `$?`, checks the syntax, and runs the result:
external programs found through `PATH`, pipelines joined with `|`, output
redirections `>` and `>>`, input redirection `<`, and here-documents `<<`.

## Installing

```
pip install .
```

## Running

```
tinyshell
```

The shell takes no arguments; passing any prints an error and returns 1.
It shows the prompt `minishell $ `, reads a line and runs it. End of input
(Ctrl-D) leaves the shell with status 1. Ctrl-C abandons the current line
and shows a fresh prompt; Ctrl-\ is ignored.

Errors in quoting (`minishell: quote error`), in operator placement
(`minishell: syntax error near unexpected token`) and missing input files
are printed on standard output, and the line is not run.

## Builtins

| Command  | What it does |
|----------|--------------|
| `echo`   | Prints its arguments separated by spaces; a first argument of `-n` (or `-nnn…`) leaves off the newline. |
| `pwd`    | Prints the working directory. |
| `env`    | Lists the variables that have a value, as `KEY=value`. |
| `export` | With no arguments lists every variable as `declare -x KEY=value`; with `KEY=value` or `KEY` sets or declares a variable. An invalid name is reported and gives status 1. |
| `unset`  | Removes the named variables. |
| `cd`     | Changes directory and records the previous one in `OLDPWD`; updates `PWD` when it is set. With no argument goes to `HOME`. |
| `exit`   | Leaves the shell with the given numeric status (taken modulo 256); a non-numeric argument gives 255; more than one argument is refused with status 1. |

`echo`, `pwd` and `env` are also recognised in upper case.

A builtin that is one stage of a pipeline runs on a copy of the shell's
variables and directory, so its changes do not last. A pipeline as a whole
always leaves the status at 0.

## Using it from Python

```python
from tinyshell.shell import Shell

shell = Shell({"HOME": "/tmp", "PATH": "/usr/bin:/bin"}, input)
shell.run_line("export GREETING=hello")
shell.run_line("echo $GREETING world | tr a-z A-Z")
print(shell.status)
```

`Shell(environ, reader)` takes the starting variables (a mapping or
`KEY=VALUE` strings; the process environment by default) and a function
that reads one line for a given prompt and returns None at end of input.
`run_line` runs one line and returns the status; `exit` raises
`tinyshell.builtins.ExitRequest`. `loop` reads and runs lines until `exit`
or end of input and returns the exit code.

The building blocks are importable on their own:

- `tinyshell.lexer`: `tokenize`, `check_quotes`, `validate`, `is_blank`
- `tinyshell.expander`: `expand`, `expand_tilde`, `expand_variables`
- `tinyshell.parser`: `parse`, `strip_quotes`, `Command`, `TokenType`
- `tinyshell.redirect`: `open_redirections`, `resolve_path`
- `tinyshell.executor`: `execute`, `run_external`, `search_path`, `read_heredoc`
- `tinyshell.env`: `Environment`, `ShellState`

## What it does not do

The shell has no command separators (`;`, `&&`, `||`), no background jobs
or job control, no wildcard expansion, no subshells, and no aliases or
functions. It only reads lines interactively; it does not run script files
or commands given on its own command line.

## Running the tests

```
pip install .[test]
pytest
```