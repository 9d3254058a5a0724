"""Splitting a command line into tokens and checking its syntax."""

from __future__ import annotations

import re

_QUOTE_ERROR = "minishell: quote error"
_SYNTAX_ERROR = "minishell: syntax error near unexpected token"
_BALANCED = re.compile(r"""(?:[^'"]|'[^']*'|"[^"]*")*""", re.DOTALL)


class QuoteError(ValueError):
    """A quote in the line is never closed."""

    def __init__(self, message: str = _QUOTE_ERROR) -> None:
        super().__init__(message)


class TokenSyntaxError(ValueError):
    """Redirections or pipes are placed where they cannot stand."""

    def __init__(self, message: str = _SYNTAX_ERROR) -> None:
        super().__init__(message)


def _token_length(text: str) -> int:
    if not text:
        return 0
    if text.startswith(("<<", ">>")):
        return 2
    if text[0] in "<>|":
        return 1
    i = 0
    while i < len(text) and text[i] not in " <>|":
        if text[i] in "\"'":
            close = text.find(text[i], i + 1)
            i = (close if close != -1 else len(text)) + 1
        else:
            i += 1
    return min(i, len(text))


def tokenize(line: str) -> list[str]:
    """Split a line into words and the operators ``<``, ``>``, ``<<``, ``>>``, ``|``.

    Quoted parts stay inside their word with the quotes kept. Trailing
    spaces yield a final empty token.
    """
    tokens: list[str] = []
    rest = line
    while rest:
        rest = rest.strip(" ")
        length = _token_length(rest)
        tokens.append(rest[:length].strip(" "))
        rest = rest[length:]
    return tokens


def check_quotes(line: str) -> str:
    """Return ``line`` if every quote is closed, else raise QuoteError."""
    if not _BALANCED.fullmatch(line):
        raise QuoteError()
    return line


def is_blank(line: str) -> bool:
    """Tell whether ``line`` holds nothing but spaces."""
    return line.strip(" ") == ""


def _char(text: str, index: int) -> str:
    return text[index] if index < len(text) else ""


def _valid_pair(a: str, b: str | None) -> bool:
    if b is None:
        return a != "<"
    a0, a1, b0 = _char(a, 0), _char(a, 1), _char(b, 0)
    if a in (">", "<") and a == b:
        return False
    if a0 == "<" and a1 == "<" and a == b:
        return False
    if a0 == ">" and a1 == ">" and a == b:
        return False
    if a0 == "<" and a1 != "<" and b0 and b0 in "<>|":
        return False
    if a0 == ">" and a1 != ">" and b0 and b0 in "<>|":
        return False
    if a0 == "<" and a1 == "<" and b0 and b0 in ">|":
        return False
    if a0 == ">" and a1 == ">" and b0 and b0 in "<>|":
        return False
    if a == "|" and b == "|":
        return False
    return True


def validate(tokens: list[str]) -> list[str]:
    """Return ``tokens`` if operators are well placed, else raise TokenSyntaxError.

    The token following each one is its neighbour; the last token is judged
    against the neighbour of the token before it.
    """
    following: str | None = None
    for index, current in enumerate(tokens):
        if index + 1 < len(tokens):
            following = tokens[index + 1]
        if index == 0 and following is None and current[:1] in ("<", ">"):
            raise TokenSyntaxError()
        if current == "|" and index == 0:
            raise TokenSyntaxError()
        if current == ">" and following is None:
            raise TokenSyntaxError()
        if not _valid_pair(current, following):
            raise TokenSyntaxError()
    return tokens