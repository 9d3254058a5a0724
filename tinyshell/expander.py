"""Expansion of ``~``, ``$NAME`` and ``$?`` inside tokens."""

from __future__ import annotations

import string
from collections.abc import Iterable

from .env import Environment

_ALNUM = frozenset(string.ascii_letters + string.digits)


def _is_alnum(char: str) -> bool:
    return char in _ALNUM


def _alnum_end(text: str, start: int) -> int:
    end = start
    while end < len(text) and _is_alnum(text[end]):
        end += 1
    return end


def _match_key(key: str, text: str) -> tuple[int, bool] | None:
    """Match ``key`` at the start of ``text``.

    Returns the index where the rest begins and whether the match only
    skipped a longer name, or None when ``key`` does not apply.
    """
    if not key or not text.startswith(key):
        return None
    end = len(key)
    if end >= len(text) or not _is_alnum(text[end]):
        return end, False
    end = _alnum_end(text, end)
    if end < len(text):
        return end, True
    return None


def lookup_variable(env: Environment, text: str) -> str | None:
    """Replace the variable name that starts ``text`` with its value.

    ``text`` is what follows a ``$``; the part after the name is kept.
    An unknown name expands to nothing, and a name set without a value
    makes the whole result None.
    """
    for key, value in env.items():
        match = _match_key(key, text)
        if match is None:
            continue
        rest_at, skipped = match
        if skipped:
            return text[rest_at:]
        if value is None:
            return None
        return value + text[rest_at:]
    return text[_alnum_end(text, 0):]


def _odd_index(text: str, quote: str) -> int:
    count = text.count(quote)
    if count == 0:
        return -2
    if count % 2 == 1:
        return text.index(quote)
    return -1


def check_quote(before: str, after: str) -> bool:
    """Tell whether the ``$`` that starts ``after`` is to be expanded."""
    single_before = _odd_index(before, "'")
    single_after = _odd_index(after, "'")
    double_before = _odd_index(before, '"')
    double_after = _odd_index(after, '"')
    if double_after > -1 and after[1:2] == '"':
        return False
    if single_before > -1 and single_after < 0:
        return True
    if single_before > -1 and single_after > -1:
        if double_before > -1 and double_after > -1:
            return single_before > double_before
        if double_before < 0 and double_after < 0:
            return False
    return True


def expand_tilde(token: str, env: Environment) -> str:
    """Replace a leading ``~`` or ``~/`` with the value of HOME."""
    if not token.startswith("~"):
        return token
    home = lookup_variable(env, "HOME") or ""
    if token == "~":
        return home
    if token[1] == "/":
        return home + token[1:]
    return token


def expand_variables(token: str, env: Environment, status: int) -> str:
    """Expand every ``$NAME``, ``$N`` and ``$?`` that quoting leaves open."""
    pos = token.find("$")
    while pos != -1:
        before, rest = token[:pos], token[pos:]
        if not check_quote(before, rest):
            pos = token.find("$", pos + 1)
            continue
        follower = rest[1:2]
        if follower == "?":
            token = before + str(status) + rest[2:]
        elif follower != "$" and rest != "$":
            if follower in string.digits:
                token = before + rest[2:]
            else:
                value = lookup_variable(env, rest[1:])
                token = before + (value if value is not None else "")
        else:
            pos = token.find("$", pos + 1)
            continue
        pos = token.find("$", len(before))
    return token


def expand(tokens: Iterable[str], env: Environment, status: int) -> list[str]:
    """Expand tildes, then variables, in every token."""
    return [expand_variables(expand_tilde(token, env), env, status) for token in tokens]