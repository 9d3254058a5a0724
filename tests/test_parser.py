import pytest

from tinyshell.parser import (
    Command,
    TokenType,
    next_command,
    parse,
    pipe_count,
    strip_quotes,
)


def test_simple_command():
    commands = parse(["echo", "hi", "there"])
    assert len(commands) == 1
    assert commands[0].cmd == "echo"
    assert commands[0].args == ["hi", "there"]
    assert commands[0].kind is TokenType.EXEC


def test_command_without_arguments_has_none_args():
    commands = parse(["ls"])
    assert commands[0].cmd == "ls"
    assert commands[0].args is None


def test_pipe_splits_segments():
    commands = parse(["ls", "|", "wc", "-l"])
    assert [c.cmd for c in commands] == ["ls", "wc"]
    assert commands[0].kind is TokenType.PIPE
    assert commands[0].args == []
    assert commands[1].args == ["-l"]


def test_pipe_without_any_arguments_clears_last_only():
    commands = parse(["ls", "|", "wc"])
    assert commands[0].args == []
    assert commands[1].args is None


@pytest.mark.parametrize(
    "operator, kind",
    [
        (">", TokenType.GREAT),
        (">>", TokenType.GREATER),
        ("<", TokenType.LESS),
        ("<<", TokenType.HEREDOC),
    ],
)
def test_redirection_puts_target_in_next_segment(operator, kind):
    commands = parse(["cat", "x", operator, "target"])
    assert commands[0].kind is kind
    assert commands[0].args == ["x"]
    assert commands[1].cmd is None
    assert commands[1].args == ["target"]


def test_leading_heredoc_is_not_a_command():
    commands = parse(["<<", "EOF", "cat"])
    assert commands[0].cmd is None
    assert commands[0].kind is TokenType.HEREDOC
    assert commands[1].args == ["EOF", "cat"]


def test_quotes_are_removed():
    commands = parse(["echo", '"a b"'])
    assert commands[0].args == ["a b"]


def test_quotes_removed_from_command_name():
    commands = parse(['"ls"', "x"])
    assert commands[0].cmd == "ls"


def test_later_tokens_strip_nested_quotes_again():
    alone = parse(["echo", "\"'x'\""])
    followed = parse(["echo", "\"'x'\"", "y"])
    assert alone[0].args == ["'x'"]
    assert followed[0].args == ["x", "y"]


def test_empty_tokens_are_skipped():
    commands = parse(["ls", "-l", ""])
    assert commands[0].args == ["-l"]


def test_strip_quotes_keeps_other_quote_kind():
    assert strip_quotes("'a\"b'") == 'a"b'


def test_strip_quotes_leaves_plain_text():
    assert strip_quotes("plain") == "plain"


def test_strip_quotes_never_lengthens():
    for text in ["'a'", '"b"', "c", "'\"'"]:
        assert len(strip_quotes(text)) <= len(text)


def test_pipe_count():
    assert pipe_count(parse(["a", "|", "b", "|", "c"])) == 2
    assert pipe_count(parse(["a", ">", "f"])) == 0


def test_next_command_plain():
    commands = parse(["a", "|", "b"])
    assert next_command(commands, 0) == 1
    assert next_command(commands, 1) is None


def test_next_command_skips_redirect_target():
    commands = [Command(cmd="a", outfile=5), Command(args=["f"]), Command(cmd="b")]
    assert next_command(commands, 0) == 2


def test_next_command_skips_heredoc_delimiter():
    commands = parse(["cat", "<<", "EOF"])
    assert next_command(commands, 0) is None
    assert commands[0].redirected