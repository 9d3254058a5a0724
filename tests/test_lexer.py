import pytest

from tinyshell.lexer import (
    QuoteError,
    TokenSyntaxError,
    check_quotes,
    is_blank,
    tokenize,
    validate,
)


def test_tokenize_words_and_pipe():
    assert tokenize("ls -l | wc") == ["ls", "-l", "|", "wc"]


def test_tokenize_operators_without_spaces():
    assert tokenize("cat<<EOF>>out") == ["cat", "<<", "EOF", ">>", "out"]


def test_tokenize_keeps_quoted_spaces_in_one_word():
    assert tokenize('echo "a b" c') == ["echo", '"a b"', "c"]


@pytest.mark.parametrize(
    "line",
    ["ls -l | wc", "cat<in>out", "a  b   c", "echo x>>y|z<<w", "   lead"],
)
def test_tokens_rebuild_line_without_spaces(line):
    assert "".join(tokenize(line)) == line.replace(" ", "")


def test_tokens_never_hold_outer_spaces():
    for token in tokenize("  one   two |  three  "):
        assert token == token.strip(" ")


def test_empty_line_has_no_tokens():
    assert len(tokenize("")) == 0


def test_single_quotes_protect_operators():
    tokens = tokenize("echo '|<>' done")
    assert tokens[1] == "'|<>'"
    assert len(tokens) == 3


@pytest.mark.parametrize("line", ["echo 'abc", 'echo "abc', "'a' \"b", "\"'"])
def test_unclosed_quote_raises(line):
    with pytest.raises(QuoteError) as info:
        check_quotes(line)
    assert str(info.value) == "minishell: quote error"


@pytest.mark.parametrize("line", ["echo 'a' \"b\"", "\"it's\"", "plain", ""])
def test_balanced_quotes_return_line(line):
    assert check_quotes(line) == line


def test_is_blank():
    assert is_blank("    ") is True
    assert is_blank("") is True
    assert is_blank("  a ") is False
    assert is_blank("\t") is False


@pytest.mark.parametrize(
    "tokens",
    [
        ["ls", "-l", "|", "wc"],
        ["cat", "<", "in", ">", "out"],
        ["cat", "<<", "EOF"],
        ["echo", "hi", ">>", "log"],
        ["ls"],
        ["cat", "<<", "<", "x"],
    ],
)
def test_validate_accepts_good_lines(tokens):
    assert validate(tokens) == tokens


@pytest.mark.parametrize(
    "tokens",
    [
        ["|", "ls"],
        [">"],
        ["<"],
        ["ls", ">"],
        ["ls", "|"],
        ["ls", "|", "|", "wc"],
        ["ls", ">", "|", "wc"],
        ["ls", "<", ">", "x"],
        ["ls", ">>", ">>", "x"],
        ["cat", "<<", "|", "x"],
        ["cat", "<<", "<<", "x"],
    ],
)
def test_validate_rejects_bad_lines(tokens):
    with pytest.raises(TokenSyntaxError) as info:
        validate(tokens)
    assert str(info.value) == "minishell: syntax error near unexpected token"


def test_tokenize_then_validate_round_trip():
    line = "cat < in | grep x >> out"
    tokens = tokenize(line)
    assert validate(tokens) == tokens