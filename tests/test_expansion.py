"""Tests for the expansion module."""

from minishell.expansion import expand, expand_tokens
from minishell.tokenizer import Token, lex

ENV = {"HOME": "/home/user", "USER": "alice", "EMPTY": "", "_X1": "x"}


def lookup(name):
    return ENV.get(name)


class TestExpand:
    def test_simple_var(self):
        assert expand(Token("$HOME"), lookup) == "/home/user"

    def test_var_in_middle(self):
        assert expand(Token("hi_$USER!"), lookup) == "hi_alice!"

    def test_name_takes_longest_run(self):
        assert expand(Token("$USERname"), lookup) == ""

    def test_underscore_and_digits(self):
        assert expand(Token("$_X1/y"), lookup) == "x/y"

    def test_undefined_is_empty(self):
        assert expand(Token("a$NOPE_XYZb"), lookup) == "a"

    def test_multiple_vars(self):
        assert expand(Token("$USER:$HOME"), lookup) == "alice:/home/user"

    def test_trailing_dollar(self):
        assert expand(Token("cost$"), lookup) == "cost$"

    def test_dollar_before_digit_kept(self):
        assert expand(Token("$1"), lookup) == "$1"

    def test_dollar_before_punctuation_kept(self):
        assert expand(Token("$-x $"), lookup) == "$-x $"

    def test_literal_token_untouched(self):
        assert expand(Token("$HOME", is_literal=True), lookup) == "$HOME"

    def test_uses_environment_by_default(self, monkeypatch):
        monkeypatch.setenv("MINISHELL_TEST_VAR", "value")
        assert expand(Token("$MINISHELL_TEST_VAR")) == "value"


class TestExpandTokens:
    def test_empty_expansion_dropped(self):
        tokens = [Token("echo"), Token("$EMPTY"), Token("$NOPE"), Token("x")]
        assert expand_tokens(tokens, lookup) == ["echo", "x"]

    def test_single_quoted_stays(self):
        assert expand_tokens(lex("echo '$HOME'").tokens, lookup) == ["echo", "$HOME"]

    def test_double_quoted_expands(self):
        assert expand_tokens(lex('echo "$HOME"').tokens, lookup) == ["echo", "/home/user"]

    def test_escaped_dollar_stays(self):
        assert expand_tokens(lex(r"echo \$USER").tokens, lookup) == ["echo", "$USER"]

    def test_quoted_spaces_survive(self):
        assert expand_tokens(lex('echo "$USER  x"').tokens, lookup) == ["echo", "alice  x"]
