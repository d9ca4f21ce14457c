"""Variable expansion for lexed tokens."""

import os
import re
from collections.abc import Callable, Iterable
from typing import TypeAlias

from minishell.tokenizer import Token

Lookup: TypeAlias = Callable[[str], str | None]

# Identifier: a letter or underscore, then letters, digits or underscores
_NAME = re.compile(r"[^\W\d]\w*")


def expand(token: Token, lookup: Lookup = os.environ.get) -> str:
    """Expand $NAME references in a non-literal token.

    Unset variables expand to an empty string. A $ that does not start a
    name (a digit, punctuation, end of word) is kept as is.
    """
    if token.is_literal:
        return token.value

    text = token.value
    result: list[str] = []
    i = 0
    while i < len(text):
        dollar = text.find("$", i)
        if dollar == -1:
            result.append(text[i:])
            break
        result.append(text[i:dollar])

        match = _NAME.match(text, dollar + 1)
        if not match:
            result.append("$")
            i = dollar + 1
            continue

        result.append(lookup(match.group(0)) or "")
        i = match.end()

    return "".join(result)


def expand_tokens(tokens: Iterable[Token], lookup: Lookup = os.environ.get) -> list[str]:
    """Expand every token; words that come out empty are dropped."""
    words: list[str] = []
    for token in tokens:
        value = expand(token, lookup)
        if value:
            words.append(value)
    return words
