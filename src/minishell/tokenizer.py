"""Tokenize shell input, tracking quote and escape state across lines."""

from dataclasses import dataclass, field

# Characters a backslash still escapes inside double quotes
DQUOTE_ESCAPABLE = frozenset('$`\\"')

# An escaped one of these makes the whole token literal (never expanded)
EXPANSION_CHARS = frozenset("$`")


@dataclass(frozen=True)
class LexState:
    """Quote/escape condition left open at the end of a lexing pass."""

    in_single_quote: bool = False
    in_double_quote: bool = False
    escape_pending: bool = False


@dataclass(frozen=True)
class Token:
    """A word produced by the lexer.

    is_literal marks words that must skip variable expansion: anything that
    entered single quotes, or that contained an escaped $ or backtick.
    """

    value: str
    is_literal: bool = False


@dataclass(frozen=True)
class ParsedLine:
    tokens: list[Token] = field(default_factory=list)
    state: LexState = field(default_factory=LexState)

    @property
    def is_complete(self) -> bool:
        """False while a quote is open or a backslash is waiting for its character."""
        s = self.state
        return not (s.escape_pending or s.in_single_quote or s.in_double_quote)

    @property
    def words(self) -> list[str]:
        return [tok.value for tok in self.tokens]


def lex(chunk: str, state: LexState | None = None) -> ParsedLine:
    """Split chunk into tokens, one character at a time.

    Quoting follows POSIX-shell conventions: single quotes preserve
    everything, double quotes preserve everything except a backslash before
    $, `, \\ or ". Unquoted spaces separate words and runs of them collapse.
    A backslash before a newline is a line continuation and vanishes.

    The returned state tells the caller whether more input is needed. The
    partially built word is not carried in the state, so a continuation is
    handled by lexing the accumulated text again.
    """
    start = state or LexState()
    in_single = start.in_single_quote
    in_double = start.in_double_quote
    escape = start.escape_pending

    tokens: list[Token] = []
    buf: list[str] = []
    literal = False

    for ch in chunk:
        if escape:
            if ch == "\n":
                escape = False
                continue
            if in_double and ch not in DQUOTE_ESCAPABLE:
                # Not special here: keep the backslash, treat ch as unescaped
                buf.append("\\")
                escape = False
            elif ch in EXPANSION_CHARS:
                literal = True

        match ch:
            case "\\":
                if escape or in_single:
                    buf.append(ch)
                    escape = False
                else:
                    escape = True
            case '"':
                if escape or in_single:
                    buf.append(ch)
                    escape = False
                else:
                    in_double = not in_double
            case "'":
                if escape:
                    buf.append(ch)
                    escape = False
                elif in_double:
                    buf.append(ch)
                else:
                    in_single = not in_single
                    if in_single:
                        literal = True
            case " ":
                if escape:
                    buf.append(ch)
                    escape = False
                elif in_single or in_double:
                    buf.append(ch)
                else:
                    if buf:
                        tokens.append(Token("".join(buf), literal))
                        buf = []
                    literal = False
            case _:
                buf.append(ch)
                escape = False

    if buf:
        tokens.append(Token("".join(buf), literal))

    return ParsedLine(
        tokens=tokens,
        state=LexState(
            in_single_quote=in_single,
            in_double_quote=in_double,
            escape_pending=escape,
        ),
    )
