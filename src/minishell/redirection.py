"""Split redirection operators off a command line and bind the target file."""

import contextlib
import logging
import sys
import threading
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import IO

logger = logging.getLogger(__name__)


class Stream(Enum):
    STDOUT = "stdout"
    STDERR = "stderr"
    BOTH = "both"


REDIRECT_OPERATORS: dict[str, tuple[Stream, bool]] = {
    ">": (Stream.STDOUT, False),
    "1>": (Stream.STDOUT, False),
    ">>": (Stream.STDOUT, True),
    "1>>": (Stream.STDOUT, True),
    "2>": (Stream.STDERR, False),
    "2>>": (Stream.STDERR, True),
    "&>": (Stream.BOTH, False),
    "&>>": (Stream.BOTH, True),
}


class RedirectionSyntaxError(ValueError):
    """A redirection operator with no file name after it."""


class RedirectError(OSError):
    """The redirect target file could not be opened."""


@dataclass(frozen=True)
class RedirectTarget:
    stream: Stream
    file: str
    append: bool = False

    @property
    def mode(self) -> str:
        return "a" if self.append else "w"


@dataclass
class Invocation:
    """A single command ready for dispatch."""

    command: str
    arguments: list[str] = field(default_factory=list)
    redirect: RedirectTarget | None = None


def split_redirection(argv: list[str]) -> Invocation:
    """Separate the first redirection operator and its file from argv.

    Only one redirection per line is supported: words after the target file
    are ignored. Raises RedirectionSyntaxError when an operator is the last
    word, and ValueError for an empty argv.

    Example: ['echo', 'hi', '2>>', 'log'] ->
        Invocation('echo', ['hi'], RedirectTarget(Stream.STDERR, 'log', True))
    """
    if not argv:
        raise ValueError("syntax error: missing command")

    words = argv
    redirect: RedirectTarget | None = None

    for i, word in enumerate(argv):
        if word not in REDIRECT_OPERATORS:
            continue
        if i + 1 >= len(argv):
            raise RedirectionSyntaxError("syntax error near unexpected token `newline'")
        stream, append = REDIRECT_OPERATORS[word]
        redirect = RedirectTarget(stream, argv[i + 1], append)
        words = argv[:i]
        if len(argv) > i + 2:
            logger.debug("ignoring words after redirection target: %r", argv[i + 2 :])
        break

    if not words:
        raise ValueError("syntax error: missing command")

    return Invocation(command=words[0], arguments=list(words[1:]), redirect=redirect)


@contextlib.contextmanager
def open_target(target: RedirectTarget | None) -> Iterator[tuple[IO[str] | None, IO[str] | None]]:
    """Open the redirect file and yield (stdout, stderr) for a child process.

    None means the stream is inherited. The file is created with the default
    0o666 mode (before umask), truncated unless appending, and closed on exit.
    Raises RedirectError when the file cannot be opened.
    """
    if target is None:
        yield None, None
        return

    try:
        fh = open(target.file, target.mode)  # noqa: SIM115
    except OSError as e:
        raise RedirectError(e.errno, e.strerror, target.file) from e

    with fh:
        match target.stream:
            case Stream.STDOUT:
                yield fh, None
            case Stream.STDERR:
                yield None, fh
            case Stream.BOTH:
                yield fh, fh


# sys.stdout / sys.stderr are process-wide; only one builtin may rebind them
_STREAM_LOCK = threading.Lock()


@contextlib.contextmanager
def bound_streams(target: RedirectTarget | None) -> Iterator[None]:
    """Point sys.stdout and/or sys.stderr at the redirect file for a builtin.

    The original streams are restored and the file closed however the block
    exits, including SystemExit from the exit builtin.
    """
    if target is None:
        yield
        return

    with _STREAM_LOCK, open_target(target) as (out, err), contextlib.ExitStack() as stack:
        if out is not None:
            stack.enter_context(contextlib.redirect_stdout(out))
        if err is not None:
            stack.enter_context(contextlib.redirect_stderr(err))
        yield
