"""Main shell loop: prompt, read, lex, dispatch, repeat."""

import logging
import queue
import signal
import sys
import threading
from typing import TextIO

from minishell.builtins import BUILTIN_REGISTRY, BuiltinHandler
from minishell.config import ShellConfig, configure_logging
from minishell.expansion import expand_tokens
from minishell.launcher import ResolveError, launch, resolve_command, sigint_handler
from minishell.redirection import (
    Invocation,
    RedirectError,
    RedirectTarget,
    bound_streams,
    split_redirection,
)
from minishell.tokenizer import ParsedLine, lex

logger = logging.getLogger(__name__)

EXIT_INPUT_ERROR = 1
EXIT_SYNTAX_ERROR = 2


class InputReader(threading.Thread):
    """Daemon thread reading raw lines from a stream into a bounded queue.

    A line is only read once the main loop asks for one, so a child process
    that inherits stdin is not raced for input while it runs. End of input
    is queued as None; a read failure is queued as the exception.
    """

    def __init__(self, stream: TextIO) -> None:
        super().__init__(name="minishell-input", daemon=True)
        self.stream = stream
        self.lines: queue.Queue[str | Exception | None] = queue.Queue(maxsize=1)
        self._wanted = threading.Semaphore(0)
        self._requested = False

    def run(self) -> None:
        while True:
            self._wanted.acquire()
            try:
                line = self.stream.readline()
            except (OSError, ValueError) as e:
                self.lines.put(e)
                return
            if not line:
                self.lines.put(None)
                return
            self.lines.put(line)

    def next_line(self) -> str | Exception | None:
        """Block until the next line arrives. KeyboardInterrupt aborts the wait.

        An interrupted request stays outstanding; the line it produces is
        returned by the following call.
        """
        if not self._requested:
            self._requested = True
            self._wanted.release()
        event = self.lines.get()
        self._requested = False
        return event


class Shell:
    """Shell state and main loop."""

    def __init__(self, config: ShellConfig | None = None) -> None:
        self.config = config or ShellConfig.from_env()
        self.last_exit_code: int = 0
        self._pending: list[str] = []

    @property
    def continuing(self) -> bool:
        """True while an open quote or trailing backslash awaits more input."""
        return bool(self._pending)

    def get_prompt(self) -> str:
        return self.config.continuation_prompt if self._pending else self.config.prompt

    def reset_input(self) -> None:
        """Discard partially entered input."""
        self._pending.clear()

    def feed(self, chunk: str) -> bool:
        """Add one physical line of input.

        Returns False while quoting is left open (the caller should prompt
        for a continuation line); otherwise the accumulated command is run
        and True is returned.
        """
        self._pending.append(chunk)
        text = "".join(self._pending).strip()
        if not text:
            self._pending.clear()
            return True

        parsed = lex(text)
        if not parsed.is_complete:
            logger.debug("incomplete input (%s), waiting for more", parsed.state)
            return False

        self._pending.clear()
        self._execute(parsed)
        return True

    def run_command(self, line: str) -> None:
        """Run a single, complete command line."""
        text = line.strip()
        if not text:
            return

        parsed = lex(text)
        if not parsed.is_complete:
            print("minishell: syntax error: unexpected end of file", file=sys.stderr)
            self.last_exit_code = EXIT_SYNTAX_ERROR
            return

        self._execute(parsed)

    def _execute(self, parsed: ParsedLine) -> None:
        """Expand, split off the redirection and dispatch.

        A syntax error discards the line and leaves last_exit_code alone.
        """
        words = expand_tokens(parsed.tokens)
        if not words:
            return

        try:
            invocation = split_redirection(words)
        except ValueError as e:
            print(f"minishell: {e}", file=sys.stderr)
            return

        self.dispatch(invocation)

    def dispatch(self, invocation: Invocation) -> None:
        handler = BUILTIN_REGISTRY.get(invocation.command)
        if handler is not None:
            logger.debug("builtin %s %r", invocation.command, invocation.arguments)
            self.last_exit_code = self._run_builtin(handler, invocation)
        else:
            self.last_exit_code = self.run_external(
                invocation.command, invocation.arguments, invocation.redirect
            )

    def _run_builtin(self, handler: BuiltinHandler, invocation: Invocation) -> int:
        """Run a builtin with SIGINT ignored and its redirection bound."""
        try:
            with sigint_handler(signal.SIG_IGN), bound_streams(invocation.redirect):
                return handler(invocation.arguments, self)
        except RedirectError as e:
            print(f"minishell: {e.filename}: {e.strerror}", file=sys.stderr)
            return 1
        except OSError as e:
            # Output lost on write or close, e.g. ENOSPC on the redirect file
            where = invocation.redirect.file if invocation.redirect else "write error"
            print(f"minishell: {where}: {e.strerror or e}", file=sys.stderr)
            return 1

    def run_external(
        self,
        command: str,
        arguments: list[str],
        redirect: RedirectTarget | None = None,
    ) -> int:
        """Resolve command on PATH and run it, returning its exit status."""
        try:
            path = resolve_command(command)
        except ResolveError as e:
            print(e, file=sys.stderr)
            return e.status

        logger.debug("external %s -> %s %r", command, path, arguments)
        sys.stdout.flush()
        sys.stderr.flush()
        try:
            return launch(command, path, arguments, redirect)
        except RedirectError as e:
            print(f"minishell: {e.filename}: {e.strerror}", file=sys.stderr)
            return 1

    def run(self, stdin: TextIO | None = None) -> None:
        """Main shell loop."""
        reader = InputReader(stdin or sys.stdin)
        reader.start()

        while True:
            try:
                print(self.get_prompt(), end="", flush=True)
                event = reader.next_line()
                if event is None:
                    print()
                    break
                if isinstance(event, Exception):
                    print(f"Error reading input: {event}", file=sys.stderr)
                    sys.exit(EXIT_INPUT_ERROR)
                self.feed(event)
            except KeyboardInterrupt:
                print()
                self.reset_input()


def main() -> None:
    """Entry point."""
    config = ShellConfig.from_env()
    configure_logging(config.log_level)
    shell = Shell(config)
    shell.run()
