"""Resolve commands on PATH and run them as child processes."""

import contextlib
import logging
import os
import shutil
import signal
import subprocess
import sys
import threading
from collections.abc import Iterator

from minishell.redirection import RedirectTarget, open_target

logger = logging.getLogger(__name__)

EXIT_SPAWN_FAILED = 1
EXIT_NOT_EXECUTABLE = 126
EXIT_NOT_FOUND = 127


class ResolveError(LookupError):
    """A command name could not be turned into a runnable path."""

    status = EXIT_NOT_FOUND
    reason = "error"

    def __init__(self, command: str) -> None:
        super().__init__(f"{command}: {self.reason}")
        self.command = command


class CommandNotFound(ResolveError):
    reason = "command not found"


class PermissionDenied(ResolveError):
    status = EXIT_NOT_EXECUTABLE
    reason = "permission denied"


def resolve_command(name: str, path: str | None = None) -> str:
    """Return the absolute path of an executable for name.

    Names containing a slash are checked directly instead of searched on
    PATH. Raises CommandNotFound or PermissionDenied.
    """
    if os.sep in name:
        if not os.path.exists(name):
            raise CommandNotFound(name)
        if os.path.isdir(name) or not os.access(name, os.X_OK):
            raise PermissionDenied(name)
        return os.path.abspath(name)

    found = shutil.which(name, path=path)
    if found:
        return os.path.abspath(found)

    # Present on PATH but not runnable
    search = os.environ.get("PATH", "") if path is None else path
    for directory in search.split(os.pathsep):
        candidate = os.path.join(directory or ".", name)
        if os.path.isfile(candidate):
            raise PermissionDenied(name)
    raise CommandNotFound(name)


def _is_main_thread() -> bool:
    return threading.current_thread() is threading.main_thread()


@contextlib.contextmanager
def sigint_handler(handler) -> Iterator[None]:
    """Install handler for SIGINT for the duration of the block.

    Signal handlers can only be changed from the main thread; elsewhere the
    block runs with the current handler.
    """
    if not _is_main_thread():
        yield
        return
    previous = signal.signal(signal.SIGINT, handler)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


def _exit_status(returncode: int) -> int:
    # subprocess reports death by signal N as -N
    if returncode < 0:
        return 128 - returncode
    return returncode


def launch(
    command: str,
    path: str,
    arguments: list[str],
    target: RedirectTarget | None = None,
    cwd: str | None = None,
) -> int:
    """Run path with arguments and wait for it, returning its exit status.

    stdin is inherited. An interrupt while the child runs is forwarded to
    the child as a termination request; the shell's own SIGINT handling is
    suspended until the child exits. Raises RedirectError when the redirect
    file cannot be opened.
    """
    proc: subprocess.Popen | None = None
    interrupted = False

    def cancel(signum, frame):
        nonlocal interrupted
        interrupted = True
        if proc is None:
            return
        logger.debug("forwarding interrupt to pid %d", proc.pid)
        with contextlib.suppress(ProcessLookupError):
            proc.terminate()

    # Installed before the spawn so an interrupt can never escape between
    # Popen returning and wait(); the child starts with default SIGINT.
    with open_target(target) as (stdout, stderr), sigint_handler(cancel):
        try:
            proc = subprocess.Popen(
                [command, *arguments],
                executable=path,
                cwd=cwd,
                stdout=stdout,
                stderr=stderr,
            )
        except OSError as e:
            print(f"{command}: {e.strerror or e}", file=sys.stderr)
            return EXIT_SPAWN_FAILED

        logger.debug("started %s (pid %d)", path, proc.pid)
        if interrupted:
            proc.terminate()
        returncode = proc.wait()

    logger.debug("pid %d exited with %d", proc.pid, returncode)
    return _exit_status(returncode)
