"""Built-in shell commands."""

import os
import sys
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, TypeAlias

from minishell.launcher import ResolveError, resolve_command

if TYPE_CHECKING:
    from minishell.shell import Shell

BuiltinHandler: TypeAlias = Callable[[list[str], "Shell"], int]


def builtin_exit(args: list[str], shell: "Shell") -> int:
    # Arguments are accepted and ignored
    sys.exit(0)


def builtin_echo(args: list[str], shell: "Shell") -> int:
    print(" ".join(args))
    return 0


def builtin_type(args: list[str], shell: "Shell") -> int:
    if not args:
        print()
        return 0
    ret = 0
    for name in args:
        match name:
            case n if n in BUILTIN_REGISTRY:
                print(f"{name} is a shell builtin")
                ret = 0
            case _:
                try:
                    path = resolve_command(name)
                except ResolveError:
                    print(f"{name}: not found")
                    ret = 1
                else:
                    print(f"{name} is {path}")
                    ret = 0
    return ret


def builtin_pwd(args: list[str], shell: "Shell") -> int:
    try:
        cwd = os.getcwd()
    except OSError as e:
        print(f"pwd: {e.strerror or e}", file=sys.stderr)
        return 1
    print(cwd)
    return 0


def builtin_cd(args: list[str], shell: "Shell") -> int:
    arg = args[0] if args else "~"
    target = arg
    if target.startswith("~"):
        try:
            home = str(Path.home())
        except (RuntimeError, KeyError):
            print(f"cd: {arg}: Error finding HOME variable", file=sys.stderr)
            return 1
        target = home + target[1:]

    try:
        os.chdir(target)
    except FileNotFoundError:
        print(f"cd: {arg}: No such file or directory", file=sys.stderr)
        return 1
    except NotADirectoryError:
        print(f"cd: {arg}: Not a directory", file=sys.stderr)
        return 1
    except PermissionError:
        print(f"cd: {arg}: Permission denied", file=sys.stderr)
        return 1

    if shell.config.list_after_cd:
        shell.run_external("ls", [])
    return 0


BUILTIN_REGISTRY: dict[str, BuiltinHandler] = {
    "exit": builtin_exit,
    "echo": builtin_echo,
    "type": builtin_type,
    "pwd": builtin_pwd,
    "cd": builtin_cd,
}
