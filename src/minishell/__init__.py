"""An interactive command interpreter with POSIX-style quoting and redirection."""

__version__ = "0.1.0"
