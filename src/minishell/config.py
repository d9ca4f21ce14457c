"""Shell settings read from the environment, plus logging setup."""

import logging
import os
import sys
from collections.abc import Mapping
from dataclasses import dataclass

ENV_PREFIX = "MINISHELL_"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class ShellConfig:
    """Runtime settings for a Shell instance."""

    prompt: str = "$ "
    continuation_prompt: str = ". "
    log_level: int = logging.WARNING
    list_after_cd: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ShellConfig":
        """Build a config from MINISHELL_* variables, falling back to defaults."""
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            prompt=env.get(f"{ENV_PREFIX}PROMPT", defaults.prompt),
            continuation_prompt=env.get(f"{ENV_PREFIX}PS2", defaults.continuation_prompt),
            log_level=_parse_level(env.get(f"{ENV_PREFIX}LOG_LEVEL", "")),
            list_after_cd=env.get(f"{ENV_PREFIX}LIST_AFTER_CD", "").strip().lower() in _TRUTHY,
        )


def _parse_level(name: str) -> int:
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.WARNING


def configure_logging(level: int) -> logging.Logger:
    """Attach a stderr handler to the package logger (idempotent)."""
    logger = logging.getLogger("minishell")
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        logger.addHandler(handler)
    return logger
