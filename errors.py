"""Exception types shared by the lystem modules."""

from __future__ import annotations

from typing import Any


class ConfigError(ValueError):
    pass


class ParseError(ConfigError):
    """A command, variable or operand in a turtle script was not recognised."""

    def __init__(
        self, text: str, reason: str = "token/variable/command not recognised"
    ) -> None:
        super().__init__(f"Error parsing {text!r}, {reason}")
        self.text = text


class StackUnderflowError(RuntimeError):
    pass


def _require(cond: Any, msg: str) -> None:
    if not cond:
        raise ConfigError(msg)
