"""The turtle scripting language.

Every symbol of an L-system may be bound to a list of command lines::

    forward
    clockwise
    counterclockwise
    push_stack
    pop_stack
    add <variable> <number|variable>
    multiply <variable> <number|variable>
    set <variable> <number|variable>

Variables are the numeric fields of the pen: rotation, color_r, color_g,
color_b, turning_angle and step.  The destination of add/multiply/set is
always a variable; only the source may be a literal.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from errors import ParseError


class Variable(enum.Enum):
    ROTATION = "rotation"
    COLOR_R = "color_r"
    COLOR_G = "color_g"
    COLOR_B = "color_b"
    TURNING_ANGLE = "turning_angle"
    STEP = "step"

    @classmethod
    def parse(cls, text: str) -> Variable:
        try:
            return cls(text)
        except ValueError:
            raise ParseError(text) from None


@dataclass(frozen=True)
class Number:
    value: float


@dataclass(frozen=True)
class Ref:
    variable: Variable


Token = Number | Ref


def parse_token(text: str) -> Token:
    # Numbers first, so "1e3" or "-2" never reach the variable lookup.
    try:
        return Number(float(text))
    except ValueError:
        return Ref(Variable.parse(text))


class CommandKind(enum.Enum):
    FORWARD = "forward"
    CLOCKWISE = "clockwise"
    COUNTERCLOCKWISE = "counterclockwise"
    PUSH_STACK = "push_stack"
    POP_STACK = "pop_stack"
    ADD = "add"
    MULTIPLY = "multiply"
    SET = "set"


_MUTATORS = frozenset({CommandKind.ADD, CommandKind.MULTIPLY, CommandKind.SET})


@dataclass(frozen=True)
class Command:
    kind: CommandKind
    target: Variable | None = None
    source: Token | None = None

    def __str__(self) -> str:
        if self.kind not in _MUTATORS:
            return self.kind.value
        assert self.target is not None and self.source is not None
        if isinstance(self.source, Number):
            source = f"{self.source.value:g}"
        else:
            source = self.source.variable.value
        return f"{self.kind.value} {self.target.value} {source}"


def parse_command(line: str) -> Command:
    words = line.split()
    if not words:
        raise ParseError(line, "empty command")

    try:
        kind = CommandKind(words[0])
    except ValueError:
        raise ParseError(words[0]) from None

    operands = words[1:]
    if kind not in _MUTATORS:
        if operands:
            raise ParseError(line, f"{kind.value} takes no operands")
        return Command(kind)

    if len(operands) != 2:
        raise ParseError(line, f"{kind.value} takes a variable and a value")
    target = Variable.parse(operands[0])
    source = parse_token(operands[1])
    return Command(kind, target, source)


def parse_script(lines: Iterable[str]) -> list[Command]:
    return [parse_command(line) for line in lines]


def parse_command_table(table: Mapping[str, Iterable[str]]) -> dict[str, list[Command]]:
    """Parse the scripts of every symbol.

    Nothing is returned unless every line of every script parses.
    """
    return {symbol: parse_script(lines) for symbol, lines in table.items()}
