"""Pen state and the turtle that runs symbol scripts against it."""

from __future__ import annotations

import math
from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace

from errors import StackUnderflowError
from scripting import Command, CommandKind, Number, Token, Variable

Point = tuple[float, float]
Color = tuple[int, int, int]


def _wrap_byte(value: float) -> int:
    # Out of range values wrap around instead of saturating.
    if not math.isfinite(value):
        return 0
    return int((value + 256) % 256) % 256


@dataclass(frozen=True)
class Stroke:
    start: Point
    end: Point
    color: Color


@dataclass
class PenState:
    x: float = 0.0
    y: float = 0.0
    color: Color = (0, 0, 0)
    rotation: float = 0.0
    step: float = 1.0
    turning_angle: float = 90.0

    @classmethod
    def from_config(cls, start_state: Mapping[str, float]) -> PenState:
        pen = cls()
        for name, value in start_state.items():
            pen.set(Variable.parse(name), value)
        return pen

    @property
    def position(self) -> Point:
        return (self.x, self.y)

    def get(self, variable: Variable) -> float:
        getter, _ = _ACCESSORS[variable]
        return getter(self)

    def set(self, variable: Variable, value: float) -> None:
        _, setter = _ACCESSORS[variable]
        setter(self, value)

    def rotate(self, delta: float) -> None:
        rotation = (self.rotation + delta + 360.0) % 360.0
        # -1e-15 % 360.0 == 360.0
        self.rotation = 0.0 if rotation >= 360.0 else rotation

    def direction(self) -> Point:
        rad = math.radians(self.rotation)
        return (math.cos(rad) * self.step, math.sin(rad) * self.step)

    def copy(self) -> PenState:
        return replace(self)


_Accessor = tuple[Callable[[PenState], float], Callable[[PenState, float], None]]


def _channel(index: int) -> _Accessor:
    def get(pen: PenState) -> float:
        return float(pen.color[index])

    def set_(pen: PenState, value: float) -> None:
        color = list(pen.color)
        color[index] = _wrap_byte(value)
        pen.color = (color[0], color[1], color[2])

    return get, set_


def _field(name: str) -> _Accessor:
    def get(pen: PenState) -> float:
        return float(getattr(pen, name))

    def set_(pen: PenState, value: float) -> None:
        setattr(pen, name, float(value))

    return get, set_


_ACCESSORS: dict[Variable, _Accessor] = {
    Variable.ROTATION: _field("rotation"),
    Variable.COLOR_R: _channel(0),
    Variable.COLOR_G: _channel(1),
    Variable.COLOR_B: _channel(2),
    Variable.TURNING_ANGLE: _field("turning_angle"),
    Variable.STEP: _field("step"),
}


class Turtle:
    """Runs the script bound to each symbol against a live pen.

    `stack` holds independent copies of the pen saved by push_stack.
    """

    def __init__(
        self, pen: PenState, commands: Mapping[str, list[Command]] | None = None
    ) -> None:
        self.pen = pen
        self.stack: list[PenState] = []
        self.commands: dict[str, list[Command]] = dict(commands or {})

    def _resolve(self, token: Token) -> float:
        if isinstance(token, Number):
            return token.value
        return self.pen.get(token.variable)

    def update(self, symbol: str) -> list[Stroke]:
        strokes: list[Stroke] = []
        script = self.commands.get(symbol)
        if script is None:
            return strokes

        for command in script:
            kind = command.kind
            if kind is CommandKind.FORWARD:
                dx, dy = self.pen.direction()
                start = self.pen.position
                end = (start[0] + dx, start[1] + dy)
                strokes.append(Stroke(start, end, self.pen.color))
                self.pen.x, self.pen.y = end
            elif kind is CommandKind.CLOCKWISE:
                self.pen.rotate(self.pen.turning_angle)
            elif kind is CommandKind.COUNTERCLOCKWISE:
                self.pen.rotate(-self.pen.turning_angle)
            elif kind is CommandKind.PUSH_STACK:
                self.stack.append(self.pen.copy())
            elif kind is CommandKind.POP_STACK:
                if not self.stack:
                    raise StackUnderflowError(
                        f"pop_stack in the script of {symbol!r} "
                        "with no saved states on the stack"
                    )
                self.pen = self.stack.pop()
            else:
                assert command.target is not None and command.source is not None
                value = self._resolve(command.source)
                if kind is CommandKind.ADD:
                    value = self.pen.get(command.target) + value
                elif kind is CommandKind.MULTIPLY:
                    value = self.pen.get(command.target) * value
                self.pen.set(command.target, value)

        return strokes
