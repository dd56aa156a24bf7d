#!/usr/bin/env python3
import pytest

from errors import ParseError, StackUnderflowError
from pen import PenState, Stroke, Turtle
from scripting import Variable, parse_command_table


def _turtle(table: dict[str, list[str]], **pen: float) -> Turtle:
    return Turtle(PenState.from_config(pen), parse_command_table(table))


class TestPenState:
    def test_defaults(self) -> None:
        pen = PenState()
        assert pen.position == (0.0, 0.0)
        assert pen.color == (0, 0, 0)
        assert pen.rotation == 0.0
        assert pen.step == 1.0
        assert pen.turning_angle == 90.0

    @pytest.mark.parametrize(
        "value, stored", [(-10, 246), (300, 44), (255, 255), (256, 0), (12.9, 12)]
    )
    def test_color_wraps(self, value: float, stored: int) -> None:
        pen = PenState()
        pen.set(Variable.COLOR_G, value)
        assert pen.color == (0, stored, 0)
        assert pen.get(Variable.COLOR_G) == stored

    def test_float_fields_store_as_given(self) -> None:
        pen = PenState()
        pen.set(Variable.STEP, -2.5)
        pen.set(Variable.TURNING_ANGLE, 725.0)
        pen.set(Variable.ROTATION, 400.0)
        assert pen.get(Variable.STEP) == -2.5
        assert pen.get(Variable.TURNING_ANGLE) == 725.0
        assert pen.get(Variable.ROTATION) == 400.0

    def test_rotate_normalizes(self) -> None:
        pen = PenState()
        pen.rotate(-90)
        assert pen.rotation == pytest.approx(270)
        pen.rotate(-1000)
        assert 0 <= pen.rotation < 360
        assert pen.rotation == pytest.approx((270 - 1000) % 360)

    def test_from_config(self) -> None:
        pen = PenState.from_config({"step": 3, "color_r": 511})
        assert pen.step == 3.0
        assert pen.color == (255, 0, 0)

    def test_from_config_unknown_variable(self) -> None:
        with pytest.raises(ParseError):
            PenState.from_config({"position": 1})

    def test_direction(self) -> None:
        pen = PenState(rotation=90, step=2)
        dx, dy = pen.direction()
        assert dx == pytest.approx(0, abs=1e-12)
        assert dy == pytest.approx(2)


class TestTurtle:
    def test_single_forward(self) -> None:
        turtle = _turtle({"F": ["forward"]}, step=1, rotation=0)
        strokes = turtle.update("F")
        assert strokes == [Stroke((0.0, 0.0), (1.0, 0.0), (0, 0, 0))]
        assert turtle.pen.position == (1.0, 0.0)

    def test_unbound_symbol_is_noop(self) -> None:
        turtle = _turtle({"F": ["forward"]})
        before = turtle.pen.copy()
        assert turtle.update("X") == []
        assert turtle.pen == before

    def test_clockwise_wraps_heading(self) -> None:
        turtle = _turtle({"+": ["clockwise"]}, turning_angle=90)
        for _ in range(3):
            turtle.update("+")
        assert turtle.pen.rotation == 270
        turtle.update("+")
        assert turtle.pen.rotation == 0

    def test_counterclockwise(self) -> None:
        turtle = _turtle({"-": ["counterclockwise"]}, turning_angle=30)
        turtle.update("-")
        assert turtle.pen.rotation == 330

    def test_turning_angle_read_at_run_time(self) -> None:
        turtle = _turtle(
            {"+": ["multiply turning_angle 2", "clockwise"]}, turning_angle=10
        )
        turtle.update("+")
        turtle.update("+")
        assert turtle.pen.rotation == pytest.approx(60)

    def test_several_forwards_in_one_script(self) -> None:
        turtle = _turtle({"F": ["forward", "add color_r 10", "clockwise", "forward"]})
        strokes = turtle.update("F")
        assert len(strokes) == 2
        assert strokes[0].color == (0, 0, 0)
        assert strokes[1].color == (10, 0, 0)
        assert strokes[1].start == strokes[0].end
        assert strokes[1].end[0] == pytest.approx(1)
        assert strokes[1].end[1] == pytest.approx(1)

    def test_mutators(self) -> None:
        turtle = _turtle(
            {
                "A": [
                    "add step 2",
                    "multiply step 3",
                    "set color_b step",
                    "add color_r -10",
                ]
            },
            step=1,
        )
        turtle.update("A")
        assert turtle.pen.step == 9
        assert turtle.pen.color == (246, 0, 9)

    def test_push_pop_round_trip(self) -> None:
        turtle = _turtle({"[": ["push_stack"], "]": ["pop_stack"]}, step=3, color_g=7)
        turtle.pen.x, turtle.pen.y = 1.5, -2.0
        saved = turtle.pen.copy()
        turtle.update("[")
        turtle.update("]")
        assert turtle.pen == saved
        assert turtle.stack == []

    def test_stack_entries_are_copies(self) -> None:
        turtle = _turtle(
            {
                "[": ["push_stack", "add color_r 50", "set step 9"],
                "F": ["forward"],
                "]": ["pop_stack"],
            }
        )
        for symbol in "[F]F":
            turtle.update(symbol)
        assert turtle.pen.color == (0, 0, 0)
        assert turtle.pen.step == 1
        assert turtle.pen.position == pytest.approx((1.0, 0.0))

    def test_pop_empty_stack_is_fatal(self) -> None:
        turtle = _turtle({"]": ["pop_stack"]})
        with pytest.raises(StackUnderflowError):
            turtle.update("]")

    def test_branching_strokes(self) -> None:
        turtle = _turtle(
            {
                "F": ["forward"],
                "+": ["counterclockwise"],
                "[": ["push_stack"],
                "]": ["pop_stack"],
            },
            step=10,
        )
        strokes = [s for symbol in "F[+F]F" for s in turtle.update(symbol)]
        assert len(strokes) == 3
        assert strokes[1].end[0] == pytest.approx(10)
        assert strokes[1].end[1] == pytest.approx(-10)
        assert strokes[2].start == pytest.approx((10.0, 0.0))
        assert strokes[2].end == pytest.approx((20.0, 0.0))
