#!/usr/bin/env python3
import pytest

from errors import ConfigError, ParseError
from scripting import (
    Command,
    CommandKind,
    Number,
    Ref,
    Variable,
    parse_command,
    parse_command_table,
    parse_token,
)


class TestTokens:
    def test_number_literal(self) -> None:
        assert parse_token("3.5") == Number(3.5)

    def test_negative_and_exponent(self) -> None:
        assert parse_token("-2") == Number(-2.0)
        assert parse_token("1e3") == Number(1000.0)

    def test_variable_reference(self) -> None:
        assert parse_token("step") == Ref(Variable.STEP)
        assert parse_token("color_b") == Ref(Variable.COLOR_B)

    def test_unknown_variable(self) -> None:
        with pytest.raises(ParseError) as excinfo:
            parse_token("colour_r")
        assert excinfo.value.text == "colour_r"
        assert "colour_r" in str(excinfo.value)


class TestCommands:
    @pytest.mark.parametrize(
        "line, kind",
        [
            ("forward", CommandKind.FORWARD),
            ("clockwise", CommandKind.CLOCKWISE),
            ("counterclockwise", CommandKind.COUNTERCLOCKWISE),
            ("push_stack", CommandKind.PUSH_STACK),
            ("  pop_stack  ", CommandKind.POP_STACK),
        ],
    )
    def test_plain_commands(self, line: str, kind: CommandKind) -> None:
        assert parse_command(line) == Command(kind)

    def test_add_literal(self) -> None:
        cmd = parse_command("add color_r 10")
        assert cmd == Command(CommandKind.ADD, Variable.COLOR_R, Number(10.0))

    def test_multiply_variable(self) -> None:
        cmd = parse_command("multiply step turning_angle")
        assert cmd.kind is CommandKind.MULTIPLY
        assert cmd.target is Variable.STEP
        assert cmd.source == Ref(Variable.TURNING_ANGLE)

    def test_set_tabs_between_operands(self) -> None:
        cmd = parse_command("set\trotation\t90")
        assert cmd == Command(CommandKind.SET, Variable.ROTATION, Number(90.0))

    def test_unknown_command(self) -> None:
        with pytest.raises(ParseError) as excinfo:
            parse_command("frobnicate")
        assert excinfo.value.text == "frobnicate"
        assert "frobnicate" in str(excinfo.value)

    def test_destination_must_be_variable(self) -> None:
        with pytest.raises(ParseError) as excinfo:
            parse_command("set 3 step")
        assert excinfo.value.text == "3"

    def test_malformed_source(self) -> None:
        with pytest.raises(ParseError) as excinfo:
            parse_command("add step 1.2.3")
        assert excinfo.value.text == "1.2.3"

    @pytest.mark.parametrize("line", ["add step", "set step 1 2", "multiply"])
    def test_wrong_operand_count(self, line: str) -> None:
        with pytest.raises(ParseError) as excinfo:
            parse_command(line)
        assert excinfo.value.text == line

    def test_operands_on_plain_command(self) -> None:
        with pytest.raises(ParseError):
            parse_command("forward 10")

    def test_blank_line(self) -> None:
        with pytest.raises(ParseError):
            parse_command("   ")

    def test_parse_error_is_config_error(self) -> None:
        with pytest.raises(ConfigError):
            parse_command("jump")

    def test_str_round_trips(self) -> None:
        lines = ["forward", "add color_g 24", "multiply step 0.9", "set step rotation"]
        for line in lines:
            assert str(parse_command(line)) == line


class TestCommandTable:
    def test_table(self) -> None:
        table = parse_command_table(
            {"F": ["forward", "add color_r 1"], "[": ["push_stack"], "X": []}
        )
        assert [c.kind for c in table["F"]] == [CommandKind.FORWARD, CommandKind.ADD]
        assert table["X"] == []

    def test_single_bad_line_fails_whole_table(self) -> None:
        with pytest.raises(ParseError) as excinfo:
            parse_command_table({"F": ["forward"], "G": ["forward", "fly"]})
        assert excinfo.value.text == "fly"
