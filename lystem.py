#!/usr/bin/env python3
"""lystem.py

Simulates L-systems and draws them with a scriptable turtle.

- JSON-based input configuration.
- Bounded-memory expansion: only one index per generation is kept.
- Each symbol runs a small script against the pen (position, heading,
  color, step, turning angle), so colors and lengths can change as the
  drawing grows.
- Output as a colored SVG or as a numbered PNG sequence for animation.

Run:
  python lystem.py render config.json 5 output.svg
  python lystem.py frames config.json 5 images/ --steps 4
  python lystem.py validate config.json
  python lystem.py --help
"""

from __future__ import annotations

import argparse
import itertools
import json
import sys
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any, cast

from errors import ConfigError, ParseError, StackUnderflowError, _require
from expansion import LSystem, RuleTable
from pen import PenState, Stroke, Turtle
from render import write_frames, write_svg
from scripting import Command, parse_command_table

# -------------------------
# Config validation
# -------------------------


def _as_float(x: Any, path: str) -> float:
    _require(
        isinstance(x, (int, float)) and not isinstance(x, bool),
        f"{path} must be a number",
    )
    return float(x)


def _as_int(x: Any, path: str) -> int:
    _require(
        isinstance(x, int) and not isinstance(x, bool), f"{path} must be an integer"
    )
    return int(x)


def _as_str(x: Any, path: str) -> str:
    _require(isinstance(x, str), f"{path} must be a string")
    return cast(str, x)


def _as_bool(x: Any, path: str) -> bool:
    _require(isinstance(x, bool), f"{path} must be a boolean")
    return cast(bool, x)


def _as_dict(x: Any, path: str) -> dict[str, Any]:
    _require(isinstance(x, dict), f"{path} must be an object")
    return cast(dict[str, Any], x)


def _as_str_list(x: Any, path: str) -> list[str]:
    _require(isinstance(x, list), f"{path} must be a list of strings")
    return [_as_str(item, f"{path}[{i}]") for i, item in enumerate(x)]


def _as_symbol(x: Any, path: str) -> str:
    _require(
        isinstance(x, str) and len(x) == 1,
        f"{path} keys must be single-character strings",
    )
    return cast(str, x)


# -------------------------
# Config model
# -------------------------


@dataclass(frozen=True)
class SvgOptions:
    margin: float = 10.0
    precision: int = 3
    flip_y: bool = True
    stroke_width: float = 1.0
    background: str | None = None


@dataclass(frozen=True)
class LystemConfig:
    name: str
    axiom: str
    rules: RuleTable
    commands: dict[str, list[Command]]
    start_state: dict[str, float]
    svg: SvgOptions

    def new_pen(self) -> PenState:
        return PenState.from_config(self.start_state)


def parse_config(obj: dict[str, Any]) -> LystemConfig:
    """Validate a decoded config and parse every turtle script in it.

    Raises ConfigError (ParseError for script text) before anything is drawn.
    """
    obj = _as_dict(obj, "root")

    name = _as_str(obj.get("name", "L-System"), "name")
    axiom = _as_str(obj.get("axiom", ""), "axiom")
    _require(len(axiom) > 0, "axiom must be non-empty")

    rules = RuleTable()
    for k, v in _as_dict(obj.get("rules", {}), "rules").items():
        rules.add_rule(_as_symbol(k, "rules"), _as_str(v, f"rules['{k}']"))

    scripts: dict[str, list[str]] = {}
    for k, v in _as_dict(obj.get("commands", {}), "commands").items():
        scripts[_as_symbol(k, "commands")] = _as_str_list(v, f"commands['{k}']")
    commands = parse_command_table(scripts)

    start_state = {
        k: _as_float(v, f"start_state['{k}']")
        for k, v in _as_dict(obj.get("start_state", {}), "start_state").items()
    }
    # Unknown variable names fail here rather than at draw time.
    PenState.from_config(start_state)

    svg_obj = _as_dict(obj.get("svg", {}), "svg")
    precision = _as_int(svg_obj.get("precision", 3), "svg.precision")
    _require(0 <= precision <= 10, "svg.precision must be between 0 and 10")
    background = svg_obj.get("background")
    if background is not None:
        background = _as_str(background, "svg.background")
    svg = SvgOptions(
        margin=_as_float(svg_obj.get("margin", 10), "svg.margin"),
        precision=precision,
        flip_y=_as_bool(svg_obj.get("flip_y", True), "svg.flip_y"),
        stroke_width=_as_float(svg_obj.get("stroke_width", 1.0), "svg.stroke_width"),
        background=background,
    )

    return LystemConfig(
        name=name,
        axiom=axiom,
        rules=rules,
        commands=commands,
        start_state=start_state,
        svg=svg,
    )


def load_json(path: str) -> dict[str, Any]:
    with open(path, encoding="utf-8") as f:
        try:
            return cast(dict[str, Any], json.load(f))
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in {path}: {e}") from e


def load_config(path: str) -> LystemConfig:
    return parse_config(load_json(path))


# -------------------------
# Simulation
# -------------------------


def simulate(config: LystemConfig, generations: int) -> Iterator[Stroke]:
    """Yield the strokes of the given generation in the order they are drawn."""
    system = LSystem(config.axiom, generations, config.rules)
    turtle = Turtle(config.new_pen(), config.commands)
    for chunk in system:
        for symbol in chunk:
            yield from turtle.update(symbol)


# -------------------------
# CLI / Help
# -------------------------

HELP_EPILOG = r"""
INPUT JSON SYNTAX

  name: string (optional)
      Title written into the SVG <title>.

  axiom: string (required)
      The generation-0 word.

  rules: object mapping single character -> string (optional)
      Production rules. Symbols without a rule rewrite to themselves.

  commands: object mapping single character -> list of strings (optional)
      The turtle script run for each symbol of the last generation.
      Symbols without a script draw nothing.

        forward                  draw a line of `step` units along the heading
        clockwise                heading += turning_angle
        counterclockwise         heading -= turning_angle
        push_stack               save the whole pen
        pop_stack                restore the last saved pen
        add <var> <value>        var = var + value
        multiply <var> <value>   var = var * value
        set <var> <value>        var = value

      <var> is one of rotation, color_r, color_g, color_b, turning_angle,
      step.  <value> is a number or one of those variables.  Color channels
      wrap around modulo 256.

  start_state: object mapping variable -> number (optional)
      Initial pen values. Defaults: rotation 0, step 1, turning_angle 90,
      color 0 0 0. The pen always starts at (0, 0).

  svg: object (optional)
      margin (10), precision (3), flip_y (true), stroke_width (1),
      background (none).

Example (Koch curve):

    {
      "axiom": "F",
      "rules": {"F": "F+F--F+F"},
      "commands": {
        "F": ["forward"],
        "+": ["counterclockwise"],
        "-": ["clockwise"]
      },
      "start_state": {"step": 10, "turning_angle": 60, "color_g": 200}
    }

To turn frames into a video:
  ffmpeg -r 60 -y -i images/out%d.png output.mp4
"""


def _positive_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {text!r}") from None
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be > 0, got {value}")
    return value


def _non_negative_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {text!r}") from None
    if value < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {value}")
    return value


def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="lystem",
        description="Simulates and draws L-systems.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=HELP_EPILOG,
    )

    sub = p.add_subparsers(dest="cmd", required=True)

    pr = sub.add_parser("render", help="Draw the last generation to an SVG file.")
    pr.add_argument("config", help="Path to the input JSON config.")
    pr.add_argument(
        "generations", type=_positive_int, help="The number of generations to simulate."
    )
    pr.add_argument("output", help="Path to write the SVG output.")

    pf = sub.add_parser(
        "frames", help="Draw the last generation as a numbered PNG sequence."
    )
    pf.add_argument("config", help="Path to the input JSON config.")
    pf.add_argument(
        "generations", type=_positive_int, help="The number of generations to simulate."
    )
    pf.add_argument("output_dir", help="Directory receiving out<N>.png files.")
    pf.add_argument(
        "-s",
        "--steps",
        type=_positive_int,
        default=1,
        help="How many strokes are drawn per frame (default: 1).",
    )
    pf.add_argument(
        "-l", "--last", action="store_true", help="Only save the last frame."
    )
    pf.add_argument(
        "--still-frames",
        type=_non_negative_int,
        default=240,
        help="Copies of the finished image appended at the end (default: 240).",
    )

    pv = sub.add_parser(
        "validate", help="Validate a JSON config and print a brief summary."
    )
    pv.add_argument("config", help="Path to the input JSON config.")
    pv.add_argument(
        "generations",
        type=_positive_int,
        nargs="?",
        default=1,
        help="Generations used for the sample run (default: 1).",
    )

    return p


# -------------------------
# Commands
# -------------------------


def cmd_render(config_path: str, generations: int, output_path: str) -> None:
    cfg = load_config(config_path)
    strokes = list(simulate(cfg, generations))
    write_svg(
        strokes,
        out_path=output_path,
        margin=cfg.svg.margin,
        precision=cfg.svg.precision,
        flip_y=cfg.svg.flip_y,
        stroke_width=cfg.svg.stroke_width,
        background=cfg.svg.background,
        title=cfg.name,
    )
    print(f"{len(strokes)} strokes written to {output_path}")


def cmd_frames(
    config_path: str,
    generations: int,
    output_dir: str,
    steps: int,
    last_only: bool,
    still_frames: int,
) -> None:
    cfg = load_config(config_path)
    strokes = list(simulate(cfg, generations))
    write_frames(
        strokes, output_dir, steps=steps, last_only=last_only, still_frames=still_frames
    )


_VALIDATE_STROKE_LIMIT = 10_000


def cmd_validate(config_path: str, generations: int) -> None:
    cfg = load_config(config_path)

    print(f"name: {cfg.name}")
    print(f"axiom length: {len(cfg.axiom)}")
    print(f"rules: {len(cfg.rules)}")
    print(f"commands: {sum(len(script) for script in cfg.commands.values())} "
          f"in {len(cfg.commands)} scripts")
    pen = cfg.new_pen()
    print(
        "pen: "
        f"rotation={pen.rotation} step={pen.step} turning_angle={pen.turning_angle} "
        f"color={pen.color}"
    )

    # A bounded run catches unbalanced push/pop scripts early.
    sampled = list(itertools.islice(simulate(cfg, generations), _VALIDATE_STROKE_LIMIT))
    truncated = len(sampled) == _VALIDATE_STROKE_LIMIT
    label = f"{len(sampled)}+" if truncated else str(len(sampled))
    print(f"strokes (generation {generations}, sampled): {label}")
    if truncated:
        print(
            f"warning: drawing exceeds {_VALIDATE_STROKE_LIMIT} strokes; "
            "only the first portion was checked"
        )


def main(argv: list[str] | None = None) -> int:
    ap = build_argparser()
    args = ap.parse_args(argv)

    try:
        if args.cmd == "render":
            cmd_render(args.config, args.generations, args.output)
        elif args.cmd == "frames":
            cmd_frames(
                args.config,
                args.generations,
                args.output_dir,
                args.steps,
                args.last,
                args.still_frames,
            )
        elif args.cmd == "validate":
            cmd_validate(args.config, args.generations)
        else:
            raise AssertionError("unreachable")
    except ParseError as e:
        print(f"Script error: {e}", file=sys.stderr)
        return 2
    except ConfigError as e:
        print(f"Config error: {e}", file=sys.stderr)
        return 2
    except StackUnderflowError as e:
        print(f"Script error: {e}", file=sys.stderr)
        return 3
    except OSError as e:
        print(f"File error: {e}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
