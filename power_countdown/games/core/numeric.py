# power_countdown/games/core/numeric.py
from __future__ import annotations
import ast
import math
import re

EPSILON = 1e-4

# Labels only ever contain numbers, grouping and the three game operators
ALLOWED_NODES = (
    ast.Expression, ast.BinOp, ast.UnaryOp, ast.Constant,
    ast.Mult, ast.Div, ast.Pow, ast.USub, ast.UAdd, ast.Load,
)

_LABEL_CHARS_RE = re.compile(r"^[0-9.\s()+\-*/^×x]+$")


def is_target_reached(value: float, target: float) -> bool:
    return abs(value - target) < EPSILON


def format_number(value: float) -> str:
    """
    Canonical display label for a card value:
      80.00000001 -> '80'
      0.2         -> '1/5'
      15.5884572  -> '15.588'
    """
    nearest = round(value)
    if abs(value - nearest) < EPSILON:
        return str(int(nearest))

    # common reciprocals read better as fractions
    inverse = 1 / value
    nearest_inv = round(inverse)
    if abs(inverse - nearest_inv) < EPSILON:
        return f"1/{int(nearest_inv)}"

    return f"{value:.3f}".rstrip("0").rstrip(".")


def normalize_label_for_eval(label: str) -> str:
    """Turn display glyphs into plain Python arithmetic."""
    s = label.strip()
    s = s.replace("×", "*").replace("x", "*").replace("^", "**")
    return re.sub(r"\s+", "", s)


def parse_label(label: str) -> float:
    """
    Read a card label back into a number. Accepts what format_number and the
    combination labels produce ('7', '1/5', '1.414', '243^(1/2)', '3×(1/7)').
    Raises ValueError for anything else.
    """
    if not label or not _LABEL_CHARS_RE.match(label):
        raise ValueError(f"Not a card label: {label!r}")

    tree = ast.parse(normalize_label_for_eval(label), mode="eval")
    for node in ast.walk(tree):
        if not isinstance(node, ALLOWED_NODES):
            raise ValueError(f"Illegal label: {type(node).__name__}")

    code = compile(tree, "<label>", "eval")
    try:
        result = eval(code, {"__builtins__": {}}, {})
        result = float(result)
    except (ZeroDivisionError, OverflowError, TypeError) as e:
        raise ValueError(f"Label does not evaluate to a real number: {label!r}") from e

    if not math.isfinite(result):
        raise ValueError(f"Label does not evaluate to a finite number: {label!r}")
    return result


def label_round_trips(label: str, value: float) -> bool:
    try:
        return abs(parse_label(label) - value) < EPSILON
    except ValueError:
        return False
