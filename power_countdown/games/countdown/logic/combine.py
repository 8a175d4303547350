# power_countdown/games/countdown/logic/combine.py
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple
import math

from ...core.numeric import format_number, label_round_trips
from .cards import Card


class InvalidCombination(ValueError):
    """The staged cards cannot be combined with the chosen operation."""


class Operation(str, Enum):
    MULTIPLY = "MULTIPLY"
    POWER = "POWER"
    RECIPROCAL = "RECIPROCAL"

    @property
    def is_unary(self) -> bool:
        return self is Operation.RECIPROCAL

    @classmethod
    def parse(cls, raw) -> "Operation":
        key = str(raw or "").strip().upper()
        aliases = {"MUL": "MULTIPLY", "POW": "POWER", "POWER_AB": "POWER", "RECIP": "RECIPROCAL"}
        key = aliases.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Unknown operation: {raw!r}") from None


@dataclass(frozen=True)
class CombineOutcome:
    card: Card
    consumed_ids: Tuple[str, ...]
    returned: Tuple[Card, ...] = ()


def _grouped(label: str) -> str:
    return label if label.replace(".", "").isdigit() else f"({label})"


def _operation_label(op: Operation, a: Card, b: Card) -> str:
    if op is Operation.MULTIPLY:
        return f"{_grouped(a.label)}×{_grouped(b.label)}"
    if op is Operation.POWER:
        return f"{_grouped(a.label)}^{_grouped(b.label)}"
    return f"1/{_grouped(a.label)}"


def compute(op: Operation, a: float, b: float) -> float:
    try:
        if op is Operation.MULTIPLY:
            result = a * b
        elif op is Operation.POWER:
            result = math.pow(a, b)
        else:
            result = 1 / a
    except ZeroDivisionError:
        raise InvalidCombination("Division by zero") from None
    except (ValueError, OverflowError) as e:
        # math.pow: 0^negative, negative^fraction, out of range
        raise InvalidCombination(f"{op.value} is undefined for {a!r}, {b!r}: {e}") from None

    if isinstance(result, complex) or not math.isfinite(result):
        raise InvalidCombination(f"{op.value} gives a non-finite result for {a!r}, {b!r}")
    return float(result)


def combine(card_a: Optional[Card], card_b: Optional[Card], op: Operation, new_id: str) -> CombineOutcome:
    """
    Pure combination step. RECIPROCAL works on card_a only; card_b is handed
    back in `returned` so the caller can put it back in the hand.
    """
    if card_a is None or card_b is None:
        raise InvalidCombination("Both slots must hold a card")
    if card_a.id == card_b.id:
        raise InvalidCombination("The same card is staged twice")

    value = compute(op, card_a.value, card_b.value)

    label = format_number(value)
    if not label_round_trips(label, value):
        label = _operation_label(op, card_a, card_b)
    if not label_round_trips(label, value):
        # operand labels were themselves rounded
        label = f"{value:.6f}".rstrip("0").rstrip(".")

    card = Card(id=new_id, value=value, label=label, is_original=False)
    if op.is_unary:
        return CombineOutcome(card=card, consumed_ids=(card_a.id,), returned=(card_b,))
    return CombineOutcome(card=card, consumed_ids=(card_a.id, card_b.id))
