# power_countdown/games/countdown/logic/cards.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Any, List, Sequence, Tuple

from ...core.numeric import format_number

# Every puzzle is played with this deck; difficulty only changes the target.
FIXED_DECK: Tuple[float, ...] = (2, 5, 16, 243, 343, 512)


@dataclass(frozen=True)
class Card:
    id: str
    value: float
    label: str
    is_original: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "value": self.value,
            "label": self.label,
            "is_original": self.is_original,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Card":
        return cls(
            id=str(d["id"]),
            value=float(d["value"]),
            label=str(d["label"]),
            is_original=bool(d.get("is_original", False)),
        )


def card_id(generation: int, seq: int) -> str:
    """Ids embed the puzzle generation so a stale reference never hits a newer card."""
    return f"g{generation}-c{seq}"


def make_original_cards(numbers: Sequence[float], generation: int) -> List[Card]:
    return [
        Card(id=card_id(generation, i), value=float(n), label=format_number(float(n)), is_original=True)
        for i, n in enumerate(numbers)
    ]
