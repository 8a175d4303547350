# power_countdown/games/core/coerce_utils.py
from typing import List, Optional
import math

DIFFICULTIES = ("EASY", "MEDIUM", "HARD")


def coerce_number_list(val) -> List[float]:
    """Coerce various input types to a list of finite floats."""
    if val is None:
        return []
    if isinstance(val, str):
        val = [p.strip() for p in val.replace("[", "").replace("]", "").split(",") if p.strip()]
    if not isinstance(val, (list, tuple)):
        return []
    try:
        out = [float(x) for x in val]
    except (TypeError, ValueError):
        return []
    return [x for x in out if math.isfinite(x)]


def coerce_target(val) -> Optional[int]:
    """A usable target is a positive integer (ints sent as 80.0 or '80' are fine)."""
    if isinstance(val, bool):
        return None
    try:
        f = float(val)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(f) or f <= 0 or f != int(f):
        return None
    return int(f)


def normalize_difficulty(level: Optional[str], default: str = "MEDIUM") -> str:
    """Normalize difficulty strings ('easy', '0', 'Hard'...)."""
    if level is None:
        return default
    ALIASES = {'0': 'EASY', 'easy': 'EASY', '1': 'MEDIUM', 'medium': 'MEDIUM',
               '2': 'HARD', 'hard': 'HARD'}
    return ALIASES.get(str(level).strip().lower(), default)
