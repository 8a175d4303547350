# power_countdown/games/countdown/services/prompts.py
import json

DIFFICULTY_GUIDANCE = {
    # direct products or powers (10, 32, 80, 25)
    "EASY": "Generate a target that can be reached using simple multiplication or direct "
            "exponentiation (e.g., 2*5=10, 16*5=80).",
    "MEDIUM": "Generate a target that requires at least 2 or 3 steps, possibly mixing simple "
              "roots or larger multiplications.",
    # roots through reciprocals (243^(1/5) = 3)
    "HARD": "Generate a target that REQUIRES using reciprocals to create roots "
            "(e.g. 243^(1/5) = 3) or complex multi-step operations.",
}

PUZZLE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "target": {"type": "NUMBER"},
        "numbers": {"type": "ARRAY", "items": {"type": "NUMBER"}},
    },
    "required": ["target", "numbers"],
}


def _deck(deck) -> str:
    return json.dumps([int(n) if float(n).is_integer() else n for n in deck])


def puzzle_prompt(difficulty: str, deck) -> str:
    guidance = DIFFICULTY_GUIDANCE.get(difficulty, DIFFICULTY_GUIDANCE["MEDIUM"])
    return f"""
Generate a 'Power Countdown' math puzzle using a FIXED set of starting numbers: {_deck(deck)}.
Difficulty Level: {difficulty}

Instructions:
- {guidance}
- The target MUST be an integer.
- Verify that the target is mathematically reachable using ONLY the provided numbers.

Allowed operations:
1. Multiplication (a * b)
2. Exponentiation (a ^ b)
3. Reciprocal (1 / a) -> This allows for roots (e.g. a ^ (1/b)).

Rules:
- Each starting number can be used AT MOST once.
- Not all numbers need to be used.
- The 'numbers' in the response MUST be the fixed set: {_deck(deck)}.

Return JSON format.
""".strip()


def hint_prompt(target, values, deck) -> str:
    return f"""
I am playing Power Countdown with the fixed deck: {_deck(deck)}.
Target: {target}
Current Numbers Available: {json.dumps([round(v, 4) for v in values])}

Allowed operations: Multiply, Power (a^b), Reciprocal (1/x).

Give me a clear, short hint on the next best step or a strategy to reach the target.
Do not give the full answer immediately if it requires multiple steps, just the first key insight (e.g. "Try finding the 5th root of 243").
Keep it under 30 words.
""".strip()
