from .puzzle_source import (
    PuzzleData, PuzzleSource, PuzzleSourceError, GeminiClient, GeminiPuzzleSource,
    LocalPuzzleSource, fetch_puzzle, fetch_hint, build_source,
)
