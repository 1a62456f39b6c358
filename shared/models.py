"""
Shared data models for the game core and the presentation layer.
This keeps the structures the core reports consistent across front ends.
"""
from dataclasses import dataclass
from typing import Tuple


class SoundKind:
    """Sound cues the core asks the presentation layer to play."""
    FLIP = "flip"
    MATCH = "match"
    MISMATCH = "mismatch"
    WIN = "win"

    ALL = (FLIP, MATCH, MISMATCH, WIN)


@dataclass
class SessionState:
    """Score counters of a single playthrough."""
    score: int = 0
    moves: int = 0
    combo: int = 0
    combo_timer: float = 0.0

    def reset(self):
        """Zero every counter."""
        self.score = 0
        self.moves = 0
        self.combo = 0
        self.combo_timer = 0.0

    def to_dict(self):
        """Convert the SessionState object to a dictionary."""
        return {
            'score': self.score,
            'moves': self.moves,
            'combo': self.combo,
            'combo_timer': self.combo_timer
        }


@dataclass(frozen=True)
class GameSummary:
    """Snapshot shown on the game-over screen."""
    score: int
    moves: int
    combo: int

    @classmethod
    def from_state(cls, state):
        """Create a GameSummary from a SessionState."""
        return cls(score=state.score, moves=state.moves, combo=state.combo)


@dataclass(frozen=True)
class GridConfig:
    """
    Grid dimensions plus the physical sizes used to check that the grid fits.

    Sizes are (width, height) pairs in screen units.
    """
    rows: int
    cols: int
    card_size: Tuple[float, float] = (115, 181)
    spacing: Tuple[float, float] = (10, 10)
    bounding_area: Tuple[float, float] = (1500, 800)

    @property
    def required_width(self) -> float:
        return self.card_size[0] * self.cols + self.spacing[0] * (self.cols - 1)

    @property
    def required_height(self) -> float:
        return self.card_size[1] * self.rows + self.spacing[1] * (self.rows - 1)

    def is_feasible(self) -> bool:
        """Check that the grid is non-empty and fits inside the bounding area."""
        if self.rows < 1 or self.cols < 1:
            return False
        return (self.required_width <= self.bounding_area[0]
                and self.required_height <= self.bounding_area[1])

    def card_positions(self):
        """
        Top-left corner of every card, row-major, with the grid centered
        in the bounding area and cards separated by the configured spacing.
        """
        left = (self.bounding_area[0] - self.required_width) / 2
        top = (self.bounding_area[1] - self.required_height) / 2
        step_x = self.card_size[0] + self.spacing[0]
        step_y = self.card_size[1] + self.spacing[1]
        return [(left + col * step_x, top + row * step_y)
                for row in range(self.rows) for col in range(self.cols)]
