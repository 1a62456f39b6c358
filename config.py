"""
Game settings.

Settings live in a small JSON file next to the game. Missing keys fall back
to the defaults of GameConfig, so an empty or absent file is valid.
"""
import json
import logging
import os
from dataclasses import dataclass, field, fields
from typing import List, Tuple

from shared.models import GridConfig

logger = logging.getLogger(__name__)

SETTINGS_FILE = "settings.json"

DEFAULT_GRID_OPTIONS = [(2, 2), (2, 3), (3, 4), (4, 4), (4, 5), (5, 6)]


def load_settings(path=SETTINGS_FILE):
    """Load settings from a JSON file, returning an empty dict if unavailable."""
    if os.path.exists(path):
        try:
            with open(path, 'r') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Could not read settings from %s: %s", path, e)
            return {}
        if isinstance(data, dict):
            return data
        logger.warning("Ignoring settings in %s: expected a JSON object", path)
    return {}


def save_settings(settings, path=SETTINGS_FILE):
    """Save settings to a JSON file."""
    with open(path, 'w') as f:
        json.dump(settings, f, indent=2)


@dataclass
class GameConfig:
    """Tunable values of the game core and the front end."""
    rows: int = 2
    cols: int = 3
    card_size: Tuple[float, float] = (115, 181)
    spacing: Tuple[float, float] = (10, 10)
    screen_size: Tuple[float, float] = (1500, 800)
    palette_size: int = 12
    combo_reset_time: float = 3.0
    flip_duration: float = 0.3
    settle_delay: float = 0.15
    reveal_delay: float = 1.0
    match_points: int = 1
    combo_bonus: int = 5
    grid_options: List[Tuple[int, int]] = field(default_factory=lambda: list(DEFAULT_GRID_OPTIONS))
    fps: int = 60
    db_file: str = "memory_match.db"
    sound_dir: str = "sounds"

    def grid(self, rows=None, cols=None) -> GridConfig:
        """Build the GridConfig used for the layout feasibility check."""
        return GridConfig(
            rows=self.rows if rows is None else rows,
            cols=self.cols if cols is None else cols,
            card_size=self.card_size,
            spacing=self.spacing,
            bounding_area=self.screen_size
        )

    def points_for_combo(self, combo: int) -> int:
        """Points awarded for the n-th consecutive match."""
        return self.match_points + (combo - 1) * self.combo_bonus

    @classmethod
    def from_dict(cls, data):
        """Create a GameConfig from a settings dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        values = {key: value for key, value in data.items() if key in known}

        for key in ("card_size", "spacing", "screen_size"):
            if key in values:
                values[key] = tuple(values[key])
        if "grid_options" in values:
            values["grid_options"] = [tuple(option) for option in values["grid_options"]]

        return cls(**values)

    def to_dict(self):
        """Convert the GameConfig to a JSON-friendly dictionary."""
        return {
            'rows': self.rows,
            'cols': self.cols,
            'card_size': list(self.card_size),
            'spacing': list(self.spacing),
            'screen_size': list(self.screen_size),
            'palette_size': self.palette_size,
            'combo_reset_time': self.combo_reset_time,
            'flip_duration': self.flip_duration,
            'settle_delay': self.settle_delay,
            'reveal_delay': self.reveal_delay,
            'match_points': self.match_points,
            'combo_bonus': self.combo_bonus,
            'grid_options': [list(option) for option in self.grid_options],
            'fps': self.fps,
            'db_file': self.db_file,
            'sound_dir': self.sound_dir
        }


def load_config(path=SETTINGS_FILE) -> GameConfig:
    """Read the settings file into a GameConfig."""
    return GameConfig.from_dict(load_settings(path))
