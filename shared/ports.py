"""
Interfaces the game core talks to.

The core never draws, plays audio or touches storage itself. It calls a
PresentationPort and a PersistencePort that are handed to the GameSession.
The base classes below do nothing, so a front end only overrides the cues it
cares about.
"""
from typing import Tuple


class PresentationPort:
    """Rendering, sound and UI text updates issued by the core."""

    def layout_grid(self, rows: int, cols: int) -> None:
        """Arrange the card grid for the given dimensions."""

    def clear_cards(self) -> None:
        """Forget every card of the previous board."""

    def render_card(self, card, face_up: bool, sprite_id: int) -> None:
        """Show the given face of a card."""

    def play_sound(self, kind: str) -> None:
        """Play one of the SoundKind cues."""

    def update_score_display(self, score: int) -> None:
        pass

    def update_move_display(self, moves: int) -> None:
        pass

    def update_combo_display(self, combo: int) -> None:
        pass

    def show_game_over_summary(self, score: int, moves: int, combo: int) -> None:
        """Show the end-of-game screen."""

    def report_layout_infeasible(self) -> None:
        """Warn the player that the chosen grid does not fit on screen."""


class PersistencePort:
    """Key-value storage that survives a restart."""

    def save_score(self, score: int) -> bool:
        raise NotImplementedError

    def load_score(self) -> int:
        raise NotImplementedError

    def save_grid_choice(self, rows: int, cols: int) -> bool:
        raise NotImplementedError

    def load_grid_choice(self) -> Tuple[int, int]:
        raise NotImplementedError
