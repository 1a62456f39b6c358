import random

import pytest

from classes import GameSession
from config import GameConfig
from database import GameDatabase
from shared.ports import PresentationPort

FRAME = 0.05


class RecordingPresentation(PresentationPort):
    """Presentation port that remembers every call made by the core."""

    def __init__(self):
        self.calls = []
        self.sounds = []
        self.scores = []
        self.moves = []
        self.combos = []
        self.summaries = []
        self.infeasible = 0

    def layout_grid(self, rows, cols):
        self.calls.append(("layout_grid", rows, cols))

    def clear_cards(self):
        self.calls.append(("clear_cards",))

    def render_card(self, card, face_up, sprite_id):
        self.calls.append(("render_card", card.index, face_up, sprite_id))

    def play_sound(self, kind):
        self.sounds.append(kind)

    def update_score_display(self, score):
        self.scores.append(score)

    def update_move_display(self, moves):
        self.moves.append(moves)

    def update_combo_display(self, combo):
        self.combos.append(combo)

    def show_game_over_summary(self, score, moves, combo):
        self.summaries.append((score, moves, combo))

    def report_layout_infeasible(self):
        self.infeasible += 1


def advance(session, seconds, frame=FRAME):
    """Run the session for roughly ``seconds`` of game time."""
    steps = int(round(seconds / frame))
    for _ in range(steps):
        session.update(frame)


def pair_indices(session):
    """Map each card id to the indices of the cards carrying it."""
    groups = {}
    for card in session.cards:
        groups.setdefault(card.card_id, []).append(card.index)
    return groups


@pytest.fixture
def presentation():
    return RecordingPresentation()


@pytest.fixture
def database():
    db = GameDatabase(":memory:")
    yield db
    db.close()


@pytest.fixture
def config():
    return GameConfig(rows=2, cols=2, palette_size=8)


@pytest.fixture
def session(presentation, database, config):
    return GameSession(presentation=presentation, persistence=database, config=config,
                       rng=random.Random(1234))
