import logging
import random
from collections import deque
from typing import List, Optional

from config import GameConfig
from scheduler import Scheduler, Wait
from shared.models import GameSummary, SessionState, SoundKind
from shared.ports import PresentationPort

logger = logging.getLogger(__name__)


def shuffle(items: list, rng=None) -> list:
    """
    Shuffle a list in place with the Fisher-Yates algorithm.

    Args:
        items: The list to shuffle
        rng: Optional random.Random instance

    Returns:
        The same list, shuffled
    """
    rng = rng or random
    for i in range(len(items) - 1, 0, -1):
        j = rng.randint(0, i)
        items[i], items[j] = items[j], items[i]
    return items


def generate_deck(rows: int, cols: int, palette_size: int, rng=None) -> List[int]:
    """
    Build a shuffled sequence of card identifiers for a grid.

    Pair ``i`` gets identifier ``i`` while the palette has enough faces and a
    random face after that. An odd cell count gets one extra unpaired card so
    every cell is filled.

    Args:
        rows: Number of rows in the grid
        cols: Number of columns in the grid
        palette_size: Number of distinct card faces available
        rng: Optional random.Random instance

    Returns:
        List of ``rows * cols`` identifiers
    """
    if palette_size < 1:
        raise ValueError("palette_size must be at least 1")

    rng = rng or random
    total_cards = rows * cols
    pairs_needed = total_cards // 2

    ids = []
    for i in range(pairs_needed):
        card_id = i if i < palette_size else rng.randrange(palette_size)
        ids.append(card_id)
        ids.append(card_id)

    if total_cards % 2 != 0:
        ids.append(rng.randrange(palette_size))

    return shuffle(ids, rng)


class Card:
    """
    A single grid cell of the memory game.

    A card is face down, face up or matched. Matched is final. Flipping is a
    timed routine on the session's scheduler; while it runs the card is
    ``animating`` and refuses further flips.
    """

    def __init__(self, card_id, index, scheduler, resolver, presentation, flip_duration=0.3):
        """
        Initialize a new card.

        Args:
            card_id: Identifier shared by the two cards of a pair
            index: Position of the card in the grid (row-major)
            scheduler: Scheduler running the flip animation
            resolver: MatchResolver notified of flips
            presentation: PresentationPort asked to render the card
            flip_duration: Length of a full flip in seconds
        """
        self.card_id = card_id
        self.index = index
        self.scheduler = scheduler
        self.resolver = resolver
        self.presentation = presentation
        self.flip_duration = flip_duration
        self.is_face_up = False
        self.is_matched = False
        self.is_animating = False
        self.is_destroyed = False
        # Fraction of the running flip animation, 0.0 when idle
        self.flip_progress = 0.0
        self.flipping_up = False

    def request_flip(self) -> bool:
        """
        Handle a click on the card.

        Returns:
            True if the card started turning face up
        """
        if self.is_destroyed or self.resolver.is_busy:
            return False
        if self.is_matched or self.is_face_up or self.is_animating:
            return False

        self.scheduler.start(self.flip(True), name=f"flip-up-{self.index}")
        self.resolver.on_card_flipped(self)
        return True

    def flip(self, forward):
        """
        Flip animation routine.

        The face swaps at the midpoint; ``flip_progress`` runs from 0 to 1 so
        the presentation layer can draw the rotation.
        """
        self.is_animating = True
        self.flipping_up = forward
        half_time = self.flip_duration / 2.0

        elapsed = 0.0
        while elapsed < half_time:
            self.flip_progress = elapsed / self.flip_duration
            dt = yield
            elapsed += dt

        if self.is_destroyed:
            return

        self.is_face_up = forward
        self.presentation.render_card(self, forward, self.card_id)

        # A long frame can cover both halves at once
        elapsed -= half_time
        while elapsed < half_time:
            self.flip_progress = (half_time + elapsed) / self.flip_duration
            dt = yield
            elapsed += dt

        self.flip_progress = 0.0
        self.is_animating = False

    def match(self):
        """Mark the card as matched."""
        self.is_matched = True

    def reset_flip_animated(self) -> bool:
        """
        Turn a revealed, unmatched card face down again.

        Returns:
            True if the reverse flip started
        """
        if self.is_destroyed:
            return False
        if not self.is_face_up or self.is_matched or self.is_animating:
            return False
        self.scheduler.start(self.flip(False), name=f"flip-down-{self.index}")
        return True

    def destroy(self):
        """Detach the card from the game; pending routines become no-ops."""
        self.is_destroyed = True

    def __repr__(self):
        return (f"Card(card_id={self.card_id}, index={self.index}, is_face_up={self.is_face_up}, "
                f"is_matched={self.is_matched}, is_animating={self.is_animating})")


class MatchResolver:
    """
    Serializes flip intents and resolves them two at a time.

    Flipped cards wait in a FIFO queue. A single resolution routine pops the
    two oldest cards, scores them and runs the timed follow-up effects before
    taking the next pair.
    """

    def __init__(self, session, scheduler, presentation, config):
        self.session = session
        self.scheduler = scheduler
        self.presentation = presentation
        self.config = config
        self.queue = deque()
        self.is_resolving = False
        # Bumped on reset so a running resolution stops touching the new board
        self._epoch = 0

    @property
    def is_busy(self) -> bool:
        """True while a pair is being resolved and another pair is already waiting."""
        return self.is_resolving and len(self.queue) >= 2

    def on_card_flipped(self, card) -> bool:
        """
        Queue a card that was just revealed.

        Returns:
            True if the card was queued
        """
        if card.is_matched or card in self.queue or self.is_busy:
            logger.debug("Dropping flip of card %d", card.index)
            return False

        self.queue.append(card)
        self.presentation.play_sound(SoundKind.FLIP)

        if not self.is_resolving and len(self.queue) >= 2:
            self.scheduler.start(self.resolve_pairs(), name="resolve-pairs")
        return True

    def clear(self):
        """Forget queued cards and detach any running resolution."""
        self.queue.clear()
        self.is_resolving = False
        self._epoch += 1

    def resolve_pairs(self):
        """Resolution routine; runs until fewer than two cards are queued."""
        self.is_resolving = True
        epoch = self._epoch

        while len(self.queue) >= 2:
            card1 = self.queue.popleft()
            card2 = self.queue.popleft()
            self.session.register_move()

            if card1.card_id == card2.card_id:
                logger.debug("Cards %d and %d match", card1.index, card2.index)
                card1.match()
                card2.match()
                self.session.register_match()

                yield Wait(self.config.settle_delay)
                if epoch != self._epoch:
                    return
                self.presentation.play_sound(SoundKind.MATCH)
                self.session.check_for_win()
            else:
                logger.debug("Cards %d and %d do not match", card1.index, card2.index)
                self.session.register_mismatch()

                # Leave the pair visible so the player can memorize it
                yield Wait(self.config.reveal_delay)
                if epoch != self._epoch:
                    return
                while card1.is_animating or card2.is_animating:
                    yield
                    if epoch != self._epoch:
                        return
                card1.reset_flip_animated()
                card2.reset_flip_animated()

                yield Wait(self.config.settle_delay)
                if epoch != self._epoch:
                    return
                self.presentation.play_sound(SoundKind.MISMATCH)

            yield
            if epoch != self._epoch:
                return

        self.is_resolving = False


class GameSession:
    """
    Main game class that orchestrates the memory matching game.

    The session owns the cards, the flip queue and the score counters, and
    drives every timed effect through its scheduler. Front ends call
    ``update(dt)`` once per frame and forward clicks with ``select_card``.
    """

    def __init__(self, presentation: Optional[PresentationPort] = None, persistence=None,
                 config: Optional[GameConfig] = None, scheduler: Optional[Scheduler] = None, rng=None):
        """
        Initialize a new game session.

        Args:
            presentation: PresentationPort receiving render, sound and UI calls
            persistence: PersistencePort storing score and grid choice
            config: GameConfig with grid, timing and scoring values
            scheduler: Scheduler driving timed routines
            rng: Optional random.Random instance used for deck generation
        """
        self.presentation = presentation or PresentationPort()
        self.persistence = persistence
        self.config = config or GameConfig()
        self.scheduler = scheduler or Scheduler()
        self.rng = rng or random.Random()
        self.resolver = MatchResolver(self, self.scheduler, self.presentation, self.config)

        self.rows = self.config.rows
        self.cols = self.config.cols
        if self.persistence is not None:
            self.rows, self.cols = self.persistence.load_grid_choice()

        self.cards: List[Card] = []
        self.state = SessionState()
        self.game_won = False

    @property
    def score(self) -> int:
        return self.state.score

    @property
    def moves(self) -> int:
        return self.state.moves

    @property
    def combo(self) -> int:
        return self.state.combo

    def set_grid(self, rows: int, cols: int) -> None:
        """Choose the grid size for the next game and remember it."""
        self.rows, self.cols = rows, cols
        if self.persistence is not None:
            self.persistence.save_grid_choice(rows, cols)

    def start_game(self, rows: Optional[int] = None, cols: Optional[int] = None) -> bool:
        """
        Start a game on a grid of the given size.

        Args:
            rows: Number of rows, defaults to the current choice
            cols: Number of columns, defaults to the current choice

        Returns:
            True if the game started, False if the grid does not fit
        """
        rows = self.rows if rows is None else rows
        cols = self.cols if cols is None else cols

        grid = self.config.grid(rows, cols)
        if not grid.is_feasible():
            logger.warning("Grid %dx%d too large for the screen. Choose fewer rows/columns.", rows, cols)
            self.presentation.report_layout_infeasible()
            return False

        self.rows, self.cols = rows, cols
        self.discard_cards()
        self.state.reset()
        self.presentation.layout_grid(rows, cols)
        self.generate_cards()
        self.update_ui()
        logger.info("Started %dx%d game", rows, cols)
        return True

    def generate_cards(self) -> None:
        """Deal a fresh deck and create one card per grid cell."""
        ids = generate_deck(self.rows, self.cols, self.config.palette_size, self.rng)
        self.game_won = False
        self.cards = []
        for index, card_id in enumerate(ids):
            card = Card(card_id, index, self.scheduler, self.resolver, self.presentation,
                        flip_duration=self.config.flip_duration)
            self.cards.append(card)
            self.presentation.render_card(card, False, card_id)

    def reset_game(self) -> None:
        """Throw away the current board and deal a new one of the same size."""
        self.state.reset()
        self.presentation.update_combo_display(self.state.combo)

        self.discard_cards()

        self.update_ui()
        self.generate_cards()
        logger.info("Reset %dx%d game", self.rows, self.cols)

    def discard_cards(self) -> None:
        """Destroy every card and empty the flip queue."""
        for card in self.cards:
            card.destroy()
        self.cards = []
        self.resolver.clear()
        self.scheduler.clear()
        self.presentation.clear_cards()

    def card_at(self, row: int, col: int) -> Optional[Card]:
        """Get the card at a grid position, or None if the position is invalid."""
        if 0 <= row < self.rows and 0 <= col < self.cols:
            index = row * self.cols + col
            if index < len(self.cards):
                return self.cards[index]
        return None

    def select_card(self, index: int) -> bool:
        """Forward a click on the card at ``index``."""
        if 0 <= index < len(self.cards):
            return self.cards[index].request_flip()
        return False

    def register_move(self) -> None:
        self.state.moves += 1
        self.presentation.update_move_display(self.state.moves)

    def register_match(self) -> int:
        """
        Score a matched pair.

        Returns:
            The points awarded
        """
        self.state.combo += 1
        self.state.combo_timer = self.config.combo_reset_time
        points = self.config.points_for_combo(self.state.combo)
        self.state.score += points
        self.presentation.update_combo_display(self.state.combo)
        self.presentation.update_score_display(self.state.score)
        return points

    def register_mismatch(self) -> None:
        self.state.combo = 0
        self.presentation.update_combo_display(self.state.combo)

    def check_for_win(self) -> bool:
        """Finish the game once every card is matched."""
        if self.game_won or not self.cards:
            return False
        if not all(card.is_matched for card in self.cards):
            return False

        self.game_won = True
        summary = GameSummary.from_state(self.state)
        logger.info("Game won: %s", self.state.to_dict())
        self.presentation.play_sound(SoundKind.WIN)
        self.presentation.show_game_over_summary(summary.score, summary.moves, summary.combo)
        return True

    def update(self, dt: float) -> None:
        """
        Advance the game by one frame.

        Args:
            dt: Seconds elapsed since the previous frame
        """
        if self.state.combo_timer > 0:
            self.state.combo_timer -= dt
            if self.state.combo_timer <= 0:
                self.state.combo_timer = 0.0
                self.state.combo = 0
                self.presentation.update_combo_display(self.state.combo)

        self.scheduler.tick(dt)

    def update_ui(self) -> None:
        """Push the current counters to the presentation layer."""
        self.presentation.update_score_display(self.state.score)
        self.presentation.update_move_display(self.state.moves)
        self.presentation.update_combo_display(self.state.combo)

    def save_progress(self) -> None:
        """Persist the current score."""
        if self.persistence is not None:
            self.persistence.save_score(self.state.score)

    def load_progress(self) -> None:
        """Restore the previously saved score."""
        if self.persistence is not None:
            self.state.score = self.persistence.load_score()
            self.presentation.update_score_display(self.state.score)

    def __str__(self):
        """Return a string representation of the board."""
        result = []
        for row in range(self.rows):
            row_cards = []
            for col in range(self.cols):
                card = self.card_at(row, col)
                if card is None:
                    row_cards.append("?")
                elif card.is_matched:
                    row_cards.append("M")
                elif card.is_face_up:
                    row_cards.append(str(card.card_id))
                else:
                    row_cards.append("#")
            result.append(" ".join(row_cards))
        return "\n".join(result)
