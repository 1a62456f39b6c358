import logging
import os
import sys

import pygame

from classes import GameSession
from config import SETTINGS_FILE, load_config, save_settings
from database import GameDatabase
from shared.models import GameSummary, SoundKind
from shared.ports import PresentationPort

logger = logging.getLogger(__name__)

# Memory optimization - limit pygame features we don't need
pygame.display.init()
pygame.font.init()

# Colors
WHITE = (255, 255, 255)
BLACK = (0, 0, 0)
GRAY = (200, 200, 200)
BLUE = (0, 100, 255)
GREEN = (0, 200, 0)
RED = (200, 0, 0)
YELLOW = (255, 255, 0)
CARD_BACK_COLOR = (50, 50, 200)
CARD_FRONT_COLOR = (220, 220, 255)
CARD_MATCHED_COLOR = (200, 255, 200)

# Fonts
FONT_SMALL = pygame.font.SysFont('Arial', 20)
FONT_MEDIUM = pygame.font.SysFont('Arial', 30)
FONT_LARGE = pygame.font.SysFont('Arial', 40)
FONT_CARD = pygame.font.SysFont('Arial', 36, bold=True)

# Card faces, indexed by card id
CARD_FACES = ["A", "B", "C", "D", "E", "F", "G", "H", "J", "K", "M", "N",
              "P", "Q", "R", "S", "T", "U", "V", "W", "X", "Y", "Z", "@"]
SOUND_EXTENSION = ".wav"

TOP_BAR_HEIGHT = 80


def configure_logging(level=logging.INFO):
    """Send log records to stderr with a short prefix."""
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(levelname)s - [%(name)s] - %(message)s',
        datefmt='%H:%M:%S'
    )


class GameGUI(PresentationPort):
    """Graphical user interface for the memory matching game."""

    def __init__(self, config, database):
        """Initialize the game GUI."""
        self.config = config
        self.database = database
        self.clock = pygame.time.Clock()
        self.screen = None
        self.width = int(config.screen_size[0])
        self.height = int(config.screen_size[1]) + TOP_BAR_HEIGHT
        self.card_width, self.card_height = config.card_size
        self.card_rects = []
        self.sounds = {}
        self.message = ""
        self.message_timer = 0
        self.score_text = "Score: 0"
        self.move_text = "Moves: 0"
        self.combo_text = "Combo: 0"
        self.summary = None
        self.text_cache = {}  # Cache for rendered text

        self.session = GameSession(presentation=self, persistence=database, config=config)

    def setup_window(self):
        """Set up the game window."""
        self.screen = pygame.display.set_mode((self.width, self.height))
        pygame.display.set_caption("Memory Match")

    def load_sounds(self):
        """Load the sound cues that exist in the sound directory."""
        try:
            pygame.mixer.init()
        except pygame.error as e:
            logger.warning("Audio disabled: %s", e)
            return

        for kind in SoundKind.ALL:
            path = os.path.join(self.config.sound_dir, kind + SOUND_EXTENSION)
            if not os.path.exists(path):
                continue
            try:
                self.sounds[kind] = pygame.mixer.Sound(path)
            except pygame.error as e:
                logger.warning("Could not load sound %s: %s", path, e)

    # Presentation port

    def layout_grid(self, rows, cols):
        """Center the grid below the top bar using the configured spacing."""
        self.card_rects = [
            pygame.Rect(x, TOP_BAR_HEIGHT + y, self.card_width, self.card_height)
            for x, y in self.config.grid(rows, cols).card_positions()
        ]

    def clear_cards(self):
        self.summary = None

    def render_card(self, card, face_up, sprite_id):
        # Cards are redrawn from their state every frame
        pass

    def play_sound(self, kind):
        sound = self.sounds.get(kind)
        if sound is not None:
            sound.play()

    def update_score_display(self, score):
        self.score_text = f"Score: {score}"

    def update_move_display(self, moves):
        self.move_text = f"Moves: {moves}"

    def update_combo_display(self, combo):
        self.combo_text = f"Combo: {combo}"

    def show_game_over_summary(self, score, moves, combo):
        self.summary = GameSummary(score=score, moves=moves, combo=combo)
        self.session.save_progress()

    def report_layout_infeasible(self):
        self.show_message("Grid too large for the screen. Choose fewer rows/columns.", 3000)

    # Drawing

    def render_text(self, font, text, color):
        """Render and cache text to avoid recreating text surfaces."""
        cache_key = (font, text, color)
        if cache_key not in self.text_cache:
            if len(self.text_cache) > 100:
                self.text_cache.clear()
            self.text_cache[cache_key] = font.render(text, True, color)
        return self.text_cache[cache_key]

    def show_message(self, message, duration=2000):
        """Show a message for a duration in milliseconds."""
        self.message = message
        self.message_timer = pygame.time.get_ticks() + duration

    def draw_message(self):
        if self.message and pygame.time.get_ticks() < self.message_timer:
            message_text = self.render_text(FONT_MEDIUM, self.message, RED)
            self.screen.blit(message_text, (self.width // 2 - message_text.get_width() // 2, 20))

    def draw_button(self, rect, label, color, mouse_pos):
        """Draw a rounded button with a hover effect."""
        fill = color if rect.collidepoint(mouse_pos) else tuple(min(255, c + 60) for c in color)
        pygame.draw.rect(self.screen, fill, rect, 0, 10)
        pygame.draw.rect(self.screen, WHITE, rect, 2, 10)
        text = self.render_text(FONT_MEDIUM, label, WHITE)
        self.screen.blit(text, (rect.centerx - text.get_width() // 2, rect.centery - text.get_height() // 2))

    def draw_card(self, card, rect):
        """Draw a card on the screen."""
        if card.is_animating:
            # Simulate the rotation by squeezing the card around its center
            adjusted_width = abs(rect.width * (0.5 - card.flip_progress) * 2)
            rect = pygame.Rect(rect.centerx - adjusted_width / 2, rect.y, adjusted_width, rect.height)

        if card.is_matched and not card.is_animating:
            pygame.draw.rect(self.screen, CARD_MATCHED_COLOR, rect, 0, 5)
            pygame.draw.rect(self.screen, GREEN, rect, 2, 5)
            self.draw_card_face(card, rect, GREEN)
        elif card.is_face_up:
            pygame.draw.rect(self.screen, CARD_FRONT_COLOR, rect, 0, 5)
            pygame.draw.rect(self.screen, BLUE, rect, 2, 5)
            self.draw_card_face(card, rect, BLACK)
        else:
            pygame.draw.rect(self.screen, CARD_BACK_COLOR, rect, 0, 5)
            pygame.draw.rect(self.screen, BLUE, rect, 2, 5)
            if rect.width > self.card_width * 0.3:
                for i in range(3):
                    for j in range(4):
                        x = rect.left + rect.width * (i + 1) / 4
                        y = rect.top + rect.height * (j + 1) / 5
                        pygame.draw.circle(self.screen, WHITE, (x, y), 3)

    def draw_card_face(self, card, rect, color):
        # Only show text if the card is wide enough to be readable
        if rect.width <= self.card_width * 0.3:
            return
        face = CARD_FACES[card.card_id % len(CARD_FACES)]
        text = self.render_text(FONT_CARD, face, color)
        self.screen.blit(text, (rect.centerx - text.get_width() // 2, rect.centery - text.get_height() // 2))

    def draw_board(self):
        """Draw the score bar and every card."""
        for i, label in enumerate((self.score_text, self.move_text, self.combo_text)):
            text = self.render_text(FONT_MEDIUM, label, BLACK)
            self.screen.blit(text, (20 + i * 220, 20))

        for card, rect in zip(self.session.cards, self.card_rects):
            self.draw_card(card, rect)

    def draw_game_over(self, mouse_pos):
        """Draw the summary overlay and return the Replay and Main Menu buttons."""
        overlay = pygame.Surface((self.width, self.height), pygame.SRCALPHA)
        overlay.fill((0, 0, 0, 180))
        self.screen.blit(overlay, (0, 0))

        title = self.render_text(FONT_LARGE, "You found every pair!", YELLOW)
        self.screen.blit(title, (self.width // 2 - title.get_width() // 2, 160))

        lines = [f"Score: {self.summary.score}", f"Moves: {self.summary.moves}", f"Combo: {self.summary.combo}"]
        for i, line in enumerate(lines):
            text = self.render_text(FONT_MEDIUM, line, WHITE)
            self.screen.blit(text, (self.width // 2 - text.get_width() // 2, 240 + i * 40))

        replay_rect = pygame.Rect(self.width // 2 - 100, 380, 200, 50)
        menu_rect = pygame.Rect(self.width // 2 - 100, 450, 200, 50)
        self.draw_button(replay_rect, "Replay", BLUE, mouse_pos)
        self.draw_button(menu_rect, "Main Menu", GREEN, mouse_pos)
        return replay_rect, menu_rect

    # Screens

    def quit(self):
        """Save the score and leave the program."""
        self.session.save_progress()
        self.database.close()
        pygame.quit()
        sys.exit()

    def show_main_menu(self):
        """
        Let the player pick a grid size and start a game.

        Returns once a game has started.
        """
        button_width = 160
        button_height = 50
        button_margin = 20
        options = self.config.grid_options
        per_row = 3

        grid_rects = []
        for i, _ in enumerate(options):
            row, col = divmod(i, per_row)
            x = self.width // 2 - (per_row * button_width + (per_row - 1) * button_margin) // 2 \
                + col * (button_width + button_margin)
            y = 220 + row * (button_height + button_margin)
            grid_rects.append(pygame.Rect(x, y, button_width, button_height))

        buttons_bottom = grid_rects[-1].bottom if grid_rects else 220
        play_rect = pygame.Rect(self.width // 2 - 100, buttons_bottom + 60, 200, 60)
        quit_rect = pygame.Rect(self.width // 2 - 100, play_rect.bottom + button_margin, 200, 60)

        while True:
            mouse_pos = pygame.mouse.get_pos()

            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    self.quit()
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        self.quit()
                    elif event.key == pygame.K_RETURN and self.session.start_game():
                        return
                elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                    for rect, (rows, cols) in zip(grid_rects, options):
                        if rect.collidepoint(event.pos):
                            self.session.set_grid(rows, cols)
                    if play_rect.collidepoint(event.pos) and self.session.start_game():
                        return
                    if quit_rect.collidepoint(event.pos):
                        self.quit()

            self.screen.fill(WHITE)

            title = self.render_text(FONT_LARGE, "MEMORY MATCH", BLUE)
            self.screen.blit(title, (self.width // 2 - title.get_width() // 2, 80))
            saved = self.render_text(FONT_SMALL, f"Saved score: {self.database.load_score()}", BLACK)
            self.screen.blit(saved, (self.width // 2 - saved.get_width() // 2, 150))

            for rect, (rows, cols) in zip(grid_rects, options):
                selected = (rows, cols) == (self.session.rows, self.session.cols)
                self.draw_button(rect, f"{rows} X {cols}", GREEN if selected else BLUE, mouse_pos)
            self.draw_button(play_rect, "Play", BLUE, mouse_pos)
            self.draw_button(quit_rect, "Quit", RED, mouse_pos)

            self.draw_message()
            pygame.display.flip()
            self.clock.tick(self.config.fps)

    def run_game(self):
        """Run the game loop until the player goes back to the menu."""
        while True:
            dt = self.clock.tick(self.config.fps) / 1000.0
            mouse_pos = pygame.mouse.get_pos()
            replay_rect = menu_rect = None

            self.screen.fill(WHITE)
            self.session.update(dt)
            self.draw_board()
            if self.summary is not None:
                replay_rect, menu_rect = self.draw_game_over(mouse_pos)
            self.draw_message()
            pygame.display.flip()

            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    self.quit()
                elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                    self.session.save_progress()
                    self.summary = None
                    return
                elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                    if self.summary is not None:
                        if replay_rect.collidepoint(event.pos):
                            self.session.reset_game()
                        elif menu_rect.collidepoint(event.pos):
                            self.summary = None
                            return
                        continue
                    for index, rect in enumerate(self.card_rects):
                        if rect.collidepoint(event.pos):
                            self.session.select_card(index)
                            break


def main():
    """Main function to run the game."""
    configure_logging()
    config = load_config()
    if not os.path.exists(SETTINGS_FILE):
        save_settings(config.to_dict())

    pygame.init()
    gui = GameGUI(config, GameDatabase(config.db_file))
    gui.setup_window()
    gui.load_sounds()

    while True:
        gui.show_main_menu()
        gui.run_game()


if __name__ == "__main__":
    main()
