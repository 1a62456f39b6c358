import json

from config import GameConfig, load_config, load_settings, save_settings
from shared.models import GridConfig


def test_missing_settings_file_gives_defaults(tmp_path):
    path = str(tmp_path / "settings.json")
    assert load_settings(path) == {}
    config = load_config(path)
    assert (config.rows, config.cols) == (2, 3)
    assert config.combo_reset_time == 3.0


def test_corrupt_settings_file_gives_defaults(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("{not json")
    assert load_settings(str(path)) == {}

    path.write_text("[1, 2]")
    assert load_settings(str(path)) == {}


def test_settings_round_trip_through_json(tmp_path):
    path = str(tmp_path / "settings.json")
    config = GameConfig(palette_size=4, grid_options=[(2, 2), (3, 3)], screen_size=(800, 600))
    save_settings(config.to_dict(), path)

    loaded = load_config(path)
    assert loaded == config
    assert loaded.grid_options == [(2, 2), (3, 3)]
    assert loaded.screen_size == (800, 600)


def test_unknown_keys_are_ignored(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"server_url": "localhost:5000", "combo_bonus": 10}))
    config = load_config(str(path))
    assert config.combo_bonus == 10


def test_points_follow_combo_formula():
    config = GameConfig()
    assert [config.points_for_combo(n) for n in range(1, 5)] == [1, 6, 11, 16]

    alternate = GameConfig(match_points=10)
    assert alternate.points_for_combo(2) == 15


def test_grid_feasibility_uses_card_size_and_spacing():
    grid = GridConfig(rows=4, cols=12, card_size=(115, 181), spacing=(10, 10), bounding_area=(1500, 800))
    assert grid.required_width == 115 * 12 + 10 * 11
    assert grid.required_height == 181 * 4 + 10 * 3
    assert grid.is_feasible()

    assert not GridConfig(rows=5, cols=2).is_feasible()
    assert not GridConfig(rows=0, cols=2).is_feasible()


def test_config_builds_grid_for_session():
    config = GameConfig(rows=3, cols=4, screen_size=(400, 400))
    grid = config.grid()
    assert (grid.rows, grid.cols) == (3, 4)
    assert grid.bounding_area == (400, 400)
    assert not grid.is_feasible()
    assert config.grid(1, 2).is_feasible()


def test_card_positions_center_grid_with_configured_spacing():
    grid = GridConfig(rows=2, cols=3, card_size=(100, 150), spacing=(10, 20), bounding_area=(400, 400))
    positions = grid.card_positions()
    assert len(positions) == 6
    # 3 * 100 + 2 * 10 = 320 wide, 2 * 150 + 20 = 320 tall
    assert positions[0] == (40, 40)
    assert positions[1] == (150, 40)
    assert positions[3] == (40, 210)
    assert positions[-1] == (260, 210)
