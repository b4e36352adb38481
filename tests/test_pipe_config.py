"""
Tests for pipe_config.py
"""

import random
from pathlib import Path

import pytest

from pipe_config import (
    DEFAULT_CONFIG,
    ConfigError,
    draw_straight_weight,
    load_config,
    make_rng,
    make_session_config,
)


class TestMakeSessionConfig:
    def test_defaults(self) -> None:
        cfg = make_session_config()
        assert cfg['grid_size'] == (12, 12, 12)
        assert cfg['growth_iterations'] == (5, 10)
        assert cfg['joint_style'] == 'elbow'
        assert cfg['seed'] is None

    def test_defaults_not_shared(self) -> None:
        cfg = make_session_config()
        cfg['straight_weight']['max_weight'] = 99
        assert DEFAULT_CONFIG['straight_weight']['max_weight'] == 20

    def test_overrides(self) -> None:
        cfg = make_session_config(grid_size=[3, 4, 5], growth_iterations=[2, 3], seed=7)
        assert cfg['grid_size'] == (3, 4, 5)
        assert cfg['growth_iterations'] == (2, 3)
        assert cfg['seed'] == 7

    def test_partial_straight_weight(self) -> None:
        cfg = make_session_config(straight_weight={'common_max': 2})
        assert cfg['straight_weight'] == {'rare_chance': 20, 'max_weight': 20, 'common_max': 2}

    @pytest.mark.parametrize('overrides', [
        {'grid_size': (0, 1, 1)},
        {'grid_size': (1, 1)},
        {'grid_size': 5},
        {'growth_iterations': (5, 2)},
        {'growth_iterations': (0, 2)},
        {'pipes_per_session': -1},
        {'joint_style': 'teapot'},
        {'straight_weight': {'rare_chance': 0}},
        {'straight_weight': {'bogus': 1}},
        {'seed': 'abc'},
        {'colour': 'red'},
    ])
    def test_invalid(self, overrides) -> None:
        with pytest.raises(ConfigError):
            make_session_config(**overrides)

    def test_config_error_is_value_error(self) -> None:
        assert issubclass(ConfigError, ValueError)


class TestLoadConfig:
    def test_load(self, tmp_path) -> None:
        path = tmp_path / 'pipes.yaml'
        path.write_text(
            'grid_size: [4, 5, 6]\n'
            'pipes_per_session: 3\n'
            'joint_style: cycle\n'
            'straight_weight:\n'
            '  rare_chance: 5\n'
        )
        cfg = load_config(path)
        assert cfg['grid_size'] == (4, 5, 6)
        assert cfg['pipes_per_session'] == 3
        assert cfg['joint_style'] == 'cycle'
        assert cfg['straight_weight']['rare_chance'] == 5

    def test_overrides_win(self, tmp_path) -> None:
        path = tmp_path / 'pipes.yaml'
        path.write_text('pipes_per_session: 3\nseed: 1\n')
        cfg = load_config(path, pipes_per_session=9, seed=None)
        assert cfg['pipes_per_session'] == 9
        assert cfg['seed'] == 1

    def test_example_config(self) -> None:
        cfg = load_config(Path(__file__).resolve().parent.parent / 'pipes.yaml')
        assert cfg['joint_style'] == 'mixed'
        assert cfg['seed'] == 7

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / 'nope.yaml')

    def test_empty_file(self, tmp_path) -> None:
        path = tmp_path / 'empty.yaml'
        path.write_text('')
        with pytest.raises(ConfigError):
            load_config(path)

    def test_not_a_mapping(self, tmp_path) -> None:
        path = tmp_path / 'list.yaml'
        path.write_text('- 1\n- 2\n')
        with pytest.raises(ConfigError):
            load_config(path)


class TestRandomHelpers:
    def test_make_rng_seeded(self) -> None:
        cfg = make_session_config(seed=5)
        assert make_rng(cfg).random() == random.Random(5).random()

    def test_common_weight(self, scripted) -> None:
        rng = scripted([3, 2])
        assert draw_straight_weight(rng) == 2
        assert rng.calls == [(('randrange', 20), 3), (('randint', 1, 4), 2)]

    def test_rare_weight(self, scripted) -> None:
        rng = scripted([0, 17])
        assert draw_straight_weight(rng) == 17
        assert rng.calls[1] == (('randint', 5, 20), 17)

    def test_weight_range(self) -> None:
        rng = random.Random(0)
        params = {'rare_chance': 3, 'max_weight': 40, 'common_max': 2}
        for _ in range(200):
            w = draw_straight_weight(rng, params)
            assert 1 <= w <= 2 or 10 <= w <= 40
