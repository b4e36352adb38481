"""
Tests for pipe_layer.py
"""

import json
import random

import pytest

from pipe_config import make_session_config
from pipe_grid import NODE_MARKER
from pipe_growth import STATUS_OUT_OF_NODES, STATUS_STUCK, TERMINAL_STATUSES
from pipe_layer import PipeLayer


def make_layer(seed=0, **overrides):
    overrides.setdefault('grid_size', (6, 6, 6))
    overrides.setdefault('pipes_per_session', 5)
    return PipeLayer(make_session_config(seed=seed, **overrides))


# =============================================================================
# Session generation
# =============================================================================


class TestGenerate:
    def test_generates_configured_count(self) -> None:
        layer = make_layer(seed=1)
        pipes = layer.generate()
        assert len(pipes) == 5
        assert [p.id for p in pipes] == [0, 1, 2, 3, 4]
        assert all(p.status in TERMINAL_STATUSES for p in pipes)
        assert layer.is_complete

    def test_global_occupancy_unique(self) -> None:
        layer = make_layer(seed=7, grid_size=(5, 5, 5), pipes_per_session=20)
        layer.generate()
        cells = [pos for pipe in layer for pos in pipe.path]
        assert len(cells) == len(set(cells))
        assert layer.grid.occupied_count == len(cells)

    def test_single_cell_session(self) -> None:
        layer = PipeLayer(make_session_config(grid_size=(1, 1, 1)), rng=random.Random(0))
        first = layer.new_pipe()
        assert first.status == STATUS_STUCK
        assert first.segments[0]['kind'] == NODE_MARKER
        second = layer.new_pipe()
        assert second.status == STATUS_OUT_OF_NODES
        assert layer.is_complete
        assert layer.tick() is None

    def test_full_grid_ends_session_early(self) -> None:
        layer = make_layer(seed=3, grid_size=(2, 1, 1), pipes_per_session=5)
        pipes = layer.generate()
        assert len(pipes) < 5
        assert layer.grid.empty_count == 0 or pipes[-1].status == STATUS_OUT_OF_NODES
        assert layer.is_complete

    def test_zero_pipes(self) -> None:
        layer = make_layer(pipes_per_session=0)
        assert layer.is_complete
        assert layer.generate() == ()


# =============================================================================
# Frame-style interleaving
# =============================================================================


class TestTick:
    def test_tick_matches_generate(self) -> None:
        batch = make_layer(seed=42, pipes_per_session=8)
        batch.generate()

        framed = make_layer(seed=42, pipes_per_session=8)
        ticks = 0
        while framed.tick() is not None:
            ticks += 1

        assert [p.path for p in framed] == [p.path for p in batch]
        assert [p.segments for p in framed] == [p.segments for p in batch]
        assert ticks >= len(batch)

    def test_active_pipe(self) -> None:
        layer = make_layer(seed=2)
        assert layer.active_pipe is None
        pipe = layer.tick()
        if not pipe.finished:
            assert layer.active_pipe is pipe
            assert len(layer) == 0
            with pytest.raises(RuntimeError):
                layer.new_pipe()

    def test_pipes_is_read_only_view(self) -> None:
        layer = make_layer(seed=5)
        layer.generate()
        pipes = layer.pipes
        assert isinstance(pipes, tuple)
        assert list(layer) == list(pipes)


# =============================================================================
# Renderer-facing output
# =============================================================================


class TestOutput:
    def test_segments(self) -> None:
        layer = make_layer(seed=9)
        layer.generate()
        segments = list(layer.segments())
        assert len(segments) == sum(len(p.segments) for p in layer)
        assert {pipe_id for pipe_id, _ in segments} <= {p.id for p in layer}
        for _, segment in segments:
            assert set(segment) == {'kind', 'position', 'direction', 'from_direction',
                                    'orientation', 'alignment', 'roll'}

    def test_to_dict_is_json(self) -> None:
        layer = make_layer(seed=9)
        layer.generate()
        data = json.loads(json.dumps(layer.to_dict()))
        assert data['grid_size'] == [6, 6, 6]
        assert len(data['pipes']) == len(layer)
        assert data['stats']['occupied'] == layer.grid.occupied_count

    def test_stats(self) -> None:
        layer = make_layer(seed=4)
        layer.generate()
        stats = layer.stats()
        assert stats['pipes'] == 5
        assert sum(stats['by_status'].values()) == 5
        assert stats['cells'] == 216
