"""One generation session: a grid plus the batch of pipes grown in it."""

import logging

from pipe_config import make_rng, make_session_config
from pipe_grid import OccupancyGrid
from pipe_growth import STATUS_OUT_OF_NODES, PipeGrower


logger = logging.getLogger(__name__)


class PipeLayer:
    """Owns the occupancy grid for a session and grows pipes into it.

    Pipes are grown strictly one after another, either all at once with
    generate() or one growth iteration per frame with tick(). Both give the
    same pipes for the same seed.

    Args:
        config: dict from pipe_config.make_session_config (defaults if None)
        rng: random source with randrange/randint; seeded from config if None
    """

    def __init__(self, config=None, rng=None):
        self.config = config if config is not None else make_session_config()
        self.grid = OccupancyGrid(*self.config['grid_size'])
        self.rng = rng if rng is not None else make_rng(self.config)
        self._pipes = []
        self._grower = None
        self._out_of_nodes = False
        self._reported = False

    @property
    def pipes(self):
        """Finished pipes in creation order."""
        return tuple(self._pipes)

    @property
    def active_pipe(self):
        return self._grower.pipe if self._grower is not None else None

    @property
    def is_complete(self):
        if self._grower is not None:
            return False
        if self._out_of_nodes or self.grid.empty_count == 0:
            return True
        return len(self._pipes) >= self.config['pipes_per_session']

    def __iter__(self):
        return iter(self.pipes)

    def __len__(self):
        return len(self._pipes)

    def _finish_pipe(self, pipe):
        self._pipes.append(pipe)
        self._grower = None
        if pipe.status == STATUS_OUT_OF_NODES:
            self._out_of_nodes = True
            logger.info('grid full after %d pipes', len(self._pipes) - 1)
        if self.is_complete and not self._reported:
            self._reported = True
            logger.info('layer complete: %s', self.stats())

    def tick(self):
        """Advance generation by one growth iteration.

        Starts a new pipe when none is active. Returns the pipe that was
        touched, or None once the session is complete.
        """
        if self.is_complete:
            return None
        if self._grower is None:
            self._grower = PipeGrower(self.grid, self.rng, pipe_id=len(self._pipes),
                                      config=self.config)
            pipe = self._grower.start()
        else:
            pipe = self._grower.step()
        if pipe.finished:
            self._finish_pipe(pipe)
        return pipe

    def new_pipe(self):
        """Grow one whole pipe, regardless of the configured pipe count."""
        if self._grower is not None:
            raise RuntimeError('pipe {} is still growing'.format(self._grower.pipe.id))
        self._grower = PipeGrower(self.grid, self.rng, pipe_id=len(self._pipes),
                                  config=self.config)
        pipe = self._grower.start()
        while not pipe.finished:
            pipe = self._grower.step()
        self._finish_pipe(pipe)
        return pipe

    def generate(self):
        """Grow every remaining pipe of the session and return all pipes."""
        while not self.is_complete:
            self.tick()
        return self.pipes

    def segments(self):
        """Yield (pipe_id, segment) for every claimed cell, pipe by pipe."""
        for pipe in self._pipes:
            for segment in pipe.segments:
                yield pipe.id, segment

    def stats(self):
        by_status = {}
        for pipe in self._pipes:
            by_status[pipe.status] = by_status.get(pipe.status, 0) + 1
        return {
            'pipes': len(self._pipes),
            'by_status': by_status,
            'occupied': self.grid.occupied_count,
            'cells': len(self.grid),
        }

    def to_dict(self):
        cfg = dict(self.config)
        cfg['grid_size'] = list(cfg['grid_size'])
        cfg['growth_iterations'] = list(cfg['growth_iterations'])
        return {
            'config': cfg,
            'grid_size': list(self.grid.size),
            'stats': self.stats(),
            'pipes': [pipe.to_dict() for pipe in self._pipes],
        }
