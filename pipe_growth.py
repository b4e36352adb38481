"""Grow a single pipe through an occupancy grid.

A pipe starts on a random empty cell, picks a random open direction and then
runs a bounded number of growth iterations. Each iteration extends the pipe
straight for a random number of cells, then either stops, continues straight
or turns. Turns go through pipe_orientation so the carried notch stays in step
with the elbow meshes.

Random draws happen in a fixed order so a seeded session is reproducible:
straight weight, start cell, start direction, growth budget, then per
iteration the run length and the next direction (plus a joint draw for the
'mixed' joint style).
"""

import logging

import pipe_orientation as orientation
from pipe_config import draw_straight_weight, make_session_config
from pipe_grid import (
    NODE_BALL, NODE_CAP, NODE_ELBOW, NODE_MARKER, NODE_STRAIGHT,
    AXIS, OPPOSITE, step,
)


logger = logging.getLogger(__name__)

STATUS_INIT = 'init'
STATUS_GROWING = 'growing'
STATUS_STUCK = 'stuck'
STATUS_OUT_OF_NODES = 'out_of_nodes'
STATUS_COMPLETE = 'complete'

TERMINAL_STATUSES = (STATUS_STUCK, STATUS_OUT_OF_NODES, STATUS_COMPLETE)


def make_segment(kind, position, direction, from_direction=None,
                 orientation=None, alignment=None, roll=None):
    """Create a segment record for the renderer.

    orientation: elbow mesh index for joints
    alignment: notch roll in degrees for caps and straight cells
    roll: elbow roll about the new direction for joints
    """
    return {
        'kind': kind,
        'position': tuple(position),
        'direction': direction,
        'from_direction': from_direction,
        'orientation': orientation,
        'alignment': alignment,
        'roll': roll,
    }


class Pipe:
    """Path and growth state of one pipe.

    Once the pipe reaches a terminal status its path and segments are frozen
    into tuples.
    """

    def __init__(self, pipe_id):
        self.id = pipe_id
        self.status = STATUS_INIT
        self.path = []
        self.segments = []
        self.position = None
        self.direction = None
        self.last_direction = None
        self.notch = None
        self.weight_straight = None
        self.budget = 0
        self.iterations = 0
        self.steps = 0

    @property
    def finished(self):
        return self.status in TERMINAL_STATUSES

    @property
    def turns(self):
        return sum(1 for s in self.segments if s['from_direction'] is not None)

    def finish(self, status):
        """Move to a terminal status and freeze path and segments."""
        if self.finished:
            raise RuntimeError('pipe {} already {}'.format(self.id, self.status))
        self.status = status
        self.path = tuple(self.path)
        self.segments = tuple(self.segments)
        logger.debug('pipe %s %s after %d steps, %d cells',
                     self.id, status, self.steps, len(self.path))

    def to_dict(self):
        return {
            'id': self.id,
            'status': self.status,
            'weight_straight': self.weight_straight,
            'budget': self.budget,
            'direction': self.direction,
            'last_direction': self.last_direction,
            'path': [list(p) for p in self.path],
            'segments': [dict(s, position=list(s['position'])) for s in self.segments],
        }

    def __repr__(self):
        return 'Pipe(id={}, status={}, cells={})'.format(self.id, self.status, len(self.path))


class PipeGrower:
    """Step-wise growth of one pipe against a shared grid.

    start() places the pipe; each step() runs one growth iteration. A finished
    pipe ignores further steps. Only one pipe may grow in a grid at a time:
    step() raises RuntimeError if the grid gained cells it did not claim.
    """

    def __init__(self, grid, rng, pipe_id=0, config=None):
        self.grid = grid
        self.rng = rng
        self.config = config if config is not None else make_session_config()
        self.pipe = Pipe(pipe_id)
        self._joints = 0
        self._occupied = None

    # --- claims -------------------------------------------------------------

    def _claim(self, pos, kind, segment):
        axis = None
        if kind == NODE_STRAIGHT:
            axis = AXIS[segment['direction']]
        self.grid.claim(pos, kind, axis)
        self._occupied = self.grid.occupied_count
        self.pipe.path.append(tuple(pos))
        self.pipe.segments.append(segment)

    def _claim_cap(self, pos):
        pipe = self.pipe
        self._claim(pos, NODE_CAP, make_segment(
            NODE_CAP, pos, pipe.direction,
            alignment=orientation.notch_alignment_angle(pipe.direction, pipe.notch)))

    def _claim_straight(self, pos):
        pipe = self.pipe
        self._claim(pos, NODE_STRAIGHT, make_segment(
            NODE_STRAIGHT, pos, pipe.direction,
            alignment=orientation.notch_alignment_angle(pipe.direction, pipe.notch)))

    # --- choices ------------------------------------------------------------

    def _choose_direction(self, candidates):
        # Going straight counts weight_straight times, each turn once
        current = self.pipe.direction
        weights = [self.pipe.weight_straight if d == current else 1 for d in candidates]
        r = self.rng.randrange(sum(weights))
        for direction, w in zip(candidates, weights):
            if r < w:
                return direction
            r -= w
        return candidates[-1]

    def _joint_kind(self):
        style = self.config['joint_style']
        self._joints += 1
        if style == 'ball':
            return NODE_BALL
        if style == 'mixed':
            return NODE_BALL if self.rng.randrange(2) else NODE_ELBOW
        if style == 'cycle':
            return NODE_ELBOW if self._joints % 2 else NODE_BALL
        return NODE_ELBOW

    def _elbow_index(self, old_dir, new_dir, notch):
        try:
            return orientation.elbow_orientation(old_dir, new_dir, notch)
        except orientation.OrientationFault as e:
            logger.warning('pipe %s: %s; using elbow 0', self.pipe.id, e)
            return 0

    # --- growth -------------------------------------------------------------

    def start(self):
        pipe = self.pipe
        if pipe.status != STATUS_INIT:
            raise RuntimeError('pipe {} already started'.format(pipe.id))

        pipe.weight_straight = draw_straight_weight(self.rng, self.config['straight_weight'])

        empties = self.grid.empty_cells()
        if not empties:
            pipe.finish(STATUS_OUT_OF_NODES)
            return pipe
        start = empties[self.rng.randrange(len(empties))]
        pipe.steps = 1

        dirs = self.grid.empty_neighbor_directions(start)
        if not dirs:
            self._claim(start, NODE_MARKER, make_segment(NODE_MARKER, start, None))
            pipe.position = start
            pipe.finish(STATUS_STUCK)
            return pipe

        pipe.direction = dirs[self.rng.randrange(len(dirs))]
        lo, hi = self.config['growth_iterations']
        pipe.budget = self.rng.randint(lo, hi)
        pipe.notch = orientation.initial_notch(pipe.direction)
        self._claim_cap(start)
        pipe.position = start
        pipe.status = STATUS_GROWING
        logger.debug('pipe %s started at %s heading %s, budget %d, straight weight %d',
                     pipe.id, start, pipe.direction, pipe.budget, pipe.weight_straight)
        return pipe

    def step(self):
        """Run one growth iteration; returns the pipe."""
        pipe = self.pipe
        if pipe.status == STATUS_INIT:
            return self.start()
        if pipe.finished:
            return pipe
        if self.grid.occupied_count != self._occupied:
            raise RuntimeError('grid changed while pipe {} was growing'.format(pipe.id))

        pipe.iterations += 1
        pipe.steps += 1
        pos = pipe.position
        direction = pipe.direction

        # Straight run; the last cell of the run is the anchor for whatever
        # comes next and is claimed once that is known
        anchor = None
        available = self.grid.count_available_run(pos, direction)
        if available > 0:
            run_length = self.rng.randint(1, available)
            for _ in range(run_length - 1):
                pos = step(pos, direction)
                self._claim_straight(pos)
            anchor = step(pos, direction)

        if pipe.iterations >= pipe.budget:
            if anchor is not None:
                self._claim_cap(anchor)
                pipe.position = anchor
            pipe.finish(STATUS_COMPLETE)
            return pipe

        # Without an anchor (available == 0) a turn has no free cell to hold
        # its joint. Growth never chose a blocked direction and nothing else
        # claims cells mid-growth, so this only happens on a hand-built grower.
        here = anchor if anchor is not None else pos
        candidates = self.grid.empty_neighbor_directions(here, exclude=OPPOSITE[direction])
        if not candidates:
            if anchor is not None:
                self._claim_cap(anchor)
                pipe.position = anchor
            pipe.finish(STATUS_STUCK)
            return pipe

        new_dir = self._choose_direction(candidates)
        if new_dir != direction:
            index = self._elbow_index(direction, new_dir, pipe.notch)
            kind = self._joint_kind()
            pipe.notch = orientation.update_notch(direction, new_dir, pipe.notch)
            if anchor is not None:
                self._claim(anchor, kind, make_segment(
                    kind, anchor, new_dir, from_direction=direction, orientation=index,
                    roll=orientation.elbow_roll_angle(direction, new_dir)))
            pipe.last_direction = direction
            pipe.direction = new_dir
        elif anchor is not None:
            self._claim_straight(anchor)

        pipe.position = here
        return pipe


def grow_pipe(grid, rng, pipe_id=0, config=None):
    """Grow a pipe to a terminal status and return it."""
    grower = PipeGrower(grid, rng, pipe_id=pipe_id, config=config)
    grower.start()
    while not grower.pipe.finished:
        grower.step()
    return grower.pipe
