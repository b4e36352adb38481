import logging


logger = logging.getLogger(__name__)


# ============================================================================
# DIRECTIONS
# ============================================================================

# Canonical direction order; neighbour lists and tables follow it
DIRECTIONS = ('+X', '-X', '+Y', '-Y', '+Z', '-Z')

DIRECTION_OFFSETS = {
    '+X': (1, 0, 0), '-X': (-1, 0, 0),
    '+Y': (0, 1, 0), '-Y': (0, -1, 0),
    '+Z': (0, 0, 1), '-Z': (0, 0, -1),
}
OPPOSITE = {
    '+X': '-X', '-X': '+X',
    '+Y': '-Y', '-Y': '+Y',
    '+Z': '-Z', '-Z': '+Z',
}
AXIS = {
    '+X': 'x', '-X': 'x',
    '+Y': 'y', '-Y': 'y',
    '+Z': 'z', '-Z': 'z',
}


def step(pos, direction):
    """Return pos moved one cell along direction (no bounds check)."""
    dx, dy, dz = DIRECTION_OFFSETS[direction]
    return (pos[0] + dx, pos[1] + dy, pos[2] + dz)


# ============================================================================
# NODE KINDS
# ============================================================================

NODE_STRAIGHT = 'straight'
NODE_CAP = 'cap'
NODE_ELBOW = 'elbow'
NODE_BALL = 'ball'
NODE_MARKER = 'marker'  # single-cell pipe that could not move at all

NODE_KINDS = (NODE_STRAIGHT, NODE_CAP, NODE_ELBOW, NODE_BALL, NODE_MARKER)


class PipeGridError(Exception):
    """Base class for grid invariant violations."""


class OutOfBoundsError(PipeGridError, IndexError):
    """Position lies outside the grid."""


class DoubleClaimError(PipeGridError, RuntimeError):
    """Cell is already occupied."""


# ============================================================================
# OCCUPANCY GRID
# ============================================================================

class OccupancyGrid:
    """Bounded 3D lattice of cells, each empty or occupied by a pipe node.

    Cells live in a single flat list indexed ``x*sy*sz + y*sz + z``. An empty
    cell is ``None``; an occupied one is a ``(kind, axis)`` tuple. Occupied
    cells are never released, so pipes that get stuck keep their cells.
    """

    def __init__(self, size_x, size_y, size_z):
        for name, value in (('size_x', size_x), ('size_y', size_y), ('size_z', size_z)):
            if int(value) != value or value < 1:
                raise ValueError('{} must be a positive integer, got {!r}'.format(name, value))
        self.size_x = int(size_x)
        self.size_y = int(size_y)
        self.size_z = int(size_z)
        self._cells = [None] * (self.size_x * self.size_y * self.size_z)
        self._occupied = 0

    @property
    def size(self):
        return (self.size_x, self.size_y, self.size_z)

    @property
    def occupied_count(self):
        return self._occupied

    @property
    def empty_count(self):
        return len(self._cells) - self._occupied

    def __len__(self):
        return len(self._cells)

    def __repr__(self):
        return 'OccupancyGrid({}x{}x{}, occupied={})'.format(
            self.size_x, self.size_y, self.size_z, self._occupied)

    def in_bounds(self, pos):
        x, y, z = pos
        return 0 <= x < self.size_x and 0 <= y < self.size_y and 0 <= z < self.size_z

    def _index(self, pos):
        if not self.in_bounds(pos):
            raise OutOfBoundsError('position {} outside grid {}'.format(tuple(pos), self.size))
        x, y, z = pos
        return x * self.size_y * self.size_z + y * self.size_z + z

    def _position(self, index):
        yz = self.size_y * self.size_z
        x, rest = divmod(index, yz)
        y, z = divmod(rest, self.size_z)
        return (x, y, z)

    def is_empty(self, pos):
        return self._cells[self._index(pos)] is None

    def cell(self, pos):
        """Return ``None`` for an empty cell, else its ``(kind, axis)``."""
        return self._cells[self._index(pos)]

    def claim(self, pos, kind, axis=None):
        if kind not in NODE_KINDS:
            raise ValueError('unknown node kind {!r}'.format(kind))
        idx = self._index(pos)
        if self._cells[idx] is not None:
            raise DoubleClaimError('cell {} already holds {}'.format(tuple(pos), self._cells[idx]))
        self._cells[idx] = (kind, axis)
        self._occupied += 1

    def neighbors(self, pos):
        """One entry per direction in DIRECTIONS order; None past the boundary."""
        self._index(pos)
        result = []
        for direction in DIRECTIONS:
            npos = step(pos, direction)
            result.append(npos if self.in_bounds(npos) else None)
        return result

    def empty_neighbor_directions(self, pos, exclude=None):
        """Directions whose neighbour exists and is empty, in canonical order."""
        dirs = []
        for direction, npos in zip(DIRECTIONS, self.neighbors(pos)):
            if direction == exclude or npos is None:
                continue
            if self._cells[self._index(npos)] is None:
                dirs.append(direction)
        return dirs

    def count_available_run(self, pos, direction):
        """Count contiguous empty cells past pos along direction."""
        self._index(pos)
        count = 0
        npos = step(pos, direction)
        while self.in_bounds(npos) and self._cells[self._index(npos)] is None:
            count += 1
            npos = step(npos, direction)
        return count

    def empty_cells(self):
        """All empty positions in flat-index order."""
        return [self._position(i) for i, c in enumerate(self._cells) if c is None]

    def occupied_cells(self):
        """Yield ``(position, (kind, axis))`` for every occupied cell."""
        for i, c in enumerate(self._cells):
            if c is not None:
                yield self._position(i), c
