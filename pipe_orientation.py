"""Notch tracking and elbow selection for lattice pipes.

Every cylinder and elbow mesh carries a seam ("notch"). To keep the seams of
neighbouring meshes lined up, each pipe carries the absolute direction its
notch points in. The functions here are pure lookups over fixed tables; the
only state is the notch value each caller threads through.

Directions and notches use the same six names as pipe_grid: '+X' ... '-Z'.
"""

import logging

from pipe_grid import AXIS, DIRECTIONS, OPPOSITE


logger = logging.getLogger(__name__)


class OrientationFault(LookupError):
    """No table entry matches a (direction, notch) combination."""


# ============================================================================
# TABLES
# ============================================================================

# Where the notch of a freshly started cylinder points, per start direction
INITIAL_NOTCH = {
    '+X': '+Y', '-X': '+Y',
    '+Y': '-Z', '-Y': '+Z',
    '+Z': '+Y', '-Z': '+Y',
}

# Four elbow geometries per (old, new) turn. Entry i is the notch the pipe
# must carry into the turn for elbow mesh i to line up with it.
ELBOW_NOTCHES = {
    # old = +X
    ('+X', '+Y'): ('+Y', '-Z', '-Y', '+Z'),
    ('+X', '-Y'): ('-Y', '+Z', '+Y', '-Z'),
    ('+X', '+Z'): ('+Z', '+Y', '-Z', '-Y'),
    ('+X', '-Z'): ('-Z', '-Y', '+Z', '+Y'),
    # old = -X
    ('-X', '+Y'): ('+Y', '+Z', '-Y', '-Z'),
    ('-X', '-Y'): ('-Y', '-Z', '+Y', '+Z'),
    ('-X', '+Z'): ('+Z', '-Y', '-Z', '+Y'),
    ('-X', '-Z'): ('-Z', '+Y', '+Z', '-Y'),
    # old = +Y
    ('+Y', '+X'): ('+X', '+Z', '-X', '-Z'),
    ('+Y', '-X'): ('-X', '-Z', '+X', '+Z'),
    ('+Y', '+Z'): ('+Z', '-X', '-Z', '+X'),
    ('+Y', '-Z'): ('-Z', '+X', '+Z', '-X'),
    # old = -Y
    ('-Y', '+X'): ('+X', '-Z', '-X', '+Z'),
    ('-Y', '-X'): ('-X', '+Z', '+X', '-Z'),
    ('-Y', '+Z'): ('+Z', '+X', '-Z', '-X'),
    ('-Y', '-Z'): ('-Z', '-X', '+Z', '+X'),
    # old = +Z
    ('+Z', '+X'): ('+X', '-Y', '-X', '+Y'),
    ('+Z', '-X'): ('-X', '+Y', '+X', '-Y'),
    ('+Z', '+Y'): ('+Y', '+X', '-Y', '-X'),
    ('+Z', '-Y'): ('-Y', '-X', '+Y', '+X'),
    # old = -Z
    ('-Z', '+X'): ('+X', '+Y', '-X', '-Y'),
    ('-Z', '-X'): ('-X', '-Y', '+X', '+Y'),
    ('-Z', '+Y'): ('+Y', '-X', '-Y', '+X'),
    ('-Z', '-Y'): ('-Y', '+X', '+Y', '-X'),
}

# Roll (degrees about the travel axis) that brings a default cylinder's notch
# onto the carried notch. Pairs with the notch parallel to travel are absent.
NOTCH_ALIGN_ROTATION = {
    ('+X', '+Y'): 0.0, ('+X', '-Y'): 180.0, ('+X', '+Z'): 90.0, ('+X', '-Z'): -90.0,
    ('-X', '+Y'): 0.0, ('-X', '-Y'): 180.0, ('-X', '+Z'): -90.0, ('-X', '-Z'): 90.0,
    ('+Y', '+X'): -90.0, ('+Y', '-X'): 90.0, ('+Y', '+Z'): 180.0, ('+Y', '-Z'): 0.0,
    ('-Y', '+X'): -90.0, ('-Y', '-X'): 90.0, ('-Y', '+Z'): 0.0, ('-Y', '-Z'): 180.0,
    ('+Z', '+X'): -90.0, ('+Z', '-X'): 90.0, ('+Z', '+Y'): 0.0, ('+Z', '-Y'): 180.0,
    ('-Z', '+X'): 90.0, ('-Z', '-X'): -90.0, ('-Z', '+Y'): 0.0, ('-Z', '-Y'): 180.0,
}

# Roll about the new direction that points an elbow's +Y back along the old one
ELBOW_ROLL = {
    ('+X', '+Y'): 90.0, ('+X', '-Y'): 90.0, ('+X', '+Z'): 90.0, ('+X', '-Z'): -90.0,
    ('-X', '+Y'): -90.0, ('-X', '-Y'): -90.0, ('-X', '+Z'): -90.0, ('-X', '-Z'): 90.0,
    ('+Y', '+X'): 180.0, ('+Y', '-X'): 180.0, ('+Y', '+Z'): 180.0, ('+Y', '-Z'): 180.0,
    ('-Y', '+X'): 0.0, ('-Y', '-X'): 0.0, ('-Y', '+Z'): 0.0, ('-Y', '-Z'): 0.0,
    ('+Z', '+X'): -90.0, ('+Z', '-X'): 90.0, ('+Z', '+Y'): 0.0, ('+Z', '-Y'): 180.0,
    ('-Z', '+X'): 90.0, ('-Z', '-X'): -90.0, ('-Z', '+Y'): 180.0, ('-Z', '-Y'): 0.0,
}


def transverse_directions(direction):
    """The four directions perpendicular to direction, in canonical order."""
    axis = AXIS[direction]
    return tuple(d for d in DIRECTIONS if AXIS[d] != axis)


def is_legal_turn(old_dir, new_dir):
    return AXIS[old_dir] != AXIS[new_dir]


def _turned_notch(old_dir, new_dir, notch):
    # Quarter turn about old x new: old -> new, new -> -old, axis fixed
    if notch == new_dir:
        return OPPOSITE[old_dir]
    if notch == OPPOSITE[new_dir]:
        return old_dir
    return notch


def _build_notch_turn():
    table = {}
    for old_dir in DIRECTIONS:
        for new_dir in transverse_directions(old_dir):
            for notch in transverse_directions(old_dir):
                table[(old_dir, new_dir, notch)] = _turned_notch(old_dir, new_dir, notch)
    return table


NOTCH_TURN = _build_notch_turn()


def _validate_tables():
    """Check every legal turn and carried notch resolves to exactly one entry."""
    for direction in DIRECTIONS:
        notch = INITIAL_NOTCH[direction]
        if AXIS[notch] == AXIS[direction]:
            raise OrientationFault('initial notch {} parallel to {}'.format(notch, direction))
        for n in transverse_directions(direction):
            if (direction, n) not in NOTCH_ALIGN_ROTATION:
                raise OrientationFault('no alignment for {} with notch {}'.format(direction, n))
    for old_dir in DIRECTIONS:
        for new_dir in transverse_directions(old_dir):
            entries = ELBOW_NOTCHES[(old_dir, new_dir)]
            if (old_dir, new_dir) not in ELBOW_ROLL:
                raise OrientationFault('no elbow roll for {} -> {}'.format(old_dir, new_dir))
            for notch in transverse_directions(old_dir):
                if entries.count(notch) != 1:
                    raise OrientationFault('elbow {} -> {} has {} entries for notch {}'.format(
                        old_dir, new_dir, entries.count(notch), notch))
                turned = NOTCH_TURN[(old_dir, new_dir, notch)]
                if AXIS[turned] == AXIS[new_dir]:
                    raise OrientationFault('turn {} -> {} leaves notch {} parallel'.format(
                        old_dir, new_dir, turned))


_validate_tables()


# ============================================================================
# LOOKUPS
# ============================================================================

def initial_notch(direction):
    return INITIAL_NOTCH[direction]


def elbow_orientation(old_dir, new_dir, notch):
    """Return the elbow mesh index (0-3) whose notch matches the carried one.

    Raises OrientationFault for same-axis pairs or a notch no entry carries.
    """
    entries = ELBOW_NOTCHES.get((old_dir, new_dir))
    if entries is None:
        raise OrientationFault('no elbow geometry for {} -> {}'.format(old_dir, new_dir))
    for i, entry in enumerate(entries):
        if entry == notch:
            return i
    raise OrientationFault('no elbow for {} -> {} with notch {}'.format(old_dir, new_dir, notch))


def update_notch(old_dir, new_dir, notch):
    """Notch carried out of a turn from old_dir to new_dir."""
    try:
        return NOTCH_TURN[(old_dir, new_dir, notch)]
    except KeyError:
        raise OrientationFault('cannot turn notch {} from {} to {}'.format(
            notch, old_dir, new_dir)) from None


def notch_alignment_angle(direction, notch):
    """Roll in degrees for a straight cylinder, or None when undefined."""
    return NOTCH_ALIGN_ROTATION.get((direction, notch))


def elbow_roll_angle(old_dir, new_dir):
    try:
        return ELBOW_ROLL[(old_dir, new_dir)]
    except KeyError:
        raise OrientationFault('no elbow roll for {} -> {}'.format(old_dir, new_dir)) from None


def notch_sequence(directions):
    """Notch carried after each entry of a direction sequence.

    Straight repeats keep the notch; turns go through update_notch.
    """
    directions = list(directions)
    if not directions:
        return []
    notch = initial_notch(directions[0])
    result = [notch]
    for old_dir, new_dir in zip(directions, directions[1:]):
        if new_dir != old_dir:
            notch = update_notch(old_dir, new_dir, notch)
        result.append(notch)
    return result
