import drawsvg as draw
import logging
import math
from shapely.geometry import LineString, Point
from shapely.ops import unary_union

from pipe_grid import NODE_BALL, NODE_CAP, NODE_ELBOW, NODE_MARKER


logger = logging.getLogger(__name__)


# ============================================================================
# ISOMETRIC PREVIEW
# ============================================================================

PIPE_COLORS = [
    '#d1495b', '#edae49', '#00798c', '#30638e', '#66a182',
    '#8d6a9f', '#e07a5f', '#3d405b', '#81b29a', '#f2cc8f',
]

# Disc radius at a cell, as a multiple of the pipe radius
NODE_DISC_SCALE = {
    NODE_CAP: 1.15,
    NODE_ELBOW: 1.0,
    NODE_BALL: 1.35,
    NODE_MARKER: 1.5,
}

_COS30 = math.cos(math.radians(30))


def project_iso(pos, cell_size=40):
    """Project a lattice position to 2D. +Y is up, +X and +Z recede down-right/left."""
    x, y, z = pos
    return ((x - z) * _COS30 * cell_size,
            ((x + z) * 0.5 - y) * cell_size)


def _grid_center(grid_size):
    sx, sy, sz = grid_size
    return ((sx - 1) / 2.0, (sy - 1) / 2.0, (sz - 1) / 2.0)


def cell_polygon(path, index, kind, cell_size=40, pipe_radius=0.3, center=(0, 0, 0)):
    """Outline of one pipe cell in projected space.

    Half-links run from the cell centre to the midpoints toward its path
    neighbours; joints, caps and markers add a disc.
    """
    r = pipe_radius * cell_size

    def at(i):
        p = path[i]
        return project_iso((p[0] - center[0], p[1] - center[1], p[2] - center[2]), cell_size)

    cx, cy = at(index)
    pieces = []
    for j in (index - 1, index + 1):
        if 0 <= j < len(path):
            nx, ny = at(j)
            mid = ((cx + nx) / 2.0, (cy + ny) / 2.0)
            pieces.append(LineString([(cx, cy), mid]).buffer(r, cap_style='flat'))
    scale = NODE_DISC_SCALE.get(kind)
    if scale is not None or not pieces:
        pieces.append(Point(cx, cy).buffer(r * (scale or 1.0)))
    return unary_union(pieces)


def _append_polygon(target, geom, fill, stroke_width):
    polys = geom.geoms if hasattr(geom, 'geoms') else [geom]
    for poly in polys:
        if poly.is_empty:
            continue
        coords = []
        for x, y in list(poly.exterior.coords)[:-1]:
            coords.extend((round(x, 2), round(y, 2)))
        target.append(draw.Lines(*coords, close=True, fill=fill,
                                 stroke='black', stroke_width=stroke_width))


def _draw_bounds(drawing, grid_size, cell_size, center, stroke_width):
    sx, sy, sz = grid_size
    lo = [-0.5 - c for c in center]
    hi = [s - 0.5 - c for s, c in zip(grid_size, center)]
    corners = {}
    for ix, x in enumerate((lo[0], hi[0])):
        for iy, y in enumerate((lo[1], hi[1])):
            for iz, z in enumerate((lo[2], hi[2])):
                corners[(ix, iy, iz)] = project_iso((x, y, z), cell_size)
    for a, pa in corners.items():
        for b, pb in corners.items():
            if a < b and sum(abs(i - j) for i, j in zip(a, b)) == 1:
                drawing.append(draw.Line(pa[0], pa[1], pb[0], pb[1], stroke='#bbbbbb',
                                         stroke_width=stroke_width, fill='none'))


def render_pipes_svg(pipes, grid_size, cell_size=40, pipe_radius=0.3,
                     stroke_width=0.8, show_bounds=True, progress_callback=None):
    """Render finished pipes to an isometric SVG string.

    Cells are drawn back to front (by x + y + z) with opaque fills, so nearer
    pipes cover farther ones.

    Args:
        pipes: iterable of finished pipes (uses only .id, .path and .segments)
        grid_size: (size_x, size_y, size_z) of the lattice
        cell_size: projected length of one lattice step
        pipe_radius: pipe radius as a fraction of cell_size
        progress_callback: fn(current, total) called per drawn cell
    """
    center = _grid_center(grid_size)
    sx, sy, sz = grid_size
    extent_x = (sx + sz) * _COS30 * cell_size
    extent_y = ((sx + sz) * 0.5 + sy) * cell_size
    margin = 2 * cell_size
    d = draw.Drawing(extent_x + margin, extent_y + margin, origin='center',
                     displayInline=False)
    d.append(draw.Rectangle(-(extent_x + margin) / 2, -(extent_y + margin) / 2,
                            extent_x + margin, extent_y + margin, fill='white'))
    if show_bounds:
        _draw_bounds(d, grid_size, cell_size, center, stroke_width * 0.5)

    cells = []
    for pipe in pipes:
        color = PIPE_COLORS[pipe.id % len(PIPE_COLORS)]
        for index, segment in enumerate(pipe.segments):
            x, y, z = segment['position']
            cells.append((x + y + z, pipe.id, index, pipe, segment['kind'], color))
    cells.sort(key=lambda c: c[:3])

    total = len(cells)
    for n, (_, _, index, pipe, kind, color) in enumerate(cells, start=1):
        geom = cell_polygon(pipe.path, index, kind, cell_size=cell_size,
                            pipe_radius=pipe_radius, center=center)
        _append_polygon(d, geom, color, stroke_width)
        if progress_callback:
            progress_callback(n, total)

    logger.debug('rendered %d cells', total)
    return d.as_svg()


def render_layer_svg(layer, **kwargs):
    """Render every finished pipe of a PipeLayer. kwargs go to render_pipes_svg."""
    return render_pipes_svg(layer.pipes, layer.grid.size, **kwargs)


def save_layer_svg(layer, path, **kwargs):
    svg = render_layer_svg(layer, **kwargs)
    with open(path, 'w', encoding='utf-8') as f:
        f.write(svg)
    logger.info('saved %s', path)
    return path
