"""Generate a pipe layer from the command line.

    python pipes_cli.py --size 10 10 10 --pipes 8 --seed 3 --svg pipes.svg
"""

import argparse
import json
import logging
import sys
from datetime import datetime

from pipe_config import ConfigError, JOINT_STYLES, load_config, make_session_config
from pipe_layer import PipeLayer
from pipe_render import save_layer_svg


logger = logging.getLogger(__name__)


def setup_logging(verbose=False):
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s | %(levelname)s | %(name)s | %(message)s',
    )


def build_parser():
    parser = argparse.ArgumentParser(description='Grow non-intersecting pipes through a 3D lattice.')
    parser.add_argument('--config', help='YAML config file')
    parser.add_argument('--size', type=int, nargs=3, metavar=('X', 'Y', 'Z'),
                        help='grid dimensions')
    parser.add_argument('--pipes', type=int, help='pipes per session')
    parser.add_argument('--iterations', type=int, nargs=2, metavar=('LO', 'HI'),
                        help='growth budget range per pipe')
    parser.add_argument('--joint-style', choices=JOINT_STYLES)
    parser.add_argument('--seed', type=int)
    parser.add_argument('--svg', nargs='?', const='', default=None,
                        help='write an isometric SVG preview (default name if no path)')
    parser.add_argument('--json', dest='json_path', help='write the layer as JSON')
    parser.add_argument('-v', '--verbose', action='store_true')
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    overrides = {
        'grid_size': args.size,
        'pipes_per_session': args.pipes,
        'growth_iterations': args.iterations,
        'joint_style': args.joint_style,
    }
    if args.seed is not None:
        overrides['seed'] = args.seed
    try:
        if args.config:
            config = load_config(args.config, **overrides)
        else:
            config = make_session_config(**overrides)
    except (ConfigError, FileNotFoundError) as e:
        logger.error('%s', e)
        return 2

    layer = PipeLayer(config)
    layer.generate()

    for pipe in layer:
        print('pipe {:>3}  {:<12} cells={:<4} turns={}'.format(
            pipe.id, pipe.status, len(pipe.path), pipe.turns))
    stats = layer.stats()
    print('{} pipes, {}/{} cells occupied'.format(stats['pipes'], stats['occupied'], stats['cells']))

    if args.svg is not None:
        path = args.svg or 'pipes-{}.svg'.format(datetime.now().strftime('%Y%m%d-%H%M%S'))
        save_layer_svg(layer, path)
        print('Saved: {}'.format(path))

    if args.json_path:
        with open(args.json_path, 'w', encoding='utf-8') as f:
            json.dump(layer.to_dict(), f, indent=2)
        print('Saved: {}'.format(args.json_path))

    return 0


if __name__ == '__main__':
    sys.exit(main())
