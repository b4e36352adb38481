"""Session configuration for lattice pipe generation.

Configuration is a plain dict. ``make_session_config`` fills in defaults and
validates; ``load_config`` reads the same keys from a YAML file.

Keys:
    grid_size: (size_x, size_y, size_z) lattice dimensions
    pipes_per_session: how many pipes a layer tries to grow
    growth_iterations: (lo, hi) inclusive range for each pipe's growth budget
    straight_weight: dict with 'rare_chance', 'max_weight', 'common_max'
    joint_style: 'elbow', 'ball', 'mixed' or 'cycle'
    seed: int seed for the shared random source, or None
"""

import copy
import logging
import random
from pathlib import Path

import yaml


logger = logging.getLogger(__name__)

JOINT_STYLES = ('elbow', 'ball', 'mixed', 'cycle')

DEFAULT_STRAIGHT_WEIGHT = {
    'rare_chance': 20,   # 1 in N pipes gets a strong preference for going straight
    'max_weight': 20,
    'common_max': 4,
}

DEFAULT_CONFIG = {
    'grid_size': (12, 12, 12),
    'pipes_per_session': 12,
    'growth_iterations': (5, 10),
    'straight_weight': DEFAULT_STRAIGHT_WEIGHT,
    'joint_style': 'elbow',
    'seed': None,
}


class ConfigError(ValueError):
    """Configuration value is missing, unknown or out of range."""


def _int_tuple(name, value, length):
    try:
        items = tuple(value)
    except TypeError:
        raise ConfigError('{} must be a sequence of {} integers, got {!r}'.format(
            name, length, value)) from None
    if len(items) != length or not all(isinstance(v, int) and not isinstance(v, bool)
                                       for v in items):
        raise ConfigError('{} must be {} integers, got {!r}'.format(name, length, value))
    return items


def _positive_int(name, value, minimum=1):
    if not isinstance(value, int) or isinstance(value, bool) or value < minimum:
        raise ConfigError('{} must be an integer >= {}, got {!r}'.format(name, minimum, value))
    return value


def make_session_config(**overrides):
    """Return a validated config dict with defaults for anything not given.

    straight_weight may be given partially; missing keys keep their defaults.
    """
    unknown = set(overrides) - set(DEFAULT_CONFIG)
    if unknown:
        raise ConfigError('unknown config keys: {}'.format(', '.join(sorted(unknown))))

    cfg = copy.deepcopy(DEFAULT_CONFIG)
    for key, value in overrides.items():
        if key == 'straight_weight' and value is not None:
            if not isinstance(value, dict):
                raise ConfigError('straight_weight must be a mapping, got {!r}'.format(value))
            extra = set(value) - set(DEFAULT_STRAIGHT_WEIGHT)
            if extra:
                raise ConfigError('unknown straight_weight keys: {}'.format(
                    ', '.join(sorted(extra))))
            cfg['straight_weight'].update(value)
        elif value is not None or key == 'seed':
            cfg[key] = value

    size = _int_tuple('grid_size', cfg['grid_size'], 3)
    for v in size:
        _positive_int('grid_size', v)
    cfg['grid_size'] = size

    _positive_int('pipes_per_session', cfg['pipes_per_session'], minimum=0)

    lo, hi = _int_tuple('growth_iterations', cfg['growth_iterations'], 2)
    _positive_int('growth_iterations', lo)
    if hi < lo:
        raise ConfigError('growth_iterations upper bound {} below lower bound {}'.format(hi, lo))
    cfg['growth_iterations'] = (lo, hi)

    sw = cfg['straight_weight']
    _positive_int('straight_weight.rare_chance', sw['rare_chance'])
    _positive_int('straight_weight.max_weight', sw['max_weight'])
    _positive_int('straight_weight.common_max', sw['common_max'])

    if cfg['joint_style'] not in JOINT_STYLES:
        raise ConfigError('joint_style must be one of {}, got {!r}'.format(
            ', '.join(JOINT_STYLES), cfg['joint_style']))

    if cfg['seed'] is not None and (not isinstance(cfg['seed'], int)
                                    or isinstance(cfg['seed'], bool)):
        raise ConfigError('seed must be an integer or None, got {!r}'.format(cfg['seed']))

    return cfg


def load_config(path, **overrides):
    """Load a YAML config file; keyword overrides win over file values."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError('Configuration file not found: {}'.format(path))

    logger.info('Loading configuration from %s', path)
    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)
    if data is None:
        raise ConfigError('Empty configuration file: {}'.format(path))
    if not isinstance(data, dict):
        raise ConfigError('Configuration file {} must contain a mapping'.format(path))

    data.update({k: v for k, v in overrides.items() if v is not None})
    return make_session_config(**data)


def make_rng(config):
    """Shared seedable random source for one session."""
    return random.Random(config.get('seed'))


def draw_straight_weight(rng, params=None):
    """Draw a pipe's preference for continuing straight over turning.

    Most pipes get a small weight in [1, common_max]; one in rare_chance gets a
    strong one in [max_weight // 4, max_weight].
    """
    if params is None:
        params = DEFAULT_STRAIGHT_WEIGHT
    if rng.randrange(params['rare_chance']) == 0:
        return rng.randint(max(1, params['max_weight'] // 4), params['max_weight'])
    return rng.randint(1, params['common_max'])
