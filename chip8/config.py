import copy
import logging
import tomllib

from chip8.exception import ConfigException

logger = logging.getLogger(__name__)

# The settings used when no configuration file is given, or when the file
# leaves a setting out.
DEFAULT_CONFIG = {
    'rom': None,
    'cycles_per_frame': 10,
    'scale': 10,
    'color': {
        'back': [0, 0, 0],
        'front': [255, 255, 255],
    },
}


def merge_config(base, overrides):
    """
    Recursively merge the override values into a copy of the base
    configuration. Keys that are not in the base configuration are refused.

    :param base: the configuration to start from
    :param overrides: the values to replace
    :return: the merged configuration
    """
    merged = copy.deepcopy(base)
    for key, value in overrides.items():
        if key not in base:
            raise ConfigException(key, value)
        if isinstance(base[key], dict):
            if not isinstance(value, dict):
                raise ConfigException(key, value)
            merged[key] = merge_config(base[key], value)
        else:
            merged[key] = value
    return merged


def check_positive_int(key, value):
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigException(key, value)


def check_color(key, value):
    if not isinstance(value, (list, tuple)) or len(value) != 3:
        raise ConfigException(key, value)
    for component in value:
        if isinstance(component, bool) or not isinstance(component, int) \
                or not 0 <= component <= 255:
            raise ConfigException(key, value)


def validate_config(config):
    """
    Checks that all of the values in the configuration are usable.

    :param config: the merged configuration
    """
    check_positive_int('cycles_per_frame', config['cycles_per_frame'])
    check_positive_int('scale', config['scale'])
    check_color('color.back', config['color']['back'])
    check_color('color.front', config['color']['front'])
    if config['rom'] is not None and not isinstance(config['rom'], str):
        raise ConfigException('rom', config['rom'])


def load_config(filename=None):
    """
    Loads the TOML configuration file and merges it over the defaults. With
    no filename, a copy of the defaults is returned.

    :param filename: the name of the TOML file to read, or None
    :return: the configuration dictionary
    """
    if filename is None:
        return copy.deepcopy(DEFAULT_CONFIG)

    with open(filename, 'rb') as config_file:
        try:
            file_config = tomllib.load(config_file)
        except tomllib.TOMLDecodeError as error:
            raise ConfigException(filename, str(error)) from error

    logger.debug("Loaded configuration from {}".format(filename))
    config = merge_config(DEFAULT_CONFIG, file_config)
    validate_config(config)
    return config
