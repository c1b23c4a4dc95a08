import argparse
from configparser import ConfigParser

from .constants import DEFAULT_SHARD_WIDTH, SUBCOMMAND, ReadCtxNamespace, cast_boolean
from .shard import validate_shard_width
from .util import cast, filepath, logger


def non_negative_int(value):
    """
    Example:
        >>> non_negative_int('3')
        3
    """
    try:
        value = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError('Must be a non-negative integer')
    if value < 0:
        raise argparse.ArgumentTypeError('Must be a non-negative integer')
    return value


def shard_width_type(value):
    try:
        return validate_shard_width(value)
    except ValueError as err:
        raise argparse.ArgumentTypeError(str(err.args[0]))


DEFAULTS = ReadCtxNamespace()
DEFAULTS.add(
    'shard_width', DEFAULT_SHARD_WIDTH, cast_type=shard_width_type, env_overwritable=True,
    defn='number of bases per shard. Used by both the reference and the variant sharding schemes')
DEFAULTS.add(
    'reference_window_padding', 0, cast_type=non_negative_int, env_overwritable=True,
    defn='number of extra reference bases to include on either side of each read')
DEFAULTS.add(
    'concurrency', 1, cast_type=non_negative_int, env_overwritable=True,
    defn='number of worker processes used to run the shards. 1 or less runs everything in the main process')
DEFAULTS.add(
    'max_retries', 0, cast_type=non_negative_int, env_overwritable=True,
    defn='number of times a shard is rerun after a failure which is not an input error')
DEFAULTS.add(
    'contigs', [], cast_type=str, listable=True, env_overwritable=True,
    defn='only load reads and variants on these contigs (all contigs when not given)')


class CustomHelpFormatter(argparse.ArgumentDefaultsHelpFormatter):
    """
    subclass the default help formatter to stop default printing for required arguments
    """

    def _format_args(self, action, default_metavar):
        if action.metavar is None:
            action.metavar = get_metavar(action.type)
        return super(CustomHelpFormatter, self)._format_args(action, default_metavar)

    def _get_help_string(self, action):
        if action.required:
            return action.help
        return super(CustomHelpFormatter, self)._get_help_string(action)

    def add_arguments(self, actions):
        # sort the arguments alphanumerically so they print in the help that way
        actions = sorted(actions, key=lambda x: getattr(x, 'option_strings'))
        super(CustomHelpFormatter, self).add_arguments(actions)


def get_metavar(arg_type):
    """
    For a given argument type, returns the string to be used for the metavar argument in add_argument

    Example:
        >>> get_metavar(bool)
        '{True,False}'
    """
    if arg_type in [bool, cast_boolean]:
        return '{True,False}'
    elif arg_type in [int, non_negative_int, shard_width_type]:
        return 'INT'
    elif arg_type == filepath:
        return 'FILEPATH'
    return None


def augment_parser(arguments, parser, namespace=DEFAULTS):
    """
    add default-backed arguments to an argument parser. Defaults are left as None so that a value from a
    config file can be told apart from one given on the command line
    """
    for arg in arguments:
        kwargs = {
            'default': None,
            'type': namespace.type(arg),
            'help': '{} (default: {})'.format(namespace.define(arg), repr(namespace[arg])),
        }
        if namespace.is_listable(arg):
            kwargs['nargs'] = '*'
        parser.add_argument('--{}'.format(arg), **kwargs)


def read_config(filename, section=SUBCOMMAND.JOIN, namespace=DEFAULTS):
    """
    read settings from an INI style config file

    Returns:
        dict: the cast settings found in the given section

    Raises:
        KeyError: the section holds a setting which is not recognized
    """
    parser = ConfigParser()
    logger.info('loading: {}'.format(filename))
    with open(filename, 'r') as fh:
        parser.read_file(fh)
    settings = {}
    if not parser.has_section(section):
        return settings
    for attr, value in parser[section].items():
        if attr not in namespace.keys():
            raise KeyError('unrecognized setting in config file', attr, section, filename)
        if namespace.is_listable(attr):
            settings[attr] = ReadCtxNamespace.parse_listable_string(value, namespace.type(attr))
        else:
            settings[attr] = cast(value, namespace.type(attr))
    return settings


def resolve_settings(args, config_settings=None, namespace=DEFAULTS):
    """
    combine the settings. The command line takes precedence over the config file, which takes precedence over
    environment variables and finally the built-in defaults

    Args:
        args (dict): parsed command line arguments, None where not given
        config_settings (dict): settings read from the config file
    """
    config_settings = config_settings or {}
    settings = {}
    for attr in namespace.keys():
        if args.get(attr, None) is not None:
            settings[attr] = args[attr]
        elif attr in config_settings:
            settings[attr] = config_settings[attr]
        else:
            settings[attr] = namespace[attr]
    return settings


def write_config(filename, namespace=DEFAULTS, section=SUBCOMMAND.JOIN):
    """
    write a config file template holding the current defaults
    """
    parser = ConfigParser()
    parser[section] = {}
    for attr, value in namespace.items():
        if namespace.is_listable(attr):
            value = ' '.join([str(v) for v in value])
        parser[section][attr] = str(value)
    logger.info('writing: {}'.format(filename))
    with open(filename, 'w') as fh:
        parser.write(fh)
