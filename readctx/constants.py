"""
module responsible for small utility functions and constants used throughout the readctx package
"""
import os
import re


PROGNAME = 'readctx'
EXIT_OK = 0

ENV_VAR_PREFIX = 'READCTX'

DEFAULT_SHARD_WIDTH = 100000
""":class:`int`: the number of bases per shard, shared by the reference and variant sharding schemes"""

MAX_POSITION = 2 ** 31 - 1
""":class:`int`: the largest genomic position accepted when deriving shard numbers"""


def cast_boolean(input_value):
    value = str(input_value).lower()
    if value in ['t', 'true', '1', 'y', 'yes', '+']:
        return True
    elif value in ['f', 'false', '0', 'n', 'no', '-']:
        return False
    raise TypeError('casting to boolean failed', input_value)


class ReadCtxNamespace:
    """
    Namespace to hold module constants

    Example:
        >>> nspace = ReadCtxNamespace(thing=1, otherthing=2)
        >>> nspace.thing
        1
        >>> nspace.otherthing
        2
    """
    DELIM = r'[;,\s]+'
    """:class:`str`: delimiter to use is parsing listable variables from the environment or config file"""

    def __init__(self, *pos, **kwargs):
        object.__setattr__(self, '_defns', {})
        object.__setattr__(self, '_types', {})
        object.__setattr__(self, '_members', {})
        object.__setattr__(self, '_listable', set())
        object.__setattr__(self, '_env_overwritable', set())
        object.__setattr__(self, '_env_prefix', ENV_VAR_PREFIX)

        for k in pos:
            if k in self._members:
                raise AttributeError('Cannot respecify existing attribute', k, self._members[k])
            self[k] = k

        for attr, val in kwargs.items():
            if attr in self._members:
                raise AttributeError('Cannot respecify existing attribute', attr, self._members[attr])
            self[attr] = val

        for attr, value in self._members.items():
            self._set_type(attr, type(value))

    def __repr__(self):
        return '{}({})'.format(
            self.__class__.__name__, ', '.join(sorted(['{}={}'.format(k, repr(v)) for k, v in self.items()]))
        )

    def get_env_name(self, attr):
        """
        Get the name of the corresponding environment variable

        Example:
            >>> nspace = ReadCtxNamespace(a=1)
            >>> nspace.get_env_name('a')
            'READCTX_A'
        """
        if self._env_prefix:
            return '{}_{}'.format(self._env_prefix, attr).upper()
        return attr.upper()

    def get_env_var(self, attr):
        """
        retrieve the environment variable definition of a given attribute
        """
        env_name = self.get_env_name(attr)
        env = os.environ[env_name].strip()
        attr_type = self._types.get(attr, str)

        if attr in self._listable:
            return self.parse_listable_string(env, attr_type)
        return attr_type(env)

    @classmethod
    def parse_listable_string(cls, string, cast_type=str):
        """
        Given some string, parse it into a list

        Example:
            >>> ReadCtxNamespace.parse_listable_string('1,2,3', int)
            [1, 2, 3]
        """
        string = string.strip()
        return [cast_type(val) for val in re.split(cls.DELIM, string)] if string else []

    def is_env_overwritable(self, attr):
        """
        Returns:
            bool: True if the variable is overrided by specifying the environment variable equivalent
        """
        return attr in self._env_overwritable

    def is_listable(self, attr):
        """
        Returns:
            bool: True if the variable should be parsed as a list
        """
        return attr in self._listable

    def __getattribute__(self, attr):
        try:
            return object.__getattribute__(self, attr)
        except AttributeError as err:
            variables = object.__getattribute__(self, '_members')
            if attr not in variables:
                raise err
            if self.is_env_overwritable(attr):
                try:
                    return self.get_env_var(attr)
                except KeyError:
                    pass
            return variables[attr]

    def items(self):
        """
        Example:
            >>> ReadCtxNamespace(thing=1, otherthing=2).items()
            [('thing', 1), ('otherthing', 2)]
        """
        return [(k, self[k]) for k in self.keys()]

    def to_dict(self):
        return dict(self.items())

    def __getitem__(self, key):
        return getattr(self, key)

    def __setitem__(self, key, val):
        self.__setattr__(key, val)

    def __setattr__(self, attr, val):
        if attr.startswith('_'):
            raise ValueError('cannot set private', attr)
        object.__getattribute__(self, '_members')[attr] = val

    def keys(self):
        return [k for k in self._members]

    def values(self):
        return [self[k] for k in self._members]

    def enforce(self, value):
        """
        checks that the current namespace has a given value

        Returns:
            the input value

        Raises:
            KeyError: the value did not exist

        Example:
            >>> nspace = ReadCtxNamespace(thing=1, otherthing=2)
            >>> nspace.enforce(1)
            1
            >>> nspace.enforce(3)
            Traceback (most recent call last):
            ....
        """
        if value not in self.values():
            raise KeyError('value {0} is not a valid member of '.format(repr(value)), self.values())
        return value

    def __iter__(self):
        return iter(self.keys())

    def _set_type(self, attr, cast_type):
        if cast_type == bool:
            self._types[attr] = cast_boolean
        else:
            self._types[attr] = cast_type

    def type(self, attr, *pos):
        """
        returns the type

        Example:
            >>> nspace = ReadCtxNamespace(thing=1, otherthing=2)
            >>> nspace.type('thing')
            <class 'int'>
        """
        if len(pos) > 1:
            raise TypeError('too many arguments. type takes a single \'default\' value argument')
        try:
            return self._types[attr]
        except KeyError as err:
            if pos:
                return pos[0]
            raise err

    def define(self, attr, *pos):
        """
        Get the definition of a given attribute or return a default (when given) if the attribute does not exist

        Raises:
            KeyError: the attribute does not exist and a default was not given
        """
        if len(pos) > 1:
            raise TypeError('too many arguments. define takes a single \'default\' value argument')
        try:
            return self._defns[attr]
        except KeyError as err:
            if pos:
                return pos[0]
            raise err

    def add(self, attr, value, defn=None, cast_type=None, env_overwritable=False, listable=False):
        """
        Add an attribute to the name space

        Args:
            attr (str): name of the attribute being added
            value: the value of the attribute
            defn (str): the definition, will be used in generating help menus and config templates
            cast_type (callable): the function to use in casting the value
            env_overwritable (bool): True if this attribute will be overriden by its environment variable equivalent
            listable (bool): True if this attribute can have multiple values

        Example:
            >>> nspace = ReadCtxNamespace()
            >>> nspace.add('thing', 1, 'I am a thing', int)
        """
        if cast_type:
            self._set_type(attr, cast_type)
        else:
            self._set_type(attr, type(value))
        if defn:
            self._defns[attr] = defn
        if env_overwritable:
            self._env_overwritable.add(attr)
        if listable:
            self._listable.add(attr)
        self[attr] = value


SUBCOMMAND = ReadCtxNamespace(
    JOIN='join',
    CONFIG='config',
)
"""
holds controlled vocabulary for the command line subcommands

- ``join``: build the per-read context from reads, variants and a reference
- ``config``: write a configuration template holding the defaults
"""

SHARD_SCHEME = ReadCtxNamespace(
    REFERENCE='reference',
    VARIANT='variant',
)
"""
holds controlled vocabulary for the sharding schemes

- ``reference``: one shard per interval, the shard containing the start position
- ``variant``: one shard per overlapped shard, from the start shard through the end shard
"""


VARIANT_TYPE = ReadCtxNamespace(
    SNP='snp',
    INDEL='indel',
    OTHER='other',
)
"""
holds controlled vocabulary for the variant type flags

- ``snp``: single base substitution
- ``indel``: insertion or deletion
- ``other``: neither a snp nor an indel (mnp, symbolic allele, etc.)
"""


COLUMNS = ReadCtxNamespace(
    read_identity='read_identity',
    read_name='read_name',
    contig='contig',
    start='start',
    end='end',
    reference_start='reference_start',
    reference_end='reference_end',
    reference_bases='reference_bases',
    variant_identities='variant_identities',
    variant_names='variant_names',
)
"""
Column names for the tab-delimited read context output

- ``read_identity``: the unique identity of the read
- ``read_name``: the query name of the read (not unique)
- ``contig``, ``start``, ``end``: the read interval, 1-based inclusive
- ``reference_start``, ``reference_end``: the interval of the reference bases paired with the read
- ``reference_bases``: the reference sequence
- ``variant_identities``: semi-colon delimited identities of the overlapping variants
- ``variant_names``: semi-colon delimited names (VCF IDs) of the overlapping variants
"""


def sort_columns(input_columns):
    order = {col: i for i, col in enumerate(COLUMNS.values())}
    return sorted(input_columns, key=lambda col: (order.get(col, len(order)), col))
