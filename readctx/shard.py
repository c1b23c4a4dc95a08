"""
Shard key derivation

Genomic coordinates on each contig are bucketed into fixed width shards (shard number = position // width).
Two independent schemes are used

- reference shards: an interval is keyed only by the shard holding its start position. Reads are batched
  this way so that a single reference fetch of the bounding span serves the whole group
- variant shards: an interval is keyed by every shard it overlaps. Reads and variants straddling a shard
  boundary must meet in at least one common shard, so the same pair may be matched in more than one
  shard and has to be deduplicated when the context is assembled
"""
from collections import namedtuple
from numbers import Integral

from .constants import DEFAULT_SHARD_WIDTH, MAX_POSITION, SHARD_SCHEME
from .error import ShardRangeError


def validate_shard_width(shard_width):
    """
    Raises:
        ShardRangeError: the shard width is not a positive integer

    Example:
        >>> validate_shard_width('100')
        100
    """
    try:
        if isinstance(shard_width, bool):
            raise TypeError(shard_width)
        if not isinstance(shard_width, Integral):
            shard_width = int(str(shard_width).strip())
    except (TypeError, ValueError):
        raise ShardRangeError('shard width must be an integer', shard_width)
    if shard_width < 1:
        raise ShardRangeError('shard width must be a positive number of bases', shard_width)
    return int(shard_width)


def shard_number(position, shard_width=DEFAULT_SHARD_WIDTH):
    """
    Returns:
        int: the number of the shard containing the given position

    Raises:
        ShardRangeError: the position is not between 1 and MAX_POSITION

    Example:
        >>> shard_number(2999999, 100000)
        29
        >>> shard_number(3000000, 100000)
        30
    """
    shard_width = validate_shard_width(shard_width)
    if isinstance(position, bool) or not isinstance(position, Integral):
        raise ShardRangeError('position must be an integer', position)
    if position < 1 or position > MAX_POSITION:
        raise ShardRangeError('position is outside the range of positions that can be sharded', position, MAX_POSITION)
    return int(position) // shard_width


class _ShardKey:
    __slots__ = ()

    def __str__(self):
        return '{}:{}'.format(self.contig, self.shard_number)

    # keys of different schemes never compare equal even with the same number and contig
    def __eq__(self, other):
        return type(self) is type(other) and tuple.__eq__(self, other)

    def __ne__(self, other):
        return not self.__eq__(other)

    def __hash__(self):
        return hash((self.SCHEME, tuple.__hash__(self)))


class ReferenceShard(_ShardKey, namedtuple('ReferenceShard', ['shard_number', 'contig'])):
    """
    key for grouping reads which will share a single reference bases fetch
    """
    __slots__ = ()
    SCHEME = SHARD_SCHEME.REFERENCE

    def __new__(cls, shard_number, contig):
        if isinstance(shard_number, bool) or not isinstance(shard_number, Integral) or shard_number < 0:
            raise ShardRangeError('shard number must be a non-negative integer', shard_number)
        return super(ReferenceShard, cls).__new__(cls, int(shard_number), contig)

    @classmethod
    def for_interval(cls, interval, shard_width=DEFAULT_SHARD_WIDTH):
        """
        the reference shard is always the shard holding the start of the interval, even when the interval
        runs past the end of that shard

        Example:
            >>> ReferenceShard.for_interval(GenomicInterval('1', 2999999, 3000008))
            ReferenceShard(shard_number=29, contig='1')
        """
        return cls(shard_number(interval.start, shard_width), interval.contig)


class VariantShard(_ShardKey, namedtuple('VariantShard', ['shard_number', 'contig'])):
    """
    key for pairing reads and variants which may overlap
    """
    __slots__ = ()
    SCHEME = SHARD_SCHEME.VARIANT

    def __new__(cls, shard_number, contig):
        if isinstance(shard_number, bool) or not isinstance(shard_number, Integral) or shard_number < 0:
            raise ShardRangeError('shard number must be a non-negative integer', shard_number)
        return super(VariantShard, cls).__new__(cls, int(shard_number), contig)

    @classmethod
    def for_interval(cls, interval, shard_width=DEFAULT_SHARD_WIDTH):
        """
        one shard for every shard overlapped by the interval, in increasing order

        Example:
            >>> VariantShard.for_interval(GenomicInterval('1', 2999999, 3000008))
            [VariantShard(shard_number=29, contig='1'), VariantShard(shard_number=30, contig='1')]
        """
        first = shard_number(interval.start, shard_width)
        last = shard_number(interval.end, shard_width)
        return [cls(num, interval.contig) for num in range(first, last + 1)]


def reference_shards_for(interval, shard_width=DEFAULT_SHARD_WIDTH):
    """
    Returns:
        List[ReferenceShard]: always a single key
    """
    return [ReferenceShard.for_interval(interval, shard_width)]


def variant_shards_for(interval, shard_width=DEFAULT_SHARD_WIDTH):
    """
    Returns:
        List[VariantShard]: one key per overlapped shard
    """
    return VariantShard.for_interval(interval, shard_width)


SHARD_KEY_FUNCTIONS = {
    SHARD_SCHEME.REFERENCE: reference_shards_for,
    SHARD_SCHEME.VARIANT: variant_shards_for,
}


def key_by_shard(records, scheme, shard_width=DEFAULT_SHARD_WIDTH):
    """
    pair each record with every shard key it belongs to under the given scheme

    Args:
        records (Iterable): records with an ``interval`` attribute
        scheme (SHARD_SCHEME): the sharding scheme to use
        shard_width (int): bases per shard

    Returns:
        List[Tuple[ReferenceShard or VariantShard, object]]: (key, record) pairs. A record appears
        once per key
    """
    keys_for = SHARD_KEY_FUNCTIONS[SHARD_SCHEME.enforce(scheme)]
    shard_width = validate_shard_width(shard_width)
    keyed = []
    for record in records:
        for key in keys_for(record.interval, shard_width):
            keyed.append((key, record))
    return keyed


def key_by_reference_shard(records, shard_width=DEFAULT_SHARD_WIDTH):
    return key_by_shard(records, SHARD_SCHEME.REFERENCE, shard_width)


def key_by_variant_shard(records, shard_width=DEFAULT_SHARD_WIDTH):
    return key_by_shard(records, SHARD_SCHEME.VARIANT, shard_width)
