"""
Grouping of shard-keyed records and computing the reference span of a group
"""
from .interval import GenomicInterval
from .util import logger


def group_by_key(keyed_records):
    """
    group (key, record) pairs by their key. Every input record is kept, including records which are equal
    to one another, and records keep their input order within each group

    Args:
        keyed_records (Iterable[Tuple[Hashable, object]]): the keyed records

    Returns:
        Dict[Hashable, List]: the records grouped by key

    Example:
        >>> group_by_key([('a', 1), ('b', 2), ('a', 1)])
        {'a': [1, 1], 'b': [2]}
    """
    groups = {}
    for key, record in keyed_records:
        groups.setdefault(key, []).append(record)
    return groups


def group_by_shard(keyed_records):
    """
    group shard-keyed records (see :func:`~readctx.shard.key_by_shard`) by shard
    """
    groups = group_by_key(keyed_records)
    logger.debug('grouped records into {} shards'.format(len(groups)))
    return groups


def bounding_span(records, window=None):
    """
    the minimal interval covering every record in a group. This is the region requested from the
    reference source for a reference shard group

    Args:
        records (Iterable): records with an ``interval`` attribute
        window (callable): optional function giving the interval to cover for each record, defaults to its interval

    Raises:
        AttributeError: the group is empty
        ContigMismatchError: the records are not all on the same contig

    Example:
        >>> bounding_span([ReadRecord(GenomicInterval('1', 100, 149)), ReadRecord(GenomicInterval('1', 140, 239))])
        GenomicInterval(1:100-239)
    """
    if window is None:
        intervals = [record.interval for record in records]
    else:
        intervals = [window(record) for record in records]
    if not intervals:
        raise AttributeError('cannot compute the bounding span of an empty group')
    return GenomicInterval.span(*intervals)
