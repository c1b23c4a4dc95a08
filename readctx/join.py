"""
Overlap joins between reads and the other genome-anchored records

Both sides of a join are restricted to a single shard (or for reference bases a single bounding span) so
the candidate set per read is small. The overlap test is the only filter needed for correctness; the
sorted-start search in :func:`overlap_join` only prunes candidates which start after the read ends
"""
import bisect

from .error import ContigMismatchError, InvalidIntervalError, ReferenceFetchError
from .group import bounding_span, group_by_shard
from .interval import GenomicInterval
from .util import logger


def overlap_join(reads, others):
    """
    bounded cross-join of a group of reads against a group of other interval records

    Args:
        reads (Iterable[ReadRecord]): the reads of one shard
        others (Iterable): records with an ``interval`` attribute (variants, reference bases) from the same shard

    Returns:
        List[Tuple[ReadRecord, object]]: every (read, other) pair whose intervals overlap
    """
    others = sorted(others, key=lambda x: (x.interval.contig, x.interval.start))
    starts = [(o.interval.contig, o.interval.start) for o in others]
    pairs = []
    for read in reads:
        first = bisect.bisect_left(starts, (read.interval.contig, ))
        last = bisect.bisect_right(starts, (read.interval.contig, read.interval.end))
        for other in others[first:last]:
            if GenomicInterval.overlaps(read.interval, other.interval):
                pairs.append((read, other))
    return pairs


def cogroup(*keyed_collections):
    """
    group several keyed collections by key at once

    Returns:
        Dict[Hashable, Tuple[List, ...]]: for each key seen in any collection, one list per input collection

    Example:
        >>> cogroup([('a', 1)], [('a', 2), ('b', 3)])
        {'a': ([1], [2]), 'b': ([], [3])}
    """
    grouped = [group_by_shard(keyed) for keyed in keyed_collections]
    keys = []
    seen = set()
    for groups in grouped:
        for key in groups:
            if key not in seen:
                seen.add(key)
                keys.append(key)
    return {key: tuple([groups.get(key, []) for groups in grouped]) for key in keys}


def join_variant_shard(shard, reads, variants):
    """
    the work for a single variant shard: pair each read with every variant in the shard it overlaps.
    A pair spanning several shards is produced once per shard
    """
    pairs = overlap_join(reads, variants)
    logger.debug('shard {}: {} reads x {} variants -> {} pairs'.format(shard, len(reads), len(variants), len(pairs)))
    return pairs


def join_reads_with_variants(keyed_reads, keyed_variants):
    """
    Args:
        keyed_reads (Iterable[Tuple[VariantShard, ReadRecord]]): reads keyed by every variant shard they overlap
        keyed_variants (Iterable[Tuple[VariantShard, Variant]]): variants keyed by every variant shard they overlap

    Returns:
        List[Tuple[ReadRecord, Variant]]: overlapping pairs, duplicated when matched in more than one shard
    """
    pairs = []
    for shard, (reads, variants) in cogroup(keyed_reads, keyed_variants).items():
        if not reads or not variants:
            continue
        pairs.extend(join_variant_shard(shard, reads, variants))
    return pairs


class ReferenceWindow:
    """
    computes the interval of reference bases wanted for a read: its interval padded by a number of leading and
    trailing bases and clamped to the contig
    """

    def __init__(self, leading=0, trailing=None, reference_source=None):
        """
        Args:
            leading (int): number of bases to add before the read start
            trailing (int): number of bases to add after the read end, defaults to the leading padding
            reference_source (ReferenceSource): used to clamp the window to the contig length, required when padding
        """
        self.leading = leading
        self.trailing = leading if trailing is None else trailing
        if self.leading < 0 or self.trailing < 0:
            raise InvalidIntervalError('reference window padding cannot be negative', self.leading, self.trailing)
        if (self.leading or self.trailing) and reference_source is None:
            raise ValueError('a reference source is required to clamp a padded reference window')
        self.reference_source = reference_source

    def __call__(self, read):
        if not self.leading and not self.trailing:
            return read.interval
        contig_length = self.reference_source.contig_length(read.interval.contig)
        if read.interval.end > contig_length:
            raise ReferenceFetchError('read extends past the end of the contig', read, contig_length)
        return read.interval.expand_within_contig(self.leading, self.trailing, contig_length)


def join_reference_shard(shard, reads, reference_source, window=None):
    """
    the work for a single reference shard: fetch the bounding span of the group once and give each read
    the subset of the bases covering its window

    Args:
        shard (ReferenceShard): the shard key of the group
        reads (List[ReadRecord]): the reads keyed to the shard
        reference_source (ReferenceSource): source of the reference bases
        window (callable): maps a read to the interval of bases it needs, defaults to the read interval

    Returns:
        List[Tuple[ReadRecord, ReferenceBases]]: one pair per read

    Raises:
        ContigMismatchError: a read is on a different contig than the shard
        ReferenceFetchError: the reference source cannot supply the bases for the span
    """
    if window is None:
        window = ReferenceWindow()
    windows = []
    for read in reads:
        if read.interval.contig != shard.contig:
            raise ContigMismatchError('read contig does not match its reference shard', read, shard)
        windows.append(window(read))
    span = bounding_span(windows, window=lambda x: x)
    try:
        bases = reference_source.fetch(span)
    except ReferenceFetchError as err:
        raise ReferenceFetchError(
            'unable to fetch reference bases for shard {} span {}'.format(shard, span), *err.args
        ) from err
    logger.debug('shard {}: fetched {} bases for {} reads'.format(shard, len(bases), len(reads)))
    return [(read, bases.subset(read_window)) for read, read_window in zip(reads, windows)]


def join_reads_with_reference(keyed_reads, reference_source, window=None):
    """
    Args:
        keyed_reads (Iterable[Tuple[ReferenceShard, ReadRecord]]): reads keyed by their reference shard
        reference_source (ReferenceSource): source of the reference bases
        window (callable): maps a read to the interval of bases it needs

    Returns:
        List[Tuple[ReadRecord, ReferenceBases]]: one pair per keyed read
    """
    pairs = []
    for shard, reads in group_by_shard(keyed_reads).items():
        pairs.extend(join_reference_shard(shard, reads, reference_source, window=window))
    return pairs
