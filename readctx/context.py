"""
Assembly of the per-read context from the partial results of every shard

Partial results are plain mappings of read identity to :class:`ReadContextData`. Merging them is a set
union keyed by read identity, so shards can be combined in any order and any grouping and give the same
final context. Variants are deduplicated by identity, which removes the repeated matches produced when a
read or variant spans more than one variant shard
"""
from .error import MissingReferenceError, ReadContextError
from .util import logger


class ReadContextData:
    """
    the reference bases and overlapping variants for a single read

    Attributes:
        reference_bases (ReferenceBases): the reference bases for the read, None for a partial result which
            only holds variants
        variants (FrozenSet[Variant]): the overlapping variants, unique by variant identity
    """
    __slots__ = ('reference_bases', 'variants')

    def __init__(self, reference_bases=None, variants=()):
        object.__setattr__(self, 'reference_bases', reference_bases)
        object.__setattr__(self, 'variants', frozenset(variants))

    def __setattr__(self, attr, value):
        raise AttributeError('ReadContextData is immutable', attr)

    def __getstate__(self):
        return (self.reference_bases, self.variants)

    def __setstate__(self, state):
        object.__setattr__(self, 'reference_bases', state[0])
        object.__setattr__(self, 'variants', state[1])

    def combine(self, other):
        """
        merge two partial contexts for the same read. Commutative and associative

        Raises:
            ReadContextError: both partials hold reference bases and they differ
        """
        reference_bases = self.reference_bases
        if reference_bases is None:
            reference_bases = other.reference_bases
        elif other.reference_bases is not None and other.reference_bases != reference_bases:
            raise ReadContextError(
                'conflicting reference bases for the same read', reference_bases, other.reference_bases
            )
        return ReadContextData(reference_bases, self.variants | other.variants)

    def __or__(self, other):
        return self.combine(other)

    def variant_identities(self):
        return sorted([str(v.identity) for v in self.variants])

    def __eq__(self, other):
        if not isinstance(other, ReadContextData):
            return NotImplemented
        return self.reference_bases == other.reference_bases and self.variants == other.variants

    def __hash__(self):
        return hash((self.reference_bases, self.variants))

    def __repr__(self):
        return 'ReadContextData({}, variants=[{}])'.format(self.reference_bases, ', '.join(self.variant_identities()))


def merge_partial_contexts(*partials):
    """
    reduce partial results (mappings of read identity to ReadContextData) into a single mapping

    Example:
        >>> merge_partial_contexts({'r1': ReadContextData(bases)}, {'r1': ReadContextData(variants=[v1])})
        {'r1': ReadContextData(bases, variants=[v1])}
    """
    merged = {}
    for partial in partials:
        for identity, data in partial.items():
            if identity in merged:
                merged[identity] = merged[identity].combine(data)
            else:
                merged[identity] = data
    return merged


def partial_contexts_from_reference(read_reference_pairs):
    """
    Args:
        read_reference_pairs (Iterable[Tuple[ReadRecord, ReferenceBases]]): the reference path join result

    Returns:
        Dict[str, ReadContextData]: partial contexts holding only reference bases
    """
    partial = {}
    for read, reference_bases in read_reference_pairs:
        data = ReadContextData(reference_bases)
        if read.identity in partial:
            data = partial[read.identity].combine(data)
        partial[read.identity] = data
    return partial


def partial_contexts_from_variants(read_variant_pairs):
    """
    Args:
        read_variant_pairs (Iterable[Tuple[ReadRecord, Variant]]): the variant path join result, possibly
            holding the same pair more than once

    Returns:
        Dict[str, ReadContextData]: partial contexts holding only variants
    """
    variants_by_read = {}
    for read, variant in read_variant_pairs:
        variants_by_read.setdefault(read.identity, set()).add(variant)
    return {identity: ReadContextData(variants=variants) for identity, variants in variants_by_read.items()}


def check_complete(contexts, reads=None):
    """
    ensure every read has its reference bases. When the input reads are given, also ensure every
    read has a context

    Raises:
        MissingReferenceError: a read has no reference bases
    """
    for identity, data in contexts.items():
        if data.reference_bases is None:
            raise MissingReferenceError('read has no reference bases', identity)
    for read in reads or []:
        if read.identity not in contexts:
            raise MissingReferenceError('read has no reference bases', read)
    return contexts


def assemble_read_contexts(read_reference_pairs, read_variant_pairs, reads=None):
    """
    build the final context of every read from the joined reference bases and variants

    Args:
        read_reference_pairs (Iterable[Tuple[ReadRecord, ReferenceBases]]): exactly one pair per read
        read_variant_pairs (Iterable[Tuple[ReadRecord, Variant]]): overlapping pairs from every variant shard
        reads (Iterable[ReadRecord]): the input reads, used to check that none were dropped

    Returns:
        Dict[str, ReadContextData]: the context by read identity

    Raises:
        MissingReferenceError: a read has variants but no reference bases, or an input read has no context
    """
    contexts = merge_partial_contexts(
        partial_contexts_from_reference(read_reference_pairs),
        partial_contexts_from_variants(read_variant_pairs),
    )
    check_complete(contexts, reads)
    logger.info('assembled the context for {} reads'.format(len(contexts)))
    return contexts
