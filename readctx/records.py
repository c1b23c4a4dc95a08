"""
value records flowing through the join: reads, variants and reference bases

Reads and variants carry a nominal identity. Two records with identical coordinates but different
identities are distinct and are never collapsed by grouping or joining
"""
from shortuuid import uuid

from .constants import VARIANT_TYPE
from .error import ContigMismatchError, InvalidIntervalError, ReferenceFetchError
from .interval import GenomicInterval


def _require_interval(interval):
    if not isinstance(interval, GenomicInterval):
        raise InvalidIntervalError('expected a GenomicInterval', interval)
    return interval


class ReadRecord:
    """
    an aligned read reduced to the information needed for the join

    Example:
        >>> ReadRecord(GenomicInterval('1', 100, 149), identity='r1', name='read1')
        ReadRecord(r1, 1:100-149)
    """
    __slots__ = ('identity', 'interval', 'name')

    def __init__(self, interval, identity=None, name=None):
        """
        Args:
            interval (GenomicInterval): the aligned span of the read
            identity (str): unique identity of the read, generated when not given
            name (str): the query name of the read. Not expected to be unique
        """
        object.__setattr__(self, 'interval', _require_interval(interval))
        object.__setattr__(self, 'identity', str(uuid()) if identity is None else identity)
        object.__setattr__(self, 'name', name)

    def __setattr__(self, attr, value):
        raise AttributeError('ReadRecord is immutable', attr)

    def __getstate__(self):
        return (self.interval, self.identity, self.name)

    def __setstate__(self, state):
        for attr, value in zip(['interval', 'identity', 'name'], state):
            object.__setattr__(self, attr, value)

    @property
    def contig(self):
        return self.interval.contig

    @property
    def start(self):
        return self.interval.start

    @property
    def end(self):
        return self.interval.end

    def __eq__(self, other):
        if not isinstance(other, ReadRecord):
            return NotImplemented
        return self.identity == other.identity

    def __hash__(self):
        return hash(('read', self.identity))

    def __repr__(self):
        return 'ReadRecord({}, {})'.format(self.identity, self.interval)


class Variant:
    """
    a called variant reduced to its interval, its type flags and its identity
    """
    __slots__ = ('identity', 'interval', 'is_snp', 'is_indel', 'name')

    def __init__(self, interval, is_snp=False, is_indel=False, identity=None, name=None):
        object.__setattr__(self, 'interval', _require_interval(interval))
        object.__setattr__(self, 'is_snp', bool(is_snp))
        object.__setattr__(self, 'is_indel', bool(is_indel))
        object.__setattr__(self, 'identity', str(uuid()) if identity is None else identity)
        object.__setattr__(self, 'name', name)

    def __setattr__(self, attr, value):
        raise AttributeError('Variant is immutable', attr)

    def __getstate__(self):
        return (self.interval, self.is_snp, self.is_indel, self.identity, self.name)

    def __setstate__(self, state):
        for attr, value in zip(['interval', 'is_snp', 'is_indel', 'identity', 'name'], state):
            object.__setattr__(self, attr, value)

    @property
    def variant_type(self):
        if self.is_snp:
            return VARIANT_TYPE.SNP
        elif self.is_indel:
            return VARIANT_TYPE.INDEL
        return VARIANT_TYPE.OTHER

    def __eq__(self, other):
        if not isinstance(other, Variant):
            return NotImplemented
        return self.identity == other.identity

    def __hash__(self):
        return hash(('variant', self.identity))

    def __repr__(self):
        return 'Variant({}, {}, {})'.format(self.identity, self.interval, self.variant_type)


class ReferenceBases:
    """
    the reference sequence for an interval. The sequence holds exactly one base per position

    Example:
        >>> ReferenceBases(GenomicInterval('1', 1, 4), b'ACGT').subset(GenomicInterval('1', 2, 3)).bases
        b'CG'
    """
    __slots__ = ('interval', 'bases')

    def __init__(self, interval, bases):
        """
        Args:
            interval (GenomicInterval): the interval the bases were fetched for
            bases (bytes): the sequence, str input is encoded as ascii
        """
        interval = _require_interval(interval)
        if isinstance(bases, str):
            bases = bases.encode('ascii')
        bases = bytes(bases)
        if len(bases) != len(interval):
            raise ReferenceFetchError(
                'number of bases does not match the interval length', interval, len(bases), len(interval)
            )
        object.__setattr__(self, 'interval', interval)
        object.__setattr__(self, 'bases', bases)

    def __setattr__(self, attr, value):
        raise AttributeError('ReferenceBases is immutable', attr)

    def __getstate__(self):
        return (self.interval, self.bases)

    def __setstate__(self, state):
        object.__setattr__(self, 'interval', state[0])
        object.__setattr__(self, 'bases', state[1])

    def subset(self, interval):
        """
        Returns:
            ReferenceBases: the bases for a sub-interval

        Raises:
            ContigMismatchError: the interval is on a different contig
            ReferenceFetchError: the interval is not entirely covered by these bases
        """
        if interval.contig != self.interval.contig:
            raise ContigMismatchError('cannot take bases from another contig', self.interval, interval)
        if not self.interval.contains(interval):
            raise ReferenceFetchError('requested interval is not covered by the reference bases', self.interval, interval)
        offset = interval.start - self.interval.start
        return ReferenceBases(interval, self.bases[offset:offset + len(interval)])

    def __len__(self):
        return len(self.bases)

    def __str__(self):
        return self.bases.decode('ascii')

    def __eq__(self, other):
        if not isinstance(other, ReferenceBases):
            return NotImplemented
        return self.interval == other.interval and self.bases == other.bases

    def __hash__(self):
        return hash((self.interval, self.bases))

    def __repr__(self):
        seq = str(self) if len(self) <= 20 else str(self)[:17] + '...'
        return 'ReferenceBases({}, {})'.format(self.interval, seq)
