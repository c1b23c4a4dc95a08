import re
from collections import namedtuple
from numbers import Integral

from .error import ContigMismatchError, InvalidIntervalError


def _check_coordinate(value, name):
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise InvalidIntervalError('{} must be an integer'.format(name), value)
    if value < 1:
        raise InvalidIntervalError('{} must be a positive (1-based) coordinate'.format(name), value)
    return int(value)


class GenomicInterval(namedtuple('GenomicInterval', ['contig', 'start', 'end'])):
    """
    A span on a single contig. Coordinates are 1-based and inclusive

    Intervals are only comparable when they share a contig. Ordering, spanning or containment checks
    between intervals on different contigs raise :class:`~readctx.error.ContigMismatchError`.
    Overlap is the exception: intervals on different contigs simply never overlap

    Example:
        >>> GenomicInterval('1', 100, 149)
        GenomicInterval(1:100-149)
        >>> len(GenomicInterval('1', 100, 149))
        50
    """
    __slots__ = ()

    def __new__(cls, contig, start, end=None):
        """
        Args:
            contig (str): the name of the reference sequence
            start (int): the start of the interval (inclusive)
            end (int): the end of the interval (inclusive), defaults to the start
        """
        if not isinstance(contig, str) or not contig:
            raise InvalidIntervalError('contig must be a non-empty string', contig)
        start = _check_coordinate(start, 'start')
        end = start if end is None else _check_coordinate(end, 'end')
        if start > end:
            raise InvalidIntervalError('interval start > end is not allowed', contig, start, end)
        return super(GenomicInterval, cls).__new__(cls, contig, start, end)

    @classmethod
    def from_start_length(cls, contig, start, length):
        """
        Example:
            >>> GenomicInterval.from_start_length('1', 140, 100)
            GenomicInterval(1:140-239)
        """
        if length < 1:
            raise InvalidIntervalError('interval length must be positive', length)
        return cls(contig, start, start + length - 1)

    @classmethod
    def parse(cls, region):
        """
        parse a region string of the form contig:start-end or contig:pos

        Example:
            >>> GenomicInterval.parse('2:1000000-1000009')
            GenomicInterval(2:1000000-1000009)
            >>> GenomicInterval.parse('1:1,000')
            GenomicInterval(1:1000-1000)
        """
        match = re.match(r'^(?P<contig>.+):(?P<start>[\d,]+)(-(?P<end>[\d,]+))?$', region.strip())
        if not match:
            raise InvalidIntervalError('region is not in the expected format contig:start-end', region)
        start = int(match.group('start').replace(',', ''))
        end = match.group('end')
        end = int(end.replace(',', '')) if end else None
        return cls(match.group('contig'), start, end)

    def __len__(self):
        return self.length()

    def length(self):
        return self.end - self.start + 1

    def __repr__(self):
        return '{}({})'.format(self.__class__.__name__, str(self))

    def __str__(self):
        return '{}:{}-{}'.format(self.contig, self.start, self.end)

    def _require_same_contig(self, other):
        if self.contig != other.contig:
            raise ContigMismatchError('intervals on different contigs cannot be compared', self, other)

    @classmethod
    def overlaps(cls, first, other):
        """
        checks if two intervals have any portion of their given ranges in common. Intervals on
        different contigs never overlap

        Example:
            >>> GenomicInterval.overlaps(GenomicInterval('1', 1, 4), GenomicInterval('1', 5, 7))
            False
            >>> GenomicInterval.overlaps(GenomicInterval('1', 1, 10), GenomicInterval('1', 10, 11))
            True
            >>> GenomicInterval.overlaps(GenomicInterval('1', 1, 10), GenomicInterval('2', 1, 10))
            False
        """
        return first.contig == other.contig and first.start <= other.end and first.end >= other.start

    def contains(self, other):
        """
        True if the other interval lies entirely within this one

        Raises:
            ContigMismatchError: the intervals are on different contigs
        """
        self._require_same_contig(other)
        return self.start <= other.start and other.end <= self.end

    @classmethod
    def span(cls, *intervals):
        """
        returns the minimal interval covering all of the input intervals

        Raises:
            ContigMismatchError: the intervals are not all on the same contig

        Example:
            >>> GenomicInterval.span(GenomicInterval('1', 100, 149), GenomicInterval('1', 140, 239))
            GenomicInterval(1:100-239)
        """
        if not intervals:
            raise AttributeError('cannot compute the span of an empty set of intervals')
        first = intervals[0]
        for other in intervals[1:]:
            first._require_same_contig(other)
        return cls(first.contig, min([i.start for i in intervals]), max([i.end for i in intervals]))

    def expand_within_contig(self, leading, trailing, contig_length):
        """
        extend the interval by a number of bases on either side without running off the ends of the contig

        Example:
            >>> GenomicInterval('1', 5, 10).expand_within_contig(10, 10, 15)
            GenomicInterval(1:1-15)
        """
        if leading < 0 or trailing < 0:
            raise InvalidIntervalError('padding cannot be negative', leading, trailing)
        if contig_length < self.end:
            raise InvalidIntervalError('interval extends past the end of the contig', self, contig_length)
        return GenomicInterval(self.contig, max(1, self.start - leading), min(contig_length, self.end + trailing))

    def _ordering_key(self, other):
        self._require_same_contig(other)
        return (self.start, self.end), (other.start, other.end)

    def __lt__(self, other):
        mine, theirs = self._ordering_key(other)
        return mine < theirs

    def __le__(self, other):
        mine, theirs = self._ordering_key(other)
        return mine <= theirs

    def __gt__(self, other):
        mine, theirs = self._ordering_key(other)
        return mine > theirs

    def __ge__(self, other):
        mine, theirs = self._ordering_key(other)
        return mine >= theirs
