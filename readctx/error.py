

class ReadContextError(Exception):
    """
    base class for errors raised while building read contexts. These are input validation errors
    and are never retried
    """
    pass


class InvalidIntervalError(ReadContextError, ValueError):
    """
    raised when an interval is constructed with start > end, non-positive coordinates or no contig
    """
    pass


class ContigMismatchError(ReadContextError, ValueError):
    """
    raised when two intervals on different contigs are ordered, spanned or otherwise compared
    for anything other than a plain overlap test
    """
    pass


class ShardRangeError(ReadContextError, ValueError):
    """
    raised when a shard number cannot be derived (bad shard width, position out of range)
    """
    pass


class ReferenceFetchError(ReadContextError, LookupError):
    """
    raised when the reference source cannot supply the bases for a requested interval
    """
    pass


class MissingReferenceError(ReadContextError, LookupError):
    """
    raised when a read is left without any reference bases after joining
    """
    pass
