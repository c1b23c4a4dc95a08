"""
module which holds the reference sources used to fetch reference bases for a span
"""
from Bio import SeqIO

from .error import ReferenceFetchError
from .records import ReferenceBases
from .util import logger


class ReferenceSource:
    """
    Anything that can supply the bases for an interval. Subclasses implement :meth:`sequence` and
    :meth:`contig_length`
    """

    def contig_length(self, contig):
        """
        Raises:
            ReferenceFetchError: the contig is not known to this source
        """
        raise NotImplementedError('abstract method')

    def sequence(self, contig, start, end):
        """
        Returns:
            bytes: the bases from start to end, 1-based inclusive. Bounds are checked by :meth:`fetch`
        """
        raise NotImplementedError('abstract method')

    def fetch(self, interval):
        """
        Args:
            interval (GenomicInterval): the interval to get the reference bases for

        Returns:
            ReferenceBases: the bases covering exactly the input interval

        Raises:
            ReferenceFetchError: the contig is unknown or the interval extends past the end of the contig
        """
        length = self.contig_length(interval.contig)
        if interval.end > length:
            raise ReferenceFetchError(
                'requested interval extends past the end of the contig', interval, length
            )
        return ReferenceBases(interval, self.sequence(interval.contig, interval.start, interval.end))


class MemoryReferenceSource(ReferenceSource):
    """
    reference source backed by a mapping of contig name to sequence

    Example:
        >>> source = MemoryReferenceSource({'1': 'ACGTACGT'})
        >>> source.fetch(GenomicInterval('1', 2, 4))
        ReferenceBases(1:2-4, CGT)
    """

    def __init__(self, sequences):
        self.sequences = {}
        for contig, seq in sequences.items():
            if isinstance(seq, str):
                seq = seq.encode('ascii')
            self.sequences[contig] = bytes(seq).upper()

    def contig_length(self, contig):
        try:
            return len(self.sequences[contig])
        except KeyError:
            raise ReferenceFetchError('contig is not in the reference', contig)

    def sequence(self, contig, start, end):
        return self.sequences[contig][start - 1:end]


def load_reference_genome(*filepaths):
    """
    Args:
        filepaths (list of str): the paths to the files containing the input fasta genomes

    Returns:
        :class:`dict` of :class:`Bio.SeqRecord` by :class:`str`: a dictionary representing the sequences in the fasta file

    Raises:
        KeyError: the same contig name is defined more than once
    """
    reference_genome = {}
    for filename in filepaths:
        logger.info('loading: {}'.format(filename))
        with open(filename, 'r') as fh:
            for record in SeqIO.parse(fh, 'fasta'):
                if record.id in reference_genome:
                    raise KeyError('Duplicate contig name', record.id, filename)
                reference_genome[record.id] = record.upper()
    logger.info('loaded {} contigs'.format(len(reference_genome)))
    return reference_genome


class FastaReferenceSource(ReferenceSource):
    """
    reference source backed by one or more fasta files, loaded fully into memory
    """

    def __init__(self, *filepaths):
        self.filepaths = filepaths
        self.content = load_reference_genome(*filepaths)

    def contig_length(self, contig):
        try:
            return len(self.content[contig].seq)
        except KeyError:
            raise ReferenceFetchError('contig is not in the reference', contig, self.filepaths)

    def sequence(self, contig, start, end):
        return str(self.content[contig].seq[start - 1:end]).encode('ascii')
