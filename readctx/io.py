"""
module for loading reads and variants from alignment and variant files and writing the read contexts
"""
import pandas as pd
import pysam

from .constants import COLUMNS, sort_columns
from .interval import GenomicInterval
from .records import ReadRecord, Variant
from .util import bash_expands, logger


def read_from_alignment(read):
    """
    Args:
        read (pysam.AlignedSegment): an aligned read

    Returns:
        ReadRecord: the read with a new unique identity, or None if the read is unmapped or has no aligned bases
    """
    if read.is_unmapped or read.reference_end is None or read.reference_end <= read.reference_start:
        return None
    # pysam reference_start is 0-based, reference_end is exclusive
    interval = GenomicInterval(read.reference_name, read.reference_start + 1, read.reference_end)
    return ReadRecord(interval, name=read.query_name)


def load_reads(*expressions, contigs=None):
    """
    Args:
        expressions (str): paths or glob expressions for the BAM/SAM files
        contigs (List[str]): restrict to reads on these contigs

    Returns:
        List[ReadRecord]: the mapped reads
    """
    reads = []
    for filename in bash_expands(*expressions):
        logger.info('loading: {}'.format(filename))
        skipped = 0
        with pysam.AlignmentFile(filename, 'r' if filename.endswith('.sam') else 'rb') as fh:
            for read in fh.fetch(until_eof=True):
                if contigs and read.reference_name not in contigs:
                    continue
                record = read_from_alignment(read)
                if record is None:
                    skipped += 1
                    continue
                reads.append(record)
        logger.debug('skipped {} unmapped reads from {}'.format(skipped, filename))
    logger.info('loaded {} reads'.format(len(reads)))
    return reads


def variant_from_record(record):
    """
    Args:
        record (pysam.VariantRecord): a vcf record

    Returns:
        Variant: the variant with a new unique identity. The interval covers the reference allele
    """
    ref = record.ref or ''
    alts = [alt for alt in (record.alts or []) if alt is not None]
    interval = GenomicInterval(record.chrom, record.pos, record.pos + max(len(ref), 1) - 1)
    is_snp = len(ref) == 1 and bool(alts) and all([len(alt) == 1 and not alt.startswith('<') for alt in alts])
    is_indel = any([len(alt) != len(ref) and not alt.startswith('<') for alt in alts])
    name = record.id if record.id and record.id != '.' else None
    return Variant(interval, is_snp=is_snp, is_indel=is_indel, name=name)


def load_variants(*expressions, contigs=None):
    """
    Args:
        expressions (str): paths or glob expressions for the VCF/BCF files
        contigs (List[str]): restrict to variants on these contigs

    Returns:
        List[Variant]: the variants
    """
    variants = []
    for filename in bash_expands(*expressions):
        logger.info('loading: {}'.format(filename))
        with pysam.VariantFile(filename) as fh:
            for record in fh.fetch() if fh.index is not None else fh:
                if contigs and record.chrom not in contigs:
                    continue
                variants.append(variant_from_record(record))
    logger.info('loaded {} variants'.format(len(variants)))
    return variants


def flatten_context(read, data):
    return {
        COLUMNS.read_identity: str(read.identity),
        COLUMNS.read_name: read.name,
        COLUMNS.contig: read.contig,
        COLUMNS.start: read.start,
        COLUMNS.end: read.end,
        COLUMNS.reference_start: data.reference_bases.interval.start,
        COLUMNS.reference_end: data.reference_bases.interval.end,
        COLUMNS.reference_bases: str(data.reference_bases),
        COLUMNS.variant_identities: ';'.join(data.variant_identities()),
        COLUMNS.variant_names: ';'.join(sorted([v.name for v in data.variants if v.name])),
    }


def write_read_contexts(reads, contexts, filename):
    """
    write one tab-delimited row per read

    Args:
        reads (Iterable[ReadRecord]): the reads, rows are written in this order
        contexts (Dict[str, ReadContextData]): the context by read identity
        filename (str): path to the output file
    """
    rows = [flatten_context(read, contexts[read.identity]) for read in reads]
    header = sort_columns(COLUMNS.values())
    logger.info('writing: {}'.format(filename))
    df = pd.DataFrame.from_records(rows, columns=header)
    df = df.fillna('None')
    df.to_csv(filename, columns=header, index=False, sep='\t')
    return df
