import pytest

from readctx.error import ContigMismatchError, InvalidIntervalError, ReadContextError, ReferenceFetchError
from readctx.interval import GenomicInterval
from readctx.join import (
    ReferenceWindow,
    cogroup,
    join_reads_with_reference,
    join_reads_with_variants,
    join_reference_shard,
    overlap_join,
)
from readctx.records import ReadRecord, Variant
from readctx.reference import MemoryReferenceSource
from readctx.shard import ReferenceShard, VariantShard, key_by_reference_shard, key_by_variant_shard

from ..data import (
    READ_REFERENCE_BASES,
    READ_VARIANT_PAIRS,
    READS,
    SPANNED_READ_INTERVAL,
    VARIANT_SHARD_READS,
    VARIANT_SHARD_VARIANTS,
    VARIANTS,
    FakeReferenceSource,
)


def pair_ids(pairs):
    return sorted([(read.identity, other.identity) for read, other in pairs])


class TestOverlapJoin:
    def test_only_overlapping_pairs(self):
        pairs = overlap_join(READS[0:2], VARIANTS[0:2])
        assert pair_ids(pairs) == [(READS[1].identity, VARIANTS[0].identity), (READS[1].identity, VARIANTS[1].identity)]

    def test_no_overlap(self):
        assert overlap_join(READS[0:1], VARIANTS[0:2]) == []

    def test_empty(self):
        assert overlap_join([], VARIANTS) == []
        assert overlap_join(READS, []) == []

    def test_touching_intervals_overlap(self):
        read = ReadRecord(GenomicInterval('1', 10, 20), identity='r')
        left = Variant(GenomicInterval('1', 5, 10), identity='left')
        right = Variant(GenomicInterval('1', 20, 25), identity='right')
        outside = Variant(GenomicInterval('1', 21, 25), identity='outside')
        assert pair_ids(overlap_join([read], [outside, right, left])) == [('r', 'left'), ('r', 'right')]

    def test_long_variant_starting_before_read(self):
        read = ReadRecord(GenomicInterval('1', 500, 510), identity='r')
        variant = Variant(GenomicInterval('1', 1, 1000), identity='v')
        assert pair_ids(overlap_join([read], [variant])) == [('r', 'v')]

    def test_different_contigs_never_pair(self):
        read = ReadRecord(GenomicInterval('1', 1000000, 1000009), identity='r')
        assert overlap_join([read], [VARIANTS[4]]) == []

    def test_reads_with_same_coordinates_both_pair(self):
        first = ReadRecord(GenomicInterval('1', 170, 175), identity='a')
        second = ReadRecord(GenomicInterval('1', 170, 175), identity='b')
        pairs = overlap_join([first, second], VARIANTS[0:1])
        assert pair_ids(pairs) == [('a', VARIANTS[0].identity), ('b', VARIANTS[0].identity)]

    def test_matches_naive_cross_join(self):
        reads = [ReadRecord(GenomicInterval('1', s, s + 9), identity='r{}'.format(s)) for s in range(1, 200, 7)]
        variants = [Variant(GenomicInterval('1', s, s + (s % 13)), identity='v{}'.format(s)) for s in range(1, 220, 5)]
        naive = [(r, v) for r in reads for v in variants if GenomicInterval.overlaps(r.interval, v.interval)]
        assert pair_ids(overlap_join(reads, variants)) == pair_ids(naive)


class TestCogroup:
    def test_cogroup(self):
        assert cogroup([('a', 1)], [('a', 2), ('b', 3)]) == {'a': ([1], [2]), 'b': ([], [3])}

    def test_variant_shards(self):
        grouped = cogroup(VARIANT_SHARD_READS, VARIANT_SHARD_VARIANTS)
        assert grouped[VariantShard(29, '1')] == ([READS[3]], [VARIANTS[3]])
        assert grouped[VariantShard(30, '1')] == ([READS[3]], [VARIANTS[3]])
        assert grouped[VariantShard(0, '1')] == (READS[0:2], VARIANTS[0:2])


class TestJoinReadsWithVariants:
    def test_pairs(self):
        pairs = join_reads_with_variants(VARIANT_SHARD_READS, VARIANT_SHARD_VARIANTS)
        assert pair_ids(pairs) == pair_ids(READ_VARIANT_PAIRS)

    def test_spanning_pair_found_in_each_shard(self):
        pairs = join_reads_with_variants(key_by_variant_shard(READS[3:4]), key_by_variant_shard(VARIANTS[3:4]))
        assert len(pairs) == 2

    def test_spanning_variant_only(self):
        read = ReadRecord(GenomicInterval('1', 3000001, 3000005), identity='r')
        pairs = join_reads_with_variants(key_by_variant_shard([read]), key_by_variant_shard(VARIANTS[3:4]))
        assert pair_ids(pairs) == [('r', VARIANTS[3].identity)]

    def test_shards_without_variants(self):
        assert join_reads_with_variants(VARIANT_SHARD_READS, []) == []


class TestReferenceWindow:
    def test_default_is_read_interval(self):
        assert ReferenceWindow()(READS[0]) == READS[0].interval

    def test_padding(self):
        window = ReferenceWindow(10, reference_source=FakeReferenceSource())
        assert window(READS[0]) == GenomicInterval('1', 90, 159)

    def test_asymmetric_padding_clamped(self):
        source = MemoryReferenceSource({'1': 'A' * 20})
        read = ReadRecord(GenomicInterval('1', 3, 18))
        assert ReferenceWindow(5, 1, reference_source=source)(read) == GenomicInterval('1', 1, 19)

    def test_requires_source_when_padding(self):
        with pytest.raises(ValueError):
            ReferenceWindow(10)

    def test_negative_padding(self):
        with pytest.raises(InvalidIntervalError):
            ReferenceWindow(-1, reference_source=FakeReferenceSource())
        with pytest.raises(ReadContextError):
            ReferenceWindow(0, -5, reference_source=FakeReferenceSource())

    def test_read_past_contig_end(self):
        source = MemoryReferenceSource({'1': 'A' * 20})
        read = ReadRecord(GenomicInterval('1', 15, 25))
        with pytest.raises(ReferenceFetchError):
            ReferenceWindow(1, reference_source=source)(read)


class TestJoinReferenceShard:
    def test_single_fetch_of_span(self):
        source = FakeReferenceSource()
        pairs = join_reference_shard(ReferenceShard(0, '1'), [READS[1], READS[0]], source)
        assert source.fetched == [SPANNED_READ_INTERVAL]
        assert dict(pairs) == dict(READ_REFERENCE_BASES[0:2])

    def test_bases_cover_each_read(self):
        source = FakeReferenceSource()
        for read, bases in join_reference_shard(ReferenceShard(0, '1'), READS[0:2], source):
            assert bases.interval == read.interval
            assert len(bases.bases) == len(read.interval)

    def test_spanning_read(self):
        source = FakeReferenceSource()
        pairs = join_reference_shard(ReferenceShard(29, '1'), [READS[3]], source)
        assert pairs == [READ_REFERENCE_BASES[3]]

    def test_padded_window(self):
        source = FakeReferenceSource()
        window = ReferenceWindow(5, reference_source=source)
        pairs = join_reference_shard(ReferenceShard(0, '1'), READS[0:2], source, window=window)
        assert source.fetched == [GenomicInterval('1', 95, 244)]
        assert [bases.interval for _, bases in pairs] == [GenomicInterval('1', 95, 154), GenomicInterval('1', 135, 244)]

    def test_contig_mismatch(self):
        with pytest.raises(ContigMismatchError):
            join_reference_shard(ReferenceShard(10, '1'), [READS[4]], FakeReferenceSource())

    def test_span_past_contig_end(self):
        source = FakeReferenceSource({'1': 200})
        with pytest.raises(ReferenceFetchError):
            join_reference_shard(ReferenceShard(0, '1'), READS[0:2], source)

    def test_unknown_contig(self):
        source = FakeReferenceSource({'1': 10000000})
        with pytest.raises(ReferenceFetchError):
            join_reference_shard(ReferenceShard(10, '2'), [READS[4]], source)


class TestJoinReadsWithReference:
    def test_every_read_paired(self):
        source = FakeReferenceSource()
        pairs = join_reads_with_reference(key_by_reference_shard(READS), source)
        assert dict(pairs) == dict(READ_REFERENCE_BASES)
        assert len(source.fetched) == 4
        assert SPANNED_READ_INTERVAL in source.fetched
