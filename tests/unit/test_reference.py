import pytest

from readctx.error import ReferenceFetchError
from readctx.interval import GenomicInterval
from readctx.records import ReferenceBases
from readctx.reference import MemoryReferenceSource, ReferenceSource

from ..data import FakeReferenceSource


class TestMemoryReferenceSource:
    def test_fetch(self):
        source = MemoryReferenceSource({'1': 'acgtACGT', '2': b'GGGG'})
        assert source.fetch(GenomicInterval('1', 2, 4)) == ReferenceBases(GenomicInterval('1', 2, 4), b'CGT')
        assert source.fetch(GenomicInterval('1', 1, 8)).bases == b'ACGTACGT'
        assert source.fetch(GenomicInterval('2', 4)).bases == b'G'

    def test_contig_length(self):
        source = MemoryReferenceSource({'1': 'ACGTACGT'})
        assert source.contig_length('1') == 8

    def test_past_contig_end(self):
        source = MemoryReferenceSource({'1': 'ACGTACGT'})
        with pytest.raises(ReferenceFetchError):
            source.fetch(GenomicInterval('1', 5, 9))

    def test_unknown_contig(self):
        source = MemoryReferenceSource({'1': 'ACGTACGT'})
        with pytest.raises(ReferenceFetchError):
            source.fetch(GenomicInterval('3', 1, 2))


class TestReferenceSource:
    def test_abstract(self):
        with pytest.raises(NotImplementedError):
            ReferenceSource().fetch(GenomicInterval('1', 1, 2))

    def test_fake_reference_bases_cover_interval(self):
        source = FakeReferenceSource()
        itvl = GenomicInterval('1', 2999999, 3000008)
        bases = source.fetch(itvl)
        assert bases.interval == itvl
        assert len(bases) == len(itvl)
        assert bases == FakeReferenceSource.bases(itvl)
