import itertools
import pickle
import uuid

import pytest

from readctx.context import (
    ReadContextData,
    assemble_read_contexts,
    check_complete,
    merge_partial_contexts,
    partial_contexts_from_reference,
    partial_contexts_from_variants,
)
from readctx.error import MissingReferenceError, ReadContextError
from readctx.interval import GenomicInterval
from readctx.records import ReferenceBases, Variant

from ..data import READ_CONTEXTS, READ_REFERENCE_BASES, READ_VARIANT_PAIRS, READS, VARIANTS, FakeReferenceSource


BASES = FakeReferenceSource.bases(GenomicInterval('1', 100, 109))


class TestReadContextData:
    def test_variants_unique_by_identity(self):
        duplicate = Variant(VARIANTS[0].interval, identity=VARIANTS[0].identity)
        data = ReadContextData(BASES, [VARIANTS[0], duplicate, VARIANTS[1]])
        assert len(data.variants) == 2
        assert data.variant_identities() == ['variant-1001', 'variant-1002']

    def test_combine_reference_and_variants(self):
        combined = ReadContextData(BASES) | ReadContextData(variants=[VARIANTS[0]])
        assert combined == ReadContextData(BASES, [VARIANTS[0]])

    def test_combine_is_commutative(self):
        first = ReadContextData(BASES, [VARIANTS[0]])
        second = ReadContextData(variants=[VARIANTS[0], VARIANTS[1]])
        assert first.combine(second) == second.combine(first)

    def test_combine_is_associative(self):
        parts = [ReadContextData(BASES), ReadContextData(variants=[VARIANTS[0]]), ReadContextData(variants=[VARIANTS[1]])]
        assert (parts[0] | parts[1]) | parts[2] == parts[0] | (parts[1] | parts[2])

    def test_combine_same_reference_bases(self):
        assert ReadContextData(BASES) | ReadContextData(BASES) == ReadContextData(BASES)

    def test_conflicting_reference_bases(self):
        other = ReferenceBases(GenomicInterval('1', 100, 109), b'NNNNNNNNNN')
        with pytest.raises(ReadContextError):
            ReadContextData(BASES) | ReadContextData(other)

    def test_immutable(self):
        data = ReadContextData(BASES)
        with pytest.raises(AttributeError):
            data.variants = frozenset()

    def test_pickle(self):
        data = ReadContextData(BASES, [VARIANTS[0]])
        assert pickle.loads(pickle.dumps(data)) == data

    def test_repr(self):
        data = ReadContextData(BASES, [VARIANTS[1], VARIANTS[0]])
        assert repr(data).endswith('variants=[variant-1001, variant-1002])')

    def test_non_string_identities(self):
        variants = [
            Variant(GenomicInterval('1', 101), identity=uuid.UUID(int=1001)),
            Variant(GenomicInterval('1', 102), identity=7),
        ]
        data = ReadContextData(BASES, variants)
        assert data.variant_identities() == ['00000000-0000-0000-0000-0000000003e9', '7']
        assert repr(data).endswith('variants=[00000000-0000-0000-0000-0000000003e9, 7])')


class TestPartialContexts:
    def test_from_reference(self):
        partial = partial_contexts_from_reference(READ_REFERENCE_BASES)
        assert set(partial) == {read.identity for read in READS}
        for read, bases in READ_REFERENCE_BASES:
            assert partial[read.identity] == ReadContextData(bases)

    def test_from_variants_removes_duplicate_pairs(self):
        partial = partial_contexts_from_variants(READ_VARIANT_PAIRS)
        assert READS[0].identity not in partial
        assert partial[READS[3].identity] == ReadContextData(variants=[VARIANTS[3]])
        assert partial[READS[1].identity].variant_identities() == ['variant-1001', 'variant-1002']

    def test_from_variants_empty(self):
        assert partial_contexts_from_variants([]) == {}


class TestMergePartialContexts:
    def test_any_order(self):
        partials = [
            partial_contexts_from_reference(READ_REFERENCE_BASES[0:3]),
            partial_contexts_from_reference(READ_REFERENCE_BASES[3:]),
            partial_contexts_from_variants(READ_VARIANT_PAIRS[0:3]),
            partial_contexts_from_variants(READ_VARIANT_PAIRS[3:]),
        ]
        for ordering in itertools.permutations(partials):
            assert merge_partial_contexts(*ordering) == READ_CONTEXTS

    def test_empty(self):
        assert merge_partial_contexts() == {}
        assert merge_partial_contexts({}, {}) == {}


class TestCheckComplete:
    def test_variants_without_reference(self):
        contexts = {READS[0].identity: ReadContextData(variants=[VARIANTS[0]])}
        with pytest.raises(MissingReferenceError):
            check_complete(contexts)

    def test_dropped_read(self):
        contexts = {READS[0].identity: ReadContextData(BASES)}
        with pytest.raises(MissingReferenceError):
            check_complete(contexts, READS[0:2])

    def test_complete(self):
        assert check_complete(READ_CONTEXTS, READS) is READ_CONTEXTS


class TestAssembleReadContexts:
    def test_expected_contexts(self):
        assert assemble_read_contexts(READ_REFERENCE_BASES, READ_VARIANT_PAIRS, READS) == READ_CONTEXTS

    def test_one_context_per_read(self):
        contexts = assemble_read_contexts(READ_REFERENCE_BASES, READ_VARIANT_PAIRS)
        assert len(contexts) == len(READS)

    def test_read_without_variants_has_empty_set(self):
        contexts = assemble_read_contexts(READ_REFERENCE_BASES, READ_VARIANT_PAIRS)
        assert contexts[READS[0].identity].variants == frozenset()

    def test_spanning_pair_deduplicated(self):
        pairs = [(READS[3], VARIANTS[3])] * 3
        contexts = assemble_read_contexts(READ_REFERENCE_BASES[3:4], pairs)
        assert contexts[READS[3].identity].variant_identities() == [VARIANTS[3].identity]

    def test_missing_reference(self):
        with pytest.raises(MissingReferenceError):
            assemble_read_contexts(READ_REFERENCE_BASES[0:1], READ_VARIANT_PAIRS)
