from itertools import product
import pytest

from miseq_demux.barcodes import (
    DenseIndexMap, SearchIndex, SparseIndexMap, expand_barcode, hamming, hamming_ball_size, select_backend,
)
from miseq_demux.errors import BarcodeCollisionError
from miseq_demux.samples import Sample


def test_expand_small_example():
    assert expand_barcode("AA", 1) == {"AA", "TA", "CA", "GA", "AT", "AC", "AG"}


def test_expand_zero_is_identity():
    assert expand_barcode("ATCG", 0) == {"ATCG"}


@pytest.mark.parametrize("barcode", ["ATCG", "GGTA", "ACGTAC", "TTTTGC"])
@pytest.mark.parametrize("k", [0, 1, 2, 3])
def test_expand_is_hamming_ball(barcode, k):
    words = expand_barcode(barcode, k)
    assert barcode in words
    assert len(words) <= hamming_ball_size(len(barcode), k)
    assert all(hamming(barcode, w) <= k for w in words)


@pytest.mark.parametrize("k", [0, 1, 2, 3])
def test_expand_fills_ball_for_acgt_barcodes(k):
    barcode = "ATCGA"
    words = expand_barcode(barcode, k)
    assert len(words) == hamming_ball_size(len(barcode), k)
    every = {"".join(p) for p in product("ATCG", repeat=len(barcode))}
    assert words == {w for w in every if hamming(barcode, w) <= k}


def test_hamming_ball_size():
    assert hamming_ball_size(8, 0) == 1
    assert hamming_ball_size(8, 1) == 25
    assert hamming_ball_size(8, 2) == 1 + 24 + 252
    assert hamming_ball_size(2, 3) == 16  # capped at the full space


def test_hamming_needs_equal_lengths():
    with pytest.raises(ValueError):
        hamming("AT", "ATC")


def test_build_and_find_exact():
    samples = [Sample("S1", "ATCG", "GGTA"), Sample("S2", "TTAA", "CCGG"), Sample("S3", "GCGC", "ATAT")]
    index = SearchIndex.build(samples, 0)
    for ordinal, s in enumerate(samples):
        assert index.find(s.index1, s.index2) == ordinal
    assert index.find("ATCC", "GGTA") is None
    assert len(index) == 3


def test_find_within_one_mismatch():
    index = SearchIndex.build([Sample("S1", "ATCG", "GGTA")], 1)
    assert index.find("ATCC", "GGTA") == 0
    assert index.find("ATCC", "GGTT") == 0
    assert index.find("TTCC", "GGTA") is None


def test_collision_across_samples_is_fatal():
    samples = [Sample("S1", "ATCG", "GGTA"), Sample("S2", "ATCC", "GGTA")]
    SearchIndex.build(samples, 0)
    with pytest.raises(BarcodeCollisionError) as exc:
        SearchIndex.build(samples, 1)
    assert "S1" in str(exc.value) and "S2" in str(exc.value)


def test_mismatch_bound_is_checked():
    with pytest.raises(ValueError):
        SearchIndex.build([Sample("S1", "ATCG", "GGTA")], 4)
    with pytest.raises(ValueError):
        SearchIndex.build([Sample("S1", "ATCG", "GGTA")], -1)


def test_backend_selection():
    assert isinstance(select_backend(0, 10), SparseIndexMap)
    assert isinstance(select_backend(1, 10), SparseIndexMap)
    assert isinstance(select_backend(2, 10), DenseIndexMap)
    assert isinstance(select_backend(3, 10), DenseIndexMap)


def test_dense_index_at_two_mismatches():
    samples = [Sample("S1", "AAAAAAAA", "GGGGGGGG"), Sample("S2", "CCCCCCCC", "TTTTTTTT")]
    index = SearchIndex.build(samples, 2)
    assert index.backend == "dense"
    assert len(index) == 2 * hamming_ball_size(8, 2) ** 2
    assert index.find("AAAAAATT", "GGGGGGGG") == 0
    assert index.find("CCCCCCCC", "TTATTTAT") == 1
    assert index.find("AAAAATTT", "GGGGGGGG") is None


def test_dense_map_grows_and_keeps_entries():
    m = DenseIndexMap(expected=1)
    keys = [-(2 ** 63), -1, 0, 1, 7, 8, 2 ** 62, 123456789] + list(range(100, 200))
    for i, k in enumerate(keys):
        m.insert(k, i)
    assert len(m) == len(keys)
    for i, k in enumerate(keys):
        assert m.get(k) == i
        assert k in m
    assert m.get(99) is None
    m.insert(7, 42)
    assert m.get(7) == 42 and len(m) == len(keys)
