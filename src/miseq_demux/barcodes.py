# src/miseq_demux/barcodes.py
"""
Mismatch-tolerant barcode lookup.

Fuzziness lives entirely in what is inserted: every index1/index2 variant
within the mismatch bound is expanded up front, the concatenated pair is hashed
and mapped to the sample ordinal, so matching an observed pair is one exact
lookup.
"""
from __future__ import annotations
from array import array
from math import comb
from typing import Iterable, List, Optional, Set
import logging

from miseq_demux.config import INDEX_ALPHABET, MISMATCHES_LIMIT
from miseq_demux.errors import BarcodeCollisionError
from miseq_demux.samples import Sample

log = logging.getLogger(__name__)

ALPHABET = INDEX_ALPHABET

# ----------------------------
# Expansion
# ----------------------------

def hamming(a: str, b: str) -> int:
    """Count differing positions across equal-length strings."""
    if len(a) != len(b):
        raise ValueError(f"Hamming distance needs equal lengths: {a!r} vs {b!r}")
    return sum(1 for x, y in zip(a, b) if x != y)


def hamming_ball_size(length: int, max_mismatches: int, alphabet_size: int = len(ALPHABET)) -> int:
    """Number of strings within `max_mismatches` substitutions of a `length`-long word."""
    k = min(max_mismatches, length)
    return sum(comb(length, i) * (alphabet_size - 1) ** i for i in range(k + 1))


def _substitutions(word: str, alphabet: str) -> Iterable[str]:
    for pos in range(len(word)):
        head, tail = word[:pos], word[pos + 1:]
        for ch in alphabet:
            yield f"{head}{ch}{tail}"


def expand_barcode(barcode: str, max_mismatches: int, alphabet: str = ALPHABET) -> Set[str]:
    """
    All strings reachable from `barcode` by up to `max_mismatches` single-position
    substitutions over `alphabet`.

    Each round substitutes every position of every word found so far; since a
    substitution may reproduce the original symbol, the result after k rounds is
    the Hamming ball of radius <= k (the barcode itself included).
    """
    words = {barcode}
    frontier = {barcode}
    for _ in range(max_mismatches):
        found = set()
        for word in frontier:
            for new in _substitutions(word, alphabet):
                if new not in words:
                    found.add(new)
        if not found:
            break
        words |= found
        frontier = found
    return words


# ----------------------------
# Map backends
# ----------------------------

class SparseIndexMap:
    """Plain dict of key -> ordinal; cheap for the small key sets of bound <= 1."""

    kind = "sparse"

    def __init__(self, expected: int = 0):
        self._d: dict = {}

    def get(self, key: int) -> Optional[int]:
        return self._d.get(key)

    def insert(self, key: int, value: int) -> None:
        self._d[key] = value

    def __contains__(self, key: int) -> bool:
        return key in self._d

    def __len__(self) -> int:
        return len(self._d)


class DenseIndexMap:
    """
    Open-addressing table with linear probing over flat int64 arrays, pre-sized
    to a power of two at least twice the expected key count.
    """

    kind = "dense"
    _EMPTY = -1

    def __init__(self, expected: int = 0):
        capacity = 8
        while capacity < 2 * max(expected, 1):
            capacity <<= 1
        self._alloc(capacity)

    def _alloc(self, capacity: int) -> None:
        self._mask = capacity - 1
        self._keys = array("q", bytes(8 * capacity))
        self._values = array("q", [self._EMPTY]) * capacity
        self._size = 0

    def _slot(self, key: int) -> int:
        i = key & self._mask
        keys, values = self._keys, self._values
        while values[i] != self._EMPTY and keys[i] != key:
            i = (i + 1) & self._mask
        return i

    def get(self, key: int) -> Optional[int]:
        v = self._values[self._slot(key)]
        return None if v == self._EMPTY else v

    def insert(self, key: int, value: int) -> None:
        if value < 0:
            raise ValueError("ordinals must be >= 0")
        i = self._slot(key)
        if self._values[i] == self._EMPTY:
            if 2 * (self._size + 1) > len(self._values):
                self._grow()
                i = self._slot(key)
            self._size += 1
        self._keys[i] = key
        self._values[i] = value

    def _grow(self) -> None:
        old = [(k, v) for k, v in zip(self._keys, self._values) if v != self._EMPTY]
        self._alloc(2 * len(self._values))
        for k, v in old:
            i = self._slot(k)
            self._keys[i] = k
            self._values[i] = v
            self._size += 1
        log.debug("Dense index grown to %d slots", len(self._values))

    def __contains__(self, key: int) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        return self._size


def select_backend(max_mismatches: int, expected: int):
    """Sparse dict at bound <= 1, pre-sized dense table at bound >= 2."""
    if max_mismatches <= 1:
        return SparseIndexMap(expected)
    return DenseIndexMap(expected)


# ----------------------------
# Search index
# ----------------------------

def index_key(index1: str, index2: str) -> int:
    # str hash is 64-bit on 64-bit builds and stable within a process
    return hash(f"{index1}{index2}")


class SearchIndex:
    """Hash of concatenated (index1, index2) variants -> sample ordinal."""

    def __init__(self, samples: List[Sample], max_mismatches: int, backend):
        self.samples = samples
        self.max_mismatches = max_mismatches
        self._map = backend

    @staticmethod
    def expected_size(samples: List[Sample], max_mismatches: int) -> int:
        return sum(
            hamming_ball_size(len(s.index1), max_mismatches)
            * hamming_ball_size(len(s.index2), max_mismatches)
            for s in samples
        )

    @classmethod
    def build(cls, samples: List[Sample], max_mismatches: int) -> "SearchIndex":
        """
        Expand both indexes of every sample, insert every pair of the Cartesian
        product, and abort with BarcodeCollisionError as soon as a pair is
        already claimed by another sample.
        """
        if not 0 <= max_mismatches <= MISMATCHES_LIMIT:
            raise ValueError(f"mismatches_max must be in 0..{MISMATCHES_LIMIT} - not {max_mismatches}")

        expected = cls.expected_size(samples, max_mismatches)
        backend = select_backend(max_mismatches, expected)
        log.info("Building %s search index: %d samples, mismatches_max=%d, <= %d keys",
                 backend.kind, len(samples), max_mismatches, expected)

        for ordinal, sample in enumerate(samples):
            variants1 = expand_barcode(sample.index1, max_mismatches)
            variants2 = expand_barcode(sample.index2, max_mismatches)
            for v1 in variants1:
                for v2 in variants2:
                    key = index_key(v1, v2)
                    owner = backend.get(key)
                    if owner is not None and owner != ordinal:
                        raise BarcodeCollisionError(
                            f"Index combo of {v1} and {v2} already exists for sample id: "
                            f"{samples[owner].id} and {sample.id} (mismatches_max={max_mismatches})"
                        )
                    backend.insert(key, ordinal)

        log.info("Search index holds %d keys", len(backend))
        return cls(samples, max_mismatches, backend)

    def find(self, index1: str, index2: str) -> Optional[int]:
        return self._map.get(index_key(index1, index2))

    @property
    def backend(self) -> str:
        return self._map.kind

    def __len__(self) -> int:
        return len(self._map)
