"""Unit tests for the bloom filter over an in-process bit array."""

import threading

import pytest

from dedup_index.components.bitarray import MemoryBitArray
from dedup_index.components.bloom import BloomFilter
from dedup_index.core.config import FilterParams
from dedup_index.core.errors import OffsetOutOfRangeError


def make_filter(width=20_000, hash_count=14):
    params = FilterParams(width=width, hash_count=hash_count)
    return BloomFilter(MemoryBitArray(width), params)


def test_bloom_filter_basic_membership():
    """Test basic add and membership testing."""
    bf = make_filter()

    keys = [b'key1', b'key2', b'key3', b'key4', b'key5']
    for key in keys:
        bf.add(key)

    for key in keys:
        assert bf.exists(key)
        assert key in bf


def test_bloom_filter_no_false_negatives():
    """Test that bloom filter never has false negatives."""
    bf = make_filter()

    keys_to_add = [f'key{i}'.encode() for i in range(500)]
    for key in keys_to_add:
        bf.add(key)

    for key in keys_to_add:
        assert bf.exists(key), f"False negative for {key}"


def test_bloom_filter_false_positive_rate():
    """Sized at 20 bits per element, false positives stay rare."""
    expected_elements = 1000
    params = FilterParams.for_capacity(expected_elements)
    bf = BloomFilter(MemoryBitArray(params.width), params)

    for i in range(expected_elements):
        bf.add(f'key{i}'.encode())

    test_keys = 2000
    false_positives = sum(
        1 for i in range(expected_elements, expected_elements + test_keys)
        if bf.exists(f'key{i}'.encode())
    )

    # Expected rate is ~6.7e-5, i.e. well under one hit in 2000 probes
    assert false_positives <= 5, f"Too many false positives: {false_positives}"


def test_bloom_filter_empty():
    """A fresh filter reports nothing as present."""
    bf = make_filter()

    for key in [b'key1', b'key2', b'test', b'']:
        assert not bf.exists(key)


def test_bloom_filter_duplicate_adds():
    """Adding the same payload twice changes nothing observable."""
    bf = make_filter()

    bf.add(b'duplicate_key')
    bits_after_one = bf.bit_array.count()
    bf.add(b'duplicate_key')

    assert bf.bit_array.count() == bits_after_one
    assert bf.exists(b'duplicate_key')


def test_bloom_filter_binary_keys():
    bf = make_filter()
    binary_keys = [b'\x00\x01\x02\x03', b'\xFF\xFE\xFD\xFC', b'', b'\x00', b'\xFF']

    for key in binary_keys:
        bf.add(key)

    for key in binary_keys:
        assert key in bf


def test_locations_match_hash_count():
    bf = make_filter(width=1024, hash_count=2)

    locations = bf.locations(b'payload')
    assert len(locations) == 2
    assert locations == bf.locations(b'payload')


def test_width_and_hash_count_come_from_params():
    bf = make_filter(width=4096, hash_count=7)

    assert bf.width == 4096
    assert bf.hash_count == 7


def test_offset_beyond_backend_width_rejected_without_mutation():
    """A filter sized wider than its bit array fails loudly and writes nothing."""
    bits = MemoryBitArray(16)
    bf = BloomFilter(bits, FilterParams(width=2**32, hash_count=14))

    with pytest.raises(OffsetOutOfRangeError):
        bf.add(b'payload')
    with pytest.raises(OffsetOutOfRangeError):
        bf.exists(b'payload')

    assert bits.count() == 0


def test_clear_removes_members():
    bf = make_filter()
    bf.add(b'a')
    bf.add(b'b')

    bf.clear()

    assert not bf.exists(b'a')
    assert not bf.exists(b'b')
    assert bf.bit_array.count() == 0


def test_approximate_count():
    """The set-bit estimate lands near the true number of distinct adds."""
    bf = make_filter(width=200_000, hash_count=14)

    assert bf.approximate_count() == 0
    for i in range(1000):
        bf.add(f'key{i}'.encode())
        bf.add(f'key{i}'.encode())

    assert 900 <= bf.approximate_count() <= 1100


def test_estimate_saturated_filter():
    bf = make_filter(width=64, hash_count=2)

    assert bf.estimate_elements(64) == 64


def test_concurrent_adds_commute():
    """Adds from many threads in any order all remain visible."""
    bf = make_filter()
    barrier = threading.Barrier(4)

    def adder(n):
        barrier.wait()
        for i in range(100):
            bf.add(f'{n}-{i}'.encode())

    threads = [threading.Thread(target=adder, args=(n,)) for n in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    for n in range(4):
        for i in range(100):
            assert bf.exists(f'{n}-{i}'.encode())
