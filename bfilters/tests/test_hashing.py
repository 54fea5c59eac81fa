import mmh3
import pytest
import xxhash

from bfilters.hashing import derive_index, derive_indices, digests, encode_item


def test_encode_item():
    assert encode_item("John Green") == b"John Green"
    assert encode_item("café") == "café".encode("utf-8")
    assert encode_item(bytearray(b"abc")) == b"abc"
    with pytest.raises(TypeError):
        encode_item(42)


def test_digests_use_two_different_hashes():
    h_a, h_b = digests(b"Hello test world!")
    assert h_a == mmh3.hash(b"Hello test world!", 0, signed=False)
    assert h_b == xxhash.xxh64_intdigest(b"Hello test world!", seed=0)
    assert 0 <= h_a < 2**32
    assert 0 <= h_b < 2**64


def test_derive_index_is_deterministic():
    item = b"Hello test world!"
    for _ in range(1000):
        assert derive_index(item, 2, 923_578) == derive_index(item, 2, 923_578)


def test_derive_index_combines_digests():
    item = b"Steve Red"
    h_a, h_b = digests(item)
    bit_count = 1_000_003
    assert derive_index(item, 0, bit_count) == h_a % bit_count
    # Full width arithmetic, no 64-bit wraparound.
    r = 2**40
    assert derive_index(item, r, bit_count) == (h_a + r * h_b) % bit_count


def test_derive_index_range():
    for i in range(200):
        item = f"item-{i}".encode("ascii")
        for r in range(5):
            assert 0 <= derive_index(item, r, 97) < 97


def test_derive_indices_matches_derive_index():
    item = b"Mark Adams"
    indices = list(derive_indices(item, 9, 4_099))
    assert len(indices) == 9
    assert indices == [derive_index(item, r, 4_099) for r in range(9)]


def test_derive_index_contract():
    with pytest.raises(ValueError):
        derive_index(b"x", -1, 10)
    with pytest.raises(ValueError):
        derive_index(b"x", 0, 0)
    with pytest.raises(ValueError):
        list(derive_indices(b"x", 0, 10))
