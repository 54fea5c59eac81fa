import math

import pytest

from bfilters.sizing import best_bit_count, best_hash_count, expected_false_positive_rate


def test_bit_count_formula():
    # m = ceil(-(n ln p) / (ln 2)^2)
    assert best_bit_count(3, 0.35) == 7
    assert best_bit_count(1000, 0.01) == math.ceil(1000 * -math.log(0.01) / math.log(2) ** 2)


def test_bit_count_bits_per_item():
    # Below 3% false positives takes more than 8 bits per item.
    capacity = 233_092
    bits = best_bit_count(capacity, 0.01)
    assert bits > 0
    assert bits // capacity > 8


def test_bit_count_monotonic_in_target():
    capacity = 10_000
    targets = [0.001, 0.01, 0.05, 0.1, 0.35, 0.4, 0.9]
    counts = [best_bit_count(capacity, p) for p in targets]
    for stricter, looser in zip(counts, counts[1:]):
        assert stricter > looser


def test_bit_count_linear_in_capacity():
    assert best_bit_count(2_000, 0.1) > best_bit_count(1_000, 0.1)
    assert abs(best_bit_count(2_000, 0.1) - 2 * best_bit_count(1_000, 0.1)) <= 1


def test_bit_count_always_positive():
    assert best_bit_count(1, 0.999) == 1


def test_hash_count_rounds_up():
    assert best_hash_count(0.01) == 7
    assert best_hash_count(0.35) == 2
    assert best_hash_count(0.4) == 2
    assert best_hash_count(0.5) == 1
    assert best_hash_count(0.25) == 2


@pytest.mark.parametrize("p", [1e-9, 0.001, 0.3, 0.6, 0.9, 0.999999])
def test_hash_count_at_least_one(p):
    assert best_hash_count(p) >= 1


@pytest.mark.parametrize("p", [0.0, 1.0, -0.5, 1.5, float("nan")])
def test_sizing_rejects_invalid_targets(p):
    with pytest.raises(ValueError):
        best_bit_count(100, p)
    with pytest.raises(ValueError):
        best_hash_count(p)


def test_bit_count_rejects_zero_capacity():
    with pytest.raises(ValueError):
        best_bit_count(0, 0.1)


def test_expected_false_positive_rate():
    assert expected_false_positive_rate(100, 3, 0) == 0.0
    m, k, n = 9_586, 7, 1_000
    p = expected_false_positive_rate(m, k, n)
    assert p == pytest.approx((1 - math.exp(-k * n / m)) ** k)
    # Sized for 1% at capacity.
    assert 0.005 < p < 0.015
