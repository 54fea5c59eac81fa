"""
Sizing math for Bloom filters.

Given the number of items a filter must hold (n) and the acceptable
false-positive probability (p), the textbook optimum is

  m = -(n ln p) / (ln 2)^2      bits
  k = -log2(p)                   hash functions

Both results are rounded *up* so that a filter is never provisioned with
fewer bits or hash rounds than the formulas prescribe, and so that k >= 1
for every p in (0, 1).
"""

import math


# Compute the number of bits for a filter holding "capacity" items with a
# false-positive probability of "false_positive_target".
#
# Parameters
#   capacity (int): Number of items the filter must hold, positive.
#   false_positive_target (float): Desired false positive rate in (0, 1).
#
# Returns
#   (int): ceil(-(n ln p) / (ln 2)^2), at least 1.
#
def best_bit_count(capacity: int, false_positive_target: float) -> int:
    if (capacity <= 0):
        raise ValueError("capacity must be positive")
    if not (0 < false_positive_target < 1):
        raise ValueError("false_positive_target must be in (0,1)")
    m = -(capacity * math.log(false_positive_target)) / (math.log(2) ** 2)
    return max(1, math.ceil(m))


# Compute the number of hash rounds for a false-positive probability.
#
# Parameters
#   false_positive_target (float): Desired false positive rate in (0, 1).
#
# Returns
#   (int): ceil(-log2(p)), at least 1.
#
def best_hash_count(false_positive_target: float) -> int:
    if not (0 < false_positive_target < 1):
        raise ValueError("false_positive_target must be in (0,1)")
    return max(1, math.ceil(-math.log2(false_positive_target)))


# Theoretical false positive rate of a realized filter after "items" inserts,
#   p = (1 - exp(-k n / m)) ** k
def expected_false_positive_rate(bit_count: int, hash_count: int, items: int) -> float:
    if (bit_count <= 0) or (hash_count <= 0):
        raise ValueError("bit_count and hash_count must be positive")
    if (items <= 0):
        return 0.0
    return (1.0 - math.exp(-hash_count * items / float(bit_count))) ** hash_count
