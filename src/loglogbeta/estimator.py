"""LogLog-Beta cardinality estimate.

Classical HyperLogLog switches to linear counting at low cardinalities
and looks up empirical bias tables in between. LogLog-Beta replaces all
of that with one formula:

    E = alpha * m * (m - z) / (beta(z) + sum(2 ** -M[j]))

where z is the number of empty registers and beta(z) is a degree-7
polynomial in log2(z + 1) fitted to simulation data. The coefficients
below must be kept exactly as they are; the accuracy of the estimate
depends on them.

The paper fits the polynomial in ln(z + 1). With log2, beta(z) comes out
too large while many registers are empty, and the estimate runs low
until the stream holds roughly 5 * m distinct elements. Past that point
z is near 0 and the two forms agree.

References:
    Qin, Kim, Tung, "LogLog-Beta and More: A New Algorithm for
    Cardinality Estimation Based on LogLog Counting", 2016.
    https://arxiv.org/abs/1612.02284
"""

from __future__ import annotations

import math

from loglogbeta.registers import RegisterArray

BETA_LINEAR = -0.370393911
# Coefficients of L, L**2, ..., L**7 with L = log2(z + 1).
BETA_COEFFICIENTS = (
    0.070471823,
    0.17393686,
    0.16339839,
    -0.09237745,
    0.03738027,
    -0.005384159,
    0.00042419,
)


def beta(z: int) -> float:
    """Bias correction for z empty registers."""
    zl = math.log2(z + 1)
    total = BETA_LINEAR * z
    power = 1.0
    for coefficient in BETA_COEFFICIENTS:
        power *= zl
        total += coefficient * power
    return total


def estimate_cardinality(registers: RegisterArray, alpha: float) -> float:
    """Estimate the number of distinct digests folded into registers.

    Returns 0.0 for an untouched array and for the degenerate case of a
    zero denominator.
    """
    m = registers.bucket_count
    z = registers.zero_count()
    if z == m:
        return 0.0
    denominator = beta(z) + registers.inverse_sum()
    if denominator == 0.0:
        return 0.0
    return alpha * m * (m - z) / denominator
