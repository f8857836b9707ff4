"""Vose's alias method.

An AliasTable is built once from a probability vector in O(N) and can
then back any number of BiasedSamplers, each drawing in O(1). The table
is never mutated after construction, so sharing it between threads is
safe. A sampler adds no locking around its source: it is exactly as
thread-safe as the source it was given. Give each concurrent consumer
its own, independently seeded source.
"""
import math
import random

from helper_classes import WorkQueues, bias_coin, bytes_needed, default_source

PROB_TOLERANCE = 1e-10


class InvalidDistribution(ValueError):
    def __init__(self, message, residual=None):
        super().__init__(message)
        self.residual = residual


class AliasTable:
    def __init__(self, prob, alias):
        self.prob = tuple(prob)
        self.alias = tuple(alias)

    def __len__(self):
        return len(self.prob)

    def new_sampler(self, source=None):
        """
        Input:
        ------
        source: Any object with random() -> float in [0, 1) and
            randrange(n) -> int in [0, n), e.g. random.Random. If None
            a fresh OS-seeded random.Random is used.
        """
        if source is None:
            source = default_source()
        return BiasedSampler(self, source)

    def new_prng_sampler(self, seed):
        return self.new_sampler(random.Random(seed))

    def new_crypto_sampler(self):
        return self.new_sampler(random.SystemRandom())


def _validate(probabilities):
    if probabilities is None:
        raise InvalidDistribution("No probabilities given.")
    probs = [float(p) for p in probabilities]
    if not probs:
        raise InvalidDistribution("Probability vector is empty.")
    for i, p in enumerate(probs):
        if not math.isfinite(p) or p < 0.0:
            raise InvalidDistribution(
                f"Probability at index {i} is negative or not finite: {p}."
                )
    residual = 1.0 - sum(probs)
    if abs(residual) > PROB_TOLERANCE:
        raise InvalidDistribution(
            f"Probabilities do not add to 1, residual {residual:g}.",
            residual=residual,
            )
    return probs


def build_table(probabilities, log_fn=None):
    """
    Builds the alias table for a discrete distribution.

    Args:
        probabilities (sequence of float): p[i] is the probability of
            outcome i. Must be non-negative and sum to 1 within 1e-10.
        log_fn (callable): Optional logger from get_logger. Receives one
            record describing the construction.

    Returns:
        AliasTable

    Raises:
        InvalidDistribution: If the vector is missing, empty, has a
            negative or non-finite entry or does not sum to 1.
    """
    probs = _validate(probabilities)
    n = len(probs)
    q = [p * n for p in probs]
    prob = [0.0] * n
    alias = [0] * n

    queues = WorkQueues()
    for i, qi in enumerate(q):
        queues.push(i, qi)

    while queues:
        small, large = queues.pop_pair()
        prob[small] = q[small]
        alias[small] = large
        q[large] = (q[large] + q[small]) - 1.0
        queues.push(large, q[large])

    # Rounding can strand buckets in either queue. Large goes first.
    saturated_large = len(queues.large)
    saturated_small = len(queues.small)
    for leftover in list(queues.large) + list(queues.small):
        prob[leftover] = 1.0
        alias[leftover] = leftover

    if log_fn is not None:
        log_fn({
            "event": "build_table",
            "n": n,
            "saturated_large": saturated_large,
            "saturated_small": saturated_small,
        })
    return AliasTable(prob, alias)


class BiasedSampler:
    """Draws outcomes of an AliasTable using an injected uniform source.
    """
    def __init__(self, table, source):
        self.table = table
        self.source = source
        self.bytes_per_sample = bytes_needed(len(table))

    def sample_one(self):
        n = len(self.table.prob)
        i = self.source.randrange(n)
        if bias_coin(self.table.prob[i], self.source):
            return i
        return self.table.alias[i]

    def fill_buffer(self, buffer):
        """
        Fills buffer with packed samples, each a fixed-width big-endian
        unsigned integer of bytes_per_sample bytes. Only complete
        samples are written; a shorter tail is left untouched.

        Returns:
            int: Number of bytes written.
        """
        width = self.bytes_per_sample
        written = len(buffer) - len(buffer) % width
        for start in range(0, written, width):
            buffer[start:start + width] = \
                self.sample_one().to_bytes(width, "big")
        return written

    def read(self, size):
        buf = bytearray(size - size % self.bytes_per_sample)
        self.fill_buffer(buf)
        return bytes(buf)
