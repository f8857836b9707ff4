import json
import os
import random
from collections import deque
from datetime import datetime

import numpy as np

# 8 bytes would overflow int64
MAX_INT64_SAMPLE_BYTES = 7


class WorkQueues:
    """
    The two FIFO queues of bucket indices used while building an
    alias table. "small" holds buckets whose renormalized weight is
    below 1, "large" the rest. Order within a queue is discovery order.
    """
    def __init__(self):
        self.small = deque()
        self.large = deque()

    def push(self, idx, weight):
        if weight < 1.0:
            self.small.append(idx)
        else:
            self.large.append(idx)

    def __bool__(self):
        # True while a light bucket can still be paired with a heavy one
        return bool(self.small) and bool(self.large)

    def pop_pair(self):
        return self.small.popleft(), self.large.popleft()


def bytes_needed(n):
    """Minimum number of bytes able to hold any index in [0, n)."""
    if n < 1:
        raise ValueError(f"Need at least one outcome, got {n}.")
    return max(1, ((n - 1).bit_length() + 7) // 8)


def bias_coin(pr_one, source):
    x = source.random()
    return x < pr_one


class NumpySource:
    """Uniform source backed by a numpy.random.Generator.
    """
    def __init__(self, generator=None, seed=None):
        """
        Input:
        ------
        generator: An existing numpy Generator. If None, one is created
            with np.random.default_rng(seed).
        seed: Seed for the new Generator, ignored if generator is given.
        """
        if generator is None:
            generator = np.random.default_rng(seed)
        self.generator = generator

    def random(self):
        return float(self.generator.random())

    def randrange(self, n):
        return int(self.generator.integers(0, n))


def unpack_samples(data, bytes_per_sample):
    """
    Decodes a buffer of fixed-width big-endian samples.

    Args:
        data (bytes-like): Buffer filled by BiasedSampler.fill_buffer.
        bytes_per_sample (int): Width of each sample in bytes.

    Returns:
        np.ndarray: The decoded sample indices, dtype int64. Samples
            wider than 7 bytes do not fit in int64 and come back as an
            object array of Python ints.
    """
    raw = np.frombuffer(bytes(data), dtype=np.uint8)
    if raw.size % bytes_per_sample != 0:
        raise ValueError(
            f"Buffer length {raw.size} is not a multiple of \
                the sample width {bytes_per_sample}."
                )
    if bytes_per_sample > MAX_INT64_SAMPLE_BYTES:
        data = raw.tobytes()
        return np.array([
            int.from_bytes(data[start:start + bytes_per_sample], "big")
            for start in range(0, len(data), bytes_per_sample)
            ], dtype=object)
    groups = raw.reshape(-1, bytes_per_sample).astype(np.int64)
    weights = 256 ** np.arange(bytes_per_sample - 1, -1, -1, dtype=np.int64)
    return groups @ weights


def unpack_bits(data):
    """
    Decodes a buffer filled by BiasedBitSource.fill_buffer. Bit 0 of
    each byte is the first bit drawn.

    Returns:
        np.ndarray: 8 * len(data) values in {0, 1}, in draw order.
    """
    raw = np.frombuffer(bytes(data), dtype=np.uint8)
    return np.unpackbits(raw, bitorder="little")


def default_source(seed=None):
    return random.Random(seed)


def get_logger(log_file_path, print_to_console=True):
    """
    Returns a logger that writes JSON-formatted logs to file (1 per line).

    Args:
        log_file_path (str): File to append logs to.
        print_to_console (bool): If True, also prints log entries to stdout.

    Returns:
        log_fn (callable): log_fn(message_dict: dict)
    """
    log_dir = os.path.dirname(log_file_path)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    def log_fn(message_dict):
        message_dict["timestamp"] = datetime.now().isoformat()
        line = json.dumps(message_dict)
        with open(log_file_path, "a") as f:
            f.write(line + "\n")
        if print_to_console:
            print(line)

    return log_fn
