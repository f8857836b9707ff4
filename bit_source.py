from helper_classes import bias_coin, default_source


class BiasedBitSource:
    """Bernoulli bits with a fixed probability of one.

    Like BiasedSampler, it is only as thread-safe as its source.
    """
    def __init__(self, pr_one, source):
        if not 0.0 <= pr_one <= 1.0:
            raise ValueError(f"pr_one must be in [0, 1], got {pr_one}.")
        self.pr_one = pr_one
        self.source = source

    def sample_one(self):
        return bias_coin(self.pr_one, self.source)

    def fill_buffer(self, buffer):
        """
        Fills every byte of buffer with 8 biased bits. The first bit
        drawn goes to the least significant bit of the byte.

        Returns:
            int: Number of bytes written, always len(buffer).
        """
        for i in range(len(buffer)):
            byte = 0
            for j in range(8):
                if bias_coin(self.pr_one, self.source):
                    byte |= 1 << j
            buffer[i] = byte
        return len(buffer)

    def read(self, size):
        buf = bytearray(size)
        self.fill_buffer(buf)
        return bytes(buf)


def new_bit_source(pr_one, source=None):
    if source is None:
        source = default_source()
    return BiasedBitSource(pr_one, source)
