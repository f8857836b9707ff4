import torch


class TorchSource:
    """Uniform source backed by a torch.Generator
    """
    def __init__(self, generator=None, seed=None):
        """
        Input:
        ------
        generator: An existing torch.Generator. If None, a CPU generator
            is created, seeded with seed when given.
        seed: Seed for the new generator, ignored if generator is given.
        """
        if generator is None:
            generator = torch.Generator()
            if seed is not None:
                generator.manual_seed(seed)
        self.generator = generator

    def random(self):
        return torch.rand(
            1, generator=self.generator, dtype=torch.float64
            ).item()

    def randrange(self, n):
        return torch.randint(n, (1,), generator=self.generator).item()


class TorchAliasSampler:
    """Batched alias sampling on tensors.

    Same rule as BiasedSampler.sample_one, applied to a whole batch at
    once: pick a bucket uniformly, keep it with probability prob[bucket],
    otherwise take its alias.
    """
    def __init__(self, table, device="cpu"):
        """
        Input:
        ------
        table: An AliasTable built by build_table
        device: The device the table tensors live on
        """
        self.device = device
        self.prob = torch.tensor(
            table.prob,
            dtype=torch.float64,
            device=device
            )
        self.alias = torch.tensor(
            table.alias,
            dtype=torch.long,
            device=device
            )

    def __len__(self):
        return self.prob.shape[0]

    def sample(self, num_samples, generator=None):
        """
        Input:
        ------
        num_samples: Number of outcomes to draw
        generator: Optional torch.Generator, must live on the same
            device as the table

        Returns:
        --------
        LongTensor of shape [num_samples] with values in [0, N)
        """
        buckets = torch.randint(
            len(self), (num_samples,),
            generator=generator,
            device=self.device
            ) # S
        coins = torch.rand(
            num_samples,
            generator=generator,
            dtype=torch.float64,
            device=self.device
            ) # S
        return torch.where(
            coins < self.prob[buckets], buckets, self.alias[buckets]
            )
