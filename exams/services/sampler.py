# exams/services/sampler.py
"""
Randomness used while assembling a paper.

Every assembly gets its own sampler (and therefore its own ``random.Random``);
nothing here touches the module-level RNG.
"""
import hashlib
import random


def _seed_int(s: str) -> int:
    return int(hashlib.sha256(s.encode("utf-8")).hexdigest()[:12], 16)


class PoolSampler:
    """Uniform draws without replacement, plus order shuffling."""

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()

    def sample(self, pool, count: int) -> list:
        pool = list(pool)
        if count <= 0 or not pool:
            return []
        return self.rng.sample(pool, min(len(pool), count))

    def shuffle(self, items) -> list:
        items = list(items)
        self.rng.shuffle(items)
        return items


class SeededPoolSampler(PoolSampler):
    """Reproducible sampler keyed by text, e.g. ``f"{blueprint_id}:{seed}"``."""

    def __init__(self, seed_text: str):
        self.seed_text = seed_text
        super().__init__(random.Random(_seed_int(seed_text)))