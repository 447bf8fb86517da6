# random_source.py

from enum import Enum
import numpy as np
import constants as C


class SeedMode(Enum):
    FIXED = "fixed"    # reproducible, seeded from C.FIXED_RANDOM_SEED
    SYSTEM = "system"  # seeded from system entropy


def seed_mode_from_flag(draw_randomly):
    return SeedMode.SYSTEM if draw_randomly else SeedMode.FIXED


class RandomSource:
    """
    A per-process random number stream. Each eating or dispersal implementation owns
    one, so draws made by one process never shift the sequence seen by another.
    """
    def __init__(self, seed_mode=SeedMode.FIXED, seed=C.FIXED_RANDOM_SEED):
        if not isinstance(seed_mode, SeedMode):
            seed_mode = seed_mode_from_flag(bool(seed_mode))
        self.seed_mode = seed_mode
        if seed_mode is SeedMode.FIXED:
            self.seed = seed
            self._generator = np.random.default_rng(seed)
        else:
            # Keep the entropy that was used so a non-reproducible run can still be replayed.
            seed_sequence = np.random.SeedSequence()
            self.seed = seed_sequence.entropy
            self._generator = np.random.default_rng(seed_sequence)

    def uniform(self):
        """A uniform draw in [0, 1)."""
        return float(self._generator.random())

    def normal(self, mean=0.0, standard_deviation=1.0):
        return float(self._generator.normal(mean, standard_deviation))

