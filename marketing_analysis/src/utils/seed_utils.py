"""Random seed helpers to keep analyses reproducible.

The pipeline has two stochastic components:
- k-means initialisation (random restarts),
- class-balanced sampling and the train/test split for the response model.

Every one of them receives an explicit ``random_state``. Nothing here touches
NumPy's legacy global RNG; a stage that needs several independent draws
derives one child seed per draw from its configured seed.
"""

from __future__ import annotations

import numpy as np


def derive_seed(random_state: int, offset: int) -> int:
    """Derive a child seed for a sub-step from a parent ``random_state``.

    Used when one configured seed drives several independent draws (e.g. the
    balanced down-sampling and the following split) so that the draws are not
    correlated but stay reproducible.
    """
    seq = np.random.SeedSequence([int(random_state), int(offset)])
    return int(seq.generate_state(1)[0])


__all__ = ["derive_seed"]
