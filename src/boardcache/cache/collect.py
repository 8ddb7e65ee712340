"""
Probabilistic garbage collection trigger.

Instead of a background sweeper, ordinary cache operations roll a die and run
one full sweep when it comes up. The first hit disables the trigger for the
rest of the trigger's life, so a process sweeps at most once.
"""

import random
from typing import Optional, Union


def is_collect_due(draw: int, chance_den: Optional[int]) -> bool:
    """
    Decide whether a draw triggers a sweep.

    Args:
        draw: A value drawn uniformly from ``range(chance_den)``
        chance_den: The chance denominator, None when collection is disabled

    Returns:
        bool: True when a sweep should run
    """
    return chance_den is not None and draw == 0


class CollectTrigger:
    """Rolls for a sweep with probability ``1 / chance_den``, at most once."""

    def __init__(self, chance_den: Union[int, bool, None], rng: Optional[random.Random] = None):
        """
        Args:
            chance_den: Positive denominator; False or None disables the trigger
            rng: Random source, injectable for deterministic tests
        """
        if chance_den is False or chance_den is None:
            self.chance_den: Optional[int] = None
        elif isinstance(chance_den, bool) or chance_den < 1:
            raise ValueError(f"Collect chance denominator must be a positive integer, got {chance_den!r}")
        else:
            self.chance_den = int(chance_den)
        self.rng = rng or random.Random()

    @property
    def enabled(self) -> bool:
        return self.chance_den is not None

    def roll(self) -> bool:
        """Draw once; on success the trigger disables itself."""
        if self.chance_den is None:
            return False
        if is_collect_due(self.rng.randrange(self.chance_den), self.chance_den):
            self.chance_den = None
            return True
        return False
