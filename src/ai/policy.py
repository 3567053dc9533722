"""
When is the AI allowed to break the rules?
---

Up to `start_move` plies the answer is always no. After that each AI turn flips its own coin.
"""

import random
from dataclasses import dataclass, field


@dataclass
class RuleAdherencePolicy:
    start_move: int = 6
    probability: float = 0.2
    rng: random.Random = field(default_factory=random.Random)

    def __post_init__(self):
        if self.start_move < 0:
            raise ValueError(f"start_move must not be negative, got {self.start_move}")
        if not 0.0 <= self.probability <= 1.0:
            raise ValueError(f"probability must be within [0, 1], got {self.probability}")

    def is_eligible(self, move_count: int) -> bool:
        return move_count >= self.start_move

    def sample(self, move_count: int) -> bool:
        """Decide for one turn. Below the threshold no random number is drawn at all."""
        if not self.is_eligible(move_count):
            return False
        return self.rng.random() < self.probability
