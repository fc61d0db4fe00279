"""
mutation budget - hard ceiling on structure-altering operations per search.

expansions and network regenerations reserve a slot before calling the
model, commit it on success and release it on failure. in-flight
reservations count against the limit so concurrent operations cannot
overshoot it.
"""

import logging

from ..core.config import MUTATION_LIMIT
from ..core.errors import BudgetExceededError

logger = logging.getLogger("scholartree.tree.budget")


class MutationBudget:
    """per-session counter of successful budgeted operations."""

    def __init__(self, limit: int = MUTATION_LIMIT):
        if limit < 0:
            raise ValueError(f"limit must be >= 0, got {limit}")
        self.limit = limit
        self.used = 0
        self.in_flight = 0
        # bumped on reset; tickets from an older generation are ignored
        self.generation = 0

    @property
    def remaining(self) -> int:
        return max(self.limit - self.used - self.in_flight, 0)

    @property
    def exhausted(self) -> bool:
        return self.used + self.in_flight >= self.limit

    def check(self):
        """raise BudgetExceededError if no slot is free."""
        if self.exhausted:
            logger.info(
                f"budget exhausted: {self.used} used, "
                f"{self.in_flight} in flight, limit {self.limit}"
            )
            raise BudgetExceededError(self.limit)

    def reserve(self) -> int:
        """claim a slot for an operation about to call the model; returns a ticket."""
        self.check()
        self.in_flight += 1
        return self.generation

    def commit(self, ticket: int):
        """the reserved operation succeeded; the slot is spent."""
        if ticket != self.generation:
            return
        self.in_flight -= 1
        self.used += 1

    def release(self, ticket: int):
        """the reserved operation failed; give the slot back."""
        if ticket != self.generation:
            return
        self.in_flight -= 1

    def reset(self):
        """start a fresh budget for a new search."""
        self.used = 0
        self.in_flight = 0
        self.generation += 1

    def stats(self) -> dict:
        return {
            "used": self.used,
            "in_flight": self.in_flight,
            "limit": self.limit,
            "remaining": self.remaining
        }
