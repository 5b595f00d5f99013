"""Mapping of automaton priorities onto a max-parity, even-wins game scale."""
from __future__ import annotations
import logging
from dataclasses import dataclass

log = logging.getLogger("hoa2pg.priorities")

EVEN = 0
ODD = 1


def normalize_priority(p: int, max_priority: bool, winning_parity: int,
                       num_priorities: int) -> int:
    """Adjust priority p for a max, even parity game.

    Priority 0 is left to the environment's auxiliary vertices, so the
    result is never 0: at least 2 for even objectives and at least 1 for
    odd ones. A min objective is flipped against the
    smallest even number >= num_priorities, which keeps the parity of
    every priority. Under an odd objective everything is shifted by one
    instead of two, which turns winning odd priorities into even ones.
    """
    even_ceil = num_priorities + (num_priorities % 2)
    p_for_max = p if max_priority else even_ceil - p
    shifted = p_for_max + (2 - winning_parity)
    log.debug(
        "Changed %d into %d. Original objective: %s %s with maximal priority %d",
        p, shifted, "max" if max_priority else "min",
        "even" if winning_parity == EVEN else "odd", num_priorities,
    )
    return shifted


@dataclass(frozen=True)
class ParityObjective:
    """Parity condition of a validated automaton."""
    max_priority: bool
    winning_parity: int   # EVEN or ODD
    num_priorities: int

    def normalize(self, p: int) -> int:
        return normalize_priority(p, self.max_priority, self.winning_parity,
                                  self.num_priorities)

    def __str__(self) -> str:
        return (f"parity {'max' if self.max_priority else 'min'} "
                f"{'even' if self.winning_parity == EVEN else 'odd'} "
                f"{self.num_priorities}")
