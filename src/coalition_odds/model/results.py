from typing import List, Sequence, Tuple

import numpy as np


class SimulationResult:
    """Seat allocations for every simulation of one survey."""

    def __init__(self, parties: List[str], seats_matrix: np.ndarray):
        self.parties = list(parties)
        self.seats = np.asarray(seats_matrix, dtype=int)

    @property
    def nsim(self) -> int:
        return self.seats.shape[0]

    def coalition_seats(self, coalition_parties: Sequence[str]) -> np.ndarray:
        """Combined seats of the coalition per simulation; unknown parties hold none."""
        idx = [self.parties.index(p) for p in coalition_parties if p in self.parties]
        if not idx:
            return np.zeros(self.nsim, dtype=int)
        return self.seats[:, idx].sum(axis=1)

    def coalition_stats(
        self, coalition_parties: Sequence[str], majority: int = 300
    ) -> Tuple[float, float]:
        total = self.coalition_seats(coalition_parties)
        return float((total >= majority).mean()), float(total.mean())
