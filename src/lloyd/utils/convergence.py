"""
Convergence criteria for the iteration controller.

A Lloyd run is finished when the centers stop moving. The criterion sees the
summed center displacement reported by the update strategy, and whether the
empty-cluster policy moved any center afterwards.
"""

from typing import Dict, Any

from ..base.interfaces import ConvergenceCriterion
from ..config import DEFAULT_SHIFT_TOLERANCE


class CentroidShift(ConvergenceCriterion):
    """Convergence when no center moved by more than ``tol`` in total."""

    def __init__(self, tol: float = DEFAULT_SHIFT_TOLERANCE, patience: int = 1):
        """
        Args:
            tol: Largest summed center displacement still considered stable
            patience: Number of consecutive stable iterations required
        """
        super().__init__()
        self.tol = tol
        self.patience = patience
        self._stable_count = 0

    def check(self, current_state: Dict[str, Any]) -> bool:
        """Check if centers have stopped moving."""
        shift = current_state['shift']
        centers_moved = current_state.get('centers_moved', False)

        self.history.append({
            'iteration': current_state.get('iteration', len(self.history)),
            'shift': shift,
            'centers_moved': centers_moved
        })

        if shift <= self.tol and not centers_moved:
            self._stable_count += 1
        else:
            self._stable_count = 0

        return self._stable_count >= self.patience

    def reset(self):
        super().reset()
        self._stable_count = 0
