"""
Audit trail of categorization score adjustments.

The board is not synchronized; share one across workers only behind your own
serialization.
"""

import copy
import logging
from numbers import Real
from typing import Any, Dict, List, Mapping, Optional

from ..models import ScoreBoardEntry

logger = logging.getLogger(__name__)

REMOVED_NONPOSITIVE = "removed-nonpositive"
REMOVED_EXPLICIT = "removed-explicit"
SET_EXPLICIT = "set-explicit"
FINAL_IMPORT = "final-import"


class ScoreBoard:
    """Category -> score mapping with an ordered log of every change."""

    def __init__(self) -> None:
        self._scores: Dict[str, float] = {}
        self._log: List[ScoreBoardEntry] = []

    def _record(self, category: str, delta: float, total: float, reason: str) -> None:
        self._log.append(
            ScoreBoardEntry(category=category, delta=delta, running_total=total, reason=reason)
        )

    def add(self, category: str, points: float, reason: str = "") -> None:
        self._scores.setdefault(category, 0)
        self._scores[category] += points
        self._record(category, points, self._scores[category], reason)

    def demote(self, category: str, points: float, reason: str = "") -> None:
        """Subtract points; a total that drops to zero or below removes the category."""
        self._scores.setdefault(category, 0)
        self._scores[category] -= points
        self._record(category, -points, self._scores[category], reason)
        if self._scores[category] <= 0:
            del self._scores[category]
            self._record(category, 0, 0, REMOVED_NONPOSITIVE)

    def set(self, category: str, value: float, reason: str = SET_EXPLICIT) -> None:
        self._scores[category] = value
        self._record(category, 0, value, reason)

    def remove(self, category: str, reason: str = REMOVED_EXPLICIT) -> None:
        if category in self._scores:
            del self._scores[category]
            self._record(category, 0, 0, reason)

    def import_final(self, scores: Optional[Mapping[str, Any]]) -> None:
        """Apply ``set`` for every numeric entry of a final score map."""
        for category, value in (scores or {}).items():
            if isinstance(value, Real) and not isinstance(value, bool):
                self.set(category, value, FINAL_IMPORT)

    def get(self, category: str) -> Optional[float]:
        return self._scores.get(category)

    def snapshot(self) -> Dict[str, float]:
        """Deep copy of the current totals."""
        return copy.deepcopy(self._scores)

    def trace(self) -> List[ScoreBoardEntry]:
        """The full ordered log, for debug output only."""
        return list(self._log)

    def trace_dicts(self) -> List[Dict[str, Any]]:
        """The log serialized with the storefront's field names."""
        return [entry.model_dump(by_alias=True) for entry in self._log]

    def __contains__(self, category: object) -> bool:
        return category in self._scores

    def __len__(self) -> int:
        return len(self._scores)
