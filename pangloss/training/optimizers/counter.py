"""Update-count bookkeeping per parameter index."""

from typing import Any, Dict, Mapping
from types import MappingProxyType


class UpdateCounter:
    """
    Per-index update counts plus a global high-water mark.

    Counts start at ``begin`` the first time an index is touched. The
    high-water mark is the largest count seen across all indices and is what
    step-keyed learning rate schedules read.

    Args:
        begin: Base offset for every index (default: 0)

    Example:
        >>> counter = UpdateCounter(begin=10)
        >>> counter.record_update(0)
        11
        >>> counter.global_count()
        11
    """

    def __init__(self, begin: int = 0):
        self.begin = int(begin)
        self._counts: Dict[int, int] = {}
        self._num_update = self.begin

    def record_update(self, index: int) -> int:
        """Increment the count for ``index`` and return the new count."""
        count = self._counts.get(index, self.begin) + 1
        self._counts[index] = count
        self._num_update = max(count, self._num_update)
        return count

    def count(self, index: int) -> int:
        """Updates applied to ``index`` so far (``begin`` if never touched)."""
        return self._counts.get(index, self.begin)

    def global_count(self) -> int:
        """High-water mark across all indices."""
        return self._num_update

    @property
    def counts(self) -> Mapping[int, int]:
        return MappingProxyType(self._counts)

    def state_dict(self) -> Dict[str, Any]:
        """Get counter state."""
        return {
            'begin': self.begin,
            'counts': dict(self._counts),
            'num_update': self._num_update,
        }

    def load_state_dict(self, state_dict: Dict[str, Any]) -> None:
        """
        Load counter state.

        Counts never go backwards: loading keeps the larger of the stored and
        current value for each index and for the high-water mark.
        """
        self.begin = int(state_dict['begin'])
        for index, count in state_dict['counts'].items():
            index = int(index)
            self._counts[index] = max(int(count), self._counts.get(index, count))
        self._num_update = max(int(state_dict['num_update']), self._num_update)

    def __repr__(self) -> str:
        return f"UpdateCounter(begin={self.begin}, indices={len(self._counts)}, num_update={self._num_update})"
