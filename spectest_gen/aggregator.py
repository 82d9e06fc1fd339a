"""Per-module pending call lists, flushed into one batched test each."""

from typing import Dict, List, Optional

from .fragments import BatchedTest


class ModuleCallAggregator:
    """
    Collects callable-unit names per module index.

    Registration order is kept: scripted commands are causally ordered
    (a global write followed by a read), so the batch replays them in order
    against a single instance.
    """

    def __init__(self):
        self._pending: Dict[int, List[str]] = {}
        self._flushed: List[str] = []

    def register(self, module_index: int, unit_name: str) -> None:
        self._pending.setdefault(module_index, []).append(unit_name)

    def pending(self, module_index: int) -> List[str]:
        return list(self._pending.get(module_index, []))

    def flush(self, module_index: int) -> Optional[BatchedTest]:
        """Return the batched test for module_index, or None if nothing is pending."""
        calls = self._pending.pop(module_index, [])
        if not calls:
            return None
        self._flushed.extend(calls)
        return BatchedTest(module_index=module_index, calls=tuple(calls))

    @property
    def flushed(self) -> List[str]:
        """Every unit name emitted so far, in flush order."""
        return list(self._flushed)

    def has_pending(self) -> bool:
        return any(self._pending.values())
