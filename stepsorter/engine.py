from dataclasses import dataclass, replace
from enum import Enum
from typing import NamedTuple, Optional

from . import algorithms
from .errors import UnknownAlgorithm


class StepKind(str, Enum):
    COMPARE = algorithms.COMPARE
    SWAP    = algorithms.SWAP
    WRITE   = algorithms.WRITE


class Continuation(str, Enum):
    SUSPENDED = "suspended"
    COMPLETED = "completed"


@dataclass(frozen=True)
class RunStatistics:
    comparisons: int = 0
    swaps: int = 0
    writes: int = 0
    steps: int = 0
    estimated_steps: int = 0

    @property
    def progress(self) -> float:
        if self.estimated_steps <= 0:
            return 0.0
        return min(1.0, self.steps / self.estimated_steps)


@dataclass(frozen=True)
class StepEvent:
    """What the most recent advance() did, with the counters right after it."""
    kind: StepKind
    indices: tuple
    stats: RunStatistics
    gap: Optional[int] = None


class StepResult(NamedTuple):
    event: Optional[StepEvent]
    status: Continuation

    @property
    def completed(self) -> bool:
        return self.status is Continuation.COMPLETED


class SortEngine:
    """One algorithm bound to one dataset, advanced one step per call.

    The engine owns ``data`` for the duration of the run and mutates it in
    place. Readers must only look at it between ``advance()`` calls.
    """

    def __init__(self, key, data, estimated_steps=None):
        if key not in algorithms.SORTERS:
            raise UnknownAlgorithm(key)
        self.key = key
        self.name = algorithms.display_name(key)
        self.data = data
        if estimated_steps is None:
            estimated_steps = algorithms.estimate_total_steps(key, len(data))
        self._stats = RunStatistics(estimated_steps=estimated_steps)
        self._gen = algorithms.SORTERS[key](data)
        self._done = False

    @property
    def stats(self) -> RunStatistics:
        return self._stats

    @property
    def completed(self) -> bool:
        return self._done

    def advance(self) -> StepResult:
        if self._done:
            return StepResult(None, Continuation.COMPLETED)
        try:
            kind, indices, *rest = next(self._gen)
        except StopIteration:
            self._done = True
            self._gen = None
            return StepResult(None, Continuation.COMPLETED)
        kind = StepKind(kind)
        self._stats = self._count(kind)
        event = StepEvent(kind, tuple(indices), self._stats, rest[0] if rest else None)
        return StepResult(event, Continuation.SUSPENDED)

    def _count(self, kind) -> RunStatistics:
        s = self._stats
        steps = s.steps + 1
        est = max(s.estimated_steps, steps)
        if kind is StepKind.COMPARE:
            return replace(s, comparisons=s.comparisons + 1, steps=steps, estimated_steps=est)
        if kind is StepKind.SWAP:
            return replace(s, swaps=s.swaps + 1, writes=s.writes + 1,
                           steps=steps, estimated_steps=est)
        return replace(s, writes=s.writes + 1, steps=steps, estimated_steps=est)


def create_engine(key, data, estimated_steps=None) -> SortEngine:
    return SortEngine(key, data, estimated_steps)
