"""
What to wait for: the components, how many pods, how long, how often.

A request is constructed per one deployment verification and is never stored.
All durations are in seconds (floats), both for the polling interval
and for the timeouts, so that they cannot be mixed up by units.
"""
import dataclasses
import enum
from typing import AbstractSet

from curito._cogs.structs import components


class ReadinessStrategy(enum.Enum):
    """ How the number of ready pods is compared with the expected one. """
    EXACT = 'exact'
    AT_LEAST = 'at-least'

    def is_satisfied(self, ready: int, expected: int) -> bool:
        if self is ReadinessStrategy.EXACT:
            return ready == expected
        elif self is ReadinessStrategy.AT_LEAST:
            return ready >= expected
        else:
            raise RuntimeError(f"Unsupported readiness strategy: {self!r}")


@dataclasses.dataclass(frozen=True)
class WaitRequest:
    label_key: str
    expected_pods: int
    components: AbstractSet[components.Component]
    interval: float
    timeout: float
    overall_timeout: float
    strategy: ReadinessStrategy = ReadinessStrategy.EXACT

    def __post_init__(self) -> None:
        if not self.label_key:
            raise ValueError("The label key must be a non-empty string.")
        if self.expected_pods < 1:
            raise ValueError(f"The expected number of pods must be positive: {self.expected_pods!r}")
        for name in ['interval', 'timeout', 'overall_timeout']:
            if getattr(self, name) <= 0:
                raise ValueError(f"The {name} must be positive: {getattr(self, name)!r}")
        if not self.components:
            raise ValueError("At least one component is needed to wait for.")

        # Duplicates collapse: re-checking the same component twice is a wasted effort.
        object.__setattr__(self, 'components', frozenset(self.components))
