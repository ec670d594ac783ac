"""
The results of waiting, and the errors they convert to.

The waiter never raises for the "not ready" conditions: it returns an outcome,
so that the callers can branch on the kind of failure without catching anything.
The callers that prefer exceptions (e.g. test fixtures that abort the test run)
convert the outcome with :meth:`WaitOutcome.raise_for_failure`.
"""
import dataclasses
import enum
from typing import AbstractSet, Optional

from curito._cogs.structs import components


class FailureKind(enum.Enum):
    TASK_TIMEOUT = 'task-timeout'
    OVERALL_TIMEOUT = 'overall-timeout'
    INTERRUPTED = 'interrupted'


class NotReadyError(Exception):
    """ The deployment did not become ready; the reason is in the subclasses. """

    def __init__(self, message: str, *, outcome: "WaitOutcome") -> None:
        super().__init__(message)
        self.outcome = outcome


class ReadinessTimeoutError(NotReadyError):
    """ Some components did not reach the expected readiness in their own time. """


class OverallTimeoutError(NotReadyError):
    """ The whole waiting has exceeded its overall time budget. """


class InterruptedWait(NotReadyError):
    """ The waiting was stopped externally before it could finish. """


@dataclasses.dataclass(frozen=True)
class WaitOutcome:
    failure: Optional[FailureKind] = None
    ready: AbstractSet[components.Component] = frozenset()
    failed: AbstractSet[components.Component] = frozenset()
    unfinished: AbstractSet[components.Component] = frozenset()
    elapsed: float = 0

    def __bool__(self) -> bool:
        return self.ok

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def message(self) -> str:
        if self.failure is None:
            return f"Ready after {self.elapsed:.1f}s: {_names(self.ready)}."
        elif self.failure is FailureKind.TASK_TIMEOUT:
            return f"Not ready in time: {_names(self.failed)}."
        elif self.failure is FailureKind.OVERALL_TIMEOUT:
            return (f"The overall timeout is reached after {self.elapsed:.1f}s; "
                    f"still waiting for: {_names(self.unfinished)}.")
        elif self.failure is FailureKind.INTERRUPTED:
            return (f"Interrupted after {self.elapsed:.1f}s; "
                    f"still waiting for: {_names(self.unfinished)}.")
        else:
            raise RuntimeError(f"Unsupported failure kind: {self.failure!r}")

    def raise_for_failure(self) -> None:
        cls = (
            None if self.failure is None else
            ReadinessTimeoutError if self.failure is FailureKind.TASK_TIMEOUT else
            OverallTimeoutError if self.failure is FailureKind.OVERALL_TIMEOUT else
            InterruptedWait
        )
        if cls is not None:
            raise cls(self.message, outcome=self)


def _names(items: AbstractSet[components.Component]) -> str:
    return ', '.join(sorted(str(item) for item in items)) or 'nothing'
