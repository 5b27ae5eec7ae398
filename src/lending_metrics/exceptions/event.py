from typing import Any

from lending_metrics.exceptions.base import (
    LendingMetricsError,
    LendingMetricsTypeError,
    LendingMetricsValueError,
)

"""
Exceptions defined here are raised while applying events in the `dispatcher` and `metrics` modules.
"""


class EventProcessingError(LendingMetricsError):
    """
    Exception raised while applying a decoded event.
    """


class MissingReference(EventProcessingError):
    """
    An entity expected by the event (market, token, collateral type) does not exist.
    """

    def __init__(self, kind: str, reference: str) -> None:
        self.kind = kind
        self.reference = reference
        super().__init__(message=f"{kind} {reference} not found.")

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.kind, self.reference)


class InvalidEventInput(EventProcessingError, LendingMetricsValueError):
    """
    The event carries a value that violates a precondition, e.g. a negative amount.
    """

    def __init__(self, message: str = "Invalid event input.") -> None:
        self.message = message
        super().__init__(message=message)

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.message,)


class EventOrderingError(EventProcessingError):
    """
    Raised when an event arrives before an event that was already processed.
    """

    def __init__(self, previous: tuple[int, int], current: tuple[int, int]) -> None:
        self.previous = previous
        self.current = current
        super().__init__(
            message=f"Event at (block, log index) {current} arrived after {previous}."
        )

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.previous, self.current)


class UnknownEventType(EventProcessingError, LendingMetricsTypeError):
    def __init__(self, event_type: str) -> None:
        self.event_type = event_type
        super().__init__(message=f"No handler for event type {event_type}.")

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.event_type,)
