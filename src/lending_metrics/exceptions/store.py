from typing import Any

from lending_metrics.exceptions.base import LendingMetricsError


class EntityStoreError(LendingMetricsError):
    """
    Raised when the persistence layer fails. Store failures are fatal for the event being
    processed and must propagate to the ingestion boundary.
    """

    def __init__(self, operation: str, error: str) -> None:
        self.operation = operation
        self.error = error
        super().__init__(message=f"Entity store {operation} failed: {error}")

    def __reduce__(self) -> tuple[Any, ...]:
        return self.__class__, (self.operation, self.error)
