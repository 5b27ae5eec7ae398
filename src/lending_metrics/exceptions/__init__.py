from lending_metrics.exceptions.base import (
    LendingMetricsError,
    LendingMetricsTypeError,
    LendingMetricsValueError,
)
from lending_metrics.exceptions.event import (
    EventOrderingError,
    EventProcessingError,
    InvalidEventInput,
    MissingReference,
    UnknownEventType,
)
from lending_metrics.exceptions.store import EntityStoreError

from . import event, store

__all__ = (
    "EntityStoreError",
    "EventOrderingError",
    "EventProcessingError",
    "InvalidEventInput",
    "LendingMetricsError",
    "LendingMetricsTypeError",
    "LendingMetricsValueError",
    "MissingReference",
    "UnknownEventType",
    "event",
    "store",
)
