"""
Typed failures raised by the aggregation and persistence code.

The core never swallows these and never retries; routers turn them into
HTTP errors, other callers decide for themselves.
"""
from __future__ import annotations


class WellnessError(Exception):
    """Base class for every error raised by wellness_api."""


class ValidationError(WellnessError):
    """A required input (user id, mood payload) is missing or malformed."""


class StoreError(WellnessError):
    """A record store operation failed."""

    def __init__(self, collection: str, cause: BaseException | str):
        self.collection = collection
        self.cause = cause
        super().__init__(f"{collection}: {cause}")


class AggregationError(WellnessError):
    """One of the reads behind a summary failed; no partial result exists."""

    def __init__(self, group: str, cause: BaseException):
        self.group = group
        self.cause = cause
        super().__init__(f"Error fetching {group}: {cause}")


class PersistenceError(WellnessError):
    """A write (mood save, exercise log) failed and must be assumed lost."""

    def __init__(self, operation: str, cause: BaseException):
        self.operation = operation
        self.cause = cause
        super().__init__(f"{operation} failed: {cause}")
