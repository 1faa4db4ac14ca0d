from __future__ import annotations


class InvalidInputError(ValueError):
    """Raised when the timeline engine receives malformed dates, granularities or empty ranges."""


class WorkOrderValidationError(Exception):
    """Raised when stored or submitted work orders are invalid (bad fields, bad refs, conflicts)."""


class WorkOrderNotFoundError(KeyError):
    """Raised when a work order id is not present in the store."""

    def __str__(self) -> str:
        return f"unknown work order '{self.args[0]}'" if self.args else "unknown work order"
