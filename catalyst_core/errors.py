# catalyst_core/errors.py
"""
Domain error taxonomy for the measurement store.

Every service operation validates its input before touching storage and
raises one of the errors below. The HTTP layer maps them onto status codes
through ``DomainError.code``; in-process callers can catch them directly.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class DomainError(Exception):
    """Base class for all domain-level exceptions."""

    code = "domain_error"

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


# --- Validation Errors ---

class ConstraintViolation(DomainError):
    """Raised when a dimension field is malformed (code length, enum value, blank name)."""

    code = "constraint_violation"


class InvalidPeriod(DomainError):
    """Raised when a period has zero or several values, or a kind/value mismatch."""

    code = "invalid_period"


class RangeError(DomainError):
    """Raised when a bounded numeric field (confidence, value) is out of range."""

    code = "range_error"


# --- Integrity Errors ---

class DuplicateFact(DomainError):
    """Raised when a measurement already exists for an (entity, metric, period) triple."""

    code = "duplicate_fact"

    def __init__(self, entity_id: int, metric_id: int, period_id: int):
        super().__init__(
            f"A measurement already exists for entity={entity_id}, "
            f"metric={metric_id}, period={period_id}.",
            details={
                "entity_id": entity_id,
                "metric_id": metric_id,
                "period_id": period_id,
            },
        )


class ReferentialIntegrityError(DomainError):
    """Raised for a missing foreign key or a delete blocked by dependent rows."""

    code = "referential_integrity"


class NotFoundError(ReferentialIntegrityError):
    """Raised when the row addressed by a lookup or delete does not exist."""

    code = "not_found"

    def __init__(self, kind: str, identifier: Any):
        super().__init__(
            f"{kind} with id={identifier!r} not found.",
            details={"kind": kind, "id": identifier},
        )
        self.kind = kind
        self.identifier = identifier


# --- Storage Errors ---

class StorageUnavailable(DomainError):
    """Raised when the database cannot serve the operation right now (locked, unreachable)."""

    code = "storage_unavailable"


__all__ = [
    "DomainError",
    "ConstraintViolation",
    "InvalidPeriod",
    "RangeError",
    "DuplicateFact",
    "ReferentialIntegrityError",
    "NotFoundError",
    "StorageUnavailable",
]
