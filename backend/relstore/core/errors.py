"""Error Hierarchy — typed, categorized exceptions for every engine failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Mutation errors (not found, dangling reference, validation) abort with no partial effect
    - PersistenceWarning is a warning category, not an exception: the mutation already committed
    - to_dict() produces a JSON-safe envelope callers can branch on

Design Decisions:
    - Single hierarchy with RelStoreError base: callers catch one type and switch on .code
    - ErrorContext as dataclass: rich observability without coupling to logging framework
    - Named ValidationError to match the taxonomy; pydantic's is imported under an alias
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and caller handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    REFERENTIAL_INTEGRITY = "referential_integrity"
    PERSISTENCE = "persistence"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    collection: str | None = None
    entity_id: str | None = None
    field: str | None = None
    operation: str | None = None
    debug_info: dict[str, Any] | None = None


class RelStoreError(Exception):
    """Base exception for all engine errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()

    def to_dict(self) -> dict:
        """Convert to a JSON-safe error envelope."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "collection": self.context.collection,
                    "entity_id": self.context.entity_id,
                    "field": self.context.field,
                    "operation": self.context.operation,
                },
            }
        }


# ─── Mutation Errors ────────────────────────────────────────────

class NotFoundError(RelStoreError):
    """Operation referenced an id that is not in the collection."""
    def __init__(self, collection: str, entity_id: str, context: ErrorContext | None = None):
        context = context or ErrorContext(collection=collection, entity_id=entity_id)
        super().__init__(
            f"{collection} '{entity_id}' not found",
            "NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context,
        )
        self.collection = collection
        self.entity_id = entity_id


class DanglingReferenceError(RelStoreError):
    """A reference field does not resolve to an existing entity at commit time."""
    def __init__(
        self, collection: str, field: str, target: str, target_id: str,
        context: ErrorContext | None = None,
    ):
        context = context or ErrorContext(collection=collection, field=field)
        super().__init__(
            f"{collection}.{field} references missing {target} '{target_id}'",
            "DANGLING_REFERENCE", ErrorCategory.REFERENTIAL_INTEGRITY,
            ErrorSeverity.ERROR, context,
        )
        self.collection = collection
        self.field = field
        self.target = target
        self.target_id = target_id


class ValidationError(RelStoreError):
    """Caller-supplied fields violate an entity-level constraint."""
    def __init__(
        self, collection: str, errors: list[dict[str, str]],
        context: ErrorContext | None = None,
    ):
        fields = ", ".join(e["field"] for e in errors) or "record"
        context = context or ErrorContext(
            collection=collection, debug_info={"errors": errors},
        )
        super().__init__(
            f"Invalid {collection} record: {fields}",
            "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context,
        )
        self.collection = collection
        self.errors = errors

    @property
    def fields(self) -> list[str]:
        """Names of the fields that failed validation."""
        return [e["field"] for e in self.errors]


class UnknownEntityTypeError(RelStoreError):
    """Entity type is not part of the active domain."""
    def __init__(self, entity_type: str, known: list[str], context: ErrorContext | None = None):
        super().__init__(
            f"Unknown entity type '{entity_type}'. Known: {', '.join(known)}",
            "UNKNOWN_ENTITY_TYPE", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context or ErrorContext(collection=entity_type),
        )
        self.entity_type = entity_type


# ─── Infrastructure Errors ──────────────────────────────────────

class PersistenceError(RelStoreError):
    """Snapshot gateway failed to read, decode or write a collection."""
    def __init__(
        self, message: str, operation: str, collection: str | None = None,
        context: ErrorContext | None = None,
    ):
        context = context or ErrorContext(collection=collection, operation=operation)
        super().__init__(
            f"Persistence {operation} failed: {message}",
            "PERSISTENCE_ERROR", ErrorCategory.PERSISTENCE,
            ErrorSeverity.CRITICAL, context,
        )
        self.operation = operation
        self.collection = collection


class PersistenceWarning(UserWarning):
    """Write-through failed after an otherwise successful mutation.

    Issued through the warnings module so callers can record it
    (warnings.catch_warnings / pytest.warns) or escalate it with a filter.
    """
    code = "PERSISTENCE_WARNING"

    def __init__(self, collection: str, cause: PersistenceError):
        super().__init__(f"{collection} was not persisted: {cause.message}")
        self.collection = collection
        self.cause = cause
