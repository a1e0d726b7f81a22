"""Error Hierarchy — outcome codes and typed exceptions for team builder failures.

Invariants:
    - Core operations never raise for rule violations; they return an error
      outcome dict built by error_outcome()
    - Every error code maps to one exception class via raise_for_outcome()
    - All team builder errors are recoverable; none is fatal to the process
    - to_response() produces the REST envelope, never internal details

Design Decisions:
    - Outcome dicts in core, exceptions in shell: raise_for_outcome() is the
      single translation point used by the API layer
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


# ─── Outcome Codes ───────────────────────────────────────────────

KIND_MISMATCH = "KIND_MISMATCH"
INCOMPATIBLE_KINDS = "INCOMPATIBLE_KINDS"
SLOT_OCCUPIED = "SLOT_OCCUPIED"
UNKNOWN_NODE = "UNKNOWN_NODE"
UNKNOWN_EDGE = "UNKNOWN_EDGE"
UNKNOWN_SLOT = "UNKNOWN_SLOT"
INVALID_CONFIG = "INVALID_CONFIG"
GRAPH_INVARIANT = "GRAPH_INVARIANT"
GRAPH_FULL = "GRAPH_FULL"
NO_ACTIVE_DRAG = "NO_ACTIVE_DRAG"
ILLEGAL_DROP = "ILLEGAL_DROP"


def error_outcome(code: str, message: str, **details: Any) -> dict:
    """Build the uniform error outcome returned by core operations."""
    return {
        "status": "error",
        "error_code": code,
        "message": f"ERROR: {message}",
        **details,
    }


def is_error(result: dict | None) -> bool:
    return bool(result) and result.get("status") == "error"


# ─── Exceptions ──────────────────────────────────────────────────

class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Context attached to an error for logs and responses."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    builder_id: str | None = None
    node_id: str | None = None
    edge_id: str | None = None
    debug_info: dict[str, Any] | None = None


class TeamBuilderError(Exception):
    """Base exception for all team builder errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "builder_id": self.context.builder_id,
                    "node_id": self.context.node_id,
                    "edge_id": self.context.edge_id,
                },
            }
        }


class KindMismatchError(TeamBuilderError):
    """Config variant tag disagrees with the node kind. Indicates a caller bug."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, KIND_MISMATCH, ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )


class IncompatibleKindsError(TeamBuilderError):
    """Connection violates the allowed kind-pair table."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, INCOMPATIBLE_KINDS, ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, context, 400,
        )


class SlotOccupiedError(TeamBuilderError):
    """Single-occupancy slot is already attached."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, SLOT_OCCUPIED, ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )


class UnknownSlotError(TeamBuilderError):
    """Slot name is not a slot of the parent kind."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, UNKNOWN_SLOT, ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )


class InvalidConfigError(TeamBuilderError):
    """Config is missing a field its variant requires."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, INVALID_CONFIG, ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )


class GraphInvariantError(TeamBuilderError):
    """A staged graph failed the cross-entity invariant check."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, GRAPH_INVARIANT, ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 400,
        )


class GraphFullError(TeamBuilderError):
    """Graph already holds the configured maximum number of nodes."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, GRAPH_FULL, ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, context, 400,
        )


class DropRejectedError(TeamBuilderError):
    """Drop attempted without an active drag or onto a zone that refuses it."""
    def __init__(self, message: str, code: str = ILLEGAL_DROP,
                 context: ErrorContext | None = None):
        super().__init__(
            message, code, ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.INFO, context, 400,
        )


class ResourceNotFoundError(TeamBuilderError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str,
        code: str = "RESOURCE_NOT_FOUND", context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            code, ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


def raise_for_outcome(result: dict, context: ErrorContext | None = None) -> dict:
    """Raise the typed exception for an error outcome; pass ok outcomes through."""
    if not is_error(result):
        return result
    code = result["error_code"]
    message = result.get("message", code)
    if code == UNKNOWN_NODE:
        raise ResourceNotFoundError("Node", result.get("node_id", "?"), code, context)
    if code == UNKNOWN_EDGE:
        raise ResourceNotFoundError("Edge", result.get("edge_id", "?"), code, context)
    if code in (NO_ACTIVE_DRAG, ILLEGAL_DROP):
        raise DropRejectedError(message, code, context)
    raise OUTCOME_ERRORS.get(code, GraphInvariantError)(message, context)


OUTCOME_ERRORS: dict[str, type[TeamBuilderError]] = {
    KIND_MISMATCH: KindMismatchError,
    INCOMPATIBLE_KINDS: IncompatibleKindsError,
    SLOT_OCCUPIED: SlotOccupiedError,
    UNKNOWN_SLOT: UnknownSlotError,
    INVALID_CONFIG: InvalidConfigError,
    GRAPH_INVARIANT: GraphInvariantError,
    GRAPH_FULL: GraphFullError,
}
