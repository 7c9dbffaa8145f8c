"""Error Hierarchy — typed, categorized exceptions for all ledger failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) leave ledger and registry state untouched
    - to_response() produces the REST envelope used by the global handlers
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with CharityLedgerError base: one FastAPI handler renders all
    - http_status lives on the error: 402 for a declined payment and 422 for a
      rejected proof are ledger semantics, not transport details
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


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
    AUTHORIZATION = "authorization"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    donor: str | None = None
    token_id: int | None = None
    operation: str | None = None
    debug_info: dict[str, Any] | None = None


class CharityLedgerError(Exception):
    """Base exception for all ledger errors."""

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
                    "donor": self.context.donor,
                    "token_id": self.context.token_id,
                    "operation": self.context.operation,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class InvalidAmountError(CharityLedgerError):
    """Donation amount is zero, negative or outside the u256 range."""
    def __init__(self, amount: int, context: ErrorContext | None = None):
        super().__init__(
            f"Donation amount must be a positive integer below 2**256, got {amount}",
            "INVALID_AMOUNT", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.amount = amount


class InvalidAddressError(CharityLedgerError):
    """Address is malformed or the zero sentinel where an owner is required."""
    def __init__(self, address: str | None, context: ErrorContext | None = None):
        super().__init__(
            f"Invalid address: {address!r}",
            "INVALID_ADDRESS", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.address = address


class TransferFailedError(CharityLedgerError):
    """Payment rail declined the donor's transfer."""
    def __init__(self, donor: str, amount: int, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.donor = donor
        ctx.operation = "donate"
        super().__init__(
            f"Payment transfer of {amount} from {donor} was declined",
            "TRANSFER_FAILED", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, ctx, 402,
        )
        self.amount = amount


class ProofVerificationFailedError(CharityLedgerError):
    """Proof verifier rejected the proof-of-payment."""
    def __init__(self, donor: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.donor = donor
        ctx.operation = "verify_donation"
        super().__init__(
            f"Proof of payment for {donor} could not be verified",
            "PROOF_VERIFICATION_FAILED", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.WARNING, ctx, 422,
        )


class ResourceNotFoundError(CharityLedgerError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


class TokenNotFoundError(ResourceNotFoundError):
    """Token id was never minted or lies beyond the next id."""
    def __init__(self, token_id: int, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.token_id = token_id
        super().__init__("Token", str(token_id), ctx)
        self.code = "TOKEN_NOT_FOUND"
        self.token_id = token_id


class UnauthorizedError(CharityLedgerError):
    """Caller is not the registry administrator."""
    def __init__(self, caller: str | None, action: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.operation = action
        super().__init__(
            f"Caller {caller!r} is not allowed to {action}",
            "UNAUTHORIZED", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, ctx, 403,
        )
        self.caller = caller


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(CharityLedgerError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
