"""
Domain Errors

Every rejection the engine makes is one of four kinds:

- ValidationError: malformed or out-of-range input, raised before any mutation
- NotFoundError: the referenced entity does not exist or is outside the caller's home
- ConflictError: the request clashes with existing state (duplicate name, self-transfer)
- ConsistencyError: an atomic multi-step operation failed part way and was rolled back

Reports never raise for dangling references; they degrade instead.
"""

from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from homeledger.models.common import ValidationIssue


class LedgerError(Exception):
    """Base exception for ledger operations."""

    code = "LEDGER_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LedgerError):
    """Input rejected before any mutation."""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, issues: Optional[list[ValidationIssue]] = None):
        super().__init__(message)
        self.issues = issues or []

    @classmethod
    def from_issues(cls, issues: list[ValidationIssue]) -> "ValidationError":
        errors = [issue for issue in issues if issue.severity == "error"]
        message = ", ".join(f"{issue.field}: {issue.message}" for issue in errors)
        return cls(message or "Invalid input", issues)

    @classmethod
    def from_pydantic(cls, exc: PydanticValidationError) -> "ValidationError":
        """Convert a pydantic error raised at the model boundary."""
        issues = []
        for err in exc.errors():
            location = ".".join(str(part) for part in err.get("loc", ())) or "input"
            issues.append(ValidationIssue(
                field=location,
                issue_type=err.get("type", "invalid_value"),
                message=err.get("msg", "Invalid value"),
            ))
        return cls.from_issues(issues)


class NotFoundError(LedgerError):
    """Referenced entity does not exist in the caller's home."""

    code = "NOT_FOUND"


class ConflictError(LedgerError):
    """Request conflicts with existing state."""

    code = "CONFLICT"


class ConsistencyError(LedgerError):
    """Atomic operation failed part way; nothing was applied."""

    code = "CONSISTENCY_ERROR"
