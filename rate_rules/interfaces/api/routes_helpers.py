"""Helper utilities shared across API route handlers."""

from fastapi import HTTPException, status

from rate_rules.application.use_cases.rules import ErrorKind, OperationResult, RuleResult
from rate_rules.interfaces.api.schemas import ScopedRuleRead

_STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.STORE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def status_for(kind: ErrorKind | None) -> int:
    """Return the HTTP status matching a failed operation."""

    if kind is None:
        return status.HTTP_400_BAD_REQUEST
    return _STATUS_BY_KIND[kind]


def raise_for_failure(result: OperationResult) -> None:
    """Raise an :class:`HTTPException` when ``result`` did not succeed.

    Conflict failures carry the overlapping rules so the client can link to
    them.
    """

    if result.succeeded:
        return

    detail: dict[str, object] = {
        "errors": list(result.errors),
        "kind": result.error_kind.value if result.error_kind else None,
    }
    if isinstance(result, RuleResult) and result.conflicting_rules:
        detail["conflicting_rules"] = [
            ScopedRuleRead.from_entity(rule).model_dump(mode="json")
            for rule in result.conflicting_rules
        ]
    raise HTTPException(status_code=status_for(result.error_kind), detail=detail)
