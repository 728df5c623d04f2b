from fastapi import HTTPException
from pydantic import BaseModel
from typing import Optional


class ProblemDetail(BaseModel):
    """RFC 7807 compliant error response."""

    type: str = "about:blank"
    title: str
    detail: Optional[str] = None
    status: int
    instance: Optional[str] = None
    code: str


class ConfigurationError(RuntimeError):
    """Static scoring configuration is unusable; the service must not start."""


class DomainException(Exception):
    """Base class for domain-specific exceptions."""

    def __init__(
        self,
        status_code: int,
        title: str,
        *,
        code: str,
        detail: str | None = None,
        type_: str = "about:blank",
    ) -> None:
        super().__init__(detail or title)
        self.status_code = status_code
        self.title = title
        self.detail = detail
        self.type = type_
        self.code = code


class InvalidScoreError(DomainException):
    def __init__(self, detail: str) -> None:
        super().__init__(
            status_code=422,
            title="Invalid score",
            detail=detail,
            code="invalid_score",
        )


class InvalidOperationError(DomainException):
    def __init__(self, detail: str) -> None:
        super().__init__(
            status_code=400,
            title="Invalid operation",
            detail=detail,
            code="invalid_operation",
        )


class MatchAlreadyConcludedError(DomainException):
    def __init__(self, match_id: str | None = None) -> None:
        detail = (
            f"match '{match_id}' has already concluded"
            if match_id
            else "match has already concluded"
        )
        super().__init__(
            status_code=409,
            title="Match already concluded",
            detail=detail,
            code="match_concluded",
        )


class NotReadyError(DomainException):
    def __init__(self, detail: str) -> None:
        super().__init__(
            status_code=409,
            title="Match not ready",
            detail=detail,
            code="match_not_ready",
        )


class ReferenceNotFoundError(DomainException):
    def __init__(self, kind: str, ref_id: str) -> None:
        super().__init__(
            status_code=404,
            title="Reference not found",
            detail=f"{kind} '{ref_id}' not found",
            code="reference_not_found",
        )
        self.kind = kind
        self.ref_id = ref_id


class TransactionFailedError(DomainException):
    def __init__(self, detail: str) -> None:
        super().__init__(
            status_code=503,
            title="Transaction failed",
            detail=detail,
            code="transaction_failed",
        )


class PlayerNotFound(DomainException):
    def __init__(self, player_id: str) -> None:
        super().__init__(
            status_code=404,
            title="Player not found",
            detail=f"player '{player_id}' not found",
            code="player_not_found",
        )


class TeamNotFound(DomainException):
    def __init__(self, team_id: str) -> None:
        super().__init__(
            status_code=404,
            title="Team not found",
            detail=f"team '{team_id}' not found",
            code="team_not_found",
        )


class MatchNotFound(DomainException):
    def __init__(self, match_id: str) -> None:
        super().__init__(
            status_code=404,
            title="Match not found",
            detail=f"match '{match_id}' not found",
            code="match_not_found",
        )


def http_problem(
    status_code: int,
    detail: str,
    code: str,
    *,
    headers: Optional[dict[str, str]] = None,
) -> HTTPException:
    """Create an HTTPException with an attached problem code."""

    exc = HTTPException(status_code=status_code, detail=detail, headers=headers)
    setattr(exc, "code", code)
    return exc
