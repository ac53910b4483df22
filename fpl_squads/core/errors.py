# fpl_squads/core/errors.py
"""
Error taxonomy shared by the services and the HTTP layer.

Services raise these; `fpl_squads.main` renders them as `{"detail": ...}`
with the status code carried on the class.
"""
from __future__ import annotations


class SquadServiceError(Exception):
    status_code: int = 500
    default_detail: str = "Internal server error"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class NotFoundError(SquadServiceError):
    status_code = 404
    default_detail = "Not found"


class RosterValidationError(SquadServiceError):
    status_code = 422
    default_detail = "Invalid squad payload"


class UpstreamUnavailableError(SquadServiceError):
    status_code = 502
    default_detail = "Failed to fetch FPL data"


class StorageUnavailableError(SquadServiceError):
    status_code = 503
    default_detail = "Database not available"


class StorageFailureError(SquadServiceError):
    status_code = 500
    default_detail = "Database transaction failed"
