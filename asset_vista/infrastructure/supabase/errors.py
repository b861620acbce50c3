"""Translate supabase SDK failures into BackendException."""

from contextlib import contextmanager
from typing import Any, Dict, Optional

import httpx
import structlog
from supabase import AuthError, PostgrestAPIError, StorageException

from asset_vista.core.exceptions import BackendException

logger = structlog.get_logger(__name__)

# PostgREST / Postgres error codes that map onto a client error
POSTGREST_STATUS = {
    "PGRST301": 401,  # JWT expired or invalid
    "PGRST302": 401,
    "PGRST303": 401,
    "42501": 403,  # insufficient privilege, row-level security
    "PGRST116": 404,
    "23505": 409,  # unique violation
    "23502": 400,  # not-null violation
    "22P02": 400,  # invalid text representation
}


def _gateway_status(status: Optional[int]) -> int:
    # 4xx keep their meaning (bad credentials, RLS denial); anything else is a gateway failure
    if status is not None and 400 <= status < 500:
        return status
    return 502


def _storage_error(exc: StorageException) -> Dict[str, Any]:
    body = exc.args[0] if exc.args else {}
    return body if isinstance(body, dict) else {"message": str(body)}


def to_backend_exception(exc: Exception) -> BackendException:
    if isinstance(exc, AuthError):
        status = getattr(exc, "status", None)
        return BackendException(exc.message, status_code=_gateway_status(status), details={"backend_status": status})

    if isinstance(exc, PostgrestAPIError):
        status = POSTGREST_STATUS.get(exc.code or "", 502 if exc.code is None else 400)
        return BackendException(
            exc.message or "Database request failed",
            status_code=status,
            details={"code": exc.code, "hint": exc.hint},
        )

    if isinstance(exc, StorageException):
        body = _storage_error(exc)
        try:
            status = int(body.get("statusCode"))
        except (TypeError, ValueError):
            status = None
        message = body.get("message") or body.get("error") or "Storage request failed"
        return BackendException(str(message), status_code=_gateway_status(status), details={"backend_status": status})

    if isinstance(exc, httpx.HTTPError):
        return BackendException(f"Network error: {exc}")

    raise TypeError(f"Not a backend failure: {exc!r}")


@contextmanager
def backend_call(action: str, **context):
    """Run an SDK call, re-raising its failures as BackendException."""
    try:
        yield
    except (AuthError, PostgrestAPIError, StorageException, httpx.HTTPError) as e:
        error = to_backend_exception(e)
        logger.warning("Backend call failed", action=action, status_code=error.status_code, error=error.message, **context)
        raise error from e
