"""
access_core.api.routers.scan_ticket

Ticket scanning endpoint used by door staff.

Responsibilities:
- Require an authenticated, confirmed scanner.
- Run the entitlement gatekeeper for the scanned ticket.
- Map each failure code onto the error taxonomy for its HTTP status; the body
  stays the flat `{"message": ...}` the scanner app renders.
- Answer unexpected failures with a generic 500 and no internal detail.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_200_OK

from access_core.api.deps import db_session, settings_dep
from access_core.auth.deps import require_authenticated
from access_core.auth.models import Identity
from access_core.entitlements.gatekeeper import EntitlementGatekeeper, ScanCode
from access_core.errors import AccessError, ExpiredOrWrongType, Forbidden, InternalError, NotFound
from access_core.observability.logging import get_logger
from access_core.settings import Settings

log = get_logger(__name__)

router = APIRouter(prefix="/api/scan-ticket", tags=["scan-ticket"])

SCAN_FAILED_MESSAGE = "An error occurred while scanning the ticket"

_ERROR_BY_CODE: dict[ScanCode, type[AccessError]] = {
    ScanCode.ticket_not_found: NotFound,
    ScanCode.product_not_found: NotFound,
    ScanCode.event_not_found: NotFound,
    ScanCode.ticket_expired: ExpiredOrWrongType,
    ScanCode.not_event_ticket: ExpiredOrWrongType,
    ScanCode.unauthorized_scanner: Forbidden,
}


def error_for(code: ScanCode, message: str) -> AccessError:
    return _ERROR_BY_CODE.get(code, ExpiredOrWrongType)(message, code=code.value)


def _message_response(err: AccessError) -> JSONResponse:
    return JSONResponse({"message": err.message}, status_code=err.status_code)


@router.post("/{document_id}")
async def scan_ticket(
    document_id: str,
    scanner: Identity = Depends(require_authenticated),
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> JSONResponse:
    gatekeeper = EntitlementGatekeeper(
        session=session, consume_policy=settings.ticket_consume_policy
    )
    try:
        outcome = await gatekeeper.validate_event_access(document_id, scanner.user_id)
    except Exception:
        # Boundary of the scan path: log the detail, answer generically.
        log.exception("scan_failed", ticket=document_id, scanner_id=scanner.user_id)
        await session.rollback()
        return _message_response(InternalError(SCAN_FAILED_MESSAGE))

    if not outcome.success:
        return _message_response(error_for(outcome.code, outcome.message))

    return JSONResponse(
        {"success": True, "message": outcome.message, "data": outcome.data},
        status_code=HTTP_200_OK,
    )


# --- Module Notes -----------------------------------------------------------
# Scans do not go through the `AccessError` handler: the scanner app expects
# `{"message": ...}` rather than the `{"error": {...}}` envelope.
