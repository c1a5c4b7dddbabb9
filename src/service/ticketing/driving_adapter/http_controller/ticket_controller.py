from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from src.platform.logging.loguru_io import Logger
from src.platform.types import UtilsUUID7
from src.service.ticketing.app.command.verify_ticket_use_case import VerifyTicketUseCase
from src.service.ticketing.app.query.generate_ticket_qr_use_case import GenerateTicketQrUseCase
from src.service.ticketing.driving_adapter.http_controller.auth.staff_auth import require_staff
from src.service.ticketing.driving_adapter.http_controller.schema.ticket_schema import (
    TicketVerifyResponse,
)


router = APIRouter()


@router.get('/verify')
@Logger.io
async def verify_ticket(
    token: str = Query(..., min_length=1),
    admin_id: str = Depends(require_staff),
    use_case: VerifyTicketUseCase = Depends(VerifyTicketUseCase.depends),
) -> TicketVerifyResponse:
    result = await use_case.execute(token=token, admin_id=admin_id)
    return TicketVerifyResponse(
        message=result.message,
        enrollment_id=result.enrollment_id,
        resource_id=result.resource_id,
        phone=result.phone,
        status=result.status,
        already_scanned=result.already_scanned,
        scanned_at=result.scanned_at,
        scanned_by_admin_id=result.scanned_by_admin_id,
        assigned_seat=result.assigned_seat,
    )


@router.get('/{enrollment_id}/qr/{phone}', response_class=Response)
@Logger.io
async def ticket_qr(
    enrollment_id: UtilsUUID7,
    phone: str,
    admin_id: str = Depends(require_staff),
    use_case: GenerateTicketQrUseCase = Depends(GenerateTicketQrUseCase.depends),
) -> Response:
    image = await use_case.execute(enrollment_id=str(enrollment_id), phone=phone)
    return Response(
        content=image.content,
        media_type=image.media_type,
        headers={'Content-Disposition': f'inline; filename="{image.filename}"'},
    )
