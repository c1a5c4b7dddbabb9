from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.exception.exceptions import CustomBaseError, DomainError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.payment_metrics import metrics
from src.service.ticketing.app.dto.ticket_dto import VerifyTicketResult
from src.service.ticketing.app.interface.i_enrollment_command_repo import IEnrollmentCommandRepo
from src.service.ticketing.app.interface.i_enrollment_query_repo import IEnrollmentQueryRepo
from src.service.ticketing.app.interface.i_ticket_token_signer import ITicketTokenSigner


class VerifyTicketUseCase:
    """
    Gate check for a scanned QR code.

    The first scan marks the ticket; later scans report the original scan instead of failing,
    so staff can tell a re-scan from a forged ticket.
    """

    def __init__(
        self,
        *,
        ticket_token_signer: ITicketTokenSigner,
        enrollment_query_repo: IEnrollmentQueryRepo,
        enrollment_command_repo: IEnrollmentCommandRepo,
    ) -> None:
        self.ticket_token_signer = ticket_token_signer
        self.enrollment_query_repo = enrollment_query_repo
        self.enrollment_command_repo = enrollment_command_repo
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        ticket_token_signer: ITicketTokenSigner = Depends(
            Provide[Container.ticket_token_signer]
        ),
        enrollment_query_repo: IEnrollmentQueryRepo = Depends(
            Provide[Container.enrollment_query_repo]
        ),
        enrollment_command_repo: IEnrollmentCommandRepo = Depends(
            Provide[Container.enrollment_command_repo]
        ),
    ) -> Self:
        return cls(
            ticket_token_signer=ticket_token_signer,
            enrollment_query_repo=enrollment_query_repo,
            enrollment_command_repo=enrollment_command_repo,
        )

    @Logger.io
    async def execute(self, *, token: str, admin_id: str) -> VerifyTicketResult:
        with self.tracer.start_as_current_span('use_case.verify_ticket'):
            try:
                result = await self._verify(token=token, admin_id=admin_id)
            except CustomBaseError:
                metrics.record_ticket_scan(result='rejected')
                raise

            metrics.record_ticket_scan(
                result='already_scanned' if result.already_scanned else 'granted'
            )
            return result

    async def _verify(self, *, token: str, admin_id: str) -> VerifyTicketResult:
        claims = self.ticket_token_signer.verify(token=token)
        if not claims.phone:
            raise DomainError('Ticket token does not carry a phone number', code='INVALID_TICKET')

        enrollment = await self.enrollment_query_repo.get_by_id_and_resource(
            enrollment_id=claims.enrollment_id, resource_id=claims.resource_id
        )
        if not enrollment:
            raise NotFoundError('Enrollment not found', code='ENROLLMENT_NOT_FOUND')

        found = enrollment.find_ticket(claims.phone)
        if not found:
            raise NotFoundError('Ticket not found for this phone', code='TICKET_NOT_FOUND')
        key, ticket = found

        already_scanned = ticket.is_scanned
        scanned = ticket.scan(admin_id=admin_id)
        if not already_scanned:
            stored, won = await self.enrollment_command_repo.record_scan(
                enrollment_id=str(enrollment.id), ticket=scanned
            )
            if won:
                Logger.base.info(
                    f'✅ [SCAN] Entry granted for {key} on enrollment {enrollment.id} by {admin_id}'
                )
            else:
                # Lost to a concurrent scan; a ticket refunded meanwhile raises here
                scanned = stored.scan(admin_id=admin_id)
                already_scanned = True
        if already_scanned:
            Logger.base.info(f'🔁 [SCAN] Ticket {key} on enrollment {enrollment.id} re-scanned')

        return VerifyTicketResult(
            enrollment_id=str(enrollment.id),
            resource_id=enrollment.resource_id,
            phone=key,
            status=scanned.status.value,
            already_scanned=already_scanned,
            scanned_at=scanned.scanned_at,
            scanned_by_admin_id=scanned.scanned_by_admin_id,
            assigned_seat=scanned.assigned_seat,
        )
