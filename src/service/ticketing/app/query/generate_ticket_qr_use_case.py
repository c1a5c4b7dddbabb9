import re
from datetime import datetime, timezone
from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.command.notify_ticket_holders_use_case import build_verify_url
from src.service.ticketing.app.dto.ticket_dto import TicketQrImage, TicketTokenClaims
from src.service.ticketing.app.interface.i_enrollment_query_repo import IEnrollmentQueryRepo
from src.service.ticketing.app.interface.i_qr_code_renderer import IQrCodeRenderer
from src.service.ticketing.app.interface.i_resource_repo import IResourceRepo
from src.service.ticketing.app.interface.i_ticket_token_signer import ITicketTokenSigner


def _slugify(value: str) -> str:
    slug = re.sub(r'[^a-z0-9]+', '-', value.lower()).strip('-')
    return slug or 'event'


class GenerateTicketQrUseCase:
    def __init__(
        self,
        *,
        enrollment_query_repo: IEnrollmentQueryRepo,
        resource_repo: IResourceRepo,
        ticket_token_signer: ITicketTokenSigner,
        qr_code_renderer: IQrCodeRenderer,
    ) -> None:
        self.enrollment_query_repo = enrollment_query_repo
        self.resource_repo = resource_repo
        self.ticket_token_signer = ticket_token_signer
        self.qr_code_renderer = qr_code_renderer

    @classmethod
    @inject
    def depends(
        cls,
        enrollment_query_repo: IEnrollmentQueryRepo = Depends(
            Provide[Container.enrollment_query_repo]
        ),
        resource_repo: IResourceRepo = Depends(Provide[Container.resource_repo]),
        ticket_token_signer: ITicketTokenSigner = Depends(
            Provide[Container.ticket_token_signer]
        ),
        qr_code_renderer: IQrCodeRenderer = Depends(Provide[Container.qr_code_renderer]),
    ) -> Self:
        return cls(
            enrollment_query_repo=enrollment_query_repo,
            resource_repo=resource_repo,
            ticket_token_signer=ticket_token_signer,
            qr_code_renderer=qr_code_renderer,
        )

    @Logger.io
    async def execute(self, *, enrollment_id: str, phone: str) -> TicketQrImage:
        enrollment = await self.enrollment_query_repo.get_by_id(enrollment_id=enrollment_id)
        if not enrollment:
            raise NotFoundError('Enrollment not found', code='ENROLLMENT_NOT_FOUND')

        found = enrollment.find_ticket(phone)
        if not found:
            raise NotFoundError('Ticket not found for this phone', code='TICKET_NOT_FOUND')
        key, _ = found

        # The matched key is signed so verification finds the ticket on the exact-key path
        token = self.ticket_token_signer.sign(
            claims=TicketTokenClaims(
                enrollment_id=str(enrollment.id),
                buyer_user_id=enrollment.buyer_user_id,
                resource_id=enrollment.resource_id,
                phone=key,
                issued_at=datetime.now(timezone.utc),
            )
        )
        verify_url = build_verify_url(token)
        content = self.qr_code_renderer.render_png(data=verify_url)

        resource = await self.resource_repo.get_by_id(resource_id=enrollment.resource_id)
        slug = _slugify(resource.name) if resource else 'event'
        return TicketQrImage(
            content=content, filename=f'ticket-{slug}-{key}.png', verify_url=verify_url
        )
