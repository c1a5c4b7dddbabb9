from datetime import datetime, timezone
from typing import Dict, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.shared_kernel.domain.value_object.phone import normalize_phone
from src.service.ticketing.app.dto.ticket_dto import TicketTokenClaims
from src.service.ticketing.app.interface.i_notification_sender import INotificationSender
from src.service.ticketing.app.interface.i_resource_repo import IResourceRepo
from src.service.ticketing.app.interface.i_ticket_token_signer import ITicketTokenSigner
from src.service.ticketing.domain.entity.enrollment_entity import EventEnrollment
from src.service.ticketing.domain.entity.payment_entity import Payment
from src.service.ticketing.domain.value_object.order_metadata import Party


def build_verify_url(token: str) -> str:
    return f'{settings.PUBLIC_BASE_URL.rstrip("/")}/api/tickets/verify?token={token}'


class NotifyTicketHoldersUseCase:
    """
    Send every ticket holder their QR verification link.

    Best-effort: each delivery failure is logged and the rest continue.
    """

    def __init__(
        self,
        *,
        notification_sender: INotificationSender,
        ticket_token_signer: ITicketTokenSigner,
        resource_repo: IResourceRepo,
    ) -> None:
        self.notification_sender = notification_sender
        self.ticket_token_signer = ticket_token_signer
        self.resource_repo = resource_repo

    @classmethod
    @inject
    def depends(
        cls,
        notification_sender: INotificationSender = Depends(
            Provide[Container.notification_sender]
        ),
        ticket_token_signer: ITicketTokenSigner = Depends(
            Provide[Container.ticket_token_signer]
        ),
        resource_repo: IResourceRepo = Depends(Provide[Container.resource_repo]),
    ) -> Self:
        return cls(
            notification_sender=notification_sender,
            ticket_token_signer=ticket_token_signer,
            resource_repo=resource_repo,
        )

    @Logger.io
    async def execute(self, *, enrollment: EventEnrollment, payment: Payment) -> int:
        """Returns how many ticket messages were handed to the sender"""
        resource = await self.resource_repo.get_by_id(resource_id=enrollment.resource_id)
        resource_name = resource.name if resource else 'your event'
        parties: Dict[str, Party] = {
            normalize_phone(party.phone): party for party in payment.metadata.parties
        }
        issued_at = datetime.now(timezone.utc)

        sent = 0
        for key, ticket in enrollment.tickets.items():
            if not ticket.is_active:
                continue
            party = parties.get(normalize_phone(key))
            name = party.name if party else ''
            token = self.ticket_token_signer.sign(
                claims=TicketTokenClaims(
                    enrollment_id=str(enrollment.id),
                    buyer_user_id=enrollment.buyer_user_id,
                    resource_id=enrollment.resource_id,
                    phone=key,
                    issued_at=issued_at,
                )
            )
            qr_url = build_verify_url(token)

            try:
                await self.notification_sender.send_ticket(
                    phone=key,
                    name=name,
                    resource_name=resource_name,
                    qr_url=qr_url,
                    seat=ticket.assigned_seat,
                )
                sent += 1
            except Exception as e:
                Logger.base.error(f'📨 [NOTIFY] Ticket message to {key} failed: {e}')

            if party and party.email:
                try:
                    await self.notification_sender.send_email(
                        to=party.email,
                        subject=f'Your ticket for {resource_name}',
                        body=f'Hi {name or "there"}, show this QR link at the entry: {qr_url}',
                    )
                except Exception as e:
                    Logger.base.error(f'📨 [NOTIFY] Ticket email to {party.email} failed: {e}')

        Logger.base.info(
            f'📨 [NOTIFY] {sent}/{len(enrollment.tickets)} ticket message(s) sent '
            f'for order {payment.order_id}'
        )
        return sent
