from decimal import Decimal
from typing import AsyncContextManager, Callable, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from uuid_utils import UUID

from src.platform.logging.loguru_io import Logger
from src.service.shared_kernel.domain.value_object.phone import normalize_phone
from src.service.ticketing.app.interface.i_enrollment_query_repo import IEnrollmentQueryRepo
from src.service.ticketing.domain.entity.enrollment_entity import (
    EventEnrollment,
    Ticket,
    TicketStatus,
)
from src.service.ticketing.driven_adapter.model.enrollment_model import EventEnrollmentModel
from src.service.ticketing.driven_adapter.model.ticket_model import TicketModel


class EnrollmentQueryRepoImpl(IEnrollmentQueryRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]):
        self.session_factory = session_factory

    @staticmethod
    def _ticket_model_to_entity(ticket_model: TicketModel) -> Ticket:
        return Ticket(
            id=ticket_model.id,
            phone=ticket_model.phone,
            status=TicketStatus(ticket_model.status),
            assigned_seat=ticket_model.assigned_seat,
            is_scanned=ticket_model.is_scanned,
            scanned_at=ticket_model.scanned_at,
            scanned_by_admin_id=ticket_model.scanned_by_admin_id,
            cancelled_at=ticket_model.cancelled_at,
            cancellation_reason=ticket_model.cancellation_reason,
        )

    @classmethod
    def _model_to_entity(cls, enrollment_model: EventEnrollmentModel) -> EventEnrollment:
        return EventEnrollment(
            id=UUID(enrollment_model.id),
            order_id=enrollment_model.order_id,
            payment_id=enrollment_model.payment_id,
            buyer_user_id=enrollment_model.buyer_user_id,
            resource_id=enrollment_model.resource_id,
            ticket_count=enrollment_model.ticket_count,
            ticket_price=Decimal(enrollment_model.ticket_price),
            tickets={
                ticket_model.phone: cls._ticket_model_to_entity(ticket_model)
                for ticket_model in enrollment_model.tickets
            },
            created_at=enrollment_model.created_at,
        )

    async def _get_one(self, *conditions) -> EventEnrollment | None:
        async with self.session_factory() as session:
            result = await session.execute(select(EventEnrollmentModel).where(*conditions).limit(1))
            enrollment_model = result.scalar_one_or_none()
            if not enrollment_model:
                return None
            return self._model_to_entity(enrollment_model)

    @Logger.io
    async def get_by_id(self, *, enrollment_id: str) -> EventEnrollment | None:
        return await self._get_one(EventEnrollmentModel.id == str(enrollment_id))

    @Logger.io
    async def get_by_id_and_resource(
        self, *, enrollment_id: str, resource_id: int
    ) -> EventEnrollment | None:
        return await self._get_one(
            EventEnrollmentModel.id == str(enrollment_id),
            EventEnrollmentModel.resource_id == resource_id,
        )

    @Logger.io
    async def get_by_buyer_and_resource(
        self, *, buyer_user_id: int, resource_id: int
    ) -> EventEnrollment | None:
        return await self._get_one(
            EventEnrollmentModel.buyer_user_id == buyer_user_id,
            EventEnrollmentModel.resource_id == resource_id,
        )

    @Logger.io
    async def get_by_order_id(self, *, order_id: str) -> EventEnrollment | None:
        return await self._get_one(EventEnrollmentModel.order_id == order_id)

    @Logger.io
    async def find_active_ticket_phones(self, *, resource_id: int, phones: List[str]) -> List[str]:
        if not phones:
            return []
        normalized = {normalize_phone(phone) for phone in phones}

        async with self.session_factory() as session:
            result = await session.execute(
                select(TicketModel.normalized_phone)
                .where(
                    TicketModel.resource_id == resource_id,
                    TicketModel.status == TicketStatus.ACTIVE.value,
                    TicketModel.normalized_phone.in_(normalized),
                )
                .distinct()
            )
            taken = set(result.scalars().all())

        return [phone for phone in phones if normalize_phone(phone) in taken]
