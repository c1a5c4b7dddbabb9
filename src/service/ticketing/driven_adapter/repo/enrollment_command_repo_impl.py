from typing import AsyncContextManager, Callable

from sqlalchemy import and_, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.shared_kernel.domain.value_object.phone import normalize_phone
from src.service.ticketing.app.interface.i_enrollment_command_repo import IEnrollmentCommandRepo
from src.service.ticketing.domain.entity.enrollment_entity import (
    EventEnrollment,
    Ticket,
    TicketStatus,
)
from src.service.ticketing.driven_adapter.model.enrollment_model import EventEnrollmentModel
from src.service.ticketing.driven_adapter.model.ticket_model import TicketModel
from src.service.ticketing.driven_adapter.repo.enrollment_query_repo_impl import (
    EnrollmentQueryRepoImpl,
)


class EnrollmentCommandRepoImpl(IEnrollmentCommandRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]):
        self.session_factory = session_factory

    @staticmethod
    def _ticket_values(ticket: Ticket) -> dict:
        return {
            'status': ticket.status.value,
            'assigned_seat': ticket.assigned_seat,
            'is_scanned': ticket.is_scanned,
            'scanned_at': ticket.scanned_at,
            'scanned_by_admin_id': ticket.scanned_by_admin_id,
            'cancelled_at': ticket.cancelled_at,
            'cancellation_reason': ticket.cancellation_reason,
        }

    @Logger.io
    async def create_if_absent(
        self, *, enrollment: EventEnrollment
    ) -> tuple[EventEnrollment, bool]:
        async with self.session_factory() as session:
            enrollment_model = EventEnrollmentModel(
                id=str(enrollment.id),
                order_id=enrollment.order_id,
                payment_id=enrollment.payment_id,
                buyer_user_id=enrollment.buyer_user_id,
                resource_id=enrollment.resource_id,
                ticket_count=enrollment.ticket_count,
                ticket_price=enrollment.ticket_price,
                tickets=[
                    TicketModel(
                        resource_id=enrollment.resource_id,
                        phone=key,
                        normalized_phone=normalize_phone(key),
                        **self._ticket_values(ticket),
                    )
                    for key, ticket in enrollment.tickets.items()
                ],
            )
            if enrollment.created_at:
                enrollment_model.created_at = enrollment.created_at

            session.add(enrollment_model)
            try:
                await session.commit()
            except IntegrityError:
                # Another delivery already enrolled this buyer for the resource
                await session.rollback()
                result = await session.execute(
                    select(EventEnrollmentModel)
                    .where(
                        or_(
                            and_(
                                EventEnrollmentModel.buyer_user_id == enrollment.buyer_user_id,
                                EventEnrollmentModel.resource_id == enrollment.resource_id,
                            ),
                            EventEnrollmentModel.order_id == enrollment.order_id,
                        )
                    )
                    .limit(1)
                )
                existing = result.scalar_one()
                Logger.base.info(
                    f'🎫 [ENROLLMENT] Reusing enrollment {existing.id} for order {enrollment.order_id}'
                )
                return EnrollmentQueryRepoImpl._model_to_entity(existing), False

            result = await session.execute(
                select(EventEnrollmentModel)
                .where(EventEnrollmentModel.id == str(enrollment.id))
                .execution_options(populate_existing=True)
            )
            return EnrollmentQueryRepoImpl._model_to_entity(result.scalar_one()), True

    @Logger.io
    async def record_scan(self, *, enrollment_id: str, ticket: Ticket) -> tuple[Ticket, bool]:
        ticket_row = and_(
            TicketModel.enrollment_id == str(enrollment_id),
            TicketModel.phone == ticket.phone,
        )
        async with self.session_factory() as session:
            result = await session.execute(
                update(TicketModel)
                .where(
                    ticket_row,
                    TicketModel.status == TicketStatus.ACTIVE.value,
                    TicketModel.is_scanned.is_(False),
                )
                .values(
                    is_scanned=True,
                    scanned_at=ticket.scanned_at,
                    scanned_by_admin_id=ticket.scanned_by_admin_id,
                )
            )
            await session.commit()
            if result.rowcount:
                return ticket, True

            # Another gate scanned (or a refund landed) first: report the stored row
            stored = await session.execute(select(TicketModel).where(ticket_row))
            return EnrollmentQueryRepoImpl._ticket_model_to_entity(stored.scalar_one()), False

    @Logger.io
    async def save_tickets(self, *, enrollment: EventEnrollment) -> None:
        async with self.session_factory() as session:
            for key, ticket in enrollment.tickets.items():
                await session.execute(
                    update(TicketModel)
                    .where(
                        TicketModel.enrollment_id == str(enrollment.id),
                        TicketModel.phone == key,
                    )
                    .values(**self._ticket_values(ticket))
                )
            await session.commit()
