from typing import Dict, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.exception.exceptions import DomainError
from src.platform.logging.loguru_io import Logger
from src.service.shared_kernel.domain.value_object.phone import normalize_phone
from src.service.ticketing.app.interface.i_enrollment_command_repo import IEnrollmentCommandRepo
from src.service.ticketing.app.interface.i_enrollment_query_repo import IEnrollmentQueryRepo
from src.service.ticketing.app.interface.i_payment_command_repo import IPaymentCommandRepo
from src.service.ticketing.app.interface.i_resource_repo import IResourceRepo
from src.service.ticketing.app.interface.i_user_command_repo import IUserCommandRepo
from src.service.ticketing.domain.entity.enrollment_entity import EventEnrollment
from src.service.ticketing.domain.entity.payment_entity import Payment
from src.service.ticketing.domain.entity.user_entity import User


class CreateEnrollmentUseCase:
    """
    Turn a successful payment into an enrollment with one ACTIVE ticket per phone.

    Idempotent per (buyer, resource): a redelivered webhook gets the existing
    enrollment back and capacity is consumed only once.
    """

    def __init__(
        self,
        *,
        user_command_repo: IUserCommandRepo,
        payment_command_repo: IPaymentCommandRepo,
        enrollment_query_repo: IEnrollmentQueryRepo,
        enrollment_command_repo: IEnrollmentCommandRepo,
        resource_repo: IResourceRepo,
    ) -> None:
        self.user_command_repo = user_command_repo
        self.payment_command_repo = payment_command_repo
        self.enrollment_query_repo = enrollment_query_repo
        self.enrollment_command_repo = enrollment_command_repo
        self.resource_repo = resource_repo
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        user_command_repo: IUserCommandRepo = Depends(Provide[Container.user_command_repo]),
        payment_command_repo: IPaymentCommandRepo = Depends(
            Provide[Container.payment_command_repo]
        ),
        enrollment_query_repo: IEnrollmentQueryRepo = Depends(
            Provide[Container.enrollment_query_repo]
        ),
        enrollment_command_repo: IEnrollmentCommandRepo = Depends(
            Provide[Container.enrollment_command_repo]
        ),
        resource_repo: IResourceRepo = Depends(Provide[Container.resource_repo]),
    ) -> Self:
        return cls(
            user_command_repo=user_command_repo,
            payment_command_repo=payment_command_repo,
            enrollment_query_repo=enrollment_query_repo,
            enrollment_command_repo=enrollment_command_repo,
            resource_repo=resource_repo,
        )

    @Logger.io
    async def execute(self, *, payment: Payment) -> tuple[EventEnrollment, Dict[str, User]]:
        """
        Returns:
            (enrollment, users keyed by normalized phone)
        """
        with self.tracer.start_as_current_span(
            'use_case.create_enrollment',
            attributes={'order.id': payment.order_id, 'resource.id': payment.resource_id},
        ):
            users: Dict[str, User] = {}
            for party in payment.metadata.parties:
                users[normalize_phone(party.phone)] = await self.user_command_repo.get_or_create(
                    phone=party.phone, name=party.name, email=party.email
                )

            buyer = users[normalize_phone(payment.metadata.buyer.phone)]
            if buyer.id is None:
                raise DomainError(f'Buyer for order {payment.order_id} could not be resolved')
            await self.payment_command_repo.set_buyer_user(
                order_id=payment.order_id, buyer_user_id=buyer.id
            )

            existing = await self.enrollment_query_repo.get_by_buyer_and_resource(
                buyer_user_id=buyer.id, resource_id=payment.resource_id
            )
            if existing:
                Logger.base.info(
                    f'🎫 [ENROLLMENT] Buyer {buyer.id} already enrolled in resource '
                    f'{payment.resource_id}, returning {existing.id}'
                )
                return existing, users

            phones = payment.metadata.phones
            enrollment, created = await self.enrollment_command_repo.create_if_absent(
                enrollment=EventEnrollment.create(
                    order_id=payment.order_id,
                    payment_id=payment.gateway_payment_id,
                    buyer_user_id=buyer.id,
                    resource_id=payment.resource_id,
                    phones=phones,
                    final_amount=payment.final_amount,
                    seat_by_phone={
                        phone: seat
                        for phone in phones
                        if (seat := payment.metadata.seat_for(phone)) is not None
                    },
                )
            )

            if created:
                await self.resource_repo.consume_capacity(
                    resource_id=payment.resource_id, count=enrollment.ticket_count
                )
                Logger.base.info(
                    f'🎫 [ENROLLMENT] Created {enrollment.id} with {enrollment.ticket_count} '
                    f'ticket(s) for order {payment.order_id}'
                )

            return enrollment, users
