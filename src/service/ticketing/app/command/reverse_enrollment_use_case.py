from datetime import datetime, timezone
from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_enrollment_command_repo import IEnrollmentCommandRepo
from src.service.ticketing.app.interface.i_enrollment_query_repo import IEnrollmentQueryRepo
from src.service.ticketing.app.interface.i_resource_repo import IResourceRepo
from src.service.ticketing.domain.entity.enrollment_entity import REFUND_REASON


class ReverseEnrollmentUseCase:
    """
    Refund every ticket of an order's enrollment and hand the capacity back.

    Tickets already REFUNDED are skipped, so repeating the call changes nothing.
    """

    def __init__(
        self,
        *,
        enrollment_query_repo: IEnrollmentQueryRepo,
        enrollment_command_repo: IEnrollmentCommandRepo,
        resource_repo: IResourceRepo,
    ) -> None:
        self.enrollment_query_repo = enrollment_query_repo
        self.enrollment_command_repo = enrollment_command_repo
        self.resource_repo = resource_repo
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        enrollment_query_repo: IEnrollmentQueryRepo = Depends(
            Provide[Container.enrollment_query_repo]
        ),
        enrollment_command_repo: IEnrollmentCommandRepo = Depends(
            Provide[Container.enrollment_command_repo]
        ),
        resource_repo: IResourceRepo = Depends(Provide[Container.resource_repo]),
    ) -> Self:
        return cls(
            enrollment_query_repo=enrollment_query_repo,
            enrollment_command_repo=enrollment_command_repo,
            resource_repo=resource_repo,
        )

    @Logger.io
    async def execute(self, *, order_id: str) -> int:
        """Returns the number of tickets flipped to REFUNDED by this call"""
        with self.tracer.start_as_current_span(
            'use_case.reverse_enrollment', attributes={'order.id': order_id}
        ):
            enrollment = await self.enrollment_query_repo.get_by_order_id(order_id=order_id)
            if not enrollment:
                Logger.base.warning(f'⚠️ [REFUND] No enrollment for order {order_id}')
                return 0

            refunded, flipped = enrollment.refund_all(
                at=datetime.now(timezone.utc), reason=REFUND_REASON
            )
            if not flipped:
                return 0

            await self.enrollment_command_repo.save_tickets(enrollment=refunded)
            await self.resource_repo.restore_capacity(
                resource_id=enrollment.resource_id, count=flipped
            )

            Logger.base.info(
                f'💸 [REFUND] Enrollment {enrollment.id}: {flipped} ticket(s) refunded'
            )
            return flipped
