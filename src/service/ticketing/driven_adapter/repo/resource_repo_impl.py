"""
Resource (event) repository

Capacity counters are plain increments, floored at zero on the way down. Nothing here
guards against overbooking; the seat collaborator owns per-seat exclusivity.
"""

from decimal import Decimal
from typing import AsyncContextManager, Callable

from sqlalchemy import case, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_resource_repo import IResourceRepo
from src.service.ticketing.domain.entity.payment_entity import PaymentType
from src.service.ticketing.domain.entity.resource_entity import PricingTier, Resource
from src.service.ticketing.driven_adapter.model.resource_model import ResourceModel


def _floored_sub(column, count: int):
    return case((column - count < 0, 0), else_=column - count)


class ResourceRepoImpl(IResourceRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]):
        self.session_factory = session_factory

    @staticmethod
    def _model_to_entity(resource_model: ResourceModel) -> Resource:
        return Resource(
            id=resource_model.id,
            name=resource_model.name,
            type=PaymentType(resource_model.type),
            is_live=resource_model.is_live,
            booking_start_at=resource_model.booking_start_at,
            booking_end_at=resource_model.booking_end_at,
            end_at=resource_model.end_at,
            price=Decimal(resource_model.price) if resource_model.price is not None else None,
            pricing_tiers=[
                PricingTier(
                    id=str(tier['id']),
                    name=tier.get('name', ''),
                    price=Decimal(str(tier['price'])),
                    compare_at_price=(
                        Decimal(str(tier['compare_at_price']))
                        if tier.get('compare_at_price') is not None
                        else None
                    ),
                )
                for tier in resource_model.pricing_tiers or []
            ],
            has_seat_arrangement=resource_model.has_seat_arrangement,
            available_seats=resource_model.available_seats,
            tickets_sold=resource_model.tickets_sold,
        )

    @Logger.io
    async def get_by_id(self, *, resource_id: int) -> Resource | None:
        async with self.session_factory() as session:
            result = await session.execute(
                select(ResourceModel).where(ResourceModel.id == resource_id)
            )
            resource_model = result.scalar_one_or_none()
            if not resource_model:
                return None
            return self._model_to_entity(resource_model)

    @Logger.io
    async def consume_capacity(self, *, resource_id: int, count: int) -> None:
        async with self.session_factory() as session:
            await session.execute(
                update(ResourceModel)
                .where(ResourceModel.id == resource_id)
                .values(
                    tickets_sold=ResourceModel.tickets_sold + count,
                    available_seats=_floored_sub(ResourceModel.available_seats, count),
                )
            )
            await session.commit()

    @Logger.io
    async def restore_capacity(self, *, resource_id: int, count: int) -> None:
        async with self.session_factory() as session:
            await session.execute(
                update(ResourceModel)
                .where(ResourceModel.id == resource_id)
                .values(
                    tickets_sold=_floored_sub(ResourceModel.tickets_sold, count),
                    available_seats=ResourceModel.available_seats + count,
                )
            )
            await session.commit()
