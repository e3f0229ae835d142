'''
Weekly availability grids and the tutor/parent overlap view.
'''
from datetime import time
from typing import Annotated
from uuid import UUID, uuid4

from fastapi import Depends, HTTPException, status
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from ..database.engine import get_db_session
from ..database import models as db_models
from ..database.db_enums import UserRole
from ..models import availability as availability_models
from ..core.availability import compute_overlap
from ..common.exceptions import InvalidTimeRange, NotFound
from ..common.logger import log
from .user_service import UserService


class AvailabilityService:
    """
    Service for reading and replacing weekly availability slots.
    """
    def __init__(
        self,
        db: Annotated[AsyncSession, Depends(get_db_session)],
        user_service: Annotated[UserService, Depends(UserService)]
    ):
        self.db = db
        self.user_service = user_service

    async def get_slots(self, owner_id: UUID) -> list[db_models.AvailabilitySlots]:
        stmt = select(db_models.AvailabilitySlots).filter(
            db_models.AvailabilitySlots.owner_id == owner_id
        ).order_by(
            db_models.AvailabilitySlots.day_of_week.asc(),
            db_models.AvailabilitySlots.start_time.asc()
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_availability_for_api(self, current_user: db_models.Users) -> list[availability_models.AvailabilitySlotRead]:
        slots = await self.get_slots(current_user.id)
        return [availability_models.AvailabilitySlotRead.model_validate(slot) for slot in slots]

    async def replace_availability(
        self,
        owner_id: UUID,
        data: availability_models.AvailabilityUpdate
    ) -> list[db_models.AvailabilitySlots]:
        """
        Deletes every slot of the owner and inserts the new grid.
        """
        new_slots = []
        for slot in data.slots:
            start, end = time.fromisoformat(slot.start_time), time.fromisoformat(slot.end_time)
            if end <= start:
                log.warning(f"Rejected availability for {owner_id}: {slot.start_time}-{slot.end_time} on day {slot.day_of_week}.")
                raise InvalidTimeRange(f"Slot {slot.start_time}-{slot.end_time} must end after it starts.")
            new_slots.append(db_models.AvailabilitySlots(
                id=uuid4(),
                owner_id=owner_id,
                day_of_week=slot.day_of_week,
                start_time=start,
                end_time=end,
                is_available=slot.is_available,
            ))

        await self.db.execute(
            delete(db_models.AvailabilitySlots).where(db_models.AvailabilitySlots.owner_id == owner_id)
        )
        self.db.add_all(new_slots)
        await self.db.flush()
        log.info(f"Replaced availability for {owner_id} with {len(new_slots)} slots.")
        return await self.get_slots(owner_id)

    async def replace_availability_for_api(
        self,
        data: availability_models.AvailabilityUpdate,
        current_user: db_models.Users
    ) -> list[availability_models.AvailabilitySlotRead]:
        slots = await self.replace_availability(current_user.id, data)
        return [availability_models.AvailabilitySlotRead.model_validate(slot) for slot in slots]

    async def get_overlap(self, tutor_id: UUID, parent_id: UUID) -> dict[int, list[availability_models.TimeWindow]]:
        tutor_slots = await self.get_slots(tutor_id)
        parent_slots = await self.get_slots(parent_id)
        return compute_overlap(tutor_slots, parent_slots)

    async def get_overlap_for_api(
        self,
        counterpart_id: UUID,
        current_user: db_models.Users
    ) -> dict[int, list[availability_models.TimeWindow]]:
        """
        Common free time between the caller and a user of the other role
        (a parent looking at a tutor, or a tutor looking at a parent).
        """
        counterpart = await self.user_service.get_user_by_id(counterpart_id)
        if counterpart is None:
            raise NotFound("User not found.")

        if current_user.role == UserRole.PARENT.value and counterpart.role == UserRole.TUTOR.value:
            return await self.get_overlap(tutor_id=counterpart.id, parent_id=current_user.id)
        if current_user.role == UserRole.TUTOR.value and counterpart.role == UserRole.PARENT.value:
            return await self.get_overlap(tutor_id=current_user.id, parent_id=counterpart.id)

        log.warning(f"User {current_user.id} requested overlap with {counterpart_id} of the same role.")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Overlap is computed between a tutor and a parent."
        )
