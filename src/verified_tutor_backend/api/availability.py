'''
API endpoints for weekly availability.
'''
from typing import Annotated, Any, List
from uuid import UUID
from fastapi import APIRouter, Depends

from ..database import models as db_models
from ..models import availability as availability_models
from ..services.security import verify_token_and_get_user
from ..services.availability_service import AvailabilityService


class AvailabilityAPI:
    """
    A class to encapsulate the availability endpoints.
    """
    def __init__(self):
        self.router = APIRouter(
            prefix="/availability",
            tags=["Availability"]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_route(
                "/",
                self.get_availability,
                methods=["GET"],
                response_model=List[availability_models.AvailabilitySlotRead])

        self.router.add_api_route(
                "/",
                self.replace_availability,
                methods=["PUT"],
                response_model=List[availability_models.AvailabilitySlotRead])

        self.router.add_api_route(
                "/overlap/{counterpart_id}",
                self.get_overlap,
                methods=["GET"],
                response_model=dict[int, List[availability_models.TimeWindow]])

    async def get_availability(
        self,
        current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)],
        availability_service: Annotated[AvailabilityService, Depends(AvailabilityService)]
    ) -> List[Any]:
        return await availability_service.get_availability_for_api(current_user)

    async def replace_availability(
        self,
        availability_data: availability_models.AvailabilityUpdate,
        current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)],
        availability_service: Annotated[AvailabilityService, Depends(AvailabilityService)]
    ) -> List[Any]:
        """
        Replaces the caller's whole weekly grid.
        """
        return await availability_service.replace_availability_for_api(availability_data, current_user)

    async def get_overlap(
        self,
        counterpart_id: UUID,
        current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)],
        availability_service: Annotated[AvailabilityService, Depends(AvailabilityService)]
    ) -> Any:
        """
        Overlapping windows per day of week (0 = Sunday) between the caller and counterpart.
        """
        return await availability_service.get_overlap_for_api(counterpart_id, current_user)

# Instantiate the class and export its router
availability_api = AvailabilityAPI()
router = availability_api.router
