# Copyright 2025 John Brosnihan
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""
Point of interest router.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from riomar.dependencies import Session, require_user_id
from riomar.models import GeoLocation

router = APIRouter(
    prefix="/pois",
    tags=["points-of-interest"],
    dependencies=[Depends(require_user_id)],
)


class SavePOIRequest(BaseModel):
    """
    Request model for saving a point of interest.

    Predictions are free text and stored exactly as sent, in order.
    """

    model_config = {"extra": "forbid"}

    location: GeoLocation = Field(description="Coordinates of the point of interest")
    predictions: list[str] = Field(
        default_factory=list, description="Ordered list of predictions"
    )


class SavePOIResponse(BaseModel):
    poi_id: str = Field(description="Server-generated id of the stored POI")


@router.post(
    "",
    response_model=SavePOIResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Save a point of interest",
    description=(
        "Stores a new, immutable point of interest owned by the caller. Every call "
        "creates a new record, even for identical content.\n\n"
        "**Required Headers:**\n"
        "- `X-User-Id`: User identifier set by the identity gateway\n\n"
        "**Error Responses:**\n"
        "- `401`: Missing or blank X-User-Id header\n"
        "- `422`: Coordinates out of range or unexpected fields\n"
        "- `500`: The record could not be stored"
    ),
)
async def save_point_of_interest(
    request: SavePOIRequest, session: Session
) -> SavePOIResponse:
    poi_id = await session.save_point_of_interest(request.location, request.predictions)
    if poi_id is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save point of interest",
        )
    return SavePOIResponse(poi_id=poi_id)
