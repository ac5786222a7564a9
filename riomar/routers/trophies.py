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
Trophy record router.

Endpoints operate on the caller's own record only ("me"); the user id comes
from the identity header, never from the path or body.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, model_validator

from riomar.dependencies import Session, require_user_id
from riomar.models import TrophyRecord

router = APIRouter(
    prefix="/trophies",
    tags=["trophies"],
    dependencies=[Depends(require_user_id)],
)


class DisplayNameMixin(BaseModel):
    """Normalizes display_name whitespace and rejects blank names."""

    display_name: str = Field(
        min_length=1, max_length=64, description="Display name (1-64 characters)"
    )

    @model_validator(mode="after")
    def normalize_display_name(self) -> "DisplayNameMixin":
        self.display_name = " ".join(self.display_name.split())
        if not self.display_name:
            raise ValueError("display_name cannot be empty or only whitespace")
        return self


class CreateOrReplaceRequest(DisplayNameMixin):
    """Registration payload: the full trophy record for the caller."""

    model_config = {"extra": "forbid"}

    trophies: int = Field(default=0, ge=0, description="Initial trophy count")


class IncrementRequest(BaseModel):
    model_config = {"extra": "forbid"}

    delta: int = Field(description="Trophies to add; negative values subtract")


class UpdateNameRequest(DisplayNameMixin):
    model_config = {"extra": "forbid"}


class RecordExistsResponse(BaseModel):
    exists: bool = Field(description="Whether the caller already has a trophy record")


class OperationResponse(BaseModel):
    success: bool = Field(description="Whether the operation was applied")


class DisplayNameResponse(BaseModel):
    display_name: Optional[str] = Field(
        default=None, description="The caller's display name, null if never set"
    )


@router.get(
    "/me/exists",
    response_model=RecordExistsResponse,
    summary="Check whether the caller has a trophy record",
)
async def record_exists(session: Session) -> RecordExistsResponse:
    """First-time users get exists=false and should be asked for a display name."""
    return RecordExistsResponse(exists=await session.record_exists())


@router.get(
    "/me",
    response_model=TrophyRecord,
    response_model_by_alias=False,
    summary="Get the caller's trophy record",
)
async def get_record(session: Session) -> TrophyRecord:
    record = await session.fetch_record()
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Trophy record not found",
        )
    return record


@router.put(
    "/me",
    response_model=OperationResponse,
    summary="Create or replace the caller's trophy record",
    description=(
        "Writes the full record (display name and trophy count), overwriting any "
        "existing one. Intended for registration; last write wins."
    ),
)
async def create_or_replace(
    request: CreateOrReplaceRequest, session: Session
) -> OperationResponse:
    if not await session.create_or_replace(request.display_name, request.trophies):
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save trophy record",
        )
    return OperationResponse(success=True)


@router.post(
    "/me/increment",
    response_model=OperationResponse,
    summary="Atomically add trophies to the caller's record",
    description=(
        "Applies the delta in a single transaction, creating the record if needed. "
        "Concurrent increments are never lost.\n\n"
        "**Error Responses:**\n"
        "- `409`: The increment was not applied (it would make the count negative, "
        "the transaction kept conflicting, or the store failed)"
    ),
)
async def increment_trophies(
    request: IncrementRequest, session: Session
) -> OperationResponse:
    if not await session.increment_trophies(request.delta):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Trophy increment could not be applied",
        )
    return OperationResponse(success=True)


@router.patch(
    "/me/name",
    response_model=OperationResponse,
    summary="Change the caller's display name",
)
async def update_display_name(
    request: UpdateNameRequest, session: Session
) -> OperationResponse:
    """Does not create a record; register with PUT /trophies/me first."""
    if not await session.update_display_name(request.display_name):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Trophy record not found or could not be updated",
        )
    return OperationResponse(success=True)


@router.get(
    "/me/name",
    response_model=DisplayNameResponse,
    summary="Get the caller's display name",
)
async def fetch_display_name(session: Session) -> DisplayNameResponse:
    return DisplayNameResponse(display_name=await session.fetch_display_name())
