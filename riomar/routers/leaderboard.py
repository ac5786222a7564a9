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
Leaderboard router. Public: no identity header required.
"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel, Field

from riomar.dependencies import Session
from riomar.models import LeaderboardEntry

router = APIRouter(
    prefix="/leaderboard",
    tags=["leaderboard"],
)


class LeaderboardResponse(BaseModel):
    entries: list[LeaderboardEntry] = Field(
        description="Users ordered by trophies, highest first"
    )
    count: int = Field(description="Number of entries returned")


@router.get(
    "",
    response_model=LeaderboardResponse,
    summary="Get the top users by trophies",
    description=(
        "Returns up to `limit` users ordered by trophy count, highest first. "
        "Order among users with equal trophies is not guaranteed.\n\n"
        "**Error Responses:**\n"
        "- `503`: The leaderboard could not be read. An empty `entries` list in a "
        "200 response always means no user is ranked yet."
    ),
)
async def get_leaderboard(
    session: Session,
    limit: Optional[int] = Query(
        default=None,
        ge=1,
        description="Maximum number of entries (defaults to LEADERBOARD_DEFAULT_SIZE, capped at LEADERBOARD_MAX_SIZE)",
    ),
) -> LeaderboardResponse:
    result = await session.leaderboard(limit)
    if not result.ok:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Leaderboard is temporarily unavailable",
        )
    return LeaderboardResponse(entries=result.entries, count=len(result.entries))
