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
Service metadata endpoints. Neither touches Firestore.
"""

from fastapi import APIRouter
from pydantic import BaseModel

from riomar.config import get_settings
from riomar.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["service"])


class HealthResponse(BaseModel):
    status: str
    service: str
    environment: str
    version: str


class BuildInfo(BaseModel):
    version: str
    commit: str
    timestamp: str


class LeaderboardLimits(BaseModel):
    default_size: int
    max_size: int


class InfoResponse(BaseModel):
    service: str
    environment: str
    build: BuildInfo
    collections: dict[str, str]
    leaderboard: LeaderboardLimits
    transaction_max_attempts: int


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Liveness check; 200 whenever the process is serving requests."""
    settings = get_settings()
    logger.debug("health_check_requested")
    return HealthResponse(
        status="healthy",
        service=settings.service_name,
        environment=settings.service_environment,
        version=settings.build_version,
    )


@router.get("/info", response_model=InfoResponse)
async def info() -> InfoResponse:
    settings = get_settings()
    return InfoResponse(
        service=settings.service_name,
        environment=settings.service_environment,
        build=BuildInfo(
            version=settings.build_version,
            commit=settings.build_commit or "unknown",
            timestamp=settings.build_timestamp or "unknown",
        ),
        collections={
            "trophies": settings.firestore_trophies_collection,
            "points_of_interest": settings.firestore_pois_collection,
        },
        leaderboard=LeaderboardLimits(
            default_size=settings.leaderboard_default_size,
            max_size=settings.leaderboard_max_size,
        ),
        transaction_max_attempts=settings.trophy_transaction_max_attempts,
    )
