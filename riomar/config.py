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
Settings for the Riomar trophy service.

Every field maps to an upper-case environment variable of the same name
(SERVICE_ENVIRONMENT, GCP_PROJECT_ID, LEADERBOARD_MAX_SIZE, ...). A local
.env file is read as well; .env.example lists them all.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

Environment = Literal["dev", "staging", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Service
    service_environment: Environment = Field(
        default="dev", description="Deployment stage; staging and prod need a GCP project"
    )
    service_name: str = Field(
        default="riomar-trophies", description="Reported in logs and /health"
    )
    log_level: LogLevel = Field(default="INFO", description="Root log level")

    # Firestore
    gcp_project_id: str = Field(
        default="", description="Project holding the Firestore database"
    )
    firestore_emulator_host: str = Field(
        default="",
        description="host:port of a Firestore emulator; when set, no credentials are needed",
    )
    firestore_trophies_collection: str = Field(
        default="trophies", description="Collection of per-user trophy records"
    )
    firestore_pois_collection: str = Field(
        default="points_of_interest", description="Collection of saved points of interest"
    )

    # HTTP
    api_host: str = Field(default="127.0.0.1", description="uvicorn bind address")
    api_port: int = Field(default=8080, description="uvicorn bind port")
    request_id_header: str = Field(
        default="X-Request-ID",
        description="Header the load balancer uses to pass a request id",
    )
    user_id_header: str = Field(
        default="X-User-Id",
        description="Header carrying the caller's user id, set by the identity gateway",
    )

    # Build metadata, filled in by the deploy pipeline
    build_version: str = Field(default="0.1.0")
    build_commit: str = Field(default="")
    build_timestamp: str = Field(default="")

    # Leaderboard
    leaderboard_default_size: int = Field(
        default=20, ge=1, le=100, description="Entries returned when no limit is given"
    )
    leaderboard_max_size: int = Field(
        default=100, ge=1, le=1000, description="Upper bound on any requested limit"
    )

    # Trophy increments
    trophy_transaction_max_attempts: int = Field(
        default=5,
        ge=1,
        le=20,
        description="Attempts per increment transaction before it is reported as failed",
    )

    @model_validator(mode="after")
    def check_consistency(self) -> "Settings":
        if self.service_environment in ("staging", "prod") and not self.gcp_project_id:
            raise ValueError(
                f"GCP_PROJECT_ID is required in {self.service_environment} environment"
            )
        if self.leaderboard_default_size > self.leaderboard_max_size:
            raise ValueError(
                "LEADERBOARD_DEFAULT_SIZE cannot exceed LEADERBOARD_MAX_SIZE "
                f"({self.leaderboard_default_size} > {self.leaderboard_max_size})"
            )
        return self


# Leaderboard name for records that never had a display name
UNKNOWN_DISPLAY_NAME = "Unknown"

# Count assumed for a missing counter, at the increment site only
INITIAL_TROPHY_COUNT = 0


@lru_cache
def get_settings() -> Settings:
    """Process-wide settings, read from the environment once."""
    return Settings()
