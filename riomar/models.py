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
Pydantic models for trophy records, points of interest and the leaderboard.

Stored documents use camelCase field names (userId, displayName, trophies,
poiId, ownerId, location, predictions, createdAt). The models expose
snake_case attributes and carry the stored names as aliases, so they can be
built from either form.

Storage layout:
- trophies/{userId}: one TrophyRecord per user, keyed by the user id
- points_of_interest/{poiId}: immutable PointOfInterest documents
"""

from datetime import datetime, timezone
from typing import Any, Optional

from google.cloud import firestore  # type: ignore[import-untyped]
from pydantic import BaseModel, ConfigDict, Field, model_validator

from riomar.config import UNKNOWN_DISPLAY_NAME


class GeoLocation(BaseModel):
    """A WGS84 coordinate pair."""

    model_config = ConfigDict(extra="forbid")

    latitude: float = Field(ge=-90.0, le=90.0, description="Latitude in degrees")
    longitude: float = Field(ge=-180.0, le=180.0, description="Longitude in degrees")

    def to_geopoint(self) -> firestore.GeoPoint:
        return firestore.GeoPoint(self.latitude, self.longitude)

    @classmethod
    def from_firestore(cls, value: Any) -> "GeoLocation":
        """Accept a Firestore GeoPoint or a plain {'latitude', 'longitude'} mapping."""
        if isinstance(value, dict):
            return cls(latitude=value["latitude"], longitude=value["longitude"])
        if hasattr(value, "latitude") and hasattr(value, "longitude"):
            return cls(latitude=value.latitude, longitude=value.longitude)
        raise ValueError(
            f"Cannot convert {type(value).__name__} to GeoLocation. Expected GeoPoint or mapping."
        )


class TrophyRecord(BaseModel):
    """
    Per-user trophy counter document.

    display_name is None when the record was created by an increment before
    the user picked a name. trophies is kept Optional on reads so that a
    missing counter is never mistaken for zero outside the increment path.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    user_id: str = Field(min_length=1, alias="userId", description="Owning user id")
    display_name: Optional[str] = Field(
        default=None, alias="displayName", description="Name shown on the leaderboard"
    )
    trophies: Optional[int] = Field(default=None, description="Current trophy count")


class PointOfInterest(BaseModel):
    """An immutable point of interest saved by a user."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    poi_id: str = Field(alias="poiId", description="Unique POI identifier (UUIDv4)")
    owner_id: str = Field(alias="ownerId", description="User id of the owner")
    location: GeoLocation = Field(description="Where the POI was recorded")
    predictions: list[str] = Field(
        default_factory=list,
        description="Free-text predictions, stored in the order given",
    )
    created_at: Optional[datetime] = Field(
        default=None, alias="createdAt", description="When the POI was saved (UTC)"
    )


class LeaderboardEntry(BaseModel):
    """Read-only projection of a TrophyRecord for ranking."""

    display_name: str = Field(description="Display name, 'Unknown' if never set")
    trophies: int = Field(description="Trophy count")


class LeaderboardResult(BaseModel):
    """
    Outcome of a leaderboard read.

    ok=False means the query failed; entries is then always empty and error
    names the failure. ok=True with no entries means nobody is ranked yet.
    """

    ok: bool = Field(description="Whether the leaderboard query succeeded")
    entries: list[LeaderboardEntry] = Field(default_factory=list)
    error: Optional[str] = Field(
        default=None, description="Error type when the query failed"
    )

    @model_validator(mode="after")
    def validate_failure_has_no_entries(self) -> "LeaderboardResult":
        if not self.ok and self.entries:
            raise ValueError("a failed leaderboard result cannot carry entries")
        return self

    @classmethod
    def succeeded(cls, entries: list[LeaderboardEntry]) -> "LeaderboardResult":
        return cls(ok=True, entries=entries)

    @classmethod
    def failed(cls, error: str) -> "LeaderboardResult":
        return cls(ok=False, entries=[], error=error)


# ==============================================================================
# Firestore Serialization Helpers
# ==============================================================================


def datetime_from_firestore(value: Any) -> Optional[datetime]:
    """
    Convert a Firestore Timestamp, datetime or ISO 8601 string to an aware UTC datetime.

    Naive datetimes are assumed to be UTC.

    Raises:
        ValueError: If the value cannot be interpreted as a datetime
    """
    if value is None:
        return None

    if isinstance(value, str):
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        try:
            value = datetime.fromisoformat(value)
        except ValueError as e:
            raise ValueError(f"Cannot parse ISO 8601 string '{value}': {e}")

    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    # Firestore Timestamp (DatetimeWithNanoseconds / protobuf Timestamp)
    if hasattr(value, "to_datetime"):
        return value.to_datetime()

    raise ValueError(
        f"Cannot convert {type(value).__name__} to datetime. Expected Firestore Timestamp, datetime, ISO 8601 string, or None."
    )


def trophy_record_to_firestore(record: TrophyRecord) -> dict[str, Any]:
    """
    Serialize a TrophyRecord for a full-document write.

    Examples:
        >>> record = TrophyRecord(user_id="u1", display_name="Ana", trophies=3)
        >>> trophy_record_to_firestore(record)
        {'userId': 'u1', 'displayName': 'Ana', 'trophies': 3}
    """
    return record.model_dump(mode="python", by_alias=True, exclude_none=True)


def trophy_record_from_firestore(
    data: dict[str, Any], *, user_id: Optional[str] = None
) -> TrophyRecord:
    """
    Deserialize a trophy document.

    Args:
        data: Document dictionary from Firestore
        user_id: Document key, used when the stored userId field is missing
    """
    data = dict(data)
    if user_id and not data.get("userId"):
        data["userId"] = user_id
    return TrophyRecord(**data)


def poi_to_firestore(poi: PointOfInterest) -> dict[str, Any]:
    """Serialize a PointOfInterest, storing the location as a Firestore GeoPoint."""
    data: dict[str, Any] = {
        "poiId": poi.poi_id,
        "ownerId": poi.owner_id,
        "location": poi.location.to_geopoint(),
        "predictions": list(poi.predictions),
    }
    if poi.created_at is not None:
        data["createdAt"] = poi.created_at
    return data


def poi_from_firestore(
    data: dict[str, Any], *, poi_id: Optional[str] = None
) -> PointOfInterest:
    """Deserialize a PointOfInterest document (GeoPoint or mapping location)."""
    data = dict(data)
    if poi_id:
        data["poiId"] = poi_id
    data["location"] = GeoLocation.from_firestore(data["location"])
    if "createdAt" in data:
        data["createdAt"] = datetime_from_firestore(data["createdAt"])
    return PointOfInterest(**data)


def leaderboard_entry_from_firestore(data: dict[str, Any]) -> LeaderboardEntry:
    """
    Project a trophy document onto a leaderboard entry.

    Records without a display name are listed as 'Unknown'.
    """
    return LeaderboardEntry(
        display_name=data.get("displayName") or UNKNOWN_DISPLAY_NAME,
        trophies=int(data["trophies"]),
    )
