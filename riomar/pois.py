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
Point of interest store.

POIs are append-only: each save writes a new document under a freshly
generated id, so saving the same content twice yields two records. There is
no update or delete path.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional, Sequence

from riomar.config import get_settings
from riomar.identity import normalize_user_id
from riomar.logging import get_logger
from riomar.models import GeoLocation, PointOfInterest, poi_to_firestore
from riomar.store import DocumentStore

logger = get_logger(__name__)


class PointOfInterestStore:
    def __init__(self, store: DocumentStore, *, collection: Optional[str] = None):
        self._store = store
        self._collection = collection or get_settings().firestore_pois_collection

    async def save(
        self,
        user_id: Optional[str],
        location: GeoLocation,
        predictions: Sequence[str],
    ) -> Optional[str]:
        """
        Record a point of interest owned by user_id.

        Predictions are stored exactly as given (order kept, no dedup).

        Returns:
            The new POI id, or None if unauthenticated or the write failed
        """
        user_id = normalize_user_id(user_id)
        if user_id is None:
            logger.debug("save_poi_unauthenticated")
            return None

        poi_id = str(uuid.uuid4()).lower()
        poi = PointOfInterest(
            poi_id=poi_id,
            owner_id=user_id,
            location=location,
            predictions=list(predictions),
            created_at=datetime.now(timezone.utc),
        )

        try:
            await self._store.set(self._collection, poi_id, poi_to_firestore(poi))
        except Exception as e:
            logger.error(
                "save_poi_error",
                user_id=user_id,
                poi_id=poi_id,
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return None

        logger.info(
            "save_poi_success",
            user_id=user_id,
            poi_id=poi_id,
            prediction_count=len(poi.predictions),
        )
        return poi_id
