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
Leaderboard: read-only ranking of trophy records.
"""

from typing import Optional

from riomar.config import get_settings
from riomar.logging import get_logger
from riomar.models import LeaderboardResult, leaderboard_entry_from_firestore
from riomar.store import DocumentStore

logger = get_logger(__name__)


class LeaderboardQuery:
    def __init__(self, store: DocumentStore, *, collection: Optional[str] = None):
        self._store = store
        self._collection = collection or get_settings().firestore_trophies_collection

    async def top_n(self, n: Optional[int] = None) -> LeaderboardResult:
        """
        Return the n users with the most trophies, highest first.

        n defaults to LEADERBOARD_DEFAULT_SIZE and is capped at
        LEADERBOARD_MAX_SIZE. Order among equal trophy counts is whatever the
        store returns. A failed read yields ok=False instead of raising.
        """
        settings = get_settings()

        if n is None:
            n = settings.leaderboard_default_size
        if n > settings.leaderboard_max_size:
            n = settings.leaderboard_max_size
        if n < 1:
            return LeaderboardResult.succeeded([])

        try:
            documents = await self._store.query_ordered(
                self._collection, "trophies", descending=True, limit=n
            )
            entries = [leaderboard_entry_from_firestore(doc) for doc in documents]
        except Exception as e:
            logger.error(
                "leaderboard_query_error",
                limit=n,
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return LeaderboardResult.failed(type(e).__name__)

        logger.debug("leaderboard_query_success", limit=n, count=len(entries))
        return LeaderboardResult.succeeded(entries)
