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
Player session: the operations of the trophy service bound to the caller.

A PlayerSession resolves "who is calling" on every operation and passes the
id to the ledger and POI store, so callers never supply (or spoof) a user id.
Without a resolved identity every operation returns its failure value and
the store is not touched.
"""

from typing import Optional, Sequence

from riomar.identity import IdentityResolver
from riomar.leaderboard import LeaderboardQuery
from riomar.ledger import TrophyLedger
from riomar.models import GeoLocation, LeaderboardResult, TrophyRecord
from riomar.pois import PointOfInterestStore


class PlayerSession:
    def __init__(
        self,
        identity: IdentityResolver,
        ledger: TrophyLedger,
        pois: PointOfInterestStore,
        leaderboard: LeaderboardQuery,
    ):
        self._identity = identity
        self._ledger = ledger
        self._pois = pois
        self._leaderboard = leaderboard

    @property
    def user_id(self) -> Optional[str]:
        return self._identity.current_user_id()

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    async def record_exists(self) -> bool:
        user_id = self.user_id
        if user_id is None:
            return False
        return await self._ledger.record_exists(user_id)

    async def create_or_replace(self, display_name: str, trophies: int) -> bool:
        user_id = self.user_id
        if user_id is None:
            return False
        return await self._ledger.create_or_replace(user_id, display_name, trophies)

    async def increment_trophies(self, delta: int) -> bool:
        user_id = self.user_id
        if user_id is None:
            return False
        return await self._ledger.increment_trophies(user_id, delta)

    async def update_display_name(self, new_name: str) -> bool:
        user_id = self.user_id
        if user_id is None:
            return False
        return await self._ledger.update_display_name(user_id, new_name)

    async def fetch_display_name(self) -> Optional[str]:
        user_id = self.user_id
        if user_id is None:
            return None
        return await self._ledger.fetch_display_name(user_id)

    async def fetch_record(self) -> Optional[TrophyRecord]:
        user_id = self.user_id
        if user_id is None:
            return None
        return await self._ledger.fetch_record(user_id)

    async def save_point_of_interest(
        self, location: GeoLocation, predictions: Sequence[str]
    ) -> Optional[str]:
        user_id = self.user_id
        if user_id is None:
            return None
        return await self._pois.save(user_id, location, predictions)

    async def leaderboard(self, n: Optional[int] = None) -> LeaderboardResult:
        """The leaderboard is public and does not require an identity."""
        return await self._leaderboard.top_n(n)
