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
Tests for the leaderboard query.
"""

import asyncio
from unittest.mock import AsyncMock, patch

from riomar.config import Settings
from riomar.leaderboard import LeaderboardQuery

from conftest import TROPHIES


def seed_scores(store, scores):
    for i, trophies in enumerate(scores):
        user_id = f"u{i}"
        store.seed(
            TROPHIES,
            user_id,
            {"userId": user_id, "displayName": f"Player {i}", "trophies": trophies},
        )


class TestTopN:
    def test_orders_by_trophies_descending(self, leaderboard, store):
        seed_scores(store, [5, 20, 1, 20])

        result = asyncio.run(leaderboard.top_n(4))

        assert result.ok is True
        assert [entry.trophies for entry in result.entries] == [20, 20, 5, 1]

    def test_truncates_to_n(self, leaderboard, store):
        seed_scores(store, [5, 20, 1, 20])

        result = asyncio.run(leaderboard.top_n(2))

        assert len(result.entries) == 2
        assert {entry.trophies for entry in result.entries} == {20}
        assert {entry.display_name for entry in result.entries} == {
            "Player 1",
            "Player 3",
        }

    def test_fewer_records_than_n(self, leaderboard, store):
        seed_scores(store, [3])
        assert len(asyncio.run(leaderboard.top_n(10)).entries) == 1

    def test_empty_collection_is_ok_and_empty(self, leaderboard):
        result = asyncio.run(leaderboard.top_n(5))
        assert result.ok is True
        assert result.entries == []
        assert result.error is None

    def test_record_without_name_is_unknown(self, leaderboard, store):
        store.seed(TROPHIES, "u1", {"userId": "u1", "trophies": 8})
        entry = asyncio.run(leaderboard.top_n(1)).entries[0]
        assert entry.display_name == "Unknown"
        assert entry.trophies == 8

    def test_record_without_trophies_is_not_ranked(self, leaderboard, store):
        store.seed(TROPHIES, "u1", {"userId": "u1", "displayName": "Ana"})
        assert asyncio.run(leaderboard.top_n(5)).entries == []

    def test_non_positive_n_returns_nothing_without_reading(self, leaderboard, store):
        seed_scores(store, [1, 2])
        result = asyncio.run(leaderboard.top_n(0))
        assert result.ok is True
        assert result.entries == []
        assert store.calls == 0

    def test_read_failure_is_flagged(self, leaderboard, store):
        seed_scores(store, [1, 2])
        store.fail_with = ConnectionError("unavailable")

        result = asyncio.run(leaderboard.top_n(5))

        assert result.ok is False
        assert result.entries == []
        assert result.error == "ConnectionError"


class TestLimits:
    def test_default_size_from_settings(self):
        store = AsyncMock()
        store.query_ordered.return_value = []
        settings = Settings(leaderboard_default_size=20, leaderboard_max_size=100)

        with patch("riomar.leaderboard.get_settings", return_value=settings):
            asyncio.run(LeaderboardQuery(store, collection=TROPHIES).top_n())

        store.query_ordered.assert_awaited_once_with(
            TROPHIES, "trophies", descending=True, limit=20
        )

    def test_limit_capped_at_max_size(self):
        store = AsyncMock()
        store.query_ordered.return_value = []
        settings = Settings(leaderboard_default_size=10, leaderboard_max_size=50)

        with patch("riomar.leaderboard.get_settings", return_value=settings):
            asyncio.run(LeaderboardQuery(store, collection=TROPHIES).top_n(500))

        store.query_ordered.assert_awaited_once_with(
            TROPHIES, "trophies", descending=True, limit=50
        )
