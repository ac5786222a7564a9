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
Shared fixtures.

InMemoryDocumentStore mimics Firestore's optimistic transactions: every
document has a version, a transaction remembers the version it read and its
write is rejected (and the whole read-modify-write retried) if another writer
committed in between. Each store call yields to the event loop so concurrent
coroutines genuinely interleave.
"""

import asyncio
import copy
from collections import defaultdict
from typing import Any, Optional

import pytest
from fastapi.testclient import TestClient

from riomar.dependencies import get_document_store
from riomar.errors import DocumentNotFoundError
from riomar.leaderboard import LeaderboardQuery
from riomar.ledger import TrophyLedger
from riomar.main import app
from riomar.pois import PointOfInterestStore
from riomar.store import Mutation

TROPHIES = "trophies"
POIS = "points_of_interest"


class TransactionConflictError(Exception):
    """Raised when a transaction keeps conflicting past max_attempts."""


class InMemoryDocumentStore:
    def __init__(self, *, max_attempts: int = 5):
        self.max_attempts = max_attempts
        self.collections: dict[str, dict[str, dict[str, Any]]] = defaultdict(dict)
        self.versions: dict[tuple[str, str], int] = defaultdict(int)
        self.calls = 0
        self.attempts = 0
        self.conflicts = 0
        # Number of upcoming transaction attempts that will be rejected as conflicts
        self.forced_conflicts = 0
        # When set, every call raises this exception
        self.fail_with: Optional[Exception] = None

    def _enter(self) -> None:
        self.calls += 1
        if self.fail_with is not None:
            raise self.fail_with

    def _write(self, collection: str, key: str, data: dict[str, Any]) -> None:
        self.collections[collection][key] = copy.deepcopy(data)
        self.versions[(collection, key)] += 1

    def seed(self, collection: str, key: str, data: dict[str, Any]) -> None:
        """Insert a document without counting it as a call."""
        self._write(collection, key, data)

    def document(self, collection: str, key: str) -> Optional[dict[str, Any]]:
        data = self.collections[collection].get(key)
        return copy.deepcopy(data) if data is not None else None

    async def get(self, collection: str, key: str) -> Optional[dict[str, Any]]:
        self._enter()
        await asyncio.sleep(0)
        return self.document(collection, key)

    async def set(self, collection: str, key: str, data: dict[str, Any]) -> None:
        self._enter()
        await asyncio.sleep(0)
        self._write(collection, key, data)

    async def update(self, collection: str, key: str, fields: dict[str, Any]) -> None:
        self._enter()
        await asyncio.sleep(0)
        current = self.collections[collection].get(key)
        if current is None:
            raise DocumentNotFoundError(collection, key)
        merged = dict(current)
        merged.update(fields)
        self._write(collection, key, merged)

    async def query_ordered(
        self,
        collection: str,
        order_by: str,
        *,
        descending: bool = True,
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        self._enter()
        await asyncio.sleep(0)
        documents = [
            copy.deepcopy(doc)
            for doc in self.collections[collection].values()
            if order_by in doc
        ]
        documents.sort(key=lambda doc: doc[order_by], reverse=descending)
        if limit:
            documents = documents[:limit]
        return documents

    async def transact(
        self, collection: str, key: str, mutation: Mutation
    ) -> dict[str, Any]:
        self._enter()
        for _ in range(self.max_attempts):
            self.attempts += 1
            read_version = self.versions[(collection, key)]
            current = self.document(collection, key)
            await asyncio.sleep(0)
            fields = mutation(current)
            await asyncio.sleep(0)

            if self.forced_conflicts:
                self.forced_conflicts -= 1
                self.conflicts += 1
                continue
            if self.versions[(collection, key)] != read_version:
                self.conflicts += 1
                continue

            merged = dict(current or {})
            merged.update(fields)
            self._write(collection, key, merged)
            return fields

        raise TransactionConflictError(
            f"Failed to commit transaction in {self.max_attempts} attempts"
        )


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def ledger(store):
    return TrophyLedger(store, collection=TROPHIES)


@pytest.fixture
def poi_store(store):
    return PointOfInterestStore(store, collection=POIS)


@pytest.fixture
def leaderboard(store):
    return LeaderboardQuery(store, collection=TROPHIES)


@pytest.fixture
def test_client(store):
    """Test client whose routes use the in-memory store instead of Firestore."""

    def override_get_document_store():
        return store

    app.dependency_overrides[get_document_store] = override_get_document_store
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()
