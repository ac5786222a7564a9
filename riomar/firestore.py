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
Firestore client and document store adapter.

The AsyncClient is built lazily, once per process, and shared by every
request. It is never torn down while the process runs. Supports both
production (Application Default Credentials) and local development
(Firestore emulator) configurations.

FirestoreDocumentStore adapts the client to riomar.store.DocumentStore.
"""

import os
import threading
from typing import Any, Optional

from google.cloud import firestore  # type: ignore[import-untyped]
from google.cloud.exceptions import NotFound  # type: ignore[import-untyped]

from riomar.config import get_settings
from riomar.errors import DocumentNotFoundError
from riomar.store import Mutation

# Module-level client and lock for thread-safe lazy initialization
_firestore_client: Optional[firestore.AsyncClient] = None
_firestore_lock = threading.Lock()


def get_firestore_client() -> firestore.AsyncClient:
    """
    Get or create the process-wide Firestore AsyncClient.

    Configuration:
    - Uses GCP_PROJECT_ID from settings for production
    - Supports Firestore emulator via FIRESTORE_EMULATOR_HOST
    - Uses Application Default Credentials (ADC) in production

    Raises:
        ValueError: If GCP_PROJECT_ID is not set and no emulator is configured
    """
    global _firestore_client

    # Double-checked locking
    if _firestore_client is None:
        with _firestore_lock:
            if _firestore_client is None:
                settings = get_settings()

                emulator_host = settings.firestore_emulator_host
                if emulator_host:
                    os.environ["FIRESTORE_EMULATOR_HOST"] = emulator_host
                    # Any non-empty project id works against the emulator
                    project_id = settings.gcp_project_id or "demo-project"
                else:
                    project_id = settings.gcp_project_id
                    if not project_id:
                        raise ValueError(
                            "GCP_PROJECT_ID must be set when not using Firestore emulator. "
                            "Set FIRESTORE_EMULATOR_HOST for local development."
                        )

                _firestore_client = firestore.AsyncClient(project=project_id)

    return _firestore_client


def reset_firestore_client() -> None:
    """
    Forget the cached client so the next call builds a new one.

    Test helper; do not call while requests are in flight.
    """
    global _firestore_client
    with _firestore_lock:
        _firestore_client = None


async def read_modify_write(
    transaction: firestore.AsyncTransaction,
    doc_ref: firestore.AsyncDocumentReference,
    mutation: Mutation,
) -> dict[str, Any]:
    """
    Body of a read-modify-write transaction.

    Reads the document inside the transaction (registering it for conflict
    detection), applies the mutation and buffers a merge write. Firestore
    commits the write when this returns, or reruns the whole body if another
    writer touched the document first.
    """
    snapshot = await doc_ref.get(transaction=transaction)
    current = snapshot.to_dict() if snapshot.exists else None
    fields = mutation(current)
    transaction.set(doc_ref, fields, merge=True)
    return fields


_transactional_read_modify_write = firestore.async_transactional(read_modify_write)


class FirestoreDocumentStore:
    """
    DocumentStore backed by a Firestore AsyncClient.

    Args:
        client: Shared Firestore AsyncClient
        max_attempts: Attempts per transaction before a conflict is reported as failure
    """

    def __init__(self, client: firestore.AsyncClient, *, max_attempts: int = 5):
        self._client = client
        self._max_attempts = max_attempts

    def _document(self, collection: str, key: str) -> firestore.AsyncDocumentReference:
        return self._client.collection(collection).document(key)

    async def get(self, collection: str, key: str) -> Optional[dict[str, Any]]:
        snapshot = await self._document(collection, key).get()
        if snapshot.exists:
            return snapshot.to_dict() or {}
        return None

    async def set(self, collection: str, key: str, data: dict[str, Any]) -> None:
        await self._document(collection, key).set(data)

    async def update(self, collection: str, key: str, fields: dict[str, Any]) -> None:
        try:
            await self._document(collection, key).update(fields)
        except NotFound as e:
            raise DocumentNotFoundError(collection, key) from e

    async def query_ordered(
        self,
        collection: str,
        order_by: str,
        *,
        descending: bool = True,
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        query = self._client.collection(collection).order_by(
            order_by,
            direction=firestore.Query.DESCENDING
            if descending
            else firestore.Query.ASCENDING,
        )
        if limit:
            query = query.limit(limit)
        return [snapshot.to_dict() async for snapshot in query.stream()]

    async def transact(
        self, collection: str, key: str, mutation: Mutation
    ) -> dict[str, Any]:
        transaction = self._client.transaction(max_attempts=self._max_attempts)
        return await _transactional_read_modify_write(
            transaction, self._document(collection, key), mutation
        )
