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
Document store interface used by the ledger, POI store and leaderboard.

The production implementation is riomar.firestore.FirestoreDocumentStore.
Anything offering the same coroutines (for example an in-memory store in
tests) can be passed in its place.
"""

from typing import Any, Callable, Optional, Protocol

# Receives the current document (None if absent) and returns the fields to
# merge into it. Raising aborts the transaction without writing.
Mutation = Callable[[Optional[dict[str, Any]]], dict[str, Any]]


class DocumentStore(Protocol):
    """Schemaless key -> fields records grouped in named collections."""

    async def get(self, collection: str, key: str) -> Optional[dict[str, Any]]:
        """Return the document's fields, or None if it does not exist."""
        ...

    async def set(self, collection: str, key: str, data: dict[str, Any]) -> None:
        """Create or fully overwrite a document."""
        ...

    async def update(self, collection: str, key: str, fields: dict[str, Any]) -> None:
        """
        Update individual fields of an existing document.

        Raises:
            DocumentNotFoundError: If the document does not exist
        """
        ...

    async def query_ordered(
        self,
        collection: str,
        order_by: str,
        *,
        descending: bool = True,
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        """
        Return documents ordered by a field.

        Documents missing the field are not returned. Order among equal
        values is whatever the store yields.
        """
        ...

    async def transact(
        self, collection: str, key: str, mutation: Mutation
    ) -> dict[str, Any]:
        """
        Atomically read a document, apply mutation and merge its result.

        Conflicting concurrent writers cause the whole read-modify-write to be
        retried, up to the store's attempt limit. Returns the merged fields.
        """
        ...
