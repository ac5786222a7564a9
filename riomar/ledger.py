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
Trophy ledger: per-user trophy counters.

Each user owns exactly one document in the trophies collection, keyed by the
user id. The record is created lazily, either by registration
(create_or_replace) or by the first increment, and is never deleted here.

Every operation reports its outcome as a plain value (bool / Optional).
Missing identity short-circuits before the store is touched, and store
errors are logged and converted to the failure value so that no transport
exception reaches the caller.
"""

from typing import Any, Optional

from riomar.config import get_settings, INITIAL_TROPHY_COUNT
from riomar.errors import DocumentNotFoundError, NegativeTrophyBalanceError
from riomar.identity import normalize_user_id
from riomar.logging import get_logger
from riomar.models import (
    TrophyRecord,
    trophy_record_from_firestore,
    trophy_record_to_firestore,
)
from riomar.store import DocumentStore

logger = get_logger(__name__)


class TrophyLedger:
    """
    Owns the trophy records.

    Args:
        store: Document store holding the records
        collection: Collection name (defaults to FIRESTORE_TROPHIES_COLLECTION)
    """

    def __init__(self, store: DocumentStore, *, collection: Optional[str] = None):
        self._store = store
        self._collection = collection or get_settings().firestore_trophies_collection

    async def record_exists(self, user_id: Optional[str]) -> bool:
        """
        Check whether the user already has a trophy record.

        Used to tell first-time users (who still need to pick a name) from
        returning ones. A failed read is reported as False.
        """
        user_id = normalize_user_id(user_id)
        if user_id is None:
            logger.debug("record_exists_unauthenticated")
            return False

        try:
            data = await self._store.get(self._collection, user_id)
        except Exception as e:
            logger.error(
                "record_exists_error",
                user_id=user_id,
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return False

        return data is not None

    async def create_or_replace(
        self, user_id: Optional[str], display_name: str, trophies: int
    ) -> bool:
        """
        Write the user's full record, overwriting any existing one.

        Last write wins: this is the registration path and must not race with
        itself for the same user. Negative trophy counts are refused.
        """
        user_id = normalize_user_id(user_id)
        if user_id is None:
            logger.debug("create_or_replace_unauthenticated")
            return False

        if trophies < 0:
            logger.warning(
                "create_or_replace_negative_trophies",
                user_id=user_id,
                trophies=trophies,
            )
            return False

        record = TrophyRecord(
            user_id=user_id, display_name=display_name, trophies=trophies
        )

        try:
            await self._store.set(
                self._collection, user_id, trophy_record_to_firestore(record)
            )
        except Exception as e:
            logger.error(
                "create_or_replace_error",
                user_id=user_id,
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return False

        logger.info("create_or_replace_success", user_id=user_id, trophies=trophies)
        return True

    async def increment_trophies(self, user_id: Optional[str], delta: int) -> bool:
        """
        Add delta (which may be negative) to the user's trophies atomically.

        Runs as one store transaction: read the current count, add delta,
        write it back. Concurrent increments for the same user conflict and
        are retried by the store, so none is lost. A missing record or counter
        counts as zero here and the record is created; displayName is left
        untouched. An increment that would go below zero is aborted without
        writing.

        Returns:
            True once the transaction has committed, False otherwise
            (including after exhausting conflict retries)
        """
        user_id = normalize_user_id(user_id)
        if user_id is None:
            logger.debug("increment_trophies_unauthenticated")
            return False

        def apply_delta(current: Optional[dict[str, Any]]) -> dict[str, Any]:
            stored: Optional[int] = current.get("trophies") if current else None
            trophies = INITIAL_TROPHY_COUNT if stored is None else int(stored)
            updated = trophies + delta
            if updated < 0:
                raise NegativeTrophyBalanceError(user_id, trophies, delta)
            return {"userId": user_id, "trophies": updated}

        try:
            fields = await self._store.transact(self._collection, user_id, apply_delta)
        except NegativeTrophyBalanceError as e:
            logger.warning(
                "increment_trophies_negative_balance",
                user_id=user_id,
                current=e.current,
                delta=delta,
            )
            return False
        except Exception as e:
            logger.error(
                "increment_trophies_error",
                user_id=user_id,
                delta=delta,
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return False

        logger.info(
            "increment_trophies_success",
            user_id=user_id,
            delta=delta,
            trophies=fields["trophies"],
        )
        return True

    async def update_display_name(self, user_id: Optional[str], new_name: str) -> bool:
        """
        Change the display name without touching the trophy count.

        The record must already exist; this never creates one.
        """
        user_id = normalize_user_id(user_id)
        if user_id is None:
            logger.debug("update_display_name_unauthenticated")
            return False

        try:
            await self._store.update(
                self._collection, user_id, {"displayName": new_name}
            )
        except DocumentNotFoundError:
            logger.warning("update_display_name_record_not_found", user_id=user_id)
            return False
        except Exception as e:
            logger.error(
                "update_display_name_error",
                user_id=user_id,
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return False

        logger.info("update_display_name_success", user_id=user_id)
        return True

    async def fetch_display_name(self, user_id: Optional[str]) -> Optional[str]:
        """Return the user's display name, or None if there is none to return."""
        user_id = normalize_user_id(user_id)
        if user_id is None:
            return None

        try:
            data = await self._store.get(self._collection, user_id)
        except Exception as e:
            logger.error(
                "fetch_display_name_error",
                user_id=user_id,
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return None

        if data is None:
            return None
        return data.get("displayName")

    async def fetch_record(self, user_id: Optional[str]) -> Optional[TrophyRecord]:
        """Return the user's full trophy record, or None."""
        user_id = normalize_user_id(user_id)
        if user_id is None:
            return None

        try:
            data = await self._store.get(self._collection, user_id)
            if data is None:
                return None
            return trophy_record_from_firestore(data, user_id=user_id)
        except Exception as e:
            logger.error(
                "fetch_record_error",
                user_id=user_id,
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return None
