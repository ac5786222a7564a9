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
FastAPI dependency injection providers.

The Firestore client is the only long-lived object; stores and the player
session are cheap wrappers built per request around it. Tests replace
get_document_store through app.dependency_overrides.
"""

from typing import Annotated
from fastapi import Depends, HTTPException, Request, status
from google.cloud import firestore  # type: ignore[import-untyped]

from riomar.config import get_settings
from riomar.firestore import FirestoreDocumentStore, get_firestore_client
from riomar.identity import HeaderIdentityResolver, IdentityResolver
from riomar.leaderboard import LeaderboardQuery
from riomar.ledger import TrophyLedger
from riomar.logging import bind_user_context, get_logger
from riomar.pois import PointOfInterestStore
from riomar.session import PlayerSession
from riomar.store import DocumentStore

logger = get_logger(__name__)


def get_db() -> firestore.AsyncClient:
    """Provide the process-wide Firestore client."""
    return get_firestore_client()


def get_document_store(
    db: Annotated[firestore.AsyncClient, Depends(get_db)],
) -> DocumentStore:
    """Wrap the Firestore client in the document store adapter."""
    return FirestoreDocumentStore(
        db, max_attempts=get_settings().trophy_transaction_max_attempts
    )


def get_identity_resolver(request: Request) -> IdentityResolver:
    """Resolve the caller from the gateway-forwarded user id header."""
    return HeaderIdentityResolver(request.headers, get_settings().user_id_header)


def get_player_session(
    store: Annotated[DocumentStore, Depends(get_document_store)],
    identity: Annotated[IdentityResolver, Depends(get_identity_resolver)],
) -> PlayerSession:
    return PlayerSession(
        identity=identity,
        ledger=TrophyLedger(store),
        pois=PointOfInterestStore(store),
        leaderboard=LeaderboardQuery(store),
    )


async def require_user_id(
    identity: Annotated[IdentityResolver, Depends(get_identity_resolver)],
) -> str:
    """
    Reject unauthenticated calls with 401 and tag the request logs with the user.

    Must stay async: a sync dependency runs in a threadpool and its context
    binding would not reach the endpoint.

    Raises:
        HTTPException: 401 if the user id header is missing or blank
    """
    user_id = identity.current_user_id()
    if user_id is None:
        header = get_settings().user_id_header
        logger.warning("unauthenticated_request", header=header)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"{header} header is required and cannot be empty",
        )
    bind_user_context(user_id)
    return user_id


# Type alias for cleaner dependency injection
Session = Annotated[PlayerSession, Depends(get_player_session)]
