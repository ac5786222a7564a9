#!/usr/bin/env python3
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
Copy trophy records written by the legacy mobile client into the trophies collection.

The legacy client stored one document per user in 'trofeusUsuario' with the
fields userId, nomeUser (display name) and trofeus (trophy count). This script
converts each of them to the current shape (userId, displayName, trophies)
under the same document key.

Features:
- Dry-run mode to preview changes without modifying data
- Users that already have a current record are skipped, never overwritten
- Legacy records with a missing or negative trophy count are skipped
- Batch processing with configurable delays
- Idempotent (safe to run multiple times)

Usage:
    # Preview changes without modifying data (recommended first)
    python scripts/migrate_legacy_trophies.py --dry-run

    # Migrate all legacy records
    python scripts/migrate_legacy_trophies.py

    # Migrate specific users
    python scripts/migrate_legacy_trophies.py --user-ids uid_001 uid_002

Environment Variables:
    GCP_PROJECT_ID: Required - GCP project ID
    LEGACY_TROPHIES_COLLECTION: Optional - Source collection (default: "trofeusUsuario")
    FIRESTORE_TROPHIES_COLLECTION: Optional - Target collection (default: "trophies")
    FIRESTORE_EMULATOR_HOST: Optional - Emulator host for local testing
"""

import argparse
import os
import sys
import time
from typing import Any, List, Optional, Tuple

from google.cloud import firestore  # type: ignore[import-untyped]
from google.cloud.exceptions import Conflict, GoogleCloudError  # type: ignore[import-untyped]

LEGACY_NAME_FIELD = "nomeUser"
LEGACY_TROPHIES_FIELD = "trofeus"


def legacy_to_trophy_document(
    doc_id: str, legacy: dict[str, Any]
) -> Tuple[Optional[dict[str, Any]], Optional[str]]:
    """
    Convert a legacy trophy document to the current record shape.

    Args:
        doc_id: Legacy document key (the user id)
        legacy: Legacy document fields

    Returns:
        Tuple of (document, skip_reason); exactly one of them is None

    Examples:
        >>> legacy_to_trophy_document("u1", {"userId": "u1", "nomeUser": "Ana", "trofeus": 7})
        ({'userId': 'u1', 'displayName': 'Ana', 'trophies': 7}, None)
    """
    user_id = legacy.get("userId") or doc_id
    if user_id != doc_id:
        return None, f"userId '{user_id}' does not match document key"

    trophies = legacy.get(LEGACY_TROPHIES_FIELD)
    if trophies is None:
        return None, "missing trophy count"
    try:
        trophies = int(trophies)
    except (TypeError, ValueError):
        return None, f"trophy count {trophies!r} is not an integer"
    if trophies < 0:
        return None, f"negative trophy count {trophies}"

    document: dict[str, Any] = {"userId": user_id}
    name = legacy.get(LEGACY_NAME_FIELD)
    if isinstance(name, str) and name.strip():
        document["displayName"] = " ".join(name.split())
    document["trophies"] = trophies
    return document, None


def get_firestore_client(project_id: str) -> firestore.Client:
    emulator_host = os.getenv("FIRESTORE_EMULATOR_HOST")
    if emulator_host:
        print(f"INFO: Using Firestore emulator at {emulator_host}")
    return firestore.Client(project=project_id)


def get_legacy_documents(
    db: firestore.Client,
    collection_name: str,
    user_ids: Optional[List[str]] = None,
    limit: Optional[int] = None,
) -> List[firestore.DocumentSnapshot]:
    """Fetch the legacy documents to migrate, either by id or the whole collection."""
    legacy_ref = db.collection(collection_name)

    if user_ids:
        refs = [legacy_ref.document(user_id) for user_id in user_ids]
        documents = []
        for snapshot in db.get_all(refs):
            if snapshot.exists:
                documents.append(snapshot)
            else:
                print(f"WARNING: Legacy record for {snapshot.id} not found")
        return documents

    query = legacy_ref
    if limit:
        query = query.limit(limit)
    return list(query.stream())


def migrate_document(
    db: firestore.Client,
    snapshot: firestore.DocumentSnapshot,
    target_collection: str,
    dry_run: bool = False,
) -> Tuple[bool, Optional[str]]:
    """
    Migrate a single legacy document.

    Returns:
        Tuple of (migrated, skip_reason)
    """
    document, reason = legacy_to_trophy_document(snapshot.id, snapshot.to_dict() or {})
    if document is None:
        return False, reason

    target_ref = db.collection(target_collection).document(snapshot.id)

    if dry_run:
        if target_ref.get().exists:
            return False, "current record already exists"
        return True, None

    try:
        # create() fails if the document exists, so current records are never clobbered
        target_ref.create(document)
    except Conflict:
        return False, "current record already exists"
    except GoogleCloudError as e:
        print(f"ERROR: Failed to write {snapshot.id} (Firestore error): {e}")
        return False, "write failed"

    return True, None


def process_documents(
    db: firestore.Client,
    legacy_collection: str,
    target_collection: str,
    user_ids: Optional[List[str]] = None,
    limit: Optional[int] = None,
    batch_size: int = 10,
    batch_delay: float = 0.5,
    dry_run: bool = False,
) -> Tuple[int, int]:
    """
    Migrate legacy documents.

    Returns:
        Tuple of (total_processed, documents_migrated)
    """
    print(f"INFO: Scanning legacy records in collection '{legacy_collection}'...")

    documents = get_legacy_documents(db, legacy_collection, user_ids, limit)
    total_docs = len(documents)

    if total_docs == 0:
        print("INFO: No documents found to process")
        return 0, 0

    print(f"INFO: Found {total_docs} document(s) to migrate")

    migrated_count = 0
    for i, snapshot in enumerate(documents):
        migrated, reason = migrate_document(
            db, snapshot, target_collection, dry_run=dry_run
        )

        if migrated:
            migrated_count += 1
            action = "Would migrate" if dry_run else "Migrated"
            print(f"{action} {snapshot.id}")
        else:
            print(f"Skipped {snapshot.id}: {reason}")

        if (i + 1) % 10 == 0:
            print(f"INFO: Processed {i + 1}/{total_docs} documents...")

        if (i + 1) % batch_size == 0 and (i + 1) < total_docs:
            time.sleep(batch_delay)

    return total_docs, migrated_count


def main():
    """Main entry point for the migration script."""
    parser = argparse.ArgumentParser(
        description="Copy legacy trophy records into the trophies collection"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Preview changes without modifying documents",
    )
    parser.add_argument(
        "--user-ids",
        nargs="+",
        help="Migrate only specific user IDs (space-separated)",
    )
    parser.add_argument(
        "--limit",
        type=int,
        help="Process at most N documents (for testing)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=10,
        help="Number of documents to process before delay (default: 10)",
    )
    parser.add_argument(
        "--batch-delay",
        type=float,
        default=0.5,
        help="Seconds to wait between batches (default: 0.5)",
    )

    args = parser.parse_args()

    project_id = os.getenv("GCP_PROJECT_ID")
    if not project_id:
        print("ERROR: GCP_PROJECT_ID environment variable is required")
        sys.exit(1)

    legacy_collection = os.getenv("LEGACY_TROPHIES_COLLECTION", "trofeusUsuario")
    target_collection = os.getenv("FIRESTORE_TROPHIES_COLLECTION", "trophies")

    print("=" * 80)
    print("Legacy Trophy Migration Script")
    print("=" * 80)
    print(f"Project ID: {project_id}")
    print(f"Source: {legacy_collection}")
    print(f"Target: {target_collection}")
    print(f"Dry Run: {args.dry_run}")
    print("=" * 80)

    try:
        db = get_firestore_client(project_id)
        total_processed, migrated = process_documents(
            db=db,
            legacy_collection=legacy_collection,
            target_collection=target_collection,
            user_ids=args.user_ids,
            limit=args.limit,
            batch_size=args.batch_size,
            batch_delay=args.batch_delay,
            dry_run=args.dry_run,
        )
    except GoogleCloudError as e:
        print(f"ERROR: Migration failed (GCP error): {e}")
        sys.exit(1)

    print(f"\nINFO: Processed {total_processed} document(s)")
    print(f"INFO: Migrated: {migrated} {'(dry run)' if args.dry_run else ''}")
    if args.dry_run and migrated > 0:
        print("\nTo apply these changes, run the script without --dry-run")


if __name__ == "__main__":
    main()
